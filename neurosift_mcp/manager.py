"""
Tool Server Manager — launches and drives MCP tool server processes.

Usage:
    manager = ToolServerManager()

    # Register a server
    manager.register_server("plot-vision", [sys.executable, "-m", "neurosift_mcp.servers.plot_vision"])

    # Start it (initialize handshake + tool discovery)
    manager.start("plot-vision")

    # Call a tool
    result = manager.call("plot-vision", "analyze_plot", {"image_path": "/tmp/plot.png"})

    # Stop everything
    manager.stop_all()
"""

from __future__ import annotations

import logging
from typing import Any

from neurosift_mcp.protocol import PROTOCOL_VERSION
from neurosift_mcp.transport import JsonRpcRequest, StdioTransport

logger = logging.getLogger(__name__)

CLIENT_INFO = {"name": "neurosift-mcp-client", "version": "1.0.0"}


class ToolServerError(RuntimeError):
    """A JSON-RPC error returned by a tool server."""

    def __init__(self, message: str, code: int | None = None):
        super().__init__(message)
        self.code = code


class ToolServerManager:
    """
    Manages the lifecycle of MCP tool server processes.

    Responsibilities:
    - Launch tool servers as subprocesses (stdio transport)
    - Perform the initialize handshake and discover tools
    - Route tool calls to the correct server
    - Graceful shutdown
    """

    def __init__(self):
        self._servers: dict[str, dict] = {}
        # server_id → {
        #   "command": [...],
        #   "transport": StdioTransport | None,
        #   "env": dict | None,
        #   "tools": [descriptor, ...] (discovered after start),
        # }

    def register_server(
        self,
        server_id: str,
        command: list[str],
        env: dict[str, str] | None = None,
    ) -> None:
        """
        Register a tool server (does not start it yet).

        Args:
            server_id: Unique identifier for this server
            command: Command to launch the server process
            env: Optional environment variables
        """
        self._servers[server_id] = {
            "command": command,
            "transport": None,
            "env": env,
            "tools": [],
        }
        logger.info(f"Registered server: {server_id} ({' '.join(command)})")

    def start(self, server_id: str) -> list[dict]:
        """
        Start a tool server and discover its tools.

        Returns:
            List of tool descriptors ({name, description, inputSchema}).
        """
        server = self._servers.get(server_id)
        if not server:
            raise ValueError(f"Unknown server: {server_id}")

        transport = StdioTransport(server["command"], server.get("env"))
        transport.start()
        server["transport"] = transport

        self._request(server_id, transport, "initialize", {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {},
            "clientInfo": CLIENT_INFO,
        })
        transport.notify("notifications/initialized")

        result = self._request(server_id, transport, "tools/list", {})
        server["tools"] = (result or {}).get("tools", [])
        tool_names = [t["name"] for t in server["tools"]]
        logger.info(f"Started {server_id}: tools={tool_names}")

        return server["tools"]

    def start_all(self) -> dict[str, list[dict]]:
        """Start all registered servers. Returns {server_id: [descriptors]}."""
        results = {}
        for server_id in self._servers:
            try:
                results[server_id] = self.start(server_id)
            except (RuntimeError, OSError) as e:
                logger.error(f"Failed to start {server_id}: {e}")
                results[server_id] = []
        return results

    def stop(self, server_id: str) -> None:
        """Stop a tool server."""
        server = self._servers.get(server_id)
        if server and server["transport"]:
            server["transport"].stop()
            server["transport"] = None
            logger.info(f"Stopped {server_id}")

    def stop_all(self) -> None:
        """Stop all running servers."""
        for server_id in list(self._servers.keys()):
            self.stop(server_id)

    def call(
        self,
        server_id: str,
        tool_name: str,
        arguments: dict[str, Any],
    ) -> dict:
        """
        Call a tool on a specific server.

        Returns:
            The tools/call result: {"content": [...], "isError"?: bool}.

        Raises:
            ToolServerError: If the server answers with a protocol fault.
        """
        server = self._servers.get(server_id)
        if not server:
            raise ValueError(f"Unknown server: {server_id}")

        transport = server.get("transport")
        if not transport or not transport.is_alive():
            raise RuntimeError(f"Server {server_id} is not running. Call start() first.")

        return self._request(
            server_id,
            transport,
            "tools/call",
            {"name": tool_name, "arguments": arguments},
        )

    def list_tools(self, server_id: str) -> list[dict]:
        """List discovered tools for a server."""
        server = self._servers.get(server_id)
        return server["tools"] if server else []

    def list_servers(self) -> dict[str, bool]:
        """List all servers and their running status."""
        return {sid: self.is_running(sid) for sid in self._servers}

    def is_running(self, server_id: str) -> bool:
        """Check if a specific server is running."""
        server = self._servers.get(server_id)
        return (
            server is not None
            and server["transport"] is not None
            and server["transport"].is_alive()
        )

    def _request(
        self,
        server_id: str,
        transport: StdioTransport,
        method: str,
        params: dict[str, Any],
    ) -> Any:
        response = transport.send(
            JsonRpcRequest(method=method, params=params, id=transport.next_id())
        )
        if response.is_error:
            error = response.error or {}
            raise ToolServerError(
                f"{method} failed ({server_id}): {error.get('message')}",
                code=error.get("code"),
            )
        return response.result
