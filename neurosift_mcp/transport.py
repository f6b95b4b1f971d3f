"""
Client side of the stdio transport.

Launches a tool server as a subprocess and exchanges JSON-RPC 2.0
messages with it over pipes, one line per message.
"""

from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class JsonRpcRequest:
    """JSON-RPC 2.0 request. A request without an id is a notification."""
    method: str
    params: dict[str, Any]
    id: int | str | None = None

    def to_json(self) -> str:
        message: dict[str, Any] = {
            "jsonrpc": "2.0",
            "method": self.method,
            "params": self.params,
        }
        if self.id is not None:
            message["id"] = self.id
        return json.dumps(message)


@dataclass
class JsonRpcResponse:
    """JSON-RPC 2.0 response."""
    id: int | str | None
    result: Any = None
    error: dict | None = None

    @classmethod
    def from_json(cls, data: str) -> "JsonRpcResponse":
        parsed = json.loads(data)
        return cls(
            id=parsed.get("id"),
            result=parsed.get("result"),
            error=parsed.get("error"),
        )

    @property
    def is_error(self) -> bool:
        return self.error is not None


class StdioTransport:
    """
    JSON-RPC over stdin/stdout pipes to a subprocess.

    The tool server runs as a child process. We write requests to its
    stdin and read responses from its stdout; its stderr is left
    attached to ours so server logs stay visible.
    """

    def __init__(self, command: list[str], env: dict[str, str] | None = None):
        """
        Args:
            command: Command to launch the tool server process.
                     e.g., ["python", "-m", "neurosift_mcp.servers.plot_vision"]
            env: Optional environment variables for the subprocess.
        """
        self.command = command
        self.env = env
        self._process: subprocess.Popen | None = None
        self._request_id = 0

    def start(self) -> None:
        """Launch the tool server subprocess."""
        if self._process and self._process.poll() is None:
            logger.warning("Transport already running, stopping first")
            self.stop()

        logger.info(f"Starting stdio transport: {' '.join(self.command)}")
        self._process = subprocess.Popen(
            self.command,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            text=True,
            env=self.env,
            bufsize=1,  # Line-buffered
        )

    def stop(self) -> None:
        """Close the server's stdin and wait for it to exit."""
        if self._process:
            if self._process.stdin:
                self._process.stdin.close()
            try:
                self._process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                self._process.terminate()
                try:
                    self._process.wait(timeout=5)
                except subprocess.TimeoutExpired:
                    self._process.kill()
            if self._process.stdout:
                self._process.stdout.close()
            self._process = None
            logger.info("Stdio transport stopped")

    def is_alive(self) -> bool:
        """Check if the subprocess is running."""
        return self._process is not None and self._process.poll() is None

    def send(self, request: JsonRpcRequest) -> JsonRpcResponse:
        """Send a request via stdin and read its response from stdout."""
        self._write(request)

        response_line = self._process.stdout.readline()
        if not response_line:
            code = self._process.poll()
            raise RuntimeError(f"Tool server process exited (status {code}) without responding")

        return JsonRpcResponse.from_json(response_line.strip())

    def notify(self, method: str, params: dict[str, Any] | None = None) -> None:
        """Send a notification; no response is expected."""
        self._write(JsonRpcRequest(method=method, params=params or {}))

    def next_id(self) -> int:
        """Generate the next request ID."""
        self._request_id += 1
        return self._request_id

    def _write(self, request: JsonRpcRequest) -> None:
        if not self.is_alive():
            raise RuntimeError("Transport not running. Call start() first.")
        self._process.stdin.write(request.to_json() + "\n")
        self._process.stdin.flush()
