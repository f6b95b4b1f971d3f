"""
MCP tool server over stdio.

A tool server is a standalone process that:
1. Reads JSON-RPC requests from stdin, one per line
2. Hands tools/list and tools/call to a ToolProvider
3. Writes JSON-RPC responses to stdout

Diagnostics go to the logging system (stderr), never to stdout.

A server with a fixed set of tools:

    from neurosift_mcp.results import text_result
    from neurosift_mcp.server import StaticToolProvider, StdioToolServer, ToolHandler

    class EchoTool(ToolHandler):
        name = "echo"
        description = "Echo a message"
        input_schema = {
            "type": "object",
            "properties": {"message": {"type": "string"}},
            "required": ["message"],
        }

        def handle(self, arguments):
            return text_result(arguments["message"])

    provider = StaticToolProvider()
    provider.register(EchoTool())
    StdioToolServer("echo", "0.1.0", provider).run()
"""

from __future__ import annotations

import json
import logging
import signal
import sys
from abc import ABC, abstractmethod
from typing import Any, TextIO

from neurosift_mcp.protocol import (
    PROTOCOL_VERSION,
    ErrorCode,
    ProtocolFault,
    ToolCallRequest,
    ToolCallResult,
    ToolDescriptor,
)

logger = logging.getLogger(__name__)


class ToolHandler(ABC):
    """
    Base class for a hand-authored tool.

    Subclasses define what a tool does. The server handles transport.
    """

    # Subclasses must set these
    name: str = ""
    description: str = ""
    input_schema: dict[str, Any] = {"type": "object", "properties": {}}

    def validate(self, arguments: dict[str, Any]) -> None:
        """
        Check argument shape before any work is done.

        Raises:
            ProtocolFault: With INVALID_PARAMS when the arguments are unusable.
        """

    @abstractmethod
    def handle(self, arguments: dict[str, Any]) -> ToolCallResult:
        """
        Execute the tool with already validated arguments.

        Returns:
            The tool result. Tool-level failures are returned with
            is_error set rather than raised.
        """
        ...

    def descriptor(self) -> ToolDescriptor:
        return ToolDescriptor(
            name=self.name,
            description=self.description,
            parameters=self.input_schema,
        )


class ToolProvider(ABC):
    """What a server advertises and how it executes calls."""

    @abstractmethod
    def list_tools(self) -> list[ToolDescriptor]:
        ...

    @abstractmethod
    def call_tool(self, request: ToolCallRequest) -> ToolCallResult:
        ...


class StaticToolProvider(ToolProvider):
    """Tools registered once at startup; the list never changes afterwards."""

    def __init__(self):
        self._handlers: dict[str, ToolHandler] = {}

    def register(self, handler: ToolHandler) -> None:
        """Register a tool handler."""
        if not handler.name:
            raise ValueError(f"ToolHandler {handler.__class__.__name__} has no name")
        self._handlers[handler.name] = handler
        logger.info(f"Registered tool: {handler.name}")

    def list_tools(self) -> list[ToolDescriptor]:
        return [h.descriptor() for h in self._handlers.values()]

    def call_tool(self, request: ToolCallRequest) -> ToolCallResult:
        handler = self._handlers.get(request.name)
        if handler is None:
            raise ProtocolFault(ErrorCode.METHOD_NOT_FOUND, f"Unknown tool: {request.name}")

        handler.validate(request.arguments)
        return handler.handle(request.arguments)


class StdioToolServer:
    """
    JSON-RPC tool server that communicates via stdin/stdout.

    Protocol:
    - One JSON-RPC message per line
    - Requests are answered in arrival order, one at a time
    - Supports methods:
        - "initialize" → server info and capabilities
        - "ping"       → empty result
        - "tools/list" → the provider's tool descriptors
        - "tools/call" → calls a tool by name with arguments
    - Messages without an id are notifications and get no reply
    """

    def __init__(
        self,
        name: str,
        version: str,
        provider: ToolProvider,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
    ):
        self.name = name
        self.version = version
        self.provider = provider
        self._stdin = stdin if stdin is not None else sys.stdin
        self._stdout = stdout if stdout is not None else sys.stdout
        self._closed = False

    def run(self) -> None:
        """
        Main loop: read requests from stdin, dispatch, write responses to stdout.

        This blocks until stdin is closed or close() is called.
        """
        logger.debug(f"{self.name} {self.version} waiting for requests")

        for line in self._stdin:
            if self._closed:
                break

            line = line.strip()
            if not line:
                continue

            self.handle_line(line)

    def handle_line(self, line: str) -> None:
        """Process one raw message and write the response, if any."""
        try:
            message = json.loads(line)
        except json.JSONDecodeError as e:
            self._write_error(None, ErrorCode.PARSE_ERROR, f"Parse error: {e}")
            return

        if not isinstance(message, dict) or not isinstance(message.get("method"), str):
            request_id = message.get("id") if isinstance(message, dict) else None
            self._write_error(request_id, ErrorCode.INVALID_REQUEST, "Invalid request")
            return

        method = message["method"]
        params = message.get("params") or {}

        if "id" not in message:
            logger.debug(f"Notification: {method}")
            return

        request_id = message["id"]
        try:
            result = self._dispatch(method, params)
        except ProtocolFault as e:
            logger.warning(f"{method} failed: {e.message}")
            self._write_error(request_id, e.code, e.message)
        except Exception as e:
            logger.exception(f"[MCP Error] {method}")
            self._write_error(request_id, ErrorCode.INTERNAL_ERROR, str(e))
        else:
            self._write_result(request_id, result)

    def close(self) -> None:
        """Stop reading requests and flush anything already written."""
        if self._closed:
            return
        self._closed = True
        self._stdout.flush()
        logger.info(f"{self.name} closed")

    def install_signal_handlers(self) -> None:
        """Close the channel and exit cleanly on Ctrl+C."""
        def shutdown(sig, frame):
            self.close()
            sys.exit(0)
        signal.signal(signal.SIGINT, shutdown)

    def _dispatch(self, method: str, params: Any) -> Any:
        """Route a method call to the appropriate handler."""

        if method == "initialize":
            return {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {"tools": {}},
                "serverInfo": {"name": self.name, "version": self.version},
            }

        if method == "ping":
            return {}

        if method == "tools/list":
            return {"tools": [t.to_dict() for t in self.provider.list_tools()]}

        if method == "tools/call":
            request = ToolCallRequest.from_params(params)
            return self.provider.call_tool(request).to_dict()

        raise ProtocolFault(ErrorCode.METHOD_NOT_FOUND, f"Method not found: {method}")

    def _write_result(self, request_id: Any, result: Any) -> None:
        """Write a JSON-RPC success response to stdout."""
        self._write({"jsonrpc": "2.0", "id": request_id, "result": result})

    def _write_error(self, request_id: Any, code: int, message: str) -> None:
        """Write a JSON-RPC error response to stdout."""
        self._write({
            "jsonrpc": "2.0",
            "id": request_id,
            "error": {"code": code, "message": message},
        })

    def _write(self, payload: dict) -> None:
        self._stdout.write(json.dumps(payload) + "\n")
        self._stdout.flush()
