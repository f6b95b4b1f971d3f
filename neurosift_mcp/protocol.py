"""
Protocol data model shared by the tool servers.

Covers the pieces of MCP that the servers actually speak:
tool descriptors, call requests, call results and the
structured faults that become JSON-RPC error responses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

JsonValue = Union[str, int, float, bool, None, list["JsonValue"], dict[str, "JsonValue"]]

PROTOCOL_VERSION = "2024-11-05"


class ErrorCode:
    """JSON-RPC 2.0 error codes used by MCP."""
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


class ProtocolFault(Exception):
    """
    A failure the calling framework has to handle itself.

    Raised for unknown tools, malformed arguments and an unavailable
    tool catalog. Tool-level failures are reported as a ToolCallResult
    with is_error set instead.
    """

    def __init__(self, code: int, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


@dataclass(frozen=True)
class ToolDescriptor:
    """A named tool and the JSON schema of its parameters."""
    name: str
    description: str
    parameters: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "ToolDescriptor":
        """
        Parse a catalog entry.

        Remote catalogs describe arguments under "parameters";
        entries already in protocol shape use "inputSchema".

        Raises:
            ValueError: If the entry has no usable name or schema.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Tool entry must be an object, got {type(data).__name__}")

        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError(f"Tool entry has no name: {data!r}")

        schema = data.get("parameters", data.get("inputSchema", {"type": "object"}))
        if not isinstance(schema, dict):
            raise ValueError(f"Tool '{name}' has a non-object parameter schema")

        return cls(
            name=name,
            description=str(data.get("description", "")),
            parameters=schema,
        )

    def to_dict(self) -> dict:
        """Render the descriptor as a tools/list entry."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.parameters,
        }


@dataclass
class TextContent:
    text: str
    type: str = "text"

    def to_dict(self) -> dict:
        return {"type": self.type, "text": self.text}


@dataclass
class ToolCallResult:
    """Uniform success/failure envelope of a tools/call."""
    content: list[TextContent]
    is_error: bool = False

    @property
    def text(self) -> str:
        return "\n".join(block.text for block in self.content)

    def to_dict(self) -> dict:
        result: dict[str, Any] = {"content": [block.to_dict() for block in self.content]}
        if self.is_error:
            result["isError"] = True
        return result


@dataclass
class ToolCallRequest:
    name: str
    arguments: dict[str, JsonValue] = field(default_factory=dict)

    @classmethod
    def from_params(cls, params: Any) -> "ToolCallRequest":
        """Build a request from tools/call params, rejecting malformed shapes."""
        if not isinstance(params, dict):
            raise ProtocolFault(ErrorCode.INVALID_PARAMS, "tools/call params must be an object")

        name = params.get("name")
        if not isinstance(name, str):
            raise ProtocolFault(ErrorCode.INVALID_PARAMS, "tools/call requires a string 'name'")

        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise ProtocolFault(
                ErrorCode.INVALID_PARAMS,
                f"Arguments for '{name}' must be an object",
            )

        return cls(name=name, arguments=arguments)
