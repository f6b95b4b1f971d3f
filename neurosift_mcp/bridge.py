"""
Bridge between MCP tool servers and LangChain.

Converts tools served by a running MCP server into LangChain tools so
an agent can call neurosift-tools or plot-vision directly.

Usage:
    from neurosift_mcp.bridge import mcp_to_langchain_tool, register_mcp_tools

    # Single tool
    lc_tool = mcp_to_langchain_tool(manager, "plot-vision", "analyze_plot")

    # All tools from all running servers
    tools = register_mcp_tools(manager)
"""

from __future__ import annotations

import logging
from typing import Any

from langchain_core.tools import StructuredTool

from neurosift_mcp.manager import ToolServerError, ToolServerManager

logger = logging.getLogger(__name__)


def result_text(result: dict) -> str:
    """Flatten a tools/call result into the text an agent reads."""
    text = "\n".join(
        block.get("text", "")
        for block in result.get("content", [])
        if block.get("type") == "text"
    )
    if result.get("isError"):
        return f"Error: {text}"
    return text


def mcp_to_langchain_tool(
    manager: ToolServerManager,
    server_id: str,
    tool_name: str,
    description_override: str | None = None,
) -> StructuredTool:
    """
    Create a LangChain StructuredTool that wraps an MCP tool call.

    The tool's inputSchema becomes the args schema, so the agent sees
    the same parameters the server advertises.

    Args:
        manager: The ToolServerManager managing the server
        server_id: Which server the tool lives on
        tool_name: The tool name (as advertised by the server)
        description_override: Optional override for the tool description

    Returns:
        A LangChain StructuredTool that proxies calls to the MCP server.
    """
    tools = manager.list_tools(server_id)
    descriptor = next((t for t in tools if t["name"] == tool_name), None)
    if descriptor is None:
        raise ValueError(f"Tool '{tool_name}' was not discovered on {server_id}")

    description = description_override or descriptor.get("description") or tool_name
    args_schema = dict(descriptor.get("inputSchema") or {"type": "object", "properties": {}})
    args_schema.setdefault("title", tool_name)
    args_schema.setdefault("description", description)

    def _call_mcp(**kwargs: Any) -> str:
        """Proxy call to MCP tool server."""
        try:
            return result_text(manager.call(server_id, tool_name, kwargs))
        except ToolServerError as e:
            return f"Error calling {server_id}/{tool_name}: {e}"

    return StructuredTool.from_function(
        func=_call_mcp,
        name=tool_name,
        description=description,
        args_schema=args_schema,
    )


def register_mcp_tools(manager: ToolServerManager) -> list[StructuredTool]:
    """Wrap every discovered tool of every running server."""
    registered = []

    for server_id, running in manager.list_servers().items():
        if not running:
            continue

        for descriptor in manager.list_tools(server_id):
            registered.append(mcp_to_langchain_tool(manager, server_id, descriptor["name"]))
            logger.info(f"Bridged {server_id}/{descriptor['name']}")

    return registered
