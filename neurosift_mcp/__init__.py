"""
MCP tool servers for Neurosift — stdio-based adapters over external APIs.

Architecture:
    ┌──────────────┐     stdio      ┌──────────────┐     HTTP     ┌──────────────┐
    │   MCP host   │ ──────────── │  Tool Server  │ ──────────── │ External API │
    │ (assistant)  │  JSON-RPC    │  (this pkg)   │              │              │
    └──────────────┘     pipes     └──────────────┘              └──────────────┘

Servers:
    neurosift-tools  Tool catalog fetched from the Neurosift tools API;
                     every call is proxied to POST /<tool_name>.
    plot-vision      A single analyze_plot tool backed by a multimodal LLM.

The StdioToolServer class handles the transport. A ToolProvider decides
which tools exist and how calls run.

The ToolServerManager launches servers as subprocesses from Python, and
the bridge turns their tools into LangChain tools.
"""

from neurosift_mcp.protocol import ErrorCode, ProtocolFault, ToolCallRequest, ToolCallResult, ToolDescriptor
from neurosift_mcp.server import StaticToolProvider, StdioToolServer, ToolHandler, ToolProvider
from neurosift_mcp.manager import ToolServerManager

# Bridge requires langchain — lazy import to keep servers standalone
def mcp_to_langchain_tool(*args, **kwargs):
    from neurosift_mcp.bridge import mcp_to_langchain_tool as _impl
    return _impl(*args, **kwargs)

def register_mcp_tools(*args, **kwargs):
    from neurosift_mcp.bridge import register_mcp_tools as _impl
    return _impl(*args, **kwargs)

__all__ = [
    "ErrorCode",
    "ProtocolFault",
    "StaticToolProvider",
    "StdioToolServer",
    "ToolCallRequest",
    "ToolCallResult",
    "ToolDescriptor",
    "ToolHandler",
    "ToolProvider",
    "ToolServerManager",
    "mcp_to_langchain_tool",
    "register_mcp_tools",
]
