"""
Neurosift Tools MCP server.

Advertises whatever tools the Neurosift tools API publishes and proxies
each call to that API. The catalog is re-fetched on every tools/list.

Launch:
    python -m neurosift_mcp.servers.neurosift_tools

Environment:
    NEUROSIFT_TOOLS_API_URL  (default: https://neurosift-chat-agent-tools.vercel.app/api)

Test manually:
    echo '{"jsonrpc":"2.0","method":"tools/list","params":{},"id":1}' | python -m neurosift_mcp.servers.neurosift_tools
"""

from __future__ import annotations

import logging

import requests

from neurosift_mcp.config import NeurosiftToolsSettings, configure_logging
from neurosift_mcp.protocol import ErrorCode, ProtocolFault, ToolCallRequest, ToolCallResult, ToolDescriptor
from neurosift_mcp.proxy import ToolApiClient, error_message
from neurosift_mcp.registry import RemoteToolRegistry
from neurosift_mcp.results import API_ERROR_LABEL, error_result, json_result
from neurosift_mcp.server import StdioToolServer, ToolProvider

logger = logging.getLogger(__name__)

SERVER_NAME = "neurosift-tools"
SERVER_VERSION = "1.0.0"


class NeurosiftToolsProvider(ToolProvider):
    """
    Dispatches calls against the last fetched catalog.

    Arguments are forwarded as-is: the remote API owns the schemas and
    validates its own input.
    """

    def __init__(self, client: ToolApiClient, registry: RemoteToolRegistry | None = None):
        self.client = client
        self.registry = registry or RemoteToolRegistry(client)

    def list_tools(self) -> list[ToolDescriptor]:
        return self.registry.refresh()

    def call_tool(self, request: ToolCallRequest) -> ToolCallResult:
        tool = self.registry.get(request.name)
        if tool is None:
            raise ProtocolFault(ErrorCode.METHOD_NOT_FOUND, f"Unknown tool: {request.name}")

        try:
            payload = self.client.call(tool.name, request.arguments)
        except requests.RequestException as e:
            logger.warning(f"{tool.name} failed: {e}")
            return error_result(API_ERROR_LABEL, error_message(e))

        if isinstance(payload, dict) and isinstance(payload.get("error"), str):
            return error_result(API_ERROR_LABEL, payload["error"])

        return json_result(payload)


def build_server(settings: NeurosiftToolsSettings, **streams) -> StdioToolServer:
    client = ToolApiClient(settings.api_url, timeout=settings.http_timeout)
    return StdioToolServer(SERVER_NAME, SERVER_VERSION, NeurosiftToolsProvider(client), **streams)


def main() -> None:
    configure_logging()
    settings = NeurosiftToolsSettings.from_env()
    server = build_server(settings)
    server.install_signal_handlers()
    logger.info(f"Neurosift Tools MCP server running on stdio ({settings.api_url})")
    server.run()


if __name__ == "__main__":
    main()
