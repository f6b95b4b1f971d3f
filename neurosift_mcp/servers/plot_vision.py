"""
plot-vision MCP server.

A single analyze_plot tool that sends a PNG plot to a multimodal LLM
and returns its description.

Launch:
    OPENROUTER_API_KEY=... python -m neurosift_mcp.servers.plot_vision

Test manually:
    echo '{"jsonrpc":"2.0","method":"tools/call","params":{"name":"analyze_plot","arguments":{"image_path":"/tmp/plot.png"}},"id":1}' | python -m neurosift_mcp.servers.plot_vision
"""

from __future__ import annotations

import logging
from typing import Any

from neurosift_mcp.config import PlotVisionSettings, configure_logging
from neurosift_mcp.protocol import ErrorCode, ProtocolFault, ToolCallResult
from neurosift_mcp.results import PLOT_ERROR_LABEL, error_result, text_result
from neurosift_mcp.server import StaticToolProvider, StdioToolServer, ToolHandler
from neurosift_mcp.vision import PlotAnalyzer

logger = logging.getLogger(__name__)

SERVER_NAME = "plot-vision"
SERVER_VERSION = "0.1.0"


class AnalyzePlotTool(ToolHandler):
    name = "analyze_plot"
    description = "Analyze a scientific plot using an LLM"
    input_schema = {
        "type": "object",
        "properties": {
            "image_path": {
                "type": "string",
                "description": "The full path to the PNG image file to analyze. "
                               "It is important to provide the full path.",
            },
            "additional_instructions": {
                "type": "string",
                "description": "Additional instructions to include in the system prompt "
                               "to the LLM (optional)",
            },
        },
        "required": ["image_path"],
    }

    def __init__(self, analyzer: PlotAnalyzer):
        self.analyzer = analyzer

    def validate(self, arguments: dict[str, Any]) -> None:
        extra = arguments.get("additional_instructions")
        if not isinstance(arguments.get("image_path"), str) or (
            extra is not None and not isinstance(extra, str)
        ):
            raise ProtocolFault(ErrorCode.INVALID_PARAMS, "Invalid analyze_plot arguments")

    def handle(self, arguments: dict[str, Any]) -> ToolCallResult:
        try:
            analysis = self.analyzer.analyze(
                arguments["image_path"],
                arguments.get("additional_instructions"),
            )
        except Exception as e:
            logger.warning(f"analyze_plot failed: {e}")
            return error_result(PLOT_ERROR_LABEL, str(e))

        return text_result(analysis)


def build_server(settings: PlotVisionSettings, **streams) -> StdioToolServer:
    analyzer = PlotAnalyzer(settings.api_key, model=settings.model, timeout=settings.http_timeout)
    provider = StaticToolProvider()
    provider.register(AnalyzePlotTool(analyzer))
    return StdioToolServer(SERVER_NAME, SERVER_VERSION, provider, **streams)


def main() -> None:
    configure_logging()
    # Fails before the channel opens when OPENROUTER_API_KEY is missing
    settings = PlotVisionSettings.from_env()
    server = build_server(settings)
    server.install_signal_handlers()
    logger.info("plot-vision MCP server running on stdio")
    server.run()


if __name__ == "__main__":
    main()
