"""Map backend outcomes onto ToolCallResult envelopes."""

from __future__ import annotations

import json

from neurosift_mcp.protocol import JsonValue, TextContent, ToolCallResult

API_ERROR_LABEL = "API error"
PLOT_ERROR_LABEL = "Error analyzing plot"


def json_result(payload: JsonValue) -> ToolCallResult:
    """Any JSON value, strings included, rendered with a two space indent."""
    return ToolCallResult(content=[TextContent(text=json.dumps(payload, indent=2, ensure_ascii=False))])


def text_result(payload: JsonValue) -> ToolCallResult:
    """Strings pass through verbatim; anything else is pretty-printed JSON."""
    if isinstance(payload, str):
        return ToolCallResult(content=[TextContent(text=payload)])
    return json_result(payload)


def error_result(label: str, message: str) -> ToolCallResult:
    return ToolCallResult(
        content=[TextContent(text=f"{label}: {message}")],
        is_error=True,
    )
