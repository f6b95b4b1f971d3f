"""
HTTP client for the Neurosift tools REST API.

Endpoints:
- GET  <base>/tools        → list of tool descriptors
- POST <base>/<tool_name>  → JSON result, optionally {"error": "..."}
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from neurosift_mcp.protocol import JsonValue

logger = logging.getLogger(__name__)


class ToolApiClient:
    def __init__(
        self,
        base_url: str,
        session: requests.Session | None = None,
        timeout: float | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch_tools(self) -> Any:
        """
        Fetch the raw tool catalog.

        Raises:
            requests.RequestException: On transport failure, non-2xx status
                or a body that is not JSON.
        """
        response = self.session.get(f"{self.base_url}/tools", timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def call(self, tool_name: str, arguments: dict[str, JsonValue]) -> Any:
        """
        POST the arguments to the tool's endpoint and return the parsed body.

        Raises:
            requests.RequestException: As for fetch_tools().
        """
        logger.debug(f"POST {self.base_url}/{tool_name}")
        response = self.session.post(
            f"{self.base_url}/{tool_name}",
            json=arguments,
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()


def error_message(exc: requests.RequestException) -> str:
    """Prefer the upstream {"error": ...} text over the transport message."""
    response = exc.response
    if response is not None:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
    return str(exc)
