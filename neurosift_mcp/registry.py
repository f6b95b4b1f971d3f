"""
Tool registry backed by a remote catalog.

The registry owns a single snapshot of tool descriptors. refresh() is
the only writer: it builds a complete new snapshot and swaps it in with
one assignment, so readers see either the old list or the new one.
"""

from __future__ import annotations

import logging

import requests

from neurosift_mcp.protocol import ErrorCode, ProtocolFault, ToolDescriptor
from neurosift_mcp.proxy import ToolApiClient

logger = logging.getLogger(__name__)

FETCH_FAILED_MESSAGE = "Failed to fetch available tools"


class RemoteToolRegistry:

    def __init__(self, client: ToolApiClient):
        self.client = client
        self._snapshot: tuple[ToolDescriptor, ...] = ()

    def refresh(self) -> list[ToolDescriptor]:
        """
        Replace the snapshot with the remote catalog.

        Raises:
            ProtocolFault: INTERNAL_ERROR if the catalog cannot be fetched
                or parsed. The previous snapshot is kept.
        """
        try:
            raw = self.client.fetch_tools()
            if not isinstance(raw, list):
                raise ValueError(f"Expected a list of tools, got {type(raw).__name__}")
            tools = tuple(ToolDescriptor.from_dict(entry) for entry in raw)
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Error fetching tools: {e}")
            raise ProtocolFault(ErrorCode.INTERNAL_ERROR, FETCH_FAILED_MESSAGE) from e

        self._snapshot = tools
        logger.debug(f"Tool registry refreshed: {[t.name for t in tools]}")
        return list(tools)

    def snapshot(self) -> tuple[ToolDescriptor, ...]:
        return self._snapshot

    def get(self, name: str) -> ToolDescriptor | None:
        for tool in self._snapshot:
            if tool.name == name:
                return tool
        return None
