import io
import json
import sys
from pathlib import Path
from typing import Any, Dict, List

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

API_URL = "https://tools.example.test/api"

CATALOG: List[Dict[str, Any]] = [
    {
        "name": "search_dandisets",
        "description": "Search DANDI for dandisets",
        "parameters": {
            "type": "object",
            "required": ["query"],
            "properties": {
                "query": {"type": "string", "description": "Search text"},
                "limit": {"type": "number", "description": "Max results", "default": 10},
            },
        },
    },
    {
        "name": "get_dandiset_info",
        "description": "Metadata for one dandiset",
        "parameters": {
            "type": "object",
            "required": ["dandiset_id"],
            "properties": {
                "dandiset_id": {"type": "string", "description": "Dandiset ID"},
            },
        },
    },
]


class StdioHarness:
    """Feeds request lines to a server and collects its stdout as JSON."""

    def __init__(self, server_factory):
        self._server_factory = server_factory

    def run(self, *messages: Dict[str, Any]) -> List[Dict[str, Any]]:
        stdin = io.StringIO("".join(json.dumps(m) + "\n" for m in messages))
        stdout = io.StringIO()
        self._server_factory(stdin=stdin, stdout=stdout).run()
        return [json.loads(line) for line in stdout.getvalue().splitlines()]


def call_message(name: str, arguments: Any = None, request_id: int = 1) -> Dict[str, Any]:
    params: Dict[str, Any] = {"name": name}
    if arguments is not None:
        params["arguments"] = arguments
    return {"jsonrpc": "2.0", "id": request_id, "method": "tools/call", "params": params}


@pytest.fixture
def png_file(tmp_path):
    path = tmp_path / "plot.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\nfake-plot-bytes")
    return path
