import json

import pytest
import requests
import responses
from responses import matchers

from neurosift_mcp.config import DEFAULT_NEUROSIFT_TOOLS_API_URL, NeurosiftToolsSettings
from neurosift_mcp.protocol import ErrorCode, ProtocolFault, ToolCallRequest
from neurosift_mcp.proxy import ToolApiClient
from neurosift_mcp.registry import RemoteToolRegistry
from neurosift_mcp.servers.neurosift_tools import NeurosiftToolsProvider, build_server
from tests.conftest import API_URL, CATALOG, StdioHarness, call_message


@pytest.fixture
def client():
    return ToolApiClient(API_URL + "/")


@pytest.fixture
def provider(client):
    return NeurosiftToolsProvider(client)


def _catalog(status=200, body=None):
    responses.add(responses.GET, f"{API_URL}/tools", json=CATALOG if body is None else body, status=status)


@responses.activate
def test_list_tools_fetches_catalog_every_time(provider):
    _catalog()
    _catalog(body=CATALOG[:1])

    first = provider.list_tools()
    second = provider.list_tools()

    assert [t.name for t in first] == ["search_dandisets", "get_dandiset_info"]
    assert [t.name for t in second] == ["search_dandisets"]
    assert provider.registry.get("get_dandiset_info") is None
    assert len(responses.calls) == 2


@responses.activate
@pytest.mark.parametrize("status,body", [(500, {"error": "down"}), (200, {"not": "a list"}), (200, [{"description": "x"}])])
def test_refresh_failure_is_internal_error_and_keeps_snapshot(client, status, body):
    registry = RemoteToolRegistry(client)
    _catalog()
    registry.refresh()
    before = registry.snapshot()

    responses.replace(responses.GET, f"{API_URL}/tools", json=body, status=status)
    with pytest.raises(ProtocolFault) as exc:
        registry.refresh()

    assert exc.value.code == ErrorCode.INTERNAL_ERROR
    assert exc.value.message == "Failed to fetch available tools"
    assert registry.snapshot() is before


@responses.activate
def test_refresh_connection_error(client):
    responses.add(responses.GET, f"{API_URL}/tools", body=requests.ConnectionError("refused"))

    with pytest.raises(ProtocolFault) as exc:
        RemoteToolRegistry(client).refresh()
    assert exc.value.code == ErrorCode.INTERNAL_ERROR


@responses.activate
def test_readers_see_old_snapshot_until_swap(client):
    registry = RemoteToolRegistry(client)
    _catalog(body=CATALOG[:1])
    registry.refresh()
    old = registry.snapshot()
    seen_during_fetch = []

    def catalog_callback(request):
        seen_during_fetch.append(registry.snapshot())
        return 200, {}, json.dumps(CATALOG)

    responses.add_callback(responses.GET, f"{API_URL}/tools", callback=catalog_callback)
    registry.refresh()

    assert seen_during_fetch == [old]
    assert [t.name for t in registry.snapshot()] == ["search_dandisets", "get_dandiset_info"]


@responses.activate
def test_call_posts_arguments_and_pretty_prints(provider):
    _catalog()
    responses.add(
        responses.POST,
        f"{API_URL}/search_dandisets",
        json={"foo": 1},
        match=[matchers.json_params_matcher({"query": "mouse v1", "limit": 5})],
    )
    provider.list_tools()

    result = provider.call_tool(ToolCallRequest("search_dandisets", {"query": "mouse v1", "limit": 5}))

    assert result.to_dict() == {"content": [{"type": "text", "text": '{\n  "foo": 1\n}'}]}


@responses.activate
def test_call_renders_json_string_body_as_json(provider):
    _catalog()
    responses.add(responses.POST, f"{API_URL}/search_dandisets", json="hello")
    provider.list_tools()

    result = provider.call_tool(ToolCallRequest("search_dandisets", {"query": "x"}))

    assert result.text == '"hello"'
    assert result.is_error is False


@responses.activate
def test_upstream_http_error_uses_error_field(provider):
    _catalog()
    responses.add(responses.POST, f"{API_URL}/search_dandisets", json={"error": "bad input"}, status=500)
    provider.list_tools()

    result = provider.call_tool(ToolCallRequest("search_dandisets", {}))

    assert result.is_error is True
    assert result.text == "API error: bad input"


@responses.activate
def test_upstream_http_error_without_body_uses_transport_message(provider):
    _catalog()
    responses.add(responses.POST, f"{API_URL}/get_dandiset_info", body="gateway timeout", status=504)
    provider.list_tools()

    result = provider.call_tool(ToolCallRequest("get_dandiset_info", {"dandiset_id": "000409"}))

    assert result.is_error is True
    assert result.text.startswith("API error: 504 Server Error")


@responses.activate
def test_error_body_on_success_status_is_recoverable(provider):
    _catalog()
    responses.add(responses.POST, f"{API_URL}/get_dandiset_info", json={"error": "Dandiset not found"})
    provider.list_tools()

    result = provider.call_tool(ToolCallRequest("get_dandiset_info", {"dandiset_id": "999999"}))

    assert result.is_error is True
    assert result.text == "API error: Dandiset not found"


@responses.activate
def test_unknown_tool_never_reaches_backend(provider):
    _catalog()
    provider.list_tools()

    with pytest.raises(ProtocolFault) as exc:
        provider.call_tool(ToolCallRequest("delete_everything", {}))

    assert exc.value.code == ErrorCode.METHOD_NOT_FOUND
    assert exc.value.message == "Unknown tool: delete_everything"
    assert [c.request.method for c in responses.calls] == ["GET"]


def test_call_before_any_list_is_unknown(provider):
    with pytest.raises(ProtocolFault) as exc:
        provider.call_tool(ToolCallRequest("search_dandisets", {}))
    assert exc.value.code == ErrorCode.METHOD_NOT_FOUND


@responses.activate
def test_unexpected_exception_propagates():
    class ExplodingClient(ToolApiClient):
        def call(self, tool_name, arguments):
            raise KeyError("not an HTTP failure")

    _catalog()
    provider = NeurosiftToolsProvider(ExplodingClient(API_URL))
    provider.list_tools()

    with pytest.raises(KeyError):
        provider.call_tool(ToolCallRequest("search_dandisets", {}))


@responses.activate
def test_stdio_round_trip():
    _catalog()
    responses.add(responses.POST, f"{API_URL}/search_dandisets", json={"results": [1, 2]})
    settings = NeurosiftToolsSettings(api_url=API_URL)
    harness = StdioHarness(lambda **streams: build_server(settings, **streams))

    listed, called, unknown = harness.run(
        {"jsonrpc": "2.0", "id": 1, "method": "tools/list"},
        call_message("search_dandisets", {"query": "hippocampus"}, request_id=2),
        call_message("nope", {}, request_id=3),
    )

    assert [t["name"] for t in listed["result"]["tools"]] == ["search_dandisets", "get_dandiset_info"]
    assert listed["result"]["tools"][0]["inputSchema"] == CATALOG[0]["parameters"]
    assert called["result"]["content"][0]["text"] == '{\n  "results": [\n    1,\n    2\n  ]\n}'
    assert unknown["error"]["code"] == ErrorCode.METHOD_NOT_FOUND


@responses.activate
def test_list_failure_over_stdio_is_internal_error():
    responses.add(responses.GET, f"{API_URL}/tools", status=503)
    harness = StdioHarness(lambda **streams: build_server(NeurosiftToolsSettings(api_url=API_URL), **streams))

    [response] = harness.run({"jsonrpc": "2.0", "id": 1, "method": "tools/list"})

    assert response["error"] == {"code": ErrorCode.INTERNAL_ERROR, "message": "Failed to fetch available tools"}


def test_settings_default_and_override():
    assert NeurosiftToolsSettings.from_env({}).api_url == DEFAULT_NEUROSIFT_TOOLS_API_URL
    settings = NeurosiftToolsSettings.from_env({
        "NEUROSIFT_TOOLS_API_URL": API_URL,
        "NEUROSIFT_MCP_HTTP_TIMEOUT": "2.5",
    })
    assert settings.api_url == API_URL
    assert settings.http_timeout == 2.5
