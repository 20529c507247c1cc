import httpx
import pytest

from wikiwrapper.core.errors import MalformedUpstreamError, UpstreamQueryError
from wikiwrapper.wiki.api_client import (
    MediaWikiClient,
    MediaWikiRequestError,
    MediaWikiResponseError,
)
from wikiwrapper.wiki.smw_client import SMWClient, SMWQueryError


def _client(handler) -> MediaWikiClient:
    return MediaWikiClient(
        base_url="https://wiki.test/api.php",
        user_agent="test-agent",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_get_sends_json_format_and_user_agent():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["params"] = dict(request.url.params)
        seen["agent"] = request.headers["user-agent"]
        return httpx.Response(200, json={"batchcomplete": True})

    data = await _client(handler).get({"action": "query", "list": "allpages"})

    assert data == {"batchcomplete": True}
    assert seen["params"]["format"] == "json"
    assert seen["params"]["formatversion"] == "2"
    assert seen["params"]["list"] == "allpages"
    assert seen["agent"] == "test-agent"


@pytest.mark.asyncio
async def test_http_error_raises_request_error():
    client = _client(lambda request: httpx.Response(503, text="down"))

    with pytest.raises(MediaWikiRequestError):
        await client.get({"action": "query"})


@pytest.mark.asyncio
async def test_transport_error_raises_request_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(UpstreamQueryError):
        await _client(handler).get({"action": "query"})


@pytest.mark.asyncio
async def test_api_error_payload_raises_response_error():
    client = _client(lambda request: httpx.Response(
        200, json={"error": {"code": "badvalue", "info": "Unrecognized value"}},
    ))

    with pytest.raises(MediaWikiResponseError, match="Unrecognized value"):
        await client.get({"action": "query"})


@pytest.mark.asyncio
async def test_non_json_body_is_malformed():
    client = _client(lambda request: httpx.Response(200, text="<html>maintenance</html>"))

    with pytest.raises(MalformedUpstreamError):
        await client.get({"action": "query"})


@pytest.mark.asyncio
async def test_smw_ask_builds_askargs_request():
    seen = {}

    def handler(request):
        seen.update(request.url.params)
        return httpx.Response(200, json={"query": {"results": []}})

    smw = SMWClient(_client(handler))
    await smw.ask("Category:Yume 2kki Locations", "Version added", "limit=250")

    assert seen["action"] == "askargs"
    assert seen["api_version"] == "3"
    assert seen["conditions"] == "Category:Yume 2kki Locations"
    assert seen["printouts"] == "Version added"
    assert seen["parameters"] == "limit=250"


@pytest.mark.asyncio
async def test_smw_ask_wraps_upstream_failures():
    smw = SMWClient(_client(lambda request: httpx.Response(500)))

    with pytest.raises(SMWQueryError):
        await smw.ask("Yume 2kki:+")


@pytest.mark.asyncio
async def test_smw_ask_requires_conditions():
    smw = SMWClient(_client(lambda request: httpx.Response(200, json={})))

    with pytest.raises(ValueError):
        await smw.ask("")
