import pytest
import httpx

from wikiwrapper.games import GameRegistry, builtin_games
from wikiwrapper.wiki.api_client import MediaWikiClient
from wikiwrapper.wiki.smw_client import SMWClient


# ---------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------

@pytest.fixture
def registry():
    return GameRegistry(builtin_games(), author_games=["2kki", "unevendream", "unconscious"])


@pytest.fixture
def game_2kki(registry):
    return registry.resolve("2kki")


class StubWiki:
    """
    In-process stand-in for api.php. Responses are queued per `action`
    (or per `prop`/`list` for action=query) and every request is recorded.
    """

    def __init__(self):
        self.requests = []
        self.responses = {}

    def queue(self, key, *payloads):
        self.responses.setdefault(key, []).extend(payloads)

    def handler(self, request: httpx.Request) -> httpx.Response:
        params = dict(request.url.params)
        self.requests.append(params)
        key = params.get("action")
        if key == "query":
            key = params.get("list") or params.get("prop")
        queued = self.responses.get(key)
        if not queued:
            return httpx.Response(404, json={"error": {"code": "stub", "info": f"no stub for {key}"}})
        return httpx.Response(200, json=queued.pop(0))

    def client(self) -> SMWClient:
        mw = MediaWikiClient(
            base_url="https://wiki.test/api.php",
            transport=httpx.MockTransport(self.handler),
        )
        return SMWClient(mw)


@pytest.fixture
def stub_wiki():
    return StubWiki()
