from functools import lru_cache

from ..config import settings
from ..games import GameRegistry, load_game_registry
from ..wiki.api_client import MediaWikiClient
from ..wiki.smw_client import SMWClient


@lru_cache
def get_game_registry() -> GameRegistry:
    return load_game_registry(
        settings.wiki_config_path,
        author_games=settings.authors_game_codes,
    )

@lru_cache
def get_mw_client() -> MediaWikiClient:
    return MediaWikiClient()

def get_smw_client() -> SMWClient:
    return SMWClient(get_mw_client())
