from typing import List, Optional

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    wiki_api_url: AnyHttpUrl = "https://yume.wiki/api.php"
    wiki_user_agent: str = "yumeWikiAPIBot"
    wiki_http_timeout: float = 60.0

    # Optional YAML game registry; the built-in table is used when unset
    wiki_config_path: Optional[str] = None
    cors_config_path: str = "cors_config.yml"

    # Games whose wiki maintains an Authors category
    authors_games: str = "2kki,unevendream,unconscious"

    socket_path: Optional[str] = "sockets/wikiwrapper.sock"
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="WIKIWRAPPER_",
        extra="ignore"
    )

    @property
    def authors_game_codes(self) -> List[str]:
        return [code.strip() for code in self.authors_games.split(",") if code.strip()]

settings = Settings()
