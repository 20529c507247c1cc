"""
Game Registry

This module maps the short game codes accepted by the HTTP API to the wiki
metadata needed to query them: display name (which is also the page
namespace prefix), protagonist categories for games with more than one
playable character, and the numeric namespace id used by category listings.

Architecture
------------
- The registry is an immutable value built once at startup
- It is injected into the query layer explicitly, never read as ambient state
- A built-in table covers every known game; a YAML file in the
  `wiki_config.yml` format may replace it
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .core.errors import (
    InvalidContinueKeyError,
    InvalidProtagonistError,
    UnsupportedGameError,
)

logger = logging.getLogger("wikiwrapper.games")


# ---------------------------------------------------------------------
# Built-in Game Table
# ---------------------------------------------------------------------

# code: (display name, namespace id)
_BUILTIN_GAMES: Dict[str, tuple] = {
    "yume": ("Yume Nikki", 3000),
    "2kki": ("Yume 2kki", 3002),
    "flow": ("Dotflow", 3004),
    "someday": ("Someday", 3006),
    "deepdreams": ("Deep Dreams", 3008),
    "prayers": ("Answered Prayers", 3010),
    "amillusion": ("Amillusion", 3012),
    "unevendream": ("Uneven Dream", 3014),
    "braingirl": ("Braingirl", 3016),
    "unconscious": ("Collective Unconscious", 3018),
    "cerasus": ("Cerasus", 3020),
    "muma": ("Muma Rope", 3022),
    "genie": ("Dream Genie", 3026),
    "mikan": ("Mikan Muzou", 3028),
    "ultraviolet": ("Ultra Violet", 3030),
    "sheawaits": ("She Awaits", 3032),
    "oversomnia": ("Oversomnia", 3034),
    "tagai": ("Yume Tagai", 3036),
    "tsushin": ("Yume Tsushin", 3038),
    "nostalgic": ("NostAlgic", 3040),
    "if": ("If", 3042),
}

_BUILTIN_PROTAGONISTS: Dict[str, Dict[str, str]] = {
    "unevendream": {
        "kubotsuki": "Category:Kubotsuki's Worlds",
        "totsutsuki": "Category:Totsutsuki's Worlds",
    },
    "tagai": {
        "makitsuki": "Category:Makitsuki's Worlds",
        "sakiyuki": "Category:Sakiyuki's Worlds",
    },
}


# ---------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------

class GameInfo(BaseModel):
    """
    Wiki metadata for one game.
    """

    code: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    namespace: int = Field(..., ge=0)
    protagonists: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("protagonists", mode="before")
    @classmethod
    def _empty_protagonists(cls, v):
        # An empty YAML mapping loads as None
        return v or {}


class GameParams(BaseModel):
    """
    Game selection parameters shared by the paged endpoints.
    """

    game_code: str
    protag: Optional[str] = None
    continue_key: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="forbid")


class ResolvedGame(BaseModel):
    """
    A validated game selection, ready for query building.
    """

    game: GameInfo
    protag: Optional[str] = None
    protag_category: Optional[str] = None
    continue_key: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def code(self) -> str:
        return self.game.code

    @property
    def name(self) -> str:
        return self.game.name


# ---------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------

class GameRegistry:
    """
    Immutable lookup table from game code to `GameInfo`.
    """

    def __init__(
        self,
        games: Iterable[GameInfo],
        author_games: Iterable[str] = (),
    ) -> None:
        self._games: Mapping[str, GameInfo] = {g.code: g for g in games}
        self._author_games = frozenset(author_games)

    @property
    def codes(self) -> list[str]:
        return sorted(self._games)

    def resolve(self, code: str) -> GameInfo:
        """
        Look up a game by code.

        Raises
        ------
        UnsupportedGameError
            If the code is unknown.
        """
        game = self._games.get(code)
        if game is None:
            raise UnsupportedGameError("game not supported")
        return game

    def has_multiple_protagonists(self, code: str) -> bool:
        return bool(self.resolve(code).protagonists)

    def protagonist_category(self, code: str, protag: str) -> str:
        game = self.resolve(code)
        category = game.protagonists.get(protag)
        if category is None:
            raise InvalidProtagonistError("protagonist does not exist or is misspelled")
        return category

    def namespace_id(self, code: str) -> int:
        return self.resolve(code).namespace

    def require_author_support(self, code: str) -> GameInfo:
        """
        Resolve a game for the authors endpoint, which only a subset of the
        wikis support.
        """
        game = self.resolve(code)
        if code not in self._author_games:
            raise UnsupportedGameError("game not supported")
        return game

    def resolve_params(self, params: GameParams) -> ResolvedGame:
        """
        Validate a game selection before any network call is made.

        Raises
        ------
        UnsupportedGameError
            If the game code is unknown.
        InvalidProtagonistError
            If a protagonist is given for a single-protagonist game, omitted
            for a multi-protagonist game, or does not exist.
        InvalidContinueKeyError
            If the continuation offset is not a run of digits.
        """
        game = self.resolve(params.game_code)
        protag = params.protag or None

        if not game.protagonists:
            if protag is not None:
                raise InvalidProtagonistError("game has only one protagonist")
            category = None
        else:
            if protag is None:
                raise InvalidProtagonistError(
                    "game has multiple protagonists, please specify one"
                )
            category = self.protagonist_category(game.code, protag)

        continue_key = params.continue_key or None
        # Spliced into the askargs parameter string as `offset=N`.
        if continue_key is not None and not (continue_key.isascii() and continue_key.isdigit()):
            raise InvalidContinueKeyError("continue key must be a non-negative integer")

        return ResolvedGame(
            game=game,
            protag=protag,
            protag_category=category,
            continue_key=continue_key,
        )


# ---------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------

def builtin_games() -> list[GameInfo]:
    return [
        GameInfo(
            code=code,
            name=name,
            namespace=namespace,
            protagonists=_BUILTIN_PROTAGONISTS.get(code, {}),
        )
        for code, (name, namespace) in _BUILTIN_GAMES.items()
    ]


def parse_game_config(data: Mapping) -> list[GameInfo]:
    """
    Parse the `games:` mapping of a wiki config document.

    Raises
    ------
    ValueError
        If the document is not shaped like a wiki config.
    """
    if not isinstance(data, Mapping) or not isinstance(data.get("games"), Mapping):
        raise ValueError("wiki config must contain a 'games' mapping")

    games = []
    for code, entry in data["games"].items():
        if not isinstance(entry, Mapping):
            raise ValueError(f"wiki config entry for '{code}' must be a mapping")
        try:
            games.append(GameInfo(code=str(code), **entry))
        except ValidationError as exc:
            raise ValueError(f"invalid wiki config entry for '{code}': {exc}") from exc
    return games


def load_game_registry(
    path: Optional[str] = None,
    author_games: Iterable[str] = (),
) -> GameRegistry:
    """
    Build the game registry.

    Parameters
    ----------
    path : Optional[str]
        YAML file in the `wiki_config.yml` format. When omitted, the
        built-in table is used.

    author_games : Iterable[str]
        Game codes for which the authors endpoint is enabled.
    """
    if not path:
        return GameRegistry(builtin_games(), author_games)

    with Path(path).open(encoding="utf-8") as fh:
        data = yaml.safe_load(fh)

    games = parse_game_config(data)
    logger.info("Loaded %d games from %s", len(games), path)
    return GameRegistry(games, author_games)
