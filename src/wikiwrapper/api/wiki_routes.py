"""
Wiki Resource Routes

Read-only endpoints exposing locations, connections, authors, maps, vending
machines and location images of a game wiki.

These handlers only parse query-string parameters and serialize the result.
Missing required parameters are rejected with a 400; every error raised by
the data service is mapped to a 500 by the global exception handlers.
"""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query

from .dependencies import get_game_registry, get_smw_client
from .models import (
    Author,
    Connections,
    LocationImages,
    LocationMap,
    Locations,
    VendingMachine,
)
from ..core.errors import MissingParameterError
from ..games import GameParams, GameRegistry
from ..services import wiki_data
from ..wiki.smw_client import SMWClient

router = APIRouter(tags=["wiki"])

Registry = Annotated[GameRegistry, Depends(get_game_registry)]
SMW = Annotated[SMWClient, Depends(get_smw_client)]
ContinueKey = Annotated[Optional[str], Query(alias="continueKey")]


def _required(name: str, value: Optional[str]) -> str:
    if not value:
        raise MissingParameterError(name)
    return value


@router.get(
    "/locations",
    response_model=Locations,
    response_model_exclude_none=True,
    summary="List one page of a game's locations",
)
async def locations(
    registry: Registry,
    smw: SMW,
    game: Optional[str] = None,
    protag: Optional[str] = None,
    continue_key: ContinueKey = None,
) -> Locations:
    params = GameParams(
        game_code=_required("game", game),
        protag=protag or None,
        continue_key=continue_key or None,
    )
    return await wiki_data.get_locations(params, registry, smw)


@router.get(
    "/connections",
    response_model=Connections,
    response_model_exclude_none=True,
    summary="List one page of a game's connections",
)
async def connections(
    registry: Registry,
    smw: SMW,
    game: Optional[str] = None,
    protag: Optional[str] = None,
    continue_key: ContinueKey = None,
) -> Connections:
    params = GameParams(
        game_code=_required("game", game),
        protag=protag or None,
        continue_key=continue_key or None,
    )
    return await wiki_data.get_connections(params, registry, smw)


@router.get(
    "/authors",
    response_model=List[Author],
    response_model_exclude_none=True,
    summary="List every author of a game",
)
async def authors(
    registry: Registry,
    smw: SMW,
    game: Optional[str] = None,
) -> List[Author]:
    return await wiki_data.get_authors(_required("game", game), registry, smw)


@router.get(
    "/maps",
    response_model=List[LocationMap],
    response_model_exclude_none=True,
    summary="List the maps of one location",
)
async def maps(
    registry: Registry,
    smw: SMW,
    game: Optional[str] = None,
    location: Optional[str] = None,
) -> List[LocationMap]:
    game_code = _required("game", game)
    location_title = _required("location", location)
    return await wiki_data.get_maps(game_code, location_title, registry, smw)


@router.get(
    "/vms",
    response_model=List[VendingMachine],
    response_model_exclude_none=True,
    summary="List a game's vending machines",
)
async def vending_machines(
    registry: Registry,
    smw: SMW,
    game: Optional[str] = None,
) -> List[VendingMachine]:
    return await wiki_data.get_vending_machines(_required("game", game), registry, smw)


@router.get(
    "/images",
    response_model=LocationImages,
    response_model_exclude_none=True,
    summary="List one page of location images",
)
async def images(
    registry: Registry,
    smw: SMW,
    game: Optional[str] = None,
    continue_key: ContinueKey = None,
) -> LocationImages:
    params = GameParams(
        game_code=_required("game", game),
        continue_key=continue_key or None,
    )
    return await wiki_data.get_images(params, registry, smw)
