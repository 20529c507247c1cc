"""
Wiki Data Service

One function per resource kind. Each validates its parameters against the
game registry, builds the query, drives it with the strategy the builder
selected, and extracts the domain entities.

Responsibilities
----------------
- Validation happens before any network call.
- Outbound queries are awaited one at a time, in order.
- Every error propagates to the caller; nothing is retried or swallowed.
"""

from __future__ import annotations

import logging
from typing import List

from ..api.models import (
    Author,
    Connections,
    LocationImages,
    LocationMap,
    Locations,
    VendingMachine,
)
from ..games import GameParams, GameRegistry
from ..query import builder
from ..query.extract import (
    decode_results,
    extract_author,
    extract_category_members,
    extract_connection,
    extract_location,
    extract_location_image,
    extract_location_maps,
    extract_vending_machine,
)
from ..wiki.smw_client import SMWClient

logger = logging.getLogger("wikiwrapper.service")


async def get_locations(
    params: GameParams,
    registry: GameRegistry,
    smw: SMWClient,
) -> Locations:
    """
    Fetch one page of a game's locations.

    For multi-protagonist games the selection is restricted to the requested
    protagonist's worlds, which is echoed back in `protags`.
    """
    selection = registry.resolve_params(params)
    query = builder.build_locations_query(selection)

    page = await query.paging.fetch(smw, query)
    game = selection.game

    return Locations(
        locations=[extract_location(raw, game) for raw in decode_results(page.results)],
        game=game.code,
        protags=[selection.protag] if selection.protag else None,
        continue_key=page.continue_key,
    )


async def get_connections(
    params: GameParams,
    registry: GameRegistry,
    smw: SMWClient,
) -> Connections:
    """Fetch one page of a game's connections."""
    selection = registry.resolve_params(params)
    query = builder.build_connections_query(selection)

    page = await query.paging.fetch(smw, query)
    game = selection.game

    return Connections(
        connections=[extract_connection(raw, game) for raw in decode_results(page.results)],
        game=game.code,
        continue_key=page.continue_key,
    )


async def get_authors(
    game_code: str,
    registry: GameRegistry,
    smw: SMWClient,
) -> List[Author]:
    """Fetch every author of a game, sorted by name."""
    game = registry.require_author_support(game_code)
    query = builder.build_authors_query(game)

    page = await query.paging.fetch(smw, query)
    return [extract_author(raw) for raw in decode_results(page.results)]


async def get_maps(
    game_code: str,
    location_title: str,
    registry: GameRegistry,
    smw: SMWClient,
) -> List[LocationMap]:
    """Fetch the maps attached to one location page."""
    game = registry.resolve(game_code)
    query = builder.build_maps_query(game, location_title)

    page = await query.paging.fetch(smw, query)

    maps: List[LocationMap] = []
    for raw in decode_results(page.results):
        maps.extend(extract_location_maps(raw))
    return maps


async def get_vending_machines(
    game_code: str,
    registry: GameRegistry,
    smw: SMWClient,
) -> List[VendingMachine]:
    """Fetch every implemented, accessible, non-secret vending machine."""
    game = registry.resolve(game_code)
    query = builder.build_vending_machines_query(game)

    page = await query.paging.fetch(smw, query)
    return [extract_vending_machine(raw, game) for raw in decode_results(page.results)]


async def get_images(
    params: GameParams,
    registry: GameRegistry,
    smw: SMWClient,
) -> LocationImages:
    """
    Fetch one page of location pages and the images shown on each.

    The listing is paged by the caller through `cmcontinue`; each listed page
    then costs one imageinfo request.
    """
    game = registry.resolve(params.game_code)
    query = builder.build_images_query(game, params.continue_key)

    mw = smw.mw
    listing = await mw.get_category_members(
        query.category,
        query.namespace,
        limit=query.limit,
        continue_key=query.continue_key,
    )
    titles, continue_key = extract_category_members(listing)

    location_images = []
    for title in titles:
        resp = await mw.get_page_image_info(title)
        location_images.append(extract_location_image(title, resp, game))

    logger.debug("Fetched images for %d %s pages", len(titles), game.code)
    return LocationImages(
        location_images=location_images,
        game=game.code,
        continue_key=continue_key,
    )
