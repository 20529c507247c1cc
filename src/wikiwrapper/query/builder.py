"""
Query Builder

Builds, per resource kind, the askargs condition list, the ordered printout
list, the query parameters and the paging strategy. Game and protagonist
validation happens in the registry before any of these are called.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from ..games import GameInfo, ResolvedGame
from .pagination import ExhaustivePaging, PagingStrategy, SinglePagePaging


LOCATIONS_LIMIT = 250
CONNECTIONS_LIMIT = 500
AUTHORS_LIMIT = 500
VENDING_MACHINES_LIMIT = 500
IMAGES_LIMIT = 50

LOCATION_PRINTOUTS = (
    "Has location image",
    "Header background color",
    "Header font color",
    "Has primary author",
    "Has contributing author",
    "Japanese name",
    "Has BGM",
    "Map IDs",
    "Has location map",
    "Version added",
    "Versions updated",
    "Version removed",
    "Version gaps",
)

CONNECTION_PRINTOUTS = (
    "Connection/Origin",
    "Connection/Location",
    "Connection/Attribute",
    "Connection/Unlock conditions",
    "Connection/Effects needed",
    "Connection/Season available",
    "Connection/Chance percentage",
    "Connection/Chance description",
    "Connection/Is removed",
)

AUTHOR_PRINTOUTS = ("Author/Name", "Author/Original Name")

MAP_PRINTOUTS = ("Has location map",)

VENDING_MACHINE_PRINTOUTS = (
    "Has image path",
    "Vending Machine/Map ID",
    "Vending Machine/Event ID",
)


@dataclass(frozen=True)
class SemanticQuery:
    """
    A fully built askargs query plus the paging strategy that drives it.
    """
    conditions: Tuple[str, ...]
    printouts: Tuple[str, ...]
    parameters: Tuple[str, ...] = ()
    paging: PagingStrategy = field(default_factory=ExhaustivePaging, compare=False)

    def request_args(self, offset: Optional[str] = None) -> Dict[str, str]:
        """
        Keyword arguments for `SMWClient.ask`, with `offset=<offset>` appended
        to the parameters when given.
        """
        parameters = list(self.parameters)
        if offset:
            parameters.append(f"offset={offset}")
        return {
            "conditions": "|".join(self.conditions),
            "printouts": "|".join(self.printouts),
            "parameters": "|".join(parameters),
        }


@dataclass(frozen=True)
class CategoryMembersQuery:
    """A category listing restricted to one namespace, fetched one page at a time."""
    category: str
    namespace: int
    limit: int = IMAGES_LIMIT
    continue_key: Optional[str] = None


# ---------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------

def locations_category(game: GameInfo) -> str:
    return f"Category:{game.name} Locations"


def build_locations_query(selection: ResolvedGame) -> SemanticQuery:
    conditions = [locations_category(selection.game)]
    if selection.protag_category:
        conditions.append(selection.protag_category)

    return SemanticQuery(
        conditions=tuple(conditions),
        printouts=LOCATION_PRINTOUTS,
        parameters=(f"limit={LOCATIONS_LIMIT}",),
        paging=SinglePagePaging(selection.continue_key),
    )


def build_connections_query(selection: ResolvedGame) -> SemanticQuery:
    conditions = [f"{selection.name}:+", "Is subobject type::connection"]
    if selection.protag_category:
        # Drop connections scoped to the other protagonist's category
        conditions.append(f"-Has subobject::<q>[[{selection.protag_category}]]</q>")

    return SemanticQuery(
        conditions=tuple(conditions),
        printouts=CONNECTION_PRINTOUTS,
        parameters=(f"limit={CONNECTIONS_LIMIT}",),
        paging=SinglePagePaging(selection.continue_key),
    )


def build_authors_query(game: GameInfo) -> SemanticQuery:
    return SemanticQuery(
        conditions=(f"-Has subobject::{game.name}:Authors",),
        printouts=AUTHOR_PRINTOUTS,
        parameters=("sort=Author/Name", "order=asc", f"limit={AUTHORS_LIMIT}"),
        paging=ExhaustivePaging(),
    )


def build_maps_query(game: GameInfo, location_title: str) -> SemanticQuery:
    return SemanticQuery(
        conditions=(f"{game.name}:{location_title}",),
        printouts=MAP_PRINTOUTS,
        paging=ExhaustivePaging(),
    )


def build_vending_machines_query(game: GameInfo) -> SemanticQuery:
    return SemanticQuery(
        conditions=(
            f"-Has subobject::{game.name}:Vending Machine",
            "Vending Machine/Is implemented::true",
            "Vending Machine/Is accessible::true",
            "Vending Machine/Is secret::false",
        ),
        printouts=VENDING_MACHINE_PRINTOUTS,
        parameters=(
            "sort=Vending Machine/Location",
            "order=asc",
            f"limit={VENDING_MACHINES_LIMIT}",
        ),
        paging=ExhaustivePaging(),
    )


def build_images_query(game: GameInfo, continue_key: Optional[str] = None) -> CategoryMembersQuery:
    return CategoryMembersQuery(
        category=locations_category(game),
        namespace=game.namespace,
        continue_key=continue_key or None,
    )
