"""
Domain Models

The fixed output structures returned by every endpoint. Field names are
snake_case in Python and camelCase on the wire.

Design Goals
------------
- Game-agnostic, stable JSON shapes
- List fields always present (empty by default), never absent
- Optional scalars omitted from the response body when unset
- Safe defaults (no shared mutable state)
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """
    Base for all response models: camelCase aliases, construction by field
    name, and no unexpected fields.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


# ---------------------------------------------------------------------
# Locations
# ---------------------------------------------------------------------

class BGM(WireModel):
    path: str = ""
    title: str = ""
    label: Optional[str] = None


class LocationMap(WireModel):
    path: str = ""
    caption: str = ""


class Location(WireModel):
    title: str
    game: str
    location_image: str = ""
    background_color: str = ""
    font_color: str = ""
    original_name: Optional[str] = None
    bgms: List[BGM] = Field(default_factory=list)
    location_maps: List[LocationMap] = Field(default_factory=list)
    primary_author: Optional[str] = None
    contributing_authors: List[str] = Field(default_factory=list)
    version_added: str = ""
    versions_updated: List[str] = Field(default_factory=list)
    version_removed: Optional[str] = None
    version_gaps: List[str] = Field(default_factory=list)
    map_ids: List[int] = Field(default_factory=list)


class Locations(WireModel):
    locations: List[Location] = Field(default_factory=list)
    game: str
    protags: Optional[List[str]] = None
    continue_key: Optional[str] = None


# ---------------------------------------------------------------------
# Connections
# ---------------------------------------------------------------------

class Connection(WireModel):
    game: str
    origin: str = ""
    destination: str = ""
    attributes: List[str] = Field(default_factory=list)
    unlock_condition: Optional[str] = None
    effects_needed: List[str] = Field(default_factory=list)
    season_available: Optional[str] = None
    chance_percentage: Optional[str] = None
    chance_description: Optional[str] = None
    is_removed: bool = False


class Connections(WireModel):
    connections: List[Connection] = Field(default_factory=list)
    game: str
    continue_key: Optional[str] = None


# ---------------------------------------------------------------------
# Authors & Vending Machines
# ---------------------------------------------------------------------

class Author(WireModel):
    name: str = ""
    original_name: Optional[str] = None


class VendingMachine(WireModel):
    game: str
    path: str = ""
    map_id: str = ""
    event_ids: List[str] = Field(default_factory=list)


# ---------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------

class Image(WireModel):
    url: str
    width: int = Field(..., ge=0)
    height: int = Field(..., ge=0)


class LocationImage(WireModel):
    title: str
    game: str
    images: List[Image] = Field(default_factory=list)


class LocationImages(WireModel):
    location_images: List[LocationImage] = Field(default_factory=list)
    game: str
    continue_key: Optional[str] = None


# ---------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------

class HealthResponse(BaseModel):
    status: str
    wiki_api: str
