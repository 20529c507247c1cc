"""
Result Extractor

Turns raw wiki query results into domain entities in two explicit steps:

1. Decode: each raw result is validated into a typed intermediate model for
   its resource kind. Printout properties are aliased by their wiki property
   name and typed `Optional[List[...]]`, so "absent" (None), "present but
   empty" ([]) and "present with values" stay distinguishable. A missing
   `printouts` object, a missing page title, or a scalar where an array was
   expected fails the decode.

2. Collapse: the decoded structure is mapped onto the domain model. Absent
   and empty properties both become the domain default; single-valued fields
   take the first array element, multi-valued fields take the whole array.

Any decode failure raises `MalformedUpstreamError` and aborts the request.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..api.models import (
    BGM,
    Author,
    Connection,
    Image,
    Location,
    LocationImage,
    LocationMap,
    VendingMachine,
)
from ..core.errors import MalformedUpstreamError
from ..games import GameInfo

logger = logging.getLogger("wikiwrapper.extract")

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

REMOVED_FLAG = "t"


# ---------------------------------------------------------------------
# Decode Models
# ---------------------------------------------------------------------

class DecodeModel(BaseModel):
    # Number-typed wiki properties arrive as JSON numbers
    model_config = ConfigDict(extra="ignore", frozen=True, coerce_numbers_to_str=True)


class RecordField(DecodeModel):
    """One property of a subobject record: `{"label", "typeid", "item": [...]}`."""
    item: Optional[List[str]] = None


class PageValue(DecodeModel):
    """A page-typed printout value."""
    fulltext: str


class RawResult(DecodeModel):
    """One query result: a page or subobject with its printouts."""
    fulltext: Optional[str] = None
    printouts: Dict[str, Any]

    @field_validator("printouts", mode="before")
    @classmethod
    def _php_empty_array(cls, v):
        # PHP serializes an empty associative array as []
        if isinstance(v, list) and not v:
            return {}
        return v


class BGMRecord(DecodeModel):
    media_path: Optional[RecordField] = Field(None, alias="Has media path")
    title: Optional[RecordField] = Field(None, alias="BGM/Title")
    label: Optional[RecordField] = Field(None, alias="BGM/Label")


class LocationMapRecord(DecodeModel):
    image_path: Optional[RecordField] = Field(None, alias="Has image path")
    caption: Optional[RecordField] = Field(None, alias="Location Map/Caption")


class MapIdRecord(DecodeModel):
    map_id: Optional[RecordField] = Field(None, alias="Has map ID")


class MonolingualText(DecodeModel):
    text: Optional[RecordField] = Field(None, alias="Text")


class LocationPrintouts(DecodeModel):
    location_image: Optional[List[str]] = Field(None, alias="Has location image")
    background_color: Optional[List[str]] = Field(None, alias="Header background color")
    font_color: Optional[List[str]] = Field(None, alias="Header font color")
    primary_author: Optional[List[str]] = Field(None, alias="Has primary author")
    contributing_authors: Optional[List[str]] = Field(None, alias="Has contributing author")
    japanese_name: Optional[List[str]] = Field(None, alias="Japanese name")
    bgms: Optional[List[BGMRecord]] = Field(None, alias="Has BGM")
    map_ids: Optional[List[MapIdRecord]] = Field(None, alias="Map IDs")
    location_maps: Optional[List[LocationMapRecord]] = Field(None, alias="Has location map")
    version_added: Optional[List[str]] = Field(None, alias="Version added")
    versions_updated: Optional[List[str]] = Field(None, alias="Versions updated")
    version_removed: Optional[List[str]] = Field(None, alias="Version removed")
    version_gaps: Optional[List[str]] = Field(None, alias="Version gaps")


class ConnectionPrintouts(DecodeModel):
    origin: Optional[List[PageValue]] = Field(None, alias="Connection/Origin")
    destination: Optional[List[PageValue]] = Field(None, alias="Connection/Location")
    attributes: Optional[List[str]] = Field(None, alias="Connection/Attribute")
    unlock_conditions: Optional[List[str]] = Field(None, alias="Connection/Unlock conditions")
    effects_needed: Optional[List[str]] = Field(None, alias="Connection/Effects needed")
    season_available: Optional[List[str]] = Field(None, alias="Connection/Season available")
    chance_percentage: Optional[List[str]] = Field(None, alias="Connection/Chance percentage")
    chance_description: Optional[List[str]] = Field(None, alias="Connection/Chance description")
    is_removed: Optional[List[str]] = Field(None, alias="Connection/Is removed")


class AuthorPrintouts(DecodeModel):
    name: Optional[List[str]] = Field(None, alias="Author/Name")
    original_name: Optional[List[MonolingualText]] = Field(None, alias="Author/Original Name")


class MapPrintouts(DecodeModel):
    location_maps: Optional[List[LocationMapRecord]] = Field(None, alias="Has location map")


class VendingMachinePrintouts(DecodeModel):
    path: Optional[List[str]] = Field(None, alias="Has image path")
    map_id: Optional[List[str]] = Field(None, alias="Vending Machine/Map ID")
    event_ids: Optional[List[str]] = Field(None, alias="Vending Machine/Event ID")


class ImageInfo(DecodeModel):
    url: str
    width: int
    height: int
    thumburl: Optional[str] = None
    thumbwidth: Optional[int] = None
    thumbheight: Optional[int] = None


class ImagePage(DecodeModel):
    title: Optional[str] = None
    imageinfo: Optional[List[ImageInfo]] = None


class ImageInfoQuery(DecodeModel):
    pages: List[ImagePage] = Field(default_factory=list)


class ImageInfoResponse(DecodeModel):
    # The API omits `query` when the page has no images
    query: Optional[ImageInfoQuery] = None


class CategoryMember(DecodeModel):
    title: str


class CategoryMembersPage(DecodeModel):
    categorymembers: List[CategoryMember]


class CategoryMembersContinue(DecodeModel):
    cmcontinue: Optional[str] = None


class CategoryMembersResponse(DecodeModel):
    query: CategoryMembersPage
    continue_: Optional[CategoryMembersContinue] = Field(None, alias="continue")


# ---------------------------------------------------------------------
# Decode Helpers
# ---------------------------------------------------------------------

def decode(model: Type[M], data: Any, what: str) -> M:
    """
    Validate `data` into `model`, converting validation failures into
    `MalformedUpstreamError`.
    """
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        logger.warning("Malformed %s: %s", what, exc)
        raise MalformedUpstreamError(
            f"malformed {what}: {exc.error_count()} invalid field(s)"
        ) from exc


def decode_results(results: Iterable[Any]) -> List[RawResult]:
    """
    Decode `query.results` items. Each item maps a synthetic title key to a
    result object; the key itself carries no information.
    """
    decoded = []
    for item in results:
        if not isinstance(item, dict):
            raise MalformedUpstreamError("query result item is not an object")
        for value in item.values():
            decoded.append(decode(RawResult, value, "query result"))
    return decoded


def first(values: Optional[List[T]]) -> Optional[T]:
    """Collapse the one-element array encoding of a scalar property."""
    if values is None:
        # absent
        return None
    if not values:
        # present, empty
        return None
    return values[0]


def all_values(values: Optional[List[T]]) -> List[T]:
    """Take every value of a multi-valued property; absent means empty."""
    if values is None:
        return []
    return list(values)


def record_value(field: Optional[RecordField]) -> Optional[str]:
    if field is None:
        return None
    return first(field.item)


def strip_namespace(fulltext: str, game_name: str) -> str:
    """Remove the leading `<Game name>:` namespace prefix from a page title."""
    prefix = f"{game_name}:"
    if fulltext.startswith(prefix):
        return fulltext[len(prefix):]
    _, sep, rest = fulltext.partition(":")
    return rest if sep else fulltext


def require_title(raw: RawResult, game: GameInfo) -> str:
    if raw.fulltext is None:
        raise MalformedUpstreamError("query result has no 'fulltext' title")
    return strip_namespace(raw.fulltext, game.name)


def parse_map_ids(records: Optional[List[MapIdRecord]]) -> List[int]:
    """
    Parse integer map IDs. Values that are not decimal integers are dropped,
    since the wiki accepts free text in this field.
    """
    map_ids = []
    for record in all_values(records):
        value = record_value(record.map_id)
        if value is None:
            continue
        try:
            map_ids.append(int(value.strip()))
        except ValueError:
            logger.debug("Dropping non-numeric map ID %r", value)
    return map_ids


def build_bgms(records: Optional[List[BGMRecord]]) -> List[BGM]:
    return [
        BGM(
            path=record_value(record.media_path) or "",
            title=record_value(record.title) or "",
            label=record_value(record.label),
        )
        for record in all_values(records)
    ]


def build_location_maps(records: Optional[List[LocationMapRecord]]) -> List[LocationMap]:
    return [
        LocationMap(
            path=record_value(record.image_path) or "",
            caption=record_value(record.caption) or "",
        )
        for record in all_values(records)
    ]


# ---------------------------------------------------------------------
# Extractors
# ---------------------------------------------------------------------

def extract_location(raw: RawResult, game: GameInfo) -> Location:
    title = require_title(raw, game)
    p = decode(LocationPrintouts, raw.printouts, f"location '{title}'")

    primary_authors = all_values(p.primary_author)

    return Location(
        title=title,
        game=game.code,
        location_image=first(p.location_image) or "",
        background_color=first(p.background_color) or "",
        font_color=first(p.font_color) or "",
        original_name=first(p.japanese_name),
        bgms=build_bgms(p.bgms),
        location_maps=build_location_maps(p.location_maps),
        primary_author=", ".join(primary_authors) if primary_authors else None,
        contributing_authors=all_values(p.contributing_authors),
        version_added=first(p.version_added) or "",
        versions_updated=all_values(p.versions_updated),
        version_removed=first(p.version_removed),
        version_gaps=all_values(p.version_gaps),
        map_ids=parse_map_ids(p.map_ids),
    )


def extract_connection(raw: RawResult, game: GameInfo) -> Connection:
    p = decode(ConnectionPrintouts, raw.printouts, "connection")

    origin = first(p.origin)
    destination = first(p.destination)

    return Connection(
        game=game.code,
        origin=strip_namespace(origin.fulltext, game.name) if origin else "",
        destination=strip_namespace(destination.fulltext, game.name) if destination else "",
        attributes=all_values(p.attributes),
        unlock_condition=first(p.unlock_conditions),
        effects_needed=all_values(p.effects_needed),
        season_available=first(p.season_available),
        chance_percentage=first(p.chance_percentage),
        chance_description=first(p.chance_description),
        is_removed=first(p.is_removed) == REMOVED_FLAG,
    )


def extract_author(raw: RawResult) -> Author:
    p = decode(AuthorPrintouts, raw.printouts, "author")

    original = first(p.original_name)

    return Author(
        name=first(p.name) or "",
        original_name=record_value(original.text) if original else None,
    )


def extract_location_maps(raw: RawResult) -> List[LocationMap]:
    p = decode(MapPrintouts, raw.printouts, "location maps")
    return build_location_maps(p.location_maps)


def extract_vending_machine(raw: RawResult, game: GameInfo) -> VendingMachine:
    p = decode(VendingMachinePrintouts, raw.printouts, "vending machine")

    return VendingMachine(
        game=game.code,
        path=first(p.path) or "",
        map_id=first(p.map_id) or "",
        event_ids=all_values(p.event_ids),
    )


# ---------------------------------------------------------------------
# Image Extractors
# ---------------------------------------------------------------------

def select_image_variant(info: ImageInfo) -> Image:
    """Prefer the thumbnail URL and dimensions over the full-size ones."""
    return Image(
        url=info.thumburl if info.thumburl is not None else info.url,
        width=info.thumbwidth if info.thumbwidth is not None else info.width,
        height=info.thumbheight if info.thumbheight is not None else info.height,
    )


def extract_category_members(resp: Dict[str, Any]) -> tuple[List[str], Optional[str]]:
    """
    Return the member page titles and the `cmcontinue` token of a
    category listing response.
    """
    decoded = decode(CategoryMembersResponse, resp, "category listing")
    continue_key = decoded.continue_.cmcontinue if decoded.continue_ else None
    return [member.title for member in decoded.query.categorymembers], continue_key


def extract_location_image(
    page_title: str,
    resp: Dict[str, Any],
    game: GameInfo,
) -> LocationImage:
    """
    Build the image listing of one location page from its imageinfo response.
    Pages without image info (missing files) are skipped.
    """
    decoded = decode(ImageInfoResponse, resp, f"image info for '{page_title}'")
    images = []
    if decoded.query is not None:
        for page in decoded.query.pages:
            for info in all_values(page.imageinfo):
                images.append(select_image_variant(info))

    return LocationImage(
        title=strip_namespace(page_title, game.name),
        game=game.code,
        images=images,
    )
