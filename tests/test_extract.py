import pytest

from payloads import page, record, result
from wikiwrapper.core.errors import MalformedUpstreamError
from wikiwrapper.query.extract import (
    decode_results,
    extract_author,
    extract_category_members,
    extract_connection,
    extract_location,
    extract_location_image,
    extract_location_maps,
    extract_vending_machine,
    strip_namespace,
)

EMPTY_LOCATION_PRINTOUTS = {
    "Has location image": [],
    "Header background color": [],
    "Header font color": [],
    "Has primary author": [],
    "Has contributing author": [],
    "Japanese name": [],
    "Has BGM": [],
    "Map IDs": [],
    "Has location map": [],
    "Version added": [],
    "Versions updated": [],
    "Version removed": [],
    "Version gaps": [],
}


def _one(item):
    (raw,) = decode_results([item])
    return raw


def _full_location_item():
    return result("Yume 2kki:Urban Street", {
        "Has location image": ["Urban_Street.png"],
        "Header background color": ["#202020"],
        "Header font color": ["#ffffff"],
        "Has primary author": ["Nuaaa"],
        "Has contributing author": ["Kotatsu", "Lumi"],
        "Japanese name": ["都会通り"],
        "Has BGM": [
            {"Has media path": record(["bgm/urban.ogg"]), "BGM/Title": record(["Urban"]), "BGM/Label": record([])},
            {"Has media path": record(["bgm/night.ogg"]), "BGM/Title": record(["Night"]), "BGM/Label": record(["Night"])},
        ],
        "Map IDs": [{"Has map ID": record([123])}, {"Has map ID": record(["0456"])}],
        "Has location map": [
            {"Has image path": record(["Urban_Map.png"]), "Location Map/Caption": record(["Map"])},
        ],
        "Version added": ["0.069"],
        "Versions updated": ["0.100", "0.110"],
        "Version removed": [],
        "Version gaps": ["0.080-0.090"],
    })


# ---------------------------------------------------------------------
# Locations
# ---------------------------------------------------------------------

def test_location_with_empty_printouts_uses_defaults(game_2kki):
    raw = _one(result("Yume 2kki:Empty Place", EMPTY_LOCATION_PRINTOUTS))

    location = extract_location(raw, game_2kki)

    assert location.title == "Empty Place"
    assert location.game == "2kki"
    assert location.bgms == []
    assert location.location_maps == []
    assert location.contributing_authors == []
    assert location.versions_updated == []
    assert location.version_gaps == []
    assert location.map_ids == []
    assert location.location_image == ""
    assert location.original_name is None
    assert location.primary_author is None
    assert location.version_removed is None
    assert location.background_color == ""
    assert location.version_added == ""


def test_location_with_absent_printouts_matches_empty(game_2kki):
    absent = extract_location(_one(result("Yume 2kki:Empty Place", [])), game_2kki)
    empty = extract_location(_one(result("Yume 2kki:Empty Place", EMPTY_LOCATION_PRINTOUTS)), game_2kki)

    assert absent == empty


def test_full_location(game_2kki):
    location = extract_location(_one(_full_location_item()), game_2kki)

    assert location.title == "Urban Street"
    assert location.location_image == "Urban_Street.png"
    assert location.background_color == "#202020"
    assert location.font_color == "#ffffff"
    assert location.original_name == "都会通り"
    assert location.primary_author == "Nuaaa"
    assert location.contributing_authors == ["Kotatsu", "Lumi"]
    assert [(b.path, b.title, b.label) for b in location.bgms] == [
        ("bgm/urban.ogg", "Urban", None),
        ("bgm/night.ogg", "Night", "Night"),
    ]
    assert [(m.path, m.caption) for m in location.location_maps] == [("Urban_Map.png", "Map")]
    assert location.map_ids == [123, 456]
    assert location.version_added == "0.069"
    assert location.versions_updated == ["0.100", "0.110"]
    assert location.version_gaps == ["0.080-0.090"]


def test_extraction_is_idempotent(game_2kki):
    raw = _one(_full_location_item())

    assert extract_location(raw, game_2kki) == extract_location(raw, game_2kki)


def test_location_serializes_camel_case(game_2kki):
    location = extract_location(_one(_full_location_item()), game_2kki)
    body = location.model_dump(by_alias=True, exclude_none=True)

    assert body["locationImage"] == "Urban_Street.png"
    assert body["mapIds"] == [123, 456]
    assert body["bgms"][0] == {"path": "bgm/urban.ogg", "title": "Urban"}
    assert "versionRemoved" not in body


def test_non_numeric_map_ids_dropped(game_2kki):
    printouts = {"Map IDs": [
        {"Has map ID": record(["12"])},
        {"Has map ID": record(["abc"])},
        {"Has map ID": record(["34"])},
    ]}

    location = extract_location(_one(result("Yume 2kki:Nexus", printouts)), game_2kki)

    assert location.map_ids == [12, 34]


def test_multiple_primary_authors_joined(game_2kki):
    printouts = {"Has primary author": ["Nuaaa", "Kotatsu"]}

    location = extract_location(_one(result("Yume 2kki:Nexus", printouts)), game_2kki)

    assert location.primary_author == "Nuaaa, Kotatsu"


def test_missing_fulltext_is_malformed(game_2kki):
    raw = _one({"x": {"printouts": {}}})

    with pytest.raises(MalformedUpstreamError):
        extract_location(raw, game_2kki)


def test_missing_printouts_is_malformed():
    with pytest.raises(MalformedUpstreamError):
        decode_results([{"Yume 2kki:Nexus": page("Yume 2kki:Nexus")}])


def test_non_object_result_is_malformed():
    with pytest.raises(MalformedUpstreamError):
        decode_results(["Yume 2kki:Nexus"])


def test_scalar_where_array_expected_is_malformed(game_2kki):
    raw = _one(result("Yume 2kki:Nexus", {"Versions updated": "0.100"}))

    with pytest.raises(MalformedUpstreamError):
        extract_location(raw, game_2kki)


def test_strip_namespace():
    assert strip_namespace("Yume 2kki:Urban Street", "Yume 2kki") == "Urban Street"
    assert strip_namespace("Yume 2kki:Re:Birth", "Yume 2kki") == "Re:Birth"
    assert strip_namespace("Dotflow:Ocean", "Yume 2kki") == "Ocean"
    assert strip_namespace("Nexus", "Yume 2kki") == "Nexus"


# ---------------------------------------------------------------------
# Connections
# ---------------------------------------------------------------------

def _connection_item(**printouts):
    base = {
        "Connection/Origin": [page("Yume 2kki:Nexus")],
        "Connection/Location": [page("Yume 2kki:Urban Street")],
        "Connection/Attribute": [],
        "Connection/Unlock conditions": [],
        "Connection/Effects needed": [],
        "Connection/Season available": [],
        "Connection/Chance percentage": [],
        "Connection/Chance description": [],
        "Connection/Is removed": [],
    }
    base.update(printouts)
    return result("Yume 2kki:Nexus#_abc123", base)


def test_connection(game_2kki):
    item = _connection_item(**{
        "Connection/Attribute": ["OneWay", "Effect"],
        "Connection/Unlock conditions": ["After visiting the Library"],
        "Connection/Effects needed": ["Bike"],
        "Connection/Chance percentage": [25],
        "Connection/Is removed": ["f"],
    })

    connection = extract_connection(_one(item), game_2kki)

    assert connection.origin == "Nexus"
    assert connection.destination == "Urban Street"
    assert connection.attributes == ["OneWay", "Effect"]
    assert connection.unlock_condition == "After visiting the Library"
    assert connection.effects_needed == ["Bike"]
    assert connection.chance_percentage == "25"
    assert connection.season_available is None
    assert connection.is_removed is False


@pytest.mark.parametrize("values, expected", [
    (["t"], True),
    (["f"], False),
    (["true"], False),
    ([], False),
])
def test_connection_removed_flag(game_2kki, values, expected):
    connection = extract_connection(_one(_connection_item(**{"Connection/Is removed": values})), game_2kki)
    assert connection.is_removed is expected


def test_connection_without_endpoints(game_2kki):
    item = _connection_item(**{"Connection/Origin": [], "Connection/Location": []})

    connection = extract_connection(_one(item), game_2kki)

    assert connection.origin == ""
    assert connection.destination == ""
    assert connection.attributes == []
    assert connection.effects_needed == []


def test_connection_endpoint_without_fulltext_is_malformed(game_2kki):
    item = _connection_item(**{"Connection/Origin": [{"fullurl": "x"}]})

    with pytest.raises(MalformedUpstreamError):
        extract_connection(_one(item), game_2kki)


# ---------------------------------------------------------------------
# Authors, maps, vending machines
# ---------------------------------------------------------------------

def test_author():
    item = result("Yume 2kki:Authors#Nuaaa", {
        "Author/Name": ["Nuaaa"],
        "Author/Original Name": [{"Text": record(["ぬあー"]), "Language code": record(["ja"])}],
    })

    author = extract_author(_one(item))

    assert author.name == "Nuaaa"
    assert author.original_name == "ぬあー"


def test_author_without_original_name():
    item = result("Yume 2kki:Authors#Lumi", {"Author/Name": ["Lumi"], "Author/Original Name": []})

    author = extract_author(_one(item))

    assert author.model_dump(by_alias=True, exclude_none=True) == {"name": "Lumi"}


def test_location_maps():
    item = result("Yume 2kki:Example World", {"Has location map": [
        {"Has image path": record(["Example_Map.png"]), "Location Map/Caption": record(["Main area"])},
        {"Has image path": record(["Example_Map2.png"])},
    ]})

    maps = extract_location_maps(_one(item))

    assert [(m.path, m.caption) for m in maps] == [
        ("Example_Map.png", "Main area"),
        ("Example_Map2.png", ""),
    ]


def test_vending_machine(game_2kki):
    item = result("Yume 2kki:Vending Machine#_1", {
        "Has image path": ["VM_Nexus.png"],
        "Vending Machine/Map ID": [12],
        "Vending Machine/Event ID": ["3", "4"],
    })

    vm = extract_vending_machine(_one(item), game_2kki)

    assert vm.game == "2kki"
    assert vm.path == "VM_Nexus.png"
    assert vm.map_id == "12"
    assert vm.event_ids == ["3", "4"]


# ---------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------

def test_image_prefers_thumbnail(game_2kki):
    resp = {"query": {"pages": [{
        "ns": 6,
        "title": "File:Urban.png",
        "imageinfo": [{
            "url": "https://yume.wiki/images/Urban.png",
            "width": 1280,
            "height": 960,
            "thumburl": "https://yume.wiki/images/thumb/Urban.png/320px-Urban.png",
            "thumbwidth": 320,
            "thumbheight": 240,
        }],
    }]}}

    location_image = extract_location_image("Yume 2kki:Urban Street", resp, game_2kki)

    assert location_image.title == "Urban Street"
    (image,) = location_image.images
    assert image.url.endswith("320px-Urban.png")
    assert (image.width, image.height) == (320, 240)


def test_image_falls_back_to_full_size(game_2kki):
    resp = {"query": {"pages": [
        {"title": "File:Small.png", "imageinfo": [{"url": "https://yume.wiki/images/Small.png", "width": 64, "height": 48}]},
        {"title": "File:Missing.png", "missing": True},
    ]}}

    location_image = extract_location_image("Yume 2kki:Small", resp, game_2kki)

    assert [(i.url, i.width, i.height) for i in location_image.images] == [
        ("https://yume.wiki/images/Small.png", 64, 48),
    ]


def test_page_without_images(game_2kki):
    location_image = extract_location_image("Yume 2kki:Void", {"batchcomplete": True}, game_2kki)
    assert location_image.images == []


def test_category_members():
    resp = {
        "continue": {"cmcontinue": "page|55524241|1234", "continue": "-||"},
        "query": {"categorymembers": [{"ns": 3002, "title": "Yume 2kki:Nexus"}]},
    }

    titles, continue_key = extract_category_members(resp)

    assert titles == ["Yume 2kki:Nexus"]
    assert continue_key == "page|55524241|1234"
