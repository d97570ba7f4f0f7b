import copy
import json

import pytest

from cryptgen.dungeon.models import Dungeon
from cryptgen.dungeon.schema import (
    ValidationError,
    load_dungeon_json,
    parse_dungeon,
    validate,
    validate_dungeon,
    validate_grid,
    validate_map_row,
)


@pytest.fixture()
def payload(dungeon_abc):
    return copy.deepcopy(dungeon_abc.to_dict())


def test_generated_dungeon_validates(dungeon_abc, payload):
    ok, result = validate_dungeon(payload)
    assert ok, result
    assert isinstance(result, Dungeon)
    assert result == dungeon_abc


def test_negative_width_rejected_on_bare_grid():
    ok, err = validate_grid({"width": -1, "height": 5, "tiles": []})
    assert ok is False
    assert err["field"] == "width"
    assert err["code"] == "min"


def test_negative_width_rejected_inside_dungeon(payload):
    payload["grid"] = {"width": -1, "height": 5, "tiles": []}
    ok, err = validate_dungeon(payload)
    assert ok is False
    assert err["field"] == "grid.width"


def test_bool_is_not_an_int(payload):
    payload["level"] = True
    ok, err = validate_dungeon(payload)
    assert not ok
    assert (err["field"], err["code"]) == ("level", "type")


def test_string_number_is_not_coerced(payload):
    payload["ttlSeconds"] = "900"
    ok, err = validate_dungeon(payload)
    assert not ok and err["field"] == "ttlSeconds"


def test_zero_ttl_rejected(payload):
    payload["ttlSeconds"] = 0
    ok, err = validate_dungeon(payload)
    assert not ok and err["code"] == "min"


def test_unknown_tile_kind_rejected(payload):
    payload["grid"]["tiles"][0][0] = "lava2"
    ok, err = validate_dungeon(payload)
    assert not ok
    assert err["field"] == "grid.tiles[0][0]"
    assert err["code"] == "enum"


def test_unknown_feature_type_rejected(payload):
    payload["features"] = [{"id": "f1", "type": "banana", "pos": {"x": 1, "y": 1}}]
    ok, err = validate_dungeon(payload)
    assert not ok
    assert err["field"] == "features[0].type"


def test_entity_level_minimum(payload):
    payload["entities"] = [{"id": "e1", "kind": "mob", "name": "Rat", "pos": {"x": 1, "y": 1}, "level": 0}]
    ok, err = validate_dungeon(payload)
    assert not ok and err["field"] == "entities[0].level"


def test_null_optional_field_is_a_type_error(payload):
    payload["entities"] = [
        {"id": "e1", "kind": "mob", "name": "Rat", "pos": {"x": 1, "y": 1}, "level": 1, "ai": None}
    ]
    ok, err = validate_dungeon(payload)
    assert not ok and err["field"] == "entities[0].ai"


def test_missing_required_field(payload):
    del payload["exits"]
    ok, err = validate_dungeon(payload)
    assert not ok
    assert (err["field"], err["code"]) == ("exits", "required")


def test_row_count_mismatch(payload):
    payload["grid"]["tiles"].pop()
    ok, err = validate_dungeon(payload)
    assert not ok
    assert (err["field"], err["code"]) == ("grid.tiles", "shape")


def test_ragged_row(payload):
    payload["grid"]["tiles"][3].append("wall")
    ok, err = validate_dungeon(payload)
    assert not ok
    assert err["field"] == "grid.tiles[3]"
    assert err["code"] == "shape"


def test_all_errors_are_collected(payload):
    payload["level"] = 0
    payload["seed"] = 5
    ok, err = validate_dungeon(payload)
    assert not ok
    fields = {e["field"] for e in err["errors"]}
    assert fields == {"seed", "level"}
    assert err["field"] == err["errors"][0]["field"]


def test_bad_timestamp(payload):
    payload["createdAt"] = "yesterday"
    ok, err = validate_dungeon(payload)
    assert not ok and err["code"] == "format"


def test_non_object_payload():
    ok, err = validate_dungeon(["not", "a", "dungeon"])
    assert not ok and err["field"] == "__root__"


def test_validation_does_not_mutate(payload):
    before = copy.deepcopy(payload)
    validate_dungeon(payload)
    assert payload == before


def test_parse_dungeon_raises(payload):
    payload["grid"]["width"] = 0
    with pytest.raises(ValidationError) as exc:
        parse_dungeon(payload)
    assert exc.value.field == "grid.width"
    assert exc.value.to_dict()["code"] == "min"


def test_load_dungeon_json(dungeon_abc):
    ok, d = load_dungeon_json(dungeon_abc.to_json())
    assert ok and d.seed == "abc"
    ok, err = load_dungeon_json("{not json")
    assert not ok
    assert (err["field"], err["code"]) == ("__root__", "json")


def test_json_round_trip_is_stable(dungeon_abc):
    text = dungeon_abc.to_json()
    ok, d = load_dungeon_json(text)
    assert ok
    assert json.loads(d.to_json()) == json.loads(text)


def test_validate_mini_language_reports_unsupported_type():
    ok, err = validate({"a": 1}, {"a": ("float", True)})
    assert not ok and err["code"] == "schema"


def test_validate_map_row_accepts_gameplay_vocabulary():
    row = {
        "id": "m1",
        "name": "Test",
        "width": 2,
        "height": 1,
        "tiles": [["room", "treasure"]],
    }
    ok, result = validate_map_row(row)
    assert ok
    assert result.tiles == [["room", "treasure"]]
    row["tiles"] = [["room", "lava"]]
    ok, err = validate_map_row(row)
    assert not ok and err["field"] == "tiles[0][1]"
