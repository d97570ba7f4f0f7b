import json

from cryptgen.dungeon.grid import Grid, Vec2
from cryptgen.dungeon.models import (
    Dungeon,
    Entity,
    Feature,
    Rect,
    Room,
    from_map_row,
    to_client_payload,
    to_map_row,
)
from cryptgen.dungeon.sample_maps import default_map, wizardry_floor_1
from cryptgen.dungeon.playability import check_playable


def _dungeon():
    return Dungeon(
        id="d1",
        seed="abc",
        level=1,
        created_at="2024-01-01T00:00:00.000Z",
        ttl_seconds=900,
        grid=Grid.filled(3, 3, "floor"),
        rooms=[Room("r1", Rect(0, 0, 2, 2))],
        features=[Feature("f1", "chest", Vec2(1, 1))],
        entities=[
            Entity("p1", "player", "Hero", Vec2(0, 0)),
            Entity("m1", "mob", "Rat", Vec2(2, 2), level=2, hostile=True),
        ],
        entrances=[Vec2(0, 0)],
        exits=[Vec2(2, 2)],
    )


def test_optional_fields_omitted():
    d = _dungeon().to_dict()
    assert "tags" not in d["rooms"][0]
    assert set(d["features"][0]) == {"id", "type", "pos"}
    assert d["entities"][1]["hostile"] is True
    assert "ai" not in d["entities"][1]


def test_camel_case_keys():
    d = _dungeon().to_dict()
    assert "createdAt" in d and "ttlSeconds" in d
    assert d["grid"]["tiles"][0] == ["floor", "floor", "floor"]


def test_dict_round_trip():
    d = _dungeon()
    assert Dungeon.from_dict(json.loads(d.to_json())) == d


def test_client_payload_drops_players():
    payload = to_client_payload(_dungeon())
    assert [e["id"] for e in payload["entities"]] == ["m1"]
    assert payload["meta"] == {"id": "d1", "level": 1, "seed": "abc"}
    assert set(payload) == {"grid", "rooms", "features", "entities", "meta"}


def test_rect_helpers():
    r = Rect(2, 3, 3, 2)
    assert list(r.cells()) == [(2, 3), (3, 3), (4, 3), (2, 4), (3, 4), (4, 4)]
    assert r.center == Vec2(3, 4)


def test_map_row_round_trip():
    g = Grid(2, 1, [["room", "exit"]])
    row = to_map_row("m1", "Test map", g, custom_textures=[{"id": "t1"}])
    assert row.created_at.endswith("Z")
    client = from_map_row(row)
    assert client == {
        "id": "m1",
        "name": "Test map",
        "width": 2,
        "height": 1,
        "tiles": [["room", "exit"]],
        "customTextures": [{"id": "t1"}],
    }
    # the row owns its own copy of the tiles
    g.tiles[0][0] = "wall"
    assert row.tiles[0][0] == "room"


def test_wizardry_sample_map_shape():
    row = wizardry_floor_1()
    assert (row.width, row.height) == (20, 20)
    g = row.grid
    assert g.is_rectangular()
    assert all(g.tile_at(x, 0) == "wall" for x in range(20))
    assert g.tile_at(10, 3) == "floor"  # opening in the central cross
    assert all(g.tile_at(x, 9) == "floor" for x in range(1, 19))
    assert check_playable(g)[0]


def test_default_map_is_named_sample():
    row = default_map()
    assert row.id == "local-default"
    assert row.name == "Wizardry Floor 1 (sample)"
