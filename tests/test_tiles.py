from cryptgen.dungeon import tiles as T


def test_every_kind_in_use_resolves():
    for kind in set(T.SCHEMA_TILES) | set(T.GAMEPLAY_TILES):
        assert kind in T.TILE_PROPERTIES, f"{kind} has no properties record"
        props = T.TILE_PROPERTIES[kind]
        assert props.id == kind
        assert props.category in T.CATEGORIES
        assert props.movement_requirement in T.MOVEMENT_REQUIREMENTS


def test_unknown_kind_falls_back_to_requested_default():
    assert T.lookup("definitely-not-a-tile").id == "floor"
    assert T.lookup("definitely-not-a-tile", default="wall").id == "wall"
    assert T.is_walkable("definitely-not-a-tile") is True
    assert T.is_walkable("definitely-not-a-tile", default="wall") is False


def test_non_string_kinds_fall_back_instead_of_raising():
    assert T.lookup(["room"]).id == "floor"
    assert T.lookup({"k": 1}, default="wall").id == "wall"
    assert T.lookup(None).id == "floor"
    assert T.can_enter(["room"]) is True
    assert T.blocks_vision(["wall"]) is False


def test_walkability_of_core_kinds():
    assert T.is_walkable("floor")
    assert T.is_walkable("door")
    assert T.is_walkable("stairs_up") and T.is_walkable("stairs_down")
    assert not T.is_walkable("wall")
    assert not T.is_walkable("void")
    assert not T.is_walkable("water")
    assert not T.is_walkable("lava")
    assert not T.is_walkable("tree")


def test_gameplay_room_kinds_are_walkable():
    # Fixed-layout room cells may be replaced by treasure/trap; they must stay walkable.
    for kind in ("room", "corridor", "entrance", "exit", "treasure", "trap", "secret"):
        assert T.is_walkable(kind), kind


def test_vision_blocking():
    assert T.blocks_vision("wall")
    assert T.blocks_vision("void")
    assert T.blocks_vision("tree")
    assert not T.blocks_vision("floor")
    assert not T.blocks_vision("door")


def test_can_enter_respects_walkability_and_requirement():
    assert T.can_enter("floor")
    assert T.can_enter("floor", {"fly"})
    # water carries a fly requirement but is not walkable, so it stays closed
    assert T.TILE_PROPERTIES["water"].movement_requirement == "fly"
    assert not T.can_enter("water", {"fly"})
    assert not T.can_enter("wall", {"fly", "climb"})


def test_is_opaque_for_renderer():
    assert T.is_opaque("wall")
    assert T.is_opaque("door")  # wall category
    assert T.is_opaque("water")
    assert not T.is_opaque("floor")


def test_lookup_is_stable_across_calls():
    for kind in T.TILE_PROPERTIES:
        first = T.is_walkable(kind)
        assert all(T.is_walkable(kind) == first for _ in range(5))


def test_to_dict_uses_camel_case():
    d = T.lookup("water").to_dict()
    assert d["movementRequirement"] == "fly"
    assert d["blocksVision"] is False
    assert d["walkable"] is False
    assert set(d) == {"id", "name", "description", "category", "walkable", "movementRequirement", "blocksVision"}


def test_walkable_kinds_matches_table():
    kinds = T.walkable_kinds()
    assert "floor" in kinds and "door" in kinds
    assert "wall" not in kinds and "water" not in kinds
