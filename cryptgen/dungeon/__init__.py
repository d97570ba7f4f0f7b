"""Public dungeon package interface.

Generators, schema validation, legacy adapters and grid consumers, all
sharing the tile semantics table in :mod:`cryptgen.dungeon.tiles`.
"""

from .generator import find_entrance, find_exit, generate_dungeon, generate_grid, try_generate
from .grid import Grid, Vec2, tile_at
from .layouts import FixedLayout, generate_room_corridor, layout_for_ref, layout_to_dungeon
from .legacy import (
    DungeonRef,
    LegacyRef,
    check_endpoints,
    convert_generated_payload,
    dungeon_from_parts,
    from_legacy,
    grid_from_char_map,
    grid_from_legacy,
    grid_from_tile_records,
    parse_legacy_ref,
)
from .models import Dungeon, Entity, Feature, MapRow, Rect, Room, from_map_row, to_client_payload, to_map_row
from .movement import attempt_move, can_move_to, describe_cell_and_exits
from .playability import check_playable, load_playable_map, path_exists, reachable_from
from .render import render_ascii, render_dungeon
from .rng import GenerationPrecondition, LcgRng, SeededRng, make_rng, seed_to_int
from .sample_maps import default_map, wizardry_floor_1
from .schema import ValidationError, load_dungeon_json, parse_dungeon, validate_dungeon, validate_grid
from .tiles import TILE_PROPERTIES, TileProperties, blocks_vision, can_enter, is_walkable, lookup

__all__ = [
    "Dungeon",
    "DungeonRef",
    "Entity",
    "Feature",
    "FixedLayout",
    "GenerationPrecondition",
    "Grid",
    "LcgRng",
    "LegacyRef",
    "MapRow",
    "Rect",
    "Room",
    "SeededRng",
    "TILE_PROPERTIES",
    "TileProperties",
    "ValidationError",
    "Vec2",
    "attempt_move",
    "blocks_vision",
    "can_enter",
    "can_move_to",
    "check_endpoints",
    "check_playable",
    "convert_generated_payload",
    "default_map",
    "describe_cell_and_exits",
    "dungeon_from_parts",
    "find_entrance",
    "find_exit",
    "from_legacy",
    "from_map_row",
    "generate_dungeon",
    "generate_grid",
    "generate_room_corridor",
    "grid_from_char_map",
    "grid_from_legacy",
    "grid_from_tile_records",
    "is_walkable",
    "layout_for_ref",
    "layout_to_dungeon",
    "load_dungeon_json",
    "load_playable_map",
    "lookup",
    "make_rng",
    "parse_dungeon",
    "parse_legacy_ref",
    "path_exists",
    "reachable_from",
    "render_ascii",
    "render_dungeon",
    "seed_to_int",
    "tile_at",
    "to_client_payload",
    "to_map_row",
    "try_generate",
    "validate_dungeon",
    "validate_grid",
    "wizardry_floor_1",
]
