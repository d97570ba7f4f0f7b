"""Tile semantics table shared by generation, movement checks and rendering.

Two overlapping vocabularies are in use:

* the canonical schema kinds stored in a validated ``Dungeon`` grid
  (``wall``, ``floor``, ``door``, ``stairs_up``, ``stairs_down``, ``water``,
  ``lava``, ``void``)
* the gameplay kinds used by the fixed room/corridor layout, saved map rows
  and the renderers (``room``, ``corridor``, ``entrance``, ``exit``,
  ``treasure``, ``trap``, ``secret``, ``tree`` plus the shared ones)

Every kind in either vocabulary resolves to exactly one ``TileProperties``.
Lookups are total: an unknown kind resolves to a default record (``floor``
unless the caller asks for ``wall``) and the fallback is logged. Bump
``TILE_TABLE_VERSION`` whenever a record changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable

from cryptgen.logging_utils import get_logger

_log = get_logger("tiles")

TILE_TABLE_VERSION = 1

# Canonical schema kinds
WALL = "wall"
FLOOR = "floor"
DOOR = "door"
STAIRS_UP = "stairs_up"
STAIRS_DOWN = "stairs_down"
WATER = "water"
LAVA = "lava"
VOID = "void"

# Gameplay kinds
ROOM = "room"
CORRIDOR = "corridor"
ENTRANCE = "entrance"
EXIT = "exit"
TREASURE = "treasure"
TRAP = "trap"
SECRET = "secret"
TREE = "tree"

SCHEMA_TILES = (WALL, FLOOR, DOOR, STAIRS_UP, STAIRS_DOWN, WATER, LAVA, VOID)
GAMEPLAY_TILES = (ROOM, CORRIDOR, ENTRANCE, EXIT, TREASURE, TRAP, SECRET, TREE, WATER, DOOR, WALL, FLOOR)

CATEGORIES = ("floor", "wall", "object")
MOVEMENT_REQUIREMENTS = ("none", "fly", "swim", "climb", "teleport")


@dataclass(frozen=True)
class TileProperties:
    id: str
    name: str
    description: str
    category: str
    walkable: bool
    movement_requirement: str = "none"
    blocks_vision: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "walkable": self.walkable,
            "movementRequirement": self.movement_requirement,
            "blocksVision": self.blocks_vision,
        }


def _props(id, name, description, category, walkable, movement="none", blocks_vision=False):
    return TileProperties(id, name, description, category, walkable, movement, blocks_vision)


TILE_PROPERTIES: Dict[str, TileProperties] = {
    p.id: p
    for p in (
        _props(FLOOR, "Stone Floor", "A solid stone floor worn smooth by countless footsteps.", "floor", True),
        _props(WALL, "Stone Wall", "A sturdy stone wall that blocks your path.", "wall", False, blocks_vision=True),
        _props(
            WATER,
            "Deep Water",
            "Deep, clear water that requires special abilities to cross safely.",
            "floor",
            False,
            movement="fly",
        ),
        _props(
            TREE,
            "Ancient Tree",
            "A massive ancient tree with thick bark and sprawling branches.",
            "object",
            False,
            blocks_vision=True,
        ),
        _props(DOOR, "Wooden Door", "A sturdy wooden door that can be opened or closed.", "wall", True),
        _props(
            TREASURE,
            "Treasure Chest",
            "A gleaming treasure chest filled with gold and precious items.",
            "object",
            True,
        ),
        _props(
            CORRIDOR,
            "Dungeon Corridor",
            "A narrow stone corridor connecting different areas of the dungeon.",
            "floor",
            True,
        ),
        _props(ROOM, "Dungeon Room", "A spacious room within the dungeon, possibly containing secrets.", "floor", True),
        _props(ENTRANCE, "Dungeon Entrance", "The entrance to this level of the dungeon.", "floor", True),
        _props(EXIT, "Dungeon Exit", "The exit leading to the next level or out of the dungeon.", "floor", True),
        _props(TRAP, "Hidden Trap", "A dangerous trap hidden in the floor. Proceed with caution!", "floor", True),
        _props(
            SECRET,
            "Secret Area",
            "A hidden area containing valuable treasures or important items.",
            "floor",
            True,
        ),
        _props(STAIRS_UP, "Stairs Up", "A worn stairwell climbing to the level above.", "floor", True),
        _props(STAIRS_DOWN, "Stairs Down", "A dark stairwell descending to the level below.", "floor", True),
        _props(LAVA, "Molten Lava", "A river of molten rock. Only a flier could pass over it.", "floor", False, movement="fly"),
        _props(VOID, "Void", "Empty space outside the carved dungeon.", "wall", False, blocks_vision=True),
    )
}


def lookup(kind: str, default: str = FLOOR) -> TileProperties:
    """Return the properties for ``kind``; unknown kinds resolve to ``default``.

    Never raises. ``default`` itself must be a known kind.
    """
    props = TILE_PROPERTIES.get(kind) if isinstance(kind, str) else None
    if props is not None:
        return props
    _log.debug(event="tile_fallback", kind=repr(kind), default=default)
    return TILE_PROPERTIES[default]


def is_walkable(kind: str, default: str = FLOOR) -> bool:
    return lookup(kind, default).walkable


def blocks_vision(kind: str, default: str = FLOOR) -> bool:
    return lookup(kind, default).blocks_vision


def is_opaque(kind: str) -> bool:
    """Renderer predicate: solid for the first-person view and minimap walls."""
    props = lookup(kind)
    return not props.walkable or props.blocks_vision or props.category == "wall"


def can_enter(kind: str, abilities: Iterable[str] = ()) -> bool:
    """Walkable with no special requirement, or the requirement is one of ``abilities``."""
    props = lookup(kind)
    if not props.walkable:
        return False
    if props.movement_requirement == "none":
        return True
    return props.movement_requirement in frozenset(abilities)


def walkable_kinds() -> FrozenSet[str]:
    return frozenset(k for k, p in TILE_PROPERTIES.items() if p.walkable)


__all__ = [
    "TILE_TABLE_VERSION",
    "TileProperties",
    "TILE_PROPERTIES",
    "SCHEMA_TILES",
    "GAMEPLAY_TILES",
    "CATEGORIES",
    "MOVEMENT_REQUIREMENTS",
    "lookup",
    "is_walkable",
    "blocks_vision",
    "is_opaque",
    "can_enter",
    "walkable_kinds",
    "WALL",
    "FLOOR",
    "DOOR",
    "STAIRS_UP",
    "STAIRS_DOWN",
    "WATER",
    "LAVA",
    "VOID",
    "ROOM",
    "CORRIDOR",
    "ENTRANCE",
    "EXIT",
    "TREASURE",
    "TRAP",
    "SECRET",
    "TREE",
]
