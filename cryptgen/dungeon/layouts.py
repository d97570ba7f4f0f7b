"""Fixed room-and-corridor layout.

The older dungeon service answered lookups it could not find in storage with
a layout built from five fixed rooms, three fixed corridors, an entrance in
the top-left and an exit in the bottom-right, plus a handful of treasure and
trap tiles placed by an :class:`~cryptgen.dungeon.rng.LcgRng`. Saved rows and
bot messages still reference such dungeons by their legacy identifier, so the
layout is reproduced here exactly.

Output uses the gameplay tile vocabulary (``room``, ``corridor``, ...);
:func:`layout_to_dungeon` converts it to a canonical :class:`Dungeon`.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from cryptgen.config import DEFAULT_TTL_SECONDS
from cryptgen.logging_utils import get_logger

from . import tiles as T
from .grid import Grid, Vec2
from .legacy import gameplay_to_schema, parse_legacy_ref
from .models import Dungeon, Feature, Rect, Room, utc_now_iso
from .rng import GenerationPrecondition, LcgRng

_log = get_logger("layouts")

LAYOUT_WIDTH = 20
LAYOUT_HEIGHT = 15

THEMES = ("dungeon", "cave", "ruins", "crypt")

# (rect, room type); later rooms overwrite earlier ones where they overlap
FIXED_ROOMS = (
    (Rect(2, 2, 4, 3), "chamber"),
    (Rect(14, 8, 5, 4), "treasure_room"),
    (Rect(7, 11, 6, 3), "corridor"),
    (Rect(3, 8, 3, 2), "chamber"),
    (Rect(12, 3, 4, 3), "chamber"),
)

# (axis, fixed coordinate, start, end inclusive)
FIXED_CORRIDORS = (
    ("h", 9, 6, 14),
    ("v", 9, 5, 11),
    ("h", 4, 3, 6),
)

DESCRIPTIONS = {
    T.ENTRANCE: "The entrance to this dungeon level",
    T.EXIT: "The exit to the next level",
    T.TREASURE: "A glinting treasure chest",
    T.TRAP: "Something seems off about this floor...",
}


@dataclass
class FixedLayout:
    seed: int
    grid: Grid
    rooms: List[Room] = field(default_factory=list)
    features: List[Feature] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    entrance: Optional[Vec2] = None
    exit: Optional[Vec2] = None

    @property
    def records(self) -> List[Dict[str, Any]]:
        """Flat ``{x, y, type, walkable, description?}`` list in row-major order."""
        out = []
        for x, y, kind in self.grid.cells():
            rec: Dict[str, Any] = {"x": x, "y": y, "type": kind, "walkable": T.is_walkable(kind)}
            if kind in DESCRIPTIONS:
                rec["description"] = DESCRIPTIONS[kind]
            out.append(rec)
        return out

    def to_dict(self) -> dict:
        return {
            "width": self.grid.width,
            "height": self.grid.height,
            "tiles": self.records,
            "rooms": [
                {"x": r.rect.x, "y": r.rect.y, "width": r.rect.w, "height": r.rect.h, "type": (r.tags or ["room"])[0]}
                for r in self.rooms
            ],
            "metadata": dict(self.metadata),
        }


def _carve(grid: Grid, x: int, y: int, kind: str) -> None:
    if grid.in_bounds(x, y):
        grid.tiles[y][x] = kind


def generate_room_corridor(width: int = LAYOUT_WIDTH, height: int = LAYOUT_HEIGHT, seed: int = 1) -> FixedLayout:
    for name, value in (("width", width), ("height", height)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise GenerationPrecondition(name, f"{name} must be an integer", "type")
        if value < 3:
            raise GenerationPrecondition(name, f"{name} must be >= 3", "min")
    if isinstance(seed, bool) or not isinstance(seed, int):
        raise GenerationPrecondition("seed", "seed must be an integer", "type")
    if seed < 0:
        raise GenerationPrecondition("seed", "seed must be >= 0", "min")

    rng = LcgRng(seed)
    grid = Grid.filled(width, height, T.WALL)
    rooms = []
    for idx, (rect, room_type) in enumerate(FIXED_ROOMS, start=1):
        for x, y in rect.cells():
            _carve(grid, x, y, T.ROOM)
        if grid.in_bounds(rect.x, rect.y):
            rooms.append(Room(f"room-{idx}", rect, [room_type]))
    for axis, fixed, start, end in FIXED_CORRIDORS:
        for v in range(start, end + 1):
            if axis == "h":
                _carve(grid, v, fixed, T.CORRIDOR)
            else:
                _carve(grid, fixed, v, T.CORRIDOR)

    entrance = Vec2(1, 1)
    exit_ = Vec2(width - 2, height - 2)
    grid.tiles[entrance.y][entrance.x] = T.ENTRANCE
    grid.tiles[exit_.y][exit_.x] = T.EXIT

    features = []
    # One placement attempt per feature; a draw landing off room/corridor is skipped.
    for _ in range(3 + seed % 4):
        x = int(rng() * (width - 2)) + 1
        y = int(rng() * (height - 2)) + 1
        if grid.tiles[y][x] not in (T.ROOM, T.CORRIDOR):
            continue
        kind = T.TREASURE if rng() < 0.5 else T.TRAP
        grid.tiles[y][x] = kind
        features.append(
            Feature(
                f"feat-{len(features) + 1}",
                "chest" if kind == T.TREASURE else "trap",
                Vec2(x, y),
                {"description": DESCRIPTIONS[kind]},
                True if kind == T.TRAP else None,
            )
        )

    metadata = {
        "difficulty": min(seed, 10),
        "theme": THEMES[seed % len(THEMES)],
        "generatedAt": utc_now_iso(),
    }
    _log.debug(event="layout_generated", seed=seed, size=f"{width}x{height}", features=len(features))
    return FixedLayout(seed, grid, rooms, features, metadata, entrance, exit_)


def layout_to_dungeon(
    layout: FixedLayout,
    *,
    dungeon_id: Optional[str] = None,
    level: int = 1,
    ttl_seconds: int = DEFAULT_TTL_SECONDS,
) -> Dungeon:
    return Dungeon(
        id=dungeon_id or str(uuid.uuid4()),
        seed=str(layout.seed),
        level=level,
        created_at=utc_now_iso(),
        ttl_seconds=ttl_seconds,
        grid=gameplay_to_schema(layout.grid),
        rooms=list(layout.rooms),
        features=list(layout.features),
        entrances=[layout.entrance] if layout.entrance else [],
        exits=[layout.exit] if layout.exit else [],
    )


def layout_for_ref(ref: str) -> Optional[Dict[str, Any]]:
    """Rebuild the fallback payload for a legacy identifier, or ``None`` when it cannot be parsed."""
    parsed = parse_legacy_ref(ref)
    if parsed is None:
        return None
    layout = generate_room_corridor(LAYOUT_WIDTH, LAYOUT_HEIGHT, parsed.seed)
    payload = layout.to_dict()
    payload.update(
        {
            "refId": ref,
            "guild": parsed.guild,
            "dungeonNumber": parsed.dungeon_number,
            "level": parsed.level,
        }
    )
    return payload


__all__ = [
    "LAYOUT_WIDTH",
    "LAYOUT_HEIGHT",
    "THEMES",
    "FIXED_ROOMS",
    "FIXED_CORRIDORS",
    "FixedLayout",
    "generate_room_corridor",
    "layout_to_dungeon",
    "layout_for_ref",
]
