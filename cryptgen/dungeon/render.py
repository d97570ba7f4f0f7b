"""ASCII rendering of grids and dungeons for debugging and the CLI."""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Tuple

from . import tiles as T
from .grid import Grid
from .models import Dungeon

# Mapping from tile kind to ASCII character.
# Entrance and exit use the same chars as the character-map legend.
TILE_TO_ASCII: Dict[str, str] = {
    T.WALL: "#",
    T.FLOOR: ".",
    T.DOOR: "+",
    T.STAIRS_UP: "<",
    T.STAIRS_DOWN: ">",
    T.WATER: "~",
    T.LAVA: "%",
    T.VOID: " ",
    T.ROOM: ".",
    T.CORRIDOR: ",",
    T.ENTRANCE: "^",
    T.EXIT: "V",
    T.TREASURE: "$",
    T.TRAP: "!",
    T.SECRET: "?",
    T.TREE: "T",
}

ENTRANCE_MARK = "^"
EXIT_MARK = "V"


def glyph_for(kind: str) -> str:
    """Glyph for ``kind``; unknown kinds draw as their fallback record."""
    glyph = TILE_TO_ASCII.get(kind) if isinstance(kind, str) else None
    if glyph is None:
        glyph = TILE_TO_ASCII[T.lookup(kind).id]
    return glyph


def render_ascii(grid: Grid, *, marks: Optional[Mapping[Tuple[int, int], str]] = None) -> str:
    marks = marks or {}
    lines = []
    for y, row in enumerate(grid.tiles):
        lines.append("".join(marks.get((x, y), glyph_for(kind)) for x, kind in enumerate(row)))
    return "\n".join(lines)


def render_dungeon(dungeon: Dungeon) -> str:
    marks = {}
    for p in dungeon.entrances:
        marks[(p.x, p.y)] = ENTRANCE_MARK
    for p in dungeon.exits:
        marks[(p.x, p.y)] = EXIT_MARK
    return render_ascii(dungeon.grid, marks=marks)


def legend() -> str:
    seen = {}
    for kind, glyph in TILE_TO_ASCII.items():
        seen.setdefault(glyph, kind)
    return "\n".join(f"{glyph!r:5} {T.lookup(kind).name}" for glyph, kind in seen.items())


__all__ = ["TILE_TO_ASCII", "glyph_for", "render_ascii", "render_dungeon", "legend"]
