"""Canonical in-memory tile grid.

Row-major: ``tiles[y][x]``. Out-of-bounds reads resolve to ``wall`` so
consumers (movement, rendering, flood fills) never index outside the grid.
Writes are bounds-checked and raise, since a bad write is an authoring bug.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, NamedTuple, Optional, Tuple

from .tiles import WALL, is_walkable

NEIGHBORS_4 = ((-1, 0), (1, 0), (0, -1), (0, 1))


class Vec2(NamedTuple):
    x: int
    y: int

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}


@dataclass
class Grid:
    width: int
    height: int
    tiles: List[List[str]] = field(default_factory=list)

    @classmethod
    def filled(cls, width: int, height: int, kind: str = WALL) -> "Grid":
        return cls(width, height, [[kind for _ in range(width)] for _ in range(height)])

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def tile_at(self, x: int, y: int) -> str:
        """Tile kind at (x, y); ``wall`` when out of bounds or the row is short."""
        if not self.in_bounds(x, y):
            return WALL
        row = self.tiles[y] if y < len(self.tiles) else ()
        return row[x] if x < len(row) else WALL

    def set_tile(self, x: int, y: int, kind: str) -> None:
        if not self.in_bounds(x, y):
            raise IndexError(f"Coordinates out of bounds: ({x}, {y}) for grid {self.width}x{self.height}")
        self.tiles[y][x] = kind

    def is_rectangular(self) -> bool:
        """True when there are ``height`` rows of exactly ``width`` entries each."""
        return len(self.tiles) == self.height and all(len(row) == self.width for row in self.tiles)

    def cells(self) -> Iterator[Tuple[int, int, str]]:
        for y, row in enumerate(self.tiles):
            for x, kind in enumerate(row):
                yield x, y, kind

    def neighbors(self, x: int, y: int) -> Iterator[Tuple[int, int, str]]:
        for dx, dy in NEIGHBORS_4:
            nx, ny = x + dx, y + dy
            if self.in_bounds(nx, ny):
                yield nx, ny, self.tiles[ny][nx]

    def count(self, kind: str) -> int:
        return sum(row.count(kind) for row in self.tiles)

    def count_walkable(self) -> int:
        return sum(1 for _x, _y, kind in self.cells() if is_walkable(kind))

    def first_walkable(self) -> Optional[Vec2]:
        for x, y, kind in self.cells():
            if is_walkable(kind):
                return Vec2(x, y)
        return None

    def copy(self) -> "Grid":
        return Grid(self.width, self.height, [list(row) for row in self.tiles])

    def to_dict(self) -> dict:
        return {"width": self.width, "height": self.height, "tiles": [list(row) for row in self.tiles]}


def tile_at(grid: Grid, x: int, y: int) -> str:
    return grid.tile_at(x, y)


__all__ = ["Grid", "Vec2", "NEIGHBORS_4", "tile_at"]
