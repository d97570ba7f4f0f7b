"""Hand-built sample maps used when nothing playable is available."""

from __future__ import annotations

from typing import Iterable, Tuple

from . import tiles as T
from .grid import Grid
from .models import MapRow

DEFAULT_MAP_ID = "local-default"
WIZARDRY_NAME = "Wizardry Floor 1 (sample)"


class _Canvas:
    def __init__(self, width: int, height: int):
        self.grid = Grid.filled(width, height, T.FLOOR)

    def wall(self, x: int, y: int) -> None:
        if self.grid.in_bounds(x, y):
            self.grid.tiles[y][x] = T.WALL

    def open(self, x: int, y: int) -> None:
        if self.grid.in_bounds(x, y):
            self.grid.tiles[y][x] = T.FLOOR

    def rect_outline(self, x1: int, y1: int, x2: int, y2: int) -> None:
        for x in range(x1, x2 + 1):
            self.wall(x, y1)
            self.wall(x, y2)
        for y in range(y1, y2 + 1):
            self.wall(x1, y)
            self.wall(x2, y)

    def horizontal_run(self, x1: int, y: int, x2: int) -> None:
        for x in range(x1, x2 + 1):
            self.wall(x, y)

    def vertical_run(self, x: int, y1: int, y2: int) -> None:
        for y in range(y1, y2 + 1):
            self.wall(x, y)

    def carve_path(self, points: Iterable[Tuple[int, int]]) -> None:
        for x, y in points:
            self.open(x, y)


def wizardry_floor_1(map_id: str = "") -> MapRow:
    """20x20 four-quadrant maze split by a central cross with openings.

    Long corridors run just above and just below the horizontal wall.
    """
    w = h = 20
    c = _Canvas(w, h)
    c.rect_outline(0, 0, w - 1, h - 1)

    # Central cross
    c.vertical_run(10, 0, h - 1)
    c.horizontal_run(0, 10, w - 1)
    for x, y in ((3, 10), (9, 10), (11, 10), (16, 10), (10, 3), (10, 9), (10, 11), (10, 16)):
        c.open(x, y)

    # Upper-left: winding corridors
    c.rect_outline(1, 1, 8, 8)
    c.rect_outline(2, 2, 6, 6)
    c.carve_path([(1, 7), (3, 7), (3, 5), (5, 5), (5, 3), (7, 3), (7, 1)])

    # Upper-right: labyrinth
    c.rect_outline(11, 1, 18, 8)
    c.vertical_run(12, 1, 8)
    c.vertical_run(14, 1, 8)
    c.vertical_run(16, 1, 8)
    c.horizontal_run(12, 4, 17)
    c.horizontal_run(12, 6, 15)

    # Lower-left: U path
    c.rect_outline(1, 11, 8, 18)
    c.carve_path([(1, 18), (1, 12), (3, 12), (3, 16), (6, 16), (6, 13), (2, 13)])

    # Lower-right: loop with inner box
    c.rect_outline(11, 11, 18, 18)
    c.rect_outline(13, 13, 16, 16)
    c.open(15, 13)
    c.open(13, 15)

    # Long corridors either side of the horizontal wall
    for x in range(1, 19):
        c.grid.tiles[9][x] = T.FLOOR
        c.grid.tiles[11][x] = T.FLOOR

    return MapRow(map_id, WIZARDRY_NAME, w, h, c.grid.tiles)


def default_map() -> MapRow:
    """Last-resort map handed out when a generated or stored map is unusable."""
    return wizardry_floor_1(DEFAULT_MAP_ID)


__all__ = ["wizardry_floor_1", "default_map", "DEFAULT_MAP_ID"]
