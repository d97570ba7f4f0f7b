"""Playability checks for generated and loaded maps.

A map is only handed to a player once it has at least ``min_walkable``
walkable tiles (``CRYPTGEN_MIN_WALKABLE``, default 20). The generator does
not guarantee connectivity, so callers that need it use :func:`reachable_from` /
:func:`path_exists` (plain 4-neighbour BFS over :func:`cryptgen.dungeon.tiles.is_walkable`).
"""

from __future__ import annotations

from collections import deque
from typing import Any, Dict, Optional, Set, Tuple

from cryptgen.config import GenerationConfig
from cryptgen.logging_utils import get_logger

from .grid import Grid, Vec2
from .legacy import convert_generated_payload
from .models import MapRow
from .sample_maps import default_map
from .tiles import is_walkable

_log = get_logger("playability")

Coord2D = Tuple[int, int]


def count_walkable(grid: Grid) -> int:
    return grid.count_walkable()


def first_walkable(grid: Grid) -> Optional[Vec2]:
    """Spawn point: first walkable tile in row-major order."""
    return grid.first_walkable()


def check_playable(grid: Grid, minimum: Optional[int] = None) -> Tuple[bool, Dict[str, Any]]:
    if minimum is None:
        minimum = GenerationConfig.from_env().min_walkable
    walkable = count_walkable(grid)
    if walkable < minimum:
        return False, {
            "error": "insufficient walkable tiles",
            "code": "connectivity",
            "walkable": walkable,
            "minimum": minimum,
        }
    return True, {"walkable": walkable, "minimum": minimum, "spawn": first_walkable(grid)}


def reachable_from(grid: Grid, start: Coord2D) -> Set[Coord2D]:
    sx, sy = start
    if not grid.in_bounds(sx, sy) or not is_walkable(grid.tile_at(sx, sy)):
        return set()
    visited = {(sx, sy)}
    q = deque([(sx, sy)])
    while q:
        cx, cy = q.popleft()
        for nx, ny, kind in grid.neighbors(cx, cy):
            if (nx, ny) not in visited and is_walkable(kind):
                visited.add((nx, ny))
                q.append((nx, ny))
    return visited


def path_exists(grid: Grid, a: Coord2D, b: Coord2D) -> bool:
    return tuple(b) in reachable_from(grid, a)


def load_playable_map(payload: Any, minimum: Optional[int] = None) -> Tuple[MapRow, Optional[Dict[str, Any]]]:
    """Convert ``payload`` and return ``(row, None)``, or ``(sample_row, reason)`` when it is unusable."""
    row = convert_generated_payload(payload)
    ok, info = check_playable(row.grid, minimum)
    if ok:
        return row, None
    _log.warn(event="map_rejected", id=row.id, walkable=info["walkable"], minimum=info["minimum"])
    return default_map(), info


__all__ = [
    "count_walkable",
    "first_walkable",
    "check_playable",
    "reachable_from",
    "path_exists",
    "load_playable_map",
]
