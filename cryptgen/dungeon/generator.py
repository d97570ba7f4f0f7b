"""Seeded random-walk grid generator.

Generation runs as ordered phases over a single ``SeededRng``:

1. fill the grid with ``wall``
2. carve: a cursor starts at the centre and takes ``width * height * step_factor``
   steps, marking every visited cell ``floor``; the cursor never enters the
   outer border ring
3. doors: every interior wall with exactly two floor neighbours draws once from
   the stream and becomes a ``door`` when the draw is under ``door_chance``
4. endpoints: entrance is the first walkable cell in row-major order, exit the
   first walkable cell in reverse order

Same (width, height, seed, door_chance, step_factor) always yields the same
grid. Connectivity beyond what the walk itself guarantees is not enforced;
see :mod:`cryptgen.dungeon.playability`.
"""

from __future__ import annotations

import time
import uuid
from typing import Any, Dict, Optional, Tuple

from cryptgen.config import GenerationConfig
from cryptgen.logging_utils import get_logger

from . import tiles as T
from .grid import Grid, Vec2
from .legacy import dungeon_from_parts
from .models import Dungeon
from .rng import GenerationPrecondition, SeededRng, normalize_seed

_log = get_logger("generator")

MIN_DIMENSION = 3


def _check_dimension(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise GenerationPrecondition(name, f"{name} must be an integer", "type")
    if value < MIN_DIMENSION:
        raise GenerationPrecondition(name, f"{name} must be >= {MIN_DIMENSION}", "min")


def carve_random_walk(grid: Grid, rng: SeededRng, steps: int) -> None:
    x, y = grid.width // 2, grid.height // 2
    grid.tiles[y][x] = T.FLOOR
    # A blocked direction falls through to the next test rather than standing still.
    for _ in range(steps):
        r = rng.next_float()
        if r < 0.25 and x > 1:
            x -= 1
        elif r < 0.5 and x < grid.width - 2:
            x += 1
        elif r < 0.75 and y > 1:
            y -= 1
        elif y < grid.height - 2:
            y += 1
        grid.tiles[y][x] = T.FLOOR


def sprinkle_doors(grid: Grid, rng: SeededRng, chance: float) -> int:
    """Flip chokepoint walls to doors; returns the number placed.

    The stream is consumed only for qualifying walls, in row-major order, and
    neighbours are read from the grid as it is being updated.
    """
    placed = 0
    for y in range(1, grid.height - 1):
        for x in range(1, grid.width - 1):
            if grid.tiles[y][x] != T.WALL:
                continue
            floors = sum(1 for _nx, _ny, kind in grid.neighbors(x, y) if kind == T.FLOOR)
            if floors == 2 and rng.next_float() < chance:
                grid.tiles[y][x] = T.DOOR
                placed += 1
    return placed


def find_entrance(grid: Grid) -> Optional[Vec2]:
    for x, y, kind in grid.cells():
        if kind != T.WALL and T.is_walkable(kind):
            return Vec2(x, y)
    return None


def find_exit(grid: Grid) -> Optional[Vec2]:
    for y in range(len(grid.tiles) - 1, -1, -1):
        row = grid.tiles[y]
        for x in range(len(row) - 1, -1, -1):
            kind = row[x]
            if kind != T.WALL and T.is_walkable(kind):
                return Vec2(x, y)
    return None


def generate_grid(
    width: int,
    height: int,
    seed,
    *,
    door_chance: float = 0.03,
    step_factor: int = 4,
) -> Grid:
    """Build a ``width`` x ``height`` grid from ``seed``.

    Raises :class:`GenerationPrecondition` for dimensions under 3 or a
    malformed seed.
    """
    _check_dimension("width", width)
    _check_dimension("height", height)
    rng = SeededRng(seed)
    grid = Grid.filled(width, height, T.WALL)
    carve_random_walk(grid, rng, width * height * step_factor)
    sprinkle_doors(grid, rng, door_chance)
    return grid


def generate_dungeon(
    width: Optional[int] = None,
    height: Optional[int] = None,
    seed=None,
    *,
    level: Optional[int] = None,
    ttl_seconds: Optional[int] = None,
    dungeon_id: Optional[str] = None,
    config: Optional[GenerationConfig] = None,
) -> Dungeon:
    """Generate a complete :class:`Dungeon`.

    Explicit arguments win over ``config``; ``config`` defaults to
    :meth:`GenerationConfig.from_env`. Without a seed the current millisecond
    timestamp is used, so unseeded runs differ.
    """
    cfg = config or GenerationConfig.from_env()
    width = cfg.width if width is None else width
    height = cfg.height if height is None else height
    level = cfg.level if level is None else level
    ttl_seconds = cfg.ttl_seconds if ttl_seconds is None else ttl_seconds
    if seed is None:
        seed = cfg.seed if cfg.seed is not None else str(int(time.time() * 1000))
    seed = normalize_seed(seed)

    start = time.perf_counter()
    grid = generate_grid(width, height, seed, door_chance=cfg.door_chance, step_factor=cfg.step_factor)
    dungeon = dungeon_from_parts(dungeon_id or str(uuid.uuid4()), seed, level, grid, ttl_seconds)
    entrance = find_entrance(grid)
    exit_ = find_exit(grid)
    dungeon.entrances = [entrance] if entrance is not None else []
    dungeon.exits = [exit_] if exit_ is not None else []
    elapsed_ms = int((time.perf_counter() - start) * 1000)
    _log.info(
        event="dungeon_generated",
        id=dungeon.id,
        seed=seed,
        size=f"{width}x{height}",
        walkable=grid.count_walkable(),
        doors=grid.count(T.DOOR),
        ms=elapsed_ms,
    )
    return dungeon


def try_generate(*args, **kwargs) -> Tuple[bool, Any]:
    """Like :func:`generate_dungeon` but returns ``(False, error_dict)`` instead of raising."""
    try:
        return True, generate_dungeon(*args, **kwargs)
    except GenerationPrecondition as exc:
        _log.warn(event="generation_rejected", field=exc.field, code=exc.code, error=exc.message)
        return False, exc.to_dict()


def generation_summary(dungeon: Dungeon) -> Dict[str, Any]:
    """Small stats dict used by the CLI and the seed diagnostics script."""
    grid = dungeon.grid
    return {
        "id": dungeon.id,
        "seed": dungeon.seed,
        "width": grid.width,
        "height": grid.height,
        "walkable": grid.count_walkable(),
        "floors": grid.count(T.FLOOR),
        "doors": grid.count(T.DOOR),
        "entrance": dungeon.entrances[0].to_dict() if dungeon.entrances else None,
        "exit": dungeon.exits[0].to_dict() if dungeon.exits else None,
    }


__all__ = [
    "MIN_DIMENSION",
    "carve_random_walk",
    "sprinkle_doors",
    "find_entrance",
    "find_exit",
    "generate_grid",
    "generate_dungeon",
    "try_generate",
    "generation_summary",
]
