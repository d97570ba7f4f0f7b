"""Movement helpers for grid consumers.

Directions are ``n/s/e/w`` on the row-major grid, so north is ``y - 1``.
Out-of-bounds targets read as ``wall`` and are never enterable. When no
``abilities`` are passed, the player's come from ``CRYPTGEN_PLAYER_ABILITIES``.
"""

from __future__ import annotations

from typing import FrozenSet, Iterable, List, Optional, Tuple

from cryptgen.config import GenerationConfig

from .grid import Grid, Vec2
from .tiles import can_enter, lookup

DELTAS = {"n": (0, -1), "s": (0, 1), "e": (1, 0), "w": (-1, 0)}
CARDINAL_FULL = {"n": "north", "s": "south", "e": "east", "w": "west"}


def _resolve_abilities(abilities: Optional[Iterable[str]]) -> FrozenSet[str]:
    if abilities is None:
        return GenerationConfig.from_env().player_abilities
    return frozenset(abilities)


def can_move_to(grid: Grid, x: int, y: int, abilities: Optional[Iterable[str]] = None) -> bool:
    return can_enter(grid.tile_at(x, y), _resolve_abilities(abilities))


def attempt_move(
    grid: Grid,
    pos: Tuple[int, int],
    direction: str,
    abilities: Optional[Iterable[str]] = None,
) -> Tuple[Vec2, bool]:
    """Attempt to move in direction; returns (new_pos, moved)."""
    x, y = pos
    if direction not in DELTAS:
        return Vec2(x, y), False
    abilities = _resolve_abilities(abilities)
    dx, dy = DELTAS[direction]
    nx, ny = x + dx, y + dy
    if can_move_to(grid, nx, ny, abilities):
        return Vec2(nx, ny), True
    return Vec2(x, y), False


def normalize_position(
    grid: Grid,
    pos: Tuple[int, int],
    entrance: Optional[Tuple[int, int]],
    abilities: Optional[Iterable[str]] = None,
) -> Vec2:
    """Relocate a stale or blocked position to the entrance (or the first walkable tile)."""
    abilities = _resolve_abilities(abilities)
    x, y = pos
    if can_move_to(grid, x, y, abilities):
        return Vec2(x, y)
    if entrance is not None and can_move_to(grid, entrance[0], entrance[1], abilities):
        return Vec2(*entrance)
    spawn = grid.first_walkable()
    return spawn if spawn is not None else Vec2(x, y)


def describe_cell_and_exits(
    grid: Grid,
    x: int,
    y: int,
    abilities: Optional[Iterable[str]] = None,
) -> Tuple[str, List[str]]:
    """Return (description, exits_list) for current coordinates."""
    abilities = _resolve_abilities(abilities)
    desc = f"You are on {lookup(grid.tile_at(x, y)).name}."
    exits_map: List[str] = []
    for d, (dx, dy) in DELTAS.items():
        if can_move_to(grid, x + dx, y + dy, abilities):
            exits_map.append(d)
    if exits_map:
        desc += " Exits: " + ", ".join(CARDINAL_FULL[e].capitalize() for e in exits_map) + "."
    return desc, exits_map


__all__ = ["DELTAS", "can_move_to", "attempt_move", "normalize_position", "describe_cell_and_exits"]
