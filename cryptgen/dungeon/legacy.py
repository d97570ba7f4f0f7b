"""Conversions from older dungeon representations into the canonical grid.

Three legacy shapes are still produced by older generators and saved rows:

* a 2D token grid (``[["wall", "room", ...], ...]``) -> :func:`grid_from_legacy`
* a flat list of ``{x, y, type}`` tile records -> :func:`grid_from_tile_records`
* a newline-delimited character map -> :func:`grid_from_char_map`

:func:`convert_generated_payload` dispatches on the payload shape so callers
never branch on it themselves. Unknown tokens fall back to a default kind and
the fallback is logged, never raised.

The module also keeps the best-effort parser for hyphen-delimited legacy
dungeon identifiers alongside :class:`DungeonRef`, the structured identifier
that replaces them.
"""

from __future__ import annotations

import math
import re
import time
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from cryptgen.config import DEFAULT_TTL_SECONDS
from cryptgen.logging_utils import get_logger

from . import tiles as T
from .grid import Grid, Vec2
from .models import Dungeon, MapRow, utc_now_iso

_log = get_logger("legacy")

# Largest side accepted from a generator payload before falling back to the default size
MAX_PAYLOAD_DIMENSION = 1000

TOKEN_TO_TILE = {
    "wall": T.WALL,
    "room": T.FLOOR,
    "path": T.FLOOR,
    "door": T.DOOR,
    "water": T.WATER,
    "void": T.VOID,
}

RECORD_TYPE_TO_TILE = {
    "wall": T.WALL,
    "room": T.FLOOR,
    "corridor": T.FLOOR,
    "entrance": T.ENTRANCE,
    "exit": T.EXIT,
    "treasure": T.TREASURE,
    "trap": T.TRAP,
    "secret": T.SECRET,
    "door": T.DOOR,
    "water": T.WATER,
    "tree": T.TREE,
}

CHAR_LEGEND = {
    " ": T.WALL,  # void space = stone
    "#": T.WALL,
    ",": T.FLOOR,
    "^": T.ENTRANCE,  # ladder / stairwell up
    "V": T.EXIT,  # ladder / stairwell down
}

# Gameplay vocabulary -> canonical schema vocabulary
GAMEPLAY_TO_SCHEMA = {
    T.ROOM: T.FLOOR,
    T.CORRIDOR: T.FLOOR,
    T.ENTRANCE: T.FLOOR,
    T.EXIT: T.FLOOR,
    T.TREASURE: T.FLOOR,
    T.TRAP: T.FLOOR,
    T.SECRET: T.FLOOR,
    T.TREE: T.WALL,
}


def _report_fallbacks(event: str, unknown: Iterable[str], default: str) -> None:
    """``unknown`` holds repr() strings so unhashable junk can be collected too."""
    unknown = sorted(set(unknown))
    if unknown:
        _log.warn(event=event, tokens=",".join(unknown), default=default)


def grid_from_legacy(tokens: List[List[str]]) -> Grid:
    """Map a legacy token grid onto schema tiles, preserving its dimensions.

    ``width`` is taken from the first row; ragged rows are carried through
    unchanged and surface later as a shape error in the validator.
    """
    height = len(tokens)
    width = len(tokens[0]) if height else 0
    unknown = set()
    rows = []
    for row in tokens:
        out = []
        for tok in row:
            kind = TOKEN_TO_TILE.get(tok) if isinstance(tok, str) else None
            if kind is None:
                unknown.add(repr(tok))
                kind = T.VOID
            out.append(kind)
        rows.append(out)
    _report_fallbacks("legacy_token_fallback", unknown, T.VOID)
    return Grid(width, height, rows)


def dungeon_from_parts(
    id: str,
    seed: str,
    level: int,
    grid: Grid,
    ttl_seconds: Optional[int] = None,
) -> Dungeon:
    """Wrap a grid in a minimal dungeon: no rooms/features/entities, corner entrance and exit.

    The corner defaults are not checked against the grid here; run
    :func:`check_endpoints` on the result when the grid came from outside.
    """
    return Dungeon(
        id=id,
        seed=seed,
        level=level,
        created_at=utc_now_iso(),
        ttl_seconds=DEFAULT_TTL_SECONDS if ttl_seconds is None else ttl_seconds,
        grid=grid,
        entrances=[Vec2(0, 0)],
        exits=[Vec2(grid.width - 1, grid.height - 1)],
    )


def check_endpoints(dungeon: Dungeon) -> List[str]:
    """Return a problem description for every missing, out-of-bounds or non-walkable endpoint."""
    problems = []
    grid = dungeon.grid
    for label, points in (("entrance", dungeon.entrances), ("exit", dungeon.exits)):
        if not points:
            problems.append(f"no {label}")
        for p in points:
            if not grid.in_bounds(p.x, p.y):
                problems.append(f"{label} ({p.x},{p.y}) out of bounds")
            elif not T.is_walkable(grid.tile_at(p.x, p.y)):
                problems.append(f"{label} ({p.x},{p.y}) on non-walkable {grid.tile_at(p.x, p.y)}")
    if problems:
        _log.warn(event="endpoint_check_failed", dungeon=dungeon.id, problems="; ".join(problems))
    return problems


def from_legacy(tokens: List[List[str]], seed: str, level: int = 1) -> Dungeon:
    return dungeon_from_parts(str(uuid.uuid4()), seed, level, grid_from_legacy(tokens))


def grid_from_tile_records(records: Iterable[Mapping[str, Any]], width: int, height: int) -> Grid:
    """Place flat ``{x, y, type}`` records on an all-wall grid; out-of-bounds records are dropped."""
    grid = Grid.filled(width, height, T.WALL)
    unknown = set()
    for rec in records:
        if not isinstance(rec, Mapping):
            continue
        x, y = rec.get("x"), rec.get("y")
        if not isinstance(x, int) or not isinstance(y, int) or not grid.in_bounds(x, y):
            continue
        record_type = rec.get("type")
        kind = RECORD_TYPE_TO_TILE.get(record_type) if isinstance(record_type, str) else None
        if kind is None:
            unknown.add(repr(record_type))
            kind = T.WALL
        grid.tiles[y][x] = kind
    _report_fallbacks("tile_record_fallback", unknown, T.WALL)
    return grid


def tile_records_from_grid(grid: Grid) -> List[Dict[str, Any]]:
    return [{"x": x, "y": y, "type": kind, "walkable": T.is_walkable(kind)} for x, y, kind in grid.cells()]


def grid_from_char_map(text: str) -> Grid:
    """Parse a character map (legend ``' '``/``#`` wall, ``,`` floor, ``^`` entrance, ``V`` exit).

    Lines are right-padded to the longest line; unknown characters become wall.
    """
    lines = text.strip().split("\n")
    width = max(len(line) for line in lines)
    unknown = set()
    rows = []
    for line in lines:
        row = []
        for ch in line.ljust(width, " "):
            kind = CHAR_LEGEND.get(ch)
            if kind is None:
                unknown.add(repr(ch))
                kind = T.WALL
            row.append(kind)
        rows.append(row)
    _report_fallbacks("char_map_fallback", unknown, T.WALL)
    return Grid(width, len(rows), rows)


def gameplay_to_schema(grid: Grid) -> Grid:
    rows = [
        [GAMEPLAY_TO_SCHEMA.get(kind, kind) if isinstance(kind, str) else kind for kind in row]
        for row in grid.tiles
    ]
    return Grid(grid.width, grid.height, rows)


def _usable_dimension(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 < value <= MAX_PAYLOAD_DIMENSION


def convert_generated_payload(payload: Any) -> MapRow:
    """Turn any accepted generator payload into a saved-map row (gameplay vocabulary).

    Accepted: a dict with a flat ``tiles`` record list, a raw character-map
    string, or a dict with a ``map`` character-map string. Anything else
    becomes an all-wall map of the declared size (later rejected as
    unplayable by :mod:`cryptgen.dungeon.playability`). A declared size that
    is not an integer in ``1..MAX_PAYLOAD_DIMENSION`` falls back to 20x15.
    """
    data = payload if isinstance(payload, dict) else {}
    raw_width, raw_height = data.get("width"), data.get("height")
    width = raw_width if _usable_dimension(raw_width) else 20
    height = raw_height if _usable_dimension(raw_height) else 15
    rejected = {
        name: repr(raw)
        for name, raw in (("width", raw_width), ("height", raw_height))
        if raw is not None and not _usable_dimension(raw)
    }
    if rejected:
        _log.warn(event="payload_shape_fallback", reason="bad_dimensions", **rejected)
    records = data.get("tiles")
    if isinstance(records, list) and records and isinstance(records[0], dict):
        grid = grid_from_tile_records(records, width, height)
    elif isinstance(payload, str):
        grid = grid_from_char_map(payload)
    elif isinstance(data.get("map"), str):
        grid = grid_from_char_map(data["map"])
    else:
        _log.warn(event="payload_shape_fallback", width=width, height=height)
        grid = Grid.filled(width, height, T.WALL)
    ref = data.get("refId")
    if not isinstance(ref, str) or not ref:
        ref = f"generated-{int(time.time() * 1000)}"
    name = "Generated Dungeon - {} #{} L{}".format(
        data.get("guild") or "Unknown", data.get("dungeonNumber") or 1, data.get("level") or 1
    )
    return MapRow(ref, name, grid.width, grid.height, grid.tiles)


# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------

_NUMERIC_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


def _as_number(part: str) -> Optional[float]:
    """Numeric value of a token the way the legacy parser saw it (blank counts as 0)."""
    text = part.strip()
    if text == "":
        return 0.0
    if _NUMERIC_RE.match(text):
        value = float(text)
        # 1e400 parses as inf; treat it like any other non-number
        return value if math.isfinite(value) else None
    return None


@dataclass(frozen=True)
class LegacyRef:
    guild: str
    dungeon_number: int
    level: int = 1

    @property
    def seed(self) -> int:
        """Seed the fixed-layout fallback generator uses for this reference."""
        return self.dungeon_number + self.level


def parse_legacy_ref(ref: str) -> Optional[LegacyRef]:
    """Best-effort parse of ``guild-dungeonNumber-level-timestamp-suffix``.

    Scans right to left (skipping the timestamp and suffix) for an ``L<n>``
    token or a bare 1..99 integer as the level, then the nearest integer
    before it as the dungeon number; everything before that is the guild.
    Ambiguous when the guild itself contains bare numbers. Returns ``None``
    when no guild or positive dungeon number can be recovered.
    """
    parts = ref.split("-")
    if len(parts) < 3:
        _log.debug(event="ref_parse_failed", ref=ref, reason="too_few_parts")
        return None
    guild = ""
    dungeon_number = 0.0
    level = 1.0
    if len(parts) >= 4:
        number_idx = -1
        level_idx = -1
        for i in range(len(parts) - 3, -1, -1):
            part = parts[i]
            tail = _as_number(part[1:]) if part.startswith("L") else None
            num = _as_number(part)
            if tail is not None:
                level_idx, level = i, tail
                break
            if num is not None and 0 < num < 100:
                level_idx, level = i, num
                break
        if level_idx > 0:
            for i in range(level_idx - 1, -1, -1):
                num = _as_number(parts[i])
                if num is not None:
                    number_idx, dungeon_number = i, num
                    break
        else:
            _log.debug(event="ref_parse_fallback", ref=ref, branch="no_level")
            for i in range(len(parts) - 3, -1, -1):
                num = _as_number(parts[i])
                if num is not None:
                    number_idx, dungeon_number = i, num
                    break
        if number_idx > 0:
            guild = "-".join(parts[:number_idx])
        else:
            _log.debug(event="ref_parse_fallback", ref=ref, branch="first_part_guild")
            guild = parts[0]
            for i in range(1, len(parts) - 2):
                num = _as_number(parts[i])
                if num is not None:
                    dungeon_number = num
                    break
    else:
        guild = parts[0]
        num = _as_number(parts[1])
        if num is not None:
            dungeon_number = num
        level_part = parts[2]
        if level_part.startswith("L"):
            level = _as_number(level_part[1:]) or 1
        elif _as_number(level_part) is not None:
            level = _as_number(level_part)
    if not guild or dungeon_number <= 0:
        _log.debug(event="ref_parse_failed", ref=ref, reason="no_guild_or_number")
        return None
    return LegacyRef(guild, int(dungeon_number), int(level))


@dataclass(frozen=True)
class DungeonRef:
    """Structured dungeon identifier, ``|``-delimited so guild names may contain hyphens."""

    guild: str
    dungeon_number: int
    level: int
    created_ms: int
    nonce: str

    DELIMITER = "|"

    def __post_init__(self):
        if not self.guild or self.DELIMITER in self.guild:
            raise ValueError(f"guild must be non-empty and must not contain {self.DELIMITER!r}")
        if self.dungeon_number < 1 or self.level < 1:
            raise ValueError("dungeon_number and level must be >= 1")
        if not self.nonce or self.DELIMITER in self.nonce:
            raise ValueError("nonce must be non-empty")

    @classmethod
    def new(cls, guild: str, dungeon_number: int, level: int = 1) -> "DungeonRef":
        return cls(guild, dungeon_number, level, int(time.time() * 1000), uuid.uuid4().hex[:8])

    @classmethod
    def parse(cls, text: str) -> "DungeonRef":
        parts = text.split(cls.DELIMITER)
        if len(parts) != 5:
            raise ValueError(f"expected 5 fields in dungeon ref, got {len(parts)}")
        guild, number, level, created, nonce = parts
        try:
            return cls(guild, int(number), int(level), int(created), nonce)
        except ValueError as exc:
            raise ValueError(f"malformed dungeon ref {text!r}: {exc}") from None

    def to_string(self) -> str:
        return self.DELIMITER.join(
            [self.guild, str(self.dungeon_number), str(self.level), str(self.created_ms), self.nonce]
        )

    def to_legacy(self) -> str:
        return f"{self.guild}-{self.dungeon_number}-L{self.level}-{self.created_ms}-{self.nonce}"

    @property
    def seed(self) -> int:
        return self.dungeon_number + self.level


__all__ = [
    "TOKEN_TO_TILE",
    "RECORD_TYPE_TO_TILE",
    "CHAR_LEGEND",
    "GAMEPLAY_TO_SCHEMA",
    "grid_from_legacy",
    "dungeon_from_parts",
    "check_endpoints",
    "from_legacy",
    "grid_from_tile_records",
    "tile_records_from_grid",
    "grid_from_char_map",
    "gameplay_to_schema",
    "convert_generated_payload",
    "LegacyRef",
    "parse_legacy_ref",
    "DungeonRef",
]
