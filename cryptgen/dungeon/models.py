"""Dungeon data model.

Plain dataclasses mirroring the JSON wire shape. ``to_dict`` emits camelCase
keys and omits optional fields that are unset. ``from_dict`` constructors
assume the payload already passed :func:`cryptgen.dungeon.schema.validate_dungeon`;
untrusted input must go through the validator first.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, NamedTuple, Optional

from .grid import Grid, Vec2

FEATURE_TYPES = ("trap", "chest", "altar", "fountain", "secret_door", "crack", "rock", "torch", "sign")
ENTITY_KINDS = ("npc", "mob", "boss", "merchant", "mage", "player")


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Rect(NamedTuple):
    x: int
    y: int
    w: int
    h: int

    def cells(self):
        for iy in range(self.y, self.y + self.h):
            for ix in range(self.x, self.x + self.w):
                yield ix, iy

    @property
    def center(self) -> Vec2:
        return Vec2(self.x + self.w // 2, self.y + self.h // 2)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "w": self.w, "h": self.h}


@dataclass
class Room:
    id: str
    rect: Rect
    tags: Optional[List[str]] = None

    def to_dict(self) -> dict:
        out: Dict[str, Any] = {"id": self.id, "rect": self.rect.to_dict()}
        if self.tags is not None:
            out["tags"] = list(self.tags)
        return out

    @classmethod
    def from_dict(cls, data: dict) -> "Room":
        r = data["rect"]
        tags = data.get("tags")
        return cls(data["id"], Rect(r["x"], r["y"], r["w"], r["h"]), list(tags) if tags is not None else None)


@dataclass
class Feature:
    id: str
    type: str
    pos: Vec2
    data: Optional[Dict[str, Any]] = None
    hidden: Optional[bool] = None

    def to_dict(self) -> dict:
        out: Dict[str, Any] = {"id": self.id, "type": self.type, "pos": self.pos.to_dict()}
        if self.data is not None:
            out["data"] = dict(self.data)
        if self.hidden is not None:
            out["hidden"] = self.hidden
        return out

    @classmethod
    def from_dict(cls, data: dict) -> "Feature":
        p = data["pos"]
        return cls(data["id"], data["type"], Vec2(p["x"], p["y"]), data.get("data"), data.get("hidden"))


@dataclass
class Entity:
    id: str
    kind: str
    name: str
    pos: Vec2
    level: int = 1
    hostile: Optional[bool] = None
    ai: Optional[str] = None
    data: Optional[Dict[str, Any]] = None

    def to_dict(self) -> dict:
        out: Dict[str, Any] = {
            "id": self.id,
            "kind": self.kind,
            "name": self.name,
            "pos": self.pos.to_dict(),
            "level": self.level,
        }
        for key in ("hostile", "ai", "data"):
            value = getattr(self, key)
            if value is not None:
                out[key] = value
        return out

    @classmethod
    def from_dict(cls, data: dict) -> "Entity":
        p = data["pos"]
        return cls(
            data["id"],
            data["kind"],
            data["name"],
            Vec2(p["x"], p["y"]),
            data["level"],
            data.get("hostile"),
            data.get("ai"),
            data.get("data"),
        )


@dataclass
class Dungeon:
    id: str
    seed: str
    level: int
    created_at: str
    ttl_seconds: int
    grid: Grid
    rooms: List[Room] = field(default_factory=list)
    features: List[Feature] = field(default_factory=list)
    entities: List[Entity] = field(default_factory=list)
    entrances: List[Vec2] = field(default_factory=list)
    exits: List[Vec2] = field(default_factory=list)

    @property
    def width(self) -> int:
        return self.grid.width

    @property
    def height(self) -> int:
        return self.grid.height

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "seed": self.seed,
            "level": self.level,
            "createdAt": self.created_at,
            "ttlSeconds": self.ttl_seconds,
            "grid": self.grid.to_dict(),
            "rooms": [r.to_dict() for r in self.rooms],
            "features": [f.to_dict() for f in self.features],
            "entities": [e.to_dict() for e in self.entities],
            "entrances": [p.to_dict() for p in self.entrances],
            "exits": [p.to_dict() for p in self.exits],
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict) -> "Dungeon":
        g = data["grid"]
        return cls(
            id=data["id"],
            seed=data["seed"],
            level=data["level"],
            created_at=data["createdAt"],
            ttl_seconds=data["ttlSeconds"],
            grid=Grid(g["width"], g["height"], [list(row) for row in g["tiles"]]),
            rooms=[Room.from_dict(r) for r in data["rooms"]],
            features=[Feature.from_dict(f) for f in data["features"]],
            entities=[Entity.from_dict(e) for e in data["entities"]],
            entrances=[Vec2(p["x"], p["y"]) for p in data["entrances"]],
            exits=[Vec2(p["x"], p["y"]) for p in data["exits"]],
        )


def to_client_payload(dungeon: Dungeon) -> dict:
    """Trim a dungeon to what the web client renders; player entities are dropped."""
    return {
        "grid": dungeon.grid.to_dict(),
        "rooms": [r.to_dict() for r in dungeon.rooms],
        "features": [f.to_dict() for f in dungeon.features],
        "entities": [e.to_dict() for e in dungeon.entities if e.kind != "player"],
        "meta": {"id": dungeon.id, "level": dungeon.level, "seed": dungeon.seed},
    }


@dataclass
class MapRow:
    """Saved-map row shape owned by the persistence layer (gameplay tile vocabulary)."""

    id: str
    name: str
    width: int
    height: int
    tiles: List[List[str]]
    created_at: str = field(default_factory=utc_now_iso)
    custom_textures: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def grid(self) -> Grid:
        return Grid(self.width, self.height, self.tiles)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "width": self.width,
            "height": self.height,
            "tiles": [list(row) for row in self.tiles],
            "custom_textures": list(self.custom_textures),
            "created_at": self.created_at,
        }


def to_map_row(id: str, name: str, grid: Grid, custom_textures=None) -> MapRow:
    return MapRow(id, name, grid.width, grid.height, [list(r) for r in grid.tiles], custom_textures=list(custom_textures or []))


def from_map_row(row: MapRow) -> dict:
    """Client view of a row: everything except the persistence timestamp."""
    return {
        "id": row.id,
        "name": row.name,
        "width": row.width,
        "height": row.height,
        "tiles": [list(r) for r in row.tiles],
        "customTextures": list(row.custom_textures),
    }


__all__ = [
    "FEATURE_TYPES",
    "ENTITY_KINDS",
    "Rect",
    "Room",
    "Feature",
    "Entity",
    "Dungeon",
    "MapRow",
    "to_client_payload",
    "to_map_row",
    "from_map_row",
    "utc_now_iso",
]
