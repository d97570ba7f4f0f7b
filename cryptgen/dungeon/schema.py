"""Dungeon schema validation.

Every externally sourced dungeon (file upload, network payload, legacy
adapter output) passes through :func:`validate_dungeon` before any consumer
trusts it. Validation is strict: wrong types, out-of-range integers and
values outside the closed enumerations are rejected, never coerced. Bools are
not accepted where an int is expected.

Schema Mini-Language (Python dict):
{
  'field_name': ('type', required: bool, extras: dict)
}
Supported types: 'str', 'int', 'bool', 'list', 'dict'
Extras:
  min (int lower bound), choices (closed set for str), min_len (str),
  schema (nested dict schema for 'dict'), items (element spec for 'list')

Validators return ``(ok, value_or_error)`` tuples; the caller decides what to
do with a failure. An error looks like::

    {'field': 'grid.width', 'error': 'must be >= 1', 'code': 'min', 'errors': [...]}

where ``errors`` lists every problem found (the top-level keys repeat the
first one). Legacy shapes (flat tile records, character maps, token grids)
are not accepted here; convert them with :mod:`cryptgen.dungeon.legacy` first.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, List, Tuple

from .models import ENTITY_KINDS, FEATURE_TYPES, Dungeon, MapRow
from .tiles import GAMEPLAY_TILES, SCHEMA_TILES

PRIMITIVES = {
    "str": str,
    "int": int,
    "bool": bool,
    "list": list,
    "dict": dict,
}


class ValidationError(Exception):
    def __init__(self, field: str, message: str, code: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message
        self.code = code

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "error": self.message, "code": self.code}


def _err(field: str, message: str, code: str) -> Dict[str, str]:
    return {"field": field, "error": message, "code": code}


def _fail(errors: List[Dict[str, str]]) -> Tuple[bool, Dict[str, Any]]:
    first = dict(errors[0])
    first["errors"] = errors
    return False, first


def _join(path: str, name) -> str:
    if isinstance(name, int):
        return f"{path}[{name}]"
    return f"{path}.{name}" if path else name


def _type_ok(value: Any, type_name: str) -> bool:
    if type_name == "int":
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, PRIMITIVES[type_name])


def _check_value(value: Any, spec: tuple, path: str, errors: List[Dict[str, str]]) -> None:
    type_name = spec[0]
    extras = spec[2] if len(spec) > 2 else {}
    if type_name not in PRIMITIVES:
        errors.append(_err("__schema__", f"unsupported type {type_name}", "schema"))
        return
    if not _type_ok(value, type_name):
        errors.append(_err(path, f"expected {type_name}", "type"))
        return
    if type_name == "int" and "min" in extras and value < extras["min"]:
        errors.append(_err(path, f"must be >= {extras['min']}", "min"))
    elif type_name == "str":
        if "choices" in extras and value not in extras["choices"]:
            errors.append(_err(path, f"invalid value {value!r}", "enum"))
        elif "min_len" in extras and len(value) < extras["min_len"]:
            errors.append(_err(path, "too short", "min_len"))
    elif type_name == "dict" and "schema" in extras:
        _check_object(value, extras["schema"], path, errors)
    elif type_name == "list" and "items" in extras:
        for idx, elem in enumerate(value):
            _check_value(elem, extras["items"], _join(path, idx), errors)


def _check_object(payload: Any, schema: Dict[str, tuple], path: str, errors: List[Dict[str, str]]) -> None:
    if not isinstance(payload, dict):
        errors.append(_err(path or "__root__", "payload must be an object", "type"))
        return
    for name, spec in schema.items():
        if not isinstance(spec, tuple) or len(spec) < 2:
            errors.append(_err("__schema__", f"invalid spec for {name}", "schema"))
            continue
        field_path = _join(path, name)
        if name not in payload:
            if spec[1]:
                errors.append(_err(field_path, "missing required field", "required"))
            continue
        _check_value(payload[name], spec, field_path, errors)


def validate(payload: Any, schema: Dict[str, tuple]) -> Tuple[bool, Dict[str, Any]]:
    """Check ``payload`` against a mini-language schema; returns (ok, payload_or_error)."""
    errors: List[Dict[str, str]] = []
    _check_object(payload, schema, "", errors)
    if errors:
        return _fail(errors)
    return True, payload


# Predefined schemas
VEC2 = {
    "x": ("int", True),
    "y": ("int", True),
}
RECT = {
    "x": ("int", True),
    "y": ("int", True),
    "w": ("int", True),
    "h": ("int", True),
}
ROOM = {
    "id": ("str", True),
    "rect": ("dict", True, {"schema": RECT}),
    "tags": ("list", False, {"items": ("str", True)}),
}
FEATURE = {
    "id": ("str", True),
    "type": ("str", True, {"choices": FEATURE_TYPES}),
    "pos": ("dict", True, {"schema": VEC2}),
    "data": ("dict", False),
    "hidden": ("bool", False),
}
ENTITY = {
    "id": ("str", True),
    "kind": ("str", True, {"choices": ENTITY_KINDS}),
    "name": ("str", True),
    "pos": ("dict", True, {"schema": VEC2}),
    "level": ("int", True, {"min": 1}),
    "hostile": ("bool", False),
    "ai": ("str", False),
    "data": ("dict", False),
}
GRID = {
    "width": ("int", True, {"min": 1}),
    "height": ("int", True, {"min": 1}),
    "tiles": ("list", True, {"items": ("list", True, {"items": ("str", True, {"choices": SCHEMA_TILES})})}),
}
DUNGEON = {
    "id": ("str", True),
    "seed": ("str", True),
    "level": ("int", True, {"min": 1}),
    "createdAt": ("str", True),
    "ttlSeconds": ("int", True, {"min": 1}),
    "grid": ("dict", True, {"schema": GRID}),
    "rooms": ("list", True, {"items": ("dict", True, {"schema": ROOM})}),
    "features": ("list", True, {"items": ("dict", True, {"schema": FEATURE})}),
    "entities": ("list", True, {"items": ("dict", True, {"schema": ENTITY})}),
    "entrances": ("list", True, {"items": ("dict", True, {"schema": VEC2})}),
    "exits": ("list", True, {"items": ("dict", True, {"schema": VEC2})}),
}
MAP_ROW = {
    "id": ("str", True),
    "name": ("str", True, {"min_len": 1}),
    "width": ("int", True, {"min": 1}),
    "height": ("int", True, {"min": 1}),
    "tiles": ("list", True, {"items": ("list", True, {"items": ("str", True, {"choices": GAMEPLAY_TILES})})}),
    "custom_textures": ("list", False, {"items": ("dict", True)}),
    "created_at": ("str", False),
}


def _check_shape(grid: Any, path: str, errors: List[Dict[str, str]]) -> None:
    """Rows must match the declared dimensions exactly (only checked once types pass)."""
    tiles = grid["tiles"]
    if len(tiles) != grid["height"]:
        errors.append(_err(_join(path, "tiles"), f"expected {grid['height']} rows, got {len(tiles)}", "shape"))
    for idx, row in enumerate(tiles):
        if len(row) != grid["width"]:
            errors.append(
                _err(_join(_join(path, "tiles"), idx), f"expected {grid['width']} entries, got {len(row)}", "shape")
            )


def _check_iso(value: str) -> bool:
    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        datetime.fromisoformat(text)
    except ValueError:
        return False
    return True


def validate_grid(candidate: Any) -> Tuple[bool, Dict[str, Any]]:
    ok, result = validate(candidate, GRID)
    if not ok:
        return ok, result
    errors: List[Dict[str, str]] = []
    _check_shape(candidate, "", errors)
    if errors:
        return _fail(errors)
    return True, candidate


def validate_dungeon(candidate: Any) -> Tuple[bool, Any]:
    """Validate an untrusted payload; returns ``(True, Dungeon)`` or ``(False, error)``."""
    errors: List[Dict[str, str]] = []
    _check_object(candidate, DUNGEON, "", errors)
    if not errors:
        _check_shape(candidate["grid"], "grid", errors)
        if not _check_iso(candidate["createdAt"]):
            errors.append(_err("createdAt", "not an ISO-8601 timestamp", "format"))
    if errors:
        return _fail(errors)
    return True, Dungeon.from_dict(candidate)


def parse_dungeon(candidate: Any) -> Dungeon:
    """Strict variant of :func:`validate_dungeon` that raises ``ValidationError``."""
    ok, result = validate_dungeon(candidate)
    if not ok:
        raise ValidationError(result["field"], result["error"], result["code"])
    return result


def load_dungeon_json(text: str) -> Tuple[bool, Any]:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        return _fail([_err("__root__", f"invalid JSON: {exc.msg} (line {exc.lineno})", "json")])
    return validate_dungeon(payload)


def validate_map_row(candidate: Any) -> Tuple[bool, Any]:
    errors: List[Dict[str, str]] = []
    _check_object(candidate, MAP_ROW, "", errors)
    if not errors:
        _check_shape(candidate, "", errors)
    if errors:
        return _fail(errors)
    kwargs = {}
    if candidate.get("created_at") is not None:
        kwargs["created_at"] = candidate["created_at"]
    row = MapRow(
        candidate["id"],
        candidate["name"],
        candidate["width"],
        candidate["height"],
        [list(r) for r in candidate["tiles"]],
        custom_textures=list(candidate.get("custom_textures") or []),
        **kwargs,
    )
    return True, row


__all__ = [
    "ValidationError",
    "validate",
    "validate_grid",
    "validate_dungeon",
    "validate_map_row",
    "parse_dungeon",
    "load_dungeon_json",
    "VEC2",
    "RECT",
    "ROOM",
    "FEATURE",
    "ENTITY",
    "GRID",
    "DUNGEON",
    "MAP_ROW",
]
