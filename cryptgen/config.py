"""Generation configuration.

``GenerationConfig`` holds the tunables for one generation run. Defaults match
the grid size the web client has always requested (25x17). ``from_env`` applies
``CRYPTGEN_*`` environment overrides (the CLI loads ``.env`` first, so values
there take effect too).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import FrozenSet, Optional

DEFAULT_WIDTH = 25
DEFAULT_HEIGHT = 17
DEFAULT_TTL_SECONDS = 900
DEFAULT_DOOR_CHANCE = 0.03
DEFAULT_STEP_FACTOR = 4
# Minimum walkable tiles before a map is considered playable
MIN_WALKABLE_TILES = 20
# Movement requirements the player can satisfy in addition to plain walking
DEFAULT_PLAYER_ABILITIES = frozenset({"fly"})


@dataclass
class GenerationConfig:
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    level: int = 1
    ttl_seconds: int = DEFAULT_TTL_SECONDS
    door_chance: float = DEFAULT_DOOR_CHANCE
    step_factor: int = DEFAULT_STEP_FACTOR
    min_walkable: int = MIN_WALKABLE_TILES
    seed: Optional[str] = None
    player_abilities: FrozenSet[str] = field(default_factory=lambda: DEFAULT_PLAYER_ABILITIES)

    @classmethod
    def from_env(cls, environ=None, **overrides) -> "GenerationConfig":
        """Build a config from defaults, then ``CRYPTGEN_*`` env vars, then keyword overrides.

        Malformed numeric values raise ``ValueError`` naming the variable.
        """
        env = os.environ if environ is None else environ
        cfg = cls()
        int_map = {
            "CRYPTGEN_WIDTH": "width",
            "CRYPTGEN_HEIGHT": "height",
            "CRYPTGEN_LEVEL": "level",
            "CRYPTGEN_TTL_SECONDS": "ttl_seconds",
            "CRYPTGEN_STEP_FACTOR": "step_factor",
            "CRYPTGEN_MIN_WALKABLE": "min_walkable",
        }
        for env_key, attr in int_map.items():
            raw = env.get(env_key)
            if raw is None or raw.strip() == "":
                continue
            try:
                setattr(cfg, attr, int(raw))
            except ValueError:
                raise ValueError(f"{env_key} must be an integer, got {raw!r}") from None
        raw_chance = env.get("CRYPTGEN_DOOR_CHANCE")
        if raw_chance:
            try:
                cfg.door_chance = float(raw_chance)
            except ValueError:
                raise ValueError(f"CRYPTGEN_DOOR_CHANCE must be a number, got {raw_chance!r}") from None
        if env.get("CRYPTGEN_SEED"):
            cfg.seed = env["CRYPTGEN_SEED"]
        raw_abilities = env.get("CRYPTGEN_PLAYER_ABILITIES")
        if raw_abilities is not None:
            cfg.player_abilities = frozenset(a.strip() for a in raw_abilities.split(",") if a.strip())
        overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(cfg, **overrides) if overrides else cfg


__all__ = [
    "GenerationConfig",
    "DEFAULT_WIDTH",
    "DEFAULT_HEIGHT",
    "DEFAULT_TTL_SECONDS",
    "DEFAULT_DOOR_CHANCE",
    "DEFAULT_STEP_FACTOR",
    "MIN_WALKABLE_TILES",
    "DEFAULT_PLAYER_ABILITIES",
]
