"""
project: cryptgen
module: __init__.py
License: MIT

Seeded dungeon generation toolkit.

The interesting parts live in :mod:`cryptgen.dungeon`: the shared tile
semantics table, the seeded PRNG, the grid generators, the dungeon schema
validator and the legacy format adapters. This top-level package only carries
version metadata plus the ambient helpers (configuration and logging) used
across the project.
"""

from __future__ import annotations

from pathlib import Path

__all__ = ["__version__"]


def _load_version() -> str:
    version_file = Path(__file__).resolve().parent.parent / "VERSION"
    try:
        return version_file.read_text(encoding="utf-8").strip()
    except OSError:
        return "0.4.0"


__version__ = _load_version()
