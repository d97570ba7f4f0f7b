import os
import sys

import pytest

# Ensure repository root importable early
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from cryptgen import logging_utils  # noqa: E402
from cryptgen.dungeon.generator import generate_dungeon  # noqa: E402
from cryptgen.dungeon.grid import Grid  # noqa: E402

CRYPTGEN_ENV_KEYS = (
    "CRYPTGEN_WIDTH",
    "CRYPTGEN_HEIGHT",
    "CRYPTGEN_LEVEL",
    "CRYPTGEN_TTL_SECONDS",
    "CRYPTGEN_STEP_FACTOR",
    "CRYPTGEN_MIN_WALKABLE",
    "CRYPTGEN_DOOR_CHANCE",
    "CRYPTGEN_SEED",
    "CRYPTGEN_PLAYER_ABILITIES",
)


def pytest_configure(config):  # register custom marker
    config.addinivalue_line("markers", "performance: generation timing checks")


@pytest.fixture(autouse=True)
def _clean_cryptgen_env(monkeypatch):
    """Keep a developer's CRYPTGEN_* settings from leaking into test expectations."""
    for key in CRYPTGEN_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture(autouse=True)
def _restore_structured_logger():
    """CLI runs retarget the module-level logger; put it back after each test."""
    saved = (logging_utils.CURRENT_LEVEL, logging_utils.JSON_MODE, logging_utils.STREAM)
    yield
    logging_utils.CURRENT_LEVEL, logging_utils.JSON_MODE, logging_utils.STREAM = saved


@pytest.fixture()
def dungeon_abc():
    return generate_dungeon(seed="abc", dungeon_id="test-abc")


@pytest.fixture()
def grid_from_rows():
    """Build a Grid from a list of strings ('#' wall, '.' floor, '+' door, '~' water)."""
    legend = {"#": "wall", ".": "floor", "+": "door", "~": "water", "T": "tree"}

    def _build(*rows):
        tiles = [[legend[ch] for ch in row] for row in rows]
        return Grid(len(tiles[0]), len(tiles), tiles)

    return _build
