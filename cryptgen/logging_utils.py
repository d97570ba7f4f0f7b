"""Minimal structured logging helper.

Provides a lightweight wrapper around print() to emit key=value pairs with a
timestamp and level. Generation, validation and legacy conversion report
their events through it so fallbacks (unknown tiles, ambiguous identifiers)
are always visible rather than silently swallowed.

Usage:
    from cryptgen.logging_utils import log
    log.info(event="dungeon_generated", seed="abc", walkable=212)

All non-str key/value values are str()'d. Reserved keys: level, ts.

``configure_logging`` wires up the stdlib ``logging`` module (console plus an
optional rotating file) for the CLI entry point.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import time
from logging.handlers import RotatingFileHandler

LEVELS = {"debug": 10, "info": 20, "warn": 30, "error": 40}
CURRENT_LEVEL = LEVELS.get(os.getenv("CRYPTGEN_LOG_LEVEL", "info"), 20)
JSON_MODE = os.getenv("CRYPTGEN_LOG_JSON", "0") in ("1", "true", "TRUE", "yes", "on")
# Non-error lines go to stdout unless the caller owns stdout (CLI payload output)
STREAM = "stderr" if os.getenv("CRYPTGEN_LOG_STREAM", "stdout").lower() == "stderr" else "stdout"


def set_level(name: str) -> None:
    """Change the structured logger threshold at runtime (CLI ``--log-level``)."""
    global CURRENT_LEVEL
    CURRENT_LEVEL = LEVELS.get(name.lower(), CURRENT_LEVEL)


def set_stream(name: str) -> None:
    """Route non-error lines to ``"stdout"`` (default) or ``"stderr"``."""
    global STREAM
    STREAM = "stderr" if name == "stderr" else "stdout"


def _format(level: str, **fields):
    if JSON_MODE:
        rec = {k: v for k, v in fields.items() if v is not None}
        rec["level"] = level
        rec["ts"] = int(time.time())
        try:
            return json.dumps(rec, separators=(",", ":"), default=str)
        except (TypeError, ValueError):
            return json.dumps({"level": level, "ts": int(time.time()), "error": "json_encode_failed"})
    parts = [f"level={level}", f"ts={int(time.time())}"]
    for k, v in fields.items():
        if v is None:
            continue
        if isinstance(v, (int, float)):
            parts.append(f"{k}={v}")
        else:
            s = str(v).replace(" ", "_")
            parts.append(f"{k}={s}")
    return " ".join(parts)


class _Logger:
    def __init__(self, name: str | None = None):
        self.name = name or "cryptgen"

    def _log(self, lvl: str, **fields):
        if LEVELS[lvl] < CURRENT_LEVEL:
            return
        if "logger" not in fields:
            fields["logger"] = self.name
        stream = sys.stderr if lvl == "error" or STREAM == "stderr" else sys.stdout
        print(_format(lvl, **fields), file=stream)

    def debug(self, **fields):
        self._log("debug", **fields)

    def info(self, **fields):
        self._log("info", **fields)

    def warn(self, **fields):
        self._log("warn", **fields)

    def error(self, **fields):
        self._log("error", **fields)


_LOGGER_CACHE = {}


def get_logger(name: str):
    if name not in _LOGGER_CACHE:
        _LOGGER_CACHE[name] = _Logger(name)
    return _LOGGER_CACHE[name]


log = get_logger("cryptgen")


def configure_logging(level: str = "info", log_file: str | None = None, stream: str | None = None) -> None:
    """Configure stdlib logging for the console and, optionally, a rotating file.

    Safe to call repeatedly: existing root handlers are replaced. ``stream``
    (``"stdout"``/``"stderr"``) also redirects the structured logger.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    for h in list(root.handlers):
        root.removeHandler(h)

    console = logging.StreamHandler()
    console.setFormatter(fmt)
    root.addHandler(console)

    if log_file:
        directory = os.path.dirname(log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        file_handler = RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=3)
        file_handler.setFormatter(fmt)
        root.addHandler(file_handler)
    set_level("warn" if level.lower() == "warning" else level)
    if stream:
        set_stream(stream)
