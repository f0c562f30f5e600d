"""Structured key=value logging for floor generation.

Every stage logs one summary line under a stable ``event`` name, so a run can
be grepped (``event=lock_skipped``) or fed to a log collector as JSON lines.

Usage:
    from floorgen.logging_utils import get_logger
    log = get_logger("floorgen.locks")
    log.info(event="locks_placed", requested=2, placed=1)

Events by logger:
    floorgen.partition     partition_done (debug)
    floorgen.rooms         rooms_carved (debug)
    floorgen.adjacency     candidate_edges (debug)
    floorgen.connectivity  graph_resolved (debug), candidate_graph_disconnected (warn)
    floorgen.tunnels       corridors_carved (debug), corridor_carve_failure (warn)
    floorgen.features      rooms_classified (info), rooms_unreachable (warn)
    floorgen.locks         lock_placed (debug), lock_skipped (warn), locks_placed (info)
    floorgen.biomes        biome_fallback (warn)
    floorgen.pipeline      floor_generated (info)
    floorgen.api           bad_param, bad_config (warn), seed_set (info)
    floorgen.server        server_start (info)
    floorgen               listen (info)

Values: ``None`` is dropped, numbers are written as-is, coordinate tuples as
``x,y`` and anything else is str()'d with spaces replaced. Reserved keys:
level, ts. Errors go to stderr, everything else to stdout.

Environment:
    FLOORGEN_LOG_LEVEL  debug | info | warn | error (default info)
    FLOORGEN_LOG_JSON   1/true/yes/on for JSON lines
"""

from __future__ import annotations

import json
import os
import sys
import time

LEVELS = {"debug": 10, "info": 20, "warn": 30, "error": 40}


def _current_level() -> int:
    return LEVELS.get(os.getenv("FLOORGEN_LOG_LEVEL", "info").lower(), 20)


def _json_mode() -> bool:
    return os.getenv("FLOORGEN_LOG_JSON", "0") in ("1", "true", "TRUE", "yes", "on")


def _format(level: str, **fields):
    if _json_mode():
        rec = {k: v for k, v in fields.items() if v is not None}
        rec["level"] = level
        rec["ts"] = int(time.time())
        return json.dumps(rec, separators=(",", ":"), default=str)
    parts = [f"level={level}", f"ts={int(time.time())}"]
    for k, v in fields.items():
        if v is None:
            continue
        if isinstance(v, (int, float)):
            parts.append(f"{k}={v}")
        elif isinstance(v, tuple):
            parts.append(f"{k}=" + ",".join(map(str, v)))
        else:
            s = str(v).replace(" ", "_")
            parts.append(f"{k}={s}")
    return " ".join(parts)


class _Logger:
    def __init__(self, name: str | None = None):
        self.name = name or "floorgen"

    def _log(self, lvl: str, **fields):
        if LEVELS[lvl] < _current_level():
            return
        if "logger" not in fields:
            fields["logger"] = self.name
        print(_format(lvl, **fields), file=sys.stdout if lvl != "error" else sys.stderr)

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


log = get_logger("floorgen")
