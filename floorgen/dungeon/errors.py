"""Generation errors and non-fatal quality warnings.

Only ``ConfigurationError`` is raised. Everything else a run can trip over is
recorded as a ``GenerationWarning`` on ``LevelLayout.warnings`` so callers and
tests can assert on it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple


class FloorGenError(Exception):
    """Base class for floor generation errors."""


class ConfigurationError(FloorGenError, ValueError):
    def __init__(self, field_name: str, message: str):
        super().__init__(f"{field_name}: {message}")
        self.field = field_name
        self.message = message


@dataclass(frozen=True)
class GenerationWarning:
    code: str
    message: str

    def to_dict(self):
        return {"code": self.code, "message": self.message}


@dataclass(frozen=True)
class DisconnectedGraphWarning(GenerationWarning):
    room_ids: Tuple[int, ...] = field(default_factory=tuple)

    def to_dict(self):
        d = super().to_dict()
        d["room_ids"] = list(self.room_ids)
        return d


@dataclass(frozen=True)
class CorridorCarveFailure(GenerationWarning):
    room_a: int = -1
    room_b: int = -1

    def to_dict(self):
        d = super().to_dict()
        d["rooms"] = [self.room_a, self.room_b]
        return d


@dataclass(frozen=True)
class InsolvableLockWarning(GenerationWarning):
    room_id: int = -1

    def to_dict(self):
        d = super().to_dict()
        d["room_id"] = self.room_id
        return d


def disconnected(room_ids) -> DisconnectedGraphWarning:
    ids = tuple(sorted(room_ids))
    return DisconnectedGraphWarning("disconnected_graph", f"{len(ids)} room(s) unreachable from entrance", ids)


def carve_failure(room_a: int, room_b: int, reason: str) -> CorridorCarveFailure:
    return CorridorCarveFailure("corridor_carve_failure", reason, room_a, room_b)


def insolvable_lock(room_id: int, reason: str) -> InsolvableLockWarning:
    return InsolvableLockWarning("insolvable_lock", reason, room_id)


__all__ = [
    "FloorGenError",
    "ConfigurationError",
    "GenerationWarning",
    "DisconnectedGraphWarning",
    "CorridorCarveFailure",
    "InsolvableLockWarning",
    "disconnected",
    "carve_failure",
    "insolvable_lock",
]
