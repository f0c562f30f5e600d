import hashlib
import os
import random
from dataclasses import dataclass, fields, replace
from typing import Mapping, Optional

from .errors import ConfigurationError

MAX_FLOOR_SIZE = 256
MIN_FLOOR_SIZE = 4  # 2x2 room plus a one tile margin per side
MIN_CELL_SIZE = 4
MAX_CELL_SIZE = 128
MAX_DEPTH = 16
MAX_INSET = 8
MAX_SPECIAL_ROOMS = 16


SQLITE_MAX_INT = 9223372036854775807


def _clamp(value, lo, hi):
    return max(lo, min(hi, value))


def coerce_seed(raw):
    """Convert a user-supplied seed (int or str) into a bounded 64-bit signed int.

    Digit strings are parsed, any other non-empty string is hashed, and an
    empty/missing seed becomes a fresh random one.
    """
    if raw is None or isinstance(raw, bool):
        return random.randint(1, 1_000_000)
    if isinstance(raw, int):
        return raw % SQLITE_MAX_INT
    if isinstance(raw, str):
        s = raw.strip()
        if not s:
            return random.randint(1, 1_000_000)
        if s.isdigit():
            return int(s) % SQLITE_MAX_INT
        h = hashlib.sha256(s.encode('utf-8')).digest()
        return int.from_bytes(h[:8], 'big') % SQLITE_MAX_INT
    # Fallback
    return random.randint(1, 1_000_000)


@dataclass(frozen=True)
class FloorConfig:
    width: int = 80
    height: int = 60
    seed: int = 0
    min_cell_size: int = 6
    max_depth: int = 5
    min_inset: int = 1
    max_inset: int = 3
    loop_probability: float = 0.2
    extra_connection_budget: Optional[int] = None
    corridor_width: int = 2
    lock_count: int = 1
    shop_count: int = 1
    treasure_count: int = 1
    empty_fraction: float = 0.25
    floor_level: int = 1
    boss_interval: int = 5
    spawns_per_room: int = 3
    enable_metrics: bool = True

    def validated(self) -> "FloorConfig":
        """Return a clamped copy with a concrete seed.

        Out-of-range values are clamped rather than rejected. The only hard
        failure is a floor too small to hold a single 2x2 room with a wall
        margin, raised before any generation work starts.
        """
        if self.width < MIN_FLOOR_SIZE:
            raise ConfigurationError("width", f"must be at least {MIN_FLOOR_SIZE} (got {self.width})")
        if self.height < MIN_FLOOR_SIZE:
            raise ConfigurationError("height", f"must be at least {MIN_FLOOR_SIZE} (got {self.height})")
        seed = int(self.seed)
        if seed == 0:
            seed = random.randint(1, 2**31 - 1)
        min_inset = _clamp(int(self.min_inset), 1, MAX_INSET)
        budget = self.extra_connection_budget
        if budget is not None:
            budget = max(0, int(budget))
        return replace(
            self,
            width=_clamp(int(self.width), MIN_FLOOR_SIZE, MAX_FLOOR_SIZE),
            height=_clamp(int(self.height), MIN_FLOOR_SIZE, MAX_FLOOR_SIZE),
            seed=seed,
            min_cell_size=_clamp(int(self.min_cell_size), MIN_CELL_SIZE, MAX_CELL_SIZE),
            max_depth=_clamp(int(self.max_depth), 0, MAX_DEPTH),
            min_inset=min_inset,
            max_inset=_clamp(int(self.max_inset), min_inset, MAX_INSET),
            loop_probability=_clamp(float(self.loop_probability), 0.0, 1.0),
            extra_connection_budget=budget,
            corridor_width=_clamp(int(self.corridor_width), 1, 2),
            lock_count=_clamp(int(self.lock_count), 0, MAX_SPECIAL_ROOMS),
            shop_count=_clamp(int(self.shop_count), 0, MAX_SPECIAL_ROOMS),
            treasure_count=_clamp(int(self.treasure_count), 0, MAX_SPECIAL_ROOMS),
            empty_fraction=_clamp(float(self.empty_fraction), 0.0, 1.0),
            floor_level=max(1, int(self.floor_level)),
            boss_interval=max(1, int(self.boss_interval)),
            spawns_per_room=_clamp(int(self.spawns_per_room), 0, 16),
            enable_metrics=bool(self.enable_metrics),
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "FloorConfig":
        """Build a config from ``FLOORGEN_<FIELD>`` variables plus keyword overrides.

        Unparseable values are ignored so a typo in ``.env`` falls back to the
        default instead of crashing the process.
        """
        env = os.environ if environ is None else environ
        values = {}
        for f in fields(cls):
            raw = env.get(f"FLOORGEN_{f.name.upper()}")
            if raw is None or raw == "":
                continue
            parsed = _parse(f.name, raw)
            if parsed is not None:
                values[f.name] = parsed
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def to_dict(self):
        return {f.name: getattr(self, f.name) for f in fields(self)}


_FLOAT_FIELDS = {"loop_probability", "empty_fraction"}
_BOOL_FIELDS = {"enable_metrics"}


def _parse(name: str, raw: str):
    raw = raw.strip()
    if name in _BOOL_FIELDS:
        return raw.lower() not in {"0", "false", "no", "off", ""}
    try:
        if name in _FLOAT_FIELDS:
            return float(raw)
        return int(raw)
    except ValueError:
        return None


__all__ = ["FloorConfig", "coerce_seed", "MAX_FLOOR_SIZE", "MIN_FLOOR_SIZE"]
