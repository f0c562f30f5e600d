"""Floor-level biome themes.

A biome only names the asset set a renderer should dress the floor with; the
generator's geometry never depends on it. Selection uses its own
``random.Random(seed + floor_level)`` so the generation stream is untouched.

Selection steps:
  1. Filter by level band.
  2. A single match wins outright.
  3. Otherwise pick by weight.
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional, Sequence

from ..logging_utils import get_logger
from .rooms import THEME_KEYS, RoomType

log = get_logger("floorgen.biomes")


@dataclass(frozen=True)
class Biome:
    name: str
    min_level: int = 1
    max_level: int = 100
    weight: float = 1.0

    def covers(self, floor_level: int) -> bool:
        return self.min_level <= floor_level <= self.max_level

    def theme_for(self, room_type: RoomType) -> str:
        return f"{self.name}/{THEME_KEYS[room_type]}"

    def to_dict(self):
        return {
            "name": self.name,
            "min_level": self.min_level,
            "max_level": self.max_level,
            "weight": self.weight,
        }


# The first entry is the fallback when no band covers a floor.
DEFAULT_BIOMES = (
    Biome("default", 1, 100, 1.0),
    Biome("crypt", 1, 10, 1.5),
    Biome("caverns", 6, 25, 1.0),
    Biome("forge", 20, 60, 0.75),
    Biome("abyss", 50, 100, 0.5),
)


def pick_biome(floor_level: int, seed: int, biomes: Sequence[Biome] = DEFAULT_BIOMES) -> Optional[Biome]:
    """Biome for ``floor_level``; ``None`` only when ``biomes`` is empty."""
    if not biomes:
        return None
    pool = [b for b in biomes if b.covers(floor_level)]
    if not pool:
        log.warn(event="biome_fallback", floor_level=floor_level, biome=biomes[0].name)
        return biomes[0]
    if len(pool) == 1:
        return pool[0]
    rng = random.Random(seed + floor_level)
    weights = [max(b.weight, 0.0) for b in pool]
    total = sum(weights)
    if total <= 0:
        return pool[0]
    pivot = rng.random() * total
    acc = 0.0
    chosen = pool[-1]
    for b, w in zip(pool, weights):
        acc += w
        if w > 0 and pivot <= acc:
            chosen = b
            break
    return chosen


__all__ = ["Biome", "DEFAULT_BIOMES", "pick_biome"]
