"""Pipeline orchestration for floor generation.

``generate`` validates the config once, seeds a single ``random.Random`` and
threads it through every stage in a fixed order:

    partition -> carve_rooms -> candidate_edges -> resolve -> carve_corridors
    -> finalize_tiles -> classify -> place_locks

Reordering stages (or adding draws inside one) changes every floor produced
for a given seed.
"""
from __future__ import annotations

import random
import time
from typing import Any, Callable, Dict, Optional

from ..logging_utils import get_logger
from .adjacency import build_candidate_edges
from .biomes import pick_biome
from .cells import partition
from .config import FloorConfig
from .connectivity import resolve
from .errors import CorridorCarveFailure
from .features import classify
from .layout import LevelLayout
from .locks import place_locks_and_keys
from .metrics import init_metrics
from .rooms import carve_rooms
from .tunnels import carve_corridors, finalize_tiles

log = get_logger("floorgen.pipeline")


def generate(config: Optional[FloorConfig] = None) -> LevelLayout:
    """Build one floor. Raises ``ConfigurationError`` for an unusable config."""
    cfg = (config or FloorConfig()).validated()
    rng = random.Random(cfg.seed)
    layout = LevelLayout(width=cfg.width, height=cfg.height, seed=cfg.seed, config=cfg)

    if cfg.enable_metrics:
        start = time.perf_counter()
        phase_times: Dict[str, int] = {}

        def _phase(label: str, fn: Callable[..., Any], *a, **k):
            ps = time.perf_counter(); r = fn(*a, **k); pe = time.perf_counter()
            phase_times[label] = int((pe - ps) * 1000)
            return r
    else:
        def _phase(label: str, fn: Callable[..., Any], *a, **k):
            return fn(*a, **k)

    leaves = _phase('partition', partition, cfg.width, cfg.height, rng, cfg.min_cell_size, cfg.max_depth)
    layout.rooms = _phase('carve_rooms', carve_rooms, leaves, rng, cfg.min_inset, cfg.max_inset)
    candidates = _phase('candidate_edges', build_candidate_edges, layout.rooms)
    graph = _phase(
        'resolve', resolve, candidates, len(layout.rooms), rng, cfg.loop_probability, cfg.extra_connection_budget
    )
    _phase('carve_corridors', carve_corridors, layout, graph.edges, rng, cfg.corridor_width, graph.loops)
    _phase('finalize_tiles', finalize_tiles, layout)
    _phase('classify', classify, layout, rng)
    _phase('place_locks', place_locks_and_keys, layout, cfg.lock_count, rng)
    layout.biome = pick_biome(cfg.floor_level, cfg.seed)

    if cfg.enable_metrics:
        m = init_metrics()
        m['partitions'] = len(leaves)
        m['rooms'] = len(layout.rooms)
        m['candidate_edges'] = len(candidates)
        m['tree_edges'] = len(graph.tree)
        m['loop_edges'] = len(graph.loops)
        m['components'] = len(graph.components)
        m['corridors'] = len(layout.corridors)
        m['carve_failures'] = sum(1 for w in layout.warnings if isinstance(w, CorridorCarveFailure))
        m['locks_placed'] = len(layout.locks)
        m['tiles_floor'] = len(layout.floor_tiles)
        m['tiles_wall'] = len(layout.wall_tiles)
        m['tiles_door'] = len(layout.door_tiles)
        m['warnings'] = len(layout.warnings)
        m['runtime_ms'] = int((time.perf_counter() - start) * 1000)
        m['phase_ms'] = phase_times
        layout.metrics = m

    log.info(
        event="floor_generated",
        seed=cfg.seed,
        size=f"{cfg.width}x{cfg.height}",
        rooms=len(layout.rooms),
        corridors=len(layout.corridors),
        locks=len(layout.locks),
        warnings=len(layout.warnings),
        biome=layout.biome.name if layout.biome else None,
    )
    return layout


def generate_floor(**kwargs) -> LevelLayout:
    """Shortcut for ``generate(FloorConfig(**kwargs))``."""
    return generate(FloorConfig(**kwargs))


__all__ = ["generate", "generate_floor"]
