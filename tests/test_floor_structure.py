import random
import time

import pytest

from floorgen.dungeon import FloorConfig, InsolvableLockWarning, generate
from tests.floor_test_utils import SEEDS, tile_reachable


def scan_for_wall_hugging(layout):
    """Corridor tiles 4-adjacent to a room tile that is not one of their own doors."""
    bad = []
    for c in layout.corridors:
        own = {c.door_a, c.door_b}
        for x, y in c.tiles:
            if (x, y) in own:
                continue
            for dx, dy in ((1, 0), (-1, 0), (0, 1), (0, -1)):
                n = (x + dx, y + dy)
                if n not in own and layout.room_at(n) is not None:
                    bad.append(((x, y), n))
    return bad


def open_by_collecting_keys(layout):
    """Walk from the entrance, pick up every reachable key and open its door until stuck."""
    start = layout.entrance_room().center
    opened = set()
    while True:
        reach = tile_reachable(layout, start, unlocked=opened)
        newly = {lk.door for lk in layout.locks if lk.door not in opened and lk.key_tile in reach}
        if not newly:
            return opened, reach
        opened |= newly


@pytest.mark.structure
@pytest.mark.parametrize("seed", SEEDS)
def test_corridors_only_touch_rooms_at_their_doors(seed):
    layout = generate(FloorConfig(width=60, height=45, seed=seed, loop_probability=0.3))
    bad = scan_for_wall_hugging(layout)
    assert not bad, f"seed {seed}: {bad[:5]} (count={len(bad)})"


@pytest.mark.structure
@pytest.mark.parametrize("loop_probability", [0.0, 0.2])
@pytest.mark.parametrize("seed", SEEDS)
def test_locked_rooms_unreachable_without_keys(seed, loop_probability):
    layout = generate(FloorConfig(width=60, height=45, seed=seed, lock_count=2, loop_probability=loop_probability))
    assert not [w for w in layout.warnings if isinstance(w, InsolvableLockWarning)]
    assert layout.locks
    reach = tile_reachable(layout, layout.entrance_room().center)
    for lk in layout.locks:
        locked = layout.rooms[lk.locked_room]
        assert not reach & set(locked.cells()), f"seed {seed}: room {locked.id} reachable past {lk.door}"


@pytest.mark.structure
@pytest.mark.parametrize("seed", SEEDS)
def test_every_lock_opens_by_walking_tiles(seed):
    layout = generate(FloorConfig(width=60, height=45, seed=seed, lock_count=3))
    opened, reach = open_by_collecting_keys(layout)
    assert opened == {lk.door for lk in layout.locks}
    for r in layout.rooms:
        if r.distance >= 0:
            assert r.center in reach


@pytest.mark.structure
def test_wall_hugging_random_seed():
    seed = random.randint(1, 1_000_000)
    layout = generate(FloorConfig(width=80, height=60, seed=seed, loop_probability=0.5))
    bad = scan_for_wall_hugging(layout)
    assert not bad, f"Random seed {seed} produced {len(bad)} corridor tiles beside a foreign room wall"


# Simple performance guardrail. Not a strict micro-benchmark; aims to catch large regressions.
# Adjust thresholds if CI hardware differs significantly.


@pytest.mark.performance
def test_generation_medium_seeds():
    seeds = [10101, 20202, 30303]
    max_seconds_per = 1.5  # generous threshold; tune as needed
    timings = []
    for s in seeds:
        start = time.perf_counter()
        layout = generate(FloorConfig(width=80, height=60, seed=s, lock_count=2))
        elapsed = time.perf_counter() - start
        timings.append(elapsed)
        assert layout.rooms
        assert elapsed < max_seconds_per, f"Seed {s} took {elapsed:.3f}s (> {max_seconds_per}s)"
    avg = sum(timings) / len(timings)
    assert avg < max_seconds_per * 0.85, f"Average generation {avg:.3f}s too high"


@pytest.mark.performance
def test_generation_dense_floor_stays_bounded():
    # smallest cells at full depth: thousands of rooms
    cfg = FloorConfig(width=200, height=150, seed=777, min_cell_size=4, max_depth=16)
    start = time.perf_counter()
    layout = generate(cfg)
    elapsed = time.perf_counter() - start
    assert len(layout.rooms) > 500
    assert elapsed < 15.0, f"Dense floor took {elapsed:.3f}s"
