import random

import pytest

from floorgen.dungeon import FloorConfig, InsolvableLockWarning, RoomAccess, RoomType, generate
from floorgen.dungeon.adjacency import build_candidate_edges
from floorgen.dungeon.features import classify
from floorgen.dungeon.locks import bridges, lock_candidates, parent_room, place_locks_and_keys, seals
from floorgen.dungeon.tunnels import carve_corridors, finalize_tiles
from tests.floor_test_utils import SEEDS, locked_pairs, rooms_reachable, row_of_rooms


def _carved_row(n, **cfg):
    layout = row_of_rooms(n, shop_count=0, treasure_count=0, **cfg)
    rng = random.Random(1)
    carve_corridors(layout, build_candidate_edges(layout.rooms), rng)
    finalize_tiles(layout)
    classify(layout, rng)
    return layout


def test_lock_on_three_room_chain():
    layout = _carved_row(3)
    assert layout.main_path == [0, 1, 2]
    locks = place_locks_and_keys(layout, 1, random.Random(1))
    assert len(locks) == 1
    lk = locks[0]
    assert lk.locked_room == 2
    assert lk.key_room == 1
    assert lk.corridor == 1
    assert lk.door == (12 + 10, 4)
    assert lk.key_tile == (14, 4)
    assert layout.rooms[2].access == RoomAccess.LOCKED
    assert layout.rooms[1].has_key
    assert layout.key_tiles == {(14, 4)}
    assert layout.locks == locks
    assert not layout.is_traversable(lk.door)
    assert layout.is_traversable(lk.door, unlocked=[lk.door])


def test_target_next_to_entrance_is_insolvable():
    layout = _carved_row(2)
    layout.rooms[1].type = RoomType.SHOP
    locks = place_locks_and_keys(layout, 1, random.Random(1))
    assert locks == []
    warnings = [w for w in layout.warnings if isinstance(w, InsolvableLockWarning)]
    assert [w.room_id for w in warnings] == [1]
    assert layout.rooms[1].access != RoomAccess.LOCKED


def test_zero_locks_requested():
    layout = _carved_row(3)
    assert place_locks_and_keys(layout, 0, random.Random(1)) == []
    assert layout.key_tiles == set()


def test_special_rooms_preferred_as_targets():
    layout = _carved_row(4)
    layout.rooms[2].type = RoomType.TREASURE
    assert lock_candidates(layout) == [2]


def test_parent_prefers_main_path_neighbor():
    layout = _carved_row(3)
    assert parent_room(layout, layout.rooms[2]) == 1
    assert parent_room(layout, layout.rooms[0]) is None


def test_replacing_locks_resets_previous_state():
    layout = _carved_row(3)
    place_locks_and_keys(layout, 1, random.Random(1))
    place_locks_and_keys(layout, 0, random.Random(1))
    assert layout.locks == []
    assert not any(r.has_key for r in layout.rooms)
    assert all(r.access != RoomAccess.LOCKED for r in layout.rooms)


def test_bridges_skip_cycle_edges():
    graph = {0: [1], 1: [0, 2, 3], 2: [1, 3], 3: [1, 2, 4], 4: [3]}
    assert bridges(graph) == {frozenset((0, 1)), frozenset((3, 4))}
    assert bridges({0: []}) == set()


def test_rooms_on_a_cycle_are_not_candidates():
    layout = _carved_row(4)
    layout.room_graph = {0: [1], 1: [0, 2, 3], 2: [1, 3], 3: [1, 2]}
    for r in layout.rooms:
        r.distance = {0: 0, 1: 1, 2: 2, 3: 2}[r.id]
    layout.rooms[2].type = RoomType.TREASURE
    assert lock_candidates(layout) == []


def test_lock_skipped_when_floor_walks_around_the_door():
    layout = _carved_row(3)
    # a second strip of floor joins room 1 to room 2 above the corridor
    layout.floor_tiles.update((x, 1) for x in range(14, 25))
    assert not seals(layout, layout.rooms[0].center, layout.rooms[2], {(22, 4)})
    assert place_locks_and_keys(layout, 1, random.Random(1)) == []
    warnings = [w for w in layout.warnings if isinstance(w, InsolvableLockWarning)]
    assert [(w.room_id, w.message) for w in warnings] == [(2, "door does not seal the room")]
    assert layout.rooms[2].access != RoomAccess.LOCKED


def test_reclassifying_clears_locks():
    layout = _carved_row(3)
    place_locks_and_keys(layout, 1, random.Random(1))
    assert layout.locks
    classify(layout, random.Random(1))
    assert layout.locks == []
    assert layout.key_tiles == set()
    assert not any(r.has_key for r in layout.rooms)
    assert all(r.access != RoomAccess.LOCKED for r in layout.rooms)
    assert not layout.locked_doors


@pytest.mark.parametrize("seed", SEEDS)
def test_generated_locks_are_solvable(seed):
    layout = generate(FloorConfig(width=60, height=45, seed=seed, lock_count=2))
    assert not [w for w in layout.warnings if isinstance(w, InsolvableLockWarning)]
    assert layout.locks
    start = layout.main_path[0]
    for lk in layout.locks:
        locked, key = layout.rooms[lk.locked_room], layout.rooms[lk.key_room]
        assert key.distance < locked.distance
        assert key.id != start
        assert key.has_key and lk.key_tile == key.center
        assert locked.access == RoomAccess.LOCKED
        assert locked.rect.on_perimeter(lk.door)
        assert lk.door in layout.door_tiles
        assert layout.corridors[lk.corridor].door_for(locked.id) == lk.door
        # the key is reachable without crossing this lock's corridor
        own = locked_pairs(layout, [lk])
        assert key.id in rooms_reachable(layout.room_graph, start, blocked=own)

    # collect keys and open doors until nothing changes; every lock must open
    opened = set()
    while True:
        closed = [lk for lk in layout.locks if lk.door not in opened]
        reach = rooms_reachable(layout.room_graph, start, blocked=locked_pairs(layout, closed))
        newly = {lk.door for lk in closed if lk.key_room in reach}
        if not newly:
            break
        opened |= newly
    assert opened == {lk.door for lk in layout.locks}
