import pytest

from floorgen.dungeon import ConfigurationError, FloorConfig, RoomAccess, RoomType, generate, generate_floor
from floorgen.dungeon.metrics import init_metrics
from tests.floor_test_utils import SEEDS, tile_reachable


def test_example_floor_shape(example_layout):
    layout = example_layout
    assert (layout.width, layout.height) == (40, 30)
    assert layout.seed == 12345
    assert len(layout.rooms) >= 4
    types = [r.type for r in layout.rooms]
    assert types.count(RoomType.ENTRANCE) == 1
    assert types.count(RoomType.BOSS) + types.count(RoomType.EXIT) == 1
    assert layout.main_path[0] == layout.entrance_room().id
    assert layout.main_path[-1] == layout.exit_room().id

    assert all(r.distance >= 0 for r in layout.rooms)
    reach = tile_reachable(layout, layout.entrance_room().center, unlocked=layout.locked_doors)
    assert all(r.center in reach for r in layout.rooms)

    assert len(layout.locks) == 1
    lk = layout.locks[0]
    assert layout.rooms[lk.key_room].distance < layout.rooms[lk.locked_room].distance
    assert [r.id for r in layout.rooms if r.access == RoomAccess.LOCKED] == [lk.locked_room]


@pytest.mark.parametrize("seed", SEEDS)
def test_same_seed_same_floor(seed):
    cfg = FloorConfig(width=60, height=45, seed=seed)
    assert generate(cfg).fingerprint() == generate(cfg).fingerprint()


@pytest.mark.parametrize("seed", SEEDS)
def test_rooms_do_not_overlap_and_stay_in_cells(seed):
    layout = generate(FloorConfig(width=60, height=45, seed=seed))
    for i, a in enumerate(layout.rooms):
        assert a.id == i
        assert a.cell.contains_rect(a.rect)
        assert a.w >= 2 and a.h >= 2
        for b in layout.rooms[i + 1 :]:
            assert not a.rect.intersects(b.rect)


@pytest.mark.parametrize("seed", SEEDS)
def test_every_room_reachable_with_all_doors_open(seed):
    layout = generate(FloorConfig(width=60, height=45, seed=seed, lock_count=2))
    start = layout.entrance_room().center
    reach = tile_reachable(layout, start, unlocked=layout.locked_doors)
    for r in layout.rooms:
        if r.distance >= 0:
            assert r.center in reach


def test_metrics_recorded_when_enabled(example_layout):
    m = example_layout.metrics
    assert set(init_metrics()) <= set(m)
    assert m["rooms"] == len(example_layout.rooms)
    assert m["corridors"] == len(example_layout.corridors)
    assert m["locks_placed"] == len(example_layout.locks)
    assert m["tree_edges"] == len(example_layout.rooms) - m["components"]
    assert set(m["phase_ms"]) == {
        "partition",
        "carve_rooms",
        "candidate_edges",
        "resolve",
        "carve_corridors",
        "finalize_tiles",
        "classify",
        "place_locks",
    }


def test_metrics_disabled():
    layout = generate(FloorConfig(width=40, height=30, seed=5, enable_metrics=False))
    assert layout.metrics == {}


@pytest.mark.parametrize("field_name,kwargs", [("width", {"width": 3}), ("height", {"height": 2})])
def test_too_small_floor_raises(field_name, kwargs):
    with pytest.raises(ConfigurationError) as exc:
        generate(FloorConfig(**kwargs))
    assert exc.value.field == field_name


def test_zero_seed_is_replaced():
    layout = generate(FloorConfig(width=30, height=20, seed=0))
    assert layout.seed != 0
    assert layout.config.seed == layout.seed
    again = generate(FloorConfig(width=30, height=20, seed=layout.seed))
    assert again.fingerprint() == layout.fingerprint()


def test_generate_floor_shortcut():
    a = generate_floor(width=40, height=30, seed=99)
    b = generate(FloorConfig(width=40, height=30, seed=99))
    assert a.fingerprint() == b.fingerprint()


def test_smallest_floor_has_single_room():
    layout = generate(FloorConfig(width=4, height=4, seed=3))
    assert len(layout.rooms) == 1
    room = layout.rooms[0]
    assert room.type == RoomType.ENTRANCE
    assert layout.corridors == []
    assert layout.main_path == [0]
    assert layout.locks == []
    assert layout.exit_room() is None


def test_boss_floor_endpoint():
    layout = generate(FloorConfig(width=60, height=45, seed=42, floor_level=5, boss_interval=5))
    endpoint = layout.exit_room()
    assert endpoint.type == RoomType.BOSS
    assert not layout.rooms_of_type(RoomType.EXIT)


def test_partition_depth_zero_single_room():
    layout = generate(FloorConfig(width=40, height=30, seed=1, max_depth=0))
    assert len(layout.rooms) == 1
