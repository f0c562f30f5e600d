"""Room classification: distances from the entrance, main path, special rooms.

Logic:
  * Entrance = room whose rectangle is closest to the floor origin (min x + y).
  * BFS over the room graph gives every reachable room its distance.
  * The farthest room ends the main path; it is the boss room on boss floors
    (``floor_level % boss_interval == 0``) and the exit otherwise.
  * Rooms off the main path become side rooms; those nearest the mean side
    distance are promoted to shops, then treasure rooms, and a fraction of the
    remainder is left empty.
  * Rooms the BFS never reaches stay closed and are reported as a warning.
"""
from __future__ import annotations

import random
from collections import deque
from typing import TYPE_CHECKING, Dict, List, Mapping, Optional, Sequence, Tuple

from ..logging_utils import get_logger
from . import errors
from .errors import DisconnectedGraphWarning
from .rooms import Room, RoomAccess, RoomType

if TYPE_CHECKING:
    from .layout import LevelLayout

log = get_logger("floorgen.features")

SPAWN_ROOM_TYPES = (RoomType.SIDE, RoomType.MAIN_PATH, RoomType.BOSS)
SPAWN_PADDING = 1


def bfs_distances(graph: Mapping[int, Sequence[int]], start: int) -> Tuple[Dict[int, int], Dict[int, Optional[int]]]:
    """Hop distance and BFS parent for every room reachable from ``start``.

    Neighbors are visited in ascending id order so parents are deterministic.
    """
    dist: Dict[int, int] = {start: 0}
    parent: Dict[int, Optional[int]] = {start: None}
    q = deque([start])
    while q:
        cur = q.popleft()
        for nb in sorted(graph.get(cur, ())):
            if nb in dist:
                continue
            dist[nb] = dist[cur] + 1
            parent[nb] = cur
            q.append(nb)
    return dist, parent


def pick_start(rooms: Sequence[Room]) -> Room:
    return min(rooms, key=lambda r: (r.x + r.y, r.id))


def interior_tiles(room: Room, padding: int = SPAWN_PADDING) -> List[Tuple[int, int]]:
    r = room.rect
    return [
        (x, y)
        for y in range(r.y + padding, r.y2 - padding)
        for x in range(r.x + padding, r.x2 - padding)
    ]


def classify(layout: "LevelLayout", rng: random.Random) -> None:
    cfg = layout.config
    rooms = layout.rooms
    layout.warnings[:] = [w for w in layout.warnings if not isinstance(w, DisconnectedGraphWarning)]
    layout.main_path = []
    layout.clear_locks()
    for r in rooms:
        r.reset_classification()
    if not rooms:
        return

    start = pick_start(rooms)
    dist, parent = bfs_distances(layout.room_graph, start.id)
    for rid, d in dist.items():
        rooms[rid].distance = d

    end_id = max(dist, key=lambda rid: (dist[rid], -rid))
    path: List[int] = []
    cur: Optional[int] = end_id
    while cur is not None:
        path.append(cur)
        cur = parent[cur]
    path.reverse()
    layout.main_path = path
    for rid in path:
        rooms[rid].on_main_path = True
        rooms[rid].type = RoomType.MAIN_PATH
    start.type = RoomType.ENTRANCE
    if end_id != start.id:
        boss_floor = cfg.floor_level % cfg.boss_interval == 0
        rooms[end_id].type = RoomType.BOSS if boss_floor else RoomType.EXIT

    unreached: List[int] = []
    for r in rooms:
        if r.id in dist:
            if not r.on_main_path:
                r.type = RoomType.SIDE
            r.access = RoomAccess.CLOSED if r.type == RoomType.BOSS else RoomAccess.OPEN
        else:
            r.type = RoomType.SIDE
            r.access = RoomAccess.CLOSED
            unreached.append(r.id)
    if unreached:
        w = errors.disconnected(unreached)
        layout.warnings.append(w)
        log.warn(event="rooms_unreachable", rooms=len(unreached), ids=",".join(map(str, w.room_ids)))

    side = [r for r in rooms if r.type == RoomType.SIDE and r.id in dist]
    if side:
        mean = sum(r.distance for r in side) / len(side)
        ranked = sorted(side, key=lambda r: (abs(r.distance - mean), r.id))
        shops = ranked[: cfg.shop_count]
        treasures = ranked[cfg.shop_count : cfg.shop_count + cfg.treasure_count]
        for r in shops:
            r.type = RoomType.SHOP
        for r in treasures:
            r.type = RoomType.TREASURE
        remaining = sorted(r.id for r in side if r.type == RoomType.SIDE)
        n_empty = min(len(remaining), int(round(cfg.empty_fraction * len(remaining))))
        for rid in rng.sample(remaining, n_empty):
            rooms[rid].type = RoomType.EMPTY

    for r in rooms:
        if r.type not in SPAWN_ROOM_TYPES or r.id not in dist:
            continue
        spots = interior_tiles(r)
        k = min(cfg.spawns_per_room, len(spots))
        r.spawn_points = sorted(rng.sample(spots, k)) if k else []

    counts: Dict[str, int] = {}
    for r in rooms:
        counts[r.type.value] = counts.get(r.type.value, 0) + 1
    log.info(
        event="rooms_classified",
        rooms=len(rooms),
        main_path=len(path),
        unreached=len(unreached),
        types=",".join(f"{k}:{v}" for k, v in sorted(counts.items())),
    )


__all__ = ["classify", "bfs_distances", "pick_start", "interior_tiles", "SPAWN_ROOM_TYPES"]
