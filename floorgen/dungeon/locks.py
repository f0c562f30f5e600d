"""Lock-and-key placement.

A lock gates one room behind the door of the corridor that joins it to its
parent (a neighbor one step closer to the entrance). Its key goes into a room
strictly closer to the entrance that no earlier lock already gates, which
keeps every floor solvable by construction.
"""
from __future__ import annotations

import random
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, FrozenSet, Iterator, List, Mapping, Optional, Sequence, Set, Tuple

from ..logging_utils import get_logger
from . import errors
from .cells import Coord2D
from .features import bfs_distances
from .rooms import Room, RoomAccess, RoomType
from .tiles import NEIGHBORS_4
from .tunnels import corridor_between

if TYPE_CHECKING:
    from .layout import LevelLayout

log = get_logger("floorgen.locks")

LOCKABLE_TYPES = (RoomType.TREASURE, RoomType.SHOP)
MIN_LOCK_DISTANCE = 2


@dataclass(frozen=True)
class LockAssignment:
    door: Coord2D
    locked_room: int
    key_room: int
    key_tile: Coord2D
    corridor: int

    def to_dict(self):
        return {
            "door": list(self.door),
            "locked_room": self.locked_room,
            "key_room": self.key_room,
            "key_tile": list(self.key_tile),
            "corridor": self.corridor,
        }


def bridges(graph: Mapping[int, Sequence[int]]) -> Set[FrozenSet[int]]:
    """Room pairs whose corridor is the only way between their two sides."""
    disc: Dict[int, int] = {}
    low: Dict[int, int] = {}
    found: Set[FrozenSet[int]] = set()
    for root in sorted(graph):
        if root in disc:
            continue
        disc[root] = low[root] = len(disc)
        stack: List[Tuple[int, Optional[int], Iterator[int]]] = [(root, None, iter(sorted(graph[root])))]
        while stack:
            node, up, todo = stack[-1]
            for nb in todo:
                if nb == up:
                    continue
                if nb in disc:
                    low[node] = min(low[node], disc[nb])
                    continue
                disc[nb] = low[nb] = len(disc)
                stack.append((nb, node, iter(sorted(graph.get(nb, ())))))
                break
            else:
                stack.pop()
                if up is not None:
                    low[up] = min(low[up], low[node])
                    if low[node] > disc[up]:
                        found.add(frozenset((up, node)))
    return found


def lock_candidates(layout: "LevelLayout") -> List[int]:
    """Rooms worth gating, in the order ``rng.sample`` sees them.

    Only rooms whose parent corridor is a bridge qualify: a loop around the
    door would make the lock pointless. Shops and treasure rooms come first,
    then the deepest off-path rooms, then any deep room (the boss or exit
    included). Rooms one step from the entrance have no possible key room and
    are only offered as a last resort.
    """
    cut = bridges(layout.room_graph)
    rooms = []
    for r in layout.rooms:
        pid = parent_room(layout, r)
        if pid is not None and frozenset((r.id, pid)) in cut:
            rooms.append(r)
    deep = [r for r in rooms if r.distance >= MIN_LOCK_DISTANCE]
    special = [r.id for r in deep if r.type in LOCKABLE_TYPES]
    if special:
        return special
    off_path = sorted((r for r in deep if not r.on_main_path), key=lambda r: (-r.distance, r.id))
    if off_path:
        return [r.id for r in off_path]
    if deep:
        return [r.id for r in sorted(deep, key=lambda r: (-r.distance, r.id))]
    return [r.id for r in rooms if r.type in LOCKABLE_TYPES and r.distance > 0]


def parent_room(layout: "LevelLayout", target: Room) -> Optional[int]:
    """Neighbor one step closer to the entrance; main-path rooms win, then lowest id."""
    if target.distance <= 0:
        return None
    ups = [
        layout.rooms[n]
        for n in layout.room_graph.get(target.id, ())
        if layout.rooms[n].distance == target.distance - 1
    ]
    if not ups:
        return None
    return min(ups, key=lambda r: (not r.on_main_path, r.id)).id


def seals(layout: "LevelLayout", start: Coord2D, target: Room, closed: Set[Coord2D]) -> bool:
    """True when no walk from ``start`` reaches ``target`` with ``closed`` shut."""
    seen = {start}
    q = deque([start])
    while q:
        x, y = q.popleft()
        if target.rect.contains((x, y)):
            return False
        for dx, dy in NEIGHBORS_4:
            n = (x + dx, y + dy)
            if n in seen or n in closed:
                continue
            if n in layout.floor_tiles or n in layout.door_tiles:
                seen.add(n)
                q.append(n)
    return True


def _behind(room_id: int, tree_parent: Dict[int, Optional[int]], locked: Set[int]) -> bool:
    cur: Optional[int] = room_id
    while cur is not None:
        if cur in locked:
            return True
        cur = tree_parent.get(cur)
    return False


def _skip(layout: "LevelLayout", room_id: int, reason: str) -> None:
    layout.warnings.append(errors.insolvable_lock(room_id, reason))
    log.warn(event="lock_skipped", room=room_id, reason=reason)


def place_locks_and_keys(layout: "LevelLayout", lock_count: int, rng: random.Random) -> List[LockAssignment]:
    layout.clear_locks()
    if lock_count <= 0 or not layout.main_path:
        return []
    rooms = layout.rooms
    start = layout.main_path[0]
    _, tree_parent = bfs_distances(layout.room_graph, start)

    candidates = lock_candidates(layout)
    entrance = rooms[start].center
    targets = rng.sample(candidates, min(lock_count, len(candidates)))
    target_set = set(targets)
    locked: Set[int] = set()
    placed: List[LockAssignment] = []
    for tid in targets:
        target = rooms[tid]
        pid = parent_room(layout, target)
        if pid is None:
            _skip(layout, tid, "no parent room one step closer to the entrance")
            continue
        idx, corridor = corridor_between(layout.corridors, tid, pid)
        if corridor is None:
            _skip(layout, tid, f"no corridor between {tid} and {pid}")
            continue
        door = corridor.door_for(tid)
        if not seals(layout, entrance, target, {lk.door for lk in placed} | {door}):
            _skip(layout, tid, "door does not seal the room")
            continue
        keyable = sorted(
            r.id
            for r in rooms
            if 0 < r.distance < target.distance
            and r.id != start
            and r.id not in target_set
            and not _behind(r.id, tree_parent, locked)
        )
        if not keyable:
            _skip(layout, tid, "no key room upstream of the lock")
            continue
        key_id = rng.choice(keyable)
        key_room = rooms[key_id]
        key_room.has_key = True
        target.access = RoomAccess.LOCKED
        lock = LockAssignment(door, tid, key_id, key_room.center, idx)
        placed.append(lock)
        locked.add(tid)
        layout.key_tiles.add(key_room.center)
        log.debug(event="lock_placed", room=tid, key_room=key_id, door=lock.door)
    layout.locks = placed
    log.info(event="locks_placed", requested=lock_count, placed=len(placed), candidates=len(candidates))
    return placed


__all__ = [
    "LockAssignment",
    "place_locks_and_keys",
    "lock_candidates",
    "parent_room",
    "bridges",
    "seals",
    "LOCKABLE_TYPES",
]
