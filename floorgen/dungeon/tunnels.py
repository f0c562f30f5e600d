"""Corridor carving between connected rooms.

Every corridor is routed through the shared border of the two rooms' cells:

    door -> approach -> (L leg) -> pivot | pivot -> (L leg) -> approach -> door

The door sits on the room perimeter facing the border, the approach tile is
the first tile outside the room, and the two pivots straddle the border
between the two door coordinates. Because rooms keep at least one tile of
margin inside their cell, every tile lies inside one of the two cells, and a
corridor tile only borders a room tile at that corridor's own doors.
"""
from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from ..logging_utils import get_logger
from . import errors
from .adjacency import Edge, shared_boundary
from .cells import Coord2D, Rect
from .rooms import Room
from .tiles import NEIGHBORS_4, NEIGHBORS_8

if TYPE_CHECKING:
    from .layout import LevelLayout

log = get_logger("floorgen.tunnels")


@dataclass
class Corridor:
    room_a: int
    room_b: int
    door_a: Coord2D
    door_b: Coord2D
    tiles: List[Coord2D] = field(default_factory=list)
    loop: bool = False

    def joins(self, a: int, b: int) -> bool:
        return {self.room_a, self.room_b} == {a, b}

    def door_for(self, room_id: int) -> Optional[Coord2D]:
        if room_id == self.room_a:
            return self.door_a
        if room_id == self.room_b:
            return self.door_b
        return None

    def to_dict(self):
        return {
            "rooms": [self.room_a, self.room_b],
            "doors": [list(self.door_a), list(self.door_b)],
            "loop": self.loop,
            "length": len(self.tiles),
        }


def _clamp(v: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, v))


def _side(rect: Rect, vertical: bool) -> Tuple[int, int]:
    """Inclusive tile range of ``rect`` along the border axis."""
    return (rect.y, rect.y2 - 1) if vertical else (rect.x, rect.x2 - 1)


def _inner(side: Tuple[int, int]) -> Tuple[int, int]:
    lo, hi = side
    return (lo + 1, hi - 1) if hi - lo >= 2 else side


def _overlap(a: Tuple[int, int], b: Tuple[int, int]) -> Optional[Tuple[int, int]]:
    lo, hi = max(a[0], b[0]), min(a[1], b[1])
    return (lo, hi) if lo <= hi else None


def door_coords(low: Rect, high: Rect, vertical: bool, along: int) -> Tuple[int, int]:
    """Border-axis coordinates of the two doors facing a shared border.

    When the facing sides overlap, both doors share one coordinate (corners
    only when the sides overlap on a corner alone), giving a straight
    corridor. Otherwise each door takes the end of its side nearest the
    other room.
    """
    sa, sb = _side(low, vertical), _side(high, vertical)
    common = _overlap(_inner(sa), _inner(sb)) or _overlap(sa, sb)
    if common:
        c = _clamp(along, *common)
        return c, c
    if sa[1] < sb[0]:
        return sa[1], sb[0]
    return sa[0], sb[1]


def door_tile(room: Room, vertical: bool, facing_high: bool, along: int) -> Coord2D:
    """Perimeter tile of ``room`` at ``along`` on the side facing the border."""
    r = room.rect
    if vertical:
        return (r.x2 - 1 if facing_high else r.x, along)
    return (along, r.y2 - 1 if facing_high else r.y)


def l_path(start: Coord2D, end: Coord2D, horizontal_first: bool) -> List[Coord2D]:
    """Tiles from ``start`` to ``end`` inclusive along a single-bend path."""
    (x0, y0), (x1, y1) = start, end
    path = [start]
    x, y = x0, y0
    sx = 1 if x1 > x0 else -1
    sy = 1 if y1 > y0 else -1
    if horizontal_first:
        while x != x1:
            x += sx
            path.append((x, y))
        while y != y1:
            y += sy
            path.append((x, y))
    else:
        while y != y1:
            y += sy
            path.append((x, y))
        while x != x1:
            x += sx
            path.append((x, y))
    return path


def route(room_a: Room, room_b: Room, along: int, horizontal_first: bool) -> Optional[List[Coord2D]]:
    """Primary tile path from ``room_a``'s door to ``room_b``'s door, or ``None``
    when the rooms' cells share no border.

    The pivot sits between the two door coordinates, so each leg moves away
    from its own room and never runs along a room wall.
    """
    shared = shared_boundary(room_a.cell, room_b.cell)
    if shared is None:
        return None
    vertical, boundary, lo, hi = shared
    if vertical:
        low, high = (room_a, room_b) if room_a.cell.x2 == boundary else (room_b, room_a)
    else:
        low, high = (room_a, room_b) if room_a.cell.y2 == boundary else (room_b, room_a)
    at_low, at_high = door_coords(low.rect, high.rect, vertical, along)
    between = _overlap((lo, hi), (min(at_low, at_high), max(at_low, at_high)))
    pivot = _clamp(along, *(between or (lo, hi)))

    def leg(room: Room, facing_high: bool, at: int) -> List[Coord2D]:
        door = door_tile(room, vertical, facing_high, at)
        step = 1 if facing_high else -1
        edge_line = boundary - 1 if facing_high else boundary
        if vertical:
            approach = (door[0] + step, door[1])
            end = (edge_line, pivot)
        else:
            approach = (door[0], door[1] + step)
            end = (pivot, edge_line)
        return [door] + l_path(approach, end, horizontal_first)

    path = leg(low, True, at_low) + list(reversed(leg(high, False, at_high)))
    if low is not room_a:
        path.reverse()
    return path


def _widen(path: Sequence[Coord2D]) -> List[Tuple[Coord2D, bool]]:
    """Pair each tile with a primary flag, interleaving each non-door tile
    with its +1 offset perpendicular to travel."""
    out: List[Tuple[Coord2D, bool]] = []
    last = len(path) - 1
    for i, (x, y) in enumerate(path):
        out.append(((x, y), True))
        if i == 0 or i == last:
            continue
        nx, ny = path[i + 1]
        out.append(((x, y + 1) if ny == y else (x + 1, y), False))
    return out


def touches_room(layout: "LevelLayout", pos: Coord2D, doors: Iterable[Coord2D] = ()) -> bool:
    """True when ``pos`` lies in a room or beside a room tile other than ``doors``."""
    if layout.room_at(pos) is not None:
        return True
    x, y = pos
    for dx, dy in NEIGHBORS_4:
        n = (x + dx, y + dy)
        if n not in doors and layout.room_at(n) is not None:
            return True
    return False


def carve_corridors(
    layout: "LevelLayout",
    edges: Sequence[Edge],
    rng: random.Random,
    corridor_width: int = 2,
    loop_edges: Iterable[Edge] = (),
) -> List[Corridor]:
    """Carve one corridor per edge into ``layout`` and return them in edge order.

    Edges that cannot be routed are skipped with a ``CorridorCarveFailure``
    warning. One coin per carved edge picks the leg orientation. Room tiles
    are only ever reached through a corridor's own two doors; offset tiles
    that would break that, or leave the two cells, are dropped.
    """
    loop_keys = {e.key for e in loop_edges}
    by_id: Dict[int, Room] = {r.id: r for r in layout.rooms}
    corridors: List[Corridor] = []
    for e in edges:
        ra, rb = by_id.get(e.a), by_id.get(e.b)
        if ra is None or rb is None:
            _fail(layout, e.a, e.b, "unknown room id")
            continue
        along = e.door[1] if e.vertical else e.door[0]
        horizontal_first = rng.random() < 0.5
        path = route(ra, rb, along, horizontal_first)
        if path is None:
            _fail(layout, e.a, e.b, "cells share no boundary")
            continue
        doors = (path[0], path[-1])
        if any(touches_room(layout, t, doors) for t in path[1:-1]):
            _fail(layout, e.a, e.b, "route runs along a room wall")
            continue
        steps = _widen(path) if corridor_width >= 2 else [(t, True) for t in path]
        tiles: List[Coord2D] = []
        seen: Set[Coord2D] = set()
        for t, primary in steps:
            if t in seen:
                continue
            if not primary and (
                not (ra.cell.contains(t) or rb.cell.contains(t)) or touches_room(layout, t, doors)
            ):
                continue
            seen.add(t)
            tiles.append(t)
        c = Corridor(e.a, e.b, doors[0], doors[1], tiles, loop=e.key in loop_keys)
        corridors.append(c)
        layout.floor_tiles.update(tiles)
        layout.door_tiles.update(doors)
    layout.corridors.extend(corridors)
    layout.invalidate_indexes()
    log.debug(event="corridors_carved", corridors=len(corridors), edges=len(edges))
    return corridors


def _fail(layout: "LevelLayout", a: int, b: int, reason: str) -> None:
    w = errors.carve_failure(a, b, reason)
    layout.warnings.append(w)
    log.warn(event="corridor_carve_failure", room_a=a, room_b=b, reason=reason)


def finalize_tiles(layout: "LevelLayout") -> None:
    """Merge room tiles into the floor, derive walls and rebuild the room graph."""
    for r in layout.rooms:
        layout.floor_tiles.update(r.cells())
    open_tiles = layout.floor_tiles | layout.door_tiles
    walls: Set[Coord2D] = set()
    for x, y in open_tiles:
        for dx, dy in NEIGHBORS_8:
            n = (x + dx, y + dy)
            if n not in open_tiles and layout.in_bounds(n):
                walls.add(n)
    layout.wall_tiles = walls
    graph: Dict[int, Set[int]] = {r.id: set() for r in layout.rooms}
    for c in layout.corridors:
        graph[c.room_a].add(c.room_b)
        graph[c.room_b].add(c.room_a)
    for r in layout.rooms:
        r.connections = set(graph[r.id])
    layout.room_graph = {rid: sorted(n) for rid, n in graph.items()}


def corridor_between(corridors: Sequence[Corridor], a: int, b: int) -> Tuple[int, Optional[Corridor]]:
    """First corridor (by carve order) joining ``a`` and ``b`` plus its index."""
    for i, c in enumerate(corridors):
        if c.joins(a, b):
            return i, c
    return -1, None


__all__ = [
    "Corridor",
    "carve_corridors",
    "finalize_tiles",
    "corridor_between",
    "route",
    "door_coords",
    "door_tile",
    "l_path",
    "touches_room",
]
