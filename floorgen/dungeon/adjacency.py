"""Candidate connections between rooms whose leaf cells share a border."""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Set, Tuple

from ..logging_utils import get_logger
from .cells import Coord2D, Rect
from .rooms import Room

log = get_logger("floorgen.adjacency")


@dataclass(frozen=True)
class Edge:
    a: int
    b: int
    door: Coord2D
    vertical: bool
    span: Tuple[int, int]

    @property
    def key(self) -> Tuple[int, int]:
        return (self.a, self.b)

    def other(self, room_id: int) -> int:
        return self.b if room_id == self.a else self.a

    def to_dict(self):
        return {"rooms": [self.a, self.b], "door": list(self.door), "vertical": self.vertical}


def shared_boundary(ca: Rect, cb: Rect) -> Optional[Tuple[bool, int, int, int]]:
    """Describe the border ``ca`` and ``cb`` share, if any.

    Returns ``(vertical, boundary, lo, hi)``: ``boundary`` is the first
    column (vertical) or row (horizontal) of the higher-coordinate cell and
    ``lo..hi`` the inclusive overlap along the border. ``None`` when the cells
    only touch at a corner or not at all.
    """
    if ca.x2 == cb.x or cb.x2 == ca.x:
        lo, hi = max(ca.y, cb.y), min(ca.y2, cb.y2) - 1
        if hi >= lo:
            return True, (cb.x if ca.x2 == cb.x else ca.x), lo, hi
    if ca.y2 == cb.y or cb.y2 == ca.y:
        lo, hi = max(ca.x, cb.x), min(ca.x2, cb.x2) - 1
        if hi >= lo:
            return False, (cb.y if ca.y2 == cb.y else ca.y), lo, hi
    return None


def build_candidate_edges(rooms: Sequence[Room]) -> List[Edge]:
    """One edge per pair of rooms whose cells share a border, ordered by room index.

    Cells are bucketed by their left and top coordinates so each room only
    looks at the cells that start where it ends.
    """
    by_x: Dict[int, List[int]] = defaultdict(list)
    by_y: Dict[int, List[int]] = defaultdict(list)
    for i, r in enumerate(rooms):
        by_x[r.cell.x].append(i)
        by_y[r.cell.y].append(i)
    pairs: Set[Tuple[int, int]] = set()
    for i, r in enumerate(rooms):
        for j in by_x.get(r.cell.x2, []) + by_y.get(r.cell.y2, []):
            if shared_boundary(r.cell, rooms[j].cell) is not None:
                pairs.add((min(i, j), max(i, j)))
    edges: List[Edge] = []
    for i, j in sorted(pairs):
        ra, rb = rooms[i], rooms[j]
        vertical, boundary, lo, hi = shared_boundary(ra.cell, rb.cell)
        mid = (lo + hi) // 2
        door = (boundary - 1, mid) if vertical else (mid, boundary - 1)
        a, b = sorted((ra.id, rb.id))
        edges.append(Edge(a, b, door, vertical, (lo, hi)))
    log.debug(event="candidate_edges", rooms=len(rooms), edges=len(edges))
    return edges


__all__ = ["Edge", "build_candidate_edges", "shared_boundary"]
