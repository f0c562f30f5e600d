"""Spanning tree plus loop selection over candidate room connections.

Kruskal over a shuffled candidate list gives a random spanning tree; the
rejected candidates are then re-offered as loop edges so the floor is not a
pure tree. A candidate graph that does not span every room produces a forest,
which is reported through ``ResolvedGraph.connected`` rather than raised.
"""
from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from ..logging_utils import get_logger
from .adjacency import Edge

log = get_logger("floorgen.connectivity")


class UnionFind:
    def __init__(self, n: int):
        self.parent = list(range(n))

    def find(self, a: int) -> int:
        while self.parent[a] != a:
            self.parent[a] = self.parent[self.parent[a]]
            a = self.parent[a]
        return a

    def union(self, a: int, b: int) -> bool:
        ra, rb = self.find(a), self.find(b)
        if ra == rb:
            return False
        self.parent[rb] = ra
        return True


@dataclass
class ResolvedGraph:
    tree: List[Edge] = field(default_factory=list)
    loops: List[Edge] = field(default_factory=list)
    components: List[List[int]] = field(default_factory=list)

    @property
    def edges(self) -> List[Edge]:
        return self.tree + self.loops

    @property
    def connected(self) -> bool:
        return len(self.components) <= 1


def resolve(
    edges: Sequence[Edge],
    room_count: int,
    rng: random.Random,
    loop_probability: float = 0.2,
    extra_budget: Optional[int] = None,
) -> ResolvedGraph:
    shuffled = list(edges)
    rng.shuffle(shuffled)
    uf = UnionFind(room_count)
    tree: List[Edge] = []
    for e in shuffled:
        if uf.union(e.a, e.b):
            tree.append(e)
    accepted = {e.key for e in tree}
    loops: List[Edge] = []
    budget = extra_budget
    for e in edges:
        if e.key in accepted:
            continue
        if budget is not None and budget <= 0:
            break
        if rng.random() < loop_probability:
            loops.append(e)
            accepted.add(e.key)
            if budget is not None:
                budget -= 1
    groups: Dict[int, List[int]] = {}
    for rid in range(room_count):
        groups.setdefault(uf.find(rid), []).append(rid)
    components = sorted(groups.values(), key=lambda g: g[0])
    result = ResolvedGraph(tree, loops, components)
    if not result.connected:
        log.warn(event="candidate_graph_disconnected", components=len(components), rooms=room_count)
    log.debug(event="graph_resolved", tree=len(tree), loops=len(loops), candidates=len(edges))
    return result


__all__ = ["UnionFind", "ResolvedGraph", "resolve"]
