"""Binary space partitioning of the floor into leaf cells."""
from __future__ import annotations

import random
from typing import Iterator, List, NamedTuple, Optional, Tuple

from ..logging_utils import get_logger

Coord2D = Tuple[int, int]

log = get_logger("floorgen.partition")


class Rect(NamedTuple):
    x: int
    y: int
    w: int
    h: int

    @property
    def x2(self) -> int:
        return self.x + self.w

    @property
    def y2(self) -> int:
        return self.y + self.h

    @property
    def center(self) -> Coord2D:
        return (self.x + self.w // 2, self.y + self.h // 2)

    def contains(self, pos: Coord2D) -> bool:
        px, py = pos
        return self.x <= px < self.x2 and self.y <= py < self.y2

    def contains_rect(self, other: "Rect") -> bool:
        return self.x <= other.x and self.y <= other.y and other.x2 <= self.x2 and other.y2 <= self.y2

    def intersects(self, other: "Rect") -> bool:
        return self.x < other.x2 and other.x < self.x2 and self.y < other.y2 and other.y < self.y2

    def on_perimeter(self, pos: Coord2D) -> bool:
        px, py = pos
        return self.contains(pos) and (px in (self.x, self.x2 - 1) or py in (self.y, self.y2 - 1))

    def tiles(self) -> Iterator[Coord2D]:
        for ix in range(self.x, self.x2):
            for iy in range(self.y, self.y2):
                yield ix, iy


class Cell:
    """Node of the partition tree; a leaf when it has no children."""

    __slots__ = ("rect", "depth", "left", "right")

    def __init__(self, rect: Rect, depth: int = 0):
        self.rect = rect
        self.depth = depth
        self.left: Optional[Cell] = None
        self.right: Optional[Cell] = None

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    def __repr__(self):
        return f"Cell({self.rect.x},{self.rect.y},{self.rect.w},{self.rect.h},depth={self.depth})"


def _split(cell: Cell, rng: random.Random, min_size: int, max_depth: int) -> None:
    if cell.depth >= max_depth:
        return
    r = cell.rect
    can_v = r.w >= 2 * min_size
    can_h = r.h >= 2 * min_size
    if not (can_v or can_h):
        return
    if can_v and can_h:
        vertical = rng.random() < 0.5
    else:
        vertical = can_v
    if vertical:
        cut = rng.randint(min_size, r.w - min_size)
        cell.left = Cell(Rect(r.x, r.y, cut, r.h), cell.depth + 1)
        cell.right = Cell(Rect(r.x + cut, r.y, r.w - cut, r.h), cell.depth + 1)
    else:
        cut = rng.randint(min_size, r.h - min_size)
        cell.left = Cell(Rect(r.x, r.y, r.w, cut), cell.depth + 1)
        cell.right = Cell(Rect(r.x, r.y + cut, r.w, r.h - cut), cell.depth + 1)
    _split(cell.left, rng, min_size, max_depth)
    _split(cell.right, rng, min_size, max_depth)


def collect_leaves(root: Cell) -> List[Cell]:
    leaves: List[Cell] = []
    stack = [root]
    while stack:
        node = stack.pop()
        if node.is_leaf:
            leaves.append(node)
        else:
            # right pushed first so left subtree is emitted first (pre-order)
            stack.append(node.right)
            stack.append(node.left)
    return leaves


def partition(width: int, height: int, rng: random.Random, min_cell_size: int, max_depth: int) -> List[Cell]:
    """Split a ``width`` x ``height`` floor and return its leaf cells in pre-order.

    A floor too small to split along either axis comes back as a single leaf.
    """
    root = Cell(Rect(0, 0, width, height))
    _split(root, rng, min_cell_size, max_depth)
    leaves = collect_leaves(root)
    log.debug(event="partition_done", leaves=len(leaves), width=width, height=height)
    return leaves


__all__ = ["Rect", "Cell", "Coord2D", "partition", "collect_leaves"]
