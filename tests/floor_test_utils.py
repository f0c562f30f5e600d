from collections import deque

from floorgen.dungeon import FloorConfig
from floorgen.dungeon.cells import Rect
from floorgen.dungeon.layout import LevelLayout
from floorgen.dungeon.rooms import Room

SEEDS = [1, 7, 42, 101, 202, 303, 404, 505, 12345, 99999]


def make_room(room_id, cell, rect):
    return Room(id=room_id, rect=Rect(*rect), cell=Rect(*cell))


def make_layout(rooms, width=40, height=30, **cfg):
    """Hand-built layout for stage tests; ``cfg`` feeds ``FloorConfig``."""
    return LevelLayout(width=width, height=height, seed=1, config=FloorConfig(width=width, height=height, **cfg), rooms=rooms)


def row_of_rooms(n, cell=10, inset=2, **cfg):
    """``n`` side-by-side 10x10 cells, each holding a 5x5 room."""
    rooms = [
        make_room(i, (i * cell, 0, cell, cell), (i * cell + inset, inset, cell - 2 * inset - 1, cell - 2 * inset - 1))
        for i in range(n)
    ]
    return make_layout(rooms, width=n * cell, height=cell, **cfg)


def tile_reachable(layout, start, unlocked=()):
    """Return set of (x,y) traversable tiles reachable from start (4-neighborhood)."""
    if not layout.is_traversable(start, unlocked):
        return set()
    q = deque([start])
    vis = {start}
    while q:
        x, y = q.popleft()
        for dx, dy in ((1, 0), (-1, 0), (0, 1), (0, -1)):
            n = (x + dx, y + dy)
            if n not in vis and layout.is_traversable(n, unlocked):
                vis.add(n)
                q.append(n)
    return vis


def rooms_reachable(graph, start, blocked=()):
    """Room ids reachable over ``graph`` without crossing any ``blocked`` (a, b) pair."""
    cut = {frozenset(p) for p in blocked}
    vis = {start}
    q = deque([start])
    while q:
        cur = q.popleft()
        for nb in graph.get(cur, ()):
            if nb in vis or frozenset((cur, nb)) in cut:
                continue
            vis.add(nb)
            q.append(nb)
    return vis


def locked_pairs(layout, locks):
    pairs = []
    for lk in locks:
        c = layout.corridors[lk.corridor]
        pairs.append((c.room_a, c.room_b))
    return pairs


def is_four_connected(tiles):
    tiles = set(tiles)
    if not tiles:
        return True
    start = next(iter(tiles))
    vis = {start}
    q = deque([start])
    while q:
        x, y = q.popleft()
        for dx, dy in ((1, 0), (-1, 0), (0, 1), (0, -1)):
            n = (x + dx, y + dy)
            if n in tiles and n not in vis:
                vis.add(n)
                q.append(n)
    return vis == tiles
