"""LevelLayout: the finished floor handed to renderers, spawners and UI.

Rooms are stored in an id-indexed list; corridors, the room graph and lock
assignments refer to rooms by id only.
"""
from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Set

from . import tiles as T
from .cells import Coord2D
from .config import FloorConfig
from .biomes import Biome
from .errors import GenerationWarning, InsolvableLockWarning
from .rooms import Room, RoomAccess, RoomType
from .tunnels import Corridor

if TYPE_CHECKING:
    from .locks import LockAssignment


@dataclass
class LevelLayout:
    width: int
    height: int
    seed: int
    config: FloorConfig
    rooms: List[Room] = field(default_factory=list)
    corridors: List[Corridor] = field(default_factory=list)
    floor_tiles: Set[Coord2D] = field(default_factory=set)
    wall_tiles: Set[Coord2D] = field(default_factory=set)
    door_tiles: Set[Coord2D] = field(default_factory=set)
    room_graph: Dict[int, List[int]] = field(default_factory=dict)
    main_path: List[int] = field(default_factory=list)
    locks: List["LockAssignment"] = field(default_factory=list)
    key_tiles: Set[Coord2D] = field(default_factory=set)
    warnings: List[GenerationWarning] = field(default_factory=list)
    biome: Optional[Biome] = None
    metrics: Dict[str, Any] = field(default_factory=dict)
    _room_index: Optional[Dict[Coord2D, int]] = field(default=None, repr=False, compare=False)
    _corridor_index: Optional[Dict[Coord2D, int]] = field(default=None, repr=False, compare=False)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def in_bounds(self, pos: Coord2D) -> bool:
        return 0 <= pos[0] < self.width and 0 <= pos[1] < self.height

    def room(self, room_id: int) -> Room:
        return self.rooms[room_id]

    def room_at(self, pos: Coord2D) -> Optional[Room]:
        if self._room_index is None:
            self._room_index = {t: r.id for r in self.rooms for t in r.cells()}
        rid = self._room_index.get(tuple(pos))
        return None if rid is None else self.rooms[rid]

    def corridor_at(self, pos: Coord2D) -> Optional[Corridor]:
        """Corridor owning ``pos``; the first carved corridor wins where two overlap."""
        if self._corridor_index is None:
            index: Dict[Coord2D, int] = {}
            for i, c in enumerate(self.corridors):
                for t in c.tiles:
                    index.setdefault(t, i)
            self._corridor_index = index
        ci = self._corridor_index.get(tuple(pos))
        return None if ci is None else self.corridors[ci]

    def rooms_of_type(self, room_type: RoomType) -> List[Room]:
        return [r for r in self.rooms if r.type == room_type]

    def entrance_room(self) -> Optional[Room]:
        found = self.rooms_of_type(RoomType.ENTRANCE)
        return found[0] if found else None

    def exit_room(self) -> Optional[Room]:
        """The main path endpoint: the boss room on boss floors, the exit otherwise."""
        for r in self.rooms:
            if r.type in (RoomType.BOSS, RoomType.EXIT):
                return r
        return None

    @property
    def locked_doors(self) -> Set[Coord2D]:
        return {lk.door for lk in self.locks}

    def is_traversable(self, pos: Coord2D, unlocked: Iterable[Coord2D] = ()) -> bool:
        """Floor and door tiles are traversable; locked doors only once unlocked."""
        pos = tuple(pos)
        if pos in self.locked_doors and pos not in set(map(tuple, unlocked)):
            return False
        return pos in self.floor_tiles or pos in self.door_tiles

    def neighbors(self, room_id: int) -> List[int]:
        return list(self.room_graph.get(room_id, []))

    def theme_for(self, room: Room) -> Optional[str]:
        """Asset key for dressing ``room`` in this floor's biome."""
        return self.biome.theme_for(room.type) if self.biome else None

    def clear_locks(self) -> None:
        """Drop every lock, key and lock warning; locked rooms go back to open."""
        self.locks = []
        self.key_tiles = set()
        self.warnings[:] = [w for w in self.warnings if not isinstance(w, InsolvableLockWarning)]
        for r in self.rooms:
            r.has_key = False
            if r.access == RoomAccess.LOCKED:
                r.access = RoomAccess.OPEN

    def invalidate_indexes(self) -> None:
        self._room_index = None
        self._corridor_index = None

    # ------------------------------------------------------------------
    # Convenience outputs
    # ------------------------------------------------------------------
    def to_grid(self) -> List[List[str]]:
        """Row-major glyph grid (``grid[y][x]``)."""
        grid = [[T.VOID for _ in range(self.width)] for _ in range(self.height)]
        for x, y in self.wall_tiles:
            grid[y][x] = T.WALL
        for x, y in self.floor_tiles:
            grid[y][x] = T.CORRIDOR
        for r in self.rooms:
            for x, y in r.cells():
                grid[y][x] = T.FLOOR
        for x, y in self.door_tiles:
            grid[y][x] = T.DOOR
        for x, y in self.locked_doors:
            grid[y][x] = T.LOCKED_DOOR
        markers = {
            RoomType.ENTRANCE: T.ENTRANCE,
            RoomType.EXIT: T.EXIT,
            RoomType.BOSS: T.BOSS,
            RoomType.SHOP: T.SHOP,
            RoomType.TREASURE: T.TREASURE,
        }
        for r in self.rooms:
            mark = markers.get(r.type)
            if mark:
                cx, cy = r.center
                grid[cy][cx] = mark
        for x, y in self.key_tiles:
            grid[y][x] = T.KEY
        return grid

    def to_ascii(self) -> str:
        return "\n".join("".join(row) for row in self.to_grid())

    def to_dict(self, include_tiles: bool = True) -> Dict[str, Any]:
        data = {
            "seed": self.seed,
            "width": self.width,
            "height": self.height,
            "biome": self.biome.name if self.biome else None,
            "rooms": [r.to_dict() for r in self.rooms],
            "corridors": [c.to_dict() for c in self.corridors],
            "room_graph": {str(k): v for k, v in sorted(self.room_graph.items())},
            "main_path": list(self.main_path),
            "locks": [lk.to_dict() for lk in self.locks],
            "warnings": [w.to_dict() for w in self.warnings],
        }
        if include_tiles:
            data["floor_tiles"] = sorted(list(t) for t in self.floor_tiles)
            data["wall_tiles"] = sorted(list(t) for t in self.wall_tiles)
            data["door_tiles"] = sorted(list(t) for t in self.door_tiles)
            data["key_tiles"] = sorted(list(t) for t in self.key_tiles)
        return data

    def fingerprint(self) -> str:
        """Stable SHA-256 over geometry and classification (metrics excluded)."""
        payload = json.dumps(self.to_dict(include_tiles=True), sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()


__all__ = ["LevelLayout"]
