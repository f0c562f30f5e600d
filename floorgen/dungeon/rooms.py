import random
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Set, Tuple

from ..logging_utils import get_logger
from .cells import Cell, Rect

MIN_ROOM_SIZE = 2

log = get_logger("floorgen.rooms")


class RoomType(str, Enum):
    ENTRANCE = "entrance"
    EXIT = "exit"
    BOSS = "boss"
    COMBAT = "combat"
    MAIN_PATH = "main_path"
    SIDE = "side"
    SHOP = "shop"
    TREASURE = "treasure"
    EMPTY = "empty"


class RoomAccess(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    LOCKED = "locked"


# Renderer-facing theme keys; the generator never reads these.
THEME_KEYS = {
    RoomType.ENTRANCE: "room_entrance",
    RoomType.EXIT: "room_exit",
    RoomType.BOSS: "room_boss",
    RoomType.COMBAT: "room_combat",
    RoomType.MAIN_PATH: "room_combat",
    RoomType.SIDE: "room_combat",
    RoomType.SHOP: "room_shop",
    RoomType.TREASURE: "room_treasure",
    RoomType.EMPTY: "room_empty",
}


@dataclass
class Room:
    id: int
    rect: Rect
    cell: Rect
    type: RoomType = RoomType.COMBAT
    access: RoomAccess = RoomAccess.OPEN
    distance: int = -1
    on_main_path: bool = False
    has_key: bool = False
    connections: Set[int] = field(default_factory=set)
    spawn_points: List[Tuple[int, int]] = field(default_factory=list)

    @property
    def x(self) -> int:
        return self.rect.x

    @property
    def y(self) -> int:
        return self.rect.y

    @property
    def w(self) -> int:
        return self.rect.w

    @property
    def h(self) -> int:
        return self.rect.h

    @property
    def center(self) -> Tuple[int, int]:
        return self.rect.center

    def cells(self):
        return self.rect.tiles()

    def reset_classification(self):
        self.type = RoomType.COMBAT
        self.access = RoomAccess.OPEN
        self.distance = -1
        self.on_main_path = False
        self.spawn_points = []

    def to_dict(self):
        return {
            "id": self.id,
            "rect": list(self.rect),
            "type": self.type.value,
            "access": self.access.value,
            "distance": self.distance,
            "on_main_path": self.on_main_path,
            "has_key": self.has_key,
            "connections": sorted(self.connections),
            "spawn_points": [list(p) for p in self.spawn_points],
        }


def carve_room(cell: Cell, rng: random.Random, room_id: int, min_inset: int = 1, max_inset: int = 3) -> Room:
    """Inscribe a room in ``cell`` using four independently drawn side insets.

    Draw order is left, right, top, bottom. Each inset is clamped to half of
    the slack above the 2x2 minimum so the room always keeps at least one
    tile of margin on every side of a cell that is 4+ tiles wide.
    """
    r = cell.rect
    left = rng.randint(min_inset, max_inset)
    right = rng.randint(min_inset, max_inset)
    top = rng.randint(min_inset, max_inset)
    bottom = rng.randint(min_inset, max_inset)
    max_h = max(0, (r.w - MIN_ROOM_SIZE) // 2)
    max_v = max(0, (r.h - MIN_ROOM_SIZE) // 2)
    left, right = min(left, max_h), min(right, max_h)
    top, bottom = min(top, max_v), min(bottom, max_v)
    rect = Rect(r.x + left, r.y + top, r.w - left - right, r.h - top - bottom)
    return Room(id=room_id, rect=rect, cell=r)


def carve_rooms(leaves: List[Cell], rng: random.Random, min_inset: int = 1, max_inset: int = 3) -> List[Room]:
    rooms = [carve_room(leaf, rng, i, min_inset, max_inset) for i, leaf in enumerate(leaves)]
    log.debug(event="rooms_carved", rooms=len(rooms))
    return rooms


__all__ = ["Room", "RoomType", "RoomAccess", "THEME_KEYS", "MIN_ROOM_SIZE", "carve_room", "carve_rooms"]
