# Tile glyphs used by the ASCII preview
VOID = " "
FLOOR = "."
CORRIDOR = ","
WALL = "#"
DOOR = "+"
LOCKED_DOOR = "L"
KEY = "k"

# Room markers drawn at room centers
ENTRANCE = "E"
EXIT = "X"
BOSS = "B"
SHOP = "$"
TREASURE = "T"

NEIGHBORS_4 = ((1, 0), (-1, 0), (0, 1), (0, -1))
NEIGHBORS_8 = NEIGHBORS_4 + ((1, 1), (1, -1), (-1, 1), (-1, -1))

__all__ = [
    "VOID",
    "FLOOR",
    "CORRIDOR",
    "WALL",
    "DOOR",
    "LOCKED_DOOR",
    "KEY",
    "ENTRANCE",
    "EXIT",
    "BOSS",
    "SHOP",
    "TREASURE",
    "NEIGHBORS_4",
    "NEIGHBORS_8",
]
