"""Public floor generation interface."""

from .biomes import DEFAULT_BIOMES, Biome, pick_biome  # noqa: F401
from .config import FloorConfig  # noqa: F401
from .errors import (  # noqa: F401
    ConfigurationError,
    CorridorCarveFailure,
    DisconnectedGraphWarning,
    FloorGenError,
    GenerationWarning,
    InsolvableLockWarning,
)
from .layout import LevelLayout  # noqa: F401
from .locks import LockAssignment  # noqa: F401
from .pipeline import generate, generate_floor  # noqa: F401
from .rooms import THEME_KEYS, Room, RoomAccess, RoomType  # noqa: F401
from .tunnels import Corridor  # noqa: F401

__all__ = [
    "Biome",
    "DEFAULT_BIOMES",
    "pick_biome",
    "FloorConfig",
    "ConfigurationError",
    "CorridorCarveFailure",
    "DisconnectedGraphWarning",
    "FloorGenError",
    "GenerationWarning",
    "InsolvableLockWarning",
    "LevelLayout",
    "LockAssignment",
    "Corridor",
    "Room",
    "RoomAccess",
    "RoomType",
    "THEME_KEYS",
    "generate",
    "generate_floor",
]
