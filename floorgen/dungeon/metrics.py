from typing import Dict


def init_metrics() -> Dict[str, int | float | dict]:
    return {
        'partitions': 0,
        'rooms': 0,
        'candidate_edges': 0,
        'tree_edges': 0,
        'loop_edges': 0,
        'components': 0,
        'corridors': 0,
        'carve_failures': 0,
        'locks_placed': 0,
        'tiles_floor': 0,
        'tiles_wall': 0,
        'tiles_door': 0,
        'warnings': 0,
        'runtime_ms': 0.0,
        'phase_ms': {},
    }
