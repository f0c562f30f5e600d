import os
import sys

import pytest

# Ensure repository root importable early
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from floorgen import create_app  # noqa: E402
from floorgen.dungeon import FloorConfig, generate  # noqa: E402
from floorgen.routes.layout_api import clear_layout_cache  # noqa: E402

PREVIEW_DEFAULTS = FloorConfig(width=40, height=30, min_cell_size=6, max_depth=4)


@pytest.fixture(autouse=True)
def _quiet_logs(monkeypatch):
    # keep captured stdout readable; individual tests lower this when they assert on logs
    monkeypatch.setenv("FLOORGEN_LOG_LEVEL", "error")
    monkeypatch.delenv("FLOORGEN_LOG_JSON", raising=False)


@pytest.fixture(scope="session")
def example_layout():
    """The reference 40x30 floor. Shared across tests: do not mutate."""
    return generate(FloorConfig(width=40, height=30, seed=12345, min_cell_size=6, max_depth=4, lock_count=1))


@pytest.fixture()
def test_app():
    clear_layout_cache()
    app = create_app({"TESTING": True, "FLOORGEN_DEFAULTS": PREVIEW_DEFAULTS, "FLOORGEN_DISABLE_CACHE": False})
    yield app
    clear_layout_cache()


@pytest.fixture()
def client(test_app):
    return test_app.test_client()
