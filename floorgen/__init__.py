"""
project: floorgen
module: __init__.py

Flask application factory for the floor preview service.

Configuration is sourced from environment variables (optionally via a local
``.env`` file) so the same ``FLOORGEN_*`` settings drive both the CLI and the
web preview.
"""

import os

from dotenv import load_dotenv
from flask import Flask

from floorgen.dungeon import FloorConfig

# Load .env if present so FLOORGEN_* defaults can be supplied without exporting
# shell variables during development.
load_dotenv()

__version__ = "0.1.0"


def create_app(overrides: dict | None = None) -> Flask:
    """Build a Flask app with the layout blueprint registered.

    ``overrides`` is applied on top of the environment-derived config, which
    is how tests pin cache behaviour or default floor settings.
    """
    app = Flask(__name__)
    app.config.update(
        FLOORGEN_DEFAULTS=FloorConfig.from_env(),
        FLOORGEN_CACHE_SIZE=int(os.getenv("FLOORGEN_CACHE_SIZE", "8")),
        FLOORGEN_DISABLE_CACHE=os.getenv("FLOORGEN_DISABLE_CACHE", "0") in ("1", "true", "yes"),
    )
    if overrides:
        app.config.update(overrides)

    from floorgen.routes.layout_api import bp_layout

    app.register_blueprint(bp_layout)
    return app


__all__ = ["create_app", "__version__"]
