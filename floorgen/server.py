"""
project: floorgen
module: server.py

Server bootstrap for the floor preview API.
"""

import sys

from floorgen import create_app
from floorgen.logging_utils import get_logger

log = get_logger("floorgen.server")


def start_server(host="127.0.0.1", port=5000, debug: bool = False):  # pragma: no cover (integration / runtime only)
    """Start the Flask development server with the layout blueprint.

    When debug=True, Flask's debugger and reloader provide verbose tracebacks.
    """
    app = create_app()
    try:
        log.info(event="server_start", host=host, port=port, debug=debug)
        app.run(host=host, port=port, debug=debug)
    except KeyboardInterrupt:
        print("\n[INFO] Server stopped by user (Ctrl+C)")
        sys.exit(0)
