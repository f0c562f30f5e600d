"""floorgen CLI entry point.

Provides subcommands for generating a floor (ASCII preview, summary and
warnings, or JSON) and for running the preview web server. Accepts
configuration via flags and ``FLOORGEN_*`` environment variables, with
optional .env loading.

Run `python run.py --help` for details.
"""

import argparse
import json
import os
import signal
import sys
from textwrap import dedent

from colorama import Fore, Style
from colorama import init as _color_init
from dotenv import load_dotenv

from floorgen import __version__
from floorgen.dungeon import ConfigurationError, FloorConfig, generate
from floorgen.dungeon import tiles as T
from floorgen.dungeon.config import coerce_seed
from floorgen.logging_utils import log

_color_init()

# Disable colors if output is not a real terminal (e.g., during pytest capture)
try:
    _COLOR_ENABLED = sys.stdout.isatty()
except Exception:  # pragma: no cover
    _COLOR_ENABLED = False

GLYPH_COLORS = {
    T.WALL: Fore.WHITE + Style.DIM,
    T.FLOOR: Fore.WHITE,
    T.CORRIDOR: Fore.YELLOW,
    T.DOOR: Fore.CYAN,
    T.LOCKED_DOOR: Fore.RED + Style.BRIGHT,
    T.KEY: Fore.YELLOW + Style.BRIGHT,
    T.ENTRANCE: Fore.GREEN + Style.BRIGHT,
    T.EXIT: Fore.GREEN + Style.BRIGHT,
    T.BOSS: Fore.MAGENTA + Style.BRIGHT,
    T.SHOP: Fore.BLUE + Style.BRIGHT,
    T.TREASURE: Fore.YELLOW + Style.BRIGHT,
}

# CLI flag -> FloorConfig field
_CONFIG_FLAGS = (
    "width",
    "height",
    "min_cell_size",
    "max_depth",
    "min_inset",
    "max_inset",
    "loop_probability",
    "extra_connection_budget",
    "corridor_width",
    "lock_count",
    "shop_count",
    "treasure_count",
    "floor_level",
)


def parse_args(argv: list[str]) -> argparse.Namespace:
    description = """
    floorgen - procedural dungeon floor generator

    Generate a floor layout (rooms, corridors, main path, locks and keys) from
    a seed, or run the preview web API. Configuration can be provided via CLI
    flags or FLOORGEN_* environment variables. If both are present, CLI flags
    take precedence.
    """

    epilog = dedent(
        """
        Environment variables:
          FLOORGEN_WIDTH / FLOORGEN_HEIGHT   Floor size in tiles (default: 80x60)
          FLOORGEN_SEED                      Seed (0 or unset = random)
          FLOORGEN_LOG_LEVEL                 debug | info | warn | error
          HOST / PORT                        Bind address for `serve`

        Examples:
          # Print a 40x30 floor for seed 12345
          python run.py generate --width 40 --height 30 --seed 12345

          # Same floor as JSON (no tile sets)
          python run.py generate --seed 12345 --json

          # Load variables from .env then run the preview server
          python run.py --env-file .env serve --port 8080
        """
    )

    parser = argparse.ArgumentParser(
        prog="floorgen",
        description=dedent(description),
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )

    parser.add_argument(
        "--env-file",
        dest="env_file",
        help="Path to a .env file to load before processing flags",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"floorgen {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")

    # generate subcommand
    gen_parser = subparsers.add_parser(
        "generate",
        help="Generate one floor and print it",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Generate a floor and print the ASCII map, a summary and any warnings",
    )
    gen_parser.add_argument("--seed", default=None, help="Seed (int or any string; default: env FLOORGEN_SEED or random)")
    gen_parser.add_argument("--width", type=int, default=None)
    gen_parser.add_argument("--height", type=int, default=None)
    gen_parser.add_argument("--min-cell-size", dest="min_cell_size", type=int, default=None)
    gen_parser.add_argument("--max-depth", dest="max_depth", type=int, default=None)
    gen_parser.add_argument("--min-inset", dest="min_inset", type=int, default=None)
    gen_parser.add_argument("--max-inset", dest="max_inset", type=int, default=None)
    gen_parser.add_argument("--loop-probability", dest="loop_probability", type=float, default=None)
    gen_parser.add_argument(
        "--extra-connections",
        dest="extra_connection_budget",
        type=int,
        default=None,
        help="Cap on loop edges added beyond the spanning tree",
    )
    gen_parser.add_argument("--corridor-width", dest="corridor_width", type=int, choices=(1, 2), default=None)
    gen_parser.add_argument("--locks", dest="lock_count", type=int, default=None)
    gen_parser.add_argument("--shops", dest="shop_count", type=int, default=None)
    gen_parser.add_argument("--treasures", dest="treasure_count", type=int, default=None)
    gen_parser.add_argument("--floor-level", dest="floor_level", type=int, default=None)
    gen_parser.add_argument("--json", action="store_true", help="Print the layout as JSON instead of ASCII")
    gen_parser.add_argument("--no-color", dest="no_color", action="store_true", help="Disable colored output")
    gen_parser.set_defaults(command="generate")

    # serve subcommand
    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the preview web API",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Run the Flask development server exposing /api/layout",
    )
    serve_parser.add_argument(
        "--host",
        default=None,
        help="Host interface to bind (default: env HOST or 127.0.0.1)",
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to listen on (default: env PORT or 5000)",
    )
    serve_parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable Flask debug mode with verbose error pages",
    )
    serve_parser.set_defaults(command="serve")

    # If no subcommand provided, default to generate
    if len(argv) == 0:
        argv = ["generate"]

    args = parser.parse_args(argv)
    if args.command is None:
        args.command = "generate"
    return args


def build_config(args: argparse.Namespace) -> FloorConfig:
    overrides = {name: getattr(args, name, None) for name in _CONFIG_FLAGS}
    if getattr(args, "seed", None) is not None:
        overrides["seed"] = coerce_seed(args.seed)
    return FloorConfig.from_env(**overrides)


def render_ascii(layout, color: bool) -> str:
    if not color:
        return layout.to_ascii()
    rows = []
    for row in layout.to_grid():
        rows.append("".join(f"{GLYPH_COLORS[ch]}{ch}{Style.RESET_ALL}" if ch in GLYPH_COLORS else ch for ch in row))
    return "\n".join(rows)


def _generate(args: argparse.Namespace) -> int:
    color = _COLOR_ENABLED and not getattr(args, "no_color", False)
    try:
        layout = generate(build_config(args))
    except ConfigurationError as e:
        prefix = f"{Fore.RED}[ERROR]{Style.RESET_ALL}" if color else "[ERROR]"
        print(f"{prefix} invalid configuration: {e}", file=sys.stderr)
        return 2

    if getattr(args, "json", False):
        data = layout.to_dict(include_tiles=False)
        data["fingerprint"] = layout.fingerprint()
        data["metrics"] = layout.metrics
        print(json.dumps(data, indent=2))
        return 0

    def label(text: str) -> str:
        return f"{Fore.YELLOW}{text}{Style.RESET_ALL}" if color else text

    def value(val) -> str:
        return f"{Fore.GREEN}{val}{Style.RESET_ALL}" if color else str(val)

    divider = (Fore.MAGENTA + "=" * 40 + Style.RESET_ALL) if color else "=" * 40
    entrance = layout.entrance_room()
    endpoint = layout.exit_room()
    lines = [
        render_ascii(layout, color),
        divider,
        f"  {label('Seed:'):12} {value(layout.seed)}",
        f"  {label('Size:'):12} {value(f'{layout.width}x{layout.height}')}",
        f"  {label('Rooms:'):12} {value(len(layout.rooms))}",
        f"  {label('Corridors:'):12} {value(len(layout.corridors))}",
        f"  {label('Entrance:'):12} {value(entrance.id if entrance else '-')}",
        f"  {label('Endpoint:'):12} {value(f'{endpoint.id} ({endpoint.type.value})' if endpoint else '-')}",
        f"  {label('Main path:'):12} {value(' -> '.join(map(str, layout.main_path)) or '-')}",
        f"  {label('Locks:'):12} {value(len(layout.locks))}",
        f"  {label('Fingerprint:'):12} {value(layout.fingerprint()[:16])}",
        divider,
    ]
    print("\n".join(lines))
    for w in layout.warnings:
        prefix = f"{Fore.RED}[WARN]{Style.RESET_ALL}" if color else "[WARN]"
        print(f"{prefix} {w.code}: {w.message}")
    return 0


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    args = parse_args(argv)
    # Load .env if requested; otherwise the default .env if present (no error if missing)
    if getattr(args, "env_file", None):
        load_dotenv(args.env_file, override=True)
    else:
        load_dotenv()

    mode = (getattr(args, "command", None) or "generate").lower()

    if mode == "generate":
        return _generate(args)

    host = getattr(args, "host", None) or os.getenv("HOST", "127.0.0.1")
    port = int(getattr(args, "port", None) or os.getenv("PORT", "5000"))
    debug = bool(getattr(args, "debug", False) or os.getenv("FLASK_DEBUG") == "1")

    def handle_sigint(sig, frame):
        print("\n[INFO] Shutting down server...")
        sys.exit(0)

    signal.signal(signal.SIGINT, handle_sigint)

    # Import server entrypoint only after environment is ready
    from floorgen.server import start_server

    info_prefix = f"{Fore.CYAN}[INFO]{Style.RESET_ALL}" if _COLOR_ENABLED else "[INFO]"
    print(f"{info_prefix} Serving floor previews on http://{host}:{port}/api/layout ... Press Ctrl+C to stop.")
    log.info(event="listen", host=host, port=port, debug=debug)
    start_server(host=host, port=port, debug=debug)
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
