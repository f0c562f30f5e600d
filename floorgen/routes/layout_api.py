"""
project: floorgen
module: layout_api.py

Floor preview API routes.

Query parameters mirror ``FloorConfig`` field names; anything omitted falls
back to the app's ``FLOORGEN_DEFAULTS``. Layouts with a concrete seed are kept
in a small in-process cache so refreshing a preview does not regenerate it.
"""

import threading
from dataclasses import fields, replace

from flask import Blueprint, Response, current_app, jsonify, request

from floorgen.dungeon import ConfigurationError, FloorConfig, generate
from floorgen.dungeon.config import coerce_seed
from floorgen.logging_utils import get_logger

bp_layout = Blueprint("layout_api", __name__)
log = get_logger("floorgen.api")

_INT_PARAMS = {
    f.name
    for f in fields(FloorConfig)
    if f.name not in {"seed", "loop_probability", "empty_fraction", "enable_metrics"}
}
_FLOAT_PARAMS = {"loop_probability", "empty_fraction"}


class BadParam(ValueError):
    def __init__(self, name: str, raw):
        super().__init__(f"invalid value for {name!r}: {raw!r}")
        self.name = name


def config_from_request(args) -> FloorConfig:
    """Merge query-string values onto the app defaults. Raises ``BadParam``."""
    base: FloorConfig = current_app.config["FLOORGEN_DEFAULTS"]
    values = {}
    for name in _INT_PARAMS:
        raw = args.get(name)
        if raw is None or raw == "":
            continue
        try:
            values[name] = int(raw)
        except ValueError:
            raise BadParam(name, raw)
    for name in _FLOAT_PARAMS:
        raw = args.get(name)
        if raw is None or raw == "":
            continue
        try:
            values[name] = float(raw)
        except ValueError:
            raise BadParam(name, raw)
    if "seed" in args:
        values["seed"] = coerce_seed(args.get("seed"))
    if "metrics" in args:
        values["enable_metrics"] = args.get("metrics", "1").lower() not in ("0", "false", "no")
    return replace(base, **values)


# Simple in-process cache config->LevelLayout. Thread-safe with a lock because the dev server is threaded.
_layout_cache = {}
_layout_cache_lock = threading.Lock()


def get_cached_layout(cfg: FloorConfig):
    if current_app.config.get("FLOORGEN_DISABLE_CACHE") or cfg.seed == 0:
        return generate(cfg)
    key = cfg
    with _layout_cache_lock:
        layout = _layout_cache.pop(key, None)
        if layout is not None:
            # re-insert so the entry becomes most recently used
            _layout_cache[key] = layout
            return layout
    layout = generate(cfg)
    cap = max(1, int(current_app.config.get("FLOORGEN_CACHE_SIZE", 8)))
    with _layout_cache_lock:
        _layout_cache[key] = layout
        while len(_layout_cache) > cap:
            first_key = next(iter(_layout_cache.keys()))
            _layout_cache.pop(first_key, None)
    return layout


def clear_layout_cache():
    with _layout_cache_lock:
        _layout_cache.clear()


def _build(args):
    cfg = config_from_request(args)
    return get_cached_layout(cfg)


@bp_layout.errorhandler(BadParam)
def _bad_param(err: BadParam):
    log.warn(event="bad_param", param=err.name)
    return jsonify({"error": str(err), "field": err.name}), 400


@bp_layout.errorhandler(ConfigurationError)
def _bad_config(err: ConfigurationError):
    log.warn(event="bad_config", field=err.field, reason=err.message)
    return jsonify({"error": err.message, "field": err.field}), 422


@bp_layout.route("/api/layout", methods=["GET"])
def get_layout():
    """Return the layout JSON for the requested config.

    ``tiles=0`` drops the tile sets from the payload.
    """
    layout = _build(request.args)
    include_tiles = request.args.get("tiles", "1").lower() not in ("0", "false", "no")
    data = layout.to_dict(include_tiles=include_tiles)
    data["fingerprint"] = layout.fingerprint()
    return jsonify(data)


@bp_layout.route("/api/layout/ascii", methods=["GET"])
def get_layout_ascii():
    layout = _build(request.args)
    return Response(layout.to_ascii() + "\n", mimetype="text/plain")


@bp_layout.route("/api/layout/metrics", methods=["GET"])
def get_layout_metrics():
    layout = _build(request.args)
    return jsonify(
        {
            "seed": layout.seed,
            "metrics": layout.metrics,
            "warnings": [w.to_dict() for w in layout.warnings],
        }
    )


@bp_layout.route("/api/layout/seed", methods=["POST"])
def set_seed():
    """Resolve a seed and summarise the floor it produces.

    Body JSON (all optional):
      { "seed": <int|str|null> }
    - If seed omitted, null or empty => random seed.
    - If seed provided (int or string) => deterministic hashing.

    Response: { "seed": <int>, "fingerprint": <hex>, "rooms": <int>, ... }
    """
    data = request.get_json(silent=True) or {}
    seed = coerce_seed(data.get("seed"))
    cfg = replace(current_app.config["FLOORGEN_DEFAULTS"], seed=seed)
    layout = get_cached_layout(cfg)
    log.info(event="seed_set", seed=layout.seed, rooms=len(layout.rooms))
    return jsonify(
        {
            "seed": layout.seed,
            "fingerprint": layout.fingerprint(),
            "rooms": len(layout.rooms),
            "main_path": layout.main_path,
            "warnings": [w.to_dict() for w in layout.warnings],
        }
    )
