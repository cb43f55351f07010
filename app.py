"""
LeetCode Stats Card (Flask)

What it does:
- Accepts a LeetCode username
- Fetches public stats via the LeetCode GraphQL API (problems, activity, skills, profile, recent submissions)
- Renders them as an embeddable SVG card with toggleable sections
- Degrades every failure to a small placeholder SVG (400 / 404 / 500)

Setup:
  pip install -e .

Run:
  python app.py
  open "http://localhost:5000/api/card?username=<name>"

Endpoints:
  GET /api/card?username=&difficulty=&activity=&skills=&badges=&submissions=&beats=&rank=
                                -> full stats card (each toggle is on unless set to "false")
  GET /api/stats/<username>     -> compact "solved" card
  GET /healthz                  -> JSON liveness + config
"""

from __future__ import annotations

import logging
import os
import re
import time
from typing import Any, Dict, Optional, Tuple

from flask import Flask, Response, jsonify, request

import leetcode_api
from stats_card import CardOptions, render_card, render_compact_card, render_error_card, solved_total

# -----------------------------
# Config
# -----------------------------
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "20"))

# Simple in-memory TTL cache of fetched data, per username
CACHE_TTL_SECONDS = int(os.getenv("CACHE_TTL_SECONDS", "300"))

FETCH_PARALLEL = os.getenv("FETCH_PARALLEL", "1") == "1"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

SVG_MIMETYPE = "image/svg+xml"
CARD_CACHE_CONTROL = "public, max-age=300, s-maxage=300, stale-while-revalidate=600"

_CACHE: Dict[str, Tuple[float, Dict[str, Any]]] = {}

# LeetCode handles: letters, digits, underscore, hyphen, dot
USERNAME_RE = re.compile(r"^[A-Za-z0-9_.-]{1,40}$")

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

# -----------------------------
# Flask app
# -----------------------------
app = Flask(__name__)


# -----------------------------
# Helpers
# -----------------------------
def _svg(body: str, status: int = 200, cache_control: str = "no-cache") -> Response:
    return Response(body, status=status, mimetype=SVG_MIMETYPE, headers={"Cache-Control": cache_control})


def _error_svg(message: str, status: int) -> Response:
    return _svg(render_error_card(message), status=status)


def _validate_username(username: str) -> Optional[Response]:
    if not username:
        return _error_svg("Error: username parameter is required", 400)
    if not USERNAME_RE.match(username):
        return _error_svg("Error: invalid username", 400)
    return None


def _prune_cache(now: float) -> None:
    for key in [k for k, (ts, _) in _CACHE.items() if (now - ts) > CACHE_TTL_SECONDS]:
        _CACHE.pop(key, None)


def _cached_fetch(username: str) -> Dict[str, Any]:
    key = username.lower()
    cached = _CACHE.get(key)
    if cached and CACHE_TTL_SECONDS > 0:
        ts, data = cached
        if (time.time() - ts) <= CACHE_TTL_SECONDS:
            logger.debug("Cache hit for %s", key)
            return data

    data = leetcode_api.fetch_all(username, parallel=FETCH_PARALLEL, timeout=REQUEST_TIMEOUT)
    # Unknown users are not cached so a fresh account shows up right away
    if CACHE_TTL_SECONDS > 0 and leetcode_api.user_exists(data):
        now = time.time()
        _prune_cache(now)
        _CACHE[key] = (now, data)
    return data


# -----------------------------
# Flask routes
# -----------------------------
@app.route("/api/card", methods=["GET"])
def api_card():
    username = (request.args.get("username") or "").strip()
    invalid = _validate_username(username)
    if invalid is not None:
        return invalid

    options = CardOptions.from_args(request.args)

    try:
        data = _cached_fetch(username)
        if not leetcode_api.user_exists(data):
            logger.info("User not found: %s", username)
            return _error_svg(f'User "{username}" not found', 404)

        svg = render_card(username, data, options)
        return _svg(svg, cache_control=CARD_CACHE_CONTROL)
    except Exception:
        logger.exception("Error generating card for %s", username)
        return _error_svg("Error generating card", 500)


@app.route("/api/stats/<username>", methods=["GET"])
def api_stats(username: str):
    username = username.strip()
    invalid = _validate_username(username)
    if invalid is not None:
        return invalid

    try:
        data = leetcode_api.fetch_problem_counts(username, timeout=REQUEST_TIMEOUT)
        if not leetcode_api.user_exists(data):
            return _error_svg(f'User "{username}" not found', 404)
        return _svg(render_compact_card(username, solved_total(data)), cache_control=CARD_CACHE_CONTROL)
    except Exception:
        logger.exception("Error generating compact card for %s", username)
        return _error_svg("Error generating card", 500)


@app.route("/healthz", methods=["GET"])
def healthz():
    return jsonify({"ok": True, "cache_ttl_seconds": CACHE_TTL_SECONDS, "parallel_fetch": FETCH_PARALLEL})


if __name__ == "__main__":
    port = int(os.getenv("PORT", "5000"))
    app.run(host="0.0.0.0", port=port, debug=True)
