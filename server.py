import logging
import os
from datetime import timedelta
from typing import List

import requests
from flask import Flask, jsonify, request

from wagerboard import config
from wagerboard.cache import LeaderboardCache, refresh_current
from wagerboard.leaderboard import XFUN_METRICS, rainbet_leaderboard
from wagerboard.periods import TimeWindow, period_bounds
from wagerboard.rainbet import RainbetClient
from wagerboard.scheduler import IntervalTask, ping
from wagerboard.xfun import XfunClient

SESSION = requests.Session()

RAINBET = RainbetClient(
    config.RAINBET_API_URL,
    config.RAINBET_API_KEY,
    session=SESSION,
    timeout=config.UPSTREAM_TIMEOUT,
)
XFUN = XfunClient(
    config.XFUN_API_URL,
    config.XFUN_CODE,
    config.XFUN_API_KEY,
    session=SESSION,
    timeout=config.UPSTREAM_TIMEOUT,
)
XFUN_WINDOW = TimeWindow(start=config.XFUN_WINDOW_START, end=config.XFUN_WINDOW_END)

CACHE = LeaderboardCache()
# Background tasks started in this process.
TASKS: List[IntervalTask] = []

app = Flask(__name__)
app.config["JSONIFY_PRETTYPRINT_REGULAR"] = False


@app.after_request
def add_cors_headers(response):
    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type"
    return response


@app.after_request
def add_cache_headers(response):
    """
    Allow short-lived caching on the API to avoid hammering the upstreams.
    """
    if response.direct_passthrough or response.status_code != 200:
        return response
    response.cache_control.max_age = int(timedelta(minutes=1).total_seconds())
    response.cache_control.public = True
    return response


def refresh_leaderboard() -> bool:
    return refresh_current(CACHE, RAINBET)


def fetch_xfun_raw() -> List:
    return XFUN.fetch_all(XFUN_WINDOW, page_size=config.XFUN_PAGE_SIZE, max_pages=config.XFUN_MAX_PAGES)


@app.route("/leaderboard/top14", methods=["GET"])
def leaderboard_current():
    """
    Cached leaderboard for the current period. Capped at 10 entries;
    the route name predates the cap.
    """
    return jsonify([entry.to_dict() for entry in CACHE.snapshot()])


@app.route("/leaderboard/prev", methods=["GET"])
def leaderboard_previous():
    try:
        entries = RAINBET.fetch_window(period_bounds(-1))
        board = rainbet_leaderboard(entries)
    except Exception as exc:
        app.logger.error("Failed to fetch previous leaderboard: %s", exc, exc_info=True)
        return jsonify({"error": "Failed to fetch previous leaderboard data."}), 500
    return jsonify([entry.to_dict() for entry in board])


@app.route("/period", methods=["GET"])
def period():
    return jsonify({
        "current": period_bounds(0).describe(),
        "previous": period_bounds(-1).describe(),
        "next": period_bounds(1).describe(),
    })


@app.route("/raw", methods=["GET"])
def raw():
    try:
        rows = fetch_xfun_raw()
    except Exception as exc:
        app.logger.error("Failed to fetch X.FUN raw data: %s", exc, exc_info=True)
        return jsonify({"error": "Failed to fetch raw data"}), 500
    return jsonify(rows)


@app.route("/leaderboard/biweekly", methods=["GET"])
def leaderboard_biweekly():
    """
    X.FUN leaderboard for the configured window. Ranks deposits unless
    ?metric=wagered is given.
    """
    metric = request.args.get("metric", "deposited")
    build = XFUN_METRICS.get(metric)
    if build is None:
        return jsonify({"error": f"Unknown metric. Use one of: {', '.join(XFUN_METRICS)}"}), 400
    try:
        board = build(fetch_xfun_raw())
    except Exception as exc:
        app.logger.error("Failed to build X.FUN leaderboard: %s", exc, exc_info=True)
        return jsonify({"error": "Failed to build leaderboard"}), 500
    return jsonify([entry.to_dict() for entry in board])


def start_background_jobs() -> List[IntervalTask]:
    """
    Start the leaderboard refresh and, if configured, the self-ping.
    Runs once per process; later calls return the running tasks.
    """
    if TASKS:
        return TASKS
    TASKS.append(IntervalTask("leaderboard-refresh", config.REFRESH_INTERVAL, refresh_leaderboard).start())
    if config.SELF_PING_URL:
        TASKS.append(
            IntervalTask(
                "self-ping",
                config.SELF_PING_INTERVAL,
                lambda: ping(config.SELF_PING_URL, SESSION, timeout=config.UPSTREAM_TIMEOUT),
                immediate=False,
            ).start()
        )
    return TASKS


def stop_background_jobs() -> None:
    while TASKS:
        TASKS.pop().stop()


# `flask run` and gunicorn import this module without running __main__.
if config.BACKGROUND_JOBS:
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    start_background_jobs()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=config.PORT, debug=os.environ.get("FLASK_DEBUG") == "1")
