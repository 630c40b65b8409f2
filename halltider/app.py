from __future__ import annotations

import logging
import sys
from typing import Any, Optional, Sequence

from flask import Blueprint, Flask, Response, current_app, jsonify, request, send_from_directory
from flask_cors import CORS

from halltider.config import Settings, build_parser, load_config, load_settings
from halltider.errors import ConfigError, HalltiderError, RunMode, Severity, classify_error
from halltider.models import classified_payload
from halltider.pipeline import load_arrivals
from halltider.presenter import render_board


SETTINGS_KEY = "HALLTIDER_SETTINGS"

logger = logging.getLogger(__name__)

board = Blueprint("board", __name__)


def _settings() -> Settings:
    return current_app.config[SETTINGS_KEY]


@board.route("/halltider")
def halltider() -> Any:
    settings = _settings()
    try:
        result = load_arrivals(settings)
    except HalltiderError as exc:
        if classify_error(exc, RunMode.SERVER) is Severity.FATAL:
            raise
        logger.error("Arrival board request failed: %s", exc)
        return Response(status=502)

    if request.args.get("format") == "text":
        return Response(render_board(result, strict=False), mimetype="text/plain")
    return jsonify(classified_payload(result))


@board.route("/static/<path:path>")
def static_files(path: str) -> Any:
    return send_from_directory(_settings().static_dir, path)


def create_app(settings: Settings) -> Flask:
    app = Flask(__name__, static_folder=None)
    app.config[SETTINGS_KEY] = settings
    app.json.sort_keys = False
    CORS(app)
    app.register_blueprint(board)
    return app


def run_console(settings: Settings) -> int:
    try:
        result = load_arrivals(settings)
        output = render_board(result)
    except HalltiderError as exc:
        severity = classify_error(exc, RunMode.CONSOLE)
        logger.error("Arrival board failed (%s): %s", severity.value, exc)
        return 1
    print(output)
    return 0


def run_server(settings: Settings) -> int:
    app = create_app(settings)
    logger.info("Flask server starting on http://%s:%s", settings.host, settings.port)
    # Werkzeug reports a failed bind on stderr and exits instead of raising.
    try:
        app.run(host=settings.host, port=settings.port, threaded=True)
    except OSError as exc:
        logger.error("Failed to start server on %s:%s: %s", settings.host, settings.port, exc)
        return 1
    except SystemExit as exc:
        if exc.code in (0, None):
            return 0
        logger.error(
            "Failed to start server on %s:%s (exit status %s)",
            settings.host,
            settings.port,
            exc.code,
        )
        return 1
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    try:
        settings = load_settings(args.debug, load_config(args.config))
    except ConfigError as exc:
        logger.error("%s", exc)
        return 1

    if settings.debug:
        return run_console(settings)
    return run_server(settings)


if __name__ == "__main__":
    sys.exit(main())
