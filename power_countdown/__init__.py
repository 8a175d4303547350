# power_countdown/__init__.py
from __future__ import annotations
from typing import Any, Dict, Optional
import logging

import click
from flask import Flask
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# dev-friendly in-memory limiter; swap for redis in prod
limiter = Limiter(get_remote_address, storage_uri="memory://")


def create_app(overrides: Optional[Dict[str, Any]] = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)

    # ---------------------------
    # Config
    # ---------------------------
    app.config.from_object("power_countdown.config.Config")
    app.config.from_pyfile("config.py", silent=True)  # instance/config.py (optional)
    if overrides:
        app.config.update(overrides)

    from .games.core.coerce_utils import normalize_difficulty
    app.config["DEFAULT_DIFFICULTY"] = normalize_difficulty(app.config.get("DEFAULT_DIFFICULTY"))

    # ---------------------------
    # Logging
    # ---------------------------
    level = logging.getLevelName(str(app.config.get("LOG_LEVEL", "INFO")).upper())
    if not isinstance(level, int):
        level = logging.INFO
    app.logger.setLevel(level)
    for name in ("power_countdown", "power_countdown.games.core", "power_countdown.games.countdown"):
        logging.getLogger(name).setLevel(level)

    # ---------------------------
    # Extensions init
    # ---------------------------
    limiter.init_app(app)

    # ---------------------------
    # Blueprints
    # ---------------------------
    from .games.core.routes import core_bp
    app.register_blueprint(core_bp)

    from .games.countdown.routes import bp as countdown_bp, warmup
    app.register_blueprint(countdown_bp)

    # session registry + puzzle source live in app.extensions
    with app.app_context():
        warmup()

    # ---------------------------
    # CLI commands
    # ---------------------------
    @app.cli.command("countdown-puzzle")
    @click.option("--difficulty", default=None, help="EASY, MEDIUM or HARD")
    def countdown_puzzle(difficulty):
        """Ask the configured source for a puzzle."""
        from .games.countdown.services.puzzle_source import build_source, fetch_puzzle
        diff = normalize_difficulty(difficulty, app.config["DEFAULT_DIFFICULTY"])
        puzzle, error = fetch_puzzle(build_source(app.config), diff)
        if error:
            click.echo(f"⚠ {error}", err=True)
        numbers = ", ".join(f"{n:g}" for n in puzzle.numbers)
        click.echo(f"{diff}: target={puzzle.target} numbers=[{numbers}]")

    @app.cli.command("countdown-hint")
    @click.argument("target", type=float)
    @click.argument("values", nargs=-1, type=float)
    def countdown_hint(target, values):
        """Ask the configured source for a hint."""
        from .games.countdown.logic.cards import FIXED_DECK
        from .games.countdown.services.puzzle_source import build_source, fetch_hint
        click.echo(fetch_hint(build_source(app.config), target, list(values or FIXED_DECK)))

    @app.after_request
    def set_security_headers(resp):
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return resp

    app.logger.debug("Power Countdown app created (source=%s)", app.config.get("PUZZLE_SOURCE") or "auto")
    return app
