"""Raffle marketplace service: ticket reservation and allocation."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import timedelta
from typing import Any

from dotenv import load_dotenv
from flask import Flask

from rafflehub.utils.clock import Clock, utcnow


def create_app(overrides: Mapping[str, Any] | None = None, clock: Clock = utcnow) -> Flask:
    """Application factory.

    Args:
        overrides: config values applied on top of the environment config.
        clock: time source for reservations and sales (tests pass a fake).

    Returns:
        Configured Flask application.
    """
    load_dotenv()

    from rafflehub.config import get_config
    from rafflehub.db import init_db
    from rafflehub.error_handlers import register_error_handlers
    from rafflehub.logging_config import configure_logging
    from rafflehub.routes.health import health_bp
    from rafflehub.routes.raffles import raffles_bp
    from rafflehub.routes.reservations import reservations_bp
    from rafflehub.scheduler import ExpirySweeper
    from rafflehub.services.registry import init_services

    app = Flask(__name__)
    app.config.from_object(get_config())
    if overrides:
        app.config.update(overrides)

    configure_logging(app)
    session_factory = init_db(app)
    services = init_services(app, session_factory, clock=clock)
    register_error_handlers(app)

    app.register_blueprint(health_bp)
    app.register_blueprint(raffles_bp)
    app.register_blueprint(reservations_bp)

    if app.config.get("SWEEP_ENABLED"):
        sweeper = ExpirySweeper(
            services.ledger,
            interval=timedelta(milliseconds=int(app.config["SWEEP_INTERVAL_MS"])),
        )
        sweeper.start()
        app.extensions["reservation_sweeper"] = sweeper

    return app
