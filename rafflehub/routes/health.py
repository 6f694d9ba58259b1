"""Health check routes."""

from __future__ import annotations

from flask import Blueprint, current_app

from rafflehub.utils.responses import ok

health_bp = Blueprint("health", __name__)


@health_bp.get("/health")
def health_check():
    """Health check endpoint."""

    sweeper = current_app.extensions.get("reservation_sweeper")
    return ok({"status": "ok", "sweeper_running": bool(sweeper is not None and sweeper.running)})
