"""Pytest configuration and fixtures."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from rafflehub import create_app
from rafflehub.services.registry import RaffleServices


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 1, 15, 12, 0, 0))


@pytest.fixture
def app(tmp_path, clock):
    app = create_app(
        {
            "TESTING": True,
            "DATABASE_URL": f"sqlite:///{tmp_path / 'rafflehub-test.db'}",
            "SWEEP_ENABLED": False,
            "STRICT_SALES_LOCK": True,
            "RESERVATION_TIME_MS": 5 * 60 * 1000,
            "LOG_LEVEL": "WARNING",
        },
        clock=clock,
    )
    yield app
    app.extensions["engine"].dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def services(app) -> RaffleServices:
    return app.extensions["raffle_services"]


def raffle_fields(**overrides):
    fields = {
        "title": "Rifa de Auto 0km",
        "prize": "Auto 0km",
        "description": "Sorteo mensual",
        "image": "https://placehold.co/600x400.png",
        "ticket_price": 25,
        "total_tickets": 10,
        "draw_date": datetime(2026, 3, 1, 20, 0, 0),
        "creator_id": "creator-1",
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def make_raffle(services):
    def _make(**overrides):
        return services.lifecycle.create_raffle(raffle_fields(**overrides))

    return _make


@pytest.fixture
def raffle(make_raffle):
    return make_raffle()
