"""Builds the engine objects once per application and shares their locks."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from flask import Flask, current_app
from sqlalchemy.orm import Session, sessionmaker

from rafflehub.config import DEFAULT_RESERVATION_TIME_MS
from rafflehub.services.allocation_service import TicketAllocator
from rafflehub.services.catalog_service import RaffleCatalog
from rafflehub.services.lifecycle_service import RaffleLifecycleManager
from rafflehub.services.locks import RaffleLocks
from rafflehub.services.reservation_ledger import ReservationLedger
from rafflehub.utils.clock import Clock, utcnow

EXTENSION_KEY = "raffle_services"


@dataclass(frozen=True)
class RaffleServices:
    locks: RaffleLocks
    catalog: RaffleCatalog
    ledger: ReservationLedger
    allocator: TicketAllocator
    lifecycle: RaffleLifecycleManager


def build_services(
    session_factory: sessionmaker[Session],
    config: Mapping[str, Any],
    clock: Clock = utcnow,
) -> RaffleServices:
    locks = RaffleLocks()
    catalog = RaffleCatalog(
        session_factory,
        locks,
        strict_sales_lock=bool(config.get("STRICT_SALES_LOCK", True)),
        clock=clock,
    )
    ledger = ReservationLedger(
        catalog,
        locks,
        reservation_time=timedelta(milliseconds=int(config.get("RESERVATION_TIME_MS", DEFAULT_RESERVATION_TIME_MS))),
        clock=clock,
    )
    return RaffleServices(
        locks=locks,
        catalog=catalog,
        ledger=ledger,
        allocator=TicketAllocator(catalog, ledger, locks),
        lifecycle=RaffleLifecycleManager(catalog, ledger, locks),
    )


def init_services(app: Flask, session_factory: sessionmaker[Session], clock: Clock = utcnow) -> RaffleServices:
    services = build_services(session_factory, app.config, clock=clock)
    app.extensions[EXTENSION_KEY] = services
    return services


def get_services() -> RaffleServices:
    """Services of the current application."""

    services: RaffleServices | None = current_app.extensions.get(EXTENSION_KEY)
    if services is None:
        raise RuntimeError("Raffle services not initialized")
    return services
