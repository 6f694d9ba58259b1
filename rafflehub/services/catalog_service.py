"""Raffle catalog: source of truth for raffle definitions and sold tickets."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy.orm import Session, sessionmaker

from rafflehub.db import session_scope
from rafflehub.errors import SalesLockedError, ValidationError, raffle_not_found
from rafflehub.repositories.raffle_repository import (
    HolderTicketRow,
    RaffleRecord,
    RaffleRepository,
    to_record,
)
from rafflehub.services.locks import RaffleLocks
from rafflehub.utils.clock import Clock, utcnow

logger = logging.getLogger(__name__)

MIN_TOTAL_TICKETS = 10
SALES_LOCKED_FIELDS = ("ticket_price", "total_tickets")
RAFFLE_STATUSES = ("open", "closed")


def _as_price(value: Any) -> Decimal:
    try:
        price = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(details={"ticket_price": ["Not a valid number."]}) from None
    if not price.is_finite() or price < 0:
        raise ValidationError(details={"ticket_price": ["Must be greater than or equal to 0."]})
    return price


def _as_total(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(details={"total_tickets": ["Not a valid integer."]})
    if value < MIN_TOTAL_TICKETS:
        raise ValidationError(details={"total_tickets": [f"Must be at least {MIN_TOTAL_TICKETS}."]})
    return value


def _validate_fields(fields: Mapping[str, Any], *, partial: bool) -> dict[str, Any]:
    data = dict(fields)
    if not partial:
        missing = [k for k in ("title", "prize", "ticket_price", "total_tickets", "draw_date", "creator_id") if k not in data]
        if missing:
            raise ValidationError(details={k: ["Missing data for required field."] for k in missing})

    if "ticket_price" in data:
        data["ticket_price"] = _as_price(data["ticket_price"])
    if "total_tickets" in data:
        data["total_tickets"] = _as_total(data["total_tickets"])
    if "draw_date" in data and not isinstance(data["draw_date"], datetime):
        raise ValidationError(details={"draw_date": ["Not a valid datetime."]})
    if "status" in data and data["status"] not in RAFFLE_STATUSES:
        raise ValidationError(details={"status": [f"Must be one of: {', '.join(RAFFLE_STATUSES)}."]})
    for key in ("title", "prize", "creator_id"):
        if key in data and not str(data[key] or "").strip():
            raise ValidationError(details={key: ["Field may not be blank."]})
    return data


class RaffleCatalog:
    """Create, read, edit and delete raffles; append sold tickets."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        locks: RaffleLocks,
        *,
        strict_sales_lock: bool = True,
        repository: RaffleRepository | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self._session_factory = session_factory
        self._locks = locks
        self._repo = repository or RaffleRepository()
        self._clock = clock
        self.strict_sales_lock = strict_sales_lock

    def add_raffle(self, fields: Mapping[str, Any]) -> RaffleRecord:
        data = _validate_fields(fields, partial=False)
        with session_scope(self._session_factory) as session:
            raffle = self._repo.create(session, data, created_at=self._clock())
            record = to_record(raffle)
        logger.info("Created raffle %s (%s tickets) for creator %s", record.id, record.total_tickets, record.creator_id)
        return record

    def get_raffle(self, raffle_id: str) -> RaffleRecord:
        with session_scope(self._session_factory) as session:
            raffle = self._repo.get_by_id(session, raffle_id)
            if raffle is None:
                raise raffle_not_found(raffle_id)
            return to_record(raffle)

    def exists(self, raffle_id: str) -> bool:
        with session_scope(self._session_factory) as session:
            return self._repo.get_by_id(session, raffle_id) is not None

    def list_raffles(self) -> list[RaffleRecord]:
        with session_scope(self._session_factory) as session:
            return [to_record(r) for r in self._repo.list_raffles(session)]

    def get_sold_tickets(self, raffle_id: str) -> list[int]:
        return self.get_raffle(raffle_id).sold_tickets

    def edit_raffle(self, raffle_id: str, changes: Mapping[str, Any]) -> RaffleRecord:
        unknown = sorted(set(changes) - RaffleRepository.EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(details={k: ["Field cannot be edited."] for k in unknown})
        data = _validate_fields(changes, partial=True)

        with self._locks.hold(raffle_id), session_scope(self._session_factory) as session:
            raffle = self._repo.get_by_id(session, raffle_id)
            if raffle is None:
                raise raffle_not_found(raffle_id)

            current = to_record(raffle)
            if current.has_sales():
                locked = [
                    key for key in SALES_LOCKED_FIELDS
                    if key in data and data[key] != getattr(current, key)
                ]
                if locked and self.strict_sales_lock:
                    raise SalesLockedError(
                        message="Ticket price and ticket count cannot change after tickets are sold",
                        details={"fields": locked},
                    )
                for key in locked:
                    logger.info("Ignoring %s change on raffle %s: tickets already sold", key, raffle_id)
                    data.pop(key)

            self._repo.update(session, raffle, data)
            record = to_record(raffle)

        logger.info("Edited raffle %s (%s)", raffle_id, ", ".join(sorted(data)) or "no changes")
        return record

    def delete_raffle(self, raffle_id: str) -> None:
        with self._locks.hold(raffle_id), session_scope(self._session_factory) as session:
            raffle = self._repo.get_by_id(session, raffle_id)
            if raffle is None:
                raise raffle_not_found(raffle_id)
            self._repo.delete(session, raffle)
        logger.info("Deleted raffle %s", raffle_id)

    def append_sold(
        self,
        raffle_id: str,
        numbers: Iterable[int],
        holder_id: str,
    ) -> tuple[RaffleRecord, list[int]]:
        """Add numbers to the sold set in one transaction.

        Numbers already sold are skipped. Returns the refreshed raffle and the
        numbers actually recorded for ``holder_id``.
        """

        with self._locks.hold(raffle_id), session_scope(self._session_factory) as session:
            raffle = self._repo.get_by_id(session, raffle_id)
            if raffle is None:
                raise raffle_not_found(raffle_id)

            already = self._repo.sold_numbers(session, raffle_id)
            fresh = sorted({int(n) for n in numbers} - already)
            skipped = sorted({int(n) for n in numbers} & already)
            if skipped:
                logger.warning("Raffle %s: numbers %s already sold, not re-selling to %s", raffle_id, skipped, holder_id)

            if fresh:
                self._repo.add_sold(session, raffle_id, fresh, holder_id, purchased_at=self._clock())
                session.expire(raffle, ["sold_tickets"])
            return to_record(raffle), fresh

    def holder_tickets(self, holder_id: str) -> list[HolderTicketRow]:
        with session_scope(self._session_factory) as session:
            return self._repo.tickets_for_holder(session, holder_id)
