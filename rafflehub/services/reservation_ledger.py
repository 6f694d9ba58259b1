"""Reservation ledger: exclusive, time-bounded claims on ticket numbers.

A claim is valid while ``expires_at > now``. At most one claim per
``(raffle_id, ticket_number)`` exists because claims are keyed by number
inside each raffle's bucket. Expired claims are purged lazily on ``reserve``
and in bulk by ``sweep_expired`` (driven by the background sweeper).

All mutations of one raffle's bucket run under that raffle's lock from
``RaffleLocks``; the catalog and allocator share the same registry.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta

from rafflehub.config import DEFAULT_RESERVATION_TIME_MS
from rafflehub.errors import ValidationError, raffle_not_found
from rafflehub.services.catalog_service import RaffleCatalog
from rafflehub.services.locks import RaffleLocks
from rafflehub.utils.clock import Clock, to_naive_utc, utcnow

logger = logging.getLogger(__name__)

RESERVATION_TIME = timedelta(milliseconds=DEFAULT_RESERVATION_TIME_MS)


@dataclass(frozen=True)
class TicketReservation:
    raffle_id: str
    ticket_number: int
    holder_id: str
    expires_at: datetime

    def is_valid(self, now: datetime) -> bool:
        return self.expires_at > now


def _check_ticket_number(ticket_number: object) -> int:
    if isinstance(ticket_number, bool) or not isinstance(ticket_number, int):
        raise ValidationError(details={"ticket_number": ["Not a valid integer."]})
    return ticket_number


def _check_holder(holder_id: object) -> str:
    if not isinstance(holder_id, str) or not holder_id.strip():
        raise ValidationError(details={"holder_id": ["Field may not be blank."]})
    return holder_id


class ReservationLedger:
    """Arbitrates claims on ticket numbers across all raffles."""

    def __init__(
        self,
        catalog: RaffleCatalog,
        locks: RaffleLocks,
        *,
        reservation_time: timedelta = RESERVATION_TIME,
        clock: Clock = utcnow,
    ) -> None:
        if reservation_time <= timedelta(0):
            raise ValueError("reservation_time must be positive")
        self._catalog = catalog
        self._locks = locks
        self._clock = clock
        self.reservation_time = reservation_time
        self._claims: dict[str, dict[int, TicketReservation]] = {}

    def reserve(self, raffle_id: str, ticket_number: int, holder_id: str) -> bool:
        """Try to hold ``ticket_number`` for ``holder_id``.

        Returns False when the number is sold or validly held by anyone,
        including ``holder_id`` itself.

        Raises:
            NotFoundError: unknown raffle.
            ValidationError: number outside 1..total_tickets or blank holder.
        """

        number = _check_ticket_number(ticket_number)
        holder = _check_holder(holder_id)

        with self._locks.hold(raffle_id):
            raffle = self._catalog.get_raffle(raffle_id)
            if not raffle.in_range(number):
                raise ValidationError(
                    message=f"Ticket number must be between 1 and {raffle.total_tickets}",
                    details={"ticket_number": number},
                )

            now = self._clock()
            bucket = self._purge_locked(raffle_id, now)

            if number in raffle.sold_tickets or number in bucket:
                logger.debug("Raffle %s ticket %s unavailable for %s", raffle_id, number, holder)
                return False

            bucket[number] = TicketReservation(
                raffle_id=raffle_id,
                ticket_number=number,
                holder_id=holder,
                expires_at=now + self.reservation_time,
            )
            self._claims[raffle_id] = bucket
            logger.debug("Raffle %s ticket %s reserved by %s", raffle_id, number, holder)
            return True

    def release(self, raffle_id: str, ticket_number: int, holder_id: str) -> None:
        """Drop a claim, only if it belongs to ``holder_id``."""

        with self._locks.hold(raffle_id):
            self._require_raffle(raffle_id)
            bucket = self._claims.get(raffle_id)
            if not bucket:
                return
            claim = bucket.get(ticket_number)
            if claim is None or claim.holder_id != holder_id:
                return
            del bucket[ticket_number]
            self._drop_empty_locked(raffle_id)
        logger.debug("Raffle %s ticket %s released by %s", raffle_id, ticket_number, holder_id)

    def release_all(self, holder_id: str, raffle_id: str) -> None:
        """Drop every claim ``holder_id`` has in ``raffle_id``."""

        with self._locks.hold(raffle_id):
            self._require_raffle(raffle_id)
            bucket = self._claims.get(raffle_id)
            if not bucket:
                return
            mine = [n for n, c in bucket.items() if c.holder_id == holder_id]
            for n in mine:
                del bucket[n]
            self._drop_empty_locked(raffle_id)
        if mine:
            logger.debug("Raffle %s: released %s claims of %s", raffle_id, len(mine), holder_id)

    def consume(self, raffle_id: str, ticket_numbers: Iterable[int], holder_id: str) -> None:
        """Remove the holder's claims on ``ticket_numbers`` (after a sale)."""

        wanted = set(ticket_numbers)
        with self._locks.hold(raffle_id):
            bucket = self._claims.get(raffle_id)
            if not bucket:
                return
            for n in wanted:
                claim = bucket.get(n)
                if claim is not None and claim.holder_id == holder_id:
                    del bucket[n]
            self._drop_empty_locked(raffle_id)

    def sweep_expired(self, now: datetime | None = None) -> int:
        """Remove every claim with ``expires_at <= now``; returns how many.

        An aware ``now`` is converted to naive UTC before comparing.
        """

        now = self._clock() if now is None else to_naive_utc(now)
        removed = 0
        # Snapshot ids: buckets may be added while we walk them.
        for raffle_id in list(self._claims):
            with self._locks.hold(raffle_id):
                before = len(self._claims.get(raffle_id, {}))
                after = len(self._purge_locked(raffle_id, now))
                self._drop_empty_locked(raffle_id)
                removed += before - after
        if removed:
            logger.info("Expired %s ticket reservations", removed)
        return removed

    def drop_raffle(self, raffle_id: str) -> None:
        with self._locks.hold(raffle_id):
            dropped = self._claims.pop(raffle_id, None)
        if dropped:
            logger.info("Dropped %s reservations of raffle %s", len(dropped), raffle_id)

    def drop_above(self, raffle_id: str, total_tickets: int) -> None:
        """Forget claims on numbers beyond a reduced ticket count."""

        with self._locks.hold(raffle_id):
            bucket = self._claims.get(raffle_id)
            if not bucket:
                return
            for n in [n for n in bucket if n > total_tickets]:
                del bucket[n]
            self._drop_empty_locked(raffle_id)

    def active_claims(self, raffle_id: str, now: datetime | None = None) -> list[TicketReservation]:
        now = self._clock() if now is None else to_naive_utc(now)
        with self._locks.hold(raffle_id):
            bucket = self._claims.get(raffle_id, {})
            return sorted(
                (c for c in bucket.values() if c.is_valid(now)),
                key=lambda c: c.ticket_number,
            )

    def claims_for_holder(self, raffle_id: str, holder_id: str) -> list[TicketReservation]:
        return [c for c in self.active_claims(raffle_id) if c.holder_id == holder_id]

    def _require_raffle(self, raffle_id: str) -> None:
        if not self._catalog.exists(raffle_id):
            raise raffle_not_found(raffle_id)

    def _purge_locked(self, raffle_id: str, now: datetime) -> dict[int, TicketReservation]:
        bucket = self._claims.get(raffle_id, {})
        live = {n: c for n, c in bucket.items() if c.is_valid(now)}
        if raffle_id in self._claims:
            self._claims[raffle_id] = live
        return live

    def _drop_empty_locked(self, raffle_id: str) -> None:
        if not self._claims.get(raffle_id):
            self._claims.pop(raffle_id, None)
