"""Turns a holder's reservations into permanent sold tickets."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from rafflehub.errors import ValidationError
from rafflehub.repositories.raffle_repository import RaffleRecord
from rafflehub.services.catalog_service import RaffleCatalog
from rafflehub.services.locks import RaffleLocks
from rafflehub.services.reservation_ledger import ReservationLedger

logger = logging.getLogger(__name__)


@dataclass
class HolderTickets:
    raffle_id: str
    raffle_title: str
    ticket_numbers: list[int] = field(default_factory=list)


class TicketAllocator:
    """Purchase flow: sold-set append plus claim removal, as one step."""

    def __init__(self, catalog: RaffleCatalog, ledger: ReservationLedger, locks: RaffleLocks) -> None:
        self._catalog = catalog
        self._ledger = ledger
        self._locks = locks

    def purchase(self, raffle_id: str, ticket_numbers: Sequence[int], holder_id: str) -> RaffleRecord:
        """Sell ``ticket_numbers`` of ``raffle_id`` to ``holder_id``.

        The caller is expected to have reserved the numbers first; this is
        not enforced. The sold rows are committed before the claims are
        removed, both under the raffle lock, so no reservation or sweep of
        the same raffle sees a half-applied purchase.
        """

        if not ticket_numbers:
            raise ValidationError(details={"ticket_numbers": ["At least one ticket number is required."]})
        if not isinstance(holder_id, str) or not holder_id.strip():
            raise ValidationError(details={"holder_id": ["Field may not be blank."]})
        if any(isinstance(n, bool) or not isinstance(n, int) for n in ticket_numbers):
            raise ValidationError(details={"ticket_numbers": ["Not a valid integer."]})

        with self._locks.hold(raffle_id):
            raffle = self._catalog.get_raffle(raffle_id)
            bad = sorted({n for n in ticket_numbers if not raffle.in_range(n)})
            if bad:
                raise ValidationError(
                    message=f"Ticket numbers must be between 1 and {raffle.total_tickets}",
                    details={"ticket_numbers": bad},
                )

            record, sold = self._catalog.append_sold(raffle_id, ticket_numbers, holder_id)
            self._ledger.consume(raffle_id, ticket_numbers, holder_id)

        logger.info("Raffle %s: sold %s to %s", raffle_id, sold, holder_id)
        return record

    def tickets_for_holder(self, holder_id: str) -> list[HolderTickets]:
        """Ticket history of a buyer, grouped by raffle."""

        grouped: dict[str, HolderTickets] = {}
        for row in self._catalog.holder_tickets(holder_id):
            entry = grouped.get(row.raffle_id)
            if entry is None:
                entry = grouped[row.raffle_id] = HolderTickets(row.raffle_id, row.raffle_title)
            entry.ticket_numbers.append(row.number)
        for entry in grouped.values():
            entry.ticket_numbers.sort()
        return list(grouped.values())
