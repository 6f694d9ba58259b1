"""Create / edit / delete raffles for external callers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from rafflehub.repositories.raffle_repository import RaffleRecord
from rafflehub.services.catalog_service import RaffleCatalog
from rafflehub.services.locks import RaffleLocks
from rafflehub.services.reservation_ledger import ReservationLedger


class RaffleLifecycleManager:
    """Raffle use-cases that touch both the catalog and the ledger."""

    def __init__(self, catalog: RaffleCatalog, ledger: ReservationLedger, locks: RaffleLocks) -> None:
        self._catalog = catalog
        self._ledger = ledger
        self._locks = locks

    def create_raffle(self, fields: Mapping[str, Any]) -> RaffleRecord:
        return self._catalog.add_raffle(fields)

    def edit_raffle(self, raffle_id: str, changes: Mapping[str, Any]) -> RaffleRecord:
        with self._locks.hold(raffle_id):
            record = self._catalog.edit_raffle(raffle_id, changes)
            self._ledger.drop_above(raffle_id, record.total_tickets)
        return record

    def delete_raffle(self, raffle_id: str) -> None:
        with self._locks.hold(raffle_id):
            self._catalog.delete_raffle(raffle_id)
            self._ledger.drop_raffle(raffle_id)
