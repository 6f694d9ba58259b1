"""Background sweep of expired ticket reservations.

``reserve`` already purges a raffle's expired claims inline; the periodic
sweep bounds how long stale claims of idle raffles stay in memory.
"""

from __future__ import annotations

import atexit
import logging
from datetime import timedelta

from apscheduler.schedulers.background import BackgroundScheduler

from rafflehub.config import DEFAULT_SWEEP_INTERVAL_MS
from rafflehub.services.reservation_ledger import ReservationLedger

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "sweep-expired-reservations"


class ExpirySweeper:
    """Owns the scheduler that calls ``ledger.sweep_expired`` on an interval."""

    def __init__(
        self,
        ledger: ReservationLedger,
        interval: timedelta = timedelta(milliseconds=DEFAULT_SWEEP_INTERVAL_MS),
        scheduler: BackgroundScheduler | None = None,
    ) -> None:
        if interval <= timedelta(0):
            raise ValueError("sweep interval must be positive")
        if interval > ledger.reservation_time:
            logger.warning(
                "Sweep interval %s is longer than the reservation time %s",
                interval,
                ledger.reservation_time,
            )
        self._ledger = ledger
        self.interval = interval
        self._scheduler = scheduler or BackgroundScheduler(daemon=True)
        self._registered_exit = False

    @property
    def running(self) -> bool:
        return bool(self._scheduler.running)

    def run_once(self) -> int:
        try:
            return self._ledger.sweep_expired()
        except Exception:
            # Keep the job scheduled; next tick retries.
            logger.exception("Reservation sweep failed")
            return 0

    def start(self) -> None:
        if self.running:
            return
        self._scheduler.add_job(
            self.run_once,
            "interval",
            seconds=self.interval.total_seconds(),
            id=SWEEP_JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self._scheduler.start()
        if not self._registered_exit:
            atexit.register(self.shutdown)
            self._registered_exit = True
        logger.info("Reservation sweeper started (every %ss)", self.interval.total_seconds())

    def shutdown(self) -> None:
        if not self.running:
            return
        self._scheduler.shutdown(wait=False)
        logger.info("Reservation sweeper stopped")
