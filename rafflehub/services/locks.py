"""Per-raffle mutual exclusion.

Every mutation of a raffle's claims or sold set runs under that raffle's
lock. Different raffles never contend. A raffle's entry only exists while
some thread holds or waits on it, so unknown ids leave nothing behind.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from threading import Lock, RLock


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = RLock()
        self.users = 0


class RaffleLocks:
    """Registry of one reentrant, reference-counted lock per raffle id."""

    def __init__(self) -> None:
        self._guard = Lock()
        self._entries: dict[str, _Entry] = {}

    def _checkout(self, raffle_id: str) -> _Entry:
        with self._guard:
            entry = self._entries.get(raffle_id)
            if entry is None:
                entry = self._entries[raffle_id] = _Entry()
            entry.users += 1
            return entry

    def _checkin(self, raffle_id: str, entry: _Entry) -> None:
        with self._guard:
            entry.users -= 1
            if entry.users == 0:
                self._entries.pop(raffle_id, None)

    @contextmanager
    def hold(self, raffle_id: str) -> Iterator[None]:
        entry = self._checkout(raffle_id)
        try:
            with entry.lock:
                yield
        finally:
            self._checkin(raffle_id, entry)

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)
