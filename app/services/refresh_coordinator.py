"""Coalesces runtime refresh requests so only one query is outstanding."""
from __future__ import annotations

import threading


class RefreshCoordinator:
    def __init__(self):
        self._lock = threading.Lock()
        self._latest = 0
        self._in_flight: int | None = None

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._in_flight is not None

    def try_begin(self) -> int | None:
        """Return a ticket for a new query, or None while one is still running."""
        with self._lock:
            if self._in_flight is not None:
                return None
            self._latest += 1
            self._in_flight = self._latest
            return self._in_flight

    def finish(self, ticket: int) -> bool:
        """Release the ticket; True when its result is still the most recent."""
        with self._lock:
            if self._in_flight == ticket:
                self._in_flight = None
            return ticket == self._latest

    def discard_pending(self) -> None:
        """Make the outstanding query's result stale (used on shutdown)."""
        with self._lock:
            self._latest += 1
