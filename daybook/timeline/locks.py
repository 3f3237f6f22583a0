"""
Per-date locks for callers that run mutations concurrently.

The timeline core takes no locks: a read-modify-write on one date racing
another on the same date loses one update. Holding the lock for every date
an operation touches serialises those within this process only.
"""

import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import date


class DateLocks:
    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[date, threading.Lock] = {}

    def lock_for(self, day: date) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(day)
            if lock is None:
                lock = self._locks[day] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, days: Iterable[date]) -> Iterator[None]:
        """Acquire the locks for `days` in date order (avoids lock-order deadlock)."""
        locks = [self.lock_for(day) for day in sorted(set(days))]
        acquired = []
        try:
            for lock in locks:
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
