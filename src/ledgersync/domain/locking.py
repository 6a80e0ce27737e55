"""In-process mutual exclusion keyed by constituent."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from logging import getLogger
from typing import TYPE_CHECKING

from ledgersync.domain.errors import LockTimeoutError

if TYPE_CHECKING:
    from collections.abc import Iterator

log = getLogger(__name__)


class InProcessKeyedLock:
    """One lock per key, held across locate-then-write for a single constituent.

    Only serializes runs inside this process. Locks are dropped once no thread holds
    or waits for them.
    """

    def __init__(self, *, timeout: float = 30.0) -> None:
        self.timeout = timeout
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._users: dict[str, int] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        lock = self._checkout(key)
        try:
            if not lock.acquire(timeout=self.timeout):
                raise LockTimeoutError(
                    f"Could not acquire sync lock {key!r} within {self.timeout}s"
                )
            log.debug("Acquired sync lock %s", key)
            try:
                yield
            finally:
                lock.release()
                log.debug("Released sync lock %s", key)
        finally:
            self._checkin(key)

    def _checkout(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._users[key] = self._users.get(key, 0) + 1
            return lock

    def _checkin(self, key: str) -> None:
        with self._guard:
            remaining = self._users[key] - 1
            if remaining:
                self._users[key] = remaining
            else:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
