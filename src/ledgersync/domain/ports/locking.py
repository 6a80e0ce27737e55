"""Port for mutual exclusion around a single constituent's sync."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from contextlib import AbstractContextManager


@runtime_checkable
class KeyedLock(Protocol):
    def hold(self, key: str) -> AbstractContextManager[None]:
        """Hold the lock for ``key``; raises LockTimeoutError when not acquired in time."""
        ...
