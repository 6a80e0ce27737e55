"""Bounded operator log of sync outcomes."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from ledgersync.domain.model import LogKind, SyncLogEntry

if TYPE_CHECKING:
    from collections.abc import Callable

    from ledgersync.domain.ports import SyncLogRepository

log = logging.getLogger(__name__)

DEFAULT_CAPACITY = 100


def _utcnow() -> datetime:
    return datetime.now(UTC)


class AuditLog:
    """Append-only ring buffer; the oldest entries are evicted past ``capacity``."""

    def __init__(
        self,
        repository: SyncLogRepository,
        *,
        capacity: int = DEFAULT_CAPACITY,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if capacity < 1:
            raise ValueError("Audit log capacity must be positive")
        self._repository = repository
        self._capacity = capacity
        self._clock = clock

    @property
    def capacity(self) -> int:
        return self._capacity

    def record_success(
        self,
        message: str,
        *,
        order_id: int | None = None,
        remote_contact_id: str | None = None,
    ) -> SyncLogEntry:
        return self._append(message, LogKind.SUCCESS, order_id, remote_contact_id)

    def record_error(
        self,
        message: str,
        *,
        order_id: int | None = None,
        remote_contact_id: str | None = None,
    ) -> SyncLogEntry:
        return self._append(message, LogKind.ERROR, order_id, remote_contact_id)

    def entries(self) -> list[SyncLogEntry]:
        """Return entries oldest first."""

        return self._repository.entries()

    def clear(self) -> int:
        removed = self._repository.clear()
        log.info("Cleared %d sync log entries", removed)
        return removed

    def _append(
        self,
        message: str,
        kind: LogKind,
        order_id: int | None,
        remote_contact_id: str | None,
    ) -> SyncLogEntry:
        entry = SyncLogEntry(
            message=message,
            kind=kind,
            order_id=order_id,
            remote_contact_id=remote_contact_id,
            timestamp=self._clock(),
        )
        self._repository.append(entry)
        evicted = self._repository.trim(self._capacity)
        if evicted:
            log.debug("Evicted %d sync log entries", evicted)

        level = logging.ERROR if kind is LogKind.ERROR else logging.INFO
        log.log(level, "[order %s] %s", order_id if order_id is not None else "-", message)
        return entry
