"""Operator-facing sync log records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from .enums import LogKind


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(eq=False, kw_only=True)
class SyncLogEntry:
    message: str
    kind: LogKind = LogKind.SUCCESS
    order_id: int | None = None
    remote_contact_id: str | None = None
    timestamp: datetime | None = None
    id: int | None = None

    def __post_init__(self) -> None:
        if self.timestamp is None:
            self.timestamp = _utcnow()

    @property
    def is_error(self) -> bool:
        return self.kind is LogKind.ERROR
