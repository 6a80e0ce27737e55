from __future__ import annotations

from datetime import UTC, datetime

import pytest

from ledgersync.domain.audit import AuditLog
from ledgersync.domain.model import LogKind
from tests.helpers.ledger import InMemorySyncLogRepository


def _clock() -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC)


def test_append_beyond_capacity_evicts_oldest() -> None:
    repository = InMemorySyncLogRepository()
    audit = AuditLog(repository, capacity=100, clock=_clock)

    for index in range(101):
        audit.record_success(f"entry {index}", order_id=index)

    entries = audit.entries()
    assert len(entries) == 100
    assert entries[0].message == "entry 1"
    assert entries[-1].message == "entry 100"


def test_record_error_sets_kind_and_references() -> None:
    repository = InMemorySyncLogRepository()
    audit = AuditLog(repository, clock=_clock)

    entry = audit.record_error("boom", order_id=12)

    assert entry.kind is LogKind.ERROR
    assert entry.is_error
    assert entry.order_id == 12
    assert entry.remote_contact_id is None
    assert entry.timestamp == _clock()


def test_record_success_mirrors_to_logger(caplog: pytest.LogCaptureFixture) -> None:
    audit = AuditLog(InMemorySyncLogRepository(), clock=_clock)

    with caplog.at_level("INFO", logger="ledgersync.domain.audit"):
        audit.record_success("Contact created in Xero", order_id=3, remote_contact_id="x-1")

    assert "Contact created in Xero" in caplog.text


def test_clear_removes_everything() -> None:
    audit = AuditLog(InMemorySyncLogRepository(), capacity=5)
    for offset in range(3):
        audit.record_success("entry", order_id=offset)

    assert audit.clear() == 3
    assert audit.entries() == []


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError, match="capacity"):
        AuditLog(InMemorySyncLogRepository(), capacity=0)
