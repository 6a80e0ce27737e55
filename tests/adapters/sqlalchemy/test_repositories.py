"""Tests for SQLAlchemy repositories."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from sqlalchemy import text
from sqlalchemy.orm import Session  # noqa: TC002

from ledgersync.adapters.sqlalchemy.repositories import (
    SqlAlchemyAccountMappingRepository,
    SqlAlchemyConstituentRepository,
    SqlAlchemySettingsRepository,
    SqlAlchemySyncLogRepository,
    unserialize_setting,
)
from ledgersync.domain.errors import DuplicateMappingError
from ledgersync.domain.model import AccountMapping, LogKind, SyncLogEntry
from tests.helpers.civicrm import seed_constituent, seed_setting


@pytest.fixture
def seeded_session(sqlite_session: Session) -> Session:
    seed_constituent(
        sqlite_session,
        55,
        emails=[("old@example.org", False), ("Jane@Example.org", True)],
        phones=[("021 555 0101", True)],
        user_id=7,
    )
    seed_constituent(sqlite_session, 66, emails=[("shared@example.org", True)], is_deleted=True)
    seed_constituent(sqlite_session, 67, emails=[("shared@example.org", False)])
    sqlite_session.commit()
    return sqlite_session


def test_contact_id_for_user(seeded_session: Session) -> None:
    repository = SqlAlchemyConstituentRepository(seeded_session)

    assert repository.contact_id_for_user(7) == 55
    assert repository.contact_id_for_user(8) is None


def test_contact_id_for_email_ignores_case_and_deleted_contacts(seeded_session: Session) -> None:
    repository = SqlAlchemyConstituentRepository(seeded_session)

    assert repository.contact_id_for_email("jane@example.org") == 55
    assert repository.contact_id_for_email(" OLD@example.org ") == 55
    assert repository.contact_id_for_email("shared@example.org") == 67
    assert repository.contact_id_for_email("nobody@example.org") is None


def test_get_contact_prefers_primary_email(seeded_session: Session) -> None:
    repository = SqlAlchemyConstituentRepository(seeded_session)

    contact = repository.get_contact(55)

    assert contact is not None
    assert contact.display_name == "Jane Doe"
    assert contact.email == "Jane@Example.org"
    assert contact.phone == "021 555 0101"
    assert repository.get_contact(999) is None


def test_mapping_round_trip_uses_civicrm_column_names(sqlite_session: Session) -> None:
    repository = SqlAlchemyAccountMappingRepository(sqlite_session)
    synced_at = datetime(2026, 4, 1, 8, 0, tzinfo=UTC)

    repository.add(
        AccountMapping(
            contact_id=55,
            plugin="xero",
            remote_contact_id="xero-1",
            display_name="Jane Doe",
            last_sync_date=synced_at,
        )
    )
    sqlite_session.commit()
    sqlite_session.expunge_all()

    mapping = repository.get(55, "xero")
    assert mapping is not None
    assert mapping.remote_contact_id == "xero-1"
    assert mapping.last_sync_date == synced_at
    assert not mapping.needs_update
    assert repository.get(55, "quickbooks") is None

    raw = sqlite_session.execute(
        text("SELECT accounts_contact_id, accounts_display_name FROM civicrm_account_contact")
    ).one()
    assert tuple(raw) == ("xero-1", "Jane Doe")


def test_duplicate_mapping_raises_and_keeps_session_usable(sqlite_session: Session) -> None:
    repository = SqlAlchemyAccountMappingRepository(sqlite_session)
    repository.add(AccountMapping(contact_id=55, plugin="xero", remote_contact_id="xero-1"))
    sqlite_session.commit()

    with pytest.raises(DuplicateMappingError):
        repository.add(AccountMapping(contact_id=55, plugin="xero", remote_contact_id="xero-2"))

    assert repository.count(55, "xero") == 1
    existing = repository.get(55, "xero")
    assert existing is not None
    assert existing.remote_contact_id == "xero-1"


def test_sync_log_trim_keeps_newest_entries(sqlite_session: Session) -> None:
    repository = SqlAlchemySyncLogRepository(sqlite_session)
    for index in range(5):
        repository.append(
            SyncLogEntry(
                message=f"entry {index}",
                kind=LogKind.ERROR if index == 4 else LogKind.SUCCESS,
                order_id=index,
            )
        )

    assert repository.trim(3) == 2
    sqlite_session.commit()

    entries = repository.entries()
    assert [entry.message for entry in entries] == ["entry 2", "entry 3", "entry 4"]
    assert entries[-1].kind is LogKind.ERROR
    assert repository.count() == 3
    assert repository.trim(3) == 0


def test_sync_log_clear(sqlite_session: Session) -> None:
    repository = SqlAlchemySyncLogRepository(sqlite_session)
    repository.append(SyncLogEntry(message="one"))
    repository.append(SyncLogEntry(message="two"))

    assert repository.clear() == 2
    assert repository.entries() == []


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ('s:9:"abc-token";', "abc-token"),
        ('s:0:"";', ""),
        ("i:42;", "42"),
        ("b:1;", "1"),
        ("N;", None),
        ("", None),
        (None, None),
        ("plain-value", "plain-value"),
    ],
)
def test_unserialize_setting(raw: str | None, expected: str | None) -> None:
    assert unserialize_setting(raw) == expected


def test_settings_prefer_domain_specific_value(sqlite_session: Session) -> None:
    seed_setting(sqlite_session, "xero_tenant_id", 's:6:"global";', domain_id=None)
    seed_setting(sqlite_session, "xero_tenant_id", 's:6:"domain";', domain_id=1)
    sqlite_session.commit()

    repository = SqlAlchemySettingsRepository(sqlite_session)

    assert repository.get("xero_tenant_id") == "domain"
    assert repository.get("missing") is None
