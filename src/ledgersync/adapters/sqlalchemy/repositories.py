"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import re
from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError

from ledgersync.adapters.sqlalchemy.mappings import (
    account_contact_table,
    contact_table,
    email_table,
    phone_table,
    setting_table,
    sync_log_table,
    uf_match_table,
)
from ledgersync.domain.errors import DuplicateMappingError
from ledgersync.domain.model import AccountMapping, ConstituentContact, SyncLogEntry

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement, Table
    from sqlalchemy.orm import Session

log = getLogger(__name__)


class SqlAlchemyConstituentRepository:
    """Read-only queries against CiviCRM contacts, emails, phones and user matches."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def contact_id_for_user(self, user_id: int) -> int | None:
        stmt = (
            select(uf_match_table.c.contact_id)
            .where(uf_match_table.c.uf_id == user_id)
            .where(uf_match_table.c.contact_id.is_not(None))
            .order_by(uf_match_table.c.id)
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def contact_id_for_email(self, email: str) -> int | None:
        stmt = (
            select(email_table.c.contact_id)
            .join(contact_table, contact_table.c.id == email_table.c.contact_id)
            .where(func.lower(email_table.c.email) == email.strip().lower())
            .where(contact_table.c.is_deleted.is_(False))
            .order_by(email_table.c.is_primary.desc(), email_table.c.id)
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def get_contact(self, contact_id: int) -> ConstituentContact | None:
        row = self.session.execute(
            select(contact_table).where(contact_table.c.id == contact_id)
        ).one_or_none()
        if row is None:
            return None
        return ConstituentContact(
            id=row.id,
            first_name=row.first_name or "",
            last_name=row.last_name or "",
            organization_name=row.organization_name or "",
            email=self._primary_value(email_table, email_table.c.email, contact_id),
            phone=self._primary_value(phone_table, phone_table.c.phone, contact_id),
        )

    def _primary_value(self, table: Table, column: ColumnElement[str], contact_id: int) -> str:
        stmt = (
            select(column)
            .where(table.c.contact_id == contact_id)
            .order_by(table.c.is_primary.desc(), table.c.id)
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none() or ""


class SqlAlchemyAccountMappingRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, contact_id: int, plugin: str) -> AccountMapping | None:
        stmt = (
            select(AccountMapping)
            .where(account_contact_table.c.contact_id == contact_id)
            .where(account_contact_table.c.plugin == plugin)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def add(self, mapping: AccountMapping) -> None:
        try:
            with self.session.begin_nested():
                self.session.add(mapping)
                self.session.flush()
        except IntegrityError as exc:
            raise DuplicateMappingError(
                f"Mapping for contact {mapping.contact_id} ({mapping.plugin}) already exists"
            ) from exc

    def count(self, contact_id: int, plugin: str) -> int:
        stmt = (
            select(func.count())
            .select_from(account_contact_table)
            .where(account_contact_table.c.contact_id == contact_id)
            .where(account_contact_table.c.plugin == plugin)
        )
        return int(self.session.execute(stmt).scalar_one())


class SqlAlchemySyncLogRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def append(self, entry: SyncLogEntry) -> None:
        self.session.add(entry)
        self.session.flush()

    def entries(self) -> list[SyncLogEntry]:
        stmt = select(SyncLogEntry).order_by(sync_log_table.c.id)
        return list(self.session.execute(stmt).scalars())

    def count(self) -> int:
        stmt = select(func.count()).select_from(sync_log_table)
        return int(self.session.execute(stmt).scalar_one())

    def trim(self, capacity: int) -> int:
        cutoff_stmt = (
            select(sync_log_table.c.id)
            .order_by(sync_log_table.c.id.desc())
            .offset(capacity - 1)
            .limit(1)
        )
        cutoff = self.session.execute(cutoff_stmt).scalar_one_or_none()
        if cutoff is None:
            return 0
        result = self.session.execute(delete(sync_log_table).where(sync_log_table.c.id < cutoff))
        return result.rowcount or 0

    def clear(self) -> int:
        result = self.session.execute(delete(sync_log_table))
        return result.rowcount or 0


_PHP_STRING = re.compile(r'^s:(\d+):"(.*)";$', re.DOTALL)
_PHP_SCALAR = re.compile(r"^([ibd]):([^;]*);$")


def unserialize_setting(raw: str | None) -> str | None:
    """Decode the PHP-serialized scalars CiviCRM stores in ``civicrm_setting.value``."""

    if raw is None:
        return None
    value = raw.strip()
    if not value or value == "N;":
        return None

    match = _PHP_STRING.match(value)
    if match is not None:
        length, text = int(match.group(1)), match.group(2)
        # the declared length counts bytes, not characters
        if len(text.encode("utf-8")) != length:
            log.warning("Setting string length mismatch (%d declared)", length)
        return text

    match = _PHP_SCALAR.match(value)
    if match is not None:
        return match.group(2)

    log.warning("Unsupported serialized setting value, using it verbatim")
    return value


class SqlAlchemySettingsRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, name: str) -> str | None:
        stmt = (
            select(setting_table.c.value)
            .where(setting_table.c.name == name)
            .order_by(setting_table.c.domain_id.is_(None), setting_table.c.id)
            .limit(1)
        )
        return unserialize_setting(self.session.execute(stmt).scalar_one_or_none())
