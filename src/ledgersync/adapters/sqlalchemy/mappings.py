"""SQLAlchemy table metadata for the CiviCRM tables the sync touches.

CiviCRM owns every ``civicrm_*`` table; they are declared here so the adapter can
query them and so tests can provision them. Only ``ledgersync_sync_log`` belongs to
this project and is created by the migrations.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    orm,
)

from ledgersync.domain.model import AccountMapping, LogKind, SyncLogEntry

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# CiviCRM tables ----------------------------------------------------------------

contact_table = Table(
    "civicrm_contact",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("contact_type", String(64), nullable=True),
    Column("first_name", String(64), nullable=True),
    Column("last_name", String(64), nullable=True),
    Column("organization_name", String(128), nullable=True),
    Column("display_name", String(128), nullable=True),
    Column("is_deleted", Boolean, nullable=False, default=False),
)

email_table = Table(
    "civicrm_email",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "contact_id",
        Integer,
        ForeignKey("civicrm_contact.id", ondelete="CASCADE"),
        nullable=True,
    ),
    Column("email", String(254), nullable=True),
    Column("is_primary", Boolean, nullable=False, default=False),
)

phone_table = Table(
    "civicrm_phone",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "contact_id",
        Integer,
        ForeignKey("civicrm_contact.id", ondelete="CASCADE"),
        nullable=True,
    ),
    Column("phone", String(32), nullable=True),
    Column("is_primary", Boolean, nullable=False, default=False),
)

uf_match_table = Table(
    "civicrm_uf_match",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("domain_id", Integer, nullable=False, default=1),
    Column("uf_id", Integer, nullable=False),
    Column("uf_name", String(128), nullable=True),
    Column(
        "contact_id",
        Integer,
        ForeignKey("civicrm_contact.id", ondelete="CASCADE"),
        nullable=True,
    ),
)

account_contact_table = Table(
    "civicrm_account_contact",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("contact_id", Integer, nullable=False),
    Column("accounts_contact_id", String(128), key="remote_contact_id", nullable=True),
    Column("accounts_display_name", String(128), key="display_name", nullable=True),
    Column("last_sync_date", UTCDateTime(), nullable=True),
    Column("accounts_data", Text, key="data", nullable=True),
    Column("accounts_needs_update", Boolean, key="needs_update", nullable=False, default=False),
    Column("connector_id", Integer, nullable=False, default=0),
    Column("plugin", String(32), nullable=False),
    UniqueConstraint("contact_id", "plugin"),
)

setting_table = Table(
    "civicrm_setting",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("value", Text, nullable=True),
    Column("domain_id", Integer, nullable=True),
)

CONSTITUENT_TABLES = (
    contact_table,
    email_table,
    phone_table,
    uf_match_table,
    account_contact_table,
    setting_table,
)

# Owned tables ------------------------------------------------------------------

sync_log_table = Table(
    "ledgersync_sync_log",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("timestamp", UTCDateTime(), nullable=False),
    Column("message", Text, nullable=False),
    Column("kind", Enum(LogKind, native_enum=False, length=16), nullable=False),
    Column("order_id", Integer, nullable=True, index=True),
    Column("remote_contact_id", String(128), nullable=True),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(AccountMapping, account_contact_table)
    mapper_registry.map_imperatively(SyncLogEntry, sync_log_table)
    return mapper_registry


def create_constituent_tables(engine: Engine) -> None:
    """Create the CiviCRM tables when absent (local databases and tests only)."""

    log.info("Creating CiviCRM tables")
    mapper_registry.metadata.create_all(engine, tables=list(CONSTITUENT_TABLES), checkfirst=True)
