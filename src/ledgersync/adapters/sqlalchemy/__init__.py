"""SQLAlchemy adapter package for ledgersync."""

from __future__ import annotations

from .mappings import create_constituent_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyAccountMappingRepository,
    SqlAlchemyConstituentRepository,
    SqlAlchemySettingsRepository,
    SqlAlchemySyncLogRepository,
)
from .unit_of_work import SqlAlchemySyncUnitOfWork, StartupError, shutdown, startup

__all__ = [
    "SqlAlchemyAccountMappingRepository",
    "SqlAlchemyConstituentRepository",
    "SqlAlchemySettingsRepository",
    "SqlAlchemySyncLogRepository",
    "SqlAlchemySyncUnitOfWork",
    "StartupError",
    "create_constituent_tables",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
