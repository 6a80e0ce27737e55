"""Domain port definitions for adapters."""

from __future__ import annotations

from .ledger import ContactFilter, ContactRegistry, FilterField
from .locking import KeyedLock
from .persistence import (
    AccountMappingRepository,
    ConstituentRepository,
    SettingsRepository,
    SyncLogRepository,
)
from .unit_of_work import RepositoryCollection, SyncRepositories, SyncUnitOfWork, UnitOfWork

__all__ = [
    "AccountMappingRepository",
    "ConstituentRepository",
    "ContactFilter",
    "ContactRegistry",
    "FilterField",
    "KeyedLock",
    "RepositoryCollection",
    "SettingsRepository",
    "SyncLogRepository",
    "SyncRepositories",
    "SyncUnitOfWork",
    "UnitOfWork",
]
