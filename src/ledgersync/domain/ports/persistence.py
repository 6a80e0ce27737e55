"""Ports for the constituent database and the sync log store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ledgersync.domain.model import AccountMapping, ConstituentContact, SyncLogEntry


@runtime_checkable
class ConstituentRepository(Protocol):
    """Read-only access to constituent contacts."""

    def contact_id_for_user(self, user_id: int) -> int | None: ...

    def contact_id_for_email(self, email: str) -> int | None: ...

    def get_contact(self, contact_id: int) -> ConstituentContact | None: ...


@runtime_checkable
class AccountMappingRepository(Protocol):
    """External account mapping rows, unique per (contact_id, plugin)."""

    def get(self, contact_id: int, plugin: str) -> AccountMapping | None: ...

    def add(self, mapping: AccountMapping) -> None:
        """Insert a new row; raises DuplicateMappingError if one already exists."""
        ...

    def count(self, contact_id: int, plugin: str) -> int: ...


@runtime_checkable
class SyncLogRepository(Protocol):
    def append(self, entry: SyncLogEntry) -> None: ...

    def entries(self) -> list[SyncLogEntry]:
        """Return entries oldest first."""
        ...

    def count(self) -> int: ...

    def trim(self, capacity: int) -> int:
        """Drop the oldest entries beyond ``capacity``; return how many were removed."""
        ...

    def clear(self) -> int: ...


@runtime_checkable
class SettingsRepository(Protocol):
    def get(self, name: str) -> str | None: ...
