"""Domain error types for the contact sync."""

from __future__ import annotations


class SyncError(RuntimeError):
    """Base class for errors that abort a sync run."""


class RemoteWriteError(SyncError):
    """A create or update against the remote ledger failed or returned unusable data."""

    def __init__(self, message: str, *, mode: str | None = None) -> None:
        super().__init__(message)
        self.mode = mode


class DuplicateMappingError(SyncError):
    """A concurrent writer inserted the mapping row for the same constituent first."""


class LockTimeoutError(SyncError):
    """The per-constituent lock could not be acquired in time."""
