"""Synchronization defaults for the contact sync."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_flag, env_float, env_int, env_list, optional_env_var
from .errors import ConfigurationError

DEFAULT_LEDGER_TAG = "xero"
DEFAULT_LOG_CAPACITY = 100
DEFAULT_LOCK_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class SyncConfig:
    enabled: bool = True
    ledger_tag: str = DEFAULT_LEDGER_TAG
    log_capacity: int = DEFAULT_LOG_CAPACITY
    trigger_statuses: tuple[str, ...] = ()
    lock_timeout_seconds: float = DEFAULT_LOCK_TIMEOUT_SECONDS

    def triggers_on(self, status: str) -> bool:
        """Empty trigger list means every status change starts a sync."""
        if not self.trigger_statuses:
            return True
        return status in self.trigger_statuses


def get_sync_config() -> SyncConfig:
    capacity = env_int("LEDGERSYNC_LOG_CAPACITY", default=DEFAULT_LOG_CAPACITY)
    if capacity < 1:
        raise ConfigurationError("LEDGERSYNC_LOG_CAPACITY must be positive")
    return SyncConfig(
        enabled=env_flag("LEDGERSYNC_SYNC_ENABLED", default=True),
        ledger_tag=optional_env_var("LEDGERSYNC_LEDGER_TAG") or DEFAULT_LEDGER_TAG,
        log_capacity=capacity,
        trigger_statuses=env_list("LEDGERSYNC_TRIGGER_STATUSES"),
        lock_timeout_seconds=env_float(
            "LEDGERSYNC_LOCK_TIMEOUT", default=DEFAULT_LOCK_TIMEOUT_SECONDS
        ),
    )
