"""Application configuration helpers."""

from __future__ import annotations

from .env import require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .ledger import XeroConfig, XeroCredentials, get_xero_config, get_xero_credentials
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .sync import SyncConfig, get_sync_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "SyncConfig",
    "XeroConfig",
    "XeroCredentials",
    "configure_logging",
    "get_database_config",
    "get_storage_config",
    "get_sync_config",
    "get_xero_config",
    "get_xero_credentials",
    "require_env_var",
    "require_env_vars",
]
