"""Where the CiviCRM database lives.

Production points ``DATABASE_URI`` at the CiviCRM database. Without it the sync
runs against a standalone SQLite file, which is useful for local trials.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from sqlalchemy.engine import make_url

APP_DIR_NAME: Final[str] = "ledgersync"
DEFAULT_DB_FILENAME: Final[str] = "ledgersync.db"
DATABASE_URI_VAR: Final[str] = "DATABASE_URI"
DATA_DIR_VAR: Final[str] = "LEDGERSYNC_DATA_DIR"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Local directory for the fallback SQLite database."""

    data_dir: Path

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def database_path(self, *, ensure: bool = True) -> Path:
        data_dir = self.resolve_data_dir()
        if ensure:
            data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir / DEFAULT_DB_FILENAME


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str
    # True when no CiviCRM database is configured and the local file is used
    standalone: bool = False

    def display_uri(self) -> str:
        return make_url(self.uri).render_as_string(hide_password=True)


def _xdg_data_home() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        return Path(base) if base else Path.home() / "AppData" / "Local"
    base = os.getenv("XDG_DATA_HOME")
    return Path(base) if base else Path.home() / ".local" / "share"


def get_storage_config() -> StorageConfig:
    configured = os.getenv(DATA_DIR_VAR)
    data_dir = Path(configured) if configured else _xdg_data_home() / APP_DIR_NAME
    return StorageConfig(data_dir=data_dir)


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    uri = os.getenv(DATABASE_URI_VAR, "").strip()
    if uri:
        return DatabaseConfig(uri=uri)
    path = (storage or get_storage_config()).database_path()
    return DatabaseConfig(uri=f"sqlite+pysqlite:///{path}", standalone=True)
