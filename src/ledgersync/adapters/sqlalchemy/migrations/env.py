"""Alembic environment configuration for ledgersync."""

from __future__ import annotations

import logging
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import create_engine, pool

from ledgersync.adapters.sqlalchemy.mappings import mapper_registry, start_mappers, sync_log_table
from ledgersync.config import get_database_config

config = context.config

if config.config_file_name is not None:
    config_path = Path(config.config_file_name)
    if config_path.suffix == ".ini" and config_path.exists():
        fileConfig(config.config_file_name)

log = logging.getLogger("alembic.env")

start_mappers()

target_metadata = mapper_registry.metadata
version_table = config.get_main_option("version_table") or "ledgersync_alembic_version"
owned_tables = frozenset({sync_log_table.name})


def include_object(
    object_: object,
    name: str | None,
    type_: str,
    reflected: bool,  # noqa: FBT001
    compare_to: object,
) -> bool:
    """Keep autogenerate away from the CiviCRM tables."""

    _ = (object_, reflected, compare_to)
    if type_ == "table":
        return name in owned_tables
    return True


def _configure(**kwargs: object) -> None:
    context.configure(
        target_metadata=target_metadata,
        version_table=version_table,
        include_object=include_object,
        render_as_batch=True,
        compare_type=True,
        compare_server_default=True,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""

    url = config.get_main_option("sqlalchemy.url") or get_database_config().uri
    _configure(url=url, literal_binds=True)

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""

    existing_connection = config.attributes.get("connection")
    if existing_connection is not None:
        _configure(connection=existing_connection)

        with context.begin_transaction():
            context.run_migrations()
        return

    main_url = config.get_main_option("sqlalchemy.url") or get_database_config().uri
    engine = create_engine(main_url, poolclass=pool.NullPool, future=True)

    try:
        with engine.connect() as connection:
            _configure(connection=connection)

            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
