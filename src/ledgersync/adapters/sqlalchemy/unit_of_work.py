"""SQLAlchemy-backed unit of work for the contact sync.

The adapter holds one process-wide engine. Call :func:`startup` once before
opening units of work; each unit of work then owns a single session for one
sync run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from ledgersync.adapters.sqlalchemy.mappings import create_constituent_tables, start_mappers
from ledgersync.adapters.sqlalchemy.migrations import upgrade_head
from ledgersync.adapters.sqlalchemy.repositories import (
    SqlAlchemyAccountMappingRepository,
    SqlAlchemyConstituentRepository,
    SqlAlchemySettingsRepository,
    SqlAlchemySyncLogRepository,
)
from ledgersync.config import get_database_config
from ledgersync.domain.ports import SyncRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the adapter is used before :func:`startup` or started twice."""


@dataclass(slots=True)
class _Runtime:
    engine: Engine | None = None
    sessions: sessionmaker[Session] | None = field(default=None, repr=False)

    def bind(self, engine: Engine | None) -> None:
        self.engine = engine
        self.sessions = (
            sessionmaker(bind=engine, expire_on_commit=False) if engine is not None else None
        )


_RUNTIME = _Runtime()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
    create_constituent_schema: bool = False,
) -> None:
    """Bind the adapter to an engine and bring the owned tables up to date.

    ``create_constituent_schema`` provisions empty CiviCRM tables for local SQLite
    databases and tests; against a real CiviCRM database leave it off.
    """

    if _RUNTIME.engine is not None and not force:
        raise StartupError("SQLAlchemy adapter already started; pass force=True to rebind")

    if engine is None:
        engine = create_engine(database_uri or get_database_config().uri, future=True)
    start_mappers()
    if create_constituent_schema:
        create_constituent_tables(engine)
    upgrade_head(engine=engine)

    _RUNTIME.bind(engine)
    log.debug("SQLAlchemy adapter bound to %s", engine.url.render_as_string(hide_password=True))


def configured_engine() -> Engine | None:
    return _RUNTIME.engine


def is_started() -> bool:
    return _RUNTIME.engine is not None


def shutdown() -> None:
    """Dispose the engine and unbind the adapter."""

    if _RUNTIME.engine is not None:
        _RUNTIME.engine.dispose()
    _RUNTIME.bind(None)


class SqlAlchemySyncUnitOfWork:
    """One session over the CiviCRM database for one sync run.

    Leaving the ``with`` block without :meth:`commit` discards pending writes.
    """

    def __init__(self) -> None:
        if _RUNTIME.sessions is None:
            raise StartupError(
                "SQLAlchemy adapter not started; call "
                "ledgersync.adapters.sqlalchemy.unit_of_work.startup() first"
            )
        self._sessions = _RUNTIME.sessions
        self._session: Session | None = None
        self._repositories: SyncRepositories | None = None

    def __enter__(self) -> SqlAlchemySyncUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        session = self._sessions()
        self._session = session
        self._repositories = SyncRepositories(
            constituents=SqlAlchemyConstituentRepository(session),
            mappings=SqlAlchemyAccountMappingRepository(session),
            sync_log=SqlAlchemySyncLogRepository(session),
            settings=SqlAlchemySettingsRepository(session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        try:
            if exc_type is not None:
                log.debug("Rolling back unit of work after %s", exc_type.__name__)
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work is not open")
        return self._session

    @property
    def repositories(self) -> SyncRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work is not open")
        return self._repositories

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from ledgersync.domain.ports import SyncUnitOfWork

    _uow_check: SyncUnitOfWork = SqlAlchemySyncUnitOfWork()
