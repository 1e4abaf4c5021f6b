"""SQLAlchemy-backed unit of work for identities and run records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from rolesync.adapters.sqlalchemy.mappings import create_all_tables, start_mappers
from rolesync.adapters.sqlalchemy.repositories import (
    SqlAlchemyIdentityRepository,
    SqlAlchemySyncLogRepository,
    SqlAlchemyVerificationRequestRepository,
)
from rolesync.config import get_database_config
from rolesync.domain.ports.unit_of_work import SyncRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine


class StartupError(RuntimeError):
    """Raised when the SQLAlchemy adapter is used before ``startup()``."""


class _Storage:
    """Process-wide engine and session factory."""

    engine: Engine | None = None
    session_factory: sessionmaker[Session] | None = None


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Bind the adapter to an engine, mapping the domain and creating missing tables."""

    if _Storage.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    engine = engine or create_engine(database_uri or get_database_config().uri, future=True)
    start_mappers()
    create_all_tables(engine)
    _Storage.engine = engine
    # detached identities cross sessions between select and save
    _Storage.session_factory = sessionmaker(bind=engine, expire_on_commit=False)


def is_started() -> bool:
    return _Storage.engine is not None


def shutdown() -> None:
    """Dispose the engine and forget it (tests call this between cases)."""

    if _Storage.engine is not None:
        _Storage.engine.dispose()
    _Storage.engine = None
    _Storage.session_factory = None


class SqlAlchemyUnitOfWork:
    """One session per ``with`` block; rolled back when the block raises."""

    def __init__(self) -> None:
        if _Storage.session_factory is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call rolesync.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        self.session_factory = _Storage.session_factory
        self._session: Session | None = None
        self._repositories: SyncRepositories | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = self.session_factory()
        self._repositories = SyncRepositories(
            identities=SqlAlchemyIdentityRepository(self._session),
            sync_logs=SqlAlchemySyncLogRepository(self._session),
            verification_requests=SqlAlchemyVerificationRequestRepository(self._session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        try:
            if exc_type is not None:
                self.rollback()
        finally:
            self.session.close()
            self._session = None
            self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @property
    def repositories(self) -> SyncRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
