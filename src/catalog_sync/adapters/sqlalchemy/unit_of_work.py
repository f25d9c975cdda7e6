"""SQLAlchemy-backed unit of work for the catalog."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from catalog_sync.adapters.sqlalchemy.mappings import start_mappers
from catalog_sync.adapters.sqlalchemy.migrations import upgrade_head
from catalog_sync.adapters.sqlalchemy.repositories import (
    SqlAlchemyConnectionRepository,
    SqlAlchemyProductRepository,
    SqlAlchemyVariantRepository,
)
from catalog_sync.config import get_database_config
from catalog_sync.domain.ports.unit_of_work import CatalogRepositories, RepositoryCollection

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the catalog store is used before ``startup()`` or reconfigured by accident."""


@dataclass(slots=True)
class _StoreState:
    engine: Engine | None = None
    sessions: sessionmaker[Session] | None = None

    def bind(self, engine: Engine) -> None:
        self.engine = engine
        self.sessions = sessionmaker(bind=engine, expire_on_commit=False)

    def reset(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self.sessions = None

    def require_sessions(self) -> sessionmaker[Session]:
        if self.sessions is None:
            raise StartupError(
                "Catalog store not started. Call catalog_sync.adapters.sqlalchemy.startup() "
                "before opening a unit of work."
            )
        return self.sessions


_STATE = _StoreState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Bind the catalog store to ``engine`` (or a new one) and migrate it to head."""

    if _STATE.engine is not None and not force:
        raise StartupError("Catalog store already started. Pass force=True to rebind it.")

    if engine is None:
        database = get_database_config()
        engine = create_engine(database_uri or database.uri, echo=database.echo, future=True)
    start_mappers()
    upgrade_head(engine=engine)
    if _STATE.engine is not None and _STATE.engine is not engine:
        _STATE.engine.dispose()
    _STATE.bind(engine)
    log.info("Catalog store ready at %s", engine.url.render_as_string(hide_password=True))


def configured_engine() -> Engine | None:
    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the engine and forget it; ``startup()`` may be called again afterwards."""

    _STATE.reset()


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """One session per ``with`` block; subclasses decide which repositories it exposes.

    Leaving the block without ``commit()`` discards pending changes. An exception
    inside the block rolls back before the session is closed.
    """

    def __init__(self) -> None:
        self._sessions = _STATE.require_sessions()
        self._session: Session | None = None
        self._repositories: TRepositories | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        self._session = self._sessions()
        self._repositories = self._build_repositories(self._session)
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
    def repositories(self) -> TRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work is not open")
        return self._repositories

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SqlAlchemyCatalogUnitOfWork(BaseSqlAlchemyUnitOfWork[CatalogRepositories]):
    """Connections, products and variants sharing one session."""

    def _build_repositories(self, session: Session) -> CatalogRepositories:
        return CatalogRepositories(
            connections=SqlAlchemyConnectionRepository(session),
            products=SqlAlchemyProductRepository(session),
            variants=SqlAlchemyVariantRepository(session),
        )


if TYPE_CHECKING:
    from catalog_sync.domain.ports.unit_of_work import CatalogUnitOfWork

    _uow_check: CatalogUnitOfWork = SqlAlchemyCatalogUnitOfWork()
