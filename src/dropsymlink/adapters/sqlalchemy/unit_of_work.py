"""SQLAlchemy engine lifecycle and the store session built on it."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from dropsymlink.adapters.sqlalchemy.migrations import upgrade_head
from dropsymlink.adapters.sqlalchemy.store import SqlAlchemyHandle, open_root_node, snapshot_node
from dropsymlink.config import get_database_config
from dropsymlink.domain.model import NodeMode

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

    from dropsymlink.domain.ports import RootKey, StoreSnapshot


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy store session is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call dropsymlink.adapters.sqlalchemy."
                "unit_of_work.startup() before opening a store session."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the SQLAlchemy engine, schema, and session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_engine = engine or create_engine(
        database_uri or get_database_config().uri, future=True
    )
    upgrade_head(engine=resolved_engine)
    _STATE.engine = resolved_engine


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


class SqlAlchemyStoreSession:
    """One database session serving any number of store handles."""

    def __init__(self) -> None:
        self.session_factory: sessionmaker[Session] = _STATE.session_factory
        self._session: Session | None = None

    def __enter__(self) -> SqlAlchemyStoreSession:
        self.session = self.session_factory()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.session.rollback()
        self.session.close()
        self.session = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Store session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Store session already initialised")
        self._session = session

    def open_root(self, root: RootKey) -> SqlAlchemyHandle:
        node_id = open_root_node(self.session, root)
        return SqlAlchemyHandle(self.session, node_id, (root.value,))

    def snapshot(self, root: RootKey, path: str = "") -> StoreSnapshot:
        with self.open_root(root) as handle:
            if not path:
                return snapshot_node(self.session, handle.node_id)
            with handle.open_child(path, NodeMode.OPEN_EXISTING) as node:
                return snapshot_node(self.session, node.node_id)


if TYPE_CHECKING:
    from dropsymlink.domain.ports import StoreInspector, StoreSession

    _session_check: StoreSession = SqlAlchemyStoreSession()
    _inspector_check: StoreInspector = SqlAlchemyStoreSession()
