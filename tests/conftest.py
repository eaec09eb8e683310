from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002

from dropsymlink.adapters.memory import InMemoryStore
from dropsymlink.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyStoreSession,
    shutdown,
    startup,
)
from dropsymlink.domain.ports import RootKey
from tests.helpers.stores import SHELL_PATHS

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture
def memory_store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def seeded_store(memory_store: InMemoryStore) -> InMemoryStore:
    """A store holding the shell keys that exist before any registration."""

    for path in SHELL_PATHS:
        memory_store.ensure_node(RootKey.LOCAL_MACHINE, path)
    return memory_store


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_store(sqlite_engine: Engine) -> Iterator[Callable[[], SqlAlchemyStoreSession]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyStoreSession:
        return SqlAlchemyStoreSession()

    try:
        yield factory
    finally:
        shutdown()
