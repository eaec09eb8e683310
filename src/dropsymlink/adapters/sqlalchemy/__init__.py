"""SQLAlchemy store backend."""

from __future__ import annotations

from .mappings import create_all_tables, metadata, store_node_table, store_value_table
from .store import SqlAlchemyHandle
from .unit_of_work import (
    SqlAlchemyStoreSession,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyHandle",
    "SqlAlchemyStoreSession",
    "StartupError",
    "configured_engine",
    "create_all_tables",
    "is_started",
    "metadata",
    "shutdown",
    "startup",
    "store_node_table",
    "store_value_table",
]
