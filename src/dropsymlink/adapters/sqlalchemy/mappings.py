"""SQLAlchemy table metadata for the persistent store backend."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import (
    Column,
    ForeignKey,
    Index,
    Integer,
    LargeBinary,
    MetaData,
    String,
    Table,
    UniqueConstraint,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_name)s",
        "uq": "uq_%(table_name)s_%(column_0_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

store_node_table = Table(
    "store_node",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "parent_id",
        Integer,
        ForeignKey("store_node.id", ondelete="CASCADE"),
        nullable=True,
    ),
    Column("name", String, nullable=False),
    # registry names compare case-insensitively
    Column("name_folded", String, nullable=False),
    UniqueConstraint("parent_id", "name_folded"),
    Index("ix_store_node_parent_id", "parent_id"),
)

store_value_table = Table(
    "store_value",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "node_id",
        Integer,
        ForeignKey("store_node.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("name", String, nullable=True),
    # empty string addresses the default value
    Column("name_folded", String, nullable=False),
    Column("value_type", Integer, nullable=False),
    Column("data", LargeBinary, nullable=False),
    UniqueConstraint("node_id", "name_folded"),
)


def create_all_tables(engine: Engine) -> None:
    """Create the store tables directly, bypassing migrations."""

    log.info("Creating all tables")
    metadata.create_all(engine)
