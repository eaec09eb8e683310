"""Store handles backed by SQLAlchemy sessions.

Every mutation commits on its own: the engines treat the store as
non-transactional and roll back by compensation, so the backend must not
hold partial work in an open transaction.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, cast

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError

from dropsymlink.adapters.sqlalchemy.mappings import store_node_table, store_value_table
from dropsymlink.domain.errors import (
    InvalidHandleError,
    NodeNotEmptyError,
    NodeNotFoundError,
    StoreError,
)
from dropsymlink.domain.model import NodeMode, ValueType, decode_scalar, split_path
from dropsymlink.domain.ports import StoreHandle

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.orm import Session

    from dropsymlink.domain.ports import RootKey, StoreSnapshot

_NOT_FOUND = "The system cannot find the file specified"


def _fold(name: str | None) -> str:
    return (name or "").casefold()


@contextmanager
def _translate_errors(session: Session, path: tuple[str, ...]) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        session.rollback()
        raise StoreError(f"Database error: {exc}", path=path) from exc


def _find_child(session: Session, parent_id: int | None, name: str) -> tuple[int, str] | None:
    parent_clause = (
        store_node_table.c.parent_id.is_(None)
        if parent_id is None
        else store_node_table.c.parent_id == parent_id
    )
    stmt = (
        select(store_node_table.c.id, store_node_table.c.name)
        .where(parent_clause)
        .where(store_node_table.c.name_folded == _fold(name))
    )
    row = session.execute(stmt).first()
    if row is None:
        return None
    return cast(int, row.id), cast(str, row.name)


def _insert_node(session: Session, parent_id: int | None, name: str) -> int:
    stmt = insert(store_node_table).values(parent_id=parent_id, name=name, name_folded=_fold(name))
    result = session.execute(stmt)
    return cast(int, result.inserted_primary_key[0])


def open_root_node(session: Session, root: RootKey) -> int:
    """Return the id of the root key's node, creating it on first use."""

    with _translate_errors(session, (root.value,)):
        found = _find_child(session, None, root.value)
        if found is not None:
            return found[0]
        node_id = _insert_node(session, None, root.value)
        session.commit()
        return node_id


class SqlAlchemyHandle(StoreHandle):
    def __init__(self, session: Session, node_id: int, path: tuple[str, ...]) -> None:
        self._session = session
        self._node_id = node_id
        self._path = path
        self._closed = False

    @property
    def path(self) -> tuple[str, ...]:
        return self._path

    @property
    def node_id(self) -> int:
        return self._node_id

    def _live_node_id(self) -> int:
        if self._closed:
            raise InvalidHandleError("Handle is closed", path=self._path)
        stmt = select(store_node_table.c.id).where(store_node_table.c.id == self._node_id)
        if self._session.execute(stmt).first() is None:
            raise NodeNotFoundError("Node was deleted", path=self._path)
        return self._node_id

    def open_child(self, name: str, mode: NodeMode) -> SqlAlchemyHandle:
        with _translate_errors(self._session, self._path):
            node_id = self._live_node_id()
            path = self._path
            created = False
            for segment in split_path(name):
                found = _find_child(self._session, node_id, segment)
                if found is not None:
                    node_id, display = found
                    path = (*path, display)
                    continue
                if mode is NodeMode.OPEN_EXISTING:
                    raise NodeNotFoundError(_NOT_FOUND, path=(*path, segment))
                node_id = _insert_node(self._session, node_id, segment)
                path = (*path, segment)
                created = True
            if created:
                self._session.commit()
        return SqlAlchemyHandle(self._session, node_id, path)

    def set_value(self, name: str | None, value_type: ValueType, data: bytes) -> None:
        with _translate_errors(self._session, self._path):
            node_id = self._live_node_id()
            key = _fold(name)
            existing = self._session.execute(
                select(store_value_table.c.id)
                .where(store_value_table.c.node_id == node_id)
                .where(store_value_table.c.name_folded == key)
            ).first()
            if existing is None:
                self._session.execute(
                    insert(store_value_table).values(
                        node_id=node_id,
                        name=name or None,
                        name_folded=key,
                        value_type=int(value_type),
                        data=bytes(data),
                    )
                )
            else:
                self._session.execute(
                    update(store_value_table)
                    .where(store_value_table.c.id == existing.id)
                    .values(value_type=int(value_type), data=bytes(data))
                )
            self._session.commit()

    def delete_value(self, name: str | None) -> None:
        with _translate_errors(self._session, self._path):
            node_id = self._live_node_id()
            result = self._session.execute(
                delete(store_value_table)
                .where(store_value_table.c.node_id == node_id)
                .where(store_value_table.c.name_folded == _fold(name))
            )
            if not result.rowcount:  # pyright: ignore[reportAttributeAccessIssue]
                self._session.rollback()
                raise NodeNotFoundError(_NOT_FOUND, path=self._path)
            self._session.commit()

    def delete_child(self, name: str) -> None:
        with _translate_errors(self._session, self._path):
            node_id = self._live_node_id()
            path = self._path
            for segment in split_path(name):
                found = _find_child(self._session, node_id, segment)
                if found is None:
                    raise NodeNotFoundError(_NOT_FOUND, path=(*path, segment))
                node_id, display = found
                path = (*path, display)
            if node_id == self._node_id:
                raise NodeNotFoundError("No child name given", path=path)
            if self._has_content(node_id):
                raise NodeNotEmptyError("The directory is not empty", path=path)
            self._session.execute(delete(store_node_table).where(store_node_table.c.id == node_id))
            self._session.commit()

    def _has_content(self, node_id: int) -> bool:
        children = self._session.execute(
            select(func.count())
            .select_from(store_node_table)
            .where(store_node_table.c.parent_id == node_id)
        ).scalar_one()
        values = self._session.execute(
            select(func.count())
            .select_from(store_value_table)
            .where(store_value_table.c.node_id == node_id)
        ).scalar_one()
        return bool(children or values)

    def close(self) -> None:
        self._closed = True


def snapshot_node(session: Session, node_id: int) -> StoreSnapshot:
    rows = session.execute(
        select(
            store_value_table.c.name,
            store_value_table.c.value_type,
            store_value_table.c.data,
        ).where(store_value_table.c.node_id == node_id)
    ).all()
    values = {row.name or "": decode_scalar(row.value_type, row.data).native for row in rows}
    children = {
        row.name: snapshot_node(session, row.id)
        for row in session.execute(
            select(store_node_table.c.id, store_node_table.c.name).where(
                store_node_table.c.parent_id == node_id
            )
        ).all()
    }
    return {"values": values, "children": children}
