"""In-memory store backend.

Behaves like the registry where the engines can tell: names are
case-insensitive but keep their first spelling, the empty value name is the
default slot, and a node with children or values cannot be deleted. It also
records every mutation in :attr:`InMemoryStore.journal` and can refuse
writes below chosen paths, which is what the tests lean on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from dropsymlink.domain.errors import (
    InvalidHandleError,
    NodeNotEmptyError,
    NodeNotFoundError,
    StorePermissionError,
)
from dropsymlink.domain.model import NodeMode, ValueType, decode_scalar, split_path
from dropsymlink.domain.ports import RootKey, StoreHandle, StoreSnapshot

if TYPE_CHECKING:
    from types import TracebackType

log = logging.getLogger(__name__)

_NOT_FOUND = "The system cannot find the file specified"

type JournalAction = Literal["create_node", "set_value", "delete_value", "delete_node"]


@dataclass(frozen=True, slots=True)
class JournalEntry:
    action: JournalAction
    path: str
    name: str | None = None


@dataclass(eq=False, slots=True)
class _MemoryNode:
    name: str
    children: dict[str, _MemoryNode] = field(default_factory=dict[str, "_MemoryNode"])
    values: dict[str, tuple[str | None, ValueType, bytes]] = field(
        default_factory=dict[str, tuple[str | None, ValueType, bytes]]
    )
    deleted: bool = False

    def is_empty(self) -> bool:
        return not self.children and not self.values


def _fold(name: str | None) -> str:
    return (name or "").casefold()


class InMemoryStore:
    """A process-local store; also its own :class:`StoreSession`."""

    def __init__(self) -> None:
        self._roots: dict[RootKey, _MemoryNode] = {}
        self._denied: set[tuple[str, ...]] = set()
        self.journal: list[JournalEntry] = []
        self.open_handles = 0

    def __enter__(self) -> InMemoryStore:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        return False

    def open_root(self, root: RootKey) -> StoreHandle:
        node = self._roots.setdefault(root, _MemoryNode(name=root.value))
        return MemoryHandle(self, node, (root.value,))

    def deny(self, path: str) -> None:
        """Refuse any mutation at ``path`` or below it."""

        log.debug("Denying writes at and below %s", path)
        self._denied.add(tuple(_fold(segment) for segment in split_path(path)))

    def ensure_node(self, root: RootKey, path: str) -> None:
        """Create ``path`` below ``root`` without journaling it."""

        node = self._roots.setdefault(root, _MemoryNode(name=root.value))
        for segment in split_path(path):
            node = node.children.setdefault(_fold(segment), _MemoryNode(name=segment))

    def mutations(self, action: JournalAction | None = None) -> list[JournalEntry]:
        if action is None:
            return list(self.journal)
        return [entry for entry in self.journal if entry.action == action]

    def is_empty(self) -> bool:
        return all(node.is_empty() for node in self._roots.values())

    def snapshot(self, root: RootKey, path: str = "") -> StoreSnapshot:
        node = self._roots.get(root)
        segments = split_path(path)
        if node is None:
            if segments:
                raise NodeNotFoundError(_NOT_FOUND, path=(root.value, *segments))
            return {"values": {}, "children": {}}
        for segment in segments:
            child = node.children.get(_fold(segment))
            if child is None:
                raise NodeNotFoundError(_NOT_FOUND, path=(root.value, *segments))
            node = child
        return _snapshot(node)

    def check_writable(self, path: tuple[str, ...]) -> None:
        folded = tuple(_fold(segment) for segment in path)
        for denied in self._denied:
            if folded[: len(denied)] == denied:
                raise StorePermissionError("Access is denied", path=path)

    def record(self, action: JournalAction, path: tuple[str, ...], name: str | None = None) -> None:
        self.journal.append(JournalEntry(action=action, path="\\".join(path), name=name))


def _snapshot(node: _MemoryNode) -> StoreSnapshot:
    values = {
        display or "": decode_scalar(value_type, data).native
        for display, value_type, data in node.values.values()
    }
    children = {child.name: _snapshot(child) for child in node.children.values()}
    return {"values": values, "children": children}


class MemoryHandle(StoreHandle):
    def __init__(self, store: InMemoryStore, node: _MemoryNode, path: tuple[str, ...]) -> None:
        self._store = store
        self._node = node
        self._path = path
        self._closed = False
        store.open_handles += 1

    @property
    def path(self) -> tuple[str, ...]:
        return self._path

    def _live_node(self) -> _MemoryNode:
        if self._closed:
            raise InvalidHandleError("Handle is closed", path=self._path)
        if self._node.deleted:
            raise NodeNotFoundError("Node was deleted", path=self._path)
        return self._node

    def open_child(self, name: str, mode: NodeMode) -> StoreHandle:
        node = self._live_node()
        segments = split_path(name)
        path = self._path
        missing_from: int | None = None
        for index, segment in enumerate(segments):
            child = node.children.get(_fold(segment))
            if child is None:
                missing_from = index
                break
            node = child
            path = (*path, child.name)

        if missing_from is not None:
            target = (*path, *segments[missing_from:])
            if mode is NodeMode.OPEN_EXISTING:
                raise NodeNotFoundError(_NOT_FOUND, path=target)
            # check the whole path first so a refusal creates nothing
            self._store.check_writable(target)
            for segment in segments[missing_from:]:
                child = _MemoryNode(name=segment)
                node.children[_fold(segment)] = child
                node = child
                path = (*path, segment)
                self._store.record("create_node", path)
        elif mode is NodeMode.CREATE:
            self._store.check_writable(path)
        return MemoryHandle(self._store, node, path)

    def set_value(self, name: str | None, value_type: ValueType, data: bytes) -> None:
        node = self._live_node()
        self._store.check_writable(self._path)
        key = _fold(name)
        existing = node.values.get(key)
        display = existing[0] if existing is not None else (name or None)
        node.values[key] = (display, ValueType(value_type), bytes(data))
        self._store.record("set_value", self._path, name)

    def delete_value(self, name: str | None) -> None:
        node = self._live_node()
        key = _fold(name)
        if key not in node.values:
            raise NodeNotFoundError(_NOT_FOUND, path=self._path)
        self._store.check_writable(self._path)
        del node.values[key]
        self._store.record("delete_value", self._path, name)

    def delete_child(self, name: str) -> None:
        node = self._live_node()
        segments = split_path(name)
        parent, path = node, self._path
        for segment in segments[:-1]:
            child = parent.children.get(_fold(segment))
            if child is None:
                raise NodeNotFoundError(_NOT_FOUND, path=path)
            parent, path = child, (*path, child.name)
        target = parent.children.get(_fold(segments[-1])) if segments else None
        if target is None:
            raise NodeNotFoundError(
                _NOT_FOUND, path=(*path, *segments[-1:])
            )
        path = (*path, target.name)
        if not target.is_empty():
            raise NodeNotEmptyError("The directory is not empty", path=path)
        self._store.check_writable(path)
        del parent.children[_fold(segments[-1])]
        target.deleted = True
        self._store.record("delete_node", path)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._store.open_handles -= 1
