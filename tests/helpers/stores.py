"""Reusable store fakes and snapshot helpers for engine tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, cast

from dropsymlink.domain.errors import StoreError
from dropsymlink.domain.model import NodeMode
from dropsymlink.domain.ports import RootKey, StoreHandle
from dropsymlink.domain.registration import (
    APPROVED_EXTENSIONS_PATH,
    CLASSES_CLSID_PATH,
    DRAG_DROP_HANDLERS_PATH,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from dropsymlink.domain.model import ValueType
    from dropsymlink.domain.ports import StoreSession, StoreSnapshot

# keys a Windows install already has before the extension is registered
SHELL_PATHS = (CLASSES_CLSID_PATH, DRAG_DROP_HANDLERS_PATH, APPROVED_EXTENSIONS_PATH)


def create_nodes(session_factory: Callable[[], StoreSession], *paths: str) -> None:
    """Create ``paths`` below the local machine key through regular handles."""

    with session_factory() as session, session.open_root(RootKey.LOCAL_MACHINE) as root:
        for path in paths:
            root.open_child(path, NodeMode.CREATE).close()


def node_at(snapshot: StoreSnapshot, *names: str) -> StoreSnapshot:
    """Walk ``names`` down the children of a snapshot."""

    node = snapshot
    for name in names:
        children = cast(dict[str, "StoreSnapshot"], node["children"])
        node = children[name]
    return node


def values_of(snapshot: StoreSnapshot, *names: str) -> dict[str, object]:
    return cast(dict[str, object], node_at(snapshot, *names)["values"])


def children_of(snapshot: StoreSnapshot, *names: str) -> list[str]:
    return list(cast(dict[str, object], node_at(snapshot, *names)["children"]))


@dataclass
class ExplodingHandle(StoreHandle):
    """Handle whose every call raises something that is not a store error."""

    calls: list[str] = field(default_factory=list[str])

    @property
    def path(self) -> tuple[str, ...]:
        return ("EXPLODING",)

    def open_child(self, name: str, mode: NodeMode) -> StoreHandle:
        self.calls.append(f"open {name}")
        raise KeyError(name)

    def set_value(self, name: str | None, value_type: ValueType, data: bytes) -> None:
        self.calls.append(f"set {name}")
        raise KeyError(name)

    def delete_value(self, name: str | None) -> None:
        self.calls.append(f"delete value {name}")
        raise KeyError(name)

    def delete_child(self, name: str) -> None:
        self.calls.append(f"delete node {name}")
        raise KeyError(name)

    def close(self) -> None:
        self.calls.append("close")


class FailingRootHandle(StoreHandle):
    """Root handle that fails every call with a generic store error."""

    @property
    def path(self) -> tuple[str, ...]:
        return ("FAILING",)

    def open_child(self, name: str, mode: NodeMode) -> StoreHandle:
        raise StoreError("unavailable", path=(*self.path, name))

    def set_value(self, name: str | None, value_type: ValueType, data: bytes) -> None:
        raise StoreError("unavailable", path=self.path)

    def delete_value(self, name: str | None) -> None:
        raise StoreError("unavailable", path=self.path)

    def delete_child(self, name: str) -> None:
        raise StoreError("unavailable", path=self.path)

    def close(self) -> None:
        return None
