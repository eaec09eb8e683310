"""Port for the hierarchical configuration store the engines mutate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import StrEnum
from typing import TYPE_CHECKING, Literal, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from dropsymlink.domain.model import NodeMode, ValueType


class RootKey(StrEnum):
    LOCAL_MACHINE = "HKEY_LOCAL_MACHINE"
    CURRENT_USER = "HKEY_CURRENT_USER"
    CLASSES_ROOT = "HKEY_CLASSES_ROOT"
    USERS = "HKEY_USERS"


class StoreHandle(ABC):
    """An open node of the store.

    Handles are short lived: whoever opens one closes it, normally with a
    ``with`` block. Failures are reported as
    :class:`~dropsymlink.domain.errors.StoreError` subclasses.
    """

    @property
    @abstractmethod
    def path(self) -> tuple[str, ...]:
        """Segments from the root key down to this node."""
        ...

    @abstractmethod
    def open_child(self, name: str, mode: NodeMode) -> StoreHandle:
        """Open (or with ``NodeMode.CREATE`` create) the child ``name``."""
        ...

    @abstractmethod
    def set_value(self, name: str | None, value_type: ValueType, data: bytes) -> None: ...

    @abstractmethod
    def delete_value(self, name: str | None) -> None: ...

    @abstractmethod
    def delete_child(self, name: str) -> None:
        """Delete the last segment of ``name`` if it holds nothing."""
        ...

    @abstractmethod
    def close(self) -> None: ...

    def __enter__(self) -> StoreHandle:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        self.close()
        return False


@runtime_checkable
class StoreSession(Protocol):
    """Scoped access to a store backend."""

    def __enter__(self) -> StoreSession: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def open_root(self, root: RootKey) -> StoreHandle: ...


type StoreSnapshot = dict[str, object]


@runtime_checkable
class StoreInspector(Protocol):
    """Read-only view used for diagnostics and tests."""

    def snapshot(self, root: RootKey, path: str = "") -> StoreSnapshot:
        """Return ``{"values": {...}, "children": {...}}`` for the node at ``path``.

        Raises :class:`~dropsymlink.domain.errors.NodeNotFoundError` when the
        node does not exist.
        """
        ...
