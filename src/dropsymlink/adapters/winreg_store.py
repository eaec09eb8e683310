"""Windows registry backend through the standard ``winreg`` module."""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Literal

from dropsymlink.domain.errors import (
    ERROR_ACCESS_DENIED,
    ERROR_DIR_NOT_EMPTY,
    ERROR_FILE_NOT_FOUND,
    InvalidHandleError,
    NodeNotEmptyError,
    NodeNotFoundError,
    StoreError,
    StorePermissionError,
    status_from_winerror,
)
from dropsymlink.domain.model import NodeMode, ValueType, decode_scalar, split_path
from dropsymlink.domain.ports import RootKey, StoreHandle, StoreSnapshot

if sys.platform == "win32":
    import winreg
else:
    winreg = None

if TYPE_CHECKING:
    from collections.abc import Iterator
    from types import TracebackType

log = logging.getLogger(__name__)


def _require_winreg() -> Any:
    if winreg is None:
        raise StoreError("The Windows registry backend is only available on Windows")
    return winreg


def _translate(exc: OSError, path: tuple[str, ...]) -> StoreError:
    code = getattr(exc, "winerror", None) or 0
    message = exc.strerror or str(exc)
    if code == ERROR_FILE_NOT_FOUND:
        return NodeNotFoundError(message, path=path)
    if code == ERROR_ACCESS_DENIED:
        return StorePermissionError(message, path=path)
    if code == ERROR_DIR_NOT_EMPTY:
        return NodeNotEmptyError(message, path=path)
    return StoreError(message, path=path, status=status_from_winerror(code) if code else None)


@contextmanager
def _registry_call(path: tuple[str, ...]) -> Iterator[None]:
    try:
        yield
    except OSError as exc:
        raise _translate(exc, path) from exc


class WindowsRegistryHandle(StoreHandle):
    def __init__(self, key: Any, path: tuple[str, ...], *, owned: bool = True) -> None:
        self._key = key
        self._path = path
        self._owned = owned
        self._closed = False

    @property
    def path(self) -> tuple[str, ...]:
        return self._path

    def _live_key(self) -> Any:
        if self._closed:
            raise InvalidHandleError("Handle is closed", path=self._path)
        return self._key

    def open_child(self, name: str, mode: NodeMode) -> StoreHandle:
        api = _require_winreg()
        key = self._live_key()
        path = (*self._path, *split_path(name))
        with _registry_call(path):
            if mode is NodeMode.CREATE:
                child = api.CreateKeyEx(key, name, 0, api.KEY_WRITE | api.KEY_READ)
            else:
                child = api.OpenKey(key, name, 0, api.KEY_ALL_ACCESS)
        return WindowsRegistryHandle(child, path)

    def set_value(self, name: str | None, value_type: ValueType, data: bytes) -> None:
        api = _require_winreg()
        key = self._live_key()
        scalar = decode_scalar(value_type, data)
        with _registry_call(self._path):
            api.SetValueEx(key, name, 0, int(value_type), scalar.native)

    def delete_value(self, name: str | None) -> None:
        api = _require_winreg()
        key = self._live_key()
        with _registry_call(self._path):
            api.DeleteValue(key, name)

    def delete_child(self, name: str) -> None:
        api = _require_winreg()
        key = self._live_key()
        path = (*self._path, *split_path(name))
        with _registry_call(path):
            with api.OpenKey(key, name, 0, api.KEY_READ) as child:
                subkeys, values, _ = api.QueryInfoKey(child)
            if subkeys or values:
                raise NodeNotEmptyError("The directory is not empty", path=path)
            api.DeleteKey(key, name)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._owned:
            _require_winreg().CloseKey(self._key)


def _snapshot(api: Any, key: Any) -> StoreSnapshot:
    subkey_count, value_count, _ = api.QueryInfoKey(key)
    values: dict[str, object] = {}
    for index in range(value_count):
        name, data, value_type = api.EnumValue(key, index)
        if value_type == ValueType.TEXT:
            values[name] = data
    children: dict[str, object] = {}
    for index in range(subkey_count):
        child_name = api.EnumKey(key, index)
        with api.OpenKey(key, child_name, 0, api.KEY_READ) as child:
            children[child_name] = _snapshot(api, child)
    return {"values": values, "children": children}


class WindowsRegistrySession:
    """Store session over the local machine's registry."""

    def __enter__(self) -> WindowsRegistrySession:
        _require_winreg()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        return False

    def open_root(self, root: RootKey) -> StoreHandle:
        api = _require_winreg()
        # predefined keys are never closed
        return WindowsRegistryHandle(getattr(api, root.value), (root.value,), owned=False)

    def snapshot(self, root: RootKey, path: str = "") -> StoreSnapshot:
        api = _require_winreg()
        log.debug("Enumerating %s\\%s", root.value, path)
        with _registry_call((root.value, *split_path(path))):
            with api.OpenKey(getattr(api, root.value), path, 0, api.KEY_READ) as key:
                return _snapshot(api, key)
