"""Entry points the host loader calls, plus the object counting they need.

The loader sees four functions (register, unregister, class object,
install options). Live objects handed out through the class object are
counted on an explicit :class:`HostContext` instead of process globals.

The host loader imports this module by file path: registration writes
``config.extension.DEFAULT_SERVER_PATH``, which points here, as the
server location.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal

from dropsymlink.app import (
    build_store_session_factory,
    install,
    register_server,
    unregister_server,
)
from dropsymlink.config import get_extension_config
from dropsymlink.domain.errors import (
    CLASS_E_CLASSNOTAVAILABLE,
    CLASS_E_NOAGGREGATION,
    S_FALSE,
    S_OK,
)
from dropsymlink.domain.linking import SymlinkDropHandler

if TYPE_CHECKING:
    from types import TracebackType
    from uuid import UUID

    from dropsymlink.app import StoreSessionFactory
    from dropsymlink.domain.registration import ShellExtension

log = logging.getLogger(__name__)


class HostContext:
    """Counts the objects currently handed out to the host."""

    def __init__(self) -> None:
        self._live_objects = 0

    @property
    def live_objects(self) -> int:
        return self._live_objects

    def acquire(self) -> None:
        self._live_objects += 1

    def release(self) -> None:
        if self._live_objects == 0:
            raise RuntimeError("HostContext released more often than acquired")
        self._live_objects -= 1

    def can_unload_now(self) -> int:
        return S_OK if self._live_objects == 0 else S_FALSE


class LinkHandlerFactory:
    """Creates drop handlers; holds a reference on its context until released."""

    def __init__(self, context: HostContext) -> None:
        self._context = context
        self._released = False
        context.acquire()

    def create_instance(self, outer: object | None = None) -> tuple[int, SymlinkDropHandler | None]:
        if outer is not None:
            return CLASS_E_NOAGGREGATION, None
        return S_OK, SymlinkDropHandler()

    def lock_server(self, lock: bool) -> int:  # noqa: FBT001
        _ = lock
        return S_OK

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        self._context.release()

    def __enter__(self) -> LinkHandlerFactory:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        self.release()
        return False


def get_class_object(
    context: HostContext,
    class_id: UUID,
    extension: ShellExtension | None = None,
) -> tuple[int, LinkHandlerFactory | None]:
    resolved = extension or get_extension_config()
    if class_id != resolved.class_id:
        log.debug("Refusing class object for unknown class %s", class_id)
        return CLASS_E_CLASSNOTAVAILABLE, None
    return S_OK, LinkHandlerFactory(context)


def dll_register_server(session_factory: StoreSessionFactory | None = None) -> int:
    return register_server(session_factory or build_store_session_factory())


def dll_unregister_server(session_factory: StoreSessionFactory | None = None) -> int:
    return unregister_server(session_factory or build_store_session_factory())


def dll_install(install_flag: bool, command_line: str | None = None) -> int:  # noqa: FBT001
    return install(install_flag, command_line)
