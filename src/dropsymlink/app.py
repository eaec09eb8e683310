"""Application services: install and uninstall batches against a store."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from dropsymlink.adapters.memory import InMemoryStore
from dropsymlink.config import get_extension_config, get_store_config
from dropsymlink.domain.batch import apply_batch, batch, rollback_batch
from dropsymlink.domain.errors import S_OK, BatchApplyError, StoreError, format_status
from dropsymlink.domain.ports import RootKey, StoreInspector, StoreSession
from dropsymlink.domain.registration import registration_operations

if TYPE_CHECKING:
    from pathlib import Path

    from dropsymlink.config import StoreConfig
    from dropsymlink.domain.model import MutationOp
    from dropsymlink.domain.ports import StoreSnapshot
    from dropsymlink.domain.registration import ShellExtension

type StoreSessionFactory = Callable[[], StoreSession]
type OperationsBuilder = Callable[[], tuple[MutationOp, ...]]

REGISTRATION_ROOT = RootKey.LOCAL_MACHINE

log = logging.getLogger(__name__)


def build_store_session_factory(config: StoreConfig | None = None) -> StoreSessionFactory:
    """Return a factory of store sessions for the configured backend."""

    backend = (config or get_store_config()).backend
    log.debug("Using %s store backend", backend)
    if backend == "memory":
        store = InMemoryStore()
        return lambda: store
    if backend == "sqlite":
        from dropsymlink.adapters.sqlalchemy import (  # noqa: PLC0415
            SqlAlchemyStoreSession,
            is_started,
            startup,
        )

        if not is_started():
            startup()
        return SqlAlchemyStoreSession

    from dropsymlink.adapters.winreg_store import WindowsRegistrySession  # noqa: PLC0415

    return WindowsRegistrySession


def install_batch(
    session_factory: StoreSessionFactory,
    root: RootKey,
    build_operations: OperationsBuilder,
) -> int:
    """Apply freshly built operations; undo them all if anything fails.

    Returns ``S_OK`` or the status of the first failed store operation.
    """

    try:
        with session_factory() as session, session.open_root(root) as root_handle:
            try:
                apply_batch(batch(root_handle, *build_operations()))
            except BatchApplyError as exc:
                log.error(
                    "Install failed with %s, rolling back: %s", format_status(exc.status), exc
                )
                rollback_batch(batch(root_handle, *build_operations()))
                return exc.status
    except StoreError as exc:
        log.error("Cannot open %s: %s", root.value, exc)
        return exc.status
    return S_OK


def uninstall_batch(
    session_factory: StoreSessionFactory,
    root: RootKey,
    build_operations: OperationsBuilder,
) -> int:
    """Roll back freshly built operations. Always reports ``S_OK``."""

    try:
        with session_factory() as session, session.open_root(root) as root_handle:
            rollback_batch(batch(root_handle, *build_operations()))
    except StoreError as exc:
        log.warning("Cannot open %s, nothing removed: %s", root.value, exc)
    return S_OK


def register_server(
    session_factory: StoreSessionFactory,
    extension: ShellExtension | None = None,
) -> int:
    resolved = extension or get_extension_config()
    log.info("Registering %s (%s)", resolved.name, resolved.class_id_text)
    return install_batch(
        session_factory, REGISTRATION_ROOT, lambda: registration_operations(resolved)
    )


def unregister_server(
    session_factory: StoreSessionFactory,
    extension: ShellExtension | None = None,
) -> int:
    resolved = extension or get_extension_config()
    log.info("Unregistering %s (%s)", resolved.name, resolved.class_id_text)
    return uninstall_batch(
        session_factory, REGISTRATION_ROOT, lambda: registration_operations(resolved)
    )


def install(install: bool, command_line: str | None = None) -> int:  # noqa: FBT001
    """Install-options entry point; there are no options to act on."""

    _ = (install, command_line)
    return S_OK


def apply_description(session_factory: StoreSessionFactory, path: Path) -> int:
    """Install the batch described by a JSON batch file."""

    from dropsymlink.adapters.batch_file import (  # noqa: PLC0415
        load_batch_description,
        to_operations,
    )

    description = load_batch_description(path)
    return install_batch(session_factory, description.root, lambda: to_operations(description))


def rollback_description(session_factory: StoreSessionFactory, path: Path) -> int:
    """Remove whatever the batch described by a JSON batch file may have written."""

    from dropsymlink.adapters.batch_file import (  # noqa: PLC0415
        load_batch_description,
        to_operations,
    )

    description = load_batch_description(path)
    return uninstall_batch(session_factory, description.root, lambda: to_operations(description))


def snapshot_store(
    session_factory: StoreSessionFactory, root: RootKey, path: str = ""
) -> StoreSnapshot:
    """Return the nodes and values below ``path`` for backends that can list them."""

    with session_factory() as session:
        if not isinstance(session, StoreInspector):
            raise StoreError(f"{type(session).__name__} cannot list its contents")
        return session.snapshot(root, path)
