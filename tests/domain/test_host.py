from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING
from uuid import uuid4

import pytest

from dropsymlink import host as host_module
from dropsymlink.config import EXTENSION_CLASS_ID, get_extension_config
from dropsymlink.config.extension import DEFAULT_SERVER_PATH
from dropsymlink.domain.errors import (
    CLASS_E_CLASSNOTAVAILABLE,
    CLASS_E_NOAGGREGATION,
    S_FALSE,
    S_OK,
)
from dropsymlink.domain.linking import SymlinkDropHandler
from dropsymlink.host import (
    HostContext,
    dll_install,
    dll_register_server,
    dll_unregister_server,
    get_class_object,
)

if TYPE_CHECKING:
    from dropsymlink.adapters.memory import InMemoryStore


def test_foreign_class_ids_are_refused() -> None:
    context = HostContext()

    status, factory = get_class_object(context, uuid4())

    assert status == CLASS_E_CLASSNOTAVAILABLE
    assert factory is None
    assert context.can_unload_now() == S_OK


def test_factory_keeps_host_loaded_until_released() -> None:
    context = HostContext()

    status, factory = get_class_object(context, EXTENSION_CLASS_ID)

    assert status == S_OK
    assert factory is not None
    assert context.live_objects == 1
    assert context.can_unload_now() == S_FALSE

    factory.release()
    factory.release()

    assert context.live_objects == 0
    assert context.can_unload_now() == S_OK


def test_factory_creates_handlers_but_refuses_aggregation() -> None:
    context = HostContext()
    _, factory = get_class_object(context, EXTENSION_CLASS_ID)
    assert factory is not None

    with factory:
        status, handler = factory.create_instance()
        assert status == S_OK
        assert isinstance(handler, SymlinkDropHandler)
        assert factory.create_instance(outer=object()) == (CLASS_E_NOAGGREGATION, None)
        assert factory.lock_server(True) == S_OK  # noqa: FBT003

    assert context.can_unload_now() == S_OK


def test_context_release_underflow_is_an_error() -> None:
    with pytest.raises(RuntimeError, match="released more often"):
        HostContext().release()


def test_dll_entry_points_use_given_store(seeded_store: InMemoryStore) -> None:
    assert dll_register_server(lambda: seeded_store) == S_OK
    assert seeded_store.mutations("set_value")

    assert dll_unregister_server(lambda: seeded_store) == S_OK
    assert seeded_store.mutations("delete_node")
    assert dll_install(True, "ignored") == S_OK  # noqa: FBT003


def test_registered_server_path_is_this_module(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DROPSYMLINK_SERVER_PATH", raising=False)

    assert Path(host_module.__file__).resolve() == DEFAULT_SERVER_PATH
    assert get_extension_config().server_path == DEFAULT_SERVER_PATH
