from __future__ import annotations

from dataclasses import FrozenInstanceError

import pytest

from dropsymlink.adapters.memory import InMemoryStore
from dropsymlink.domain.batch import batch, create, default, open_existing, value
from dropsymlink.domain.model import (
    Node,
    NodeMode,
    SetValue,
    TextValue,
    ValueType,
    as_scalar,
    decode_scalar,
    split_path,
)
from dropsymlink.domain.ports import RootKey


def test_text_value_encodes_nul_terminated_wide_string() -> None:
    assert TextValue("ab").encode() == b"a\x00b\x00\x00\x00"
    assert TextValue("").encode() == b"\x00\x00"


def test_text_value_decodes_stored_bytes() -> None:
    decoded = decode_scalar(ValueType.TEXT, "Äpfel\0".encode("utf-16-le"))

    assert decoded == TextValue("Äpfel")
    assert decoded.native == "Äpfel"


def test_decode_scalar_rejects_unknown_type() -> None:
    with pytest.raises(ValueError, match="99"):
        decode_scalar(99, b"")


def test_as_scalar_wraps_strings_only() -> None:
    existing = TextValue("x")

    assert as_scalar("x") == existing
    assert as_scalar(existing) is existing


def test_empty_value_name_targets_default_slot() -> None:
    operation = SetValue(name="", value=TextValue("x"))

    assert operation.name is None
    assert operation.label == "(default)"
    assert SetValue(name="Mode", value=TextValue("x")).label == "Mode"


def test_split_path_drops_empty_segments() -> None:
    assert split_path("SOFTWARE\\Classes\\CLSID") == ("SOFTWARE", "Classes", "CLSID")
    assert split_path("\\A\\\\B\\") == ("A", "B")
    assert split_path("") == ()


def test_builder_produces_plain_model_values() -> None:
    node = create("Example", default("x"), open_existing("Child", value("Mode", "on")))

    assert node == Node(
        mode=NodeMode.CREATE,
        name="Example",
        operations=(
            SetValue(name=None, value=TextValue("x")),
            Node(
                mode=NodeMode.OPEN_EXISTING,
                name="Child",
                operations=(SetValue(name="Mode", value=TextValue("on")),),
            ),
        ),
    )


def test_batches_are_immutable() -> None:
    store = InMemoryStore()
    with store.open_root(RootKey.LOCAL_MACHINE) as root:
        built = batch(root, create("Example"))

        with pytest.raises(FrozenInstanceError):
            built.operations = ()  # type: ignore[misc]

    assert isinstance(built.operations, tuple)
    assert built.operations[0] == create("Example")
