"""Public mutation model surface."""

from __future__ import annotations

from dropsymlink.domain.model.enums import NodeMode, ValueType
from dropsymlink.domain.model.operations import (
    PATH_SEPARATOR,
    Batch,
    MutationOp,
    Node,
    SetValue,
    split_path,
)
from dropsymlink.domain.model.values import ScalarValue, TextValue, as_scalar, decode_scalar

__all__ = [
    "PATH_SEPARATOR",
    "Batch",
    "MutationOp",
    "Node",
    "NodeMode",
    "ScalarValue",
    "SetValue",
    "TextValue",
    "ValueType",
    "as_scalar",
    "decode_scalar",
    "split_path",
]
