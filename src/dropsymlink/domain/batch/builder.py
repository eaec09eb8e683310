"""Nested constructors for batches.

Reads like the tree it builds::

    batch(
        root,
        create(
            r"SOFTWARE\\Example",
            default("Example"),
            create("Child", value("Mode", "on")),
        ),
        open_existing(r"SOFTWARE\\Shared", value("Example", "1")),
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from dropsymlink.domain.model import Batch, Node, NodeMode, SetValue, as_scalar

if TYPE_CHECKING:
    from dropsymlink.domain.model import MutationOp, ScalarValue
    from dropsymlink.domain.ports import StoreHandle


def batch(root: StoreHandle, *operations: MutationOp) -> Batch:
    return Batch(root=root, operations=operations)


def create(name: str, *operations: MutationOp) -> Node:
    return Node(mode=NodeMode.CREATE, name=name, operations=operations)


def open_existing(name: str, *operations: MutationOp) -> Node:
    return Node(mode=NodeMode.OPEN_EXISTING, name=name, operations=operations)


def default(data: ScalarValue | str) -> SetValue:
    return SetValue(name=None, value=as_scalar(data))


def value(name: str, data: ScalarValue | str) -> SetValue:
    return SetValue(name=name, value=as_scalar(data))
