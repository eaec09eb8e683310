"""Immutable tree of store mutations.

A batch is plain data: it is built once, never mutated, and can be walked
any number of times. Apply walks it forward, rollback walks it backward.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from dropsymlink.domain.model.enums import NodeMode

if TYPE_CHECKING:
    from dropsymlink.domain.model.values import ScalarValue
    from dropsymlink.domain.ports.store import StoreHandle

PATH_SEPARATOR = "\\"


def split_path(name: str) -> tuple[str, ...]:
    """Split a backslash separated node name into its segments."""

    return tuple(segment for segment in name.split(PATH_SEPARATOR) if segment)


@dataclass(frozen=True, slots=True)
class SetValue:
    """Write ``value`` under ``name``; ``None`` targets the default slot."""

    name: str | None
    value: ScalarValue

    def __post_init__(self) -> None:
        # the store addresses the default value by the empty name
        if self.name == "":
            object.__setattr__(self, "name", None)

    @property
    def label(self) -> str:
        return "(default)" if self.name is None else self.name


@dataclass(frozen=True, slots=True)
class Node:
    """Open or create the child ``name`` and run ``operations`` against it."""

    mode: NodeMode
    name: str
    operations: tuple[MutationOp, ...] = ()

    @property
    def segments(self) -> tuple[str, ...]:
        return split_path(self.name)


type MutationOp = SetValue | Node


@dataclass(frozen=True, slots=True)
class Batch:
    """A root handle plus the ordered top-level operations to run against it."""

    root: StoreHandle
    operations: tuple[MutationOp, ...] = ()
