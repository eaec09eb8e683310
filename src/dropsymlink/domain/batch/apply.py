"""Forward execution of a batch against the store.

The walk is depth-first in declared order and stops at the first failure.
Nothing is compensated here: callers undo partial work with
:func:`~dropsymlink.domain.batch.rollback.rollback_batch`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from dropsymlink.domain.errors import BatchApplyError, StoreError
from dropsymlink.domain.model import Node, NodeMode, SetValue

if TYPE_CHECKING:
    from collections.abc import Iterable

    from dropsymlink.domain.model import Batch, MutationOp
    from dropsymlink.domain.ports import StoreHandle

log = logging.getLogger(__name__)


@dataclass(slots=True)
class ApplyResult:
    """Summary of what one apply wrote."""

    nodes_created: int = 0
    nodes_opened: int = 0
    values_written: int = 0


def apply_batch(batch: Batch) -> ApplyResult:
    """Apply every operation of ``batch`` or raise :class:`BatchApplyError`."""

    result = ApplyResult()
    _apply_operations(batch.root, batch.operations, result)
    log.info(
        "Applied batch at %s: created=%s, opened=%s, values=%s",
        "\\".join(batch.root.path),
        result.nodes_created,
        result.nodes_opened,
        result.values_written,
    )
    return result


def _apply_operations(
    handle: StoreHandle, operations: Iterable[MutationOp], result: ApplyResult
) -> None:
    for operation in operations:
        if isinstance(operation, SetValue):
            _apply_value(handle, operation, result)
        else:
            _apply_node(handle, operation, result)


def _apply_value(handle: StoreHandle, operation: SetValue, result: ApplyResult) -> None:
    value = operation.value
    log.debug("Setting %s on %s", operation.label, "\\".join(handle.path))
    try:
        handle.set_value(operation.name, value.value_type, value.encode())
    except StoreError as exc:
        raise _failure(exc, (*handle.path, operation.label), "set value") from exc
    result.values_written += 1


def _apply_node(handle: StoreHandle, operation: Node, result: ApplyResult) -> None:
    log.debug("Opening %s (%s) under %s", operation.name, operation.mode, "\\".join(handle.path))
    try:
        child = handle.open_child(operation.name, operation.mode)
    except StoreError as exc:
        raise _failure(exc, (*handle.path, *operation.segments), f"{operation.mode} node") from exc

    if operation.mode is NodeMode.CREATE:
        result.nodes_created += 1
    else:
        result.nodes_opened += 1

    # the child handle is released on every exit path, errors included
    with child:
        _apply_operations(child, operation.operations, result)


def _failure(exc: StoreError, path: tuple[str, ...], operation: str) -> BatchApplyError:
    error = BatchApplyError(exc, path=path, operation=operation)
    log.warning("%s", error)
    return error
