"""Best-effort reverse execution of a batch.

Rollback must be safe over a batch that was applied fully, partially or not
at all, so every "does this exist" question turns into a silent skip. Only
:class:`~dropsymlink.domain.errors.StoreError` is swallowed; anything else
is a bug and propagates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from dropsymlink.domain.errors import StoreError
from dropsymlink.domain.model import NodeMode, SetValue

if TYPE_CHECKING:
    from collections.abc import Sequence

    from dropsymlink.domain.model import Batch, MutationOp, Node
    from dropsymlink.domain.ports import StoreHandle

log = logging.getLogger(__name__)


@dataclass(slots=True)
class _RollbackTally:
    values_removed: int = 0
    nodes_removed: int = 0
    skipped: int = 0


def rollback_batch(batch: Batch) -> None:
    """Undo whatever ``batch`` may have written. Never raises a store error."""

    tally = _RollbackTally()
    _rollback_operations(batch.root, batch.operations, tally)
    log.info(
        "Rolled back batch at %s: values_removed=%s, nodes_removed=%s, skipped=%s",
        "\\".join(batch.root.path),
        tally.values_removed,
        tally.nodes_removed,
        tally.skipped,
    )


def _rollback_operations(
    handle: StoreHandle, operations: Sequence[MutationOp], tally: _RollbackTally
) -> None:
    for operation in reversed(operations):
        if isinstance(operation, SetValue):
            _rollback_value(handle, operation, tally)
        else:
            _rollback_node(handle, operation, tally)


def _rollback_value(handle: StoreHandle, operation: SetValue, tally: _RollbackTally) -> None:
    try:
        handle.delete_value(operation.name)
    except StoreError as exc:
        log.debug("Keeping value %s on %s: %s", operation.label, "\\".join(handle.path), exc)
        tally.skipped += 1
        return
    tally.values_removed += 1


def _rollback_node(handle: StoreHandle, operation: Node, tally: _RollbackTally) -> None:
    try:
        child = handle.open_child(operation.name, NodeMode.OPEN_EXISTING)
    except StoreError as exc:
        log.debug("Skipping subtree %s under %s: %s", operation.name, "\\".join(handle.path), exc)
        tally.skipped += 1
        return

    with child:
        _rollback_operations(child, operation.operations, tally)

    if operation.mode is NodeMode.CREATE:
        _delete_created_node(handle, operation.name, tally)


def _delete_created_node(handle: StoreHandle, name: str, tally: _RollbackTally) -> None:
    # the last segment of the name only
    try:
        handle.delete_child(name)
    except StoreError as exc:
        log.debug("Keeping node %s under %s: %s", name, "\\".join(handle.path), exc)
        tally.skipped += 1
        return
    tally.nodes_removed += 1
