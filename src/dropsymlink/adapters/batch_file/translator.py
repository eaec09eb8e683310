"""Translate batch file payloads into mutation operations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from dropsymlink.adapters.batch_file.schema import BatchDescription, ValuePayload
from dropsymlink.domain.model import Node, SetValue, TextValue

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from dropsymlink.adapters.batch_file.schema import OperationPayload
    from dropsymlink.domain.model import MutationOp

log = logging.getLogger(__name__)


class BatchFileError(ValueError):
    """Raised when a batch file cannot be read or does not validate."""


def load_batch_description(path: Path) -> BatchDescription:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise BatchFileError(f"Cannot read batch file {path}: {exc}") from exc
    try:
        description = BatchDescription.model_validate_json(raw)
    except ValidationError as exc:
        raise BatchFileError(f"Invalid batch file {path}:\n{exc}") from exc
    log.debug("Loaded %s top-level operations from %s", len(description.operations), path)
    return description


def to_operations(description: BatchDescription) -> tuple[MutationOp, ...]:
    return _translate(description.operations)


def _translate(payloads: Iterable[OperationPayload]) -> tuple[MutationOp, ...]:
    operations: list[MutationOp] = []
    for payload in payloads:
        if isinstance(payload, ValuePayload):
            operations.append(SetValue(name=payload.name, value=TextValue(payload.data)))
        else:
            operations.append(
                Node(
                    mode=payload.mode,
                    name=payload.name,
                    operations=_translate(payload.operations),
                )
            )
    return tuple(operations)
