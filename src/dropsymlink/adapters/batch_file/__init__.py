"""Declarative batch files (JSON) for ad-hoc store changes."""

from __future__ import annotations

from .schema import BatchDescription, NodePayload, ValuePayload
from .translator import BatchFileError, load_batch_description, to_operations

__all__ = [
    "BatchDescription",
    "BatchFileError",
    "NodePayload",
    "ValuePayload",
    "load_batch_description",
    "to_operations",
]
