"""Batch engines: apply forward, roll back in reverse."""

from __future__ import annotations

from .apply import ApplyResult, apply_batch
from .builder import batch, create, default, open_existing, value
from .rollback import rollback_batch

__all__ = [
    "ApplyResult",
    "apply_batch",
    "batch",
    "create",
    "default",
    "open_existing",
    "rollback_batch",
    "value",
]
