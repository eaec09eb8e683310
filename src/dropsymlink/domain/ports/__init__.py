"""Domain port definitions for adapters."""

from __future__ import annotations

from .store import RootKey, StoreHandle, StoreInspector, StoreSession, StoreSnapshot

__all__ = [
    "RootKey",
    "StoreHandle",
    "StoreInspector",
    "StoreSession",
    "StoreSnapshot",
]
