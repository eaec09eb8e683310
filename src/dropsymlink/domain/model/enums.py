"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import IntEnum, StrEnum


class ValueType(IntEnum):
    """Type tags understood by the store, numbered like the registry's."""

    TEXT = 1


class NodeMode(StrEnum):
    CREATE = "create"
    OPEN_EXISTING = "open"
