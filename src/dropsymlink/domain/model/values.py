"""Scalar values a node can hold, with their native byte encodings."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar

from dropsymlink.domain.model.enums import ValueType

WIDE_ENCODING = "utf-16-le"
WIDE_NUL = "\0"


class ScalarValue(ABC):
    """A value tagged with the store type it is written as."""

    value_type: ClassVar[ValueType]

    @abstractmethod
    def encode(self) -> bytes:
        """Return the bytes the store keeps for this value."""
        ...

    @property
    @abstractmethod
    def native(self) -> object:
        """Return the value in the form native store APIs accept."""
        ...


@dataclass(frozen=True, slots=True)
class TextValue(ScalarValue):
    """Text, stored as a NUL-terminated wide string."""

    text: str

    value_type: ClassVar[ValueType] = ValueType.TEXT

    def encode(self) -> bytes:
        return (self.text + WIDE_NUL).encode(WIDE_ENCODING)

    @property
    def native(self) -> str:
        return self.text

    @classmethod
    def decode(cls, data: bytes) -> TextValue:
        if len(data) % 2:
            data = data[:-1]
        return cls(data.decode(WIDE_ENCODING).rstrip(WIDE_NUL))

    def __str__(self) -> str:
        return self.text


def decode_scalar(value_type: ValueType | int, data: bytes) -> ScalarValue:
    """Rebuild a scalar from its type tag and stored bytes."""

    tag = ValueType(value_type)
    if tag is ValueType.TEXT:
        return TextValue.decode(data)
    raise ValueError(f"Unsupported value type: {value_type}")


def as_scalar(value: ScalarValue | str) -> ScalarValue:
    if isinstance(value, ScalarValue):
        return value
    return TextValue(value)
