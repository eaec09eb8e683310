"""Store failure taxonomy with HRESULT-style status codes."""

from __future__ import annotations

from typing import ClassVar, Final

S_OK: Final[int] = 0x00000000
S_FALSE: Final[int] = 0x00000001
E_FAIL: Final[int] = 0x80004005
E_ABORT: Final[int] = 0x80004004
E_UNEXPECTED: Final[int] = 0x8000FFFF
E_INVALIDARG: Final[int] = 0x80070057
CLASS_E_NOAGGREGATION: Final[int] = 0x80040110
CLASS_E_CLASSNOTAVAILABLE: Final[int] = 0x80040111

ERROR_FILE_NOT_FOUND: Final[int] = 2
ERROR_ACCESS_DENIED: Final[int] = 5
ERROR_INVALID_HANDLE: Final[int] = 6
ERROR_DIR_NOT_EMPTY: Final[int] = 145


def status_from_winerror(code: int) -> int:
    """Return the ``0x8007xxxx`` status wrapping a Win32 error code."""

    if code <= 0:
        return code & 0xFFFFFFFF
    return 0x80070000 | (code & 0xFFFF)


def format_status(status: int) -> str:
    return f"0x{status & 0xFFFFFFFF:08X}"


class StoreError(RuntimeError):
    """Raised when the configuration store rejects an operation."""

    default_status: ClassVar[int] = E_FAIL

    def __init__(
        self,
        message: str,
        *,
        path: tuple[str, ...] = (),
        status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.status = self.default_status if status is None else status


class NodeNotFoundError(StoreError):
    """Raised when a node or value that must exist is absent."""

    default_status = status_from_winerror(ERROR_FILE_NOT_FOUND)


class StorePermissionError(StoreError):
    """Raised when the caller lacks the rights for an operation."""

    default_status = status_from_winerror(ERROR_ACCESS_DENIED)


class NodeNotEmptyError(StoreError):
    """Raised when a node still holds children or values and cannot be deleted."""

    default_status = status_from_winerror(ERROR_DIR_NOT_EMPTY)


class InvalidHandleError(StoreError):
    """Raised when a closed handle is used."""

    default_status = status_from_winerror(ERROR_INVALID_HANDLE)


class BatchApplyError(RuntimeError):
    """Raised by the apply engine for the first store failure it meets.

    Whatever was written before the failure stays in the store; callers undo
    it with a rollback of the same batch.
    """

    def __init__(self, cause: StoreError, *, path: tuple[str, ...], operation: str) -> None:
        location = "\\".join(path) or "<root>"
        super().__init__(f"{operation} failed at {location}: {cause}")
        self.cause = cause
        self.path = path
        self.operation = operation

    @property
    def status(self) -> int:
        return self.cause.status
