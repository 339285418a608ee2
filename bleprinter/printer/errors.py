"""Result values and error taxonomy for the printer client."""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Failure categories surfaced to callers."""
    TRANSPORT_UNAVAILABLE = "transport_unavailable"
    NO_DEVICE_SELECTED = "no_device_selected"
    LINK_OPEN_FAILED = "link_open_failed"
    NO_WRITABLE_ENDPOINT = "no_writable_endpoint"
    CHUNK_WRITE_FAILED = "chunk_write_failed"
    NOT_CONNECTED = "not_connected"


class LinkError(ConnectionError):
    """Raised by a printer link when a BLE operation fails."""


@dataclass(frozen=True)
class PrinterError:
    """A failed operation.

    ``index`` and ``total`` are only set for CHUNK_WRITE_FAILED.
    """
    kind: ErrorKind
    message: str
    index: Optional[int] = None
    total: Optional[int] = None

    def __str__(self):
        return self.message


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a public printer operation: either a value or an error."""
    value: Optional[T] = None
    error: Optional[PrinterError] = None

    @classmethod
    def ok(cls, value: Any = None) -> "Result":
        return cls(value=value)

    @classmethod
    def fail(cls, kind: ErrorKind, message: str, **details) -> "Result":
        return cls(error=PrinterError(kind, message, **details))

    @property
    def success(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        """Convert to the ``{"success": ..., "error": ...}`` shape used by the API."""
        if self.success:
            return {"success": True}
        data = {
            "success": False,
            "error": self.error.message,
            "error_kind": self.error.kind.value,
        }
        if self.error.kind is ErrorKind.CHUNK_WRITE_FAILED:
            data["chunk"] = {"index": self.error.index, "total": self.error.total}
        return data
