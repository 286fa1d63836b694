"""Tagged result variants returned across the store boundary."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Why an operation failed."""

    CONNECTIVITY = "connectivity"  # unreachable, timeout, non-2xx, malformed payload
    VALIDATION = "validation"  # rejected locally, no request sent
    NOT_FOUND = "not_found"  # target row absent in the store
    REMOTE = "remote"  # store answered success=false


@dataclass(frozen=True)
class StoreResult(Generic[T]):
    """Either ``ok`` with data or ``fail`` with a message.

    Callers branch on ``success``; transport exceptions never escape the
    client, they arrive here as ``ErrorKind.CONNECTIVITY``.
    """

    success: bool
    data: T | None = None
    message: str = ""
    error_kind: ErrorKind | None = None

    @classmethod
    def ok(cls, data: T | None = None, message: str = "") -> "StoreResult[T]":
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, kind: ErrorKind, message: str) -> "StoreResult[T]":
        return cls(success=False, message=message, error_kind=kind)
