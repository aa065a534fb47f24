"""Typed results returned across the service boundary."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ServiceError(str, Enum):
    """Failure categories a service can report."""

    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    INVALID_CREDENTIALS = "invalid_credentials"
    NOT_VERIFIED = "not_verified"
    INVALID_OR_EXPIRED = "invalid_or_expired"
    INVALID_INPUT = "invalid_input"
    INTERNAL = "internal"


@dataclass
class ServiceResult(Generic[T]):
    """Outcome of a service call.

    Exactly one of ``data`` (on success) or ``error`` (on failure) is set.
    ``message`` is safe to show to the caller.
    """

    success: bool
    data: T | None = None
    error: ServiceError | None = None
    message: str = ""

    @classmethod
    def ok(cls, data: T, message: str = "") -> "ServiceResult[T]":
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, error: ServiceError, message: str) -> "ServiceResult[T]":
        return cls(success=False, error=error, message=message)
