"""Shared API utilities."""

from typing import TypeVar

from fastapi import HTTPException, status

from scribe.services.results import ServiceError, ServiceResult

T = TypeVar("T")

DEFAULT_STATUS: dict[ServiceError, int] = {
    ServiceError.CONFLICT: status.HTTP_409_CONFLICT,
    ServiceError.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ServiceError.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    ServiceError.NOT_VERIFIED: status.HTTP_401_UNAUTHORIZED,
    ServiceError.INVALID_OR_EXPIRED: status.HTTP_400_BAD_REQUEST,
    ServiceError.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ServiceError.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def unwrap(result: ServiceResult[T], overrides: dict[ServiceError, int] | None = None) -> T:
    """Return the data of a successful result or raise the matching HTTPException.

    Args:
        result: Service result to inspect
        overrides: Per-endpoint status codes that replace the defaults

    Raises:
        HTTPException: when ``result`` is a failure
    """
    if result.success:
        return result.data  # type: ignore[return-value]

    error = result.error or ServiceError.INTERNAL
    status_code = (overrides or {}).get(error, DEFAULT_STATUS[error])
    raise HTTPException(status_code=status_code, detail=result.message)
