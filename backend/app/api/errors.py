from __future__ import annotations

from fastapi import HTTPException, status

from app.core.logging import get_logger
from app.scheduling import (
    ConflictError,
    ConflictKind,
    ForbiddenError,
    NotFoundError,
    SchedulingError,
    StorageError,
)

logger = get_logger(__name__)

# Conflicts that describe a bad request rather than a clash with existing data.
BAD_REQUEST_CONFLICTS = frozenset(
    {
        ConflictKind.INVALID_TRANSITION,
        ConflictKind.PROVIDER_NOT_AVAILABLE,
        ConflictKind.TIME_OUTSIDE_AVAILABILITY,
    }
)


def status_for(exc: SchedulingError) -> int:
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, ForbiddenError):
        return status.HTTP_403_FORBIDDEN
    if isinstance(exc, ConflictError):
        if exc.conflict in BAD_REQUEST_CONFLICTS:
            return status.HTTP_400_BAD_REQUEST
        return status.HTTP_409_CONFLICT
    return status.HTTP_400_BAD_REQUEST


def scheduling_http_error(exc: SchedulingError) -> HTTPException:
    detail = {"message": exc.message, "code": exc.code, "kind": exc.kind}
    if exc.payload:
        detail.update(exc.payload)
    return HTTPException(status_code=status_for(exc), detail=detail)


def storage_http_error(exc: StorageError) -> HTTPException:
    logger.error("storage.unavailable", operation=exc.operation)
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail={"message": "Storage is temporarily unavailable", "code": "STORAGE_ERROR"},
    )
