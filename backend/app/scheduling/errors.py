from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class SchedulingError(Exception):
    """Base class for every rejection the scheduling core can produce."""

    kind = "SCHEDULING_ERROR"

    def __init__(
        self,
        code: str,
        *,
        message: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message or code)
        self.code = code
        self.message = message or code
        self.payload = payload or {}


class ValidationError(SchedulingError):
    kind = "VALIDATION_ERROR"


class NotFoundError(SchedulingError):
    kind = "NOT_FOUND"


class ForbiddenError(SchedulingError):
    kind = "FORBIDDEN"


class ConflictKind(str, Enum):
    DUPLICATE_APPOINTMENT = "DUPLICATE_APPOINTMENT"
    SLOT_OVERLAP = "SLOT_OVERLAP"
    PROVIDER_NOT_AVAILABLE = "PROVIDER_NOT_AVAILABLE"
    TIME_OUTSIDE_AVAILABILITY = "TIME_OUTSIDE_AVAILABILITY"
    INVALID_TRANSITION = "INVALID_TRANSITION"


class ConflictError(SchedulingError):
    kind = "CONFLICT"

    def __init__(
        self,
        conflict: ConflictKind,
        *,
        message: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(conflict.value, message=message, payload=payload)
        self.conflict = conflict


class StorageError(Exception):
    """A read from the data layer failed; not a rejection of the request."""

    def __init__(self, operation: str, message: Optional[str] = None) -> None:
        super().__init__(message or f"Storage failure during {operation}")
        self.operation = operation
