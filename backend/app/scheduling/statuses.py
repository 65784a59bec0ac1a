from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import FrozenSet, Mapping


class AppointmentStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    CONFIRMED = "CONFIRMED"
    CHECKED_IN = "CHECKED_IN"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"
    RESCHEDULED = "RESCHEDULED"
    PENDING_CONFIRMATION = "PENDING_CONFIRMATION"
    DECLINED = "DECLINED"


TRANSITIONS: Mapping[AppointmentStatus, FrozenSet[AppointmentStatus]] = MappingProxyType(
    {
        AppointmentStatus.SCHEDULED: frozenset(
            {
                AppointmentStatus.CONFIRMED,
                AppointmentStatus.CANCELLED,
                AppointmentStatus.RESCHEDULED,
                AppointmentStatus.DECLINED,
            }
        ),
        AppointmentStatus.CONFIRMED: frozenset(
            {
                AppointmentStatus.CHECKED_IN,
                AppointmentStatus.CANCELLED,
                AppointmentStatus.RESCHEDULED,
            }
        ),
        AppointmentStatus.CHECKED_IN: frozenset(
            {AppointmentStatus.IN_PROGRESS, AppointmentStatus.NO_SHOW}
        ),
        AppointmentStatus.IN_PROGRESS: frozenset(
            {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED}
        ),
        AppointmentStatus.COMPLETED: frozenset(),
        AppointmentStatus.CANCELLED: frozenset(),
        AppointmentStatus.NO_SHOW: frozenset(),
        AppointmentStatus.RESCHEDULED: frozenset(
            {AppointmentStatus.SCHEDULED, AppointmentStatus.CANCELLED}
        ),
        AppointmentStatus.PENDING_CONFIRMATION: frozenset(
            {
                AppointmentStatus.CONFIRMED,
                AppointmentStatus.DECLINED,
                AppointmentStatus.CANCELLED,
            }
        ),
        AppointmentStatus.DECLINED: frozenset(),
    }
)

INITIAL_STATUSES: FrozenSet[AppointmentStatus] = frozenset(
    {AppointmentStatus.SCHEDULED, AppointmentStatus.PENDING_CONFIRMATION}
)

TERMINAL_STATUSES: FrozenSet[AppointmentStatus] = frozenset(
    status for status, targets in TRANSITIONS.items() if not targets
)


def _coerce(status: AppointmentStatus | str) -> AppointmentStatus | None:
    try:
        return AppointmentStatus(status)
    except ValueError:
        return None


def allowed_transitions(status: AppointmentStatus | str) -> FrozenSet[AppointmentStatus]:
    current = _coerce(status)
    if current is None:
        return frozenset()
    return TRANSITIONS[current]


def can_transition(current: AppointmentStatus | str, target: AppointmentStatus | str) -> bool:
    """Check one step of the lifecycle.

    Only the immediately preceding stored status is inspected. Unknown values
    on either side never transition. Callers treat ``current == target`` as a
    no-op and skip this check.
    """
    destination = _coerce(target)
    if destination is None:
        return False
    return destination in allowed_transitions(current)


def is_terminal(status: AppointmentStatus | str) -> bool:
    return _coerce(status) in TERMINAL_STATUSES


def is_initial(status: AppointmentStatus | str) -> bool:
    return _coerce(status) in INITIAL_STATUSES
