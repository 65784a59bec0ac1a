from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from app.scheduling.statuses import AppointmentStatus


class AvailabilityType(str, Enum):
    OFFLINE = "OFFLINE"
    VIRTUAL = "VIRTUAL"


class DayOfWeek(str, Enum):
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @classmethod
    def from_date(cls, value: date) -> "DayOfWeek":
        # ISO Gregorian weekday, Monday == 0; never locale dependent.
        return _WEEKDAYS[value.weekday()]


_WEEKDAYS = tuple(DayOfWeek)


class RepeatType(str, Enum):
    NONE = "NONE"
    WEEKLY_2 = "WEEKLY_2"
    WEEKLY_4 = "WEEKLY_4"
    WEEKLY_6 = "WEEKLY_6"
    WEEKLY_8 = "WEEKLY_8"


class ActorRole(str, Enum):
    PATIENT = "patient"
    PROVIDER = "provider"
    ADMIN = "admin"


@dataclass(frozen=True)
class Actor:
    """Who is asking. ``actor_id`` is the patient or provider id for those roles."""

    actor_id: Optional[int]
    role: ActorRole


@dataclass(frozen=True)
class PartyRecord:
    id: int
    archived: bool = False


@dataclass(frozen=True)
class LocationRecord:
    id: int
    is_active: bool = True


@dataclass(frozen=True)
class SlotRecord:
    id: Optional[int]
    provider_id: int
    availability_type: AvailabilityType
    day_of_week: DayOfWeek
    start_time: str
    end_time: str
    location_id: Optional[int] = None
    repeat_type: RepeatType = RepeatType.NONE
    is_active: bool = True


@dataclass(frozen=True)
class AppointmentRecord:
    id: Optional[int]
    patient_id: int
    provider_id: int
    date: date
    time: Optional[str] = None
    location_id: Optional[int] = None
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    chief_complaint: Optional[str] = None
    is_emergency: bool = False
    uuid: Optional[str] = None


@dataclass(frozen=True)
class SlotQuery:
    """Filter for availability lookups; ``None`` means no constraint."""

    provider_id: Optional[int] = None
    day_of_week: Optional[DayOfWeek] = None
    availability_type: Optional[AvailabilityType] = None
    location_id: Optional[int] = None
    is_active: Optional[bool] = None
    exclude_id: Optional[int] = None
