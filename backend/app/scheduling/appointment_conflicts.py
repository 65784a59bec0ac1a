from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Optional

from app.scheduling.intervals import contains
from app.scheduling.records import DayOfWeek
from app.scheduling.store import SchedulingStore


class AvailabilityMatch(str, Enum):
    WITHIN = "WITHIN"
    NO_SLOTS = "NO_SLOTS"
    OUTSIDE = "OUTSIDE"


def has_duplicate_same_day(
    store: SchedulingStore,
    patient_id: int,
    day: date,
    exclude_id: Optional[int] = None,
) -> bool:
    appointments = store.find_appointments_on_day(patient_id, day, exclude_id)
    return any(appointment.id != exclude_id for appointment in appointments)


def check_within_availability(
    store: SchedulingStore,
    provider_id: int,
    day: date,
    time: str,
    location_id: Optional[int] = None,
) -> AvailabilityMatch:
    day_of_week = DayOfWeek.from_date(day)
    slots = [
        slot
        for slot in store.find_active_availability(provider_id, day_of_week, location_id)
        if slot.is_active
        and slot.day_of_week == day_of_week
        and (location_id is None or slot.location_id == location_id)
    ]
    if not slots:
        return AvailabilityMatch.NO_SLOTS
    if any(contains(time, slot.start_time, slot.end_time) for slot in slots):
        return AvailabilityMatch.WITHIN
    return AvailabilityMatch.OUTSIDE


def is_within_availability(
    store: SchedulingStore,
    provider_id: int,
    day: date,
    time: str,
    location_id: Optional[int] = None,
) -> bool:
    return check_within_availability(store, provider_id, day, time, location_id) is AvailabilityMatch.WITHIN
