from __future__ import annotations

from datetime import date
from typing import List, Optional, Protocol

from app.scheduling.records import (
    AppointmentRecord,
    DayOfWeek,
    LocationRecord,
    PartyRecord,
    SlotQuery,
    SlotRecord,
)


class SchedulingStore(Protocol):
    """Read-only view of persisted data that the scheduling rules consult.

    Implementations must give every call made during one orchestrator
    operation the same snapshot. Failures surface as ``StorageError``.
    """

    def find_patient(self, patient_id: int) -> Optional[PartyRecord]:
        ...

    def find_provider(self, provider_id: int) -> Optional[PartyRecord]:
        ...

    def find_location(self, location_id: int) -> Optional[LocationRecord]:
        ...

    def find_active_availability(
        self,
        provider_id: int,
        day_of_week: Optional[DayOfWeek] = None,
        location_id: Optional[int] = None,
    ) -> List[SlotRecord]:
        ...

    def find_appointments_on_day(
        self,
        patient_id: int,
        day: date,
        exclude_id: Optional[int] = None,
    ) -> List[AppointmentRecord]:
        ...

    def find_availability_slots(self, query: SlotQuery) -> List[SlotRecord]:
        ...

    def load_appointment(self, appointment_id: int) -> Optional[AppointmentRecord]:
        ...

    def load_availability(self, availability_id: int) -> Optional[SlotRecord]:
        ...
