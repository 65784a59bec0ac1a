from __future__ import annotations

import os
import sys
import tempfile
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[3]
BACKEND_ROOT = PROJECT_ROOT / "backend"

if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

TEST_DATABASE = Path(tempfile.gettempdir()) / "clinic_scheduling_test.db"
os.environ.setdefault("DATABASE_URL", f"sqlite:///{TEST_DATABASE}")

from app.scheduling import (  # noqa: E402
    AppointmentRecord,
    DayOfWeek,
    LocationRecord,
    PartyRecord,
    SlotQuery,
    SlotRecord,
)


class InMemoryStore:
    """Dictionary backed store used by the scheduling unit tests."""

    def __init__(self) -> None:
        self.patients: Dict[int, PartyRecord] = {}
        self.providers: Dict[int, PartyRecord] = {}
        self.locations: Dict[int, LocationRecord] = {}
        self.slots: Dict[int, SlotRecord] = {}
        self.appointments: Dict[int, AppointmentRecord] = {}
        self.calls: List[str] = []

    def add_patient(self, patient_id: int, archived: bool = False) -> PartyRecord:
        self.patients[patient_id] = PartyRecord(id=patient_id, archived=archived)
        return self.patients[patient_id]

    def add_provider(self, provider_id: int, archived: bool = False) -> PartyRecord:
        self.providers[provider_id] = PartyRecord(id=provider_id, archived=archived)
        return self.providers[provider_id]

    def add_location(self, location_id: int, is_active: bool = True) -> LocationRecord:
        self.locations[location_id] = LocationRecord(id=location_id, is_active=is_active)
        return self.locations[location_id]

    def add_slot(self, slot: SlotRecord) -> SlotRecord:
        if slot.id is None:
            slot = replace(slot, id=len(self.slots) + 1)
        self.slots[slot.id] = slot
        return slot

    def add_appointment(self, appointment: AppointmentRecord) -> AppointmentRecord:
        if appointment.id is None:
            appointment = replace(appointment, id=len(self.appointments) + 1)
        self.appointments[appointment.id] = appointment
        return appointment

    def find_patient(self, patient_id: int) -> Optional[PartyRecord]:
        self.calls.append("find_patient")
        return self.patients.get(patient_id)

    def find_provider(self, provider_id: int) -> Optional[PartyRecord]:
        self.calls.append("find_provider")
        return self.providers.get(provider_id)

    def find_location(self, location_id: int) -> Optional[LocationRecord]:
        self.calls.append("find_location")
        return self.locations.get(location_id)

    def find_active_availability(
        self,
        provider_id: int,
        day_of_week: Optional[DayOfWeek] = None,
        location_id: Optional[int] = None,
    ) -> List[SlotRecord]:
        return self.find_availability_slots(
            SlotQuery(
                provider_id=provider_id,
                day_of_week=day_of_week,
                location_id=location_id,
                is_active=True,
            )
        )

    def find_appointments_on_day(
        self, patient_id: int, day: date, exclude_id: Optional[int] = None
    ) -> List[AppointmentRecord]:
        self.calls.append("find_appointments_on_day")
        return [
            item
            for item in self.appointments.values()
            if item.patient_id == patient_id and item.date == day and item.id != exclude_id
        ]

    def find_availability_slots(self, query: SlotQuery) -> List[SlotRecord]:
        self.calls.append("find_availability_slots")
        results = []
        for slot in self.slots.values():
            if query.provider_id is not None and slot.provider_id != query.provider_id:
                continue
            if query.day_of_week is not None and slot.day_of_week != query.day_of_week:
                continue
            if query.availability_type is not None and slot.availability_type != query.availability_type:
                continue
            if query.location_id is not None and slot.location_id != query.location_id:
                continue
            if query.is_active is not None and slot.is_active != query.is_active:
                continue
            if query.exclude_id is not None and slot.id == query.exclude_id:
                continue
            results.append(slot)
        return results

    def load_appointment(self, appointment_id: int) -> Optional[AppointmentRecord]:
        return self.appointments.get(appointment_id)

    def load_availability(self, availability_id: int) -> Optional[SlotRecord]:
        return self.slots.get(availability_id)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


RESET_ORDER = ("appointments", "availability", "users", "locations", "patients", "providers", "roles")


@pytest.fixture
def database():
    """Migrated test database with every table emptied."""
    from sqlalchemy import text
    from sqlmodel import Session

    from app.db.session import engine, init_db

    init_db()
    with Session(engine) as session:
        for table in RESET_ORDER:
            session.exec(text(f"DELETE FROM {table}"))
        session.commit()
    return engine
