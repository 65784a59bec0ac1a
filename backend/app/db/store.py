from __future__ import annotations

from datetime import date
from functools import wraps
from typing import Any, Callable, List, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.core.logging import get_logger
from app.models import Appointment, Availability, Location, Patient, Provider
from app.scheduling import (
    AppointmentRecord,
    AppointmentStatus,
    AvailabilityType,
    DayOfWeek,
    LocationRecord,
    PartyRecord,
    RepeatType,
    SlotQuery,
    SlotRecord,
    StorageError,
)

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def _storage_errors(func: F) -> F:
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except SQLAlchemyError as exc:
            logger.error("storage.read_failed", operation=func.__name__, exc_info=True)
            raise StorageError(func.__name__) from exc

    return wrapper  # type: ignore[return-value]


def commit_changes(session: Session, operation: str) -> None:
    try:
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("storage.commit_failed", operation=operation, exc_info=True)
        raise StorageError(operation) from exc


def to_slot_record(row: Availability) -> SlotRecord:
    return SlotRecord(
        id=row.id,
        provider_id=row.provider_id,
        availability_type=AvailabilityType(row.availability_type),
        day_of_week=DayOfWeek(row.day_of_week),
        start_time=row.start_time,
        end_time=row.end_time,
        location_id=row.location_id,
        repeat_type=RepeatType(row.repeat_type or RepeatType.NONE.value),
        is_active=row.is_active,
    )


def to_appointment_record(row: Appointment) -> AppointmentRecord:
    return AppointmentRecord(
        id=row.id,
        patient_id=row.patient_id,
        provider_id=row.provider_id,
        date=row.date,
        time=row.time,
        location_id=row.location_id,
        status=AppointmentStatus(row.status),
        chief_complaint=row.chief_complaint,
        is_emergency=row.is_emergency,
        uuid=row.uuid,
    )


class SqlSchedulingStore:
    """``SchedulingStore`` backed by one SQLModel session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    @_storage_errors
    def find_patient(self, patient_id: int) -> Optional[PartyRecord]:
        patient = self.session.get(Patient, patient_id)
        if patient is None:
            return None
        return PartyRecord(id=patient.id, archived=patient.archived)

    @_storage_errors
    def find_provider(self, provider_id: int) -> Optional[PartyRecord]:
        provider = self.session.get(Provider, provider_id)
        if provider is None:
            return None
        return PartyRecord(id=provider.id, archived=provider.archived)

    @_storage_errors
    def find_location(self, location_id: int) -> Optional[LocationRecord]:
        location = self.session.get(Location, location_id)
        if location is None:
            return None
        return LocationRecord(id=location.id, is_active=location.is_active)

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

    @_storage_errors
    def find_appointments_on_day(
        self,
        patient_id: int,
        day: date,
        exclude_id: Optional[int] = None,
    ) -> List[AppointmentRecord]:
        statement = select(Appointment).where(
            Appointment.patient_id == patient_id,
            Appointment.date == day,
        )
        if exclude_id is not None:
            statement = statement.where(Appointment.id != exclude_id)
        return [to_appointment_record(row) for row in self.session.exec(statement).all()]

    @_storage_errors
    def find_availability_slots(self, query: SlotQuery) -> List[SlotRecord]:
        statement = select(Availability)
        if query.provider_id is not None:
            statement = statement.where(Availability.provider_id == query.provider_id)
        if query.day_of_week is not None:
            statement = statement.where(Availability.day_of_week == DayOfWeek(query.day_of_week).value)
        if query.availability_type is not None:
            statement = statement.where(
                Availability.availability_type == AvailabilityType(query.availability_type).value
            )
        if query.location_id is not None:
            statement = statement.where(Availability.location_id == query.location_id)
        if query.is_active is not None:
            statement = statement.where(Availability.is_active == query.is_active)
        if query.exclude_id is not None:
            statement = statement.where(Availability.id != query.exclude_id)
        statement = statement.order_by(Availability.start_time)
        return [to_slot_record(row) for row in self.session.exec(statement).all()]

    @_storage_errors
    def load_appointment(self, appointment_id: int) -> Optional[AppointmentRecord]:
        appointment = self.session.get(Appointment, appointment_id)
        return to_appointment_record(appointment) if appointment else None

    @_storage_errors
    def load_availability(self, availability_id: int) -> Optional[SlotRecord]:
        availability = self.session.get(Availability, availability_id)
        return to_slot_record(availability) if availability else None
