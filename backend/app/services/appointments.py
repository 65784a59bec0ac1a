from __future__ import annotations

from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy import and_, func
from sqlmodel import Session, select

from app.core.logging import get_logger
from app.db.store import SqlSchedulingStore, commit_changes
from app.models import Appointment
from app.scheduling import (
    Actor,
    ActorRole,
    AppointmentRecord,
    AppointmentStatus,
    ForbiddenError,
    SchedulingOrchestrator,
)
from app.schemas.appointment import AppointmentCreate, AppointmentRead, AppointmentUpdate

logger = get_logger(__name__)

_MUTABLE_FIELDS = (
    "patient_id",
    "provider_id",
    "date",
    "time",
    "location_id",
    "chief_complaint",
    "is_emergency",
)


def _orchestrator(session: Session) -> SchedulingOrchestrator:
    return SchedulingOrchestrator(SqlSchedulingStore(session))


def _build_appointment_read(appointment: Appointment) -> AppointmentRead:
    return AppointmentRead.model_validate(appointment)


def _apply_record(appointment: Appointment, record: AppointmentRecord) -> None:
    for field in _MUTABLE_FIELDS:
        setattr(appointment, field, getattr(record, field))
    appointment.status = AppointmentStatus(record.status).value


def _scope_filters(
    actor: Optional[Actor],
    patient_id: Optional[int],
    provider_id: Optional[int],
) -> Tuple[Optional[int], Optional[int]]:
    if actor is None or actor.role == ActorRole.ADMIN:
        return patient_id, provider_id
    if actor.role == ActorRole.PATIENT:
        return actor.actor_id, provider_id
    return patient_id, actor.actor_id


def list_appointments(
    session: Session,
    *,
    page: int = 1,
    page_size: int = 10,
    patient_id: Optional[int] = None,
    provider_id: Optional[int] = None,
    status: Optional[AppointmentStatus] = None,
    on_date: Optional[date] = None,
    actor: Optional[Actor] = None,
) -> Tuple[List[AppointmentRead], int]:
    patient_id, provider_id = _scope_filters(actor, patient_id, provider_id)

    statement = select(Appointment)
    count_stmt = select(func.count()).select_from(Appointment)

    filters = []
    if patient_id:
        filters.append(Appointment.patient_id == patient_id)
    if provider_id:
        filters.append(Appointment.provider_id == provider_id)
    if status:
        filters.append(Appointment.status == AppointmentStatus(status).value)
    if on_date:
        filters.append(Appointment.date == on_date)

    if filters:
        statement = statement.where(and_(*filters))
        count_stmt = count_stmt.where(and_(*filters))

    statement = statement.order_by(Appointment.date.asc(), Appointment.time.asc())
    total = session.exec(count_stmt).one()
    items = session.exec(
        statement.offset((page - 1) * page_size).limit(page_size)
    ).all()
    return [_build_appointment_read(item) for item in items], total


def get_appointment(
    session: Session, appointment_id: int, *, actor: Optional[Actor] = None
) -> AppointmentRead:
    _orchestrator(session).get_appointment(appointment_id, actor).unwrap()
    return _build_appointment_read(session.get(Appointment, appointment_id))


def create_appointment(
    session: Session,
    *,
    data: AppointmentCreate,
    actor: Optional[Actor] = None,
) -> AppointmentRead:
    if actor is not None and actor.role == ActorRole.PATIENT and data.patient_id != actor.actor_id:
        raise ForbiddenError(
            "CANNOT_MODIFY_OTHER_PATIENT",
            message="Patients can only book appointments for themselves",
        )
    if actor is not None and actor.role == ActorRole.PROVIDER and data.provider_id != actor.actor_id:
        raise ForbiddenError(
            "CANNOT_MODIFY_OTHER_PROVIDER",
            message="Providers can only book appointments assigned to them",
        )

    candidate = AppointmentRecord(id=None, **data.model_dump(exclude={"status"}), status=data.status)
    record = _orchestrator(session).create_appointment(candidate).unwrap()

    appointment = Appointment(status=record.status.value)
    _apply_record(appointment, record)
    session.add(appointment)
    commit_changes(session, "create_appointment")
    session.refresh(appointment)

    logger.info(
        "appointment.created",
        appointment_id=appointment.id,
        provider_id=appointment.provider_id,
        status=appointment.status,
    )
    return _build_appointment_read(appointment)


def update_appointment(
    session: Session,
    *,
    appointment_id: int,
    data: AppointmentUpdate,
    actor: Optional[Actor] = None,
) -> AppointmentRead:
    patch = data.model_dump(exclude_unset=True)
    record = _orchestrator(session).update_appointment(appointment_id, patch, actor).unwrap()

    appointment = session.get(Appointment, appointment_id)
    _apply_record(appointment, record)
    session.add(appointment)
    commit_changes(session, "update_appointment")
    session.refresh(appointment)

    logger.info("appointment.updated", appointment_id=appointment.id, fields=sorted(patch))
    return _build_appointment_read(appointment)


def update_appointment_status(
    session: Session,
    *,
    appointment_id: int,
    status: AppointmentStatus,
    actor: Optional[Actor] = None,
) -> AppointmentRead:
    record = _orchestrator(session).update_status(appointment_id, status, actor).unwrap()

    appointment = session.get(Appointment, appointment_id)
    previous = appointment.status
    if previous != record.status.value:
        appointment.status = record.status.value
        session.add(appointment)
        commit_changes(session, "update_appointment_status")
        session.refresh(appointment)
        logger.info(
            "appointment.status_changed",
            appointment_id=appointment.id,
            previous=previous,
            status=appointment.status,
        )
    return _build_appointment_read(appointment)


def delete_appointment(
    session: Session,
    *,
    appointment_id: int,
    actor: Optional[Actor] = None,
) -> None:
    _orchestrator(session).remove_appointment(appointment_id, actor).unwrap()
    appointment = session.get(Appointment, appointment_id)
    session.delete(appointment)
    commit_changes(session, "delete_appointment")
    logger.info("appointment.deleted", appointment_id=appointment_id)
