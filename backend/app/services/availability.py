from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import and_, func
from sqlmodel import Session, select

from app.core.logging import get_logger
from app.db.store import SqlSchedulingStore, commit_changes
from app.models import Availability
from app.scheduling import (
    Actor,
    ActorRole,
    DayOfWeek,
    SchedulingOrchestrator,
    SlotRecord,
    ValidationError,
)
from app.schemas.availability import AvailabilityCreate, AvailabilityRead, AvailabilityUpdate

logger = get_logger(__name__)


def _orchestrator(session: Session) -> SchedulingOrchestrator:
    return SchedulingOrchestrator(SqlSchedulingStore(session))


def provider_scope(actor: Optional[Actor]) -> Optional[int]:
    """Provider id an actor is limited to, or ``None`` when unrestricted."""
    if actor is not None and actor.role == ActorRole.PROVIDER:
        return actor.actor_id
    return None


def _apply_record(availability: Availability, record: SlotRecord) -> None:
    availability.provider_id = record.provider_id
    availability.availability_type = record.availability_type.value
    availability.day_of_week = record.day_of_week.value
    availability.start_time = record.start_time
    availability.end_time = record.end_time
    availability.location_id = record.location_id
    availability.repeat_type = record.repeat_type.value
    availability.is_active = record.is_active


def list_availability(
    session: Session,
    *,
    page: int = 1,
    page_size: int = 10,
    provider_id: Optional[int] = None,
    day_of_week: Optional[DayOfWeek] = None,
    is_active: Optional[bool] = None,
    actor: Optional[Actor] = None,
) -> Tuple[List[AvailabilityRead], int]:
    scope = provider_scope(actor)
    if scope is not None:
        provider_id = scope

    statement = select(Availability)
    count_stmt = select(func.count()).select_from(Availability)

    filters = []
    if provider_id:
        filters.append(Availability.provider_id == provider_id)
    if day_of_week:
        filters.append(Availability.day_of_week == DayOfWeek(day_of_week).value)
    if is_active is not None:
        filters.append(Availability.is_active == is_active)

    if filters:
        statement = statement.where(and_(*filters))
        count_stmt = count_stmt.where(and_(*filters))

    statement = statement.order_by(
        Availability.provider_id, Availability.day_of_week, Availability.start_time
    )
    total = session.exec(count_stmt).one()
    items = session.exec(statement.offset((page - 1) * page_size).limit(page_size)).all()
    return [AvailabilityRead.model_validate(item) for item in items], total


def get_availability(
    session: Session, availability_id: int, *, actor: Optional[Actor] = None
) -> AvailabilityRead:
    _orchestrator(session).get_availability(availability_id, provider_scope(actor)).unwrap()
    return AvailabilityRead.model_validate(session.get(Availability, availability_id))


def create_availability(
    session: Session,
    *,
    data: AvailabilityCreate,
    actor: Optional[Actor] = None,
) -> AvailabilityRead:
    provider_id = provider_scope(actor) or data.provider_id
    if provider_id is None:
        raise ValidationError("PROVIDER_REQUIRED", message="provider_id is required")

    candidate = SlotRecord(id=None, provider_id=provider_id, **data.model_dump(exclude={"provider_id"}))
    record = _orchestrator(session).create_availability(candidate).unwrap()

    availability = Availability(
        provider_id=record.provider_id,
        availability_type=record.availability_type.value,
        day_of_week=record.day_of_week.value,
        start_time=record.start_time,
        end_time=record.end_time,
    )
    _apply_record(availability, record)
    session.add(availability)
    commit_changes(session, "create_availability")
    session.refresh(availability)

    logger.info(
        "availability.created",
        availability_id=availability.id,
        provider_id=availability.provider_id,
        day_of_week=availability.day_of_week,
    )
    return AvailabilityRead.model_validate(availability)


def update_availability(
    session: Session,
    *,
    availability_id: int,
    data: AvailabilityUpdate,
    actor: Optional[Actor] = None,
) -> AvailabilityRead:
    patch = data.model_dump(exclude_unset=True)
    record = (
        _orchestrator(session)
        .update_availability(availability_id, patch, provider_scope(actor))
        .unwrap()
    )

    availability = session.get(Availability, availability_id)
    _apply_record(availability, record)
    session.add(availability)
    commit_changes(session, "update_availability")
    session.refresh(availability)

    logger.info("availability.updated", availability_id=availability.id, fields=sorted(patch))
    return AvailabilityRead.model_validate(availability)


def delete_availability(
    session: Session,
    *,
    availability_id: int,
    actor: Optional[Actor] = None,
) -> None:
    _orchestrator(session).remove_availability(availability_id, provider_scope(actor)).unwrap()
    availability = session.get(Availability, availability_id)
    session.delete(availability)
    commit_changes(session, "delete_availability")
    logger.info("availability.deleted", availability_id=availability_id)
