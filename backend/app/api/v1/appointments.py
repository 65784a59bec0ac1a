from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session

from app.api.deps import PageParams, get_actor, get_db, get_page_params, require_roles
from app.api.errors import scheduling_http_error, storage_http_error
from app.scheduling import Actor, ActorRole, AppointmentStatus, SchedulingError, StorageError
from app.schemas import (
    AppointmentCreate,
    AppointmentRead,
    AppointmentStatusUpdate,
    AppointmentUpdate,
    Pagination,
)
from app.services import (
    create_appointment,
    delete_appointment,
    get_appointment,
    list_appointments,
    update_appointment,
    update_appointment_status,
)

router = APIRouter(prefix="/appointments", tags=["appointments"])

any_role = require_roles(ActorRole.ADMIN, ActorRole.PROVIDER, ActorRole.PATIENT)


@router.get("/", response_model=Pagination[AppointmentRead], dependencies=[Depends(any_role)])
def list_appointment_records(
    patient_id: int | None = None,
    provider_id: int | None = None,
    status_filter: AppointmentStatus | None = None,
    on_date: date | None = None,
    paging: PageParams = Depends(get_page_params),
    session: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> Pagination[AppointmentRead]:
    try:
        items, total = list_appointments(
            session,
            page=paging.page,
            page_size=paging.page_size,
            patient_id=patient_id,
            provider_id=provider_id,
            status=status_filter,
            on_date=on_date,
            actor=actor,
        )
    except SchedulingError as exc:
        raise scheduling_http_error(exc) from exc
    except StorageError as exc:
        raise storage_http_error(exc) from exc
    return Pagination[AppointmentRead](
        items=items, page=paging.page, page_size=paging.page_size, total=total
    )


@router.post(
    "/",
    response_model=AppointmentRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(any_role)],
)
def create_appointment_record(
    payload: AppointmentCreate,
    session: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> AppointmentRead:
    try:
        return create_appointment(session, data=payload, actor=actor)
    except SchedulingError as exc:
        raise scheduling_http_error(exc) from exc
    except StorageError as exc:
        raise storage_http_error(exc) from exc


@router.get("/{appointment_id}", response_model=AppointmentRead, dependencies=[Depends(any_role)])
def get_appointment_record(
    appointment_id: int,
    session: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> AppointmentRead:
    try:
        return get_appointment(session, appointment_id, actor=actor)
    except SchedulingError as exc:
        raise scheduling_http_error(exc) from exc
    except StorageError as exc:
        raise storage_http_error(exc) from exc


@router.put("/{appointment_id}", response_model=AppointmentRead, dependencies=[Depends(any_role)])
def update_appointment_record(
    appointment_id: int,
    payload: AppointmentUpdate,
    session: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> AppointmentRead:
    try:
        return update_appointment(
            session, appointment_id=appointment_id, data=payload, actor=actor
        )
    except SchedulingError as exc:
        raise scheduling_http_error(exc) from exc
    except StorageError as exc:
        raise storage_http_error(exc) from exc


@router.patch(
    "/{appointment_id}/status",
    response_model=AppointmentRead,
    dependencies=[Depends(any_role)],
)
def update_appointment_record_status(
    appointment_id: int,
    payload: AppointmentStatusUpdate,
    session: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> AppointmentRead:
    try:
        return update_appointment_status(
            session, appointment_id=appointment_id, status=payload.status, actor=actor
        )
    except SchedulingError as exc:
        raise scheduling_http_error(exc) from exc
    except StorageError as exc:
        raise storage_http_error(exc) from exc


@router.delete(
    "/{appointment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(any_role)],
)
def delete_appointment_record(
    appointment_id: int,
    session: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> Response:
    try:
        delete_appointment(session, appointment_id=appointment_id, actor=actor)
    except SchedulingError as exc:
        raise scheduling_http_error(exc) from exc
    except StorageError as exc:
        raise storage_http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
