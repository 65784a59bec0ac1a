from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session

from app.api.deps import PageParams, get_actor, get_db, get_page_params, require_roles
from app.api.errors import scheduling_http_error, storage_http_error
from app.scheduling import Actor, ActorRole, DayOfWeek, SchedulingError, StorageError
from app.schemas import (
    AvailabilityCreate,
    AvailabilityRead,
    AvailabilityUpdate,
    Pagination,
)
from app.services import (
    create_availability,
    delete_availability,
    get_availability,
    list_availability,
    update_availability,
)

router = APIRouter(prefix="/availability", tags=["availability"])

managers = require_roles(ActorRole.ADMIN, ActorRole.PROVIDER)
any_role = require_roles(ActorRole.ADMIN, ActorRole.PROVIDER, ActorRole.PATIENT)


@router.get("/", response_model=Pagination[AvailabilityRead], dependencies=[Depends(any_role)])
def list_availability_slots(
    provider_id: int | None = None,
    day_of_week: DayOfWeek | None = None,
    is_active: bool | None = None,
    paging: PageParams = Depends(get_page_params),
    session: Session = Depends(get_db),
) -> Pagination[AvailabilityRead]:
    try:
        items, total = list_availability(
            session,
            page=paging.page,
            page_size=paging.page_size,
            provider_id=provider_id,
            day_of_week=day_of_week,
            is_active=is_active,
        )
    except SchedulingError as exc:
        raise scheduling_http_error(exc) from exc
    except StorageError as exc:
        raise storage_http_error(exc) from exc
    return Pagination[AvailabilityRead](
        items=items, page=paging.page, page_size=paging.page_size, total=total
    )


@router.post(
    "/",
    response_model=AvailabilityRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(managers)],
)
def create_availability_slot(
    payload: AvailabilityCreate,
    session: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> AvailabilityRead:
    try:
        return create_availability(session, data=payload, actor=actor)
    except SchedulingError as exc:
        raise scheduling_http_error(exc) from exc
    except StorageError as exc:
        raise storage_http_error(exc) from exc


@router.get("/{availability_id}", response_model=AvailabilityRead, dependencies=[Depends(managers)])
def get_availability_slot(
    availability_id: int,
    session: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> AvailabilityRead:
    try:
        return get_availability(session, availability_id, actor=actor)
    except SchedulingError as exc:
        raise scheduling_http_error(exc) from exc
    except StorageError as exc:
        raise storage_http_error(exc) from exc


@router.put("/{availability_id}", response_model=AvailabilityRead, dependencies=[Depends(managers)])
def update_availability_slot(
    availability_id: int,
    payload: AvailabilityUpdate,
    session: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> AvailabilityRead:
    try:
        return update_availability(
            session, availability_id=availability_id, data=payload, actor=actor
        )
    except SchedulingError as exc:
        raise scheduling_http_error(exc) from exc
    except StorageError as exc:
        raise storage_http_error(exc) from exc


@router.delete(
    "/{availability_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(managers)],
)
def delete_availability_slot(
    availability_id: int,
    session: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> Response:
    try:
        delete_availability(session, availability_id=availability_id, actor=actor)
    except SchedulingError as exc:
        raise scheduling_http_error(exc) from exc
    except StorageError as exc:
        raise storage_http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
