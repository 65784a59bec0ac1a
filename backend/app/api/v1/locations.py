from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.api.deps import PageParams, get_db, get_page_params, require_roles
from app.api.errors import scheduling_http_error, storage_http_error
from app.scheduling import ActorRole, SchedulingError, StorageError
from app.schemas import LocationCreate, LocationRead, Pagination
from app.services import create_location, deactivate_location, get_location, list_locations

router = APIRouter(prefix="/locations", tags=["locations"])

any_role = require_roles(ActorRole.ADMIN, ActorRole.PROVIDER, ActorRole.PATIENT)
admin_only = require_roles(ActorRole.ADMIN)


@router.get("/", response_model=Pagination[LocationRead], dependencies=[Depends(any_role)])
def list_location_records(
    include_inactive: bool = False,
    paging: PageParams = Depends(get_page_params),
    session: Session = Depends(get_db),
) -> Pagination[LocationRead]:
    try:
        items, total = list_locations(
            session,
            page=paging.page,
            page_size=paging.page_size,
            include_inactive=include_inactive,
        )
    except SchedulingError as exc:
        raise scheduling_http_error(exc) from exc
    except StorageError as exc:
        raise storage_http_error(exc) from exc
    return Pagination[LocationRead](items=items, page=paging.page, page_size=paging.page_size, total=total)


@router.post(
    "/",
    response_model=LocationRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(admin_only)],
)
def create_location_record(payload: LocationCreate, session: Session = Depends(get_db)) -> LocationRead:
    try:
        return create_location(session, payload)
    except SchedulingError as exc:
        raise scheduling_http_error(exc) from exc
    except StorageError as exc:
        raise storage_http_error(exc) from exc


@router.get("/{location_id}", response_model=LocationRead, dependencies=[Depends(any_role)])
def get_location_record(location_id: int, session: Session = Depends(get_db)) -> LocationRead:
    try:
        return get_location(session, location_id)
    except SchedulingError as exc:
        raise scheduling_http_error(exc) from exc
    except StorageError as exc:
        raise storage_http_error(exc) from exc


@router.post(
    "/{location_id}/deactivate",
    response_model=LocationRead,
    dependencies=[Depends(admin_only)],
)
def deactivate_location_record(location_id: int, session: Session = Depends(get_db)) -> LocationRead:
    try:
        return deactivate_location(session, location_id)
    except SchedulingError as exc:
        raise scheduling_http_error(exc) from exc
    except StorageError as exc:
        raise storage_http_error(exc) from exc
