from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.api.deps import PageParams, get_db, get_page_params, require_roles
from app.api.errors import scheduling_http_error, storage_http_error
from app.scheduling import ActorRole, SchedulingError, StorageError
from app.schemas import Pagination, ProviderCreate, ProviderRead
from app.services import archive_provider, create_provider, get_provider, list_providers

router = APIRouter(prefix="/providers", tags=["providers"])

any_role = require_roles(ActorRole.ADMIN, ActorRole.PROVIDER, ActorRole.PATIENT)
admin_only = require_roles(ActorRole.ADMIN)


@router.get("/", response_model=Pagination[ProviderRead], dependencies=[Depends(any_role)])
def list_provider_records(
    specialty: str | None = None,
    include_archived: bool = False,
    paging: PageParams = Depends(get_page_params),
    session: Session = Depends(get_db),
) -> Pagination[ProviderRead]:
    try:
        items, total = list_providers(
            session,
            page=paging.page,
            page_size=paging.page_size,
            specialty=specialty,
            include_archived=include_archived,
        )
    except SchedulingError as exc:
        raise scheduling_http_error(exc) from exc
    except StorageError as exc:
        raise storage_http_error(exc) from exc
    return Pagination[ProviderRead](items=items, page=paging.page, page_size=paging.page_size, total=total)


@router.post(
    "/",
    response_model=ProviderRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(admin_only)],
)
def create_provider_record(payload: ProviderCreate, session: Session = Depends(get_db)) -> ProviderRead:
    try:
        return create_provider(session, payload)
    except SchedulingError as exc:
        raise scheduling_http_error(exc) from exc
    except StorageError as exc:
        raise storage_http_error(exc) from exc


@router.get("/{provider_id}", response_model=ProviderRead, dependencies=[Depends(any_role)])
def get_provider_record(provider_id: int, session: Session = Depends(get_db)) -> ProviderRead:
    try:
        return get_provider(session, provider_id)
    except SchedulingError as exc:
        raise scheduling_http_error(exc) from exc
    except StorageError as exc:
        raise storage_http_error(exc) from exc


@router.post("/{provider_id}/archive", response_model=ProviderRead, dependencies=[Depends(admin_only)])
def archive_provider_record(provider_id: int, session: Session = Depends(get_db)) -> ProviderRead:
    try:
        return archive_provider(session, provider_id)
    except SchedulingError as exc:
        raise scheduling_http_error(exc) from exc
    except StorageError as exc:
        raise storage_http_error(exc) from exc
