from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.api.deps import PageParams, get_db, get_page_params, require_roles
from app.api.errors import scheduling_http_error, storage_http_error
from app.scheduling import ActorRole, SchedulingError, StorageError
from app.schemas import Pagination, PatientCreate, PatientRead
from app.services import archive_patient, create_patient, get_patient, list_patients

router = APIRouter(prefix="/patients", tags=["patients"])

staff = require_roles(ActorRole.ADMIN, ActorRole.PROVIDER)
admin_only = require_roles(ActorRole.ADMIN)


@router.get("/", response_model=Pagination[PatientRead], dependencies=[Depends(staff)])
def list_patient_records(
    include_archived: bool = False,
    paging: PageParams = Depends(get_page_params),
    session: Session = Depends(get_db),
) -> Pagination[PatientRead]:
    try:
        items, total = list_patients(
            session,
            page=paging.page,
            page_size=paging.page_size,
            include_archived=include_archived,
        )
    except SchedulingError as exc:
        raise scheduling_http_error(exc) from exc
    except StorageError as exc:
        raise storage_http_error(exc) from exc
    return Pagination[PatientRead](items=items, page=paging.page, page_size=paging.page_size, total=total)


@router.post(
    "/",
    response_model=PatientRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(admin_only)],
)
def create_patient_record(payload: PatientCreate, session: Session = Depends(get_db)) -> PatientRead:
    try:
        return create_patient(session, payload)
    except SchedulingError as exc:
        raise scheduling_http_error(exc) from exc
    except StorageError as exc:
        raise storage_http_error(exc) from exc


@router.get("/{patient_id}", response_model=PatientRead, dependencies=[Depends(staff)])
def get_patient_record(patient_id: int, session: Session = Depends(get_db)) -> PatientRead:
    try:
        return get_patient(session, patient_id)
    except SchedulingError as exc:
        raise scheduling_http_error(exc) from exc
    except StorageError as exc:
        raise storage_http_error(exc) from exc


@router.post("/{patient_id}/archive", response_model=PatientRead, dependencies=[Depends(admin_only)])
def archive_patient_record(patient_id: int, session: Session = Depends(get_db)) -> PatientRead:
    try:
        return archive_patient(session, patient_id)
    except SchedulingError as exc:
        raise scheduling_http_error(exc) from exc
    except StorageError as exc:
        raise storage_http_error(exc) from exc
