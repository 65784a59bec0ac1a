"""Patients, providers and locations referenced by the scheduling rules.

Records are never hard-deleted: patients and providers are archived and
locations are deactivated, so existing appointments keep their references.
"""

from __future__ import annotations

from typing import List, Optional, Tuple, TypeVar

from sqlalchemy import func
from sqlmodel import Session, SQLModel, select

from app.core.logging import get_logger
from app.db.store import commit_changes
from app.models import Location, Patient, Provider
from app.scheduling import NotFoundError, ValidationError
from app.schemas.directory import (
    LocationCreate,
    LocationRead,
    PatientCreate,
    PatientRead,
    ProviderCreate,
    ProviderRead,
)

logger = get_logger(__name__)

M = TypeVar("M", bound=SQLModel)


def _paginate(session: Session, statement, page: int, page_size: int) -> Tuple[List[M], int]:
    total = session.exec(select(func.count()).select_from(statement.subquery())).one()
    items = session.exec(statement.offset((page - 1) * page_size).limit(page_size)).all()
    return list(items), total


def _ensure_unique_email(session: Session, model, email: str) -> None:
    if session.exec(select(model).where(model.email == email)).first():
        raise ValidationError("EMAIL_IN_USE", message="Email is already registered")


# -- patients ----------------------------------------------------------------


def create_patient(session: Session, data: PatientCreate) -> PatientRead:
    _ensure_unique_email(session, Patient, data.email)
    patient = Patient(**data.model_dump())
    session.add(patient)
    commit_changes(session, "create_patient")
    session.refresh(patient)
    logger.info("patient.created", patient_id=patient.id)
    return PatientRead.model_validate(patient)


def get_patient(session: Session, patient_id: int) -> PatientRead:
    patient = session.get(Patient, patient_id)
    if patient is None:
        raise NotFoundError("PATIENT_NOT_FOUND", message="Patient not found")
    return PatientRead.model_validate(patient)


def list_patients(
    session: Session,
    *,
    page: int = 1,
    page_size: int = 10,
    include_archived: bool = False,
) -> Tuple[List[PatientRead], int]:
    statement = select(Patient)
    if not include_archived:
        statement = statement.where(Patient.archived == False)  # noqa: E712
    statement = statement.order_by(Patient.name)
    items, total = _paginate(session, statement, page, page_size)
    return [PatientRead.model_validate(item) for item in items], total


def archive_patient(session: Session, patient_id: int) -> PatientRead:
    patient = session.get(Patient, patient_id)
    if patient is None:
        raise NotFoundError("PATIENT_NOT_FOUND", message="Patient not found")
    if not patient.archived:
        patient.archived = True
        session.add(patient)
        commit_changes(session, "archive_patient")
        session.refresh(patient)
        logger.info("patient.archived", patient_id=patient.id)
    return PatientRead.model_validate(patient)


# -- providers ---------------------------------------------------------------


def create_provider(session: Session, data: ProviderCreate) -> ProviderRead:
    _ensure_unique_email(session, Provider, data.email)
    provider = Provider(**data.model_dump())
    session.add(provider)
    commit_changes(session, "create_provider")
    session.refresh(provider)
    logger.info("provider.created", provider_id=provider.id)
    return ProviderRead.model_validate(provider)


def get_provider(session: Session, provider_id: int) -> ProviderRead:
    provider = session.get(Provider, provider_id)
    if provider is None:
        raise NotFoundError("PROVIDER_NOT_FOUND", message="Provider not found")
    return ProviderRead.model_validate(provider)


def list_providers(
    session: Session,
    *,
    page: int = 1,
    page_size: int = 10,
    specialty: Optional[str] = None,
    include_archived: bool = False,
) -> Tuple[List[ProviderRead], int]:
    statement = select(Provider)
    if not include_archived:
        statement = statement.where(Provider.archived == False)  # noqa: E712
    if specialty:
        statement = statement.where(Provider.specialty == specialty)
    statement = statement.order_by(Provider.name)
    items, total = _paginate(session, statement, page, page_size)
    return [ProviderRead.model_validate(item) for item in items], total


def archive_provider(session: Session, provider_id: int) -> ProviderRead:
    provider = session.get(Provider, provider_id)
    if provider is None:
        raise NotFoundError("PROVIDER_NOT_FOUND", message="Provider not found")
    if not provider.archived:
        provider.archived = True
        session.add(provider)
        commit_changes(session, "archive_provider")
        session.refresh(provider)
        logger.info("provider.archived", provider_id=provider.id)
    return ProviderRead.model_validate(provider)


# -- locations ---------------------------------------------------------------


def create_location(session: Session, data: LocationCreate) -> LocationRead:
    location = Location(**data.model_dump())
    session.add(location)
    commit_changes(session, "create_location")
    session.refresh(location)
    logger.info("location.created", location_id=location.id)
    return LocationRead.model_validate(location)


def get_location(session: Session, location_id: int) -> LocationRead:
    location = session.get(Location, location_id)
    if location is None:
        raise NotFoundError("LOCATION_NOT_FOUND", message="Location not found")
    return LocationRead.model_validate(location)


def list_locations(
    session: Session,
    *,
    page: int = 1,
    page_size: int = 10,
    include_inactive: bool = False,
) -> Tuple[List[LocationRead], int]:
    statement = select(Location)
    if not include_inactive:
        statement = statement.where(Location.is_active == True)  # noqa: E712
    statement = statement.order_by(Location.name)
    items, total = _paginate(session, statement, page, page_size)
    return [LocationRead.model_validate(item) for item in items], total


def deactivate_location(session: Session, location_id: int) -> LocationRead:
    location = session.get(Location, location_id)
    if location is None:
        raise NotFoundError("LOCATION_NOT_FOUND", message="Location not found")
    if location.is_active:
        location.is_active = False
        session.add(location)
        commit_changes(session, "deactivate_location")
        session.refresh(location)
        logger.info("location.deactivated", location_id=location.id)
    return LocationRead.model_validate(location)
