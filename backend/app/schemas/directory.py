from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class PatientCreate(BaseModel):
    name: str
    email: str
    phone: Optional[str] = None
    street_address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None


class PatientRead(PatientCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    archived: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProviderCreate(BaseModel):
    name: str
    email: str
    specialty: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None


class ProviderRead(ProviderCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    archived: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LocationCreate(BaseModel):
    name: str
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool = True


class LocationRead(LocationCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
