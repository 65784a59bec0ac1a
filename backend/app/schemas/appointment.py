from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.scheduling import AppointmentStatus


class AppointmentBase(BaseModel):
    date: dt.date
    time: Optional[str] = Field(default=None, description="HH:MM, 24-hour", examples=["10:00"])
    patient_id: int
    provider_id: int
    location_id: Optional[int] = None
    chief_complaint: Optional[str] = None
    is_emergency: bool = False


class AppointmentCreate(AppointmentBase):
    status: Optional[AppointmentStatus] = None


class AppointmentUpdate(BaseModel):
    date: Optional[dt.date] = None
    time: Optional[str] = None
    patient_id: Optional[int] = None
    provider_id: Optional[int] = None
    location_id: Optional[int] = None
    chief_complaint: Optional[str] = None
    is_emergency: Optional[bool] = None
    status: Optional[AppointmentStatus] = None


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus


class AppointmentRead(AppointmentBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    uuid: str
    status: AppointmentStatus
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None
