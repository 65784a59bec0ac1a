from __future__ import annotations

import datetime as dt
from typing import Optional
from uuid import uuid4

from sqlmodel import Field

from app.models.base import TimestampMixin


class Appointment(TimestampMixin, table=True):
    __tablename__ = "appointments"

    id: Optional[int] = Field(default=None, primary_key=True)
    uuid: str = Field(
        default_factory=lambda: str(uuid4()),
        index=True,
        unique=True,
        max_length=36,
    )
    date: dt.date = Field(index=True)
    time: Optional[str] = Field(default=None, max_length=5)
    patient_id: int = Field(foreign_key="patients.id", index=True)
    provider_id: int = Field(foreign_key="providers.id", index=True)
    location_id: Optional[int] = Field(default=None, foreign_key="locations.id")
    chief_complaint: Optional[str] = Field(default=None, max_length=500)
    is_emergency: bool = Field(default=False)
    status: str = Field(default="SCHEDULED", max_length=32, index=True)
