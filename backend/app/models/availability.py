from __future__ import annotations

from typing import Optional

from sqlmodel import Field

from app.models.base import TimestampMixin


class Availability(TimestampMixin, table=True):
    __tablename__ = "availability"

    id: Optional[int] = Field(default=None, primary_key=True)
    provider_id: int = Field(foreign_key="providers.id", index=True)
    location_id: Optional[int] = Field(default=None, foreign_key="locations.id", index=True)
    availability_type: str = Field(max_length=16)
    day_of_week: str = Field(max_length=16, index=True)
    start_time: str = Field(max_length=5)
    end_time: str = Field(max_length=5)
    repeat_type: str = Field(default="NONE", max_length=16)
    is_active: bool = Field(default=True, index=True)
