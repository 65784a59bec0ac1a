from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.scheduling import AvailabilityType, DayOfWeek, RepeatType


class AvailabilityBase(BaseModel):
    availability_type: AvailabilityType
    day_of_week: DayOfWeek
    start_time: str = Field(examples=["09:00"])
    end_time: str = Field(examples=["17:00"])
    location_id: Optional[int] = None
    repeat_type: RepeatType = RepeatType.NONE
    is_active: bool = True


class AvailabilityCreate(AvailabilityBase):
    provider_id: Optional[int] = Field(
        default=None,
        description="Required for admins; providers always create their own slots",
    )


class AvailabilityUpdate(BaseModel):
    availability_type: Optional[AvailabilityType] = None
    day_of_week: Optional[DayOfWeek] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    location_id: Optional[int] = None
    repeat_type: Optional[RepeatType] = None
    is_active: Optional[bool] = None


class AvailabilityRead(AvailabilityBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    provider_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
