# medbook/schemas/availability/availability.py
from pydantic import BaseModel, ConfigDict, Field
from typing import List

from ..common.common import TIME_PATTERN

class AvailabilityCreate(BaseModel):
    day_of_week: int = Field(ge=0, le=6, description="0 = Sunday ... 6 = Saturday")
    start_time: str = Field(pattern=TIME_PATTERN, examples=["09:00"])
    end_time: str = Field(pattern=TIME_PATTERN, examples=["17:00"])

class AvailabilityUpdate(BaseModel):
    start_time: str = Field(pattern=TIME_PATTERN)
    end_time: str = Field(pattern=TIME_PATTERN)

class AvailabilityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    doctor_id: int
    day_of_week: int
    start_time: str
    end_time: str

class BookableTimeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    start_time: str
    end_times: List[str]
