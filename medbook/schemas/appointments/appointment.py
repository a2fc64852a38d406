# medbook/schemas/appointments/appointment.py
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
import datetime as dt

from ..common.common import DATE_PATTERN, TIME_PATTERN, Pagination

class AppointmentCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    doctor_id: int
    date: str = Field(pattern=DATE_PATTERN, examples=["2026-11-02"])
    start_time: str = Field(pattern=TIME_PATTERN)
    end_time: str = Field(pattern=TIME_PATTERN)
    reason: str = Field(min_length=10, max_length=500)

class AppointmentReschedule(BaseModel):
    date: str = Field(pattern=DATE_PATTERN)
    start_time: str = Field(pattern=TIME_PATTERN)
    end_time: str = Field(pattern=TIME_PATTERN)

class AppointmentNotes(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    notes: Optional[str] = Field(default=None, max_length=1000)

class AppointmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    patient_id: int
    doctor_id: int
    date: dt.date
    start_time: str
    end_time: str
    status: str
    reason: str
    notes: Optional[str] = None
    created_at: dt.datetime
    updated_at: dt.datetime

class AppointmentListResponse(BaseModel):
    items: List[AppointmentResponse]
    pagination: Pagination
