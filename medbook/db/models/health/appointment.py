# medbook/db/models/health/appointment.py
import datetime as dt
from typing import Optional
from sqlalchemy import Index, text
from sqlmodel import SQLModel, Field

# Cancelled and rejected bookings release their start time for re-booking.
_OCCUPYING = text("status IN ('pending', 'confirmed', 'completed')")

class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    __table_args__ = (
        Index(
            "uq_appointments_doctor_date_start",
            "doctor_id", "date", "start_time",
            unique=True,
            sqlite_where=_OCCUPYING,
            postgresql_where=_OCCUPYING,
        ),
        Index("ix_appointments_patient_date", "patient_id", "date"),
    )
    id: Optional[int] = Field(default=None, primary_key=True)
    patient_id: int = Field(foreign_key="patients.id", ondelete="CASCADE")
    doctor_id: int = Field(foreign_key="doctors.id", index=True, ondelete="CASCADE")
    date: dt.date
    start_time: str = Field(max_length=5)  # HH:MM
    end_time: str = Field(max_length=5)
    status: str = Field(default="pending", max_length=20, index=True)
    reason: str = Field(max_length=500)
    notes: Optional[str] = Field(default=None, max_length=1000)
    created_at: dt.datetime = Field(default_factory=dt.datetime.utcnow)
    updated_at: dt.datetime = Field(default_factory=dt.datetime.utcnow)
