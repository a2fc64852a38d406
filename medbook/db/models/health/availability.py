# medbook/db/models/health/availability.py
from typing import Optional
from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field
from datetime import datetime

class Availability(SQLModel, table=True):
    """Recurring weekly window in which a doctor accepts bookings."""
    __tablename__ = "availability"
    __table_args__ = (
        UniqueConstraint("doctor_id", "day_of_week", "start_time", name="uq_availability_doctor_day_start"),
    )
    id: Optional[int] = Field(default=None, primary_key=True)
    doctor_id: int = Field(foreign_key="doctors.id", index=True, ondelete="CASCADE")
    day_of_week: int = Field(ge=0, le=6)  # 0 = Sunday
    start_time: str = Field(max_length=5)  # HH:MM
    end_time: str = Field(max_length=5)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
