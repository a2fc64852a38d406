# medbook/db/models/health/patient.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime, date

class Patient(SQLModel, table=True):
    __tablename__ = "patients"
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="users.id", unique=True, index=True, ondelete="CASCADE")
    phone: str = Field(max_length=20)
    date_of_birth: date
    created_at: datetime = Field(default_factory=datetime.utcnow)
