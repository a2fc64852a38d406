# medbook/db/models/health/doctor.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime

class Doctor(SQLModel, table=True):
    __tablename__ = "doctors"
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="users.id", unique=True, index=True, ondelete="CASCADE")
    specialty_id: int = Field(foreign_key="specialties.id", index=True)
    bio: Optional[str] = Field(default=None, max_length=500)
    phone: str = Field(max_length=20)
    address: Optional[str] = Field(default=None, max_length=300)
    image: Optional[str] = Field(default=None, max_length=255)
    created_at: datetime = Field(default_factory=datetime.utcnow)
