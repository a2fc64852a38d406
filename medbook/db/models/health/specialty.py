# medbook/db/models/health/specialty.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime

class Specialty(SQLModel, table=True):
    __tablename__ = "specialties"
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(min_length=2, max_length=100, unique=True, index=True)
    description: Optional[str] = Field(default=None, max_length=300)
    created_at: datetime = Field(default_factory=datetime.utcnow)
