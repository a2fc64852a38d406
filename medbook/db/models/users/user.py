# medbook/db/models/users/user.py
from typing import Optional
from sqlalchemy import event
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid

class User(SQLModel, table=True):
    __tablename__ = "users"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str = Field(max_length=100)
    email: str = Field(max_length=255, unique=True, index=True)
    password_hash: Optional[str] = Field(default=None, max_length=255)
    role: str = Field(max_length=20, index=True)  # admin | doctor | patient
    # Left unset, filled from the role on insert
    is_approved: Optional[bool] = Field(default=None, nullable=False)
    is_blocked: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


@event.listens_for(User, "before_insert")
def _default_approval(mapper, connection, target: User) -> None:
    # Doctor accounts start unapproved; patients and admins start approved
    if target.is_approved is None:
        target.is_approved = target.role != "doctor"
