from dataclasses import dataclass
from typing import Protocol, Optional
from datetime import datetime


@dataclass
class UserDto:
    id: str
    name: str
    email: str
    role: str
    is_approved: bool
    is_blocked: bool
    created_at: Optional[datetime] = None


@dataclass
class DoctorProfileDto:
    id: int
    user_id: str
    name: str
    phone: str
    is_approved: bool
    is_blocked: bool


@dataclass
class PatientProfileDto:
    id: int
    user_id: str
    name: str
    email: str
    phone: str


class UserRepository(Protocol):
    def get_by_id(self, user_id: str) -> Optional[UserDto]:
        ...

    def get_doctor(self, doctor_id: int) -> Optional[DoctorProfileDto]:
        ...

    def get_patient(self, patient_id: int) -> Optional[PatientProfileDto]:
        ...

    def doctor_for_user(self, user_id: str) -> Optional[DoctorProfileDto]:
        ...

    def patient_for_user(self, user_id: str) -> Optional[PatientProfileDto]:
        ...

    def set_flags(self, user_id: str, is_approved: Optional[bool] = None, is_blocked: Optional[bool] = None) -> Optional[UserDto]:
        ...

    def delete_account(self, user_id: str) -> bool:
        """Delete the user, its profile, and the profile's availability and appointments."""
        ...
