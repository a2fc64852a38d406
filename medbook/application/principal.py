from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Role(str, Enum):
    ADMIN = "admin"
    DOCTOR = "doctor"
    PATIENT = "patient"


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, passed explicitly into every scheduling operation."""

    user_id: str
    role: Role
    is_approved: bool = True
    is_blocked: bool = False
    doctor_id: Optional[int] = None
    patient_id: Optional[int] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def owns_doctor(self, doctor_id: int) -> bool:
        return self.role == Role.DOCTOR and self.doctor_id is not None and self.doctor_id == doctor_id

    def owns_patient(self, patient_id: int) -> bool:
        return self.role == Role.PATIENT and self.patient_id is not None and self.patient_id == patient_id
