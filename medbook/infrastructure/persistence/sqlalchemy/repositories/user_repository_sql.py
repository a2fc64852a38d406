from typing import Optional
from datetime import datetime
from sqlalchemy import delete, or_
from sqlmodel import Session, select

from .....db.models import Appointment, Availability, Doctor, Patient, User
from .....application.ports.user_repo import (
    UserRepository,
    UserDto,
    DoctorProfileDto,
    PatientProfileDto,
)


class SqlUserRepository(UserRepository):
    def __init__(self, session: Session):
        self.session = session

    def _user_to_dto(self, u: User) -> UserDto:
        return UserDto(
            id=u.id,
            name=u.name,
            email=u.email,
            role=u.role,
            is_approved=bool(u.is_approved),
            is_blocked=bool(u.is_blocked),
            created_at=u.created_at,
        )

    def _doctor_to_dto(self, d: Doctor, u: User) -> DoctorProfileDto:
        return DoctorProfileDto(
            id=d.id,
            user_id=u.id,
            name=u.name,
            phone=d.phone,
            is_approved=bool(u.is_approved),
            is_blocked=bool(u.is_blocked),
        )

    def _patient_to_dto(self, p: Patient, u: User) -> PatientProfileDto:
        return PatientProfileDto(id=p.id, user_id=u.id, name=u.name, email=u.email, phone=p.phone)

    def get_by_id(self, user_id: str) -> Optional[UserDto]:
        u = self.session.get(User, user_id)
        return self._user_to_dto(u) if u else None

    def get_doctor(self, doctor_id: int) -> Optional[DoctorProfileDto]:
        row = self.session.exec(
            select(Doctor, User).join(User, Doctor.user_id == User.id).where(Doctor.id == doctor_id)
        ).first()
        return self._doctor_to_dto(*row) if row else None

    def get_patient(self, patient_id: int) -> Optional[PatientProfileDto]:
        row = self.session.exec(
            select(Patient, User).join(User, Patient.user_id == User.id).where(Patient.id == patient_id)
        ).first()
        return self._patient_to_dto(*row) if row else None

    def doctor_for_user(self, user_id: str) -> Optional[DoctorProfileDto]:
        row = self.session.exec(
            select(Doctor, User).join(User, Doctor.user_id == User.id).where(User.id == user_id)
        ).first()
        return self._doctor_to_dto(*row) if row else None

    def patient_for_user(self, user_id: str) -> Optional[PatientProfileDto]:
        row = self.session.exec(
            select(Patient, User).join(User, Patient.user_id == User.id).where(User.id == user_id)
        ).first()
        return self._patient_to_dto(*row) if row else None

    def set_flags(self, user_id: str, is_approved: Optional[bool] = None, is_blocked: Optional[bool] = None) -> Optional[UserDto]:
        u = self.session.get(User, user_id)
        if not u:
            return None
        if is_approved is not None:
            u.is_approved = is_approved
        if is_blocked is not None:
            u.is_blocked = is_blocked
        u.updated_at = datetime.utcnow()
        self.session.add(u)
        self.session.commit()
        self.session.refresh(u)
        return self._user_to_dto(u)

    def delete_account(self, user_id: str) -> bool:
        u = self.session.get(User, user_id)
        if not u:
            return False
        doctor = self.session.exec(select(Doctor).where(Doctor.user_id == user_id)).first()
        patient = self.session.exec(select(Patient).where(Patient.user_id == user_id)).first()
        try:
            owner_filters = []
            if doctor:
                owner_filters.append(Appointment.doctor_id == doctor.id)
            if patient:
                owner_filters.append(Appointment.patient_id == patient.id)
            if owner_filters:
                self.session.execute(delete(Appointment).where(or_(*owner_filters)))
            if doctor:
                self.session.execute(delete(Availability).where(Availability.doctor_id == doctor.id))
                self.session.delete(doctor)
            if patient:
                self.session.delete(patient)
            # Profiles reference users; flush them first
            self.session.flush()
            self.session.delete(u)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return True
