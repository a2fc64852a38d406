from typing import Iterable, List, Optional, Tuple
from datetime import date, datetime
from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .....db.models import Appointment
from .....application.ports.appointments_repo import (
    AppointmentsRepository,
    AppointmentDto,
    AppointmentFilters,
)
from .....application.ports.errors import DuplicateKeyError


class SqlAppointmentsRepository(AppointmentsRepository):
    def __init__(self, session: Session):
        self.session = session

    def _appt_to_dto(self, a: Appointment) -> AppointmentDto:
        return AppointmentDto(
            id=a.id,
            patient_id=a.patient_id,
            doctor_id=a.doctor_id,
            date=a.date,
            start_time=a.start_time,
            end_time=a.end_time,
            status=a.status,
            reason=a.reason,
            notes=a.notes,
            created_at=a.created_at,
            updated_at=a.updated_at,
        )

    def get_by_id(self, appointment_id: int) -> Optional[AppointmentDto]:
        a = self.session.exec(select(Appointment).where(Appointment.id == appointment_id)).first()
        return self._appt_to_dto(a) if a else None

    def list_for_doctor_on(self, doctor_id: int, day: date, statuses: Iterable[str], exclude_id: Optional[int] = None) -> List[AppointmentDto]:
        query = (
            select(Appointment)
            .where(Appointment.doctor_id == doctor_id)
            .where(Appointment.date == day)
            .where(Appointment.status.in_(list(statuses)))
        )
        if exclude_id is not None:
            query = query.where(Appointment.id != exclude_id)
        rows = self.session.exec(query.order_by(Appointment.start_time)).all()
        return [self._appt_to_dto(r) for r in rows]

    def create(self, patient_id: int, doctor_id: int, day: date, start_time: str, end_time: str, reason: str) -> AppointmentDto:
        appt = Appointment(
            patient_id=patient_id,
            doctor_id=doctor_id,
            date=day,
            start_time=start_time,
            end_time=end_time,
            reason=reason,
            status="pending",
        )
        self.session.add(appt)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise DuplicateKeyError(str(e.orig)) from e
        self.session.refresh(appt)
        return self._appt_to_dto(appt)

    def reschedule(self, appointment_id: int, expected_status: str, day: date, start_time: str, end_time: str) -> Optional[AppointmentDto]:
        stmt = (
            update(Appointment)
            .where(Appointment.id == appointment_id)
            .where(Appointment.status == expected_status)
            .values(date=day, start_time=start_time, end_time=end_time, status="pending", updated_at=datetime.utcnow())
        )
        try:
            matched = self.session.execute(stmt).rowcount
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise DuplicateKeyError(str(e.orig)) from e
        if matched == 0:
            return None
        return self.get_by_id(appointment_id)

    def transition(self, appointment_id: int, expected_status: str, new_status: str) -> Optional[AppointmentDto]:
        stmt = (
            update(Appointment)
            .where(Appointment.id == appointment_id)
            .where(Appointment.status == expected_status)
            .values(status=new_status, updated_at=datetime.utcnow())
        )
        matched = self.session.execute(stmt).rowcount
        self.session.commit()
        if matched == 0:
            return None
        return self.get_by_id(appointment_id)

    def set_notes(self, appointment_id: int, notes: Optional[str]) -> Optional[AppointmentDto]:
        a = self.session.get(Appointment, appointment_id)
        if not a:
            return None
        a.notes = notes
        a.updated_at = datetime.utcnow()
        self.session.add(a)
        self.session.commit()
        self.session.refresh(a)
        return self._appt_to_dto(a)

    def search(self, filters: AppointmentFilters, offset: int, limit: int) -> Tuple[List[AppointmentDto], int]:
        conditions = []
        if filters.status:
            conditions.append(Appointment.status == filters.status)
        if filters.doctor_id is not None:
            conditions.append(Appointment.doctor_id == filters.doctor_id)
        if filters.patient_id is not None:
            conditions.append(Appointment.patient_id == filters.patient_id)
        if filters.date_from:
            conditions.append(Appointment.date >= filters.date_from)
        if filters.date_to:
            conditions.append(Appointment.date <= filters.date_to)

        total = self.session.exec(
            select(func.count()).select_from(Appointment).where(*conditions)
        ).one()
        rows = self.session.exec(
            select(Appointment)
            .where(*conditions)
            .order_by(Appointment.date.desc(), Appointment.start_time.desc())
            .offset(offset)
            .limit(limit)
        ).all()
        return [self._appt_to_dto(r) for r in rows], int(total)
