from typing import List, Optional
from datetime import datetime
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .....db.models import Availability
from .....application.ports.availability_repo import AvailabilityRepository, AvailabilityDto
from .....application.ports.errors import DuplicateKeyError


class SqlAvailabilityRepository(AvailabilityRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, a: Availability) -> AvailabilityDto:
        return AvailabilityDto(
            id=a.id,
            doctor_id=a.doctor_id,
            day_of_week=a.day_of_week,
            start_time=a.start_time,
            end_time=a.end_time,
        )

    def list_for_doctor(self, doctor_id: int) -> List[AvailabilityDto]:
        rows = self.session.exec(
            select(Availability)
            .where(Availability.doctor_id == doctor_id)
            .order_by(Availability.day_of_week, Availability.start_time)
        ).all()
        return [self._to_dto(r) for r in rows]

    def list_for_day(self, doctor_id: int, day_of_week: int) -> List[AvailabilityDto]:
        rows = self.session.exec(
            select(Availability)
            .where(Availability.doctor_id == doctor_id)
            .where(Availability.day_of_week == day_of_week)
            .order_by(Availability.start_time)
        ).all()
        return [self._to_dto(r) for r in rows]

    def get_by_id(self, slot_id: int) -> Optional[AvailabilityDto]:
        a = self.session.get(Availability, slot_id)
        return self._to_dto(a) if a else None

    def create(self, doctor_id: int, day_of_week: int, start_time: str, end_time: str) -> AvailabilityDto:
        slot = Availability(doctor_id=doctor_id, day_of_week=day_of_week, start_time=start_time, end_time=end_time)
        self.session.add(slot)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise DuplicateKeyError(str(e.orig)) from e
        self.session.refresh(slot)
        return self._to_dto(slot)

    def update_times(self, slot_id: int, start_time: str, end_time: str) -> Optional[AvailabilityDto]:
        slot = self.session.get(Availability, slot_id)
        if not slot:
            return None
        slot.start_time = start_time
        slot.end_time = end_time
        slot.updated_at = datetime.utcnow()
        self.session.add(slot)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise DuplicateKeyError(str(e.orig)) from e
        self.session.refresh(slot)
        return self._to_dto(slot)

    def delete(self, slot_id: int) -> bool:
        slot = self.session.get(Availability, slot_id)
        if not slot:
            return False
        self.session.delete(slot)
        self.session.commit()
        return True
