import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ...exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from ...time_utils import normalize_time, overlaps, to_minutes
from ..ports.availability_repo import AvailabilityDto, AvailabilityRepository
from ..ports.errors import DuplicateKeyError
from ..principal import Principal

logger = logging.getLogger(__name__)


def _validated_window(start_time: str, end_time: str) -> Tuple[int, int]:
    start = to_minutes(start_time)
    end = to_minutes(end_time)
    if start is None or end is None:
        raise ValidationError("Times must be in HH:mm format (e.g., 09:00)")
    if end <= start:
        raise ValidationError("End time must be after start time")
    return start, end


def _find_overlap(slots: List[AvailabilityDto], start: int, end: int, exclude_id: Optional[int] = None) -> Optional[AvailabilityDto]:
    for slot in slots:
        if exclude_id is not None and slot.id == exclude_id:
            continue
        slot_start = to_minutes(slot.start_time)
        slot_end = to_minutes(slot.end_time)
        if slot_start is None or slot_end is None:
            continue
        if overlaps(start, end, slot_start, slot_end):
            return slot
    return None


@dataclass
class AvailabilityService:
    repo: AvailabilityRepository

    def list_slots(self, doctor_id: int) -> List[AvailabilityDto]:
        slots = self.repo.list_for_doctor(doctor_id)
        return sorted(slots, key=lambda s: (s.day_of_week, to_minutes(s.start_time) or 0))

    def add_slot(self, principal: Principal, doctor_id: int, day_of_week: int, start_time: str, end_time: str) -> AvailabilityDto:
        if not principal.owns_doctor(doctor_id):
            raise ForbiddenError("You can only manage your own availability")
        if not isinstance(day_of_week, int) or not 0 <= day_of_week <= 6:
            raise ValidationError("Day of week must be between 0 (Sunday) and 6 (Saturday)")
        start, end = _validated_window(start_time, end_time)

        existing = self.repo.list_for_day(doctor_id, day_of_week)
        clash = _find_overlap(existing, start, end)
        if clash:
            raise ConflictError(f"Slot overlaps with existing slot {clash.start_time}-{clash.end_time}")

        try:
            slot = self.repo.create(doctor_id, day_of_week, normalize_time(start_time), normalize_time(end_time))
        except DuplicateKeyError:
            logger.warning(f"Availability insert for doctor {doctor_id} day {day_of_week} {start_time} lost a race")
            raise ConflictError("Slot overlaps with existing slot")
        logger.info(f"Doctor {doctor_id} added availability day={day_of_week} {slot.start_time}-{slot.end_time}")
        return slot

    def update_slot(self, principal: Principal, slot_id: int, start_time: str, end_time: str) -> AvailabilityDto:
        slot = self._owned_slot(principal, slot_id)
        start, end = _validated_window(start_time, end_time)

        siblings = self.repo.list_for_day(slot.doctor_id, slot.day_of_week)
        clash = _find_overlap(siblings, start, end, exclude_id=slot.id)
        if clash:
            raise ConflictError(f"Updated slot overlaps with existing slot {clash.start_time}-{clash.end_time}")

        try:
            updated = self.repo.update_times(slot.id, normalize_time(start_time), normalize_time(end_time))
        except DuplicateKeyError:
            logger.warning(f"Availability update for slot {slot_id} lost a race")
            raise ConflictError("Updated slot overlaps with existing slot")
        if not updated:
            raise NotFoundError("Slot not found")
        logger.info(f"Doctor {slot.doctor_id} updated availability slot {slot_id} to {updated.start_time}-{updated.end_time}")
        return updated

    def delete_slot(self, principal: Principal, slot_id: int) -> None:
        slot = self._owned_slot(principal, slot_id)
        if not self.repo.delete(slot.id):
            raise NotFoundError("Slot not found")
        logger.info(f"Doctor {slot.doctor_id} removed availability slot {slot_id}")

    def _owned_slot(self, principal: Principal, slot_id: int) -> AvailabilityDto:
        slot = self.repo.get_by_id(slot_id)
        if not slot:
            raise NotFoundError("Slot not found")
        if not principal.owns_doctor(slot.doctor_id):
            raise ForbiddenError("You can only manage your own availability")
        return slot
