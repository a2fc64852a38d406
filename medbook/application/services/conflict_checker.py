from dataclasses import dataclass
from datetime import date
from typing import Optional

from ...exceptions import ConflictError, ValidationError
from ...time_utils import day_of_week, overlaps, to_minutes
from ..ports.appointments_repo import AppointmentsRepository
from ..ports.availability_repo import AvailabilityRepository
from ..status_machine import OCCUPYING_STATUSES

SLOT_TAKEN_MESSAGE = "This slot is no longer available"


@dataclass
class ConflictChecker:
    """Re-validates a proposed (date, start, end) against the doctor's calendar before a write."""

    appointments: AppointmentsRepository
    availability: AvailabilityRepository

    def ensure_within_availability(self, doctor_id: int, day: date, start: int, end: int) -> None:
        for window in self.availability.list_for_day(doctor_id, day_of_week(day)):
            window_start = to_minutes(window.start_time)
            window_end = to_minutes(window.end_time)
            if window_start is None or window_end is None:
                continue
            if window_start <= start and end <= window_end:
                return
        raise ValidationError("Selected time is outside doctor availability")

    def ensure_no_overlap(self, doctor_id: int, day: date, start: int, end: int, exclude_id: Optional[int] = None) -> None:
        statuses = [s.value for s in OCCUPYING_STATUSES]
        for appt in self.appointments.list_for_doctor_on(doctor_id, day, statuses, exclude_id=exclude_id):
            if exclude_id is not None and appt.id == exclude_id:
                continue
            appt_start = to_minutes(appt.start_time)
            appt_end = to_minutes(appt.end_time)
            if appt_start is None or appt_end is None:
                continue
            if overlaps(start, end, appt_start, appt_end):
                raise ConflictError(SLOT_TAKEN_MESSAGE)
