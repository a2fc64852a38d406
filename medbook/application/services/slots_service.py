from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Set, Tuple

from ...exceptions import NotFoundError, ValidationError
from ...time_utils import day_of_week, overlaps, parse_date, to_minutes, to_time_string
from ..ports.appointments_repo import AppointmentsRepository
from ..ports.availability_repo import AvailabilityDto, AvailabilityRepository
from ..ports.user_repo import UserRepository
from ..status_machine import OCCUPYING_STATUSES


@dataclass
class BookableTime:
    start_time: str
    end_times: List[str]


@dataclass
class SlotResolutionService:
    """Turns weekly availability plus booked appointments into free time for one date.

    `get_available_slots` filters whole windows: a window with any occupying
    appointment inside it is dropped. `get_bookable_times` carves the free
    windows into start/end choices on the TIME_STEP_MINUTES grid, so clients do
    not each re-implement slot granularity.
    """

    availability: AvailabilityRepository
    appointments: AppointmentsRepository
    user_repo: UserRepository
    time_step_minutes: int = 15
    max_duration_minutes: int = 60
    clock: Callable[[], datetime] = field(default=datetime.now)

    def get_available_slots(self, doctor_id: int, date_str: str) -> List[AvailabilityDto]:
        day = self._parse_day(date_str)
        self._ensure_bookable_doctor(doctor_id)

        windows = self._windows(doctor_id, day)
        booked = self._booked_intervals(doctor_id, day)
        return [
            window
            for window, (start, end) in windows
            if not any(overlaps(start, end, b_start, b_end) for b_start, b_end in booked)
        ]

    def get_bookable_times(self, doctor_id: int, date_str: str) -> List[BookableTime]:
        day = self._parse_day(date_str)
        self._ensure_bookable_doctor(doctor_id)

        now = self.clock()
        if day < now.date():
            return []
        earliest = now.hour * 60 + now.minute + 1 if day == now.date() else 0

        step = self.time_step_minutes
        booked = self._booked_intervals(doctor_id, day)
        options: Dict[int, Set[int]] = {}
        for _, (window_start, window_end) in self._windows(doctor_id, day):
            for start in range(window_start, window_end, step):
                if start < earliest:
                    continue
                latest_end = min(window_end, start + self.max_duration_minutes)
                ends = []
                for end in range(start + step, latest_end + 1, step):
                    if any(overlaps(start, end, b_start, b_end) for b_start, b_end in booked):
                        break
                    ends.append(end)
                if ends:
                    options.setdefault(start, set()).update(ends)

        return [
            BookableTime(start_time=to_time_string(start), end_times=[to_time_string(e) for e in sorted(ends)])
            for start, ends in sorted(options.items())
        ]

    def _parse_day(self, date_str: str):
        day = parse_date(date_str)
        if day is None:
            raise ValidationError("Date must be a valid calendar date in YYYY-MM-DD format")
        return day

    def _ensure_bookable_doctor(self, doctor_id: int) -> None:
        doctor = self.user_repo.get_doctor(doctor_id)
        if not doctor or not doctor.is_approved or doctor.is_blocked:
            raise NotFoundError("Doctor not found")

    def _windows(self, doctor_id: int, day) -> List[Tuple[AvailabilityDto, Tuple[int, int]]]:
        result = []
        for window in self.availability.list_for_day(doctor_id, day_of_week(day)):
            start = to_minutes(window.start_time)
            end = to_minutes(window.end_time)
            if start is None or end is None or end <= start:
                continue
            result.append((window, (start, end)))
        result.sort(key=lambda item: item[1][0])
        return result

    def _booked_intervals(self, doctor_id: int, day) -> List[Tuple[int, int]]:
        statuses = [s.value for s in OCCUPYING_STATUSES]
        intervals = []
        for appt in self.appointments.list_for_doctor_on(doctor_id, day, statuses):
            start = to_minutes(appt.start_time)
            end = to_minutes(appt.end_time)
            if start is None or end is None:
                continue
            intervals.append((start, end))
        return intervals
