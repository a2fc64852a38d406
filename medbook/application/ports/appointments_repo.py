from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol, Tuple
from datetime import datetime, date


@dataclass
class AppointmentDto:
    id: int
    patient_id: int
    doctor_id: int
    date: date
    start_time: str
    end_time: str
    status: str
    reason: str
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime


@dataclass
class AppointmentFilters:
    status: Optional[str] = None
    doctor_id: Optional[int] = None
    patient_id: Optional[int] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None


class AppointmentsRepository(Protocol):
    def get_by_id(self, appointment_id: int) -> Optional[AppointmentDto]:
        ...

    def list_for_doctor_on(self, doctor_id: int, day: date, statuses: Iterable[str], exclude_id: Optional[int] = None) -> List[AppointmentDto]:
        ...

    def create(self, patient_id: int, doctor_id: int, day: date, start_time: str, end_time: str, reason: str) -> AppointmentDto:
        """Insert with status=pending. Raises DuplicateKeyError on (doctor, date, start) collision."""
        ...

    def reschedule(self, appointment_id: int, expected_status: str, day: date, start_time: str, end_time: str) -> Optional[AppointmentDto]:
        """Move the appointment and reset it to pending.

        Returns None when the stored status no longer equals `expected_status`.
        Raises DuplicateKeyError on (doctor, date, start) collision.
        """
        ...

    def transition(self, appointment_id: int, expected_status: str, new_status: str) -> Optional[AppointmentDto]:
        """Compare-and-set the status; None when the stored status changed meanwhile."""
        ...

    def set_notes(self, appointment_id: int, notes: Optional[str]) -> Optional[AppointmentDto]:
        ...

    def search(self, filters: AppointmentFilters, offset: int, limit: int) -> Tuple[List[AppointmentDto], int]:
        ...
