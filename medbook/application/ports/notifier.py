from dataclasses import dataclass
from typing import Protocol


@dataclass
class AppointmentNotice:
    to: str
    patient_name: str
    doctor_name: str
    date: str
    start_time: str
    end_time: str


class AppointmentNotifier(Protocol):
    def notify_booked(self, notice: AppointmentNotice) -> None:
        ...

    def notify_rescheduled(self, notice: AppointmentNotice) -> None:
        ...
