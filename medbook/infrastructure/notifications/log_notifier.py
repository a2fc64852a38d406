import json
import logging

from ...application.ports.notifier import AppointmentNotice, AppointmentNotifier


class LoggingNotifier(AppointmentNotifier):
    """Writes notices to the log instead of delivering them."""

    def __init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _log(self, kind: str, notice: AppointmentNotice) -> None:
        entry = {
            "kind": kind,
            "doctor": notice.doctor_name,
            "date": notice.date,
            "time": f"{notice.start_time}-{notice.end_time}",
        }
        self._logger.info(f"NOTIFY: {json.dumps(entry)}")

    def notify_booked(self, notice: AppointmentNotice) -> None:
        self._log("booked", notice)

    def notify_rescheduled(self, notice: AppointmentNotice) -> None:
        self._log("rescheduled", notice)
