import logging
from typing import Optional

from twilio.rest import Client
from twilio.http.http_client import TwilioHttpClient

from ...config import settings
from ...application.ports.notifier import AppointmentNotice, AppointmentNotifier

logger = logging.getLogger(__name__)


def render_booked(notice: AppointmentNotice) -> str:
    return (
        f"Hello {notice.patient_name or 'Patient'}, your appointment with {notice.doctor_name or 'N/A'} "
        f"on {notice.date} at {notice.start_time}-{notice.end_time} has been booked and is awaiting confirmation."
    )


def render_rescheduled(notice: AppointmentNotice) -> str:
    return (
        f"Hello {notice.patient_name or 'Patient'}, your appointment with {notice.doctor_name or 'N/A'} "
        f"has been moved to {notice.date} at {notice.start_time}-{notice.end_time} and is awaiting confirmation."
    )


class TwilioSmsNotifier(AppointmentNotifier):
    def __init__(self, client: Optional[Client] = None, from_number: Optional[str] = None):
        if client is None:
            # Bounded timeout so a slow provider cannot hang the caller
            http_client = TwilioHttpClient(timeout=settings.NOTIFICATION_TIMEOUT_SECONDS)
            client = Client(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN, http_client=http_client)
        self.client = client
        self.from_number = from_number or settings.TWILIO_PHONE_NUMBER

    def _send(self, to: str, body: str) -> str:
        if not to:
            raise ValueError("Recipient phone number is required")
        message = self.client.messages.create(to=to, from_=self.from_number, body=body)
        logger.info(f"SMS queued with sid {message.sid}")
        return message.sid

    def notify_booked(self, notice: AppointmentNotice) -> None:
        self._send(notice.to, render_booked(notice))

    def notify_rescheduled(self, notice: AppointmentNotice) -> None:
        self._send(notice.to, render_rescheduled(notice))
