import logging
from functools import lru_cache

from ...config import settings
from ...application.ports.notifier import AppointmentNotifier
from .background_notifier import BackgroundNotifier
from .log_notifier import LoggingNotifier

logger = logging.getLogger(__name__)


@lru_cache()
def get_notifier() -> AppointmentNotifier:
    if not settings.NOTIFICATIONS_ENABLED or not settings.twilio_configured:
        logger.info("Twilio not configured; appointment notices will only be logged")
        return LoggingNotifier()
    from .twilio_notifier import TwilioSmsNotifier
    return BackgroundNotifier(TwilioSmsNotifier())
