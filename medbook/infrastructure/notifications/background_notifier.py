import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Callable, Optional

from ...application.ports.notifier import AppointmentNotice, AppointmentNotifier

logger = logging.getLogger(__name__)


class BackgroundNotifier(AppointmentNotifier):
    """Hands each send to a worker thread; the request returns without waiting."""

    def __init__(self, inner: AppointmentNotifier, executor: Optional[Executor] = None):
        self.inner = inner
        self.executor = executor or ThreadPoolExecutor(max_workers=2, thread_name_prefix="notify")

    def _submit(self, send: Callable[[AppointmentNotice], None], notice: AppointmentNotice) -> None:
        future = self.executor.submit(send, notice)
        future.add_done_callback(self._log_failure)

    @staticmethod
    def _log_failure(future) -> None:
        error = future.exception()
        if error is not None:
            logger.warning(f"Background notification failed: {error}")

    def notify_booked(self, notice: AppointmentNotice) -> None:
        self._submit(self.inner.notify_booked, notice)

    def notify_rescheduled(self, notice: AppointmentNotice) -> None:
        self._submit(self.inner.notify_rescheduled, notice)

    def shutdown(self, wait: bool = True) -> None:
        self.executor.shutdown(wait=wait)
