import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Dict, List, Optional, Tuple

from ...exceptions import ConflictError, ForbiddenError, NotFoundError, PreconditionError, ValidationError
from ...time_utils import combine, normalize_time, parse_date, to_minutes
from ..ports.appointments_repo import AppointmentDto, AppointmentFilters, AppointmentsRepository
from ..ports.errors import DuplicateKeyError
from ..ports.notifier import AppointmentNotice, AppointmentNotifier
from ..ports.user_repo import UserRepository
from ..principal import Principal, Role
from ..status_machine import AppointmentAction, AppointmentStatus, ensure_actor, next_status
from .conflict_checker import SLOT_TAKEN_MESSAGE, ConflictChecker

logger = logging.getLogger(__name__)

REASON_MIN_LENGTH = 10
REASON_MAX_LENGTH = 500
NOTES_MAX_LENGTH = 1000


@dataclass
class AppointmentsService:
    repo: AppointmentsRepository
    user_repo: UserRepository
    checker: ConflictChecker
    notifier: AppointmentNotifier
    max_duration_minutes: int = 60
    default_page_size: int = 10
    max_page_size: int = 100
    clock: Callable[[], datetime] = field(default=datetime.now)

    # ------------------------
    # Booking / rescheduling
    # ------------------------
    def book(self, principal: Principal, doctor_id: int, date_str: str, start_time: str, end_time: str, reason: str) -> AppointmentDto:
        if principal.role != Role.PATIENT or principal.patient_id is None:
            raise ForbiddenError("Only patients can book appointments")

        day = self._future_day(date_str)
        start, end = self._validated_times(start_time, end_time)
        self._ensure_not_started(day, start_time)
        reason = (reason or "").strip()
        if len(reason) < REASON_MIN_LENGTH:
            raise ValidationError(f"Reason must be at least {REASON_MIN_LENGTH} characters long")
        if len(reason) > REASON_MAX_LENGTH:
            raise ValidationError(f"Reason cannot exceed {REASON_MAX_LENGTH} characters")

        doctor = self.user_repo.get_doctor(doctor_id)
        if not doctor or not doctor.is_approved or doctor.is_blocked:
            raise NotFoundError("Doctor not found")

        self.checker.ensure_within_availability(doctor_id, day, start, end)
        self.checker.ensure_no_overlap(doctor_id, day, start, end)

        try:
            appt = self.repo.create(
                principal.patient_id,
                doctor_id,
                day,
                normalize_time(start_time),
                normalize_time(end_time),
                reason,
            )
        except DuplicateKeyError:
            logger.warning(f"Booking for doctor {doctor_id} on {day} at {start_time} rejected by unique index")
            raise ConflictError(SLOT_TAKEN_MESSAGE)

        logger.info(f"Appointment {appt.id} booked: doctor={doctor_id} patient={principal.patient_id} {day} {appt.start_time}-{appt.end_time}")
        self._send_notice(appt, rescheduled=False)
        return appt

    def reschedule(self, principal: Principal, appointment_id: int, date_str: str, start_time: str, end_time: str) -> AppointmentDto:
        appt = self._get_or_404(appointment_id)
        ensure_actor(principal, AppointmentAction.RESCHEDULE, appt.doctor_id, appt.patient_id)
        next_status(appt.status, AppointmentAction.RESCHEDULE)

        day = self._future_day(date_str)
        start, end = self._validated_times(start_time, end_time)
        self._ensure_not_started(day, start_time)
        self.checker.ensure_within_availability(appt.doctor_id, day, start, end)
        self.checker.ensure_no_overlap(appt.doctor_id, day, start, end, exclude_id=appt.id)

        try:
            moved = self.repo.reschedule(appt.id, appt.status, day, normalize_time(start_time), normalize_time(end_time))
        except DuplicateKeyError:
            logger.warning(f"Reschedule of appointment {appt.id} to {day} {start_time} rejected by unique index")
            raise ConflictError(SLOT_TAKEN_MESSAGE)
        if moved is None:
            raise ConflictError("Appointment was modified by another request; reload and try again")

        logger.info(f"Appointment {appt.id} rescheduled to {day} {moved.start_time}-{moved.end_time}; status reset to pending")
        self._send_notice(moved, rescheduled=True)
        return moved

    # ------------------------
    # Status transitions
    # ------------------------
    def confirm(self, principal: Principal, appointment_id: int) -> AppointmentDto:
        return self._transition(principal, appointment_id, AppointmentAction.CONFIRM)

    def reject(self, principal: Principal, appointment_id: int) -> AppointmentDto:
        return self._transition(principal, appointment_id, AppointmentAction.REJECT)

    def complete(self, principal: Principal, appointment_id: int) -> AppointmentDto:
        return self._transition(principal, appointment_id, AppointmentAction.COMPLETE)

    def cancel(self, principal: Principal, appointment_id: int) -> AppointmentDto:
        appt = self._get_or_404(appointment_id)
        ensure_actor(principal, AppointmentAction.CANCEL, appt.doctor_id, appt.patient_id)
        if appt.status == AppointmentStatus.CANCELLED.value:
            return appt
        return self._transition(principal, appointment_id, AppointmentAction.CANCEL, appt=appt)

    def add_notes(self, principal: Principal, appointment_id: int, notes: Optional[str]) -> AppointmentDto:
        appt = self._get_or_404(appointment_id)
        ensure_actor(principal, AppointmentAction.ADD_NOTES, appt.doctor_id, appt.patient_id)
        next_status(appt.status, AppointmentAction.ADD_NOTES)
        notes = notes.strip() if notes else None
        if notes and len(notes) > NOTES_MAX_LENGTH:
            raise ValidationError(f"Notes cannot exceed {NOTES_MAX_LENGTH} characters")
        updated = self.repo.set_notes(appt.id, notes)
        if not updated:
            raise NotFoundError("Appointment not found")
        return updated

    # ------------------------
    # Reads
    # ------------------------
    def get(self, principal: Principal, appointment_id: int) -> AppointmentDto:
        appt = self._get_or_404(appointment_id)
        if principal.is_admin or principal.owns_doctor(appt.doctor_id) or principal.owns_patient(appt.patient_id):
            return appt
        raise ForbiddenError("You do not have access to this appointment")

    def list_appointments(self, principal: Principal, filters: Optional[AppointmentFilters] = None, page: int = 1, limit: Optional[int] = None) -> Tuple[List[AppointmentDto], Dict[str, int]]:
        filters = filters or AppointmentFilters()
        scoped = AppointmentFilters(
            status=filters.status if filters.status in {s.value for s in AppointmentStatus} else None,
            doctor_id=filters.doctor_id,
            patient_id=filters.patient_id,
            date_from=filters.date_from,
            date_to=filters.date_to,
        )
        if principal.role == Role.PATIENT:
            scoped.patient_id = principal.patient_id
        elif principal.role == Role.DOCTOR:
            scoped.doctor_id = principal.doctor_id

        page_num = max(1, int(page or 1))
        limit_num = max(1, min(self.max_page_size, int(limit or self.default_page_size)))
        if not principal.is_admin and scoped.patient_id is None and scoped.doctor_id is None:
            # Account without a profile yet
            items, total = [], 0
        else:
            items, total = self.repo.search(scoped, (page_num - 1) * limit_num, limit_num)
        pagination = {
            "page": page_num,
            "limit": limit_num,
            "totalItems": total,
            "totalPages": math.ceil(total / limit_num),
        }
        return items, pagination

    # ------------------------
    # Helpers
    # ------------------------
    def _transition(self, principal: Principal, appointment_id: int, action: AppointmentAction, appt: Optional[AppointmentDto] = None) -> AppointmentDto:
        appt = appt or self._get_or_404(appointment_id)
        ensure_actor(principal, action, appt.doctor_id, appt.patient_id)
        target = next_status(appt.status, action)

        if action == AppointmentAction.COMPLETE and self.clock() < combine(appt.date, appt.start_time):
            raise PreconditionError("Cannot complete an appointment before its scheduled start time")

        updated = self.repo.transition(appt.id, appt.status, target.value)
        if updated is None:
            raise ConflictError("Appointment was modified by another request; reload and try again")
        logger.info(f"Appointment {appt.id} {appt.status} -> {updated.status} by {principal.role.value} {principal.user_id}")
        return updated

    def _get_or_404(self, appointment_id: int) -> AppointmentDto:
        appt = self.repo.get_by_id(appointment_id)
        if not appt:
            raise NotFoundError("Appointment not found")
        return appt

    def _future_day(self, date_str: str) -> date:
        day = parse_date(date_str)
        if day is None:
            raise ValidationError("Date must be a valid calendar date in YYYY-MM-DD format")
        if day < self.clock().date():
            raise ValidationError("Appointment date cannot be in the past")
        return day

    def _ensure_not_started(self, day: date, start_time: str) -> None:
        if combine(day, start_time) < self.clock():
            raise ValidationError("Cannot book an appointment in the past")

    def _validated_times(self, start_time: str, end_time: str) -> Tuple[int, int]:
        start = to_minutes(start_time)
        end = to_minutes(end_time)
        if start is None or end is None:
            raise ValidationError("Times must be in HH:mm format (e.g., 09:00)")
        if end <= start:
            raise ValidationError("End time must be after start time")
        if end - start > self.max_duration_minutes:
            raise ValidationError(f"Appointments cannot be longer than {self.max_duration_minutes} minutes")
        return start, end

    def _send_notice(self, appt: AppointmentDto, rescheduled: bool) -> None:
        # Runs after the write has committed; failures must never undo or fail the booking.
        try:
            patient = self.user_repo.get_patient(appt.patient_id)
            doctor = self.user_repo.get_doctor(appt.doctor_id)
            if not patient or not patient.phone:
                logger.info(f"No contact for patient {appt.patient_id}; skipping notification for appointment {appt.id}")
                return
            notice = AppointmentNotice(
                to=patient.phone,
                patient_name=patient.name or "Patient",
                doctor_name=doctor.name if doctor else "N/A",
                date=appt.date.isoformat(),
                start_time=appt.start_time,
                end_time=appt.end_time,
            )
            if rescheduled:
                self.notifier.notify_rescheduled(notice)
            else:
                self.notifier.notify_booked(notice)
        except Exception as e:
            logger.warning(f"Notification for appointment {appt.id} failed: {e}")
