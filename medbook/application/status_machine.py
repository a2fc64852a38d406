from enum import Enum
from typing import Dict, FrozenSet, Optional

from ..exceptions import ForbiddenError, PreconditionError
from .principal import Principal, Role


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REJECTED = "rejected"


class AppointmentAction(str, Enum):
    CONFIRM = "confirm"
    REJECT = "reject"
    COMPLETE = "complete"
    CANCEL = "cancel"
    RESCHEDULE = "reschedule"
    ADD_NOTES = "add_notes"


# Statuses whose appointment still holds its time on the doctor's calendar.
OCCUPYING_STATUSES: FrozenSet[AppointmentStatus] = frozenset({
    AppointmentStatus.PENDING,
    AppointmentStatus.CONFIRMED,
    AppointmentStatus.COMPLETED,
})

TERMINAL_STATUSES: FrozenSet[AppointmentStatus] = frozenset({
    AppointmentStatus.COMPLETED,
    AppointmentStatus.CANCELLED,
    AppointmentStatus.REJECTED,
})

ALLOWED_FROM: Dict[AppointmentAction, FrozenSet[AppointmentStatus]] = {
    AppointmentAction.CONFIRM: frozenset({AppointmentStatus.PENDING}),
    AppointmentAction.REJECT: frozenset({AppointmentStatus.PENDING}),
    AppointmentAction.COMPLETE: frozenset({AppointmentStatus.CONFIRMED}),
    AppointmentAction.CANCEL: frozenset({AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED}),
    AppointmentAction.RESCHEDULE: frozenset({AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED}),
    AppointmentAction.ADD_NOTES: frozenset({
        AppointmentStatus.PENDING,
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.COMPLETED,
    }),
}

# None means the action does not change the status.
RESULTING_STATUS: Dict[AppointmentAction, Optional[AppointmentStatus]] = {
    AppointmentAction.CONFIRM: AppointmentStatus.CONFIRMED,
    AppointmentAction.REJECT: AppointmentStatus.REJECTED,
    AppointmentAction.COMPLETE: AppointmentStatus.COMPLETED,
    AppointmentAction.CANCEL: AppointmentStatus.CANCELLED,
    AppointmentAction.RESCHEDULE: AppointmentStatus.PENDING,
    AppointmentAction.ADD_NOTES: None,
}

ALLOWED_ACTORS: Dict[AppointmentAction, FrozenSet[Role]] = {
    AppointmentAction.CONFIRM: frozenset({Role.DOCTOR}),
    AppointmentAction.REJECT: frozenset({Role.DOCTOR}),
    AppointmentAction.COMPLETE: frozenset({Role.DOCTOR}),
    AppointmentAction.CANCEL: frozenset({Role.PATIENT, Role.DOCTOR}),
    AppointmentAction.RESCHEDULE: frozenset({Role.PATIENT, Role.DOCTOR}),
    AppointmentAction.ADD_NOTES: frozenset({Role.DOCTOR}),
}


def _check_tables_complete() -> None:
    for table in (ALLOWED_FROM, RESULTING_STATUS, ALLOWED_ACTORS):
        missing = set(AppointmentAction) - set(table)
        if missing:
            raise RuntimeError(f"status machine has no rule for: {sorted(a.value for a in missing)}")


_check_tables_complete()


def next_status(current, action: AppointmentAction) -> AppointmentStatus:
    """Return the status after `action`, or raise PreconditionError if it is not allowed."""
    current = AppointmentStatus(current)
    if current not in ALLOWED_FROM[action]:
        if current in TERMINAL_STATUSES:
            raise PreconditionError(f'Appointment is already {current.value}; cannot {action.value.replace("_", " ")}')
        raise PreconditionError(f'Cannot {action.value.replace("_", " ")} an appointment that is {current.value}')
    result = RESULTING_STATUS[action]
    return current if result is None else result


def ensure_actor(principal: Principal, action: AppointmentAction, doctor_id: int, patient_id: int) -> None:
    """Only the owning doctor/patient (as allowed for `action`) may act on an appointment."""
    roles = ALLOWED_ACTORS[action]
    if principal.role not in roles:
        raise ForbiddenError(f"Role '{principal.role.value}' may not {action.value.replace('_', ' ')} appointments")
    if principal.role == Role.DOCTOR and not principal.owns_doctor(doctor_id):
        raise ForbiddenError("You can only manage your own appointments")
    if principal.role == Role.PATIENT and not principal.owns_patient(patient_id):
        raise ForbiddenError("You can only manage your own appointments")
