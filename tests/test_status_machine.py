import pytest

from medbook.application.status_machine import (
    ALLOWED_ACTORS,
    ALLOWED_FROM,
    RESULTING_STATUS,
    TERMINAL_STATUSES,
    AppointmentAction,
    AppointmentStatus,
    ensure_actor,
    next_status,
)
from medbook.exceptions import ForbiddenError, PreconditionError

from fakes import admin_principal, doctor_principal, patient_principal


def test_every_action_has_rules():
    for table in (ALLOWED_FROM, RESULTING_STATUS, ALLOWED_ACTORS):
        assert set(table) == set(AppointmentAction)


def test_forward_transitions():
    assert next_status("pending", AppointmentAction.CONFIRM) == AppointmentStatus.CONFIRMED
    assert next_status("pending", AppointmentAction.REJECT) == AppointmentStatus.REJECTED
    assert next_status("confirmed", AppointmentAction.COMPLETE) == AppointmentStatus.COMPLETED
    assert next_status("confirmed", AppointmentAction.CANCEL) == AppointmentStatus.CANCELLED
    assert next_status("pending", AppointmentAction.CANCEL) == AppointmentStatus.CANCELLED


def test_reschedule_jumps_back_to_pending():
    assert next_status("confirmed", AppointmentAction.RESCHEDULE) == AppointmentStatus.PENDING
    assert next_status("pending", AppointmentAction.RESCHEDULE) == AppointmentStatus.PENDING


def test_notes_keep_status():
    assert next_status("completed", AppointmentAction.ADD_NOTES) == AppointmentStatus.COMPLETED


def test_pending_cannot_complete():
    with pytest.raises(PreconditionError):
        next_status("pending", AppointmentAction.COMPLETE)


@pytest.mark.parametrize("status", sorted(s.value for s in TERMINAL_STATUSES))
@pytest.mark.parametrize("action", [a for a in AppointmentAction if a != AppointmentAction.ADD_NOTES])
def test_terminal_states_allow_no_transition(status, action):
    with pytest.raises(PreconditionError):
        next_status(status, action)


def test_only_owning_doctor_confirms():
    ensure_actor(doctor_principal(1), AppointmentAction.CONFIRM, doctor_id=1, patient_id=10)
    with pytest.raises(ForbiddenError):
        ensure_actor(doctor_principal(2), AppointmentAction.CONFIRM, doctor_id=1, patient_id=10)
    with pytest.raises(ForbiddenError):
        ensure_actor(patient_principal(10), AppointmentAction.CONFIRM, doctor_id=1, patient_id=10)


def test_cancel_by_owning_patient_or_doctor():
    ensure_actor(patient_principal(10), AppointmentAction.CANCEL, doctor_id=1, patient_id=10)
    ensure_actor(doctor_principal(1), AppointmentAction.CANCEL, doctor_id=1, patient_id=10)
    with pytest.raises(ForbiddenError):
        ensure_actor(patient_principal(11), AppointmentAction.CANCEL, doctor_id=1, patient_id=10)
    with pytest.raises(ForbiddenError):
        ensure_actor(admin_principal(), AppointmentAction.CANCEL, doctor_id=1, patient_id=10)
