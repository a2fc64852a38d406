import pytest

from medbook.application.services.availability_service import AvailabilityService
from medbook.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError

from fakes import FakeAvailabilityRepo, doctor_principal


def make_service():
    repo = FakeAvailabilityRepo()
    return AvailabilityService(repo=repo), repo


def test_add_slot_success_normalizes_times():
    svc, repo = make_service()
    slot = svc.add_slot(doctor_principal(1), 1, 1, "9:00", "12:00")
    assert slot.start_time == "09:00"
    assert slot.end_time == "12:00"
    assert repo.slots == [slot]


def test_overlapping_slot_rejected():
    svc, _ = make_service()
    svc.add_slot(doctor_principal(1), 1, 1, "08:00", "10:00")
    with pytest.raises(ConflictError):
        svc.add_slot(doctor_principal(1), 1, 1, "09:00", "11:00")


def test_back_to_back_slots_allowed():
    svc, repo = make_service()
    svc.add_slot(doctor_principal(1), 1, 1, "08:00", "10:00")
    svc.add_slot(doctor_principal(1), 1, 1, "10:00", "12:00")
    assert len(repo.slots) == 2


def test_same_window_other_day_or_doctor_allowed():
    svc, repo = make_service()
    svc.add_slot(doctor_principal(1), 1, 1, "08:00", "10:00")
    svc.add_slot(doctor_principal(1), 1, 2, "08:00", "10:00")
    svc.add_slot(doctor_principal(2), 2, 1, "08:00", "10:00")
    assert len(repo.slots) == 3


@pytest.mark.parametrize("start,end", [("10:00", "10:00"), ("11:00", "10:00"), ("25:00", "26:00"), ("ab", "10:00")])
def test_invalid_window_rejected(start, end):
    svc, _ = make_service()
    with pytest.raises(ValidationError):
        svc.add_slot(doctor_principal(1), 1, 1, start, end)


def test_invalid_day_rejected():
    svc, _ = make_service()
    with pytest.raises(ValidationError):
        svc.add_slot(doctor_principal(1), 1, 7, "08:00", "10:00")


def test_cannot_add_for_other_doctor():
    svc, _ = make_service()
    with pytest.raises(ForbiddenError):
        svc.add_slot(doctor_principal(2), 1, 1, "08:00", "10:00")


def test_unique_index_race_becomes_conflict():
    svc, repo = make_service()
    repo.fail_next_write = True
    with pytest.raises(ConflictError):
        svc.add_slot(doctor_principal(1), 1, 1, "08:00", "10:00")
    assert repo.slots == []


def test_update_excludes_itself_from_overlap_scan():
    svc, _ = make_service()
    slot = svc.add_slot(doctor_principal(1), 1, 1, "08:00", "10:00")
    updated = svc.update_slot(doctor_principal(1), slot.id, "08:30", "10:30")
    assert (updated.start_time, updated.end_time) == ("08:30", "10:30")
    assert updated.day_of_week == 1


def test_update_overlapping_sibling_rejected():
    svc, _ = make_service()
    svc.add_slot(doctor_principal(1), 1, 1, "08:00", "10:00")
    second = svc.add_slot(doctor_principal(1), 1, 1, "12:00", "14:00")
    with pytest.raises(ConflictError):
        svc.update_slot(doctor_principal(1), second.id, "09:00", "13:00")
    assert (second.start_time, second.end_time) == ("12:00", "14:00")


def test_update_and_delete_require_ownership():
    svc, _ = make_service()
    slot = svc.add_slot(doctor_principal(1), 1, 1, "08:00", "10:00")
    with pytest.raises(ForbiddenError):
        svc.update_slot(doctor_principal(2), slot.id, "08:00", "09:00")
    with pytest.raises(ForbiddenError):
        svc.delete_slot(doctor_principal(2), slot.id)


def test_missing_slot_not_found():
    svc, _ = make_service()
    with pytest.raises(NotFoundError):
        svc.update_slot(doctor_principal(1), 99, "08:00", "09:00")
    with pytest.raises(NotFoundError):
        svc.delete_slot(doctor_principal(1), 99)


def test_delete_slot():
    svc, repo = make_service()
    slot = svc.add_slot(doctor_principal(1), 1, 1, "08:00", "10:00")
    svc.delete_slot(doctor_principal(1), slot.id)
    assert repo.slots == []


def test_list_slots_ordered_by_day_then_start():
    svc, _ = make_service()
    p = doctor_principal(1)
    svc.add_slot(p, 1, 3, "08:00", "10:00")
    svc.add_slot(p, 1, 1, "13:00", "15:00")
    svc.add_slot(p, 1, 1, "08:00", "10:00")
    listed = [(s.day_of_week, s.start_time) for s in svc.list_slots(1)]
    assert listed == [(1, "08:00"), (1, "13:00"), (3, "08:00")]
