from datetime import timedelta

import pytest

from medbook.application.services.slots_service import SlotResolutionService
from medbook.exceptions import NotFoundError, ValidationError

from fakes import MONDAY, NOW, FakeApptRepo, FakeAvailabilityRepo, FakeUserRepo


def make_service(clock=lambda: NOW):
    availability = FakeAvailabilityRepo()
    appts = FakeApptRepo()
    users = FakeUserRepo()
    users.add_doctor(1)
    svc = SlotResolutionService(availability=availability, appointments=appts, user_repo=users, clock=clock)
    return svc, availability, appts, users


def test_free_window_returned_unmodified():
    svc, availability, _, _ = make_service()
    availability.create(1, 1, "09:00", "12:00")
    slots = svc.get_available_slots(1, MONDAY.isoformat())
    assert [(s.start_time, s.end_time) for s in slots] == [("09:00", "12:00")]


def test_window_with_booking_is_excluded():
    svc, availability, appts, _ = make_service()
    availability.create(1, 1, "09:00", "12:00")
    availability.create(1, 1, "13:00", "15:00")
    appts.add(10, 1, MONDAY, "09:00", "10:00")
    slots = svc.get_available_slots(1, MONDAY.isoformat())
    assert [(s.start_time, s.end_time) for s in slots] == [("13:00", "15:00")]


@pytest.mark.parametrize("status", ["cancelled", "rejected"])
def test_released_bookings_do_not_block(status):
    svc, availability, appts, _ = make_service()
    availability.create(1, 1, "09:00", "12:00")
    appts.add(10, 1, MONDAY, "09:00", "10:00", status=status)
    assert len(svc.get_available_slots(1, MONDAY.isoformat())) == 1


def test_completed_booking_still_occupies():
    svc, availability, appts, _ = make_service()
    availability.create(1, 1, "09:00", "12:00")
    appts.add(10, 1, MONDAY, "09:00", "10:00", status="completed")
    assert svc.get_available_slots(1, MONDAY.isoformat()) == []


def test_booking_on_other_date_ignored():
    svc, availability, appts, _ = make_service()
    availability.create(1, 1, "09:00", "12:00")
    appts.add(10, 1, MONDAY + timedelta(days=7), "09:00", "10:00")
    assert len(svc.get_available_slots(1, MONDAY.isoformat())) == 1


def test_only_matching_weekday_considered():
    svc, availability, _, _ = make_service()
    availability.create(1, 2, "09:00", "12:00")
    assert svc.get_available_slots(1, MONDAY.isoformat()) == []


def test_read_is_idempotent():
    svc, availability, appts, _ = make_service()
    availability.create(1, 1, "09:00", "12:00")
    availability.create(1, 1, "13:00", "15:00")
    appts.add(10, 1, MONDAY, "13:30", "14:00")
    first = svc.get_available_slots(1, MONDAY.isoformat())
    second = svc.get_available_slots(1, MONDAY.isoformat())
    assert first == second


def test_invalid_date_rejected():
    svc, _, _, _ = make_service()
    with pytest.raises(ValidationError):
        svc.get_available_slots(1, "2026-13-01")


def test_unknown_or_unapproved_doctor_not_found():
    svc, _, _, users = make_service()
    with pytest.raises(NotFoundError):
        svc.get_available_slots(2, MONDAY.isoformat())
    users.add_doctor(3, approved=False)
    with pytest.raises(NotFoundError):
        svc.get_available_slots(3, MONDAY.isoformat())


def test_bookable_times_follow_grid_and_bookings():
    svc, availability, appts, _ = make_service()
    availability.create(1, 1, "09:00", "10:30")
    appts.add(10, 1, MONDAY, "09:30", "10:00")
    options = {o.start_time: o.end_times for o in svc.get_bookable_times(1, MONDAY.isoformat())}
    assert options["09:00"] == ["09:15", "09:30"]
    assert options["09:15"] == ["09:30"]
    assert "09:30" not in options
    assert "09:45" not in options
    assert options["10:00"] == ["10:15", "10:30"]
    assert "10:15" in options


def test_bookable_times_cap_duration():
    svc, availability, _, _ = make_service()
    availability.create(1, 1, "09:00", "12:00")
    options = {o.start_time: o.end_times for o in svc.get_bookable_times(1, MONDAY.isoformat())}
    assert options["09:00"][-1] == "10:00"
    assert options["11:45"] == ["12:00"]


def test_bookable_times_skip_elapsed_starts_today():
    monday_morning = NOW.replace(year=MONDAY.year, month=MONDAY.month, day=MONDAY.day, hour=9, minute=20)
    svc, availability, _, _ = make_service(clock=lambda: monday_morning)
    availability.create(1, 1, "09:00", "10:00")
    starts = [o.start_time for o in svc.get_bookable_times(1, MONDAY.isoformat())]
    assert starts == ["09:30", "09:45"]


def test_bookable_times_empty_for_past_date():
    svc, availability, _, _ = make_service()
    availability.create(1, 1, "09:00", "10:00")
    past_monday = MONDAY - timedelta(days=14)
    assert svc.get_bookable_times(1, past_monday.isoformat()) == []
