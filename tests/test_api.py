from datetime import date

import pytest
from fastapi.testclient import TestClient

from medbook.database import get_session
from medbook.main import create_app
from medbook.utils import create_jwt_token

from fakes import next_monday

DAY = next_monday(date.today()).isoformat()
REASON = "Follow-up on blood pressure"


@pytest.fixture
def client(session, people):
    app = create_app()
    app.dependency_overrides[get_session] = lambda: session
    return TestClient(app)


def auth(user_id: str) -> dict:
    return {"Authorization": f"Bearer {create_jwt_token({'sub': user_id})}"}


@pytest.fixture
def doctor(people):
    return auth(people["doctor_user"])


@pytest.fixture
def patient(people):
    return auth(people["patient_user"])


@pytest.fixture
def other(people):
    return auth(people["other_user"])


@pytest.fixture
def admin(people):
    return auth(people["admin"])


def add_morning(client, doctor):
    res = client.post("/doctors/availability", json={"day_of_week": 1, "start_time": "09:00", "end_time": "12:00"}, headers=doctor)
    assert res.status_code == 201
    return res.json()


def book(client, headers, people, start="09:00", end="09:30"):
    return client.post(
        "/appointments/",
        json={"doctor_id": people["doctor"], "date": DAY, "start_time": start, "end_time": end, "reason": REASON},
        headers=headers,
    )


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"
    assert res.headers["X-Content-Type-Options"] == "nosniff"


def test_requires_token(client, people):
    res = client.get(f"/doctors/{people['doctor']}/availability")
    assert res.status_code == 401
    assert res.json() == {"success": False, "data": None, "error": "Authorization token is required"}


def test_invalid_token_rejected(client, people):
    res = client.get(f"/doctors/{people['doctor']}/availability", headers={"Authorization": "Bearer nope"})
    assert res.status_code == 401


def test_availability_crud_and_overlap(client, doctor, people):
    slot = add_morning(client, doctor)
    res = client.post("/doctors/availability", json={"day_of_week": 1, "start_time": "11:00", "end_time": "13:00"}, headers=doctor)
    assert res.status_code == 409

    res = client.put(f"/doctors/availability/{slot['id']}", json={"start_time": "08:00", "end_time": "12:00"}, headers=doctor)
    assert res.status_code == 200
    assert res.json()["start_time"] == "08:00"

    listed = client.get("/doctors/me/availability", headers=doctor).json()
    assert [(s["day_of_week"], s["start_time"]) for s in listed] == [(1, "08:00")]

    assert client.delete(f"/doctors/availability/{slot['id']}", headers=doctor).status_code == 200
    assert client.delete(f"/doctors/availability/{slot['id']}", headers=doctor).status_code == 404


def test_patient_cannot_manage_availability(client, patient):
    res = client.post("/doctors/availability", json={"day_of_week": 1, "start_time": "09:00", "end_time": "10:00"}, headers=patient)
    assert res.status_code == 403


def test_bad_time_format_is_422(client, doctor):
    res = client.post("/doctors/availability", json={"day_of_week": 1, "start_time": "9am", "end_time": "10:00"}, headers=doctor)
    assert res.status_code == 422


def test_booking_flow(client, doctor, patient, other, people):
    add_morning(client, doctor)

    res = book(client, patient, people)
    assert res.status_code == 201
    appt = res.json()
    assert appt["status"] == "pending"
    assert appt["date"] == DAY

    slots = client.get(f"/doctors/{people['doctor']}/available-slots", params={"date": DAY}, headers=patient)
    assert slots.status_code == 200
    assert slots.json() == []

    times = client.get(f"/doctors/{people['doctor']}/bookable-times", params={"date": DAY}, headers=patient).json()
    assert times[0]["start_time"] == "09:30"

    clash = book(client, other, people, "09:15", "09:45")
    assert clash.status_code == 409
    assert clash.json()["error"] == "This slot is no longer available"

    res = client.patch(f"/appointments/{appt['id']}/approve", headers=doctor)
    assert res.json()["status"] == "confirmed"

    res = client.patch(f"/appointments/{appt['id']}/reschedule", json={"date": DAY, "start_time": "10:00", "end_time": "10:30"}, headers=patient)
    assert res.status_code == 200
    assert (res.json()["start_time"], res.json()["status"]) == ("10:00", "pending")

    res = client.patch(f"/appointments/{appt['id']}/notes", json={"notes": "Bring readings"}, headers=doctor)
    assert res.json()["notes"] == "Bring readings"

    res = client.patch(f"/appointments/{appt['id']}/cancel", headers=patient)
    assert res.json()["status"] == "cancelled"
    res = client.patch(f"/appointments/{appt['id']}/approve", headers=doctor)
    assert res.status_code == 400

    assert book(client, other, people).status_code == 201


def test_complete_before_start_rejected(client, doctor, patient, people):
    add_morning(client, doctor)
    appt = book(client, patient, people).json()
    client.patch(f"/appointments/{appt['id']}/approve", headers=doctor)
    res = client.patch(f"/appointments/{appt['id']}/complete", headers=doctor)
    assert res.status_code == 400
    assert res.json()["success"] is False


def test_visibility_and_listing(client, doctor, patient, other, admin, people):
    add_morning(client, doctor)
    appt = book(client, patient, people).json()
    book(client, other, people, "10:00", "10:30")

    assert client.get(f"/appointments/{appt['id']}", headers=other).status_code == 403
    assert client.get("/appointments/999", headers=patient).status_code == 404

    mine = client.get("/appointments/", headers=patient).json()
    assert [a["id"] for a in mine["items"]] == [appt["id"]]
    assert mine["pagination"] == {"page": 1, "limit": 10, "totalItems": 1, "totalPages": 1}

    everyone = client.get("/appointments/", params={"limit": 1, "page": 2}, headers=admin).json()
    assert everyone["pagination"]["totalItems"] == 2
    assert len(everyone["items"]) == 1

    assert client.get("/appointments/", params={"status": "pending"}, headers=doctor).json()["pagination"]["totalItems"] == 2


def test_admin_moderation(client, doctor, patient, admin, people):
    res = client.patch(f"/admin/users/{people['doctor_user']}/unapprove", headers=admin)
    assert res.json()["is_approved"] is False
    res = client.post("/doctors/availability", json={"day_of_week": 1, "start_time": "09:00", "end_time": "10:00"}, headers=doctor)
    assert res.status_code == 403

    client.patch(f"/admin/users/{people['doctor_user']}/approve", headers=admin)
    client.patch(f"/admin/users/{people['patient_user']}/block", headers=admin)
    assert client.get("/appointments/", headers=patient).status_code == 403
    client.patch(f"/admin/users/{people['patient_user']}/unblock", headers=admin)
    assert client.get("/appointments/", headers=patient).status_code == 200

    assert client.patch(f"/admin/users/{people['patient_user']}/approve", headers=doctor).status_code == 403

    assert client.delete(f"/admin/users/{people['patient_user']}", headers=admin).status_code == 200
    assert client.get("/appointments/", headers=patient).status_code == 401


def test_shutdown_stops_background_notifier(monkeypatch):
    import medbook.main as main_module
    from medbook.infrastructure.notifications.background_notifier import BackgroundNotifier
    from medbook.infrastructure.notifications.log_notifier import LoggingNotifier

    class RecordingExecutor:
        def __init__(self):
            self.stopped = False

        def shutdown(self, wait=True):
            self.stopped = True

    executor = RecordingExecutor()
    notifier = BackgroundNotifier(LoggingNotifier(), executor=executor)
    monkeypatch.setattr(main_module, "create_db_and_tables", lambda: None)
    monkeypatch.setattr(main_module, "get_notifier", lambda: notifier)

    with TestClient(create_app()) as client:
        assert client.get("/health").status_code == 200
        assert executor.stopped is False
    assert executor.stopped is True
