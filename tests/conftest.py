from datetime import date

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session

from medbook.database import build_engine, create_db_and_tables
from medbook.db.models import Doctor, Patient, Specialty, User


@pytest.fixture
def engine():
    test_engine = build_engine("sqlite://", poolclass=StaticPool)
    create_db_and_tables(test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture
def people(session):
    """An approved doctor, an admin and two patients."""
    specialty = Specialty(name="General Practice")
    admin = User(name="Admin", email="admin@x.test", role="admin")
    doc_user = User(name="Dr. Who", email="doc@x.test", role="doctor", is_approved=True)
    pat_user = User(name="Pat", email="pat@x.test", role="patient")
    other_user = User(name="Sam", email="sam@x.test", role="patient")
    session.add_all([specialty, admin, doc_user, pat_user, other_user])
    session.commit()

    doctor = Doctor(user_id=doc_user.id, specialty_id=specialty.id, phone="+15550000001")
    patient = Patient(user_id=pat_user.id, phone="+15550000002", date_of_birth=date(1990, 1, 1))
    other = Patient(user_id=other_user.id, phone="+15550000003", date_of_birth=date(1985, 6, 2))
    session.add_all([doctor, patient, other])
    session.commit()
    return {
        "admin": admin.id,
        "doctor_user": doc_user.id,
        "patient_user": pat_user.id,
        "other_user": other_user.id,
        "doctor": doctor.id,
        "patient": patient.id,
        "other": other.id,
    }
