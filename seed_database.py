#!/usr/bin/env python3
"""
Development seed script
Creates a specialty, an admin, an approved doctor with weekday availability and a
patient, then prints bearer tokens for trying the API locally.
"""
import os
import sys
from datetime import date

from sqlmodel import Session, select

# Add the project directory to the path
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from medbook.config import settings
from medbook.database import engine, create_db_and_tables
from medbook.db.models import Availability, Doctor, Patient, Specialty, User
from medbook.utils import create_jwt_token


def _get_or_create_user(session: Session, email: str, name: str, role: str, is_approved: bool) -> User:
    user = session.exec(select(User).where(User.email == email)).first()
    if user:
        return user
    user = User(name=name, email=email, role=role, is_approved=is_approved)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def seed_database():
    """
    Insert demo records (idempotent)
    """
    try:
        print(f"Connecting to database {settings.DATABASE_URL}...")
        create_db_and_tables()

        with Session(engine) as session:
            specialty = session.exec(select(Specialty).where(Specialty.name == "General Practice")).first()
            if not specialty:
                specialty = Specialty(name="General Practice", description="Primary care and routine checkups")
                session.add(specialty)
                session.commit()
                session.refresh(specialty)

            admin = _get_or_create_user(session, "admin@medbook.local", "Admin", "admin", True)
            doctor_user = _get_or_create_user(session, "doctor@medbook.local", "Dr. Sara Ahmed", "doctor", True)
            patient_user = _get_or_create_user(session, "patient@medbook.local", "Omar Hassan", "patient", True)

            doctor = session.exec(select(Doctor).where(Doctor.user_id == doctor_user.id)).first()
            if not doctor:
                doctor = Doctor(user_id=doctor_user.id, specialty_id=specialty.id, phone="+201000000001",
                                bio="Family physician", address="Cairo")
                session.add(doctor)
                session.commit()
                session.refresh(doctor)
                print("Created doctor profile")

            patient = session.exec(select(Patient).where(Patient.user_id == patient_user.id)).first()
            if not patient:
                patient = Patient(user_id=patient_user.id, phone="+201000000002", date_of_birth=date(1990, 5, 17))
                session.add(patient)
                session.commit()
                print("Created patient profile")

            has_slots = session.exec(select(Availability).where(Availability.doctor_id == doctor.id)).first()
            if not has_slots:
                # Monday to Thursday mornings and afternoons
                for day in (1, 2, 3, 4):
                    session.add(Availability(doctor_id=doctor.id, day_of_week=day, start_time="09:00", end_time="12:00"))
                    session.add(Availability(doctor_id=doctor.id, day_of_week=day, start_time="13:00", end_time="16:00"))
                session.commit()
                print("Created weekly availability")

            print("Seed completed successfully")
            for label, user in (("admin", admin), ("doctor", doctor_user), ("patient", patient_user)):
                print(f"{label:8} {create_jwt_token({'sub': user.id, 'role': user.role})}")
        return True

    except Exception as e:
        print(f"Seed failed: {e}")
        return False

if __name__ == "__main__":
    success = seed_database()
    sys.exit(0 if success else 1)
