# Models package (re-export feature modules for stable imports)
from .users.user import User
from .health.specialty import Specialty
from .health.doctor import Doctor
from .health.patient import Patient
from .health.availability import Availability
from .health.appointment import Appointment

__all__ = [
    "User",
    "Specialty",
    "Doctor",
    "Patient",
    "Availability",
    "Appointment",
]
