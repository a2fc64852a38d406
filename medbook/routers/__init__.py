# Routers package
from . import admin_router
from . import appointments_router
from . import doctors_router

__all__ = [
    "admin_router",
    "appointments_router",
    "doctors_router",
]
