from typing import List
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from ..auth import get_current_principal, require_roles
from ..config import settings
from ..database import get_session
from ..application.principal import Principal, Role
from ..application.services.availability_service import AvailabilityService
from ..application.services.slots_service import SlotResolutionService
from ..infrastructure.persistence.sqlalchemy.repositories.appointments_repository_sql import SqlAppointmentsRepository
from ..infrastructure.persistence.sqlalchemy.repositories.availability_repository_sql import SqlAvailabilityRepository
from ..infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository
from ..schemas.availability.availability import (
    AvailabilityCreate,
    AvailabilityUpdate,
    AvailabilityResponse,
    BookableTimeResponse,
)
from ..schemas.common.common import DATE_PATTERN, ErrorResponse, MessageResponse

router = APIRouter(prefix="/doctors", tags=["Doctors"], responses={404: {"model": ErrorResponse}})


def get_availability_service(session: Session = Depends(get_session)) -> AvailabilityService:
    return AvailabilityService(repo=SqlAvailabilityRepository(session))


def get_slot_service(session: Session = Depends(get_session)) -> SlotResolutionService:
    return SlotResolutionService(
        availability=SqlAvailabilityRepository(session),
        appointments=SqlAppointmentsRepository(session),
        user_repo=SqlUserRepository(session),
        time_step_minutes=settings.TIME_STEP_MINUTES,
        max_duration_minutes=settings.MAX_APPOINTMENT_DURATION_MINUTES,
    )


@router.get("/me/availability", response_model=List[AvailabilityResponse])
def list_my_availability(
    principal: Principal = Depends(require_roles(Role.DOCTOR)),
    service: AvailabilityService = Depends(get_availability_service),
):
    return service.list_slots(principal.doctor_id)


@router.get("/{doctor_id}/availability", response_model=List[AvailabilityResponse])
def list_availability(
    doctor_id: int,
    principal: Principal = Depends(get_current_principal),
    service: AvailabilityService = Depends(get_availability_service),
):
    return service.list_slots(doctor_id)


@router.post("/availability", response_model=AvailabilityResponse, status_code=201)
def add_availability(
    payload: AvailabilityCreate,
    principal: Principal = Depends(require_roles(Role.DOCTOR)),
    service: AvailabilityService = Depends(get_availability_service),
):
    return service.add_slot(principal, principal.doctor_id, payload.day_of_week, payload.start_time, payload.end_time)


@router.put("/availability/{slot_id}", response_model=AvailabilityResponse)
def update_availability(
    slot_id: int,
    payload: AvailabilityUpdate,
    principal: Principal = Depends(require_roles(Role.DOCTOR)),
    service: AvailabilityService = Depends(get_availability_service),
):
    return service.update_slot(principal, slot_id, payload.start_time, payload.end_time)


@router.delete("/availability/{slot_id}", response_model=MessageResponse)
def delete_availability(
    slot_id: int,
    principal: Principal = Depends(require_roles(Role.DOCTOR)),
    service: AvailabilityService = Depends(get_availability_service),
):
    service.delete_slot(principal, slot_id)
    return MessageResponse(message="Slot deleted")


@router.get("/{doctor_id}/available-slots", response_model=List[AvailabilityResponse])
def get_available_slots(
    doctor_id: int,
    date: str = Query(..., description="YYYY-MM-DD"),
    principal: Principal = Depends(get_current_principal),
    service: SlotResolutionService = Depends(get_slot_service),
):
    """Availability windows for the date's weekday that have no active booking inside them."""
    return service.get_available_slots(doctor_id, date)


@router.get("/{doctor_id}/bookable-times", response_model=List[BookableTimeResponse])
def get_bookable_times(
    doctor_id: int,
    date: str = Query(..., pattern=DATE_PATTERN),
    principal: Principal = Depends(get_current_principal),
    service: SlotResolutionService = Depends(get_slot_service),
):
    """Start times on the scheduling grid with the end times each one allows."""
    return service.get_bookable_times(doctor_id, date)
