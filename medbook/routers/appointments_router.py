from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session
import logging

from ..auth import get_current_principal, require_roles
from ..config import settings
from ..database import get_session
from ..application.ports.appointments_repo import AppointmentFilters
from ..application.principal import Principal, Role
from ..application.services.appointments_service import AppointmentsService
from ..application.services.conflict_checker import ConflictChecker
from ..infrastructure.notifications.factory import get_notifier
from ..infrastructure.persistence.sqlalchemy.repositories.appointments_repository_sql import SqlAppointmentsRepository
from ..infrastructure.persistence.sqlalchemy.repositories.availability_repository_sql import SqlAvailabilityRepository
from ..infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository
from ..schemas.appointments.appointment import (
    AppointmentCreate,
    AppointmentListResponse,
    AppointmentNotes,
    AppointmentReschedule,
    AppointmentResponse,
)
from ..schemas.common.common import ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/appointments",
    tags=["Appointments"],
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)


def get_appointments_service(session: Session = Depends(get_session)) -> AppointmentsService:
    appointments = SqlAppointmentsRepository(session)
    return AppointmentsService(
        repo=appointments,
        user_repo=SqlUserRepository(session),
        checker=ConflictChecker(appointments=appointments, availability=SqlAvailabilityRepository(session)),
        notifier=get_notifier(),
        max_duration_minutes=settings.MAX_APPOINTMENT_DURATION_MINUTES,
        default_page_size=settings.DEFAULT_PAGE_SIZE,
        max_page_size=settings.MAX_PAGE_SIZE,
    )


@router.post("/", response_model=AppointmentResponse, status_code=201)
def book_appointment(
    payload: AppointmentCreate,
    principal: Principal = Depends(require_roles(Role.PATIENT)),
    service: AppointmentsService = Depends(get_appointments_service),
):
    return service.book(principal, payload.doctor_id, payload.date, payload.start_time, payload.end_time, payload.reason)


@router.get("/", response_model=AppointmentListResponse)
def list_appointments(
    status: Optional[str] = None,
    doctor_id: Optional[int] = None,
    patient_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    principal: Principal = Depends(get_current_principal),
    service: AppointmentsService = Depends(get_appointments_service),
):
    filters = AppointmentFilters(
        status=status,
        doctor_id=doctor_id,
        patient_id=patient_id,
        date_from=date_from,
        date_to=date_to,
    )
    items, pagination = service.list_appointments(principal, filters, page=page, limit=limit)
    return {"items": items, "pagination": pagination}


@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(
    appointment_id: int,
    principal: Principal = Depends(get_current_principal),
    service: AppointmentsService = Depends(get_appointments_service),
):
    return service.get(principal, appointment_id)


@router.patch("/{appointment_id}/approve", response_model=AppointmentResponse)
def approve_appointment(
    appointment_id: int,
    principal: Principal = Depends(require_roles(Role.DOCTOR)),
    service: AppointmentsService = Depends(get_appointments_service),
):
    return service.confirm(principal, appointment_id)


@router.patch("/{appointment_id}/reject", response_model=AppointmentResponse)
def reject_appointment(
    appointment_id: int,
    principal: Principal = Depends(require_roles(Role.DOCTOR)),
    service: AppointmentsService = Depends(get_appointments_service),
):
    return service.reject(principal, appointment_id)


@router.patch("/{appointment_id}/complete", response_model=AppointmentResponse)
def complete_appointment(
    appointment_id: int,
    principal: Principal = Depends(require_roles(Role.DOCTOR)),
    service: AppointmentsService = Depends(get_appointments_service),
):
    return service.complete(principal, appointment_id)


@router.patch("/{appointment_id}/cancel", response_model=AppointmentResponse)
def cancel_appointment(
    appointment_id: int,
    principal: Principal = Depends(require_roles(Role.PATIENT, Role.DOCTOR)),
    service: AppointmentsService = Depends(get_appointments_service),
):
    return service.cancel(principal, appointment_id)


@router.patch("/{appointment_id}/reschedule", response_model=AppointmentResponse)
def reschedule_appointment(
    appointment_id: int,
    payload: AppointmentReschedule,
    principal: Principal = Depends(require_roles(Role.PATIENT, Role.DOCTOR)),
    service: AppointmentsService = Depends(get_appointments_service),
):
    return service.reschedule(principal, appointment_id, payload.date, payload.start_time, payload.end_time)


@router.patch("/{appointment_id}/notes", response_model=AppointmentResponse)
def add_notes(
    appointment_id: int,
    payload: AppointmentNotes,
    principal: Principal = Depends(require_roles(Role.DOCTOR)),
    service: AppointmentsService = Depends(get_appointments_service),
):
    return service.add_notes(principal, appointment_id, payload.notes)
