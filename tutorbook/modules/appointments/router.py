"""Appointments API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from tutorbook.core.enums import RoleEnum
from tutorbook.modules.appointments.schemas import (
    AppointmentCreate,
    AppointmentRead,
    AppointmentStatusUpdate,
)
from tutorbook.modules.appointments.service import AppointmentsService, get_appointments_service
from tutorbook.modules.identity.service import require_roles
from tutorbook.shared.pagination import Page, build_page, get_pagination_params

router = APIRouter(prefix="/appointments", tags=["appointments"])


@router.post("", response_model=AppointmentRead, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    payload: AppointmentCreate,
    service: AppointmentsService = Depends(get_appointments_service),
    current_user=Depends(require_roles(RoleEnum.STUDENT)),
) -> AppointmentRead:
    """Book a slot or request a custom time."""
    appointment = await service.book(payload, current_user)
    return AppointmentRead.model_validate(appointment)


@router.get("/my", response_model=Page[AppointmentRead])
async def list_my_appointments(
    pagination=Depends(get_pagination_params),
    service: AppointmentsService = Depends(get_appointments_service),
    current_user=Depends(require_roles(RoleEnum.STUDENT, RoleEnum.TEACHER)),
) -> Page[AppointmentRead]:
    """List current user's appointments."""
    items, total = await service.list_appointments(current_user, pagination.limit, pagination.offset)
    return build_page([AppointmentRead.model_validate(item) for item in items], total, pagination)


@router.patch("/{appointment_id}/status", response_model=AppointmentRead)
async def update_appointment_status(
    appointment_id: UUID,
    payload: AppointmentStatusUpdate,
    service: AppointmentsService = Depends(get_appointments_service),
    current_user=Depends(require_roles(RoleEnum.TEACHER)),
) -> AppointmentRead:
    """Approve or cancel an appointment."""
    appointment = await service.update_status(appointment_id, payload, current_user)
    return AppointmentRead.model_validate(appointment)
