"""Appointment business logic: booking and the status state machine."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tutorbook.core.database import get_db_session
from tutorbook.core.enums import AppointmentStatusEnum, BookingTypeEnum, RoleEnum
from tutorbook.modules.appointments.models import Appointment
from tutorbook.modules.appointments.reconciliation import AppointmentReconciler
from tutorbook.modules.appointments.repository import AppointmentsRepository
from tutorbook.modules.appointments.schemas import AppointmentCreate, AppointmentStatusUpdate
from tutorbook.modules.identity.models import User
from tutorbook.modules.scheduling.repository import SchedulingRepository
from tutorbook.modules.scheduling.service import SchedulingService
from tutorbook.modules.teachers.repository import TeachersRepository
from tutorbook.shared.exceptions import (
    ConflictException,
    InvalidRequestException,
    NotFoundException,
    UnauthorizedException,
)
from tutorbook.shared.utils import normalize_timestamp, utc_now

logger = logging.getLogger(__name__)

_SLOT_BOOKING_ALIASES = {"slot_booking", "available"}

# Teacher-triggered transitions; completed and canceled are terminal.
_ALLOWED_TRANSITIONS: dict[AppointmentStatusEnum, set[AppointmentStatusEnum]] = {
    AppointmentStatusEnum.PENDING: {AppointmentStatusEnum.APPROVED, AppointmentStatusEnum.CANCELED},
    AppointmentStatusEnum.APPROVED: {AppointmentStatusEnum.CANCELED},
}
_TEACHER_TARGETS = {AppointmentStatusEnum.APPROVED, AppointmentStatusEnum.CANCELED}


class AppointmentsService:
    """Book appointments and move them through their lifecycle."""

    def __init__(
        self,
        repository: AppointmentsRepository,
        scheduling_service: SchedulingService,
        teachers_repository: TeachersRepository,
        reconciler: AppointmentReconciler | None = None,
    ) -> None:
        self.repository = repository
        self.scheduling_service = scheduling_service
        self.teachers_repository = teachers_repository
        self.reconciler = reconciler or AppointmentReconciler(repository)

    async def book(self, payload: AppointmentCreate, actor: User) -> Appointment:
        """Create a pending appointment against a slot or as a free-form request.

        The slot itself stays published until the teacher approves.
        """
        if actor.role.name != RoleEnum.STUDENT:
            raise UnauthorizedException("Only students can book appointments")

        profile = await self.teachers_repository.get_profile_by_user_id(payload.teacher_id)
        if profile is None:
            raise NotFoundException("Teacher not found")

        date_time = normalize_timestamp(payload.date_time)
        if payload.booking_type in _SLOT_BOOKING_ALIASES:
            if not await self.scheduling_service.is_slot_available(payload.teacher_id, date_time):
                raise InvalidRequestException("Selected time slot is not available")
            booking_type = BookingTypeEnum.SLOT_BOOKING
        else:
            if date_time <= utc_now():
                raise InvalidRequestException("Appointment time must be in the future")
            booking_type = BookingTypeEnum.CUSTOM_REQUEST

        if await self.repository.find_active_at(payload.teacher_id, date_time) is not None:
            raise ConflictException("This time slot is already booked or pending approval")

        appointment = await self.repository.create_appointment(
            student_id=actor.id,
            teacher_id=payload.teacher_id,
            date_time=date_time,
            purpose=payload.purpose,
            booking_type=booking_type,
        )
        logger.info(
            "Appointment booked: %s - student %s with teacher %s at %s (%s)",
            appointment.id,
            actor.id,
            payload.teacher_id,
            date_time.isoformat(),
            booking_type,
        )
        return appointment

    async def update_status(
        self,
        appointment_id: UUID,
        payload: AppointmentStatusUpdate,
        actor: User,
    ) -> Appointment:
        """Apply a teacher decision and keep the slot store in step."""
        if actor.role.name != RoleEnum.TEACHER:
            raise UnauthorizedException("Only teachers can update appointment status")

        try:
            target = AppointmentStatusEnum(payload.status.strip().lower())
        except ValueError:
            target = None
        if target not in _TEACHER_TARGETS:
            raise InvalidRequestException("Invalid status. Must be 'approved' or 'canceled'")

        await self.reconciler.reconcile_safely()

        appointment = await self.repository.get_for_teacher(appointment_id, actor.id)
        if appointment is None:
            raise NotFoundException("Appointment not found")

        current = appointment.status
        if target not in _ALLOWED_TRANSITIONS.get(current, set()):
            raise ConflictException(f"Cannot change appointment status from {current} to {target}")

        if appointment.booking_type == BookingTypeEnum.SLOT_BOOKING:
            if target == AppointmentStatusEnum.APPROVED:
                await self.scheduling_service.remove_slot(appointment.teacher_id, appointment.date_time)
            elif current == AppointmentStatusEnum.APPROVED:
                restored = await self.scheduling_service.restore_slot(
                    appointment.teacher_id,
                    appointment.date_time,
                )
                if restored:
                    logger.info("Slot restored after cancellation: %s", appointment.date_time.isoformat())

        appointment.status = target
        await self.repository.save(appointment)
        logger.info("Appointment %s: %s -> %s by teacher %s", appointment.id, current, target, actor.id)
        return appointment

    async def list_appointments(self, actor: User, limit: int, offset: int) -> tuple[list[Appointment], int]:
        """Caller's appointments, newest date first, after reconciling expired ones."""
        if actor.role.name not in (RoleEnum.STUDENT, RoleEnum.TEACHER):
            raise UnauthorizedException("Only students and teachers have appointments")

        await self.reconciler.reconcile_safely()
        return await self.repository.list_for_user(actor.id, actor.role.name, limit, offset)


async def get_appointments_service(session: AsyncSession = Depends(get_db_session)) -> AppointmentsService:
    """Dependency provider for appointments service."""
    teachers_repository = TeachersRepository(session)
    return AppointmentsService(
        repository=AppointmentsRepository(session),
        scheduling_service=SchedulingService(SchedulingRepository(session), teachers_repository),
        teachers_repository=teachers_repository,
    )
