"""Students business logic layer."""

from __future__ import annotations

import logging
from datetime import timedelta

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tutorbook.core.database import get_db_session
from tutorbook.core.enums import AppointmentStatusEnum, RoleEnum
from tutorbook.modules.appointments.repository import AppointmentsRepository
from tutorbook.modules.identity.models import User
from tutorbook.modules.students.models import StudentProfile
from tutorbook.modules.students.repository import StudentsRepository
from tutorbook.modules.students.schemas import StudentProfileUpdate, StudentStatsRead
from tutorbook.modules.teachers.repository import TeachersRepository
from tutorbook.shared.exceptions import NotFoundException, UnauthorizedException
from tutorbook.shared.utils import percentage_change, utc_now

logger = logging.getLogger(__name__)


class StudentsService:
    """Students domain service."""

    def __init__(
        self,
        repository: StudentsRepository,
        appointments_repository: AppointmentsRepository,
        teachers_repository: TeachersRepository,
    ) -> None:
        self.repository = repository
        self.appointments_repository = appointments_repository
        self.teachers_repository = teachers_repository

    async def get_my_profile(self, actor: User) -> StudentProfile:
        if actor.role.name != RoleEnum.STUDENT:
            raise UnauthorizedException("Only students have a student profile")
        profile = await self.repository.get_profile_by_user_id(actor.id)
        if profile is None:
            raise NotFoundException("Student not found")
        return profile

    async def update_my_profile(self, payload: StudentProfileUpdate, actor: User) -> StudentProfile:
        profile = await self.get_my_profile(actor)
        profile = await self.repository.update_profile(profile, **payload.model_dump(exclude_none=True))
        logger.info("Student profile updated: %s", actor.id)
        return profile

    async def get_stats(self, actor: User) -> StudentStatsRead:
        """Counters plus last-30-days vs previous-30-days change."""
        if actor.role.name != RoleEnum.STUDENT:
            raise UnauthorizedException("Only students have student stats")

        by_status = await self.appointments_repository.count_by_status(student_id=actor.id)
        now = utc_now()
        month_ago = now - timedelta(days=30)
        recent = await self.appointments_repository.count_created_between(month_ago, student_id=actor.id)
        previous = await self.appointments_repository.count_created_between(
            month_ago - timedelta(days=30),
            month_ago,
            student_id=actor.id,
        )
        return StudentStatsRead(
            total_appointments=sum(by_status.values()),
            pending_appointments=by_status.get(AppointmentStatusEnum.PENDING, 0),
            approved_appointments=by_status.get(AppointmentStatusEnum.APPROVED, 0),
            available_teachers=await self.teachers_repository.count_profiles(),
            recent_appointments=recent,
            previous_period_appointments=previous,
            monthly_change_percent=percentage_change(recent, previous),
        )


async def get_students_service(session: AsyncSession = Depends(get_db_session)) -> StudentsService:
    """Dependency provider for students service."""
    return StudentsService(
        repository=StudentsRepository(session),
        appointments_repository=AppointmentsRepository(session),
        teachers_repository=TeachersRepository(session),
    )
