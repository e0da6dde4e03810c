"""Teachers business logic: directory, profiles, ratings and stats."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import timedelta
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tutorbook.core.database import get_db_session
from tutorbook.core.enums import AppointmentStatusEnum, RoleEnum
from tutorbook.modules.appointments.repository import AppointmentsRepository
from tutorbook.modules.identity.models import User
from tutorbook.modules.teachers.models import TeacherProfile
from tutorbook.modules.teachers.repository import TeachersRepository
from tutorbook.modules.teachers.schemas import (
    RatingCreate,
    RatingRead,
    RatingSummaryRead,
    StudentRatingRead,
    TeacherDirectoryItem,
    TeacherProfileUpdate,
    TeacherRatingsRead,
    TeacherStatsRead,
)
from tutorbook.shared.exceptions import (
    ConflictException,
    InvalidRequestException,
    NotFoundException,
    UnauthorizedException,
)
from tutorbook.shared.pagination import PaginationParams
from tutorbook.shared.utils import percentage_change, round_half_up, utc_now

logger = logging.getLogger(__name__)

MIN_SCORE = 1
MAX_SCORE = 5


def summarize_scores(scores: Sequence[int]) -> tuple[float, int]:
    """Return (average rounded to one decimal, count); (0, 0) when empty."""
    if not scores:
        return 0.0, 0
    return round_half_up(sum(scores) / len(scores), 1), len(scores)


class TeachersService:
    """Teachers domain service."""

    def __init__(
        self,
        repository: TeachersRepository,
        appointments_repository: AppointmentsRepository,
    ) -> None:
        self.repository = repository
        self.appointments_repository = appointments_repository

    async def _get_profile(self, teacher_id: UUID) -> TeacherProfile:
        profile = await self.repository.get_profile_by_user_id(teacher_id)
        if profile is None:
            raise NotFoundException("Teacher not found")
        return profile

    async def list_directory(self, limit: int, offset: int) -> tuple[list[TeacherDirectoryItem], int]:
        """Public teacher list, available teachers first."""
        rows, total = await self.repository.list_directory(utc_now(), limit=limit, offset=offset)
        items = [
            TeacherDirectoryItem(
                teacher_id=profile.user_id,
                name=profile.user.name,
                department=profile.department,
                subject=profile.subject,
                designation=profile.designation,
                experience_years=profile.experience_years,
                average_rating=profile.average_rating,
                total_ratings=profile.total_ratings,
                available_slots_count=future_slots,
                has_available_slots=future_slots > 0,
                completed_sessions=completed,
                approved_sessions=approved,
                pending_sessions=pending,
            )
            for profile, future_slots, completed, approved, pending in rows
        ]
        return items, total

    async def get_my_profile(self, actor: User) -> TeacherProfile:
        if actor.role.name != RoleEnum.TEACHER:
            raise UnauthorizedException("Only teachers have a teacher profile")
        return await self._get_profile(actor.id)

    async def update_my_profile(self, payload: TeacherProfileUpdate, actor: User) -> TeacherProfile:
        """Update own profile; rating summary is not writable here."""
        profile = await self.get_my_profile(actor)
        profile = await self.repository.update_profile(profile, **payload.model_dump(exclude_none=True))
        logger.info("Teacher profile updated: %s", actor.id)
        return profile

    async def rate_teacher(self, teacher_id: UUID, payload: RatingCreate, actor: User) -> RatingSummaryRead:
        """Create or replace the caller's rating and recompute the summary."""
        if actor.role.name != RoleEnum.STUDENT:
            raise UnauthorizedException("Only students can rate teachers")

        profile = await self._get_profile(teacher_id)
        if not MIN_SCORE <= payload.score <= MAX_SCORE:
            raise InvalidRequestException("Rating must be between 1 and 5")

        has_approved = await self.appointments_repository.has_appointment_with_status(
            student_id=actor.id,
            teacher_id=teacher_id,
            status=AppointmentStatusEnum.APPROVED,
        )
        if not has_approved:
            raise InvalidRequestException("You can only rate teachers after an approved appointment")

        now = utc_now()
        existing = await self.repository.get_rating(teacher_id, actor.id)
        if existing is None:
            created = await self.repository.create_rating(
                teacher_id=teacher_id,
                student_id=actor.id,
                score=payload.score,
                review=payload.review,
                rated_at=now,
            )
            if created is None:
                # A concurrent request inserted this student's rating first.
                existing = await self.repository.get_rating(teacher_id, actor.id)
                if existing is None:
                    raise ConflictException("Rating could not be saved, please retry")
        if existing is not None:
            await self.repository.update_rating(existing, payload.score, payload.review, now)

        average, total = summarize_scores(await self.repository.list_rating_scores(teacher_id))
        await self.repository.set_rating_summary(profile, average, total)
        logger.info("Teacher rated: %s by student %s - %s stars", teacher_id, actor.id, payload.score)
        return RatingSummaryRead(average_rating=average, total_ratings=total)

    async def get_student_rating(self, teacher_id: UUID, actor: User) -> StudentRatingRead:
        await self._get_profile(teacher_id)
        rating = await self.repository.get_rating(teacher_id, actor.id)
        if rating is None:
            return StudentRatingRead(has_rated=False)
        return StudentRatingRead(
            has_rated=True,
            rating=rating.score,
            review=rating.review,
            rated_at=rating.rated_at,
        )

    async def list_ratings(self, teacher_id: UUID, pagination: PaginationParams) -> TeacherRatingsRead:
        """Ratings of a teacher, most recent first."""
        profile = await self._get_profile(teacher_id)
        items, total = await self.repository.list_ratings(teacher_id, pagination.limit, pagination.offset)
        return TeacherRatingsRead(
            teacher_id=teacher_id,
            teacher_name=profile.user.name,
            subject=profile.subject,
            average_rating=profile.average_rating,
            total_ratings=profile.total_ratings,
            items=[RatingRead.model_validate(item) for item in items],
            total=total,
            limit=pagination.limit,
            offset=pagination.offset,
            has_more=pagination.offset + len(items) < total,
        )

    async def get_stats(self, actor: User) -> TeacherStatsRead:
        """Dashboard counters for the calling teacher."""
        profile = await self.get_my_profile(actor)
        now = utc_now()
        by_status = await self.appointments_repository.count_by_status(teacher_id=actor.id)

        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
        approved_today = await self.appointments_repository.count_scheduled_between(
            actor.id,
            AppointmentStatusEnum.APPROVED,
            start_of_day,
            start_of_day + timedelta(days=1),
        )

        week_ago = now - timedelta(days=7)
        recent = await self.appointments_repository.count_created_between(week_ago, teacher_id=actor.id)
        previous = await self.appointments_repository.count_created_between(
            week_ago - timedelta(days=7),
            week_ago,
            teacher_id=actor.id,
        )

        month_ago = now - timedelta(days=30)
        recent_students = await self.appointments_repository.count_distinct_students(
            actor.id,
            created_from=month_ago,
        )
        previous_students = await self.appointments_repository.count_distinct_students(
            actor.id,
            created_from=month_ago - timedelta(days=30),
            created_to=month_ago,
        )

        return TeacherStatsRead(
            total_sessions=by_status.get(AppointmentStatusEnum.COMPLETED, 0)
            + by_status.get(AppointmentStatusEnum.APPROVED, 0),
            pending_requests=by_status.get(AppointmentStatusEnum.PENDING, 0),
            approved_today=approved_today,
            total_students=await self.appointments_repository.count_distinct_students(actor.id),
            recent_appointments=recent,
            weekly_change_percent=percentage_change(recent, previous),
            recent_students=recent_students,
            student_growth_percent=percentage_change(recent_students, previous_students),
            average_rating=profile.average_rating,
            total_ratings=profile.total_ratings,
            subject=profile.subject,
            department=profile.department,
        )


async def get_teachers_service(session: AsyncSession = Depends(get_db_session)) -> TeachersService:
    """Dependency provider for teachers service."""
    return TeachersService(TeachersRepository(session), AppointmentsRepository(session))
