"""Teachers repository layer."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import Select, case, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tutorbook.core.enums import AppointmentStatusEnum
from tutorbook.modules.appointments.models import Appointment
from tutorbook.modules.scheduling.models import AvailabilitySlot
from tutorbook.modules.teachers.models import TeacherProfile, TeacherRating


class TeachersRepository:
    """DB operations for teachers domain."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_profile(
        self,
        user_id: UUID,
        department: str | None = None,
        subject: str | None = None,
    ) -> TeacherProfile:
        profile = TeacherProfile(
            user_id=user_id,
            department=department,
            subject=subject,
            qualifications=[],
            specializations=[],
        )
        self.session.add(profile)
        await self.session.flush()
        return profile

    async def get_profile_by_user_id(self, user_id: UUID) -> TeacherProfile | None:
        stmt = (
            select(TeacherProfile)
            .options(selectinload(TeacherProfile.user))
            .where(TeacherProfile.user_id == user_id)
        )
        return await self.session.scalar(stmt)

    async def update_profile(self, profile: TeacherProfile, **changes) -> TeacherProfile:
        for key, value in changes.items():
            if value is not None:
                setattr(profile, key, value)
        await self.session.flush()
        return profile

    async def count_profiles(self) -> int:
        return int((await self.session.scalar(select(func.count(TeacherProfile.id)))) or 0)

    async def list_directory(self, now: datetime, limit: int, offset: int) -> tuple[list[tuple], int]:
        """Teacher profiles with slot and session counters.

        Rows are (profile, future_slots, completed, approved, pending), ordered
        by availability, then rating, then completed sessions.
        """
        future_slots = (
            select(func.count(AvailabilitySlot.id))
            .where(
                AvailabilitySlot.teacher_id == TeacherProfile.user_id,
                AvailabilitySlot.start_at > now,
            )
            .correlate(TeacherProfile)
            .scalar_subquery()
        )

        def _count_status(status: AppointmentStatusEnum):
            return (
                select(func.count(Appointment.id))
                .where(
                    Appointment.teacher_id == TeacherProfile.user_id,
                    Appointment.status == status,
                )
                .correlate(TeacherProfile)
                .scalar_subquery()
            )

        completed = _count_status(AppointmentStatusEnum.COMPLETED)
        approved = _count_status(AppointmentStatusEnum.APPROVED)
        pending = _count_status(AppointmentStatusEnum.PENDING)

        total = await self.count_profiles()
        stmt: Select = (
            select(
                TeacherProfile,
                future_slots.label("future_slots"),
                completed.label("completed_sessions"),
                approved.label("approved_sessions"),
                pending.label("pending_sessions"),
            )
            .options(selectinload(TeacherProfile.user))
            .order_by(
                case((future_slots > 0, 1), else_=0).desc(),
                TeacherProfile.average_rating.desc(),
                completed.desc(),
                TeacherProfile.created_at.asc(),
            )
            .limit(limit)
            .offset(offset)
        )
        rows = (await self.session.execute(stmt)).all()
        return [tuple(row) for row in rows], total

    async def get_rating(self, teacher_id: UUID, student_id: UUID) -> TeacherRating | None:
        stmt = select(TeacherRating).where(
            TeacherRating.teacher_id == teacher_id,
            TeacherRating.student_id == student_id,
        )
        return await self.session.scalar(stmt)

    async def create_rating(
        self,
        teacher_id: UUID,
        student_id: UUID,
        score: int,
        review: str,
        rated_at: datetime,
    ) -> TeacherRating | None:
        """Insert a rating; None when the student already rated this teacher."""
        rating = TeacherRating(
            teacher_id=teacher_id,
            student_id=student_id,
            score=score,
            review=review,
            rated_at=rated_at,
        )
        try:
            async with self.session.begin_nested():
                self.session.add(rating)
                await self.session.flush()
        except IntegrityError:
            return None
        return rating

    async def update_rating(self, rating: TeacherRating, score: int, review: str, rated_at: datetime) -> TeacherRating:
        rating.score = score
        rating.review = review
        rating.rated_at = rated_at
        await self.session.flush()
        return rating

    async def list_rating_scores(self, teacher_id: UUID) -> list[int]:
        stmt = select(TeacherRating.score).where(TeacherRating.teacher_id == teacher_id)
        return list((await self.session.scalars(stmt)).all())

    async def list_ratings(self, teacher_id: UUID, limit: int, offset: int) -> tuple[list[TeacherRating], int]:
        base_stmt: Select[tuple[TeacherRating]] = select(TeacherRating).where(TeacherRating.teacher_id == teacher_id)
        count_stmt = select(func.count()).select_from(base_stmt.subquery())
        total = int((await self.session.scalar(count_stmt)) or 0)

        stmt = (
            base_stmt.options(selectinload(TeacherRating.student))
            .order_by(TeacherRating.rated_at.desc())
            .limit(limit)
            .offset(offset)
        )
        items = (await self.session.scalars(stmt)).all()
        return list(items), total

    async def set_rating_summary(self, profile: TeacherProfile, average: float, total: int) -> TeacherProfile:
        profile.average_rating = average
        profile.total_ratings = total
        await self.session.flush()
        return profile

    async def list_rated_teacher_ids(self, student_id: UUID) -> list[UUID]:
        stmt = select(TeacherRating.teacher_id).where(TeacherRating.student_id == student_id)
        return list((await self.session.scalars(stmt)).all())
