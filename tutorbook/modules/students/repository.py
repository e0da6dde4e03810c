"""Students repository layer."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tutorbook.modules.students.models import StudentProfile


class StudentsRepository:
    """DB operations for student profiles."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_profile(self, user_id: UUID) -> StudentProfile:
        profile = StudentProfile(user_id=user_id, interests=[], career_goals=[])
        self.session.add(profile)
        await self.session.flush()
        return profile

    async def get_profile_by_user_id(self, user_id: UUID) -> StudentProfile | None:
        stmt = (
            select(StudentProfile)
            .options(selectinload(StudentProfile.user))
            .where(StudentProfile.user_id == user_id)
        )
        return await self.session.scalar(stmt)

    async def update_profile(self, profile: StudentProfile, **changes) -> StudentProfile:
        for key, value in changes.items():
            if value is not None:
                setattr(profile, key, value)
        await self.session.flush()
        return profile
