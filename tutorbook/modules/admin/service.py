"""Admin business logic: account management and dashboard."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tutorbook.core.database import get_db_session
from tutorbook.core.enums import AppointmentStatusEnum, RoleEnum
from tutorbook.modules.admin.repository import AdminRepository
from tutorbook.modules.admin.schemas import (
    AdminDashboardRead,
    AdminUserRead,
    AppointmentCountsRead,
    TeacherAccountCreate,
    UserApprovalUpdate,
)
from tutorbook.modules.identity.models import User
from tutorbook.modules.identity.repository import IdentityRepository
from tutorbook.modules.identity.schemas import UserCreate
from tutorbook.modules.identity.service import IdentityService
from tutorbook.modules.students.repository import StudentsRepository
from tutorbook.modules.teachers.repository import TeachersRepository
from tutorbook.modules.teachers.service import summarize_scores
from tutorbook.shared.exceptions import InvalidRequestException, NotFoundException, UnauthorizedException

logger = logging.getLogger(__name__)

_MANAGED_ROLES = (RoleEnum.STUDENT, RoleEnum.TEACHER)


def _counts_read(counts: dict[AppointmentStatusEnum, int]) -> AppointmentCountsRead:
    return AppointmentCountsRead(
        total=sum(counts.values()),
        pending=counts.get(AppointmentStatusEnum.PENDING, 0),
        approved=counts.get(AppointmentStatusEnum.APPROVED, 0),
        completed=counts.get(AppointmentStatusEnum.COMPLETED, 0),
        canceled=counts.get(AppointmentStatusEnum.CANCELED, 0),
    )


class AdminService:
    """Admin domain service."""

    def __init__(
        self,
        repository: AdminRepository,
        identity_repository: IdentityRepository,
        identity_service: IdentityService,
        teachers_repository: TeachersRepository,
    ) -> None:
        self.repository = repository
        self.identity_repository = identity_repository
        self.identity_service = identity_service
        self.teachers_repository = teachers_repository

    @staticmethod
    def _ensure_admin(actor: User) -> None:
        if actor.role.name != RoleEnum.ADMIN:
            raise UnauthorizedException("Only admin can manage accounts")

    async def _get_managed_user(self, user_id: UUID) -> User:
        user = await self.identity_repository.get_user_by_id(user_id)
        if user is None or user.role.name not in _MANAGED_ROLES:
            raise NotFoundException("User not found")
        return user

    async def get_dashboard(self, actor: User) -> AdminDashboardRead:
        """Return aggregated platform snapshot."""
        self._ensure_admin(actor)
        snapshot = await self.repository.get_dashboard()
        return AdminDashboardRead(**snapshot)

    async def list_users(
        self,
        actor: User,
        role_name: RoleEnum | None,
        limit: int,
        offset: int,
    ) -> tuple[list[AdminUserRead], int]:
        """Students and/or teachers with their appointment counts."""
        self._ensure_admin(actor)
        if role_name is not None and role_name not in _MANAGED_ROLES:
            raise InvalidRequestException("Role filter must be 'student' or 'teacher'")

        users, total = await self.identity_repository.list_users(
            (role_name,) if role_name is not None else _MANAGED_ROLES,
            limit=limit,
            offset=offset,
        )
        counts: dict[UUID, dict] = {}
        for managed_role in _MANAGED_ROLES:
            ids = [user.id for user in users if user.role.name == managed_role]
            counts.update(await self.repository.get_user_appointment_counts(ids, managed_role))

        items = []
        for user in users:
            item = AdminUserRead.model_validate(user)
            item.appointments = _counts_read(counts.get(user.id, {}))
            items.append(item)
        return items, total

    async def create_teacher(self, payload: TeacherAccountCreate, actor: User) -> User:
        """Provision a teacher account with an empty profile."""
        self._ensure_admin(actor)
        user = await self.identity_service.create_account(
            UserCreate(
                name=payload.name,
                email=payload.email,
                password=payload.password,
                role=RoleEnum.TEACHER,
                department=payload.department,
                subject=payload.subject,
            ),
        )
        if payload.is_approved:
            await self.identity_repository.set_approval(user, True)
        logger.info("Teacher account created by admin %s: %s", actor.id, user.email)
        return user

    async def set_approval(self, user_id: UUID, payload: UserApprovalUpdate, actor: User) -> User:
        """Approve or suspend a student/teacher account."""
        self._ensure_admin(actor)
        user = await self._get_managed_user(user_id)
        await self.identity_repository.set_approval(user, payload.is_approved)
        logger.info(
            "Account %s: %s (%s) by admin %s",
            "approved" if payload.is_approved else "suspended",
            user.email,
            user.role.name,
            actor.id,
        )
        return user

    async def delete_user(self, user_id: UUID, actor: User) -> None:
        """Delete a student/teacher and everything that references it."""
        self._ensure_admin(actor)
        user = await self._get_managed_user(user_id)
        email, role_name = user.email, user.role.name

        rated_teacher_ids = await self.teachers_repository.list_rated_teacher_ids(user.id)
        await self.identity_repository.delete_user(user.id)

        # Ratings left by the deleted student are gone; refresh the summaries.
        for teacher_id in rated_teacher_ids:
            profile = await self.teachers_repository.get_profile_by_user_id(teacher_id)
            if profile is None:
                continue
            average, total = summarize_scores(await self.teachers_repository.list_rating_scores(teacher_id))
            await self.teachers_repository.set_rating_summary(profile, average, total)

        logger.info("Account deleted by admin %s: %s (%s)", actor.id, email, role_name)


async def get_admin_service(session: AsyncSession = Depends(get_db_session)) -> AdminService:
    """Dependency provider for admin service."""
    identity_repository = IdentityRepository(session)
    teachers_repository = TeachersRepository(session)
    return AdminService(
        repository=AdminRepository(session),
        identity_repository=identity_repository,
        identity_service=IdentityService(identity_repository, teachers_repository, StudentsRepository(session)),
        teachers_repository=teachers_repository,
    )
