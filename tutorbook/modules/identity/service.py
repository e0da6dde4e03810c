"""Identity business logic layer."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import timedelta
from uuid import UUID, uuid4

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from tutorbook.core.config import get_settings
from tutorbook.core.database import get_db_session
from tutorbook.core.enums import RoleEnum
from tutorbook.core.security import (
    create_access_token,
    decode_token,
    hash_password,
    oauth2_scheme,
    verify_password,
)
from tutorbook.modules.identity.models import PasswordResetToken, User
from tutorbook.modules.identity.repository import IdentityRepository
from tutorbook.modules.identity.schemas import (
    AccessToken,
    LoginRequest,
    ResetPasswordRequest,
    UserCreate,
    UserRead,
)
from tutorbook.modules.students.repository import StudentsRepository
from tutorbook.modules.teachers.repository import TeachersRepository
from tutorbook.shared.exceptions import (
    AuthenticationException,
    ConflictException,
    InvalidRequestException,
    NotFoundException,
)
from tutorbook.shared.utils import utc_now

settings = get_settings()
logger = logging.getLogger(__name__)

_CONTACT_ROLES = (RoleEnum.STUDENT, RoleEnum.TEACHER)


class IdentityService:
    """Identity domain service."""

    def __init__(
        self,
        repository: IdentityRepository,
        teachers_repository: TeachersRepository,
        students_repository: StudentsRepository,
    ) -> None:
        self.repository = repository
        self.teachers_repository = teachers_repository
        self.students_repository = students_repository

    async def ensure_default_roles(self) -> None:
        """Ensure all default roles exist."""
        for role_name in (RoleEnum.STUDENT, RoleEnum.TEACHER, RoleEnum.ADMIN):
            role = await self.repository.get_role_by_name(role_name)
            if role is None:
                await self.repository.create_role(role_name)

    async def ensure_bootstrap_admin(self, email: str | None, password: str | None) -> None:
        """Create the configured admin account on first start."""
        if not email or not password:
            return
        if await self.repository.get_user_by_email(email) is not None:
            return

        role = await self.repository.get_role_by_name(RoleEnum.ADMIN)
        if role is None:
            raise NotFoundException("Role not found")
        await self.repository.create_user(
            email=email,
            password_hash=hash_password(password),
            name="Administrator",
            role_id=role.id,
            is_approved=True,
        )
        logger.info("Bootstrap admin account created: %s", email)

    async def register(self, payload: UserCreate) -> User:
        """Register a student or teacher account with an empty profile."""
        if payload.role not in (RoleEnum.STUDENT, RoleEnum.TEACHER):
            raise InvalidRequestException("Invalid role")
        return await self.create_account(payload)

    async def create_account(self, payload: UserCreate) -> User:
        """Create account and role-specific profile (no role restriction)."""
        existing_user = await self.repository.get_user_by_email(payload.email)
        if existing_user is not None:
            raise ConflictException("User already exists")

        role = await self.repository.get_role_by_name(payload.role)
        if role is None:
            raise NotFoundException("Role not found")

        user = await self.repository.create_user(
            email=payload.email,
            password_hash=hash_password(payload.password),
            name=payload.name,
            role_id=role.id,
        )
        if payload.role == RoleEnum.TEACHER:
            await self.teachers_repository.create_profile(
                user_id=user.id,
                department=payload.department,
                subject=payload.subject,
            )
        elif payload.role == RoleEnum.STUDENT:
            await self.students_repository.create_profile(user_id=user.id)

        logger.info("Registered %s account: %s", payload.role, payload.email)
        return user

    async def login(self, payload: LoginRequest) -> AccessToken:
        """Authenticate user and issue access token."""
        user = await self.repository.get_user_by_email(payload.email)
        if user is None or not verify_password(payload.password, user.password_hash):
            raise AuthenticationException("Invalid credentials")
        if not user.is_active:
            raise AuthenticationException("User is inactive")

        await self.repository.touch_last_login(user, utc_now())
        access_token = create_access_token(subject=str(user.id), role=user.role.name)
        logger.info("Login succeeded: %s (%s)", user.email, user.role.name)
        return AccessToken(
            access_token=access_token,
            role=user.role.name,
            user=UserRead.model_validate(user),
        )

    async def forgot_password(self, email: str) -> PasswordResetToken:
        """Issue a single-use reset token valid for a short window."""
        user = await self.repository.get_user_by_email(email)
        if user is None:
            raise NotFoundException("User not found")

        expires_at = utc_now() + timedelta(minutes=settings.password_reset_expire_minutes)
        reset_token = await self.repository.create_password_reset_token(user.id, uuid4().hex, expires_at)
        logger.info("Password reset requested for: %s - %s", user.role.name, user.email)
        return reset_token

    async def reset_password(self, token_id: str, payload: ResetPasswordRequest) -> User:
        """Replace the password of the token owner and consume the token."""
        now = utc_now()
        reset_token = await self.repository.get_password_reset_token(token_id)
        if reset_token is None or reset_token.used_at is not None or reset_token.expires_at <= now:
            raise InvalidRequestException("Invalid or expired token")

        user = await self.repository.get_user_by_id(reset_token.user_id)
        if user is None:
            raise InvalidRequestException("Invalid or expired token")

        await self.repository.set_password_hash(user, hash_password(payload.new_password))
        await self.repository.mark_password_reset_used(reset_token, now)
        logger.info("Password reset completed for: %s - %s", user.role.name, user.email)
        return user

    async def list_contacts(
        self,
        role_name: RoleEnum | None,
        limit: int,
        offset: int,
    ) -> tuple[list[User], int]:
        """Students and/or teachers a signed-in user can message."""
        role_names: Sequence[RoleEnum] = _CONTACT_ROLES
        if role_name is not None:
            if role_name not in _CONTACT_ROLES:
                raise InvalidRequestException("Role filter must be 'student' or 'teacher'")
            role_names = (role_name,)
        return await self.repository.list_users(role_names, limit=limit, offset=offset)

    async def get_user_from_access_token(self, token: str) -> User:
        """Resolve user from access token."""
        payload = decode_token(token)
        if payload.get("type") != "access":
            raise AuthenticationException("Invalid access token")

        subject = payload.get("sub")
        if not subject:
            raise AuthenticationException("Token subject is missing")

        user = await self.repository.get_user_by_id(UUID(subject))
        if user is None:
            raise AuthenticationException("User not found")
        if not user.is_active:
            raise AuthenticationException("User is inactive")
        return user


async def get_identity_service(session: AsyncSession = Depends(get_db_session)) -> IdentityService:
    """Dependency to provide identity service."""
    return IdentityService(
        repository=IdentityRepository(session),
        teachers_repository=TeachersRepository(session),
        students_repository=StudentsRepository(session),
    )


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    service: IdentityService = Depends(get_identity_service),
) -> User:
    """Resolve currently authenticated user from bearer token."""
    return await service.get_user_from_access_token(token)


def require_roles(*roles: RoleEnum):
    """Dependency factory for role-based access."""

    async def _checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role.name not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied: insufficient role",
            )
        return current_user

    return _checker
