"""Identity repository layer."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

from sqlalchemy import Select, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tutorbook.core.enums import RoleEnum
from tutorbook.modules.identity.models import PasswordResetToken, Role, User


class IdentityRepository:
    """DB operations for identity domain."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_role_by_name(self, role_name: RoleEnum) -> Role | None:
        stmt = select(Role).where(Role.name == role_name)
        return await self.session.scalar(stmt)

    async def create_role(self, role_name: RoleEnum) -> Role:
        role = Role(name=role_name)
        self.session.add(role)
        await self.session.flush()
        return role

    async def get_user_by_email(self, email: str) -> User | None:
        stmt = select(User).options(selectinload(User.role)).where(func.lower(User.email) == email.lower())
        return await self.session.scalar(stmt)

    async def get_user_by_id(self, user_id: UUID) -> User | None:
        stmt = select(User).options(selectinload(User.role)).where(User.id == user_id)
        return await self.session.scalar(stmt)

    async def create_user(
        self,
        email: str,
        password_hash: str,
        name: str,
        role_id: UUID,
        is_approved: bool = False,
    ) -> User:
        user = User(
            email=email,
            password_hash=password_hash,
            name=name,
            role_id=role_id,
            is_approved=is_approved,
        )
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user, attribute_names=["role"])
        return user

    async def touch_last_login(self, user: User, logged_in_at: datetime) -> User:
        user.last_login_at = logged_in_at
        await self.session.flush()
        return user

    async def set_password_hash(self, user: User, password_hash: str) -> User:
        user.password_hash = password_hash
        await self.session.flush()
        return user

    async def create_password_reset_token(
        self,
        user_id: UUID,
        token_id: str,
        expires_at: datetime,
    ) -> PasswordResetToken:
        reset_token = PasswordResetToken(user_id=user_id, token_id=token_id, expires_at=expires_at)
        self.session.add(reset_token)
        await self.session.flush()
        return reset_token

    async def get_password_reset_token(self, token_id: str) -> PasswordResetToken | None:
        stmt = select(PasswordResetToken).where(PasswordResetToken.token_id == token_id)
        return await self.session.scalar(stmt)

    async def mark_password_reset_used(self, reset_token: PasswordResetToken, used_at: datetime) -> None:
        reset_token.used_at = used_at
        await self.session.flush()

    async def list_users(
        self,
        role_names: Sequence[RoleEnum],
        limit: int,
        offset: int,
    ) -> tuple[list[User], int]:
        base_stmt: Select[tuple[User]] = (
            select(User).options(selectinload(User.role)).join(Role).where(Role.name.in_(role_names))
        )

        count_stmt = select(func.count()).select_from(base_stmt.subquery())
        total = int((await self.session.scalar(count_stmt)) or 0)

        stmt = base_stmt.order_by(User.created_at.desc()).limit(limit).offset(offset)
        items = (await self.session.scalars(stmt)).all()
        return list(items), total

    async def set_approval(self, user: User, is_approved: bool) -> User:
        user.is_approved = is_approved
        await self.session.flush()
        return user

    async def delete_user(self, user_id: UUID) -> None:
        await self.session.execute(delete(User).where(User.id == user_id))
        await self.session.flush()
