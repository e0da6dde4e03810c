"""Messaging business logic layer."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tutorbook.core.database import get_db_session
from tutorbook.core.enums import RoleEnum
from tutorbook.modules.identity.models import User
from tutorbook.modules.identity.repository import IdentityRepository
from tutorbook.modules.messaging.models import Message
from tutorbook.modules.messaging.repository import MessagingRepository
from tutorbook.modules.messaging.schemas import MessageCreate
from tutorbook.shared.exceptions import InvalidRequestException, NotFoundException, UnauthorizedException
from tutorbook.shared.utils import utc_now

logger = logging.getLogger(__name__)

_MESSAGING_ROLES = (RoleEnum.STUDENT, RoleEnum.TEACHER)


class MessagingService:
    """Direct messages between students and teachers."""

    def __init__(self, repository: MessagingRepository, identity_repository: IdentityRepository) -> None:
        self.repository = repository
        self.identity_repository = identity_repository

    async def send_message(self, payload: MessageCreate, actor: User) -> Message:
        if actor.role.name not in _MESSAGING_ROLES:
            raise UnauthorizedException("Only students and teachers can send messages")
        if payload.receiver_id == actor.id:
            raise InvalidRequestException("Cannot send a message to yourself")

        receiver = await self.identity_repository.get_user_by_id(payload.receiver_id)
        if receiver is None or receiver.role.name not in _MESSAGING_ROLES:
            raise NotFoundException("Receiver not found")

        message = await self.repository.create_message(
            sender_id=actor.id,
            receiver_id=receiver.id,
            content=payload.content,
            sent_at=utc_now(),
        )
        logger.info("Message sent: %s %s to %s %s", actor.role.name, actor.id, receiver.role.name, receiver.id)
        return message

    async def get_thread(
        self,
        other_user_id: UUID,
        actor: User,
        limit: int,
        offset: int,
    ) -> tuple[list[Message], int]:
        """Messages exchanged with another user, oldest first."""
        if actor.role.name not in _MESSAGING_ROLES:
            raise UnauthorizedException("Only students and teachers have message threads")
        return await self.repository.list_thread(actor.id, other_user_id, limit=limit, offset=offset)


async def get_messaging_service(session: AsyncSession = Depends(get_db_session)) -> MessagingService:
    """Dependency provider for messaging service."""
    return MessagingService(MessagingRepository(session), IdentityRepository(session))
