"""Messaging repository layer."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import Select, and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from tutorbook.modules.messaging.models import Message


class MessagingRepository:
    """DB operations for direct messages."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_message(
        self,
        sender_id: UUID,
        receiver_id: UUID,
        content: str,
        sent_at: datetime,
    ) -> Message:
        message = Message(
            sender_id=sender_id,
            receiver_id=receiver_id,
            content=content,
            sent_at=sent_at,
        )
        self.session.add(message)
        await self.session.flush()
        return message

    async def list_thread(
        self,
        user_id: UUID,
        other_user_id: UUID,
        limit: int,
        offset: int,
    ) -> tuple[list[Message], int]:
        base_stmt: Select[tuple[Message]] = select(Message).where(
            or_(
                and_(Message.sender_id == user_id, Message.receiver_id == other_user_id),
                and_(Message.sender_id == other_user_id, Message.receiver_id == user_id),
            ),
        )
        count_stmt = select(func.count()).select_from(base_stmt.subquery())
        total = int((await self.session.scalar(count_stmt)) or 0)

        stmt = base_stmt.order_by(Message.sent_at.asc(), Message.created_at.asc()).limit(limit).offset(offset)
        items = (await self.session.scalars(stmt)).all()
        return list(items), total
