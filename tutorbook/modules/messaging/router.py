"""Messaging API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from tutorbook.core.enums import RoleEnum
from tutorbook.modules.identity.service import require_roles
from tutorbook.modules.messaging.schemas import MessageCreate, MessageRead
from tutorbook.modules.messaging.service import MessagingService, get_messaging_service
from tutorbook.shared.pagination import Page, build_page, get_pagination_params

router = APIRouter(prefix="/messages", tags=["messages"])


@router.post("", response_model=MessageRead, status_code=status.HTTP_201_CREATED)
async def send_message(
    payload: MessageCreate,
    service: MessagingService = Depends(get_messaging_service),
    current_user=Depends(require_roles(RoleEnum.STUDENT, RoleEnum.TEACHER)),
) -> MessageRead:
    """Send a direct message."""
    message = await service.send_message(payload, current_user)
    return MessageRead.model_validate(message)


@router.get("/thread/{user_id}", response_model=Page[MessageRead])
async def get_thread(
    user_id: UUID,
    pagination=Depends(get_pagination_params),
    service: MessagingService = Depends(get_messaging_service),
    current_user=Depends(require_roles(RoleEnum.STUDENT, RoleEnum.TEACHER)),
) -> Page[MessageRead]:
    """Conversation with another user, oldest first."""
    items, total = await service.get_thread(user_id, current_user, pagination.limit, pagination.offset)
    return build_page([MessageRead.model_validate(item) for item in items], total, pagination)
