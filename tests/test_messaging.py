from __future__ import annotations

from types import SimpleNamespace
from uuid import uuid4

import pytest

from tutorbook.core.enums import RoleEnum
from tutorbook.modules.messaging.schemas import MessageCreate
from tutorbook.modules.messaging.service import MessagingService
from tutorbook.shared.exceptions import InvalidRequestException, NotFoundException, UnauthorizedException

from tests.fakes import FakeIdentityRepository, make_user


class FakeMessagingRepository:
    def __init__(self) -> None:
        self.messages: list[SimpleNamespace] = []

    async def create_message(self, sender_id, receiver_id, content, sent_at) -> SimpleNamespace:
        message = SimpleNamespace(
            id=uuid4(),
            sender_id=sender_id,
            receiver_id=receiver_id,
            content=content,
            sent_at=sent_at,
        )
        self.messages.append(message)
        return message

    async def list_thread(self, user_id, other_user_id, limit: int, offset: int):
        pair = {user_id, other_user_id}
        items = [item for item in self.messages if {item.sender_id, item.receiver_id} == pair]
        return items[offset : offset + limit], len(items)


@pytest.mark.asyncio
async def test_message_round_trip_between_student_and_teacher() -> None:
    student = make_user(role=RoleEnum.STUDENT, name="Student")
    teacher = make_user(role=RoleEnum.TEACHER, name="Teacher")
    repository = FakeMessagingRepository()
    service = MessagingService(repository, FakeIdentityRepository([student, teacher]))

    await service.send_message(MessageCreate(receiver_id=teacher.id, content="Hello"), student)
    await service.send_message(MessageCreate(receiver_id=student.id, content="Hi there"), teacher)

    items, total = await service.get_thread(teacher.id, student, limit=50, offset=0)
    assert total == 2
    assert [item.content for item in items] == ["Hello", "Hi there"]


@pytest.mark.asyncio
async def test_message_to_self_is_rejected() -> None:
    student = make_user(role=RoleEnum.STUDENT, name="Student")
    service = MessagingService(FakeMessagingRepository(), FakeIdentityRepository([student]))

    with pytest.raises(InvalidRequestException):
        await service.send_message(MessageCreate(receiver_id=student.id, content="Note"), student)


@pytest.mark.asyncio
async def test_message_to_admin_or_unknown_user_is_not_found() -> None:
    student = make_user(role=RoleEnum.STUDENT, name="Student")
    admin = make_user(role=RoleEnum.ADMIN, name="Admin")
    service = MessagingService(FakeMessagingRepository(), FakeIdentityRepository([student, admin]))

    with pytest.raises(NotFoundException):
        await service.send_message(MessageCreate(receiver_id=admin.id, content="Hello"), student)
    with pytest.raises(NotFoundException):
        await service.send_message(MessageCreate(receiver_id=uuid4(), content="Hello"), student)


@pytest.mark.asyncio
async def test_admin_cannot_send_messages() -> None:
    student = make_user(role=RoleEnum.STUDENT, name="Student")
    admin = make_user(role=RoleEnum.ADMIN, name="Admin")
    service = MessagingService(FakeMessagingRepository(), FakeIdentityRepository([student, admin]))

    with pytest.raises(UnauthorizedException):
        await service.send_message(MessageCreate(receiver_id=student.id, content="Hello"), admin)
