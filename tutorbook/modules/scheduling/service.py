"""Scheduling business logic: the per-teacher slot store."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tutorbook.core.database import get_db_session
from tutorbook.core.enums import RoleEnum
from tutorbook.modules.identity.models import User
from tutorbook.modules.scheduling.repository import SchedulingRepository
from tutorbook.modules.scheduling.schemas import (
    AvailabilityPublishRequest,
    AvailabilityRead,
    AvailabilityUpdateRead,
    SlotDeleteRead,
    SlotDeleteRequest,
)
from tutorbook.modules.teachers.repository import TeachersRepository
from tutorbook.shared.exceptions import NotFoundException, UnauthorizedException
from tutorbook.shared.utils import normalize_timestamp, utc_now

logger = logging.getLogger(__name__)


class SchedulingService:
    """Maintain each teacher's ordered set of open slots.

    Timestamps are normalized to UTC milliseconds, so "same slot" means
    millisecond-equal.
    """

    def __init__(
        self,
        repository: SchedulingRepository,
        teachers_repository: TeachersRepository,
    ) -> None:
        self.repository = repository
        self.teachers_repository = teachers_repository

    async def add_slots(self, teacher_id: UUID, start_times: Iterable[datetime]) -> tuple[int, int]:
        """Merge timestamps into the set; return (added, skipped).

        Duplicates (already stored or repeated in the batch) and times that
        are not in the future are skipped without error.
        """
        now = utc_now()
        requested = [normalize_timestamp(item) for item in start_times]
        existing = set(await self.repository.list_slot_times(teacher_id))
        fresh = sorted({item for item in requested if item > now} - existing)

        added = await self.repository.insert_slots(teacher_id, fresh) if fresh else 0
        return added, len(requested) - added

    async def list_future_slots(self, teacher_id: UUID) -> list[datetime]:
        """Return slots after now, ascending.

        Side effect: slots at or before now are deleted from storage.
        """
        now = utc_now()
        pruned = await self.repository.delete_slots_up_to(teacher_id, now)
        if pruned:
            logger.info("Pruned %s expired slots for teacher %s", pruned, teacher_id)
        return [item for item in await self.repository.list_slot_times(teacher_id) if item > now]

    async def remove_slot(self, teacher_id: UUID, start_at: datetime) -> bool:
        """Remove exact slot; no-op when absent."""
        removed = await self.repository.delete_slot(teacher_id, normalize_timestamp(start_at))
        return removed > 0

    async def restore_slot(self, teacher_id: UUID, start_at: datetime) -> bool:
        """Put slot back only while it is still in the future."""
        start_at = normalize_timestamp(start_at)
        if start_at <= utc_now():
            return False
        if await self.repository.slot_exists(teacher_id, start_at):
            return False
        return await self.repository.insert_slots(teacher_id, [start_at]) > 0

    async def is_slot_available(self, teacher_id: UUID, start_at: datetime) -> bool:
        """Return True if the exact time is one of the teacher's future slots."""
        start_at = normalize_timestamp(start_at)
        if start_at <= utc_now():
            return False
        return await self.repository.slot_exists(teacher_id, start_at)

    async def publish_availability(
        self,
        payload: AvailabilityPublishRequest,
        actor: User,
    ) -> AvailabilityUpdateRead:
        """Teacher adds slots to own availability."""
        if actor.role.name != RoleEnum.TEACHER:
            raise UnauthorizedException("Only teachers can publish availability")

        added, skipped = await self.add_slots(actor.id, payload.slots)
        slots = await self.list_future_slots(actor.id)
        logger.info("Teacher availability updated: %s - added %s, skipped %s", actor.id, added, skipped)
        return AvailabilityUpdateRead(
            added=added,
            skipped=skipped,
            total_slots=len(slots),
            available_slots=slots,
        )

    async def get_teacher_availability(self, teacher_id: UUID) -> AvailabilityRead:
        """Future slots of a teacher, for students picking a time."""
        profile = await self.teachers_repository.get_profile_by_user_id(teacher_id)
        if profile is None:
            raise NotFoundException("Teacher not found")

        slots = await self.list_future_slots(teacher_id)
        return AvailabilityRead(
            teacher_id=teacher_id,
            teacher_name=profile.user.name,
            available_slots=slots,
            total_slots=len(slots),
        )

    async def get_my_availability(self, actor: User) -> AvailabilityRead:
        """Teacher's own future slots."""
        if actor.role.name != RoleEnum.TEACHER:
            raise UnauthorizedException("Only teachers have availability")
        return await self.get_teacher_availability(actor.id)

    async def delete_my_slot(self, payload: SlotDeleteRequest, actor: User) -> SlotDeleteRead:
        """Teacher withdraws one slot."""
        if actor.role.name != RoleEnum.TEACHER:
            raise UnauthorizedException("Only teachers can remove availability")

        removed = await self.remove_slot(actor.id, payload.start_at)
        remaining = await self.repository.list_slot_times(actor.id)
        if removed:
            logger.info("Teacher availability slot deleted: %s - %s", actor.id, payload.start_at)
        return SlotDeleteRead(removed=removed, remaining_slots=len(remaining))


async def get_scheduling_service(session: AsyncSession = Depends(get_db_session)) -> SchedulingService:
    """Dependency provider for scheduling service."""
    return SchedulingService(SchedulingRepository(session), TeachersRepository(session))
