"""Scheduling repository layer."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from tutorbook.modules.scheduling.models import AvailabilitySlot


class SchedulingRepository:
    """DB access for teachers' slot sets."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_slot_times(self, teacher_id: UUID) -> list[datetime]:
        stmt = (
            select(AvailabilitySlot.start_at)
            .where(AvailabilitySlot.teacher_id == teacher_id)
            .order_by(AvailabilitySlot.start_at.asc())
        )
        return list((await self.session.scalars(stmt)).all())

    async def insert_slots(self, teacher_id: UUID, start_times: Iterable[datetime]) -> int:
        rows = [{"teacher_id": teacher_id, "start_at": start_at} for start_at in start_times]
        if not rows:
            return 0
        stmt = (
            insert(AvailabilitySlot)
            .values(rows)
            .on_conflict_do_nothing(constraint="uq_availability_slots_teacher_id_start_at")
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return int(result.rowcount or 0)

    async def slot_exists(self, teacher_id: UUID, start_at: datetime) -> bool:
        stmt = select(AvailabilitySlot.id).where(
            AvailabilitySlot.teacher_id == teacher_id,
            AvailabilitySlot.start_at == start_at,
        )
        return (await self.session.scalar(stmt)) is not None

    async def delete_slot(self, teacher_id: UUID, start_at: datetime) -> int:
        stmt = delete(AvailabilitySlot).where(
            AvailabilitySlot.teacher_id == teacher_id,
            AvailabilitySlot.start_at == start_at,
        )
        result = await self.session.execute(stmt)
        return int(result.rowcount or 0)

    async def delete_slots_up_to(self, teacher_id: UUID | None, now: datetime) -> int:
        """Delete slots at or before ``now`` (for one teacher or all)."""
        stmt = delete(AvailabilitySlot).where(AvailabilitySlot.start_at <= now)
        if teacher_id is not None:
            stmt = stmt.where(AvailabilitySlot.teacher_id == teacher_id)
        result = await self.session.execute(stmt)
        return int(result.rowcount or 0)
