"""Appointment repository layer."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import Select, distinct, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tutorbook.core.enums import AppointmentStatusEnum, BookingTypeEnum, RoleEnum
from tutorbook.modules.appointments.models import Appointment
from tutorbook.shared.exceptions import ConflictException

ACTIVE_STATUSES = (AppointmentStatusEnum.PENDING, AppointmentStatusEnum.APPROVED)


class AppointmentsRepository:
    """DB operations for appointments."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_appointment(
        self,
        student_id: UUID,
        teacher_id: UUID,
        date_time: datetime,
        purpose: str,
        booking_type: BookingTypeEnum,
    ) -> Appointment:
        appointment = Appointment(
            student_id=student_id,
            teacher_id=teacher_id,
            date_time=date_time,
            purpose=purpose,
            status=AppointmentStatusEnum.PENDING,
            booking_type=booking_type,
        )
        try:
            async with self.session.begin_nested():
                self.session.add(appointment)
                await self.session.flush()
        except IntegrityError as exc:
            raise ConflictException("This time slot is already booked or pending approval") from exc

        await self.session.refresh(appointment, attribute_names=["student", "teacher"])
        return appointment

    async def find_active_at(self, teacher_id: UUID, date_time: datetime) -> Appointment | None:
        stmt = select(Appointment).where(
            Appointment.teacher_id == teacher_id,
            Appointment.date_time == date_time,
            Appointment.status.in_(ACTIVE_STATUSES),
        )
        return await self.session.scalar(stmt)

    async def get_for_teacher(self, appointment_id: UUID, teacher_id: UUID) -> Appointment | None:
        stmt = (
            select(Appointment)
            .options(selectinload(Appointment.student), selectinload(Appointment.teacher))
            .where(Appointment.id == appointment_id, Appointment.teacher_id == teacher_id)
            .execution_options(populate_existing=True)
        )
        return await self.session.scalar(stmt)

    async def list_for_user(
        self,
        user_id: UUID,
        role_name: RoleEnum,
        limit: int,
        offset: int,
    ) -> tuple[list[Appointment], int]:
        base_stmt: Select[tuple[Appointment]] = select(Appointment).options(
            selectinload(Appointment.student),
            selectinload(Appointment.teacher),
        )
        if role_name == RoleEnum.STUDENT:
            base_stmt = base_stmt.where(Appointment.student_id == user_id)
        elif role_name == RoleEnum.TEACHER:
            base_stmt = base_stmt.where(Appointment.teacher_id == user_id)

        count_stmt = select(func.count()).select_from(base_stmt.subquery())
        total = int((await self.session.scalar(count_stmt)) or 0)

        # Reconciliation updates rows in bulk behind the identity map.
        stmt = (
            base_stmt.order_by(Appointment.date_time.desc())
            .limit(limit)
            .offset(offset)
            .execution_options(populate_existing=True)
        )
        items = (await self.session.scalars(stmt)).all()
        return list(items), total

    async def save(self, appointment: Appointment) -> Appointment:
        await self.session.flush()
        return appointment

    async def _auto_transition(
        self,
        from_status: AppointmentStatusEnum,
        to_status: AppointmentStatusEnum,
        now: datetime,
    ) -> int:
        stmt = (
            update(Appointment)
            .where(
                Appointment.status == from_status,
                Appointment.date_time < now,
                Appointment.auto_updated.is_(False),
            )
            .values(status=to_status, auto_updated=True, auto_updated_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return int(result.rowcount or 0)

    async def auto_transition_expired(self, now: datetime) -> tuple[int, int]:
        """Bulk-close expired records; return (canceled, completed).

        Runs in a savepoint so a failure leaves the outer transaction usable.
        """
        async with self.session.begin_nested():
            canceled = await self._auto_transition(
                AppointmentStatusEnum.PENDING,
                AppointmentStatusEnum.CANCELED,
                now,
            )
            completed = await self._auto_transition(
                AppointmentStatusEnum.APPROVED,
                AppointmentStatusEnum.COMPLETED,
                now,
            )
        return canceled, completed

    async def has_appointment_with_status(
        self,
        student_id: UUID,
        teacher_id: UUID,
        status: AppointmentStatusEnum,
    ) -> bool:
        stmt = select(Appointment.id).where(
            Appointment.student_id == student_id,
            Appointment.teacher_id == teacher_id,
            Appointment.status == status,
        ).limit(1)
        return (await self.session.scalar(stmt)) is not None

    async def count_by_status(
        self,
        *,
        student_id: UUID | None = None,
        teacher_id: UUID | None = None,
    ) -> dict[AppointmentStatusEnum, int]:
        stmt = select(Appointment.status, func.count(Appointment.id)).group_by(Appointment.status)
        if student_id is not None:
            stmt = stmt.where(Appointment.student_id == student_id)
        if teacher_id is not None:
            stmt = stmt.where(Appointment.teacher_id == teacher_id)
        rows = (await self.session.execute(stmt)).all()
        return {status: int(count) for status, count in rows}

    async def count_created_between(
        self,
        start: datetime,
        end: datetime | None = None,
        *,
        student_id: UUID | None = None,
        teacher_id: UUID | None = None,
    ) -> int:
        stmt = select(func.count(Appointment.id)).where(Appointment.created_at >= start)
        if end is not None:
            stmt = stmt.where(Appointment.created_at < end)
        if student_id is not None:
            stmt = stmt.where(Appointment.student_id == student_id)
        if teacher_id is not None:
            stmt = stmt.where(Appointment.teacher_id == teacher_id)
        return int((await self.session.scalar(stmt)) or 0)

    async def count_scheduled_between(
        self,
        teacher_id: UUID,
        status: AppointmentStatusEnum,
        start: datetime,
        end: datetime,
    ) -> int:
        stmt = select(func.count(Appointment.id)).where(
            Appointment.teacher_id == teacher_id,
            Appointment.status == status,
            Appointment.date_time >= start,
            Appointment.date_time < end,
        )
        return int((await self.session.scalar(stmt)) or 0)

    async def count_distinct_students(
        self,
        teacher_id: UUID,
        *,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
    ) -> int:
        stmt = select(func.count(distinct(Appointment.student_id))).where(Appointment.teacher_id == teacher_id)
        if created_from is not None:
            stmt = stmt.where(Appointment.created_at >= created_from)
        if created_to is not None:
            stmt = stmt.where(Appointment.created_at < created_to)
        return int((await self.session.scalar(stmt)) or 0)
