"""Admin repository layer: read-only aggregation queries."""

from __future__ import annotations

from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tutorbook.core.enums import AppointmentStatusEnum, RoleEnum
from tutorbook.modules.appointments.models import Appointment
from tutorbook.modules.identity.models import Role, User
from tutorbook.shared.utils import round_half_up, utc_now


def _rate(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return int(round_half_up(part / whole * 100, 0))


class AdminRepository:
    """DB operations for admin domain."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_dashboard(self, now: datetime | None = None) -> dict[str, datetime | int]:
        now = now or utc_now()
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
        end_of_day = start_of_day + timedelta(days=1)
        # Weeks start on Sunday.
        start_of_week = start_of_day - timedelta(days=(start_of_day.weekday() + 1) % 7)

        users = await self._count_users_by_role_and_approval()
        students_total = sum(users.get((RoleEnum.STUDENT, flag), 0) for flag in (True, False))
        teachers_total = sum(users.get((RoleEnum.TEACHER, flag), 0) for flag in (True, False))
        students_approved = users.get((RoleEnum.STUDENT, True), 0)
        teachers_approved = users.get((RoleEnum.TEACHER, True), 0)
        students_pending = users.get((RoleEnum.STUDENT, False), 0)
        teachers_pending = users.get((RoleEnum.TEACHER, False), 0)

        appointment_counts = await self._count_appointments_by_status()
        appointments_total = sum(appointment_counts.values())
        appointments_completed = appointment_counts.get(AppointmentStatusEnum.COMPLETED, 0)
        active_teachers = await self._count_active_teachers()

        return {
            "generated_at": now,
            "students_total": students_total,
            "teachers_total": teachers_total,
            "pending_approvals": students_pending + teachers_pending,
            "pending_students": students_pending,
            "pending_teachers": teachers_pending,
            "approved_students": students_approved,
            "approved_teachers": teachers_approved,
            "active_teachers": active_teachers,
            "appointments_total": appointments_total,
            "appointments_pending": appointment_counts.get(AppointmentStatusEnum.PENDING, 0),
            "appointments_approved": appointment_counts.get(AppointmentStatusEnum.APPROVED, 0),
            "appointments_completed": appointments_completed,
            "appointments_canceled": appointment_counts.get(AppointmentStatusEnum.CANCELED, 0),
            "appointments_today": await self._count_appointments_scheduled_between(start_of_day, end_of_day),
            "appointments_this_week": await self._count_appointments_scheduled_between(start_of_week, end_of_day),
            "recent_students": await self._count_users_created_since(RoleEnum.STUDENT, start_of_week),
            "recent_teachers": await self._count_users_created_since(RoleEnum.TEACHER, start_of_week),
            "student_approval_rate": _rate(students_approved, students_total),
            "teacher_approval_rate": _rate(teachers_approved, teachers_total),
            "completion_rate": _rate(appointments_completed, appointments_total),
            "teacher_utilization": _rate(active_teachers, teachers_total),
        }

    async def _count_users_by_role_and_approval(self) -> dict[tuple[RoleEnum, bool], int]:
        stmt = (
            select(Role.name, User.is_approved, func.count(User.id))
            .join(User, User.role_id == Role.id)
            .group_by(Role.name, User.is_approved)
        )
        rows = (await self.session.execute(stmt)).all()
        return {(role_name, bool(is_approved)): int(count) for role_name, is_approved, count in rows}

    async def _count_appointments_by_status(self) -> dict[AppointmentStatusEnum, int]:
        stmt = select(Appointment.status, func.count(Appointment.id)).group_by(Appointment.status)
        rows = (await self.session.execute(stmt)).all()
        return {status: int(count) for status, count in rows}

    async def _count_appointments_scheduled_between(self, start: datetime, end: datetime) -> int:
        stmt = select(func.count(Appointment.id)).where(
            Appointment.date_time >= start,
            Appointment.date_time < end,
        )
        return int((await self.session.scalar(stmt)) or 0)

    async def _count_active_teachers(self) -> int:
        stmt = select(func.count(distinct(Appointment.teacher_id)))
        return int((await self.session.scalar(stmt)) or 0)

    async def _count_users_created_since(self, role_name: RoleEnum, since: datetime) -> int:
        stmt = (
            select(func.count(User.id))
            .join(Role, User.role_id == Role.id)
            .where(Role.name == role_name, User.created_at >= since)
        )
        return int((await self.session.scalar(stmt)) or 0)

    async def get_user_appointment_counts(self, user_ids: list[UUID], role_name: RoleEnum) -> dict[UUID, dict]:
        """Per-user appointment counts by status for admin listings."""
        if not user_ids:
            return {}
        column = Appointment.student_id if role_name == RoleEnum.STUDENT else Appointment.teacher_id
        stmt = (
            select(column, Appointment.status, func.count(Appointment.id))
            .where(column.in_(user_ids))
            .group_by(column, Appointment.status)
        )
        counts: dict[UUID, dict] = {}
        for user_id, status, count in (await self.session.execute(stmt)).all():
            counts.setdefault(user_id, {})[status] = int(count)
        return counts
