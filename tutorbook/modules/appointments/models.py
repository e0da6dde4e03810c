"""Appointment ORM models."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, DateTime, Enum as SAEnum, ForeignKey, Index, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tutorbook.core.database import Base, BaseModelMixin
from tutorbook.core.enums import AppointmentStatusEnum, BookingTypeEnum

if TYPE_CHECKING:
    from tutorbook.modules.identity.models import User


class Appointment(BaseModelMixin, Base):
    """Session between a student and a teacher at a given time."""

    __tablename__ = "appointments"
    __table_args__ = (
        Index(
            "uq_appointments_active_teacher_slot",
            "teacher_id",
            "date_time",
            unique=True,
            # Enum columns store member names.
            postgresql_where=text("status IN ('PENDING', 'APPROVED')"),
        ),
        Index("ix_appointments_status_date_time", "status", "date_time"),
    )

    student_id: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    teacher_id: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    purpose: Mapped[str] = mapped_column(Text, default="", nullable=False)

    status: Mapped[AppointmentStatusEnum] = mapped_column(
        SAEnum(AppointmentStatusEnum, name="appointment_status_enum", native_enum=False),
        default=AppointmentStatusEnum.PENDING,
        nullable=False,
    )
    booking_type: Mapped[BookingTypeEnum] = mapped_column(
        SAEnum(BookingTypeEnum, name="booking_type_enum", native_enum=False),
        default=BookingTypeEnum.CUSTOM_REQUEST,
        nullable=False,
    )
    auto_updated: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    auto_updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    student: Mapped["User"] = relationship(foreign_keys=[student_id])
    teacher: Mapped["User"] = relationship(foreign_keys=[teacher_id])
