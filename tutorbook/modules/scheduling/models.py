"""Scheduling ORM models."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from tutorbook.core.database import Base, BaseModelMixin


class AvailabilitySlot(BaseModelMixin, Base):
    """Open booking slot published by a teacher.

    Rows for one teacher form an ordered set keyed by ``start_at``.
    """

    __tablename__ = "availability_slots"
    __table_args__ = (
        UniqueConstraint("teacher_id", "start_at", name="uq_availability_slots_teacher_id_start_at"),
    )

    teacher_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    start_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
