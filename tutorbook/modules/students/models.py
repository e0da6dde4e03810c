"""Students ORM models."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Date, Float, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tutorbook.core.database import Base, BaseModelMixin

if TYPE_CHECKING:
    from tutorbook.modules.identity.models import User


class StudentProfile(BaseModelMixin, Base):
    """Student profile linked to user account."""

    __tablename__ = "student_profiles"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    student_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    course: Mapped[str | None] = mapped_column(String(128), nullable=True)
    year: Mapped[str | None] = mapped_column(String(32), nullable=True)
    semester: Mapped[str | None] = mapped_column(String(32), nullable=True)
    department: Mapped[str | None] = mapped_column(String(128), nullable=True)
    cgpa: Mapped[float | None] = mapped_column(Float, nullable=True)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    bio: Mapped[str] = mapped_column(Text, default="", nullable=False)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    interests: Mapped[list] = mapped_column(JSONB, default=list, nullable=False)
    career_goals: Mapped[list] = mapped_column(JSONB, default=list, nullable=False)

    user: Mapped["User"] = relationship(back_populates="student_profile")
