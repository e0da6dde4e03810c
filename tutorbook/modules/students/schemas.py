"""Students schemas."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from tutorbook.modules.identity.schemas import UserSummary

StudyYear = Literal["1st Year", "2nd Year", "3rd Year", "4th Year"]


class StudentProfileUpdate(BaseModel):
    """Update student profile request; omitted fields stay unchanged."""

    student_number: str | None = Field(default=None, max_length=64)
    course: str | None = Field(default=None, max_length=128)
    year: StudyYear | None = None
    semester: str | None = Field(default=None, max_length=32)
    department: str | None = Field(default=None, max_length=128)
    cgpa: float | None = Field(default=None, ge=0, le=10)
    phone: str | None = Field(default=None, max_length=32)
    address: str | None = Field(default=None, max_length=255)
    bio: str | None = Field(default=None, max_length=5000)
    date_of_birth: date | None = None
    interests: list[str] | None = Field(default=None, max_length=50)
    career_goals: list[str] | None = Field(default=None, max_length=50)


class StudentProfileRead(BaseModel):
    """Student profile response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    user: UserSummary
    student_number: str | None
    course: str | None
    year: str | None
    semester: str | None
    department: str | None
    cgpa: float | None
    phone: str | None
    address: str | None
    bio: str
    date_of_birth: date | None
    interests: list[str]
    career_goals: list[str]
    created_at: datetime
    updated_at: datetime


class StudentStatsRead(BaseModel):
    """Student dashboard counters."""

    total_appointments: int
    pending_appointments: int
    approved_appointments: int
    available_teachers: int
    recent_appointments: int
    previous_period_appointments: int
    monthly_change_percent: int
