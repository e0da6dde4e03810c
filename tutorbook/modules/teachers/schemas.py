"""Teachers schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from tutorbook.modules.identity.schemas import UserSummary


class TeacherProfileUpdate(BaseModel):
    """Update teacher profile request; omitted fields stay unchanged."""

    department: str | None = Field(default=None, max_length=128)
    subject: str | None = Field(default=None, max_length=128)
    designation: str | None = Field(default=None, max_length=128)
    bio: str | None = Field(default=None, max_length=5000)
    education: str | None = Field(default=None, max_length=255)
    experience_years: int | None = Field(default=None, ge=0, le=80)
    qualifications: list[str] | None = Field(default=None, max_length=50)
    specializations: list[str] | None = Field(default=None, max_length=50)
    office_hours: str | None = Field(default=None, max_length=255)
    office: str | None = Field(default=None, max_length=128)
    phone: str | None = Field(default=None, max_length=32)


class TeacherProfileRead(BaseModel):
    """Teacher profile response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    user: UserSummary
    department: str | None
    subject: str | None
    designation: str | None
    bio: str
    education: str | None
    experience_years: int
    qualifications: list[str]
    specializations: list[str]
    office_hours: str | None
    office: str | None
    phone: str | None
    average_rating: float
    total_ratings: int
    created_at: datetime
    updated_at: datetime


class TeacherDirectoryItem(BaseModel):
    """Teacher card in the public directory."""

    teacher_id: UUID
    name: str
    department: str | None
    subject: str | None
    designation: str | None
    experience_years: int
    average_rating: float
    total_ratings: int
    available_slots_count: int
    has_available_slots: bool
    completed_sessions: int
    approved_sessions: int
    pending_sessions: int


class RatingCreate(BaseModel):
    """Student rating request; the 1-5 range is a business rule."""

    score: int
    review: str = Field(default="", max_length=2000)


class RatingSummaryRead(BaseModel):
    """Teacher aggregate after a rating change."""

    average_rating: float
    total_ratings: int


class StudentRatingRead(BaseModel):
    """A student's own rating of a teacher, if any."""

    has_rated: bool
    rating: int = 0
    review: str = ""
    rated_at: datetime | None = None


class RatingRead(BaseModel):
    """Single rating entry."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    student: UserSummary
    score: int
    review: str
    rated_at: datetime


class TeacherRatingsRead(BaseModel):
    """Teacher ratings, most recent first, with summary."""

    teacher_id: UUID
    teacher_name: str
    subject: str | None
    average_rating: float
    total_ratings: int
    items: list[RatingRead]
    total: int
    limit: int
    offset: int
    has_more: bool


class TeacherStatsRead(BaseModel):
    """Teacher dashboard counters."""

    total_sessions: int
    pending_requests: int
    approved_today: int
    total_students: int
    recent_appointments: int
    weekly_change_percent: int
    recent_students: int
    student_growth_percent: int
    average_rating: float
    total_ratings: int
    subject: str | None
    department: str | None
