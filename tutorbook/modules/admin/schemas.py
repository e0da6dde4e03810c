"""Admin schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from tutorbook.modules.identity.schemas import UserRead


class TeacherAccountCreate(BaseModel):
    """Admin-provisioned teacher account."""

    name: str = Field(min_length=2, max_length=128)
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    department: str | None = Field(default=None, max_length=128)
    subject: str | None = Field(default=None, max_length=128)
    is_approved: bool = True


class UserApprovalUpdate(BaseModel):
    """Approve or suspend an account."""

    is_approved: bool


class AppointmentCountsRead(BaseModel):
    """Per-user appointment counts."""

    total: int = 0
    pending: int = 0
    approved: int = 0
    completed: int = 0
    canceled: int = 0


class AdminUserRead(UserRead):
    """User row in admin listings."""

    appointments: AppointmentCountsRead = Field(default_factory=AppointmentCountsRead)


class AdminDashboardRead(BaseModel):
    """Platform-wide counters for the admin dashboard."""

    generated_at: datetime

    students_total: int
    teachers_total: int
    pending_approvals: int
    pending_students: int
    pending_teachers: int
    approved_students: int
    approved_teachers: int
    active_teachers: int

    appointments_total: int
    appointments_pending: int
    appointments_approved: int
    appointments_completed: int
    appointments_canceled: int
    appointments_today: int
    appointments_this_week: int

    recent_students: int
    recent_teachers: int

    student_approval_rate: int
    teacher_approval_rate: int
    completion_rate: int
    teacher_utilization: int
