"""Identity schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from tutorbook.core.enums import RoleEnum


class RoleRead(BaseModel):
    """Role response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: RoleEnum


class UserCreate(BaseModel):
    """Self-registration request (students and teachers)."""

    name: str = Field(min_length=2, max_length=128)
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    role: RoleEnum = RoleEnum.STUDENT
    department: str | None = Field(default=None, max_length=128)
    subject: str | None = Field(default=None, max_length=128)


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: EmailStr
    password: str


class UserRead(BaseModel):
    """User output schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: EmailStr
    is_active: bool
    is_approved: bool
    last_login_at: datetime | None
    role: RoleRead
    created_at: datetime
    updated_at: datetime


class UserSummary(BaseModel):
    """Compact user reference embedded in other payloads."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: EmailStr


class AccessToken(BaseModel):
    """Login response."""

    access_token: str
    token_type: str = "bearer"
    role: RoleEnum
    user: UserRead


class ForgotPasswordRequest(BaseModel):
    """Request a password reset token for an account."""

    email: EmailStr


class ResetPasswordRequest(BaseModel):
    """New password submitted together with a reset token."""

    new_password: str = Field(min_length=8, max_length=128)


class PasswordResetIssued(BaseModel):
    """Reset token response; the token is only echoed outside production."""

    message: str
    reset_token: str | None = None
    expires_at: datetime | None = None


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str
