"""Appointment schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from tutorbook.core.enums import AppointmentStatusEnum, BookingTypeEnum
from tutorbook.modules.identity.schemas import UserSummary


class AppointmentCreate(BaseModel):
    """Book a published slot or send a free-form request."""

    teacher_id: UUID
    date_time: datetime
    purpose: str = Field(min_length=1, max_length=2000)
    # "available" is accepted from older clients as an alias of slot_booking.
    booking_type: Literal["slot_booking", "available", "custom_request"] = "custom_request"


class AppointmentStatusUpdate(BaseModel):
    """Teacher decision on an appointment."""

    status: str = Field(min_length=1, max_length=32)


class AppointmentRead(BaseModel):
    """Appointment response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    student_id: UUID
    teacher_id: UUID
    student: UserSummary
    teacher: UserSummary
    date_time: datetime
    purpose: str
    status: AppointmentStatusEnum
    booking_type: BookingTypeEnum
    auto_updated: bool
    auto_updated_at: datetime | None
    created_at: datetime
    updated_at: datetime

