"""Scheduling schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class AvailabilityPublishRequest(BaseModel):
    """Slots a teacher adds to the availability set."""

    slots: list[datetime] = Field(min_length=1, max_length=500)


class SlotDeleteRequest(BaseModel):
    """Slot to withdraw from the availability set."""

    start_at: datetime


class AvailabilityRead(BaseModel):
    """Future slots of one teacher, earliest first."""

    teacher_id: UUID
    teacher_name: str
    available_slots: list[datetime]
    total_slots: int


class AvailabilityUpdateRead(BaseModel):
    """Result of publishing slots."""

    added: int
    skipped: int
    total_slots: int
    available_slots: list[datetime]


class SlotDeleteRead(BaseModel):
    """Result of withdrawing one slot."""

    removed: bool
    remaining_slots: int
