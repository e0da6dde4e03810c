"""Messaging schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class MessageCreate(BaseModel):
    """Send message request."""

    receiver_id: UUID
    content: str = Field(min_length=1, max_length=5000)


class MessageRead(BaseModel):
    """Message response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    sender_id: UUID
    receiver_id: UUID
    content: str
    sent_at: datetime
