"""Shared utility functions."""

from __future__ import annotations

import math
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Normalize datetime to UTC timezone."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def normalize_timestamp(dt: datetime) -> datetime:
    """Normalize to UTC with millisecond precision.

    Slot and appointment times are compared for exact equality, so every
    timestamp entering the system is truncated the same way.
    """
    dt = ensure_utc(dt)
    return dt.replace(microsecond=(dt.microsecond // 1000) * 1000)


def round_half_up(value: float, digits: int = 1) -> float:
    """Round to given digits with halves rounded toward positive infinity."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def percentage_change(recent: int, previous: int) -> int:
    """Return rounded percentage change between two periods."""
    if previous > 0:
        return int(round_half_up((recent - previous) / previous * 100, 0))
    if recent > 0:
        return 100
    return 0
