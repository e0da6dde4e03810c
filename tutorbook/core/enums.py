"""Core enums used across modules."""

from enum import StrEnum


class RoleEnum(StrEnum):
    """System roles."""

    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class AppointmentStatusEnum(StrEnum):
    """Appointment lifecycle status."""

    PENDING = "pending"
    APPROVED = "approved"
    CANCELED = "canceled"
    COMPLETED = "completed"


class BookingTypeEnum(StrEnum):
    """How the appointment time was chosen."""

    SLOT_BOOKING = "slot_booking"
    CUSTOM_REQUEST = "custom_request"
