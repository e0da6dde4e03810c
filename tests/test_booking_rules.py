from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

import tutorbook.modules.appointments.service as appointments_service_module
import tutorbook.modules.scheduling.service as scheduling_service_module
from tutorbook.core.enums import AppointmentStatusEnum, BookingTypeEnum, RoleEnum
from tutorbook.modules.appointments.reconciliation import AppointmentReconciler
from tutorbook.modules.appointments.schemas import AppointmentCreate
from tutorbook.modules.appointments.service import AppointmentsService
from tutorbook.modules.scheduling.service import SchedulingService
from tutorbook.shared.exceptions import (
    ConflictException,
    InvalidRequestException,
    NotFoundException,
    UnauthorizedException,
)

from tests.fakes import (
    FakeAppointment,
    FakeAppointmentsRepository,
    FakeSchedulingRepository,
    FakeTeacherProfile,
    FakeTeachersRepository,
    make_actor,
)

FIXED_NOW = datetime(2026, 2, 19, 12, 0, tzinfo=UTC)
SLOT_AT = FIXED_NOW + timedelta(days=1)


@pytest.fixture(autouse=True)
def _freeze_clock(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(appointments_service_module, "utc_now", lambda: FIXED_NOW)
    monkeypatch.setattr(scheduling_service_module, "utc_now", lambda: FIXED_NOW)


def build_service(teacher, slots=None, appointments=None):
    teachers_repository = FakeTeachersRepository([FakeTeacherProfile(user_id=teacher.id, user=teacher)])
    scheduling_repository = FakeSchedulingRepository({teacher.id: set(slots or [])})
    appointments_repository = FakeAppointmentsRepository(appointments)
    service = AppointmentsService(
        repository=appointments_repository,
        scheduling_service=SchedulingService(scheduling_repository, teachers_repository),
        teachers_repository=teachers_repository,
        reconciler=AppointmentReconciler(appointments_repository, now_provider=lambda: FIXED_NOW),
    )
    return service, scheduling_repository, appointments_repository


@pytest.mark.asyncio
async def test_slot_booking_creates_pending_appointment_and_keeps_slot_published() -> None:
    teacher = make_actor(role=RoleEnum.TEACHER, name="Teacher")
    student = make_actor(role=RoleEnum.STUDENT, name="Student")
    service, scheduling_repository, _ = build_service(teacher, slots=[SLOT_AT])

    appointment = await service.book(
        AppointmentCreate(
            teacher_id=teacher.id,
            date_time=SLOT_AT,
            purpose="Thesis review",
            booking_type="slot_booking",
        ),
        student,
    )

    assert appointment.status == AppointmentStatusEnum.PENDING
    assert appointment.booking_type == BookingTypeEnum.SLOT_BOOKING
    assert appointment.student_id == student.id
    assert scheduling_repository.slots[teacher.id] == {SLOT_AT}


@pytest.mark.asyncio
async def test_available_booking_type_is_treated_as_slot_booking() -> None:
    teacher = make_actor(role=RoleEnum.TEACHER, name="Teacher")
    service, _, _ = build_service(teacher, slots=[SLOT_AT])

    appointment = await service.book(
        AppointmentCreate(teacher_id=teacher.id, date_time=SLOT_AT, purpose="Help", booking_type="available"),
        make_actor(role=RoleEnum.STUDENT),
    )

    assert appointment.booking_type == BookingTypeEnum.SLOT_BOOKING


@pytest.mark.asyncio
async def test_slot_booking_rejects_time_that_is_not_published() -> None:
    teacher = make_actor(role=RoleEnum.TEACHER, name="Teacher")
    service, _, appointments_repository = build_service(teacher, slots=[SLOT_AT])

    with pytest.raises(InvalidRequestException, match="not available"):
        await service.book(
            AppointmentCreate(
                teacher_id=teacher.id,
                date_time=SLOT_AT + timedelta(hours=1),
                purpose="Help",
                booking_type="slot_booking",
            ),
            make_actor(role=RoleEnum.STUDENT),
        )
    assert appointments_repository.appointments == {}


@pytest.mark.asyncio
async def test_custom_request_does_not_require_slot() -> None:
    teacher = make_actor(role=RoleEnum.TEACHER, name="Teacher")
    service, scheduling_repository, _ = build_service(teacher)
    requested_at = FIXED_NOW + timedelta(days=3, hours=2)

    appointment = await service.book(
        AppointmentCreate(teacher_id=teacher.id, date_time=requested_at, purpose="Career advice"),
        make_actor(role=RoleEnum.STUDENT),
    )

    assert appointment.booking_type == BookingTypeEnum.CUSTOM_REQUEST
    assert appointment.date_time == requested_at
    assert scheduling_repository.slots[teacher.id] == set()


@pytest.mark.asyncio
async def test_custom_request_in_past_is_rejected() -> None:
    teacher = make_actor(role=RoleEnum.TEACHER, name="Teacher")
    service, _, _ = build_service(teacher)

    with pytest.raises(InvalidRequestException, match="future"):
        await service.book(
            AppointmentCreate(
                teacher_id=teacher.id,
                date_time=FIXED_NOW - timedelta(minutes=5),
                purpose="Late",
            ),
            make_actor(role=RoleEnum.STUDENT),
        )


@pytest.mark.asyncio
async def test_booking_unknown_teacher_raises_not_found() -> None:
    teacher = make_actor(role=RoleEnum.TEACHER, name="Teacher")
    service, _, _ = build_service(teacher)

    with pytest.raises(NotFoundException):
        await service.book(
            AppointmentCreate(teacher_id=uuid4(), date_time=SLOT_AT, purpose="Help"),
            make_actor(role=RoleEnum.STUDENT),
        )


@pytest.mark.asyncio
async def test_booking_requires_student_role() -> None:
    teacher = make_actor(role=RoleEnum.TEACHER, name="Teacher")
    service, _, _ = build_service(teacher, slots=[SLOT_AT])

    with pytest.raises(UnauthorizedException):
        await service.book(
            AppointmentCreate(teacher_id=teacher.id, date_time=SLOT_AT, purpose="Help"),
            make_actor(role=RoleEnum.TEACHER),
        )


@pytest.mark.asyncio
async def test_second_booking_for_same_teacher_and_time_conflicts() -> None:
    teacher = make_actor(role=RoleEnum.TEACHER, name="Teacher")
    service, _, appointments_repository = build_service(teacher, slots=[SLOT_AT])
    payload = AppointmentCreate(
        teacher_id=teacher.id,
        date_time=SLOT_AT,
        purpose="Help",
        booking_type="slot_booking",
    )

    await service.book(payload, make_actor(role=RoleEnum.STUDENT, name="First"))
    with pytest.raises(ConflictException):
        await service.book(payload, make_actor(role=RoleEnum.STUDENT, name="Second"))
    assert len(appointments_repository.appointments) == 1


@pytest.mark.asyncio
async def test_canceled_appointment_does_not_block_rebooking() -> None:
    teacher = make_actor(role=RoleEnum.TEACHER, name="Teacher")
    canceled = FakeAppointment(
        student_id=uuid4(),
        teacher_id=teacher.id,
        date_time=SLOT_AT,
        purpose="Old",
        status=AppointmentStatusEnum.CANCELED,
        booking_type=BookingTypeEnum.SLOT_BOOKING,
    )
    service, _, appointments_repository = build_service(teacher, slots=[SLOT_AT], appointments=[canceled])

    appointment = await service.book(
        AppointmentCreate(teacher_id=teacher.id, date_time=SLOT_AT, purpose="New", booking_type="slot_booking"),
        make_actor(role=RoleEnum.STUDENT),
    )

    assert appointment.status == AppointmentStatusEnum.PENDING
    assert len(appointments_repository.appointments) == 2


@pytest.mark.asyncio
async def test_custom_request_at_approved_appointment_time_conflicts() -> None:
    teacher = make_actor(role=RoleEnum.TEACHER, name="Teacher")
    requested_at = FIXED_NOW + timedelta(days=2)
    approved = FakeAppointment(
        student_id=uuid4(),
        teacher_id=teacher.id,
        date_time=requested_at,
        purpose="Booked",
        status=AppointmentStatusEnum.APPROVED,
        booking_type=BookingTypeEnum.CUSTOM_REQUEST,
    )
    service, _, appointments_repository = build_service(teacher, appointments=[approved])

    with pytest.raises(ConflictException):
        await service.book(
            AppointmentCreate(teacher_id=teacher.id, date_time=requested_at, purpose="Overlap"),
            make_actor(role=RoleEnum.STUDENT),
        )
    assert len(appointments_repository.appointments) == 1
