from __future__ import annotations

from datetime import UTC, datetime

import pytest

from tutorbook.core.enums import AppointmentStatusEnum, RoleEnum
from tutorbook.modules.admin.schemas import TeacherAccountCreate, UserApprovalUpdate
from tutorbook.modules.admin.service import AdminService
from tutorbook.modules.identity.service import IdentityService
from tutorbook.shared.exceptions import InvalidRequestException, NotFoundException, UnauthorizedException

from tests.fakes import (
    FakeIdentityRepository,
    FakeStudentsRepository,
    FakeTeacherProfile,
    FakeTeachersRepository,
    make_user,
)

FIXED_NOW = datetime(2026, 2, 19, 12, 0, tzinfo=UTC)


class FakeAdminRepository:
    def __init__(self, counts=None) -> None:
        self.counts = counts or {}

    async def get_dashboard(self, now=None) -> dict:
        return {
            "generated_at": FIXED_NOW,
            "students_total": 4,
            "teachers_total": 2,
            "pending_approvals": 3,
            "pending_students": 2,
            "pending_teachers": 1,
            "approved_students": 2,
            "approved_teachers": 1,
            "active_teachers": 1,
            "appointments_total": 3,
            "appointments_pending": 1,
            "appointments_approved": 1,
            "appointments_completed": 1,
            "appointments_canceled": 0,
            "appointments_today": 1,
            "appointments_this_week": 2,
            "recent_students": 1,
            "recent_teachers": 0,
            "student_approval_rate": 50,
            "teacher_approval_rate": 50,
            "completion_rate": 33,
            "teacher_utilization": 50,
        }

    async def get_user_appointment_counts(self, user_ids, role_name) -> dict:
        return {user_id: self.counts[user_id] for user_id in user_ids if user_id in self.counts}


def build_service(users, teachers_repository=None, counts=None):
    identity_repository = FakeIdentityRepository(users)
    teachers_repository = teachers_repository or FakeTeachersRepository()
    service = AdminService(
        repository=FakeAdminRepository(counts),
        identity_repository=identity_repository,
        identity_service=IdentityService(identity_repository, teachers_repository, FakeStudentsRepository()),
        teachers_repository=teachers_repository,
    )
    return service, identity_repository, teachers_repository


@pytest.mark.asyncio
async def test_dashboard_requires_admin() -> None:
    student = make_user(role=RoleEnum.STUDENT, name="Student")
    service, _, _ = build_service([student])

    with pytest.raises(UnauthorizedException):
        await service.get_dashboard(student)


@pytest.mark.asyncio
async def test_dashboard_returns_snapshot() -> None:
    admin = make_user(role=RoleEnum.ADMIN, name="Admin")
    service, _, _ = build_service([admin])

    dashboard = await service.get_dashboard(admin)

    assert dashboard.pending_approvals == 3
    assert dashboard.completion_rate == 33
    assert dashboard.generated_at == FIXED_NOW


@pytest.mark.asyncio
async def test_list_users_excludes_admins_and_attaches_counts() -> None:
    admin = make_user(role=RoleEnum.ADMIN, name="Admin")
    student = make_user(role=RoleEnum.STUDENT, name="Student", created_at=datetime(2026, 1, 2, tzinfo=UTC))
    teacher = make_user(role=RoleEnum.TEACHER, name="Teacher", created_at=datetime(2026, 1, 3, tzinfo=UTC))
    counts = {student.id: {AppointmentStatusEnum.PENDING: 2, AppointmentStatusEnum.COMPLETED: 1}}
    service, _, _ = build_service([admin, student, teacher], counts=counts)

    items, total = await service.list_users(admin, None, limit=50, offset=0)

    assert total == 2
    assert [item.id for item in items] == [teacher.id, student.id]
    assert items[1].appointments.total == 3
    assert items[1].appointments.pending == 2
    assert items[0].appointments.total == 0

    with pytest.raises(InvalidRequestException):
        await service.list_users(admin, RoleEnum.ADMIN, limit=50, offset=0)


@pytest.mark.asyncio
async def test_create_teacher_provisions_approved_account_with_profile() -> None:
    admin = make_user(role=RoleEnum.ADMIN, name="Admin")
    service, _, teachers_repository = build_service([admin])

    user = await service.create_teacher(
        TeacherAccountCreate(name="Grace", email="grace@example.com", password="secret-pass", subject="Math"),
        admin,
    )

    assert user.role.name == RoleEnum.TEACHER
    assert user.is_approved is True
    assert teachers_repository.profiles[user.id].subject == "Math"


@pytest.mark.asyncio
async def test_set_approval_toggles_flag_and_hides_admins() -> None:
    admin = make_user(role=RoleEnum.ADMIN, name="Admin")
    other_admin = make_user(role=RoleEnum.ADMIN, name="Other")
    student = make_user(role=RoleEnum.STUDENT, name="Student", is_approved=True)
    service, _, _ = build_service([admin, other_admin, student])

    updated = await service.set_approval(student.id, UserApprovalUpdate(is_approved=False), admin)
    assert updated.is_approved is False

    with pytest.raises(NotFoundException):
        await service.set_approval(other_admin.id, UserApprovalUpdate(is_approved=False), admin)


@pytest.mark.asyncio
async def test_deleting_student_recomputes_rated_teacher_summary() -> None:
    admin = make_user(role=RoleEnum.ADMIN, name="Admin")
    student = make_user(role=RoleEnum.STUDENT, name="Student")
    other = make_user(role=RoleEnum.STUDENT, name="Other")
    teacher = make_user(role=RoleEnum.TEACHER, name="Teacher")
    profile = FakeTeacherProfile(user_id=teacher.id, user=teacher, average_rating=3.0, total_ratings=2)
    teachers_repository = FakeTeachersRepository([profile])
    await teachers_repository.create_rating(teacher.id, student.id, 1, "", FIXED_NOW)
    await teachers_repository.create_rating(teacher.id, other.id, 5, "", FIXED_NOW)

    class CascadingIdentityRepository(FakeIdentityRepository):
        async def delete_user(self, user_id) -> None:
            await super().delete_user(user_id)
            for key in [key for key in teachers_repository.ratings if user_id in key]:
                del teachers_repository.ratings[key]

    identity_repository = CascadingIdentityRepository([admin, student, other, teacher])
    service = AdminService(
        repository=FakeAdminRepository(),
        identity_repository=identity_repository,
        identity_service=IdentityService(identity_repository, teachers_repository, FakeStudentsRepository()),
        teachers_repository=teachers_repository,
    )

    await service.delete_user(student.id, admin)

    assert student.id in identity_repository.deleted
    assert (profile.average_rating, profile.total_ratings) == (5.0, 1)


@pytest.mark.asyncio
async def test_delete_unknown_user_is_not_found() -> None:
    admin = make_user(role=RoleEnum.ADMIN, name="Admin")
    service, identity_repository, _ = build_service([admin])

    with pytest.raises(NotFoundException):
        await service.delete_user(admin.id, admin)
    assert identity_repository.deleted == []
