from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from types import SimpleNamespace
from uuid import UUID, uuid4

from tutorbook.core.enums import AppointmentStatusEnum, BookingTypeEnum, RoleEnum
from tutorbook.shared.exceptions import ConflictException

ACTIVE = (AppointmentStatusEnum.PENDING, AppointmentStatusEnum.APPROVED)


def make_actor(user_id: UUID | None = None, role: RoleEnum = RoleEnum.STUDENT, name: str = "User") -> SimpleNamespace:
    return SimpleNamespace(
        id=user_id or uuid4(),
        name=name,
        email=f"{name.lower()}@example.com",
        role=SimpleNamespace(name=role),
    )


@dataclass
class FakeTeacherProfile:
    user_id: UUID
    user: SimpleNamespace
    department: str | None = None
    subject: str | None = None
    average_rating: float = 0.0
    total_ratings: int = 0


@dataclass
class FakeRating:
    teacher_id: UUID
    student_id: UUID
    score: int
    review: str
    rated_at: datetime
    id: UUID = field(default_factory=uuid4)
    student: SimpleNamespace | None = None


@dataclass
class FakeAppointment:
    student_id: UUID
    teacher_id: UUID
    date_time: datetime
    purpose: str
    status: AppointmentStatusEnum
    booking_type: BookingTypeEnum
    id: UUID = field(default_factory=uuid4)
    auto_updated: bool = False
    auto_updated_at: datetime | None = None
    created_at: datetime | None = None


class FakeSchedulingRepository:
    def __init__(self, slots: dict[UUID, set[datetime]] | None = None) -> None:
        self.slots: dict[UUID, set[datetime]] = slots or {}

    async def list_slot_times(self, teacher_id: UUID) -> list[datetime]:
        return sorted(self.slots.get(teacher_id, set()))

    async def insert_slots(self, teacher_id: UUID, start_times) -> int:
        stored = self.slots.setdefault(teacher_id, set())
        added = 0
        for start_at in start_times:
            if start_at not in stored:
                stored.add(start_at)
                added += 1
        return added

    async def slot_exists(self, teacher_id: UUID, start_at: datetime) -> bool:
        return start_at in self.slots.get(teacher_id, set())

    async def delete_slot(self, teacher_id: UUID, start_at: datetime) -> int:
        stored = self.slots.get(teacher_id, set())
        if start_at in stored:
            stored.remove(start_at)
            return 1
        return 0

    async def delete_slots_up_to(self, teacher_id: UUID | None, now: datetime) -> int:
        teacher_ids = [teacher_id] if teacher_id is not None else list(self.slots)
        removed = 0
        for key in teacher_ids:
            stored = self.slots.get(key, set())
            expired = {item for item in stored if item <= now}
            stored -= expired
            removed += len(expired)
        return removed


class FakeTeachersRepository:
    def __init__(self, profiles: list[FakeTeacherProfile] | None = None) -> None:
        self.profiles = {profile.user_id: profile for profile in profiles or []}
        self.ratings: dict[tuple[UUID, UUID], FakeRating] = {}

    async def get_profile_by_user_id(self, user_id: UUID) -> FakeTeacherProfile | None:
        return self.profiles.get(user_id)

    async def count_profiles(self) -> int:
        return len(self.profiles)

    async def create_profile(
        self,
        user_id: UUID,
        department: str | None = None,
        subject: str | None = None,
    ) -> FakeTeacherProfile:
        profile = FakeTeacherProfile(
            user_id=user_id,
            user=SimpleNamespace(id=user_id, name="Teacher", email="teacher@example.com"),
            department=department,
            subject=subject,
        )
        self.profiles[user_id] = profile
        return profile

    async def get_rating(self, teacher_id: UUID, student_id: UUID) -> FakeRating | None:
        return self.ratings.get((teacher_id, student_id))

    async def create_rating(
        self,
        teacher_id: UUID,
        student_id: UUID,
        score: int,
        review: str,
        rated_at: datetime,
    ) -> FakeRating | None:
        if (teacher_id, student_id) in self.ratings:
            return None
        rating = FakeRating(
            teacher_id=teacher_id,
            student_id=student_id,
            score=score,
            review=review,
            rated_at=rated_at,
            student=SimpleNamespace(id=student_id, name="Student", email="student@example.com"),
        )
        self.ratings[(teacher_id, student_id)] = rating
        return rating

    async def update_rating(self, rating: FakeRating, score: int, review: str, rated_at: datetime) -> FakeRating:
        rating.score = score
        rating.review = review
        rating.rated_at = rated_at
        return rating

    async def list_rating_scores(self, teacher_id: UUID) -> list[int]:
        return [rating.score for (key, _), rating in self.ratings.items() if key == teacher_id]

    async def list_ratings(self, teacher_id: UUID, limit: int, offset: int) -> tuple[list[FakeRating], int]:
        items = sorted(
            (rating for (key, _), rating in self.ratings.items() if key == teacher_id),
            key=lambda rating: rating.rated_at,
            reverse=True,
        )
        return items[offset : offset + limit], len(items)

    async def set_rating_summary(self, profile: FakeTeacherProfile, average: float, total: int) -> FakeTeacherProfile:
        profile.average_rating = average
        profile.total_ratings = total
        return profile

    async def list_rated_teacher_ids(self, student_id: UUID) -> list[UUID]:
        return [teacher_id for teacher_id, key in self.ratings if key == student_id]


class FakeAppointmentsRepository:
    def __init__(self, appointments: list[FakeAppointment] | None = None) -> None:
        self.appointments = {item.id: item for item in appointments or []}
        self.reconcile_calls = 0

    def _active_at(self, teacher_id: UUID, date_time: datetime) -> FakeAppointment | None:
        for item in self.appointments.values():
            if item.teacher_id == teacher_id and item.date_time == date_time and item.status in ACTIVE:
                return item
        return None

    async def create_appointment(
        self,
        student_id: UUID,
        teacher_id: UUID,
        date_time: datetime,
        purpose: str,
        booking_type: BookingTypeEnum,
    ) -> FakeAppointment:
        if self._active_at(teacher_id, date_time) is not None:
            raise ConflictException("This time slot is already booked or pending approval")
        appointment = FakeAppointment(
            student_id=student_id,
            teacher_id=teacher_id,
            date_time=date_time,
            purpose=purpose,
            status=AppointmentStatusEnum.PENDING,
            booking_type=booking_type,
        )
        self.appointments[appointment.id] = appointment
        return appointment

    async def find_active_at(self, teacher_id: UUID, date_time: datetime) -> FakeAppointment | None:
        return self._active_at(teacher_id, date_time)

    async def get_for_teacher(self, appointment_id: UUID, teacher_id: UUID) -> FakeAppointment | None:
        appointment = self.appointments.get(appointment_id)
        if appointment is None or appointment.teacher_id != teacher_id:
            return None
        return appointment

    async def list_for_user(
        self,
        user_id: UUID,
        role_name: RoleEnum,
        limit: int,
        offset: int,
    ) -> tuple[list[FakeAppointment], int]:
        key = "student_id" if role_name == RoleEnum.STUDENT else "teacher_id"
        items = sorted(
            (item for item in self.appointments.values() if getattr(item, key) == user_id),
            key=lambda item: item.date_time,
            reverse=True,
        )
        return items[offset : offset + limit], len(items)

    async def save(self, appointment: FakeAppointment) -> FakeAppointment:
        self.appointments[appointment.id] = appointment
        return appointment

    async def auto_transition_expired(self, now: datetime) -> tuple[int, int]:
        self.reconcile_calls += 1
        canceled = completed = 0
        for item in self.appointments.values():
            if item.auto_updated or item.date_time >= now:
                continue
            if item.status == AppointmentStatusEnum.PENDING:
                item.status = AppointmentStatusEnum.CANCELED
                canceled += 1
            elif item.status == AppointmentStatusEnum.APPROVED:
                item.status = AppointmentStatusEnum.COMPLETED
                completed += 1
            else:
                continue
            item.auto_updated = True
            item.auto_updated_at = now
        return canceled, completed

    async def has_appointment_with_status(
        self,
        student_id: UUID,
        teacher_id: UUID,
        status: AppointmentStatusEnum,
    ) -> bool:
        return any(
            item.student_id == student_id and item.teacher_id == teacher_id and item.status == status
            for item in self.appointments.values()
        )

    async def count_by_status(
        self,
        *,
        student_id: UUID | None = None,
        teacher_id: UUID | None = None,
    ) -> dict[AppointmentStatusEnum, int]:
        counts: dict[AppointmentStatusEnum, int] = {}
        for item in self.appointments.values():
            if student_id is not None and item.student_id != student_id:
                continue
            if teacher_id is not None and item.teacher_id != teacher_id:
                continue
            counts[item.status] = counts.get(item.status, 0) + 1
        return counts

    async def count_created_between(
        self,
        start: datetime,
        end: datetime | None = None,
        *,
        student_id: UUID | None = None,
        teacher_id: UUID | None = None,
    ) -> int:
        return sum(
            1
            for item in self.appointments.values()
            if item.created_at is not None
            and item.created_at >= start
            and (end is None or item.created_at < end)
            and (student_id is None or item.student_id == student_id)
            and (teacher_id is None or item.teacher_id == teacher_id)
        )

    async def count_scheduled_between(
        self,
        teacher_id: UUID,
        status: AppointmentStatusEnum,
        start: datetime,
        end: datetime,
    ) -> int:
        return sum(
            1
            for item in self.appointments.values()
            if item.teacher_id == teacher_id and item.status == status and start <= item.date_time < end
        )

    async def count_distinct_students(
        self,
        teacher_id: UUID,
        *,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
    ) -> int:
        return len(
            {
                item.student_id
                for item in self.appointments.values()
                if item.teacher_id == teacher_id
                and (created_from is None or (item.created_at is not None and item.created_at >= created_from))
                and (created_to is None or (item.created_at is not None and item.created_at < created_to))
            }
        )


def make_user(
    role: RoleEnum = RoleEnum.STUDENT,
    name: str = "User",
    password_hash: str = "",
    is_approved: bool = False,
    created_at: datetime | None = None,
) -> SimpleNamespace:
    created_at = created_at or datetime(2026, 1, 1, tzinfo=UTC)
    user = make_actor(role=role, name=name)
    user.role.id = uuid4()
    user.password_hash = password_hash
    user.is_active = True
    user.is_approved = is_approved
    user.last_login_at = None
    user.created_at = created_at
    user.updated_at = created_at
    return user


class FakeIdentityRepository:
    def __init__(self, users: list[SimpleNamespace] | None = None) -> None:
        self.users = {user.id: user for user in users or []}
        self.roles = {role: SimpleNamespace(id=uuid4(), name=role) for role in RoleEnum}
        self.deleted: list[UUID] = []
        self.reset_tokens: dict[str, SimpleNamespace] = {}

    async def get_role_by_name(self, role_name: RoleEnum) -> SimpleNamespace | None:
        return self.roles.get(role_name)

    async def get_user_by_email(self, email: str) -> SimpleNamespace | None:
        for user in self.users.values():
            if user.email.lower() == email.lower():
                return user
        return None

    async def get_user_by_id(self, user_id: UUID) -> SimpleNamespace | None:
        return self.users.get(user_id)

    async def create_user(
        self,
        email: str,
        password_hash: str,
        name: str,
        role_id: UUID,
        is_approved: bool = False,
    ) -> SimpleNamespace:
        role_name = next(role.name for role in self.roles.values() if role.id == role_id)
        user = make_user(role=role_name, name=name, password_hash=password_hash, is_approved=is_approved)
        user.email = email
        user.role = self.roles[role_name]
        self.users[user.id] = user
        return user

    async def touch_last_login(self, user: SimpleNamespace, logged_in_at: datetime) -> SimpleNamespace:
        user.last_login_at = logged_in_at
        return user

    async def set_password_hash(self, user: SimpleNamespace, password_hash: str) -> SimpleNamespace:
        user.password_hash = password_hash
        return user

    async def create_password_reset_token(self, user_id: UUID, token_id: str, expires_at: datetime) -> SimpleNamespace:
        reset_token = SimpleNamespace(user_id=user_id, token_id=token_id, expires_at=expires_at, used_at=None)
        self.reset_tokens[token_id] = reset_token
        return reset_token

    async def get_password_reset_token(self, token_id: str) -> SimpleNamespace | None:
        return self.reset_tokens.get(token_id)

    async def mark_password_reset_used(self, reset_token: SimpleNamespace, used_at: datetime) -> None:
        reset_token.used_at = used_at

    async def list_users(self, role_names, limit: int, offset: int) -> tuple[list[SimpleNamespace], int]:
        items = sorted(
            (user for user in self.users.values() if user.role.name in role_names),
            key=lambda user: user.created_at,
            reverse=True,
        )
        return items[offset : offset + limit], len(items)

    async def set_approval(self, user: SimpleNamespace, is_approved: bool) -> SimpleNamespace:
        user.is_approved = is_approved
        return user

    async def delete_user(self, user_id: UUID) -> None:
        self.users.pop(user_id, None)
        self.deleted.append(user_id)


class FakeStudentsRepository:
    def __init__(self) -> None:
        self.profiles: dict[UUID, SimpleNamespace] = {}

    async def create_profile(self, user_id: UUID) -> SimpleNamespace:
        profile = SimpleNamespace(user_id=user_id)
        self.profiles[user_id] = profile
        return profile

    async def get_profile_by_user_id(self, user_id: UUID) -> SimpleNamespace | None:
        return self.profiles.get(user_id)
