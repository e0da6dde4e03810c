"""Initial schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 10:00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "20261019_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


# Non-native enums persist member names.
role_enum = sa.Enum("STUDENT", "TEACHER", "ADMIN", name="role_enum", native_enum=False)
appointment_status_enum = sa.Enum(
    "PENDING",
    "APPROVED",
    "CANCELED",
    "COMPLETED",
    name="appointment_status_enum",
    native_enum=False,
)
booking_type_enum = sa.Enum("SLOT_BOOKING", "CUSTOM_REQUEST", name="booking_type_enum", native_enum=False)


def _id_col() -> sa.Column:
    return sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False)


def _created_col() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)


def _updated_col() -> sa.Column:
    return sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False)


def _user_fk(column: str, table: str) -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint([column], ["users.id"], name=f"fk_{table}_{column}_users", ondelete="CASCADE")


def upgrade() -> None:
    op.create_table(
        "roles",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("name", role_enum, nullable=False),
        sa.UniqueConstraint("name", name="uq_roles_name"),
    )

    op.create_table(
        "users",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("is_approved", sa.Boolean(), nullable=False),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("role_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.ForeignKeyConstraint(["role_id"], ["roles.id"], name="fk_users_role_id_roles", ondelete="RESTRICT"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=False)

    op.create_table(
        "teacher_profiles",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("department", sa.String(length=128), nullable=True),
        sa.Column("subject", sa.String(length=128), nullable=True),
        sa.Column("designation", sa.String(length=128), nullable=True),
        sa.Column("bio", sa.Text(), nullable=False),
        sa.Column("education", sa.String(length=255), nullable=True),
        sa.Column("experience_years", sa.Integer(), nullable=False),
        sa.Column("qualifications", postgresql.JSONB(), nullable=False),
        sa.Column("specializations", postgresql.JSONB(), nullable=False),
        sa.Column("office_hours", sa.String(length=255), nullable=True),
        sa.Column("office", sa.String(length=128), nullable=True),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("average_rating", sa.Float(), nullable=False),
        sa.Column("total_ratings", sa.Integer(), nullable=False),
        _user_fk("user_id", "teacher_profiles"),
        sa.UniqueConstraint("user_id", name="uq_teacher_profiles_user_id"),
    )

    op.create_table(
        "student_profiles",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("student_number", sa.String(length=64), nullable=True),
        sa.Column("course", sa.String(length=128), nullable=True),
        sa.Column("year", sa.String(length=32), nullable=True),
        sa.Column("semester", sa.String(length=32), nullable=True),
        sa.Column("department", sa.String(length=128), nullable=True),
        sa.Column("cgpa", sa.Float(), nullable=True),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("bio", sa.Text(), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("interests", postgresql.JSONB(), nullable=False),
        sa.Column("career_goals", postgresql.JSONB(), nullable=False),
        _user_fk("user_id", "student_profiles"),
        sa.UniqueConstraint("user_id", name="uq_student_profiles_user_id"),
    )

    op.create_table(
        "teacher_ratings",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("teacher_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("student_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("review", sa.Text(), nullable=False),
        sa.Column("rated_at", sa.DateTime(timezone=True), nullable=False),
        _user_fk("teacher_id", "teacher_ratings"),
        _user_fk("student_id", "teacher_ratings"),
        sa.UniqueConstraint("teacher_id", "student_id", name="uq_teacher_ratings_teacher_id_student_id"),
    )
    op.create_index("ix_teacher_ratings_teacher_id", "teacher_ratings", ["teacher_id"], unique=False)

    op.create_table(
        "availability_slots",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("teacher_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        _user_fk("teacher_id", "availability_slots"),
        sa.UniqueConstraint("teacher_id", "start_at", name="uq_availability_slots_teacher_id_start_at"),
    )
    op.create_index("ix_availability_slots_teacher_id", "availability_slots", ["teacher_id"], unique=False)
    op.create_index("ix_availability_slots_start_at", "availability_slots", ["start_at"], unique=False)

    op.create_table(
        "appointments",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("student_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("teacher_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("date_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("purpose", sa.Text(), nullable=False),
        sa.Column("status", appointment_status_enum, nullable=False),
        sa.Column("booking_type", booking_type_enum, nullable=False),
        sa.Column("auto_updated", sa.Boolean(), nullable=False),
        sa.Column("auto_updated_at", sa.DateTime(timezone=True), nullable=True),
        _user_fk("student_id", "appointments"),
        _user_fk("teacher_id", "appointments"),
    )
    op.create_index("ix_appointments_student_id", "appointments", ["student_id"], unique=False)
    op.create_index("ix_appointments_teacher_id", "appointments", ["teacher_id"], unique=False)
    op.create_index("ix_appointments_status_date_time", "appointments", ["status", "date_time"], unique=False)
    op.create_index(
        "uq_appointments_active_teacher_slot",
        "appointments",
        ["teacher_id", "date_time"],
        unique=True,
        postgresql_where=sa.text("status IN ('PENDING', 'APPROVED')"),
    )

    op.create_table(
        "messages",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("sender_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("receiver_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=False),
        _user_fk("sender_id", "messages"),
        _user_fk("receiver_id", "messages"),
    )
    op.create_index(
        "ix_messages_sender_id_receiver_id_sent_at",
        "messages",
        ["sender_id", "receiver_id", "sent_at"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_messages_sender_id_receiver_id_sent_at", table_name="messages")
    op.drop_table("messages")

    op.drop_index("uq_appointments_active_teacher_slot", table_name="appointments")
    op.drop_index("ix_appointments_status_date_time", table_name="appointments")
    op.drop_index("ix_appointments_teacher_id", table_name="appointments")
    op.drop_index("ix_appointments_student_id", table_name="appointments")
    op.drop_table("appointments")

    op.drop_index("ix_availability_slots_start_at", table_name="availability_slots")
    op.drop_index("ix_availability_slots_teacher_id", table_name="availability_slots")
    op.drop_table("availability_slots")

    op.drop_index("ix_teacher_ratings_teacher_id", table_name="teacher_ratings")
    op.drop_table("teacher_ratings")
    op.drop_table("student_profiles")
    op.drop_table("teacher_profiles")

    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    op.drop_table("roles")
