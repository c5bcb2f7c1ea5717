"""Initial CareerForge schema: profiles, roles, courses, events, internships, streaks, audit.

Revision ID: a7c1e2d3f4b5
Revises:
Create Date: 2026-10-17
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "a7c1e2d3f4b5"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "user_roles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("role", sa.String(32), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),
        sa.CheckConstraint("role IN ('student', 'educator', 'recruiter')", name="ck_user_roles_role"),
    )
    op.create_index("ix_user_roles_user_id", "user_roles", ["user_id"])

    op.create_table(
        "audit_events",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("request_id", sa.String(64), nullable=True),
        sa.Column("actor_user_id", sa.Integer(), nullable=True),
        sa.Column("actor_user_email", sa.String(320), nullable=True),
        sa.Column("action", sa.String(128), nullable=False),
        sa.Column("entity_type", sa.String(128), nullable=True),
        sa.Column("entity_id", sa.String(128), nullable=True),
        sa.Column("reason", sa.String(512), nullable=True),
        sa.Column("metadata_json", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["actor_user_id"], ["profiles.id"], ondelete="SET NULL"),
    )

    op.create_table(
        "courses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("educator_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("duration_hours", sa.Integer(), nullable=False),
        sa.Column("difficulty", sa.String(32), nullable=False, server_default="beginner"),
        sa.Column("category", sa.String(128), nullable=True),
        sa.Column("thumbnail_url", sa.String(1024), nullable=True),
        sa.Column("video_url", sa.String(1024), nullable=True),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["educator_id"], ["profiles.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_courses_educator", "courses", ["educator_id"])
    op.create_index("idx_courses_published", "courses", ["is_published"])

    op.create_table(
        "course_enrollments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("course_id", sa.Integer(), nullable=False),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("enrolled_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["course_id"], ["courses.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["student_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("course_id", "student_id", name="uq_course_enrollments_course_student"),
    )
    op.create_index("idx_course_enrollments_student", "course_enrollments", ["student_id"])

    op.create_table(
        "user_streaks",
        sa.Column("user_id", sa.Integer(), primary_key=True),
        sa.Column("current_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("longest_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_activity_date", sa.Date(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.CheckConstraint("current_streak >= 0", name="ck_user_streaks_current_nonneg"),
        sa.CheckConstraint("longest_streak >= current_streak", name="ck_user_streaks_longest_ge_current"),
    )

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("organizer_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=False),
        sa.Column("registration_deadline", sa.Date(), nullable=True),
        sa.Column("max_participants", sa.Integer(), nullable=True),
        sa.Column("banner_url", sa.String(1024), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["organizer_id"], ["profiles.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_events_organizer", "events", ["organizer_id"])
    op.create_index("idx_events_active_start", "events", ["is_active", "start_date"])

    op.create_table(
        "event_registrations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("registered_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["event_id"], ["events.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["student_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("event_id", "student_id", name="uq_event_registrations_event_student"),
    )
    op.create_index("idx_event_registrations_student", "event_registrations", ["student_id"])

    op.create_table(
        "internships",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("recruiter_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("company_name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("application_deadline", sa.Date(), nullable=False),
        sa.Column("duration_months", sa.Integer(), nullable=True),
        sa.Column("stipend", sa.String(128), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["recruiter_id"], ["profiles.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_internships_recruiter", "internships", ["recruiter_id"])
    op.create_index("idx_internships_active", "internships", ["is_active"])

    op.create_table(
        "internship_applications",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("internship_id", sa.Integer(), nullable=False),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("applied_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["internship_id"], ["internships.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["student_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("internship_id", "student_id", name="uq_internship_applications_internship_student"),
    )
    op.create_index("idx_internship_applications_student", "internship_applications", ["student_id"])


def downgrade() -> None:
    op.drop_index("idx_internship_applications_student", table_name="internship_applications")
    op.drop_table("internship_applications")
    op.drop_index("idx_internships_active", table_name="internships")
    op.drop_index("idx_internships_recruiter", table_name="internships")
    op.drop_table("internships")
    op.drop_index("idx_event_registrations_student", table_name="event_registrations")
    op.drop_table("event_registrations")
    op.drop_index("idx_events_active_start", table_name="events")
    op.drop_index("idx_events_organizer", table_name="events")
    op.drop_table("events")
    op.drop_table("user_streaks")
    op.drop_index("idx_course_enrollments_student", table_name="course_enrollments")
    op.drop_table("course_enrollments")
    op.drop_index("idx_courses_published", table_name="courses")
    op.drop_index("idx_courses_educator", table_name="courses")
    op.drop_table("courses")
    op.drop_table("audit_events")
    op.drop_index("ix_user_roles_user_id", table_name="user_roles")
    op.drop_table("user_roles")
    op.drop_table("profiles")
