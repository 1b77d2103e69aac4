"""Initial release schema: users, classes, content, assignments, curriculum, submissions

Revision ID: 3c1f0a9e7b21
Revises:
Create Date: 2026-10-19 09:00:00.000000+00:00

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3c1f0a9e7b21"  # pragma: allowlist secret
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("NOW()"),
            nullable=False,
            comment="Creation timestamp (UTC)",
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("NOW()"),
            nullable=False,
            comment="Last update timestamp (UTC)",
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.UUID(), primary_key=True, comment="UUID primary key"),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column(
            "role",
            sa.String(20),
            nullable=False,
            server_default="student",
            comment="student, instructor, admin",
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.CheckConstraint("role IN ('student', 'instructor', 'admin')", name="check_user_role"),
    )
    op.create_index("idx_users_role", "users", ["role"])

    op.create_table(
        "class_groups",
        sa.Column("id", sa.UUID(), primary_key=True, comment="UUID primary key"),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "instructor_id",
            sa.UUID(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "schedule_active",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
            comment="Weekly curriculum release enabled",
        ),
        sa.Column("start_date", sa.Date(), nullable=True, comment="Day one of week 1"),
        sa.Column(
            "duration_weeks",
            sa.SmallInteger(),
            nullable=False,
            server_default="12",
            comment="Number of curriculum weeks",
        ),
        *_timestamps(),
    )
    op.create_index("idx_class_groups_schedule", "class_groups", ["is_active", "schedule_active"])

    op.create_table(
        "enrollments",
        sa.Column(
            "student_id",
            sa.UUID(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "class_id",
            sa.UUID(),
            sa.ForeignKey("class_groups.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "enrolled_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("NOW()"),
            nullable=False,
        ),
    )
    op.create_index("idx_enrollments_class", "enrollments", ["class_id"])

    op.create_table(
        "content_items",
        sa.Column("id", sa.UUID(), primary_key=True, comment="UUID primary key"),
        sa.Column("kind", sa.String(20), nullable=False, comment="exercise, material, video_lesson"),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("module", sa.String(100), nullable=True),
        sa.Column(
            "author_id",
            sa.UUID(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "publication_status",
            sa.String(20),
            nullable=False,
            server_default="published",
            comment="draft, scheduled, published",
        ),
        sa.Column(
            "release_at",
            sa.DateTime(timezone=True),
            nullable=True,
            comment="Scheduled release time (UTC)",
        ),
        sa.Column(
            "is_template",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
            comment="Exercise template: duplicated, never shown to students",
        ),
        sa.Column("reference_answer", sa.Text(), nullable=True),
        sa.Column("answer_kind", sa.String(10), nullable=False, server_default="text"),
        sa.Column("expected_language", sa.String(50), nullable=True),
        sa.Column("exercise_type", sa.String(20), nullable=False, server_default="standard"),
        sa.Column(
            "choice_rules",
            postgresql.JSONB(),
            nullable=True,
            comment="Multiple-choice questions and correct answers",
        ),
        sa.Column("due_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("allow_repetition", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("max_attempts", sa.Integer(), nullable=True),
        sa.Column("attempt_penalty_percent", sa.SmallInteger(), nullable=False, server_default="0"),
        sa.Column("resubmit_interval_minutes", sa.Integer(), nullable=True),
        sa.Column("attachment_url", sa.String(500), nullable=True),
        sa.Column("video_url", sa.String(500), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "kind IN ('exercise', 'material', 'video_lesson')", name="check_content_kind"
        ),
        sa.CheckConstraint(
            "publication_status IN ('draft', 'scheduled', 'published')",
            name="check_publication_status",
        ),
        sa.CheckConstraint("answer_kind IN ('text', 'code')", name="check_answer_kind"),
        sa.CheckConstraint(
            "exercise_type IN ('standard', 'multiple_choice', 'shortcut')",
            name="check_exercise_type",
        ),
        sa.CheckConstraint(
            "NOT is_template OR kind = 'exercise'", name="check_template_is_exercise"
        ),
    )
    op.create_index("idx_content_kind", "content_items", ["kind"])
    op.create_index("idx_content_release", "content_items", ["publication_status", "release_at"])

    op.create_table(
        "content_student_assignments",
        sa.Column(
            "content_id",
            sa.UUID(),
            sa.ForeignKey("content_items.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "student_id",
            sa.UUID(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )
    op.create_index(
        "idx_student_assignments_student", "content_student_assignments", ["student_id"]
    )

    op.create_table(
        "content_class_assignments",
        sa.Column(
            "content_id",
            sa.UUID(),
            sa.ForeignKey("content_items.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "class_id",
            sa.UUID(),
            sa.ForeignKey("class_groups.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )
    op.create_index("idx_class_assignments_class", "content_class_assignments", ["class_id"])

    op.create_table(
        "curriculum_entries",
        sa.Column("id", sa.UUID(), primary_key=True, comment="UUID primary key"),
        sa.Column(
            "class_id",
            sa.UUID(),
            sa.ForeignKey("class_groups.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "content_id",
            sa.UUID(),
            sa.ForeignKey("content_items.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("week_number", sa.SmallInteger(), nullable=False),
        sa.Column(
            "position", sa.Integer(), nullable=False, server_default="0", comment="Order within the week"
        ),
        sa.UniqueConstraint(
            "class_id", "content_id", "week_number", name="uq_curriculum_class_content_week"
        ),
        sa.CheckConstraint("week_number >= 1", name="check_week_number_positive"),
    )
    op.create_index("idx_curriculum_class_week", "curriculum_entries", ["class_id", "week_number"])

    op.create_table(
        "submissions",
        sa.Column("id", sa.UUID(), primary_key=True, comment="UUID primary key"),
        sa.Column(
            "content_id",
            sa.UUID(),
            sa.ForeignKey("content_items.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "student_id",
            sa.UUID(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("answer", sa.Text(), nullable=True),
        sa.Column("answer_kind", sa.String(10), nullable=False, comment="text, code"),
        sa.Column("language", sa.String(50), nullable=True),
        sa.Column("attempt_number", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("is_late", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("score", sa.Numeric(5, 2), nullable=True),
        sa.Column("graded", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("instructor_feedback", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "answer_kind IN ('text', 'code')", name="check_submission_answer_kind"
        ),
        sa.CheckConstraint(
            "score IS NULL OR (score >= 0 AND score <= 100)", name="check_score_range"
        ),
    )
    op.create_index(
        "idx_submissions_content_student", "submissions", ["content_id", "student_id"]
    )


def downgrade() -> None:
    op.drop_table("submissions")
    op.drop_table("curriculum_entries")
    op.drop_table("content_class_assignments")
    op.drop_table("content_student_assignments")
    op.drop_table("content_items")
    op.drop_table("enrollments")
    op.drop_table("class_groups")
    op.drop_table("users")
