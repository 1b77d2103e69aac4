"""
Content Models

Learning content (exercises, study materials, video lessons) and its audience
assignments. All three kinds share one table so that a single resolver serves them.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

if TYPE_CHECKING:
    from .classes import ClassGroup
    from .submissions import Submission
    from .users import User

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tutorgate.release.publication import PublicationState, from_columns, to_columns

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin

CONTENT_KINDS = ("exercise", "material", "video_lesson")


class ContentItem(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A piece of learning content visible to some set of students."""

    __tablename__ = "content_items"
    __table_args__ = (
        CheckConstraint(
            "kind IN ('exercise', 'material', 'video_lesson')", name="check_content_kind"
        ),
        CheckConstraint(
            "publication_status IN ('draft', 'scheduled', 'published')",
            name="check_publication_status",
        ),
        CheckConstraint("answer_kind IN ('text', 'code')", name="check_answer_kind"),
        CheckConstraint(
            "exercise_type IN ('standard', 'multiple_choice', 'shortcut')",
            name="check_exercise_type",
        ),
        CheckConstraint("NOT is_template OR kind = 'exercise'", name="check_template_is_exercise"),
        Index("idx_content_kind", "kind"),
        Index("idx_content_release", "publication_status", "release_at"),
    )

    kind: Mapped[str] = mapped_column(
        String(20), nullable=False, comment="exercise, material, video_lesson"
    )
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    module: Mapped[str | None] = mapped_column(String(100), nullable=True)
    author_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    # Publication
    publication_status: Mapped[str] = mapped_column(
        String(20), default="published", comment="draft, scheduled, published"
    )
    release_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, comment="Scheduled release time (UTC)"
    )
    is_template: Mapped[bool] = mapped_column(
        default=False, comment="Exercise template: duplicated, never shown to students"
    )

    # Exercise payload
    reference_answer: Mapped[str | None] = mapped_column(Text, nullable=True)
    answer_kind: Mapped[str] = mapped_column(String(10), default="text")
    expected_language: Mapped[str | None] = mapped_column(String(50), nullable=True)
    exercise_type: Mapped[str] = mapped_column(String(20), default="standard")
    choice_rules: Mapped[dict[str, Any] | None] = mapped_column(
        JSONB, nullable=True, comment="Multiple-choice questions and correct answers"
    )
    due_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    allow_repetition: Mapped[bool] = mapped_column(default=False)
    max_attempts: Mapped[int | None] = mapped_column(Integer, nullable=True)
    attempt_penalty_percent: Mapped[int] = mapped_column(SmallInteger, default=0)
    resubmit_interval_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Material / video payload
    attachment_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    video_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Relationships
    author: Mapped[User | None] = relationship(foreign_keys=[author_id])
    student_assignments: Mapped[list[ContentStudentAssignment]] = relationship(
        back_populates="content", cascade="all, delete-orphan"
    )
    class_assignments: Mapped[list[ContentClassAssignment]] = relationship(
        back_populates="content", cascade="all, delete-orphan"
    )
    submissions: Mapped[list[Submission]] = relationship(
        back_populates="content", cascade="all, delete-orphan"
    )

    @property
    def publication(self) -> PublicationState:
        """Publication state as a tagged variant."""
        return from_columns(self.publication_status, self.release_at)

    @publication.setter
    def publication(self, state: PublicationState) -> None:
        self.publication_status, self.release_at = to_columns(state)


class ContentStudentAssignment(Base):
    """Direct grant of a content item to one student."""

    __tablename__ = "content_student_assignments"
    __table_args__ = (Index("idx_student_assignments_student", "student_id"),)

    content_id: Mapped[UUID] = mapped_column(
        ForeignKey("content_items.id", ondelete="CASCADE"), primary_key=True
    )
    student_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )

    content: Mapped[ContentItem] = relationship(back_populates="student_assignments")


class ContentClassAssignment(Base):
    """Grant of a content item to every student enrolled in a class."""

    __tablename__ = "content_class_assignments"
    __table_args__ = (Index("idx_class_assignments_class", "class_id"),)

    content_id: Mapped[UUID] = mapped_column(
        ForeignKey("content_items.id", ondelete="CASCADE"), primary_key=True
    )
    class_id: Mapped[UUID] = mapped_column(
        ForeignKey("class_groups.id", ondelete="CASCADE"), primary_key=True
    )

    content: Mapped[ContentItem] = relationship(back_populates="class_assignments")
    class_group: Mapped[ClassGroup] = relationship()
