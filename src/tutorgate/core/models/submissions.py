"""
Submission Models

Student answers to exercises. Rows survive enrollment and assignment changes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from .content import ContentItem
    from .users import User

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Submission(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """One attempt by a student at an exercise."""

    __tablename__ = "submissions"
    __table_args__ = (
        CheckConstraint("answer_kind IN ('text', 'code')", name="check_submission_answer_kind"),
        CheckConstraint("score IS NULL OR (score >= 0 AND score <= 100)", name="check_score_range"),
        Index("idx_submissions_content_student", "content_id", "student_id"),
    )

    content_id: Mapped[UUID] = mapped_column(
        ForeignKey("content_items.id", ondelete="CASCADE"), nullable=False
    )
    student_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    answer: Mapped[str | None] = mapped_column(Text, nullable=True)
    answer_kind: Mapped[str] = mapped_column(String(10), nullable=False, comment="text, code")
    language: Mapped[str | None] = mapped_column(String(50), nullable=True)
    attempt_number: Mapped[int] = mapped_column(Integer, default=1)
    is_late: Mapped[bool] = mapped_column(default=False)

    # Grading (automatic scorer or instructor)
    score: Mapped[float | None] = mapped_column(Numeric(5, 2, asdecimal=False), nullable=True)
    graded: Mapped[bool] = mapped_column(default=False)
    instructor_feedback: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    content: Mapped[ContentItem] = relationship(back_populates="submissions")
    student: Mapped[User] = relationship(back_populates="submissions")
