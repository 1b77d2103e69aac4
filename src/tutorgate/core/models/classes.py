"""
Class Models

Class groups (cohorts), their enrollments and their week-indexed curriculum plan.
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from .content import ContentItem
    from .users import User

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class ClassGroup(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A cohort of students, optionally following a weekly curriculum schedule."""

    __tablename__ = "class_groups"
    __table_args__ = (Index("idx_class_groups_schedule", "is_active", "schedule_active"),)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    instructor_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    is_active: Mapped[bool] = mapped_column(default=True)

    # Weekly release schedule
    schedule_active: Mapped[bool] = mapped_column(
        default=False, comment="Weekly curriculum release enabled"
    )
    start_date: Mapped[date | None] = mapped_column(
        Date, nullable=True, comment="Day one of week 1"
    )
    duration_weeks: Mapped[int] = mapped_column(
        SmallInteger, default=12, comment="Number of curriculum weeks"
    )

    # Relationships
    instructor: Mapped[User | None] = relationship(foreign_keys=[instructor_id])
    enrollments: Mapped[list[Enrollment]] = relationship(
        back_populates="class_group", cascade="all, delete-orphan"
    )
    curriculum_entries: Mapped[list[CurriculumEntry]] = relationship(
        back_populates="class_group",
        cascade="all, delete-orphan",
        order_by=lambda: [CurriculumEntry.week_number, CurriculumEntry.position],
    )


class Enrollment(Base):
    """Student membership in a class group."""

    __tablename__ = "enrollments"
    __table_args__ = (Index("idx_enrollments_class", "class_id"),)

    student_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    class_id: Mapped[UUID] = mapped_column(
        ForeignKey("class_groups.id", ondelete="CASCADE"), primary_key=True
    )
    enrolled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        server_default=text("NOW()"),
        nullable=False,
    )

    # Relationships
    student: Mapped[User] = relationship(back_populates="enrollments")
    class_group: Mapped[ClassGroup] = relationship(back_populates="enrollments")


class CurriculumEntry(Base, UUIDPrimaryKeyMixin):
    """One content item planned for release to a class in a given week."""

    __tablename__ = "curriculum_entries"
    __table_args__ = (
        UniqueConstraint(
            "class_id", "content_id", "week_number", name="uq_curriculum_class_content_week"
        ),
        CheckConstraint("week_number >= 1", name="check_week_number_positive"),
        Index("idx_curriculum_class_week", "class_id", "week_number"),
    )

    class_id: Mapped[UUID] = mapped_column(
        ForeignKey("class_groups.id", ondelete="CASCADE"), nullable=False
    )
    content_id: Mapped[UUID] = mapped_column(
        ForeignKey("content_items.id", ondelete="CASCADE"), nullable=False
    )
    week_number: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0, comment="Order within the week")

    # Relationships
    class_group: Mapped[ClassGroup] = relationship(back_populates="curriculum_entries")
    content: Mapped[ContentItem] = relationship()
