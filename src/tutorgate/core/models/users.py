"""
User Models

Portal accounts. Authentication lives outside TutorGate; only the role matters here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .classes import Enrollment
    from .submissions import Submission

from sqlalchemy import CheckConstraint, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin

ROLES = ("student", "instructor", "admin")


class User(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A portal account: student, instructor or administrator."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('student', 'instructor', 'admin')", name="check_user_role"),
        Index("idx_users_role", "role"),
    )

    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default="student", comment="student, instructor, admin"
    )

    is_active: Mapped[bool] = mapped_column(default=True)

    # Relationships
    enrollments: Mapped[list[Enrollment]] = relationship(
        back_populates="student", cascade="all, delete-orphan"
    )
    submissions: Mapped[list[Submission]] = relationship(
        back_populates="student", cascade="all, delete-orphan"
    )

    @property
    def is_student(self) -> bool:
        return self.role == "student"
