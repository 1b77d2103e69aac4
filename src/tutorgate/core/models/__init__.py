"""
TutorGate SQLAlchemy Models
"""

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from .classes import ClassGroup, CurriculumEntry, Enrollment
from .content import ContentClassAssignment, ContentItem, ContentStudentAssignment
from .submissions import Submission
from .users import User

__all__ = [
    # Base
    "Base",
    "UUIDPrimaryKeyMixin",
    "TimestampMixin",
    # Users
    "User",
    # Classes
    "ClassGroup",
    "Enrollment",
    "CurriculumEntry",
    # Content
    "ContentItem",
    "ContentStudentAssignment",
    "ContentClassAssignment",
    # Submissions
    "Submission",
]
