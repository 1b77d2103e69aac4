"""Pydantic schemas for API validation."""

from .classes import (
    ClassScheduleSchema,
    CurriculumPlanSchema,
    CurriculumPlanUpdate,
    CurriculumWeek,
)
from .content import (
    AssignmentSetSchema,
    AssignmentUpdate,
    AudienceSchema,
    ContentCreate,
    ContentSchema,
    ContentStaffSchema,
)
from .submissions import (
    CurriculumSweepSchema,
    PublicationSweepSchema,
    SubmissionCreate,
    SubmissionGrade,
    SubmissionReviewSchema,
    SubmissionSchema,
)

__all__ = [
    # Classes
    "ClassScheduleSchema",
    "CurriculumPlanSchema",
    "CurriculumPlanUpdate",
    "CurriculumWeek",
    # Content
    "AssignmentSetSchema",
    "AssignmentUpdate",
    "AudienceSchema",
    "ContentCreate",
    "ContentSchema",
    "ContentStaffSchema",
    # Submissions and sweeps
    "CurriculumSweepSchema",
    "PublicationSweepSchema",
    "SubmissionCreate",
    "SubmissionGrade",
    "SubmissionReviewSchema",
    "SubmissionSchema",
]
