"""
Submission Pydantic Schemas

Request/response models for submissions, manual grading and sweep runs.
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class SubmissionCreate(BaseModel):
    """Schema for a student's answer."""

    answer: str | None = None
    answer_kind: Literal["text", "code"]
    language: str | None = Field(None, max_length=50)


class SubmissionSchema(BaseModel):
    """Submission response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    content_id: UUID
    student_id: UUID
    answer: str | None = None
    answer_kind: str
    language: str | None = None
    attempt_number: int
    is_late: bool
    score: float | None = None
    graded: bool
    instructor_feedback: str | None = None
    created_at: datetime


class SubmissionReviewSchema(SubmissionSchema):
    """Submission with the adherence hint shown to instructors."""

    description_adherence: int | None = None


class SubmissionGrade(BaseModel):
    """Manual grade from an instructor or admin."""

    score: float = Field(..., ge=0, le=100)
    feedback: str | None = None


class ReleasedItemSchema(BaseModel):
    item_id: UUID
    title: str


class NewAssignmentSchema(BaseModel):
    class_id: UUID
    content_id: UUID
    week_number: int


class PublicationSweepSchema(BaseModel):
    """Result of a publication sweep run."""

    ran_at: datetime
    released: list[ReleasedItemSchema]


class CurriculumSweepSchema(BaseModel):
    """Result of a curriculum sweep run."""

    ran_at: datetime
    classes_checked: int
    promoted: list[NewAssignmentSchema]
    failed_class_ids: list[UUID]
