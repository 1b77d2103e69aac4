"""
Content Pydantic Schemas

Request/response models for content listing, creation and assignment management.
"""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from tutorgate.release.scoring import MultipleChoiceError, check_choice_rules

ContentKind = Literal["exercise", "material", "video_lesson"]


class ContentCreate(BaseModel):
    """Schema for creating a content item."""

    kind: ContentKind
    title: str = Field(..., min_length=2, max_length=300)
    description: str = ""
    module: str | None = Field(None, max_length=100)

    published: bool | None = Field(None, description="Publish immediately (default true)")
    release_at: datetime | None = Field(None, description="Scheduled release time; wins over published")
    is_template: bool = False

    reference_answer: str | None = None
    answer_kind: Literal["text", "code"] = "text"
    expected_language: str | None = Field(None, max_length=50)
    exercise_type: Literal["standard", "multiple_choice", "shortcut"] = "standard"
    choice_rules: dict[str, Any] | None = None
    due_at: datetime | None = None
    allow_repetition: bool = False
    max_attempts: int | None = Field(None, ge=1)
    attempt_penalty_percent: int = Field(default=0, ge=0, le=100)
    resubmit_interval_minutes: int | None = Field(None, ge=0)

    attachment_url: str | None = Field(None, max_length=500)
    video_url: str | None = Field(None, max_length=500)

    @field_validator("choice_rules")
    @classmethod
    def choice_rules_have_questions(cls, v: dict[str, Any] | None) -> dict[str, Any] | None:
        if v is not None:
            try:
                check_choice_rules(v)
            except MultipleChoiceError as e:
                raise ValueError("choice_rules must be {'questions': [{...}, ...]}") from e
        return v

    @model_validator(mode="after")
    def templates_are_exercises(self) -> "ContentCreate":
        if self.is_template and self.kind != "exercise":
            raise ValueError("Only exercises can be templates")
        return self


class ContentSchema(BaseModel):
    """Content as shown to students."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    kind: ContentKind
    title: str
    description: str
    module: str | None = None
    answer_kind: str
    exercise_type: str
    due_at: datetime | None = None
    attachment_url: str | None = None
    video_url: str | None = None
    created_at: datetime


class ContentStaffSchema(ContentSchema):
    """Content as shown to instructors and admins."""

    publication_status: str
    release_at: datetime | None = None
    is_template: bool
    reference_answer: str | None = None
    choice_rules: dict[str, Any] | None = None
    allow_repetition: bool
    max_attempts: int | None = None
    attempt_penalty_percent: int
    resubmit_interval_minutes: int | None = None
    author_id: UUID | None = None


class AssignmentUpdate(BaseModel):
    """Full replacement of one assignment set."""

    ids: list[str] = Field(default_factory=list, description="Student or class ids")


class AssignmentSetSchema(BaseModel):
    """Stored assignment set after a replacement."""

    content_id: UUID
    ids: list[UUID]


class AudienceSchema(BaseModel):
    """Effective audience of a content item."""

    content_id: UUID
    rule: Literal["template", "direct", "class", "everyone"]
    visible_now: bool
    direct_student_ids: list[UUID]
    class_ids: list[UUID]
    entitled_student_ids: list[UUID]
