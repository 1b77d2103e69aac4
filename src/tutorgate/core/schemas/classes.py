"""
Class Pydantic Schemas

Curriculum plans and schedule status.
"""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class CurriculumWeek(BaseModel):
    """Items planned for one week, in release order."""

    week_number: int = Field(..., ge=1)
    content_ids: list[UUID] = Field(default_factory=list)


class CurriculumPlanUpdate(BaseModel):
    """Full replacement of a class's curriculum plan."""

    weeks: list[CurriculumWeek] = Field(default_factory=list)


class CurriculumItemSchema(BaseModel):
    """Planned content item."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    module: str | None = None


class CurriculumPlanSchema(BaseModel):
    """Curriculum plan grouped by week."""

    class_id: UUID
    weeks: dict[int, list[CurriculumItemSchema]]


class ClassScheduleSchema(BaseModel):
    """Where a class stands in its curriculum."""

    class_id: UUID
    name: str
    schedule_active: bool
    start_date: date | None = None
    duration_weeks: int
    current_week: int | None = Field(None, description="Null when no start date is set")
    releasing_week: int | None = Field(
        None, description="Week the next sweep releases; null when outside the schedule"
    )
