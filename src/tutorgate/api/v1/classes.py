"""
Class API Endpoints

Curriculum plans and weekly schedule status of class groups.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from datetime import UTC, datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from tutorgate.api.deps import get_caller, require_staff
from tutorgate.core.database import get_db
from tutorgate.core.models import ClassGroup
from tutorgate.core.schemas import ClassScheduleSchema, CurriculumPlanSchema, CurriculumPlanUpdate
from tutorgate.core.schemas.classes import CurriculumItemSchema
from tutorgate.release import Caller, UnknownContentItem
from tutorgate.release.curriculum import current_week, week_to_release
from tutorgate.release.repo_db import DBReleaseRepo, schedule_of

router = APIRouter()


async def _get_class(repo: DBReleaseRepo, class_id: UUID) -> ClassGroup:
    group = await repo.get_class(class_id)
    if group is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Class not found with ID: {class_id}",
        )
    return group


async def _check_access(repo: DBReleaseRepo, group: ClassGroup, caller: Caller) -> None:
    """Instructors see their own classes, students the classes they are enrolled in."""
    if caller.role == "admin":
        return
    if caller.role == "instructor":
        if group.instructor_id != caller.subject_id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        return

    directory = await repo.load_enrollment_directory()
    if caller.subject_id not in directory.members_of(group.id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


def _plan_schema(class_id: UUID, plan: dict) -> CurriculumPlanSchema:  # type: ignore[type-arg]
    return CurriculumPlanSchema(
        class_id=class_id,
        weeks={
            week: [CurriculumItemSchema.model_validate(item) for item in items]
            for week, items in plan.items()
        },
    )


@router.put("/{class_id}/curriculum", response_model=CurriculumPlanSchema)
async def replace_curriculum(
    class_id: UUID,
    plan_update: CurriculumPlanUpdate,
    caller: Caller = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> CurriculumPlanSchema:
    """Replace the class's curriculum plan. Templates are copied, not planned."""
    repo = DBReleaseRepo(db)
    group = await _get_class(repo, class_id)
    await _check_access(repo, group, caller)

    weeks: dict[int, list[UUID]] = {}
    for week in plan_update.weeks:
        weeks.setdefault(week.week_number, []).extend(week.content_ids)

    try:
        await repo.replace_plan(class_id, weeks, author_id=caller.subject_id)
    except UnknownContentItem as e:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    await db.commit()
    return _plan_schema(class_id, await repo.get_plan(class_id))


@router.get("/{class_id}/curriculum", response_model=CurriculumPlanSchema)
async def get_curriculum(
    class_id: UUID,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
) -> CurriculumPlanSchema:
    """Curriculum plan grouped by week."""
    repo = DBReleaseRepo(db)
    group = await _get_class(repo, class_id)
    await _check_access(repo, group, caller)

    return _plan_schema(class_id, await repo.get_plan(class_id))


@router.get("/{class_id}/schedule", response_model=ClassScheduleSchema)
async def get_schedule(
    class_id: UUID,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
) -> ClassScheduleSchema:
    """Current curriculum week of a class."""
    repo = DBReleaseRepo(db)
    group = await _get_class(repo, class_id)
    await _check_access(repo, group, caller)

    today = datetime.now(UTC).date()
    return ClassScheduleSchema(
        class_id=group.id,
        name=group.name,
        schedule_active=group.schedule_active,
        start_date=group.start_date,
        duration_weeks=group.duration_weeks,
        current_week=current_week(group.start_date, today) if group.start_date else None,
        releasing_week=week_to_release(schedule_of(group), today),
    )
