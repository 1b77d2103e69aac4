"""
Curriculum Scheduler

Releases a class's curriculum week by week. When a class reaches week N, every
item planned for week N becomes a class assignment of that class.

Week math:
    elapsed_days = today - start_date
    week = elapsed_days // 7 + 1

Promotion is monotonic. An existing class assignment is never re-derived,
duplicated or revoked, so running the sweep every five minutes or once a day
gives the same result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from contextlib import AbstractAsyncContextManager
from datetime import date, datetime
from typing import Any, Protocol
from uuid import UUID

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassSchedule:
    """Scheduling attributes of a class group."""

    class_id: UUID
    name: str
    start_date: date | None
    duration_weeks: int
    schedule_active: bool = True
    is_active: bool = True


@dataclass(frozen=True)
class NewAssignment:
    """A class assignment created by the scheduler."""

    class_id: UUID
    content_id: UUID
    week_number: int


@dataclass
class CurriculumSweepResult:
    """Outcome of one curriculum sweep."""

    ran_at: datetime
    promoted: list[NewAssignment] = field(default_factory=list)
    classes_checked: int = 0
    failed_class_ids: list[UUID] = field(default_factory=list)


class CurriculumStore(Protocol):
    """Persistence port for the curriculum sweep."""

    async def active_schedules(self) -> list[ClassSchedule]:
        """Classes with an active schedule and a start date."""
        ...

    async def planned_items(self, class_id: UUID, week_number: int) -> list[UUID]:
        """Content ids planned for a week, in plan order."""
        ...

    async def has_class_assignment(self, content_id: UUID, class_id: UUID) -> bool: ...

    async def add_class_assignment(self, content_id: UUID, class_id: UUID) -> bool:
        """Insert the assignment if absent. Returns True when a row was created."""
        ...

    def class_scope(self) -> AbstractAsyncContextManager[Any]:
        """Unit of work for one class. An error inside it undoes only that class."""
        ...


def current_week(start_date: date, today: date) -> int:
    """1-based curriculum week containing `today`. Zero or negative before the start."""
    return (today - start_date).days // 7 + 1


def week_to_release(schedule: ClassSchedule, today: date) -> int | None:
    """Week whose items should be released now, or None when nothing applies.

    Inactive classes, inactive schedules, missing start dates and non-positive
    durations all mean "no schedule".
    """
    if not (schedule.is_active and schedule.schedule_active):
        return None
    if schedule.start_date is None or schedule.duration_weeks <= 0:
        return None

    week = current_week(schedule.start_date, today)
    if week < 1 or week > schedule.duration_weeks:
        return None
    return week


def _as_date(now: datetime | date) -> date:
    return now.date() if isinstance(now, datetime) else now


class CurriculumScheduler:
    """Promotes planned curriculum items to class assignments."""

    def __init__(self, store: CurriculumStore):
        self.store = store

    async def advance_class(self, schedule: ClassSchedule, now: datetime) -> list[NewAssignment]:
        """Release the items of the class's current week.

        Args:
            schedule: Class to advance
            now: Current time

        Returns:
            Assignments created by this call (empty when already up to date)
        """
        week = week_to_release(schedule, _as_date(now))
        if week is None:
            logger.debug(f"Class '{schedule.name}': outside its schedule, skipping")
            return []

        created: list[NewAssignment] = []
        for content_id in await self.store.planned_items(schedule.class_id, week):
            if await self.store.has_class_assignment(content_id, schedule.class_id):
                continue
            if await self.store.add_class_assignment(content_id, schedule.class_id):
                created.append(NewAssignment(schedule.class_id, content_id, week))

        if created:
            logger.info(
                f"Released {len(created)} item(s) to class '{schedule.name}' (week {week})"
            )
        return created

    async def run_sweep(self, now: datetime) -> CurriculumSweepResult:
        """Advance every scheduled class.

        A failure in one class is logged and does not stop the others.
        """
        result = CurriculumSweepResult(ran_at=now)
        for schedule in await self.store.active_schedules():
            result.classes_checked += 1
            try:
                async with self.store.class_scope():
                    created = await self.advance_class(schedule, now)
                result.promoted.extend(created)
            except Exception:
                logger.exception(f"Curriculum release failed for class '{schedule.name}'")
                result.failed_class_ids.append(schedule.class_id)

        logger.info(
            f"Curriculum sweep: {len(result.promoted)} assignment(s) across "
            f"{result.classes_checked} class(es)"
        )
        return result


async def run_curriculum_sweep(store: CurriculumStore, now: datetime) -> CurriculumSweepResult:
    """Entry point for timers and operators."""
    return await CurriculumScheduler(store).run_sweep(now)
