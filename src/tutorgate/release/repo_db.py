"""
Database-backed release stores.

Implements the publication, assignment and curriculum ports on PostgreSQL via
async SQLAlchemy, plus the queries the API needs to hand pre-fetched rows to
the pure resolver.

Concurrent writers only ever use a single conditional UPDATE or
INSERT ... ON CONFLICT DO NOTHING, so overlapping sweeps cannot duplicate rows.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tutorgate.core.models import (
    ClassGroup,
    ContentClassAssignment,
    ContentItem,
    ContentStudentAssignment,
    CurriculumEntry,
    Enrollment,
    Submission,
    User,
)

from .assignments import InvalidAssignmentInput, UnknownContentItem
from .audience import ContentAudience
from .curriculum import ClassSchedule
from .memory import StaticEnrollmentDirectory
from .publication import PUBLISHED, Published, ReleasedItem

logger = logging.getLogger(__name__)

# Columns copied when a template exercise is instantiated for a class plan
_TEMPLATE_COLUMNS = (
    "kind",
    "title",
    "description",
    "module",
    "reference_answer",
    "answer_kind",
    "expected_language",
    "exercise_type",
    "choice_rules",
    "due_at",
    "allow_repetition",
    "max_attempts",
    "attempt_penalty_percent",
    "resubmit_interval_minutes",
)


def audience_of(item: ContentItem) -> ContentAudience:
    """Resolver view of a content row. Assignment collections must be loaded."""
    return ContentAudience(
        item_id=item.id,
        kind=item.kind,
        publication=item.publication,
        is_template=item.is_template,
        direct_student_ids=frozenset(a.student_id for a in item.student_assignments),
        class_ids=frozenset(a.class_id for a in item.class_assignments),
    )


def schedule_of(group: ClassGroup) -> ClassSchedule:
    return ClassSchedule(
        class_id=group.id,
        name=group.name,
        start_date=group.start_date,
        duration_weeks=group.duration_weeks,
        schedule_active=group.schedule_active,
        is_active=group.is_active,
    )


class DBReleaseRepo:
    """Release persistence on one AsyncSession. The caller owns the transaction."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ========================================================================
    # Reads for the resolver
    # ========================================================================

    async def load_enrollment_directory(self) -> StaticEnrollmentDirectory:
        """Snapshot of active students and their class memberships."""
        active_student = (User.role == "student", User.is_active.is_(True))
        students = await self.db.execute(select(User.id).where(*active_student))
        enrollments = await self.db.execute(
            select(Enrollment.student_id, Enrollment.class_id)
            .join(User, User.id == Enrollment.student_id)
            .where(*active_student)
        )
        return StaticEnrollmentDirectory(
            students=students.scalars().all(),
            enrollments=[(row.student_id, row.class_id) for row in enrollments],
        )

    def _content_query(self):  # type: ignore[no-untyped-def]
        return (
            select(ContentItem)
            .options(
                selectinload(ContentItem.student_assignments),
                selectinload(ContentItem.class_assignments),
            )
            .execution_options(populate_existing=True)
        )

    async def list_content(self, kind: str | None = None) -> list[ContentItem]:
        """All content, newest first, with assignments loaded."""
        query = self._content_query()
        if kind:
            query = query.where(ContentItem.kind == kind)
        result = await self.db.execute(query.order_by(ContentItem.created_at.desc()))
        return list(result.scalars().all())

    async def get_content(self, item_id: UUID) -> ContentItem:
        """Fetch one item with assignments loaded.

        Raises:
            UnknownContentItem: If no such item exists
        """
        result = await self.db.execute(self._content_query().where(ContentItem.id == item_id))
        item = result.scalar_one_or_none()
        if item is None:
            raise UnknownContentItem(item_id)
        return item

    # ========================================================================
    # PublicationStore
    # ========================================================================

    async def publish_due(self, now: datetime) -> list[ReleasedItem]:
        result = await self.db.execute(
            update(ContentItem)
            .where(
                ContentItem.publication_status != PUBLISHED,
                ContentItem.release_at.is_not(None),
                ContentItem.release_at <= now,
            )
            .values(publication_status=PUBLISHED, updated_at=now)
            .returning(ContentItem.id, ContentItem.title)
        )
        return [ReleasedItem(row.id, row.title) for row in result]

    # ========================================================================
    # AssignmentStore
    # ========================================================================

    async def _require_item(self, item_id: UUID) -> None:
        exists = await self.db.scalar(select(ContentItem.id).where(ContentItem.id == item_id))
        if exists is None:
            raise UnknownContentItem(item_id)

    async def _require_known(self, column, ids: frozenset[UUID], label: str, *criteria) -> None:  # type: ignore[no-untyped-def]
        if not ids:
            return
        result = await self.db.execute(select(column).where(column.in_(ids), *criteria))
        unknown = ids - set(result.scalars().all())
        if unknown:
            raise InvalidAssignmentInput(
                f"Unknown {label} id(s): " + ", ".join(sorted(str(u) for u in unknown))
            )

    async def replace_student_assignments(self, item_id: UUID, student_ids: frozenset[UUID]) -> None:
        await self._require_item(item_id)
        await self._require_known(User.id, student_ids, "student", User.role == "student")

        await self.db.execute(
            delete(ContentStudentAssignment).where(ContentStudentAssignment.content_id == item_id)
        )
        if student_ids:
            await self.db.execute(
                pg_insert(ContentStudentAssignment)
                .values([{"content_id": item_id, "student_id": sid} for sid in student_ids])
                .on_conflict_do_nothing()
            )
        await self.db.flush()

    async def replace_class_assignments(self, item_id: UUID, class_ids: frozenset[UUID]) -> None:
        await self._require_item(item_id)
        await self._require_known(ClassGroup.id, class_ids, "class")

        await self.db.execute(
            delete(ContentClassAssignment).where(ContentClassAssignment.content_id == item_id)
        )
        if class_ids:
            await self.db.execute(
                pg_insert(ContentClassAssignment)
                .values([{"content_id": item_id, "class_id": cid} for cid in class_ids])
                .on_conflict_do_nothing()
            )
        await self.db.flush()

    # ========================================================================
    # CurriculumStore
    # ========================================================================

    async def active_schedules(self) -> list[ClassSchedule]:
        result = await self.db.execute(
            select(ClassGroup).where(
                ClassGroup.is_active.is_(True),
                ClassGroup.schedule_active.is_(True),
                ClassGroup.start_date.is_not(None),
            )
        )
        return [schedule_of(group) for group in result.scalars().all()]

    async def planned_items(self, class_id: UUID, week_number: int) -> list[UUID]:
        result = await self.db.execute(
            select(CurriculumEntry.content_id)
            .where(CurriculumEntry.class_id == class_id, CurriculumEntry.week_number == week_number)
            .order_by(CurriculumEntry.position)
        )
        return list(result.scalars().all())

    async def has_class_assignment(self, content_id: UUID, class_id: UUID) -> bool:
        found = await self.db.scalar(
            select(ContentClassAssignment.content_id).where(
                ContentClassAssignment.content_id == content_id,
                ContentClassAssignment.class_id == class_id,
            )
        )
        return found is not None

    async def add_class_assignment(self, content_id: UUID, class_id: UUID) -> bool:
        result = await self.db.execute(
            pg_insert(ContentClassAssignment)
            .values(content_id=content_id, class_id=class_id)
            .on_conflict_do_nothing()
            .returning(ContentClassAssignment.content_id)
        )
        return result.first() is not None

    def class_scope(self) -> AbstractAsyncContextManager[Any]:
        """Savepoint around one class's promotion.

        A database error inside it rolls back only that class, so the sweep
        transaction stays usable for the remaining classes.
        """
        return self.db.begin_nested()

    # ========================================================================
    # Curriculum plans
    # ========================================================================

    async def get_class(self, class_id: UUID) -> ClassGroup | None:
        return await self.db.get(ClassGroup, class_id)

    async def get_plan(self, class_id: UUID) -> dict[int, list[ContentItem]]:
        """Planned items per week, in plan order."""
        result = await self.db.execute(
            select(CurriculumEntry.week_number, ContentItem)
            .join(ContentItem, ContentItem.id == CurriculumEntry.content_id)
            .where(CurriculumEntry.class_id == class_id)
            .order_by(CurriculumEntry.week_number, CurriculumEntry.position)
        )
        plan: dict[int, list[ContentItem]] = {}
        for week_number, item in result.tuples():
            plan.setdefault(week_number, []).append(item)
        return plan

    async def replace_plan(
        self,
        class_id: UUID,
        weeks: Mapping[int, Iterable[UUID]],
        author_id: UUID | None,
    ) -> dict[int, list[UUID]]:
        """Replace a class's whole curriculum plan.

        Template exercises are never planned directly: each one is copied into
        a fresh published exercise and the copy is planned instead.

        Raises:
            UnknownContentItem: If a planned id does not exist
        """
        await self.db.execute(delete(CurriculumEntry).where(CurriculumEntry.class_id == class_id))

        stored: dict[int, list[UUID]] = {}
        for week_number, content_ids in sorted(weeks.items()):
            for position, content_id in enumerate(content_ids):
                item = await self.db.get(ContentItem, content_id)
                if item is None:
                    raise UnknownContentItem(content_id)
                if item.is_template:
                    item = await self._instantiate_template(item, author_id)

                await self.db.execute(
                    pg_insert(CurriculumEntry)
                    .values(
                        class_id=class_id,
                        content_id=item.id,
                        week_number=week_number,
                        position=position,
                    )
                    .on_conflict_do_nothing(constraint="uq_curriculum_class_content_week")
                )
                stored.setdefault(week_number, []).append(item.id)

        await self.db.flush()
        return stored

    async def _instantiate_template(self, template: ContentItem, author_id: UUID | None) -> ContentItem:
        copy = ContentItem(
            **{column: getattr(template, column) for column in _TEMPLATE_COLUMNS},
            author_id=author_id,
            is_template=False,
        )
        copy.publication = Published()
        self.db.add(copy)
        await self.db.flush()
        logger.info(f"Template '{template.title}' duplicated into exercise {copy.id}")
        return copy

    # ========================================================================
    # Submissions
    # ========================================================================

    async def attempt_stats(self, content_id: UUID, student_id: UUID) -> tuple[int, datetime | None]:
        """Number of earlier submissions and the time of the latest one."""
        row = (
            await self.db.execute(
                select(func.count(Submission.id), func.max(Submission.created_at)).where(
                    Submission.content_id == content_id, Submission.student_id == student_id
                )
            )
        ).one()
        return int(row[0] or 0), row[1]
