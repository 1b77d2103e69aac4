"""
In-memory stores implementing the release ports.

Used for unit tests and for resolving audiences from rows that were already
fetched. The database-backed equivalents live in `repo_db`.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import AsyncIterator, Iterable, Set
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from .assignments import UnknownContentItem
from .audience import ContentAudience
from .curriculum import ClassSchedule
from .publication import PublicationState, Published, ReleasedItem, advance, is_due


class StaticEnrollmentDirectory:
    """Enrollment directory over a fixed snapshot of students and memberships."""

    def __init__(
        self,
        students: Iterable[UUID] = (),
        enrollments: Iterable[tuple[UUID, UUID]] = (),
    ):
        """Initialize directory.

        Args:
            students: Every known student id
            enrollments: (student_id, class_id) pairs; unknown students are ignored
        """
        self._students: set[UUID] = set(students)
        self._members: dict[UUID, set[UUID]] = defaultdict(set)
        for student_id, class_id in enrollments:
            self.enroll(student_id, class_id)

    def all_students(self) -> Set[UUID]:
        return self._students

    def members_of(self, class_id: UUID) -> Set[UUID]:
        # Enrollment rows of students outside the known set do not count
        return self._members.get(class_id, set()) & self._students

    def enroll(self, student_id: UUID, class_id: UUID) -> None:
        self._members[class_id].add(student_id)

    def unenroll(self, student_id: UUID, class_id: UUID) -> None:
        self._members[class_id].discard(student_id)


@dataclass
class ContentRecord:
    """Mutable stored form of a content item."""

    item_id: UUID
    kind: str
    title: str
    publication: PublicationState = field(default_factory=Published)
    is_template: bool = False
    direct_student_ids: set[UUID] = field(default_factory=set)
    class_ids: set[UUID] = field(default_factory=set)

    def audience(self) -> ContentAudience:
        return ContentAudience(
            item_id=self.item_id,
            kind=self.kind,
            publication=self.publication,
            is_template=self.is_template,
            direct_student_ids=frozenset(self.direct_student_ids),
            class_ids=frozenset(self.class_ids),
        )


class InMemoryReleaseStore:
    """Content, assignment and curriculum storage held in dictionaries.

    Implements PublicationStore, AssignmentStore and CurriculumStore.
    """

    def __init__(self) -> None:
        self.items: dict[UUID, ContentRecord] = {}
        self.schedules: dict[UUID, ClassSchedule] = {}
        self.plans: dict[UUID, dict[int, list[UUID]]] = defaultdict(dict)
        self.insert_calls = 0

    # -- setup -------------------------------------------------------------

    def add_item(self, record: ContentRecord) -> ContentRecord:
        self.items[record.item_id] = record
        return record

    def add_schedule(self, schedule: ClassSchedule) -> None:
        self.schedules[schedule.class_id] = schedule

    def set_plan(self, class_id: UUID, week_number: int, content_ids: list[UUID]) -> None:
        self.plans[class_id][week_number] = list(content_ids)

    def _get(self, item_id: UUID) -> ContentRecord:
        try:
            return self.items[item_id]
        except KeyError:
            raise UnknownContentItem(item_id) from None

    def audiences(self) -> list[ContentAudience]:
        return [record.audience() for record in self.items.values()]

    # -- PublicationStore --------------------------------------------------

    async def publish_due(self, now: datetime) -> list[ReleasedItem]:
        released = []
        for record in self.items.values():
            if is_due(record.publication, now):
                record.publication = advance(record.publication, now)
                released.append(ReleasedItem(record.item_id, record.title))
        return released

    # -- AssignmentStore ---------------------------------------------------

    async def replace_student_assignments(self, item_id: UUID, student_ids: frozenset[UUID]) -> None:
        self._get(item_id).direct_student_ids = set(student_ids)

    async def replace_class_assignments(self, item_id: UUID, class_ids: frozenset[UUID]) -> None:
        self._get(item_id).class_ids = set(class_ids)

    # -- CurriculumStore ---------------------------------------------------

    async def active_schedules(self) -> list[ClassSchedule]:
        return [
            schedule
            for schedule in self.schedules.values()
            if schedule.is_active and schedule.schedule_active and schedule.start_date is not None
        ]

    async def planned_items(self, class_id: UUID, week_number: int) -> list[UUID]:
        return list(self.plans.get(class_id, {}).get(week_number, []))

    async def has_class_assignment(self, content_id: UUID, class_id: UUID) -> bool:
        return class_id in self._get(content_id).class_ids

    async def add_class_assignment(self, content_id: UUID, class_id: UUID) -> bool:
        self.insert_calls += 1
        record = self._get(content_id)
        if class_id in record.class_ids:
            return False
        record.class_ids.add(class_id)
        return True

    @asynccontextmanager
    async def class_scope(self) -> AsyncIterator[None]:
        """Restore every item's class assignments if the block raises."""
        snapshot = {item_id: set(record.class_ids) for item_id, record in self.items.items()}
        try:
            yield
        except Exception:
            for item_id, class_ids in snapshot.items():
                self.items[item_id].class_ids = class_ids
            raise
