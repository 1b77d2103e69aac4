"""
Audience Resolver

Decides which students may currently see a content item. One resolver serves
exercises, materials and video lessons alike.

Resolution order for a visible item:
1. Templates are never entitled to any student.
2. Direct student assignments, when present, are the whole audience.
   Class assignments on the same item stay dormant.
3. Otherwise class assignments grant every student enrolled in those classes.
4. With no assignments of either kind the item is open to every student.

Only students are resolved. Instructors and admins read every item.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Set
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol, TypeVar
from uuid import UUID

from .publication import PublicationState, is_visible

STUDENT = "student"
STAFF_ROLES = frozenset({"instructor", "admin"})


@dataclass(frozen=True)
class Caller:
    """Authenticated subject handed over by the auth layer."""

    subject_id: UUID
    role: str

    @property
    def is_student(self) -> bool:
        return self.role == STUDENT


@dataclass(frozen=True)
class ContentAudience:
    """What the resolver needs to know about one content item."""

    item_id: UUID
    kind: str
    publication: PublicationState
    is_template: bool = False
    direct_student_ids: frozenset[UUID] = field(default_factory=frozenset)
    class_ids: frozenset[UUID] = field(default_factory=frozenset)


class EnrollmentDirectory(Protocol):
    """Read-only view of who is a student and who belongs to which class."""

    def all_students(self) -> Set[UUID]: ...

    def members_of(self, class_id: UUID) -> Set[UUID]: ...


T = TypeVar("T")


class AudienceResolver:
    """Computes entitlement of students to content items."""

    def __init__(self, enrollments: EnrollmentDirectory):
        """Initialize resolver.

        Args:
            enrollments: Student and class membership directory
        """
        self.enrollments = enrollments

    def entitled_student_ids(self, item: ContentAudience) -> frozenset[UUID]:
        """Students entitled to `item`, ignoring its publication state."""
        if item.is_template:
            return frozenset()

        if item.direct_student_ids:
            return frozenset(item.direct_student_ids)

        if item.class_ids:
            entitled: set[UUID] = set()
            for class_id in item.class_ids:
                entitled |= self.enrollments.members_of(class_id)
            return frozenset(entitled)

        return frozenset(self.enrollments.all_students())

    def is_entitled(self, student_id: UUID, item: ContentAudience) -> bool:
        """Whether `student_id` belongs to the audience of `item`."""
        if item.is_template:
            return False
        if item.direct_student_ids:
            return student_id in item.direct_student_ids
        if item.class_ids:
            return any(
                student_id in self.enrollments.members_of(class_id) for class_id in item.class_ids
            )
        return student_id in self.enrollments.all_students()

    def can_read(self, caller: Caller, item: ContentAudience, now: datetime) -> bool:
        """Read access for any caller.

        Staff bypass resolution entirely. Students need a visible item and an entitlement.
        """
        if not caller.is_student:
            return caller.role in STAFF_ROLES
        return is_visible(item.publication, now) and self.is_entitled(caller.subject_id, item)

    def list_visible_content(
        self,
        caller: Caller,
        items: Iterable[T],
        now: datetime,
        kind: str | None = None,
        audience_of: Callable[[T], ContentAudience] | None = None,
    ) -> list[T]:
        """Filter pre-fetched items down to what `caller` may see.

        Args:
            caller: Subject and role of the requester
            items: Candidate items, in the order they should be returned
            now: Current time for the publication check
            kind: Optional content kind filter
            audience_of: Maps an item to its ContentAudience when items are
                not ContentAudience instances themselves

        Returns:
            Items readable by the caller, original order preserved
        """
        visible = []
        for item in items:
            audience = audience_of(item) if audience_of else item
            if kind is not None and audience.kind != kind:
                continue
            if self.can_read(caller, audience, now):
                visible.append(item)
        return visible
