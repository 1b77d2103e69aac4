"""
Assignment management.

Direct and class assignments are two independent sets per content item.
Writes replace a whole set at once; sweeps only ever insert-if-absent.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol
from uuid import UUID

logger = logging.getLogger(__name__)


class InvalidAssignmentInput(Exception):
    """Raised when an assignment id list contains something that is not an id."""

    pass


class UnknownContentItem(Exception):
    """Raised when an operation targets a content item that does not exist."""

    def __init__(self, item_id: UUID | str):
        super().__init__(f"Content item not found: {item_id}")
        self.item_id = item_id


def normalize_ids(raw_ids: Iterable[UUID | str]) -> frozenset[UUID]:
    """Coerce an id list into a set of UUIDs.

    Duplicates collapse, since assignments are sets.

    Raises:
        InvalidAssignmentInput: If any entry is not a UUID or UUID string
    """
    if isinstance(raw_ids, (str, bytes)):
        raise InvalidAssignmentInput("Expected a list of ids, got a single string")

    ids: set[UUID] = set()
    for raw in raw_ids:
        if isinstance(raw, UUID):
            ids.add(raw)
            continue
        try:
            ids.add(UUID(str(raw)))
        except (TypeError, ValueError) as e:
            raise InvalidAssignmentInput(f"Invalid id in assignment list: {raw!r}") from e
    return frozenset(ids)


class AssignmentStore(Protocol):
    """Persistence port for full-replace assignment writes."""

    async def replace_student_assignments(self, item_id: UUID, student_ids: frozenset[UUID]) -> None:
        """Delete every direct assignment of `item_id`, then insert `student_ids`.

        Raises:
            UnknownContentItem: If the item does not exist
        """
        ...

    async def replace_class_assignments(self, item_id: UUID, class_ids: frozenset[UUID]) -> None:
        """Delete every class assignment of `item_id`, then insert `class_ids`.

        Raises:
            UnknownContentItem: If the item does not exist
        """
        ...


async def set_direct_assignments(
    store: AssignmentStore, item_id: UUID, student_ids: Iterable[UUID | str]
) -> frozenset[UUID]:
    """Replace the direct student assignments of an item.

    An empty list clears them, letting class assignments (or the global
    default) take effect again.

    Returns:
        The stored set of student ids
    """
    ids = normalize_ids(student_ids)
    await store.replace_student_assignments(item_id, ids)
    logger.info(f"Content {item_id}: {len(ids)} direct student assignment(s)")
    return ids


async def set_class_assignments(
    store: AssignmentStore, item_id: UUID, class_ids: Iterable[UUID | str]
) -> frozenset[UUID]:
    """Replace the class assignments of an item.

    Returns:
        The stored set of class ids
    """
    ids = normalize_ids(class_ids)
    await store.replace_class_assignments(item_id, ids)
    logger.info(f"Content {item_id}: {len(ids)} class assignment(s)")
    return ids
