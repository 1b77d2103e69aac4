"""
Publication Gate

Publication lifecycle of a content item:

    Draft ──(author publishes)──> Published
    Scheduled(release_at) ──(release_at passes, sweep)──> Published

The state is a tagged variant so that "published with a future release time"
cannot be built by the create path. Persisted rows keep two columns
(`publication_status`, `release_at`); `from_columns`/`to_columns` are the only
translation between the two shapes.

Readers never depend on the sweep: `is_visible` checks the flag and the
timestamp, so a scheduled item whose time has passed is visible before the
sweep has flipped its stored status.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Protocol, Union

if TYPE_CHECKING:
    from uuid import UUID

logger = logging.getLogger(__name__)

DRAFT = "draft"
SCHEDULED = "scheduled"
PUBLISHED = "published"


@dataclass(frozen=True)
class Draft:
    """Not published by its author. Never visible to students."""

    status: str = field(default=DRAFT, init=False)


@dataclass(frozen=True)
class Scheduled:
    """Publication suppressed until `release_at`."""

    release_at: datetime
    status: str = field(default=SCHEDULED, init=False)


@dataclass(frozen=True)
class Published:
    """Visible, subject to audience resolution.

    `released_at` keeps the original schedule of items published by the sweep.
    """

    released_at: datetime | None = None
    status: str = field(default=PUBLISHED, init=False)


PublicationState = Union[Draft, Scheduled, Published]


def initial_publication(
    publish_requested: bool | None, release_at: datetime | None
) -> PublicationState:
    """State of a newly created item.

    A release time always wins over an explicit publish request, even one that
    has already passed: the item is visible at once through `is_visible` and
    the next sweep persists the transition.

    Args:
        publish_requested: Author's publish flag (None means the default, published)
        release_at: Optional scheduled release time

    Returns:
        Initial publication state
    """
    if release_at is not None:
        return Scheduled(release_at=release_at)
    if publish_requested is False:
        return Draft()
    return Published()


def is_visible(state: PublicationState, now: datetime) -> bool:
    """Whether an item in `state` is a resolution candidate at `now`."""
    if isinstance(state, Published):
        return state.released_at is None or state.released_at <= now
    if isinstance(state, Scheduled):
        return state.release_at <= now
    return False


def is_due(state: PublicationState, now: datetime) -> bool:
    """Whether the sweep should persist a transition to Published."""
    return isinstance(state, Scheduled) and state.release_at <= now


def advance(state: PublicationState, now: datetime) -> PublicationState:
    """Apply the time-driven transition. Returns `state` unchanged when not due."""
    if isinstance(state, Scheduled) and is_due(state, now):
        return Published(released_at=state.release_at)
    return state


def from_columns(status: str | None, release_at: datetime | None) -> PublicationState:
    """Build the variant from a persisted (status, release_at) pair.

    A stored release time without the published flag is a schedule, whatever
    the flag says.
    """
    if status == PUBLISHED:
        return Published(released_at=release_at)
    if release_at is not None:
        return Scheduled(release_at=release_at)
    return Draft()


def to_columns(state: PublicationState) -> tuple[str, datetime | None]:
    """Inverse of `from_columns`."""
    if isinstance(state, Scheduled):
        return SCHEDULED, state.release_at
    if isinstance(state, Published):
        return PUBLISHED, state.released_at
    return DRAFT, None


# ============================================================================
# Sweep
# ============================================================================


@dataclass(frozen=True)
class ReleasedItem:
    """An item the sweep moved to Published."""

    item_id: UUID
    title: str


@dataclass
class PublicationSweepResult:
    """Outcome of one publication sweep."""

    ran_at: datetime
    released: list[ReleasedItem] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.released)


class PublicationStore(Protocol):
    """Persistence port for the publication sweep."""

    async def publish_due(self, now: datetime) -> list[ReleasedItem]:
        """Atomically mark every due item published and return the ones changed.

        Items already published must not be returned again.
        """
        ...


async def run_publication_sweep(store: PublicationStore, now: datetime) -> PublicationSweepResult:
    """Persist Scheduled → Published for every item whose release time has passed.

    Safe to run repeatedly or concurrently: a second run finds nothing due.
    """
    released = await store.publish_due(now)
    if released:
        logger.info(
            f"Published {len(released)} scheduled item(s): "
            + ", ".join(item.title for item in released)
        )
    else:
        logger.debug("Publication sweep found no due items")
    return PublicationSweepResult(ran_at=now, released=released)
