"""
SQLAlchemy Base Model and Mixins

Provides the declarative base and the mixins shared by all TutorGate tables.
"""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, event, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class UUIDPrimaryKeyMixin:
    """Mixin for UUID primary key."""

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4, comment="UUID primary key")


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps.

    All timestamps use UTC (timezone-aware).
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        server_default=text("NOW()"),
        nullable=False,
        comment="Creation timestamp (UTC)",
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        server_default=text("NOW()"),
        nullable=False,
        comment="Last update timestamp (UTC)",
    )


# In-memory objects get ids and timestamps before they are flushed
@event.listens_for(UUIDPrimaryKeyMixin, "init", propagate=True)
def receive_init_uuid(target, args, kwargs):  # type: ignore[no-untyped-def]
    """Auto-generate UUID on instance creation if not provided."""
    if "id" not in kwargs:
        target.id = uuid4()


@event.listens_for(TimestampMixin, "init", propagate=True)
def receive_init_timestamps(target, args, kwargs):  # type: ignore[no-untyped-def]
    """Auto-generate timestamps on instance creation if not provided."""
    now = datetime.now(UTC)
    if "created_at" not in kwargs:
        target.created_at = now
    if "updated_at" not in kwargs:
        target.updated_at = now
