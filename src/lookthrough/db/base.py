"""Database base class and shared column mixins."""

from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    """Timezone-aware current time used for all last-updated stamps."""
    return datetime.now(UTC)


class Base(AsyncAttrs, DeclarativeBase):
    """Base class for all database models."""

    pass


class LastUpdatedMixin:
    """Mixin for the last_updated timestamp carried by portfolio records.

    Uses a timezone-aware column (TIMESTAMP WITH TIME ZONE in PostgreSQL)
    and refreshes automatically whenever the row is updated.
    """

    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )


__all__ = ["Base", "LastUpdatedMixin", "utcnow"]
