"""
SQLAlchemy declarative base and common mixins.

Dependencies: sqlalchemy
System role: Foundation for all database models
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """
    SQLAlchemy declarative base for ORM model registration.

    All database models inherit from this class to ensure they're
    registered with the metadata and included in table creation.
    """

    pass


class TimestampMixin:
    """
    Mixin providing automatic timestamp tracking.

    inserted_at is set once on row creation and never changes.
    updated_at is refreshed on every update. Both use UTC.

    Attributes:
        inserted_at: Row creation timestamp (UTC, immutable)
        updated_at: Last modification timestamp (UTC)
    """

    inserted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )
