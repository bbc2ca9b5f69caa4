"""Mixins for SQLAlchemy models."""

from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import Column, DateTime, String, func


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(UTC)


def new_id() -> str:
    """Opaque string identifier for new records."""
    return str(uuid4())


class IdMixin:
    """Mixin to add an opaque string primary key."""

    id = Column(String(36), primary_key=True, default=new_id)


class TimestampMixin:
    """Mixin to add created_at and updated_at timestamp columns.

    Timestamps are set client-side as well as by the server so rows created
    within the same second still sort by insertion order.
    """

    created_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        index=True,
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )
