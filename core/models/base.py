"""Base model and mixins for all SQLAlchemy models.

Provides:
- Base: Declarative base class for all models
- RecordMixin: Adds a UUID primary key and audit timestamps

Every table-backed record inherits from Base. Records that need an
identity and audit columns also include RecordMixin.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base for all task tracker models."""
    pass


class RecordMixin:
    """Mixin providing identity and standard audit columns.

    Adds:
    - id: UUID primary key (auto-generated)
    - created_at: Timestamp set on insert (callers may supply their own)
    - updated_at: Timestamp updated on every change
    """

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )
