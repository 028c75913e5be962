"""Shared column mixins for discussion content.

``ContentNode`` is the entity shape shared by top-level comments and replies:
identity, body, denormalised author name and timestamps. Concrete models add
their container and parent linkage.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(UTC)


def new_id() -> str:
    """Return a fresh string UUID primary key."""
    return str(uuid.uuid4())


class Identified:
    """Primary key mixin using string UUIDs."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)


class Timestamped:
    """Creation and modification timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )


class ContentNode(Identified, Timestamped):
    """Comment or reply body authored by a user.

    ``author`` is the display name at the time of writing, not a foreign key.
    """

    body: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
