"""SQLAlchemy model for forum identities."""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from protocol_forum.db.session import Base
from protocol_forum.models.content import Identified, Timestamped


class User(Identified, Timestamped, Base):
    """Registered user; ``name`` is what content records as its author."""

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
