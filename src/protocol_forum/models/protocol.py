"""SQLAlchemy models for protocols and their discussion threads."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from protocol_forum.db.session import Base
from protocol_forum.models.content import Identified, Timestamped
from protocol_forum.models.vote import VotableType

if TYPE_CHECKING:
    from protocol_forum.models.comment import Comment
    from protocol_forum.models.review import Review


class Protocol(Identified, Timestamped, Base):
    """A published protocol; owns threads and reviews."""

    __tablename__ = "protocols"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    threads: Mapped[list[Thread]] = relationship(
        back_populates="protocol",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    reviews: Mapped[list[Review]] = relationship(
        back_populates="protocol",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Thread(Identified, Timestamped, Base):
    """Discussion thread under a protocol; container of top-level comments."""

    __tablename__ = "threads"
    __votable_type__ = VotableType.THREAD

    protocol_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("protocols.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    protocol: Mapped[Protocol] = relationship(back_populates="threads")
    comments: Mapped[list[Comment]] = relationship(
        back_populates="thread",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
