"""SQLAlchemy model for top-level thread comments."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from protocol_forum.db.session import Base
from protocol_forum.models.content import ContentNode
from protocol_forum.models.vote import VotableType

if TYPE_CHECKING:
    from protocol_forum.models.protocol import Thread
    from protocol_forum.models.reply import Reply


class Comment(ContentNode, Base):
    """Top-level comment on a thread. Comments never have a parent."""

    __tablename__ = "comments"
    __votable_type__ = VotableType.COMMENT

    thread_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("threads.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    thread: Mapped[Thread] = relationship(back_populates="comments")
    replies: Mapped[list[Reply]] = relationship(
        back_populates="comment",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    parent_id = None
    reply_to_id = None

    @property
    def container_id(self) -> str:
        return self.thread_id
