"""SQLAlchemy model for replies under a comment.

Replies form at most two levels inside a comment: top-level replies have
``parent_id = None`` and nested replies point at a top-level reply.
``reply_to_id`` keeps the reply the author actually answered.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from protocol_forum.db.session import Base
from protocol_forum.models.content import ContentNode
from protocol_forum.models.vote import VotableType

if TYPE_CHECKING:
    from protocol_forum.models.comment import Comment


class Reply(ContentNode, Base):
    """Reply to a comment, or a flattened reply to another reply."""

    __tablename__ = "replies"
    __votable_type__ = VotableType.REPLY

    comment_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("comments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    parent_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("replies.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    reply_to_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("replies.id", ondelete="SET NULL"),
        nullable=True,
    )
    user_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    comment: Mapped[Comment] = relationship(back_populates="replies")
    parent: Mapped[Reply | None] = relationship(
        remote_side="Reply.id",
        foreign_keys=[parent_id],
        back_populates="children",
    )
    children: Mapped[list[Reply]] = relationship(
        foreign_keys=[parent_id],
        back_populates="parent",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    reply_to: Mapped[Reply | None] = relationship(
        remote_side="Reply.id",
        foreign_keys=[reply_to_id],
    )

    @property
    def container_id(self) -> str:
        return self.comment_id
