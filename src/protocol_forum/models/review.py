"""SQLAlchemy model for protocol reviews."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, SmallInteger, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from protocol_forum.db.session import Base
from protocol_forum.models.content import Identified, Timestamped
from protocol_forum.models.vote import VotableType

if TYPE_CHECKING:
    from protocol_forum.models.protocol import Protocol


class Review(Identified, Timestamped, Base):
    """Rating and optional feedback left on a protocol.

    Upvotes and downvotes on a review read as helpful / not helpful.
    """

    __tablename__ = "reviews"
    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating"),
    )
    __votable_type__ = VotableType.REVIEW

    protocol_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("protocols.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    rating: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
    author: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    protocol: Mapped[Protocol] = relationship(back_populates="reviews")
