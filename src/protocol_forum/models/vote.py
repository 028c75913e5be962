"""Models capturing voting interactions on discussion content."""

from __future__ import annotations

from enum import Enum

from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from protocol_forum.db.session import Base
from protocol_forum.models.content import Identified, Timestamped


class VotableType(str, Enum):
    """Closed set of entity kinds that accept votes."""

    THREAD = "thread"
    COMMENT = "comment"
    REPLY = "reply"
    REVIEW = "review"


class Polarity(str, Enum):
    """Direction of a vote."""

    UP = "up"
    DOWN = "down"


def _enum_values(enum_cls: type[Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class Vote(Identified, Timestamped, Base):
    """Per-user vote on a thread, comment, reply or review.

    At most one row exists per (user, votable) pair; repeating a polarity
    removes the row rather than adding another.
    """

    __tablename__ = "votes"
    __table_args__ = (
        UniqueConstraint("user_id", "votable_type", "votable_id", name="uq_votes_user_votable"),
        Index("ix_votes_votable_polarity", "votable_type", "votable_id", "polarity"),
    )

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    votable_type: Mapped[VotableType] = mapped_column(
        SAEnum(VotableType, native_enum=False, length=16, values_callable=_enum_values),
        nullable=False,
    )
    votable_id: Mapped[str] = mapped_column(String(36), nullable=False)
    polarity: Mapped[Polarity] = mapped_column(
        SAEnum(Polarity, native_enum=False, length=8, values_callable=_enum_values),
        nullable=False,
    )
