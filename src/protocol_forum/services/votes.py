"""Vote ledger: toggle-style vote recording and aggregation.

A user holds at most one vote per votable. Submitting the polarity already
held removes the vote; submitting the other polarity flips it in place.
Aggregates are always recomputed from the stored vote set.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from sqlalchemy import case, delete, func, select
from sqlalchemy.orm import Session

from protocol_forum.models.vote import Polarity, VotableType, Vote

logger = logging.getLogger(__name__)


class VoteOutcome(str, Enum):
    """Effect a vote submission had on the ledger."""

    CREATED = "created"
    UPDATED = "updated"
    REMOVED = "removed"


@dataclass(frozen=True)
class VoteAggregate:
    """Upvote and downvote counts for one votable."""

    upvotes: int = 0
    downvotes: int = 0

    @property
    def score(self) -> int:
        return self.upvotes - self.downvotes


def aggregate(votes: Iterable[Vote | Polarity]) -> VoteAggregate:
    """Count polarities in a single pass over one snapshot of a vote set."""
    upvotes = downvotes = 0
    for vote in votes:
        polarity = vote if isinstance(vote, Polarity) else vote.polarity
        if polarity is Polarity.UP:
            upvotes += 1
        else:
            downvotes += 1
    return VoteAggregate(upvotes=upvotes, downvotes=downvotes)


class VoteLedger:
    """Reads and writes the ``votes`` table for any votable kind."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def find(self, votable_type: VotableType, votable_id: str, user_id: str) -> Vote | None:
        """Return the user's vote on a votable, locking the row for the current transaction."""
        return self.session.scalars(
            select(Vote)
            .where(
                Vote.votable_type == votable_type,
                Vote.votable_id == votable_id,
                Vote.user_id == user_id,
            )
            .with_for_update()
        ).first()

    def record(
        self,
        votable_type: VotableType,
        votable_id: str,
        user_id: str,
        polarity: Polarity,
    ) -> VoteOutcome:
        """Apply a vote submission and return what happened.

        The lookup and the write share the caller's transaction; the unique
        constraint on (user, votable) guards against concurrent inserts.
        """
        existing = self.find(votable_type, votable_id, user_id)

        if existing is None:
            self.session.add(
                Vote(
                    user_id=user_id,
                    votable_type=votable_type,
                    votable_id=votable_id,
                    polarity=polarity,
                )
            )
            outcome = VoteOutcome.CREATED
        elif existing.polarity == polarity:
            self.session.delete(existing)
            outcome = VoteOutcome.REMOVED
        else:
            existing.polarity = polarity
            outcome = VoteOutcome.UPDATED

        self.session.flush()
        logger.debug(
            "Vote %s on %s %s by %s (%s)",
            outcome.value,
            votable_type.value,
            votable_id,
            user_id,
            polarity.value,
        )
        return outcome

    def aggregate_for(self, votable_type: VotableType, votable_id: str) -> VoteAggregate:
        """Load the vote set for one votable and aggregate it."""
        polarities = self.session.scalars(
            select(Vote.polarity).where(
                Vote.votable_type == votable_type,
                Vote.votable_id == votable_id,
            )
        ).all()
        return aggregate(polarities)

    def aggregate_many(
        self,
        votable_type: VotableType,
        votable_ids: list[str],
    ) -> dict[str, VoteAggregate]:
        """Aggregate votes for a page of votables in one grouped query.

        Ids without votes are present with zero counts.
        """
        aggregates = {votable_id: VoteAggregate() for votable_id in votable_ids}
        if not votable_ids:
            return aggregates
        rows = self.session.execute(
            select(
                Vote.votable_id,
                func.sum(case((Vote.polarity == Polarity.UP, 1), else_=0)),
                func.sum(case((Vote.polarity == Polarity.DOWN, 1), else_=0)),
            )
            .where(Vote.votable_type == votable_type, Vote.votable_id.in_(votable_ids))
            .group_by(Vote.votable_id)
        )
        for votable_id, upvotes, downvotes in rows:
            aggregates[votable_id] = VoteAggregate(
                upvotes=int(upvotes or 0),
                downvotes=int(downvotes or 0),
            )
        return aggregates

    def user_votes(
        self,
        votable_type: VotableType,
        votable_ids: list[str],
        user_id: str | None,
    ) -> dict[str, Polarity]:
        """Return the viewer's own polarity per votable; empty for anonymous viewers."""
        if user_id is None or not votable_ids:
            return {}
        rows = self.session.execute(
            select(Vote.votable_id, Vote.polarity).where(
                Vote.votable_type == votable_type,
                Vote.votable_id.in_(votable_ids),
                Vote.user_id == user_id,
            )
        )
        return {votable_id: polarity for votable_id, polarity in rows}

    def purge(self, votable_type: VotableType, votable_ids: list[str]) -> None:
        """Delete every vote recorded against the given votables."""
        if not votable_ids:
            return
        self.session.execute(
            delete(Vote).where(
                Vote.votable_type == votable_type,
                Vote.votable_id.in_(votable_ids),
            )
        )


__all__ = ["VoteAggregate", "VoteLedger", "VoteOutcome", "aggregate"]
