"""Voting on threads, comments, replies and reviews."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from protocol_forum.core.errors import NotFound
from protocol_forum.models import Comment, Reply, Review, Thread, User
from protocol_forum.models.vote import Polarity, VotableType
from protocol_forum.services.notifications import Notifier, get_notifier
from protocol_forum.services.votes import VoteAggregate, VoteLedger, VoteOutcome

logger = logging.getLogger(__name__)

_MESSAGES = {
    VoteOutcome.CREATED: "Voted successfully",
    VoteOutcome.UPDATED: "Vote updated successfully",
    VoteOutcome.REMOVED: "Vote removed successfully",
}


@dataclass(frozen=True)
class VoteResult:
    """Outcome of one vote submission plus the fresh aggregate."""

    votable_type: VotableType
    votable_id: str
    outcome: VoteOutcome
    aggregate: VoteAggregate
    polarity: Polarity | None

    @property
    def message(self) -> str:
        return _MESSAGES[self.outcome]


def votable_model(votable_type: VotableType) -> type[Thread] | type[Comment] | type[Reply] | type[Review]:
    """Map a votable kind to its model class."""
    match votable_type:
        case VotableType.THREAD:
            return Thread
        case VotableType.COMMENT:
            return Comment
        case VotableType.REPLY:
            return Reply
        case VotableType.REVIEW:
            return Review
    raise NotFound(f"Unknown votable type {votable_type!r}")


class VoteService:
    """Applies toggle votes and reports the resulting aggregate."""

    def __init__(self, notifier: Notifier | None = None) -> None:
        self.notifier = notifier or get_notifier()

    def vote(
        self,
        session: Session,
        votable_type: VotableType,
        votable_id: str,
        user: User,
        polarity: Polarity,
    ) -> VoteResult:
        """Record ``user``'s vote and return the outcome with recomputed counts.

        Raises:
            NotFound: If the votable does not exist.
        """
        votable = session.get(votable_model(votable_type), votable_id)
        if votable is None:
            raise NotFound(f"{votable_type.value.capitalize()} not found")

        ledger = VoteLedger(session)
        outcome = ledger.record(votable_type, votable_id, user.id, polarity)
        aggregate = ledger.aggregate_for(votable_type, votable_id)

        if outcome is not VoteOutcome.REMOVED:
            self.notifier.notify_vote(
                recipient=votable.author,
                actor=user.name,
                votable_type=votable_type,
                votable_id=votable_id,
                polarity=polarity,
            )

        return VoteResult(
            votable_type=votable_type,
            votable_id=votable_id,
            outcome=outcome,
            aggregate=aggregate,
            polarity=None if outcome is VoteOutcome.REMOVED else polarity,
        )

    def summary(
        self,
        session: Session,
        votable_type: VotableType,
        votable_id: str,
        user: User | None = None,
    ) -> tuple[VoteAggregate, Polarity | None]:
        """Return the aggregate for a votable and the viewer's own vote, if any."""
        if session.get(votable_model(votable_type), votable_id) is None:
            raise NotFound(f"{votable_type.value.capitalize()} not found")
        ledger = VoteLedger(session)
        mine = ledger.user_votes(votable_type, [votable_id], user.id if user else None)
        return ledger.aggregate_for(votable_type, votable_id), mine.get(votable_id)


__all__ = ["VoteResult", "VoteService", "votable_model"]
