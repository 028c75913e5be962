# src/protocol_forum/schemas/vote.py
"""Vote-related Pydantic schemas."""
from __future__ import annotations

from pydantic import BaseModel, Field

from protocol_forum.models.vote import Polarity, VotableType
from protocol_forum.services.votes import VoteOutcome


class VoteCreate(BaseModel):
    """Schema for casting or toggling a vote."""

    votable_type: VotableType
    votable_id: str = Field(..., min_length=1)
    polarity: Polarity = Field(..., description="'up' or 'down'; repeating a polarity removes the vote")


class VoteOut(BaseModel):
    message: str
    outcome: VoteOutcome | None = None
    votable_type: VotableType
    votable_id: str
    upvotes: int
    downvotes: int
    vote_score: int
    user_vote: Polarity | None = None
