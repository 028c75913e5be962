# src/protocol_forum/api/v1/endpoints/votes.py
"""Vote-related endpoints for the Protocol Forum API."""

from fastapi import APIRouter, status

from protocol_forum.api.v1.dependencies import CurrentUserDep, OptionalUserDep, SessionDep
from protocol_forum.models.vote import VotableType
from protocol_forum.schemas.vote import VoteCreate, VoteOut
from protocol_forum.services.vote_service import VoteService

router = APIRouter(prefix="/votes", tags=["votes"])
vote_service = VoteService()


@router.post("/", response_model=VoteOut, status_code=status.HTTP_200_OK)
async def cast_vote(
    vote_data: VoteCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> VoteOut:
    """Cast, switch or withdraw a vote.

    Repeating the polarity already held removes the vote.
    """
    result = vote_service.vote(
        db,
        vote_data.votable_type,
        vote_data.votable_id,
        current_user,
        vote_data.polarity,
    )
    db.commit()
    return VoteOut(
        message=result.message,
        outcome=result.outcome,
        votable_type=result.votable_type,
        votable_id=result.votable_id,
        upvotes=result.aggregate.upvotes,
        downvotes=result.aggregate.downvotes,
        vote_score=result.aggregate.score,
        user_vote=result.polarity,
    )


@router.get("/{votable_type}/{votable_id}", response_model=VoteOut)
async def get_votes(
    votable_type: VotableType,
    votable_id: str,
    db: SessionDep,
    viewer: OptionalUserDep,
) -> VoteOut:
    """Return vote totals for a votable and the viewer's own vote."""
    aggregate, mine = vote_service.summary(db, votable_type, votable_id, viewer)
    return VoteOut(
        message="Votes retrieved successfully",
        outcome=None,
        votable_type=votable_type,
        votable_id=votable_id,
        upvotes=aggregate.upvotes,
        downvotes=aggregate.downvotes,
        vote_score=aggregate.score,
        user_vote=mine,
    )
