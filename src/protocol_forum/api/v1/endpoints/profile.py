# src/protocol_forum/api/v1/endpoints/profile.py
"""Endpoints scoped to the authenticated user's own content."""

from fastapi import APIRouter, Query

from protocol_forum.api.v1.dependencies import CurrentUserDep, SessionDep
from protocol_forum.schemas.comment import CommentOut, ReplyOut
from protocol_forum.schemas.common import Page
from protocol_forum.schemas.review import ReviewOut
from protocol_forum.services.comment_service import CommentService
from protocol_forum.services.ordering import SortPolicy
from protocol_forum.services.reply_service import ReplyService
from protocol_forum.services.review_service import ReviewService

router = APIRouter(prefix="/profile", tags=["profile"])
comment_service = CommentService()
reply_service = ReplyService()
review_service = ReviewService()


@router.get("/comments", response_model=Page[CommentOut])
async def my_comments(
    current_user: CurrentUserDep,
    db: SessionDep,
    sort: SortPolicy = Query(SortPolicy.RECENT, description="recent, oldest or popular"),
    per_page: int | None = Query(None),
    page: int = Query(1),
    highlight_comment: str | None = Query(None),
) -> Page[CommentOut]:
    """List the current user's top-level comments across all threads."""
    result = comment_service.list_user_comments(
        db,
        current_user.name,
        sort=sort,
        per_page=per_page,
        page=page,
        highlight_comment_id=highlight_comment,
        viewer_id=current_user.id,
    )
    return Page[CommentOut].model_validate(result)


@router.get("/replies", response_model=Page[ReplyOut])
async def my_replies(
    current_user: CurrentUserDep,
    db: SessionDep,
    sort: SortPolicy = Query(SortPolicy.RECENT, description="recent, oldest or popular"),
    per_page: int | None = Query(None),
    page: int = Query(1),
    highlight_reply: str | None = Query(None),
) -> Page[ReplyOut]:
    result = reply_service.list_user_replies(
        db,
        current_user.name,
        sort=sort,
        per_page=per_page,
        page=page,
        highlight_reply_id=highlight_reply,
        viewer_id=current_user.id,
    )
    return Page[ReplyOut].model_validate(result)


@router.get("/reviews", response_model=Page[ReviewOut])
async def my_reviews(
    current_user: CurrentUserDep,
    db: SessionDep,
    sort: SortPolicy = Query(SortPolicy.RECENT, description="recent, oldest, popular, rating_high or rating_low"),
    per_page: int | None = Query(None),
    page: int = Query(1),
    highlight_review: str | None = Query(None),
) -> Page[ReviewOut]:
    """List the current user's reviews across all protocols."""
    result = review_service.list_user_reviews(
        db,
        current_user.name,
        sort=sort,
        per_page=per_page,
        page=page,
        highlight_review_id=highlight_review,
        viewer_id=current_user.id,
    )
    return Page[ReviewOut].model_validate(result)
