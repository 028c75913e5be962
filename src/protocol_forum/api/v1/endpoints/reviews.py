# src/protocol_forum/api/v1/endpoints/reviews.py
"""Review endpoints for protocols."""

from fastapi import APIRouter, Query, status

from protocol_forum.api.v1.dependencies import (
    CurrentUserDep,
    OptionalUserDep,
    SessionDep,
    resolve_author_filter,
)
from protocol_forum.schemas.common import Page
from protocol_forum.schemas.review import ReviewCreate, ReviewOut, ReviewUpdate
from protocol_forum.services.ordering import SortPolicy
from protocol_forum.services.review_service import ReviewService

router = APIRouter(tags=["reviews"])
review_service = ReviewService()


@router.get("/protocols/{protocol_id}/reviews", response_model=Page[ReviewOut])
async def list_reviews(
    protocol_id: str,
    db: SessionDep,
    viewer: OptionalUserDep,
    sort: SortPolicy = Query(SortPolicy.RECENT),
    author: str | None = Query(None, description="Author name, or 'current_user'"),
    per_page: int | None = Query(None),
    page: int = Query(1),
    highlight_review: str | None = Query(None, description="Review to guarantee on the page"),
) -> Page[ReviewOut]:
    result = review_service.list_protocol_reviews(
        db,
        protocol_id,
        author=resolve_author_filter(author, viewer),
        sort=sort,
        per_page=per_page,
        page=page,
        highlight_review_id=highlight_review,
        viewer_id=viewer.id if viewer else None,
    )
    return Page[ReviewOut].model_validate(result)


@router.post(
    "/protocols/{protocol_id}/reviews",
    response_model=ReviewOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_review(
    protocol_id: str,
    payload: ReviewCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ReviewOut:
    review = review_service.create_review(
        db, protocol_id, current_user.name, payload.rating, payload.feedback
    )
    db.commit()
    return ReviewOut.model_validate(review_service.review_view(db, review, current_user.id))


@router.put("/reviews/{review_id}", response_model=ReviewOut)
async def update_review(
    review_id: str,
    payload: ReviewUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ReviewOut:
    review = review_service.update_review(
        db,
        review_id,
        current_user.name,
        rating=payload.rating,
        feedback=payload.feedback,
    )
    db.commit()
    return ReviewOut.model_validate(review_service.review_view(db, review, current_user.id))


@router.delete("/reviews/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_review(review_id: str, current_user: CurrentUserDep, db: SessionDep) -> None:
    review_service.delete_review(db, review_id, current_user.name)
    db.commit()
