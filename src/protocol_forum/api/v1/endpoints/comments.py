# src/protocol_forum/api/v1/endpoints/comments.py
"""Comment endpoints: thread listings with highlighting, and comment CRUD."""

from fastapi import APIRouter, Query, status

from protocol_forum.api.v1.dependencies import (
    CurrentUserDep,
    OptionalUserDep,
    SessionDep,
    resolve_author_filter,
)
from protocol_forum.schemas.comment import BodyIn, CommentOut
from protocol_forum.schemas.common import Page
from protocol_forum.services.comment_service import CommentService
from protocol_forum.services.ordering import SortPolicy

router = APIRouter(tags=["comments"])
comment_service = CommentService()


@router.get("/threads/{thread_id}/comments", response_model=Page[CommentOut])
async def list_comments(
    thread_id: str,
    db: SessionDep,
    viewer: OptionalUserDep,
    sort: SortPolicy = Query(SortPolicy.RECENT, description="recent, oldest or popular"),
    author: str | None = Query(None, description="Author name, or 'current_user'"),
    per_page: int | None = Query(None, description="Items per page (clamped to the maximum)"),
    page: int = Query(1, description="1-based page number"),
    highlight_comment: str | None = Query(None, description="Comment to guarantee on the page"),
    highlight_reply: str | None = Query(None, description="Reply whose comment to guarantee on the page"),
) -> Page[CommentOut]:
    """List a thread's top-level comments.

    When a highlight target lives on another page it is prepended to the
    items and ``highlight_info`` reports its natural page and position.
    """
    result = comment_service.list_page(
        db,
        thread_id,
        author=resolve_author_filter(author, viewer),
        sort=sort,
        per_page=per_page,
        page=page,
        highlight_comment_id=highlight_comment,
        highlight_reply_id=highlight_reply,
        viewer_id=viewer.id if viewer else None,
    )
    return Page[CommentOut].model_validate(result)


@router.post(
    "/threads/{thread_id}/comments",
    response_model=CommentOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    thread_id: str,
    payload: BodyIn,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> CommentOut:
    comment = comment_service.create_top_level_comment(db, thread_id, current_user.name, payload.body)
    db.commit()
    return CommentOut.model_validate(
        comment_service.get_comment_view(db, comment.id, current_user.id)
    )


@router.get("/comments/{comment_id}", response_model=CommentOut)
async def get_comment(comment_id: str, db: SessionDep, viewer: OptionalUserDep) -> CommentOut:
    view = comment_service.get_comment_view(db, comment_id, viewer.id if viewer else None)
    return CommentOut.model_validate(view)


@router.put("/comments/{comment_id}", response_model=CommentOut)
async def update_comment(
    comment_id: str,
    payload: BodyIn,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> CommentOut:
    """Edit a comment body; only its author may do so."""
    comment_service.edit_comment(db, comment_id, current_user.name, payload.body)
    db.commit()
    return CommentOut.model_validate(
        comment_service.get_comment_view(db, comment_id, current_user.id)
    )


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(comment_id: str, current_user: CurrentUserDep, db: SessionDep) -> None:
    """Delete a comment with all of its replies."""
    comment_service.delete_comment(db, comment_id, current_user.name)
    db.commit()
