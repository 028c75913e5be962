# src/protocol_forum/api/v1/endpoints/replies.py
"""Reply endpoints.

``POST /comments/{id}/replies`` answers a comment; ``POST /replies/{id}/children``
answers a reply and is flattened under the original top-level reply.
"""

from fastapi import APIRouter, Query, status

from protocol_forum.api.v1.dependencies import CurrentUserDep, OptionalUserDep, SessionDep
from protocol_forum.schemas.comment import BodyIn, ReplyOut
from protocol_forum.schemas.common import Page
from protocol_forum.services.ordering import SortPolicy
from protocol_forum.services.reply_service import ReplyService

router = APIRouter(tags=["replies"])
reply_service = ReplyService()


@router.get("/comments/{comment_id}/replies", response_model=Page[ReplyOut])
async def list_replies(
    comment_id: str,
    db: SessionDep,
    viewer: OptionalUserDep,
    sort: SortPolicy = Query(SortPolicy.RECENT),
    per_page: int | None = Query(None),
    page: int = Query(1),
    highlight_reply: str | None = Query(None, description="Reply to guarantee on the page"),
) -> Page[ReplyOut]:
    result = reply_service.list_page(
        db,
        comment_id,
        sort=sort,
        per_page=per_page,
        page=page,
        highlight_reply_id=highlight_reply,
        viewer_id=viewer.id if viewer else None,
    )
    return Page[ReplyOut].model_validate(result)


@router.post(
    "/comments/{comment_id}/replies",
    response_model=ReplyOut,
    status_code=status.HTTP_201_CREATED,
)
async def reply_to_comment(
    comment_id: str,
    payload: BodyIn,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ReplyOut:
    reply = reply_service.create_reply(
        db, comment_id, current_user.name, payload.body, user_id=current_user.id
    )
    db.commit()
    return ReplyOut.model_validate(reply_service.get_reply_view(db, reply.id, current_user.id))


@router.get("/replies/{reply_id}/children", response_model=Page[ReplyOut])
async def list_children(
    reply_id: str,
    db: SessionDep,
    viewer: OptionalUserDep,
    per_page: int | None = Query(None),
    page: int = Query(1),
) -> Page[ReplyOut]:
    """List nested replies, oldest first."""
    result = reply_service.list_children(
        db,
        reply_id,
        per_page=per_page,
        page=page,
        viewer_id=viewer.id if viewer else None,
    )
    return Page[ReplyOut].model_validate(result)


@router.post(
    "/replies/{reply_id}/children",
    response_model=ReplyOut,
    status_code=status.HTTP_201_CREATED,
)
async def reply_to_reply(
    reply_id: str,
    payload: BodyIn,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ReplyOut:
    reply = reply_service.create_nested_reply(
        db, reply_id, current_user.name, payload.body, user_id=current_user.id
    )
    db.commit()
    return ReplyOut.model_validate(reply_service.get_reply_view(db, reply.id, current_user.id))


@router.get("/replies/{reply_id}", response_model=ReplyOut)
async def get_reply(reply_id: str, db: SessionDep, viewer: OptionalUserDep) -> ReplyOut:
    return ReplyOut.model_validate(
        reply_service.get_reply_view(db, reply_id, viewer.id if viewer else None)
    )


@router.put("/replies/{reply_id}", response_model=ReplyOut)
async def update_reply(
    reply_id: str,
    payload: BodyIn,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ReplyOut:
    reply_service.edit_reply(db, reply_id, current_user.name, payload.body)
    db.commit()
    return ReplyOut.model_validate(reply_service.get_reply_view(db, reply_id, current_user.id))


@router.delete("/replies/{reply_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_reply(reply_id: str, current_user: CurrentUserDep, db: SessionDep) -> None:
    reply_service.delete_reply(db, reply_id, current_user.name)
    db.commit()
