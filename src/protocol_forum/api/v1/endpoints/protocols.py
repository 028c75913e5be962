# src/protocol_forum/api/v1/endpoints/protocols.py
"""Protocol and thread endpoints."""

from fastapi import APIRouter, Query, status

from protocol_forum.api.v1.dependencies import (
    CurrentUserDep,
    OptionalUserDep,
    SessionDep,
    resolve_author_filter,
)
from protocol_forum.models import Protocol, Thread
from protocol_forum.schemas.common import Page
from protocol_forum.schemas.protocol import (
    ProtocolCreate,
    ProtocolOut,
    ProtocolSummaryOut,
    ThreadCreate,
    ThreadOut,
    ThreadSummaryOut,
)
from protocol_forum.services.ordering import SortPolicy
from protocol_forum.services.protocol_service import ProtocolService

router = APIRouter(tags=["protocols"])
protocol_service = ProtocolService()


@router.get("/protocols", response_model=Page[ProtocolSummaryOut])
async def list_protocols(
    db: SessionDep,
    viewer: OptionalUserDep,
    sort: SortPolicy = Query(SortPolicy.RECENT, description="recent or oldest"),
    author: str | None = Query(None, description="Author name, or 'current_user'"),
    per_page: int | None = Query(None),
    page: int = Query(1),
) -> Page[ProtocolSummaryOut]:
    result = protocol_service.list_protocols(
        db,
        author=resolve_author_filter(author, viewer),
        sort=sort,
        per_page=per_page,
        page=page,
    )
    return Page[ProtocolSummaryOut].model_validate(result)


@router.post("/protocols", response_model=ProtocolOut, status_code=status.HTTP_201_CREATED)
async def create_protocol(
    payload: ProtocolCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> Protocol:
    """Publish a new protocol."""
    protocol = protocol_service.create_protocol(db, current_user.name, payload.title, payload.content)
    db.commit()
    return protocol


@router.get("/protocols/{protocol_id}", response_model=ProtocolOut)
async def get_protocol(protocol_id: str, db: SessionDep) -> Protocol:
    return protocol_service.get_protocol(db, protocol_id)


@router.get("/protocols/{protocol_id}/threads", response_model=Page[ThreadSummaryOut])
async def list_protocol_threads(
    protocol_id: str,
    db: SessionDep,
    viewer: OptionalUserDep,
    sort: SortPolicy = Query(SortPolicy.RECENT, description="recent, oldest or popular"),
    per_page: int | None = Query(None),
    page: int = Query(1),
    highlight_thread: str | None = Query(None),
) -> Page[ThreadSummaryOut]:
    """List a protocol's threads with vote totals and comment counts."""
    result = protocol_service.list_threads(
        db,
        protocol_id=protocol_id,
        sort=sort,
        per_page=per_page,
        page=page,
        highlight_thread_id=highlight_thread,
        viewer_id=viewer.id if viewer else None,
    )
    return Page[ThreadSummaryOut].model_validate(result)


@router.post(
    "/protocols/{protocol_id}/threads",
    response_model=ThreadOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_thread(
    protocol_id: str,
    payload: ThreadCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> Thread:
    """Open a discussion thread under a protocol."""
    thread = protocol_service.create_thread(
        db, protocol_id, current_user.name, payload.title, payload.body
    )
    db.commit()
    return thread


@router.get("/threads", response_model=Page[ThreadSummaryOut])
async def list_threads(
    db: SessionDep,
    viewer: OptionalUserDep,
    protocol_id: str | None = Query(None),
    sort: SortPolicy = Query(SortPolicy.RECENT, description="recent, oldest or popular"),
    author: str | None = Query(None, description="Author name, or 'current_user'"),
    per_page: int | None = Query(None),
    page: int = Query(1),
    highlight_thread: str | None = Query(None),
) -> Page[ThreadSummaryOut]:
    result = protocol_service.list_threads(
        db,
        protocol_id=protocol_id,
        author=resolve_author_filter(author, viewer),
        sort=sort,
        per_page=per_page,
        page=page,
        highlight_thread_id=highlight_thread,
        viewer_id=viewer.id if viewer else None,
    )
    return Page[ThreadSummaryOut].model_validate(result)


@router.get("/threads/{thread_id}", response_model=ThreadOut)
async def get_thread(thread_id: str, db: SessionDep) -> Thread:
    return protocol_service.get_thread(db, thread_id)
