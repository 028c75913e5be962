# src/protocol_forum/schemas/comment.py
"""Comment and reply Pydantic schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from protocol_forum.models.vote import Polarity


class BodyIn(BaseModel):
    """Schema for creating or editing a comment or reply."""

    body: str = Field(..., min_length=1, description="Markdown body")


class ReplyOut(BaseModel):
    """Reply as returned by the API; ``children`` is filled for top-level replies."""

    id: str
    comment_id: str
    parent_id: str | None
    reply_to_id: str | None
    reply_to_author: str | None = None
    user_id: str | None = None
    body: str
    author: str
    created_at: datetime
    updated_at: datetime
    upvotes: int = 0
    downvotes: int = 0
    vote_score: int = 0
    user_vote: Polarity | None = None
    nested_replies_count: int = 0
    children: list[ReplyOut] = Field(default_factory=list)
    is_highlighted: bool = False

    model_config = ConfigDict(from_attributes=True)


class CommentOut(BaseModel):
    """Top-level comment with vote totals and a reply preview."""

    id: str
    thread_id: str
    body: str
    author: str
    created_at: datetime
    updated_at: datetime
    upvotes: int = 0
    downvotes: int = 0
    vote_score: int = 0
    user_vote: Polarity | None = None
    replies_count: int = 0
    replies: list[ReplyOut] = Field(default_factory=list)
    is_highlighted: bool = False
    highlighted_reply_id: str | None = None
    thread_title: str | None = None

    model_config = ConfigDict(from_attributes=True)
