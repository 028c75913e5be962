# src/protocol_forum/schemas/protocol.py
"""Protocol and thread Pydantic schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from protocol_forum.models.vote import Polarity


class ProtocolCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)


class ProtocolOut(BaseModel):
    id: str
    title: str
    content: str
    author: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ThreadCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    body: str = Field(..., min_length=1)


class ThreadOut(BaseModel):
    id: str
    protocol_id: str
    title: str
    body: str
    author: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProtocolSummaryOut(ProtocolOut):
    """Protocol as shown in listings."""

    threads_count: int = 0
    reviews_count: int = 0
    average_rating: float | None = None


class ThreadSummaryOut(ThreadOut):
    """Thread as shown in listings, with vote totals."""

    upvotes: int = 0
    downvotes: int = 0
    vote_score: int = 0
    user_vote: Polarity | None = None
    comments_count: int = 0
    is_highlighted: bool = False
