# src/protocol_forum/schemas/review.py
"""Review-related Pydantic schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from protocol_forum.models.vote import Polarity


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    feedback: str | None = Field(None, max_length=5000)


class ReviewUpdate(BaseModel):
    rating: int | None = Field(None, ge=1, le=5)
    feedback: str | None = Field(None, max_length=5000)


class ReviewOut(BaseModel):
    """Review with helpful / not helpful counts."""

    id: str
    protocol_id: str
    protocol_title: str | None = None
    rating: int
    feedback: str | None
    author: str
    created_at: datetime
    updated_at: datetime
    helpful_count: int = 0
    not_helpful_count: int = 0
    user_vote: Polarity | None = None
    is_highlighted: bool = False

    model_config = ConfigDict(from_attributes=True)
