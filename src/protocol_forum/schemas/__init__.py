# src/protocol_forum/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .comment import BodyIn, CommentOut, ReplyOut
from .common import HighlightInfoOut, Page, PaginationOut
from .protocol import (
    ProtocolCreate,
    ProtocolOut,
    ProtocolSummaryOut,
    ThreadCreate,
    ThreadOut,
    ThreadSummaryOut,
)
from .review import ReviewCreate, ReviewOut, ReviewUpdate
from .vote import VoteCreate, VoteOut

__all__ = [
    "BodyIn", "CommentOut", "ReplyOut",
    "HighlightInfoOut", "Page", "PaginationOut",
    "ProtocolCreate", "ProtocolOut", "ProtocolSummaryOut",
    "ThreadCreate", "ThreadOut", "ThreadSummaryOut",
    "ReviewCreate", "ReviewOut", "ReviewUpdate",
    "VoteCreate", "VoteOut",
]
