# src/protocol_forum/services/__init__.py
"""Business logic services for the Protocol Forum application."""

from .comment_service import CommentService
from .highlight import HighlightedPaginator, HighlightLocator, HighlightResult
from .protocol_service import ProtocolService
from .reply_service import ReplyService
from .review_service import ReviewService
from .vote_service import VoteService

__all__ = [
    "CommentService",
    "ReplyService",
    "ReviewService",
    "VoteService",
    "ProtocolService",
    "HighlightedPaginator",
    "HighlightLocator",
    "HighlightResult",
]
