"""SQLAlchemy models for the Protocol Forum application."""

from .comment import Comment
from .protocol import Protocol, Thread
from .reply import Reply
from .review import Review
from .user import User
from .vote import Polarity, VotableType, Vote

__all__ = [
    "Comment",
    "Protocol", "Thread",
    "Reply",
    "Review",
    "User",
    "Polarity", "VotableType", "Vote",
]
