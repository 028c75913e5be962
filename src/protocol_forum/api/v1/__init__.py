# src/protocol_forum/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    comments_router,
    profile_router,
    protocols_router,
    replies_router,
    reviews_router,
    votes_router,
)

__all__ = [
    "protocols_router",
    "comments_router",
    "replies_router",
    "reviews_router",
    "votes_router",
    "profile_router",
]
