# src/protocol_forum/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .comments import router as comments_router
from .profile import router as profile_router
from .protocols import router as protocols_router
from .replies import router as replies_router
from .reviews import router as reviews_router
from .votes import router as votes_router

__all__ = [
    "comments_router",
    "profile_router",
    "protocols_router",
    "replies_router",
    "reviews_router",
    "votes_router",
]
