"""Domain errors raised by the discussion services.

Routers translate these into HTTP responses through a single exception
handler registered in :mod:`protocol_forum.main`.
"""

from __future__ import annotations


class ForumError(RuntimeError):
    """Base exception for discussion-domain failures.

    Attributes:
        status_code: HTTP status the transport layer maps this error to.
    """

    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFound(ForumError):
    """Raised when a referenced protocol, thread, comment, reply, review or votable is missing."""

    status_code = 404


class InvalidTarget(ForumError):
    """Raised when a reply targets the wrong level of the hierarchy."""

    status_code = 422


class Forbidden(ForumError):
    """Raised when a user edits or deletes content authored by someone else."""

    status_code = 403


class ValidationFailure(ForumError):
    """Raised for malformed bodies, ratings, polarities or filters."""

    status_code = 422


__all__ = ["ForumError", "NotFound", "InvalidTarget", "Forbidden", "ValidationFailure"]
