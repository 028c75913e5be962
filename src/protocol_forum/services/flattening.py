"""Reply flattening.

Users may reply to replies indefinitely, but storage and display keep exactly
two levels under a comment: top-level replies and the nested replies grouped
beneath them. A nested reply always hangs off the original top-level reply
while ``reply_to_id`` records who was actually being answered.
"""
from __future__ import annotations

from protocol_forum.core.errors import InvalidTarget
from protocol_forum.models import Comment, Reply
from protocol_forum.models.content import ContentNode


def top_level_id(reply: Reply) -> str:
    """Return the id of the top-level reply a reply is grouped under."""
    return reply.parent_id if reply.parent_id is not None else reply.id


class ThreadFlattener:
    """Builds reply nodes that respect the two-level structure."""

    @staticmethod
    def create_reply(
        target: ContentNode,
        body: str,
        author: str,
        user_id: str | None = None,
    ) -> Reply:
        """Build a top-level reply to a comment.

        Raises:
            InvalidTarget: If ``target`` is not a top-level comment.
        """
        if not isinstance(target, Comment):
            raise InvalidTarget("Replies must target a top-level comment; use the nested reply endpoint")
        return Reply(
            comment_id=target.id,
            parent_id=None,
            reply_to_id=None,
            body=body,
            author=author,
            user_id=user_id,
        )

    @staticmethod
    def create_nested_reply(
        target: ContentNode,
        body: str,
        author: str,
        user_id: str | None = None,
    ) -> Reply:
        """Build a reply to an existing reply, flattened under its top-level reply.

        Raises:
            InvalidTarget: If ``target`` is a top-level comment rather than a reply.
        """
        if not isinstance(target, Reply):
            raise InvalidTarget("Nested replies must target a reply; use the comment reply endpoint")
        return Reply(
            comment_id=target.comment_id,
            parent_id=top_level_id(target),
            reply_to_id=target.id,
            body=body,
            author=author,
            user_id=user_id,
        )


__all__ = ["ThreadFlattener", "top_level_id"]
