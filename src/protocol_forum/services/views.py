"""Output shapes produced by the discussion services.

Each listing returns explicit dataclasses; the API layer serialises them
through the Pydantic schemas in :mod:`protocol_forum.schemas`.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from protocol_forum.models import Comment, Polarity, Protocol, Reply, Review, Thread
from protocol_forum.services.votes import VoteAggregate


@dataclass
class ReplyView:
    """A reply with its vote totals and, for top-level replies, grouped children."""

    id: str
    comment_id: str
    parent_id: str | None
    reply_to_id: str | None
    reply_to_author: str | None
    user_id: str | None
    body: str
    author: str
    created_at: datetime
    updated_at: datetime
    upvotes: int = 0
    downvotes: int = 0
    vote_score: int = 0
    user_vote: Polarity | None = None
    nested_replies_count: int = 0
    children: list[ReplyView] = field(default_factory=list)
    is_highlighted: bool = False

    @classmethod
    def from_model(
        cls,
        reply: Reply,
        votes: VoteAggregate,
        *,
        user_vote: Polarity | None = None,
        reply_to_author: str | None = None,
        nested_replies_count: int = 0,
        is_highlighted: bool = False,
    ) -> ReplyView:
        return cls(
            id=reply.id,
            comment_id=reply.comment_id,
            parent_id=reply.parent_id,
            reply_to_id=reply.reply_to_id,
            reply_to_author=reply_to_author,
            user_id=reply.user_id,
            body=reply.body,
            author=reply.author,
            created_at=reply.created_at,
            updated_at=reply.updated_at,
            upvotes=votes.upvotes,
            downvotes=votes.downvotes,
            vote_score=votes.score,
            user_vote=user_vote,
            nested_replies_count=nested_replies_count,
            is_highlighted=is_highlighted,
        )


@dataclass
class CommentView:
    """A top-level comment with vote totals and a preview of its replies."""

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
    replies: list[ReplyView] = field(default_factory=list)
    is_highlighted: bool = False
    highlighted_reply_id: str | None = None
    thread_title: str | None = None

    @classmethod
    def from_model(
        cls,
        comment: Comment,
        votes: VoteAggregate,
        *,
        user_vote: Polarity | None = None,
        replies_count: int = 0,
        replies: list[ReplyView] | None = None,
        is_highlighted: bool = False,
        highlighted_reply_id: str | None = None,
        thread_title: str | None = None,
    ) -> CommentView:
        return cls(
            id=comment.id,
            thread_id=comment.thread_id,
            body=comment.body,
            author=comment.author,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
            upvotes=votes.upvotes,
            downvotes=votes.downvotes,
            vote_score=votes.score,
            user_vote=user_vote,
            replies_count=replies_count,
            replies=list(replies or []),
            is_highlighted=is_highlighted,
            highlighted_reply_id=highlighted_reply_id,
            thread_title=thread_title,
        )


@dataclass
class ReviewView:
    """A protocol review; votes read as helpful / not helpful."""

    id: str
    protocol_id: str
    protocol_title: str | None
    rating: int
    feedback: str | None
    author: str
    created_at: datetime
    updated_at: datetime
    helpful_count: int = 0
    not_helpful_count: int = 0
    user_vote: Polarity | None = None
    is_highlighted: bool = False

    @classmethod
    def from_model(
        cls,
        review: Review,
        votes: VoteAggregate,
        *,
        user_vote: Polarity | None = None,
        protocol_title: str | None = None,
        is_highlighted: bool = False,
    ) -> ReviewView:
        return cls(
            id=review.id,
            protocol_id=review.protocol_id,
            protocol_title=protocol_title,
            rating=review.rating,
            feedback=review.feedback,
            author=review.author,
            created_at=review.created_at,
            updated_at=review.updated_at,
            helpful_count=votes.upvotes,
            not_helpful_count=votes.downvotes,
            user_vote=user_vote,
            is_highlighted=is_highlighted,
        )


@dataclass
class ThreadView:
    """A discussion thread with its vote totals and comment count."""

    id: str
    protocol_id: str
    title: str
    body: str
    author: str
    created_at: datetime
    updated_at: datetime
    upvotes: int = 0
    downvotes: int = 0
    vote_score: int = 0
    user_vote: Polarity | None = None
    comments_count: int = 0
    is_highlighted: bool = False

    @classmethod
    def from_model(
        cls,
        thread: Thread,
        votes: VoteAggregate,
        *,
        user_vote: Polarity | None = None,
        comments_count: int = 0,
        is_highlighted: bool = False,
    ) -> ThreadView:
        return cls(
            id=thread.id,
            protocol_id=thread.protocol_id,
            title=thread.title,
            body=thread.body,
            author=thread.author,
            created_at=thread.created_at,
            updated_at=thread.updated_at,
            upvotes=votes.upvotes,
            downvotes=votes.downvotes,
            vote_score=votes.score,
            user_vote=user_vote,
            comments_count=comments_count,
            is_highlighted=is_highlighted,
        )


@dataclass
class ProtocolView:
    id: str
    title: str
    content: str
    author: str
    created_at: datetime
    updated_at: datetime
    threads_count: int = 0
    reviews_count: int = 0
    average_rating: float | None = None

    @classmethod
    def from_model(
        cls,
        protocol: Protocol,
        *,
        threads_count: int = 0,
        reviews_count: int = 0,
        average_rating: float | None = None,
    ) -> ProtocolView:
        return cls(
            id=protocol.id,
            title=protocol.title,
            content=protocol.content,
            author=protocol.author,
            created_at=protocol.created_at,
            updated_at=protocol.updated_at,
            threads_count=threads_count,
            reviews_count=reviews_count,
            average_rating=average_rating,
        )


__all__ = ["CommentView", "ProtocolView", "ReplyView", "ReviewView", "ThreadView"]
