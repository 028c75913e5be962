"""Data access helpers for discussion content."""
from __future__ import annotations

from collections import defaultdict
from typing import TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from protocol_forum.core.errors import NotFound
from protocol_forum.models import Comment, Protocol, Reply, Review, Thread

__all__ = ["ContentRepository"]

ModelT = TypeVar("ModelT", Protocol, Thread, Comment, Reply, Review)


class ContentRepository:
    """Thin wrapper around database access for protocols, threads, comments and replies."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get(self, model: type[ModelT], entity_id: str) -> ModelT | None:
        """Return an entity by identifier."""
        return self.session.get(model, entity_id)

    def require(self, model: type[ModelT], entity_id: str, label: str) -> ModelT:
        """Return an entity by identifier or raise ``NotFound``."""
        entity = self.get(model, entity_id)
        if entity is None:
            raise NotFound(f"{label} not found")
        return entity

    def load_children_batch(self, parent_ids: list[str]) -> dict[str, list[Reply]]:
        """Return nested replies grouped by their top-level reply, oldest first.

        Issues a single query for the whole page of parents.
        """
        grouped: dict[str, list[Reply]] = defaultdict(list)
        if not parent_ids:
            return grouped
        result = self.session.execute(
            select(Reply)
            .where(Reply.parent_id.in_(parent_ids))
            .order_by(Reply.created_at.asc(), Reply.id.asc())
        )
        for reply in result.scalars():
            grouped[reply.parent_id].append(reply)
        return grouped

    def load_top_level_replies_batch(
        self,
        comment_ids: list[str],
        limit_per_comment: int | None = None,
    ) -> dict[str, list[Reply]]:
        """Return top-level replies grouped by comment, newest first."""
        grouped: dict[str, list[Reply]] = defaultdict(list)
        if not comment_ids:
            return grouped
        result = self.session.execute(
            select(Reply)
            .where(Reply.comment_id.in_(comment_ids), Reply.parent_id.is_(None))
            .order_by(Reply.created_at.desc(), Reply.id.desc())
        )
        for reply in result.scalars():
            bucket = grouped[reply.comment_id]
            if limit_per_comment is None or len(bucket) < limit_per_comment:
                bucket.append(reply)
        return grouped

    def count_replies(self, comment_ids: list[str]) -> dict[str, int]:
        """Return the number of top-level replies per comment."""
        if not comment_ids:
            return {}
        rows = self.session.execute(
            select(Reply.comment_id, func.count(Reply.id))
            .where(Reply.comment_id.in_(comment_ids), Reply.parent_id.is_(None))
            .group_by(Reply.comment_id)
        )
        return {comment_id: count for comment_id, count in rows}

    def count_children(self, parent_ids: list[str]) -> dict[str, int]:
        """Return the number of nested replies per top-level reply."""
        if not parent_ids:
            return {}
        rows = self.session.execute(
            select(Reply.parent_id, func.count(Reply.id))
            .where(Reply.parent_id.in_(parent_ids))
            .group_by(Reply.parent_id)
        )
        return {parent_id: count for parent_id, count in rows}

    def reply_ids_under_comment(self, comment_id: str) -> list[str]:
        """Return ids of every reply stored under a comment."""
        return list(
            self.session.scalars(select(Reply.id).where(Reply.comment_id == comment_id))
        )

    def child_ids(self, reply_id: str) -> list[str]:
        """Return ids of the nested replies grouped under a top-level reply."""
        return list(self.session.scalars(select(Reply.id).where(Reply.parent_id == reply_id)))

    def count_comments(self, thread_ids: list[str]) -> dict[str, int]:
        """Return the number of top-level comments per thread."""
        if not thread_ids:
            return {}
        rows = self.session.execute(
            select(Comment.thread_id, func.count(Comment.id))
            .where(Comment.thread_id.in_(thread_ids))
            .group_by(Comment.thread_id)
        )
        return {thread_id: count for thread_id, count in rows}

    def count_threads(self, protocol_ids: list[str]) -> dict[str, int]:
        if not protocol_ids:
            return {}
        rows = self.session.execute(
            select(Thread.protocol_id, func.count(Thread.id))
            .where(Thread.protocol_id.in_(protocol_ids))
            .group_by(Thread.protocol_id)
        )
        return {protocol_id: count for protocol_id, count in rows}

    def review_stats(self, protocol_ids: list[str]) -> dict[str, tuple[int, float | None]]:
        """Return ``(review count, average rating)`` per protocol."""
        if not protocol_ids:
            return {}
        rows = self.session.execute(
            select(Review.protocol_id, func.count(Review.id), func.avg(Review.rating))
            .where(Review.protocol_id.in_(protocol_ids))
            .group_by(Review.protocol_id)
        )
        return {
            protocol_id: (count, float(average) if average is not None else None)
            for protocol_id, count, average in rows
        }

    def thread_titles(self, thread_ids: list[str]) -> dict[str, str]:
        if not thread_ids:
            return {}
        rows = self.session.execute(
            select(Thread.id, Thread.title).where(Thread.id.in_(thread_ids))
        )
        return {thread_id: title for thread_id, title in rows}

    def authors_of(self, reply_ids: list[str]) -> dict[str, str]:
        """Return author names keyed by reply id, for "replying to" context."""
        if not reply_ids:
            return {}
        rows = self.session.execute(
            select(Reply.id, Reply.author).where(Reply.id.in_(reply_ids))
        )
        return {reply_id: author for reply_id, author in rows}
