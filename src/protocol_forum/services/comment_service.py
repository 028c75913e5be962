"""Top-level comment orchestration and thread listings."""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from protocol_forum.core.errors import Forbidden
from protocol_forum.core.settings import settings
from protocol_forum.models import Comment, Reply, Thread
from protocol_forum.models.vote import VotableType
from protocol_forum.repositories.content_repo import ContentRepository
from protocol_forum.services.flattening import top_level_id
from protocol_forum.services.highlight import HighlightedPaginator, HighlightResult
from protocol_forum.services.ordering import OrderedQuery, SortPolicy
from protocol_forum.services.reply_service import build_reply_views
from protocol_forum.services.validation import clean_body, normalize_page
from protocol_forum.services.views import CommentView, ReplyView
from protocol_forum.services.votes import VoteLedger

logger = logging.getLogger(__name__)


class CommentService:
    """Creates, edits and lists the top-level comments of a thread."""

    def __init__(self, paginator: HighlightedPaginator | None = None) -> None:
        self.paginator = paginator or HighlightedPaginator()

    def get_comment(self, session: Session, comment_id: str) -> Comment:
        return ContentRepository(session).require(Comment, comment_id, "Comment")

    def get_comment_view(
        self,
        session: Session,
        comment_id: str,
        viewer_id: str | None = None,
    ) -> CommentView:
        comment = self.get_comment(session, comment_id)
        return self._build_views(session, [comment], viewer_id=viewer_id)[0]

    def create_top_level_comment(
        self,
        session: Session,
        thread_id: str,
        author: str,
        body: str,
    ) -> Comment:
        ContentRepository(session).require(Thread, thread_id, "Thread")
        comment = Comment(thread_id=thread_id, author=author, body=clean_body(body))
        session.add(comment)
        session.flush()
        session.refresh(comment)
        logger.debug("Comment %s created in thread %s", comment.id, thread_id)
        return comment

    def edit_comment(self, session: Session, comment_id: str, author: str, body: str) -> Comment:
        comment = self.get_comment(session, comment_id)
        if comment.author != author:
            raise Forbidden("You can only edit your own comments")
        comment.body = clean_body(body)
        session.flush()
        return comment

    def delete_comment(self, session: Session, comment_id: str, author: str) -> None:
        """Delete a comment, every reply under it and all of their votes."""
        comment = self.get_comment(session, comment_id)
        if comment.author != author:
            raise Forbidden("You can only delete your own comments")
        ledger = VoteLedger(session)
        ledger.purge(VotableType.REPLY, ContentRepository(session).reply_ids_under_comment(comment.id))
        ledger.purge(VotableType.COMMENT, [comment.id])
        session.delete(comment)
        session.flush()
        logger.info("Deleted comment %s", comment_id)

    def list_page(
        self,
        session: Session,
        thread_id: str,
        *,
        author: str | None = None,
        sort: SortPolicy = SortPolicy.RECENT,
        per_page: int | None = None,
        page: int | None = 1,
        highlight_comment_id: str | None = None,
        highlight_reply_id: str | None = None,
        viewer_id: str | None = None,
    ) -> HighlightResult[CommentView]:
        """List a thread's comments with optional comment or reply highlighting.

        A reply target is carried by its comment: the comment is shown (and
        injected if it sits on another page) with the reply's group expanded.
        A comment target takes precedence when both are given.
        """
        ContentRepository(session).require(Thread, thread_id, "Thread")
        page, per_page = normalize_page(
            page, per_page, default=settings.default_per_page, maximum=settings.max_per_page
        )
        query = OrderedQuery(Comment, (Comment.thread_id == thread_id,), sort)
        if author is not None:
            query = query.where(Comment.author == author)

        target_reply = None
        if highlight_reply_id and not highlight_comment_id:
            target_reply = session.get(Reply, highlight_reply_id)

        if target_reply is not None:
            result = self.paginator.paginate_via_parent(
                session,
                query,
                per_page,
                page,
                child_id=target_reply.id,
                parent_id=target_reply.comment_id,
                target_type="reply",
            )
        else:
            result = self.paginator.paginate(
                session,
                query,
                per_page,
                page,
                target_id=highlight_comment_id,
                target_type="comment" if highlight_comment_id else None,
            )

        views = self._build_views(
            session,
            result.items,
            viewer_id=viewer_id,
            highlight_comment_id=highlight_comment_id,
            target_reply=target_reply,
        )
        return result.map(views)

    def list_user_comments(
        self,
        session: Session,
        author: str,
        *,
        sort: SortPolicy = SortPolicy.RECENT,
        per_page: int | None = None,
        page: int | None = 1,
        highlight_comment_id: str | None = None,
        viewer_id: str | None = None,
    ) -> HighlightResult[CommentView]:
        """List one author's top-level comments across threads, each with its thread title."""
        page, per_page = normalize_page(
            page, per_page, default=settings.profile_per_page, maximum=settings.profile_max_per_page
        )
        query = OrderedQuery(Comment, (Comment.author == author,), sort)
        result = self.paginator.paginate(
            session,
            query,
            per_page,
            page,
            target_id=highlight_comment_id,
            target_type="comment" if highlight_comment_id else None,
        )
        titles = ContentRepository(session).thread_titles(
            list({comment.thread_id for comment in result.items})
        )
        views = self._build_views(
            session,
            result.items,
            viewer_id=viewer_id,
            highlight_comment_id=highlight_comment_id,
            thread_titles=titles,
        )
        return result.map(views)

    def _build_views(
        self,
        session: Session,
        comments: list[Comment],
        *,
        viewer_id: str | None = None,
        highlight_comment_id: str | None = None,
        target_reply: Reply | None = None,
        thread_titles: dict[str, str] | None = None,
    ) -> list[CommentView]:
        repo = ContentRepository(session)
        ledger = VoteLedger(session)
        ids = [comment.id for comment in comments]
        aggregates = ledger.aggregate_many(VotableType.COMMENT, ids)
        user_votes = ledger.user_votes(VotableType.COMMENT, ids, viewer_id)
        reply_counts = repo.count_replies(ids)
        previews = repo.load_top_level_replies_batch(ids, settings.reply_preview_limit)

        # The reply group holding a highlighted reply is always shown.
        if target_reply is not None and target_reply.comment_id in ids:
            bucket = previews[target_reply.comment_id]
            group_id = top_level_id(target_reply)
            if all(reply.id != group_id for reply in bucket):
                bucket.append(repo.require(Reply, group_id, "Reply"))

        preview_views = build_reply_views(
            session,
            [reply for comment_id in ids for reply in previews.get(comment_id, [])],
            viewer_id=viewer_id,
            highlight_id=target_reply.id if target_reply is not None else None,
            with_children=target_reply is not None,
        )
        grouped: dict[str, list[ReplyView]] = {}
        for view in preview_views:
            grouped.setdefault(view.comment_id, []).append(view)

        views = []
        for comment in comments:
            carries_target = target_reply is not None and target_reply.comment_id == comment.id
            views.append(
                CommentView.from_model(
                    comment,
                    aggregates[comment.id],
                    user_vote=user_votes.get(comment.id),
                    replies_count=reply_counts.get(comment.id, 0),
                    replies=grouped.get(comment.id, []),
                    is_highlighted=comment.id == highlight_comment_id,
                    highlighted_reply_id=target_reply.id if carries_target else None,
                    thread_title=(thread_titles or {}).get(comment.thread_id),
                )
            )
        return views


__all__ = ["CommentService"]
