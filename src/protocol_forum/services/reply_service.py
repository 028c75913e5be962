"""Reply orchestration: creation through the flattener, edits and listings."""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from protocol_forum.core.errors import Forbidden, InvalidTarget, NotFound
from protocol_forum.core.settings import settings
from protocol_forum.models import Comment, Reply
from protocol_forum.models.vote import VotableType
from protocol_forum.repositories.content_repo import ContentRepository
from protocol_forum.services.flattening import ThreadFlattener, top_level_id
from protocol_forum.services.highlight import HighlightedPaginator, HighlightResult
from protocol_forum.services.notifications import Notifier, get_notifier
from protocol_forum.services.ordering import OrderedQuery, SortPolicy
from protocol_forum.services.validation import clean_body, normalize_page
from protocol_forum.services.views import ReplyView
from protocol_forum.services.votes import VoteLedger

logger = logging.getLogger(__name__)


def build_reply_views(
    session: Session,
    replies: list[Reply],
    *,
    viewer_id: str | None = None,
    highlight_id: str | None = None,
    with_children: bool = False,
) -> list[ReplyView]:
    """Attach votes, counts and "replying to" context to a batch of replies.

    With ``with_children`` each top-level reply carries its nested replies,
    loaded for the whole batch at once.
    """
    repo = ContentRepository(session)
    ledger = VoteLedger(session)

    top_level_ids = [reply.id for reply in replies if reply.parent_id is None]
    children = repo.load_children_batch(top_level_ids) if with_children else {}
    nested_counts = repo.count_children(top_level_ids)

    every_reply = list(replies)
    for group in children.values():
        every_reply.extend(group)
    ids = [reply.id for reply in every_reply]
    aggregates = ledger.aggregate_many(VotableType.REPLY, ids)
    user_votes = ledger.user_votes(VotableType.REPLY, ids, viewer_id)
    reply_to_authors = repo.authors_of(
        [reply.reply_to_id for reply in every_reply if reply.reply_to_id is not None]
    )

    def to_view(reply: Reply) -> ReplyView:
        return ReplyView.from_model(
            reply,
            aggregates[reply.id],
            user_vote=user_votes.get(reply.id),
            reply_to_author=reply_to_authors.get(reply.reply_to_id) if reply.reply_to_id else None,
            nested_replies_count=nested_counts.get(reply.id, 0),
            is_highlighted=reply.id == highlight_id,
        )

    views = []
    for reply in replies:
        view = to_view(reply)
        view.children = [to_view(child) for child in children.get(reply.id, [])]
        views.append(view)
    return views


class ReplyService:
    """Replies under comments, kept to two levels by ``ThreadFlattener``."""

    def __init__(
        self,
        paginator: HighlightedPaginator | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self.paginator = paginator or HighlightedPaginator()
        self.notifier = notifier or get_notifier()

    def get_reply(self, session: Session, reply_id: str) -> Reply:
        return ContentRepository(session).require(Reply, reply_id, "Reply")

    def get_reply_view(self, session: Session, reply_id: str, viewer_id: str | None = None) -> ReplyView:
        """Return one reply with its nested replies attached."""
        reply = self.get_reply(session, reply_id)
        return build_reply_views(session, [reply], viewer_id=viewer_id, with_children=True)[0]

    def create_reply(
        self,
        session: Session,
        comment_id: str,
        author: str,
        body: str,
        user_id: str | None = None,
    ) -> Reply:
        """Reply to a top-level comment.

        Raises:
            NotFound: If ``comment_id`` names neither a comment nor a reply.
            InvalidTarget: If ``comment_id`` names a reply.
        """
        target = self._resolve_target(session, comment_id, expected=Comment)
        reply = ThreadFlattener.create_reply(target, clean_body(body), author, user_id)
        return self._store(session, reply, recipient=target.author)

    def create_nested_reply(
        self,
        session: Session,
        reply_id: str,
        author: str,
        body: str,
        user_id: str | None = None,
    ) -> Reply:
        """Reply to a reply; the result is grouped under the original top-level reply.

        Raises:
            NotFound: If ``reply_id`` names neither a reply nor a comment.
            InvalidTarget: If ``reply_id`` names a top-level comment.
        """
        target = self._resolve_target(session, reply_id, expected=Reply)
        reply = ThreadFlattener.create_nested_reply(target, clean_body(body), author, user_id)
        return self._store(session, reply, recipient=target.author)

    def edit_reply(self, session: Session, reply_id: str, author: str, body: str) -> Reply:
        reply = self.get_reply(session, reply_id)
        if reply.author != author:
            raise Forbidden("You can only edit your own replies")
        reply.body = clean_body(body)
        session.flush()
        return reply

    def delete_reply(self, session: Session, reply_id: str, author: str) -> None:
        """Delete a reply together with its nested replies and their votes."""
        reply = self.get_reply(session, reply_id)
        if reply.author != author:
            raise Forbidden("You can only delete your own replies")
        doomed = [reply.id, *ContentRepository(session).child_ids(reply.id)]
        VoteLedger(session).purge(VotableType.REPLY, doomed)
        session.delete(reply)
        session.flush()
        logger.info("Deleted reply %s and %d nested replies", reply_id, len(doomed) - 1)

    def list_page(
        self,
        session: Session,
        comment_id: str,
        *,
        sort: SortPolicy = SortPolicy.RECENT,
        per_page: int | None = None,
        page: int | None = 1,
        highlight_reply_id: str | None = None,
        viewer_id: str | None = None,
    ) -> HighlightResult[ReplyView]:
        """List top-level replies of a comment with their nested replies.

        A nested highlight target is reached through the top-level reply it
        is grouped under.
        """
        ContentRepository(session).require(Comment, comment_id, "Comment")
        page, per_page = normalize_page(
            page, per_page, default=settings.default_per_page, maximum=settings.max_per_page
        )
        query = OrderedQuery(
            Reply,
            (Reply.comment_id == comment_id, Reply.parent_id.is_(None)),
            sort,
        )

        target = session.get(Reply, highlight_reply_id) if highlight_reply_id else None
        if target is not None and target.parent_id is not None:
            result = self.paginator.paginate_via_parent(
                session,
                query,
                per_page,
                page,
                child_id=target.id,
                parent_id=top_level_id(target),
                target_type="reply",
            )
        else:
            result = self.paginator.paginate(
                session, query, per_page, page, target_id=highlight_reply_id, target_type="reply"
            )

        views = build_reply_views(
            session,
            result.items,
            viewer_id=viewer_id,
            highlight_id=highlight_reply_id,
            with_children=True,
        )
        return result.map(views)

    def list_children(
        self,
        session: Session,
        reply_id: str,
        *,
        per_page: int | None = None,
        page: int | None = 1,
        viewer_id: str | None = None,
    ) -> HighlightResult[ReplyView]:
        """List the nested replies grouped under a reply's top-level reply, oldest first."""
        reply = self.get_reply(session, reply_id)
        page, per_page = normalize_page(
            page, per_page, default=settings.default_per_page, maximum=settings.max_per_page
        )
        query = OrderedQuery(Reply, (Reply.parent_id == top_level_id(reply),), SortPolicy.OLDEST)
        result = self.paginator.paginate(session, query, per_page, page)
        return result.map(build_reply_views(session, result.items, viewer_id=viewer_id))

    def list_user_replies(
        self,
        session: Session,
        author: str,
        *,
        sort: SortPolicy = SortPolicy.RECENT,
        per_page: int | None = None,
        page: int | None = 1,
        highlight_reply_id: str | None = None,
        viewer_id: str | None = None,
    ) -> HighlightResult[ReplyView]:
        """List every reply an author wrote, top-level and nested alike."""
        page, per_page = normalize_page(
            page, per_page, default=settings.profile_per_page, maximum=settings.profile_max_per_page
        )
        query = OrderedQuery(Reply, (Reply.author == author,), sort)
        result = self.paginator.paginate(
            session,
            query,
            per_page,
            page,
            target_id=highlight_reply_id,
            target_type="reply" if highlight_reply_id else None,
        )
        views = build_reply_views(
            session, result.items, viewer_id=viewer_id, highlight_id=highlight_reply_id
        )
        return result.map(views)

    def _resolve_target(
        self,
        session: Session,
        target_id: str,
        *,
        expected: type[Comment] | type[Reply],
    ) -> Comment | Reply:
        target = session.get(expected, target_id)
        if target is not None:
            return target
        other = Reply if expected is Comment else Comment
        if session.get(other, target_id) is not None:
            if expected is Comment:
                raise InvalidTarget("Replies must target a top-level comment; use the nested reply endpoint")
            raise InvalidTarget("Nested replies must target a reply; use the comment reply endpoint")
        raise NotFound(f"{expected.__name__} not found")

    def _store(self, session: Session, reply: Reply, *, recipient: str) -> Reply:
        session.add(reply)
        session.flush()
        session.refresh(reply)
        logger.debug("Reply %s created under comment %s", reply.id, reply.comment_id)
        self.notifier.notify_reply(
            recipient=recipient,
            actor=reply.author,
            reply_id=reply.id,
            comment_id=reply.comment_id,
        )
        return reply


__all__ = ["ReplyService", "build_reply_views"]
