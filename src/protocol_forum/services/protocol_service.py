"""Protocols and threads: the containers discussions hang off."""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from protocol_forum.core.settings import settings
from protocol_forum.models import Protocol, Thread
from protocol_forum.models.vote import VotableType
from protocol_forum.repositories.content_repo import ContentRepository
from protocol_forum.services.highlight import HighlightedPaginator, HighlightResult
from protocol_forum.services.ordering import OrderedQuery, SortPolicy
from protocol_forum.services.validation import clean_body, normalize_page
from protocol_forum.services.views import ProtocolView, ThreadView
from protocol_forum.services.votes import VoteLedger

logger = logging.getLogger(__name__)


class ProtocolService:
    def __init__(self, paginator: HighlightedPaginator | None = None) -> None:
        self.paginator = paginator or HighlightedPaginator()

    def create_protocol(self, session: Session, author: str, title: str, content: str) -> Protocol:
        protocol = Protocol(
            author=author,
            title=clean_body(title, field_name="title"),
            content=clean_body(content, field_name="content"),
        )
        session.add(protocol)
        session.flush()
        session.refresh(protocol)
        logger.debug("Protocol %s created by %s", protocol.id, author)
        return protocol

    def create_thread(
        self,
        session: Session,
        protocol_id: str,
        author: str,
        title: str,
        body: str,
    ) -> Thread:
        ContentRepository(session).require(Protocol, protocol_id, "Protocol")
        thread = Thread(
            protocol_id=protocol_id,
            author=author,
            title=clean_body(title, field_name="title"),
            body=clean_body(body),
        )
        session.add(thread)
        session.flush()
        session.refresh(thread)
        return thread

    def get_protocol(self, session: Session, protocol_id: str) -> Protocol:
        return ContentRepository(session).require(Protocol, protocol_id, "Protocol")

    def get_thread(self, session: Session, thread_id: str) -> Thread:
        return ContentRepository(session).require(Thread, thread_id, "Thread")

    def list_protocols(
        self,
        session: Session,
        *,
        author: str | None = None,
        sort: SortPolicy = SortPolicy.RECENT,
        per_page: int | None = None,
        page: int | None = 1,
    ) -> HighlightResult[ProtocolView]:
        """List protocols with their thread and review counts.

        Protocols are not votable, so only ``recent`` and ``oldest`` apply.
        """
        page, per_page = normalize_page(
            page, per_page, default=settings.listing_per_page, maximum=settings.max_per_page
        )
        query = OrderedQuery(Protocol, sort=sort)
        if author is not None:
            query = query.where(Protocol.author == author)
        result = self.paginator.paginate(session, query, per_page, page)

        repo = ContentRepository(session)
        ids = [protocol.id for protocol in result.items]
        thread_counts = repo.count_threads(ids)
        review_stats = repo.review_stats(ids)
        views = []
        for protocol in result.items:
            reviews_count, average = review_stats.get(protocol.id, (0, None))
            views.append(
                ProtocolView.from_model(
                    protocol,
                    threads_count=thread_counts.get(protocol.id, 0),
                    reviews_count=reviews_count,
                    average_rating=average,
                )
            )
        return result.map(views)

    def list_threads(
        self,
        session: Session,
        *,
        protocol_id: str | None = None,
        author: str | None = None,
        sort: SortPolicy = SortPolicy.RECENT,
        per_page: int | None = None,
        page: int | None = 1,
        highlight_thread_id: str | None = None,
        viewer_id: str | None = None,
    ) -> HighlightResult[ThreadView]:
        """List threads, optionally scoped to one protocol or author, with vote totals."""
        repo = ContentRepository(session)
        if protocol_id is not None:
            repo.require(Protocol, protocol_id, "Protocol")
        page, per_page = normalize_page(
            page, per_page, default=settings.listing_per_page, maximum=settings.max_per_page
        )
        query = OrderedQuery(Thread, sort=sort)
        if protocol_id is not None:
            query = query.where(Thread.protocol_id == protocol_id)
        if author is not None:
            query = query.where(Thread.author == author)
        result = self.paginator.paginate(
            session,
            query,
            per_page,
            page,
            target_id=highlight_thread_id,
            target_type="thread" if highlight_thread_id else None,
        )

        ledger = VoteLedger(session)
        ids = [thread.id for thread in result.items]
        aggregates = ledger.aggregate_many(VotableType.THREAD, ids)
        user_votes = ledger.user_votes(VotableType.THREAD, ids, viewer_id)
        comment_counts = repo.count_comments(ids)
        views = [
            ThreadView.from_model(
                thread,
                aggregates[thread.id],
                user_vote=user_votes.get(thread.id),
                comments_count=comment_counts.get(thread.id, 0),
                is_highlighted=thread.id == highlight_thread_id,
            )
            for thread in result.items
        ]
        return result.map(views)


__all__ = ["ProtocolService"]
