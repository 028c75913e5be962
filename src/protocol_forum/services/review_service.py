"""Protocol reviews and the profile review listing."""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from protocol_forum.core.errors import Forbidden
from protocol_forum.core.settings import settings
from protocol_forum.models import Protocol, Review
from protocol_forum.models.vote import VotableType
from protocol_forum.repositories.content_repo import ContentRepository
from protocol_forum.services.highlight import HighlightedPaginator, HighlightResult
from protocol_forum.services.ordering import OrderedQuery, SortPolicy
from protocol_forum.services.validation import check_rating, normalize_page
from protocol_forum.services.views import ReviewView
from protocol_forum.services.votes import VoteLedger

logger = logging.getLogger(__name__)


class ReviewService:
    """Lists, creates and maintains protocol reviews."""

    def __init__(self, paginator: HighlightedPaginator | None = None) -> None:
        self.paginator = paginator or HighlightedPaginator()

    def get_review(self, session: Session, review_id: str) -> Review:
        return ContentRepository(session).require(Review, review_id, "Review")

    def list_protocol_reviews(
        self,
        session: Session,
        protocol_id: str,
        *,
        author: str | None = None,
        sort: SortPolicy = SortPolicy.RECENT,
        per_page: int | None = None,
        page: int | None = 1,
        highlight_review_id: str | None = None,
        viewer_id: str | None = None,
    ) -> HighlightResult[ReviewView]:
        protocol = ContentRepository(session).require(Protocol, protocol_id, "Protocol")
        page, per_page = normalize_page(
            page, per_page, default=settings.review_per_page, maximum=settings.max_per_page
        )
        query = OrderedQuery(Review, (Review.protocol_id == protocol_id,), sort)
        if author is not None:
            query = query.where(Review.author == author)
        result = self.paginator.paginate(
            session,
            query,
            per_page,
            page,
            target_id=highlight_review_id,
            target_type="review" if highlight_review_id else None,
        )
        views = self._build_views(
            session,
            result.items,
            viewer_id=viewer_id,
            highlight_review_id=highlight_review_id,
            titles={protocol.id: protocol.title},
        )
        return result.map(views)

    def list_user_reviews(
        self,
        session: Session,
        author: str,
        *,
        sort: SortPolicy = SortPolicy.RECENT,
        per_page: int | None = None,
        page: int | None = 1,
        highlight_review_id: str | None = None,
        viewer_id: str | None = None,
    ) -> HighlightResult[ReviewView]:
        """List one author's reviews across protocols, each with its protocol title."""
        page, per_page = normalize_page(
            page, per_page, default=settings.review_per_page, maximum=settings.profile_max_per_page
        )
        query = OrderedQuery(Review, (Review.author == author,), sort)
        result = self.paginator.paginate(
            session,
            query,
            per_page,
            page,
            target_id=highlight_review_id,
            target_type="review" if highlight_review_id else None,
        )
        protocol_ids = list({review.protocol_id for review in result.items})
        titles: dict[str, str] = {}
        if protocol_ids:
            rows = session.execute(
                select(Protocol.id, Protocol.title).where(Protocol.id.in_(protocol_ids))
            )
            titles = {protocol_id: title for protocol_id, title in rows}
        views = self._build_views(
            session,
            result.items,
            viewer_id=viewer_id,
            highlight_review_id=highlight_review_id,
            titles=titles,
        )
        return result.map(views)

    def create_review(
        self,
        session: Session,
        protocol_id: str,
        author: str,
        rating: int,
        feedback: str | None = None,
    ) -> Review:
        ContentRepository(session).require(Protocol, protocol_id, "Protocol")
        review = Review(
            protocol_id=protocol_id,
            author=author,
            rating=check_rating(rating),
            feedback=(feedback or "").strip() or None,
        )
        session.add(review)
        session.flush()
        session.refresh(review)
        logger.debug("Review %s created on protocol %s", review.id, protocol_id)
        return review

    def update_review(
        self,
        session: Session,
        review_id: str,
        author: str,
        *,
        rating: int | None = None,
        feedback: str | None = None,
    ) -> Review:
        review = self.get_review(session, review_id)
        if review.author != author:
            raise Forbidden("You can only update reviews that you created")
        if rating is not None:
            review.rating = check_rating(rating)
        if feedback is not None:
            review.feedback = feedback.strip() or None
        session.flush()
        return review

    def delete_review(self, session: Session, review_id: str, author: str) -> None:
        review = self.get_review(session, review_id)
        if review.author != author:
            raise Forbidden("You can only delete reviews that you created")
        VoteLedger(session).purge(VotableType.REVIEW, [review.id])
        session.delete(review)
        session.flush()

    def review_view(self, session: Session, review: Review, viewer_id: str | None = None) -> ReviewView:
        return self._build_views(
            session,
            [review],
            viewer_id=viewer_id,
            titles={review.protocol_id: review.protocol.title},
        )[0]

    def _build_views(
        self,
        session: Session,
        reviews: list[Review],
        *,
        viewer_id: str | None,
        titles: dict[str, str],
        highlight_review_id: str | None = None,
    ) -> list[ReviewView]:
        ledger = VoteLedger(session)
        ids = [review.id for review in reviews]
        aggregates = ledger.aggregate_many(VotableType.REVIEW, ids)
        user_votes = ledger.user_votes(VotableType.REVIEW, ids, viewer_id)
        return [
            ReviewView.from_model(
                review,
                aggregates[review.id],
                user_vote=user_votes.get(review.id),
                protocol_title=titles.get(review.protocol_id),
                is_highlighted=review.id == highlight_review_id,
            )
            for review in reviews
        ]


__all__ = ["ReviewService"]
