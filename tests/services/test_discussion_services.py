# tests/services/test_discussion_services.py
"""Comment, reply and review orchestration."""

import pytest
from sqlalchemy import func, select

from protocol_forum.core.errors import Forbidden, NotFound, ValidationFailure
from protocol_forum.models import Comment, Polarity, Protocol, Reply, Thread, VotableType, Vote
from protocol_forum.services.comment_service import CommentService
from protocol_forum.services.ordering import SortPolicy
from protocol_forum.services.protocol_service import ProtocolService
from protocol_forum.services.reply_service import ReplyService
from protocol_forum.services.review_service import ReviewService
from protocol_forum.services.votes import VoteLedger


def _count(db_session, model) -> int:
    return db_session.scalar(select(func.count()).select_from(model))


class TestCommentService:
    def test_create_and_edit(self, db_session, thread) -> None:
        service = CommentService()
        comment = service.create_top_level_comment(db_session, thread.id, "alice", "  first!  ")

        assert comment.body == "first!"
        assert comment.parent_id is None
        assert comment.container_id == thread.id

        edited = service.edit_comment(db_session, comment.id, "alice", "edited")
        assert edited.body == "edited"

    def test_only_author_edits_or_deletes(self, db_session, thread) -> None:
        service = CommentService()
        comment = service.create_top_level_comment(db_session, thread.id, "alice", "mine")

        with pytest.raises(Forbidden):
            service.edit_comment(db_session, comment.id, "bob", "hijack")
        with pytest.raises(Forbidden):
            service.delete_comment(db_session, comment.id, "bob")

    def test_blank_body_rejected(self, db_session, thread) -> None:
        with pytest.raises(ValidationFailure):
            CommentService().create_top_level_comment(db_session, thread.id, "alice", "   ")

    def test_missing_thread(self, db_session) -> None:
        with pytest.raises(NotFound):
            CommentService().create_top_level_comment(db_session, "nope", "alice", "hi")

    def test_delete_removes_replies_and_votes(self, db_session, thread, bob) -> None:
        comments = CommentService()
        replies = ReplyService()
        comment = comments.create_top_level_comment(db_session, thread.id, "alice", "root")
        r1 = replies.create_reply(db_session, comment.id, "bob", "hi")
        n1 = replies.create_nested_reply(db_session, r1.id, "carol", "hey")
        ledger = VoteLedger(db_session)
        ledger.record(VotableType.COMMENT, comment.id, bob.id, Polarity.UP)
        ledger.record(VotableType.REPLY, n1.id, bob.id, Polarity.UP)

        comments.delete_comment(db_session, comment.id, "alice")

        assert _count(db_session, Reply) == 0
        assert _count(db_session, Vote) == 0

    def test_list_page_with_highlight_and_votes(self, db_session, make_comments, thread, bob) -> None:
        created = make_comments(25)
        target = created[10]
        VoteLedger(db_session).record(VotableType.COMMENT, target.id, bob.id, Polarity.UP)

        result = CommentService().list_page(
            db_session,
            thread.id,
            per_page=10,
            page=1,
            highlight_comment_id=target.id,
            viewer_id=bob.id,
        )

        first = result.items[0]
        assert first.id == target.id
        assert first.is_highlighted is True
        assert (first.upvotes, first.vote_score, first.user_vote) == (1, 1, Polarity.UP)
        assert result.highlight_info.natural_page == 2
        assert result.highlight_info.position_in_page == 5
        assert result.highlight_info.target_type == "comment"
        assert not any(view.is_highlighted for view in result.items[1:])

    def test_author_filter(self, db_session, make_comments, thread) -> None:
        make_comments(3, author="alice")
        make_comments(2, author="bob", start=5)

        result = CommentService().list_page(db_session, thread.id, author="bob")

        assert {view.author for view in result.items} == {"bob"}
        assert result.pagination.total == 2

    def test_per_page_is_clamped(self, db_session, make_comments, thread) -> None:
        make_comments(3)

        result = CommentService().list_page(db_session, thread.id, per_page=0, page=-4)

        assert result.pagination.per_page == 1
        assert result.pagination.current_page == 1

    def test_reply_highlight_goes_through_comment(self, db_session, make_comments, thread) -> None:
        created = make_comments(8)
        carrier = created[0]
        replies = ReplyService()
        top = replies.create_reply(db_session, carrier.id, "bob", "top")
        for index in range(4):
            replies.create_reply(db_session, carrier.id, "bob", f"newer {index}")
        nested = replies.create_nested_reply(db_session, top.id, "carol", "deep")

        result = CommentService().list_page(
            db_session, thread.id, per_page=3, page=1, highlight_reply_id=nested.id
        )

        info = result.highlight_info
        assert info.target_id == nested.id
        assert info.carrier_id == carrier.id
        assert info.found_in_children is True
        assert info.included_from_other_page is True
        view = result.items[0]
        assert view.id == carrier.id
        assert view.highlighted_reply_id == nested.id
        group = next(reply for reply in view.replies if reply.id == top.id)
        assert [child.id for child in group.children] == [nested.id]
        assert group.children[0].is_highlighted is True
        assert group.children[0].reply_to_author == "bob"

    def test_reply_preview_is_limited(self, db_session, make_comments, make_replies, thread) -> None:
        comment = make_comments(1)[0]
        make_replies(comment, 5)

        view = CommentService().list_page(db_session, thread.id).items[0]

        assert view.replies_count == 5
        assert len(view.replies) == 3
        assert [reply.body for reply in view.replies] == ["reply 4", "reply 3", "reply 2"]

    def test_rating_sort_rejected_for_comments(self, db_session, make_comments, thread) -> None:
        make_comments(1)
        with pytest.raises(ValidationFailure):
            CommentService().list_page(db_session, thread.id, sort=SortPolicy.RATING_HIGH)


class TestReplyService:
    def test_list_page_groups_children(self, db_session, make_comments) -> None:
        comment = make_comments(1)[0]
        service = ReplyService()
        r1 = service.create_reply(db_session, comment.id, "bob", "hi")
        n1 = service.create_nested_reply(db_session, r1.id, "carol", "hey bob")
        service.create_nested_reply(db_session, n1.id, "dave", "hey carol")

        result = service.list_page(db_session, comment.id)

        assert [view.id for view in result.items] == [r1.id]
        top = result.items[0]
        assert top.nested_replies_count == 2
        assert [child.author for child in top.children] == ["carol", "dave"]
        assert [child.reply_to_author for child in top.children] == ["bob", "carol"]

    def test_nested_highlight_injects_top_level_reply(self, db_session, make_comments, make_replies) -> None:
        comment = make_comments(1)[0]
        old, *_ = make_replies(comment, 6)
        service = ReplyService()
        nested = service.create_nested_reply(db_session, old.id, "carol", "late")

        result = service.list_page(db_session, comment.id, per_page=2, page=1, highlight_reply_id=nested.id)

        assert result.items[0].id == old.id
        assert result.highlight_info.found_in_children is True
        assert result.highlight_info.natural_page == 3
        assert result.items[0].children[0].is_highlighted is True

    def test_list_children_oldest_first(self, db_session, make_comments) -> None:
        comment = make_comments(1)[0]
        service = ReplyService()
        r1 = service.create_reply(db_session, comment.id, "bob", "hi")
        n1 = service.create_nested_reply(db_session, r1.id, "carol", "one")
        n2 = service.create_nested_reply(db_session, n1.id, "dave", "two")

        from_top = service.list_children(db_session, r1.id)
        from_nested = service.list_children(db_session, n2.id)

        assert {view.id for view in from_top.items} == {n1.id, n2.id}
        assert [view.id for view in from_nested.items] == [view.id for view in from_top.items]

    def test_delete_top_level_reply_removes_group(self, db_session, make_comments, bob) -> None:
        comment = make_comments(1)[0]
        service = ReplyService()
        r1 = service.create_reply(db_session, comment.id, "bob", "hi")
        n1 = service.create_nested_reply(db_session, r1.id, "carol", "hey")
        VoteLedger(db_session).record(VotableType.REPLY, n1.id, bob.id, Polarity.DOWN)

        with pytest.raises(Forbidden):
            service.delete_reply(db_session, r1.id, "carol")
        service.delete_reply(db_session, r1.id, "bob")

        assert _count(db_session, Reply) == 0
        assert _count(db_session, Vote) == 0

    def test_list_page_missing_comment(self, db_session) -> None:
        with pytest.raises(NotFound):
            ReplyService().list_page(db_session, "missing")


class TestReviewService:
    def test_protocol_reviews_with_highlight(self, db_session, make_reviews, protocol) -> None:
        reviews = make_reviews([5, 4, 3, 2, 1, 5, 4, 3, 2, 1, 5, 4])
        target = reviews[0]

        result = ReviewService().list_protocol_reviews(
            db_session, protocol.id, highlight_review_id=target.id
        )

        assert result.pagination.per_page == 10
        assert result.items[0].id == target.id
        assert result.items[0].is_highlighted is True
        assert result.items[0].protocol_title == protocol.title
        assert result.highlight_info.natural_page == 2
        assert result.highlight_info.position_in_page == 2

    def test_user_reviews_span_protocols(self, db_session, make_reviews, protocol) -> None:
        other = Protocol(title="Pour over", content="Bloom first.", author="bob")
        db_session.add(other)
        db_session.flush()
        make_reviews([4], author="carol")
        make_reviews([2], author="carol", target=other)
        make_reviews([5], author="dave")

        result = ReviewService().list_user_reviews(db_session, "carol", sort=SortPolicy.RATING_HIGH)

        assert [view.rating for view in result.items] == [4, 2]
        assert {view.protocol_title for view in result.items} == {protocol.title, other.title}

    def test_helpful_counts(self, db_session, make_reviews, protocol, alice, bob) -> None:
        review = make_reviews([3])[0]
        ledger = VoteLedger(db_session)
        ledger.record(VotableType.REVIEW, review.id, alice.id, Polarity.UP)
        ledger.record(VotableType.REVIEW, review.id, bob.id, Polarity.DOWN)

        view = ReviewService().list_protocol_reviews(db_session, protocol.id, viewer_id=bob.id).items[0]

        assert (view.helpful_count, view.not_helpful_count, view.user_vote) == (1, 1, Polarity.DOWN)

    def test_update_and_delete_rules(self, db_session, protocol) -> None:
        service = ReviewService()
        review = service.create_review(db_session, protocol.id, "alice", 4, "  solid  ")
        assert review.feedback == "solid"

        with pytest.raises(ValidationFailure):
            service.update_review(db_session, review.id, "alice", rating=9)
        with pytest.raises(Forbidden):
            service.update_review(db_session, review.id, "bob", rating=1)
        assert service.update_review(db_session, review.id, "alice", rating=2).rating == 2

        service.delete_review(db_session, review.id, "alice")
        with pytest.raises(NotFound):
            service.get_review(db_session, review.id)

    def test_user_reviews_highlight_from_other_page(self, db_session, make_reviews, protocol) -> None:
        reviews = make_reviews([4, 2] + [3] * 10, author="alice")

        result = ReviewService().list_user_reviews(
            db_session, "alice", highlight_review_id=reviews[0].id
        )

        assert result.items[0].id == reviews[0].id
        assert result.items[0].protocol_title == protocol.title
        assert all(view.protocol_title == protocol.title for view in result.items)
        assert (result.highlight_info.natural_page, result.highlight_info.position_in_page) == (2, 2)


class TestProfileListings:
    def test_user_comments_span_threads(self, db_session, make_comments, thread, bob) -> None:
        other = Thread(protocol_id=thread.protocol_id, title="Water temp", body="?", author="bob")
        db_session.add(other)
        db_session.flush()
        first = make_comments(1, author="carol")[0]
        second = Comment(thread_id=other.id, author="carol", body="in other thread")
        db_session.add(second)
        make_comments(2, author="dave", start=5)
        db_session.flush()
        VoteLedger(db_session).record(VotableType.COMMENT, first.id, bob.id, Polarity.UP)

        result = CommentService().list_user_comments(db_session, "carol", sort=SortPolicy.POPULAR)

        assert [view.id for view in result.items] == [first.id, second.id]
        assert [view.thread_title for view in result.items] == [thread.title, other.title]
        assert result.items[0].upvotes == 1
        assert result.pagination.per_page == 10

    def test_user_comments_highlight(self, db_session, make_comments) -> None:
        comments = make_comments(12, author="carol")

        result = CommentService().list_user_comments(
            db_session, "carol", per_page=5, highlight_comment_id=comments[0].id
        )

        assert result.items[0].id == comments[0].id
        assert result.items[0].is_highlighted is True
        assert result.highlight_info.natural_page == 3
        assert result.pagination.total == 13

    def test_user_replies_include_nested(self, db_session, make_comments) -> None:
        comment = make_comments(1)[0]
        service = ReplyService()
        top = service.create_reply(db_session, comment.id, "carol", "top")
        other = service.create_reply(db_session, comment.id, "dave", "other")
        nested = service.create_nested_reply(db_session, other.id, "carol", "nested")
        service.create_nested_reply(db_session, top.id, "dave", "answer")

        result = service.list_user_replies(db_session, "carol", sort=SortPolicy.OLDEST)

        assert {view.id for view in result.items} == {top.id, nested.id}
        by_id = {view.id: view for view in result.items}
        assert by_id[top.id].nested_replies_count == 1
        assert by_id[nested.id].reply_to_author == "dave"

    def test_user_replies_highlight_filtered_by_author(self, db_session, make_comments, make_replies) -> None:
        comment = make_comments(1)[0]
        foreign = make_replies(comment, 1, author="dave")[0]
        make_replies(comment, 3, author="bob")

        result = ReplyService().list_user_replies(db_session, "bob", highlight_reply_id=foreign.id)

        assert foreign.id not in {view.id for view in result.items}
        assert result.highlight_info.found_in_current_page is False
        assert result.highlight_info.natural_page is None


class TestProtocolService:
    def test_list_threads_popular_with_votes(self, db_session, protocol, thread, make_comments, alice, bob) -> None:
        service = ProtocolService()
        quiet = service.create_thread(db_session, protocol.id, "bob", "Quiet", "nobody cares")
        make_comments(2)
        ledger = VoteLedger(db_session)
        ledger.record(VotableType.THREAD, thread.id, alice.id, Polarity.UP)
        ledger.record(VotableType.THREAD, thread.id, bob.id, Polarity.UP)
        ledger.record(VotableType.THREAD, quiet.id, alice.id, Polarity.DOWN)

        result = service.list_threads(
            db_session, protocol_id=protocol.id, sort=SortPolicy.POPULAR, viewer_id=alice.id
        )

        assert [view.id for view in result.items] == [thread.id, quiet.id]
        assert (result.items[0].vote_score, result.items[0].comments_count) == (2, 2)
        assert (result.items[1].vote_score, result.items[1].user_vote) == (-1, Polarity.DOWN)

    def test_list_threads_author_and_missing_protocol(self, db_session, protocol, thread) -> None:
        service = ProtocolService()
        service.create_thread(db_session, protocol.id, "bob", "Other", "body")

        result = service.list_threads(db_session, author="bob")
        assert [view.author for view in result.items] == ["bob"]

        with pytest.raises(NotFound):
            service.list_threads(db_session, protocol_id="missing")

    def test_list_protocols_with_counts(self, db_session, protocol, thread, make_reviews) -> None:
        service = ProtocolService()
        make_reviews([4, 2])
        bare = service.create_protocol(db_session, "bob", "Espresso", "Tamp evenly.")

        result = service.list_protocols(db_session, sort=SortPolicy.OLDEST)

        by_id = {view.id: view for view in result.items}
        assert set(by_id) == {protocol.id, bare.id}
        reviewed = by_id[protocol.id]
        assert (reviewed.threads_count, reviewed.reviews_count, reviewed.average_rating) == (1, 2, 3.0)
        assert (by_id[bare.id].reviews_count, by_id[bare.id].average_rating) == (0, None)

        mine = service.list_protocols(db_session, author="bob")
        assert [view.id for view in mine.items] == [bare.id]

    def test_protocols_cannot_sort_by_votes(self, db_session, protocol) -> None:
        with pytest.raises(ValidationFailure):
            ProtocolService().list_protocols(db_session, sort=SortPolicy.POPULAR)
