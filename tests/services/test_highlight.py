# tests/services/test_highlight.py
"""Highlight location and injection across pages."""

import math

import pytest

from protocol_forum.models import Comment
from protocol_forum.services.highlight import HighlightedPaginator, HighlightLocator, Pagination
from protocol_forum.services.ordering import OrderedQuery, SortPolicy


@pytest.fixture()
def paginator() -> HighlightedPaginator:
    return HighlightedPaginator()


def _query(thread, sort=SortPolicy.RECENT) -> OrderedQuery:
    return OrderedQuery(Comment, (Comment.thread_id == thread.id,), sort)


def test_target_from_later_page_is_prepended(db_session, make_comments, thread, paginator) -> None:
    comments = make_comments(25)
    target = comments[10]  # 15th newest

    result = paginator.paginate(db_session, _query(thread), 10, 1, target_id=target.id)

    info = result.highlight_info
    assert info.natural_page == 2
    assert info.position_in_page == 5
    assert info.included_from_other_page is True
    assert info.found_in_current_page is False
    assert result.items[0].id == target.id
    assert len(result.items) == 11
    assert result.pagination.total == 26
    assert result.pagination.last_page == 3


def test_target_on_page_is_not_duplicated(db_session, make_comments, thread, paginator) -> None:
    comments = make_comments(25)
    target = comments[20]

    result = paginator.paginate(db_session, _query(thread), 10, 1, target_id=target.id)

    assert result.highlight_info.found_in_current_page is True
    assert result.highlight_info.included_from_other_page is False
    assert [item.id for item in result.items].count(target.id) == 1
    assert len(result.items) == 10
    assert result.pagination.total == 25


def test_no_target_returns_plain_page(db_session, make_comments, thread, paginator) -> None:
    make_comments(12)

    result = paginator.paginate(db_session, _query(thread), 5, 3)

    assert len(result.items) == 2
    assert result.highlight_info.target_id is None
    assert result.highlight_info.found_in_current_page is False
    assert result.pagination == Pagination(
        current_page=3,
        last_page=3,
        per_page=5,
        total=12,
        from_item=11,
        to_item=12,
        has_more_pages=False,
    )


@pytest.mark.parametrize("sort", [SortPolicy.RECENT, SortPolicy.OLDEST, SortPolicy.POPULAR])
def test_target_present_on_every_page(db_session, make_comments, thread, paginator, sort) -> None:
    comments = make_comments(23)
    target = comments[7]
    per_page = 4

    last_page = math.ceil(len(comments) / per_page)
    for page in range(1, last_page + 1):
        result = paginator.paginate(db_session, _query(thread, sort), per_page, page, target_id=target.id)
        assert target.id in {item.id for item in result.items}


@pytest.mark.parametrize("per_page", [1, 3, 7, 10])
def test_natural_page_finds_target_naturally(db_session, make_comments, thread, paginator, per_page) -> None:
    comments = make_comments(17)
    query = _query(thread)

    for target in comments[::4]:
        away = paginator.paginate(db_session, query, per_page, 1, target_id=target.id)
        if away.highlight_info.found_in_current_page:
            continue
        natural = paginator.paginate(
            db_session, query, per_page, away.highlight_info.natural_page, target_id=target.id
        )
        assert natural.highlight_info.found_in_current_page is True
        position = away.highlight_info.position_in_page
        assert natural.items[position - 1].id == target.id


def test_target_outside_filters_is_dropped(db_session, make_comments, thread, paginator) -> None:
    make_comments(5, author="alice")
    other = make_comments(1, author="bob", start=10)[0]
    query = _query(thread).where(Comment.author == "alice")

    result = paginator.paginate(db_session, query, 2, 1, target_id=other.id)

    assert other.id not in {item.id for item in result.items}
    assert result.highlight_info.found_in_current_page is False
    assert result.highlight_info.included_from_other_page is False
    assert result.highlight_info.natural_page is None
    assert result.pagination.total == 5


def test_locator_returns_none_for_missing_target(db_session, make_comments, thread) -> None:
    make_comments(3)

    assert HighlightLocator.locate(db_session, _query(thread), 10, "missing") is None


def test_locator_found_on_page(db_session, make_comments, thread) -> None:
    comments = make_comments(9)

    location = HighlightLocator.locate(db_session, _query(thread), 4, comments[0].id)

    assert (location.natural_page, location.position_in_page, location.count_before) == (3, 1, 8)
    assert location.found_on_page(3)
    assert not location.found_on_page(1)


def test_paginate_via_parent_marks_children(db_session, make_comments, thread, paginator) -> None:
    comments = make_comments(6)
    on_page, off_page = comments[-1], comments[0]

    near = paginator.paginate_via_parent(
        db_session, _query(thread), 3, 1, child_id="reply-1", parent_id=on_page.id
    )
    far = paginator.paginate_via_parent(
        db_session, _query(thread), 3, 1, child_id="reply-2", parent_id=off_page.id
    )

    assert near.highlight_info.found_in_children is True
    assert near.highlight_info.found_in_current_page is True
    assert near.highlight_info.carrier_id == on_page.id
    assert far.items[0].id == off_page.id
    assert far.highlight_info.included_from_other_page is True
    assert far.highlight_info.found_in_children is True
    assert far.highlight_info.natural_page == 2
    assert far.highlight_info.target_id == "reply-2"
