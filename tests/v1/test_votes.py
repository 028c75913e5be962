# tests/v1/test_votes.py
"""Tests for vote-related endpoints."""

import pytest
from fastapi import status


@pytest.fixture()
def comment(make_comments):
    return make_comments(1, author="bob")[0]


def _vote(client, headers, votable_type: str, votable_id: str, polarity: str):
    return client.post(
        "/api/v1/votes/",
        json={"votable_type": votable_type, "votable_id": votable_id, "polarity": polarity},
        headers=headers,
    )


def test_upvote_then_toggle_off(client, auth_token, comment) -> None:
    first = _vote(client, auth_token, "comment", comment.id, "up")
    assert first.status_code == status.HTTP_200_OK
    assert first.json()["outcome"] == "created"
    assert (first.json()["upvotes"], first.json()["downvotes"], first.json()["vote_score"]) == (1, 0, 1)
    assert first.json()["user_vote"] == "up"

    second = _vote(client, auth_token, "comment", comment.id, "up")
    assert second.json()["outcome"] == "removed"
    assert second.json()["message"] == "Vote removed successfully"
    assert second.json()["vote_score"] == 0
    assert second.json()["user_vote"] is None


def test_switching_polarity_updates(client, auth_token, other_auth_token, comment) -> None:
    _vote(client, other_auth_token, "comment", comment.id, "up")
    _vote(client, auth_token, "comment", comment.id, "up")

    switched = _vote(client, auth_token, "comment", comment.id, "down")

    assert switched.json()["outcome"] == "updated"
    assert (switched.json()["upvotes"], switched.json()["downvotes"]) == (1, 1)


def test_vote_summary_includes_my_vote(client, auth_token, comment) -> None:
    _vote(client, auth_token, "comment", comment.id, "down")

    mine = client.get(f"/api/v1/votes/comment/{comment.id}", headers=auth_token).json()
    anonymous = client.get(f"/api/v1/votes/comment/{comment.id}").json()

    assert mine["user_vote"] == "down"
    assert mine["vote_score"] == -1
    assert anonymous["user_vote"] is None
    assert anonymous["downvotes"] == 1


def test_vote_on_thread_and_review(client, auth_token, thread, make_reviews) -> None:
    review = make_reviews([4])[0]

    assert _vote(client, auth_token, "thread", thread.id, "up").json()["upvotes"] == 1
    assert _vote(client, auth_token, "review", review.id, "down").json()["downvotes"] == 1


def test_vote_invalid_polarity(client, auth_token, comment) -> None:
    response = _vote(client, auth_token, "comment", comment.id, "sideways")
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_vote_unknown_votable_type(client, auth_token, comment) -> None:
    response = _vote(client, auth_token, "chat_message", comment.id, "up")
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_vote_nonexistent_target(client, auth_token) -> None:
    response = _vote(client, auth_token, "reply", "does-not-exist", "up")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"detail": "Reply not found"}


def test_vote_requires_auth(client, comment) -> None:
    response = client.post(
        "/api/v1/votes/",
        json={"votable_type": "comment", "votable_id": comment.id, "polarity": "up"},
    )
    assert response.status_code in {status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN}


def test_invalid_token_rejected(client, comment) -> None:
    response = client.get(
        f"/api/v1/votes/comment/{comment.id}",
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
