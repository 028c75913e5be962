# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import UTC, datetime, timedelta

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-protocol-forum")

from protocol_forum.api.v1.dependencies import create_access_token  # noqa: E402
from protocol_forum.db.session import Base  # noqa: E402
from protocol_forum.db.session import get_db as app_get_session  # noqa: E402
from protocol_forum.main import app as fastapi_app  # noqa: E402
from protocol_forum.models import Comment, Protocol, Reply, Review, Thread, User  # noqa: E402

TEST_DB_URL = "sqlite://"
BASE_TIME = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    session.begin_nested()

    @event.listens_for(session, "after_transaction_end")
    def restart_savepoint(sess: Session, trans) -> None:  # pragma: no cover - SQLAlchemy internals
        if trans.nested and not getattr(trans._parent, "nested", False):
            session.begin_nested()

    try:
        yield session
    finally:
        event.remove(session, "after_transaction_end", restart_savepoint)
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def _make_user(session: Session, name: str) -> User:
    user = User(name=name)
    session.add(user)
    session.flush()
    session.refresh(user)
    return user


@pytest.fixture()
def alice(db_session: Session) -> User:
    """Primary test user."""
    return _make_user(db_session, "alice")


@pytest.fixture()
def bob(db_session: Session) -> User:
    """Secondary test user."""
    return _make_user(db_session, "bob")


@pytest.fixture()
def make_user(db_session: Session) -> Callable[[str], User]:
    return lambda name: _make_user(db_session, name)


@pytest.fixture()
def auth_token(alice: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    token = create_access_token(alice.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def other_auth_token(bob: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    token = create_access_token(bob.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def protocol(db_session: Session) -> Protocol:
    protocol = Protocol(title="Cold brew", content="Steep 12 hours.", author="alice")
    db_session.add(protocol)
    db_session.flush()
    db_session.refresh(protocol)
    return protocol


@pytest.fixture()
def thread(db_session: Session, protocol: Protocol) -> Thread:
    thread = Thread(protocol_id=protocol.id, title="Grind size", body="How coarse?", author="alice")
    db_session.add(thread)
    db_session.flush()
    db_session.refresh(thread)
    return thread


@pytest.fixture()
def make_comments(db_session: Session, thread: Thread) -> Callable[..., list[Comment]]:
    """Create comments one minute apart, oldest first."""

    def _make(count: int, *, author: str = "alice", start: int = 0) -> list[Comment]:
        comments = [
            Comment(
                thread_id=thread.id,
                author=author,
                body=f"comment {start + index}",
                created_at=BASE_TIME + timedelta(minutes=start + index),
            )
            for index in range(count)
        ]
        db_session.add_all(comments)
        db_session.flush()
        return comments

    return _make


@pytest.fixture()
def make_replies(db_session: Session) -> Callable[..., list[Reply]]:
    """Create top-level replies under a comment one minute apart, oldest first."""

    def _make(comment: Comment, count: int, *, author: str = "bob") -> list[Reply]:
        replies = [
            Reply(
                comment_id=comment.id,
                author=author,
                body=f"reply {index}",
                created_at=BASE_TIME + timedelta(minutes=index),
            )
            for index in range(count)
        ]
        db_session.add_all(replies)
        db_session.flush()
        return replies

    return _make


@pytest.fixture()
def make_reviews(db_session: Session, protocol: Protocol) -> Callable[..., list[Review]]:
    def _make(ratings: list[int], *, author: str = "alice", target: Protocol | None = None) -> list[Review]:
        reviews = [
            Review(
                protocol_id=(target or protocol).id,
                author=author,
                rating=rating,
                feedback=f"review {index}",
                created_at=BASE_TIME + timedelta(minutes=index),
            )
            for index, rating in enumerate(ratings)
        ]
        db_session.add_all(reviews)
        db_session.flush()
        return reviews

    return _make
