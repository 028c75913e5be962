"""discussion schema

Revision ID: 5c1f0a9e2b7d
Revises:
Create Date: 2026-10-19 09:12:40.518233

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c1f0a9e2b7d"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Create protocols, threads, comments, replies, reviews, users and votes."""
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index("ix_users_created_at", "users", ["created_at"])
    op.create_table(
        "protocols",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("author", sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_protocols_author", "protocols", ["author"])
    op.create_index("ix_protocols_created_at", "protocols", ["created_at"])

    op.create_table(
        "threads",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("protocol_id", sa.String(length=36), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("author", sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["protocol_id"], ["protocols.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_threads_protocol_id", "threads", ["protocol_id"])
    op.create_index("ix_threads_author", "threads", ["author"])
    op.create_index("ix_threads_created_at", "threads", ["created_at"])

    op.create_table(
        "comments",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("thread_id", sa.String(length=36), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("author", sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["thread_id"], ["threads.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_comments_thread_id", "comments", ["thread_id"])
    op.create_index("ix_comments_author", "comments", ["author"])
    op.create_index("ix_comments_created_at", "comments", ["created_at"])

    op.create_table(
        "replies",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("comment_id", sa.String(length=36), nullable=False),
        sa.Column("parent_id", sa.String(length=36), nullable=True),
        sa.Column("reply_to_id", sa.String(length=36), nullable=True),
        sa.Column("user_id", sa.String(length=36), nullable=True),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("author", sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["comment_id"], ["comments.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["parent_id"], ["replies.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["reply_to_id"], ["replies.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_replies_comment_id", "replies", ["comment_id"])
    op.create_index("ix_replies_parent_id", "replies", ["parent_id"])
    op.create_index("ix_replies_author", "replies", ["author"])
    op.create_index("ix_replies_created_at", "replies", ["created_at"])

    op.create_table(
        "reviews",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("protocol_id", sa.String(length=36), nullable=False),
        sa.Column("rating", sa.SmallInteger(), nullable=False),
        sa.Column("feedback", sa.Text(), nullable=True),
        sa.Column("author", sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating"),
        sa.ForeignKeyConstraint(["protocol_id"], ["protocols.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_reviews_protocol_id", "reviews", ["protocol_id"])
    op.create_index("ix_reviews_author", "reviews", ["author"])
    op.create_index("ix_reviews_created_at", "reviews", ["created_at"])

    op.create_table(
        "votes",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("votable_type", sa.String(length=16), nullable=False),
        sa.Column("votable_id", sa.String(length=36), nullable=False),
        sa.Column("polarity", sa.String(length=8), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "votable_type", "votable_id", name="uq_votes_user_votable"),
    )
    op.create_index("ix_votes_votable_polarity", "votes", ["votable_type", "votable_id", "polarity"])
    op.create_index("ix_votes_created_at", "votes", ["created_at"])


def downgrade() -> None:
    """Drop the discussion schema."""
    op.drop_table("votes")
    op.drop_table("reviews")
    op.drop_table("replies")
    op.drop_table("comments")
    op.drop_table("threads")
    op.drop_table("protocols")
    op.drop_table("users")
