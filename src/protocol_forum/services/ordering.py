"""Deterministic ordered queries over discussion content.

An ``OrderedQuery`` is an immutable value: a model, a tuple of filter
predicates and a sort policy. The same value drives page fetches, totals and
the "how many items come before this one" count used for highlighting, so all
three always agree on the ordering.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from protocol_forum.core.errors import ValidationFailure
from protocol_forum.models.vote import Polarity, Vote


class SortPolicy(str, Enum):
    """Supported listing orders."""

    RECENT = "recent"
    OLDEST = "oldest"
    POPULAR = "popular"
    RATING_HIGH = "rating_high"
    RATING_LOW = "rating_low"


@dataclass(frozen=True, eq=False)
class SortKey:
    """One component of a lexicographic ordering."""

    expression: Any
    descending: bool

    def ordered(self) -> ColumnElement[Any]:
        return self.expression.desc() if self.descending else self.expression.asc()

    def beyond(self, value: Any) -> ColumnElement[bool]:
        """Predicate for rows that sort strictly before ``value`` on this key."""
        return self.expression > value if self.descending else self.expression < value


def upvote_count(model: Any) -> Any:
    """Correlated scalar subquery counting upvotes for each row of ``model``."""
    return (
        select(func.count(Vote.id))
        .where(
            Vote.votable_type == model.__votable_type__,
            Vote.votable_id == model.id,
            Vote.polarity == Polarity.UP,
        )
        .correlate(model)
        .scalar_subquery()
    )


def sort_keys(model: Any, sort: SortPolicy) -> tuple[SortKey, ...]:
    """Return the full sort key for a policy, ending with the id tiebreak."""
    match sort:
        case SortPolicy.RECENT:
            return (SortKey(model.created_at, True), SortKey(model.id, True))
        case SortPolicy.OLDEST:
            return (SortKey(model.created_at, False), SortKey(model.id, False))
        case SortPolicy.POPULAR:
            if not hasattr(model, "__votable_type__"):
                raise ValidationFailure(f"Sort '{sort.value}' is only available for votable content")
            return (
                SortKey(upvote_count(model), True),
                SortKey(model.created_at, True),
                SortKey(model.id, True),
            )
        case SortPolicy.RATING_HIGH | SortPolicy.RATING_LOW:
            if not hasattr(model, "rating"):
                raise ValidationFailure(f"Sort '{sort.value}' is only available for reviews")
            return (
                SortKey(model.rating, sort is SortPolicy.RATING_HIGH),
                SortKey(model.created_at, True),
                SortKey(model.id, True),
            )
    raise ValidationFailure(f"Unsupported sort '{sort}'")


@dataclass(frozen=True, eq=False)
class OrderedQuery:
    """Filters plus a total order over one content model."""

    model: Any
    filters: tuple[ColumnElement[bool], ...] = field(default=())
    sort: SortPolicy = SortPolicy.RECENT

    def where(self, *predicates: ColumnElement[bool]) -> OrderedQuery:
        """Return a copy with extra filter predicates."""
        return replace(self, filters=self.filters + tuple(predicates))

    @property
    def keys(self) -> tuple[SortKey, ...]:
        return sort_keys(self.model, self.sort)

    def statement(self) -> Any:
        return (
            select(self.model)
            .where(*self.filters)
            .order_by(*(key.ordered() for key in self.keys))
        )

    def count(self, session: Session) -> int:
        """Return the number of rows matching the filters."""
        stmt = select(func.count()).select_from(self.model).where(*self.filters)
        return int(session.scalar(stmt) or 0)

    def fetch_page(self, session: Session, page: int, per_page: int) -> list[Any]:
        """Return one page of rows; pages are 1-based."""
        stmt = self.statement().offset((page - 1) * per_page).limit(per_page)
        return list(session.scalars(stmt))

    def fetch_one(self, session: Session, entity_id: str) -> Any | None:
        """Return a row by id only if it passes the filters."""
        stmt = select(self.model).where(*self.filters, self.model.id == entity_id)
        return session.scalars(stmt).first()

    def key_values(self, session: Session, entity_id: str) -> tuple[Any, ...] | None:
        """Return the sort-key tuple of a row, or None if it fails the filters."""
        stmt = select(*(key.expression for key in self.keys)).where(
            *self.filters,
            self.model.id == entity_id,
        )
        row = session.execute(stmt).first()
        return tuple(row) if row is not None else None

    def preceding(self, values: Sequence[Any]) -> ColumnElement[bool]:
        """Predicate selecting rows ordered strictly before ``values``."""
        keys = self.keys
        clauses = []
        for index, key in enumerate(keys):
            equal_prefix = [keys[j].expression == values[j] for j in range(index)]
            clauses.append(and_(*equal_prefix, key.beyond(values[index])))
        return or_(*clauses)

    def count_preceding(self, session: Session, values: Sequence[Any]) -> int:
        """Count rows matching the filters that sort before ``values``."""
        stmt = (
            select(func.count())
            .select_from(self.model)
            .where(*self.filters, self.preceding(values))
        )
        return int(session.scalar(stmt) or 0)


__all__ = ["OrderedQuery", "SortKey", "SortPolicy", "sort_keys", "upvote_count"]
