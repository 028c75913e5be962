"""Pagination with guaranteed-visible highlight targets.

Clients may ask for a page of comments, replies or reviews while pointing at
one item they want to see (for example after following a notification link).
The paginator returns the requested page and, when the target lives on a
different page, prepends it with metadata describing where it would
naturally appear.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Any, Generic, TypeVar

from sqlalchemy.orm import Session

from protocol_forum.services.ordering import OrderedQuery

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT")
ViewT = TypeVar("ViewT")


@dataclass(frozen=True)
class HighlightLocation:
    """Natural position of a target under a query's ordering."""

    natural_page: int
    position_in_page: int
    count_before: int

    def found_on_page(self, page: int) -> bool:
        return self.natural_page == page


@dataclass(frozen=True)
class Pagination:
    """Page envelope reported alongside listing results."""

    current_page: int
    last_page: int
    per_page: int
    total: int
    from_item: int | None
    to_item: int | None
    has_more_pages: bool

    @classmethod
    def build(cls, *, page: int, per_page: int, total: int, page_size: int) -> Pagination:
        """Compute the envelope for ``page_size`` natural items on ``page``."""
        last_page = max(1, math.ceil(total / per_page))
        offset = (page - 1) * per_page
        return cls(
            current_page=page,
            last_page=last_page,
            per_page=per_page,
            total=total,
            from_item=offset + 1 if page_size else None,
            to_item=offset + page_size if page_size else None,
            has_more_pages=page < last_page,
        )


@dataclass(frozen=True)
class HighlightInfo:
    """What happened to the highlight target of a listing request.

    ``found_in_children`` marks a target that is nested inside an item on the
    page (a reply under a listed comment); ``carrier_id`` names that item.
    """

    target_id: str | None = None
    target_type: str | None = None
    found_in_current_page: bool = False
    included_from_other_page: bool = False
    natural_page: int | None = None
    position_in_page: int | None = None
    found_in_children: bool = False
    carrier_id: str | None = None


@dataclass(frozen=True)
class HighlightResult(Generic[ItemT]):
    """Items, pagination and highlight metadata for one listing request."""

    items: list[ItemT]
    pagination: Pagination
    highlight_info: HighlightInfo = field(default_factory=HighlightInfo)

    def map(self, items: list[ViewT]) -> HighlightResult[ViewT]:
        """Return the same envelope around transformed items."""
        return HighlightResult(
            items=items,
            pagination=self.pagination,
            highlight_info=self.highlight_info,
        )


class HighlightLocator:
    """Computes where a target would land under normal pagination."""

    @staticmethod
    def locate(
        session: Session,
        query: OrderedQuery,
        per_page: int,
        target_id: str,
    ) -> HighlightLocation | None:
        """Return the natural page and position of ``target_id``.

        Returns None when the target does not exist or does not pass the
        query's filters; callers treat that as "cannot be highlighted here".
        """
        values = query.key_values(session, target_id)
        if values is None:
            return None
        count_before = query.count_preceding(session, values)
        return HighlightLocation(
            natural_page=math.ceil((count_before + 1) / per_page),
            position_in_page=(count_before % per_page) + 1,
            count_before=count_before,
        )


class HighlightedPaginator:
    """Runs an ``OrderedQuery`` page fetch and injects the highlight target."""

    def __init__(self, locator: HighlightLocator | None = None) -> None:
        self.locator = locator or HighlightLocator()

    def paginate(
        self,
        session: Session,
        query: OrderedQuery,
        per_page: int,
        page: int,
        target_id: str | None = None,
        target_type: str | None = None,
    ) -> HighlightResult[Any]:
        """Return ``page`` of ``query`` with the target guaranteed present when it qualifies."""
        items = query.fetch_page(session, page, per_page)
        total = query.count(session)
        pagination = Pagination.build(page=page, per_page=per_page, total=total, page_size=len(items))

        if target_id is None:
            return HighlightResult(items=items, pagination=pagination)

        info = HighlightInfo(target_id=target_id, target_type=target_type)
        if any(item.id == target_id for item in items):
            return HighlightResult(
                items=items,
                pagination=pagination,
                highlight_info=replace(info, found_in_current_page=True),
            )

        injected = self._inject(session, query, per_page, target_id, items, pagination, info)
        if injected is None:
            return HighlightResult(items=items, pagination=pagination, highlight_info=info)
        return injected

    def paginate_via_parent(
        self,
        session: Session,
        query: OrderedQuery,
        per_page: int,
        page: int,
        child_id: str,
        parent_id: str,
        target_type: str | None = None,
    ) -> HighlightResult[Any]:
        """Highlight a child item through the listed parent that carries it.

        When the parent is on the page the child is reported as found among
        that parent's children; otherwise the parent is injected like a
        regular highlight target.
        """
        items = query.fetch_page(session, page, per_page)
        total = query.count(session)
        pagination = Pagination.build(page=page, per_page=per_page, total=total, page_size=len(items))
        info = HighlightInfo(target_id=child_id, target_type=target_type, carrier_id=parent_id)

        if any(item.id == parent_id for item in items):
            return HighlightResult(
                items=items,
                pagination=pagination,
                highlight_info=replace(info, found_in_current_page=True, found_in_children=True),
            )

        injected = self._inject(session, query, per_page, parent_id, items, pagination, info)
        if injected is None:
            return HighlightResult(items=items, pagination=pagination, highlight_info=info)
        return injected

    def _inject(
        self,
        session: Session,
        query: OrderedQuery,
        per_page: int,
        item_id: str,
        items: list[Any],
        pagination: Pagination,
        info: HighlightInfo,
    ) -> HighlightResult[Any] | None:
        location = self.locator.locate(session, query, per_page, item_id)
        if location is None:
            logger.debug("Highlight target %s does not match the active filters", item_id)
            return None
        target = query.fetch_one(session, item_id)
        if target is None:
            return None
        return HighlightResult(
            items=[target, *items],
            pagination=replace(pagination, total=pagination.total + 1),
            highlight_info=replace(
                info,
                included_from_other_page=True,
                natural_page=location.natural_page,
                position_in_page=location.position_in_page,
                found_in_children=info.carrier_id is not None,
            ),
        )


__all__ = [
    "HighlightInfo",
    "HighlightLocation",
    "HighlightLocator",
    "HighlightResult",
    "HighlightedPaginator",
    "Pagination",
]
