"""Shared Pydantic schemas for listing envelopes."""
from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

ItemT = TypeVar("ItemT")


class PaginationOut(BaseModel):
    """Pagination envelope returned by list endpoints."""

    current_page: int
    last_page: int
    per_page: int
    total: int = Field(..., description="Matching items, plus one when a highlight target was injected.")
    from_item: int | None = None
    to_item: int | None = None
    has_more_pages: bool

    model_config = ConfigDict(from_attributes=True)


class HighlightInfoOut(BaseModel):
    """Where a requested highlight target was found."""

    target_id: str | None = None
    target_type: str | None = None
    found_in_current_page: bool = False
    included_from_other_page: bool = False
    natural_page: int | None = None
    position_in_page: int | None = None
    found_in_children: bool = False
    carrier_id: str | None = None

    model_config = ConfigDict(from_attributes=True)


class Page(BaseModel, Generic[ItemT]):
    """A page of items with pagination and highlight metadata."""

    items: list[ItemT]
    pagination: PaginationOut
    highlight_info: HighlightInfoOut

    model_config = ConfigDict(from_attributes=True)
