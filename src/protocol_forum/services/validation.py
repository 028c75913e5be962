"""Input checks shared by the content services."""
from __future__ import annotations

from protocol_forum.core.errors import ValidationFailure
from protocol_forum.core.settings import settings


def clean_body(body: str | None, *, field_name: str = "body") -> str:
    """Return a stripped body, rejecting blank or oversized input."""
    text = (body or "").strip()
    if not text:
        raise ValidationFailure(f"{field_name} must not be empty")
    if len(text) > settings.body_max_length:
        raise ValidationFailure(
            f"{field_name} must be at most {settings.body_max_length} characters"
        )
    return text


def check_rating(rating: int) -> int:
    if not 1 <= rating <= 5:
        raise ValidationFailure("rating must be between 1 and 5")
    return rating


def normalize_page(page: int | None, per_page: int | None, *, default: int, maximum: int) -> tuple[int, int]:
    """Clamp pagination input to ``1 <= per_page <= maximum`` and ``page >= 1``."""
    size = default if per_page is None else per_page
    size = max(1, min(size, maximum))
    return max(1, page or 1), size


__all__ = ["check_rating", "clean_body", "normalize_page"]
