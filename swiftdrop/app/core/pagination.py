"""
Pagination helpers.

Turns raw page/limit/sort query values into bounded, safe values and shapes
list responses as {items, total, page, limit, pageCount}.
"""

import math
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from swiftdrop.app.core.config import settings

# Public sort keys (camelCase and snake_case) mapped to Parcel columns
SORTABLE_FIELDS = {
    "createdAt": "created_at",
    "created_at": "created_at",
    "updatedAt": "updated_at",
    "updated_at": "updated_at",
    "status": "status",
    "trackingId": "tracking_id",
    "tracking_id": "tracking_id",
    "origin": "origin",
    "destination": "destination",
    "weight": "weight",
    "price": "price",
}

DEFAULT_SORT_FIELD = "created_at"


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    sort_field: str = DEFAULT_SORT_FIELD
    descending: bool = True

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def _positive_int(raw: Any, default: int, upper: Optional[int] = None) -> int:
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return default
    if value < 1 or (upper is not None and value > upper):
        return default
    return value


def parse_sort(raw: Optional[str]) -> tuple:
    """
    Parse "-createdAt" style sort values into (column, descending).

    Unknown fields fall back to newest first.
    """
    if not raw or not raw.strip():
        return DEFAULT_SORT_FIELD, True

    raw = raw.strip()
    descending = raw.startswith("-")
    name = raw.lstrip("-+")

    column = SORTABLE_FIELDS.get(name)
    if column is None:
        return DEFAULT_SORT_FIELD, True
    return column, descending


def parse_pagination(
    page: Any = None,
    limit: Any = None,
    sort: Optional[str] = None,
) -> Pagination:
    """
    Normalize raw query values: 1 <= page <= max_page, 1 <= limit <= max_page_size.

    A page beyond max_page falls back to 1 so the offset always fits a
    64-bit integer column.
    """
    page_value = _positive_int(page, 1, upper=settings.max_page)
    limit_value = min(_positive_int(limit, settings.default_page_size), settings.max_page_size)
    sort_field, descending = parse_sort(sort)
    return Pagination(page=page_value, limit=limit_value, sort_field=sort_field, descending=descending)


def build_pagination_result(items: Sequence[Any], total: int, page: int, limit: int) -> dict:
    return {
        "items": list(items),
        "total": total,
        "page": page,
        "limit": limit,
        "pageCount": math.ceil(total / limit) if limit else 0,
    }
