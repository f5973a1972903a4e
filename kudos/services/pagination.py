"""Pagination helpers shared by the list endpoints."""

from __future__ import annotations

import math
from typing import Any, Dict

# Largest integer a JSON client can send exactly; keeps SQL offsets inside int64.
MAX_SAFE_INTEGER = 2**53 - 1


def sanitize_int(
    value: Any,
    default: int,
    minimum: int = 1,
    maximum: int = MAX_SAFE_INTEGER,
) -> int:
    """Coerce a user-supplied number into ``[minimum, maximum]``.

    Missing, non-numeric and non-finite values fall back to ``default``;
    anything else is floored and clamped. Never raises.
    """

    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default

    normalized = math.floor(number)
    if normalized < minimum:
        return minimum
    if normalized > maximum:
        return maximum
    return normalized


def total_pages(total: int, page_size: int) -> int:
    if total <= 0:
        return 0
    return math.ceil(total / page_size)


def page_meta(page: int, page_size: int, total_count: int) -> Dict[str, Any]:
    pages = total_pages(total_count, page_size)
    return {
        "page": page,
        "pageSize": page_size,
        "totalCount": total_count,
        "totalPages": pages,
        "hasNextPage": page < pages,
        "hasPreviousPage": page > 1,
    }


__all__ = ["MAX_SAFE_INTEGER", "page_meta", "sanitize_int", "total_pages"]
