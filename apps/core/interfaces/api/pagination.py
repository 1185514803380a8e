from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Page:
    items: list
    meta: dict


def page_params(request, *, default_limit: int = 20, max_limit: int = 100) -> tuple[int, int]:
    try:
        page = int(request.query_params.get("page", 1))
    except (TypeError, ValueError):
        page = 1
    try:
        limit = int(request.query_params.get("limit", default_limit))
    except (TypeError, ValueError):
        limit = default_limit
    return max(page, 1), min(max(limit, 1), max_limit)


def paginate(queryset, *, page: int, limit: int) -> Page:
    total = queryset.count()
    offset = (page - 1) * limit
    items = list(queryset[offset : offset + limit])
    return Page(
        items=items,
        meta={
            "current_page": page,
            "total_pages": math.ceil(total / limit) if total else 0,
            "total_items": total,
            "items_per_page": limit,
        },
    )
