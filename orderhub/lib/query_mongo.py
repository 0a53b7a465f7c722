from typing import Any, Dict

from mongoengine.queryset import QuerySet

import const


def clamp_page(page, per_page):
    try:
        page = int(page or const.DEFAULT_PAGE)
    except (TypeError, ValueError):
        page = const.DEFAULT_PAGE
    try:
        per_page = int(per_page or const.DEFAULT_PER_PAGE)
    except (TypeError, ValueError):
        per_page = const.DEFAULT_PER_PAGE
    return max(page, 1), min(max(per_page, 1), const.MAX_PER_PAGE)


def select_with_pagination_mongo(
    queryset: QuerySet,
    page: int,
    per_page: int,
) -> Dict[str, Any]:
    page, per_page = clamp_page(page, per_page)

    total = queryset.count()

    skip = (page - 1) * per_page
    items = queryset.skip(skip).limit(per_page)

    total_pages = (total + per_page - 1) // per_page

    return {
        "total": total,
        "page": page,
        "per_page": per_page,
        "pages": total_pages,
        "items": list(items),
    }
