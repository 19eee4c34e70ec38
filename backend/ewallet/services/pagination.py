import math

from ewallet.models.transaction import PaginationInfo


def total_pages(total_items: int, limit: int) -> int:
    """ceil(total_items / limit). limit must be >= 1; the filter normalizer guarantees it."""
    return math.ceil(total_items / limit)


def build_pagination(total_items: int, page: int, limit: int) -> PaginationInfo:
    return PaginationInfo(
        current_page=page,
        total_pages=total_pages(total_items, limit),
        total_items=total_items,
        items_per_page=limit,
    )
