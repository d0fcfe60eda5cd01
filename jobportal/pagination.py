"""Pagination envelope for list responses."""
import math
from typing import Any, Dict, List, Tuple

from .utils import MAX_SQL_INT


def paginate(items: List[Any], total: int, page: int, limit: int) -> Dict[str, Any]:
    """Wrap one page of results with its pagination metadata.

    Args:
        items: Items on the current page
        total: Total number of matching items
        page: 1-based page number
        limit: Page size

    Returns:
        Dict with ``data`` and ``pagination`` keys
    """
    total_pages = math.ceil(total / limit) if limit > 0 else 0
    return {
        'data': items,
        'pagination': {
            'total': total,
            'page': page,
            'limit': limit,
            'totalPages': total_pages,
            'hasNextPage': page < total_pages,
            'hasPrevPage': page > 1,
        },
    }


def _positive_int(value: Any, default: int) -> int:
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return number if 0 < number <= MAX_SQL_INT else default


def parse_page_params(args: Any, default_limit: int = 20, max_limit: int = 100) -> Tuple[int, int]:
    """Read ``page`` and ``limit`` from query parameters.

    Missing or malformed values fall back to page 1 and the default
    limit; the limit is capped at ``max_limit``. A page whose row
    offset would not fit a database integer falls back to page 1.

    Returns:
        Tuple of (page, limit)
    """
    page = _positive_int(args.get('page'), 1)
    limit = min(_positive_int(args.get('limit'), default_limit), max_limit)
    if page_offset(page, limit) > MAX_SQL_INT:
        page = 1
    return page, limit


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit
