"""
Page/limit pagination for list endpoints.
"""
import math
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Query

from retailpos.core.config import settings


def normalize_page(page: Optional[int], limit: Optional[int]) -> Tuple[int, int]:
    """Clamp page to >= 1 and limit to [1, max_page_size]."""
    page = max(1, page or 1)
    if limit is None:
        limit = settings.default_page_size
    limit = min(max(1, limit), settings.max_page_size)
    return page, limit


def page_meta(page: int, limit: int, total: int) -> Dict[str, int]:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": math.ceil(total / limit),
    }


def paginate(query: Query, page: Optional[int], limit: Optional[int]) -> Tuple[List[Any], Dict[str, int]]:
    """
    Run a query for one page of results.

    The count runs against the unordered query so joins used only for
    ordering do not inflate it.

    Returns:
        Tuple of (items, pagination metadata)
    """
    page, limit = normalize_page(page, limit)
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return items, page_meta(page, limit, total)
