# app/shared/utils/helpers.py
import math
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from app.config.constants import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT


def utcnow() -> datetime:
    """Naive UTC timestamp, as stored in the database"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_pagination(page: Optional[int], limit: Optional[int]) -> Dict[str, int]:
    """Normalize page/limit query values and compute the row offset"""
    page = page if page and page > 0 else DEFAULT_PAGE
    limit = min(limit if limit and limit > 0 else DEFAULT_LIMIT, MAX_LIMIT)
    return {"page": page, "limit": limit, "offset": (page - 1) * limit}


def pagination_meta(total: int, page: int, limit: int) -> Dict[str, Any]:
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit) if limit else 0,
        "has_more": page * limit < total,
    }


def to_float(value: Any) -> float:
    """Decimal/None safe conversion used by aggregates"""
    return float(value) if value is not None else 0.0
