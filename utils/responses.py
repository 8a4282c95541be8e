"""
RecipeShare Response Helpers
Shared pieces of every JSON payload
"""

from decimal import Decimal
from math import ceil
from typing import Any, Optional, Union

from utils.date_utils import timestamp


def with_timestamp(payload: dict) -> dict:
    """Stamp a response body with the current time"""
    payload["timestamp"] = timestamp()
    return payload


def counted_pagination(page: int, limit: int, total: int, total_key: str) -> dict:
    """
    Pagination block for listings that know their total size

    Args:
        total_key: Name of the total field, e.g. "totalRecipes"
    """
    total_pages = ceil(total / limit) if limit else 0
    return {
        "currentPage": page,
        "totalPages": total_pages,
        total_key: total,
        "limit": limit,
        "hasNextPage": page < total_pages,
        "hasPrevPage": page > 1,
    }


def page_pagination(page: int, limit: int, returned: int) -> dict:
    """Pagination block for listings without a count; a full page implies more may follow"""
    return {
        "currentPage": page,
        "limit": limit,
        "hasNextPage": returned == limit,
    }


def to_number(value: Optional[Union[Decimal, float, int]]) -> Optional[Union[float, int]]:
    """Render a Decimal quantity as a JSON number, keeping whole numbers integral"""
    if value is None:
        return None
    number = float(value)
    return int(number) if number.is_integer() else number


def round_average(value: Any) -> Optional[float]:
    """Mean rounded to two places, None when nothing was averaged"""
    if value is None:
        return None
    return round(float(value), 2)

