# apps/api/v1/pagination.py
from typing import Any, Dict, Tuple


def positive_int(value, default, maximum=None):
    try:
        n = int(value)
    except (TypeError, ValueError):
        return default
    if n < 1:
        return default
    return min(n, maximum) if maximum else n


def paginate(qs, page: int, size: int) -> Tuple[Any, int]:
    """Slice ``qs`` to one page; returns (page queryset, total count)."""
    total = qs.count()
    offset = (page - 1) * size
    return qs[offset:offset + size], total


def pages(total: int, size: int) -> int:
    return (total + size - 1) // size
