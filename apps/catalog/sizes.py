# apps/catalog/sizes.py
"""
Size descriptors of a box.

Products scraped from chats carry sizes in several shapes: ``count``,
``quantity``, ``stock`` or ``qty`` for the number of pairs of a size, and the
whole list sometimes arrives as a JSON string. Everything is converted here to
the canonical ``[{"size": "38", "count": 2}, ...]`` stored on ``Product``.
"""
import json
from decimal import Decimal
from typing import Any, Dict, List

SIZE_COUNT_ALIASES = ("count", "quantity", "stock", "qty")


def parse_sizes(raw: Any) -> List[Any]:
    """Return the raw list of size entries, or [] when the value is not a list."""
    if raw is None:
        return []
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="ignore")
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return []
    if not isinstance(raw, list):
        return []
    return raw


def entry_count(entry: Any) -> int:
    """Pairs of one size entry; the first non-zero numeric alias wins."""
    if not isinstance(entry, dict):
        return 0
    for key in SIZE_COUNT_ALIASES:
        value = entry.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
            continue
        if value:
            return int(value)
    return 0


def normalize_sizes(raw: Any) -> List[Dict[str, Any]]:
    result = []
    for entry in parse_sizes(raw):
        if not isinstance(entry, dict):
            continue
        size = entry.get("size")
        if size is None or str(size).strip() == "":
            continue
        result.append({"size": str(size).strip(), "count": entry_count(entry)})
    return result


def total_pairs(raw: Any) -> int:
    """Pairs in a box. Missing or malformed size data means a single pair."""
    total = sum(entry_count(entry) for entry in parse_sizes(raw))
    return total if total > 0 else 1
