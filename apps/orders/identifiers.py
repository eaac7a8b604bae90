# apps/orders/identifiers.py
"""
Human readable identifiers: order numbers (10000, 10001, ...) and item codes.

Numbers come from an IdentifierSequence row bumped with a single
``UPDATE ... SET value = value + 1``; the row lock taken by the update
serialises concurrent callers. A busy counter (lock timeout) is retried. If the
counter is unusable the generator scans the highest numeric value in use, adds
one and moves the counter past it; as a last resort a short timestamp suffix
is appended ("10001-4821"). Identifiers are opaque strings.
"""
import logging
import re
import time
from typing import Callable, Optional

from django.conf import settings
from django.db import DatabaseError, OperationalError, transaction
from django.db.models import F
from django.db.models.functions import Greatest

from .models import IdentifierSequence, Order, OrderItem

logger = logging.getLogger("app")

NUMERIC_RE = r"^[0-9]+$"
MAX_COUNTER_ATTEMPTS = 10
LOCK_RETRY_DELAY = 0.05


def _counter_next(name: str, start: int) -> int:
    """Atomically advance the counter ``name`` and return the new value."""
    with transaction.atomic():
        updated = IdentifierSequence.objects.filter(name=name).update(value=F("value") + 1)
        if not updated:
            IdentifierSequence.objects.get_or_create(name=name, defaults={"value": start - 1})
            updated = IdentifierSequence.objects.filter(name=name).update(value=F("value") + 1)
        if not updated:
            raise DatabaseError(f"Sequence {name} is missing")
        return IdentifierSequence.objects.values_list("value", flat=True).get(name=name)


def _advance_counter(name: str, issued: int) -> None:
    """Move the counter to at least ``issued`` so it never hands out a fallback value again."""
    try:
        with transaction.atomic():
            IdentifierSequence.objects.get_or_create(name=name, defaults={"value": issued})
            IdentifierSequence.objects.filter(name=name).update(value=Greatest(F("value"), issued))
    except DatabaseError as e:
        logger.error("Sequence %s could not be advanced to %s: %s", name, issued, e)


def _max_numeric(model, field: str) -> Optional[int]:
    values = (
        model.objects.filter(**{f"{field}__regex": NUMERIC_RE})
        .values_list(field, flat=True)
        .iterator()
    )
    best = None
    for value in values:
        n = int(value)
        if best is None or n > best:
            best = n
    return best


def _generate(model, field: str, name: str, start: int, counter: Callable[[str, int], int]) -> str:
    def exists(v):
        return model.objects.filter(**{field: v}).exists()

    try:
        for attempt in range(MAX_COUNTER_ATTEMPTS):
            try:
                value = str(counter(name, start))
            except OperationalError as e:
                logger.warning("Sequence %s busy (%s), retrying", name, e)
                time.sleep(LOCK_RETRY_DELAY * (attempt + 1))
                continue
            if not exists(value):
                return value
            # counter is behind existing data (restored dump, manual insert)
            logger.warning("Sequence %s issued existing value %s, advancing", name, value)
        raise DatabaseError(f"Sequence {name} gave no usable value after {MAX_COUNTER_ATTEMPTS} attempts")
    except DatabaseError as e:
        logger.error("Sequence %s failed, falling back to scan: %s", name, e)

    last = _max_numeric(model, field)
    next_number = last + 1 if last is not None else start
    value = str(next_number)
    if exists(value):
        suffix = str(int(time.time() * 1000))[-4:]
        value = f"{next_number}-{suffix}"
        logger.warning("Identifier %s collided, issued %s", next_number, value)
    _advance_counter(name, next_number)
    return value


def next_order_number(counter: Callable[[str, int], int] = _counter_next) -> str:
    return _generate(
        Order,
        "order_number",
        IdentifierSequence.KIND_ORDER_NUMBER,
        settings.ORDER_NUMBER_START,
        counter,
    )


def next_item_code(counter: Callable[[str, int], int] = _counter_next) -> str:
    return _generate(
        OrderItem,
        "item_code",
        IdentifierSequence.KIND_ITEM_CODE,
        settings.ITEM_CODE_START,
        counter,
    )


def is_fallback_identifier(value: str) -> bool:
    """True for suffixed identifiers produced by the collision fallback."""
    return not re.match(NUMERIC_RE, value or "")
