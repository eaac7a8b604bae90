# apps/orders/pricing.py
"""
Box / order pricing.

A box holds a multi-size pack of pairs, so ``price_box = price_pair * pairs``.
An order total is the sum of ``price_box * qty`` over the lines the customer
did not refuse (feedback WRONG_SIZE / WRONG_ITEM).
"""
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional, Tuple

from django.db.models import Exists, OuterRef, Prefetch

from apps.catalog.sizes import total_pairs
from .models import Order, OrderItem, OrderItemFeedback

logger = logging.getLogger("app.jobs")

# stored totals closer than this are considered equal
TOTAL_EPSILON = Decimal("0.01")
CENT = Decimal("0.01")


def _to_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")


def total_pairs_in_box(sizes: Any) -> int:
    return total_pairs(sizes)


def box_price_from_pair(price_pair: Any, sizes: Any) -> Decimal:
    """EN: price of a whole box. Malformed sizes count as one pair."""
    return (_to_decimal(price_pair) * total_pairs_in_box(sizes)).quantize(CENT)


def item_total(price_box: Any, qty: int) -> Decimal:
    return (_to_decimal(price_box) * int(qty or 0)).quantize(CENT)


def is_refused(feedback_types: Iterable[str]) -> bool:
    return any(t in OrderItemFeedback.REFUSAL_TYPES for t in feedback_types)


def order_total(lines: Iterable[Tuple[Any, int, bool]]) -> Decimal:
    """Sum of (price_box, qty, refused) lines, refused ones excluded."""
    total = Decimal("0")
    for price_box, qty, refused in lines:
        if refused:
            continue
        total += item_total(price_box, qty)
    return total.quantize(CENT)


def _refused_subquery():
    return OrderItemFeedback.objects.filter(
        order_item=OuterRef("pk"),
        feedback_type__in=OrderItemFeedback.REFUSAL_TYPES,
    )


def compute_order_total(order: Order) -> Decimal:
    """Fresh total from the DB rows of ``order``."""
    rows = (
        OrderItem.objects.filter(order=order)
        .annotate(refused=Exists(_refused_subquery()))
        .values_list("price_box", "qty", "refused")
    )
    return order_total(rows)


def needs_update(stored: Any, computed: Decimal) -> bool:
    return abs(computed - _to_decimal(stored)) > TOTAL_EPSILON


def recalculate_order_total(order: Order, new_total: Optional[Decimal] = None, dry_run: bool = False) -> bool:
    """
    Compare-and-conditionally-write ``order.total`` / ``order.subtotal``.
    Returns True when the stored total differed (and was written unless dry_run).
    """
    if new_total is None:
        new_total = compute_order_total(order)
    if not needs_update(order.total, new_total):
        return False
    if not dry_run:
        Order.objects.filter(pk=order.pk).update(total=new_total, subtotal=new_total)
    order.total = new_total
    order.subtotal = new_total
    return True


@dataclass
class RecalculationResult:
    processed: int = 0
    updated: int = 0
    unchanged: int = 0
    difference: Decimal = Decimal("0")


def recalculate_all_order_totals(dry_run: bool = False, stdout=None) -> RecalculationResult:
    """
    Walk every order (newest first) and fix totals that drifted from their items.
    Safe to re-run: a second pass over unchanged data writes nothing.
    """
    result = RecalculationResult()
    items_qs = OrderItem.objects.annotate(refused=Exists(_refused_subquery())).only(
        "id", "order_id", "price_box", "qty"
    )
    orders = (
        Order.objects.order_by("-created_at")
        .only("id", "order_number", "total", "subtotal")
        .prefetch_related(Prefetch("items", queryset=items_qs))
    )

    for order in orders.iterator(chunk_size=500):
        result.processed += 1
        old_total = _to_decimal(order.total)
        new_total = order_total((it.price_box, it.qty, it.refused) for it in order.items.all())
        if recalculate_order_total(order, new_total=new_total, dry_run=dry_run):
            diff = new_total - old_total
            result.updated += 1
            result.difference += diff
            line = f"Order {order.order_number}: {old_total:.2f} -> {new_total:.2f} ({diff:+.2f})"
            logger.info(line)
            if stdout is not None:
                stdout.write(line)
        else:
            result.unchanged += 1

    logger.info(
        "Order totals recalculated: processed=%s updated=%s unchanged=%s difference=%s dry_run=%s",
        result.processed,
        result.updated,
        result.unchanged,
        result.difference,
        dry_run,
    )
    return result
