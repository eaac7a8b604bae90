# apps/orders/messaging.py
"""
Per-item chat threads: unread badges and approval state.

All counts are taken from the viewer's point of view: only messages written by
someone else count, and "read" means the viewer has an OrderItemMessageRead row
for that message.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from apps.accounts.roles import sender_label
from .models import Order, OrderItem, OrderItemMessage, OrderItemMessageRead

logger = logging.getLogger("app")

APPROVAL_MESSAGE_TEXT = "Товар одобрен клиентом"
REJECTION_MESSAGE_TEXT = "Товар отклонен клиентом"


@dataclass(frozen=True)
class ThreadCounts:
    total_messages: int = 0
    read_messages: int = 0

    @property
    def unread_count(self) -> int:
        return max(0, self.total_messages - self.read_messages)

    @property
    def has_messages(self) -> bool:
        return self.total_messages > 0


def _incoming(viewer):
    return OrderItemMessage.objects.exclude(user=viewer)


def _counts_by_item(item_ids: Iterable[Any], viewer) -> Dict[Any, ThreadCounts]:
    rows = (
        _incoming(viewer)
        .filter(order_item_id__in=list(item_ids))
        .values("order_item_id")
        .order_by()
        .annotate(
            total=Count("id", distinct=True),
            read=Count("reads", filter=Q(reads__user=viewer), distinct=True),
        )
    )
    return {r["order_item_id"]: ThreadCounts(r["total"], r["read"]) for r in rows}


def item_thread_state(item: OrderItem, viewer) -> Dict[str, Any]:
    counts = _counts_by_item([item.pk], viewer).get(item.pk, ThreadCounts())
    return {
        "item_id": item.pk,
        "total_messages": counts.total_messages,
        "read_messages": counts.read_messages,
        "unread_count": counts.unread_count,
        "has_messages": counts.has_messages,
        "is_approved": item.approval_status == OrderItem.APPROVAL_APPROVED,
        "approval_status": item.approval_status,
        "approval_changed_at": item.approval_changed_at.isoformat() if item.approval_changed_at else None,
    }


def order_unread_counts(order: Order, viewer) -> Dict[Any, Dict[str, int]]:
    item_ids = list(order.items.values_list("id", flat=True))
    counts = _counts_by_item(item_ids, viewer)
    result = {}
    for item_id in item_ids:
        c = counts.get(item_id, ThreadCounts())
        result[item_id] = {"unread_count": c.unread_count, "total_messages": c.total_messages}
    return result


def order_thread_summary(order: Order, viewer) -> Dict[str, Any]:
    """Read-only summary of all item threads of one order for the order detail view."""
    items = list(order.items.values("id", "approval_status", "approval_changed_at"))
    item_ids = [it["id"] for it in items]
    counts = _counts_by_item(item_ids, viewer) if item_ids else {}

    with_messages: List[Any] = []
    message_counts: Dict[Any, Dict[str, Any]] = {}
    unread_counts: Dict[Any, Dict[str, int]] = {}
    approval_statuses: Dict[Any, Dict[str, Any]] = {}

    for it in items:
        c = counts.get(it["id"], ThreadCounts())
        if c.has_messages:
            with_messages.append(it["id"])
        message_counts[it["id"]] = {"total_messages": c.total_messages, "has_messages": c.has_messages}
        unread_counts[it["id"]] = {"unread_count": c.unread_count, "total_messages": c.total_messages}
        changed_at = it["approval_changed_at"]
        approval_statuses[it["id"]] = {
            "is_approved": it["approval_status"] == OrderItem.APPROVAL_APPROVED,
            "status": it["approval_status"],
            "approved_at": changed_at.isoformat()
            if changed_at and it["approval_status"] == OrderItem.APPROVAL_APPROVED
            else None,
        }

    return {
        "items_with_messages": with_messages,
        "total_items": len(item_ids),
        "items_with_messages_count": len(with_messages),
        "items_without_messages_count": len(item_ids) - len(with_messages),
        "message_counts": message_counts,
        "unread_counts": unread_counts,
        "approval_statuses": approval_statuses,
    }


def mark_thread_read(item: OrderItem, viewer) -> int:
    """Create the missing read rows for the viewer; returns how many messages were unread."""
    unread_ids = list(
        _incoming(viewer)
        .filter(order_item=item)
        .exclude(reads__user=viewer)
        .values_list("id", flat=True)
    )
    if unread_ids:
        OrderItemMessageRead.objects.bulk_create(
            [OrderItemMessageRead(message_id=mid, user=viewer) for mid in unread_ids],
            ignore_conflicts=True,
        )
    return len(unread_ids)


def post_message(
    item: OrderItem,
    author,
    text: Optional[str] = None,
    attachments: Optional[List[Dict[str, Any]]] = None,
    is_service: bool = False,
) -> OrderItemMessage:
    text = str(text or "").strip()
    attachments = list(attachments or [])
    if not text and not attachments:
        raise ValidationError("Message text or attachments required")
    return OrderItemMessage.objects.create(
        order_item=item,
        user=author,
        text=text or None,
        is_service=bool(is_service),
        attachments=attachments,
    )


def set_item_approval(item: OrderItem, user, status: str) -> OrderItem:
    """
    Client decision on an item. The state lives on the item; the chat only gets
    a service message as an audit trail.
    """
    if status not in (OrderItem.APPROVAL_APPROVED, OrderItem.APPROVAL_REJECTED):
        raise ValidationError("Invalid approval status")
    if item.approval_status == status:
        return item

    with transaction.atomic():
        item.approval_status = status
        item.approval_changed_at = timezone.now()
        item.save(update_fields=["approval_status", "approval_changed_at"])
        post_message(
            item,
            user,
            text=APPROVAL_MESSAGE_TEXT if status == OrderItem.APPROVAL_APPROVED else REJECTION_MESSAGE_TEXT,
            is_service=True,
        )
    logger.info("Item %s approval -> %s by %s", item.item_code, status, user)
    return item


def serialize_message(message: OrderItemMessage) -> Dict[str, Any]:
    author = message.user
    return {
        "id": message.pk,
        "text": message.text,
        "sender": sender_label(author),
        "sender_name": getattr(author, "display_name", str(author)),
        "sender_id": author.pk,
        "timestamp": message.created_at.isoformat() if message.created_at else None,
        "is_service": message.is_service,
        "attachments": message.attachments or [],
    }
