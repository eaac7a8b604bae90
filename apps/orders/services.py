# apps/orders/services.py
import logging
from typing import Any, Dict, List, Optional

from django.db import IntegrityError, transaction
from django.db.models import Q
from rest_framework.exceptions import NotFound, ValidationError

from apps.accounts.roles import is_admin, is_client, is_gruzchik
from apps.catalog.models import Product
from .exceptions import Conflict
from .identifiers import next_item_code, next_order_number
from .messaging import post_message
from .models import (
    Order,
    OrderItem,
    OrderItemFeedback,
    OrderItemReplacement,
    OrderStatusLog,
)
from .pricing import box_price_from_pair, item_total, recalculate_order_total

logger = logging.getLogger("app")


# ---------------------------------------------------------------------------
# Scopes
# ---------------------------------------------------------------------------

def orders_scope(user):
    """Orders the user may see: admin all, gruzchik assigned, client own."""
    if is_admin(user):
        return Order.objects.all()
    if is_gruzchik(user):
        return Order.objects.filter(gruzchik=user)
    if is_client(user):
        return Order.objects.filter(user=user)
    return Order.objects.none()


def get_order_for(user, pk) -> Order:
    order = orders_scope(user).filter(pk=pk).first()
    if order is None:
        raise NotFound("Order not found")
    return order


def get_item_for(user, pk) -> OrderItem:
    item = (
        OrderItem.objects.select_related("order")
        .filter(pk=pk, order__in=orders_scope(user))
        .first()
    )
    if item is None:
        raise NotFound("Order item not found")
    return item


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------

def _validate_items(items: Any) -> List[Dict[str, Any]]:
    if not isinstance(items, list) or not items:
        raise ValidationError("Items are required")
    cleaned = []
    for raw in items:
        if not isinstance(raw, dict):
            raise ValidationError("Invalid item")
        slug = (raw.get("slug") or "").strip() if isinstance(raw.get("slug"), str) else None
        product_id = raw.get("product_id")
        if not slug and not product_id:
            raise ValidationError("Each item needs slug or product_id")
        if product_id is not None and not slug:
            try:
                product_id = int(product_id)
            except (TypeError, ValueError):
                raise ValidationError("product_id must be an integer")
        try:
            qty = int(raw.get("qty", 1))
        except (TypeError, ValueError):
            raise ValidationError("qty must be an integer")
        if qty < 1:
            raise ValidationError("qty must be >= 1")
        cleaned.append({"slug": slug, "product_id": product_id, "qty": qty})
    return cleaned


def create_order(user, items: Any, customer_info: Dict[str, Any], transport_company: Any = None) -> Order:
    """
    Place an order from cart lines. Box prices are taken from the current
    product data; every line gets its own item code.
    """
    lines = _validate_items(items)
    if not isinstance(customer_info, dict):
        raise ValidationError("customer_info must be an object")
    phone = str(customer_info.get("phone") or "").strip()
    if not phone:
        raise ValidationError("Phone is required")
    if transport_company in (None, ""):
        raise ValidationError("Transport company is required")

    slugs = [line["slug"] for line in lines if line["slug"]]
    ids = [line["product_id"] for line in lines if not line["slug"] and line["product_id"]]
    products = list(Product.objects.filter(Q(slug__in=slugs) | Q(pk__in=ids)))
    by_slug = {p.slug: p for p in products}
    by_id = {str(p.pk): p for p in products}

    resolved = []
    for line in lines:
        product = by_slug.get(line["slug"]) if line["slug"] else by_id.get(str(line["product_id"]))
        if product is None:
            raise ValidationError("Some products not found")
        resolved.append((product, line["qty"]))

    with transaction.atomic():
        order = Order.objects.create(
            order_number=next_order_number(),
            user=user,
            full_name=str(customer_info.get("name") or "").strip(),
            phone=phone,
            address=str(customer_info.get("address") or "").strip(),
            comment=str(customer_info.get("comment") or "").strip(),
            transport_company=str(transport_company),
        )
        total = 0
        for product, qty in resolved:
            price_box = box_price_from_pair(product.price_pair, product.sizes)
            OrderItem.objects.create(
                order=order,
                product=product,
                slug=product.slug,
                name=product.name,
                article=product.article,
                price_box=price_box,
                qty=qty,
                item_code=next_item_code(),
            )
            total += item_total(price_box, qty)
        order.total = total
        order.subtotal = total
        order.save(update_fields=["total", "subtotal"])
        OrderStatusLog.objects.create(order=order, status=order.status, user=user)

    logger.info("Order %s created by %s: %s lines, total=%s", order.order_number, user, len(resolved), order.total)
    return order


def add_item_to_order(order: Order, product: Product, qty: int = 1, color: Optional[str] = None) -> OrderItem:
    """Admin: append a product line and bring the order total up to date."""
    if qty < 1:
        raise ValidationError("qty must be >= 1")
    with transaction.atomic():
        item = OrderItem.objects.create(
            order=order,
            product=product,
            slug=product.slug,
            name=product.name,
            article=product.article,
            price_box=box_price_from_pair(product.price_pair, product.sizes),
            qty=qty,
            color=color or None,
            item_code=next_item_code(),
        )
        recalculate_order_total(order)
    return item


# ---------------------------------------------------------------------------
# Feedback
# ---------------------------------------------------------------------------

def add_feedback(item: OrderItem, user, feedback_type: str, refusal_reason: Optional[str] = None) -> OrderItemFeedback:
    valid = dict(OrderItemFeedback.TYPE_CHOICES)
    if feedback_type not in valid:
        raise ValidationError("Invalid feedback type")

    with transaction.atomic():
        try:
            # unique (order_item, user, feedback_type) decides between concurrent requests
            with transaction.atomic():
                feedback = OrderItemFeedback.objects.create(
                    order_item=item,
                    user=user,
                    feedback_type=feedback_type,
                    refusal_reason=refusal_reason or None,
                )
        except IntegrityError:
            raise Conflict("Feedback already exists for this type")
        if feedback_type in OrderItemFeedback.REFUSAL_TYPES:
            recalculate_order_total(item.order)

    logger.info("Feedback %s on item %s by %s", feedback_type, item.item_code, user)
    return feedback


# ---------------------------------------------------------------------------
# Replacements
# ---------------------------------------------------------------------------

def serialize_replacement(r: OrderItemReplacement) -> Dict[str, Any]:
    def _user(u):
        if u is None:
            return None
        return {"id": u.pk, "name": u.name, "phone": u.phone}

    return {
        "id": r.pk,
        "status": r.status,
        "replacement_image_url": r.replacement_image_url,
        "replacement_image_key": r.replacement_image_key,
        "admin_comment": r.admin_comment,
        "client_comment": r.client_comment,
        "created_at": r.created_at.isoformat() if r.created_at else None,
        "admin_user": _user(r.admin_user),
        "client_user": _user(r.client_user),
    }


def propose_replacement(
    item: OrderItem,
    admin_user,
    image_url: Optional[str] = None,
    image_key: Optional[str] = None,
    comment: Optional[str] = None,
) -> OrderItemReplacement:
    if not image_url and not image_key:
        raise ValidationError("Replacement image is required")
    if item.order.user_id is None:
        raise ValidationError("Order has no client")

    existing = item.replacements.filter(status=OrderItemReplacement.STATUS_PENDING).first()
    if existing:
        raise Conflict(
            "Replacement proposal already exists",
            extra={"existing_replacement": serialize_replacement(existing)},
        )

    with transaction.atomic():
        replacement = OrderItemReplacement.objects.create(
            order_item=item,
            admin_user=admin_user,
            client_user_id=item.order.user_id,
            replacement_image_url=image_url or None,
            replacement_image_key=image_key or None,
            admin_comment=comment or None,
        )
        attachments = []
        if image_url:
            attachments.append({
                "type": "image/jpeg",
                "name": image_key or "replacement_image.jpg",
                "url": image_url,
            })
        if comment or attachments:
            post_message(item, admin_user, text=comment, attachments=attachments)

    logger.info("Replacement #%s proposed for item %s", replacement.pk, item.item_code)
    return replacement


def _own_pending_replacement(item: OrderItem, admin_user, replacement_id) -> OrderItemReplacement:
    if not replacement_id:
        raise ValidationError("Replacement ID is required")
    replacement = OrderItemReplacement.objects.filter(
        pk=replacement_id,
        order_item=item,
        admin_user=admin_user,
        status=OrderItemReplacement.STATUS_PENDING,
    ).first()
    if replacement is None:
        raise NotFound("Replacement not found or not editable")
    return replacement


def update_replacement(item, admin_user, replacement_id, image_url=None, image_key=None, comment=None):
    replacement = _own_pending_replacement(item, admin_user, replacement_id)
    if not image_url and not image_key:
        raise ValidationError("Replacement image is required")
    replacement.replacement_image_url = image_url or None
    replacement.replacement_image_key = image_key or None
    replacement.admin_comment = comment or None
    replacement.save(update_fields=["replacement_image_url", "replacement_image_key", "admin_comment", "updated_at"])
    return replacement


def delete_replacement(item, admin_user, replacement_id) -> None:
    _own_pending_replacement(item, admin_user, replacement_id).delete()


def respond_to_replacement(item: OrderItem, client, status: str, comment: Optional[str] = None) -> OrderItemReplacement:
    if status not in (OrderItemReplacement.STATUS_ACCEPTED, OrderItemReplacement.STATUS_REJECTED):
        raise ValidationError("Invalid status")
    replacement = item.replacements.filter(
        client_user=client,
        status=OrderItemReplacement.STATUS_PENDING,
    ).first()
    if replacement is None:
        raise NotFound("No pending replacement found")
    replacement.status = status
    replacement.client_comment = comment or None
    replacement.save(update_fields=["status", "client_comment", "updated_at"])
    logger.info("Replacement #%s -> %s", replacement.pk, status)
    return replacement


# ---------------------------------------------------------------------------
# Warehouse / back office
# ---------------------------------------------------------------------------

def update_item_flags(item: OrderItem, data: Dict[str, Any]) -> OrderItem:
    """Gruzchik: availability (true / false / null = unchecked) and purchase flag."""
    fields = []
    if "is_available" in data:
        value = data["is_available"]
        if value is not None and not isinstance(value, bool):
            raise ValidationError("is_available must be true, false or null")
        item.is_available = value
        fields.append("is_available")
    if "is_purchased" in data:
        if not isinstance(data["is_purchased"], bool):
            raise ValidationError("is_purchased must be a boolean")
        item.is_purchased = data["is_purchased"]
        fields.append("is_purchased")
    if not fields:
        raise ValidationError("Nothing to update")
    item.save(update_fields=fields)
    return item


def change_order_status(order: Order, new_status: str, user, note: str = "") -> Order:
    if new_status not in dict(Order.STATUS_CHOICES):
        raise ValidationError("Invalid status")
    if new_status == order.status:
        return order
    order.status = new_status
    order.save(update_fields=["status", "updated_at"])
    OrderStatusLog.objects.create(order=order, status=new_status, user=user, note=note or "")
    logger.info("Order %s status -> %s by %s", order.order_number, new_status, user)
    return order


def assign_gruzchik(order: Order, gruzchik) -> Order:
    if gruzchik is not None and not is_gruzchik(gruzchik):
        raise ValidationError("User is not a gruzchik")
    order.gruzchik = gruzchik
    order.save(update_fields=["gruzchik", "updated_at"])
    return order
