# apps/api/v1/admin_views.py
import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response

from apps.accounts.permissions import IsAdminRole
from apps.catalog.cache import get_provider_cache
from apps.catalog.models import Category, Product
from apps.catalog.services_drafts import approve_drafts, reject_drafts
from apps.orders.exports import export_order
from apps.orders.messaging import serialize_message
from apps.orders.models import Order, OrderItemMessage
from apps.orders.services import (
    add_item_to_order,
    assign_gruzchik,
    change_order_status,
    delete_replacement,
    get_item_for,
    get_order_for,
    propose_replacement,
    serialize_replacement,
    update_replacement,
)
from .chat import create_message_response, thread_response, upload_message_response
from .filters import OrderFilter
from .serializers import (
    AddItemSerializer,
    AdminOrderSerializer,
    AdminOrderUpdateSerializer,
    DraftBatchSerializer,
    OrderItemSerializer,
    OrderListSerializer,
)

logger = logging.getLogger("app")

User = get_user_model()


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------

@api_view(["GET"])
@permission_classes([IsAdminRole])
def orders(request):
    """GET /api/v1/admin/orders/?status=...&q=<number|phone|name>&gruzchik=<id>"""
    qs = Order.objects.select_related("user", "gruzchik").prefetch_related("items")
    filterset = OrderFilter(request.query_params, queryset=qs)
    if not filterset.is_valid():
        raise ValidationError(filterset.errors)
    return Response({"orders": OrderListSerializer(filterset.qs, many=True).data})


@api_view(["GET", "PATCH"])
@permission_classes([IsAdminRole])
def order_detail(request, pk):
    order = get_order_for(request.user, pk)

    if request.method == "PATCH":
        ser = AdminOrderUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        with transaction.atomic():
            if "gruzchik_id" in data:
                gruzchik = None
                if data["gruzchik_id"] is not None:
                    gruzchik = get_object_or_404(User, pk=data["gruzchik_id"])
                assign_gruzchik(order, gruzchik)
            if "status" in data:
                change_order_status(order, data["status"], request.user, data.get("note", ""))

    order = (
        Order.objects.select_related("user", "gruzchik")
        .prefetch_related("items__feedbacks", "items__replacements__admin_user", "items__replacements__client_user", "status_logs")
        .get(pk=order.pk)
    )
    return Response({"order": AdminOrderSerializer(order).data})


@api_view(["POST"])
@permission_classes([IsAdminRole])
def order_items(request, pk):
    """POST {"product_id": <id>, "qty": 1, "color": "..."}"""
    order = get_order_for(request.user, pk)
    ser = AddItemSerializer(data=request.data)
    ser.is_valid(raise_exception=True)
    product = get_object_or_404(Product, pk=ser.validated_data["product_id"])
    item = add_item_to_order(order, product, ser.validated_data["qty"], ser.validated_data.get("color"))
    order.refresh_from_db(fields=["total", "subtotal"])
    return Response(
        {"item": OrderItemSerializer(item).data, "order_total": order.total},
        status=status.HTTP_201_CREATED,
    )


@api_view(["POST"])
@permission_classes([IsAdminRole])
def order_export(request, pk):
    """POST {"formats": ["xlsx", "csv"]}"""
    order = get_order_for(request.user, pk)
    formats = request.data.get("formats") or ["xlsx", "csv"]
    if not isinstance(formats, list):
        raise ValidationError("formats must be a list")
    return Response({"results": export_order(order, formats)})


# ---------------------------------------------------------------------------
# Item chat
# ---------------------------------------------------------------------------

@api_view(["GET", "POST"])
@permission_classes([IsAdminRole])
def item_messages(request, pk):
    item = get_item_for(request.user, pk)
    if request.method == "GET":
        return thread_response(item, request.user)
    return create_message_response(item, request.user, request.data)


@api_view(["POST"])
@permission_classes([IsAdminRole])
@parser_classes([MultiPartParser, FormParser])
def item_messages_upload(request, pk):
    item = get_item_for(request.user, pk)
    return upload_message_response(item, request.user, request)


@api_view(["PATCH", "DELETE"])
@permission_classes([IsAdminRole])
def item_message_detail(request, pk, message_id):
    item = get_item_for(request.user, pk)
    message = get_object_or_404(OrderItemMessage.objects.select_related("user"), pk=message_id, order_item=item)

    if request.method == "DELETE":
        message.delete()
        logger.info("Message #%s deleted by %s", message_id, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    text = str(request.data.get("text") or "").strip()
    if not text:
        raise ValidationError("Message text is required")
    message.text = text
    message.save(update_fields=["text"])
    return Response({"message": serialize_message(message)})


# ---------------------------------------------------------------------------
# Replacements
# ---------------------------------------------------------------------------

@api_view(["GET", "POST", "PUT", "DELETE"])
@permission_classes([IsAdminRole])
def item_replacement(request, pk):
    """
    GET    — all proposals of the item
    POST   {"replacement_image_url"|"replacement_image_key", "admin_comment"}
    PUT    {"replacement_id", ...same fields}
    DELETE ?replacement_id=<id>
    """
    item = get_item_for(request.user, pk)
    data = request.data

    if request.method == "GET":
        qs = item.replacements.select_related("admin_user", "client_user")
        return Response({"replacements": [serialize_replacement(r) for r in qs]})

    if request.method == "POST":
        replacement = propose_replacement(
            item,
            request.user,
            image_url=data.get("replacement_image_url"),
            image_key=data.get("replacement_image_key"),
            comment=data.get("admin_comment"),
        )
        return Response({"replacement": serialize_replacement(replacement)}, status=status.HTTP_201_CREATED)

    if request.method == "PUT":
        replacement = update_replacement(
            item,
            request.user,
            data.get("replacement_id"),
            image_url=data.get("replacement_image_url"),
            image_key=data.get("replacement_image_key"),
            comment=data.get("admin_comment"),
        )
        return Response({"replacement": serialize_replacement(replacement)})

    replacement_id = request.query_params.get("replacement_id") or data.get("replacement_id")
    delete_replacement(item, request.user, replacement_id)
    return Response(status=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Catalog back office
# ---------------------------------------------------------------------------

def _draft_batch(request):
    ser = DraftBatchSerializer(data=request.data)
    ser.is_valid(raise_exception=True)
    return ser.validated_data


@api_view(["POST"])
@permission_classes([IsAdminRole])
def drafts_approve(request):
    """POST {"ids": [...], "category_id": <id>} → {"results": [...]}"""
    data = _draft_batch(request)
    category = None
    if data.get("category_id"):
        category = get_object_or_404(Category, pk=data["category_id"])
    return Response({"results": approve_drafts(data["ids"], category=category)})


@api_view(["POST"])
@permission_classes([IsAdminRole])
def drafts_reject(request):
    data = _draft_batch(request)
    return Response({"results": reject_drafts(data["ids"])})


@api_view(["GET"])
@permission_classes([IsAdminRole])
def providers(request):
    return Response({"providers": get_provider_cache().get()})
