# apps/api/v1/client_views.py
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from apps.accounts.permissions import IsClient
from apps.orders.messaging import (
    mark_thread_read,
    order_thread_summary,
    order_unread_counts,
    set_item_approval,
)
from apps.orders.services import (
    add_feedback,
    create_order,
    get_item_for,
    get_order_for,
    orders_scope,
    respond_to_replacement,
    serialize_replacement,
)
from .chat import create_message_response, thread_response
from .serializers import FeedbackSerializer, OrderListSerializer, OrderSerializer


@api_view(["GET", "POST"])
@permission_classes([IsClient])
def orders(request):
    """
    GET  /api/v1/orders/ — own orders, newest first.
    POST /api/v1/orders/ — checkout:
        {"items": [{"slug"|"product_id", "qty"}], "customer_info": {...}, "transport_company": ...}
    """
    if request.method == "GET":
        qs = orders_scope(request.user).filter(user=request.user).select_related("user", "gruzchik")
        return Response({"orders": OrderListSerializer(qs, many=True).data})

    order = create_order(
        request.user,
        request.data.get("items"),
        request.data.get("customer_info") or {},
        request.data.get("transport_company"),
    )
    return Response(
        {"order": OrderSerializer(order).data, "order_number": order.order_number},
        status=status.HTTP_201_CREATED,
    )


@api_view(["GET"])
@permission_classes([IsClient])
def order_data(request, pk):
    """EN: Order detail with the read-only thread summary of its items."""
    order = get_order_for(request.user, pk)
    return Response({
        "order": OrderSerializer(order).data,
        **order_thread_summary(order, request.user),
    })


@api_view(["GET"])
@permission_classes([IsClient])
def unread_counts(request, pk):
    order = get_order_for(request.user, pk)
    return Response({"unread_counts": order_unread_counts(order, request.user)})


@api_view(["GET", "POST"])
@permission_classes([IsClient])
def item_messages(request, pk):
    item = get_item_for(request.user, pk)
    if request.method == "GET":
        return thread_response(item, request.user)
    return create_message_response(item, request.user, request.data)


@api_view(["POST"])
@permission_classes([IsClient])
def item_messages_read(request, pk):
    item = get_item_for(request.user, pk)
    marked = mark_thread_read(item, request.user)
    return Response({"marked": marked})


@api_view(["GET", "POST"])
@permission_classes([IsClient])
def item_feedback(request, pk):
    item = get_item_for(request.user, pk)
    if request.method == "GET":
        qs = item.feedbacks.filter(user=request.user)
        return Response({"feedbacks": FeedbackSerializer(qs, many=True).data})

    feedback = add_feedback(
        item,
        request.user,
        request.data.get("feedback_type"),
        request.data.get("refusal_reason"),
    )
    item.order.refresh_from_db(fields=["total", "subtotal"])
    return Response(
        {"feedback": FeedbackSerializer(feedback).data, "order_total": item.order.total},
        status=status.HTTP_201_CREATED,
    )


@api_view(["POST"])
@permission_classes([IsClient])
def item_approval(request, pk):
    """POST {"status": "APPROVED" | "REJECTED"}"""
    item = get_item_for(request.user, pk)
    item = set_item_approval(item, request.user, request.data.get("status"))
    return Response({
        "item_id": item.pk,
        "approval_status": item.approval_status,
        "approval_changed_at": item.approval_changed_at,
    })


@api_view(["POST"])
@permission_classes([IsClient])
def replacement_response(request, pk):
    """POST {"status": "ACCEPTED" | "REJECTED", "comment": "..."}"""
    item = get_item_for(request.user, pk)
    replacement = respond_to_replacement(
        item,
        request.user,
        request.data.get("status"),
        request.data.get("comment"),
    )
    return Response({"replacement": serialize_replacement(replacement)})
