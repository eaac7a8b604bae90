# apps/api/v1/gruzchik_views.py
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response

from apps.accounts.permissions import IsGruzchik
from apps.orders.models import Order
from apps.orders.services import get_item_for, orders_scope, update_item_flags
from .chat import create_message_response, thread_response, upload_message_response
from .pagination import paginate, pages, positive_int
from .serializers import OrderItemSerializer, OrderSerializer

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


@api_view(["GET"])
@permission_classes([IsGruzchik])
def orders(request):
    """
    GET /api/v1/gruzchik/orders/?page=1&limit=20&status=Купить

    EN: Orders assigned to the current gruzchik (admins see all), paginated.
    """
    page = positive_int(request.query_params.get("page"), 1)
    limit = positive_int(request.query_params.get("limit"), DEFAULT_LIMIT, MAX_LIMIT)
    order_status = request.query_params.get("status")

    qs = orders_scope(request.user).select_related("user", "gruzchik").prefetch_related("items")
    if order_status and order_status in dict(Order.STATUS_CHOICES):
        qs = qs.filter(status=order_status)

    page_qs, total = paginate(qs, page, limit)

    return Response({
        "orders": OrderSerializer(page_qs, many=True).data,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": pages(total, limit),
        },
    })


@api_view(["PATCH"])
@permission_classes([IsGruzchik])
def order_item(request, pk):
    """PATCH {"is_available": true|false|null, "is_purchased": bool}"""
    item = get_item_for(request.user, pk)
    item = update_item_flags(item, request.data)
    return Response({"item": OrderItemSerializer(item).data})


@api_view(["GET", "POST"])
@permission_classes([IsGruzchik])
def item_messages(request, pk):
    item = get_item_for(request.user, pk)
    if request.method == "GET":
        return thread_response(item, request.user)
    return create_message_response(item, request.user, request.data)


@api_view(["POST"])
@permission_classes([IsGruzchik])
@parser_classes([MultiPartParser, FormParser])
def item_messages_upload(request, pk):
    item = get_item_for(request.user, pk)
    return upload_message_response(item, request.user, request)
