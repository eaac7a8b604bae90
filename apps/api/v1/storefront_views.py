# apps/api/v1/storefront_views.py
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from apps.catalog.models import Product
from apps.catalog.tree import category_tree
from .filters import ProductFilter
from .pagination import paginate, pages, positive_int
from .serializers import CatalogProductSerializer

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@api_view(["GET"])
@permission_classes([AllowAny])
def catalog(request):
    """
    GET /api/v1/catalog/?search=&category=<id>&min_price=&max_price=&sort_by=newest&page=1&page_size=20

    EN: Active products for the storefront with the box price, paginated.
    UA: Активні товари вітрини з ціною коробки, посторінково.
    """
    qs = Product.objects.filter(is_active=True).select_related("category").order_by("-created_at", "-id")
    filterset = ProductFilter(request.query_params, queryset=qs)
    if not filterset.is_valid():
        raise ValidationError(filterset.errors)

    page = positive_int(request.query_params.get("page"), 1)
    page_size = positive_int(request.query_params.get("page_size"), DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE)
    page_qs, total = paginate(filterset.qs, page, page_size)

    return Response({
        "products": CatalogProductSerializer(page_qs, many=True).data,
        "pagination": {
            "total": total,
            "page": page,
            "page_size": page_size,
            "total_pages": pages(total, page_size),
        },
    })


@api_view(["GET"])
@permission_classes([AllowAny])
def categories_tree(request):
    """GET /api/v1/categories/tree/ → {"items": [{"id", "name", "slug", "product_count", "children"}]}"""
    return Response({"items": category_tree()})
