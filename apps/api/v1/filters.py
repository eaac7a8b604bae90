# apps/api/v1/filters.py
import django_filters
from django.db.models import Q

from apps.catalog.models import Product
from apps.orders.models import Order


class OrderFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=Order.STATUS_CHOICES)
    q = django_filters.CharFilter(method="filter_q")
    gruzchik = django_filters.NumberFilter(field_name="gruzchik_id")
    created_from = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    created_to = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")

    class Meta:
        model = Order
        fields = ["status", "gruzchik"]

    def filter_q(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(order_number__icontains=value)
            | Q(phone__icontains=value)
            | Q(full_name__icontains=value)
        )


PRODUCT_SORTING = {
    "newest": ("-created_at", "-id"),
    "oldest": ("created_at", "id"),
    "price_asc": ("price_pair", "id"),
    "price_desc": ("-price_pair", "-id"),
    "name_asc": ("name", "id"),
    "name_desc": ("-name", "-id"),
}


class ProductFilter(django_filters.FilterSet):
    """Storefront catalog: ?search=&category=&min_price=&max_price=&sort_by="""

    search = django_filters.CharFilter(method="filter_search")
    category = django_filters.NumberFilter(field_name="category_id")
    min_price = django_filters.NumberFilter(field_name="price_pair", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="price_pair", lookup_expr="lte")
    sort_by = django_filters.ChoiceFilter(
        choices=[(key, key) for key in PRODUCT_SORTING],
        method="filter_sort_by",
    )

    class Meta:
        model = Product
        fields = ["category"]

    def filter_search(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value)
            | Q(article__icontains=value)
            | Q(slug__icontains=value)
        )

    def filter_sort_by(self, queryset, name, value):
        return queryset.order_by(*PRODUCT_SORTING[value])
