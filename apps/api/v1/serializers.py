from rest_framework import serializers

from apps.catalog.models import Product
from apps.orders.messaging import serialize_message
from apps.orders.models import Order, OrderItem, OrderItemFeedback, OrderStatusLog
from apps.orders.pricing import box_price_from_pair
from apps.orders.services import serialize_replacement


class UserShortSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    phone = serializers.CharField()


class OrderItemSerializer(serializers.ModelSerializer):
    total = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "item_code",
            "product",
            "slug",
            "name",
            "article",
            "color",
            "price_box",
            "qty",
            "total",
            "is_available",
            "is_purchased",
            "approval_status",
            "approval_changed_at",
        ]


class FeedbackSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItemFeedback
        fields = ["id", "order_item", "user", "feedback_type", "refusal_reason", "created_at"]


class OrderListSerializer(serializers.ModelSerializer):
    user = UserShortSerializer(read_only=True)
    gruzchik = UserShortSerializer(read_only=True)
    items_count = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "status",
            "total",
            "subtotal",
            "full_name",
            "phone",
            "transport_company",
            "user",
            "gruzchik",
            "items_count",
            "created_at",
        ]

    def get_items_count(self, obj):
        return obj.items.count()


class OrderSerializer(OrderListSerializer):
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta(OrderListSerializer.Meta):
        fields = OrderListSerializer.Meta.fields + ["address", "comment", "updated_at", "items"]


class AdminOrderItemSerializer(OrderItemSerializer):
    """Item with feedbacks, replacement proposals and the latest chat message."""

    feedbacks = FeedbackSerializer(many=True, read_only=True)
    replacements = serializers.SerializerMethodField()
    last_message = serializers.SerializerMethodField()

    class Meta(OrderItemSerializer.Meta):
        fields = OrderItemSerializer.Meta.fields + ["feedbacks", "replacements", "last_message"]

    def get_replacements(self, obj):
        return [serialize_replacement(r) for r in obj.replacements.all()]

    def get_last_message(self, obj):
        message = obj.messages.select_related("user").order_by("-created_at", "-id").first()
        return serialize_message(message) if message else None


class StatusLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderStatusLog
        fields = ["status", "user", "note", "created_at"]


class AdminOrderSerializer(OrderSerializer):
    items = AdminOrderItemSerializer(many=True, read_only=True)
    status_logs = StatusLogSerializer(many=True, read_only=True)

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + ["status_logs"]


class AdminOrderUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES, required=False)
    gruzchik_id = serializers.IntegerField(required=False, allow_null=True)
    note = serializers.CharField(required=False, allow_blank=True, default="")


class AddItemSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    qty = serializers.IntegerField(min_value=1, default=1)
    color = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class DraftBatchSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
    category_id = serializers.IntegerField(required=False, allow_null=True)


class CatalogProductSerializer(serializers.ModelSerializer):
    price_box = serializers.SerializerMethodField()
    category = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = ["id", "name", "slug", "article", "price_pair", "price_box", "sizes", "category", "created_at"]

    def get_price_box(self, obj):
        return str(box_price_from_pair(obj.price_pair, obj.sizes))

    def get_category(self, obj):
        if obj.category_id is None:
            return None
        return {"id": obj.category_id, "name": obj.category.name}
