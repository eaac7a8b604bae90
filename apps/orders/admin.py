# apps/orders/admin.py
from django.contrib import admin, messages

from .models import (
    IdentifierSequence,
    Order,
    OrderItem,
    OrderItemFeedback,
    OrderItemMessage,
    OrderItemReplacement,
    OrderStatusLog,
)
from .pricing import recalculate_order_total


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    fields = ("item_code", "name", "article", "color", "price_box", "qty", "is_available", "is_purchased", "approval_status")
    readonly_fields = ("item_code",)

    # lines are added through checkout / the admin API, which issue item codes
    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("order_number", "user", "gruzchik", "status", "total", "phone", "created_at")
    list_filter = ("status", "created_at")
    search_fields = ("order_number", "phone", "full_name", "user__phone", "user__name")
    readonly_fields = ("order_number", "total", "subtotal", "created_at", "updated_at")
    inlines = [OrderItemInline]

    actions = ["recalculate_totals"]

    def has_add_permission(self, request):
        return False

    def save_formset(self, request, form, formset, change):
        super().save_formset(request, form, formset, change)
        if formset.model is OrderItem:
            recalculate_order_total(formset.instance)

    @admin.action(description="Пересчитать сумму заказа")
    def recalculate_totals(self, request, queryset):
        updated = sum(1 for order in queryset if recalculate_order_total(order))
        self.message_user(
            request,
            f"Пересчитано: {queryset.count()}, изменено: {updated}",
            level=messages.SUCCESS,
        )


@admin.register(OrderItem)
class OrderItemAdmin(admin.ModelAdmin):
    list_display = ("item_code", "order", "name", "price_box", "qty", "is_available", "is_purchased", "approval_status")
    list_filter = ("approval_status", "is_available", "is_purchased")
    search_fields = ("item_code", "name", "article", "order__order_number")
    readonly_fields = ("order", "item_code", "created_at")

    def has_add_permission(self, request):
        return False

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        recalculate_order_total(obj.order)


@admin.register(OrderItemFeedback)
class OrderItemFeedbackAdmin(admin.ModelAdmin):
    list_display = ("order_item", "user", "feedback_type", "created_at")
    list_filter = ("feedback_type",)

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        recalculate_order_total(obj.order_item.order)

    def delete_model(self, request, obj):
        order = obj.order_item.order
        super().delete_model(request, obj)
        recalculate_order_total(order)


@admin.register(OrderItemMessage)
class OrderItemMessageAdmin(admin.ModelAdmin):
    list_display = ("order_item", "user", "is_service", "created_at")
    list_filter = ("is_service",)
    search_fields = ("text", "order_item__item_code")


@admin.register(OrderItemReplacement)
class OrderItemReplacementAdmin(admin.ModelAdmin):
    list_display = ("order_item", "admin_user", "client_user", "status", "created_at")
    list_filter = ("status",)


@admin.register(OrderStatusLog)
class OrderStatusLogAdmin(admin.ModelAdmin):
    list_display = ("order", "status", "user", "created_at")
    list_filter = ("status", "created_at")
    search_fields = ("order__order_number", "user__phone", "user__username")


admin.site.register(IdentifierSequence)
