# apps/catalog/admin.py
from django.contrib import admin, messages
from rest_framework.exceptions import ValidationError

from .models import Category, DraftProduct, Product, Provider
from .services_drafts import approve_drafts, reject_drafts


@admin.register(Provider)
class ProviderAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "phone", "place", "sort")
    search_fields = ("name", "phone", "place")


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "slug", "parent", "is_active", "sort")
    list_filter = ("is_active",)
    prepopulated_fields = {"slug": ("name",)}


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "article", "provider", "category", "price_pair", "is_active")
    list_filter = ("is_active", "category")
    search_fields = ("name", "article", "slug")


@admin.register(DraftProduct)
class DraftProductAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "source", "provider", "price_pair", "status", "created_at")
    list_filter = ("status", "source")
    search_fields = ("name", "article", "source_chat_id")
    actions = ["approve_selected", "reject_selected"]

    def _report(self, request, results):
        failed = [r for r in results if "error" in r]
        ok = len(results) - len(failed)
        self.message_user(request, f"Обработано: {ok}", level=messages.SUCCESS)
        for r in failed:
            self.message_user(request, f"Черновик {r['draft_id']}: {r['error']}", level=messages.ERROR)

    @admin.action(description="Одобрить выбранные черновики")
    def approve_selected(self, request, queryset):
        try:
            results = approve_drafts(queryset.values_list("pk", flat=True))
        except ValidationError as e:
            self.message_user(request, "; ".join(str(d) for d in e.detail), level=messages.ERROR)
            return
        self._report(request, results)

    @admin.action(description="Отклонить выбранные черновики")
    def reject_selected(self, request, queryset):
        self._report(request, reject_drafts(queryset.values_list("pk", flat=True)))
