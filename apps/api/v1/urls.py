from django.urls import path
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from . import admin_views, client_views, gruzchik_views, storefront_views

urlpatterns = [
    path("auth/token/", TokenObtainPairView.as_view(), name="token-obtain"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),

    # storefront
    path("catalog/", storefront_views.catalog, name="catalog"),
    path("categories/tree/", storefront_views.categories_tree, name="categories-tree"),

    # client portal
    path("orders/", client_views.orders, name="orders"),
    path("orders/<int:pk>/order-data/", client_views.order_data, name="order-data"),
    path("orders/<int:pk>/unread-counts/", client_views.unread_counts, name="order-unread-counts"),
    path("order-items/<int:pk>/messages/", client_views.item_messages, name="item-messages"),
    path("order-items/<int:pk>/messages/read/", client_views.item_messages_read, name="item-messages-read"),
    path("order-items/<int:pk>/feedback/", client_views.item_feedback, name="item-feedback"),
    path("order-items/<int:pk>/approval/", client_views.item_approval, name="item-approval"),
    path(
        "order-items/<int:pk>/replacement/response/",
        client_views.replacement_response,
        name="item-replacement-response",
    ),

    # gruzchik portal
    path("gruzchik/orders/", gruzchik_views.orders, name="gruzchik-orders"),
    path("gruzchik/order-items/<int:pk>/", gruzchik_views.order_item, name="gruzchik-order-item"),
    path("gruzchik/order-items/<int:pk>/messages/", gruzchik_views.item_messages, name="gruzchik-item-messages"),
    path(
        "gruzchik/order-items/<int:pk>/messages/upload/",
        gruzchik_views.item_messages_upload,
        name="gruzchik-item-messages-upload",
    ),

    # admin back office
    path("admin/orders/", admin_views.orders, name="admin-orders"),
    path("admin/orders/<int:pk>/", admin_views.order_detail, name="admin-order-detail"),
    path("admin/orders/<int:pk>/items/", admin_views.order_items, name="admin-order-items"),
    path("admin/orders/<int:pk>/export/", admin_views.order_export, name="admin-order-export"),
    path("admin/order-items/<int:pk>/messages/", admin_views.item_messages, name="admin-item-messages"),
    path(
        "admin/order-items/<int:pk>/messages/upload/",
        admin_views.item_messages_upload,
        name="admin-item-messages-upload",
    ),
    path(
        "admin/order-items/<int:pk>/messages/<int:message_id>/",
        admin_views.item_message_detail,
        name="admin-item-message-detail",
    ),
    path("admin/order-items/<int:pk>/replacement/", admin_views.item_replacement, name="admin-item-replacement"),
    path("admin/drafts/approve/", admin_views.drafts_approve, name="admin-drafts-approve"),
    path("admin/drafts/reject/", admin_views.drafts_reject, name="admin-drafts-reject"),
    path("admin/providers/", admin_views.providers, name="admin-providers"),
]
