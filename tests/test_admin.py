from decimal import Decimal

import pytest
from django.contrib import admin
from django.test import RequestFactory

from apps.accounts.models import User
from apps.orders.admin import OrderAdmin, OrderItemAdmin, OrderItemFeedbackAdmin, OrderItemInline
from apps.orders.models import Order, OrderItem, OrderItemFeedback

pytestmark = pytest.mark.django_db


@pytest.fixture()
def superuser_request(db):
    user = User.objects.create_superuser(phone="+79990000001", password="pass12345")
    request = RequestFactory().post("/admin/")
    request.user = user
    return request


def _inline_data(order, qty_by_pk=None, extra_line=None):
    qty_by_pk = qty_by_pk or {}
    items = list(order.items.all())
    rows = [
        {
            "id": str(it.pk),
            "name": it.name,
            "article": it.article,
            "color": "",
            "price_box": str(it.price_box),
            "qty": str(qty_by_pk.get(it.pk, it.qty)),
            "is_available": "",
            "approval_status": it.approval_status,
        }
        for it in items
    ]
    if extra_line:
        rows.append(extra_line)

    data = {
        "items-TOTAL_FORMS": str(len(rows)),
        "items-INITIAL_FORMS": str(len(items)),
        "items-MIN_NUM_FORMS": "0",
        "items-MAX_NUM_FORMS": "1000",
    }
    for i, row in enumerate(rows):
        for key, value in row.items():
            data[f"items-{i}-{key}"] = value
    return data


def test_order_and_item_admins_do_not_add(superuser_request, order):
    site = admin.AdminSite()
    assert not OrderAdmin(Order, site).has_add_permission(superuser_request)
    assert not OrderItemAdmin(OrderItem, site).has_add_permission(superuser_request)
    assert not OrderItemInline(Order, site).has_add_permission(superuser_request, order)


def test_inline_extra_line_is_ignored(superuser_request, order):
    inline = OrderItemInline(Order, admin.AdminSite())
    FormSet = inline.get_formset(superuser_request, order)
    extra = {
        "name": "Added in admin",
        "article": "X-1",
        "color": "",
        "price_box": "999",
        "qty": "3",
        "is_available": "",
        "approval_status": OrderItem.APPROVAL_PENDING,
    }
    formset = FormSet(_inline_data(order, extra_line=extra), instance=order)
    assert formset.is_valid(), formset.errors

    OrderAdmin(Order, admin.AdminSite()).save_formset(superuser_request, None, formset, True)

    assert order.items.count() == 2
    assert not order.items.filter(item_code="").exists()
    order.refresh_from_db()
    assert order.total == Decimal("6400.00")


def test_inline_qty_change_recalculates_total(superuser_request, order):
    line = order.items.get(article="B-7")
    inline = OrderItemInline(Order, admin.AdminSite())
    FormSet = inline.get_formset(superuser_request, order)
    formset = FormSet(_inline_data(order, qty_by_pk={line.pk: 3}), instance=order)
    assert formset.is_valid(), formset.errors

    OrderAdmin(Order, admin.AdminSite()).save_formset(superuser_request, None, formset, True)

    order.refresh_from_db()
    # 6000 + 400 * 3
    assert order.total == Decimal("7200.00")


def test_feedback_admin_keeps_total_in_sync(superuser_request, order, client_user):
    line = order.items.get(article="A-100")
    model_admin = OrderItemFeedbackAdmin(OrderItemFeedback, admin.AdminSite())
    feedback = OrderItemFeedback(order_item=line, user=client_user, feedback_type=OrderItemFeedback.WRONG_SIZE)

    model_admin.save_model(superuser_request, feedback, None, False)
    order.refresh_from_db()
    assert order.total == Decimal("400.00")

    model_admin.delete_model(superuser_request, feedback)
    order.refresh_from_db()
    assert order.total == Decimal("6400.00")
