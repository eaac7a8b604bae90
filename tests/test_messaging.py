import pytest
from rest_framework.exceptions import ValidationError

from apps.orders.messaging import (
    APPROVAL_MESSAGE_TEXT,
    ThreadCounts,
    item_thread_state,
    mark_thread_read,
    order_thread_summary,
    order_unread_counts,
    post_message,
    serialize_message,
    set_item_approval,
)
from apps.orders.models import OrderItem, OrderItemMessage, OrderItemMessageRead


def test_thread_counts_never_negative():
    assert ThreadCounts(total_messages=2, read_messages=5).unread_count == 0
    assert ThreadCounts(total_messages=5, read_messages=2).unread_count == 3
    assert not ThreadCounts().has_messages


@pytest.mark.django_db
def test_own_messages_are_not_unread(order, client_user, admin_user):
    item = order.items.first()
    post_message(item, client_user, text="Есть 39 размер?")
    post_message(item, admin_user, text="Да")
    post_message(item, admin_user, text="Отправим завтра")

    state = item_thread_state(item, client_user)
    assert state["total_messages"] == 2
    assert state["unread_count"] == 2

    admin_state = item_thread_state(item, admin_user)
    assert admin_state["unread_count"] == 1


@pytest.mark.django_db
def test_mark_thread_read_is_idempotent(order, client_user, admin_user):
    item = order.items.first()
    post_message(item, admin_user, text="Фото товара", attachments=[{"type": "image/jpeg", "name": "a.jpg", "url": "/m/a.jpg"}])
    post_message(item, admin_user, text="Подтвердите")

    assert mark_thread_read(item, client_user) == 2
    assert mark_thread_read(item, client_user) == 0
    assert OrderItemMessageRead.objects.filter(user=client_user).count() == 2
    assert item_thread_state(item, client_user)["unread_count"] == 0


@pytest.mark.django_db
def test_reads_of_other_users_do_not_count(order, client_user, admin_user, gruzchik):
    item = order.items.first()
    msg = post_message(item, admin_user, text="Проверьте")
    OrderItemMessageRead.objects.create(message=msg, user=gruzchik)

    assert item_thread_state(item, client_user)["unread_count"] == 1
    assert item_thread_state(item, gruzchik)["unread_count"] == 0


@pytest.mark.django_db
def test_order_unread_counts_cover_every_item(order, client_user, admin_user):
    first, second = list(order.items.all())
    post_message(first, admin_user, text="Вопрос")

    counts = order_unread_counts(order, client_user)
    assert counts[first.pk] == {"unread_count": 1, "total_messages": 1}
    assert counts[second.pk] == {"unread_count": 0, "total_messages": 0}


@pytest.mark.django_db
def test_order_thread_summary(order, client_user, admin_user):
    first, second = list(order.items.all())
    post_message(first, admin_user, text="Вопрос")
    set_item_approval(second, client_user, OrderItem.APPROVAL_APPROVED)

    summary = order_thread_summary(order, client_user)

    assert summary["total_items"] == 2
    assert summary["items_with_messages"] == [first.pk]
    assert summary["items_with_messages_count"] == 1
    assert summary["items_without_messages_count"] == 1
    assert summary["unread_counts"][first.pk]["unread_count"] == 1
    assert summary["approval_statuses"][second.pk]["is_approved"] is True
    assert summary["approval_statuses"][second.pk]["approved_at"] is not None
    assert summary["approval_statuses"][first.pk] == {"is_approved": False, "status": "PENDING", "approved_at": None}


@pytest.mark.django_db
def test_approval_lives_on_the_item(order, client_user):
    item = order.items.first()
    set_item_approval(item, client_user, OrderItem.APPROVAL_APPROVED)

    item.refresh_from_db()
    assert item.approval_status == OrderItem.APPROVAL_APPROVED
    assert item.approval_changed_at is not None
    service = OrderItemMessage.objects.get(order_item=item, is_service=True)
    assert service.text == APPROVAL_MESSAGE_TEXT

    # editing the audit message does not change the approval
    service.text = "изменено"
    service.save()
    assert order_thread_summary(order, client_user)["approval_statuses"][item.pk]["is_approved"] is True


@pytest.mark.django_db
def test_repeated_approval_writes_one_service_message(order, client_user):
    item = order.items.first()
    set_item_approval(item, client_user, OrderItem.APPROVAL_APPROVED)
    set_item_approval(item, client_user, OrderItem.APPROVAL_APPROVED)
    assert OrderItemMessage.objects.filter(order_item=item, is_service=True).count() == 1


@pytest.mark.django_db
def test_post_message_requires_content(order, client_user):
    item = order.items.first()
    with pytest.raises(ValidationError):
        post_message(item, client_user, text="   ")


@pytest.mark.django_db
def test_serialize_message_sender_label(order, gruzchik):
    item = order.items.first()
    msg = post_message(item, gruzchik, text="Нет в наличии")
    data = serialize_message(msg)
    assert data["sender"] == "gruzchik"
    assert data["sender_name"] == "Грузчик"
    assert data["attachments"] == []
