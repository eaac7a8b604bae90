#apps/orders/models.py
from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator
from decimal import Decimal


class Order(models.Model):
    STATUS_NEW = "Новый"
    STATUS_AVAILABILITY = "Наличие"
    STATUS_CHECKED = "Проверено"
    STATUS_APPROVAL = "Согласование"
    STATUS_APPROVED = "Согласован"
    STATUS_TO_BUY = "Купить"
    STATUS_BOUGHT = "Куплен"
    STATUS_TO_SEND = "Отправить"
    STATUS_READY = "Готов к отправке"
    STATUS_SENT = "Отправлен"
    STATUS_DONE = "Выполнен"
    STATUS_CANCELED = "Отменен"

    STATUS_CHOICES = [
        (STATUS_NEW, "Новый"),
        (STATUS_AVAILABILITY, "Наличие"),
        (STATUS_CHECKED, "Проверено"),
        (STATUS_APPROVAL, "Согласование"),
        (STATUS_APPROVED, "Согласован"),
        (STATUS_TO_BUY, "Купить"),
        (STATUS_BOUGHT, "Куплен"),
        (STATUS_TO_SEND, "Отправить"),
        (STATUS_READY, "Готов к отправке"),
        (STATUS_SENT, "Отправлен"),
        (STATUS_DONE, "Выполнен"),
        (STATUS_CANCELED, "Отменен"),
    ]

    order_number = models.CharField(max_length=32, unique=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    gruzchik = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_orders",
    )
    status = models.CharField(max_length=32, choices=STATUS_CHOICES, default=STATUS_NEW)

    total = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0"),
        help_text="Сумма по позициям без отказов",
    )
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))

    full_name = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=32)
    address = models.CharField(max_length=512, blank=True)
    comment = models.TextField(blank=True)
    transport_company = models.CharField(max_length=128, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Заказ"
        verbose_name_plural = "Заказы"

    def __str__(self):
        return f"#{self.order_number}"


class OrderItem(models.Model):
    APPROVAL_PENDING = "PENDING"
    APPROVAL_APPROVED = "APPROVED"
    APPROVAL_REJECTED = "REJECTED"
    APPROVAL_CHOICES = [
        (APPROVAL_PENDING, "Ожидает"),
        (APPROVAL_APPROVED, "Одобрен клиентом"),
        (APPROVAL_REJECTED, "Отклонен клиентом"),
    ]

    order = models.ForeignKey("orders.Order", on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(
        "catalog.Product",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items",
    )

    # snapshot of the product at order time
    slug = models.CharField(max_length=255, blank=True)
    name = models.CharField(max_length=255)
    article = models.CharField(max_length=64, blank=True)
    color = models.CharField(max_length=64, blank=True, null=True)

    price_box = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0"),
        help_text="Цена за коробку = цена пары × пар в коробке",
    )
    qty = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    item_code = models.CharField(max_length=32, unique=True)

    # warehouse flags; None = not checked yet
    is_available = models.BooleanField(null=True, blank=True)
    is_purchased = models.BooleanField(default=False)

    approval_status = models.CharField(max_length=16, choices=APPROVAL_CHOICES, default=APPROVAL_PENDING)
    approval_changed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]
        verbose_name = "Позиция заказа"
        verbose_name_plural = "Позиции заказа"

    def __str__(self):
        return f"{self.item_code} {self.name}"

    @property
    def total(self) -> Decimal:
        return Decimal(self.price_box or 0) * self.qty


class OrderItemFeedback(models.Model):
    WRONG_SIZE = "WRONG_SIZE"
    WRONG_ITEM = "WRONG_ITEM"
    AGREE_REPLACEMENT = "AGREE_REPLACEMENT"

    TYPE_CHOICES = [
        (WRONG_SIZE, "Не тот размер"),
        (WRONG_ITEM, "Не тот товар"),
        (AGREE_REPLACEMENT, "Согласен на замену"),
    ]

    REFUSAL_TYPES = (WRONG_SIZE, WRONG_ITEM)

    order_item = models.ForeignKey(OrderItem, on_delete=models.CASCADE, related_name="feedbacks")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="order_item_feedbacks",
    )
    feedback_type = models.CharField(max_length=32, choices=TYPE_CHOICES)
    refusal_reason = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["order_item", "user", "feedback_type"],
                name="uniq_feedback_per_item_user_type",
            ),
        ]

    def __str__(self):
        return f"{self.order_item_id}: {self.feedback_type}"


class OrderItemMessage(models.Model):
    order_item = models.ForeignKey(OrderItem, on_delete=models.CASCADE, related_name="messages")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="order_item_messages",
    )
    text = models.TextField(blank=True, null=True)
    is_service = models.BooleanField(default=False, help_text="Системное сообщение")
    # [{"type": "image/jpeg", "name": "...", "url": "..."}]
    attachments = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"Message #{self.pk} on {self.order_item_id}"


class OrderItemMessageRead(models.Model):
    message = models.ForeignKey(OrderItemMessage, on_delete=models.CASCADE, related_name="reads")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="order_item_message_reads",
    )
    read_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["message", "user"], name="uniq_message_read_per_user"),
        ]


class OrderItemReplacement(models.Model):
    STATUS_PENDING = "PENDING"
    STATUS_ACCEPTED = "ACCEPTED"
    STATUS_REJECTED = "REJECTED"
    STATUS_CHOICES = [
        (STATUS_PENDING, "Ожидает ответа"),
        (STATUS_ACCEPTED, "Принята"),
        (STATUS_REJECTED, "Отклонена"),
    ]

    order_item = models.ForeignKey(OrderItem, on_delete=models.CASCADE, related_name="replacements")
    admin_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="proposed_replacements",
    )
    client_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="received_replacements",
    )
    replacement_image_url = models.CharField(max_length=1024, blank=True, null=True)
    replacement_image_key = models.CharField(max_length=512, blank=True, null=True)
    admin_comment = models.TextField(blank=True, null=True)
    client_comment = models.TextField(blank=True, null=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Replacement #{self.pk} ({self.status})"


class OrderStatusLog(models.Model):
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_logs",
    )
    status = models.CharField(
        max_length=32,
        choices=Order.STATUS_CHOICES,
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_status_changes",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    note = models.TextField(blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Order #{self.order_id}: {self.status} @ {self.created_at}"


class IdentifierSequence(models.Model):
    """
    Database-side counter for human readable identifiers (order numbers, item codes).
    ``value`` holds the last issued number of the kind.
    """

    KIND_ORDER_NUMBER = "order_number"
    KIND_ITEM_CODE = "item_code"

    name = models.CharField(max_length=32, unique=True)
    value = models.BigIntegerField(default=0)

    class Meta:
        verbose_name = "Счетчик номеров"
        verbose_name_plural = "Счетчики номеров"

    def __str__(self):
        return f"{self.name}: {self.value}"
