from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

ORDER_STATUSES = [
    ("Новый", "Новый"),
    ("Наличие", "Наличие"),
    ("Проверено", "Проверено"),
    ("Согласование", "Согласование"),
    ("Согласован", "Согласован"),
    ("Купить", "Купить"),
    ("Куплен", "Куплен"),
    ("Отправить", "Отправить"),
    ("Готов к отправке", "Готов к отправке"),
    ("Отправлен", "Отправлен"),
    ("Выполнен", "Выполнен"),
    ("Отменен", "Отменен"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="IdentifierSequence",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=32, unique=True)),
                ("value", models.BigIntegerField(default=0)),
            ],
            options={
                "verbose_name": "Счетчик номеров",
                "verbose_name_plural": "Счетчики номеров",
            },
        ),
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("order_number", models.CharField(max_length=32, unique=True)),
                ("status", models.CharField(choices=ORDER_STATUSES, default="Новый", max_length=32)),
                ("total", models.DecimalField(decimal_places=2, default=Decimal("0"), help_text="Сумма по позициям без отказов", max_digits=12)),
                ("subtotal", models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=12)),
                ("full_name", models.CharField(blank=True, max_length=255)),
                ("phone", models.CharField(max_length=32)),
                ("address", models.CharField(blank=True, max_length=512)),
                ("comment", models.TextField(blank=True)),
                ("transport_company", models.CharField(blank=True, max_length=128)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("gruzchik", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="assigned_orders", to=settings.AUTH_USER_MODEL)),
                ("user", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="orders", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "verbose_name": "Заказ",
                "verbose_name_plural": "Заказы",
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("slug", models.CharField(blank=True, max_length=255)),
                ("name", models.CharField(max_length=255)),
                ("article", models.CharField(blank=True, max_length=64)),
                ("color", models.CharField(blank=True, max_length=64, null=True)),
                ("price_box", models.DecimalField(decimal_places=2, default=Decimal("0"), help_text="Цена за коробку = цена пары × пар в коробке", max_digits=12)),
                ("qty", models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ("item_code", models.CharField(max_length=32, unique=True)),
                ("is_available", models.BooleanField(blank=True, null=True)),
                ("is_purchased", models.BooleanField(default=False)),
                ("approval_status", models.CharField(choices=[("PENDING", "Ожидает"), ("APPROVED", "Одобрен клиентом"), ("REJECTED", "Отклонен клиентом")], default="PENDING", max_length=16)),
                ("approval_changed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="orders.order")),
                ("product", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="order_items", to="catalog.product")),
            ],
            options={
                "ordering": ["id"],
                "verbose_name": "Позиция заказа",
                "verbose_name_plural": "Позиции заказа",
            },
        ),
        migrations.CreateModel(
            name="OrderItemFeedback",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("feedback_type", models.CharField(choices=[("WRONG_SIZE", "Не тот размер"), ("WRONG_ITEM", "Не тот товар"), ("AGREE_REPLACEMENT", "Согласен на замену")], max_length=32)),
                ("refusal_reason", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("order_item", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="feedbacks", to="orders.orderitem")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="order_item_feedbacks", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.AddConstraint(
            model_name="orderitemfeedback",
            constraint=models.UniqueConstraint(fields=("order_item", "user", "feedback_type"), name="uniq_feedback_per_item_user_type"),
        ),
        migrations.CreateModel(
            name="OrderItemMessage",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("text", models.TextField(blank=True, null=True)),
                ("is_service", models.BooleanField(default=False, help_text="Системное сообщение")),
                ("attachments", models.JSONField(blank=True, default=list)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("order_item", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="messages", to="orders.orderitem")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="order_item_messages", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["created_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="OrderItemMessageRead",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("read_at", models.DateTimeField(auto_now_add=True)),
                ("message", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="reads", to="orders.orderitemmessage")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="order_item_message_reads", to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.AddConstraint(
            model_name="orderitemmessageread",
            constraint=models.UniqueConstraint(fields=("message", "user"), name="uniq_message_read_per_user"),
        ),
        migrations.CreateModel(
            name="OrderItemReplacement",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("replacement_image_url", models.CharField(blank=True, max_length=1024, null=True)),
                ("replacement_image_key", models.CharField(blank=True, max_length=512, null=True)),
                ("admin_comment", models.TextField(blank=True, null=True)),
                ("client_comment", models.TextField(blank=True, null=True)),
                ("status", models.CharField(choices=[("PENDING", "Ожидает ответа"), ("ACCEPTED", "Принята"), ("REJECTED", "Отклонена")], default="PENDING", max_length=16)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("admin_user", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="proposed_replacements", to=settings.AUTH_USER_MODEL)),
                ("client_user", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="received_replacements", to=settings.AUTH_USER_MODEL)),
                ("order_item", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="replacements", to="orders.orderitem")),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="OrderStatusLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("status", models.CharField(choices=ORDER_STATUSES, max_length=32)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("note", models.TextField(blank=True)),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="status_logs", to="orders.order")),
                ("user", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="order_status_changes", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
