#apps/catalog/models.py
from decimal import Decimal

from django.db import models
from django.utils.text import slugify

from .sizes import normalize_sizes

SLUG_BASE_MAX = 240


class Provider(models.Model):
    """
    Supplier (a stall at the market); products scraped from its chats point here.
    """

    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=32, blank=True)
    place = models.CharField(max_length=128, blank=True, help_text="Место на рынке")
    location = models.CharField(max_length=255, blank=True)
    sort = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["sort", "name"]
        verbose_name = "Поставщик"
        verbose_name_plural = "Поставщики"

    def __str__(self):
        return self.name


class Category(models.Model):
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True)
    parent = models.ForeignKey(
        "self",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="children",
    )
    is_active = models.BooleanField(default=True)
    sort = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["sort", "name"]
        verbose_name = "Категория"
        verbose_name_plural = "Категории"

    def __str__(self):
        return self.name

    @classmethod
    def default_root(cls):
        return cls.objects.filter(parent__isnull=True, is_active=True).order_by("sort", "id").first()


class Product(models.Model):
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True, allow_unicode=True)
    article = models.CharField(max_length=64, blank=True)
    provider = models.ForeignKey(
        Provider,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products",
    )
    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products",
    )
    price_pair = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0"),
        help_text="Цена за пару",
    )
    # canonical shape: [{"size": "38", "count": 2}, ...]
    sizes = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Товар"
        verbose_name_plural = "Товары"

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        self.sizes = normalize_sizes(self.sizes)
        if not self.slug:
            self.slug = unique_product_slug(self.name, self.article, exclude_pk=self.pk)
        super().save(*args, **kwargs)


def unique_product_slug(name: str, disambiguator: str = "", exclude_pk=None) -> str:
    """
    "Кроссовки Nike" + "A-100" -> "кроссовки-nike-a-100"; on a clash "-2", "-3", ...
    Cyrillic is kept (unicode slug). Taken slugs are read with one query.
    """
    base = slugify(f"{name} {disambiguator or ''}", allow_unicode=True)[:SLUG_BASE_MAX].strip("-") or "product"
    taken = set(
        Product.objects.filter(slug__startswith=base).exclude(pk=exclude_pk).values_list("slug", flat=True)
    )
    slug = base
    n = 1
    while slug in taken:
        n += 1
        slug = f"{base}-{n}"
    return slug


class DraftProduct(models.Model):
    """
    Product candidate parsed from a WhatsApp / Telegram chat, waiting for admin review.
    """

    SOURCE_WHATSAPP = "WHATSAPP"
    SOURCE_TELEGRAM = "TELEGRAM"
    SOURCE_CHOICES = [
        (SOURCE_WHATSAPP, "WhatsApp"),
        (SOURCE_TELEGRAM, "Telegram"),
    ]

    STATUS_PENDING = "pending"
    STATUS_APPROVED = "approved"
    STATUS_REJECTED = "rejected"
    STATUS_CHOICES = [
        (STATUS_PENDING, "На проверке"),
        (STATUS_APPROVED, "Одобрен"),
        (STATUS_REJECTED, "Отклонен"),
    ]

    source = models.CharField(max_length=16, choices=SOURCE_CHOICES, default=SOURCE_WHATSAPP)
    source_chat_id = models.CharField(max_length=128, blank=True)
    source_message_ids = models.JSONField(default=list, blank=True)
    name = models.CharField(max_length=255, blank=True)
    article = models.CharField(max_length=64, blank=True)
    description = models.TextField(blank=True)
    price_pair = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    sizes = models.JSONField(default=list, blank=True)
    provider = models.ForeignKey(
        Provider,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="drafts",
    )
    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="drafts",
    )
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    product = models.OneToOneField(
        Product,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="draft",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Черновик товара"
        verbose_name_plural = "Черновики товаров"

    def __str__(self):
        return f"Draft #{self.pk} {self.name or '—'}"
