from decimal import Decimal

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from apps.accounts.models import User
from apps.catalog.models import Category, Product, Provider
from apps.orders.services import create_order


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture()
def make_user(db):
    counter = {"n": 0}

    def _make(role=User.ROLE_CLIENT, **extra):
        counter["n"] += 1
        phone = extra.pop("phone", f"+7900000{counter['n']:04d}")
        return User.objects.create_user(phone=phone, password="pass12345", role=role, **extra)

    return _make


@pytest.fixture()
def admin_user(make_user):
    return make_user(User.ROLE_ADMIN, name="Админ")


@pytest.fixture()
def client_user(make_user):
    return make_user(User.ROLE_CLIENT, name="Клиент")


@pytest.fixture()
def other_client(make_user):
    return make_user(User.ROLE_CLIENT, name="Другой клиент")


@pytest.fixture()
def gruzchik(make_user):
    return make_user(User.ROLE_GRUZCHIK, name="Грузчик")


@pytest.fixture()
def api_client():
    def _client(user=None):
        c = APIClient()
        if user is not None:
            c.force_authenticate(user=user)
        return c

    return _client


@pytest.fixture()
def provider(db):
    return Provider.objects.create(name="Садовод 12-40", phone="+79001112233", place="12-40")


@pytest.fixture()
def category(db):
    return Category.objects.create(name="Обувь", slug="obuv")


@pytest.fixture()
def product(provider, category):
    # 2 + 3 + 1 pairs per box
    return Product.objects.create(
        name="Sneakers",
        article="A-100",
        provider=provider,
        category=category,
        price_pair=Decimal("500.00"),
        sizes=[{"size": "38", "count": 2}, {"size": "39", "quantity": 3}, {"size": "40", "stock": 1}],
    )


@pytest.fixture()
def cheap_product(provider, category):
    return Product.objects.create(
        name="Slippers",
        article="B-7",
        provider=provider,
        category=category,
        price_pair=Decimal("100.00"),
        sizes=[{"size": "36", "count": 4}],
    )


@pytest.fixture()
def order(client_user, product, cheap_product):
    return create_order(
        client_user,
        [{"slug": product.slug, "qty": 2}, {"slug": cheap_product.slug, "qty": 1}],
        {"name": "Иван", "phone": "+79005554433", "address": "Москва"},
        "СДЭК",
    )
