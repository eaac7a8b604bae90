from decimal import Decimal

import pytest

from apps.catalog.models import Category, Product


@pytest.fixture()
def inactive_product(category):
    return Product.objects.create(
        name="Archived",
        article="X-1",
        category=category,
        price_pair=Decimal("50"),
        is_active=False,
    )


def _names(resp):
    return [p["name"] for p in resp.json()["products"]]


@pytest.mark.django_db
def test_catalog_is_public_and_lists_active_products(api_client, product, cheap_product, inactive_product):
    resp = api_client().get("/api/v1/catalog/")

    assert resp.status_code == 200
    body = resp.json()
    assert sorted(_names(resp)) == ["Slippers", "Sneakers"]
    assert body["pagination"] == {"total": 2, "page": 1, "page_size": 20, "total_pages": 1}
    sneakers = next(p for p in body["products"] if p["name"] == "Sneakers")
    # 500 per pair, 6 pairs in a box
    assert sneakers["price_box"] == "3000.00"
    assert sneakers["category"]["name"] == "Обувь"


@pytest.mark.django_db
@pytest.mark.parametrize(
    "params, expected",
    [
        ({"search": "a-100"}, ["Sneakers"]),
        ({"search": "slip"}, ["Slippers"]),
        ({"min_price": "200"}, ["Sneakers"]),
        ({"max_price": "200"}, ["Slippers"]),
        ({"min_price": "100", "max_price": "500", "sort_by": "price_asc"}, ["Slippers", "Sneakers"]),
        ({"sort_by": "price_desc"}, ["Sneakers", "Slippers"]),
        ({"sort_by": "name_asc"}, ["Slippers", "Sneakers"]),
        ({"sort_by": "name_desc"}, ["Sneakers", "Slippers"]),
    ],
)
def test_catalog_filters_and_sorting(api_client, product, cheap_product, params, expected):
    resp = api_client().get("/api/v1/catalog/", params)
    assert resp.status_code == 200
    assert _names(resp) == expected


@pytest.mark.django_db
def test_catalog_category_filter(api_client, category, product, cheap_product):
    bags = Category.objects.create(name="Сумки", slug="sumki")
    cheap_product.category = bags
    cheap_product.save()

    resp = api_client().get("/api/v1/catalog/", {"category": bags.pk})
    assert _names(resp) == ["Slippers"]


@pytest.mark.django_db
def test_catalog_pagination(api_client, product, cheap_product):
    resp = api_client().get("/api/v1/catalog/", {"sort_by": "price_asc", "page": 2, "page_size": 1})

    assert _names(resp) == ["Sneakers"]
    assert resp.json()["pagination"] == {"total": 2, "page": 2, "page_size": 1, "total_pages": 2}


@pytest.mark.django_db
def test_catalog_rejects_unknown_sorting(api_client, product):
    assert api_client().get("/api/v1/catalog/", {"sort_by": "cheapest"}).status_code == 400


@pytest.mark.django_db
def test_category_tree_rolls_up_counts_and_drops_empty_branches(api_client, category, product, cheap_product, inactive_product):
    sneakers = Category.objects.create(name="Кроссовки", slug="krossovki", parent=category, sort=1)
    Category.objects.create(name="Пустая", slug="pustaya", parent=category, sort=2)
    Category.objects.create(name="Сумки", slug="sumki", sort=5)
    hidden = Category.objects.create(name="Скрытая", slug="skrytaya", parent=category, is_active=False)
    product.category = sneakers
    product.save()
    Product.objects.create(name="Hidden", category=hidden, price_pair=Decimal("1"))

    resp = api_client().get("/api/v1/categories/tree/")

    assert resp.status_code == 200
    items = resp.json()["items"]
    assert len(items) == 1
    root = items[0]
    assert (root["slug"], root["product_count"]) == ("obuv", 2)
    assert [(c["slug"], c["product_count"], c["children"]) for c in root["children"]] == [("krossovki", 1, [])]


@pytest.mark.django_db
def test_category_tree_without_products_returns_full_tree(api_client, category):
    Category.objects.create(name="Кроссовки", slug="krossovki", parent=category)

    items = api_client().get("/api/v1/categories/tree/").json()["items"]

    assert [c["slug"] for c in items] == ["obuv"]
    assert items[0]["product_count"] == 0
    assert [c["slug"] for c in items[0]["children"]] == ["krossovki"]
