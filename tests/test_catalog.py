from decimal import Decimal

import pytest
from django.core.cache import cache
from rest_framework.exceptions import ValidationError

from apps.catalog.cache import ProviderListCache
from apps.catalog import services_drafts
from apps.catalog.models import Category, DraftProduct, Product, Provider, unique_product_slug
from apps.catalog.services_drafts import approve_drafts, reject_drafts
from apps.catalog.sizes import normalize_sizes


def test_normalize_sizes_canonical_shape():
    raw = [
        {"size": 38, "quantity": 2},
        {"size": "39", "count": 0, "stock": 3},
        {"size": "", "count": 5},
        "junk",
        {"count": 1},
    ]
    assert normalize_sizes(raw) == [{"size": "38", "count": 2}, {"size": "39", "count": 3}]


def test_normalize_sizes_accepts_json_and_rejects_garbage():
    assert normalize_sizes('[{"size": "40", "qty": 1}]') == [{"size": "40", "count": 1}]
    assert normalize_sizes("{oops") == []
    assert normalize_sizes({"size": "40"}) == []


@pytest.mark.django_db
def test_product_save_normalizes_sizes(provider, category):
    p = Product.objects.create(
        name="Boots",
        provider=provider,
        category=category,
        price_pair=Decimal("10"),
        sizes='[{"size": "41", "stock": 2}]',
    )
    p.refresh_from_db()
    assert p.sizes == [{"size": "41", "count": 2}]
    assert p.slug == "boots"
    assert Product.objects.create(name="Boots", price_pair=Decimal("1")).slug == "boots-2"


@pytest.mark.django_db
def test_russian_names_keep_cyrillic_slugs():
    first = Product.objects.create(name="Кроссовки Nike", article="К-1", price_pair=Decimal("1"))
    plain = Product.objects.create(name="Туфли лодочки", price_pair=Decimal("1"))
    again = Product.objects.create(name="Туфли лодочки", price_pair=Decimal("1"))
    other = Product.objects.create(name="Туфли лодочки", article="Т-9", price_pair=Decimal("1"))

    assert first.slug == "кроссовки-nike-к-1"
    assert plain.slug == "туфли-лодочки"
    assert again.slug == "туфли-лодочки-2"
    assert other.slug == "туфли-лодочки-т-9"


@pytest.mark.django_db
def test_slug_clashes_are_resolved_with_one_query(django_assert_num_queries):
    for _ in range(5):
        Product.objects.create(name="Сапоги", price_pair=Decimal("1"))

    with django_assert_num_queries(1):
        slug = unique_product_slug("Сапоги")
    assert slug == "сапоги-6"


@pytest.mark.django_db
def test_approved_drafts_without_article_get_distinct_slugs(category):
    a = DraftProduct.objects.create(name="Ботинки", price_pair=Decimal("900"))
    b = DraftProduct.objects.create(name="Ботинки", price_pair=Decimal("900"))

    results = approve_drafts([a.pk, b.pk], category=category)

    slugs = [Product.objects.get(pk=r["product_id"]).slug for r in results]
    assert slugs == [f"ботинки-d{a.pk}", f"ботинки-d{b.pk}"]


@pytest.fixture()
def drafts(provider):
    ok = DraftProduct.objects.create(
        name="Туфли",
        article="T-1",
        price_pair=Decimal("700"),
        sizes=[{"size": "37", "count": 5}],
        provider=provider,
    )
    no_price = DraftProduct.objects.create(name="Без цены", provider=provider)
    done = DraftProduct.objects.create(name="Старый", price_pair=Decimal("1"), status=DraftProduct.STATUS_REJECTED)
    return ok, no_price, done


@pytest.mark.django_db
def test_approve_drafts_collects_per_draft_results(drafts, category):
    ok, no_price, done = drafts

    results = approve_drafts([ok.pk, no_price.pk, done.pk, 999999])

    by_id = {r["draft_id"]: r for r in results}
    assert len(results) == 4
    product = Product.objects.get(pk=by_id[ok.pk]["product_id"])
    assert product.category == category
    assert product.sizes == [{"size": "37", "count": 5}]
    assert "error" in by_id[no_price.pk]
    assert "error" in by_id[done.pk]
    assert "error" in by_id[999999]

    ok.refresh_from_db()
    no_price.refresh_from_db()
    assert ok.status == DraftProduct.STATUS_APPROVED
    assert ok.product == product
    assert no_price.status == DraftProduct.STATUS_PENDING


@pytest.mark.django_db
def test_approve_drafts_without_category_is_rejected(drafts):
    assert not Category.objects.exists()
    with pytest.raises(ValidationError):
        approve_drafts([drafts[0].pk])


@pytest.mark.django_db
def test_reject_drafts(drafts):
    ok, _, done = drafts
    results = reject_drafts([ok.pk, done.pk])
    assert results[0] == {"draft_id": ok.pk}
    assert "error" in results[1]
    ok.refresh_from_db()
    assert ok.status == DraftProduct.STATUS_REJECTED


@pytest.mark.django_db
def test_draft_processed_meanwhile_is_not_approved_twice(category, monkeypatch):
    a = DraftProduct.objects.create(name="Мокасины", article="M-1", price_pair=Decimal("800"))
    b = DraftProduct.objects.create(name="Кеды", article="K-2", price_pair=Decimal("600"))
    convert = services_drafts._draft_to_product

    def convert_and_approve_other(draft, cat):
        if draft.pk == a.pk:
            # another admin approves B while A is being converted
            DraftProduct.objects.filter(pk=b.pk).update(status=DraftProduct.STATUS_APPROVED)
        return convert(draft, cat)

    monkeypatch.setattr(services_drafts, "_draft_to_product", convert_and_approve_other)

    results = approve_drafts([a.pk, b.pk], category=category)

    assert "product_id" in results[0]
    assert results[1]["draft_id"] == b.pk
    assert "уже обработан" in results[1]["error"]
    assert Product.objects.count() == 1
    b.refresh_from_db()
    assert b.product is None


@pytest.mark.django_db
def test_reject_skips_draft_approved_meanwhile(drafts):
    ok, _, _ = drafts
    DraftProduct.objects.filter(pk=ok.pk).update(status=DraftProduct.STATUS_APPROVED)

    results = reject_drafts([ok.pk])

    assert "уже обработан" in results[0]["error"]
    ok.refresh_from_db()
    assert ok.status == DraftProduct.STATUS_APPROVED


@pytest.mark.django_db
def test_provider_cache_serves_cached_list_until_invalidated(django_assert_num_queries):
    Provider.objects.create(name="A")
    providers = ProviderListCache(cache, ttl=60)

    assert [p["name"] for p in providers.get()] == ["A"]
    with django_assert_num_queries(0):
        providers.get()

    providers.invalidate()
    with django_assert_num_queries(1):
        providers.get()


@pytest.mark.django_db
def test_provider_signals_invalidate_cache():
    from apps.catalog.cache import get_provider_cache

    providers = get_provider_cache()
    first = Provider.objects.create(name="A")
    assert len(providers.get()) == 1

    Provider.objects.create(name="B")
    assert [p["name"] for p in providers.get()] == ["A", "B"]

    first.delete()
    assert [p["name"] for p in providers.get()] == ["B"]
