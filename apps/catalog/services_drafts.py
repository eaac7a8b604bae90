# apps/catalog/services_drafts.py
import logging
from typing import Any, Dict, Iterable, List, Optional

from django.db import transaction
from rest_framework.exceptions import ValidationError

from .models import Category, DraftProduct, Product, unique_product_slug

logger = logging.getLogger("app.jobs")


class DraftAlreadyProcessed(Exception):
    pass


def _draft_to_product(draft: DraftProduct, category: Category) -> Product:
    if not (draft.name or "").strip():
        raise ValueError("У черновика нет названия")
    if draft.price_pair is None or draft.price_pair <= 0:
        raise ValueError("У черновика нет цены за пару")
    name = draft.name.strip()
    return Product.objects.create(
        name=name,
        slug=unique_product_slug(name, draft.article or f"d{draft.pk}"),
        article=draft.article,
        provider=draft.provider,
        category=category,
        price_pair=draft.price_pair,
        sizes=draft.sizes,
    )


def _lock_pending(pk) -> DraftProduct:
    """Re-read the draft under a row lock; it must still be pending."""
    draft = DraftProduct.objects.select_for_update().select_related("provider").get(pk=pk)
    if draft.status != DraftProduct.STATUS_PENDING:
        raise DraftAlreadyProcessed(f"Черновик уже обработан ({draft.status})")
    return draft


def approve_drafts(ids: Iterable[Any], category: Optional[Category] = None) -> List[Dict[str, Any]]:
    """
    Approve drafts one by one and turn each into a catalog Product.

    Every draft runs in its own transaction; failures are reported in the
    returned list next to the successes, the batch itself never aborts.
    """
    ids = list(ids or [])
    if not ids:
        raise ValidationError("ids are required")

    if category is None:
        category = Category.default_root()
        if category is None:
            raise ValidationError("Нет корневой категории")

    found = {str(pk): pk for pk in DraftProduct.objects.filter(pk__in=ids).values_list("pk", flat=True)}
    results: List[Dict[str, Any]] = []

    for raw_id in ids:
        pk = found.get(str(raw_id))
        if pk is None:
            results.append({"draft_id": raw_id, "error": "Черновик не найден"})
            continue
        try:
            with transaction.atomic():
                draft = _lock_pending(pk)
                product = _draft_to_product(draft, category)
                draft.status = DraftProduct.STATUS_APPROVED
                draft.category = category
                draft.product = product
                draft.save(update_fields=["status", "category", "product", "updated_at"])
        except DraftAlreadyProcessed as e:
            results.append({"draft_id": pk, "error": str(e)})
            continue
        except Exception as e:
            logger.error("Draft %s approval failed: %s", pk, e, exc_info=True)
            results.append({"draft_id": pk, "error": str(e) or "Failed to approve"})
            continue
        results.append({"draft_id": pk, "product_id": product.pk})

    failed = sum(1 for r in results if "error" in r)
    logger.info("Drafts approval: processed=%s ok=%s failed=%s", len(results), len(results) - failed, failed)
    return results


def reject_drafts(ids: Iterable[Any]) -> List[Dict[str, Any]]:
    ids = list(ids or [])
    if not ids:
        raise ValidationError("ids are required")

    found = {str(pk): pk for pk in DraftProduct.objects.filter(pk__in=ids).values_list("pk", flat=True)}
    results: List[Dict[str, Any]] = []
    for raw_id in ids:
        pk = found.get(str(raw_id))
        if pk is None:
            results.append({"draft_id": raw_id, "error": "Черновик не найден"})
            continue
        try:
            with transaction.atomic():
                draft = _lock_pending(pk)
                draft.status = DraftProduct.STATUS_REJECTED
                draft.save(update_fields=["status", "updated_at"])
        except DraftAlreadyProcessed as e:
            results.append({"draft_id": pk, "error": str(e)})
            continue
        results.append({"draft_id": pk})
    logger.info("Drafts rejected: %s of %s", sum(1 for r in results if "error" not in r), len(results))
    return results
