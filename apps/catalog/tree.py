# apps/catalog/tree.py
"""
Storefront category tree: active categories nested under their parents, each
node carrying the number of active products in it and all its descendants.
Branches without products are dropped; if that leaves nothing, the full tree
is returned instead.
"""
from collections import defaultdict
from typing import Any, Dict, List

from django.db.models import Count

from .models import Category, Product

Node = Dict[str, Any]


def _product_counts() -> Dict[int, int]:
    rows = (
        Product.objects.filter(is_active=True, category__isnull=False)
        .order_by()
        .values_list("category_id")
        .annotate(n=Count("id"))
    )
    return dict(rows)


def _build(cat, children_by_parent, counts) -> Node:
    children = [_build(c, children_by_parent, counts) for c in children_by_parent.get(cat["id"], [])]
    return {
        "id": cat["id"],
        "name": cat["name"],
        "slug": cat["slug"],
        "product_count": counts.get(cat["id"], 0) + sum(ch["product_count"] for ch in children),
        "children": children,
    }


def _prune(node: Node):
    if not node["product_count"]:
        return None
    kept = [n for n in (_prune(c) for c in node["children"]) if n is not None]
    return {**node, "children": kept}


def category_tree() -> List[Node]:
    categories = Category.objects.filter(is_active=True).order_by("sort", "name", "id").values(
        "id", "name", "slug", "parent_id"
    )
    children_by_parent = defaultdict(list)
    for cat in categories:
        children_by_parent[cat["parent_id"]].append(cat)

    counts = _product_counts()
    # children of an inactive category are unreachable from the roots
    full = [_build(root, children_by_parent, counts) for root in children_by_parent.get(None, [])]
    pruned = [n for n in (_prune(root) for root in full) if n is not None]
    return pruned or full
