# apps/catalog/cache.py
import logging
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.core.cache import BaseCache, caches

logger = logging.getLogger("app")


class ProviderListCache:
    """
    Cached provider list for the back-office selectors.

    Backed by a Django cache (redis in production) with a TTL; invalidated by
    the Provider signals in ``apps.catalog.signals``.
    """

    key = "catalog:providers:v1"

    def __init__(self, cache: BaseCache, ttl: int):
        self.cache = cache
        self.ttl = ttl

    def get(self) -> List[Dict[str, Any]]:
        data = self.cache.get(self.key)
        if data is not None:
            return data
        data = self._load()
        self.cache.set(self.key, data, self.ttl)
        return data

    def invalidate(self) -> None:
        self.cache.delete(self.key)
        logger.info("Provider cache invalidated")

    def _load(self) -> List[Dict[str, Any]]:
        from .models import Provider

        return list(
            Provider.objects.order_by("sort", "name").values("id", "name", "phone", "place", "location")
        )


_provider_cache: Optional[ProviderListCache] = None


def get_provider_cache() -> ProviderListCache:
    """Return the configured ProviderListCache (built lazily from settings)."""
    global _provider_cache
    if _provider_cache is None:
        _provider_cache = ProviderListCache(caches["default"], settings.PROVIDER_CACHE_TTL)
    return _provider_cache
