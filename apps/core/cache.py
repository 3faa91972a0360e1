"""
Fail-open read cache for catalog data

This module implements:
1. Namespaced keys over Django's cache framework (Redis or local memory)
2. Namespace invalidation through a version counter
3. get_or_set helper for read-through caching

Every backend error is logged and treated as a miss. Callers must never
depend on the cache for correctness.
"""
import logging
from typing import Any, Callable, Dict, Optional

from django.core.cache import caches

from .utils import get_storefront_setting

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300

_MISSING = object()


class CacheAccelerator:
    """
    Optional cache in front of read endpoints.
    """

    def __init__(self, alias: str = 'default', enabled: Optional[bool] = None):
        self._alias = alias
        self._enabled = enabled
        self._hits = 0
        self._misses = 0
        self._errors = 0

    @property
    def enabled(self) -> bool:
        if self._enabled is not None:
            return self._enabled
        return bool(get_storefront_setting('CACHE_ENABLED'))

    @property
    def backend(self):
        return caches[self._alias]

    def _version_key(self, namespace: str) -> str:
        return f"cache:{namespace}:version"

    def _namespace_version(self, namespace: str) -> int:
        version = self.backend.get(self._version_key(namespace))
        if version is None:
            self.backend.add(self._version_key(namespace), 1, timeout=None)
            return 1
        return int(version)

    def make_key(self, namespace: str, identifier: str) -> str:
        version = self._namespace_version(namespace)
        return f"cache:{namespace}:v{version}:{identifier}"

    def default_ttl(self, namespace: str) -> int:
        ttls = get_storefront_setting('CACHE_TTL') or {}
        return ttls.get(namespace, DEFAULT_TTL_SECONDS)

    def get(self, namespace: str, identifier: str) -> Any:
        """Return the cached value, or None on miss, when disabled, or on backend error."""
        if not self.enabled:
            return None

        try:
            key = self.make_key(namespace, identifier)
            value = self.backend.get(key, _MISSING)
        except Exception as e:
            self._errors += 1
            logger.error(f"Cache read error for {namespace}:{identifier}: {e}")
            return None

        if value is _MISSING:
            self._misses += 1
            logger.debug(f"[CACHE MISS] {key}")
            return None

        self._hits += 1
        logger.debug(f"[CACHE HIT] {key}")
        return value

    def set(self, namespace: str, identifier: str, value: Any, ttl: Optional[int] = None) -> None:
        if not self.enabled:
            return

        timeout = ttl or self.default_ttl(namespace)
        try:
            key = self.make_key(namespace, identifier)
            self.backend.set(key, value, timeout=timeout)
            logger.debug(f"[CACHE SET] {key} (TTL: {timeout}s)")
        except Exception as e:
            self._errors += 1
            logger.error(f"Cache write error for {namespace}:{identifier}: {e}")

    def delete(self, namespace: str, identifier: str) -> None:
        if not self.enabled:
            return

        try:
            self.backend.delete(self.make_key(namespace, identifier))
        except Exception as e:
            self._errors += 1
            logger.error(f"Cache delete error for {namespace}:{identifier}: {e}")

    def invalidate_namespace(self, namespace: str) -> None:
        """Drop every entry of a namespace by moving to a new key version."""
        if not self.enabled:
            return

        try:
            try:
                self.backend.incr(self._version_key(namespace))
            except ValueError:
                # Version key evicted or never written
                self.backend.set(self._version_key(namespace), 2, timeout=None)
            logger.debug(f"[CACHE INVALIDATE] {namespace}")
        except Exception as e:
            self._errors += 1
            logger.error(f"Cache invalidation error for {namespace}: {e}")

    def get_or_set(
        self,
        namespace: str,
        identifier: str,
        fallback: Callable[[], Any],
        ttl: Optional[int] = None
    ) -> Any:
        """
        Read-through helper: return the cached value or compute, store and return it.
        A None result from the fallback is not cached.
        """
        cached = self.get(namespace, identifier)
        if cached is not None:
            return cached

        result = fallback()
        if result is not None:
            self.set(namespace, identifier, result, ttl)
        return result

    def get_stats(self) -> Dict:
        """Get cache statistics."""
        total = self._hits + self._misses
        hit_rate = (self._hits / total * 100) if total > 0 else 0
        return {
            "enabled": self.enabled,
            "hits": self._hits,
            "misses": self._misses,
            "errors": self._errors,
            "hit_rate": f"{hit_rate:.1f}%",
        }


# Global instance
cache_accelerator = CacheAccelerator()
