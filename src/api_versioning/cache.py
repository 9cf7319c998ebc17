"""
Endpoint resolution cache using cachetools directly.
"""

import threading
from typing import Any, Callable, TypeVar

from cachetools import TTLCache

from .logging import get_logger

logger = get_logger(__name__)

CACHE_PREFIX = "api_versioning:"

_MISSING = object()

T = TypeVar("T")


def route_key(endpoint_id: str, version: str) -> str:
    """Cache key for resolving one endpoint against one version."""
    return f"route:{endpoint_id}:{version}"


def route_versions_key(endpoint_id: str) -> str:
    """Cache key for all versions declared by an endpoint."""
    return f"route_versions:{endpoint_id}"


class EndpointMetadataCache:
    """
    In-process cache for endpoint version resolution.

    Values are computed outside the lock and stored atomically; concurrent
    computations of the same key store equal values, the last write wins.
    ``None`` results are cached like any other value.
    """

    def __init__(self, enabled: bool = True, ttl: int = 3600, max_size: int = 4096):
        self.enabled = enabled
        self.ttl = ttl
        self._cache: TTLCache = TTLCache(maxsize=max_size, ttl=ttl)
        self._lock = threading.Lock()

    def remember(self, key: str, factory: Callable[[], T]) -> T:
        """
        Get cached value or compute and store it.

        Args:
            key: Cache key (without prefix)
            factory: Callable producing the value on a miss

        Returns:
            Cached or freshly computed value
        """
        if not self.enabled:
            return factory()

        cache_key = CACHE_PREFIX + key
        with self._lock:
            value = self._cache.get(cache_key, _MISSING)
        if value is not _MISSING:
            return value  # type: ignore[return-value]

        value = factory()
        with self._lock:
            self._cache[cache_key] = value
        return value

    def forget(self, key: str) -> bool:
        """
        Delete a single entry.

        Returns:
            True if the key existed
        """
        with self._lock:
            return self._cache.pop(CACHE_PREFIX + key, _MISSING) is not _MISSING

    def forget_endpoint(self, endpoint_id: str) -> int:
        """
        Delete every entry cached for one endpoint.

        Returns:
            Number of entries removed
        """
        route_prefix = CACHE_PREFIX + route_key(endpoint_id, "")
        versions_key = CACHE_PREFIX + route_versions_key(endpoint_id)
        with self._lock:
            stale = [
                key
                for key in self._cache
                if key == versions_key
                or (key.startswith(route_prefix) and ":" not in key[len(route_prefix) :])
            ]
            for key in stale:
                self._cache.pop(key, None)
        return len(stale)

    def flush(self) -> None:
        """Clear all cached resolutions."""
        with self._lock:
            self._cache.clear()
        logger.info("versioning.cache.flushed")

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return f"{CACHE_PREFIX}{key}" in self._cache

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                "enabled": self.enabled,
                "size": len(self._cache),
                "max_size": self._cache.maxsize,
                "ttl": self.ttl,
            }
