"""Tests for the endpoint metadata cache."""

import threading
from unittest.mock import Mock, patch

import pytest

from api_versioning.cache import (
    CACHE_PREFIX,
    EndpointMetadataCache,
    route_key,
    route_versions_key,
)


@pytest.mark.unit
class TestCacheKeys:
    def test_route_key(self):
        assert route_key("app.users.index", "2.0") == "route:app.users.index:2.0"

    def test_route_versions_key(self):
        assert route_versions_key("app.users.index") == "route_versions:app.users.index"


@pytest.mark.unit
class TestEndpointMetadataCache:
    """Test EndpointMetadataCache functionality."""

    @pytest.fixture
    def cache(self):
        return EndpointMetadataCache(ttl=60, max_size=16)

    def test_remember_computes_once(self, cache):
        factory = Mock(return_value={"version": "2.0"})

        assert cache.remember("key", factory) == {"version": "2.0"}
        assert cache.remember("key", factory) == {"version": "2.0"}
        factory.assert_called_once()

    def test_none_is_cached(self, cache):
        factory = Mock(return_value=None)

        assert cache.remember("missing", factory) is None
        assert cache.remember("missing", factory) is None
        factory.assert_called_once()
        assert "missing" in cache

    def test_disabled_cache_always_computes(self):
        cache = EndpointMetadataCache(enabled=False)
        factory = Mock(return_value=1)

        cache.remember("key", factory)
        cache.remember("key", factory)

        assert factory.call_count == 2
        assert len(cache) == 0

    def test_forget(self, cache):
        cache.remember("key", lambda: 1)

        assert cache.forget("key") is True
        assert cache.forget("key") is False
        assert "key" not in cache

    def test_forget_endpoint(self, cache):
        cache.remember(route_key("users.index", "1.0"), lambda: 1)
        cache.remember(route_key("users.index", "2.0"), lambda: 2)
        cache.remember(route_versions_key("users.index"), lambda: ["1.0"])
        cache.remember(route_key("users.index#2", "1.0"), lambda: 3)
        cache.remember(route_key("users", "1.0"), lambda: 4)

        assert cache.forget_endpoint("users.index") == 3

        assert route_key("users.index#2", "1.0") in cache
        assert route_key("users", "1.0") in cache
        assert len(cache) == 2

    def test_flush(self, cache):
        cache.remember("a", lambda: 1)
        cache.remember("b", lambda: 2)

        with patch("api_versioning.cache.logger") as mock_logger:
            cache.flush()
            mock_logger.info.assert_called_once_with("versioning.cache.flushed")

        assert len(cache) == 0

    def test_keys_are_prefixed(self, cache):
        cache.remember("key", lambda: 1)
        assert CACHE_PREFIX + "key" in cache._cache

    def test_max_size_is_bounded(self):
        cache = EndpointMetadataCache(max_size=2)
        for i in range(5):
            cache.remember(f"key{i}", lambda i=i: i)
        assert len(cache) == 2

    def test_stats(self, cache):
        cache.remember("key", lambda: 1)
        assert cache.stats() == {"enabled": True, "size": 1, "max_size": 16, "ttl": 60}

    def test_concurrent_remember(self, cache):
        results = []

        def worker():
            results.append(cache.remember("shared", lambda: "value"))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results == ["value"] * 8
        assert len(cache) == 1
