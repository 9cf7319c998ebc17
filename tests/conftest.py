"""
Global pytest configuration and fixtures for api-versioning tests.
"""

import os
import sys
from typing import Dict, Optional

import pytest
from starlette.requests import Request

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from api_versioning.cache import EndpointMetadataCache  # noqa: E402
from api_versioning.config import VersionConfig  # noqa: E402
from api_versioning.declarations import EndpointRegistry  # noqa: E402
from api_versioning.detection import VersionManager  # noqa: E402
from api_versioning.registry import VersionRegistry  # noqa: E402
from api_versioning.resolver import EndpointVersionResolver  # noqa: E402
from api_versioning.settings import reset_settings  # noqa: E402


def make_request(
    path: str = "/",
    headers: Optional[Dict[str, str]] = None,
    query_string: str = "",
    method: str = "GET",
) -> Request:
    """Build a Starlette request from a bare HTTP scope."""
    scope = {
        "type": "http",
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": path,
        "raw_path": path.encode(),
        "root_path": "",
        "query_string": query_string.encode(),
        "headers": [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in (headers or {}).items()
        ],
        "server": ("testserver", 80),
        "client": ("127.0.0.1", 50000),
    }
    return Request(scope)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Isolate tests from API_VERSIONING_* environment variables and cached settings."""
    for key in list(os.environ):
        if key.startswith("API_VERSIONING_"):
            monkeypatch.delenv(key, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def config():
    """Default versioning configuration."""
    return VersionConfig()


@pytest.fixture
def registry(config):
    return VersionRegistry(config)


@pytest.fixture
def manager(config):
    return VersionManager(config)


@pytest.fixture
def endpoints():
    return EndpointRegistry()


@pytest.fixture
def resolver(manager, endpoints):
    """Resolver without a cache."""
    return EndpointVersionResolver(manager, endpoints=endpoints)


@pytest.fixture
def cached_resolver(manager, endpoints):
    return EndpointVersionResolver(manager, endpoints=endpoints, cache=EndpointMetadataCache())
