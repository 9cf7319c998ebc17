"""
Test helpers for applications using API versioning.

Requires the ``test`` extra (``fastapi.testclient`` needs httpx)::

    from api_versioning.testing import VersionedTestClient, assert_api_version

    def test_users_v2(app):
        client = VersionedTestClient(app)
        response = client.get_with_version("/users", "2.0")
        assert_api_version(response, "2.0")
"""

from typing import Any, Iterable, Mapping, Optional

from fastapi.testclient import TestClient
from httpx import Response

from .interfaces import DetectionMethod

DEFAULT_HEADER_NAME = "X-API-Version"
DEFAULT_QUERY_PARAMETER = "api-version"


class VersionedTestClient(TestClient):
    """TestClient that sends requests with an API version attached.

    The header and query parameter names follow the detection configuration of
    the application when ``setup_versioning`` has been applied to it.
    """

    def __init__(
        self,
        app: Any,
        header_name: Optional[str] = None,
        query_parameter: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(app, **kwargs)
        self._versioned_app = app
        self._header_name = header_name
        self._query_parameter = query_parameter

    def _detection_option(self, method: DetectionMethod, key: str, default: str) -> str:
        state = getattr(self._versioned_app, "state", None)
        versioning = getattr(state, "api_versioning", None)
        if versioning is None:
            return default
        detection = versioning.config.detection_methods.get(method)
        if detection is None:
            return default
        return str(detection.get(key, default))

    @property
    def header_name(self) -> str:
        if self._header_name is not None:
            return self._header_name
        return self._detection_option(DetectionMethod.HEADER, "header_name", DEFAULT_HEADER_NAME)

    @property
    def query_parameter(self) -> str:
        if self._query_parameter is not None:
            return self._query_parameter
        return self._detection_option(
            DetectionMethod.QUERY, "parameter_name", DEFAULT_QUERY_PARAMETER
        )

    def _versioned_headers(
        self, version: str, headers: Optional[Mapping[str, str]]
    ) -> dict[str, str]:
        return {**dict(headers or {}), self.header_name: version}

    def get_with_version(
        self, url: str, version: str, headers: Optional[Mapping[str, str]] = None, **kwargs: Any
    ) -> Response:
        """GET with the version in the version header."""
        return self.get(url, headers=self._versioned_headers(version, headers), **kwargs)

    def get_with_version_query(
        self, url: str, version: str, headers: Optional[Mapping[str, str]] = None, **kwargs: Any
    ) -> Response:
        """GET with the version in the query string."""
        params = dict(kwargs.pop("params", None) or {})
        params[self.query_parameter] = version
        return self.get(url, params=params, headers=headers, **kwargs)

    def post_with_version(
        self,
        url: str,
        version: str,
        json: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        **kwargs: Any,
    ) -> Response:
        return self.post(
            url, json=json, headers=self._versioned_headers(version, headers), **kwargs
        )

    def put_with_version(
        self,
        url: str,
        version: str,
        json: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        **kwargs: Any,
    ) -> Response:
        return self.put(url, json=json, headers=self._versioned_headers(version, headers), **kwargs)

    def delete_with_version(
        self, url: str, version: str, headers: Optional[Mapping[str, str]] = None, **kwargs: Any
    ) -> Response:
        return self.delete(url, headers=self._versioned_headers(version, headers), **kwargs)


def _assert_header(response: Response, name: str, expected: str) -> None:
    actual = response.headers.get(name)
    assert actual == expected, f"Expected header {name}: {expected!r}, got {actual!r}"


def assert_api_version(response: Response, version: str) -> None:
    """Assert the response was served with the given version."""
    _assert_header(response, "X-API-Version", version)


def assert_api_version_deprecated(response: Response, sunset_date: Optional[str] = None) -> None:
    _assert_header(response, "X-API-Deprecated", "true")
    if sunset_date is not None:
        _assert_header(response, "X-API-Sunset", sunset_date)


def assert_api_version_not_deprecated(response: Response) -> None:
    assert "X-API-Deprecated" not in response.headers, "Response is marked as deprecated"


def assert_supported_versions(response: Response, versions: Iterable[str]) -> None:
    _assert_header(response, "X-API-Supported-Versions", ", ".join(versions))


def assert_route_versions(response: Response, versions: Iterable[str]) -> None:
    _assert_header(response, "X-API-Route-Versions", ", ".join(versions))


def assert_deprecation_message(response: Response, message: str) -> None:
    _assert_header(response, "X-API-Deprecation-Message", message)


def assert_replaced_by(response: Response, version: str) -> None:
    _assert_header(response, "X-API-Replaced-By", version)


def assert_version_negotiated(response: Response, requested: str, served: str) -> None:
    """Assert a negotiated response served ``served`` for a ``requested`` version."""
    _assert_header(response, "X-API-Version-Negotiated", "true")
    _assert_header(response, "X-API-Version-Requested", requested)
    _assert_header(response, "X-API-Version-Served", served)
