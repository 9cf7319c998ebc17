"""Problem details error responses and version response headers."""

from typing import Any, Dict, Iterable, Mapping, Optional

from fastapi.responses import JSONResponse
from starlette.responses import Response

from .exceptions import EndpointVersionMismatchError, UnsupportedVersionError, VersioningError
from .models import ResolvedVersionInfo

PROBLEM_JSON = "application/problem+json"

BAD_REQUEST_TYPE = "https://tools.ietf.org/html/rfc7231#section-6.5.1"
NOT_FOUND_TYPE = "https://tools.ietf.org/html/rfc7231#section-6.5.4"


class ProblemDetailsResponse(JSONResponse):
    """RFC 7807 problem details response."""

    media_type = PROBLEM_JSON

    def __init__(
        self,
        title: str,
        detail: str,
        status: int = 400,
        type: Optional[str] = None,
        instance: Optional[str] = None,
        extensions: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        payload: Dict[str, Any] = {
            "type": type or "about:blank",
            "title": title,
            "status": status,
            "detail": detail,
        }
        if instance is not None:
            payload["instance"] = instance
        payload.update(extensions or {})
        super().__init__(content=payload, status_code=status, headers=dict(headers or {}))

    @classmethod
    def unsupported_version(
        cls,
        error: UnsupportedVersionError,
        supported_versions: Iterable[str],
        documentation_url: Optional[str] = None,
        instance: Optional[str] = None,
    ) -> "ProblemDetailsResponse":
        """Problem details for a version the API or the endpoint does not serve."""
        extensions: Dict[str, Any] = {"supported_versions": list(supported_versions)}
        if error.requested_version is not None:
            extensions["requested_version"] = error.requested_version
        if isinstance(error, EndpointVersionMismatchError) and error.endpoint_versions:
            extensions["endpoint_versions"] = error.endpoint_versions
        if documentation_url:
            extensions["documentation"] = documentation_url

        return cls(
            title="Unsupported API Version",
            detail=error.message,
            status=400,
            type=BAD_REQUEST_TYPE,
            instance=instance,
            extensions=extensions,
        )

    @classmethod
    def route_not_found(
        cls, detail: str = "Route not found", instance: Optional[str] = None
    ) -> "ProblemDetailsResponse":
        return cls(
            title="Route Not Found",
            detail=detail,
            status=404,
            type=NOT_FOUND_TYPE,
            instance=instance,
        )

    @classmethod
    def from_error(
        cls,
        error: VersioningError,
        supported_versions: Iterable[str],
        documentation_url: Optional[str] = None,
        instance: Optional[str] = None,
    ) -> "ProblemDetailsResponse":
        if isinstance(error, UnsupportedVersionError):
            return cls.unsupported_version(
                error, supported_versions, documentation_url=documentation_url, instance=instance
            )
        if error.status_code == 404:
            return cls.route_not_found(error.message or "Route not found", instance=instance)
        return cls(
            title="API Versioning Error",
            detail=error.message,
            status=error.status_code,
            instance=instance,
        )


def version_headers(
    info: ResolvedVersionInfo,
    supported_versions: Iterable[str],
    route_versions: Iterable[str] = (),
) -> Dict[str, str]:
    """Headers describing the served version and its deprecation status."""
    headers = {
        "X-API-Version": info.version,
        "X-API-Supported-Versions": ", ".join(supported_versions),
    }

    if info.is_deprecated:
        headers["X-API-Deprecated"] = "true"
        if info.deprecation_message is not None:
            headers["X-API-Deprecation-Message"] = info.deprecation_message
        if info.sunset_date is not None:
            headers["X-API-Sunset"] = info.sunset_date
        if info.replaced_by is not None:
            headers["X-API-Replaced-By"] = info.replaced_by

    route_versions = list(route_versions)
    if route_versions:
        headers["X-API-Route-Versions"] = ", ".join(route_versions)

    return headers


def apply_headers(response: Response, headers: Mapping[str, str]) -> None:
    for name, value in headers.items():
        response.headers[name] = value
