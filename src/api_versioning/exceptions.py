"""Versioning exceptions."""

from typing import Any, Iterable, Optional


class VersioningError(Exception):
    """Base exception for API versioning failures."""

    status_code = 400

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class UnsupportedVersionError(VersioningError):
    """Raised when the requested (or default) version is not supported globally."""

    def __init__(
        self,
        message: str = "",
        supported_versions: Optional[Iterable[str]] = None,
        requested_version: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.supported_versions = list(supported_versions or [])
        self.requested_version = requested_version

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "message": self.message,
            "supported_versions": self.supported_versions,
        }
        if self.requested_version is not None:
            payload["requested_version"] = self.requested_version
        return payload


class EndpointVersionMismatchError(UnsupportedVersionError):
    """Raised when a globally supported version is not declared by the endpoint."""

    def __init__(
        self,
        message: str = "",
        supported_versions: Optional[Iterable[str]] = None,
        requested_version: Optional[str] = None,
        endpoint_versions: Optional[Iterable[str]] = None,
    ) -> None:
        super().__init__(message, supported_versions, requested_version)
        self.endpoint_versions = list(endpoint_versions or [])

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        if self.endpoint_versions:
            payload["endpoint_versions"] = self.endpoint_versions
        return payload


class RouteResolutionError(VersioningError):
    """Raised when no endpoint matches the request."""

    status_code = 404


class ConfigurationError(VersioningError):
    """Raised when versioning configuration cannot be built."""

    pass
