"""
API version detection strategies and the version manager.
"""

import re
from typing import Any, Dict, List, Optional

from starlette.requests import Request

from .config import DetectionMethodConfig, VersionConfig
from .exceptions import UnsupportedVersionError
from .interfaces import DETECTION_ORDER, DetectionMethod, DetectionStrategy
from .logging import get_logger

logger = get_logger(__name__)

MEDIA_TYPE_VERSION_PATTERN = r"(\d+(?:\.\d+)?)"


class HeaderVersioning(DetectionStrategy):
    """API versioning through headers (e.g., X-API-Version: 2.0)."""

    method = DetectionMethod.HEADER

    def __init__(self, header_name: str = "X-API-Version"):
        self.header_name = header_name

    def extract_version(self, request: Request) -> Optional[str]:
        """Extract API version from request headers."""
        return request.headers.get(self.header_name)


class QueryVersioning(DetectionStrategy):
    """API versioning through query parameters (e.g., ?api-version=2.0)."""

    method = DetectionMethod.QUERY

    def __init__(self, param_name: str = "api-version"):
        self.param_name = param_name

    def extract_version(self, request: Request) -> Optional[str]:
        """Extract API version from query parameters."""
        return request.query_params.get(self.param_name)


class PathVersioning(DetectionStrategy):
    """API versioning through URL path (e.g., /api/v2.1/users)."""

    method = DetectionMethod.PATH

    def __init__(self, prefix: str = "api/v"):
        self.prefix = prefix
        # Matches api/v1, api/v2.1.0/users and api/v2-beta/users
        self.pattern = re.compile(
            "^" + re.escape(prefix) + r"(\d+(?:\.\d+)*(?:-[a-zA-Z0-9]+)?)(?:/|$)"
        )

    def extract_version(self, request: Request) -> Optional[str]:
        """Extract API version from URL path."""
        path = request.url.path.lstrip("/")
        match = self.pattern.match(path)
        if match:
            return match.group(1)
        return None


class MediaTypeVersioning(DetectionStrategy):
    """API versioning through Accept header (e.g., Accept: application/vnd.api+json;version=2.0)."""

    method = DetectionMethod.MEDIA_TYPE

    def __init__(self, format: str = "application/vnd.api+json;version=%s"):
        self.format = format
        self.pattern = re.compile(re.escape(format).replace("%s", MEDIA_TYPE_VERSION_PATTERN))

    def extract_version(self, request: Request) -> Optional[str]:
        """Extract API version from the Accept header, anywhere in the value."""
        accept_header = request.headers.get("Accept", "")
        if not accept_header or self.pattern.groups == 0:
            return None
        match = self.pattern.search(accept_header)
        if match:
            return match.group(1)
        return None


def create_strategy(method: DetectionMethod, options: DetectionMethodConfig) -> DetectionStrategy:
    """Build the detection strategy for a configured channel."""
    if method is DetectionMethod.HEADER:
        return HeaderVersioning(header_name=str(options.get("header_name", "X-API-Version")))
    if method is DetectionMethod.QUERY:
        return QueryVersioning(param_name=str(options.get("parameter_name", "api-version")))
    if method is DetectionMethod.PATH:
        return PathVersioning(prefix=str(options.get("prefix", "api/v")))
    return MediaTypeVersioning(
        format=str(options.get("format", "application/vnd.api+json;version=%s"))
    )


class VersionManager:
    """Detects the requested API version and checks it against the supported set."""

    def __init__(self, config: VersionConfig):
        self.config = config
        self.strategies: List[DetectionStrategy] = [
            create_strategy(method, config.detection_method(method))
            for method in DETECTION_ORDER
            if config.detection_method(method).enabled
        ]

    def detect(self, request: Request) -> str:
        """
        Detect the API version for a request.

        Enabled channels are tried as header, query, path, media type; the first
        non-empty value wins, otherwise the default version applies.

        Raises:
            UnsupportedVersionError: if the resulting version is not supported
        """
        version = self.extract_candidate(request)
        if version is None:
            version = self.config.default_version

        if not self.is_supported_version(version):
            logger.warning(
                "versioning.detect.unsupported",
                requested_version=version,
                supported_versions=list(self.config.supported_versions),
            )
            raise UnsupportedVersionError(
                message=f"API version '{version}' is not supported.",
                supported_versions=self.supported_versions(),
                requested_version=version,
            )

        return version

    def extract_candidate(self, request: Request) -> Optional[str]:
        """First non-empty version from the enabled channels, None when none yields one."""
        for strategy in self.strategies:
            version = strategy.extract_version(request)
            if isinstance(version, str) and version != "":
                logger.debug(
                    "versioning.detect.candidate",
                    method=strategy.method.value,
                    version=version,
                )
                return version
        return None

    def is_supported_version(self, version: str) -> bool:
        return version in self.config.supported_versions

    def supported_versions(self) -> List[str]:
        return list(self.config.supported_versions)

    @property
    def default_version(self) -> str:
        return self.config.default_version

    def detection_methods(self) -> Dict[str, Dict[str, Any]]:
        """All detection methods with their options, in evaluation order."""
        return {
            method.value: {
                "enabled": self.config.detection_method(method).enabled,
                **self.config.detection_method(method).params,
            }
            for method in DETECTION_ORDER
        }

    def enabled_detection_methods(self) -> List[str]:
        return [method.value for method in self.config.enabled_detection_methods()]
