"""API Versioning - Request version detection, endpoint matching and version-aware responses.

Framework integration for FastAPI/Starlette applications.
"""

from .interfaces import DetectionMethod, DetectionStrategy, NegotiationStrategy  # lightweight
from .comparator import VersionComparator, parse_version
from .config import CacheConfig, DetectionMethodConfig, NegotiationConfig, VersionConfig
from .settings import VersioningSettings, get_settings, reset_settings
from .exceptions import (
    ConfigurationError,
    EndpointVersionMismatchError,
    RouteResolutionError,
    UnsupportedVersionError,
    VersioningError,
)
from .registry import VersionRegistry
from .detection import (
    HeaderVersioning,
    MediaTypeVersioning,
    PathVersioning,
    QueryVersioning,
    VersionManager,
)
from .models import Deprecation, ResolvedVersionInfo
from .declarations import (
    EndpointRegistry,
    EndpointVersionDeclaration,
    api_version,
    deprecated,
    map_to_api_version,
    version_neutral,
)
from .cache import EndpointMetadataCache
from .resolver import EndpointVersionResolver
from .negotiation import VersionNegotiator
from .dispatch import MethodDispatchResolver, VersionedHandler
from .context import VersionContext, get_api_version, get_version_info, version_context
from .resources import VersionedResource, VersionedResourceCollection, VersionedRules
from .responses import ProblemDetailsResponse
from .middleware import ApiVersionMiddleware
from .health import VersioningHealthChecker
from .factory import ApiVersioning, create_versioning, setup_versioning

__all__ = [
    "DetectionMethod",
    "DetectionStrategy",
    "NegotiationStrategy",
    "VersionComparator",
    "parse_version",
    "CacheConfig",
    "DetectionMethodConfig",
    "NegotiationConfig",
    "VersionConfig",
    "VersioningSettings",
    "get_settings",
    "reset_settings",
    "ConfigurationError",
    "EndpointVersionMismatchError",
    "RouteResolutionError",
    "UnsupportedVersionError",
    "VersioningError",
    "VersionRegistry",
    "HeaderVersioning",
    "MediaTypeVersioning",
    "PathVersioning",
    "QueryVersioning",
    "VersionManager",
    "Deprecation",
    "ResolvedVersionInfo",
    "EndpointRegistry",
    "EndpointVersionDeclaration",
    "api_version",
    "deprecated",
    "map_to_api_version",
    "version_neutral",
    "EndpointMetadataCache",
    "EndpointVersionResolver",
    "VersionNegotiator",
    "MethodDispatchResolver",
    "VersionedHandler",
    "VersionContext",
    "get_api_version",
    "get_version_info",
    "version_context",
    "VersionedResource",
    "VersionedResourceCollection",
    "VersionedRules",
    "ProblemDetailsResponse",
    "ApiVersionMiddleware",
    "VersioningHealthChecker",
    "ApiVersioning",
    "create_versioning",
    "setup_versioning",
]
