"""Endpoint-level version resolution."""

from typing import Any, List, Optional

from .cache import EndpointMetadataCache, route_key, route_versions_key
from .declarations import EndpointRegistry, EndpointVersionDeclaration
from .detection import VersionManager
from .logging import get_logger
from .models import ResolvedVersionInfo

logger = get_logger(__name__)


class EndpointVersionResolver:
    """Decides whether an endpoint accepts a version and with which metadata."""

    def __init__(
        self,
        version_manager: VersionManager,
        endpoints: Optional[EndpointRegistry] = None,
        cache: Optional[EndpointMetadataCache] = None,
    ):
        self.version_manager = version_manager
        self.endpoints = endpoints if endpoints is not None else EndpointRegistry()
        self.cache = cache
        if cache is not None:
            self.endpoints.subscribe(self.invalidate)

    def declaration(self, endpoint: Any) -> EndpointVersionDeclaration:
        return self.endpoints.declaration_for(endpoint)

    def invalidate(self, endpoint_id: str) -> None:
        """Drop cached resolutions of an endpoint whose declaration changed."""
        if self.cache is not None:
            removed = self.cache.forget_endpoint(endpoint_id)
            logger.debug("versioning.cache.invalidated", endpoint=endpoint_id, removed=removed)

    def resolve_for_endpoint(
        self, endpoint: Any, requested_version: str
    ) -> Optional[ResolvedVersionInfo]:
        """
        Resolve a version against an endpoint.

        Returns None when the endpoint does not accept the version; that is an
        endpoint mismatch, not a globally unsupported version.
        """
        declaration = self.declaration(endpoint)
        if self.cache is None:
            return self._resolve(declaration, requested_version)
        return self.cache.remember(
            route_key(declaration.endpoint_id, requested_version),
            lambda: self._resolve(declaration, requested_version),
        )

    def _resolve(
        self, declaration: EndpointVersionDeclaration, requested_version: str
    ) -> Optional[ResolvedVersionInfo]:
        # Neutral endpoints accept every version
        if declaration.is_neutral:
            return ResolvedVersionInfo.build(
                requested_version, is_neutral=True, deprecation=declaration.deprecation
            )

        if requested_version in declaration.mapped_versions:
            return ResolvedVersionInfo.build(requested_version, deprecation=declaration.deprecation)

        if requested_version in declaration.method_versions:
            return ResolvedVersionInfo.build(requested_version, deprecation=declaration.deprecation)

        # Class-level versions only apply when the method declares none of its own
        if not declaration.method_level_versions and requested_version in declaration.class_versions:
            return ResolvedVersionInfo.build(requested_version, deprecation=declaration.deprecation)

        logger.debug(
            "versioning.resolve.mismatch",
            endpoint=declaration.endpoint_id,
            requested_version=requested_version,
        )
        return None

    def all_declared_versions(self, endpoint: Any) -> List[str]:
        """Versions an endpoint accepts, in first-declared order."""
        declaration = self.declaration(endpoint)
        if self.cache is None:
            return self._declared_versions(declaration)
        return list(
            self.cache.remember(
                route_versions_key(declaration.endpoint_id),
                lambda: self._declared_versions(declaration),
            )
        )

    def _declared_versions(self, declaration: EndpointVersionDeclaration) -> List[str]:
        if declaration.is_neutral:
            return self.version_manager.supported_versions()
        return list(declaration.declared_versions)

    def accepts(self, endpoint: Any, version: str) -> bool:
        return self.resolve_for_endpoint(endpoint, version) is not None
