"""
API versioning middleware.

Runs the version pipeline at the request boundary: detection, endpoint
resolution, optional negotiation, request state, response headers and
problem details errors.
"""

from collections.abc import Awaitable, Callable
from typing import Any, Iterable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Match
from starlette.types import ASGIApp

from .context import store_version_info
from .detection import VersionManager
from .exceptions import EndpointVersionMismatchError, RouteResolutionError, VersioningError
from .logging import get_logger
from .models import ResolvedVersionInfo
from .negotiation import VersionNegotiator
from .resolver import EndpointVersionResolver
from .responses import ProblemDetailsResponse, apply_headers, version_headers

logger = get_logger(__name__)

CallNext = Callable[[Request], Awaitable[Response]]

DEFAULT_EXEMPT_PATHS = frozenset({"/docs", "/docs/oauth2-redirect", "/redoc", "/openapi.json"})


def find_endpoint(routes: Iterable[Any], scope: dict) -> Optional[Any]:
    """
    Endpoint of the route matching a request scope.

    A full match wins; otherwise the first partial match (path matches, method
    does not) is used so method errors still reach the application.
    """
    partial = None
    for route in routes:
        match, child_scope = route.matches(scope)
        if match == Match.FULL:
            sub_routes = getattr(route, "routes", None)
            if sub_routes:
                nested = find_endpoint(sub_routes, {**scope, **child_scope})
                if nested is not None:
                    return nested
                continue
            return getattr(route, "endpoint", None) or getattr(route, "app", None)
        if match == Match.PARTIAL and partial is None:
            partial = getattr(route, "endpoint", None)
    return partial


class ApiVersionMiddleware(BaseHTTPMiddleware):
    """
    API versioning middleware.

    Features:
    - Version detection from header, query, path and media type
    - Endpoint version matching with neutral and deprecated endpoints
    - Optional version negotiation
    - Version and deprecation response headers
    """

    def __init__(
        self,
        app: ASGIApp,
        version_manager: VersionManager,
        resolver: EndpointVersionResolver,
        negotiator: Optional[VersionNegotiator] = None,
        documentation_url: Optional[str] = None,
        exempt_paths: Optional[Iterable[str]] = None,
    ) -> None:
        """
        Initialize versioning middleware.

        Args:
            app: ASGI application
            version_manager: Detects the requested version
            resolver: Matches versions against endpoint declarations
            negotiator: Chooses a fallback version; None disables negotiation
            documentation_url: Link added to unsupported version errors
            exempt_paths: Paths served without versioning
        """
        super().__init__(app)
        self.version_manager = version_manager
        self.resolver = resolver
        self.negotiator = negotiator
        self.documentation_url = documentation_url
        self.exempt_paths = (
            frozenset(exempt_paths) if exempt_paths is not None else DEFAULT_EXEMPT_PATHS
        )

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        """
        Resolve the API version before processing the request.

        Args:
            request: FastAPI Request
            call_next: Next middleware in chain

        Returns:
            Response with version headers, or a problem details error
        """
        if request.url.path in self.exempt_paths:
            return await call_next(request)

        try:
            requested_version = self.version_manager.detect(request)
            endpoint = self._resolve_endpoint(request)
            info, served_version = self._resolve_version(endpoint, requested_version)
        except VersioningError as exc:
            return self._error_response(request, exc)

        store_version_info(request, info)

        response = await call_next(request)

        apply_headers(
            response,
            version_headers(
                info,
                self.version_manager.supported_versions(),
                self.resolver.all_declared_versions(endpoint),
            ),
        )
        if self.negotiator is not None:
            apply_headers(
                response, self.negotiator.negotiation_headers(requested_version, served_version)
            )

        return response

    def _resolve_endpoint(self, request: Request) -> Any:
        router = getattr(request.app, "router", None)
        routes = getattr(router, "routes", None) or getattr(request.app, "routes", [])
        endpoint = find_endpoint(routes, request.scope)
        if endpoint is None:
            raise RouteResolutionError("Route not found")
        return endpoint

    def _resolve_version(
        self, endpoint: Any, requested_version: str
    ) -> tuple[ResolvedVersionInfo, str]:
        info = self.resolver.resolve_for_endpoint(endpoint, requested_version)
        if info is not None:
            return info, requested_version

        endpoint_versions = self.resolver.all_declared_versions(endpoint)

        if self.negotiator is not None:
            negotiated = self.negotiator.negotiate(requested_version, endpoint_versions)
            if negotiated is not None:
                info = self.resolver.resolve_for_endpoint(endpoint, negotiated)
                if info is not None:
                    logger.info(
                        "versioning.negotiated",
                        requested_version=requested_version,
                        served_version=negotiated,
                    )
                    return info, negotiated

        raise EndpointVersionMismatchError(
            message=f"API version '{requested_version}' is not supported for this endpoint.",
            supported_versions=endpoint_versions,
            requested_version=requested_version,
            endpoint_versions=endpoint_versions,
        )

    def _error_response(self, request: Request, exc: VersioningError) -> Response:
        logger.warning(
            "versioning.request.rejected",
            method=request.method,
            path=request.url.path,
            error=exc.message,
            status_code=exc.status_code,
        )
        return ProblemDetailsResponse.from_error(
            exc,
            self.version_manager.supported_versions(),
            documentation_url=self.documentation_url,
            instance=request.url.path,
        )
