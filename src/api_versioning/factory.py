"""Factory functions wiring the versioning components together."""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from fastapi import FastAPI

from .cache import EndpointMetadataCache
from .comparator import VersionComparator
from .config import VersionConfig
from .declarations import EndpointRegistry
from .detection import VersionManager
from .dispatch import MethodDispatchResolver
from .health import VersioningHealthChecker
from .logging import get_logger, setup_logging
from .middleware import ApiVersionMiddleware
from .negotiation import VersionNegotiator
from .registry import VersionRegistry
from .resolver import EndpointVersionResolver
from .settings import get_settings

logger = get_logger(__name__)


@dataclass
class ApiVersioning:
    """All versioning components built from one configuration."""

    config: VersionConfig
    registry: VersionRegistry
    manager: VersionManager
    endpoints: EndpointRegistry
    resolver: EndpointVersionResolver
    negotiator: VersionNegotiator
    dispatcher: MethodDispatchResolver
    cache: Optional[EndpointMetadataCache] = None
    comparator: VersionComparator = field(default_factory=VersionComparator)

    @property
    def negotiation_enabled(self) -> bool:
        return self.config.negotiation.enabled

    def health_checker(self) -> VersioningHealthChecker:
        return VersioningHealthChecker(self.config, self.resolver, self.endpoints)

    def health(self) -> dict:
        """Run the health checks and aggregate them."""
        checker = self.health_checker()
        return checker.aggregate_health(checker.run_checks())


def create_versioning(
    config: Optional[VersionConfig] = None,
    endpoints: Optional[EndpointRegistry] = None,
) -> ApiVersioning:
    """
    Create the versioning components.

    Args:
        config: Versioning configuration, built from settings when omitted
        endpoints: Existing endpoint registry to reuse

    Returns:
        ApiVersioning bundle
    """
    if config is None:
        config = VersionConfig.from_settings(get_settings())

    for problem in config.validate():
        logger.warning("versioning.config.invalid", problem=problem)

    endpoints = endpoints if endpoints is not None else EndpointRegistry()
    cache = None
    if config.cache.enabled:
        cache = EndpointMetadataCache(ttl=config.cache.ttl, max_size=config.cache.max_size)

    manager = VersionManager(config)
    registry = VersionRegistry(config)
    comparator = VersionComparator()

    return ApiVersioning(
        config=config,
        registry=registry,
        manager=manager,
        endpoints=endpoints,
        resolver=EndpointVersionResolver(manager, endpoints=endpoints, cache=cache),
        negotiator=VersionNegotiator(config.negotiation, comparator=comparator),
        dispatcher=MethodDispatchResolver(registry),
        cache=cache,
        comparator=comparator,
    )


def setup_versioning(
    app: FastAPI,
    config: Optional[VersionConfig] = None,
    endpoints: Optional[EndpointRegistry] = None,
    exempt_paths: Optional[Iterable[str]] = None,
    configure_logging: bool = False,
) -> ApiVersioning:
    """
    Setup FastAPI app with API versioning.

    Args:
        app: FastAPI application instance
        config: Optional custom configuration
        endpoints: Optional endpoint registry to reuse
        exempt_paths: Paths served without versioning
        configure_logging: Apply the structlog setup from the observability settings

    Returns:
        Configured ApiVersioning bundle

    Example:
        ```python
        from fastapi import FastAPI
        from api_versioning import setup_versioning

        app = FastAPI()
        # ... include routers ...
        versioning = setup_versioning(app)
        ```
    """
    if configure_logging:
        setup_logging()

    versioning = create_versioning(config, endpoints)

    registered = versioning.endpoints.register_routes(app.routes)

    app.add_middleware(
        ApiVersionMiddleware,
        version_manager=versioning.manager,
        resolver=versioning.resolver,
        negotiator=versioning.negotiator if versioning.negotiation_enabled else None,
        documentation_url=versioning.config.documentation_url,
        exempt_paths=exempt_paths,
    )
    app.state.api_versioning = versioning

    logger.info(
        "versioning.setup.completed",
        endpoints=len(registered),
        supported_versions=versioning.manager.supported_versions(),
        detection_methods=versioning.manager.enabled_detection_methods(),
        negotiation=versioning.negotiation_enabled,
    )
    return versioning
