"""Health check helpers for the versioning configuration and endpoint declarations."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List

from .config import VersionConfig
from .declarations import EndpointRegistry
from .interfaces import DetectionMethod
from .logging import get_logger
from .registry import VersionRegistry
from .resolver import EndpointVersionResolver

logger = get_logger(__name__)


_STATUS_PRIORITY = {"unhealthy": 2, "degraded": 1, "unknown": 1, "healthy": 0}


@dataclass
class HealthResult:
    """Structured result produced for each health check."""

    status: str
    response_time: float | None = None
    details: Dict[str, Any] | None = None
    error: str | None = None

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"status": self.status}
        if self.response_time is not None:
            payload["response_time"] = self.response_time
        if self.details:
            payload["details"] = self.details
        if self.error:
            payload["error"] = self.error
        return payload


class VersioningHealthChecker:
    """Advisory checks over the configuration and the registered endpoints."""

    def __init__(
        self,
        config: VersionConfig,
        resolver: EndpointVersionResolver,
        endpoints: EndpointRegistry | None = None,
    ) -> None:
        self.config = config
        self.resolver = resolver
        self.endpoints = endpoints if endpoints is not None else resolver.endpoints
        self.registry = VersionRegistry(config)

    def run_checks(self) -> Dict[str, Dict[str, Any]]:
        """Run all health checks and return the individual results."""

        checks: Dict[str, Dict[str, Any]] = {}
        for name, check in self._health_checks():
            checks[name] = self._run_single_check(name, check)
        return checks

    def aggregate_health(self, checks: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
        """Aggregate individual check results into an overall status."""

        overall_status = "healthy"
        for result in checks.values():
            status = result.get("status", "unknown").lower()
            if _STATUS_PRIORITY.get(status, 1) > _STATUS_PRIORITY.get(overall_status, 0):
                overall_status = status
                if overall_status == "unhealthy":
                    break

        summary = {
            "total": len(checks),
            "healthy": sum(1 for c in checks.values() if c.get("status") == "healthy"),
            "degraded": sum(1 for c in checks.values() if c.get("status") == "degraded"),
            "unhealthy": sum(1 for c in checks.values() if c.get("status") == "unhealthy"),
        }

        return {"status": overall_status, "checks": checks, "summary": summary}

    def _run_single_check(self, name: str, check: Callable[[], HealthResult]) -> Dict[str, Any]:
        start = time.perf_counter()
        try:
            result = check()
        except Exception as exc:
            logger.error("versioning.health.check_failed", check=name, error=str(exc))
            return HealthResult(status="unhealthy", error=str(exc)).as_dict()

        payload = result.as_dict()
        payload.setdefault("response_time", time.perf_counter() - start)
        if payload["status"] != "healthy":
            logger.warning("versioning.health.check", check=name, status=payload["status"])
        return payload

    def _health_checks(self) -> Iterable[tuple[str, Callable[[], HealthResult]]]:
        return (
            ("supported_versions", self.check_supported_versions),
            ("default_version", self.check_default_version),
            ("detection_methods", self.check_detection_methods),
            ("versioned_endpoints", self.check_versioned_endpoints),
            ("orphaned_versions", self.check_orphaned_versions),
            ("endpoint_versions", self.check_endpoint_versions),
            ("inheritance", self.check_inheritance),
            ("cache", self.check_cache),
        )

    def check_supported_versions(self) -> HealthResult:
        versions = self.registry.supported_versions()
        if not versions:
            return HealthResult(status="unhealthy", error="no supported versions configured")
        return HealthResult(status="healthy", details={"versions": versions})

    def check_default_version(self) -> HealthResult:
        default = self.registry.default_version
        if not self.registry.is_supported(default):
            return HealthResult(
                status="unhealthy",
                error=f"default version '{default}' is not a supported version",
            )
        return HealthResult(status="healthy", details={"default_version": default})

    def check_detection_methods(self) -> HealthResult:
        enabled = [m.value for m in self.config.enabled_detection_methods()]
        if not enabled:
            return HealthResult(
                status="degraded",
                details={"enabled": enabled, "message": "only the default version is reachable"},
            )

        media_type = self.config.detection_method(DetectionMethod.MEDIA_TYPE)
        if media_type.enabled and "%s" not in str(media_type.get("format", "")):
            return HealthResult(
                status="degraded",
                details={"enabled": enabled},
                error="media type format has no %s placeholder",
            )
        return HealthResult(status="healthy", details={"enabled": enabled})

    def check_versioned_endpoints(self) -> HealthResult:
        declarations = self.endpoints.declarations()
        versioned = self.endpoints.versioned_declarations()
        details = {
            "registered": len(declarations),
            "versioned": len(versioned),
            "neutral": sum(1 for d in versioned if d.is_neutral),
        }
        if not versioned:
            return HealthResult(status="degraded", details=details)
        return HealthResult(status="healthy", details=details)

    def check_orphaned_versions(self) -> HealthResult:
        """Supported versions that no endpoint declares explicitly."""
        declared = self._declared_versions()
        orphaned = [v for v in self.registry.supported_versions() if v not in declared]
        if orphaned:
            return HealthResult(status="degraded", details={"orphaned_versions": orphaned})
        return HealthResult(status="healthy")

    def check_endpoint_versions(self) -> HealthResult:
        """Endpoints declaring versions outside the supported set."""
        unsupported: Dict[str, List[str]] = {}
        for declaration in self.endpoints.versioned_declarations():
            invalid = [
                v for v in declaration.declared_versions if not self.registry.is_supported(v)
            ]
            if invalid:
                unsupported[declaration.endpoint_id] = invalid
        if unsupported:
            return HealthResult(status="degraded", details={"unsupported_versions": unsupported})
        return HealthResult(status="healthy")

    def check_inheritance(self) -> HealthResult:
        inheritance = self.registry.version_inheritance()
        missing = {v: p for v, p in inheritance.items() if not self.registry.is_supported(p)}
        cyclic = [v for v in inheritance if self._is_cyclic(v)]

        details: Dict[str, Any] = {}
        if missing:
            details["unsupported_parents"] = missing
        if cyclic:
            details["cyclic_versions"] = cyclic
        if details:
            return HealthResult(status="degraded", details=details)
        return HealthResult(status="healthy", details={"chains": len(inheritance)})

    def check_cache(self) -> HealthResult:
        cache = self.resolver.cache
        if cache is None or not cache.enabled:
            return HealthResult(status="degraded", details={"enabled": False})
        return HealthResult(status="healthy", details=cache.stats())

    def _declared_versions(self) -> set[str]:
        declared: set[str] = set()
        for declaration in self.endpoints.versioned_declarations():
            if not declaration.is_neutral:
                declared.update(declaration.declared_versions)
        return declared

    def _is_cyclic(self, version: str) -> bool:
        chain = self.registry.inheritance_chain(version)
        last = chain[-1] if chain else version
        parent = self.registry.version_inheritance().get(last)
        return parent is not None and parent in set(chain) | {version}
