"""Immutable runtime configuration for API versioning."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from .exceptions import ConfigurationError
from .interfaces import DETECTION_ORDER, DetectionMethod, NegotiationStrategy
from .logging import get_logger
from .settings import VersioningSettings

logger = get_logger(__name__)

DEFAULT_DETECTION_PARAMS: Dict[DetectionMethod, Dict[str, Any]] = {
    DetectionMethod.HEADER: {"enabled": True, "header_name": "X-API-Version"},
    DetectionMethod.QUERY: {"enabled": True, "parameter_name": "api-version"},
    DetectionMethod.PATH: {"enabled": True, "prefix": "api/v"},
    DetectionMethod.MEDIA_TYPE: {
        "enabled": False,
        "format": "application/vnd.api+json;version=%s",
    },
}


DEFAULT_METHOD_MAPPING: Dict[str, str] = {
    "1.0": "to_dict_v1",
    "1.1": "to_dict_v11",
    "2.0": "to_dict_v2",
    "2.1": "to_dict_v21",
}

DEFAULT_INHERITANCE: Dict[str, str] = {"1.1": "1.0", "2.1": "2.0"}


def _frozen(mapping: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


def _as_str_mapping(mapping: Optional[Mapping[Any, Any]]) -> Dict[str, str]:
    return {str(k): str(v) for k, v in dict(mapping or {}).items()}


@dataclass(frozen=True)
class DetectionMethodConfig:
    """A single detection channel: enabled flag plus channel parameters."""

    enabled: bool = False
    params: Mapping[str, Any] = field(default_factory=lambda: _frozen({}))

    def get(self, key: str, default: Any = None) -> Any:
        return self.params.get(key, default)


@dataclass(frozen=True)
class NegotiationConfig:
    """Version negotiation configuration."""

    enabled: bool = False
    strategy: NegotiationStrategy = NegotiationStrategy.STRICT
    prefer_higher: bool = True


@dataclass(frozen=True)
class CacheConfig:
    """Endpoint resolution cache configuration."""

    enabled: bool = True
    ttl: int = 3600
    max_size: int = 4096


def _default_detection_methods() -> Mapping[DetectionMethod, DetectionMethodConfig]:
    return MappingProxyType(
        {
            method: DetectionMethodConfig(
                enabled=bool(params["enabled"]),
                params=_frozen({k: v for k, v in params.items() if k != "enabled"}),
            )
            for method, params in DEFAULT_DETECTION_PARAMS.items()
        }
    )


@dataclass(frozen=True)
class VersionConfig:
    """Process-wide versioning configuration, built once and never mutated."""

    default_version: str = "1.0"
    supported_versions: tuple[str, ...] = ("1.0", "1.1", "2.0", "2.1")
    detection_methods: Mapping[DetectionMethod, DetectionMethodConfig] = field(
        default_factory=_default_detection_methods
    )
    version_method_mapping: Mapping[str, str] = field(
        default_factory=lambda: _frozen(DEFAULT_METHOD_MAPPING)
    )
    version_inheritance: Mapping[str, str] = field(
        default_factory=lambda: _frozen(DEFAULT_INHERITANCE)
    )
    default_method: str = "to_dict_default"
    negotiation: NegotiationConfig = field(default_factory=NegotiationConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    documentation_url: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "supported_versions", tuple(self.supported_versions))
        object.__setattr__(self, "version_method_mapping", _frozen(self.version_method_mapping))
        object.__setattr__(self, "version_inheritance", _frozen(self.version_inheritance))
        object.__setattr__(
            self,
            "detection_methods",
            MappingProxyType({DetectionMethod(k): v for k, v in self.detection_methods.items()}),
        )

    @classmethod
    def from_settings(cls, settings: VersioningSettings) -> "VersionConfig":
        """Create configuration from pydantic settings."""
        detection = settings.detection
        return cls.from_mapping(
            {
                "default_version": settings.default_version,
                "supported_versions": settings.supported_versions,
                "detection_methods": {
                    "header": detection.header.model_dump(),
                    "query": detection.query.model_dump(),
                    "path": detection.path.model_dump(),
                    "media_type": detection.media_type.model_dump(),
                },
                "version_method_mapping": settings.version_method_mapping,
                "version_inheritance": settings.version_inheritance,
                "default_method": settings.default_method,
                "negotiation": settings.negotiation.model_dump(),
                "cache": settings.cache.model_dump(),
                "documentation_url": settings.documentation_url,
            }
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "VersionConfig":
        """
        Create configuration from a plain mapping.

        Missing keys take the defaults. Detection methods not named in
        ``detection_methods`` keep their default parameters but are disabled
        when the mapping is given; unknown method names are ignored.
        """
        detection_data = data.get("detection_methods")
        if detection_data is None:
            detection_methods = _default_detection_methods()
        else:
            detection_methods = cls._build_detection_methods(detection_data)

        negotiation_data = dict(data.get("negotiation") or {})
        strategy_name = str(negotiation_data.get("strategy", NegotiationStrategy.STRICT.value))
        try:
            strategy = NegotiationStrategy(strategy_name)
        except ValueError:
            logger.warning("versioning.config.unknown_strategy", strategy=strategy_name)
            strategy = NegotiationStrategy.STRICT

        cache_data = dict(data.get("cache") or {})

        return cls(
            default_version=str(data.get("default_version", "1.0")),
            supported_versions=tuple(
                str(v) for v in data.get("supported_versions", ("1.0", "1.1", "2.0", "2.1"))
            ),
            detection_methods=detection_methods,
            version_method_mapping=_as_str_mapping(
                data.get("version_method_mapping", DEFAULT_METHOD_MAPPING)
            ),
            version_inheritance=_as_str_mapping(data.get("version_inheritance", DEFAULT_INHERITANCE)),
            default_method=str(data.get("default_method", "to_dict_default")),
            negotiation=NegotiationConfig(
                enabled=bool(negotiation_data.get("enabled", False)),
                strategy=strategy,
                prefer_higher=bool(negotiation_data.get("prefer_higher", True)),
            ),
            cache=CacheConfig(
                enabled=bool(cache_data.get("enabled", True)),
                ttl=int(cache_data.get("ttl", 3600)),
                max_size=int(cache_data.get("max_size", 4096)),
            ),
            documentation_url=data.get("documentation_url"),
        )

    @staticmethod
    def _build_detection_methods(
        detection_data: Mapping[str, Any],
    ) -> Mapping[DetectionMethod, DetectionMethodConfig]:
        if not isinstance(detection_data, Mapping):
            raise ConfigurationError("detection_methods must be a mapping of method name to options")

        methods: Dict[DetectionMethod, DetectionMethodConfig] = {}
        for method in DETECTION_ORDER:
            defaults = {k: v for k, v in DEFAULT_DETECTION_PARAMS[method].items() if k != "enabled"}
            options = detection_data.get(method.value)
            if options is None:
                methods[method] = DetectionMethodConfig(enabled=False, params=_frozen(defaults))
                continue
            if not isinstance(options, Mapping):
                raise ConfigurationError(f"Detection method '{method.value}' options must be a mapping")
            params = {**defaults, **{k: v for k, v in options.items() if k != "enabled"}}
            methods[method] = DetectionMethodConfig(
                enabled=options.get("enabled") is True,
                params=_frozen(params),
            )

        unknown = set(detection_data) - {m.value for m in DETECTION_ORDER}
        if unknown:
            logger.warning("versioning.config.unknown_detection_methods", methods=sorted(unknown))

        return MappingProxyType(methods)

    def detection_method(self, method: DetectionMethod) -> DetectionMethodConfig:
        return self.detection_methods.get(method, DetectionMethodConfig())

    def enabled_detection_methods(self) -> List[DetectionMethod]:
        """Enabled detection methods in evaluation order."""
        return [m for m in DETECTION_ORDER if self.detection_method(m).enabled]

    def validate(self) -> List[str]:
        """Validate configuration consistency. Problems are advisory."""
        errors = []

        if not self.supported_versions:
            errors.append("No supported versions configured")

        if self.default_version not in self.supported_versions:
            errors.append(f"Default version '{self.default_version}' is not a supported version")

        media_type = self.detection_method(DetectionMethod.MEDIA_TYPE)
        if media_type.enabled and "%s" not in str(media_type.get("format", "")):
            errors.append("Media type format must contain a %s placeholder")

        for version, parent in self.version_inheritance.items():
            if parent not in self.supported_versions:
                errors.append(f"Version '{version}' inherits from unsupported version '{parent}'")

        for version in self.version_method_mapping:
            if version not in self.supported_versions:
                errors.append(f"Method mapping references unsupported version '{version}'")

        return errors

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "default_version": self.default_version,
            "supported_versions": list(self.supported_versions),
            "detection_methods": {
                method.value: {
                    "enabled": self.detection_method(method).enabled,
                    **self.detection_method(method).params,
                }
                for method in DETECTION_ORDER
            },
            "version_method_mapping": dict(self.version_method_mapping),
            "version_inheritance": dict(self.version_inheritance),
            "default_method": self.default_method,
            "negotiation": {
                "enabled": self.negotiation.enabled,
                "strategy": self.negotiation.strategy.value,
                "prefer_higher": self.negotiation.prefer_higher,
            },
            "cache": {
                "enabled": self.cache.enabled,
                "ttl": self.cache.ttl,
                "max_size": self.cache.max_size,
            },
            "documentation_url": self.documentation_url,
        }
