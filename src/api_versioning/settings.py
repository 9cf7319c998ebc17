from __future__ import annotations

"""Centralized configuration using pydantic-settings.

All configuration is loaded from environment variables and .env files.
For nested settings, use double underscore:
API_VERSIONING_NEGOTIATION__STRATEGY=best_match
"""

from enum import Enum

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# ============================================================
# Detection channels
# ============================================================


class HeaderDetection(BaseModel):
    """Header detection channel."""

    enabled: bool = Field(True, description="Read the version from a request header")
    header_name: str = Field("X-API-Version", description="Header carrying the version")


class QueryDetection(BaseModel):
    """Query string detection channel."""

    enabled: bool = Field(True, description="Read the version from a query parameter")
    parameter_name: str = Field("api-version", description="Query parameter name")


class PathDetection(BaseModel):
    """URL path detection channel."""

    enabled: bool = Field(True, description="Read the version from the URL path")
    prefix: str = Field("api/v", description="Path prefix preceding the version")


class MediaTypeDetection(BaseModel):
    """Accept header (media type) detection channel."""

    enabled: bool = Field(False, description="Read the version from the Accept header")
    format: str = Field(
        "application/vnd.api+json;version=%s",
        description="Media type template, %s marks the version",
    )


class DetectionSettings(BaseModel):
    """Detection channels. Always evaluated as header, query, path, media_type."""

    header: HeaderDetection = HeaderDetection()  # type: ignore[call-arg]
    query: QueryDetection = QueryDetection()  # type: ignore[call-arg]
    path: PathDetection = PathDetection()  # type: ignore[call-arg]
    media_type: MediaTypeDetection = MediaTypeDetection()  # type: ignore[call-arg]


class VersioningSettings(BaseSettings):
    """API versioning settings.

    Defaults describe a four-version API (1.0, 1.1, 2.0, 2.1) detected from the
    ``X-API-Version`` header, the ``api-version`` query parameter or an
    ``/api/v{version}/`` path prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="API_VERSIONING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
    )

    # ============================================================
    # Versions
    # ============================================================

    default_version: str = Field("1.0", description="Version used when none is requested")
    supported_versions: list[str] = Field(
        default_factory=lambda: ["1.0", "1.1", "2.0", "2.1"],
        description="Every version the API accepts",
    )

    detection: DetectionSettings = DetectionSettings()  # type: ignore[call-arg]

    # ============================================================
    # Handler method dispatch
    # ============================================================

    version_method_mapping: dict[str, str] = Field(
        default_factory=lambda: {
            "1.0": "to_dict_v1",
            "1.1": "to_dict_v11",
            "2.0": "to_dict_v2",
            "2.1": "to_dict_v21",
        },
        description="Version to transformation method name",
    )
    version_inheritance: dict[str, str] = Field(
        default_factory=lambda: {"1.1": "1.0", "2.1": "2.0"},
        description="Version to parent version used as fallback",
    )
    default_method: str = Field("to_dict_default", description="Fallback method name")

    # ============================================================
    # Negotiation
    # ============================================================

    class NegotiationSettings(BaseModel):
        """Version negotiation configuration."""

        enabled: bool = Field(False, description="Negotiate when an endpoint rejects a version")
        strategy: str = Field(
            "strict",
            pattern="^(strict|best_match|latest)$",
            description="Negotiation strategy: strict, best_match or latest",
        )
        prefer_higher: bool = Field(True, description="best_match prefers newer versions")

    negotiation: NegotiationSettings = NegotiationSettings()  # type: ignore[call-arg]

    # ============================================================
    # Endpoint resolution cache
    # ============================================================

    class CacheSettings(BaseModel):
        """Endpoint resolution cache configuration."""

        enabled: bool = Field(True, description="Cache endpoint version resolution")
        ttl: int = Field(3600, gt=0, description="Entry TTL in seconds")
        max_size: int = Field(4096, gt=0, description="Maximum cached entries")

    cache: CacheSettings = CacheSettings()  # type: ignore[call-arg]

    documentation_url: str | None = Field(
        None, description="Link included in unsupported version errors"
    )

    # ============================================================
    # Observability
    # ============================================================

    class ObservabilitySettings(BaseModel):
        """Logging configuration."""

        log_level: LogLevel = Field(LogLevel.INFO, description="Log level")
        log_format: str = Field("json", description="Log format (json or text)")
        enable_correlation_ids: bool = Field(True, description="Add thread name to log records")

    observability: ObservabilitySettings = ObservabilitySettings()  # type: ignore[call-arg]


# Global settings instance
_settings: VersioningSettings | None = None


def get_settings() -> VersioningSettings:
    """Get global settings instance (singleton)."""
    global _settings
    if _settings is None:
        _settings = VersioningSettings()  # type: ignore
    return _settings


def reset_settings() -> None:
    """Reset settings (mainly for testing)."""
    global _settings
    _settings = None
