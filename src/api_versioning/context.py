"""Request-scoped access to the resolved API version."""

from dataclasses import dataclass, field
from typing import Any, Optional

from fastapi import Request

from .comparator import VersionComparator
from .models import ResolvedVersionInfo

STATE_VERSION_INFO = "api_version_info"
STATE_VERSION = "api_version"


def store_version_info(request: Request, info: ResolvedVersionInfo) -> None:
    """Attach the resolved version to the request state."""
    setattr(request.state, STATE_VERSION_INFO, info)
    setattr(request.state, STATE_VERSION, info.version)


def get_version_info(request: Any) -> Optional[ResolvedVersionInfo]:
    info = getattr(request.state, STATE_VERSION_INFO, None)
    return info if isinstance(info, ResolvedVersionInfo) else None


def get_api_version(request: Any) -> Optional[str]:
    version = getattr(request.state, STATE_VERSION, None)
    return version if isinstance(version, str) else None


@dataclass(frozen=True)
class VersionContext:
    """The version a request is served with, plus comparison helpers."""

    version: Optional[str] = None
    info: Optional[ResolvedVersionInfo] = None
    comparator: VersionComparator = field(default_factory=VersionComparator)

    @classmethod
    def from_request(cls, request: Any) -> "VersionContext":
        return cls(version=get_api_version(request), info=get_version_info(request))

    @property
    def is_deprecated(self) -> bool:
        return self.info.is_deprecated if self.info is not None else False

    @property
    def is_neutral(self) -> bool:
        return self.info.is_neutral if self.info is not None else False

    @property
    def deprecation_message(self) -> Optional[str]:
        return self.info.deprecation_message if self.info is not None else None

    @property
    def sunset_date(self) -> Optional[str]:
        return self.info.sunset_date if self.info is not None else None

    @property
    def replaced_by(self) -> Optional[str]:
        return self.info.replaced_by if self.info is not None else None

    def is_version_greater_than(self, version: str) -> bool:
        return self.version is not None and self.comparator.is_greater_than(self.version, version)

    def is_version_greater_than_or_equal(self, version: str) -> bool:
        return self.version is not None and self.comparator.is_greater_than_or_equal(
            self.version, version
        )

    def is_version_less_than(self, version: str) -> bool:
        return self.version is not None and self.comparator.is_less_than(self.version, version)

    def is_version_less_than_or_equal(self, version: str) -> bool:
        return self.version is not None and self.comparator.is_less_than_or_equal(
            self.version, version
        )

    def is_version_between(self, minimum: str, maximum: str) -> bool:
        """Inclusive range check on the served version."""
        return self.version is not None and self.comparator.is_between(
            self.version, minimum, maximum
        )

    def satisfies(self, constraint: str) -> bool:
        """Check the served version against a constraint such as ``^2.0``."""
        return self.version is not None and self.comparator.satisfies(self.version, constraint)


def version_context(request: Request) -> VersionContext:
    """FastAPI dependency exposing the served version to route handlers.

    Example:
        ```python
        @router.get("/users")
        async def list_users(ctx: VersionContext = Depends(version_context)):
            if ctx.is_version_greater_than_or_equal("2.0"):
                ...
        ```
    """
    return VersionContext.from_request(request)
