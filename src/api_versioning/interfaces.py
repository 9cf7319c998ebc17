"""Provider-agnostic versioning interfaces."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional


class DetectionMethod(str, Enum):
    """Request channels a version can be read from, in evaluation order."""

    HEADER = "header"
    QUERY = "query"
    PATH = "path"
    MEDIA_TYPE = "media_type"


# Fixed evaluation order, independent of configuration order.
DETECTION_ORDER: tuple[DetectionMethod, ...] = (
    DetectionMethod.HEADER,
    DetectionMethod.QUERY,
    DetectionMethod.PATH,
    DetectionMethod.MEDIA_TYPE,
)


class NegotiationStrategy(str, Enum):
    """Fallback strategies used when an endpoint rejects the requested version."""

    STRICT = "strict"
    BEST_MATCH = "best_match"
    LATEST = "latest"


class DetectionStrategy(ABC):
    """Abstract base class for a single version detection channel."""

    method: DetectionMethod

    @abstractmethod
    def extract_version(self, request: Any) -> Optional[str]:
        """Extract a candidate API version from the request, None when absent."""
        pass


class HandlerCapabilities(ABC):
    """Abstract base class for objects exposing version-specific methods by name."""

    @abstractmethod
    def supports(self, method_name: str) -> bool:
        """Check if the handler implements the named method."""
        pass

    @abstractmethod
    def capability(self, method_name: str) -> Any:
        """Return the bound callable for an implemented method."""
        pass
