"""Version negotiation for endpoints that do not serve the requested version."""

from typing import Dict, Iterable, List, Optional

from .comparator import VersionComparator
from .config import NegotiationConfig
from .interfaces import NegotiationStrategy
from .logging import get_logger

logger = get_logger(__name__)


class VersionNegotiator:
    """Picks a served version from the versions an endpoint offers."""

    def __init__(
        self,
        config: Optional[NegotiationConfig] = None,
        comparator: Optional[VersionComparator] = None,
    ):
        self.config = config or NegotiationConfig()
        self.comparator = comparator or VersionComparator()

    @property
    def strategy(self) -> NegotiationStrategy:
        return self.config.strategy

    def negotiate(self, requested_version: str, available_versions: Iterable[str]) -> Optional[str]:
        """Negotiate the version to serve, None when nothing acceptable is available."""
        available = list(available_versions)

        if self.strategy is NegotiationStrategy.LATEST:
            negotiated = self.comparator.get_highest(available)
        elif self.strategy is NegotiationStrategy.BEST_MATCH:
            negotiated = self._best_match(requested_version, available)
        else:
            negotiated = requested_version if requested_version in available else None

        logger.debug(
            "versioning.negotiate",
            strategy=self.strategy.value,
            requested_version=requested_version,
            available_versions=available,
            negotiated_version=negotiated,
        )
        return negotiated

    def _best_match(self, requested_version: str, available: List[str]) -> Optional[str]:
        if requested_version in available:
            return requested_version

        if self.config.prefer_higher:
            return (
                self._lowest_higher(requested_version, available)
                or self._highest_lower(requested_version, available)
                or self.comparator.get_highest(available)
            )

        return (
            self._highest_lower(requested_version, available)
            or self._lowest_higher(requested_version, available)
            or self.comparator.get_highest(available)
        )

    def _lowest_higher(self, requested_version: str, available: List[str]) -> Optional[str]:
        higher = [v for v in available if self.comparator.is_greater_than(v, requested_version)]
        return self.comparator.get_lowest(higher)

    def _highest_lower(self, requested_version: str, available: List[str]) -> Optional[str]:
        lower = [v for v in available if self.comparator.is_less_than(v, requested_version)]
        return self.comparator.get_highest(lower)

    def was_negotiated(self, requested_version: str, negotiated_version: Optional[str]) -> bool:
        """Check if negotiation resulted in a different version."""
        return negotiated_version is not None and negotiated_version != requested_version

    def negotiation_headers(self, requested_version: str, served_version: str) -> Dict[str, str]:
        """Response headers describing a negotiated version, empty when unchanged."""
        if requested_version == served_version:
            return {}

        return {
            "X-API-Version-Requested": requested_version,
            "X-API-Version-Served": served_version,
            "X-API-Version-Negotiated": "true",
        }
