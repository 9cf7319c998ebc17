"""Tests for version negotiation."""

import pytest

from api_versioning.config import NegotiationConfig
from api_versioning.interfaces import NegotiationStrategy
from api_versioning.negotiation import VersionNegotiator


def negotiator(strategy, prefer_higher=True):
    return VersionNegotiator(
        NegotiationConfig(enabled=True, strategy=strategy, prefer_higher=prefer_higher)
    )


@pytest.mark.unit
class TestVersionNegotiator:
    """Test negotiation strategies."""

    def test_default_strategy_is_strict(self):
        assert VersionNegotiator().strategy is NegotiationStrategy.STRICT

    def test_strict(self):
        strict = negotiator(NegotiationStrategy.STRICT)
        assert strict.negotiate("1.5", ["1.0", "2.0"]) is None
        assert strict.negotiate("2.0", ["1.0", "2.0"]) == "2.0"

    def test_best_match_prefers_higher(self):
        best = negotiator(NegotiationStrategy.BEST_MATCH)
        assert best.negotiate("1.5", ["1.0", "2.0"]) == "2.0"
        assert best.negotiate("1.5", ["2.1", "2.0", "1.0"]) == "2.0"

    def test_best_match_prefers_lower(self):
        best = negotiator(NegotiationStrategy.BEST_MATCH, prefer_higher=False)
        assert best.negotiate("1.5", ["1.0", "1.1", "2.0"]) == "1.1"

    def test_best_match_falls_back_to_other_direction(self):
        assert negotiator(NegotiationStrategy.BEST_MATCH).negotiate("3.0", ["1.0", "2.0"]) == "2.0"
        lower_first = negotiator(NegotiationStrategy.BEST_MATCH, prefer_higher=False)
        assert lower_first.negotiate("0.5", ["1.0", "2.0"]) == "1.0"

    def test_best_match_exact(self):
        assert negotiator(NegotiationStrategy.BEST_MATCH).negotiate("1.0", ["1.0", "2.0"]) == "1.0"

    def test_latest(self):
        latest = negotiator(NegotiationStrategy.LATEST)
        assert latest.negotiate("1.5", ["1.0", "2.0"]) == "2.0"
        assert latest.negotiate("1.0", ["1.0", "2.1", "2.0"]) == "2.1"

    @pytest.mark.parametrize("strategy", list(NegotiationStrategy))
    def test_nothing_available(self, strategy):
        assert negotiator(strategy).negotiate("1.0", []) is None

    def test_was_negotiated(self):
        n = VersionNegotiator()
        assert n.was_negotiated("1.5", "2.0")
        assert not n.was_negotiated("2.0", "2.0")
        assert not n.was_negotiated("2.0", None)

    def test_negotiation_headers(self):
        n = VersionNegotiator()
        assert n.negotiation_headers("1.5", "2.0") == {
            "X-API-Version-Requested": "1.5",
            "X-API-Version-Served": "2.0",
            "X-API-Version-Negotiated": "true",
        }
        assert n.negotiation_headers("2.0", "2.0") == {}
