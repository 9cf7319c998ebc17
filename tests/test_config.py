"""Tests for the runtime versioning configuration."""

import dataclasses

import pytest

from api_versioning.config import (
    DEFAULT_INHERITANCE,
    DEFAULT_METHOD_MAPPING,
    NegotiationConfig,
    VersionConfig,
)
from api_versioning.exceptions import ConfigurationError
from api_versioning.interfaces import DetectionMethod, NegotiationStrategy
from api_versioning.settings import VersioningSettings


@pytest.mark.unit
class TestVersionConfigDefaults:
    def test_default_versions(self, config):
        assert config.default_version == "1.0"
        assert config.supported_versions == ("1.0", "1.1", "2.0", "2.1")

    def test_default_detection_methods(self, config):
        assert config.enabled_detection_methods() == [
            DetectionMethod.HEADER,
            DetectionMethod.QUERY,
            DetectionMethod.PATH,
        ]
        assert config.detection_method(DetectionMethod.HEADER).get("header_name") == "X-API-Version"
        assert config.detection_method(DetectionMethod.QUERY).get("parameter_name") == "api-version"
        assert config.detection_method(DetectionMethod.PATH).get("prefix") == "api/v"

    def test_default_mappings(self, config):
        assert dict(config.version_method_mapping) == DEFAULT_METHOD_MAPPING
        assert dict(config.version_inheritance) == DEFAULT_INHERITANCE
        assert config.default_method == "to_dict_default"

    def test_negotiation_is_opt_in(self, config):
        assert config.negotiation == NegotiationConfig()
        assert config.negotiation.enabled is False
        assert config.negotiation.strategy is NegotiationStrategy.STRICT

    def test_config_is_immutable(self, config):
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.default_version = "2.0"  # type: ignore[misc]
        with pytest.raises(TypeError):
            config.version_method_mapping["3.0"] = "to_dict_v3"  # type: ignore[index]

    def test_mappings_are_copied(self):
        mapping = {"1.0": "to_dict_v1"}
        config = VersionConfig(version_method_mapping=mapping)
        mapping["2.0"] = "to_dict_v2"
        assert "2.0" not in config.version_method_mapping

    def test_string_detection_keys_are_normalized(self):
        header = VersionConfig().detection_method(DetectionMethod.HEADER)
        config = VersionConfig(detection_methods={"header": header})
        assert config.enabled_detection_methods() == [DetectionMethod.HEADER]


@pytest.mark.unit
class TestVersionConfigFromMapping:
    def test_missing_keys_take_defaults(self):
        config = VersionConfig.from_mapping({})
        assert config.to_dict() == VersionConfig().to_dict()

    def test_detection_methods_not_named_are_disabled(self):
        config = VersionConfig.from_mapping(
            {"detection_methods": {"query": {"enabled": True, "parameter_name": "v"}}}
        )
        assert config.enabled_detection_methods() == [DetectionMethod.QUERY]
        assert config.detection_method(DetectionMethod.QUERY).get("parameter_name") == "v"
        # Disabled methods keep their default parameters
        assert config.detection_method(DetectionMethod.HEADER).get("header_name") == "X-API-Version"

    def test_enabled_requires_true(self):
        config = VersionConfig.from_mapping({"detection_methods": {"header": {"enabled": "yes"}}})
        assert config.enabled_detection_methods() == []

    def test_non_mapping_detection_entry_is_rejected(self):
        with pytest.raises(ConfigurationError):
            VersionConfig.from_mapping({"detection_methods": {"header": True}})

    def test_non_mapping_detection_methods_is_rejected(self):
        with pytest.raises(ConfigurationError):
            VersionConfig.from_mapping({"detection_methods": ["header"]})

    def test_unknown_strategy_falls_back_to_strict(self):
        config = VersionConfig.from_mapping({"negotiation": {"enabled": True, "strategy": "nearest"}})
        assert config.negotiation.enabled is True
        assert config.negotiation.strategy is NegotiationStrategy.STRICT

    def test_values_are_stringified(self):
        config = VersionConfig.from_mapping(
            {"supported_versions": [1, 2], "default_version": 1, "version_inheritance": {2: 1}}
        )
        assert config.supported_versions == ("1", "2")
        assert config.default_version == "1"
        assert dict(config.version_inheritance) == {"2": "1"}


@pytest.mark.unit
class TestVersionConfigFromSettings:
    def test_from_default_settings(self):
        config = VersionConfig.from_settings(VersioningSettings())
        assert config.to_dict() == VersionConfig().to_dict()

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("API_VERSIONING_DEFAULT_VERSION", "2.0")
        monkeypatch.setenv("API_VERSIONING_DETECTION__MEDIA_TYPE__ENABLED", "true")
        monkeypatch.setenv("API_VERSIONING_NEGOTIATION__STRATEGY", "best_match")

        config = VersionConfig.from_settings(VersioningSettings())

        assert config.default_version == "2.0"
        assert DetectionMethod.MEDIA_TYPE in config.enabled_detection_methods()
        assert config.negotiation.strategy is NegotiationStrategy.BEST_MATCH


@pytest.mark.unit
class TestVersionConfigValidate:
    def test_default_config_is_valid(self, config):
        assert config.validate() == []

    def test_default_version_not_supported(self):
        errors = VersionConfig(default_version="3.0").validate()
        assert any("Default version '3.0'" in e for e in errors)

    def test_no_supported_versions(self):
        errors = VersionConfig(
            supported_versions=(), version_method_mapping={}, version_inheritance={}
        ).validate()
        assert "No supported versions configured" in errors

    def test_media_type_format_without_placeholder(self):
        config = VersionConfig.from_mapping(
            {"detection_methods": {"media_type": {"enabled": True, "format": "application/json"}}}
        )
        assert "Media type format must contain a %s placeholder" in config.validate()

    def test_inheritance_and_mapping_reference_unsupported_versions(self):
        config = VersionConfig(
            supported_versions=("1.0",),
            version_method_mapping={"2.0": "to_dict_v2"},
            version_inheritance={"1.0": "0.9"},
        )
        errors = config.validate()
        assert "Version '1.0' inherits from unsupported version '0.9'" in errors
        assert "Method mapping references unsupported version '2.0'" in errors

    def test_to_dict(self, config):
        data = config.to_dict()
        assert data["detection_methods"]["header"] == {"enabled": True, "header_name": "X-API-Version"}
        assert data["negotiation"] == {"enabled": False, "strategy": "strict", "prefer_higher": True}
        assert data["cache"]["ttl"] == 3600
