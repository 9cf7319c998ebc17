"""Read-only access to the version configuration."""

from typing import Dict, List

from .config import VersionConfig


class VersionRegistry:
    """Answers mapping, inheritance and support questions for a VersionConfig."""

    def __init__(self, config: VersionConfig) -> None:
        self.config = config

    @property
    def default_version(self) -> str:
        return self.config.default_version

    @property
    def default_method(self) -> str:
        return self.config.default_method

    def supported_versions(self) -> List[str]:
        return list(self.config.supported_versions)

    def is_supported(self, version: str) -> bool:
        return version in self.config.supported_versions

    def method_for_version(self, version: str) -> str:
        """Mapped method name for a version, the default method when unmapped."""
        return self.config.version_method_mapping.get(version, self.config.default_method)

    def has_mapping(self, version: str) -> bool:
        return version in self.config.version_method_mapping

    def inheritance_chain(self, version: str) -> List[str]:
        """
        Ancestors of a version, nearest first.

        Follows the inheritance table until a version has no parent or a parent
        was already visited. A cycle ends the chain before the repeated version.
        """
        inheritance = self.config.version_inheritance
        chain: List[str] = []
        visited = {version}
        current = version

        while current in inheritance:
            parent = inheritance[current]
            if parent in visited:
                break
            chain.append(parent)
            visited.add(parent)
            current = parent

        return chain

    def version_mappings(self) -> Dict[str, str]:
        return dict(self.config.version_method_mapping)

    def version_inheritance(self) -> Dict[str, str]:
        return dict(self.config.version_inheritance)
