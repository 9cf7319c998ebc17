"""Dotted-numeric version comparison and constraint matching."""

import re
from functools import cmp_to_key
from typing import Iterable, Optional

_VERSION_RE = re.compile(r"^[vV]?(\d+(?:\.\d+)*)(.*)$")
_CONSTRAINT_RE = re.compile(r"^(>=|<=|>|<|!=|=)(.+)$")


def parse_version(version: str) -> tuple[tuple[int, ...], str]:
    """Split a version into its numeric segments and trailing qualifier.

    ``"v2.1-beta"`` becomes ``((2, 1), "-beta")``. Strings without a numeric
    prefix have no segments and are compared by qualifier only.
    """
    match = _VERSION_RE.match(version.strip())
    if match is None:
        return (), version.strip()
    numbers = tuple(int(segment) for segment in match.group(1).split("."))
    return numbers, match.group(2)


class VersionComparator:
    """Compares API versions segment by segment, missing segments count as zero."""

    def compare(self, version1: str, version2: str) -> int:
        """Return -1, 0 or 1 as version1 is lower, equal or higher than version2."""
        numbers1, qualifier1 = parse_version(version1)
        numbers2, qualifier2 = parse_version(version2)

        width = max(len(numbers1), len(numbers2))
        padded1 = numbers1 + (0,) * (width - len(numbers1))
        padded2 = numbers2 + (0,) * (width - len(numbers2))

        if padded1 != padded2:
            return -1 if padded1 < padded2 else 1
        if qualifier1 != qualifier2:
            return -1 if qualifier1 < qualifier2 else 1
        return 0

    def is_greater_than(self, version1: str, version2: str) -> bool:
        return self.compare(version1, version2) > 0

    def is_greater_than_or_equal(self, version1: str, version2: str) -> bool:
        return self.compare(version1, version2) >= 0

    def is_less_than(self, version1: str, version2: str) -> bool:
        return self.compare(version1, version2) < 0

    def is_less_than_or_equal(self, version1: str, version2: str) -> bool:
        return self.compare(version1, version2) <= 0

    def equals(self, version1: str, version2: str) -> bool:
        return self.compare(version1, version2) == 0

    def is_between(self, version: str, minimum: str, maximum: str) -> bool:
        """Check if a version is within a range (inclusive)."""
        return self.is_greater_than_or_equal(version, minimum) and self.is_less_than_or_equal(
            version, maximum
        )

    def get_highest(self, versions: Iterable[str]) -> Optional[str]:
        """Highest version, the first one seen on ties. None for no versions."""
        highest: Optional[str] = None
        for version in versions:
            if highest is None or self.is_greater_than(version, highest):
                highest = version
        return highest

    def get_lowest(self, versions: Iterable[str]) -> Optional[str]:
        """Lowest version, the first one seen on ties. None for no versions."""
        lowest: Optional[str] = None
        for version in versions:
            if lowest is None or self.is_less_than(version, lowest):
                lowest = version
        return lowest

    def sort(self, versions: Iterable[str], descending: bool = False) -> list[str]:
        """Sort versions ascending; descending order is the exact reverse."""
        ordered = sorted(versions, key=cmp_to_key(self.compare))
        if descending:
            ordered.reverse()
        return ordered

    def satisfies(self, version: str, constraint: str) -> bool:
        """
        Check if a version satisfies a constraint.

        Supports ``=``, ``!=``, ``>``, ``<``, ``>=``, ``<=`` and the ranges
        ``^2.0`` (>= 2.0 and < 3.0) and ``~2.1`` (>= 2.1 and < 2.2). Anything
        else is treated as an exact version.
        """
        constraint = constraint.strip()

        if constraint.startswith("^"):
            base = constraint.lstrip("^")
            parts = base.split(".")
            try:
                next_major = f"{int(parts[0]) + 1}.0"
            except ValueError:
                return self.equals(version, constraint)
            return self.is_greater_than_or_equal(version, base) and self.is_less_than(
                version, next_major
            )

        if constraint.startswith("~"):
            base = constraint.lstrip("~")
            parts = base.split(".")
            try:
                minor = int(parts[1]) if len(parts) > 1 else 0
                next_minor = f"{int(parts[0])}.{minor + 1}"
            except ValueError:
                return self.equals(version, constraint)
            return self.is_greater_than_or_equal(version, base) and self.is_less_than(
                version, next_minor
            )

        match = _CONSTRAINT_RE.match(constraint)
        if match:
            operator, target = match.group(1), match.group(2).strip()
            if operator == ">=":
                return self.is_greater_than_or_equal(version, target)
            if operator == "<=":
                return self.is_less_than_or_equal(version, target)
            if operator == ">":
                return self.is_greater_than(version, target)
            if operator == "<":
                return self.is_less_than(version, target)
            if operator == "!=":
                return not self.equals(version, target)
            return self.equals(version, target)

        return self.equals(version, constraint)
