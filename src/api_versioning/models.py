"""Versioning value objects."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


@dataclass(frozen=True)
class Deprecation:
    """Deprecation notice attached to an endpoint or controller."""

    message: Optional[str] = None
    sunset_date: Optional[str] = None
    replaced_by: Optional[str] = None


class ResolvedVersionInfo(BaseModel):
    """Version resolved for a single request."""

    model_config = ConfigDict(frozen=True)

    version: str
    is_neutral: bool = False
    is_deprecated: bool = False
    deprecation_message: Optional[str] = None
    sunset_date: Optional[str] = None
    replaced_by: Optional[str] = None

    @classmethod
    def build(
        cls, version: str, is_neutral: bool = False, deprecation: Optional[Deprecation] = None
    ) -> "ResolvedVersionInfo":
        return cls(
            version=version,
            is_neutral=is_neutral,
            is_deprecated=deprecation is not None,
            deprecation_message=deprecation.message if deprecation else None,
            sunset_date=deprecation.sunset_date if deprecation else None,
            replaced_by=deprecation.replaced_by if deprecation else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()
