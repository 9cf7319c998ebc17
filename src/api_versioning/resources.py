"""
Version-aware response shaping and validation rules.

Subclasses implement the methods named by the version method mapping::

    class UserResource(VersionedResource):
        def to_dict_default(self):
            return {"id": self.resource.id, "name": self.resource.name}

        def to_dict_v2(self):
            return {**self.to_dict_default(), "email": self.resource.email}

With the default mapping and inheritance, version 2.1 is served by
``to_dict_v2`` and versions 1.0 and 1.1 by ``to_dict_default``.
"""

import dataclasses
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .context import get_api_version, get_version_info
from .dispatch import MethodDispatchResolver, VersionedHandler
from .models import ResolvedVersionInfo
from .registry import VersionRegistry


def rules_method_name(method_name: str) -> str:
    """Map a transformation method name to its validation counterpart (to_dict_v2 -> rules_v2)."""
    return re.sub(r"^to_dict", "rules", method_name)


def _plain_dict(resource: Any) -> Dict[str, Any]:
    if resource is None:
        return {}
    if isinstance(resource, Mapping):
        return dict(resource)
    model_dump = getattr(resource, "model_dump", None)
    if callable(model_dump):
        data = model_dump()
        return data if isinstance(data, dict) else {}
    if dataclasses.is_dataclass(resource) and not isinstance(resource, type):
        return dataclasses.asdict(resource)
    if hasattr(resource, "__dict__"):
        return {k: v for k, v in vars(resource).items() if not k.startswith("_")}
    return {}


def _dispatcher_from_request(request: Any) -> MethodDispatchResolver:
    versioning = getattr(request.app.state, "api_versioning", None)
    if versioning is None:
        raise RuntimeError("API versioning is not set up on this application")
    return versioning.dispatcher


class _VersionedShape(VersionedHandler):
    """Shared state of resources and collections."""

    def __init__(
        self,
        dispatcher: MethodDispatchResolver,
        version: Optional[str] = None,
        version_info: Optional[ResolvedVersionInfo] = None,
    ):
        self.dispatcher = dispatcher
        self.version = version if version is not None else (
            version_info.version if version_info is not None else None
        )
        self.version_info = version_info

    @property
    def is_deprecated(self) -> bool:
        return self.version_info.is_deprecated if self.version_info is not None else False

    def _shape(self) -> Dict[str, Any]:
        result = self.dispatcher.dispatch(self.version, self, default=self.fallback)
        return result if isinstance(result, dict) else {}

    def fallback(self) -> Dict[str, Any]:
        return {}

    def meta(self) -> Dict[str, Any]:
        return {"version": self.version, "deprecated": self.is_deprecated}


class VersionedResource(_VersionedShape):
    """Shapes a single resource for the served API version."""

    def __init__(
        self,
        resource: Any,
        dispatcher: MethodDispatchResolver,
        version: Optional[str] = None,
        version_info: Optional[ResolvedVersionInfo] = None,
    ):
        super().__init__(dispatcher, version=version, version_info=version_info)
        self.resource = resource

    @classmethod
    def from_request(cls, request: Any, resource: Any) -> "VersionedResource":
        """Build a resource using the version resolved for the request."""
        return cls(
            resource,
            _dispatcher_from_request(request),
            version=get_api_version(request),
            version_info=get_version_info(request),
        )

    def fallback(self) -> Dict[str, Any]:
        """The raw resource when no version method is implemented."""
        return _plain_dict(self.resource)

    def to_dict(self) -> Dict[str, Any]:
        return self._shape()

    def response(self) -> Dict[str, Any]:
        """Response body with version metadata."""
        return {"data": self.to_dict(), "meta": self.meta()}


class VersionedResourceCollection(_VersionedShape):
    """Shapes a collection of resources for the served API version."""

    def __init__(
        self,
        items: Iterable[Any],
        dispatcher: MethodDispatchResolver,
        version: Optional[str] = None,
        version_info: Optional[ResolvedVersionInfo] = None,
    ):
        super().__init__(dispatcher, version=version, version_info=version_info)
        self.items: List[Any] = list(items)

    @classmethod
    def from_request(cls, request: Any, items: Iterable[Any]) -> "VersionedResourceCollection":
        return cls(
            items,
            _dispatcher_from_request(request),
            version=get_api_version(request),
            version_info=get_version_info(request),
        )

    def fallback(self) -> Dict[str, Any]:
        return {"data": self.items}

    def extra_meta(self) -> Dict[str, Any]:
        """Additional collection metadata. Override in subclasses."""
        return {}

    def meta(self) -> Dict[str, Any]:
        return {**self.extra_meta(), **super().meta()}

    def to_dict(self) -> Dict[str, Any]:
        return self._shape()

    def response(self) -> Dict[str, Any]:
        return {**self.to_dict(), "meta": self.meta()}


class VersionedRules(VersionedHandler):
    """
    Version-aware validation rules.

    Rule methods follow the transformation mapping with ``to_dict`` replaced by
    ``rules``: ``rules_v1``, ``rules_v2`` and ``rules_default``.
    """

    def __init__(self, registry: VersionRegistry, version: Optional[str] = None):
        self.dispatcher = MethodDispatchResolver(registry, method_name_transform=rules_method_name)
        self.version = version

    @classmethod
    def from_request(cls, request: Any) -> "VersionedRules":
        versioning = getattr(request.app.state, "api_versioning", None)
        if versioning is None:
            raise RuntimeError("API versioning is not set up on this application")
        return cls(versioning.registry, version=get_api_version(request))

    def rules(self) -> Dict[str, Any]:
        result = self.dispatcher.dispatch(self.version, self, default=dict)
        return result if isinstance(result, dict) else {}

    def _versioned(self, prefix: str) -> Dict[str, Any]:
        default_name = f"{prefix}_default"
        name = default_name
        if self.version is not None:
            candidate = f"{prefix}_v{self.version.replace('.', '')}"
            if self.supports(candidate):
                name = candidate
        result = self.capability(name)() if self.supports(name) else {}
        return result if isinstance(result, dict) else {}

    def messages(self) -> Dict[str, str]:
        """Custom validation messages, e.g. ``messages_v20`` for version 2.0."""
        return self._versioned("messages")

    def attributes(self) -> Dict[str, str]:
        """Custom attribute names, e.g. ``attributes_v20`` for version 2.0."""
        return self._versioned("attributes")

    def messages_default(self) -> Dict[str, str]:
        return {}

    def attributes_default(self) -> Dict[str, str]:
        return {}
