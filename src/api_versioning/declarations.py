"""
Endpoint version declarations.

Endpoints and controller classes are annotated with decorators::

    @api_version("1.0", "1.1")
    class UserController:
        @map_to_api_version("2.0")
        @deprecated(message="Use /users/search", sunset_date="2026-01-01")
        async def index(self, request): ...

        @version_neutral
        async def health(self, request): ...

The decorators only attach metadata. ``EndpointRegistry`` reads it once per
endpoint and keeps the resulting ``EndpointVersionDeclaration``, so requests
never inspect endpoint objects again.
"""

import inspect
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, TypeVar

from .exceptions import ConfigurationError
from .logging import get_logger
from .models import Deprecation

logger = get_logger(__name__)

MARKS_ATTR = "__api_versioning__"

T = TypeVar("T")


@dataclass
class VersionMarks:
    """Raw declarations attached to a function or class by the decorators."""

    versions: List[str] = field(default_factory=list)
    mapped_versions: List[str] = field(default_factory=list)
    neutral: bool = False
    deprecation: Optional[Deprecation] = None


def _flatten(versions: Iterable[Any]) -> List[str]:
    flat: List[str] = []
    for item in versions:
        if isinstance(item, (list, tuple, set, frozenset)):
            flat.extend(str(v) for v in item)
        else:
            flat.append(str(item))
    return flat


def _unwrap(target: Any) -> Any:
    return getattr(target, "__func__", target)


def get_marks(target: Any) -> Optional[VersionMarks]:
    """Marks declared directly on a function or class (never inherited)."""
    namespace = getattr(_unwrap(target), "__dict__", None)
    if namespace is None:
        return None
    return namespace.get(MARKS_ATTR)


def _ensure_marks(target: Any) -> VersionMarks:
    marks = get_marks(target)
    if marks is None:
        marks = VersionMarks()
        setattr(_unwrap(target), MARKS_ATTR, marks)
    return marks


def api_version(*versions: Any) -> Callable[[T], T]:
    """Declare the versions served by an endpoint or by every endpoint of a controller.

    Repeatable; declarations keep source order (top decorator first).
    """
    declared = _flatten(versions)

    def decorator(target: T) -> T:
        marks = _ensure_marks(target)
        marks.versions[:0] = declared
        return target

    return decorator


def map_to_api_version(*versions: Any) -> Callable[[T], T]:
    """Map a controller method to specific versions. Method level only."""
    declared = _flatten(versions)

    def decorator(target: T) -> T:
        if inspect.isclass(target):
            raise TypeError("map_to_api_version can only decorate functions")
        marks = _ensure_marks(target)
        marks.mapped_versions[:0] = declared
        return target

    return decorator


def version_neutral(target: T) -> T:
    """Mark an endpoint or controller as serving every supported version."""
    _ensure_marks(target).neutral = True
    return target


def deprecated(
    message: Optional[str] = None,
    sunset_date: Optional[str] = None,
    replaced_by: Optional[str] = None,
) -> Callable[[T], T]:
    """Attach a deprecation notice. When repeated, the top decorator wins."""
    notice = Deprecation(message=message, sunset_date=sunset_date, replaced_by=replaced_by)

    def decorator(target: T) -> T:
        _ensure_marks(target).deprecation = notice
        return target

    return decorator


def _dedupe(versions: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(versions))


def endpoint_identity(endpoint: Any, controller: Any = None) -> str:
    """Stable identity for an endpoint: module, owning class and name."""
    func = _unwrap(endpoint)
    owner = controller
    if owner is None and inspect.ismethod(endpoint):
        owner = endpoint.__self__
    if owner is not None:
        owner_cls = owner if inspect.isclass(owner) else type(owner)
        name = getattr(func, "__name__", type(func).__name__)
        return f"{owner_cls.__module__}.{owner_cls.__qualname__}.{name}"
    if inspect.isfunction(func) or inspect.isclass(func):
        return f"{func.__module__}.{func.__qualname__}"
    return f"{type(func).__module__}.{type(func).__qualname__}"


def _controller_class(endpoint: Any, controller: Any = None) -> Optional[type]:
    if controller is None and inspect.ismethod(endpoint):
        controller = endpoint.__self__
    if controller is None:
        return None
    return controller if inspect.isclass(controller) else type(controller)


@dataclass(frozen=True)
class EndpointVersionDeclaration:
    """Version metadata of one endpoint, split into method and class level."""

    endpoint_id: str
    mapped_versions: tuple[str, ...] = ()
    method_versions: tuple[str, ...] = ()
    class_versions: tuple[str, ...] = ()
    method_neutral: bool = False
    class_neutral: bool = False
    method_deprecation: Optional[Deprecation] = None
    class_deprecation: Optional[Deprecation] = None

    @classmethod
    def from_endpoint(
        cls,
        endpoint: Any,
        controller: Any = None,
        endpoint_id: Optional[str] = None,
    ) -> "EndpointVersionDeclaration":
        """Build a declaration from the decorator marks of an endpoint and its controller."""
        method_marks = get_marks(endpoint) or VersionMarks()
        controller_cls = _controller_class(endpoint, controller)
        class_marks = get_marks(controller_cls) or VersionMarks()

        return cls(
            endpoint_id=endpoint_id or endpoint_identity(endpoint, controller),
            mapped_versions=_dedupe(method_marks.mapped_versions),
            method_versions=_dedupe(method_marks.versions),
            class_versions=_dedupe(class_marks.versions),
            method_neutral=method_marks.neutral,
            class_neutral=class_marks.neutral,
            method_deprecation=method_marks.deprecation,
            class_deprecation=class_marks.deprecation,
        )

    @property
    def is_neutral(self) -> bool:
        return self.method_neutral or self.class_neutral

    @property
    def deprecation(self) -> Optional[Deprecation]:
        """Method-level deprecation, else class-level."""
        if self.method_deprecation is not None:
            return self.method_deprecation
        return self.class_deprecation

    @property
    def method_level_versions(self) -> tuple[str, ...]:
        return _dedupe(self.mapped_versions + self.method_versions)

    @property
    def declared_versions(self) -> tuple[str, ...]:
        """Method-level versions when present at all, otherwise class-level versions."""
        return self.method_level_versions or self.class_versions

    @property
    def is_versioned(self) -> bool:
        return self.is_neutral or bool(self.declared_versions)


def _object_key(endpoint: Any, controller: Any = None) -> Tuple[int, Optional[int]]:
    owner = _controller_class(endpoint, controller)
    return id(_unwrap(endpoint)), id(owner) if owner is not None else None


class EndpointRegistry:
    """
    Registration table from endpoint to its version declaration.

    Endpoints are tracked by object. Distinct endpoints sharing a name, such as
    closures made by one factory, get ``#2``, ``#3`` suffixed identifiers.
    """

    def __init__(self) -> None:
        self._declarations: Dict[str, EndpointVersionDeclaration] = {}
        self._endpoint_ids: Dict[Tuple[int, Optional[int]], str] = {}
        self._owners: Dict[str, Tuple[int, Optional[int]]] = {}
        # Registered objects stay referenced so their ids are never reused
        self._endpoints: List[Any] = []
        self._listeners: List[Callable[[str], None]] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: Callable[[str], None]) -> None:
        """Call ``listener(endpoint_id)`` whenever a declaration is replaced."""
        with self._lock:
            self._listeners.append(listener)

    def _unique_id(self, base: str) -> str:
        if base not in self._owners:
            return base
        n = 2
        while f"{base}#{n}" in self._owners or f"{base}#{n}" in self._declarations:
            n += 1
        return f"{base}#{n}"

    def register(
        self,
        endpoint: Any,
        controller: Any = None,
        endpoint_id: Optional[str] = None,
    ) -> EndpointVersionDeclaration:
        """Register an endpoint once; later calls return the stored declaration.

        Raises:
            ConfigurationError: an explicit endpoint_id already belongs to another endpoint
        """
        object_key = _object_key(endpoint, controller)
        with self._lock:
            known_id = self._endpoint_ids.get(object_key)
            if known_id is not None:
                return self._declarations[known_id]

            if endpoint_id is not None:
                if endpoint_id in self._owners:
                    raise ConfigurationError(
                        f"Endpoint id '{endpoint_id}' is already registered for another endpoint"
                    )
                key = endpoint_id
            else:
                key = self._unique_id(endpoint_identity(endpoint, controller))

            self._endpoint_ids[object_key] = key
            self._owners[key] = object_key
            self._endpoints.append((_unwrap(endpoint), _controller_class(endpoint, controller)))

            # Declarations added by hand before the route was registered win
            existing = self._declarations.get(key)
            if existing is not None:
                return existing
            declaration = EndpointVersionDeclaration.from_endpoint(
                endpoint, controller=controller, endpoint_id=key
            )
            self._declarations[key] = declaration

        logger.debug(
            "versioning.endpoint.registered",
            endpoint=key,
            versions=list(declaration.declared_versions),
            neutral=declaration.is_neutral,
        )
        return declaration

    def add(self, declaration: EndpointVersionDeclaration) -> EndpointVersionDeclaration:
        """Register a declaration built by hand, replacing any previous one."""
        with self._lock:
            replaced = declaration.endpoint_id in self._declarations
            self._declarations[declaration.endpoint_id] = declaration
            listeners = list(self._listeners)
        if replaced:
            for listener in listeners:
                listener(declaration.endpoint_id)
        return declaration

    def register_routes(self, routes: Iterable[Any]) -> List[EndpointVersionDeclaration]:
        """Register the endpoints of Starlette/FastAPI routes, descending into mounts."""
        registered = []
        for route in routes:
            endpoint = getattr(route, "endpoint", None)
            if endpoint is not None:
                registered.append(self.register(endpoint))
            sub_routes = getattr(route, "routes", None)
            if sub_routes:
                registered.extend(self.register_routes(sub_routes))
        return registered

    def declaration_for(self, endpoint: Any) -> EndpointVersionDeclaration:
        """Declaration of an endpoint, registering it on first sight."""
        if isinstance(endpoint, EndpointVersionDeclaration):
            return endpoint
        with self._lock:
            known_id = self._endpoint_ids.get(_object_key(endpoint))
            if known_id is not None:
                return self._declarations[known_id]
        return self.register(endpoint)

    def endpoint_id_for(self, endpoint: Any) -> Optional[str]:
        """Identifier an endpoint object was registered under, if any."""
        with self._lock:
            return self._endpoint_ids.get(_object_key(endpoint))

    def get(self, endpoint_id: str) -> Optional[EndpointVersionDeclaration]:
        return self._declarations.get(endpoint_id)

    def declarations(self) -> List[EndpointVersionDeclaration]:
        return list(self._declarations.values())

    def versioned_declarations(self) -> List[EndpointVersionDeclaration]:
        return [d for d in self._declarations.values() if d.is_versioned]

    def __contains__(self, endpoint_id: object) -> bool:
        return endpoint_id in self._declarations

    def __len__(self) -> int:
        return len(self._declarations)
