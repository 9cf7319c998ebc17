"""
Version-to-method dispatch.

A ``VersionedHandler`` subclass implements version-specific methods such as
``to_dict_v1`` or ``to_dict_v2``. The configured method mapping names the
method for each version; when a handler does not implement it, the ancestors
from the inheritance table are tried, then the default method.
"""

from typing import Any, Callable, ClassVar, FrozenSet, List, Optional

from .interfaces import HandlerCapabilities
from .logging import get_logger
from .registry import VersionRegistry

logger = get_logger(__name__)


class VersionedHandler(HandlerCapabilities):
    """
    Base class for objects with version-specific methods.

    The set of public method names is collected once per class, so checking
    whether a method is implemented is a set lookup.
    """

    _capabilities: ClassVar[FrozenSet[str]] = frozenset()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        names = set()
        for klass in reversed(cls.__mro__):
            for name, value in vars(klass).items():
                if name.startswith("_"):
                    continue
                if callable(value) or isinstance(value, (staticmethod, classmethod)):
                    names.add(name)
        cls._capabilities = frozenset(names)

    def supports(self, method_name: str) -> bool:
        return method_name in self._capabilities

    def capability(self, method_name: str) -> Callable[..., Any]:
        if not self.supports(method_name):
            raise AttributeError(f"{type(self).__name__} does not implement '{method_name}'")
        return getattr(self, method_name)


class MethodDispatchResolver:
    """Resolves the handler method serving a version."""

    def __init__(
        self,
        registry: VersionRegistry,
        method_name_transform: Optional[Callable[[str], str]] = None,
    ):
        self.registry = registry
        self.method_name_transform = method_name_transform

    def _name(self, method_name: str) -> str:
        if self.method_name_transform is None:
            return method_name
        return self.method_name_transform(method_name)

    @property
    def default_method(self) -> str:
        return self._name(self.registry.default_method)

    def candidates(self, version: Optional[str]) -> List[str]:
        """Method names to try for a version, in order, ending with the default method."""
        names: List[str] = []
        if version is not None:
            if self.registry.has_mapping(version):
                names.append(self._name(self.registry.method_for_version(version)))
            for ancestor in self.registry.inheritance_chain(version):
                if self.registry.has_mapping(ancestor):
                    names.append(self._name(self.registry.method_for_version(ancestor)))
        names.append(self.default_method)
        return list(dict.fromkeys(names))

    def resolve_method(self, version: Optional[str], handler: HandlerCapabilities) -> Optional[str]:
        """First candidate method the handler implements, None when none is."""
        for name in self.candidates(version):
            if handler.supports(name):
                return name
        return None

    def resolve(
        self, version: Optional[str], handler: HandlerCapabilities
    ) -> Optional[Callable[..., Any]]:
        """Bound callable serving the version, None when the handler implements nothing."""
        name = self.resolve_method(version, handler)
        if name is None:
            logger.debug(
                "versioning.dispatch.miss",
                handler=type(handler).__name__,
                version=version,
            )
            return None
        return handler.capability(name)

    def dispatch(
        self,
        version: Optional[str],
        handler: HandlerCapabilities,
        *args: Any,
        default: Optional[Callable[[], Any]] = None,
        **kwargs: Any,
    ) -> Any:
        """Invoke the method serving the version, or ``default()`` when there is none."""
        method = self.resolve(version, handler)
        if method is None:
            return default() if default is not None else None
        return method(*args, **kwargs)
