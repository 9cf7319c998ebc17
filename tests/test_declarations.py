"""Tests for endpoint version decorators and the endpoint registry."""

import functools
from unittest.mock import Mock

import pytest
from fastapi import APIRouter, FastAPI

from api_versioning.declarations import (
    MARKS_ATTR,
    EndpointRegistry,
    EndpointVersionDeclaration,
    api_version,
    deprecated,
    endpoint_identity,
    get_marks,
    map_to_api_version,
    version_neutral,
)
from api_versioning.exceptions import ConfigurationError
from api_versioning.models import Deprecation


@api_version("1.0", "1.1")
@deprecated(message="Use OrderController", sunset_date="2026-12-31", replaced_by="2.0")
class LegacyController:
    def index(self):
        return []

    @api_version("2.0")
    @api_version("2.1")
    def show(self):
        return {}

    @map_to_api_version("2.0")
    @deprecated(message="Use search")
    def store(self):
        return {}


class ChildController(LegacyController):
    def index(self):
        return ["child"]


@version_neutral
def health():
    return {"status": "ok"}


@pytest.mark.unit
class TestDecorators:
    """Test metadata attached by the decorators."""

    def test_marks_are_attached_once(self):
        marks = get_marks(LegacyController)
        assert marks is getattr(LegacyController, MARKS_ATTR)
        assert marks.versions == ["1.0", "1.1"]

    def test_repeated_api_version_keeps_source_order(self):
        assert get_marks(LegacyController.show).versions == ["2.0", "2.1"]

    def test_list_arguments_are_flattened(self):
        @api_version(["1.0", "2.0"], "2.1")
        def endpoint():
            pass

        assert get_marks(endpoint).versions == ["1.0", "2.0", "2.1"]

    def test_map_to_api_version_rejects_classes(self):
        with pytest.raises(TypeError):

            @map_to_api_version("1.0")
            class Controller:
                pass

    def test_top_deprecation_wins(self):
        @deprecated(message="outer")
        @deprecated(message="inner")
        def endpoint():
            pass

        assert get_marks(endpoint).deprecation == Deprecation(message="outer")

    def test_version_neutral(self):
        assert get_marks(health).neutral is True

    def test_marks_are_not_inherited(self):
        assert get_marks(ChildController) is None
        assert get_marks(ChildController.index) is None

    def test_decorators_return_target(self):
        assert health() == {"status": "ok"}
        assert LegacyController().show() == {}


@pytest.mark.unit
class TestEndpointVersionDeclaration:
    def test_method_and_class_levels_are_split(self):
        declaration = EndpointVersionDeclaration.from_endpoint(LegacyController().show)

        assert declaration.method_versions == ("2.0", "2.1")
        assert declaration.class_versions == ("1.0", "1.1")
        assert declaration.declared_versions == ("2.0", "2.1")

    def test_class_versions_apply_without_method_declarations(self):
        declaration = EndpointVersionDeclaration.from_endpoint(LegacyController().index)
        assert declaration.method_level_versions == ()
        assert declaration.declared_versions == ("1.0", "1.1")
        assert declaration.is_versioned

    def test_mapped_versions_come_first(self):
        declaration = EndpointVersionDeclaration(
            endpoint_id="x", mapped_versions=("2.0",), method_versions=("1.0", "2.0")
        )
        assert declaration.method_level_versions == ("2.0", "1.0")

    def test_method_deprecation_wins(self):
        declaration = EndpointVersionDeclaration.from_endpoint(LegacyController().store)
        assert declaration.deprecation == Deprecation(message="Use search")

    def test_class_deprecation_is_inherited_by_methods(self):
        declaration = EndpointVersionDeclaration.from_endpoint(LegacyController().index)
        assert declaration.deprecation == Deprecation(
            message="Use OrderController", sunset_date="2026-12-31", replaced_by="2.0"
        )

    def test_explicit_controller(self):
        declaration = EndpointVersionDeclaration.from_endpoint(
            LegacyController.index, controller=LegacyController
        )
        assert declaration.class_versions == ("1.0", "1.1")
        assert declaration.endpoint_id.endswith("LegacyController.index")

    def test_unannotated_endpoint_is_not_versioned(self):
        def plain():
            pass

        declaration = EndpointVersionDeclaration.from_endpoint(plain)
        assert not declaration.is_versioned
        assert declaration.deprecation is None


@pytest.mark.unit
class TestEndpointIdentity:
    def test_function_identity(self):
        assert endpoint_identity(health) == f"{__name__}.health"

    def test_bound_method_identity_uses_owner_class(self):
        assert endpoint_identity(ChildController().show) == f"{__name__}.ChildController.show"


@pytest.mark.unit
class TestEndpointRegistry:
    """Test the endpoint registration table."""

    def test_register_once(self, endpoints):
        first = endpoints.register(health)
        second = endpoints.register(health)

        assert first is second
        assert len(endpoints) == 1
        assert first.endpoint_id in endpoints

    def test_declaration_for_registers_on_first_sight(self, endpoints):
        declaration = endpoints.declaration_for(LegacyController().show)
        assert endpoints.get(declaration.endpoint_id) is declaration
        assert endpoints.declaration_for(LegacyController().show) is declaration

    def test_declaration_for_accepts_declarations(self, endpoints):
        declaration = EndpointVersionDeclaration(endpoint_id="manual", method_versions=("1.0",))
        assert endpoints.declaration_for(declaration) is declaration

    def test_add_replaces(self, endpoints):
        endpoints.register(health)
        replacement = EndpointVersionDeclaration(
            endpoint_id=endpoint_identity(health), method_versions=("2.0",)
        )
        endpoints.add(replacement)
        assert endpoints.declaration_for(health) is replacement

    def test_register_routes(self, endpoints):
        app = FastAPI()
        router = APIRouter()

        @router.get("/orders")
        @api_version("2.0")
        def list_orders():
            return []

        @app.get("/plain")
        def plain():
            return {}

        app.include_router(router, prefix="/api")

        registered = endpoints.register_routes(app.routes)

        ids = {d.endpoint_id for d in registered}
        assert endpoint_identity(list_orders) in ids
        assert endpoint_identity(plain) in ids
        assert [d.endpoint_id for d in endpoints.versioned_declarations()] == [
            endpoint_identity(list_orders)
        ]

    def test_declarations_listing(self):
        registry = EndpointRegistry()
        registry.register(health)
        registry.register(LegacyController().index)
        assert len(registry.declarations()) == 2
        assert len(registry.versioned_declarations()) == 2

    def test_hand_added_declaration_is_adopted_on_registration(self, endpoints):
        replacement = EndpointVersionDeclaration(
            endpoint_id=endpoint_identity(health), method_versions=("2.0",)
        )
        endpoints.add(replacement)
        assert endpoints.register(health) is replacement


def plain_endpoint(tag):
    return {"tag": tag}


def make_handler(version):
    @api_version(version)
    def handler():
        return {}

    return handler


class CallableEndpoint:
    def __init__(self, version):
        api_version(version)(self)

    def __call__(self):
        return {}


@pytest.mark.unit
class TestEndpointRegistryIdentity:
    """Distinct endpoint objects sharing a name keep their own declarations."""

    def test_factory_made_endpoints(self, endpoints):
        v1, v2 = make_handler("1.0"), make_handler("2.0")

        first = endpoints.register(v1)
        second = endpoints.register(v2)

        assert first.endpoint_id == endpoint_identity(v1)
        assert second.endpoint_id == f"{endpoint_identity(v2)}#2"
        assert endpoints.declaration_for(v1).declared_versions == ("1.0",)
        assert endpoints.declaration_for(v2).declared_versions == ("2.0",)

    def test_lookup_order_does_not_matter(self, endpoints):
        v1, v2 = make_handler("1.0"), make_handler("2.0")

        assert endpoints.declaration_for(v2).declared_versions == ("2.0",)
        assert endpoints.declaration_for(v1).declared_versions == ("1.0",)

    def test_callable_instances(self, endpoints):
        assert endpoints.declaration_for(CallableEndpoint("1.0")).declared_versions == ("1.0",)
        assert endpoints.declaration_for(CallableEndpoint("2.0")).declared_versions == ("2.0",)
        assert len(endpoints) == 2

    def test_partials(self, endpoints):
        v1 = api_version("1.0")(functools.partial(plain_endpoint, tag="a"))
        v2 = api_version("2.0")(functools.partial(plain_endpoint, tag="b"))

        assert endpoints.declaration_for(v1).declared_versions == ("1.0",)
        assert endpoints.declaration_for(v2).declared_versions == ("2.0",)

    def test_endpoint_id_for(self, endpoints):
        v1, v2 = make_handler("1.0"), make_handler("2.0")
        assert endpoints.endpoint_id_for(v1) is None

        endpoints.register(v1)
        endpoints.register(v2)

        assert endpoints.endpoint_id_for(v2) == f"{endpoint_identity(v2)}#2"

    def test_explicit_endpoint_id_collision(self, endpoints):
        endpoints.register(make_handler("1.0"), endpoint_id="orders")
        with pytest.raises(ConfigurationError):
            endpoints.register(make_handler("2.0"), endpoint_id="orders")


@pytest.mark.unit
class TestEndpointRegistryListeners:
    def test_add_notifies_on_replacement(self, endpoints):
        listener = Mock()
        endpoints.subscribe(listener)
        declaration = endpoints.register(health)

        endpoints.add(EndpointVersionDeclaration(endpoint_id=declaration.endpoint_id))

        listener.assert_called_once_with(declaration.endpoint_id)

    def test_new_declarations_do_not_notify(self, endpoints):
        listener = Mock()
        endpoints.subscribe(listener)

        endpoints.add(EndpointVersionDeclaration(endpoint_id="manual"))

        listener.assert_not_called()
