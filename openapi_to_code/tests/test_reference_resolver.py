"""
Tests for $ref resolution.
"""

from __future__ import annotations

import pytest

from openapi_to_code.pipeline.analyzer import ReferenceResolver
from openapi_to_code.pipeline.errors import UnresolvableReferenceError
from openapi_to_code.pipeline.schema_ast import ObjectNode, PrimitiveNode, RefNode, SchemaParser


def make_resolver(schemas: dict) -> ReferenceResolver:
    return ReferenceResolver(SchemaParser().parse({"openapi": "3.0.3", "components": {"schemas": schemas}}))


SCHEMAS = {
    "Pet": {"type": "object", "properties": {"name": {"type": "string"}}},
    "PetAlias": {"$ref": "#/components/schemas/Pet"},
    "PetAliasAlias": {"$ref": "#/components/schemas/PetAlias"},
    "My Pet": {"type": "string"},
}


class TestResolve:
    def test_resolves_component(self):
        resolved = make_resolver(SCHEMAS).resolve(RefNode(ref_path="#/components/schemas/Pet"))
        assert resolved.target_name == "Pet"
        assert isinstance(resolved.target_node, ObjectNode)

    def test_follows_ref_chains(self):
        resolved = make_resolver(SCHEMAS).resolve(RefNode(ref_path="#/components/schemas/PetAliasAlias"))
        assert resolved.target_name == "Pet"
        assert isinstance(resolved.target_node, ObjectNode)

    def test_percent_encoded_pointer(self):
        resolved = make_resolver(SCHEMAS).resolve(RefNode(ref_path="#/components/schemas/My%20Pet"))
        assert resolved.target_name == "My Pet"

    def test_pointer_inside_a_schema(self):
        resolver = make_resolver(SCHEMAS)
        ref = RefNode(ref_path="#/components/schemas/Pet/properties/name")
        resolved = resolver.resolve(ref)
        assert resolved.target_name is None
        assert isinstance(resolved.target_node, PrimitiveNode)
        assert resolved.target_node.source_path == "#/components/schemas/Pet/properties/name"
        # Parsed once, then cached
        assert resolver.resolve(ref).target_node is resolved.target_node

    def test_dangling_pointer(self):
        with pytest.raises(UnresolvableReferenceError) as exc_info:
            make_resolver(SCHEMAS).resolve(RefNode(ref_path="#/components/schemas/Nope"), "Owner")
        assert exc_info.value.ref == "#/components/schemas/Nope"
        assert exc_info.value.schema_name == "Owner"

    def test_external_reference(self):
        with pytest.raises(UnresolvableReferenceError, match="external references"):
            make_resolver(SCHEMAS).resolve(RefNode(ref_path="other.yaml#/components/schemas/Pet"))

    def test_ref_cycle(self):
        resolver = make_resolver(
            {
                "A": {"$ref": "#/components/schemas/B"},
                "B": {"$ref": "#/components/schemas/A"},
            }
        )
        with pytest.raises(UnresolvableReferenceError, match="circular reference chain"):
            resolver.resolve(RefNode(ref_path="#/components/schemas/A"))


class TestMappingTargets:
    def test_pointer_target(self):
        assert make_resolver(SCHEMAS).resolve_mapping_target("#/components/schemas/Pet") == "Pet"

    def test_bare_name_target(self):
        assert make_resolver(SCHEMAS).resolve_mapping_target("Pet") == "Pet"

    def test_unknown_target(self):
        with pytest.raises(UnresolvableReferenceError):
            make_resolver(SCHEMAS).resolve_mapping_target("Dog")


def test_definition_name():
    resolver = make_resolver(SCHEMAS)
    assert resolver.definition_name("#/components/schemas/PetAlias") == "PetAlias"
    assert resolver.definition_name("#/components/schemas/Pet/properties/name") is None
    assert resolver.get_definition("Pet").name == "Pet"


if __name__ == "__main__":
    pytest.main([__file__])
