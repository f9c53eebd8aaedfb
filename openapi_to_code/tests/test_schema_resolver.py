"""
Tests for allOf flattening and property type resolution.
"""

from __future__ import annotations

import logging

import pytest

from openapi_to_code.pipeline.analyzer import (
    CollectionProperty,
    FieldProperty,
    NameResolver,
    ObjectInlinedProperty,
    ObjectRefProperty,
    ReferenceResolver,
    SchemaResolver,
    TypeKind,
)
from openapi_to_code.pipeline.errors import ConflictingPropertyTypeError, UnresolvableReferenceError
from openapi_to_code.pipeline.schema_ast import SchemaParser


def flatten(schemas: dict, name: str):
    ast = SchemaParser().parse({"openapi": "3.0.3", "components": {"schemas": schemas}})
    resolver = SchemaResolver(ast, ReferenceResolver(ast), NameResolver().resolve_names(ast))
    return resolver.flatten(ast.definition(name).body, name)


BASE = {"type": "object", "required": ["id"], "properties": {"id": {"type": "integer"}, "age": {"type": "integer"}}}


class TestAllOf:
    def test_branches_merge_in_order(self):
        flat = flatten(
            {
                "Base": BASE,
                "Person": {
                    "allOf": [
                        {"$ref": "#/components/schemas/Base"},
                        {"type": "object", "required": ["name"], "properties": {"name": {"type": "string"}}},
                    ]
                },
            },
            "Person",
        )
        assert [p.name for p in flat.properties] == ["id", "age", "name"]
        assert flat.required == {"id", "name"}

    def test_later_branch_refines_property_in_place(self):
        flat = flatten(
            {
                "Base": BASE,
                "Person": {
                    "allOf": [
                        {"$ref": "#/components/schemas/Base"},
                        {"properties": {"age": {"type": "integer", "minimum": 0, "description": "Age in years"}}},
                    ]
                },
            },
            "Person",
        )
        assert [p.name for p in flat.properties] == ["id", "age"]
        age = flat.get("age")
        assert age.description == "Age in years"
        assert age.constraints.minimum == 0

    def test_conflicting_property_types(self):
        schemas = {
            "Base": BASE,
            "Person": {"allOf": [{"$ref": "#/components/schemas/Base"}, {"properties": {"age": {"type": "string"}}}]},
        }
        with pytest.raises(ConflictingPropertyTypeError) as exc_info:
            flatten(schemas, "Person")
        error = exc_info.value
        assert error.schema_name == "Person"
        assert error.property_name == "age"
        assert (error.first_type, error.second_type) == ("integer", "string")

    def test_format_does_not_conflict(self):
        schemas = {
            "Base": BASE,
            "Person": {"allOf": [{"$ref": "#/components/schemas/Base"}, {"properties": {"age": {"type": "integer", "format": "int64"}}}]},
        }
        assert flatten(schemas, "Person").get("age").type_ref.format == "int64"

    def test_composition_cycle(self):
        schemas = {
            "A": {"allOf": [{"$ref": "#/components/schemas/B"}]},
            "B": {"allOf": [{"$ref": "#/components/schemas/A"}]},
        }
        with pytest.raises(UnresolvableReferenceError, match="circular composition"):
            flatten(schemas, "A")

    def test_nested_allof(self):
        schemas = {
            "Base": BASE,
            "Middle": {"allOf": [{"$ref": "#/components/schemas/Base"}, {"properties": {"m": {"type": "string"}}}]},
            "Leaf": {"allOf": [{"$ref": "#/components/schemas/Middle"}, {"properties": {"l": {"type": "boolean"}}}]},
        }
        assert [p.name for p in flatten(schemas, "Leaf").properties] == ["id", "age", "m", "l"]


class TestUnions:
    def test_variants_merge_without_discriminator(self):
        schemas = {
            "Either": {
                "oneOf": [
                    {"type": "object", "required": ["a", "c"], "properties": {"a": {"type": "string"}, "c": {"type": "string"}}},
                    {"type": "object", "required": ["a"], "properties": {"a": {"type": "string"}, "b": {"type": "integer"}}},
                ]
            }
        }
        flat = flatten(schemas, "Either")
        assert [p.name for p in flat.properties] == ["a", "c", "b"]
        assert flat.required == {"a"}

    def test_only_sibling_properties_with_discriminator(self):
        schemas = {
            "Shape": {
                "oneOf": [{"$ref": "#/components/schemas/Circle"}],
                "discriminator": {"propertyName": "kind"},
                "properties": {"color": {"type": "string"}},
            },
            "Circle": {"type": "object", "properties": {"kind": {"type": "string"}, "radius": {"type": "number"}}},
        }
        assert [p.name for p in flatten(schemas, "Shape").properties] == ["color"]


class TestPropertyTypes:
    SCHEMAS = {
        "Pet": {"type": "object", "properties": {"name": {"type": "string"}}},
        "Status": {"type": "string", "enum": ["on", "off"]},
        "Holder": {
            "type": "object",
            "properties": {
                "pet": {"$ref": "#/components/schemas/Pet"},
                "wrapped": {"allOf": [{"$ref": "#/components/schemas/Pet"}], "nullable": True, "description": "The pet"},
                "status": {"$ref": "#/components/schemas/Status"},
                "owner": {"type": "object", "properties": {"id": {"type": "integer"}}},
                "tags": {"type": "array", "items": {"type": "string"}, "minItems": 1},
                "labels": {"type": "object", "additionalProperties": {"type": "integer"}},
                "value": {"oneOf": [{"type": "string"}, {"type": "integer"}]},
                "petName": {"$ref": "#/components/schemas/Pet/properties/name"},
                "when": {"type": "string", "format": "date-time"},
            },
        },
    }

    @pytest.fixture
    def flat(self):
        return flatten(self.SCHEMAS, "Holder")

    def test_reference_to_object(self, flat):
        pet = flat.get("pet")
        assert pet.type_ref.kind == TypeKind.OBJECT
        assert pet.type_ref.name == "Pet"
        assert pet.variant is ObjectRefProperty

    def test_single_ref_allof_wrapper(self, flat):
        wrapped = flat.get("wrapped")
        assert wrapped.type_ref.name == "Pet"
        assert wrapped.is_nullable
        assert wrapped.description == "The pet"
        assert wrapped.variant is ObjectRefProperty

    def test_reference_to_enum(self, flat):
        status = flat.get("status")
        assert status.type_ref.kind == TypeKind.ENUM
        assert status.variant is FieldProperty

    def test_inline_object(self, flat):
        owner = flat.get("owner")
        assert owner.type_ref.name == "HolderOwner"
        assert owner.variant is ObjectInlinedProperty

    def test_array(self, flat):
        tags = flat.get("tags")
        assert tags.type_ref.kind == TypeKind.ARRAY
        assert tags.type_ref.items.name == "string"
        assert tags.variant is CollectionProperty
        assert tags.constraints.min_items == 1

    def test_map(self, flat):
        labels = flat.get("labels")
        assert labels.type_ref.kind == TypeKind.MAP
        assert labels.type_ref.values.name == "integer"

    def test_inline_union_is_untyped(self, flat):
        assert flat.get("value").type_ref.kind == TypeKind.UNTYPED

    def test_pointer_into_another_schema(self, flat):
        pet_name = flat.get("petName")
        assert pet_name.type_ref.kind == TypeKind.PRIMITIVE
        assert pet_name.type_ref.name == "string"

    def test_format(self, flat):
        assert flat.get("when").type_ref.format == "date-time"


class TestAdditionalProperties:
    def test_typed(self):
        flat = flatten({"Bag": {"type": "object", "properties": {"id": {"type": "string"}}, "additionalProperties": {"type": "integer"}}}, "Bag")
        assert flat.additional.name == "integer"

    def test_untyped(self):
        flat = flatten({"Bag": {"type": "object", "properties": {"id": {"type": "string"}}, "additionalProperties": True}}, "Bag")
        assert flat.additional.kind == TypeKind.UNTYPED

    def test_absent(self):
        assert flatten({"Bag": {"type": "object", "properties": {"id": {"type": "string"}}}}, "Bag").additional is None


class TestDefaultsAndConstraints:
    def test_non_scalar_default_is_dropped(self, caplog):
        schemas = {"Pet": {"type": "object", "properties": {"tags": {"type": "array", "items": {"type": "string"}, "default": []}}}}
        with caplog.at_level(logging.WARNING):
            tags = flatten(schemas, "Pet").get("tags")
        assert not tags.has_default
        assert "Ignoring default" in caplog.text

    def test_default_from_referenced_schema(self):
        schemas = {
            "Level": {"type": "integer", "default": 3},
            "Pet": {"type": "object", "properties": {"level": {"$ref": "#/components/schemas/Level"}}},
        }
        level = flatten(schemas, "Pet").get("level")
        assert level.has_default
        assert level.default_value == 3

    def test_openapi_31_exclusive_bounds(self):
        schemas = {"Pet": {"type": "object", "properties": {"age": {"type": "integer", "exclusiveMinimum": 0, "maximum": 30}}}}
        constraints = flatten(schemas, "Pet").get("age").constraints
        assert constraints.minimum == 0
        assert constraints.exclusive_minimum
        assert constraints.maximum == 30
        assert not constraints.exclusive_maximum

    def test_openapi_30_exclusive_bounds(self):
        schemas = {"Pet": {"type": "object", "properties": {"weight": {"type": "number", "minimum": 1, "exclusiveMinimum": True}}}}
        constraints = flatten(schemas, "Pet").get("weight").constraints
        assert constraints.minimum == 1
        assert constraints.exclusive_minimum


if __name__ == "__main__":
    pytest.main([__file__])
