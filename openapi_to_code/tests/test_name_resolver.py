"""
Tests for inline schema naming.
"""

from __future__ import annotations

import pytest

from openapi_to_code.pipeline.analyzer import NameResolver
from openapi_to_code.pipeline.schema_ast import SchemaParser


def inline_names(schemas: dict) -> list[str]:
    ast = SchemaParser().parse({"openapi": "3.0.3", "components": {"schemas": schemas}})
    return [inline.name for inline in NameResolver().resolve_names(ast).inline_schemas]


def test_inline_object_property():
    schemas = {"Pet": {"type": "object", "properties": {"owner": {"type": "object", "properties": {"name": {"type": "string"}}}}}}
    assert inline_names(schemas) == ["PetOwner"]


def test_inline_enum_property():
    schemas = {"Order": {"type": "object", "properties": {"status": {"type": "string", "enum": ["open", "closed"]}}}}
    assert inline_names(schemas) == ["OrderStatus"]


def test_array_items_take_the_property_name():
    schemas = {"Pet": {"type": "object", "properties": {"tags": {"type": "array", "items": {"type": "object", "properties": {"label": {"type": "string"}}}}}}}
    assert inline_names(schemas) == ["PetTags"]


def test_top_level_array_items():
    schemas = {"Pets": {"type": "array", "items": {"type": "object", "properties": {"id": {"type": "integer"}}}}}
    assert inline_names(schemas) == ["PetsItem"]


def test_map_values():
    schemas = {
        "Pet": {
            "type": "object",
            "properties": {"scores": {"type": "object", "additionalProperties": {"type": "string", "enum": ["low", "high"]}}},
        }
    }
    assert inline_names(schemas) == ["PetScoresValue"]


def test_nested_inline_schemas():
    schemas = {
        "Pet": {
            "type": "object",
            "properties": {
                "owner": {
                    "type": "object",
                    "properties": {"address": {"type": "object", "properties": {"city": {"type": "string"}}}},
                }
            },
        }
    }
    assert inline_names(schemas) == ["PetOwner", "PetOwnerAddress"]


def test_collision_with_component_name():
    schemas = {
        "Pet": {"type": "object", "properties": {"owner": {"type": "object", "properties": {"name": {"type": "string"}}}}},
        "PetOwner": {"type": "object", "properties": {"id": {"type": "integer"}}},
    }
    assert inline_names(schemas) == ["PetOwner2"]


def test_primitives_maps_and_refs_are_not_named():
    schemas = {
        "Pet": {
            "type": "object",
            "properties": {
                "name": {"type": "string"},
                "labels": {"type": "object", "additionalProperties": {"type": "string"}},
                "owner": {"$ref": "#/components/schemas/Owner"},
                "friend": {"allOf": [{"$ref": "#/components/schemas/Owner"}]},
            },
        },
        "Owner": {"type": "object", "properties": {"id": {"type": "integer"}}},
    }
    assert inline_names(schemas) == []


def test_names_do_not_depend_on_resolution():
    schemas = {
        "B": {"type": "object", "properties": {"x": {"type": "object", "properties": {"y": {"type": "string"}}}}},
        "A": {"type": "object", "properties": {"x": {"type": "object", "properties": {"y": {"type": "string"}}}}},
    }
    assert inline_names(schemas) == ["BX", "AX"]
    assert inline_names(schemas) == inline_names(schemas)


if __name__ == "__main__":
    pytest.main([__file__])
