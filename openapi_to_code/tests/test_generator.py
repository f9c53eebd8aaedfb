"""
Tests for the pipeline generator.
"""

from __future__ import annotations

import json

import pytest

from openapi_to_code.pipeline import PipelineGenerator

DOCUMENT = {
    "openapi": "3.0.3",
    "components": {
        "schemas": {
            "Pet": {"type": "object", "required": ["name"], "properties": {"name": {"type": "string"}, "age": {"type": "integer", "default": 1}}},
        }
    },
}


def test_model_is_built_once():
    generator = PipelineGenerator(DOCUMENT)
    assert generator.build_model() is generator.build_model()
    assert generator.ast.definitions[0].name == "Pet"


def test_model_dump():
    dump = PipelineGenerator(DOCUMENT).generate("model")
    assert dump.endswith("}\n")
    model = json.loads(dump)
    name, age = model["Pet"]["properties"]
    assert name == {
        "variant": "FieldProperty",
        "oas_key": "name",
        "type": {"kind": "primitive", "name": "string"},
        "required": True,
        "nullable": False,
        "mandatory": True,
        "modifier": "none",
    }
    assert age["default"] == {"expression": "1", "kind": "literal", "is_wrapped": False}
    assert age["default_literal"] == 1


def test_unknown_format():
    with pytest.raises(ValueError, match="Unknown output format"):
        PipelineGenerator(DOCUMENT).generate("swift")


if __name__ == "__main__":
    pytest.main([__file__])
