import json
from pathlib import Path

import pytest

from openapi_to_code.pipeline import CodeGeneratorConfig, PipelineGenerator


def load_test_data():
    """Load test cases from JSON file"""
    test_data_path = Path(__file__).parent / "test_data" / "default_values_tests.json"
    with open(test_data_path) as f:
        return json.load(f)


@pytest.mark.parametrize("test_case", load_test_data(), ids=lambda tc: tc["name"])
def test_default_values_kotlin(test_case):
    """Test default value generation for Kotlin"""
    config = CodeGeneratorConfig()

    # Apply config if provided in test case
    if "config" in test_case:
        for key, value in test_case["config"].items():
            setattr(config, key, value)

    document = {
        "openapi": "3.0.3",
        "components": {"schemas": {"TestClass": {"type": "object", "properties": {"field": test_case["property"]}}}},
    }
    output = PipelineGenerator(document, config).generate("kotlin")

    # Check each expected pattern in the generated output
    for expected in test_case["expected"]:
        assert expected in output, f"Expected '{expected}' not found in output:\n{output}"


if __name__ == "__main__":
    pytest.main([__file__])
