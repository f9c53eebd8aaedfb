"""
Tests for document loading.
"""

from __future__ import annotations

import json

import pytest

from openapi_to_code import load_document
from openapi_to_code.pipeline import DocumentLoadError


def test_yaml(tmp_path):
    path = tmp_path / "api.yaml"
    path.write_text("openapi: 3.0.3\ncomponents:\n  schemas:\n    Pet:\n      type: object\n")
    assert load_document(path)["components"]["schemas"]["Pet"] == {"type": "object"}


def test_json(tmp_path):
    path = tmp_path / "api.json"
    path.write_text(json.dumps({"openapi": "3.1.0", "components": {"schemas": {}}}))
    assert load_document(path)["openapi"] == "3.1.0"


def test_yaml_accepts_json_content(tmp_path):
    path = tmp_path / "api.yml"
    path.write_text('{"openapi": "3.0.3"}')
    assert load_document(path) == {"openapi": "3.0.3"}


@pytest.mark.parametrize(
    "name,content",
    [
        ("api.json", "{not json"),
        ("api.yaml", "openapi: [unclosed\n"),
        ("api.yaml", "- just\n- a list\n"),
    ],
)
def test_invalid_documents(tmp_path, name, content):
    path = tmp_path / name
    path.write_text(content)
    with pytest.raises(DocumentLoadError) as exc_info:
        load_document(path)
    assert exc_info.value.source_path == str(path)


def test_missing_file(tmp_path):
    with pytest.raises(DocumentLoadError, match="Failed to read"):
        load_document(tmp_path / "missing.yaml")


if __name__ == "__main__":
    pytest.main([__file__])
