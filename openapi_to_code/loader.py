"""
Loading of OpenAPI documents from JSON or YAML files.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from .pipeline.errors import DocumentLoadError


def load_document(path: Path) -> dict[str, Any]:
    """Load an OpenAPI document.

    ``.json`` files are read with the json module, anything else as YAML
    (a superset of JSON).

    Args:
        path: Path to the document.

    Returns:
        The parsed document.

    Raises:
        DocumentLoadError: If the file cannot be read or parsed.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise DocumentLoadError(f"Failed to read document: {e}", source_path=str(path)) from e

    try:
        if path.suffix.lower() == ".json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (ValueError, yaml.YAMLError) as e:
        raise DocumentLoadError(f"Invalid document: {e}", source_path=str(path)) from e

    if not isinstance(data, dict):
        raise DocumentLoadError("Document root must be a mapping", source_path=str(path))

    return data
