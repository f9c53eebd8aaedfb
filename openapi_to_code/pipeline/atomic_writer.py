"""
Atomic file writer for generated code.

A generation run either replaces the output file completely or leaves it
untouched.
"""

from __future__ import annotations

import json
import logging
import re
import tempfile
from collections.abc import Callable
from pathlib import Path

from .errors import GeneratedCodeError

logger = logging.getLogger(__name__)

# Kotlin string literals, ignored when checking brackets
_STRING_LITERAL = re.compile(r'"(?:\\.|[^"\\])*"')


class AtomicWriter:
    """Handles atomic file writes with validation.

    Uses a two-phase commit approach:
    1. Write to a temporary file in the same directory
    2. Validate the content
    3. Atomically replace the target file
    """

    def __init__(
        self,
        validate_kotlin: Callable[[str], None] | None = None,
        require_package: bool = True,
    ):
        """Initialize the atomic writer.

        Args:
            validate_kotlin: Optional validation function for Kotlin code
            require_package: Whether to require a package declaration in Kotlin output
        """
        self._validate_kotlin = validate_kotlin or self._default_validate_kotlin
        self._require_package = require_package

    def write(
        self,
        path: Path,
        content: str,
        language: str,
        validate: bool = True,
    ) -> None:
        """Write content to file atomically.

        Args:
            path: Target file path
            content: Content to write
            language: Language for validation ("kotlin" or "json")
            validate: Whether to validate before finalizing

        Raises:
            GeneratedCodeError: If validation fails
            OSError: If file operations fail
        """
        path.parent.mkdir(parents=True, exist_ok=True)

        # Same directory ensures atomic rename on the same filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            text=True,
        )
        temp_path = Path(temp_path_str)

        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)

            if validate:
                self._validate_content(content, language)

            temp_path.replace(path)
            logger.debug("Wrote %d characters to %s", len(content), path)

        except Exception:
            if temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError:
                    logger.warning("Could not remove temporary file %s", temp_path)
            raise

    def _validate_content(self, content: str, language: str) -> None:
        if language == "kotlin":
            self._validate_kotlin(content)
        elif language == "json":
            try:
                json.loads(content)
            except ValueError as e:
                raise GeneratedCodeError(f"Generated model dump is not valid JSON: {e}") from e

    def _default_validate_kotlin(self, content: str) -> None:
        """Default Kotlin validation.

        Args:
            content: Kotlin code to validate

        Raises:
            GeneratedCodeError: If validation fails
        """
        # Basic structural checks (no full parsing)
        if self._require_package and not any(line.startswith("package ") for line in content.splitlines()):
            raise GeneratedCodeError("Generated Kotlin code is missing package declaration")

        code = _STRING_LITERAL.sub('""', "\n".join(line for line in content.splitlines() if not line.lstrip().startswith("//")))
        for opening, closing in (("{", "}"), ("(", ")")):
            open_count = code.count(opening)
            close_count = code.count(closing)
            if open_count != close_count:
                raise GeneratedCodeError(f"Generated Kotlin code has unbalanced '{opening}{closing}': {open_count} open, {close_count} close")
