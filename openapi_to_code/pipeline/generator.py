"""
Pipeline generator.

Wires the phases together: parse the document, build the type model and
render it with a backend.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from .analyzer import TypeModel, TypeModelBuilder
from .backends import KotlinBackend
from .config import CodeGeneratorConfig
from .schema_ast import SchemaAST, SchemaParser

logger = logging.getLogger(__name__)

# Output formats and the language used to validate them
OUTPUT_FORMATS = {"kotlin": "kotlin", "model": "json"}


class PipelineGenerator:
    """Generates code from an OpenAPI document."""

    def __init__(self, document: dict[str, Any], config: CodeGeneratorConfig | None = None):
        """
        Initialize the generator.

        Args:
            document: The OpenAPI document (already loaded from JSON or YAML)
            config: Generation options
        """
        self.document = document
        self.config = config or CodeGeneratorConfig()
        self._ast: SchemaAST | None = None
        self._model: TypeModel | None = None

    @property
    def ast(self) -> SchemaAST:
        if self._ast is None:
            self._ast = SchemaParser().parse(self.document)
            logger.debug("Parsed %d component schemas (OpenAPI %s)", len(self._ast.definitions), self._ast.openapi_version or "unknown")
        return self._ast

    def build_model(self) -> TypeModel:
        """
        Build the type model of the document.

        Raises:
            TypeModelError: On any input error; no partial model is returned
        """
        if self._model is None:
            self._model = TypeModelBuilder(self.ast, self.config).build()
            logger.debug("Built type model with %d schemas", len(self._model))
        return self._model

    def generate(self, output_format: str = "kotlin", generation_comment: str | None = None) -> str:
        """
        Generate output for the document.

        Args:
            output_format: "kotlin" for Kotlin models, "model" for a JSON dump of the type model
            generation_comment: Comment placed at the top of Kotlin output

        Returns:
            Generated content
        """
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Unknown output format: {output_format}")

        model = self.build_model()
        if output_format == "model":
            return json.dumps(model.to_dict(), indent=2, default=str) + "\n"
        return KotlinBackend(self.config).generate(model, generation_comment)
