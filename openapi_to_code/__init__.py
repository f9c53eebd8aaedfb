"""OpenAPI to Code Generator

Compiles the schemas of an OpenAPI 3 document into a normalized type model
and generates Jackson-annotated Kotlin data classes from it.
"""

__version__ = "1.0.0"

from .loader import load_document
from .pipeline import (
    AtomicWriter,
    CodeGeneratorConfig,
    DiscriminatorPolicy,
    PipelineGenerator,
    TypeModelError,
    ValidationLibrary,
)

__all__ = [
    "PipelineGenerator",
    "CodeGeneratorConfig",
    "DiscriminatorPolicy",
    "ValidationLibrary",
    "TypeModelError",
    "AtomicWriter",
    "load_document",
]
