"""
Pipeline - OpenAPI schemas to a type model and Kotlin code.

1. Phase 1 (Parser): Parse the document's schemas into a Schema AST
2. Phase 2 (Analyzer): Name inline schemas, resolve references, flatten
   allOf, analyze discriminators, classify properties, build the TypeModel
3. Phase 3 (Backend): Render the TypeModel with Jinja2 templates
4. Phase 4 (Writer): Atomically write the output
"""

from __future__ import annotations

from .atomic_writer import AtomicWriter
from .config import CodeGeneratorConfig, DiscriminatorPolicy, ValidationLibrary
from .errors import (
    ConflictingPropertyTypeError,
    CyclicHierarchyError,
    DocumentLoadError,
    GeneratedCodeError,
    IncompatibleDefaultError,
    MissingDiscriminatorPropertyError,
    SubTypeDiscriminatorWithMultipleValuesError,
    SubTypeDiscriminatorWithNoValueError,
    TypeModelError,
    UnknownEnumDefaultError,
    UnresolvableReferenceError,
)
from .generator import PipelineGenerator

__all__ = [
    "PipelineGenerator",
    "CodeGeneratorConfig",
    "DiscriminatorPolicy",
    "ValidationLibrary",
    "AtomicWriter",
    "TypeModelError",
    "DocumentLoadError",
    "UnresolvableReferenceError",
    "ConflictingPropertyTypeError",
    "MissingDiscriminatorPropertyError",
    "UnknownEnumDefaultError",
    "IncompatibleDefaultError",
    "SubTypeDiscriminatorWithNoValueError",
    "SubTypeDiscriminatorWithMultipleValuesError",
    "CyclicHierarchyError",
    "GeneratedCodeError",
]
