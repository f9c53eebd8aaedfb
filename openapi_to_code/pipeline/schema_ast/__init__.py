"""
Schema AST (Abstract Syntax Tree) module.

Contains the AST node definitions and parser for OpenAPI schemas.
"""

from __future__ import annotations

from .nodes import (
    AllOfNode,
    AnyNode,
    ArrayNode,
    DefinitionNode,
    DiscriminatorDef,
    EnumNode,
    ObjectNode,
    PrimitiveNode,
    PropertyDef,
    RefNode,
    SchemaAST,
    SchemaNode,
    UnionNode,
)
from .parser import SchemaParser

__all__ = [
    "SchemaNode",
    "AnyNode",
    "ObjectNode",
    "ArrayNode",
    "RefNode",
    "PrimitiveNode",
    "EnumNode",
    "UnionNode",
    "AllOfNode",
    "DefinitionNode",
    "DiscriminatorDef",
    "PropertyDef",
    "SchemaAST",
    "SchemaParser",
]
