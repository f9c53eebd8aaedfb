"""
AST (Abstract Syntax Tree) node definitions for OpenAPI schemas.

These nodes represent the parsed structure of the document's schemas
before any reference resolution, allOf flattening or classification.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class SchemaNode:
    """Base class for all AST nodes."""

    # Location in the document as a JSON pointer (for error messages and naming)
    source_path: str = ""

    # Raw x-* extensions
    metadata: dict[str, Any] = field(default_factory=dict)

    # nullable: true, type: [X, "null"] or oneOf: [X, {type: null}]
    nullable: bool = False

    description: str | None = None

    # OpenAPI default (a null default counts as no default)
    default_value: Any = None
    has_default: bool = False


@dataclass
class AnyNode(SchemaNode):
    """A schema with no usable type information."""


@dataclass
class PrimitiveNode(SchemaNode):
    """A string, integer, number or boolean schema."""

    type_name: str = ""
    format: str | None = None

    # Validation constraints
    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None
    minimum: float | None = None
    maximum: float | None = None
    # OpenAPI 3.0 uses booleans, 3.1 uses numbers
    exclusive_minimum: bool | float | None = None
    exclusive_maximum: bool | float | None = None


@dataclass
class EnumNode(SchemaNode):
    """An enum schema."""

    values: list[Any] = field(default_factory=list)
    type_name: str = "string"
    format: str | None = None


@dataclass
class RefNode(SchemaNode):
    """A $ref (unresolved reference)."""

    ref_path: str = ""


@dataclass
class ArrayNode(SchemaNode):
    """An array schema."""

    items: SchemaNode | None = None
    min_items: int | None = None
    max_items: int | None = None


@dataclass
class DiscriminatorDef:
    """The discriminator object of a polymorphic schema."""

    property_name: str = ""
    # discriminator value -> $ref or bare schema name
    mapping: dict[str, str] = field(default_factory=dict)


@dataclass
class PropertyDef(SchemaNode):
    """A property declared in an object schema."""

    name: str = ""
    type_node: SchemaNode | None = None
    is_required: bool = False


@dataclass
class ObjectNode(SchemaNode):
    """An object schema with properties."""

    properties: list[PropertyDef] = field(default_factory=list)
    required: list[str] = field(default_factory=list)

    # None when absent, True for untyped capture, a node for typed values
    additional_properties: bool | SchemaNode | None = None

    discriminator: DiscriminatorDef | None = None

    # Whether the schema explicitly said type: object
    is_explicit_object: bool = False

    @property
    def is_map(self) -> bool:
        """An object without declared properties is a string-keyed map."""
        return not self.properties and self.discriminator is None


@dataclass
class AllOfNode(SchemaNode):
    """An allOf composition; sibling properties form a trailing branch."""

    branches: list[SchemaNode] = field(default_factory=list)
    discriminator: DiscriminatorDef | None = None

    def single_ref(self) -> RefNode | None:
        """Return the $ref of an ``allOf: [{$ref: X}]`` wrapper."""
        if len(self.branches) == 1 and isinstance(self.branches[0], RefNode) and self.discriminator is None:
            return self.branches[0]
        return None


@dataclass
class UnionNode(SchemaNode):
    """A oneOf or anyOf union."""

    variants: list[SchemaNode] = field(default_factory=list)
    union_type: str = "oneOf"  # "oneOf" or "anyOf"
    discriminator: DiscriminatorDef | None = None

    # Sibling properties declared next to the union keyword
    base: ObjectNode | None = None


@dataclass
class DefinitionNode(SchemaNode):
    """A named component schema."""

    name: str = ""
    body: SchemaNode | None = None


@dataclass
class SchemaAST:
    """Root of the parsed document."""

    # Component schemas in document order
    definitions: list[DefinitionNode] = field(default_factory=list)

    openapi_version: str = ""

    # Raw document for JSON pointer resolution
    raw_document: dict[str, Any] = field(default_factory=dict)

    def definition(self, name: str) -> DefinitionNode | None:
        for def_node in self.definitions:
            if def_node.name == name:
                return def_node
        return None
