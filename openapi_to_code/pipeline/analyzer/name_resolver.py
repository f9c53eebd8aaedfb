"""
Name resolver for inline schemas.

Gives every inline object or enum schema a deterministic name derived
only from its position in the document, so resolution order never
changes the output.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ...utils import snake_to_pascal_case
from ..schema_ast.nodes import (
    AllOfNode,
    ArrayNode,
    EnumNode,
    ObjectNode,
    SchemaAST,
    SchemaNode,
    UnionNode,
)


@dataclass
class InlineSchema:
    """An inline schema promoted to a named schema."""

    name: str = ""
    node: SchemaNode | None = None
    parent_name: str = ""


@dataclass
class NameMapping:
    """Result of name resolution."""

    # source_path of the inline node -> synthesized name
    inline_names: dict[str, str] = field(default_factory=dict)

    # Inline schemas in document order
    inline_schemas: list[InlineSchema] = field(default_factory=list)

    def name_for(self, node: SchemaNode) -> str | None:
        return self.inline_names.get(node.source_path)


def is_named_inline(node: SchemaNode | None) -> bool:
    """Whether an inline schema becomes a named schema of its own."""
    if isinstance(node, EnumNode):
        return True
    if isinstance(node, ObjectNode):
        return not node.is_map
    if isinstance(node, AllOfNode):
        return node.single_ref() is None
    return False


class NameResolver:
    """Resolves inline schema names and handles collisions."""

    def resolve_names(self, ast: SchemaAST) -> NameMapping:
        """
        Name all inline schemas of the AST.

        Args:
            ast: The parsed schema AST

        Returns:
            NameMapping with synthesized names
        """
        mapping = NameMapping()
        taken = {def_node.name for def_node in ast.definitions}

        for def_node in ast.definitions:
            if def_node.body is not None:
                self._collect_from_schema(def_node.body, def_node.name, mapping, taken)

        return mapping

    def _collect_from_schema(self, node: SchemaNode, parent_name: str, mapping: NameMapping, taken: set[str]) -> None:
        """Walk the body of a named schema (component or inline)."""
        if isinstance(node, ObjectNode):
            for prop in node.properties:
                if prop.type_node is not None:
                    self._collect_from_usage(prop.type_node, parent_name, prop.name, mapping, taken)
            if isinstance(node.additional_properties, SchemaNode):
                self._collect_from_usage(node.additional_properties, parent_name, "value", mapping, taken)
        elif isinstance(node, AllOfNode):
            for branch in node.branches:
                self._collect_from_schema(branch, parent_name, mapping, taken)
        elif isinstance(node, UnionNode):
            if node.base is not None:
                self._collect_from_schema(node.base, parent_name, mapping, taken)
            if node.discriminator is None:
                for variant in node.variants:
                    self._collect_from_schema(variant, parent_name, mapping, taken)
        elif isinstance(node, ArrayNode) and node.items is not None:
            self._collect_from_usage(node.items, parent_name, "item", mapping, taken)

    def _collect_from_usage(
        self,
        node: SchemaNode,
        parent_name: str,
        field_name: str,
        mapping: NameMapping,
        taken: set[str],
    ) -> None:
        """Name an inline schema used as a property, item or value type."""
        if is_named_inline(node):
            inline_name = self._generate_inline_name(parent_name, field_name, taken)
            mapping.inline_names[node.source_path] = inline_name
            mapping.inline_schemas.append(InlineSchema(name=inline_name, node=node, parent_name=parent_name))
            self._collect_from_schema(node, inline_name, mapping, taken)
        elif isinstance(node, ArrayNode) and node.items is not None:
            self._collect_from_usage(node.items, parent_name, field_name, mapping, taken)
        elif isinstance(node, ObjectNode) and isinstance(node.additional_properties, SchemaNode):
            self._collect_from_usage(node.additional_properties, parent_name, f"{field_name} value", mapping, taken)

    def _generate_inline_name(self, parent_name: str, field_name: str, taken: set[str]) -> str:
        """Generate a unique name for an inline schema."""
        base_name = f"{parent_name}{snake_to_pascal_case(field_name)}"
        unique_name = base_name
        counter = 2
        while unique_name in taken:
            unique_name = f"{base_name}{counter}"
            counter += 1
        taken.add(unique_name)
        return unique_name
