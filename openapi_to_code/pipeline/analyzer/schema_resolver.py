"""
Schema resolver.

Follows $ref chains, flattens allOf compositions into a single ordered
property list and resolves the type of every property, item and value
schema into a TypeRef.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any

from ..errors import ConflictingPropertyTypeError, UnresolvableReferenceError
from ..schema_ast.nodes import (
    AllOfNode,
    AnyNode,
    ArrayNode,
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
from .ir_nodes import (
    UNTYPED,
    CollectionProperty,
    FieldProperty,
    ObjectInlinedProperty,
    ObjectRefProperty,
    PropertyDescriptor,
    TypeKind,
    TypeRef,
    ValidationConstraints,
)
from .name_resolver import NameMapping
from .reference_resolver import ReferenceResolver

logger = logging.getLogger(__name__)

# Types whose defaults can be written as a literal
SCALAR_KINDS = (TypeKind.PRIMITIVE, TypeKind.ENUM)


@dataclass
class FlatProperty:
    """A property after $ref resolution, before classification."""

    name: str = ""
    type_ref: TypeRef = UNTYPED
    variant: type[PropertyDescriptor] = FieldProperty
    source_path: str = ""
    description: str | None = None
    is_nullable: bool = False
    has_default: bool = False
    default_value: Any = None
    constraints: ValidationConstraints = field(default_factory=ValidationConstraints)


@dataclass
class FlatObject:
    """An object schema with its allOf branches merged."""

    source_path: str = ""
    properties: list[FlatProperty] = field(default_factory=list)
    required: set[str] = field(default_factory=set)

    # Value type of the additionalProperties capture, None when absent
    additional: TypeRef | None = None

    discriminator: DiscriminatorDef | None = None
    is_nullable: bool = False
    description: str | None = None

    def get(self, name: str) -> FlatProperty | None:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None


def constraints_of(node: SchemaNode) -> ValidationConstraints:
    """Normalize the validation keywords of a node.

    OpenAPI 3.1 numeric exclusiveMinimum/exclusiveMaximum become the
    bound plus an exclusive flag, as in OpenAPI 3.0.
    """
    if isinstance(node, ArrayNode):
        return ValidationConstraints(min_items=node.min_items, max_items=node.max_items)
    if not isinstance(node, PrimitiveNode):
        return ValidationConstraints()

    minimum, exclusive_minimum = node.minimum, False
    if isinstance(node.exclusive_minimum, bool):
        exclusive_minimum = node.exclusive_minimum
    elif node.exclusive_minimum is not None:
        minimum, exclusive_minimum = node.exclusive_minimum, True

    maximum, exclusive_maximum = node.maximum, False
    if isinstance(node.exclusive_maximum, bool):
        exclusive_maximum = node.exclusive_maximum
    elif node.exclusive_maximum is not None:
        maximum, exclusive_maximum = node.exclusive_maximum, True

    return ValidationConstraints(
        pattern=node.pattern,
        min_length=node.min_length,
        max_length=node.max_length,
        minimum=minimum,
        maximum=maximum,
        exclusive_minimum=exclusive_minimum and minimum is not None,
        exclusive_maximum=exclusive_maximum and maximum is not None,
    )


class SchemaResolver:
    """Resolves references and flattens compositions."""

    def __init__(self, ast: SchemaAST, ref_resolver: ReferenceResolver, name_mapping: NameMapping):
        """
        Initialize the resolver.

        Args:
            ast: The parsed schema AST
            ref_resolver: Resolver for $ref pointers
            name_mapping: Synthesized names of inline schemas
        """
        self.ast = ast
        self.ref_resolver = ref_resolver
        self.name_mapping = name_mapping

        # (source_path, node type) -> completed FlatObject; an allOf and its
        # sibling-properties branch share a source_path
        self._flat_cache: dict[tuple[str, str], FlatObject] = {}
        self._lock = threading.Lock()

    def flatten(self, node: SchemaNode, schema_name: str) -> FlatObject:
        """
        Flatten an object-like schema into a single property list.

        Args:
            node: ObjectNode, AllOfNode, UnionNode or RefNode to flatten
            schema_name: Name of the schema being resolved (for errors and naming)

        Returns:
            The merged FlatObject

        Raises:
            ConflictingPropertyTypeError: allOf branches disagree on a property type
            UnresolvableReferenceError: $ref or allOf cycle, dangling pointer
        """
        return self._flatten(node, schema_name, [schema_name])

    def _flatten(self, node: SchemaNode, schema_name: str, stack: list[str]) -> FlatObject:
        if isinstance(node, RefNode):
            return self._flatten_ref(node, schema_name, stack)

        key = (node.source_path, type(node).__name__)
        with self._lock:
            cached = self._flat_cache.get(key)
        if cached is not None:
            return cached

        if isinstance(node, ObjectNode):
            flat = self._flatten_object(node, schema_name)
        elif isinstance(node, AllOfNode):
            flat = self._flatten_allof(node, schema_name, stack)
        elif isinstance(node, UnionNode):
            flat = self._flatten_union(node, schema_name, stack)
        else:
            flat = FlatObject(source_path=node.source_path)

        flat.is_nullable = flat.is_nullable or node.nullable
        if node.description and not flat.description:
            flat.description = node.description

        with self._lock:
            # First writer wins: flattening is deterministic
            return self._flat_cache.setdefault(key, flat)

    def _flatten_ref(self, node: RefNode, schema_name: str, stack: list[str]) -> FlatObject:
        target_name = self.ref_resolver.definition_name(node.ref_path)
        if target_name is not None and target_name in stack:
            chain = " -> ".join([*stack, target_name])
            raise UnresolvableReferenceError(node.ref_path, f"circular composition {chain}", schema_name, node.source_path)

        resolved = self.ref_resolver.resolve(node, schema_name)
        if resolved.target_name is None:
            return self._flatten(resolved.target_node, schema_name, stack)
        if resolved.target_name in stack:
            chain = " -> ".join([*stack, resolved.target_name])
            raise UnresolvableReferenceError(node.ref_path, f"circular composition {chain}", schema_name, node.source_path)
        return self._flatten(resolved.target_node, resolved.target_name, [*stack, resolved.target_name])

    def _flatten_object(self, node: ObjectNode, schema_name: str) -> FlatObject:
        flat = FlatObject(
            source_path=node.source_path,
            required=set(node.required),
            discriminator=node.discriminator,
        )
        for prop in node.properties:
            flat.properties.append(self.resolve_property(prop, schema_name))
        if node.additional_properties is True:
            flat.additional = UNTYPED
        elif isinstance(node.additional_properties, SchemaNode):
            flat.additional = self.type_of(node.additional_properties, schema_name)
        return flat

    def _flatten_allof(self, node: AllOfNode, schema_name: str, stack: list[str]) -> FlatObject:
        flat = FlatObject(source_path=node.source_path, discriminator=node.discriminator)
        merged: dict[str, FlatProperty] = {}

        for branch in node.branches:
            branch_flat = self._flatten(branch, schema_name, stack)
            for prop in branch_flat.properties:
                existing = merged.get(prop.name)
                if existing is not None and existing.type_ref.signature() != prop.type_ref.signature():
                    raise ConflictingPropertyTypeError(
                        schema_name,
                        prop.name,
                        existing.type_ref.signature(),
                        prop.type_ref.signature(),
                        prop.source_path,
                    )
                # Later branches refine earlier ones; the first position is kept
                merged[prop.name] = prop
            flat.required |= branch_flat.required
            if branch_flat.additional is not None:
                flat.additional = branch_flat.additional
            # A referenced super's discriminator is not inherited as our own
            if flat.discriminator is None and not isinstance(branch, RefNode):
                flat.discriminator = branch_flat.discriminator
            if branch_flat.description and not flat.description and not isinstance(branch, RefNode):
                flat.description = branch_flat.description

        flat.properties = list(merged.values())
        return flat

    def _flatten_union(self, node: UnionNode, schema_name: str, stack: list[str]) -> FlatObject:
        """Flatten a oneOf/anyOf.

        With a discriminator only the sibling properties belong to the
        schema itself. Without one, the variants' properties are merged and
        a property is required only when every variant requires it.
        """
        flat = FlatObject(source_path=node.source_path, discriminator=node.discriminator)
        if node.base is not None:
            base = self._flatten(node.base, schema_name, stack)
            flat.properties = list(base.properties)
            flat.required = set(base.required)
            flat.additional = base.additional
        if node.discriminator is not None:
            return flat

        merged: dict[str, FlatProperty] = {p.name: p for p in flat.properties}
        required_in_all: set[str] | None = None
        for variant in node.variants:
            variant_flat = self._flatten(variant, schema_name, stack)
            for prop in variant_flat.properties:
                existing = merged.get(prop.name)
                if existing is not None and existing.type_ref.signature() != prop.type_ref.signature():
                    raise ConflictingPropertyTypeError(
                        schema_name,
                        prop.name,
                        existing.type_ref.signature(),
                        prop.type_ref.signature(),
                        prop.source_path,
                    )
                merged.setdefault(prop.name, prop)
            required_in_all = variant_flat.required if required_in_all is None else required_in_all & variant_flat.required

        flat.properties = list(merged.values())
        flat.required |= required_in_all or set()
        return flat

    def resolve_property(self, prop: PropertyDef, schema_name: str) -> FlatProperty:
        """Resolve the type, nullability and default of one declared property."""
        node = prop.type_node or AnyNode(source_path=prop.source_path)
        wrapper = node

        # allOf: [{$ref: X}] is a reference to X with the wrapper's keywords
        if isinstance(node, AllOfNode) and node.single_ref() is not None:
            node = node.single_ref()

        is_nullable = wrapper.nullable or node.nullable
        has_default, default_value = wrapper.has_default, wrapper.default_value
        description = wrapper.description
        target = node

        if isinstance(node, RefNode):
            resolved = self.ref_resolver.resolve(node, schema_name)
            target = resolved.target_node
            is_nullable = is_nullable or target.nullable
            if not has_default and isinstance(target, (PrimitiveNode, EnumNode)):
                has_default, default_value = target.has_default, target.default_value
            description = description or target.description

        type_ref = self.type_of(node, schema_name)

        if has_default and type_ref.kind not in SCALAR_KINDS:
            logger.warning(
                "Ignoring default %r of %s.%s: defaults are only supported on scalar and enum properties",
                default_value,
                schema_name,
                prop.name,
            )
            has_default, default_value = False, None

        return FlatProperty(
            name=prop.name,
            type_ref=type_ref,
            variant=self._variant_of(node, type_ref),
            source_path=prop.source_path,
            description=description,
            is_nullable=is_nullable,
            has_default=has_default,
            default_value=default_value,
            constraints=constraints_of(target),
        )

    def _variant_of(self, node: SchemaNode, type_ref: TypeRef) -> type[PropertyDescriptor]:
        if type_ref.kind == TypeKind.OBJECT:
            return ObjectRefProperty if isinstance(node, RefNode) else ObjectInlinedProperty
        if type_ref.kind in (TypeKind.ARRAY, TypeKind.MAP):
            return CollectionProperty
        return FieldProperty

    def type_of(self, node: SchemaNode, schema_name: str, inlining: frozenset[str] = frozenset()) -> TypeRef:
        """
        Resolve the type a schema node denotes where it is used.

        Args:
            node: The schema node (property, item or value schema)
            schema_name: Schema being resolved (for error messages)
            inlining: Names of array/map/primitive schemas already being
                inlined above this node; a reference back to one is untyped

        Returns:
            TypeRef for the node
        """
        if isinstance(node, AllOfNode) and node.single_ref() is not None:
            node = node.single_ref()

        if isinstance(node, RefNode):
            resolved = self.ref_resolver.resolve(node, schema_name)
            if resolved.target_name is None:
                # Pointer into another schema: type it as if it were inline there
                return self.type_of(resolved.target_node, schema_name, inlining)
            return self._type_of_named(resolved.target_name, resolved.target_node, schema_name, inlining)

        inline_name = self.name_mapping.name_for(node)
        if inline_name is not None:
            return self._type_of_named(inline_name, node, schema_name, inlining)

        if isinstance(node, PrimitiveNode):
            return TypeRef(kind=TypeKind.PRIMITIVE, name=node.type_name, format=node.format)
        if isinstance(node, ArrayNode):
            return TypeRef(kind=TypeKind.ARRAY, name="array", items=self.type_of(node.items, schema_name, inlining) if node.items else UNTYPED)
        if isinstance(node, ObjectNode) and node.is_map:
            values = UNTYPED
            if isinstance(node.additional_properties, SchemaNode):
                values = self.type_of(node.additional_properties, schema_name, inlining)
            return TypeRef(kind=TypeKind.MAP, name="map", values=values)
        if isinstance(node, UnionNode):
            logger.debug("Inline %s without a name in %s is untyped", node.union_type, schema_name)
        return UNTYPED

    def _type_of_named(self, name: str, target: SchemaNode, schema_name: str, inlining: frozenset[str]) -> TypeRef:
        """Type of a named (component or synthesized) schema used by reference."""
        if isinstance(target, EnumNode):
            return TypeRef(kind=TypeKind.ENUM, name=name, format=target.format)
        if self.is_scalar_union(target, schema_name):
            return UNTYPED
        if isinstance(target, (AllOfNode, UnionNode)) or (isinstance(target, ObjectNode) and not target.is_map):
            return TypeRef(kind=TypeKind.OBJECT, name=name)
        if name in inlining:
            logger.debug("Recursive reference to %s in %s is untyped", name, schema_name)
            return UNTYPED
        # Primitive, array and map schemas are inlined at their use site
        return self._inline_structure(target, schema_name, inlining | {name})

    def _inline_structure(self, target: SchemaNode, schema_name: str, inlining: frozenset[str]) -> TypeRef:
        if isinstance(target, PrimitiveNode):
            return TypeRef(kind=TypeKind.PRIMITIVE, name=target.type_name, format=target.format)
        if isinstance(target, ArrayNode):
            items = self.type_of(target.items, schema_name, inlining) if target.items else UNTYPED
            return TypeRef(kind=TypeKind.ARRAY, name="array", items=items)
        if isinstance(target, ObjectNode):
            values = UNTYPED
            if isinstance(target.additional_properties, SchemaNode):
                values = self.type_of(target.additional_properties, schema_name, inlining)
            return TypeRef(kind=TypeKind.MAP, name="map", values=values)
        return UNTYPED

    def is_scalar_union(self, node: SchemaNode, schema_name: str) -> bool:
        """True for a oneOf/anyOf without discriminator whose variants declare no properties."""
        if not isinstance(node, UnionNode) or node.discriminator is not None:
            return False
        return not self._declares_properties(node, schema_name, set())

    def _declares_properties(self, node: SchemaNode, schema_name: str, visited: set[str]) -> bool:
        # Mirrors which properties _flatten would collect, without flattening
        if isinstance(node, RefNode):
            resolved = self.ref_resolver.resolve(node, schema_name)
            key = resolved.target_name or resolved.target_node.source_path
            if key in visited:
                return False
            visited.add(key)
            return self._declares_properties(resolved.target_node, schema_name, visited)
        if isinstance(node, ObjectNode):
            return bool(node.properties)
        if isinstance(node, AllOfNode):
            return any(self._declares_properties(branch, schema_name, visited) for branch in node.branches)
        if isinstance(node, UnionNode):
            if node.base is not None and node.base.properties:
                return True
            if node.discriminator is not None:
                return False
            return any(self._declares_properties(variant, schema_name, visited) for variant in node.variants)
        return False
