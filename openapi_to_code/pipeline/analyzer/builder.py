"""
Type model builder.

Orchestrates schema resolution, discriminator analysis and property
classification over every component and inline schema, producing the
immutable TypeModel consumed by the backends.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from ...utils import to_enum_member_name
from ..config import CodeGeneratorConfig
from ..errors import MissingDiscriminatorPropertyError
from ..schema_ast.nodes import (
    AllOfNode,
    AnyNode,
    ArrayNode,
    EnumNode,
    ObjectNode,
    PrimitiveNode,
    RefNode,
    SchemaAST,
    SchemaNode,
    UnionNode,
)
from .default_coercer import DefaultValueCoercer
from .discriminator import DiscriminatorAnalyzer, Hierarchy
from .ir_nodes import (
    UNTYPED,
    DiscriminatorKey,
    EnumMember,
    FieldProperty,
    SchemaDescriptor,
    SchemaKind,
    TypeKind,
    TypeModel,
    TypeRef,
)
from .name_resolver import NameResolver
from .property_classifier import ClassSettings, PolymorphyRole, PropertyClassifier
from .reference_resolver import ReferenceResolver
from .schema_resolver import FlatObject, FlatProperty, SchemaResolver, constraints_of

logger = logging.getLogger(__name__)

# Extension enabling merge-patch mode for a single schema
MERGE_PATCH_EXTENSION = "x-jackson-nullable-merge-patch"


class ResolutionMemo:
    """Thread-safe map from schema name to its completed descriptor.

    The factory runs outside the lock; when two workers resolve the same
    schema, the first stored descriptor wins and later ones are discarded.
    """

    def __init__(self):
        self._entries: dict[str, SchemaDescriptor] = {}
        self._lock = threading.Lock()

    def get(self, name: str) -> SchemaDescriptor | None:
        with self._lock:
            return self._entries.get(name)

    def get_or_create(self, name: str, factory: Callable[[], SchemaDescriptor]) -> SchemaDescriptor:
        existing = self.get(name)
        if existing is not None:
            return existing
        descriptor = factory()
        with self._lock:
            return self._entries.setdefault(name, descriptor)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


@dataclass
class _SchemaEntry:
    """A schema to resolve: a component or a named inline schema."""

    name: str
    node: SchemaNode
    is_inline: bool = False
    parent_name: str | None = None


class TypeModelBuilder:
    """Builds the TypeModel of a parsed document."""

    def __init__(self, ast: SchemaAST, config: CodeGeneratorConfig | None = None):
        """
        Initialize the builder.

        Args:
            ast: The parsed schema AST
            config: Generation options (merge-patch mode, discriminator policy, workers)
        """
        self.ast = ast
        self.config = config or CodeGeneratorConfig()

        self.ref_resolver = ReferenceResolver(ast)
        self.name_mapping = NameResolver().resolve_names(ast)
        self.schema_resolver = SchemaResolver(ast, self.ref_resolver, self.name_mapping)
        self.analyzer = DiscriminatorAnalyzer(self.ref_resolver)
        self.coercer = DefaultValueCoercer(self._enum_lookup)
        self.classifier = PropertyClassifier(self.config, self.coercer)
        self.memo = ResolutionMemo()

        self._entries: dict[str, _SchemaEntry] = {}
        for def_node in ast.definitions:
            self._entries[def_node.name] = _SchemaEntry(name=def_node.name, node=def_node.body or AnyNode(source_path=def_node.source_path))
        for inline in self.name_mapping.inline_schemas:
            self._entries[inline.name] = _SchemaEntry(name=inline.name, node=inline.node, is_inline=True, parent_name=inline.parent_name)

        self._hierarchy: Hierarchy | None = None
        self._hierarchy_lock = threading.Lock()

    @property
    def hierarchy(self) -> Hierarchy:
        with self._hierarchy_lock:
            if self._hierarchy is None:
                self._hierarchy = self.analyzer.build_hierarchy(self.ast)
            return self._hierarchy

    def build(self) -> TypeModel:
        """
        Resolve every schema of the document.

        Returns:
            TypeModel with components first, then inline schemas, in document order

        Raises:
            TypeModelError: The first input error met; no partial model is returned
        """
        hierarchy = self.hierarchy
        names = list(self._entries)
        logger.debug("Resolving %d schemas (%d polymorphic)", len(names), len(hierarchy.supers))

        if self.config.max_workers > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                descriptors = list(pool.map(self.resolve, names))
        else:
            descriptors = [self.resolve(name) for name in names]

        return TypeModel(descriptors)

    def resolve(self, name: str) -> SchemaDescriptor:
        """
        Resolve one schema by name, memoized.

        Resolving the same name twice returns the same descriptor instance.

        Raises:
            KeyError: No component or inline schema has this name
        """
        if name not in self._entries:
            raise KeyError(name)
        return self.memo.get_or_create(name, lambda: self._resolve(self._entries[name]))

    def _enum_lookup(self, name: str) -> SchemaDescriptor | None:
        if name not in self._entries:
            return None
        descriptor = self.resolve(name)
        return descriptor if descriptor.kind == SchemaKind.ENUM else None

    def _resolve(self, entry: _SchemaEntry) -> SchemaDescriptor:
        logger.debug("Resolving schema %s", entry.name)
        node = entry.node

        # A component that is only a $ref takes the shape of its target
        if isinstance(node, RefNode):
            target = self.ref_resolver.resolve(node, entry.name).target_node
            node = target

        base = dict(
            name=entry.name,
            source_path=entry.node.source_path,
            description=node.description,
            is_nullable=node.nullable,
            is_inline=entry.is_inline,
        )

        if isinstance(node, EnumNode):
            return SchemaDescriptor(
                **base,
                kind=SchemaKind.ENUM,
                enum_members=self._enum_members(node),
                enum_value_type=node.type_name,
            )
        if isinstance(node, PrimitiveNode):
            return SchemaDescriptor(
                **base,
                kind=SchemaKind.PRIMITIVE,
                primitive_type=TypeRef(kind=TypeKind.PRIMITIVE, name=node.type_name, format=node.format),
                constraints=constraints_of(node),
            )
        if isinstance(node, ArrayNode):
            return SchemaDescriptor(
                **base,
                kind=SchemaKind.ARRAY,
                item_type=self.schema_resolver.type_of(node.items, entry.name, frozenset({entry.name})) if node.items else UNTYPED,
                constraints=constraints_of(node),
            )
        if isinstance(node, ObjectNode) and node.is_map:
            value_type = UNTYPED
            if isinstance(node.additional_properties, SchemaNode):
                value_type = self.schema_resolver.type_of(node.additional_properties, entry.name, frozenset({entry.name}))
            return SchemaDescriptor(**base, kind=SchemaKind.MAP, value_type=value_type)
        if isinstance(node, (ObjectNode, AllOfNode, UnionNode)):
            return self._resolve_object(entry, node, base)

        return SchemaDescriptor(**base, kind=SchemaKind.PRIMITIVE, primitive_type=UNTYPED)

    def _enum_members(self, node: EnumNode) -> tuple[EnumMember, ...]:
        members = []
        taken: set[str] = set()
        for value in node.values:
            name = to_enum_member_name(value)
            unique_name, counter = name, 2
            while unique_name in taken:
                unique_name = f"{name}_{counter}"
                counter += 1
            taken.add(unique_name)
            members.append(EnumMember(name=unique_name, value=value))
        return tuple(members)

    def _resolve_object(self, entry: _SchemaEntry, node: SchemaNode, base: dict) -> SchemaDescriptor:
        hierarchy = self.hierarchy
        name = entry.name
        flat = self.schema_resolver.flatten(node, name)

        if hierarchy.is_super(name):
            role, kind = PolymorphyRole.SUPER, SchemaKind.OBJECT_POLYMORPHIC_SUPER
        elif hierarchy.is_sub(name):
            role, kind = PolymorphyRole.SUB, SchemaKind.OBJECT_POLYMORPHIC_SUB
        else:
            role, kind = PolymorphyRole.NONE, SchemaKind.OBJECT_SINGLE

        # A union of scalars has nothing to generate a class from
        if role == PolymorphyRole.NONE and self.schema_resolver.is_scalar_union(node, name):
            return SchemaDescriptor(**base, kind=SchemaKind.PRIMITIVE, primitive_type=UNTYPED)

        if role == PolymorphyRole.SUPER:
            flat = self._with_discriminator_property(name, flat)

        lineage = [name, *hierarchy.ancestors(name)]
        discriminator_names = frozenset(hierarchy.supers[s].property_name for s in lineage if hierarchy.is_super(s))

        inherited_names: frozenset[str] = frozenset()
        discriminator_keys: dict[str, tuple[DiscriminatorKey, ...]] = {}
        supertype_name = hierarchy.supertype_of.get(name)
        if supertype_name is not None:
            inherited_names = self._property_names(supertype_name)
            polymorphic = hierarchy.supers[supertype_name]
            prop = flat.get(polymorphic.property_name)
            if prop is None:
                raise MissingDiscriminatorPropertyError(name, polymorphic.property_name, supertype_name, flat.source_path)
            if role == PolymorphyRole.SUB:
                enum_descriptor = self._enum_lookup(prop.type_ref.name) if prop.type_ref.kind == TypeKind.ENUM else None
                discriminator_keys[prop.name] = self.analyzer.discriminator_keys(polymorphic, name, enum_descriptor)

        properties = self.classifier.classify(
            name,
            flat,
            ClassSettings(role=role, is_merge_patch=self._is_merge_patch(entry)),
            discriminator_names=discriminator_names,
            inherited_names=inherited_names,
            discriminator_keys=discriminator_keys,
        )

        base["description"] = flat.description
        base["is_nullable"] = flat.is_nullable
        return SchemaDescriptor(
            **base,
            kind=kind,
            properties=properties,
            supertype_name=supertype_name,
            subtype_names=tuple(hierarchy.subtypes_of(name)),
            discriminator_property=hierarchy.supers[name].property_name if role == PolymorphyRole.SUPER else None,
        )

    def _with_discriminator_property(self, name: str, flat: FlatObject) -> FlatObject:
        """Declare the discriminator on a super whose subtypes carry it."""
        polymorphic = self.hierarchy.supers[name]
        if flat.get(polymorphic.property_name) is not None:
            return flat

        declared = None
        for sub_name in polymorphic.subtype_names:
            sub_flat = self.schema_resolver.flatten(self._entries[sub_name].node, sub_name)
            declared = sub_flat.get(polymorphic.property_name)
            if declared is not None:
                break

        discriminator = FlatProperty(
            name=polymorphic.property_name,
            type_ref=declared.type_ref if declared else TypeRef(kind=TypeKind.PRIMITIVE, name="string"),
            variant=FieldProperty,
            source_path=f"{flat.source_path}/discriminator",
            description=declared.description if declared else None,
        )
        return FlatObject(
            source_path=flat.source_path,
            properties=[discriminator, *flat.properties],
            required=flat.required | {polymorphic.property_name},
            additional=flat.additional,
            discriminator=flat.discriminator,
            is_nullable=flat.is_nullable,
            description=flat.description,
        )

    def _property_names(self, name: str) -> frozenset[str]:
        flat = self.schema_resolver.flatten(self._entries[name].node, name)
        if self.hierarchy.is_super(name):
            flat = self._with_discriminator_property(name, flat)
        return frozenset(prop.name for prop in flat.properties)

    def _is_merge_patch(self, entry: _SchemaEntry) -> bool:
        """Merge-patch mode: global, or per schema through the extension (inherited by inline schemas)."""
        if self.config.merge_patch:
            return True
        current: _SchemaEntry | None = entry
        while current is not None:
            if current.node.metadata.get(MERGE_PATCH_EXTENSION) is True:
                return True
            current = self._entries.get(current.parent_name) if current.parent_name else None
        return False
