"""
Discriminator analyzer.

Finds the polymorphic super schemas of a document, links every subtype to
exactly one super and computes the discriminator values selecting each
subtype.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..errors import CyclicHierarchyError
from ..schema_ast.nodes import AllOfNode, ObjectNode, RefNode, SchemaAST, SchemaNode, UnionNode
from .ir_nodes import DiscriminatorKey, EnumKey, SchemaDescriptor, StringKey
from .reference_resolver import ReferenceResolver

logger = logging.getLogger(__name__)


@dataclass
class PolymorphicSuper:
    """A schema declaring a discriminator."""

    name: str = ""
    property_name: str = ""

    # Discriminator value -> subtype name, in mapping order
    mapping: dict[str, str] = field(default_factory=dict)

    # Linked subtypes in document order
    subtype_names: list[str] = field(default_factory=list)

    source_path: str = ""


@dataclass
class Hierarchy:
    """Supertype/subtype links of a document, by schema name."""

    supers: dict[str, PolymorphicSuper] = field(default_factory=dict)

    # Subtype name -> its single supertype name
    supertype_of: dict[str, str] = field(default_factory=dict)

    def is_super(self, name: str) -> bool:
        return name in self.supers

    def is_sub(self, name: str) -> bool:
        return name in self.supertype_of

    def subtypes_of(self, name: str) -> list[str]:
        polymorphic = self.supers.get(name)
        return list(polymorphic.subtype_names) if polymorphic else []

    def ancestors(self, name: str) -> list[str]:
        """Supertypes of a schema, nearest first."""
        chain = []
        current = self.supertype_of.get(name)
        while current is not None and current not in chain:
            chain.append(current)
            current = self.supertype_of.get(current)
        return chain


def discriminator_of(node: SchemaNode | None):
    """Return the discriminator a schema body declares, if any."""
    if isinstance(node, (ObjectNode, AllOfNode, UnionNode)):
        return node.discriminator
    return None


class DiscriminatorAnalyzer:
    """Builds the polymorphic hierarchy of a document."""

    def __init__(self, ref_resolver: ReferenceResolver):
        self.ref_resolver = ref_resolver

    def build_hierarchy(self, ast: SchemaAST) -> Hierarchy:
        """
        Build supertype/subtype links for every component schema.

        Args:
            ast: The parsed schema AST

        Returns:
            Hierarchy with one supertype per subtype

        Raises:
            CyclicHierarchyError: A supertype chain loops back on itself
            UnresolvableReferenceError: A mapping target is not a component schema
        """
        order = {def_node.name: i for i, def_node in enumerate(ast.definitions)}
        hierarchy = Hierarchy()

        for def_node in ast.definitions:
            discriminator = discriminator_of(def_node.body)
            if discriminator is None:
                continue
            mapping = {
                str(value): self.ref_resolver.resolve_mapping_target(target, def_node.name, def_node.source_path)
                for value, target in discriminator.mapping.items()
            }
            hierarchy.supers[def_node.name] = PolymorphicSuper(
                name=def_node.name,
                property_name=discriminator.property_name,
                mapping=mapping,
                source_path=def_node.source_path,
            )

        # Every super a schema is listed under, and its allOf parents
        candidates: dict[str, list[str]] = {}
        allof_parents: dict[str, list[str]] = {}

        for name, polymorphic in hierarchy.supers.items():
            body = ast.definition(name).body
            listed = list(polymorphic.mapping.values())
            if isinstance(body, UnionNode):
                listed.extend(self._variant_names(body))
            for sub_name in listed:
                candidates.setdefault(sub_name, [])
                if name not in candidates[sub_name]:
                    candidates[sub_name].append(name)

        for def_node in ast.definitions:
            if not isinstance(def_node.body, AllOfNode):
                continue
            for branch in def_node.body.branches:
                if not isinstance(branch, RefNode):
                    continue
                parent = self.ref_resolver.definition_name(branch.ref_path)
                if parent in hierarchy.supers:
                    allof_parents.setdefault(def_node.name, []).append(parent)
                    candidates.setdefault(def_node.name, [])
                    if parent not in candidates[def_node.name]:
                        candidates[def_node.name].append(parent)

        for sub_name in sorted(candidates, key=lambda n: order.get(n, len(order))):
            supers = sorted(candidates[sub_name], key=lambda n: order[n])
            parents = allof_parents.get(sub_name)
            chosen = parents[0] if parents else supers[0]
            ignored = [s for s in supers if s != chosen]
            if ignored:
                logger.warning(
                    "Schema %s is a subtype of several polymorphic schemas; keeping %s, ignoring %s",
                    sub_name,
                    chosen,
                    ", ".join(ignored),
                )
            hierarchy.supertype_of[sub_name] = chosen
            hierarchy.supers[chosen].subtype_names.append(sub_name)

        self._check_cycles(hierarchy)
        logger.debug("Found %d polymorphic schemas, %d subtypes", len(hierarchy.supers), len(hierarchy.supertype_of))
        return hierarchy

    def _variant_names(self, node: UnionNode) -> list[str]:
        names = []
        for variant in node.variants:
            if isinstance(variant, RefNode):
                name = self.ref_resolver.definition_name(variant.ref_path)
                if name is not None:
                    names.append(name)
        return names

    def _check_cycles(self, hierarchy: Hierarchy) -> None:
        for start in hierarchy.supertype_of:
            chain = [start]
            current = hierarchy.supertype_of.get(start)
            while current is not None:
                if current in chain:
                    raise CyclicHierarchyError([*chain[chain.index(current) :], current])
                chain.append(current)
                current = hierarchy.supertype_of.get(current)

    def discriminator_keys(
        self,
        polymorphic: PolymorphicSuper,
        sub_name: str,
        enum_descriptor: SchemaDescriptor | None = None,
    ) -> tuple[DiscriminatorKey, ...]:
        """
        Compute the discriminator values selecting a subtype.

        Mapping keys targeting the subtype win; without any, the subtype's
        own name is the implicit value. When the discriminator property is
        an enum, values become EnumKeys and non-members are dropped.

        Args:
            polymorphic: The super declaring the discriminator
            sub_name: Name of the subtype
            enum_descriptor: Enum schema of the discriminator property, if it is one

        Returns:
            Tuple of keys, possibly empty
        """
        values = [value for value, target in polymorphic.mapping.items() if target == sub_name]
        if not values:
            values = [sub_name]

        if enum_descriptor is None:
            return tuple(StringKey(value=value) for value in values)

        keys: list[DiscriminatorKey] = []
        for value in values:
            member = enum_descriptor.enum_member_for(value)
            if member is None:
                logger.warning(
                    "Discriminator value %r of %s is not a member of enum %s; dropping it",
                    value,
                    sub_name,
                    enum_descriptor.name,
                )
                continue
            keys.append(EnumKey(value=value, enum_name=enum_descriptor.name, member_name=member.name))
        return tuple(keys)
