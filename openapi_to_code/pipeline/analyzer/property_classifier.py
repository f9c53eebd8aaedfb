"""
Property classifier.

Computes the semantic profile of every property of a flattened object
schema: mandatory-ness, tri-state wrapping, polymorphic modifiers,
discriminator handling and constructor defaults.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..config import CodeGeneratorConfig, DiscriminatorPolicy
from ..errors import SubTypeDiscriminatorWithMultipleValuesError, SubTypeDiscriminatorWithNoValueError
from .default_coercer import EMPTY_MAP_DEFAULT, DefaultValueCoercer
from .ir_nodes import (
    AdditionalPropertiesCapture,
    DiscriminatorKey,
    PropertyDescriptor,
    PropertyModifier,
    TypeKind,
    TypeRef,
)
from .schema_resolver import FlatObject, FlatProperty


class PolymorphyRole(Enum):
    NONE = "none"
    SUPER = "super"
    SUB = "sub"


@dataclass(frozen=True)
class ClassSettings:
    """How the class owning the properties takes part in a hierarchy."""

    role: PolymorphyRole = PolymorphyRole.NONE
    is_merge_patch: bool = False


def is_mandatory(is_required: bool, is_nullable: bool, has_default: bool, merge_patch: bool) -> bool:
    """Whether a property is never absent nor null in generated code.

    In merge-patch mode absence is carried by the tri-state container, so
    only nullability matters.
    """
    if merge_patch:
        return not is_nullable
    return (is_required and not is_nullable) or (not is_required and has_default)


class PropertyClassifier:
    """Classifies the properties of one object schema."""

    def __init__(self, config: CodeGeneratorConfig, coercer: DefaultValueCoercer):
        self.config = config
        self.coercer = coercer

    def classify(
        self,
        schema_name: str,
        flat: FlatObject,
        settings: ClassSettings,
        discriminator_names: frozenset[str] = frozenset(),
        inherited_names: frozenset[str] = frozenset(),
        discriminator_keys: dict[str, tuple[DiscriminatorKey, ...]] | None = None,
    ) -> tuple[PropertyDescriptor, ...]:
        """
        Classify every property of a flattened schema, in declaration order.

        Args:
            schema_name: Name of the owning schema
            flat: The flattened schema
            settings: Hierarchy role and merge-patch mode of the owning class
            discriminator_names: Discriminator properties of the schema and its ancestors
            inherited_names: Properties declared by the supertype
            discriminator_keys: Values selecting this schema, by discriminator property (subtypes only)

        Returns:
            Tuple of property descriptors, the additionalProperties capture last
        """
        properties = [
            self._classify_property(schema_name, flat, prop, settings, discriminator_names, inherited_names, discriminator_keys or {})
            for prop in flat.properties
        ]
        if flat.additional is not None and flat.properties:
            properties.append(
                AdditionalPropertiesCapture(
                    oas_key="additionalProperties",
                    type_ref=TypeRef(kind=TypeKind.MAP, name="map", values=flat.additional),
                    source_path=f"{flat.source_path}/additionalProperties",
                    is_required=True,
                    is_mandatory=True,
                    default=EMPTY_MAP_DEFAULT,
                )
            )
        return tuple(properties)

    def _classify_property(
        self,
        schema_name: str,
        flat: FlatObject,
        prop: FlatProperty,
        settings: ClassSettings,
        discriminator_names: frozenset[str],
        inherited_names: frozenset[str],
        discriminator_keys: dict[str, tuple[DiscriminatorKey, ...]],
    ) -> PropertyDescriptor:
        is_required = prop.name in flat.required
        is_discriminator = prop.name in discriminator_names
        is_inherited = prop.name in inherited_names
        merge_patch = settings.is_merge_patch

        fields = dict(
            oas_key=prop.name,
            type_ref=prop.type_ref,
            source_path=prop.source_path,
            description=prop.description,
            is_required=is_required,
            is_nullable=prop.is_nullable,
            has_default=prop.has_default,
            default_literal=prop.default_value,
            is_polymorphic_discriminator=is_discriminator,
            is_inherited=is_inherited,
            modifier=self._modifier(settings.role, is_discriminator, is_inherited),
            constraints=prop.constraints,
        )

        if is_discriminator and settings.role == PolymorphyRole.SUB and prop.name in discriminator_keys:
            keys = discriminator_keys[prop.name]
            fields["discriminator_mappings"] = keys
            if not keys:
                raise SubTypeDiscriminatorWithNoValueError(
                    "No discriminator value selects this subtype",
                    schema_name=schema_name,
                    property_name=prop.name,
                    source_path=prop.source_path,
                )
            if len(keys) == 1:
                return prop.variant(
                    **fields,
                    is_fixed_discriminator=True,
                    is_mandatory=is_mandatory(is_required, prop.is_nullable, True, merge_patch),
                    default=self.coercer.discriminator_default(keys[0]),
                )
            if self.config.discriminator_policy == DiscriminatorPolicy.ERROR:
                raise SubTypeDiscriminatorWithMultipleValuesError(
                    schema_name,
                    prop.name,
                    [key.value for key in keys],
                    prop.source_path,
                )

        literal = None
        if prop.has_default:
            literal = self.coercer.coerce_literal(prop.default_value, prop.type_ref, schema_name, prop.name, prop.source_path)

        # The super's discriminator is abstract and never a constructor parameter
        default = None
        if not (is_discriminator and settings.role == PolymorphyRole.SUPER):
            default = self.coercer.constructor_default(literal, is_required, merge_patch)

        return prop.variant(
            **fields,
            is_mandatory=is_mandatory(is_required, prop.is_nullable, prop.has_default, merge_patch),
            is_tri_state=merge_patch and not is_required,
            default=default,
        )

    def _modifier(self, role: PolymorphyRole, is_discriminator: bool, is_inherited: bool) -> PropertyModifier:
        if role == PolymorphyRole.SUPER:
            if is_inherited:
                return PropertyModifier.OVERRIDE
            return PropertyModifier.ABSTRACT if is_discriminator else PropertyModifier.OPEN
        if role == PolymorphyRole.SUB and (is_discriminator or is_inherited):
            return PropertyModifier.OVERRIDE
        return PropertyModifier.NONE
