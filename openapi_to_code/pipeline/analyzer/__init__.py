"""
Analyzer module.

Contains reference and name resolution, allOf flattening, discriminator
analysis, property classification and type model building.
"""

from __future__ import annotations

from .builder import ResolutionMemo, TypeModelBuilder
from .default_coercer import DefaultValueCoercer
from .discriminator import DiscriminatorAnalyzer, Hierarchy, PolymorphicSuper
from .ir_nodes import (
    AdditionalPropertiesCapture,
    CollectionProperty,
    DefaultKind,
    DefaultValue,
    DiscriminatorKey,
    EnumKey,
    EnumMember,
    FieldProperty,
    ObjectInlinedProperty,
    ObjectRefProperty,
    PropertyDescriptor,
    PropertyModifier,
    SchemaDescriptor,
    SchemaKind,
    StringKey,
    TypeKind,
    TypeModel,
    TypeRef,
    ValidationConstraints,
)
from .name_resolver import NameMapping, NameResolver
from .property_classifier import ClassSettings, PolymorphyRole, PropertyClassifier
from .reference_resolver import ReferenceResolver
from .schema_resolver import SchemaResolver

__all__ = [
    "SchemaKind",
    "TypeKind",
    "TypeRef",
    "ValidationConstraints",
    "PropertyModifier",
    "DefaultKind",
    "DefaultValue",
    "DiscriminatorKey",
    "StringKey",
    "EnumKey",
    "PropertyDescriptor",
    "FieldProperty",
    "ObjectRefProperty",
    "ObjectInlinedProperty",
    "CollectionProperty",
    "AdditionalPropertiesCapture",
    "EnumMember",
    "SchemaDescriptor",
    "TypeModel",
    "NameMapping",
    "NameResolver",
    "ReferenceResolver",
    "SchemaResolver",
    "DiscriminatorAnalyzer",
    "Hierarchy",
    "PolymorphicSuper",
    "DefaultValueCoercer",
    "ClassSettings",
    "PolymorphyRole",
    "PropertyClassifier",
    "ResolutionMemo",
    "TypeModelBuilder",
]
