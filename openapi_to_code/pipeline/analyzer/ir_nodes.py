"""
IR (Intermediate Representation) node definitions.

These nodes form the normalized type model handed to the code emitters.
All references are resolved and every property is classified. Descriptors
are frozen: they are built once per run and never mutated afterwards.
Supertype/subtype links are schema names looked up in the TypeModel
registry, never owning references.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any


class SchemaKind(Enum):
    """Role of a schema in the type model. Exactly one applies."""

    PRIMITIVE = "primitive"
    ENUM = "enum"
    OBJECT_SINGLE = "object_single"
    OBJECT_POLYMORPHIC_SUPER = "object_polymorphic_super"
    OBJECT_POLYMORPHIC_SUB = "object_polymorphic_sub"
    ARRAY = "array"
    MAP = "map"


class TypeKind(Enum):
    """Kind of a property type."""

    PRIMITIVE = "primitive"  # string, integer, number, boolean
    ENUM = "enum"  # Named enum schema
    OBJECT = "object"  # Named object schema
    ARRAY = "array"  # list of items
    MAP = "map"  # string keys to values
    UNTYPED = "untyped"  # Any


@dataclass(frozen=True)
class TypeRef:
    """A resolved type reference."""

    kind: TypeKind = TypeKind.PRIMITIVE
    name: str = ""  # Primitive type name or schema name
    format: str | None = None

    # For container types
    items: TypeRef | None = None
    values: TypeRef | None = None

    @property
    def is_complex(self) -> bool:
        """Whether values of this type are objects needing nested validation."""
        if self.kind == TypeKind.OBJECT:
            return True
        if self.kind == TypeKind.ARRAY and self.items:
            return self.items.is_complex
        if self.kind == TypeKind.MAP and self.values:
            return self.values.is_complex
        return False

    def signature(self) -> str:
        """Type signature used to detect conflicting declarations (format is ignored)."""
        if self.kind == TypeKind.ARRAY:
            return f"array<{self.items.signature() if self.items else 'any'}>"
        if self.kind == TypeKind.MAP:
            return f"map<{self.values.signature() if self.values else 'any'}>"
        if self.kind == TypeKind.UNTYPED:
            return "any"
        return self.name

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"kind": self.kind.value, "name": self.name}
        if self.format:
            result["format"] = self.format
        if self.items:
            result["items"] = self.items.to_dict()
        if self.values:
            result["values"] = self.values.to_dict()
        return result


UNTYPED = TypeRef(kind=TypeKind.UNTYPED, name="any")


@dataclass(frozen=True)
class ValidationConstraints:
    """Validation keywords normalized across OpenAPI 3.0 and 3.1."""

    pattern: str | None = None
    min_length: int | None = None
    max_length: int | None = None
    minimum: float | None = None
    maximum: float | None = None
    exclusive_minimum: bool = False
    exclusive_maximum: bool = False
    min_items: int | None = None
    max_items: int | None = None

    @property
    def is_empty(self) -> bool:
        return self == ValidationConstraints()

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in self.__dict__.items() if v is not None and v is not False}


class PropertyModifier(Enum):
    """Role of a property within a polymorphic hierarchy."""

    NONE = "none"
    ABSTRACT = "abstract"  # Discriminator declared on a super schema
    OPEN = "open"  # Non-discriminator property of a super schema
    OVERRIDE = "override"  # Discriminator or inherited property of a sub schema


class DefaultKind(Enum):
    """What a computed default expression stands for."""

    LITERAL = "literal"
    ENUM_MEMBER = "enum_member"
    NULL = "null"  # Absent optional, standard mode
    UNDEFINED = "undefined"  # Absent optional, merge-patch mode
    EMPTY_MAP = "empty_map"  # additionalProperties capture


@dataclass(frozen=True)
class DefaultValue:
    """A target-language default expression for a constructor parameter."""

    expression: str = ""
    kind: DefaultKind = DefaultKind.LITERAL
    source: Any = None  # Raw OpenAPI literal
    enum_member: str | None = None
    is_wrapped: bool = False  # Inside the tri-state container

    def to_dict(self) -> dict[str, Any]:
        return {
            "expression": self.expression,
            "kind": self.kind.value,
            "is_wrapped": self.is_wrapped,
        }


@dataclass(frozen=True)
class DiscriminatorKey:
    """A literal discriminator value selecting a subtype."""

    value: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"type": type(self).__name__, "value": self.value}


@dataclass(frozen=True)
class StringKey(DiscriminatorKey):
    """Discriminator value of a plain string discriminator property."""


@dataclass(frozen=True)
class EnumKey(DiscriminatorKey):
    """Discriminator value that is a member of the discriminator's enum."""

    enum_name: str = ""
    member_name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "enum": self.enum_name, "member": self.member_name}


@dataclass(frozen=True)
class PropertyDescriptor:
    """Base of the closed set of property variants.

    Variants: FieldProperty, ObjectRefProperty, ObjectInlinedProperty,
    CollectionProperty, AdditionalPropertiesCapture.
    """

    oas_key: str = ""
    type_ref: TypeRef = UNTYPED
    source_path: str = ""
    description: str | None = None

    is_required: bool = False
    is_nullable: bool = False
    has_default: bool = False
    default_literal: Any = None

    is_polymorphic_discriminator: bool = False
    is_inherited: bool = False
    discriminator_mappings: tuple[DiscriminatorKey, ...] = ()
    is_fixed_discriminator: bool = False

    modifier: PropertyModifier = PropertyModifier.NONE
    is_mandatory: bool = False
    is_tri_state: bool = False
    default: DefaultValue | None = None

    constraints: ValidationConstraints = ValidationConstraints()

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "variant": type(self).__name__,
            "oas_key": self.oas_key,
            "type": self.type_ref.to_dict(),
            "required": self.is_required,
            "nullable": self.is_nullable,
            "mandatory": self.is_mandatory,
            "modifier": self.modifier.value,
        }
        if self.has_default:
            result["default_literal"] = self.default_literal
        if self.default:
            result["default"] = self.default.to_dict()
        if self.is_tri_state:
            result["tri_state"] = True
        if self.is_polymorphic_discriminator:
            result["discriminator"] = True
            result["fixed"] = self.is_fixed_discriminator
        if self.is_inherited:
            result["inherited"] = True
        if self.discriminator_mappings:
            result["discriminator_mappings"] = [k.to_dict() for k in self.discriminator_mappings]
        if not self.constraints.is_empty:
            result["constraints"] = self.constraints.to_dict()
        return result


@dataclass(frozen=True)
class FieldProperty(PropertyDescriptor):
    """A primitive, enum or untyped property."""


@dataclass(frozen=True)
class ObjectRefProperty(PropertyDescriptor):
    """A property referencing a named object schema."""


@dataclass(frozen=True)
class ObjectInlinedProperty(PropertyDescriptor):
    """A property whose inline object schema got a synthesized name."""


@dataclass(frozen=True)
class CollectionProperty(PropertyDescriptor):
    """An array or map property (carries minItems/maxItems)."""


@dataclass(frozen=True)
class AdditionalPropertiesCapture(PropertyDescriptor):
    """Catch-all map for additionalProperties on an object with properties."""


@dataclass(frozen=True)
class EnumMember:
    name: str = ""
    value: Any = None


@dataclass(frozen=True)
class SchemaDescriptor:
    """Normalized view of one schema."""

    name: str = ""
    kind: SchemaKind = SchemaKind.OBJECT_SINGLE
    source_path: str = ""
    description: str | None = None
    is_nullable: bool = False
    is_inline: bool = False

    # Objects, in declaration order
    properties: tuple[PropertyDescriptor, ...] = ()

    # Polymorphism (weak links by name)
    supertype_name: str | None = None
    subtype_names: tuple[str, ...] = ()
    discriminator_property: str | None = None

    # PRIMITIVE
    primitive_type: TypeRef | None = None
    constraints: ValidationConstraints = ValidationConstraints()

    # ENUM
    enum_members: tuple[EnumMember, ...] = ()
    enum_value_type: str = "string"

    # ARRAY / MAP
    item_type: TypeRef | None = None
    value_type: TypeRef | None = None

    @property
    def is_object(self) -> bool:
        return self.kind in (
            SchemaKind.OBJECT_SINGLE,
            SchemaKind.OBJECT_POLYMORPHIC_SUPER,
            SchemaKind.OBJECT_POLYMORPHIC_SUB,
        )

    def get_property(self, oas_key: str) -> PropertyDescriptor | None:
        for prop in self.properties:
            if prop.oas_key == oas_key:
                return prop
        return None

    def enum_member_for(self, value: Any) -> EnumMember | None:
        """Find the member declared with exactly this value (case-sensitive)."""
        for member in self.enum_members:
            if member.value == value and type(member.value) is type(value):
                return member
        return None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"name": self.name, "kind": self.kind.value}
        if self.is_nullable:
            result["nullable"] = True
        if self.is_object:
            result["properties"] = [p.to_dict() for p in self.properties]
        if self.supertype_name:
            result["supertype"] = self.supertype_name
        if self.subtype_names:
            result["subtypes"] = list(self.subtype_names)
        if self.discriminator_property:
            result["discriminator"] = self.discriminator_property
        if self.kind == SchemaKind.PRIMITIVE and self.primitive_type:
            result["type"] = self.primitive_type.to_dict()
        if self.kind == SchemaKind.ENUM:
            result["members"] = {m.name: m.value for m in self.enum_members}
        if self.item_type:
            result["items"] = self.item_type.to_dict()
        if self.value_type:
            result["values"] = self.value_type.to_dict()
        if not self.constraints.is_empty:
            result["constraints"] = self.constraints.to_dict()
        return result


class TypeModel:
    """Immutable registry of schema descriptors keyed by schema name.

    The registry owns every descriptor; descriptors refer to each other
    by name only, so the whole model is released at once.
    """

    def __init__(self, descriptors: Iterable[SchemaDescriptor]):
        self._schemas = MappingProxyType({d.name: d for d in descriptors})

    @property
    def schemas(self) -> MappingProxyType:
        return self._schemas

    def __getitem__(self, name: str) -> SchemaDescriptor:
        return self._schemas[name]

    def __contains__(self, name: object) -> bool:
        return name in self._schemas

    def __iter__(self) -> Iterator[SchemaDescriptor]:
        return iter(self._schemas.values())

    def __len__(self) -> int:
        return len(self._schemas)

    def get(self, name: str) -> SchemaDescriptor | None:
        return self._schemas.get(name)

    def supertype_of(self, name: str) -> SchemaDescriptor | None:
        descriptor = self._schemas.get(name)
        if descriptor is None or descriptor.supertype_name is None:
            return None
        return self._schemas.get(descriptor.supertype_name)

    def subtypes_of(self, name: str) -> list[SchemaDescriptor]:
        descriptor = self._schemas.get(name)
        if descriptor is None:
            return []
        return [self._schemas[n] for n in descriptor.subtype_names if n in self._schemas]

    def to_dict(self) -> dict[str, Any]:
        return {name: d.to_dict() for name, d in self._schemas.items()}
