"""
Default-value coercer.

Turns OpenAPI default literals into Kotlin expressions matching the
property's resolved type and tri-state wrapping.
"""

from __future__ import annotations

import datetime
from collections.abc import Callable
from typing import Any

from ..errors import IncompatibleDefaultError, UnknownEnumDefaultError
from .ir_nodes import DefaultKind, DefaultValue, DiscriminatorKey, EnumKey, SchemaDescriptor, TypeKind, TypeRef

NULL_DEFAULT = DefaultValue(expression="null", kind=DefaultKind.NULL)
UNDEFINED_DEFAULT = DefaultValue(expression="JsonNullable.undefined()", kind=DefaultKind.UNDEFINED, is_wrapped=True)
EMPTY_MAP_DEFAULT = DefaultValue(expression="mutableMapOf()", kind=DefaultKind.EMPTY_MAP)

# String formats parsed from their textual form
PARSED_STRING_FORMATS = {
    "date": "LocalDate.parse({})",
    "date-time": "OffsetDateTime.parse({})",
    "uuid": "UUID.fromString({})",
    "uri": "URI({})",
    "byte": "{}.toByteArray()",
    "binary": "{}.toByteArray()",
}


def kotlin_string(value: str) -> str:
    """Quote a string as a Kotlin string literal."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("$", "\\$")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


class DefaultValueCoercer:
    """Converts default literals into Kotlin expressions."""

    def __init__(self, enum_lookup: Callable[[str], SchemaDescriptor | None]):
        """
        Initialize the coercer.

        Args:
            enum_lookup: Returns the resolved enum descriptor for a schema name
        """
        self.enum_lookup = enum_lookup

    def coerce_literal(
        self,
        value: Any,
        type_ref: TypeRef,
        schema_name: str | None = None,
        property_name: str | None = None,
        source_path: str | None = None,
    ) -> DefaultValue:
        """
        Convert a default literal to a Kotlin expression.

        Raises:
            UnknownEnumDefaultError: The literal is not a member of the enum
            IncompatibleDefaultError: The literal does not fit the type
        """
        if type_ref.kind == TypeKind.ENUM:
            return self._enum_literal(value, type_ref, schema_name, property_name, source_path)

        expression = None
        if type_ref.kind == TypeKind.PRIMITIVE:
            if type_ref.name == "string":
                expression = self._string_literal(value, type_ref.format)
            elif type_ref.name == "integer":
                expression = self._integer_literal(value, type_ref.format)
            elif type_ref.name == "number":
                expression = self._number_literal(value, type_ref.format)
            elif type_ref.name == "boolean" and isinstance(value, bool):
                expression = "true" if value else "false"

        if expression is None:
            raise IncompatibleDefaultError(
                f"Default {value!r} is not a valid {type_ref.signature()}",
                schema_name=schema_name,
                property_name=property_name,
                source_path=source_path,
            )
        return DefaultValue(expression=expression, kind=DefaultKind.LITERAL, source=value)

    def _enum_literal(self, value, type_ref, schema_name, property_name, source_path) -> DefaultValue:
        enum = self.enum_lookup(type_ref.name)
        member = enum.enum_member_for(value) if enum else None
        if member is None:
            members = [m.value for m in enum.enum_members] if enum else []
            raise UnknownEnumDefaultError(schema_name, property_name, value, members, source_path)
        return DefaultValue(
            expression=f"{enum.name}.{member.name}",
            kind=DefaultKind.ENUM_MEMBER,
            source=value,
            enum_member=member.name,
        )

    def _string_literal(self, value: Any, format: str | None) -> str | None:
        # YAML loads unquoted dates as date objects
        if isinstance(value, (datetime.date, datetime.datetime)) and format in ("date", "date-time"):
            value = value.isoformat()
        if not isinstance(value, str):
            return None
        template = PARSED_STRING_FORMATS.get(format or "")
        if template is None:
            return kotlin_string(value)
        return template.format(kotlin_string(value))

    def _integer_literal(self, value: Any, format: str | None) -> str | None:
        if isinstance(value, bool):
            return None
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if not isinstance(value, int):
            return None
        return f"{value}L" if format == "int64" else str(value)

    def _number_literal(self, value: Any, format: str | None) -> str | None:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        if format == "float":
            return f"{float(value)!r}f"
        if format == "double":
            return repr(float(value))
        return f'BigDecimal("{value}")'

    def discriminator_default(self, key: DiscriminatorKey) -> DefaultValue:
        """The fixed default of a subtype discriminator selected by a single key."""
        if isinstance(key, EnumKey):
            return DefaultValue(
                expression=f"{key.enum_name}.{key.member_name}",
                kind=DefaultKind.ENUM_MEMBER,
                source=key.value,
                enum_member=key.member_name,
            )
        return DefaultValue(expression=kotlin_string(key.value), kind=DefaultKind.LITERAL, source=key.value)

    def constructor_default(
        self,
        literal: DefaultValue | None,
        is_required: bool,
        merge_patch: bool,
    ) -> DefaultValue | None:
        """
        Default of a constructor parameter.

        Required properties are always supplied by the caller and get no
        default. Optional ones use their literal, wrapped in
        ``JsonNullable.of`` in merge-patch mode, or the absent value.
        """
        if is_required:
            return None
        if literal is None:
            return UNDEFINED_DEFAULT if merge_patch else NULL_DEFAULT
        if merge_patch:
            return DefaultValue(
                expression=f"JsonNullable.of({literal.expression})",
                kind=literal.kind,
                source=literal.source,
                enum_member=literal.enum_member,
                is_wrapped=True,
            )
        return literal
