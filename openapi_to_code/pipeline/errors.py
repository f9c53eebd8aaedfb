"""
Errors raised while compiling an OpenAPI document into a type model.

Every error is a fatal input-data error. Each carries enough context
(schema name, property name, document path) to locate the offending
fragment of the source document.
"""

from __future__ import annotations


class TypeModelError(Exception):
    """Base exception for type model compilation errors."""

    def __init__(
        self,
        message: str,
        schema_name: str | None = None,
        property_name: str | None = None,
        source_path: str | None = None,
    ) -> None:
        self.schema_name = schema_name
        self.property_name = property_name
        self.source_path = source_path
        self.reason = message

        location = ""
        if schema_name and property_name:
            location = f"{schema_name}.{property_name}: "
        elif schema_name:
            location = f"{schema_name}: "
        prefix = f"[{source_path}] " if source_path else ""
        super().__init__(f"{prefix}{location}{message}")


class DocumentLoadError(TypeModelError):
    """Raised when the input document cannot be read or parsed."""


class UnresolvableReferenceError(TypeModelError):
    """Raised for a dangling $ref pointer or a $ref / allOf cycle."""

    def __init__(self, ref: str, message: str, schema_name: str | None = None, source_path: str | None = None) -> None:
        self.ref = ref
        super().__init__(f"Cannot resolve '{ref}': {message}", schema_name=schema_name, source_path=source_path)


class ConflictingPropertyTypeError(TypeModelError):
    """Raised when allOf branches declare the same property with different types."""

    def __init__(
        self,
        schema_name: str,
        property_name: str,
        first_type: str,
        second_type: str,
        source_path: str | None = None,
    ) -> None:
        self.first_type = first_type
        self.second_type = second_type
        super().__init__(
            f"Conflicting types '{first_type}' and '{second_type}' in allOf composition",
            schema_name=schema_name,
            property_name=property_name,
            source_path=source_path,
        )


class MissingDiscriminatorPropertyError(TypeModelError):
    """Raised when a subtype does not declare its super's discriminator property."""

    def __init__(self, schema_name: str, property_name: str, supertype_name: str, source_path: str | None = None) -> None:
        self.supertype_name = supertype_name
        super().__init__(
            f"Discriminator property of '{supertype_name}' is not declared on this subtype",
            schema_name=schema_name,
            property_name=property_name,
            source_path=source_path,
        )


class UnknownEnumDefaultError(TypeModelError):
    """Raised when a default does not match any member of the property's enum."""

    def __init__(
        self,
        schema_name: str,
        property_name: str,
        value: object,
        members: list[object],
        source_path: str | None = None,
    ) -> None:
        self.value = value
        self.members = members
        super().__init__(
            f"Default {value!r} is not one of the enum values {members!r}",
            schema_name=schema_name,
            property_name=property_name,
            source_path=source_path,
        )


class IncompatibleDefaultError(TypeModelError):
    """Raised when a default literal does not fit the property's resolved type."""


class SubTypeDiscriminatorWithNoValueError(TypeModelError):
    """Raised when no discriminator value selects a subtype."""


class SubTypeDiscriminatorWithMultipleValuesError(TypeModelError):
    """Raised when several discriminator values select one subtype and the policy forbids it."""

    def __init__(self, schema_name: str, property_name: str, values: list[str], source_path: str | None = None) -> None:
        self.values = values
        super().__init__(
            f"Subtype is selected by several discriminator values {values!r}",
            schema_name=schema_name,
            property_name=property_name,
            source_path=source_path,
        )


class CyclicHierarchyError(TypeModelError):
    """Raised when the supertype chain of a schema loops back on itself."""

    def __init__(self, chain: list[str]) -> None:
        self.chain = chain
        super().__init__(f"Cyclic supertype chain: {' -> '.join(chain)}", schema_name=chain[0])


class GeneratedCodeError(Exception):
    """Raised when generated output fails its structural validation before being written."""
