"""
Kotlin code generation backend.

Generates Jackson-annotated Kotlin data classes, sealed class hierarchies
and enums from the type model.
"""

from __future__ import annotations

from typing import Any

from ...utils import to_camel_case
from ..analyzer.default_coercer import kotlin_string
from ..analyzer.ir_nodes import (
    AdditionalPropertiesCapture,
    PropertyDescriptor,
    PropertyModifier,
    SchemaDescriptor,
    SchemaKind,
    TypeKind,
    TypeModel,
    TypeRef,
)
from ..config import CodeGeneratorConfig
from .base import CodeBackend
from .validation import ValidationAnnotations

JACKSON = "com.fasterxml.jackson.annotation"
JSON_NULLABLE = "org.openapitools.jackson.nullable.JsonNullable"

# Name of the constructor parameter holding captured additionalProperties
CAPTURE_NAME = "properties"


class KotlinBackend(CodeBackend):
    """Kotlin code generation backend."""

    TEMPLATE_LANG = "kotlin"
    FILE_EXTENSION = "kt"

    # (type, format) -> (Kotlin type, import)
    TYPE_MAP: dict[tuple[str, str | None], tuple[str, str | None]] = {
        ("string", None): ("String", None),
        ("string", "date"): ("LocalDate", "java.time.LocalDate"),
        ("string", "date-time"): ("OffsetDateTime", "java.time.OffsetDateTime"),
        ("string", "uuid"): ("UUID", "java.util.UUID"),
        ("string", "uri"): ("URI", "java.net.URI"),
        ("string", "byte"): ("ByteArray", None),
        ("string", "binary"): ("ByteArray", None),
        ("integer", None): ("Int", None),
        ("integer", "int32"): ("Int", None),
        ("integer", "int64"): ("Long", None),
        ("number", None): ("BigDecimal", "java.math.BigDecimal"),
        ("number", "float"): ("Float", None),
        ("number", "double"): ("Double", None),
        ("boolean", None): ("Boolean", None),
    }

    def __init__(self, config: CodeGeneratorConfig):
        super().__init__(config)
        self.validation = ValidationAnnotations.for_library(config.validation_library)
        self.required_imports: set[str] = set()

    def generate(self, model: TypeModel, generation_comment: str | None = None) -> str:
        """Generate the Kotlin source of every object and enum schema."""
        # Reset import tracking
        self.required_imports = set()

        blocks = []
        for descriptor in self._select_schemas(model):
            if descriptor.kind == SchemaKind.ENUM:
                blocks.append(self.enum_template.render(self._prepare_enum_context(descriptor)))
            elif descriptor.is_object:
                blocks.append(self.class_template.render(self._prepare_class_context(descriptor, model)))
            # Primitive, array and map schemas are inlined where they are used

        prefix = self.prefix_template.render(
            generation_comment=generation_comment if self.config.add_generation_comment else None,
            package_name=self.config.package_name,
            required_imports=sorted(self.required_imports),
        )
        return prefix + "\n".join(blocks)

    def translate_type(self, type_ref: TypeRef) -> str:
        """Translate a resolved type to a Kotlin type (without nullability)."""
        if type_ref.kind == TypeKind.PRIMITIVE:
            kotlin_type, import_name = self.TYPE_MAP.get(
                (type_ref.name, type_ref.format),
                self.TYPE_MAP.get((type_ref.name, None), ("Any", None)),
            )
            if import_name:
                self.required_imports.add(import_name)
            return kotlin_type

        if type_ref.kind in (TypeKind.ENUM, TypeKind.OBJECT):
            return type_ref.name

        if type_ref.kind == TypeKind.ARRAY:
            return f"List<{self.translate_type(type_ref.items) if type_ref.items else 'Any'}>"

        if type_ref.kind == TypeKind.MAP:
            return f"Map<String, {self.translate_type(type_ref.values) if type_ref.values else 'Any'}>"

        return "Any"

    def property_type(self, prop: PropertyDescriptor) -> str:
        """Kotlin type of a property, with nullability and tri-state wrapping."""
        base = self.translate_type(prop.type_ref)
        if prop.is_tri_state:
            self.required_imports.add(JSON_NULLABLE)
            return f"JsonNullable<{base}?>" if prop.is_nullable else f"JsonNullable<{base}>"
        return base if prop.is_mandatory else f"{base}?"

    def _prepare_enum_context(self, descriptor: SchemaDescriptor) -> dict[str, Any]:
        self.required_imports.add(f"{JACKSON}.JsonValue")
        value_type = self.translate_type(TypeRef(kind=TypeKind.PRIMITIVE, name=descriptor.enum_value_type))
        return {
            "CLASS_NAME": descriptor.name,
            "VALUE_TYPE": value_type,
            "members": [(member.name, self._enum_literal(member.value, value_type)) for member in descriptor.enum_members],
        }

    def _enum_literal(self, value: Any, value_type: str) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        if value_type == "BigDecimal":
            return f'BigDecimal("{value}")'
        if isinstance(value, (int, float)):
            return repr(value)
        return kotlin_string(str(value))

    def _prepare_class_context(self, descriptor: SchemaDescriptor, model: TypeModel) -> dict[str, Any]:
        """
        Prepare the template context for an object schema.

        Args:
            descriptor: The object schema
            model: The whole model (to look up supertypes and subtypes)

        Returns:
            Dictionary of template variables
        """
        is_super = descriptor.kind == SchemaKind.OBJECT_POLYMORPHIC_SUPER
        constructor = []
        body = []
        capture = None

        for prop in descriptor.properties:
            if isinstance(prop, AdditionalPropertiesCapture):
                capture = self._prepare_capture_context(prop, descriptor)
                constructor.append(capture["parameter"])
            elif prop.modifier == PropertyModifier.ABSTRACT:
                body.append({"annotations": [], "declaration": f"public abstract val {to_camel_case(prop.oas_key)}: {self.property_type(prop)}"})
            else:
                constructor.append(self._prepare_property_context(prop, is_super))

        if is_super:
            keyword = "sealed class"
        elif constructor:
            keyword = "data class"
        else:
            keyword = "class"

        return {
            "CLASS_NAME": descriptor.name,
            "KEYWORD": keyword,
            "constructor_properties": constructor,
            "body_properties": body,
            "EXTENDS": self._super_call(descriptor, model),
            "type_info": self._prepare_type_info(descriptor, model) if is_super else None,
            "capture": capture,
        }

    def _prepare_property_context(self, prop: PropertyDescriptor, in_super: bool) -> dict[str, Any]:
        annotations = []
        # Open properties of a super are declared by the subclasses' overrides
        if not in_super:
            self.required_imports.add(f"{JACKSON}.JsonProperty")
            annotations.append(f"@param:JsonProperty({kotlin_string(prop.oas_key)})")
            annotations.append(f"@get:JsonProperty({kotlin_string(prop.oas_key)})")
            for annotation in self.validation.for_property(prop):
                self.required_imports.add(annotation.import_name)
                annotations.append(annotation.text)

        modifier = {
            PropertyModifier.OPEN: "public open val",
            PropertyModifier.OVERRIDE: "override val",
        }.get(prop.modifier, "public val")

        declaration = f"{modifier} {to_camel_case(prop.oas_key)}: {self.property_type(prop)}"
        if prop.default is not None:
            self._track_default_imports(prop)
            declaration += f" = {prop.default.expression}"
        return {"annotations": annotations, "declaration": declaration}

    def _track_default_imports(self, prop: PropertyDescriptor) -> None:
        expression = prop.default.expression
        if "BigDecimal(" in expression:
            self.required_imports.add("java.math.BigDecimal")
        if "JsonNullable." in expression:
            self.required_imports.add(JSON_NULLABLE)

    def _prepare_capture_context(self, prop: AdditionalPropertiesCapture, descriptor: SchemaDescriptor) -> dict[str, Any]:
        for annotation in ("JsonAnyGetter", "JsonAnySetter", "JsonIgnore"):
            self.required_imports.add(f"{JACKSON}.{annotation}")
        value_type = self.translate_type(prop.type_ref.values) if prop.type_ref.values else "Any"

        # Declared properties keep their names; the capture map is numbered past them
        taken = {to_camel_case(p.oas_key) for p in descriptor.properties if not isinstance(p, AdditionalPropertiesCapture)}
        name, counter = CAPTURE_NAME, 2
        while name in taken:
            name = f"{CAPTURE_NAME}{counter}"
            counter += 1

        return {
            "NAME": name,
            "VALUE_TYPE": value_type,
            "parameter": {
                "annotations": ["@get:JsonIgnore"],
                "declaration": f"public val {name}: MutableMap<String, {value_type}> = {prop.default.expression}",
            },
        }

    def _super_call(self, descriptor: SchemaDescriptor, model: TypeModel) -> str | None:
        """Supertype constructor call passing the inherited open properties by name."""
        supertype = model.supertype_of(descriptor.name)
        if supertype is None:
            return None
        own = {p.oas_key for p in descriptor.properties}
        arguments = [
            f"{to_camel_case(p.oas_key)} = {to_camel_case(p.oas_key)}"
            for p in supertype.properties
            if p.modifier != PropertyModifier.ABSTRACT and not isinstance(p, AdditionalPropertiesCapture) and p.oas_key in own
        ]
        return f"{supertype.name}({', '.join(arguments)})"

    def _prepare_type_info(self, descriptor: SchemaDescriptor, model: TypeModel) -> dict[str, Any]:
        self.required_imports.add(f"{JACKSON}.JsonTypeInfo")
        self.required_imports.add(f"{JACKSON}.JsonSubTypes")

        subtypes = []
        for sub in model.subtypes_of(descriptor.name):
            if sub.name in self.config.ignore_classes:
                continue
            discriminator = sub.get_property(descriptor.discriminator_property)
            keys = [key.value for key in discriminator.discriminator_mappings] if discriminator else []
            for value in keys or [sub.name]:
                subtypes.append((sub.name, kotlin_string(value)))

        return {
            "PROPERTY": kotlin_string(descriptor.discriminator_property),
            "subtypes": subtypes,
        }
