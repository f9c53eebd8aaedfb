"""
OpenAPI schema parser that builds an AST.

Phase 1 of the pipeline: parse the component schemas of an already
loaded OpenAPI document into an AST without resolving references,
flattening compositions or doing language-specific processing.
"""

from __future__ import annotations

from typing import Any

from .nodes import (
    AllOfNode,
    AnyNode,
    ArrayNode,
    DefinitionNode,
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


def escape_pointer_token(token: str) -> str:
    """Escape a JSON pointer reference token (RFC 6901)."""
    return token.replace("~", "~0").replace("/", "~1")


class SchemaParser:
    """Parses the schemas of an OpenAPI document into an AST."""

    # Primitive type names
    PRIMITIVE_TYPES = {"string", "integer", "number", "boolean"}

    def parse(self, document: dict[str, Any]) -> SchemaAST:
        """
        Parse an OpenAPI document into an AST.

        Args:
            document: The OpenAPI document (already loaded from JSON or YAML)

        Returns:
            SchemaAST with one definition per component schema
        """
        ast = SchemaAST(
            openapi_version=str(document.get("openapi") or document.get("swagger") or ""),
            raw_document=document,
        )

        schemas = (document.get("components") or {}).get("schemas")
        base = "#/components/schemas"
        if schemas is None and "definitions" in document:
            schemas = document["definitions"]
            base = "#/definitions"

        for name, def_schema in (schemas or {}).items():
            path = f"{base}/{escape_pointer_token(name)}"
            ast.definitions.append(
                DefinitionNode(
                    name=name,
                    body=self._parse_schema_node(def_schema, path),
                    source_path=path,
                )
            )

        return ast

    def parse_node(self, schema: Any, path: str) -> SchemaNode:
        """Parse a single schema located at ``path`` in the document."""
        return self._parse_schema_node(schema, path)

    def _parse_schema_node(self, schema: Any, path: str) -> SchemaNode:
        """
        Parse a schema node recursively.

        Args:
            schema: The schema dictionary
            path: Current JSON pointer in the document

        Returns:
            Appropriate SchemaNode subclass
        """
        if not isinstance(schema, dict):
            # Boolean schemas (true / {}) carry no type information
            return AnyNode(source_path=path)

        if "$ref" in schema:
            node: SchemaNode = RefNode(ref_path=schema["$ref"], source_path=path)
        elif "allOf" in schema:
            node = self._parse_allof_node(schema, path)
        elif "oneOf" in schema or "anyOf" in schema:
            node = self._parse_union_node(schema, path)
        elif "enum" in schema:
            node = self._parse_enum_node(schema, path)
        else:
            node = self._parse_type_node(schema, path)

        self._apply_common(node, schema)
        return node

    def _apply_common(self, node: SchemaNode, schema: dict[str, Any]) -> None:
        """Copy keywords shared by every kind of schema onto the node."""
        node.metadata.update({k: v for k, v in schema.items() if k.startswith("x-")})
        if schema.get("nullable") is True:
            node.nullable = True
        if schema.get("description") is not None:
            node.description = schema["description"]
        if schema.get("default") is not None:
            node.default_value = schema["default"]
            node.has_default = True

    def _parse_discriminator(self, schema: dict[str, Any]) -> DiscriminatorDef | None:
        discriminator = schema.get("discriminator")
        if not isinstance(discriminator, dict) or "propertyName" not in discriminator:
            return None
        return DiscriminatorDef(
            property_name=discriminator["propertyName"],
            mapping=dict(discriminator.get("mapping") or {}),
        )

    def _parse_allof_node(self, schema: dict[str, Any], path: str) -> AllOfNode:
        """Parse an allOf composition."""
        branches = [self._parse_schema_node(branch, f"{path}/allOf/{i}") for i, branch in enumerate(schema["allOf"])]

        # Properties declared next to allOf act as one more branch
        if "properties" in schema or "additionalProperties" in schema:
            branches.append(self._parse_object_node(schema, path))

        return AllOfNode(
            branches=branches,
            discriminator=self._parse_discriminator(schema),
            source_path=path,
        )

    def _parse_union_node(self, schema: dict[str, Any], path: str) -> SchemaNode:
        """Parse a oneOf or anyOf union node."""
        union_type = "oneOf" if "oneOf" in schema else "anyOf"

        variants = []
        nullable = False
        for i, variant in enumerate(schema[union_type]):
            if isinstance(variant, dict) and variant.get("type") == "null":
                nullable = True
                continue
            variants.append(self._parse_schema_node(variant, f"{path}/{union_type}/{i}"))

        discriminator = self._parse_discriminator(schema)

        # oneOf: [X, {type: null}] is just a nullable X
        if len(variants) == 1 and discriminator is None and "properties" not in schema:
            node = variants[0]
            node.nullable = node.nullable or nullable
            return node

        base = None
        if "properties" in schema:
            base = self._parse_object_node(schema, path)

        return UnionNode(
            variants=variants,
            union_type=union_type,
            discriminator=discriminator,
            base=base,
            nullable=nullable,
            source_path=path,
        )

    def _parse_enum_node(self, schema: dict[str, Any], path: str) -> EnumNode:
        """Parse an enum node."""
        type_name, nullable = self._split_type(schema.get("type"))
        values = list(schema["enum"])
        if None in values:
            nullable = True
            values = [v for v in values if v is not None]

        if type_name is None:
            type_name = self._infer_type(values[0]) if values else "string"

        return EnumNode(
            values=values,
            type_name=type_name,
            format=schema.get("format"),
            nullable=nullable,
            source_path=path,
        )

    def _split_type(self, type_value: Any) -> tuple[str | None, bool]:
        """Split a type keyword into (single type, nullable).

        Type arrays with several non-null types yield "any".
        """
        if isinstance(type_value, list):
            non_null = [t for t in type_value if t != "null"]
            nullable = len(non_null) != len(type_value)
            if len(non_null) == 1:
                return non_null[0], nullable
            return ("any" if non_null else None), nullable
        if type_value == "null":
            return None, True
        return type_value, False

    def _parse_type_node(self, schema: dict[str, Any], path: str) -> SchemaNode:
        """Parse a type-based node."""
        type_name, nullable = self._split_type(schema.get("type"))

        if type_name == "array" or (type_name is None and "items" in schema):
            node: SchemaNode = self._parse_array_node(schema, path)
        elif type_name == "object" or (type_name is None and any(k in schema for k in ("properties", "additionalProperties", "required", "discriminator"))):
            node = self._parse_object_node(schema, path)
        elif type_name in self.PRIMITIVE_TYPES:
            node = self._parse_primitive_node(schema, type_name, path)
        else:
            node = AnyNode(source_path=path)

        node.nullable = nullable
        return node

    def _parse_array_node(self, schema: dict[str, Any], path: str) -> ArrayNode:
        """Parse an array type node."""
        items_schema = schema.get("items")
        items = self._parse_schema_node(items_schema, f"{path}/items") if items_schema is not None else AnyNode(source_path=f"{path}/items")

        return ArrayNode(
            items=items,
            min_items=schema.get("minItems"),
            max_items=schema.get("maxItems"),
            source_path=path,
        )

    def _parse_object_node(self, schema: dict[str, Any], path: str) -> ObjectNode:
        """Parse an object type node."""
        properties = []
        required_fields = list(schema.get("required") or [])

        for prop_name, prop_schema in (schema.get("properties") or {}).items():
            prop_path = f"{path}/properties/{escape_pointer_token(prop_name)}"
            properties.append(
                PropertyDef(
                    name=prop_name,
                    type_node=self._parse_schema_node(prop_schema, prop_path),
                    is_required=prop_name in required_fields,
                    source_path=prop_path,
                )
            )

        additional: bool | SchemaNode | None = None
        raw_additional = schema.get("additionalProperties")
        if raw_additional is True or raw_additional == {}:
            additional = True
        elif isinstance(raw_additional, dict):
            additional = self._parse_schema_node(raw_additional, f"{path}/additionalProperties")

        return ObjectNode(
            properties=properties,
            required=required_fields,
            additional_properties=additional,
            discriminator=self._parse_discriminator(schema),
            is_explicit_object=schema.get("type") == "object",
            source_path=path,
        )

    def _parse_primitive_node(self, schema: dict[str, Any], type_name: str, path: str) -> PrimitiveNode:
        """Parse a primitive type node."""
        node = PrimitiveNode(
            type_name=type_name,
            format=schema.get("format"),
            source_path=path,
        )

        # Extract validation constraints
        if type_name == "string":
            node.min_length = schema.get("minLength")
            node.max_length = schema.get("maxLength")
            node.pattern = schema.get("pattern")

        if type_name in ("integer", "number"):
            node.minimum = schema.get("minimum")
            node.maximum = schema.get("maximum")
            node.exclusive_minimum = schema.get("exclusiveMinimum")
            node.exclusive_maximum = schema.get("exclusiveMaximum")

        return node

    def _infer_type(self, value: Any) -> str:
        """Infer the OpenAPI type from a Python value."""
        if isinstance(value, bool):
            return "boolean"
        if isinstance(value, int):
            return "integer"
        if isinstance(value, float):
            return "number"
        return "string"
