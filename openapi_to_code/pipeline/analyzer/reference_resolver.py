"""
Reference resolver for $ref resolution.

Resolves local JSON pointers to schema nodes, following $ref chains to
their terminating schema.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any
from urllib.parse import unquote

from ..errors import UnresolvableReferenceError
from ..schema_ast.nodes import DefinitionNode, RefNode, SchemaAST, SchemaNode
from ..schema_ast.parser import SchemaParser


@dataclass
class ResolvedRef:
    """A $ref followed to its terminating (non-$ref) schema."""

    ref_path: str = ""
    # Component schema the chain ends on, None for pointers inside a schema
    target_name: str | None = None
    target_node: SchemaNode | None = None


class ReferenceResolver:
    """Resolves $ref to actual definitions."""

    def __init__(self, ast: SchemaAST):
        """
        Initialize the resolver.

        Args:
            ast: The parsed schema AST
        """
        self.ast = ast
        self._parser = SchemaParser()
        self._definition_cache: dict[str, DefinitionNode] = {}
        self._pointer_to_name: dict[str, str] = {}
        # Nodes parsed on demand for pointers that are not component schemas
        self._pointer_cache: dict[str, SchemaNode] = {}
        self._lock = threading.Lock()
        self._build_cache()

    def _build_cache(self) -> None:
        """Build a cache of definitions by name and by pointer."""
        for def_node in self.ast.definitions:
            self._definition_cache[def_node.name] = def_node
            self._pointer_to_name[def_node.source_path] = def_node.name

    def get_definition(self, name: str) -> DefinitionNode | None:
        """Get a definition by component name."""
        return self._definition_cache.get(name)

    def definition_name(self, ref_path: str) -> str | None:
        """Return the component name a pointer designates, if it designates one."""
        return self._pointer_to_name.get(self._normalize(ref_path))

    def resolve(self, ref_node: RefNode, schema_name: str | None = None) -> ResolvedRef:
        """
        Follow a $ref chain to its terminating schema.

        Args:
            ref_node: The RefNode to resolve
            schema_name: Schema being resolved (for error messages)

        Returns:
            ResolvedRef with target information

        Raises:
            UnresolvableReferenceError: On a dangling pointer or a $ref cycle
        """
        seen: list[str] = []
        current: SchemaNode = ref_node
        target_name = None

        while isinstance(current, RefNode):
            pointer = self._normalize(current.ref_path)
            if pointer in seen:
                chain = " -> ".join([*seen, pointer])
                raise UnresolvableReferenceError(ref_node.ref_path, f"circular reference chain {chain}", schema_name, ref_node.source_path)
            seen.append(pointer)

            name = self._pointer_to_name.get(pointer)
            if name is not None:
                target_name = name
                current = self._definition_cache[name].body
            else:
                target_name = None
                current = self._lookup_pointer(current, schema_name)

        return ResolvedRef(ref_path=ref_node.ref_path, target_name=target_name, target_node=current)

    def resolve_mapping_target(self, target: str, schema_name: str | None = None, source_path: str | None = None) -> str:
        """Resolve a discriminator mapping value ($ref or bare schema name) to a component name."""
        if target.startswith("#"):
            name = self.definition_name(target)
        else:
            name = target if target in self._definition_cache else None
        if name is None:
            raise UnresolvableReferenceError(target, "discriminator mapping target is not a component schema", schema_name, source_path)
        return name

    def _normalize(self, ref_path: str) -> str:
        return unquote(ref_path)

    def _lookup_pointer(self, ref_node: RefNode, schema_name: str | None) -> SchemaNode:
        """Parse the schema a non-component pointer designates."""
        pointer = self._normalize(ref_node.ref_path)
        if not pointer.startswith("#"):
            raise UnresolvableReferenceError(ref_node.ref_path, "external references are not supported", schema_name, ref_node.source_path)

        with self._lock:
            cached = self._pointer_cache.get(pointer)
        if cached is not None:
            return cached

        raw: Any = self.ast.raw_document
        for token in pointer[1:].split("/")[1:]:
            token = token.replace("~1", "/").replace("~0", "~")
            if isinstance(raw, dict) and token in raw:
                raw = raw[token]
            elif isinstance(raw, list) and token.isdigit() and int(token) < len(raw):
                raw = raw[int(token)]
            else:
                raise UnresolvableReferenceError(ref_node.ref_path, "pointer does not exist in the document", schema_name, ref_node.source_path)

        node = self._parser.parse_node(raw, pointer)
        with self._lock:
            # First writer wins: parsing is deterministic
            return self._pointer_cache.setdefault(pointer, node)
