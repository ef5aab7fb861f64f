"""
Type synthesizer.

Phase 2 of the pipeline: map one schema value description to a symbolic
TypeExpr. Unknown or unsupported shapes degrade to `any` rather than
failing the run.
"""

from __future__ import annotations

import logging
from typing import Any

from ...errors import ReferenceResolutionError
from ..schema_ast.registry import EntityRegistry
from .reference_resolver import ReferenceResolver
from .type_expr import (
    ANY,
    Array,
    Literal,
    Primitive,
    PrimitiveKind,
    Ref,
    TypeExpr,
    Union,
    is_null,
)

logger = logging.getLogger(__name__)

# Generic edge type used for generated ResourceEdge_* schemas
RESOURCE_EDGE_TYPE = "ResourceEdge<any, any>"


def make_union(members: list[TypeExpr], nullable: bool = False) -> TypeExpr:
    """
    Build a normalized union.

    Null members are folded into the nullable flag, duplicates are dropped
    keeping first-seen order, and a single non-nullable member is returned
    as is.
    """
    unique: list[TypeExpr] = []
    for member in members:
        if is_null(member):
            nullable = True
            continue
        if isinstance(member, Union):
            # Flatten nested unions
            nullable = nullable or member.nullable
            candidates = list(member.members)
        else:
            candidates = [member]
        for candidate in candidates:
            if candidate not in unique:
                unique.append(candidate)

    if ANY in unique:
        return ANY
    if not unique:
        return ANY
    if len(unique) == 1 and not nullable:
        return unique[0]
    return Union(members=tuple(unique), nullable=nullable)


class TypeSynthesizer:
    """Converts schema value descriptions into TypeExpr."""

    PRIMITIVE_MAP = {
        "string": PrimitiveKind.STRING,
        "number": PrimitiveKind.NUMBER,
        "integer": PrimitiveKind.INTEGER,
        "boolean": PrimitiveKind.BOOLEAN,
        "null": PrimitiveKind.NULL,
    }

    def __init__(self, registry: EntityRegistry, ref_prefix: str = "#/components/schemas/"):
        """
        Initialize the synthesizer.

        Args:
            registry: Entity registry of the current run
            ref_prefix: Prefix stripped from $ref values
        """
        self.registry = registry
        self.resolver = ReferenceResolver(registry, ref_prefix)

    def synthesize(self, schema: Any, source: str = "") -> TypeExpr:
        """
        Synthesize the type of one schema value.

        Args:
            schema: Raw schema value
            source: Location of the value (for messages)

        Returns:
            The synthesized TypeExpr
        """
        return self._synthesize(schema, frozenset(), source)

    def _synthesize(self, schema: Any, visited: frozenset[str], source: str) -> TypeExpr:
        if not isinstance(schema, dict) or not schema:
            return ANY

        if "$ref" in schema:
            return self._synthesize_ref(schema["$ref"], visited, source)

        if "anyOf" in schema or "oneOf" in schema:
            branches = schema.get("anyOf") or schema.get("oneOf") or []
            return self._synthesize_union(branches, visited, source)

        if "allOf" in schema:
            # Composition is not synthesized, the first branch stands for the whole
            branches = schema["allOf"]
            return self._synthesize(branches[0], visited, source) if branches else ANY

        if "enum" in schema:
            values = schema["enum"]
            return Literal(values=tuple(values)) if isinstance(values, list) and values else ANY

        if "const" in schema:
            return Literal(values=(schema["const"],))

        schema_type = schema.get("type")

        if isinstance(schema_type, list):
            members = [self._synthesize({**schema, "type": t}, visited, source) for t in schema_type]
            return make_union(members)

        if schema_type == "array":
            items = schema.get("items")
            if isinstance(items, dict) and items:
                return Array(elem=self._synthesize(items, visited, f"{source}/items"))
            return Array(elem=ANY)

        if schema_type == "object" or "properties" in schema:
            # Anonymous object shapes are not synthesized
            return ANY

        kind = self.PRIMITIVE_MAP.get(schema_type) if isinstance(schema_type, str) else None
        if kind is not None:
            return Primitive(kind=kind)

        return ANY

    def _synthesize_ref(self, ref_path: Any, visited: frozenset[str], source: str) -> TypeExpr:
        if not isinstance(ref_path, str):
            return ANY

        try:
            resolved = self.resolver.resolve(ref_path, source)
        except ReferenceResolutionError as e:
            logger.warning("%s; degrading to any", e)
            return ANY

        if resolved.is_resource_edge:
            return Ref(name=RESOURCE_EDGE_TYPE)

        if resolved.is_entity:
            return Ref(name=resolved.target_name)

        if resolved.raw_name in visited:
            logger.debug("Cyclic reference %s at %s resolved to any", ref_path, source or "?")
            return ANY

        return self._synthesize(
            resolved.target_schema,
            visited | {resolved.raw_name},
            f"{source}->{resolved.raw_name}",
        )

    def _synthesize_union(self, branches: Any, visited: frozenset[str], source: str) -> TypeExpr:
        if not isinstance(branches, list):
            return ANY
        members = [self._synthesize(branch, visited, f"{source}/{i}") for i, branch in enumerate(branches)]
        return make_union(members)
