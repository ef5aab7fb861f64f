"""
Reference resolver for $ref resolution.

Resolves $ref paths to their named schema in the document.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ...errors import ReferenceResolutionError
from ...utils import sanitize_name
from ..schema_ast.registry import EntityRegistry

# Prefix of generated generic-edge schemas
RESOURCE_EDGE_PREFIX = "ResourceEdge_"


@dataclass
class ResolvedRef:
    """A resolved $ref."""

    ref_path: str = ""
    raw_name: str = ""  # Definition key in the document
    target_name: str = ""  # Sanitized declaration name
    target_schema: Any = None  # Raw referenced schema
    is_entity: bool = False  # Whether the target is a registered node/link
    is_resource_edge: bool = False


class ReferenceResolver:
    """Resolves $ref to named schemas and registered entities."""

    # Local prefixes accepted in addition to the configured one
    LOCAL_PREFIXES = ("#/$defs/", "#/definitions/")

    def __init__(self, registry: EntityRegistry, ref_prefix: str = "#/components/schemas/"):
        """
        Initialize the resolver.

        Args:
            registry: Entity registry (also holding the raw named schemas)
            ref_prefix: Prefix stripped from $ref values
        """
        self.registry = registry
        self.ref_prefix = ref_prefix

    def definition_name(self, ref_path: str) -> str:
        """Extract the definition key from a $ref path."""
        for prefix in (self.ref_prefix, *self.LOCAL_PREFIXES):
            if prefix and ref_path.startswith(prefix):
                return ref_path[len(prefix) :]
        return ref_path.rsplit("/", 1)[-1]

    def resolve(self, ref_path: str, source: str = "") -> ResolvedRef:
        """
        Resolve a $ref path.

        Args:
            ref_path: The $ref value
            source: Location of the reference (for error messages)

        Returns:
            ResolvedRef with target information

        Raises:
            ReferenceResolutionError: If the reference points nowhere
        """
        raw_name = self.definition_name(ref_path)
        target_name = sanitize_name(raw_name)

        if target_name.startswith(RESOURCE_EDGE_PREFIX):
            return ResolvedRef(
                ref_path=ref_path,
                raw_name=raw_name,
                target_name=target_name,
                is_resource_edge=True,
            )

        if self.registry.is_node_or_link(target_name):
            record = self.registry.get(target_name)
            return ResolvedRef(
                ref_path=ref_path,
                raw_name=raw_name,
                target_name=target_name,
                target_schema=record.schema if record else None,
                is_entity=True,
            )

        target_schema = self.registry.definitions.get(raw_name)
        if target_schema is None:
            raise ReferenceResolutionError(ref_path, source)

        return ResolvedRef(
            ref_path=ref_path,
            raw_name=raw_name,
            target_name=target_name,
            target_schema=target_schema,
        )
