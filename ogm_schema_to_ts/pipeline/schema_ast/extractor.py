"""
Metadata extractor.

Phase 1 of the pipeline: walk the raw schema tree depth-first and collect
every object carrying node, link or resource markers into an ordered
entity registry.
"""

from __future__ import annotations

import logging
from typing import Any

from ...errors import NoEntitiesFoundError
from ...utils import sanitize_name
from ..config import GeneratorConfig
from .nodes import (
    EntityKind,
    EntityRecord,
    LinkMetadata,
    NodeMetadata,
    Relation,
    ResourceMetadata,
)
from .registry import EntityRegistry

logger = logging.getLogger(__name__)


class MetadataExtractor:
    """Builds an EntityRegistry from a parsed schema document."""

    # Containers holding named schemas, in lookup order
    DEFINITION_CONTAINERS = (("components", "schemas"), ("$defs",), ("definitions",))

    def __init__(self, config: GeneratorConfig | None = None):
        self.config = config or GeneratorConfig()

    def extract(
        self,
        document: Any,
        source: str = "",
        required_kind: EntityKind | None = EntityKind.NODE,
    ) -> EntityRegistry:
        """
        Extract all OGM entities from a document.

        Args:
            document: Parsed schema document
            source: Identifier of the document (for error messages)
            required_kind: Kind that must be present at least once (None to disable)

        Returns:
            EntityRegistry in document order

        Raises:
            NoEntitiesFoundError: If no entity of required_kind was found
        """
        definitions = self.find_definitions(document)
        registry = EntityRegistry(definitions)

        if definitions:
            base_path = self._definitions_path(document)
            for name, schema in definitions.items():
                self._walk(schema, name, f"{base_path}/{name}", registry, top_level=True)
        else:
            self._walk(document, "", "#", registry, top_level=False)

        logger.debug("Extracted %d entities: %s", len(registry), ", ".join(registry.names()))

        if required_kind is not None and not registry.of_kind(required_kind):
            markers = {
                EntityKind.NODE: self.config.node_marker,
                EntityKind.LINK: self.config.link_marker,
                EntityKind.RESOURCE: self.config.resource_marker,
            }
            raise NoEntitiesFoundError(source or "<schema>", markers[required_kind])

        return registry

    def find_definitions(self, document: Any) -> dict[str, Any]:
        """Return the named schema container of a document, or {}."""
        for keys in self.DEFINITION_CONTAINERS:
            node = document
            for key in keys:
                node = node.get(key) if isinstance(node, dict) else None
            if isinstance(node, dict):
                return node
        return {}

    def _definitions_path(self, document: Any) -> str:
        for keys in self.DEFINITION_CONTAINERS:
            node = document
            for key in keys:
                node = node.get(key) if isinstance(node, dict) else None
            if isinstance(node, dict):
                return "#/" + "/".join(keys)
        return "#"

    def _wrapper(self, schema: dict[str, Any]) -> dict[str, Any] | None:
        wrapper = schema.get(self.config.wrapper_key)
        return wrapper if isinstance(wrapper, dict) else None

    def _marker(self, schema: dict[str, Any], key: str) -> Any:
        """Marker value from the outer object, else from the wrapper."""
        value = schema.get(key)
        if value:
            return value
        wrapper = self._wrapper(schema)
        if wrapper is not None:
            return wrapper.get(key) or None
        return None

    def is_node(self, schema: Any) -> bool:
        return isinstance(schema, dict) and bool(self._marker(schema, self.config.node_marker))

    def is_link(self, schema: Any) -> bool:
        return isinstance(schema, dict) and bool(self._marker(schema, self.config.link_marker))

    def is_resource(self, schema: Any) -> bool:
        return isinstance(schema, dict) and bool(self._marker(schema, self.config.resource_marker))

    def entity_name(self, schema: dict[str, Any], fallback: str) -> str:
        """Name of a nested entity: title, node name or the enclosing key."""
        node_meta = self._marker(schema, self.config.node_marker)
        candidates = [
            schema.get("title"),
            schema.get("_node_name"),
            node_meta.get("name") if isinstance(node_meta, dict) else None,
            fallback,
        ]
        for candidate in candidates:
            if isinstance(candidate, str) and candidate:
                return candidate
        return fallback

    def _walk(
        self,
        value: Any,
        key: str,
        path: str,
        registry: EntityRegistry,
        top_level: bool,
    ) -> None:
        if isinstance(value, list):
            for i, item in enumerate(value):
                self._walk(item, key, f"{path}/{i}", registry, top_level=False)
            return

        if not isinstance(value, dict):
            return

        is_entity = False
        if self.is_resource(value) or self.is_node(value) or self.is_link(value):
            name = key if top_level and key else self.entity_name(value, key)
            if name:
                is_entity = True
                self._register(value, name, path, registry)

        skip = {self.config.node_marker, self.config.link_marker, self.config.resource_marker}
        if is_entity:
            # The wrapper is part of the entity just registered
            skip.add(self.config.wrapper_key)

        for child_key, child in value.items():
            if child_key in skip:
                continue
            self._walk(child, child_key, f"{path}/{child_key}", registry, top_level=False)

    def _register(self, schema: dict[str, Any], name: str, path: str, registry: EntityRegistry) -> None:
        sanitized = sanitize_name(name)
        if sanitized in self.config.ignore_entities or name in self.config.ignore_entities:
            logger.debug("Ignoring entity %s", name)
            return

        effective = self._wrapper(schema) or schema

        if self.is_resource(schema):
            kind = EntityKind.RESOURCE
            metadata = self._parse_resource(self._marker(schema, self.config.resource_marker))
        elif self.is_node(schema):
            kind = EntityKind.NODE
            metadata = self._parse_node(self._marker(schema, self.config.node_marker))
        else:
            kind = EntityKind.LINK
            metadata = self._parse_link(self._marker(schema, self.config.link_marker))

        registry.add(
            EntityRecord(
                name=sanitized,
                kind=kind,
                schema=effective,
                metadata=metadata,
                source_path=path,
            )
        )

    def _parse_node(self, raw: Any) -> NodeMetadata:
        if not isinstance(raw, dict):
            return NodeMetadata()
        relations = raw.get("relations") or []
        return NodeMetadata(
            label=str(raw.get("label") or ""),
            name=str(raw.get("name") or ""),
            relations=tuple(Relation.from_dict(r) for r in relations if isinstance(r, dict)),
        )

    def _parse_link(self, raw: Any) -> LinkMetadata:
        if not isinstance(raw, dict):
            return LinkMetadata()
        return LinkMetadata(
            source=str(raw.get("source") or ""),
            target=str(raw.get("target") or ""),
            type=str(raw.get("type") or ""),
        )

    def _parse_resource(self, raw: Any) -> ResourceMetadata:
        if not isinstance(raw, dict):
            return ResourceMetadata(raw={})
        return ResourceMetadata(type=raw.get("type"), info=raw.get("info"), raw=raw)
