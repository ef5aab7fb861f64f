"""
Schema AST module.

Contains the entity records, the entity registry and the metadata extractor.
"""

from __future__ import annotations

from .extractor import MetadataExtractor
from .nodes import (
    EntityKind,
    EntityRecord,
    LinkMetadata,
    NodeMetadata,
    Relation,
    ResourceMetadata,
)
from .registry import EntityRegistry

__all__ = [
    "EntityKind",
    "EntityRecord",
    "EntityRegistry",
    "LinkMetadata",
    "MetadataExtractor",
    "NodeMetadata",
    "Relation",
    "ResourceMetadata",
]
