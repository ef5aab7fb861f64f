"""
Entity records extracted from an OGM-annotated schema.

These records represent the recognized node, link and resource definitions
of one generation run, before any type synthesis.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class EntityKind(Enum):
    """Kind of OGM entity."""

    NODE = "node"
    LINK = "link"
    RESOURCE = "resource"


@dataclass(frozen=True)
class Relation:
    """A relation declared in node metadata."""

    cardinality: str = ""
    incoming: bool = False
    required: bool = False
    target: str = ""
    type: str = ""

    @staticmethod
    def from_dict(d: dict[str, Any]) -> Relation:
        return Relation(
            cardinality=str(d.get("cardinality") or ""),
            incoming=bool(d.get("incoming", False)),
            required=bool(d.get("required", False)),
            target=str(d.get("target") or ""),
            type=str(d.get("type") or ""),
        )


@dataclass(frozen=True)
class NodeMetadata:
    """Node marker contents."""

    label: str = ""
    name: str = ""
    relations: tuple[Relation, ...] = ()


@dataclass(frozen=True)
class LinkMetadata:
    """Link marker contents."""

    source: str = ""
    target: str = ""
    type: str = ""


@dataclass(frozen=True)
class ResourceMetadata:
    """Resource marker contents.

    `info` is kept as the raw mapping; it is validated by the resource
    assembler rather than at extraction time.
    """

    type: Any = None
    info: Any = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class EntityRecord:
    """A recognized entity.

    Attributes:
        name: Sanitized entity name (unique within a registry)
        kind: Node, link or resource
        schema: Effective field set (the wrapper body when one is present)
        metadata: Parsed marker contents
        source_path: Location in the document (for messages)
    """

    name: str
    kind: EntityKind
    schema: dict[str, Any] = field(compare=False)
    metadata: NodeMetadata | LinkMetadata | ResourceMetadata | None = field(default=None, compare=False)
    source_path: str = field(default="", compare=False)

    @property
    def properties(self) -> dict[str, Any]:
        props = self.schema.get("properties")
        return props if isinstance(props, dict) else {}

    @property
    def required(self) -> set[str]:
        req = self.schema.get("required")
        return set(req) if isinstance(req, list) else set()
