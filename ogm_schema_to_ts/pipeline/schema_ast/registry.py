"""
Ordered entity registry for one generation run.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

from .nodes import EntityKind, EntityRecord

logger = logging.getLogger(__name__)


class EntityRegistry:
    """In-memory table of recognized entities.

    Names are unique and the first registration wins; insertion order is
    preserved so generated output is stable between runs.
    """

    def __init__(self, definitions: dict[str, Any] | None = None):
        self._entities: dict[str, EntityRecord] = {}
        # Raw named schemas, used to resolve non-entity references
        self.definitions: dict[str, Any] = dict(definitions or {})

    def add(self, record: EntityRecord) -> bool:
        """
        Register an entity.

        Returns:
            True if registered, False if the name was already taken
        """
        existing = self._entities.get(record.name)
        if existing is not None:
            logger.warning(
                "Duplicate entity %r at %s ignored (first seen at %s)",
                record.name,
                record.source_path or "?",
                existing.source_path or "?",
            )
            return False
        self._entities[record.name] = record
        return True

    def get(self, name: str) -> EntityRecord | None:
        return self._entities.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._entities

    def __iter__(self) -> Iterator[EntityRecord]:
        return iter(self._entities.values())

    def __len__(self) -> int:
        return len(self._entities)

    def of_kind(self, kind: EntityKind) -> list[EntityRecord]:
        return [record for record in self._entities.values() if record.kind == kind]

    def is_node_or_link(self, name: str) -> bool:
        record = self._entities.get(name)
        return record is not None and record.kind in (EntityKind.NODE, EntityKind.LINK)

    def names(self) -> list[str]:
        return list(self._entities)
