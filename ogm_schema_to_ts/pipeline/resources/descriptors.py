"""
Resource descriptors.

A resource bundles a pivot entity with named mounts (relations to other
entities or resources). Descriptors are assembled in one pass from the
frozen entity registry.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class MountDescriptor:
    """A named relation from a resource's pivot to another entity or resource."""

    target_type: str = "any"
    link_type: str = "Link"
    is_array: bool = False
    is_resource: bool = False
    relation_metadata: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


@dataclass
class ResourceDescriptor:
    """Pivot and mounts of one resource."""

    name: str = ""
    pivot_key: str = ""
    pivot_type: str = ""
    mounts: dict[str, MountDescriptor] = field(default_factory=dict)
    resource_type: str = "proxy"
    description: str | None = None


def referenced_types(descriptors: list[ResourceDescriptor], local_names: set[str] | None = None) -> list[str]:
    """
    Types a set of resource declarations needs from the nodes module.

    Args:
        descriptors: Assembled resources
        local_names: Names declared in the resources module itself

    Returns:
        Sorted type names
    """
    local = set(local_names or ())
    local.update(d.name for d in descriptors)
    names: set[str] = set()
    for descriptor in descriptors:
        names.add(descriptor.pivot_type)
        for mount in descriptor.mounts.values():
            names.add(mount.target_type)
    return sorted(n for n in names if n and n != "any" and n not in local)


def used_link_types(descriptors: list[ResourceDescriptor]) -> set[str]:
    """Relation models used by the mounts of a set of resources."""
    return {mount.link_type for d in descriptors for mount in d.mounts.values()}
