"""
Resource assembly.

Turns the resource entities of a frozen registry into resource
descriptors: a pivot entity plus named mounts. Marker metadata is
validated first; invalid resources are omitted with a warning, or raise
when `strict_resources` is set.
"""

from __future__ import annotations

import logging
from typing import Any

from ...errors import InvalidResourceMetadataError
from ...utils import loose_key, sanitize_name
from ..config import GeneratorConfig
from ..schema_ast.nodes import EntityKind, EntityRecord, ResourceMetadata
from ..schema_ast.registry import EntityRegistry
from .descriptors import MountDescriptor, ResourceDescriptor
from .options import ResourceOptionsRegistry

logger = logging.getLogger(__name__)

RESOURCE_TYPES = ("proxy", "create", "update", "link")

_RESOURCE_SUFFIX = "Resource"
_EDGE_PREFIX = "ResourceEdge_"

# Mount keys consumed by the descriptor itself
_MOUNT_KEYS = ("pivot_type", "is_resource", "is_array", "relation_model", "info")


def validate_resource_metadata(metadata: ResourceMetadata) -> list[str]:
    """
    Check resource marker contents.

    Args:
        metadata: Parsed resource marker

    Returns:
        A list of problems, empty when the metadata is usable
    """
    problems = []
    if metadata.type is None:
        problems.append("missing type")
    elif metadata.type not in RESOURCE_TYPES:
        problems.append(f"invalid type {metadata.type!r}")

    info = metadata.info
    if info is None:
        return problems
    if not isinstance(info, dict):
        return problems + ["info must be an object"]

    for key in ("pivot_type", "pivot_key"):
        if key in info and info[key] is not None and not isinstance(info[key], str):
            problems.append(f"{key} must be a string")

    mounts = info.get("mounts")
    if mounts is None:
        return problems
    if not isinstance(mounts, dict):
        return problems + ["mounts must be an object"]

    for mount_name, mount in mounts.items():
        if not isinstance(mount, dict):
            problems.append(f"mount {mount_name} must be an object")
            continue
        for key in ("is_array", "is_resource"):
            if key in mount and not isinstance(mount[key], bool):
                problems.append(f"mount {mount_name}: {key} must be a boolean")
        for key in ("pivot_type", "relation_model"):
            if mount.get(key) is not None and not isinstance(mount[key], str):
                problems.append(f"mount {mount_name}: {key} must be a string")

        mount_info = mount.get("info")
        if mount_info is None:
            continue
        if not isinstance(mount_info, dict):
            problems.append(f"mount {mount_name}: info must be an object")
        elif mount_info.get("name") is not None and not isinstance(mount_info["name"], str):
            problems.append(f"mount {mount_name}: info.name must be a string")

    return problems


class ResourceAssembler:
    """
    Assembles resource descriptors from a registry.

    Args:
        registry: Frozen entity registry of the run
        config: Generation configuration
        options: Resource options consulted for resources whose marker
            carries no info
    """

    def __init__(
        self,
        registry: EntityRegistry,
        config: GeneratorConfig,
        options: ResourceOptionsRegistry | None = None,
    ):
        self.registry = registry
        self.config = config
        self.options = options or ResourceOptionsRegistry()

    def assemble_all(self) -> list[ResourceDescriptor]:
        """Assemble every resource entity of an enabled resource type."""
        descriptors = []
        for record in self.registry.of_kind(EntityKind.RESOURCE):
            metadata = record.metadata
            if not isinstance(metadata, ResourceMetadata):
                continue
            if metadata.type is not None and metadata.type not in self.config.resource_types:
                logger.debug("Skipping %s resource %s", metadata.type, record.name)
                continue

            try:
                descriptors.append(self.assemble(record))
            except InvalidResourceMetadataError as e:
                if self.config.strict_resources:
                    raise
                logger.warning("Omitting resource: %s", e)

        return descriptors

    def assemble(self, record: EntityRecord) -> ResourceDescriptor:
        """
        Assemble one resource.

        Raises:
            InvalidResourceMetadataError: If the marker metadata is invalid
        """
        metadata = record.metadata
        if not isinstance(metadata, ResourceMetadata):
            raise InvalidResourceMetadataError(record.name, ["not a resource"])

        problems = validate_resource_metadata(metadata)
        if problems:
            raise InvalidResourceMetadataError(record.name, problems)

        info = metadata.info or self.options.get_info(record.name) or {}
        pivot_type = info.get("pivot_type") or self.infer_pivot_type(record.name)
        pivot_key = info.get("pivot_key") or self.infer_pivot_key(record, pivot_type)

        mounts = {name: self.build_mount(mount) for name, mount in (info.get("mounts") or {}).items()}

        description = info.get("description") or record.schema.get("description")
        return ResourceDescriptor(
            name=record.name,
            pivot_key=pivot_key,
            pivot_type=sanitize_name(pivot_type),
            mounts=mounts,
            resource_type=metadata.type,
            description=description if isinstance(description, str) else None,
        )

    def infer_pivot_type(self, resource_name: str) -> str:
        """TaskResource -> Task"""
        if resource_name.endswith(_RESOURCE_SUFFIX) and len(resource_name) > len(_RESOURCE_SUFFIX):
            return resource_name[: -len(_RESOURCE_SUFFIX)]
        return resource_name

    def infer_pivot_key(self, record: EntityRecord, pivot_type: str) -> str:
        """
        Find the field holding the pivot entity.

        The first field whose name matches the pivot type, ignoring case and
        underscores, wins. Resource edge fields are never the pivot.
        """
        target = loose_key(pivot_type)
        for field_name, field_schema in record.properties.items():
            ref = field_schema.get("$ref", "") if isinstance(field_schema, dict) else ""
            if isinstance(ref, str) and _EDGE_PREFIX in ref:
                continue
            if loose_key(field_name) == target:
                return field_name

        logger.debug(
            "No pivot field found for %s; using %s",
            record.name,
            self.config.pivot_key_fallback,
        )
        return self.config.pivot_key_fallback

    def build_mount(self, mount: dict[str, Any]) -> MountDescriptor:
        is_resource = mount.get("is_resource", False)
        mount_info = mount.get("info")
        resource_name = mount_info.get("name") if is_resource and isinstance(mount_info, dict) else None

        if resource_name:
            target_type = sanitize_name(resource_name)
        elif mount.get("pivot_type"):
            target_type = sanitize_name(mount["pivot_type"])
        else:
            target_type = "any"

        return MountDescriptor(
            target_type=target_type,
            link_type=sanitize_name(mount.get("relation_model") or "Link"),
            is_array=mount.get("is_array", False),
            is_resource=is_resource,
            relation_metadata={k: v for k, v in mount.items() if k not in _MOUNT_KEYS},
        )
