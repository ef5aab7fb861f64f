"""Resource assembly and resource options."""

from .assembler import RESOURCE_TYPES, ResourceAssembler, validate_resource_metadata
from .descriptors import MountDescriptor, ResourceDescriptor, referenced_types, used_link_types
from .options import (
    ResourceOptionsRegistry,
    clean_options,
    options_from_info,
    options_from_resources_endpoint,
    options_from_routes,
    render_options,
    render_options_json,
)

__all__ = [
    "RESOURCE_TYPES",
    "MountDescriptor",
    "ResourceAssembler",
    "ResourceDescriptor",
    "ResourceOptionsRegistry",
    "clean_options",
    "options_from_info",
    "options_from_resources_endpoint",
    "options_from_routes",
    "referenced_types",
    "render_options",
    "render_options_json",
    "used_link_types",
    "validate_resource_metadata",
]
