"""
Configuration for the generation pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class OutputMode(str, Enum):
    """Output mode for file generation.

    Controls behavior when an output file already exists.
    """

    ERROR_IF_EXISTS = "error"  # Raise error if file exists
    FORCE = "force"  # Default: overwrite, the files are fully generated


@dataclass
class OutputConfig:
    """Configuration for output file handling.

    Attributes:
        mode: How to handle existing output files
        validate_before_write: Whether to validate buffers before writing
        atomic_write: Whether to use atomic file writes
    """

    mode: OutputMode = OutputMode.FORCE
    validate_before_write: bool = True
    atomic_write: bool = True


@dataclass
class GeneratorConfig:
    """Configuration options for declaration generation."""

    # Marker keys carrying OGM metadata
    node_marker: str = "_malevich_ogm_node"
    link_marker: str = "_malevich_ogm_link"
    resource_marker: str = "_resource"

    # Wrapper field holding the authoritative field shape of an entity
    wrapper_key: str = "_node_schema"

    # Prefix stripped from $ref values
    ref_prefix: str = "#/components/schemas/"

    # Fields owned by the base declaration
    base_fields: list[str] = field(default_factory=lambda: ["uid", "created_at", "updated_at"])

    # Pivot key used when neither metadata nor field names give one
    pivot_key_fallback: str = "uid"

    # Resource marker types assembled into composite declarations
    resource_types: list[str] = field(default_factory=lambda: ["proxy"])

    # Entities to skip
    ignore_entities: list[str] = field(default_factory=list)

    # Use inline union syntax instead of type aliases
    use_inline_unions: bool = False

    # Inline single-use aliases after deduplication
    inline_aliases: bool = True

    # Aliases the inliner must keep
    preserve_aliases: list[str] = field(default_factory=list)

    # Treat invalid resource metadata as fatal
    strict_resources: bool = False

    # Add generation comment at top of each buffer
    add_generation_comment: bool = True

    # Import specifiers used by generated resources/options modules
    runtime_module: str = "@malevichai/nova-ts"
    nodes_module: str = "./nodes"

    # Output configuration
    output: OutputConfig = field(default_factory=OutputConfig)

    @staticmethod
    def from_dict(d: dict) -> GeneratorConfig:
        """Create a config from a dictionary."""
        config = GeneratorConfig()
        for k, v in d.items():
            if k == "output" and isinstance(v, dict):
                mode = v.get("mode", OutputMode.FORCE)
                if isinstance(mode, str):
                    mode = OutputMode(mode)
                config.output = OutputConfig(
                    mode=mode,
                    validate_before_write=v.get("validate_before_write", True),
                    atomic_write=v.get("atomic_write", True),
                )
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "node_marker": self.node_marker,
            "link_marker": self.link_marker,
            "resource_marker": self.resource_marker,
            "wrapper_key": self.wrapper_key,
            "ref_prefix": self.ref_prefix,
            "base_fields": self.base_fields,
            "pivot_key_fallback": self.pivot_key_fallback,
            "resource_types": self.resource_types,
            "ignore_entities": self.ignore_entities,
            "use_inline_unions": self.use_inline_unions,
            "inline_aliases": self.inline_aliases,
            "preserve_aliases": self.preserve_aliases,
            "strict_resources": self.strict_resources,
            "add_generation_comment": self.add_generation_comment,
            "runtime_module": self.runtime_module,
            "nodes_module": self.nodes_module,
            "output": {
                "mode": self.output.mode.value,
                "validate_before_write": self.output.validate_before_write,
                "atomic_write": self.output.atomic_write,
            },
        }
