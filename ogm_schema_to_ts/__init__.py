"""OGM Schema to TypeScript Generator

A Python package for generating TypeScript declarations from OGM-annotated
OpenAPI / JSON Schema documents. Produces node and link interfaces,
parametrized resource composites and a resource options table, plus a
filter algebra for building resource queries.
"""

__version__ = "1.0.0"

from .errors import (
    GenerationError,
    InvalidResourceMetadataError,
    NoEntitiesFoundError,
    OutputValidationError,
    ReferenceResolutionError,
    SchemaLoadError,
)
from .pipeline import (
    AtomicWriter,
    GenerationResult,
    GeneratorConfig,
    OutputConfig,
    OutputMode,
    PipelineGenerator,
    ResourceOptionsRegistry,
    generate,
    generate_resources,
)

__all__ = [
    "AtomicWriter",
    "GenerationError",
    "GenerationResult",
    "GeneratorConfig",
    "InvalidResourceMetadataError",
    "NoEntitiesFoundError",
    "OutputConfig",
    "OutputMode",
    "OutputValidationError",
    "PipelineGenerator",
    "ReferenceResolutionError",
    "ResourceOptionsRegistry",
    "SchemaLoadError",
    "generate",
    "generate_resources",
]
