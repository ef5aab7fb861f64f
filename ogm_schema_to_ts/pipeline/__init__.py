"""
Pipeline - OGM schema to TypeScript declaration generator.

This module splits generation into ordered phases:

1. Phase 1 (Loader): Obtain the raw schema document
2. Phase 2 (Schema AST): Extract node, link and resource entities into a registry
3. Phase 3 (Analyzer): Resolve references and synthesize field type expressions
4. Phase 4 (Backend): Build and render TypeScript declarations
5. Phase 5 (Resources): Assemble resource composites and resource options
6. Phase 6 (Postprocess): Deduplicate declarations and inline plain aliases
7. Phase 7 (Output): Validate and atomically write the buffers
"""

from __future__ import annotations

from .config import GeneratorConfig, OutputConfig, OutputMode
from .generator import (
    NODES_FILE,
    OPTIONS_FILE,
    OPTIONS_JSON_FILE,
    RESOURCES_FILE,
    GenerationResult,
    PipelineGenerator,
    generate,
    generate_resources,
    load_config,
)
from .output import AtomicWriter
from .resources import ResourceOptionsRegistry

__all__ = [
    "NODES_FILE",
    "OPTIONS_FILE",
    "OPTIONS_JSON_FILE",
    "RESOURCES_FILE",
    "AtomicWriter",
    "GenerationResult",
    "GeneratorConfig",
    "OutputConfig",
    "OutputMode",
    "PipelineGenerator",
    "ResourceOptionsRegistry",
    "generate",
    "generate_resources",
    "load_config",
]
