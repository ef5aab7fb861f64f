"""
Pipeline generator.

Runs the generation phases in order and collects the output as named text
buffers:

1. Load: obtain the raw schema document
2. Extract: build the entity registry
3. Synthesize and emit: declarations per node/link entity
4. Assemble: resource descriptors and resource options
5. Post-process: dedupe and inline aliases
6. Write: atomically, only once every buffer has been produced and validated

Each run builds its own registries; nothing is cached between runs except
the resource options registry when the caller passes one in.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..errors import SchemaLoadError
from .analyzer.type_expr import referenced_names
from .backends.declarations import Declaration, DeclarationKind
from .backends.typescript_backend import TypeScriptBackend
from .config import GeneratorConfig, OutputMode
from .loader import (
    DEFAULT_TIMEOUT,
    detect_nova_endpoints,
    is_json_string,
    is_nodes_endpoint,
    is_nova_server,
    is_resources_endpoint,
    load_schema,
    nodes_endpoint_to_document,
)
from .output.atomic_writer import AtomicWriter
from .postprocess import postprocess
from .resources.assembler import ResourceAssembler
from .resources.descriptors import ResourceDescriptor, referenced_types, used_link_types
from .resources.options import (
    ResourceOptionsRegistry,
    options_from_info,
    options_from_resources_endpoint,
    options_from_routes,
    render_options,
    render_options_json,
)
from .schema_ast.extractor import MetadataExtractor
from .schema_ast.nodes import EntityKind, ResourceMetadata
from .schema_ast.registry import EntityRegistry

logger = logging.getLogger(__name__)

NODES_FILE = "nodes.ts"
RESOURCES_FILE = "resources.ts"
OPTIONS_FILE = "options.ts"
OPTIONS_JSON_FILE = "options.json"


@dataclass
class GenerationResult:
    """Named output buffers of one run."""

    buffers: dict[str, str] = field(default_factory=dict)
    resources: list[ResourceDescriptor] = field(default_factory=list)
    options: dict[str, dict[str, Any]] = field(default_factory=dict)

    def __getitem__(self, name: str) -> str:
        return self.buffers[name]

    def __contains__(self, name: object) -> bool:
        return name in self.buffers

    def names(self) -> list[str]:
        return list(self.buffers)


class PipelineGenerator:
    """
    Generates TypeScript declarations from an OGM-annotated schema.

    Args:
        source: Schema document, inline JSON, URL or file path
        config: Generation configuration
        options: Resource options registry shared by the caller; a fresh
            one is created when omitted
        timeout: Network timeout in seconds for URL sources
    """

    def __init__(
        self,
        source: Any,
        config: GeneratorConfig | None = None,
        options: ResourceOptionsRegistry | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.source = source
        self.config = config or GeneratorConfig()
        self.options = options if options is not None else ResourceOptionsRegistry()
        self.timeout = timeout

    @property
    def source_name(self) -> str:
        if isinstance(self.source, Path):
            return str(self.source)
        if isinstance(self.source, str) and not is_json_string(self.source):
            return self.source.strip()
        return "<schema>"

    # ------------------------------------------------------------------
    # Phases

    def load(self, source: Any = None) -> Any:
        """Load a schema document; `/nodes.json` payloads are wrapped as a document."""
        source = self.source if source is None else source
        document = load_schema(source, self.timeout)
        if is_nodes_endpoint(source):
            if not isinstance(document, dict):
                raise SchemaLoadError("Nodes endpoint did not return an object", str(source))
            document = nodes_endpoint_to_document(document)
        return document

    def extract(self, document: Any, required_kind: EntityKind | None = EntityKind.NODE) -> EntityRegistry:
        return MetadataExtractor(self.config).extract(document, self.source_name, required_kind)

    def render_nodes(self, registry: EntityRegistry) -> str:
        """Render the nodes module: base declarations plus one interface per node."""
        backend = TypeScriptBackend(self.config, registry)
        parts = [backend.generation_comment(), backend.render_base()]
        for record in registry.of_kind(EntityKind.NODE):
            declarations = backend.build_declarations(record)
            if declarations:
                parts.append(backend.render_declarations(declarations))
        return postprocess("\n\n".join(p for p in parts if p), self.config)

    def render_resources(self, registry: EntityRegistry, descriptors: list[ResourceDescriptor]) -> str:
        """Render the resources module: imports, link declarations and resource composites."""
        backend = TypeScriptBackend(self.config, registry)
        link_declarations = backend.build_link_declarations(used_link_types(descriptors))

        local = {d.name for d in link_declarations}
        imports = set(referenced_types(descriptors, local))
        imports.update(
            name
            for name in self._declaration_refs(link_declarations)
            if name not in local and registry.is_node_or_link(name)
        )

        parts = [backend.generation_comment(), backend.render_resources_prefix(sorted(imports)).rstrip("\n")]
        if link_declarations:
            parts.append(backend.render_declarations(link_declarations))
        parts.extend(backend.render_resource(d) for d in descriptors)
        return postprocess("\n\n".join(p for p in parts if p), self.config)

    def _declaration_refs(self, declarations: list[Declaration]) -> set[str]:
        names: set[str] = set()
        for declaration in declarations:
            if declaration.kind == DeclarationKind.ALIAS:
                names |= referenced_names(declaration.alias_of)
            for field_decl in declaration.fields:
                names |= referenced_names(field_decl.type_expr)
        return names

    def collect_options(self, document: Any, registry: EntityRegistry) -> None:
        """Register route options, then marker info for resources without route options."""
        for name, entry in options_from_routes(document).items():
            self.options.set(name, entry)

        for record in registry.of_kind(EntityKind.RESOURCE):
            metadata = record.metadata
            if not isinstance(metadata, ResourceMetadata) or not isinstance(metadata.info, dict):
                continue
            entry = options_from_info(metadata.info, fallback_name=record.name)
            name = entry["info"]["name"]
            if metadata.info and not self.options.has(name):
                self.options.set(name, entry)

    # ------------------------------------------------------------------
    # Entry points

    def generate_nodes(self, document: Any = None) -> str:
        """
        Generate the nodes module.

        Args:
            document: Already loaded document (loaded from the source when omitted)

        Returns:
            The nodes module text

        Raises:
            SchemaLoadError: If the source cannot be loaded
            NoEntitiesFoundError: If the document holds no node entity
        """
        if document is None:
            document = self.load()
        return self.render_nodes(self.extract(document))

    def generate_resources(self, options_json: bool = False) -> GenerationResult:
        """
        Generate the nodes, resources and options modules.

        Dedicated `/resources.json` and `/nodes.json` endpoints, and server
        base URLs exposing them, are handled before falling back to a full
        schema document.

        Args:
            options_json: Also emit the options table as JSON

        Returns:
            GenerationResult holding every produced buffer
        """
        result = self._generate_from_endpoints()
        if result is None:
            result = self._generate_from_document()

        result.options = self.options.all()
        if result.options:
            backend = TypeScriptBackend(self.config)
            result.buffers[OPTIONS_FILE] = render_options(result.options, backend)
            if options_json:
                result.buffers[OPTIONS_JSON_FILE] = render_options_json(result.options)
        else:
            logger.info("No resource options found")

        return result

    def _generate_from_endpoints(self) -> GenerationResult | None:
        source = self.source
        result = GenerationResult()

        if is_resources_endpoint(source):
            logger.info("Generating resource options from %s", source)
            self.options.update(options_from_resources_endpoint(load_schema(source, self.timeout)))
            return result

        if is_nodes_endpoint(source):
            logger.info("Generating node types from %s", source)
            result.buffers[NODES_FILE] = self.generate_nodes()
            return result

        if not is_nova_server(source):
            return None

        logger.info("Detecting Nova endpoints at %s", source)
        endpoints = detect_nova_endpoints(source, self.timeout)
        if not (endpoints.has_resources or endpoints.has_nodes):
            logger.info("No Nova endpoints found, falling back to schema generation")
            return None

        if endpoints.has_nodes:
            result.buffers[NODES_FILE] = self.generate_nodes(self.load(endpoints.nodes_url))
        else:
            logger.warning("%s not available; node types will not be generated", endpoints.nodes_url)

        if endpoints.has_resources:
            resources = load_schema(endpoints.resources_url, self.timeout)
            self.options.update(options_from_resources_endpoint(resources))
        else:
            logger.warning("%s not available; resource options will not be generated", endpoints.resources_url)

        return result

    def _generate_from_document(self) -> GenerationResult:
        document = self.load()
        registry = self.extract(document)
        result = GenerationResult()
        result.buffers[NODES_FILE] = self.render_nodes(registry)

        self.collect_options(document, registry)
        descriptors = ResourceAssembler(registry, self.config, self.options).assemble_all()
        result.resources = descriptors

        if descriptors:
            result.buffers[RESOURCES_FILE] = self.render_resources(registry, descriptors)
        else:
            logger.warning("No %s resources found", " or ".join(self.config.resource_types))

        return result

    def write(self, result: GenerationResult, out_dir: str | Path) -> list[Path]:
        """
        Write every buffer of a result.

        All buffers are validated, and existing files checked, before the
        first file is written.

        Raises:
            FileExistsError: If a file exists and the output mode forbids overwriting
            OutputValidationError: If a buffer fails validation
        """
        out_dir = Path(out_dir)
        output = self.config.output
        writer = AtomicWriter()
        targets = [(out_dir / name, content, "json" if name.endswith(".json") else "ts") for name, content in result.buffers.items()]

        if output.mode == OutputMode.ERROR_IF_EXISTS:
            for path, _, _ in targets:
                if path.exists():
                    raise FileExistsError(f"Output file already exists: {path}. Use --force to overwrite.")

        if output.validate_before_write:
            for path, content, language in targets:
                writer.validate(content, language, str(path))

        out_dir.mkdir(parents=True, exist_ok=True)
        for path, content, language in targets:
            if output.atomic_write and output.mode == OutputMode.ERROR_IF_EXISTS:
                # Guards against files created since the check above
                writer.write_if_not_exists(path, content, language, validate=False)
            elif output.atomic_write:
                writer.write(path, content, language, validate=False)
            else:
                path.write_text(content, encoding="utf-8")
            logger.info("Wrote %s", path)

        return [path for path, _, _ in targets]


def generate(source: Any, config: GeneratorConfig | None = None) -> str:
    """Generate the nodes module for a schema source."""
    return PipelineGenerator(source, config).generate_nodes()


def generate_resources(
    source: Any,
    out_dir: str | Path,
    config: GeneratorConfig | None = None,
    options_json: bool = False,
) -> GenerationResult:
    """Generate and write the nodes, resources and options modules."""
    generator = PipelineGenerator(source, config)
    result = generator.generate_resources(options_json=options_json)
    generator.write(result, out_dir)
    return result


def load_config(path: str | Path) -> GeneratorConfig:
    """Load a GeneratorConfig from a JSON file."""
    try:
        with open(path, encoding="utf-8") as f:
            return GeneratorConfig.from_dict(json.load(f))
    except (OSError, ValueError) as e:
        raise SchemaLoadError(f"Failed to load config: {e}", str(path), e) from e
