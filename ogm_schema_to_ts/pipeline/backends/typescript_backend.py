"""
TypeScript code generation backend.

Builds declarations from entity records and renders them, and the
resource composites, to TypeScript source text.
"""

from __future__ import annotations

import json
import re
from typing import Any

from ...utils import snake_to_pascal_case
from ..analyzer.synthesizer import TypeSynthesizer
from ..analyzer.type_expr import (
    AnyType,
    Array,
    Literal,
    Primitive,
    Ref,
    TypeExpr,
    Union,
)
from ..config import GeneratorConfig
from ..schema_ast.nodes import EntityKind, EntityRecord
from ..schema_ast.registry import EntityRegistry
from .base import CodeBackend
from .declarations import Declaration, DeclarationKind, FieldDecl

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

# Names provided by the base declarations
BASE_TYPE = "Base"
LINK_TYPE = "Link"

# Names imported from the runtime module by resources.ts
RUNTIME_IMPORTS = [
    "ResourceEdge",
    "Base",
    "Create",
    "Update",
    "AbstractResource",
    "MaterializedResource",
    "CreateResource",
    "UpdateResource",
    "LinkResource",
    "Mount",
    "Link",
]


class TypeScriptBackend(CodeBackend):
    """TypeScript declaration backend."""

    TEMPLATE_LANG = "typescript"
    FILE_EXTENSION = "ts"

    TYPE_MAP = {
        "string": "string",
        "number": "number",
        "integer": "number",
        "boolean": "boolean",
        "null": "null",
    }

    def __init__(self, config: GeneratorConfig, registry: EntityRegistry | None = None):
        super().__init__(config)
        self.registry = registry or EntityRegistry()
        self.synthesizer = TypeSynthesizer(self.registry, config.ref_prefix)

        # Aliases of this run, keyed by rendered target type
        self._aliases: dict[str, str] = {}
        self._taken_names: set[str] = {BASE_TYPE, LINK_TYPE, *self.registry.names()}

    # ------------------------------------------------------------------
    # Type translation

    def translate_type(self, type_expr: TypeExpr | None) -> str:
        """Translate a type expression to a TypeScript type string."""
        if type_expr is None or isinstance(type_expr, AnyType):
            return "any"

        if isinstance(type_expr, Ref):
            return type_expr.name

        if isinstance(type_expr, Primitive):
            return self.TYPE_MAP.get(type_expr.kind.value, "any")

        if isinstance(type_expr, Literal):
            return " | ".join(self.format_literal(v) for v in type_expr.values) or "any"

        if isinstance(type_expr, Array):
            item_type = self.translate_type(type_expr.elem)
            if self._needs_parentheses(type_expr.elem):
                item_type = f"({item_type})"
            return f"{item_type}[]"

        if isinstance(type_expr, Union):
            parts = [self.translate_type(m) for m in type_expr.members]
            if type_expr.nullable:
                parts.append("null")
            return " | ".join(parts) or "any"

        return "any"

    def _needs_parentheses(self, type_expr: TypeExpr | None) -> bool:
        if isinstance(type_expr, Union):
            return len(type_expr.members) + int(type_expr.nullable) > 1
        if isinstance(type_expr, Literal):
            return len(type_expr.values) > 1
        return False

    def format_literal(self, value: Any) -> str:
        """Format a literal scalar value."""
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return repr(value)
        if isinstance(value, str):
            return json.dumps(value)
        return "any"

    def format_property_name(self, name: str) -> str:
        """Quote property names that are not valid identifiers."""
        return name if _IDENTIFIER.match(name) else json.dumps(name)

    # ------------------------------------------------------------------
    # Declaration building

    def alias_name(self, type_expr: TypeExpr) -> str:
        """Derive an alias name from the members of a union or literal set.

        Examples:
            string | number -> StringOrNumber
            "todo" | "done" -> TodoOrDone
            User | null -> UserOrNull
        """
        if isinstance(type_expr, Union):
            parts = [self._alias_part(m) for m in type_expr.members]
            if type_expr.nullable:
                parts.append("Null")
        elif isinstance(type_expr, Literal):
            parts = [self._literal_part(v) for v in type_expr.values]
        else:
            parts = [self._alias_part(type_expr)]

        name = "Or".join(part for part in parts if part)
        if not name or not _IDENTIFIER.match(name):
            name = f"Type{name}"
        return name

    def alias_for(self, type_expr: TypeExpr) -> tuple[str, bool]:
        """
        Look up or allocate the alias of a type expression.

        Expressions rendering to the same TypeScript share one alias. A
        derived name already used by a different type, an entity or a base
        declaration gets a numeric suffix.

        Returns:
            The alias name, and whether it was allocated by this call
        """
        target = self.translate_type(type_expr)
        name = self._aliases.get(target)
        if name is not None:
            return name, False

        base = self.alias_name(type_expr)
        name = base
        suffix = 2
        while name in self._taken_names:
            name = f"{base}{suffix}"
            suffix += 1

        self._aliases[target] = name
        self._taken_names.add(name)
        return name, True

    def _alias_part(self, type_expr: TypeExpr | None) -> str:
        if isinstance(type_expr, Ref):
            return snake_to_pascal_case(type_expr.name)
        if isinstance(type_expr, Array):
            return f"{self._alias_part(type_expr.elem)}Array"
        if isinstance(type_expr, (Union, Literal)):
            return self.alias_name(type_expr)
        return snake_to_pascal_case(self.translate_type(type_expr))

    def _literal_part(self, value: Any) -> str:
        if value is None:
            return "Null"
        part = snake_to_pascal_case(str(value)) or "Empty"
        return part if part[0].isalpha() else f"Value{part}"

    def _should_alias(self, type_expr: TypeExpr) -> bool:
        if self.config.use_inline_unions:
            return False
        if isinstance(type_expr, Union):
            return len(type_expr.members) > 1
        if isinstance(type_expr, Literal):
            return len(type_expr.values) > 1
        return False

    def build_declarations(self, record: EntityRecord) -> list[Declaration]:
        """
        Build the declarations for one node or link entity.

        Args:
            record: The entity record

        Returns:
            The entity interface followed by the aliases first allocated
            for its fields
        """
        if record.name in (BASE_TYPE, LINK_TYPE) or record.kind == EntityKind.RESOURCE:
            return []

        extends = BASE_TYPE if record.kind == EntityKind.NODE else LINK_TYPE
        skip_fields = set(self.config.base_fields)
        required = record.required

        fields: list[FieldDecl] = []
        aliases: list[Declaration] = []

        for prop_name, prop_schema in record.properties.items():
            if prop_name in skip_fields:
                continue

            type_expr = self.synthesizer.synthesize(prop_schema, f"{record.source_path}/properties/{prop_name}")

            if self._should_alias(type_expr):
                name, is_new = self.alias_for(type_expr)
                if is_new:
                    aliases.append(Declaration(name=name, kind=DeclarationKind.ALIAS, alias_of=type_expr))
                type_expr = Ref(name=name)

            description = prop_schema.get("description") if isinstance(prop_schema, dict) else None
            fields.append(
                FieldDecl(
                    name=prop_name,
                    type_expr=type_expr,
                    optional=prop_name not in required,
                    description=description if isinstance(description, str) else None,
                )
            )

        # An interface made only of an index signature is noise
        index_signature = record.schema.get("additionalProperties") is True and bool(fields)

        description = record.schema.get("description")
        interface = Declaration(
            name=record.name,
            kind=DeclarationKind.INTERFACE,
            extends=extends,
            fields=fields,
            index_signature=index_signature,
            description=description if isinstance(description, str) else None,
        )
        return [interface, *aliases]

    def build_link_declarations(self, used_link_types: set[str] | list[str] = ()) -> list[Declaration]:
        """
        Build declarations for all link entities plus empty link interfaces
        for relation models that have no entity of their own.
        """
        declarations: list[Declaration] = []
        link_names: set[str] = set()
        for record in self.registry.of_kind(EntityKind.LINK):
            link_names.add(record.name)
            declarations.extend(self.build_declarations(record))

        for name in sorted(set(used_link_types)):
            if name in (LINK_TYPE, "any") or name in link_names:
                continue
            declarations.append(Declaration(name=name, kind=DeclarationKind.INTERFACE, extends=LINK_TYPE))

        return declarations

    # ------------------------------------------------------------------
    # Rendering

    def _doc_comment(self, text: str | None, indent: str = "") -> str:
        if not text:
            return ""
        lines = [f"{indent}/**"]
        # A literal comment terminator would end the block early
        for line in text.strip().replace("*/", "*\\/").splitlines():
            lines.append(f"{indent} * {line}".rstrip())
        lines.append(f"{indent} */")
        return "\n".join(lines)

    def _render_member(self, field_decl: FieldDecl) -> str:
        optional = "?" if field_decl.optional else ""
        name = self.format_property_name(field_decl.name)
        line = f"  {name}{optional}: {self.translate_type(field_decl.type_expr)}"
        doc = self._doc_comment(field_decl.description, "  ")
        return f"{doc}\n{line}" if doc else line

    def render(self, declaration: Declaration) -> str:
        """Render one declaration."""
        doc = self._doc_comment(declaration.description)

        if declaration.kind == DeclarationKind.ALIAS:
            return self.get_template("alias").render(
                doc=doc,
                name=declaration.name,
                target=self.translate_type(declaration.alias_of),
            )

        members = [self._render_member(f) for f in declaration.fields]
        if declaration.index_signature:
            members.append("  [k: string]: any")

        return self.get_template("interface").render(
            doc=doc,
            name=declaration.name,
            extends=declaration.extends,
            members=members,
        )

    def render_declarations(self, declarations: list[Declaration]) -> str:
        """Render a declaration stream, one blank line between declarations."""
        return "\n\n".join(self.render(d) for d in declarations)

    def render_base(self) -> str:
        """Render the shared base declarations."""
        base_fields = []
        for i, name in enumerate(self.config.base_fields):
            if i == 0:
                base_fields.append(f"{name}: string")
            else:
                base_fields.append(f"{name}?: string | null")
        return self.get_template("base").render(base_fields=base_fields)

    def render_resource(self, descriptor: Any) -> str:
        """Render a resource descriptor as a parametrized composite declaration."""
        mounts = []
        for mount_name, mount in descriptor.mounts.items():
            is_array = "true" if mount.is_array else "false"
            mounts.append(
                f"    {self.format_property_name(mount_name)}: Mount<{mount.target_type}, {mount.link_type}, {is_array}>"
            )
        mounts_block = "{\n" + ",\n".join(mounts) + "\n  }" if mounts else "{}"

        return self.get_template("resource").render(
            doc=self._doc_comment(descriptor.description),
            name=descriptor.name,
            pivot_key=descriptor.pivot_key,
            pivot_type=descriptor.pivot_type,
            mounts_block=mounts_block,
        )

    def render_resources_prefix(self, referenced_types: list[str]) -> str:
        """Render the import header of the resources module."""
        return self.get_template("resources_prefix").render(
            runtime_imports=RUNTIME_IMPORTS,
            runtime_module=self.config.runtime_module,
            node_imports=referenced_types,
            nodes_module=self.config.nodes_module,
        )
