"""
Declaration definitions.

These nodes describe the named TypeScript declarations produced for each
entity, ready for rendering. They are discarded once the text is
materialized.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ..analyzer.type_expr import TypeExpr


class DeclarationKind(Enum):
    """Kind of declaration."""

    INTERFACE = "interface"
    ALIAS = "alias"


@dataclass
class FieldDecl:
    """A field of an interface declaration."""

    name: str = ""
    type_expr: TypeExpr | None = None
    optional: bool = False
    description: str | None = None


@dataclass
class Declaration:
    """A named declaration.

    Attributes:
        name: Declared name
        kind: Interface or alias
        extends: Base declaration name (interfaces only)
        fields: Fields in source property order (interfaces only)
        alias_of: Aliased expression (aliases only)
        index_signature: Whether to add a catch-all `[k: string]: any` member
        description: Documentation comment text
    """

    name: str = ""
    kind: DeclarationKind = DeclarationKind.INTERFACE
    extends: str | None = None
    fields: list[FieldDecl] = field(default_factory=list)
    alias_of: TypeExpr | None = None
    index_signature: bool = False
    description: str | None = None
