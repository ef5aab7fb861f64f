"""
Symbolic type expressions.

These nodes represent a synthesized field type, independent of the
TypeScript text it is eventually rendered to. They are immutable and
hashable so that identical branches of a union compare equal.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class PrimitiveKind(Enum):
    """Kind of primitive type."""

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    NULL = "null"


@dataclass(frozen=True)
class TypeExpr:
    """Base class for all type expressions."""


@dataclass(frozen=True)
class Ref(TypeExpr):
    """A reference to a named declaration."""

    name: str = ""


@dataclass(frozen=True)
class Union(TypeExpr):
    """A union of alternatives.

    A null branch is recorded in `nullable` instead of as a member, so
    "value or absent" stays distinguishable from a real alternative.
    """

    members: tuple[TypeExpr, ...] = ()
    nullable: bool = False


@dataclass(frozen=True)
class Array(TypeExpr):
    """A homogeneous array."""

    elem: TypeExpr | None = None


@dataclass(frozen=True)
class Literal(TypeExpr):
    """A set of literal scalar values (enum or const)."""

    values: tuple[Any, ...] = ()


@dataclass(frozen=True)
class Primitive(TypeExpr):
    """A primitive type."""

    kind: PrimitiveKind = PrimitiveKind.STRING


@dataclass(frozen=True)
class AnyType(TypeExpr):
    """The untyped value."""


ANY = AnyType()
NULL = Primitive(PrimitiveKind.NULL)


def is_null(expr: TypeExpr) -> bool:
    return isinstance(expr, Primitive) and expr.kind == PrimitiveKind.NULL


def referenced_names(expr: TypeExpr | None) -> set[str]:
    """Names of all declarations referenced by an expression."""
    if isinstance(expr, Ref):
        return {expr.name}
    if isinstance(expr, Union):
        return set().union(*(referenced_names(m) for m in expr.members))
    if isinstance(expr, Array):
        return referenced_names(expr.elem)
    return set()
