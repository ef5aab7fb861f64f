"""
Analyzer module.

Contains reference resolution and type synthesis.
"""

from __future__ import annotations

from .reference_resolver import ReferenceResolver, ResolvedRef
from .synthesizer import TypeSynthesizer, make_union
from .type_expr import (
    ANY,
    AnyType,
    Array,
    Literal,
    Primitive,
    PrimitiveKind,
    Ref,
    TypeExpr,
    Union,
    referenced_names,
)

__all__ = [
    "ANY",
    "AnyType",
    "Array",
    "Literal",
    "Primitive",
    "PrimitiveKind",
    "Ref",
    "ReferenceResolver",
    "ResolvedRef",
    "TypeExpr",
    "TypeSynthesizer",
    "Union",
    "make_union",
    "referenced_names",
]
