"""
Filter trees.

Filters are immutable tagged variants. Every variant carries a `kind`
discriminator that is also emitted as `$type` in the wire format, so
resource and subresource filters are never told apart by key presence
alone.

Wire format:
    {"$type": "empty"}
    {"$type": "match", "$field": f, "$value": v, "$operation": "=", "$at": a}
    {"$type": "match_edge", ...same keys as match}
    {"$type": "join", "$operation": "AND", "$clauses": [...]}
    {"$type": "exists", "$key": k, "$filter": {...}}
    {"$type": "resource", "$filter": {...}}
    {"$type": "subresource", "$filter": {...}, "$subresources": {name: {...}}}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, ClassVar, Mapping

COMPARISON_OPS = ("=", "<", ">", "<=", ">=", "<>", "IN", "CONTAINS", "STARTS WITH", "ENDS WITH", "=~")
LOGICAL_OPS = ("AND", "OR", "NOT", "XOR")


def _check_op(op: str, allowed: tuple[str, ...], what: str) -> None:
    if op not in allowed:
        raise ValueError(f"Unsupported {what} operation {op!r}; expected one of {', '.join(allowed)}")


class FilterNode:
    """Base class of all filter variants."""

    kind: ClassVar[str] = ""

    def to_dict(self) -> dict[str, Any]:
        raise NotImplementedError

    @property
    def is_leaf(self) -> bool:
        return isinstance(self, (Match, MatchEdge, Join, Exists))

    @property
    def is_composite(self) -> bool:
        return isinstance(self, (ResourceFilter, SubresourceFilter))


@dataclass(frozen=True)
class Empty(FilterNode):
    """The identity filter."""

    kind: ClassVar[str] = "empty"

    def to_dict(self) -> dict[str, Any]:
        return {"$type": self.kind}


EMPTY = Empty()


@dataclass(frozen=True)
class Match(FilterNode):
    """Compare a pivot field to a value."""

    kind: ClassVar[str] = "match"

    field: str
    value: Any = None
    op: str = "="
    at: str | None = None

    def __post_init__(self):
        _check_op(self.op, COMPARISON_OPS, "comparison")

    def to_dict(self) -> dict[str, Any]:
        d = {"$type": self.kind, "$field": self.field, "$value": self.value, "$operation": self.op}
        if self.at is not None:
            d["$at"] = self.at
        return d


@dataclass(frozen=True)
class MatchEdge(Match):
    """Compare a field of the link leading to the pivot."""

    kind: ClassVar[str] = "match_edge"


@dataclass(frozen=True)
class Join(FilterNode):
    """Logical combination of clauses."""

    kind: ClassVar[str] = "join"

    op: str = "AND"
    clauses: tuple[FilterNode, ...] = ()

    def __post_init__(self):
        _check_op(self.op, LOGICAL_OPS, "logical")
        object.__setattr__(self, "clauses", tuple(self.clauses))

    def to_dict(self) -> dict[str, Any]:
        return {
            "$type": self.kind,
            "$operation": self.op,
            "$clauses": [clause.to_dict() for clause in self.clauses],
        }


@dataclass(frozen=True)
class Exists(FilterNode):
    """Require a related entity under `key` that matches `inner`."""

    kind: ClassVar[str] = "exists"

    key: str
    inner: FilterNode = EMPTY

    def to_dict(self) -> dict[str, Any]:
        return {"$type": self.kind, "$key": self.key, "$filter": self.inner.to_dict()}


@dataclass(frozen=True)
class ResourceFilter(FilterNode):
    """Filter applied to a whole resource."""

    kind: ClassVar[str] = "resource"

    inner: FilterNode | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"$type": self.kind}
        if self.inner is not None:
            d["$filter"] = self.inner.to_dict()
        return d


@dataclass(frozen=True)
class SubresourceFilter(FilterNode):
    """Filter applied to a resource and, by name, to its mounted subresources."""

    kind: ClassVar[str] = "subresource"

    inner: FilterNode | None = None
    subresources: Mapping[str, FilterNode] = field(default_factory=dict)

    def __post_init__(self):
        # Read-only snapshot, detached from the caller's mapping
        object.__setattr__(self, "subresources", MappingProxyType(dict(self.subresources)))

    def __hash__(self):
        return hash((self.kind, self.inner, tuple(self.subresources.items())))

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"$type": self.kind}
        if self.inner is not None:
            d["$filter"] = self.inner.to_dict()
        d["$subresources"] = {name: f.to_dict() for name, f in self.subresources.items()}
        return d


def _optional(value: Any) -> FilterNode | None:
    return None if value is None else from_dict(value)


def from_dict(d: dict[str, Any]) -> FilterNode:
    """
    Parse a filter from its wire format.

    Composite filters may omit `$type`: an object with `$subresources` is a
    subresource filter and an object with only `$filter` is a resource
    filter. Any other object without `$type` is ambiguous.

    Raises:
        ValueError: If the object is not a recognizable filter
    """
    if not isinstance(d, dict):
        raise ValueError(f"Filter must be an object, got {type(d).__name__}")

    kind = d.get("$type")
    if kind is None:
        if "$subresources" in d:
            kind = SubresourceFilter.kind
        elif "$filter" in d:
            kind = ResourceFilter.kind
        else:
            raise ValueError(f"Ambiguous filter without $type: {sorted(d)}")

    if kind == Empty.kind:
        return EMPTY

    if kind in (Match.kind, MatchEdge.kind):
        if "$field" not in d:
            raise ValueError(f"{kind} filter requires $field")
        cls = Match if kind == Match.kind else MatchEdge
        return cls(field=d["$field"], value=d.get("$value"), op=d.get("$operation") or "=", at=d.get("$at"))

    if kind == Join.kind:
        clauses = d.get("$clauses", [])
        if not isinstance(clauses, list):
            raise ValueError("join filter $clauses must be a list")
        return Join(op=d.get("$operation") or "AND", clauses=tuple(from_dict(c) for c in clauses))

    if kind == Exists.kind:
        if "$key" not in d:
            raise ValueError("exists filter requires $key")
        return Exists(key=d["$key"], inner=_optional(d.get("$filter")) or EMPTY)

    if kind == ResourceFilter.kind:
        return ResourceFilter(inner=_optional(d.get("$filter")))

    if kind == SubresourceFilter.kind:
        subresources = d.get("$subresources", {})
        if not isinstance(subresources, dict):
            raise ValueError("subresource filter $subresources must be an object")
        return SubresourceFilter(
            inner=_optional(d.get("$filter")),
            subresources={name: from_dict(value) for name, value in subresources.items()},
        )

    raise ValueError(f"Unknown filter type {kind!r}")
