"""
Filter merging.

`merge` rewrites two filter trees into one without touching either
operand; `combine` left-folds `merge` over any number of filters.
"""

from __future__ import annotations

from functools import reduce

from .nodes import (
    EMPTY,
    LOGICAL_OPS,
    Empty,
    FilterNode,
    Join,
    ResourceFilter,
    SubresourceFilter,
)


def _merge_inner(a: FilterNode | None, b: FilterNode | None, op: str) -> FilterNode | None:
    if a is None:
        return b
    if b is None:
        return a
    return merge(a, b, op)


def merge(a: FilterNode | None, b: FilterNode | None, op: str = "AND") -> FilterNode:
    """
    Merge two filters.

    Rules, in order:
    1. Empty (or None) is the identity.
    2. Two resource filters merge their inner filters. Two subresource
       filters also merge their subresource maps key by key.
    3. A resource filter and a subresource filter give a subresource
       filter whose inner filter is the merge of both inner filters.
    4. A leaf merges into the inner filter of a composite.
    5. Two leaves are joined with `op`.

    Args:
        a: Left operand
        b: Right operand
        op: Logical operation used when two leaves are joined

    Returns:
        A new filter tree

    Raises:
        ValueError: If `op` is not a logical operation
    """
    if op not in LOGICAL_OPS:
        raise ValueError(f"Unsupported logical operation {op!r}")

    if a is None or isinstance(a, Empty):
        return b if b is not None else EMPTY
    if b is None or isinstance(b, Empty):
        return a

    if isinstance(a, ResourceFilter) and isinstance(b, ResourceFilter):
        return ResourceFilter(inner=_merge_inner(a.inner, b.inner, op))

    if isinstance(a, SubresourceFilter) and isinstance(b, SubresourceFilter):
        subresources = dict(a.subresources)
        for name, value in b.subresources.items():
            subresources[name] = merge(subresources[name], value, op) if name in subresources else value
        return SubresourceFilter(inner=_merge_inner(a.inner, b.inner, op), subresources=subresources)

    if isinstance(a, SubresourceFilter) and isinstance(b, ResourceFilter):
        return SubresourceFilter(inner=_merge_inner(a.inner, b.inner, op), subresources=dict(a.subresources))

    if isinstance(a, ResourceFilter) and isinstance(b, SubresourceFilter):
        return SubresourceFilter(inner=_merge_inner(a.inner, b.inner, op), subresources=dict(b.subresources))

    if isinstance(a, ResourceFilter):
        return ResourceFilter(inner=_merge_inner(a.inner, b, op))
    if isinstance(a, SubresourceFilter):
        return SubresourceFilter(inner=_merge_inner(a.inner, b, op), subresources=dict(a.subresources))
    if isinstance(b, ResourceFilter):
        return ResourceFilter(inner=_merge_inner(a, b.inner, op))
    if isinstance(b, SubresourceFilter):
        return SubresourceFilter(inner=_merge_inner(a, b.inner, op), subresources=dict(b.subresources))

    return Join(op=op, clauses=(a, b))


def combine(*filters: FilterNode | None) -> FilterNode:
    """AND together any number of filters. No filters give Empty."""
    if not filters:
        return EMPTY
    if len(filters) == 1:
        return filters[0] if filters[0] is not None else EMPTY
    return reduce(merge, filters)
