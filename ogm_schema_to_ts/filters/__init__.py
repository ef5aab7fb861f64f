"""
Filter algebra for resource queries.

Used by query builders; the declaration generator does not depend on it.
"""

from __future__ import annotations

from .merge import combine, merge
from .nodes import (
    COMPARISON_OPS,
    EMPTY,
    LOGICAL_OPS,
    Empty,
    Exists,
    FilterNode,
    Join,
    Match,
    MatchEdge,
    ResourceFilter,
    SubresourceFilter,
    from_dict,
)

__all__ = [
    "COMPARISON_OPS",
    "EMPTY",
    "LOGICAL_OPS",
    "Empty",
    "Exists",
    "FilterNode",
    "Join",
    "Match",
    "MatchEdge",
    "ResourceFilter",
    "SubresourceFilter",
    "combine",
    "from_dict",
    "merge",
]
