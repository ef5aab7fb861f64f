import pytest

from ogm_schema_to_ts.filters import (
    EMPTY,
    Empty,
    Exists,
    Join,
    Match,
    MatchEdge,
    ResourceFilter,
    SubresourceFilter,
    combine,
    from_dict,
    merge,
)

A = Match("title", "a")
B = Match("status", "done")
C = MatchEdge("since", "2024", op=">")


def _leaves(node):
    """Leaves of a tree of AND joins, in order."""
    if isinstance(node, Join) and node.op == "AND":
        return [leaf for clause in node.clauses for leaf in _leaves(clause)]
    return [node]


@pytest.mark.parametrize("value", [A, ResourceFilter(A), SubresourceFilter(subresources={"x": B})])
def test_empty_is_the_identity(value):
    assert merge(EMPTY, value) == value
    assert merge(value, EMPTY) == value
    assert merge(None, value) == value
    assert merge(value, None) == value


def test_merge_of_nothing():
    assert merge(None, None) == EMPTY
    assert merge(EMPTY, EMPTY) == EMPTY


def test_combine():
    assert combine() == EMPTY
    assert combine(None) == EMPTY
    assert combine(A) is A
    assert combine(A, B) == Join("AND", (A, B))
    assert _leaves(combine(A, B, C)) == [A, B, C]


def test_leaf_merge_is_associative():
    left = merge(merge(A, B), C)
    right = merge(A, merge(B, C))
    assert _leaves(left) == _leaves(right) == [A, B, C]


def test_leaves_join_with_operation():
    assert merge(A, B, "OR") == Join("OR", (A, B))


def test_resource_filters_merge_inner():
    assert merge(ResourceFilter(A), ResourceFilter(B)) == ResourceFilter(Join("AND", (A, B)))
    assert merge(ResourceFilter(), ResourceFilter()) == ResourceFilter()
    assert merge(ResourceFilter(A), ResourceFilter()) == ResourceFilter(A)


def test_subresource_filters_merge_maps():
    left = SubresourceFilter(A, {"tasks": B, "owner": A})
    right = SubresourceFilter(None, {"tasks": C, "tags": B})

    merged = merge(left, right)

    assert merged == SubresourceFilter(A, {"tasks": Join("AND", (B, C)), "owner": A, "tags": B})
    assert list(merged.subresources) == ["tasks", "owner", "tags"]


def test_mixed_composites_take_the_subresource_shape():
    assert merge(ResourceFilter(A), SubresourceFilter(B, {"x": C})) == SubresourceFilter(
        Join("AND", (A, B)), {"x": C}
    )
    assert merge(SubresourceFilter(None, {"x": C}), ResourceFilter(A)) == SubresourceFilter(A, {"x": C})


def test_leaf_goes_into_composite():
    assert merge(ResourceFilter(A), B) == ResourceFilter(Join("AND", (A, B)))
    assert merge(B, ResourceFilter(A)) == ResourceFilter(Join("AND", (B, A)))
    assert merge(ResourceFilter(), B) == ResourceFilter(B)
    assert merge(SubresourceFilter(None, {"x": C}), A) == SubresourceFilter(A, {"x": C})


def test_operation_reaches_nested_merges():
    assert merge(ResourceFilter(A), ResourceFilter(B), "OR") == ResourceFilter(Join("OR", (A, B)))


def test_operands_are_not_mutated():
    subresources = {"tasks": B}
    left = SubresourceFilter(A, subresources)
    merge(left, SubresourceFilter(None, {"tasks": C, "tags": A}))

    assert left.subresources == {"tasks": B}
    assert subresources == {"tasks": B}


def test_subresource_filters_are_hashable_and_read_only():
    subresources = {"tasks": B}
    node = SubresourceFilter(A, subresources)
    subresources["tags"] = C

    assert node.subresources == {"tasks": B}
    assert hash(SubresourceFilter()) == hash(SubresourceFilter())
    assert hash(node) == hash(SubresourceFilter(A, {"tasks": B}))
    assert len({node, SubresourceFilter(A, {"tasks": B})}) == 1
    with pytest.raises(TypeError):
        node.subresources["tags"] = C


def test_invalid_operations():
    with pytest.raises(ValueError):
        merge(A, B, "NAND")
    with pytest.raises(ValueError):
        Match("title", "a", op="LIKE")
    with pytest.raises(ValueError):
        Join("MAYBE", (A,))


def test_is_leaf_and_is_composite():
    assert A.is_leaf and not A.is_composite
    assert Exists("owner").is_leaf
    assert ResourceFilter().is_composite
    assert not EMPTY.is_leaf and not EMPTY.is_composite


# ----------------------------------------------------------------------
# Wire format


def test_to_dict():
    node = SubresourceFilter(
        Join("OR", (Match("title", "a"), MatchEdge("since", 3, op=">", at="assigned_to"))),
        {"owner": ResourceFilter(Exists("tags"))},
    )

    assert node.to_dict() == {
        "$type": "subresource",
        "$filter": {
            "$type": "join",
            "$operation": "OR",
            "$clauses": [
                {"$type": "match", "$field": "title", "$value": "a", "$operation": "="},
                {"$type": "match_edge", "$field": "since", "$value": 3, "$operation": ">", "$at": "assigned_to"},
            ],
        },
        "$subresources": {
            "owner": {"$type": "resource", "$filter": {"$type": "exists", "$key": "tags", "$filter": {"$type": "empty"}}}
        },
    }
    assert from_dict(node.to_dict()) == node


def test_composites_are_told_apart_by_type():
    assert from_dict({"$type": "resource"}) == ResourceFilter()
    assert from_dict({"$type": "subresource"}) == SubresourceFilter()
    assert from_dict({"$type": "empty"}) is EMPTY
    assert isinstance(from_dict({"$type": "empty"}), Empty)


def test_untyped_composites():
    assert from_dict({"$filter": {"$type": "match", "$field": "a"}}) == ResourceFilter(Match("a"))
    assert from_dict({"$subresources": {}}) == SubresourceFilter()


@pytest.mark.parametrize(
    "value",
    [
        {},
        {"$field": "a"},
        {"$type": "unknown"},
        {"$type": "match"},
        {"$type": "exists"},
        {"$type": "join", "$clauses": {}},
        {"$type": "match", "$field": "a", "$operation": "LIKE"},
        [],
    ],
)
def test_invalid_wire_values(value):
    with pytest.raises(ValueError):
        from_dict(value)
