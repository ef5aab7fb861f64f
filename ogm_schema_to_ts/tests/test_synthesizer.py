import logging
from unittest import TestCase

import pytest

from ogm_schema_to_ts.pipeline.analyzer import (
    ANY,
    Array,
    Literal,
    Primitive,
    PrimitiveKind,
    Ref,
    TypeSynthesizer,
    Union,
    make_union,
    referenced_names,
)
from ogm_schema_to_ts.pipeline.schema_ast import MetadataExtractor

STRING = Primitive(PrimitiveKind.STRING)
NUMBER = Primitive(PrimitiveKind.NUMBER)
INTEGER = Primitive(PrimitiveKind.INTEGER)
NULL = Primitive(PrimitiveKind.NULL)


def _ref(name):
    return {"$ref": f"#/components/schemas/{name}"}


SCHEMAS = {
    "User": {
        "_malevich_ogm_node": {"name": "User"},
        "properties": {"uid": {"type": "string"}},
    },
    "Status": {"enum": ["open", "closed"]},
    "Tree": {"anyOf": [_ref("Forest"), {"type": "string"}]},
    "Forest": {"type": "array", "items": _ref("Tree")},
    "Alias": _ref("Status"),
}


class TestTypeSynthesizer(TestCase):
    """Schema value to type expression mapping"""

    def setUp(self):
        registry = MetadataExtractor().extract({"components": {"schemas": SCHEMAS}})
        self.synthesizer = TypeSynthesizer(registry)

    def synth(self, schema):
        return self.synthesizer.synthesize(schema, "#/test")

    def test_primitives(self):
        self.assertEqual(self.synth({"type": "string"}), STRING)
        self.assertEqual(self.synth({"type": "number"}), NUMBER)
        self.assertEqual(self.synth({"type": "integer"}), INTEGER)
        self.assertEqual(self.synth({"type": "boolean"}), Primitive(PrimitiveKind.BOOLEAN))

    def test_unknown_shapes_degrade_to_any(self):
        self.assertEqual(self.synth({}), ANY)
        self.assertEqual(self.synth({"type": "mystery"}), ANY)
        self.assertEqual(self.synth({"format": "date-time"}), ANY)
        self.assertEqual(self.synth(None), ANY)

    def test_anonymous_object_is_any(self):
        self.assertEqual(self.synth({"type": "object", "properties": {"a": {"type": "string"}}}), ANY)
        self.assertEqual(self.synth({"properties": {}}), ANY)

    def test_array(self):
        self.assertEqual(self.synth({"type": "array", "items": {"type": "string"}}), Array(elem=STRING))
        self.assertEqual(self.synth({"type": "array"}), Array(elem=ANY))

    def test_enum_and_const(self):
        self.assertEqual(self.synth({"enum": ["a", "b"]}), Literal(values=("a", "b")))
        self.assertEqual(self.synth({"const": 3}), Literal(values=(3,)))

    def test_nullable_union(self):
        result = self.synth({"anyOf": [{"type": "string"}, {"type": "null"}]})
        self.assertEqual(result, Union(members=(STRING,), nullable=True))

    def test_union_deduplicates_branches(self):
        self.assertEqual(self.synth({"oneOf": [{"type": "string"}, {"type": "string"}]}), STRING)
        result = self.synth({"anyOf": [{"type": "string"}, {"type": "number"}, {"type": "string"}]})
        self.assertEqual(result, Union(members=(STRING, NUMBER)))

    def test_type_list(self):
        self.assertEqual(self.synth({"type": ["string", "null"]}), Union(members=(STRING,), nullable=True))

    def test_all_of_uses_first_branch(self):
        self.assertEqual(self.synth({"allOf": [{"type": "number"}, {"type": "string"}]}), NUMBER)

    def test_entity_reference(self):
        self.assertEqual(self.synth(_ref("User")), Ref(name="User"))
        self.assertEqual(self.synth({"type": "array", "items": _ref("User")}), Array(elem=Ref(name="User")))

    def test_non_entity_reference_is_inlined(self):
        self.assertEqual(self.synth(_ref("Status")), Literal(values=("open", "closed")))
        self.assertEqual(self.synth(_ref("Alias")), Literal(values=("open", "closed")))

    def test_cyclic_reference_resolves_to_any(self):
        result = self.synth(_ref("Tree"))
        self.assertEqual(result, Union(members=(Array(elem=ANY), STRING)))

    def test_resource_edge_reference(self):
        self.assertEqual(self.synth(_ref("ResourceEdge_User_Link_")), Ref(name="ResourceEdge<any, any>"))

    def test_local_definition_prefix(self):
        self.assertEqual(self.synth({"$ref": "#/$defs/Status"}), Literal(values=("open", "closed")))


def test_dangling_reference_degrades_to_any(caplog):
    registry = MetadataExtractor().extract({"components": {"schemas": SCHEMAS}})
    synthesizer = TypeSynthesizer(registry)

    with caplog.at_level(logging.WARNING):
        result = synthesizer.synthesize(_ref("Missing"), "#/components/schemas/User/properties/x")

    assert result == ANY
    assert "Cannot resolve reference '#/components/schemas/Missing'" in caplog.text


@pytest.mark.parametrize(
    "members, nullable, expected",
    [
        ([], False, ANY),
        ([NULL], False, ANY),
        ([STRING], False, STRING),
        ([STRING], True, Union(members=(STRING,), nullable=True)),
        ([STRING, NULL, NUMBER], False, Union(members=(STRING, NUMBER), nullable=True)),
        ([STRING, ANY], False, ANY),
        ([Union(members=(STRING, NUMBER), nullable=True), STRING], False, Union(members=(STRING, NUMBER), nullable=True)),
    ],
)
def test_make_union(members, nullable, expected):
    assert make_union(members, nullable) == expected


def test_referenced_names():
    expr = Union(members=(Ref("User"), Array(elem=Ref("Task")), STRING))
    assert referenced_names(expr) == {"User", "Task"}
    assert referenced_names(None) == set()
