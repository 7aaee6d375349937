# SPDX-License-Identifier: Apache-2.0
"""
GraphSON — Legacy (1.0) decoding.

Asserts:
  • Shape classification is ordered: edge, vertex, typed scalar, map
  • An object carrying id/label/inV/outV decodes as an edge, never a map
  • Vertex property keys and multi-values keep source order
  • Required fields fail with MISSING_FIELD at the node's own path
  • Mistyped fields fail with TYPE_MISMATCH at the field's path
  • Typed-scalar wrappers keep their tag; payloads must fit it
  • Unknown fields follow the extension policy (preserve / drop / reject)
"""

import math

import pytest

from graphson_sdk.graphson.graphson_base import (
    ConfigurationError,
    DecodeError,
    DecodeFailure,
    EdgeRef,
    KeyValue,
    ListValue,
    MapValue,
    PropertyEntry,
    Scalar,
    VertexPropertyRef,
    VertexRef,
)
from graphson_sdk.graphson.legacy_decoder import (
    LegacyDecoder,
    Shape,
    classify,
    decode_legacy,
)


@pytest.mark.parametrize(
    "node, expected",
    [
        ({"id": 1, "label": "knows", "inV": 2, "outV": 3}, Shape.EDGE),
        ({"type": "edge"}, Shape.EDGE),
        (
            {"id": 1, "label": "x", "inV": 2, "outV": 3, "properties": {"name": [{"value": 1}]}},
            Shape.EDGE,
        ),
        ({"type": "vertex"}, Shape.VERTEX),
        ({"id": 1, "label": "p", "properties": {"name": [{"id": 2, "value": "a"}]}}, Shape.VERTEX),
        ({"id": 1, "label": "p", "properties": {}}, Shape.VERTEX),
        ({"@type": "g:Int32", "@value": 1}, Shape.TYPED_SCALAR),
        ({"@type": "g:Int32", "@value": 1, "extra": 0}, Shape.MAP),
        ({"id": 1, "label": "p"}, Shape.MAP),
        ({"id": 1, "properties": {"a": 1}}, Shape.MAP),
        ({"inV": 2}, Shape.MAP),
        ({"name": "marko"}, Shape.MAP),
        ({}, Shape.MAP),
    ],
)
def test_classify_precedence(node, expected):
    assert classify(node) is expected


def test_edge_shaped_object_is_never_a_map():
    value = decode_legacy({"id": 9, "label": "created", "inV": 3, "outV": 1})
    assert isinstance(value, EdgeRef)
    assert not isinstance(value, MapValue)
    assert value.in_vertex_id == Scalar(3)
    assert value.out_vertex_id == Scalar(1)
    assert value.properties == ()
    assert value.in_vertex_label is None


def test_decode_person_vertex(person_vertex):
    value = decode_legacy(person_vertex)
    assert value == VertexRef(
        id=Scalar(3),
        label="person",
        properties=(
            PropertyEntry(
                "name",
                (VertexPropertyRef(id=Scalar(11), label="name", value=Scalar("John")),),
            ),
        ),
    )


def test_decode_edge_fields(knows_edge):
    edge = decode_legacy(knows_edge)
    assert isinstance(edge, EdgeRef)
    assert edge.id == Scalar(7)
    assert edge.label == "knows"
    assert edge.in_vertex_id == Scalar(2)
    assert edge.out_vertex_id == Scalar(1)
    assert edge.in_vertex_label == "person"
    assert edge.out_vertex_label == "person"
    assert edge.properties == (
        KeyValue("weight", Scalar(0.5)),
        KeyValue("since", Scalar(2009)),
    )


def test_vertex_property_order_preserved():
    doc = {
        "type": "vertex",
        "id": 1,
        "label": "person",
        "properties": {
            "zeta": [{"id": 10, "value": "z"}],
            "alpha": [{"id": 11, "value": "a1"}, {"id": 12, "value": "a2"}, {"id": 13, "value": "a3"}],
            "mid": [{"id": 14, "value": "m"}],
        },
    }
    vertex = decode_legacy(doc)
    assert [entry.key for entry in vertex.properties] == ["zeta", "alpha", "mid"]
    alpha = vertex.get_property("alpha")
    assert [vp.value.value for vp in alpha.values] == ["a1", "a2", "a3"]
    assert vertex.get_property("missing") is None


def test_vertex_property_label_defaults_to_key():
    vertex = decode_legacy(
        {"id": 1, "label": "person", "properties": {"age": [{"id": 5, "value": 29}]}}
    )
    (vp,) = vertex.get_property("age").values
    assert vp.label == "age"
    assert vp.value == Scalar(29)


def test_vertex_property_meta_properties():
    vertex = decode_legacy(
        {
            "id": 1,
            "label": "person",
            "properties": {
                "location": [
                    {"id": 6, "value": "santa fe", "properties": {"startTime": 2005, "endTime": 2009}},
                ]
            },
        }
    )
    (vp,) = vertex.get_property("location").values
    assert vp.meta_properties == (
        KeyValue("startTime", Scalar(2005)),
        KeyValue("endTime", Scalar(2009)),
    )


def test_missing_id_reports_node_path():
    doc = [{"name": "x"}, {"type": "vertex", "label": "person"}]
    with pytest.raises(DecodeError) as exc_info:
        decode_legacy(doc)
    err = exc_info.value
    assert err.reason is DecodeFailure.MISSING_FIELD
    assert err.code == "MISSING_FIELD"
    assert err.path == (1,)
    assert err.details["path"] == "$[1]"
    assert err.details["field"] == "id"


def test_missing_vertex_property_id_reports_nested_path():
    doc = {"id": 1, "label": "person", "properties": {"name": [{"id": 2, "value": "a"}, {"value": "b"}]}}
    with pytest.raises(DecodeError) as exc_info:
        decode_legacy(doc)
    assert exc_info.value.reason is DecodeFailure.MISSING_FIELD
    assert exc_info.value.path == ("properties", "name", 1)
    assert exc_info.value.details["path"] == "$.properties.name[1]"


def test_missing_edge_endpoint():
    with pytest.raises(DecodeError) as exc_info:
        decode_legacy({"type": "edge", "id": 1, "label": "knows", "outV": 2})
    assert exc_info.value.reason is DecodeFailure.MISSING_FIELD
    assert exc_info.value.details["field"] == "inV"


def test_missing_label_fails_without_default():
    with pytest.raises(DecodeError) as exc_info:
        decode_legacy({"type": "vertex", "id": 1})
    assert exc_info.value.reason is DecodeFailure.MISSING_FIELD
    assert exc_info.value.details["field"] == "label"


def test_missing_label_uses_configured_default():
    vertex = LegacyDecoder(default_label="vertex").decode({"type": "vertex", "id": 1})
    assert vertex.label == "vertex"
    edge = LegacyDecoder(default_label="edge").decode({"inV": 1, "outV": 2, "id": 3})
    assert edge.label == "edge"


@pytest.mark.parametrize(
    "doc, path",
    [
        ({"type": "vertex", "id": 1, "label": "p", "properties": {"name": "John"}}, ("properties", "name")),
        ({"type": "vertex", "id": 1, "label": "p", "properties": ["name"]}, ("properties",)),
        ({"type": "vertex", "id": 1, "label": 5}, ("label",)),
        ({"type": "vertex", "id": [1], "label": "p"}, ("id",)),
        ({"id": 1, "label": "x", "inV": 2, "outV": 3, "type": "vertex"}, ("type",)),
        ({"type": "edge", "id": 1, "label": "x", "inV": 2, "outV": 3, "inVLabel": 4}, ("inVLabel",)),
        ({"type": "vertex", "id": 1, "label": "p", "properties": {"n": ["x"]}}, ("properties", "n", 0)),
    ],
)
def test_type_mismatch_paths(doc, path):
    with pytest.raises(DecodeError) as exc_info:
        decode_legacy(doc)
    assert exc_info.value.reason is DecodeFailure.TYPE_MISMATCH
    assert exc_info.value.path == path


def test_typed_scalar_keeps_tag():
    value = decode_legacy({"@type": "g:Int32", "@value": 5})
    assert value == Scalar(5)
    assert value.type_tag == "g:Int32"


def test_typed_scalar_non_finite_float():
    value = decode_legacy({"@type": "g:Double", "@value": "NaN"})
    assert value.type_tag == "g:Double"
    assert math.isnan(value.value)
    assert decode_legacy({"@type": "g:Float", "@value": "-Infinity"}).value == -math.inf


@pytest.mark.parametrize(
    "node, reason, path",
    [
        ({"@type": "g:Int32", "@value": "five"}, DecodeFailure.TYPE_MISMATCH, ("@value",)),
        ({"@type": "g:Int32", "@value": 2 ** 40}, DecodeFailure.TYPE_MISMATCH, ("@value",)),
        ({"@type": "g:Int64", "@value": True}, DecodeFailure.TYPE_MISMATCH, ("@value",)),
        ({"@type": "g:Double", "@value": 10 ** 400}, DecodeFailure.TYPE_MISMATCH, ("@value",)),
        ({"@type": "g:Unknown", "@value": 1}, DecodeFailure.UNRECOGNIZED_SHAPE, ("@type",)),
        ({"@type": 3, "@value": 1}, DecodeFailure.UNRECOGNIZED_SHAPE, ("@type",)),
    ],
)
def test_typed_scalar_rejections(node, reason, path):
    with pytest.raises(DecodeError) as exc_info:
        decode_legacy(node)
    assert exc_info.value.reason is reason
    assert exc_info.value.path == path


def test_plain_maps_and_lists():
    value = decode_legacy({"count": 2, "names": ["marko", "vadas"], "nothing": None})
    assert isinstance(value, MapValue)
    assert [k.value for k, _ in value.entries] == ["count", "names", "nothing"]
    assert value.get(Scalar("names")) == ListValue((Scalar("marko"), Scalar("vadas")))
    assert value.get(Scalar("nothing")) == Scalar(None)
    assert value.get(Scalar("absent"), "dflt") == "dflt"


def test_bool_is_not_integer():
    assert decode_legacy(True) == Scalar(True)
    assert decode_legacy(True) != Scalar(1)


def test_unsupported_python_value():
    with pytest.raises(DecodeError) as exc_info:
        decode_legacy([object()])
    assert exc_info.value.reason is DecodeFailure.UNRECOGNIZED_SHAPE
    assert exc_info.value.path == (0,)


VENDOR_VERTEX = {"type": "vertex", "id": 1, "label": "person", "_partition": "p1", "_etag": 42}


def test_extensions_preserved_in_source_order():
    vertex = LegacyDecoder(extension_policy="preserve").decode(VENDOR_VERTEX)
    assert vertex.extensions == (
        KeyValue("_partition", Scalar("p1")),
        KeyValue("_etag", Scalar(42)),
    )


def test_extensions_dropped():
    vertex = LegacyDecoder(extension_policy="drop").decode(VENDOR_VERTEX)
    assert vertex.extensions == ()
    assert vertex.id == Scalar(1)


def test_extensions_rejected():
    with pytest.raises(DecodeError) as exc_info:
        LegacyDecoder(extension_policy="reject").decode(VENDOR_VERTEX)
    err = exc_info.value
    assert err.reason is DecodeFailure.UNRECOGNIZED_SHAPE
    assert err.path == ("_partition",)
    assert err.details["field"] == "_partition"


def test_vertex_property_extensions():
    vertex = decode_legacy(
        {"id": 1, "label": "p", "properties": {"name": [{"id": 2, "value": "a", "_ts": 99}]}}
    )
    (vp,) = vertex.get_property("name").values
    assert vp.extensions == (KeyValue("_ts", Scalar(99)),)


def test_unknown_extension_policy():
    with pytest.raises(ConfigurationError):
        LegacyDecoder(extension_policy="keep-everything")
