# graphson_sdk/graphson/current_encoder.py
# SPDX-License-Identifier: Apache-2.0
"""
GraphSON 3.0 writer.

Every TypedValue variant maps to exactly one wire form:

    Scalar str / bool / null   bare JSON value
    Scalar int                 g:Int32 | g:Int64 | gx:BigInteger
    Scalar float               g:Float | g:Double
    VertexRef                  g:Vertex
    EdgeRef                    g:Edge
    VertexPropertyRef          g:VertexProperty
    KeyValue                   g:Property
    ListValue                  g:List
    MapValue                   g:Map   (flat [k1, v1, k2, v2, ...] payload)

Numbers with an explicit `type_tag` keep it. Numbers without one are tagged by
the NumericWidthPolicy; "prefer" means an out-of-range value is widened
(Int32 -> Int64 -> BigInteger, Float -> Double) rather than rejected.

The output is a plain dict / list tree ready for `json.dumps`.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Dict, List, Optional

from graphson_sdk.graphson.graphson_base import (
    BIGINT_TAG,
    DOUBLE_TAG,
    EDGE_TAG,
    EXTENSIONS_KEY,
    FLOAT32_MAX,
    FLOAT_TAG,
    FLOAT_TAGS,
    INT32_MAX,
    INT32_MIN,
    INT32_TAG,
    INT64_MAX,
    INT64_MIN,
    INT64_TAG,
    LIST_TAG,
    MAP_TAG,
    PROPERTY_TAG,
    TYPE_KEY,
    VALUE_KEY,
    VERTEX_PROPERTY_TAG,
    VERTEX_TAG,
    EdgeRef,
    EncodeError,
    EncodeFailure,
    FloatWidth,
    IntegerWidth,
    KeyValue,
    ListValue,
    MapValue,
    NumericWidthPolicy,
    Scalar,
    ScalarKind,
    TypedValue,
    VertexPropertyRef,
    VertexRef,
    float_payload,
    scalar_fits_tag,
)

LOG = logging.getLogger(__name__)


def wrap(tag: str, payload: Any) -> Dict[str, Any]:
    return {TYPE_KEY: tag, VALUE_KEY: payload}


class CurrentEncoder:
    """
    Encode TypedValue trees as GraphSON 3.0.

    Args:
        width_policy: Default tags for untagged numbers. Defaults to
            PreferInt64 / PreferDouble.
    """

    def __init__(self, width_policy: Optional[NumericWidthPolicy] = None) -> None:
        self.width_policy = width_policy or NumericWidthPolicy()
        self._encoders: Dict[type, Callable[[Any], Any]] = {
            Scalar: self._encode_scalar,
            VertexRef: self._encode_vertex,
            EdgeRef: self._encode_edge,
            VertexPropertyRef: self._encode_vertex_property,
            KeyValue: self._encode_key_value,
            ListValue: self._encode_list,
            MapValue: self._encode_map,
        }

    def encode(self, value: TypedValue) -> Any:
        encoder = self._encoders.get(type(value))
        if encoder is None:
            raise EncodeError(
                f"cannot encode {type(value).__name__}: not a TypedValue",
                reason=EncodeFailure.INTERNAL_INVARIANT_VIOLATION,
            )
        return encoder(value)

    # ---- scalars ------------------------------------------------------------

    def _encode_scalar(self, scalar: Scalar) -> Any:
        if scalar.type_tag is not None:
            return self._encode_tagged_scalar(scalar)
        if scalar.kind is ScalarKind.INTEGER:
            return wrap(self.integer_tag(scalar.value), scalar.value)
        if scalar.kind is ScalarKind.FLOAT:
            return wrap(self.float_tag(scalar.value), float_payload(scalar.value))
        return scalar.value

    def _encode_tagged_scalar(self, scalar: Scalar) -> Dict[str, Any]:
        tag = scalar.type_tag
        if not scalar_fits_tag(tag, scalar.value):
            raise EncodeError(
                f"scalar of kind {scalar.kind.value} does not fit its tag {tag}",
                reason=EncodeFailure.INTERNAL_INVARIANT_VIOLATION,
                details={"tag": tag},
            )
        if tag in FLOAT_TAGS:
            return wrap(tag, float_payload(float(scalar.value)))
        return wrap(tag, scalar.value)

    def integer_tag(self, value: int) -> str:
        if not INT64_MIN <= value <= INT64_MAX:
            return BIGINT_TAG
        if self.width_policy.integer is IntegerWidth.PREFER_INT32:
            if INT32_MIN <= value <= INT32_MAX:
                return INT32_TAG
            LOG.debug("integer outside 32-bit range widened to %s", INT64_TAG)
        return INT64_TAG

    def float_tag(self, value: float) -> str:
        if self.width_policy.floating is FloatWidth.PREFER_FLOAT:
            if not math.isfinite(value) or abs(value) <= FLOAT32_MAX:
                return FLOAT_TAG
        return DOUBLE_TAG

    # ---- graph elements -----------------------------------------------------

    def _encode_vertex(self, vertex: VertexRef) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.encode(vertex.id),
            "label": vertex.label,
            "properties": {
                entry.key: [self._encode_vertex_property(vp) for vp in entry.values]
                for entry in vertex.properties
            },
        }
        self._put_extensions(payload, vertex.extensions)
        return wrap(VERTEX_TAG, payload)

    def _encode_edge(self, edge: EdgeRef) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.encode(edge.id),
            "label": edge.label,
        }
        if edge.in_vertex_label is not None:
            payload["inVLabel"] = edge.in_vertex_label
        if edge.out_vertex_label is not None:
            payload["outVLabel"] = edge.out_vertex_label
        payload["inV"] = self.encode(edge.in_vertex_id)
        payload["outV"] = self.encode(edge.out_vertex_id)
        if edge.properties:
            payload["properties"] = {kv.key: self._encode_key_value(kv) for kv in edge.properties}
        self._put_extensions(payload, edge.extensions)
        return wrap(EDGE_TAG, payload)

    def _encode_vertex_property(self, vp: VertexPropertyRef) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.encode(vp.id),
            "value": self.encode(vp.value),
            "label": vp.label,
        }
        if vp.meta_properties:
            payload["properties"] = {kv.key: self.encode(kv.value) for kv in vp.meta_properties}
        self._put_extensions(payload, vp.extensions)
        return wrap(VERTEX_PROPERTY_TAG, payload)

    def _encode_key_value(self, kv: KeyValue) -> Dict[str, Any]:
        return wrap(PROPERTY_TAG, {"key": kv.key, "value": self.encode(kv.value)})

    # ---- collections --------------------------------------------------------

    def _encode_list(self, value: ListValue) -> Dict[str, Any]:
        return wrap(LIST_TAG, [self.encode(item) for item in value.items])

    def _encode_map(self, value: MapValue) -> Dict[str, Any]:
        flat: List[Any] = []
        for key, item in value.entries:
            flat.append(self.encode(key))
            flat.append(self.encode(item))
        return wrap(MAP_TAG, flat)

    def _put_extensions(self, payload: Dict[str, Any], extensions: tuple) -> None:
        if extensions:
            payload[EXTENSIONS_KEY] = {kv.key: self.encode(kv.value) for kv in extensions}


def encode_current(value: TypedValue, width_policy: Optional[NumericWidthPolicy] = None) -> Any:
    """Convenience wrapper: `CurrentEncoder(width_policy).encode(value)`."""
    return CurrentEncoder(width_policy).encode(value)


__all__ = [
    "CurrentEncoder",
    "encode_current",
    "wrap",
]
