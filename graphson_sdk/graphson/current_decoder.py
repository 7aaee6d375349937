# graphson_sdk/graphson/current_decoder.py
# SPDX-License-Identifier: Apache-2.0
"""
GraphSON 3.0 reader.

The inverse of `CurrentEncoder`: reads explicitly tagged documents back into
TypedValue trees. Used to verify that translated output re-reads to the tree
it was produced from, and by callers that want to inspect adapter output
without a full client library.

Numeric tags are kept on the resulting Scalar as `type_tag`; Scalar equality
ignores the tag, so `decode(encode(tree)) == tree` for any tree.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Tuple

from graphson_sdk.graphson.graphson_base import (
    EDGE_TAG,
    EXTENSIONS_KEY,
    LIST_TAG,
    MAP_TAG,
    PROPERTY_TAG,
    SCALAR_TAG_CHECKS,
    TYPE_KEY,
    VALUE_KEY,
    VERTEX_PROPERTY_TAG,
    VERTEX_TAG,
    DecodeError,
    DecodeFailure,
    EdgeRef,
    KeyValue,
    ListValue,
    MapValue,
    Path,
    PropertyEntry,
    Scalar,
    TypedValue,
    VertexPropertyRef,
    VertexRef,
    parse_scalar_payload,
    scalar_fits_tag,
)


class CurrentDecoder:
    """Decode a parsed GraphSON 3.0 document into a TypedValue tree."""

    def __init__(self) -> None:
        self._decoders: Dict[str, Callable[[Any, Path], TypedValue]] = {
            VERTEX_TAG: self._decode_vertex,
            EDGE_TAG: self._decode_edge,
            VERTEX_PROPERTY_TAG: self._decode_vertex_property,
            PROPERTY_TAG: self._decode_property,
            LIST_TAG: self._decode_list,
            MAP_TAG: self._decode_map,
        }

    def decode(self, document: Any) -> TypedValue:
        return self._decode_value(document, ())

    def _decode_value(self, node: Any, path: Path) -> TypedValue:
        if node is None or isinstance(node, (bool, int, float, str)):
            return Scalar(node)
        if not isinstance(node, Mapping) or set(node) != {TYPE_KEY, VALUE_KEY}:
            raise DecodeError(
                f"expected a tagged value or JSON scalar, got {type(node).__name__}",
                reason=DecodeFailure.UNRECOGNIZED_SHAPE,
                path=path,
            )
        tag = node[TYPE_KEY]
        payload = node[VALUE_KEY]
        value_path = path + (VALUE_KEY,)
        if not isinstance(tag, str):
            raise DecodeError(
                f"type tag must be a string, got {type(tag).__name__}",
                reason=DecodeFailure.TYPE_MISMATCH,
                path=path + (TYPE_KEY,),
            )
        if tag in SCALAR_TAG_CHECKS:
            parsed = parse_scalar_payload(tag, payload)
            if not scalar_fits_tag(tag, parsed):
                raise DecodeError(
                    f"payload of type {type(payload).__name__} does not fit {tag}",
                    reason=DecodeFailure.TYPE_MISMATCH,
                    path=value_path,
                    details={"tag": tag},
                )
            return Scalar(parsed, type_tag=tag)
        decoder = self._decoders.get(tag)
        if decoder is None:
            raise DecodeError(
                f"unknown type tag {tag!r}",
                reason=DecodeFailure.UNRECOGNIZED_SHAPE,
                path=path + (TYPE_KEY,),
            )
        return decoder(payload, value_path)

    # ---- graph elements -----------------------------------------------------

    def _decode_vertex(self, payload: Any, path: Path) -> VertexRef:
        obj = self._object(payload, path)
        properties: List[PropertyEntry] = []
        for key, raw in self._object(obj.get("properties", {}), path + ("properties",)).items():
            key_path = path + ("properties", key)
            values = tuple(
                self._typed(item, VertexPropertyRef, key_path + (i,))
                for i, item in enumerate(self._array(raw, key_path))
            )
            properties.append(PropertyEntry(key=key, values=values))
        return VertexRef(
            id=self._id(obj, "id", path),
            label=self._label(obj, path),
            properties=tuple(properties),
            extensions=self._extensions(obj, path),
        )

    def _decode_edge(self, payload: Any, path: Path) -> EdgeRef:
        obj = self._object(payload, path)
        props = self._object(obj.get("properties", {}), path + ("properties",))
        return EdgeRef(
            id=self._id(obj, "id", path),
            label=self._label(obj, path),
            in_vertex_id=self._id(obj, "inV", path),
            out_vertex_id=self._id(obj, "outV", path),
            properties=tuple(
                KeyValue(key, self._typed(raw, KeyValue, path + ("properties", key)).value)
                for key, raw in props.items()
            ),
            in_vertex_label=obj.get("inVLabel"),
            out_vertex_label=obj.get("outVLabel"),
            extensions=self._extensions(obj, path),
        )

    def _decode_vertex_property(self, payload: Any, path: Path) -> VertexPropertyRef:
        obj = self._object(payload, path)
        if "value" not in obj:
            raise DecodeError(
                "vertex property is missing required field 'value'",
                reason=DecodeFailure.MISSING_FIELD,
                path=path,
                details={"field": "value"},
            )
        meta = self._object(obj.get("properties", {}), path + ("properties",))
        return VertexPropertyRef(
            id=self._id(obj, "id", path),
            label=self._label(obj, path),
            value=self._decode_value(obj["value"], path + ("value",)),
            meta_properties=tuple(
                KeyValue(key, self._decode_value(raw, path + ("properties", key)))
                for key, raw in meta.items()
            ),
            extensions=self._extensions(obj, path),
        )

    def _decode_property(self, payload: Any, path: Path) -> KeyValue:
        obj = self._object(payload, path)
        key = obj.get("key")
        if not isinstance(key, str):
            raise DecodeError(
                "property key must be a string",
                reason=DecodeFailure.MISSING_FIELD if key is None else DecodeFailure.TYPE_MISMATCH,
                path=path + ("key",),
            )
        if "value" not in obj:
            raise DecodeError(
                "property is missing required field 'value'",
                reason=DecodeFailure.MISSING_FIELD,
                path=path,
                details={"field": "value"},
            )
        return KeyValue(key, self._decode_value(obj["value"], path + ("value",)))

    # ---- collections --------------------------------------------------------

    def _decode_list(self, payload: Any, path: Path) -> ListValue:
        return ListValue(
            tuple(self._decode_value(item, path + (i,)) for i, item in enumerate(self._array(payload, path)))
        )

    def _decode_map(self, payload: Any, path: Path) -> MapValue:
        flat = self._array(payload, path)
        if len(flat) % 2:
            raise DecodeError(
                "g:Map payload must hold an even number of items",
                reason=DecodeFailure.TYPE_MISMATCH,
                path=path,
            )
        entries: List[Tuple[TypedValue, TypedValue]] = []
        for i in range(0, len(flat), 2):
            entries.append(
                (self._decode_value(flat[i], path + (i,)), self._decode_value(flat[i + 1], path + (i + 1,)))
            )
        return MapValue(tuple(entries))

    # ---- helpers ------------------------------------------------------------

    def _typed(self, node: Any, expected: type, path: Path) -> Any:
        value = self._decode_value(node, path)
        if not isinstance(value, expected):
            raise DecodeError(
                f"expected {expected.__name__}, got {type(value).__name__}",
                reason=DecodeFailure.TYPE_MISMATCH,
                path=path,
            )
        return value

    def _id(self, obj: Mapping[str, Any], field: str, path: Path) -> Scalar:
        if obj.get(field) is None:
            raise DecodeError(
                f"missing required field '{field}'",
                reason=DecodeFailure.MISSING_FIELD,
                path=path,
                details={"field": field},
            )
        return self._typed(obj[field], Scalar, path + (field,))

    @staticmethod
    def _label(obj: Mapping[str, Any], path: Path) -> str:
        label = obj.get("label")
        if not label:
            raise DecodeError(
                "missing required field 'label'",
                reason=DecodeFailure.MISSING_FIELD,
                path=path,
                details={"field": "label"},
            )
        if not isinstance(label, str):
            raise DecodeError(
                f"label must be a string, got {type(label).__name__}",
                reason=DecodeFailure.TYPE_MISMATCH,
                path=path + ("label",),
            )
        return label

    def _extensions(self, obj: Mapping[str, Any], path: Path) -> Tuple[KeyValue, ...]:
        ext_path = path + (EXTENSIONS_KEY,)
        raw = self._object(obj.get(EXTENSIONS_KEY, {}), ext_path)
        return tuple(KeyValue(key, self._decode_value(v, ext_path + (key,))) for key, v in raw.items())

    @staticmethod
    def _object(raw: Any, path: Path) -> Mapping[str, Any]:
        if not isinstance(raw, Mapping):
            raise DecodeError(
                f"expected an object, got {type(raw).__name__}",
                reason=DecodeFailure.TYPE_MISMATCH,
                path=path,
            )
        return raw

    @staticmethod
    def _array(raw: Any, path: Path) -> list:
        if not isinstance(raw, list):
            raise DecodeError(
                f"expected an array, got {type(raw).__name__}",
                reason=DecodeFailure.TYPE_MISMATCH,
                path=path,
            )
        return raw


def decode_current(document: Any) -> TypedValue:
    """Convenience wrapper: `CurrentDecoder().decode(document)`."""
    return CurrentDecoder().decode(document)


__all__ = [
    "CurrentDecoder",
    "decode_current",
]
