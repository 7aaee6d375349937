# graphson_sdk/graphson/legacy_decoder.py
# SPDX-License-Identifier: Apache-2.0
"""
GraphSON 1.0 reader.

The older encoding carries no discriminator for composite values: a vertex,
an edge and a vertex property are told apart only by which fields they have.
Classification is an ordered table of shape predicates, evaluated first to
last; the first predicate that matches decides the variant:

    1. edge          both "inV" and "outV", or "type": "edge"
    2. vertex        "type": "vertex", or an "id"/"label" next to a
                     "properties" object of property-wrapper lists
    3. typed scalar  exactly {"@type", "@value"}
    4. map           anything else

Edge is checked before vertex, and both before map, so an object that merely
happens to contain id/label/inV/outV is still read as an edge.

Vertex properties are never classified on their own: they are only valid as
elements of a vertex's property lists, and are decoded in that position.

Once a node is classified its required fields are enforced. Nothing is
defaulted silently: a vertex-shaped node without "id" fails with
MISSING_FIELD at that node's path rather than producing an empty id.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, List, Mapping, Optional, Tuple

from graphson_sdk.graphson.graphson_base import (
    SCALAR_TAG_CHECKS,
    TYPE_KEY,
    VALUE_KEY,
    DecodeError,
    DecodeFailure,
    EdgeRef,
    ExtensionPolicy,
    KeyValue,
    ListValue,
    MapValue,
    Path,
    PropertyEntry,
    Scalar,
    TypedValue,
    VertexPropertyRef,
    VertexRef,
    coerce_extension_policy,
    format_path,
    parse_scalar_payload,
    scalar_fits_tag,
)

LOG = logging.getLogger(__name__)

VERTEX_FIELDS: FrozenSet[str] = frozenset({"id", "label", "type", "properties"})
EDGE_FIELDS: FrozenSet[str] = frozenset(
    {"id", "label", "type", "inV", "outV", "inVLabel", "outVLabel", "properties"}
)
VERTEX_PROPERTY_FIELDS: FrozenSet[str] = frozenset({"id", "label", "value", "properties"})


class Shape(str, Enum):
    EDGE = "edge"
    VERTEX = "vertex"
    TYPED_SCALAR = "typed_scalar"
    MAP = "map"


# =============================================================================
# Shape classifier
# =============================================================================

ShapePredicate = Callable[[Mapping[str, Any]], bool]


def _is_edge_shaped(node: Mapping[str, Any]) -> bool:
    return node.get("type") == "edge" or ("inV" in node and "outV" in node)


def _is_property_list(value: Any) -> bool:
    return isinstance(value, list) and all(
        isinstance(item, Mapping) and "value" in item for item in value
    )


def _is_vertex_shaped(node: Mapping[str, Any]) -> bool:
    if node.get("type") == "vertex":
        return True
    if "id" not in node and "label" not in node:
        return False
    props = node.get("properties")
    return isinstance(props, Mapping) and all(_is_property_list(v) for v in props.values())


def _is_typed_scalar(node: Mapping[str, Any]) -> bool:
    return len(node) == 2 and TYPE_KEY in node and VALUE_KEY in node


SHAPE_CLASSIFIERS: Tuple[Tuple[Shape, ShapePredicate], ...] = (
    (Shape.EDGE, _is_edge_shaped),
    (Shape.VERTEX, _is_vertex_shaped),
    (Shape.TYPED_SCALAR, _is_typed_scalar),
    (Shape.MAP, lambda node: True),
)
"""Ordered (variant, predicate) table; the first match wins."""


def classify(node: Mapping[str, Any]) -> Shape:
    """Return the shape an older-encoding object is read as."""
    for shape, matches in SHAPE_CLASSIFIERS:
        if matches(node):
            return shape
    return Shape.MAP


# =============================================================================
# Decoder
# =============================================================================

class LegacyDecoder:
    """
    Decode a parsed GraphSON 1.0 document into a TypedValue tree.

    Args:
        extension_policy: What to do with fields outside the known vertex /
            edge / vertex-property shapes (preserve, drop, reject).
        default_label: Label used for a vertex or edge that has none. When
            None (default) a missing label is a MISSING_FIELD error.

    The decoder holds configuration only; `decode` is a pure function of its
    input and can be called concurrently.
    """

    def __init__(
        self,
        *,
        extension_policy: Any = ExtensionPolicy.PRESERVE,
        default_label: Optional[str] = None,
    ) -> None:
        self.extension_policy = coerce_extension_policy(extension_policy)
        self.default_label = default_label or None
        self._decoders: Dict[Shape, Callable[[Mapping[str, Any], Path], TypedValue]] = {
            Shape.EDGE: self._decode_edge,
            Shape.VERTEX: self._decode_vertex,
            Shape.TYPED_SCALAR: self._decode_typed_scalar,
            Shape.MAP: self._decode_map,
        }

    def decode(self, document: Any) -> TypedValue:
        """Decode one top-level value (typically a list of result rows)."""
        return self._decode_value(document, ())

    # ---- dispatch -----------------------------------------------------------

    def _decode_value(self, node: Any, path: Path) -> TypedValue:
        if node is None or isinstance(node, (bool, int, float, str)):
            return Scalar(node)
        if isinstance(node, (list, tuple)):
            return ListValue(
                tuple(self._decode_value(item, path + (i,)) for i, item in enumerate(node))
            )
        if isinstance(node, Mapping):
            shape = classify(node)
            if shape in (Shape.EDGE, Shape.VERTEX):
                LOG.debug("classified %s as %s", format_path(path), shape.value)
            return self._decoders[shape](node, path)
        raise DecodeError(
            f"unsupported value of type {type(node).__name__}",
            reason=DecodeFailure.UNRECOGNIZED_SHAPE,
            path=path,
        )

    # ---- composites ---------------------------------------------------------

    def _decode_vertex(self, node: Mapping[str, Any], path: Path) -> VertexRef:
        self._check_type_marker(node, "vertex", path)
        vertex_id = self._require_id(node, "id", path, "vertex")
        label = self._require_label(node, path, "vertex")

        properties: List[PropertyEntry] = []
        for key, raw in self._optional_object(node, "properties", path).items():
            key_path = path + ("properties", key)
            if not isinstance(raw, list):
                raise DecodeError(
                    f"vertex property '{key}' must be a list, got {type(raw).__name__}",
                    reason=DecodeFailure.TYPE_MISMATCH,
                    path=key_path,
                )
            values = tuple(
                self._decode_vertex_property(item, key, key_path + (i,))
                for i, item in enumerate(raw)
            )
            properties.append(PropertyEntry(key=key, values=values))

        return VertexRef(
            id=vertex_id,
            label=label,
            properties=tuple(properties),
            extensions=self._extensions(node, VERTEX_FIELDS, path),
        )

    def _decode_edge(self, node: Mapping[str, Any], path: Path) -> EdgeRef:
        self._check_type_marker(node, "edge", path)
        return EdgeRef(
            id=self._require_id(node, "id", path, "edge"),
            label=self._require_label(node, path, "edge"),
            in_vertex_id=self._require_id(node, "inV", path, "edge"),
            out_vertex_id=self._require_id(node, "outV", path, "edge"),
            properties=self._key_values(node, path),
            in_vertex_label=self._optional_string(node, "inVLabel", path),
            out_vertex_label=self._optional_string(node, "outVLabel", path),
            extensions=self._extensions(node, EDGE_FIELDS, path),
        )

    def _decode_vertex_property(self, node: Any, key: str, path: Path) -> VertexPropertyRef:
        if not isinstance(node, Mapping):
            raise DecodeError(
                f"vertex property entry must be an object, got {type(node).__name__}",
                reason=DecodeFailure.TYPE_MISMATCH,
                path=path,
            )
        if "value" not in node:
            raise DecodeError(
                "vertex property is missing required field 'value'",
                reason=DecodeFailure.MISSING_FIELD,
                path=path,
                details={"field": "value"},
            )
        vp_id = self._require_id(node, "id", path, "vertex property")

        # GraphSON 1.0 omits a vertex property's label; it is the property key.
        label = node.get("label")
        if label is None or label == "":
            label = key
        elif not isinstance(label, str):
            raise DecodeError(
                f"vertex property label must be a string, got {type(label).__name__}",
                reason=DecodeFailure.TYPE_MISMATCH,
                path=path + ("label",),
            )

        return VertexPropertyRef(
            id=vp_id,
            label=label,
            value=self._decode_value(node["value"], path + ("value",)),
            meta_properties=self._key_values(node, path),
            extensions=self._extensions(node, VERTEX_PROPERTY_FIELDS, path),
        )

    def _decode_typed_scalar(self, node: Mapping[str, Any], path: Path) -> Scalar:
        tag = node[TYPE_KEY]
        if not isinstance(tag, str) or tag not in SCALAR_TAG_CHECKS:
            raise DecodeError(
                f"unknown scalar type tag {tag!r}",
                reason=DecodeFailure.UNRECOGNIZED_SHAPE,
                path=path + (TYPE_KEY,),
            )
        payload = parse_scalar_payload(tag, node[VALUE_KEY])
        if not scalar_fits_tag(tag, payload):
            raise DecodeError(
                f"payload of type {type(payload).__name__} does not fit {tag}",
                reason=DecodeFailure.TYPE_MISMATCH,
                path=path + (VALUE_KEY,),
                details={"tag": tag},
            )
        return Scalar(payload, type_tag=tag)

    def _decode_map(self, node: Mapping[str, Any], path: Path) -> MapValue:
        entries = []
        for key, raw in node.items():
            if not isinstance(key, str):
                raise DecodeError(
                    f"object keys must be strings, got {type(key).__name__}",
                    reason=DecodeFailure.TYPE_MISMATCH,
                    path=path,
                )
            entries.append((Scalar(key), self._decode_value(raw, path + (key,))))
        return MapValue(tuple(entries))

    # ---- field helpers ------------------------------------------------------

    def _require_id(self, node: Mapping[str, Any], field: str, path: Path, kind: str) -> Scalar:
        raw = node.get(field)
        if raw is None:
            raise DecodeError(
                f"{kind} is missing required field '{field}'",
                reason=DecodeFailure.MISSING_FIELD,
                path=path,
                details={"field": field},
            )
        value = self._decode_value(raw, path + (field,))
        if not isinstance(value, Scalar):
            raise DecodeError(
                f"{kind} field '{field}' must be a scalar, got {type(raw).__name__}",
                reason=DecodeFailure.TYPE_MISMATCH,
                path=path + (field,),
            )
        return value

    def _require_label(self, node: Mapping[str, Any], path: Path, kind: str) -> str:
        label = node.get("label")
        if label is not None and not isinstance(label, str):
            raise DecodeError(
                f"{kind} label must be a string, got {type(label).__name__}",
                reason=DecodeFailure.TYPE_MISMATCH,
                path=path + ("label",),
            )
        if label:
            return label
        if self.default_label:
            LOG.debug("defaulted missing %s label at %s", kind, format_path(path))
            return self.default_label
        raise DecodeError(
            f"{kind} is missing required field 'label'",
            reason=DecodeFailure.MISSING_FIELD,
            path=path,
            details={"field": "label"},
        )

    @staticmethod
    def _check_type_marker(node: Mapping[str, Any], expected: str, path: Path) -> None:
        marker = node.get("type")
        if marker is not None and marker != expected:
            raise DecodeError(
                f"{expected}-shaped object declares type {marker!r}",
                reason=DecodeFailure.TYPE_MISMATCH,
                path=path + ("type",),
            )

    @staticmethod
    def _optional_object(node: Mapping[str, Any], field: str, path: Path) -> Mapping[str, Any]:
        raw = node.get(field)
        if raw is None:
            return {}
        if not isinstance(raw, Mapping):
            raise DecodeError(
                f"field '{field}' must be an object, got {type(raw).__name__}",
                reason=DecodeFailure.TYPE_MISMATCH,
                path=path + (field,),
            )
        return raw

    @staticmethod
    def _optional_string(node: Mapping[str, Any], field: str, path: Path) -> Optional[str]:
        raw = node.get(field)
        if raw is not None and not isinstance(raw, str):
            raise DecodeError(
                f"field '{field}' must be a string, got {type(raw).__name__}",
                reason=DecodeFailure.TYPE_MISMATCH,
                path=path + (field,),
            )
        return raw

    def _key_values(self, node: Mapping[str, Any], path: Path) -> Tuple[KeyValue, ...]:
        """Plain `properties` object (edge properties, meta-properties)."""
        props = self._optional_object(node, "properties", path)
        return tuple(
            KeyValue(key, self._decode_value(raw, path + ("properties", key)))
            for key, raw in props.items()
        )

    def _extensions(
        self, node: Mapping[str, Any], known: FrozenSet[str], path: Path
    ) -> Tuple[KeyValue, ...]:
        extra = [key for key in node if key not in known]
        if not extra:
            return ()
        if self.extension_policy is ExtensionPolicy.REJECT:
            raise DecodeError(
                f"unexpected field '{extra[0]}'",
                reason=DecodeFailure.UNRECOGNIZED_SHAPE,
                path=path + (extra[0],),
                details={"field": extra[0]},
            )
        if self.extension_policy is ExtensionPolicy.DROP:
            LOG.debug("dropped %d extension field(s) at %s", len(extra), format_path(path))
            return ()
        return tuple(KeyValue(key, self._decode_value(node[key], path + (key,))) for key in extra)


def decode_legacy(document: Any, **kwargs: Any) -> TypedValue:
    """Convenience wrapper: `LegacyDecoder(**kwargs).decode(document)`."""
    return LegacyDecoder(**kwargs).decode(document)


__all__ = [
    "Shape",
    "SHAPE_CLASSIFIERS",
    "classify",
    "LegacyDecoder",
    "decode_legacy",
    "VERTEX_FIELDS",
    "EDGE_FIELDS",
    "VERTEX_PROPERTY_FIELDS",
]
