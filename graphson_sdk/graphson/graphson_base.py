# graphson_sdk/graphson/graphson_base.py
# SPDX-License-Identifier: Apache-2.0
"""
GraphSON Translation SDK — shared model, tags and error taxonomy.

Purpose
-------
A vendor-neutral in-memory representation of graph-exchange values, shared by
both translation directions:

- `LegacyDecoder` reads GraphSON 1.0 shapes (vertex / edge / vertex property
  distinguished positionally, optional typed-scalar wrappers) into TypedValue.
- `CurrentEncoder` writes TypedValue as GraphSON 3.0, where every composite
  and width-sensitive scalar is wrapped as {"@type": ..., "@value": ...}.

TypedValue
----------
A closed tagged union of frozen dataclasses:

    Scalar | VertexRef | EdgeRef | VertexPropertyRef | KeyValue
           | ListValue | MapValue

Trees are immutable and acyclic. Fixups build new trees with
`dataclasses.replace` instead of mutating in place.

Errors
------
All errors derive from `GraphSONError` and carry:

    message        human readable
    code           UPPER_SNAKE_CASE machine code
    details        SIEM-safe context (no document payloads)

`DecodeError` additionally carries `reason` and `path` (keys / indices from the
document root to the failing node). `EncodeError` carries `reason`.
`TranslationError` wraps either of them with call-level context.

Versioning
----------
The tag tables below are an external contract: downstream GraphSON 3.0
readers reject anything else, so tags are only ever added, never renamed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any,
    Callable,
    Dict,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

GRAPHSON_SDK_VERSION = "1.0.0"
LEGACY_FORMAT_ID = "graphson/v1.0"
CURRENT_FORMAT_ID = "graphson/v3.0"

# =============================================================================
# Wire tags (GraphSON 3.0)
# =============================================================================

TYPE_KEY = "@type"
VALUE_KEY = "@value"
EXTENSIONS_KEY = "@extensions"
"""Reserved key under which unknown source fields are preserved."""

VERTEX_TAG = "g:Vertex"
EDGE_TAG = "g:Edge"
VERTEX_PROPERTY_TAG = "g:VertexProperty"
PROPERTY_TAG = "g:Property"
LIST_TAG = "g:List"
MAP_TAG = "g:Map"

INT32_TAG = "g:Int32"
INT64_TAG = "g:Int64"
BIGINT_TAG = "gx:BigInteger"
FLOAT_TAG = "g:Float"
DOUBLE_TAG = "g:Double"
UUID_TAG = "g:UUID"
DATE_TAG = "g:Date"
TIMESTAMP_TAG = "g:Timestamp"

COMPOSITE_TAGS: Tuple[str, ...] = (
    VERTEX_TAG,
    EDGE_TAG,
    VERTEX_PROPERTY_TAG,
    PROPERTY_TAG,
    LIST_TAG,
    MAP_TAG,
)
INTEGER_TAGS: Tuple[str, ...] = (INT32_TAG, INT64_TAG, BIGINT_TAG)
FLOAT_TAGS: Tuple[str, ...] = (FLOAT_TAG, DOUBLE_TAG)

INT32_MIN, INT32_MAX = -(2 ** 31), 2 ** 31 - 1
INT64_MIN, INT64_MAX = -(2 ** 63), 2 ** 63 - 1
FLOAT32_MAX = 3.4028234663852886e38

_NON_FINITE_PAYLOADS: Dict[str, float] = {
    "NaN": math.nan,
    "Infinity": math.inf,
    "-Infinity": -math.inf,
}


# =============================================================================
# Normalized Errors
# =============================================================================

Path = Tuple[Union[str, int], ...]


def format_path(path: Sequence[Union[str, int]]) -> str:
    """Render a document path as `$[0].properties.name[0]`."""
    out = "$"
    for step in path:
        if isinstance(step, int):
            out += f"[{step}]"
        else:
            out += f".{step}"
    return out


class GraphSONError(Exception):
    """
    Base exception for translation errors.

    Attributes:
        message: Human-readable description.
        code: Machine-readable, UPPER_SNAKE_CASE error code.
        details: Additional, SIEM-safe machine context (no payloads).
    """
    def __init__(
        self,
        message: str = "",
        *,
        code: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = dict(details or {})

    def __str__(self) -> str:
        base = self.message or self.__class__.__name__
        if self.code:
            base += f" [code={self.code}]"
        if self.details:
            base += f" details={self.details}"
        return base


class DecodeFailure(str, Enum):
    UNRECOGNIZED_SHAPE = "UNRECOGNIZED_SHAPE"
    MISSING_FIELD = "MISSING_FIELD"
    TYPE_MISMATCH = "TYPE_MISMATCH"


class EncodeFailure(str, Enum):
    UNSUPPORTED_WIDTH_POLICY = "UNSUPPORTED_WIDTH_POLICY"
    INTERNAL_INVARIANT_VIOLATION = "INTERNAL_INVARIANT_VIOLATION"


class DecodeError(GraphSONError):
    """Input does not match any known shape, or a required field is absent / mistyped."""
    def __init__(
        self,
        message: str,
        *,
        reason: DecodeFailure,
        path: Sequence[Union[str, int]] = (),
        **kw: Any,
    ):
        kw.setdefault("code", reason.value)
        details = dict(kw.pop("details", None) or {})
        details.setdefault("path", format_path(path))
        super().__init__(message, details=details, **kw)
        self.reason = reason
        self.path: Path = tuple(path)


class EncodeError(GraphSONError):
    """Encoder configuration cannot be satisfied, or a TypedValue broke its invariants."""
    def __init__(self, message: str, *, reason: EncodeFailure, **kw: Any):
        kw.setdefault("code", reason.value)
        super().__init__(message, **kw)
        self.reason = reason


class BadRequest(GraphSONError):
    """Client error: malformed envelope or arguments."""
    def __init__(self, message: str, **kw: Any):
        kw.setdefault("code", "BAD_REQUEST")
        super().__init__(message, **kw)


class ConfigurationError(BadRequest):
    """Invalid translation options (unknown fixup, unknown extension policy, ...)."""


class NotSupported(GraphSONError):
    """Unsupported operation."""
    def __init__(self, message: str, **kw: Any):
        kw.setdefault("code", "NOT_SUPPORTED")
        super().__init__(message, **kw)


class TranslationError(GraphSONError):
    """
    Public failure of a single translate() call.

    `cause` is the DecodeError / EncodeError that aborted the call; `code`
    mirrors the cause so callers can switch on one field.
    """
    def __init__(
        self,
        message: str,
        *,
        cause: Union[DecodeError, EncodeError],
        **kw: Any,
    ):
        kw.setdefault("code", cause.code)
        details = dict(cause.details)
        details.update(kw.pop("details", None) or {})
        super().__init__(message, details=details, **kw)
        self.cause = cause

    @property
    def reason(self) -> Union[DecodeFailure, EncodeFailure]:
        return self.cause.reason

    @property
    def path(self) -> Optional[Path]:
        return getattr(self.cause, "path", None)


def _invariant(message: str) -> EncodeError:
    return EncodeError(message, reason=EncodeFailure.INTERNAL_INVARIANT_VIOLATION)


# =============================================================================
# Scalar payload rules (shared by both decoders and the encoder)
# =============================================================================

ScalarPayload = Union[str, int, float, bool, None]


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_float_payload(value: Any) -> bool:
    if not _is_number(value):
        return False
    try:
        float(value)
    except OverflowError:
        return False
    return True


SCALAR_TAG_CHECKS: Dict[str, Callable[[Any], bool]] = {
    INT32_TAG: lambda v: _is_int(v) and INT32_MIN <= v <= INT32_MAX,
    INT64_TAG: lambda v: _is_int(v) and INT64_MIN <= v <= INT64_MAX,
    BIGINT_TAG: _is_int,
    FLOAT_TAG: _is_float_payload,
    DOUBLE_TAG: _is_float_payload,
    UUID_TAG: lambda v: isinstance(v, str),
    DATE_TAG: _is_int,
    TIMESTAMP_TAG: _is_int,
}
"""Scalar tag -> predicate over the in-memory payload."""

SCALAR_TAGS: Tuple[str, ...] = tuple(SCALAR_TAG_CHECKS)


def scalar_fits_tag(tag: str, value: Any) -> bool:
    check = SCALAR_TAG_CHECKS.get(tag)
    return bool(check and check(value))


def parse_scalar_payload(tag: str, payload: Any) -> Any:
    """
    Convert a wire payload to its in-memory form.

    Float tags accept "NaN" / "Infinity" / "-Infinity" and integral numbers.
    Returns the payload unchanged for every other tag.
    """
    if tag in FLOAT_TAGS:
        if isinstance(payload, str) and payload in _NON_FINITE_PAYLOADS:
            return _NON_FINITE_PAYLOADS[payload]
        if _is_float_payload(payload):
            return float(payload)
    return payload


def float_payload(value: float) -> Union[float, str]:
    """Wire form of a float: non-finite values become their GraphSON strings."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    return value


# =============================================================================
# TypedValue
# =============================================================================

class ScalarKind(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    NULL = "null"


def _scalar_kind(value: Any) -> Optional[ScalarKind]:
    if value is None:
        return ScalarKind.NULL
    if isinstance(value, bool):
        return ScalarKind.BOOLEAN
    if isinstance(value, int):
        return ScalarKind.INTEGER
    if isinstance(value, float):
        return ScalarKind.FLOAT
    if isinstance(value, str):
        return ScalarKind.STRING
    return None


@dataclass(frozen=True, eq=False)
class Scalar:
    """
    Leaf value.

    Attributes:
        value: str, int, float, bool or None.
        type_tag: Explicit GraphSON type tag carried from the input
                  (e.g. "g:Int32"). None when the source gave no width.
        kind: Derived ScalarKind.

    Equality compares kind and value only, so Scalar(1) == Scalar(1, "g:Int64")
    while Scalar(True) != Scalar(1). All NaN floats are equal to each other.

    An int payload under a float tag is stored as a float, matching what a
    GraphSON 3.0 reader produces for the same wire value.
    """
    value: ScalarPayload = None
    type_tag: Optional[str] = None
    kind: ScalarKind = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.type_tag is not None and self.type_tag not in SCALAR_TAG_CHECKS:
            raise _invariant(f"unknown scalar type tag '{self.type_tag}'")
        if self.type_tag in FLOAT_TAGS and _is_int(self.value):
            try:
                object.__setattr__(self, "value", float(self.value))
            except OverflowError:
                raise _invariant(f"integer payload does not fit {self.type_tag}") from None
        kind = _scalar_kind(self.value)
        if kind is None:
            raise _invariant(
                f"Scalar value must be str, int, float, bool or None, got {type(self.value).__name__}"
            )
        object.__setattr__(self, "kind", kind)

    @property
    def is_null(self) -> bool:
        return self.kind is ScalarKind.NULL

    @property
    def is_nan(self) -> bool:
        return self.kind is ScalarKind.FLOAT and math.isnan(self.value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Scalar):
            return NotImplemented
        if self.kind is not other.kind:
            return False
        if self.is_nan or other.is_nan:
            return self.is_nan and other.is_nan
        return self.value == other.value

    def __hash__(self) -> int:
        # hash(nan) is identity based on current interpreters
        if self.is_nan:
            return hash((self.kind, "NaN"))
        return hash((self.kind, self.value))


@dataclass(frozen=True)
class KeyValue:
    """A single key/value property (edge property, meta-property, extension)."""
    key: str
    value: "TypedValue"

    def __post_init__(self) -> None:
        if not isinstance(self.key, str):
            raise _invariant(f"KeyValue key must be a string, got {type(self.key).__name__}")


def _check_ref(kind: str, ref_id: Any, label: Any) -> None:
    if not isinstance(ref_id, Scalar) or ref_id.is_null:
        raise _invariant(f"{kind} id must be a non-null Scalar")
    if not isinstance(label, str) or not label:
        raise _invariant(f"{kind} label must be a non-empty string")


def _freeze(obj: Any, name: str) -> None:
    object.__setattr__(obj, name, tuple(getattr(obj, name)))


@dataclass(frozen=True)
class VertexPropertyRef:
    """
    A vertex property: the value under one key of a vertex, with its own id
    and optional meta-properties.
    """
    id: Scalar
    label: str
    value: "TypedValue"
    meta_properties: Tuple[KeyValue, ...] = ()
    extensions: Tuple[KeyValue, ...] = ()

    def __post_init__(self) -> None:
        _check_ref("VertexProperty", self.id, self.label)
        _freeze(self, "meta_properties")
        _freeze(self, "extensions")


@dataclass(frozen=True)
class PropertyEntry:
    """All values a vertex holds under one property key, in source order."""
    key: str
    values: Tuple[VertexPropertyRef, ...] = ()

    def __post_init__(self) -> None:
        _freeze(self, "values")
        for vp in self.values:
            if not isinstance(vp, VertexPropertyRef):
                raise _invariant(
                    f"PropertyEntry '{self.key}' holds {type(vp).__name__}, expected VertexPropertyRef"
                )


@dataclass(frozen=True)
class VertexRef:
    """
    Graph vertex.

    Attributes:
        id: Non-null scalar identifier.
        label: Non-empty vertex label.
        properties: PropertyEntry sequence in source key order.
        extensions: Unknown source fields preserved opaquely.
    """
    id: Scalar
    label: str
    properties: Tuple[PropertyEntry, ...] = ()
    extensions: Tuple[KeyValue, ...] = ()

    def __post_init__(self) -> None:
        _check_ref("Vertex", self.id, self.label)
        _freeze(self, "properties")
        _freeze(self, "extensions")
        seen = set()
        for entry in self.properties:
            if entry.key in seen:
                raise _invariant(f"duplicate vertex property key '{entry.key}'")
            seen.add(entry.key)

    def get_property(self, key: str) -> Optional[PropertyEntry]:
        for entry in self.properties:
            if entry.key == key:
                return entry
        return None


@dataclass(frozen=True)
class EdgeRef:
    """
    Graph edge between two vertices (out -> in).

    Attributes:
        id: Non-null scalar identifier.
        label: Non-empty edge label.
        in_vertex_id / out_vertex_id: Endpoint ids.
        properties: KeyValue sequence in source key order.
        in_vertex_label / out_vertex_label: Endpoint labels when the source gave them.
        extensions: Unknown source fields preserved opaquely.
    """
    id: Scalar
    label: str
    in_vertex_id: Scalar
    out_vertex_id: Scalar
    properties: Tuple[KeyValue, ...] = ()
    in_vertex_label: Optional[str] = None
    out_vertex_label: Optional[str] = None
    extensions: Tuple[KeyValue, ...] = ()

    def __post_init__(self) -> None:
        _check_ref("Edge", self.id, self.label)
        for name in ("in_vertex_id", "out_vertex_id"):
            endpoint = getattr(self, name)
            if not isinstance(endpoint, Scalar) or endpoint.is_null:
                raise _invariant(f"Edge {name} must be a non-null Scalar")
        _freeze(self, "properties")
        _freeze(self, "extensions")


@dataclass(frozen=True)
class ListValue:
    items: Tuple["TypedValue", ...] = ()

    def __post_init__(self) -> None:
        _freeze(self, "items")


@dataclass(frozen=True)
class MapValue:
    """
    Ordered mapping; keys may be any TypedValue. Order is kept for
    round-trip fidelity even though graph maps are conceptually unordered.
    """
    entries: Tuple[Tuple["TypedValue", "TypedValue"], ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", tuple((k, v) for k, v in self.entries))

    def get(self, key: "TypedValue", default: Any = None) -> Any:
        for k, v in self.entries:
            if k == key:
                return v
        return default


TypedValue = Union[
    Scalar,
    VertexRef,
    EdgeRef,
    VertexPropertyRef,
    KeyValue,
    ListValue,
    MapValue,
]

TYPED_VALUE_CLASSES: Tuple[type, ...] = (
    Scalar,
    VertexRef,
    EdgeRef,
    VertexPropertyRef,
    KeyValue,
    ListValue,
    MapValue,
)


# =============================================================================
# Encoder configuration
# =============================================================================

class IntegerWidth(str, Enum):
    PREFER_INT64 = "PreferInt64"
    PREFER_INT32 = "PreferInt32"


class FloatWidth(str, Enum):
    PREFER_DOUBLE = "PreferDouble"
    PREFER_FLOAT = "PreferFloat"


class ExtensionPolicy(str, Enum):
    """What the legacy decoder does with fields outside the known shapes."""
    PRESERVE = "preserve"
    DROP = "drop"
    REJECT = "reject"


def _coerce_enum(enum_cls: type, raw: Any) -> Optional[Enum]:
    if isinstance(raw, enum_cls):
        return raw
    if not isinstance(raw, str):
        return None
    wanted = raw.strip().replace("_", "").replace("-", "").lower()
    for member in enum_cls:
        if wanted in (member.value.lower(), member.name.replace("_", "").lower()):
            return member
    return None


@dataclass(frozen=True)
class NumericWidthPolicy:
    """
    Default GraphSON tags for numbers that carry no explicit width.

    Accepts enum members or their names ("PreferInt32", "prefer_int32", ...).
    """
    integer: IntegerWidth = IntegerWidth.PREFER_INT64
    floating: FloatWidth = FloatWidth.PREFER_DOUBLE

    def __post_init__(self) -> None:
        for name, enum_cls in (("integer", IntegerWidth), ("floating", FloatWidth)):
            raw = getattr(self, name)
            member = _coerce_enum(enum_cls, raw)
            if member is None:
                allowed = ", ".join(m.value for m in enum_cls)
                raise EncodeError(
                    f"unsupported {name} width policy {raw!r} (expected one of: {allowed})",
                    reason=EncodeFailure.UNSUPPORTED_WIDTH_POLICY,
                    details={"policy": name},
                )
            object.__setattr__(self, name, member)

    def to_dict(self) -> Dict[str, str]:
        return {"integer": self.integer.value, "floating": self.floating.value}


def coerce_extension_policy(raw: Any) -> ExtensionPolicy:
    member = _coerce_enum(ExtensionPolicy, raw)
    if member is None:
        allowed = ", ".join(m.value for m in ExtensionPolicy)
        raise ConfigurationError(
            f"unknown extension policy {raw!r} (expected one of: {allowed})"
        )
    return member


__all__ = [
    "GRAPHSON_SDK_VERSION",
    "LEGACY_FORMAT_ID",
    "CURRENT_FORMAT_ID",
    "TYPE_KEY",
    "VALUE_KEY",
    "EXTENSIONS_KEY",
    "VERTEX_TAG",
    "EDGE_TAG",
    "VERTEX_PROPERTY_TAG",
    "PROPERTY_TAG",
    "LIST_TAG",
    "MAP_TAG",
    "INT32_TAG",
    "INT64_TAG",
    "BIGINT_TAG",
    "FLOAT_TAG",
    "DOUBLE_TAG",
    "UUID_TAG",
    "DATE_TAG",
    "TIMESTAMP_TAG",
    "COMPOSITE_TAGS",
    "SCALAR_TAGS",
    "INTEGER_TAGS",
    "FLOAT_TAGS",
    "INT32_MIN",
    "INT32_MAX",
    "INT64_MIN",
    "INT64_MAX",
    "FLOAT32_MAX",
    "Path",
    "format_path",
    "GraphSONError",
    "DecodeFailure",
    "EncodeFailure",
    "DecodeError",
    "EncodeError",
    "BadRequest",
    "ConfigurationError",
    "NotSupported",
    "TranslationError",
    "SCALAR_TAG_CHECKS",
    "scalar_fits_tag",
    "parse_scalar_payload",
    "float_payload",
    "ScalarKind",
    "Scalar",
    "KeyValue",
    "VertexPropertyRef",
    "PropertyEntry",
    "VertexRef",
    "EdgeRef",
    "ListValue",
    "MapValue",
    "TypedValue",
    "TYPED_VALUE_CLASSES",
    "IntegerWidth",
    "FloatWidth",
    "ExtensionPolicy",
    "NumericWidthPolicy",
    "coerce_extension_policy",
]
