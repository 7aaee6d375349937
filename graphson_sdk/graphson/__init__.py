# graphson_sdk/graphson/__init__.py
# SPDX-License-Identifier: Apache-2.0
"""
GraphSON translation protocol.

This package exposes:

- TypedValue model, tags and normalized errors (graphson_base)
- LegacyDecoder: GraphSON 1.0 shapes → TypedValue
- CurrentEncoder / CurrentDecoder: TypedValue ⇄ GraphSON 3.0
- Fixup registry
- TranslationAdapter and WireTranslationHandler
"""

from .graphson_base import (
    GRAPHSON_SDK_VERSION,
    LEGACY_FORMAT_ID,
    CURRENT_FORMAT_ID,
    GraphSONError,
    BadRequest,
    ConfigurationError,
    NotSupported,
    DecodeError,
    DecodeFailure,
    EncodeError,
    EncodeFailure,
    TranslationError,
    ScalarKind,
    Scalar,
    KeyValue,
    PropertyEntry,
    VertexRef,
    EdgeRef,
    VertexPropertyRef,
    ListValue,
    MapValue,
    TypedValue,
    IntegerWidth,
    FloatWidth,
    ExtensionPolicy,
    NumericWidthPolicy,
    format_path,
)
from .legacy_decoder import LegacyDecoder, Shape, classify, decode_legacy
from .current_encoder import CurrentEncoder, encode_current
from .current_decoder import CurrentDecoder, decode_current
from .fixups import (
    apply_fixups,
    available_fixups,
    get_fixup,
    map_tree,
    register_fixup,
)
from .translation import (
    TranslationAdapter,
    TranslationCapabilities,
    TranslationOptions,
    TranslationResult,
    WireTranslationHandler,
    dumps,
    translate,
)

__all__ = [
    "GRAPHSON_SDK_VERSION",
    "LEGACY_FORMAT_ID",
    "CURRENT_FORMAT_ID",
    "GraphSONError",
    "BadRequest",
    "ConfigurationError",
    "NotSupported",
    "DecodeError",
    "DecodeFailure",
    "EncodeError",
    "EncodeFailure",
    "TranslationError",
    "ScalarKind",
    "Scalar",
    "KeyValue",
    "PropertyEntry",
    "VertexRef",
    "EdgeRef",
    "VertexPropertyRef",
    "ListValue",
    "MapValue",
    "TypedValue",
    "IntegerWidth",
    "FloatWidth",
    "ExtensionPolicy",
    "NumericWidthPolicy",
    "format_path",
    "LegacyDecoder",
    "Shape",
    "classify",
    "decode_legacy",
    "CurrentEncoder",
    "encode_current",
    "CurrentDecoder",
    "decode_current",
    "apply_fixups",
    "available_fixups",
    "get_fixup",
    "map_tree",
    "register_fixup",
    "TranslationAdapter",
    "TranslationCapabilities",
    "TranslationOptions",
    "TranslationResult",
    "WireTranslationHandler",
    "dumps",
    "translate",
]
