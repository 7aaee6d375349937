# graphson_sdk/graphson/translation.py
# SPDX-License-Identifier: Apache-2.0
"""
GraphSON 1.0 → GraphSON 3.0 translation.

Purpose
-------
The single entry point callers use to reconcile a graph database that emits
GraphSON 1.0 shapes with a client library that only accepts GraphSON 3.0:

    raw response document
        → LegacyDecoder        (shape-inferred TypedValue tree)
        → fixups               (zero or more, in configured order)
        → CurrentEncoder       (explicitly tagged document)
        → client deserializer  (as if a compliant server had answered)

Guarantees
----------
- Stateless: no counters, timestamps or random ids; the same document and
  options always produce byte-identical `translate_text` output.
- No partial output: any DecodeError / EncodeError aborts the call and is
  raised as TranslationError carrying the cause, its path and call context.
- Synchronous and I/O free. Callers that need bounded processing time must
  bound document size before calling in.

Configuration
-------------
`TranslationOptions` can be built directly, from a mapping (wire envelopes,
CLI), or from environment variables:

    GRAPHSON_INT_WIDTH       PreferInt64 | PreferInt32
    GRAPHSON_FLOAT_WIDTH     PreferDouble | PreferFloat
    GRAPHSON_EXTENSIONS      preserve | drop | reject
    GRAPHSON_DEFAULT_LABEL   label for vertices / edges that have none
    GRAPHSON_FIXUPS          comma separated fixup names

Wire Contract
-------------
`WireTranslationHandler` exposes the adapter through canonical JSON envelopes:

    Request:
        {"op": "graphson.translate", "ctx": {...},
         "args": {"document": ..., "options": {...}}}

    Success:
        {"ok": true, "code": "OK", "ms": <float>, "result": {...}}

    Error:
        {"ok": false, "code": "<UPPER_SNAKE_CASE>", "error": "<ErrorClassName>",
         "message": "...", "details": {...} | null, "ms": <float>}
"""

from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import asdict, dataclass, field
from typing import (
    Any,
    Dict,
    Mapping,
    Optional,
    Protocol,
    Tuple,
    Union,
)

from graphson_sdk.core.error_context import attach_context
from graphson_sdk.core.operational_context import OperationContext
from graphson_sdk.graphson.current_encoder import CurrentEncoder
from graphson_sdk.graphson.fixups import apply_fixups, available_fixups, get_fixup
from graphson_sdk.graphson.graphson_base import (
    COMPOSITE_TAGS,
    CURRENT_FORMAT_ID,
    GRAPHSON_SDK_VERSION,
    LEGACY_FORMAT_ID,
    SCALAR_TAGS,
    BadRequest,
    ConfigurationError,
    DecodeError,
    DecodeFailure,
    EncodeError,
    EncodeFailure,
    ExtensionPolicy,
    FloatWidth,
    GraphSONError,
    IntegerWidth,
    NotSupported,
    NumericWidthPolicy,
    TranslationError,
    coerce_extension_policy,
)
from graphson_sdk.graphson.legacy_decoder import LegacyDecoder

LOG = logging.getLogger(__name__)

Document = Any
"""A parsed JSON-like tree (dict / list / str / int / float / bool / None)."""


# =============================================================================
# Options
# =============================================================================

_OPTION_KEYS = frozenset(
    {"int_width", "float_width", "extensions", "default_label", "fixups"}
)


def _split_names(raw: Any) -> Tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        return tuple(name.strip() for name in raw.split(",") if name.strip())
    if isinstance(raw, (list, tuple)):
        return tuple(raw)
    raise ConfigurationError(f"fixups must be a list or comma separated string, got {type(raw).__name__}")


@dataclass(frozen=True)
class TranslationOptions:
    """
    Per-call translation configuration.

    Attributes:
        width_policy: Default numeric tags for untagged numbers.
        extension_policy: Handling of unknown source fields.
        default_label: Label for vertices / edges without one (None = fail).
        fixups: Fixup names applied between decode and encode, in order.
    """
    width_policy: NumericWidthPolicy = field(default_factory=NumericWidthPolicy)
    extension_policy: ExtensionPolicy = ExtensionPolicy.PRESERVE
    default_label: Optional[str] = None
    fixups: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "extension_policy", coerce_extension_policy(self.extension_policy))
        object.__setattr__(self, "fixups", _split_names(self.fixups))
        for name in self.fixups:
            get_fixup(name)
        if self.default_label is not None and not isinstance(self.default_label, str):
            raise ConfigurationError("default_label must be a string")

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "TranslationOptions":
        """
        Build options from a flat mapping:

            {"int_width": "PreferInt32", "float_width": "PreferDouble",
             "extensions": "drop", "default_label": "vertex",
             "fixups": ["collapse_singleton_lists"]}

        Unknown keys are rejected so that typos do not silently fall back to
        defaults.
        """
        if not data:
            return cls()
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"options must be an object, got {type(data).__name__}")
        unknown = sorted(set(data) - _OPTION_KEYS)
        if unknown:
            raise ConfigurationError(f"unknown translation option(s): {', '.join(unknown)}")
        return cls(
            width_policy=NumericWidthPolicy(
                integer=data.get("int_width") or IntegerWidth.PREFER_INT64,
                floating=data.get("float_width") or FloatWidth.PREFER_DOUBLE,
            ),
            extension_policy=data.get("extensions") or ExtensionPolicy.PRESERVE,
            default_label=data.get("default_label") or None,
            fixups=_split_names(data.get("fixups")),
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "TranslationOptions":
        env = os.environ if environ is None else environ
        return cls.from_dict(
            {
                "int_width": env.get("GRAPHSON_INT_WIDTH"),
                "float_width": env.get("GRAPHSON_FLOAT_WIDTH"),
                "extensions": env.get("GRAPHSON_EXTENSIONS"),
                "default_label": env.get("GRAPHSON_DEFAULT_LABEL"),
                "fixups": env.get("GRAPHSON_FIXUPS"),
            }
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "int_width": self.width_policy.integer.value,
            "float_width": self.width_policy.floating.value,
            "extensions": self.extension_policy.value,
            "default_label": self.default_label,
            "fixups": list(self.fixups),
        }


OptionsLike = Union[TranslationOptions, Mapping[str, Any], None]


# =============================================================================
# Metrics
# =============================================================================

class MetricsSink(Protocol):
    """
    Metrics collection protocol (low-cardinality; SIEM-safe).
    """
    def observe(
        self,
        *,
        component: str,
        op: str,
        ms: float,
        ok: bool,
        code: str = "OK",
        extra: Optional[Mapping[str, Any]] = None,
    ) -> None:
        ...


class NoopMetrics:
    def observe(self, **_: Any) -> None:
        ...


# =============================================================================
# Results / capabilities
# =============================================================================

@dataclass(frozen=True)
class TranslationResult:
    """Explicit result value: exactly one of `document` / `error` is meaningful."""
    ok: bool
    document: Optional[Document] = None
    error: Optional[GraphSONError] = None


@dataclass(frozen=True)
class TranslationCapabilities:
    """What this adapter reads, writes and can be configured with."""
    sdk_version: str = GRAPHSON_SDK_VERSION
    source_format: str = LEGACY_FORMAT_ID
    target_format: str = CURRENT_FORMAT_ID
    composite_tags: Tuple[str, ...] = COMPOSITE_TAGS
    scalar_tags: Tuple[str, ...] = SCALAR_TAGS
    integer_widths: Tuple[str, ...] = tuple(m.value for m in IntegerWidth)
    float_widths: Tuple[str, ...] = tuple(m.value for m in FloatWidth)
    extension_policies: Tuple[str, ...] = tuple(m.value for m in ExtensionPolicy)
    fixups: Tuple[str, ...] = ()


def _document_kind(document: Document) -> str:
    if isinstance(document, list):
        return "list"
    if isinstance(document, Mapping):
        return "object"
    return "scalar"


def _nesting_error(stage: str) -> Union[DecodeError, EncodeError]:
    message = "document nesting exceeds the interpreter recursion limit"
    if stage in ("parse", "decode"):
        return DecodeError(message, reason=DecodeFailure.UNRECOGNIZED_SHAPE, path=())
    return EncodeError(message, reason=EncodeFailure.INTERNAL_INVARIANT_VIOLATION)


def dumps(document: Document, *, indent: Optional[int] = None) -> str:
    """
    Serialize a translated document. Key order is kept as produced (never
    sorted) and separators are fixed, so equal trees give equal text.
    """
    separators = (",", ":") if indent is None else (",", ": ")
    return json.dumps(
        document,
        ensure_ascii=False,
        allow_nan=False,
        indent=indent,
        separators=separators,
    )


# =============================================================================
# Adapter
# =============================================================================

class TranslationAdapter:
    """
    Decode → fixups → encode.

    Args:
        options: Default TranslationOptions (or mapping) for calls that do not
            pass their own.
        metrics: Optional MetricsSink observing per-call latency.
    """

    _component = "graphson_translation"

    def __init__(
        self,
        options: OptionsLike = None,
        *,
        metrics: Optional[MetricsSink] = None,
    ) -> None:
        self._options = self._resolve_options(options, TranslationOptions())
        self._metrics: MetricsSink = metrics or NoopMetrics()

    @property
    def options(self) -> TranslationOptions:
        return self._options

    def capabilities(self) -> TranslationCapabilities:
        return TranslationCapabilities(fixups=available_fixups())

    # ---- public API ---------------------------------------------------------

    def translate(
        self,
        document: Document,
        options: OptionsLike = None,
        *,
        ctx: Optional[OperationContext] = None,
    ) -> Document:
        """
        Translate one parsed GraphSON 1.0 document into a GraphSON 3.0 tree.

        Raises:
            TranslationError: the document (or a fixup-produced tree) could not
                be translated; `.cause` is the DecodeError / EncodeError.
                Nesting deeper than the interpreter recursion limit is
                reported the same way, at the stage that hit the limit.
            ConfigurationError: `options` names an unknown fixup or policy.
        """
        t0 = time.monotonic()
        stage = "options"
        opts: Optional[TranslationOptions] = None
        try:
            opts = self._resolve_options(options, self._options)
            stage = "decode"
            decoder = LegacyDecoder(
                extension_policy=opts.extension_policy,
                default_label=opts.default_label,
            )
            tree = decoder.decode(document)
            stage = "fixup"
            tree = apply_fixups(tree, opts.fixups)
            stage = "encode"
            result = CurrentEncoder(opts.width_policy).encode(tree)
        except (DecodeError, EncodeError) as err:
            self._record("translate", t0, ok=False, code=err.code or "ERROR", ctx=ctx)
            raise self._translation_error(err, stage, document, opts, ctx) from err
        except RecursionError:
            err = _nesting_error(stage)
            self._record("translate", t0, ok=False, code=err.code or "ERROR", ctx=ctx)
            raise self._translation_error(err, stage, document, opts, ctx) from None
        self._record("translate", t0, ok=True, ctx=ctx)
        return result

    def translate_text(
        self,
        text: Union[str, bytes],
        options: OptionsLike = None,
        *,
        ctx: Optional[OperationContext] = None,
        indent: Optional[int] = None,
    ) -> str:
        """
        JSON text in, JSON text out.

        `bytes` input is decoded by `json.loads` (UTF-8/16/32); undecodable
        bytes fail like any other invalid JSON.
        """
        try:
            document = json.loads(text)
        except ValueError as parse_err:
            err = DecodeError(
                f"input is not valid JSON: {parse_err}",
                reason=DecodeFailure.UNRECOGNIZED_SHAPE,
                path=(),
            )
            raise self._translation_error(err, "parse", None, None, ctx) from parse_err
        except RecursionError:
            raise self._translation_error(_nesting_error("parse"), "parse", None, None, ctx) from None
        result = self.translate(document, options, ctx=ctx)
        try:
            return dumps(result, indent=indent)
        except RecursionError:
            err = _nesting_error("serialize")
            raise self._translation_error(err, "serialize", document, None, ctx) from None

    def try_translate(
        self,
        document: Document,
        options: OptionsLike = None,
        *,
        ctx: Optional[OperationContext] = None,
    ) -> TranslationResult:
        """
        Like `translate`, but failures come back as a result value.

        `error` is the TranslationError, or the ConfigurationError when the
        per-call `options` are invalid.
        """
        try:
            return TranslationResult(ok=True, document=self.translate(document, options, ctx=ctx))
        except (TranslationError, ConfigurationError) as err:
            return TranslationResult(ok=False, error=err)

    # ---- internal helpers ---------------------------------------------------

    @staticmethod
    def _resolve_options(options: OptionsLike, default: TranslationOptions) -> TranslationOptions:
        if options is None:
            return default
        if isinstance(options, TranslationOptions):
            return options
        return TranslationOptions.from_dict(options)

    def _translation_error(
        self,
        err: Union[DecodeError, EncodeError],
        stage: str,
        document: Document,
        opts: Optional[TranslationOptions],
        ctx: Optional[OperationContext],
    ) -> TranslationError:
        details: Dict[str, Any] = {"stage": stage}
        if document is not None:
            details["document_kind"] = _document_kind(document)
        if opts is not None:
            details["options"] = opts.to_dict()
        if ctx is not None:
            if ctx.request_id:
                details["request_id"] = ctx.request_id
            if ctx.tenant_hash:
                details["tenant_hash"] = ctx.tenant_hash

        exc = TranslationError(f"{stage} failed: {err.message}", cause=err, details=details)
        attach_context(
            exc,
            component="translation",
            stage=stage,
            request_id=ctx.request_id if ctx else None,
            tenant_hash=ctx.tenant_hash if ctx else None,
            traceparent=ctx.traceparent if ctx else None,
        )
        LOG.warning(
            "graphson translation failed at %s: %s",
            err.details.get("path", "$"),
            err.message,
            extra={"code": err.code, "stage": stage},
        )
        return exc

    def _record(
        self,
        op: str,
        t0: float,
        ok: bool,
        *,
        code: str = "OK",
        ctx: Optional[OperationContext] = None,
    ) -> None:
        try:
            ms = (time.monotonic() - t0) * 1000.0
            extra = None
            if ctx is not None and ctx.tenant_hash:
                extra = {"tenant_hash": ctx.tenant_hash}
            self._metrics.observe(
                component=self._component,
                op=op,
                ms=ms,
                ok=ok,
                code=code,
                extra=extra,
            )
        except Exception as metrics_err:  # noqa: BLE001
            # never let metrics break the caller
            LOG.debug("metrics sink failed: %s", metrics_err)


def translate(document: Document, options: OptionsLike = None, **kwargs: Any) -> Document:
    """Module-level shortcut: `TranslationAdapter().translate(document, options)`."""
    return TranslationAdapter().translate(document, options, **kwargs)


# =============================================================================
# Wire-Level Helpers (canonical envelopes)
# =============================================================================

def _error_to_wire(e: Exception, ms: float) -> Dict[str, Any]:
    """
    Map GraphSONError (or unexpected Exception) to canonical error envelope.
    """
    if isinstance(e, GraphSONError):
        return {
            "ok": False,
            "code": e.code or type(e).__name__.upper(),
            "error": type(e).__name__,
            "message": e.message,
            "details": e.details or None,
            "ms": ms,
        }
    return {
        "ok": False,
        "code": "UNAVAILABLE",
        "error": type(e).__name__,
        "message": str(e) or "internal error",
        "details": None,
        "ms": ms,
    }


def _success_to_wire(result: Any, ms: float) -> Dict[str, Any]:
    if hasattr(result, "__dataclass_fields__"):
        payload = asdict(result)
    else:
        payload = result
    return {
        "ok": True,
        "code": "OK",
        "ms": ms,
        "result": payload,
    }


class WireTranslationHandler:
    """
    Reference wire adapter for TranslationAdapter.

    Transport-agnostic: plug into HTTP, a queue consumer, a client-side
    response hook, etc. Every failure becomes an error envelope; `handle`
    never raises.
    """

    def __init__(self, adapter: Optional[TranslationAdapter] = None):
        self._adapter = adapter or TranslationAdapter()

    def handle(self, envelope: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Supported ops:
            - graphson.capabilities
            - graphson.translate
        """
        t0 = time.monotonic()
        try:
            if not isinstance(envelope, Mapping):
                raise BadRequest("envelope must be an object")
            op = envelope.get("op")
            if not isinstance(op, str):
                raise BadRequest("missing or invalid 'op'")

            raw_ctx = envelope.get("ctx")
            if raw_ctx is not None and not isinstance(raw_ctx, Mapping):
                raise BadRequest("'ctx' must be an object")
            ctx = OperationContext.from_dict(raw_ctx)
            args = envelope.get("args") or {}
            if not isinstance(args, Mapping):
                raise BadRequest("'args' must be an object")

            if op == "graphson.capabilities":
                res = self._adapter.capabilities()
                return _success_to_wire(res, (time.monotonic() - t0) * 1000.0)

            if op == "graphson.translate":
                if "document" not in args:
                    raise BadRequest("missing required arg 'document'")
                res = self._adapter.translate(args["document"], args.get("options"), ctx=ctx)
                return _success_to_wire(
                    {"document": res, "format": CURRENT_FORMAT_ID},
                    (time.monotonic() - t0) * 1000.0,
                )

            raise NotSupported(f"unknown operation '{op}'")
        except Exception as e:
            ms = (time.monotonic() - t0) * 1000.0
            if not isinstance(e, GraphSONError):
                LOG.exception("unexpected error in wire handler")
            return _error_to_wire(e, ms)


__all__ = [
    "Document",
    "TranslationOptions",
    "MetricsSink",
    "NoopMetrics",
    "TranslationResult",
    "TranslationCapabilities",
    "TranslationAdapter",
    "translate",
    "dumps",
    "WireTranslationHandler",
    "_error_to_wire",
    "_success_to_wire",
]
