# graphson_sdk/core/error_context.py
# SPDX-License-Identifier: Apache-2.0

"""
Error context utilities.

Attach debugging context to exceptions as they cross a component boundary
(decoder, encoder, fixup, wire handler) without changing the exception's
type or message. The context is stored as exception attributes:

- `__graphson_context__`          canonical, merged across layers
- `__<component>_context__`       component-specific copy for discoverability

Typical usage
-------------

    from graphson_sdk.core.error_context import attach_context

    try:
        tree = decoder.decode(document)
    except DecodeError as exc:
        attach_context(exc, component="translation", stage="decode")
        raise

Later, in error handlers:

    except TranslationError as exc:
        context = get_context(exc)
        logger.warning("translation failed", extra={"stage": context.get("stage")})

Context must stay SIEM-safe: ids, counts, option names. Never document
payloads or raw tenant ids.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, MutableMapping, Optional

logger = logging.getLogger(__name__)

_CANONICAL_ATTR = "__graphson_context__"


def attach_context(
    exc: BaseException,
    component: str,
    **context: Any,
) -> None:
    """
    Attach debugging context to an exception.

    Multiple calls merge: new keys are added, existing keys are overwritten,
    and the first `component` recorded is kept.

    Context attachment is best-effort; failures are logged at debug level and
    never mask the original exception.
    """
    try:
        merged_context: MutableMapping[str, Any] = {}

        existing = getattr(exc, _CANONICAL_ATTR, None)
        if isinstance(existing, Mapping):
            merged_context.update(existing)

        merged_context.setdefault("component", component)
        merged_context.update(context)

        setattr(exc, _CANONICAL_ATTR, merged_context)
        setattr(exc, f"__{component}_context__", merged_context)

    except Exception as attachment_error:  # noqa: BLE001
        # Context attachment should never interfere with exception propagation.
        logger.debug(
            "Failed to attach error context to %s: %s",
            type(exc).__name__,
            attachment_error,
            extra={"component": component},
        )


def get_context(
    exc: BaseException,
    *,
    component: Optional[str] = None,
) -> Mapping[str, Any]:
    """
    Retrieve attached context, preferring the component-specific attribute
    when `component` is given. Returns an empty dict when none is present.
    """
    if component:
        ctx = getattr(exc, f"__{component}_context__", None)
        if isinstance(ctx, Mapping):
            return ctx

    ctx = getattr(exc, _CANONICAL_ATTR, None)
    if isinstance(ctx, Mapping):
        return ctx
    return {}


def has_context(exc: BaseException, *, component: Optional[str] = None) -> bool:
    return len(get_context(exc, component=component)) > 0


def clear_context(exc: BaseException) -> None:
    """
    Remove the canonical context and every `__<name>_context__` attribute.

    Useful before serializing an exception.
    """
    for attr in list(vars(exc)):
        if attr.startswith("__") and attr.endswith("_context__"):
            delattr(exc, attr)


__all__ = [
    "attach_context",
    "get_context",
    "has_context",
    "clear_context",
]
