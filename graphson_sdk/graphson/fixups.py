# graphson_sdk/graphson/fixups.py
# SPDX-License-Identifier: Apache-2.0
"""
Structural fixups applied between decode and encode.

A fixup is a pure function `TypedValue -> TypedValue`. Fixups never mutate:
they rebuild the nodes they change with `dataclasses.replace` and return the
new tree.

Registry
--------
Fixups are looked up by name, so translation options can list them as plain
strings (from env vars, CLI flags or wire envelopes):

    register_fixup("my_fixup", fn)
    get_fixup("my_fixup")

Built-ins:

    collapse_singleton_lists   one-element list property values become the element
    drop_extensions            remove preserved extension fields from every element
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Dict, Iterable, Tuple

from graphson_sdk.graphson.graphson_base import (
    ConfigurationError,
    EdgeRef,
    KeyValue,
    ListValue,
    MapValue,
    PropertyEntry,
    TypedValue,
    VertexPropertyRef,
    VertexRef,
)

LOG = logging.getLogger(__name__)

Fixup = Callable[[TypedValue], TypedValue]


# =============================================================================
# Tree walking
# =============================================================================

def map_tree(value: TypedValue, fn: Fixup) -> TypedValue:
    """
    Rebuild `value` bottom-up, applying `fn` to every node after its children.

    Element ids are not visited; they are identifiers, not property data.
    """
    if isinstance(value, ListValue):
        value = ListValue(tuple(map_tree(item, fn) for item in value.items))
    elif isinstance(value, MapValue):
        value = MapValue(tuple((map_tree(k, fn), map_tree(v, fn)) for k, v in value.entries))
    elif isinstance(value, KeyValue):
        value = KeyValue(value.key, map_tree(value.value, fn))
    elif isinstance(value, VertexPropertyRef):
        value = replace(
            value,
            value=map_tree(value.value, fn),
            meta_properties=_map_key_values(value.meta_properties, fn),
            extensions=_map_key_values(value.extensions, fn),
        )
    elif isinstance(value, VertexRef):
        value = replace(
            value,
            properties=tuple(
                PropertyEntry(entry.key, tuple(map_tree(vp, fn) for vp in entry.values))
                for entry in value.properties
            ),
            extensions=_map_key_values(value.extensions, fn),
        )
    elif isinstance(value, EdgeRef):
        value = replace(
            value,
            properties=_map_key_values(value.properties, fn),
            extensions=_map_key_values(value.extensions, fn),
        )
    return fn(value)


def _map_key_values(kvs: Iterable[KeyValue], fn: Fixup) -> Tuple[KeyValue, ...]:
    return tuple(map_tree(kv, fn) for kv in kvs)


# =============================================================================
# Built-in fixups
# =============================================================================

def _collapse(value: TypedValue) -> TypedValue:
    if isinstance(value, ListValue) and len(value.items) == 1:
        return value.items[0]
    return value


def _collapse_node(node: TypedValue) -> TypedValue:
    if isinstance(node, VertexPropertyRef):
        return replace(
            node,
            value=_collapse(node.value),
            meta_properties=tuple(KeyValue(kv.key, _collapse(kv.value)) for kv in node.meta_properties),
        )
    if isinstance(node, EdgeRef):
        return replace(
            node,
            properties=tuple(KeyValue(kv.key, _collapse(kv.value)) for kv in node.properties),
        )
    return node


def collapse_singleton_lists(value: TypedValue) -> TypedValue:
    """Unwrap one-element list values of vertex, meta and edge properties."""
    return map_tree(value, _collapse_node)


def _strip_extensions(node: TypedValue) -> TypedValue:
    if isinstance(node, (VertexRef, EdgeRef, VertexPropertyRef)) and node.extensions:
        return replace(node, extensions=())
    return node


def drop_extensions(value: TypedValue) -> TypedValue:
    """Remove preserved extension fields from every vertex, edge and vertex property."""
    return map_tree(value, _strip_extensions)


# =============================================================================
# Registry
# =============================================================================

_FIXUPS: Dict[str, Fixup] = {}


def register_fixup(name: str, fixup: Fixup) -> None:
    """
    Register or override a fixup under `name`.

    Example
    -------
        def upper_labels(tree):
            return map_tree(tree, lambda n: replace(n, label=n.label.upper())
                            if isinstance(n, VertexRef) else n)

        register_fixup("upper_labels", upper_labels)
    """
    if not name or not isinstance(name, str):
        raise ConfigurationError("fixup name must be a non-empty string")
    if not callable(fixup):
        raise ConfigurationError("fixup must be callable")
    _FIXUPS[name] = fixup
    LOG.debug("Registered fixup name=%s", name)


def get_fixup(name: str) -> Fixup:
    fixup = _FIXUPS.get(name)
    if fixup is None:
        known = ", ".join(sorted(_FIXUPS)) or "none"
        raise ConfigurationError(f"unknown fixup '{name}' (registered: {known})")
    return fixup


def available_fixups() -> Tuple[str, ...]:
    return tuple(sorted(_FIXUPS))


def apply_fixups(value: TypedValue, names: Iterable[str]) -> TypedValue:
    """Apply fixups in the given order."""
    for name in names:
        value = get_fixup(name)(value)
        LOG.debug("applied fixup %s", name)
    return value


register_fixup("collapse_singleton_lists", collapse_singleton_lists)
register_fixup("drop_extensions", drop_extensions)


__all__ = [
    "Fixup",
    "map_tree",
    "collapse_singleton_lists",
    "drop_extensions",
    "register_fixup",
    "get_fixup",
    "available_fixups",
    "apply_fixups",
]
