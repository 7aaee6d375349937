# SPDX-License-Identifier: Apache-2.0
"""
GraphSON — OperationContext & error context (SIEM safety).

Asserts:
  • OperationContext round-trips through dicts and ignores unknown keys
  • tenant is only ever exposed as a short stable hash
  • attach_context merges across layers and keeps the first component
  • get_context / has_context / clear_context behave on bare exceptions
"""

from graphson_sdk.core.error_context import (
    attach_context,
    clear_context,
    get_context,
    has_context,
)
from graphson_sdk.core.operational_context import OperationContext, tenant_hash


def test_context_round_trip():
    ctx = OperationContext(request_id="r", tenant="t", traceparent="00-abc")
    assert OperationContext.from_dict(ctx.to_dict()) == ctx
    assert OperationContext.from_dict({"request_id": "r", "extra": True}).request_id == "r"
    assert OperationContext.from_dict(None) == OperationContext()


def test_tenant_hash_is_stable_and_short():
    ctx = OperationContext(tenant="acme")
    assert ctx.tenant_hash == tenant_hash("acme")
    assert len(ctx.tenant_hash) == 12
    assert "acme" not in ctx.tenant_hash
    assert tenant_hash(None) is None
    assert OperationContext().tenant_hash is None


def test_attach_context_merges():
    exc = ValueError("x")
    attach_context(exc, component="translation", stage="decode")
    attach_context(exc, component="wire", request_id="r1")

    merged = get_context(exc)
    assert merged["component"] == "translation"
    assert merged["stage"] == "decode"
    assert merged["request_id"] == "r1"
    assert get_context(exc, component="wire")["request_id"] == "r1"
    assert has_context(exc, component="translation")


def test_clear_context():
    exc = RuntimeError("x")
    assert not has_context(exc)
    attach_context(exc, component="translation", stage="encode")
    clear_context(exc)
    assert get_context(exc) == {}
    assert not hasattr(exc, "__translation_context__")
