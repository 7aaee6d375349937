# graphson_sdk/core/operational_context.py
# SPDX-License-Identifier: Apache-2.0

"""
Request-scoped context for translation calls.

The translation core is stateless, so the context carries nothing that
changes output: it only labels a call for logging, metrics and error
context. Two calls with different contexts and the same document and options
produce byte-identical output.

Typical usage
-------------

    from graphson_sdk.core.operational_context import OperationContext

    ctx = OperationContext(request_id="req-123", tenant="tenant-a")
    adapter.translate(document, ctx=ctx)

    # From a wire envelope
    ctx = OperationContext.from_dict(envelope.get("ctx"))

Notes
-----
- `tenant` may be sensitive; loggers should only ever see its hash
  (see `tenant_hash`).
- `traceparent` is copied into the context attached to translation errors.
  Unknown keys in `from_dict` are ignored.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional


@dataclass(frozen=True)
class OperationContext:
    """
    Fields
    ------
    request_id:
        Correlation id for the logical request. Optional.

    tenant:
        Multi-tenant identifier. Never logged raw.

    traceparent:
        W3C traceparent header value, if present.
    """

    request_id: Optional[str] = None
    tenant: Optional[str] = None
    traceparent: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "request_id": self.request_id,
            "tenant": self.tenant,
            "traceparent": self.traceparent,
        }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "OperationContext":
        """Create an OperationContext from a dict; missing keys default to None."""
        if not data:
            return cls()
        return cls(
            request_id=data.get("request_id"),
            tenant=data.get("tenant"),
            traceparent=data.get("traceparent"),
        )

    @property
    def tenant_hash(self) -> Optional[str]:
        return tenant_hash(self.tenant)


def tenant_hash(tenant: Optional[str]) -> Optional[str]:
    """Short SHA-256 prefix safe to log in place of a tenant id."""
    if not tenant:
        return None
    return hashlib.sha256(tenant.encode("utf-8")).hexdigest()[:12]


__all__ = [
    "OperationContext",
    "tenant_hash",
]
