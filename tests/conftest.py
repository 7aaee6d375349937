# SPDX-License-Identifier: Apache-2.0
"""
Shared fixtures for the GraphSON SDK test suite.

Documents are built fresh per test so that no test can leak mutations into
another one.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

import pytest

from graphson_sdk.core.operational_context import OperationContext
from graphson_sdk.graphson.translation import TranslationAdapter, WireTranslationHandler


@pytest.fixture
def person_vertex() -> Dict[str, Any]:
    """GraphSON 1.0 vertex with the minimum a vertex carries (no type marker)."""
    return {
        "id": 3,
        "label": "person",
        "properties": {
            "name": [{"id": 11, "label": "name", "value": "John"}],
        },
    }


@pytest.fixture
def knows_edge() -> Dict[str, Any]:
    return {
        "id": 7,
        "label": "knows",
        "type": "edge",
        "inVLabel": "person",
        "outVLabel": "person",
        "inV": 2,
        "outV": 1,
        "properties": {"weight": 0.5, "since": 2009},
    }


@pytest.fixture
def modern_rows(person_vertex, knows_edge) -> List[Any]:
    """A typical query response: a list of mixed result rows."""
    return [
        person_vertex,
        knows_edge,
        {"count": 2, "names": ["marko", "vadas"]},
        "plain",
        None,
    ]


@pytest.fixture
def ctx() -> OperationContext:
    return OperationContext(request_id="t-req-1", tenant="tenant-secret")


@pytest.fixture
def adapter() -> TranslationAdapter:
    return TranslationAdapter()


@pytest.fixture
def wire_handler(adapter) -> WireTranslationHandler:
    return WireTranslationHandler(adapter)


@pytest.fixture
def graphson_logs(caplog):
    """caplog scoped to the graphson_sdk logger hierarchy at DEBUG."""
    caplog.set_level(logging.DEBUG, logger="graphson_sdk")
    return caplog
