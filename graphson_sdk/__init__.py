# graphson_sdk/__init__.py
# SPDX-License-Identifier: Apache-2.0

"""
GraphSON Translation SDK.

Reads GraphSON 1.0 responses from graph databases that still emit them and
writes the GraphSON 3.0 documents current client libraries expect.

    from graphson_sdk.graphson import TranslationAdapter

    adapter = TranslationAdapter({"int_width": "PreferInt32"})
    document = adapter.translate(rows)
"""

from graphson_sdk.graphson.graphson_base import GRAPHSON_SDK_VERSION

__version__ = GRAPHSON_SDK_VERSION

__all__ = ["__version__"]
