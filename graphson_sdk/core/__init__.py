# graphson_sdk/core/__init__.py
# SPDX-License-Identifier: Apache-2.0
"""Cross-cutting helpers: request context and error context."""
