# SPDX-License-Identifier: Apache-2.0
"""
GraphSON SDK Tests

Unit and wire-level tests for the GraphSON 1.0 -> 3.0 translation SDK.
"""
