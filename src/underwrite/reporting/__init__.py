# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Reporting utilities.

The debug subpackage audits the projection's embedded valuation against
standalone runs of the DCF engine.
"""

from .debug import audit_projection, compare_valuation_paths, format_comparison

__all__ = [
    "audit_projection",
    "compare_valuation_paths",
    "format_comparison",
]
