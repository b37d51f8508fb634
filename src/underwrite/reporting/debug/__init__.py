# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Debug utilities for auditing calculation paths.
"""

from .comparator import (
    Divergence,
    DivergenceType,
    ValuationComparison,
    ValueComparison,
    audit_projection,
    compare_valuation_paths,
    format_comparison,
)

__all__ = [
    "Divergence",
    "DivergenceType",
    "ValuationComparison",
    "ValueComparison",
    "audit_projection",
    "compare_valuation_paths",
    "format_comparison",
]
