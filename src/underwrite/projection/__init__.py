# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Multi-year credit projections: parameters, the year-by-year builder and its
result models.
"""

from .builder import build_projection
from .params import ProjectionParams
from .results import (
    Breaches,
    CreditStats,
    PaymentStructure,
    ProjectionResult,
    ProjectionRow,
)

__all__ = [
    "Breaches",
    "CreditStats",
    "PaymentStructure",
    "ProjectionParams",
    "ProjectionResult",
    "ProjectionRow",
    "build_projection",
]
