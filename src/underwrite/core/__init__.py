# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from .calculations import FinancialCalculations
from .errors import (
    DomainError,
    InputValidationError,
    InvalidAmortizationError,
    InvalidCashFlowError,
    InvalidRateError,
    NonFiniteResultError,
    TerminalValueError,
    UnderwriteError,
    UnknownConventionError,
)
from .ratios import CoverageRatio, RatioKind, covered_stats

__all__ = [
    "CoverageRatio",
    "DomainError",
    "FinancialCalculations",
    "InputValidationError",
    "InvalidAmortizationError",
    "InvalidCashFlowError",
    "InvalidRateError",
    "NonFiniteResultError",
    "RatioKind",
    "TerminalValueError",
    "UnderwriteError",
    "UnknownConventionError",
    "covered_stats",
]
