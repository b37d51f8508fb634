# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from .enums import (
    AmortizationStyle,
    DiscountingConvention,
    PaymentFrequency,
    Seniority,
    Severity,
    TerminalValueMethod,
)
from .model import Model
from .settings import CalculationSettings, DayCountConvention
from .types import (
    FiniteFloat,
    FloatBetween0And1,
    Percentage,
    PositiveFloat,
    PositiveInt,
)
from .validation import (
    ensure_all_finite,
    ensure_finite,
    is_number,
    validate_cash_flows,
    validate_rate,
)

__all__ = [
    "AmortizationStyle",
    "CalculationSettings",
    "DayCountConvention",
    "DiscountingConvention",
    "FiniteFloat",
    "FloatBetween0And1",
    "Model",
    "PaymentFrequency",
    "Percentage",
    "PositiveFloat",
    "PositiveInt",
    "Seniority",
    "Severity",
    "TerminalValueMethod",
    "ensure_all_finite",
    "ensure_finite",
    "is_number",
    "validate_cash_flows",
    "validate_rate",
]
