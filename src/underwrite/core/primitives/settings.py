# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from enum import Enum

from pydantic import Field

from .model import Model
from .types import PositiveFloat, PositiveInt


class DayCountConvention(str, Enum):
    """Day count conventions used to annualize nominal interest rates."""

    THIRTY_360 = "30/360"
    ACTUAL_360 = "Actual/360"
    ACTUAL_365 = "Actual/365"
    ACTUAL_ACTUAL = "Actual/Actual"


class CalculationSettings(Model):
    """
    Numerical and validation behaviour shared by every calculation entry point.

    Strict mode is the default: malformed custom schedules, unknown day count
    conventions and unknown payment frequencies raise. Lenient mode falls back
    to a documented default and records a warning on the result instead.

    Attributes:
        strict: Raise on recoverable input problems instead of falling back
        custom_amortization_tolerance: Allowed drift (percentage points) of a
            custom amortization list away from 100
        schedule_tolerance: Allowed drift (currency units) between a principal
            schedule sum and the principal it repays
        comparator_tolerance: Absolute tolerance for valuation path audits
        log_precision: Decimal places used when logging intermediate values
    """

    strict: bool = True
    custom_amortization_tolerance: PositiveFloat = Field(
        default=1.0,
        description="Custom amortization percentages must sum to 100 +/- this value",
    )
    schedule_tolerance: PositiveFloat = Field(
        default=0.01,
        description="Principal schedules must sum to principal within this amount",
    )
    comparator_tolerance: PositiveFloat = Field(
        default=1e-6,
        description="Absolute difference below which two valuation figures agree",
    )
    log_precision: PositiveInt = Field(
        default=6, description="Decimal places for logged intermediate values"
    )

    @classmethod
    def lenient(cls) -> "CalculationSettings":
        """Settings that fall back with warnings instead of raising."""
        return cls(strict=False)
