# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Debt tranche definition"""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import Field, model_validator

from ..core.primitives import (
    AmortizationStyle,
    DayCountConvention,
    Model,
    PaymentFrequency,
    Percentage,
    PositiveFloat,
    PositiveInt,
    Seniority,
)


class DebtTranche(Model):
    """
    A single layer of debt with its own rate, tenor and repayment profile.

    Tranches are immutable once built. The aggregator schedules each one
    independently and sums the results, so a company with a senior term loan
    and a subordinated note is modelled as two tranches.

    Attributes:
        name: Unique label within a projection
        amount: Principal outstanding at the start of the projection
        rate: Nominal annual interest rate as a decimal
        tenor_years: Loan term in years from projection start
        maturity_date: Optional hard maturity; caps the tenor when earlier
        amortization_type: Repayment profile
        payment_frequency: Payment frequency label (Monthly, Quarterly, ...)
        interest_only_years: Leading years without principal repayment
        seniority: Ranking in the capital structure
        day_count_convention: Convention the rate is quoted under
        balloon_pct: Balloon share of principal in percent, balloon style only
        custom_percentages: Per-year repayment percentages, custom style only
        custom_intervals: Four bucket percentages, custom style only
        is_existing: True for debt already outstanding before the new facility

    Example:
        ```python
        senior = DebtTranche(
            name="Senior Term Loan",
            amount=300_000,
            rate=0.06,
            tenor_years=5,
            amortization_type="level",
        )
        mezz = DebtTranche(
            name="Mezzanine",
            amount=200_000,
            rate=0.10,
            tenor_years=5,
            amortization_type="bullet",
            seniority="mezzanine",
        )
        ```
    """

    name: str = Field(..., min_length=1)
    amount: PositiveFloat
    rate: float = Field(..., ge=0, allow_inf_nan=False)
    tenor_years: int = Field(..., ge=1, le=50)
    maturity_date: Optional[date] = None
    amortization_type: AmortizationStyle = AmortizationStyle.LEVEL
    payment_frequency: str = PaymentFrequency.QUARTERLY.value
    interest_only_years: PositiveInt = 0
    seniority: Seniority = Seniority.SENIOR
    day_count_convention: str = DayCountConvention.THIRTY_360.value
    balloon_pct: Percentage = 0.0
    custom_percentages: Optional[List[float]] = None
    custom_intervals: Optional[List[PositiveFloat]] = Field(
        default=None, min_length=4, max_length=4
    )
    is_existing: bool = False

    @model_validator(mode="after")
    def validate_structure(self) -> "DebtTranche":
        """Balloon and custom inputs only make sense for their own style."""
        if self.balloon_pct > 0 and self.amortization_type != AmortizationStyle.BALLOON:
            raise ValueError(
                f"Tranche '{self.name}': balloon_pct requires balloon amortization, "
                f"got {self.amortization_type.value}"
            )
        has_custom = bool(self.custom_percentages) or bool(self.custom_intervals)
        if has_custom and self.amortization_type != AmortizationStyle.CUSTOM:
            raise ValueError(
                f"Tranche '{self.name}': custom percentages require custom amortization"
            )
        return self

    def __str__(self) -> str:
        return (
            f"{self.name}: {self.amount:,.0f} @ {self.rate:.2%} "
            f"{self.tenor_years}y {self.amortization_type.value}"
        )
