# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Projection input parameters"""

from __future__ import annotations

from typing import List, Optional

from pydantic import ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from ..core.primitives import (
    AmortizationStyle,
    DayCountConvention,
    DiscountingConvention,
    FiniteFloat,
    FloatBetween0And1,
    Model,
    PaymentFrequency,
    Percentage,
    PositiveFloat,
    PositiveInt,
    TerminalValueMethod,
)
from ..debt.covenants import CovenantThresholds
from ..debt.tranche import DebtTranche

# Existing debt is synthesized without balloon or custom inputs
_EXISTING_DEBT_STYLES = (
    AmortizationStyle.LEVEL,
    AmortizationStyle.INTEREST_ONLY,
    AmortizationStyle.BULLET,
)


class ProjectionParams(Model):
    """
    Input configuration for a multi-year projection.

    Field names are snake_case; the camelCase names used by saved parameter
    blobs (``baseRevenue``, ``openingDebt``, ``minDSCR`` ...) are accepted as
    aliases, so a saved model validates directly.

    Debt can be given either as ``debt_tranches`` or through the single-debt
    fields (``opening_debt`` for debt already outstanding,
    ``requested_loan_amount`` for the new facility). See
    ``underwrite.debt.normalize_debt`` for how the two forms are reconciled.

    Attributes:
        start_year: Calendar year of projection year 1
        years: Projection horizon (1-50)
        base_revenue: Revenue in projection year 1
        growth: Annual revenue growth applied from year 2
        cogs_pct: Cost of goods sold as a share of revenue
        opex_pct: Operating expenses as a share of revenue
        capex_pct: Capital expenditure as a share of revenue
        da_pct_of_ppe: Depreciation as a share of opening net PP&E
        wc_pct_of_rev: Working capital as a share of revenue
        tax_rate: Corporate tax rate, applied to positive pre-tax income only
        wacc: Discount rate for the embedded valuation
        terminal_growth: Perpetual growth rate; must stay below ``wacc``
        equity_contribution: Sponsor equity; MOIC and IRR need it positive
        opening_cash: Cash balance at the start of the projection
        cash_at_valuation: Cash netted against debt in the equity bridge;
            defaults to ``opening_cash``
        cash_retention_rate: Share of positive net income kept in the business

    Example:
        ```python
        params = ProjectionParams(
            base_revenue=1_000_000,
            growth=0.05,
            cogs_pct=0.40,
            opex_pct=0.30,
            years=5,
            opening_debt=500_000,
            interest_rate=0.08,
            tax_rate=0.25,
            wacc=0.12,
            terminal_growth=0.02,
        )
        ```
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    # Operating assumptions
    start_year: int = 2025
    years: int = Field(default=5, ge=1, le=50)
    base_revenue: PositiveFloat
    growth: FiniteFloat = 0.0
    cogs_pct: FloatBetween0And1 = 0.0
    opex_pct: FloatBetween0And1 = 0.0
    capex_pct: FloatBetween0And1 = 0.0
    da_pct_of_ppe: FloatBetween0And1 = Field(default=0.0, alias="daPctOfPPE")
    wc_pct_of_rev: FloatBetween0And1 = 0.0
    tax_rate: FloatBetween0And1 = 0.25
    opening_ppe: Optional[PositiveFloat] = Field(
        default=None,
        alias="openingPPE",
        description="Opening gross PP&E; defaults to base revenue x capex share",
    )

    # Valuation
    wacc: float = Field(..., gt=0, allow_inf_nan=False)
    terminal_growth: FiniteFloat
    terminal_method: TerminalValueMethod = TerminalValueMethod.PERPETUITY_GROWTH
    exit_multiple: float = Field(default=8.0, gt=0, allow_inf_nan=False)
    discounting: DiscountingConvention = DiscountingConvention.END_OF_YEAR
    shares_outstanding: float = Field(default=1.0, gt=0, allow_inf_nan=False)

    # Single-debt configuration
    opening_debt: PositiveFloat = 0.0
    requested_loan_amount: PositiveFloat = 0.0
    interest_rate: PositiveFloat = 0.0
    existing_debt_rate: Optional[PositiveFloat] = None
    existing_debt_tenor_years: Optional[int] = Field(default=None, ge=1, le=50)
    existing_debt_amortization: AmortizationStyle = AmortizationStyle.LEVEL

    # Multi-tranche configuration
    debt_tranches: List[DebtTranche] = Field(default_factory=list)

    # Debt terms shared by synthesized tranches
    debt_tenor_years: Optional[int] = Field(default=None, ge=1, le=50)
    interest_only_years: PositiveInt = 0
    amortization_style: AmortizationStyle = AmortizationStyle.LEVEL
    balloon_pct: Percentage = Field(default=0.0, alias="balloonPercentage")
    custom_amortization: Optional[List[float]] = None
    custom_amortization_intervals: Optional[List[PositiveFloat]] = Field(
        default=None, min_length=4, max_length=4
    )
    payment_frequency: str = PaymentFrequency.QUARTERLY.value
    day_count_convention: str = DayCountConvention.ACTUAL_365.value

    # Covenants
    min_dscr: PositiveFloat = Field(default=1.2, alias="minDSCR")
    max_nd_to_ebitda: PositiveFloat = Field(default=3.5, alias="maxNDToEBITDA")
    target_icr: PositiveFloat = Field(default=2.0, alias="targetICR")

    # Equity, cash and bridge items
    equity_contribution: PositiveFloat = 0.0
    opening_cash: PositiveFloat = 0.0
    cash_at_valuation: Optional[PositiveFloat] = None
    associates_value: PositiveFloat = 0.0
    minority_interest: PositiveFloat = 0.0
    cash_retention_rate: FloatBetween0And1 = 1.0

    industry: Optional[str] = None

    @model_validator(mode="after")
    def validate_debt_terms(self) -> "ProjectionParams":
        """Validate combinations the field constraints cannot express."""
        if self.balloon_pct > 0 and self.amortization_style not in (
            AmortizationStyle.LEVEL,
            AmortizationStyle.BALLOON,
        ):
            raise ValueError(
                f"balloon_pct cannot be combined with {self.amortization_style.value} "
                "amortization"
            )
        if self.existing_debt_amortization not in _EXISTING_DEBT_STYLES:
            raise ValueError(
                "existing_debt_amortization must be level, interest-only or bullet, "
                f"got {self.existing_debt_amortization.value}"
            )
        return self

    @property
    def covenants(self) -> CovenantThresholds:
        return CovenantThresholds(
            min_dscr=self.min_dscr,
            target_icr=self.target_icr,
            max_nd_to_ebitda=self.max_nd_to_ebitda,
        )

    @property
    def valuation_cash(self) -> float:
        """Cash netted against debt at the valuation date."""
        if self.cash_at_valuation is not None:
            return self.cash_at_valuation
        return self.opening_cash

    def with_updates(self, **updates) -> "ProjectionParams":
        """Validated copy with some fields replaced (by field name)."""
        data = self.model_dump()
        data.update(updates)
        return type(self).model_validate(data)
