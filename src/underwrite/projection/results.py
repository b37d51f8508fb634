# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Projection output models"""

from __future__ import annotations

from typing import List, Optional

import pandas as pd
from pydantic import Field

from ..core.primitives import Model
from ..core.ratios import CoverageRatio, covered_stats
from ..debt.plan import DebtSchedule, TrancheYearDetail
from ..debt.tranche import DebtTranche
from ..valuation.dcf import ValuationResult

_RATIO_FIELDS = {"dscr_ratio", "icr_ratio", "leverage_ratio", "fixed_charge_ratio"}


class ProjectionRow(Model):
    """
    One projection year across the three statements.

    Covenant ratios are stored as tagged ``CoverageRatio`` values; the plain
    ``dscr`` / ``icr`` / ``nd_to_ebitda`` / ``fixed_charge_coverage``
    accessors return the number, or None when the ratio is not applicable or
    uncapped.
    """

    year: int
    period: int

    # Income statement
    revenue: float
    cogs: float
    opex: float
    ebitda: float
    depreciation: float
    ebit: float
    interest_expense: float
    pre_tax_income: float
    tax: float
    net_income: float
    nopat: float

    # Balance sheet
    gross_ppe: float
    accumulated_depreciation: float
    net_ppe: float
    working_capital: float
    cash: float
    gross_debt: float
    net_debt: float
    retained_earnings: float

    # Cash flow statement
    cash_from_operations: float
    cash_from_investing: float
    cash_from_financing: float
    capex: float
    delta_wc: float
    fcf: float = Field(..., description="Levered free cash flow (to equity)")
    unlevered_fcf: float = Field(..., description="Free cash flow to the firm")
    distributions: float

    # Debt service
    opening_debt: float
    principal_payment: float
    debt_service: float
    payments_per_year: int
    tranche_details: List[TrancheYearDetail] = Field(default_factory=list)

    # Covenants
    dscr_ratio: CoverageRatio
    icr_ratio: CoverageRatio
    leverage_ratio: CoverageRatio
    fixed_charge_ratio: CoverageRatio
    dscr_breach: bool
    icr_breach: bool
    leverage_breach: bool

    @property
    def dscr(self) -> Optional[float]:
        return self.dscr_ratio.value_or_none

    @property
    def icr(self) -> Optional[float]:
        return self.icr_ratio.value_or_none

    @property
    def nd_to_ebitda(self) -> Optional[float]:
        return self.leverage_ratio.value_or_none

    @property
    def fixed_charge_coverage(self) -> Optional[float]:
        return self.fixed_charge_ratio.value_or_none

    @property
    def any_breach(self) -> bool:
        return self.dscr_breach or self.icr_breach or self.leverage_breach


class CreditStats(Model):
    """Covenant ratio statistics folded over covered values only."""

    min_dscr: Optional[float] = None
    max_dscr: Optional[float] = None
    avg_dscr: Optional[float] = None
    min_icr: Optional[float] = None
    max_icr: Optional[float] = None
    avg_icr: Optional[float] = None
    min_leverage: Optional[float] = None
    max_leverage: Optional[float] = None
    avg_leverage: Optional[float] = None

    @classmethod
    def from_rows(cls, rows: List[ProjectionRow]) -> "CreditStats":
        min_dscr, max_dscr, avg_dscr = covered_stats(r.dscr_ratio for r in rows)
        min_icr, max_icr, avg_icr = covered_stats(r.icr_ratio for r in rows)
        min_lev, max_lev, avg_lev = covered_stats(r.leverage_ratio for r in rows)
        return cls(
            min_dscr=min_dscr,
            max_dscr=max_dscr,
            avg_dscr=avg_dscr,
            min_icr=min_icr,
            max_icr=max_icr,
            avg_icr=avg_icr,
            min_leverage=min_lev,
            max_leverage=max_lev,
            avg_leverage=avg_lev,
        )


class Breaches(Model):
    """Covenant breach counts and the years they occur in."""

    dscr_breach_years: List[int] = Field(default_factory=list)
    icr_breach_years: List[int] = Field(default_factory=list)
    leverage_breach_years: List[int] = Field(default_factory=list)

    @classmethod
    def from_rows(cls, rows: List[ProjectionRow]) -> "Breaches":
        return cls(
            dscr_breach_years=[r.year for r in rows if r.dscr_breach],
            icr_breach_years=[r.year for r in rows if r.icr_breach],
            leverage_breach_years=[r.year for r in rows if r.leverage_breach],
        )

    @property
    def dscr_breaches(self) -> int:
        return len(self.dscr_breach_years)

    @property
    def icr_breaches(self) -> int:
        return len(self.icr_breach_years)

    @property
    def leverage_breaches(self) -> int:
        return len(self.leverage_breach_years)

    @property
    def total(self) -> int:
        return self.dscr_breaches + self.icr_breaches + self.leverage_breaches


class PaymentStructure(Model):
    """How the projection's debt is paid, for reporting."""

    frequency: str
    payments_per_year: int
    balloon_pct: float
    day_count_convention: str
    blended_rate: float


class ProjectionResult(Model):
    """
    Complete output of ``build_projection``.

    Attributes:
        rows: One row per projection year
        valuation: Embedded DCF valuation of the unlevered FCF series
        moic: Multiple on invested capital, None without an equity contribution
        irr: Equity IRR, None without an equity contribution or when undefined
        credit_stats: Covenant ratio statistics
        breaches: Covenant breach years
        tranches: Canonical tranche list the projection was built on
        debt_schedule: Aggregate and per-tranche debt schedules
        opening_debt: Total debt at the valuation date
        net_debt_at_valuation: Opening debt less cash at valuation
        cash_at_maturity: Cash balance in the year the longest tranche matures
        ending_debt_balance: Debt outstanding after the final projection year
        total_debt_paid: Principal repaid over the projection
        warnings: Degenerate-input and lenient-fallback notes
    """

    rows: List[ProjectionRow]
    valuation: ValuationResult
    moic: Optional[float] = None
    irr: Optional[float] = None
    credit_stats: CreditStats
    breaches: Breaches
    tranches: List[DebtTranche]
    debt_schedule: DebtSchedule
    opening_debt: float
    net_debt_at_valuation: float
    cash_at_maturity: float
    ending_debt_balance: float
    total_debt_paid: float
    payment_structure: PaymentStructure
    warnings: List[str] = Field(default_factory=list)

    @property
    def enterprise_value(self) -> float:
        return self.valuation.enterprise_value

    @property
    def equity_value(self) -> float:
        return self.valuation.equity_value

    @property
    def unlevered_fcf_series(self) -> List[float]:
        return [row.unlevered_fcf for row in self.rows]

    def to_dataframe(self) -> pd.DataFrame:
        """Projection rows as a DataFrame indexed by calendar year."""
        records = []
        for row in self.rows:
            record = row.model_dump(exclude=_RATIO_FIELDS | {"tranche_details"})
            record.update(
                dscr=row.dscr,
                icr=row.icr,
                nd_to_ebitda=row.nd_to_ebitda,
                fixed_charge_coverage=row.fixed_charge_coverage,
            )
            records.append(record)
        return pd.DataFrame(records).set_index("year")
