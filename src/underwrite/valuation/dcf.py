# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
DCF Valuation - Discounted Cash Flow Analysis

The single discounted cash flow engine. The projection builder calls
``calculate_dcf`` for its embedded valuation and the sensitivity generator
calls it once per grid cell, so every valuation figure in the library comes
from this module.

Inputs are free cash flows to the firm (unlevered FCF). Passing levered
free cash flow and then subtracting net debt would count debt twice.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd
from pydantic import Field, model_validator

from ..core.errors import InputValidationError, InvalidRateError, TerminalValueError
from ..core.primitives import (
    DiscountingConvention,
    FiniteFloat,
    Model,
    TerminalValueMethod,
    ensure_finite,
    is_number,
    validate_cash_flows,
    validate_rate,
)
from .metrics import FinancialSnapshot, ImpliedMultiples, calculate_implied_multiples

DEFAULT_EXIT_MULTIPLE = 8.0


class DCFOptions(Model):
    """
    Optional knobs for ``calculate_dcf``.

    Attributes:
        discounting: End-of-year (default) or mid-year discounting of the
            explicit-period cash flows
        terminal_method: Perpetuity growth (default) or exit multiple
        exit_multiple: EV/EBITDA multiple applied to terminal EBITDA
        terminal_ebitda: Final-year EBITDA, required for the exit multiple method
        associates_value: Value of associates added in the equity bridge
        minority_interest: Minority interest deducted in the equity bridge
        start_year: Calendar year of the first cash flow, for breakdown labels
        snapshot: Operating figures for implied multiples
    """

    discounting: DiscountingConvention = DiscountingConvention.END_OF_YEAR
    terminal_method: TerminalValueMethod = TerminalValueMethod.PERPETUITY_GROWTH
    exit_multiple: float = Field(
        default=DEFAULT_EXIT_MULTIPLE, gt=0, allow_inf_nan=False
    )
    terminal_ebitda: Optional[FiniteFloat] = None
    associates_value: FiniteFloat = 0.0
    minority_interest: FiniteFloat = 0.0
    start_year: int = 1
    snapshot: Optional[FinancialSnapshot] = None

    @model_validator(mode="after")
    def validate_exit_inputs(self) -> "DCFOptions":
        """Exit multiple valuation needs the terminal year's EBITDA."""
        if (
            self.terminal_method == TerminalValueMethod.EXIT_MULTIPLE
            and self.terminal_ebitda is None
        ):
            raise ValueError("Exit multiple terminal value requires terminal_ebitda")
        return self


class DCFBreakdownRow(Model):
    """Discounting detail for one explicit-period year."""

    year: int
    period: float = Field(..., description="Discounting exponent (t or t - 0.5)")
    fcf: float
    discount_factor: float
    present_value: float


class ValuationResult(Model):
    """
    Output of the DCF engine.

    Attributes:
        enterprise_value: PV of explicit cash flows plus PV of terminal value
        equity_value: EV - net debt + associates - minority interest
        terminal_value: Undiscounted terminal value at the end of year n
        pv_of_projected_fcfs: Sum of discounted explicit-period cash flows
        pv_of_terminal_value: Terminal value discounted over n full years
        net_debt: Debt less cash at the valuation date
        breakdown: Per-year discounting detail
        implied_multiples: Multiples over the supplied snapshot, if any
    """

    enterprise_value: float
    equity_value: float
    terminal_value: float
    pv_of_projected_fcfs: float
    pv_of_terminal_value: float
    terminal_discount_factor: float
    net_debt: float
    associates_value: float = 0.0
    minority_interest: float = 0.0
    wacc: float
    terminal_growth: float
    terminal_method: TerminalValueMethod
    exit_multiple: Optional[float] = None
    discounting: DiscountingConvention
    breakdown: List[DCFBreakdownRow]
    implied_multiples: Optional[ImpliedMultiples] = None

    @property
    def fcf_series(self) -> List[float]:
        return [row.fcf for row in self.breakdown]

    @property
    def discount_factors(self) -> List[float]:
        return [row.discount_factor for row in self.breakdown]

    @property
    def terminal_value_share(self) -> Optional[float]:
        """Share of enterprise value coming from the terminal value."""
        if self.enterprise_value <= 0:
            return None
        return self.pv_of_terminal_value / self.enterprise_value

    def breakdown_dataframe(self) -> pd.DataFrame:
        df = pd.DataFrame([row.model_dump() for row in self.breakdown])
        return df.set_index("year")


def discount_factors(
    wacc: float, years: int, discounting: DiscountingConvention
) -> np.ndarray:
    """1/(1+wacc)^t, with t shifted back half a year under mid-year discounting."""
    periods = np.arange(1, years + 1, dtype=float)
    if discounting == DiscountingConvention.MID_YEAR:
        periods = periods - 0.5
    return 1.0 / np.power(1.0 + wacc, periods)


def calculate_dcf(
    fcf_series: Sequence[float],
    wacc: float,
    terminal_growth: float,
    net_debt: float,
    options: Optional[DCFOptions] = None,
    *,
    logger: Optional[logging.Logger] = None,
) -> ValuationResult:
    """
    Value a business from its free cash flows to the firm.

    Explicit-period cash flows are discounted at ``1/(1+wacc)^t`` (or
    ``t - 0.5`` with mid-year discounting). The terminal value is computed at
    the end of year n, either as a growing perpetuity
    ``FCF_n * (1+g) / (wacc - g)`` or as ``terminal_ebitda * exit_multiple``,
    and is discounted over n full years under both conventions.

    Args:
        fcf_series: Unlevered free cash flow per year, year 1 first
        wacc: Weighted average cost of capital as a decimal
        terminal_growth: Long-run growth rate as a decimal
        net_debt: Debt minus cash at the valuation date
        options: Discounting, terminal method and equity bridge adjustments
        logger: Logger override for this call

    Returns:
        ValuationResult

    Raises:
        InvalidCashFlowError: Empty, non-numeric or non-finite FCF series
        InvalidRateError: Non-positive or non-finite WACC, non-finite growth
        TerminalValueError: Perpetuity growth method with wacc <= terminal_growth
        NonFiniteResultError: Any Inf/NaN in the results
    """
    log = logger or logging.getLogger(__name__)
    options = options or DCFOptions()

    flows = validate_cash_flows(fcf_series, "fcf_series")
    wacc = validate_rate(wacc, "wacc", allow_zero=False)
    if not is_number(terminal_growth) or not math.isfinite(terminal_growth):
        raise InvalidRateError(f"terminal_growth must be a finite number, got {terminal_growth!r}")
    if not is_number(net_debt) or not math.isfinite(net_debt):
        raise InputValidationError(f"net_debt must be a finite number, got {net_debt!r}")

    n = len(flows)
    factors = discount_factors(wacc, n, options.discounting)
    present_values = np.asarray(flows) * factors
    pv_fcfs = ensure_finite(present_values.sum(), "pv_of_projected_fcfs")

    if options.terminal_method == TerminalValueMethod.PERPETUITY_GROWTH:
        if wacc <= terminal_growth:
            raise TerminalValueError(wacc, terminal_growth)
        terminal_value = flows[-1] * (1 + terminal_growth) / (wacc - terminal_growth)
        exit_multiple = None
    else:
        terminal_value = options.terminal_ebitda * options.exit_multiple
        exit_multiple = options.exit_multiple
    terminal_value = ensure_finite(terminal_value, "terminal_value")

    terminal_factor = 1.0 / (1.0 + wacc) ** n
    pv_terminal = ensure_finite(terminal_value * terminal_factor, "pv_of_terminal_value")

    enterprise_value = ensure_finite(pv_fcfs + pv_terminal, "enterprise_value")
    equity_value = ensure_finite(
        enterprise_value - net_debt + options.associates_value - options.minority_interest,
        "equity_value",
    )

    offset = 0.5 if options.discounting == DiscountingConvention.MID_YEAR else 0.0
    breakdown = [
        DCFBreakdownRow(
            year=options.start_year + i,
            period=i + 1 - offset,
            fcf=flows[i],
            discount_factor=float(factors[i]),
            present_value=float(present_values[i]),
        )
        for i in range(n)
    ]

    implied = None
    if options.snapshot is not None:
        implied = calculate_implied_multiples(enterprise_value, equity_value, options.snapshot)

    log.debug(
        f"DCF: {n} years, wacc {wacc:.4f}, g {terminal_growth:.4f}, "
        f"PV(FCF) {pv_fcfs:,.2f}, TV {terminal_value:,.2f}, PV(TV) {pv_terminal:,.2f}, "
        f"EV {enterprise_value:,.2f}, equity {equity_value:,.2f}"
    )
    if equity_value < 0:
        log.warning(
            f"Negative equity value ({equity_value:,.2f}): net debt "
            f"({net_debt:,.2f}) exceeds enterprise value ({enterprise_value:,.2f})"
        )

    return ValuationResult(
        enterprise_value=enterprise_value,
        equity_value=equity_value,
        terminal_value=terminal_value,
        pv_of_projected_fcfs=pv_fcfs,
        pv_of_terminal_value=pv_terminal,
        terminal_discount_factor=terminal_factor,
        net_debt=float(net_debt),
        associates_value=options.associates_value,
        minority_interest=options.minority_interest,
        wacc=wacc,
        terminal_growth=float(terminal_growth),
        terminal_method=options.terminal_method,
        exit_multiple=exit_multiple,
        discounting=options.discounting,
        breakdown=breakdown,
        implied_multiples=implied,
    )
