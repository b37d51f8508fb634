# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Valuation sanity checks.

Flags valuations that are arithmetically valid but economically suspicious:
negative equity, cash burn over the explicit period, terminal value carrying
most of the enterprise value, perpetual growth above GDP, implied multiples
outside market ranges and discount rates outside plausible bounds.
"""

from __future__ import annotations

from typing import List, Optional

from ..core.primitives import Model, Severity
from .dcf import ValuationResult

DEFAULT_LONG_TERM_GDP_GROWTH = 0.025

TV_CRITICAL_SHARE = 0.85
TV_WARNING_SHARE = 0.75
MIN_EV_EBITDA = 3.0
MAX_EV_EBITDA = 15.0
MIN_WACC = 0.06
MAX_WACC = 0.25


class SanityCheck(Model):
    """A single sanity finding."""

    code: str
    severity: Severity
    title: str
    message: str
    value: float
    recommendation: str


def run_valuation_sanity_checks(
    valuation: ValuationResult,
    long_term_gdp_growth: float = DEFAULT_LONG_TERM_GDP_GROWTH,
) -> List[SanityCheck]:
    """
    Run all sanity checks against a valuation.

    Args:
        valuation: Output of ``calculate_dcf``
        long_term_gdp_growth: Ceiling for sustainable perpetual growth

    Returns:
        Findings ordered by severity (critical first); empty when clean
    """
    checks: List[SanityCheck] = []

    if valuation.equity_value <= 0:
        checks.append(
            SanityCheck(
                code="NEGATIVE_EQUITY",
                severity=Severity.CRITICAL,
                title="Negative Equity Value",
                message=(
                    f"Equity value is {valuation.equity_value:,.0f}: debt exceeds "
                    "enterprise value"
                ),
                value=valuation.equity_value,
                recommendation="Review debt levels and projections, or run a restructuring analysis.",
            )
        )

    if valuation.pv_of_projected_fcfs < 0:
        checks.append(
            SanityCheck(
                code="NEGATIVE_FCF",
                severity=Severity.CRITICAL,
                title="Negative Projected Cash Flows",
                message=(
                    f"PV of projected FCFs is {valuation.pv_of_projected_fcfs:,.0f}: the "
                    "business burns cash over the explicit forecast period"
                ),
                value=valuation.pv_of_projected_fcfs,
                recommendation="Confirm this is a growth-phase investment and review capex and margins.",
            )
        )

    tv_share = _terminal_share(valuation)
    if tv_share > TV_CRITICAL_SHARE:
        checks.append(
            SanityCheck(
                code="TV_DOMINATES",
                severity=Severity.CRITICAL,
                title="Terminal Value Dominates Valuation",
                message=f"Terminal value is {tv_share:.0%} of total value",
                value=tv_share,
                recommendation="Extend the projection period or revisit near-term assumptions.",
            )
        )
    elif tv_share > TV_WARNING_SHARE:
        checks.append(
            SanityCheck(
                code="TV_HIGH",
                severity=Severity.MEDIUM,
                title="High Terminal Value Weight",
                message=f"Terminal value is {tv_share:.0%} of total value (norm 50-75%)",
                value=tv_share,
                recommendation="Consider a longer projection period or validate terminal assumptions.",
            )
        )

    if valuation.terminal_growth > long_term_gdp_growth:
        checks.append(
            SanityCheck(
                code="HIGH_TERMINAL_GROWTH",
                severity=Severity.MEDIUM,
                title="Terminal Growth Exceeds GDP",
                message=(
                    f"Terminal growth of {valuation.terminal_growth:.1%} exceeds long-term "
                    f"GDP growth of {long_term_gdp_growth:.1%}"
                ),
                value=valuation.terminal_growth,
                recommendation="No company outgrows the economy forever; consider 2-3%.",
            )
        )

    ev_to_ebitda = _ev_to_ebitda(valuation)
    if ev_to_ebitda is not None and ev_to_ebitda < MIN_EV_EBITDA:
        checks.append(
            SanityCheck(
                code="LOW_EBITDA_MULTIPLE",
                severity=Severity.MEDIUM,
                title="Low Implied EV/EBITDA",
                message=f"Implied EV/EBITDA of {ev_to_ebitda:.1f}x is below typical ranges (5-12x)",
                value=ev_to_ebitda,
                recommendation="Check for structural issues or undervaluation.",
            )
        )
    elif ev_to_ebitda is not None and ev_to_ebitda > MAX_EV_EBITDA:
        checks.append(
            SanityCheck(
                code="HIGH_EBITDA_MULTIPLE",
                severity=Severity.MEDIUM,
                title="High Implied EV/EBITDA",
                message=f"Implied EV/EBITDA of {ev_to_ebitda:.1f}x is above typical ranges (5-12x)",
                value=ev_to_ebitda,
                recommendation="Verify that growth assumptions support a premium valuation.",
            )
        )

    if valuation.wacc < MIN_WACC:
        checks.append(
            SanityCheck(
                code="LOW_WACC",
                severity=Severity.MEDIUM,
                title="Low Discount Rate",
                message=f"WACC of {valuation.wacc:.2%} appears low",
                value=valuation.wacc,
                recommendation="Verify country, size and company-specific premia are included.",
            )
        )
    elif valuation.wacc > MAX_WACC:
        checks.append(
            SanityCheck(
                code="HIGH_WACC",
                severity=Severity.MEDIUM,
                title="High Discount Rate",
                message=f"WACC of {valuation.wacc:.2%} heavily discounts future cash flows",
                value=valuation.wacc,
                recommendation="Check that risk premia are not double counted.",
            )
        )

    return sorted(checks, key=lambda c: c.severity.rank)


def _terminal_share(valuation: ValuationResult) -> float:
    # Absolute PV of FCFs so cash burn does not inflate the terminal share past 100%
    total = abs(valuation.pv_of_projected_fcfs) + valuation.pv_of_terminal_value
    return valuation.pv_of_terminal_value / total if total > 0 else 0.0


def _ev_to_ebitda(valuation: ValuationResult) -> Optional[float]:
    if valuation.implied_multiples is None:
        return None
    return valuation.implied_multiples.ev_to_ebitda
