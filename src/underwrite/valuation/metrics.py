# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Implied valuation multiples.

Multiples are only meaningful over a positive denominator: a company with
negative EBITDA has no EV/EBITDA multiple, so those entries are None rather
than a negative or infinite number.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from ..core.primitives import FiniteFloat, Model


class FinancialSnapshot(Model):
    """Single-year operating figures that multiples are measured against."""

    revenue: FiniteFloat = 0.0
    ebitda: FiniteFloat = 0.0
    ebit: FiniteFloat = 0.0
    net_income: FiniteFloat = 0.0
    shares_outstanding: float = Field(default=1.0, gt=0, allow_inf_nan=False)


class ImpliedMultiples(Model):
    """
    Valuation expressed as multiples of operating figures.

    Attributes:
        ev_to_revenue: Enterprise value / revenue
        ev_to_ebitda: Enterprise value / EBITDA
        ev_to_ebit: Enterprise value / EBIT
        pe_ratio: Equity value / net income
        price_per_share: Equity value / shares outstanding
    """

    ev_to_revenue: Optional[float] = None
    ev_to_ebitda: Optional[float] = None
    ev_to_ebit: Optional[float] = None
    pe_ratio: Optional[float] = None
    price_per_share: Optional[float] = None


def _multiple(numerator: float, denominator: float) -> Optional[float]:
    return numerator / denominator if denominator > 0 else None


def calculate_implied_multiples(
    enterprise_value: float, equity_value: float, snapshot: FinancialSnapshot
) -> ImpliedMultiples:
    """
    Compute implied multiples; any multiple over a non-positive base is None.

    Example:
        ```python
        multiples = calculate_implied_multiples(
            enterprise_value=2_400_000,
            equity_value=1_900_000,
            snapshot=FinancialSnapshot(revenue=1_000_000, ebitda=300_000,
                                       ebit=250_000, net_income=150_000),
        )
        multiples.ev_to_ebitda  # 8.0
        ```
    """
    return ImpliedMultiples(
        ev_to_revenue=_multiple(enterprise_value, snapshot.revenue),
        ev_to_ebitda=_multiple(enterprise_value, snapshot.ebitda),
        ev_to_ebit=_multiple(enterprise_value, snapshot.ebit),
        pe_ratio=_multiple(equity_value, snapshot.net_income),
        price_per_share=equity_value / snapshot.shares_outstanding,
    )
