# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Financial calculation functions.

Contains static methods for core financial metrics. These functions are pure
(math-only) and independent of projection state; other modules should
delegate to these to ensure a single source of truth for returns and annuity
math.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

from pyxirr import InvalidPaymentsError, irr, pmt, pv


class FinancialCalculations:
    """
    Pure mathematical functions for financial calculations.

    Static methods for core financial metrics, independent of projection
    structure or business logic.
    """

    @staticmethod
    def calculate_irr(cash_flows: Sequence[float]) -> Optional[float]:
        """
        Calculate periodic Internal Rate of Return using PyXIRR.

        Args:
            cash_flows: Equally spaced annual cash flows
                       Negative values = investments/outflows
                       Positive values = returns/inflows

        Returns:
            IRR as decimal (e.g., 0.15 for 15%) or None if undefined

        Edge Cases Handled:
            - Empty series -> None
            - All negative or all positive flows -> None
            - Solver does not converge -> None
        """
        flows = [float(cf) for cf in cash_flows]
        if len(flows) < 2:
            return None
        if not (any(cf < 0 for cf in flows) and any(cf > 0 for cf in flows)):
            return None

        try:
            result = irr(flows, silent=True)
        except InvalidPaymentsError:
            return None
        if result is None or not math.isfinite(result):
            return None
        return float(result)

    @staticmethod
    def calculate_moic(
        equity_invested: float, distributions: Sequence[float], exit_value: float
    ) -> Optional[float]:
        """
        Multiple on invested capital.

        Only positive interim distributions count as returned capital; the
        exit value is taken as-is.

        Returns:
            Multiple as float (e.g., 2.5 for 2.5x) or None without an investment
        """
        if equity_invested <= 0:
            return None
        returned = exit_value + sum(max(0.0, float(d)) for d in distributions)
        return returned / equity_invested

    @staticmethod
    def annuity_factor(rate: float, periods: int) -> float:
        """Present value of 1 per period for ``periods`` periods."""
        if periods <= 0:
            return 0.0
        if rate == 0:
            return float(periods)
        return float(pv(rate, periods, -1.0))

    @staticmethod
    def level_payment(rate: float, periods: int, principal: float) -> float:
        """Level (mortgage-style) payment repaying ``principal`` over ``periods``."""
        if periods <= 0:
            return 0.0
        if rate == 0:
            return principal / periods
        return float(pmt(rate, periods, principal)) * -1
