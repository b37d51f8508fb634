# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Covenant thresholds and per-year credit ratio evaluation"""

from __future__ import annotations

from pydantic import Field

from ..core.primitives import Model, PositiveFloat
from ..core.ratios import CoverageRatio


class CovenantThresholds(Model):
    """
    Lender covenant package tested every projection year.

    Attributes:
        min_dscr: Minimum debt service coverage (EBITDA / debt service)
        target_icr: Minimum interest coverage (EBIT / interest)
        max_nd_to_ebitda: Maximum leverage (net debt / EBITDA)
    """

    min_dscr: PositiveFloat = Field(default=1.25)
    target_icr: PositiveFloat = Field(default=2.0)
    max_nd_to_ebitda: PositiveFloat = Field(default=3.5)


class CreditRatios(Model):
    """Covenant ratios for one projection year."""

    dscr: CoverageRatio
    icr: CoverageRatio
    leverage: CoverageRatio
    fixed_charge: CoverageRatio

    @classmethod
    def compute(
        cls,
        *,
        ebitda: float,
        ebit: float,
        interest: float,
        debt_service: float,
        net_debt: float,
        capex: float,
        tax: float,
    ) -> "CreditRatios":
        """
        DSCR = EBITDA / debt service, ICR = EBIT / interest, leverage = net debt /
        EBITDA, fixed charge coverage = (EBITDA - capex - tax) / debt service.
        """
        return cls(
            dscr=CoverageRatio.from_division(ebitda, debt_service),
            icr=CoverageRatio.from_division(ebit, interest),
            leverage=CoverageRatio.leverage(net_debt, ebitda),
            fixed_charge=CoverageRatio.from_division(ebitda - capex - tax, debt_service),
        )


class CovenantTest(Model):
    """Breach flags for one projection year."""

    dscr_breach: bool
    icr_breach: bool
    leverage_breach: bool

    @classmethod
    def evaluate(cls, ratios: CreditRatios, thresholds: CovenantThresholds) -> "CovenantTest":
        return cls(
            dscr_breach=ratios.dscr.below(thresholds.min_dscr),
            icr_breach=ratios.icr.below(thresholds.target_icr),
            leverage_breach=ratios.leverage.above(thresholds.max_nd_to_ebitda),
        )

    @property
    def any_breach(self) -> bool:
        return self.dscr_breach or self.icr_breach or self.leverage_breach
