# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Industry credit benchmarks.

Two reference tables: the structural benchmarks the capital structure
advisor compares a projection against (typical leverage band, minimum
coverage), and the lender covenant packages typically written for each
industry.
"""

from __future__ import annotations

from typing import Dict, Optional

from pydantic import Field, model_validator

from ..core.primitives import Model, PositiveFloat
from ..debt.covenants import CovenantThresholds

DEFAULT_INDUSTRY = "Default"
DEFAULT_COVENANT_INDUSTRY = "Manufacturing"


class LeverageBand(Model):
    """Typical net debt / EBITDA range for an industry."""

    min: PositiveFloat
    target: PositiveFloat
    max: PositiveFloat

    @model_validator(mode="after")
    def validate_ordering(self) -> "LeverageBand":
        if not self.min <= self.target <= self.max:
            raise ValueError("Leverage band must satisfy min <= target <= max")
        return self


class IndustryBenchmark(Model):
    """
    Structural credit benchmark for one industry.

    Attributes:
        industry: Table key the benchmark was resolved to
        typical_leverage: Typical leverage band
        min_dscr: Debt service coverage lenders expect
        min_icr: Interest coverage lenders expect
        cash_conversion_rate: Typical free cash flow as a share of revenue
    """

    industry: str
    typical_leverage: LeverageBand
    min_dscr: PositiveFloat
    min_icr: PositiveFloat
    cash_conversion_rate: PositiveFloat = Field(default=0.12)


def _benchmark(industry, lev_min, lev_target, lev_max, dscr, icr, conversion):
    return IndustryBenchmark(
        industry=industry,
        typical_leverage=LeverageBand(min=lev_min, target=lev_target, max=lev_max),
        min_dscr=dscr,
        min_icr=icr,
        cash_conversion_rate=conversion,
    )


INDUSTRY_BENCHMARKS: Dict[str, IndustryBenchmark] = {
    b.industry: b
    for b in (
        _benchmark("Technology", 0.5, 2.0, 3.5, 1.5, 3.0, 0.20),
        _benchmark("Manufacturing", 1.5, 3.0, 4.5, 1.25, 2.5, 0.12),
        _benchmark("Healthcare", 1.0, 2.5, 4.0, 1.35, 2.75, 0.15),
        _benchmark("Retail", 1.5, 2.5, 3.5, 1.4, 2.5, 0.08),
        _benchmark("Real Estate", 3.0, 5.0, 7.0, 1.2, 2.0, 0.10),
        _benchmark("Services", 0.5, 1.5, 3.0, 1.5, 3.0, 0.18),
        _benchmark(DEFAULT_INDUSTRY, 1.0, 2.5, 4.0, 1.35, 2.5, 0.12),
    )
}

COVENANT_BENCHMARKS: Dict[str, CovenantThresholds] = {
    "Manufacturing": CovenantThresholds(min_dscr=1.25, target_icr=2.5, max_nd_to_ebitda=3.0),
    "Services": CovenantThresholds(min_dscr=1.35, target_icr=3.0, max_nd_to_ebitda=2.5),
    "Retail": CovenantThresholds(min_dscr=1.30, target_icr=2.75, max_nd_to_ebitda=2.75),
    "Technology": CovenantThresholds(min_dscr=1.40, target_icr=3.5, max_nd_to_ebitda=2.0),
    "Healthcare": CovenantThresholds(min_dscr=1.30, target_icr=2.5, max_nd_to_ebitda=3.0),
    "Real Estate": CovenantThresholds(min_dscr=1.20, target_icr=2.0, max_nd_to_ebitda=4.0),
    "Financial Services": CovenantThresholds(min_dscr=1.50, target_icr=4.0, max_nd_to_ebitda=2.0),
    "Agriculture": CovenantThresholds(min_dscr=1.15, target_icr=2.0, max_nd_to_ebitda=3.5),
    "Energy": CovenantThresholds(min_dscr=1.25, target_icr=2.5, max_nd_to_ebitda=3.5),
    "Transportation": CovenantThresholds(min_dscr=1.20, target_icr=2.25, max_nd_to_ebitda=3.25),
}


def get_industry_benchmark(industry: Optional[str]) -> IndustryBenchmark:
    """Structural benchmark for ``industry``; unknown industries use "Default"."""
    return INDUSTRY_BENCHMARKS.get(industry or DEFAULT_INDUSTRY, INDUSTRY_BENCHMARKS[DEFAULT_INDUSTRY])


def get_covenant_benchmark(industry: Optional[str]) -> CovenantThresholds:
    """Typical covenant package for ``industry``; unknown industries use Manufacturing."""
    return COVENANT_BENCHMARKS.get(
        industry or DEFAULT_COVENANT_INDUSTRY, COVENANT_BENCHMARKS[DEFAULT_COVENANT_INDUSTRY]
    )
