# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Stress testing - preset and custom shocks over a projection

A stress scenario is a set of additive shocks to the operating, financing and
valuation assumptions. ``apply_shocks`` produces a new, validated parameter
set; ``run_stress_test`` rebuilds the projection once per scenario. Scenarios
never share state, so a failing scenario does not affect the others.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

import pandas as pd
from pydantic import Field

from ..core.errors import DomainError
from ..core.primitives import CalculationSettings, FiniteFloat, Model
from ..projection.builder import build_projection
from ..projection.params import ProjectionParams
from ..projection.results import ProjectionResult

BASE_SCENARIO = "base"


class StressShocks(Model):
    """
    Additive shocks applied to a parameter set.

    Attributes:
        revenue_shock: Relative change in base revenue (-0.10 is 10% lower)
        growth_delta: Change in annual revenue growth
        cogs_delta: Change in COGS as a share of revenue
        opex_delta: Change in opex as a share of revenue
        capex_delta: Change in capex as a share of revenue
        wc_delta: Change in working capital as a share of revenue
        rate_delta: Change in every debt interest rate
        wacc_delta: Change in WACC
        terminal_growth_delta: Change in terminal growth
    """

    revenue_shock: FiniteFloat = 0.0
    growth_delta: FiniteFloat = 0.0
    cogs_delta: FiniteFloat = 0.0
    opex_delta: FiniteFloat = 0.0
    capex_delta: FiniteFloat = 0.0
    wc_delta: FiniteFloat = 0.0
    rate_delta: FiniteFloat = 0.0
    wacc_delta: FiniteFloat = 0.0
    terminal_growth_delta: FiniteFloat = 0.0


class StressScenario(Model):
    name: str
    label: str
    description: str = ""
    shocks: StressShocks = Field(default_factory=StressShocks)


def _scenario(name: str, label: str, description: str, **shocks: float) -> StressScenario:
    return StressScenario(
        name=name, label=label, description=description, shocks=StressShocks(**shocks)
    )


STRESS_PRESETS: Dict[str, StressScenario] = {
    s.name: s
    for s in (
        _scenario(BASE_SCENARIO, "Base Case", "No shocks"),
        _scenario(
            "mild",
            "Mild Recession",
            "Slower growth, modest cost and rate pressure",
            growth_delta=-0.03,
            cogs_delta=0.01,
            opex_delta=0.005,
            capex_delta=-0.003,
            rate_delta=0.01,
            wacc_delta=0.01,
            terminal_growth_delta=-0.002,
        ),
        _scenario(
            "severe",
            "Severe Recession",
            "Sharp growth decline with cost and rate pressure",
            growth_delta=-0.08,
            cogs_delta=0.03,
            opex_delta=0.015,
            capex_delta=-0.01,
            rate_delta=0.02,
            wacc_delta=0.02,
            terminal_growth_delta=-0.01,
        ),
        _scenario(
            "cost_shock",
            "Cost Inflation",
            "Input costs rise faster than prices",
            growth_delta=-0.02,
            cogs_delta=0.05,
            opex_delta=0.01,
            wacc_delta=0.005,
            terminal_growth_delta=-0.003,
        ),
        _scenario(
            "rate_hike",
            "Rate Shock",
            "300 bps increase in borrowing costs",
            growth_delta=-0.01,
            rate_delta=0.03,
            wacc_delta=0.015,
            terminal_growth_delta=-0.002,
        ),
        _scenario("revenue_down_10", "Revenue -10%", "10% revenue decline", revenue_shock=-0.10),
        _scenario("revenue_down_20", "Revenue -20%", "20% revenue decline", revenue_shock=-0.20),
        _scenario("revenue_down_30", "Revenue -30%", "Severe revenue decline", revenue_shock=-0.30),
        _scenario(
            "margin_compression",
            "Margin Pressure",
            "COGS +5%, opex +3%",
            cogs_delta=0.05,
            opex_delta=0.03,
        ),
        _scenario("rate_hike_200", "Rates +2%", "200 bps rate increase", rate_delta=0.02),
        _scenario("rate_hike_300", "Rates +3%", "300 bps rate increase", rate_delta=0.03),
        _scenario("rate_hike_500", "Rates +5%", "500 bps rate shock", rate_delta=0.05),
        _scenario(
            "working_capital", "WC Strain", "Working capital +5% of revenue", wc_delta=0.05
        ),
        _scenario(
            "mild_recession",
            "Mild Recession (debt)",
            "Revenue -15%, COGS +2%, rates +1%",
            revenue_shock=-0.15,
            cogs_delta=0.02,
            rate_delta=0.01,
        ),
        _scenario(
            "severe_recession",
            "Severe Recession (debt)",
            "Revenue -25%, COGS +5%, rates +2%",
            revenue_shock=-0.25,
            cogs_delta=0.05,
            rate_delta=0.02,
        ),
        _scenario(
            "stagflation",
            "Stagflation",
            "Revenue -10%, COGS +8%, rates +4%",
            revenue_shock=-0.10,
            cogs_delta=0.08,
            rate_delta=0.04,
        ),
    )
}


def _clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def apply_shocks(params: ProjectionParams, shocks: StressShocks) -> ProjectionParams:
    """
    Shocked copy of ``params``.

    Cost and working capital shares are clamped to [0, 1], interest rates to
    [0, 1], WACC to [0.01, 1] and terminal growth to [-0.2, 0.2]. The rate
    shock reaches every tranche, including explicit ``debt_tranches`` and the
    existing-debt override rate. The shocked parameters are validated again,
    so the result is always a usable parameter set.
    """

    def shock_rate(rate: float) -> float:
        return _clamp(rate + shocks.rate_delta, 0.0, 1.0)

    updates = dict(
        base_revenue=max(0.0, params.base_revenue * (1 + shocks.revenue_shock)),
        growth=params.growth + shocks.growth_delta,
        cogs_pct=_clamp(params.cogs_pct + shocks.cogs_delta, 0.0, 1.0),
        opex_pct=_clamp(params.opex_pct + shocks.opex_delta, 0.0, 1.0),
        capex_pct=_clamp(params.capex_pct + shocks.capex_delta, 0.0, 1.0),
        wc_pct_of_rev=_clamp(params.wc_pct_of_rev + shocks.wc_delta, 0.0, 1.0),
        interest_rate=shock_rate(params.interest_rate),
        wacc=_clamp(params.wacc + shocks.wacc_delta, 0.01, 1.0),
        terminal_growth=_clamp(params.terminal_growth + shocks.terminal_growth_delta, -0.2, 0.2),
        debt_tranches=[
            tranche.model_copy(update={"rate": shock_rate(tranche.rate)})
            for tranche in params.debt_tranches
        ],
    )
    if params.existing_debt_rate is not None:
        updates["existing_debt_rate"] = shock_rate(params.existing_debt_rate)
    return params.with_updates(**updates)


class StressOutcome(Model):
    """
    Result of one stress scenario.

    ``result`` is None when the shocked parameters have no valid projection
    (for example when the WACC shock leaves it at or below terminal growth);
    ``error`` then carries the reason.
    """

    scenario: StressScenario
    result: Optional[ProjectionResult] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.result is not None

    @property
    def equity_value(self) -> Optional[float]:
        return self.result.valuation.equity_value if self.result else None

    @property
    def min_dscr(self) -> Optional[float]:
        return self.result.credit_stats.min_dscr if self.result else None

    @property
    def breach_count(self) -> Optional[int]:
        return self.result.breaches.total if self.result else None


class StressTestReport(Model):
    outcomes: List[StressOutcome]

    def outcome(self, name: str) -> StressOutcome:
        for outcome in self.outcomes:
            if outcome.scenario.name == name:
                return outcome
        raise KeyError(name)

    @property
    def failed(self) -> List[StressOutcome]:
        return [o for o in self.outcomes if not o.succeeded]

    def to_dataframe(self) -> pd.DataFrame:
        """One row per scenario: equity value, minimum DSCR, breaches, error."""
        records = [
            {
                "scenario": o.scenario.name,
                "label": o.scenario.label,
                "equity_value": o.equity_value,
                "min_dscr": o.min_dscr,
                "breaches": o.breach_count,
                "error": o.error,
            }
            for o in self.outcomes
        ]
        return pd.DataFrame(records).set_index("scenario")


def run_stress_test(
    params: ProjectionParams,
    scenarios: Optional[Sequence[StressScenario]] = None,
    settings: Optional[CalculationSettings] = None,
    logger: Optional[logging.Logger] = None,
) -> StressTestReport:
    """
    Rebuild the projection under each scenario.

    Args:
        params: Base parameters
        scenarios: Scenarios to run; all presets by default
        settings: Strictness and tolerances passed to every build
        logger: Logger override for this call

    Returns:
        StressTestReport with one outcome per scenario, in input order

    Raises:
        InputValidationError: Invalid base debt configuration; it would fail
            every scenario the same way
    """
    log = logger or logging.getLogger(__name__)
    scenarios = list(scenarios) if scenarios is not None else list(STRESS_PRESETS.values())

    outcomes = []
    for scenario in scenarios:
        shocked = apply_shocks(params, scenario.shocks)
        try:
            result = build_projection(shocked, settings=settings, logger=log)
        except DomainError as exc:
            log.warning(f"Stress scenario '{scenario.name}' has no valid projection: {exc}")
            outcomes.append(StressOutcome(scenario=scenario, error=str(exc)))
            continue
        outcomes.append(StressOutcome(scenario=scenario, result=result))

    log.debug(
        f"Stress test: {len(outcomes)} scenario(s), "
        f"{sum(1 for o in outcomes if not o.succeeded)} without a valid projection"
    )
    return StressTestReport(outcomes=outcomes)
