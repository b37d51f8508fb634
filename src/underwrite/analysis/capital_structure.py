# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Capital Structure Advisor - rules-based restructuring advice

Compares a projection's credit profile against industry benchmarks and
proposes a target debt level, a phased transition plan and a rough estimate
of what the change would be worth. The output is advisory: the only hard
guarantee is that the proposed structure restores a DSCR at or above the
target, which itself is never below the covenant minimum.

Example:
    ```python
    result = build_projection(params)
    report = assess_capital_structure(result, params)
    for issue in report.issues:
        print(issue.severity.value, issue.issue)
    ```
"""

from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional

from pydantic import Field

from ..core.primitives import Model, Seniority, Severity
from ..core.ratios import CoverageRatio
from ..debt.tranche import DebtTranche
from ..projection.params import ProjectionParams
from ..projection.results import ProjectionResult
from .benchmarks import IndustryBenchmark, get_industry_benchmark

# Floor on the DSCR any proposed structure must restore
MIN_TARGET_DSCR = 1.35
ASSUMED_TENOR_YEARS = 5
DEFAULT_ASSUMED_RATE = 0.10
MAX_ASSUMED_RATE = 0.15
WAIVER_FEE_PCT = 0.005
EV_INTEREST_MULTIPLE = 8.0
TRANSITION_MONTHS = 24


class CurrentState(Model):
    """
    Credit profile of the projection as submitted.

    Attributes:
        revenue: Year-1 revenue
        ebitda: Year-1 EBITDA
        ebitda_margin: Average EBITDA margin over the projection
        avg_fcf: Average levered free cash flow
        current_debt: Total debt at the valuation date
        current_leverage: Year-1 net debt / EBITDA
        avg_dscr, min_dscr, avg_icr, min_icr: Covered-only statistics
        current_debt_service: Year-1 principal plus interest
        breach_years: Sorted years with at least one covenant breach
        avg_cash: Average closing cash balance
    """

    revenue: float
    ebitda: float
    ebitda_margin: float
    avg_fcf: float
    current_debt: float
    current_leverage: CoverageRatio
    avg_dscr: Optional[float] = None
    min_dscr: Optional[float] = None
    avg_icr: Optional[float] = None
    min_icr: Optional[float] = None
    current_debt_service: float
    breach_years: List[int] = Field(default_factory=list)
    avg_cash: float

    @property
    def has_breaches(self) -> bool:
        return bool(self.breach_years)


class StructuralIssue(Model):
    severity: Severity
    category: str
    issue: str
    root_cause: str
    business_implication: str
    quantification: Dict[str, float] = Field(default_factory=dict)


class OptimalStructure(Model):
    """
    Debt level that restores the target DSCR.

    Sustainable debt is the annual debt service the year-1 EBITDA supports at
    ``target_dscr``, capitalized at the assumed rate plus straight-line
    repayment over the assumed tenor. The recommended debt is the lower of
    that and the industry's target leverage.
    """

    target_dscr: float
    assumed_rate: float
    assumed_tenor_years: int
    sustainable_debt_service: float
    sustainable_debt: float
    target_leverage: float
    target_debt: float
    projected_dscr: Optional[float] = None
    projected_icr: Optional[float] = None
    debt_reduction_needed: float
    excess_debt_capacity: float
    equity_need: float
    annual_interest_savings: float
    covenant_compliance_restored: bool
    recommended_tranche: Optional[DebtTranche] = None


class TransitionAction(Model):
    action: str
    timeline: str
    description: str
    criticality: Severity
    cost: float = 0.0
    amount: float = 0.0


class TransitionPhase(Model):
    phase: str
    timeline: str
    objective: str
    actions: List[TransitionAction]


class TransitionPlan(Model):
    phases: List[TransitionPhase]
    estimated_duration_months: int = TRANSITION_MONTHS

    @property
    def total_actions(self) -> int:
        return sum(len(p.actions) for p in self.phases)

    @property
    def total_cost(self) -> float:
        return sum(a.cost for p in self.phases for a in p.actions)

    @property
    def total_capital_required(self) -> float:
        return sum(a.amount for p in self.phases for a in p.actions)


class MetricChange(Model):
    current: Optional[float] = None
    target: Optional[float] = None

    @property
    def improvement(self) -> Optional[float]:
        if self.current is None or self.target is None:
            return None
        return self.target - self.current


class ImpactAnalysis(Model):
    """Rough value of moving to the optimal structure."""

    dscr: MetricChange
    icr: MetricChange
    leverage: MetricChange
    annual_interest_savings: float
    cumulative_interest_savings: float
    enterprise_value_increase: float
    equity_value_increase: float
    covenant_breach_elimination: bool


class AdvisoryReport(Model):
    benchmark: IndustryBenchmark
    current_state: CurrentState
    issues: List[StructuralIssue]
    optimal_structure: OptimalStructure
    transition_plan: TransitionPlan
    impact: ImpactAnalysis

    @property
    def has_critical_issues(self) -> bool:
        return any(i.severity == Severity.CRITICAL for i in self.issues)


def _analyze_current_state(projection: ProjectionResult) -> CurrentState:
    rows = projection.rows
    first = rows[0]
    stats = projection.credit_stats
    breaches = projection.breaches
    margins = [r.ebitda / r.revenue if r.revenue > 0 else 0.0 for r in rows]
    breach_years = sorted(
        set(breaches.dscr_breach_years)
        | set(breaches.icr_breach_years)
        | set(breaches.leverage_breach_years)
    )
    return CurrentState(
        revenue=first.revenue,
        ebitda=first.ebitda,
        ebitda_margin=sum(margins) / len(margins),
        avg_fcf=sum(r.fcf for r in rows) / len(rows),
        current_debt=projection.opening_debt,
        current_leverage=first.leverage_ratio,
        avg_dscr=stats.avg_dscr,
        min_dscr=stats.min_dscr,
        avg_icr=stats.avg_icr,
        min_icr=stats.min_icr,
        current_debt_service=first.debt_service,
        breach_years=breach_years,
        avg_cash=sum(r.cash for r in rows) / len(rows),
    )


def _identify_issues(
    state: CurrentState, benchmark: IndustryBenchmark
) -> List[StructuralIssue]:
    issues: List[StructuralIssue] = []
    band = benchmark.typical_leverage
    leverage = state.current_leverage

    if leverage.above(band.max):
        target_debt = band.target * max(state.ebitda, 0.0)
        excess_debt = max(0.0, state.current_debt - target_debt)
        issues.append(
            StructuralIssue(
                severity=Severity.CRITICAL,
                category="Overleveraging",
                issue=(
                    f"Leverage of {leverage} exceeds the industry maximum of "
                    f"{band.max:.2f}x (target {band.target:.2f}x)"
                ),
                root_cause="Excessive debt relative to earnings capacity",
                business_implication="Limits strategic flexibility and increases refinancing risk",
                quantification={
                    "excess_debt": excess_debt,
                    "years_to_normalize": float(
                        math.ceil(excess_debt / max(state.avg_fcf, 1.0))
                    ),
                },
            )
        )

    if state.min_dscr is not None and state.min_dscr < benchmark.min_dscr:
        issues.append(
            StructuralIssue(
                severity=Severity.CRITICAL if state.min_dscr < 1.1 else Severity.HIGH,
                category="Inadequate Debt Service Coverage",
                issue=(
                    f"Minimum DSCR of {state.min_dscr:.2f}x is below the lending "
                    f"standard of {benchmark.min_dscr:.2f}x"
                ),
                root_cause="Debt service exceeds sustainable cash generation capacity",
                business_implication="Creates covenant breach risk and technical default scenarios",
                quantification={"dscr_shortfall": benchmark.min_dscr - state.min_dscr},
            )
        )

    if state.min_icr is not None and state.min_icr < benchmark.min_icr:
        issues.append(
            StructuralIssue(
                severity=Severity.MEDIUM,
                category="Weak Interest Coverage",
                issue=(
                    f"Minimum ICR of {state.min_icr:.2f}x is below the industry norm "
                    f"of {benchmark.min_icr:.2f}x"
                ),
                root_cause="Interest burden is high relative to operating profit",
                business_implication="Leaves little room to absorb rate increases or margin pressure",
                quantification={"icr_shortfall": benchmark.min_icr - state.min_icr},
            )
        )

    if state.has_breaches:
        issues.append(
            StructuralIssue(
                severity=Severity.CRITICAL,
                category="Covenant Breach",
                issue=(
                    "Covenant violations projected in years: "
                    + ", ".join(str(y) for y in state.breach_years)
                ),
                root_cause="Debt structure misaligned with the business's cash generation profile",
                business_implication="Triggers waiver negotiations and amendment fees",
                quantification={
                    "breach_years": float(len(state.breach_years)),
                    "waiver_cost": state.current_debt * WAIVER_FEE_PCT,
                },
            )
        )

    if (
        not state.has_breaches
        and leverage.is_covered
        and state.ebitda > 0
        and leverage.value < band.min
    ):
        issues.append(
            StructuralIssue(
                severity=Severity.MEDIUM,
                category="Under-utilised Debt Capacity",
                issue=(
                    f"Leverage of {leverage} is below the industry minimum of "
                    f"{band.min:.2f}x"
                ),
                root_cause="Balance sheet carries less debt than cash flows can support",
                business_implication="Equity is funding what cheaper debt could",
                quantification={
                    "unused_capacity": band.target * state.ebitda - state.current_debt,
                },
            )
        )

    return sorted(issues, key=lambda i: i.severity.rank)


def _assumed_rate(projection: ProjectionResult, params: ProjectionParams) -> float:
    rate = projection.debt_schedule.blended_rate or params.interest_rate or DEFAULT_ASSUMED_RATE
    return min(rate, MAX_ASSUMED_RATE)


def _optimal_structure(
    state: CurrentState,
    benchmark: IndustryBenchmark,
    projection: ProjectionResult,
    params: ProjectionParams,
) -> OptimalStructure:
    target_dscr = max(benchmark.min_dscr, MIN_TARGET_DSCR, params.min_dscr)
    rate = _assumed_rate(projection, params)
    constant = rate + 1 / ASSUMED_TENOR_YEARS
    ebitda = max(state.ebitda, 0.0)

    sustainable_service = ebitda / target_dscr
    sustainable_debt = sustainable_service / constant
    optimal_leverage = sustainable_debt / ebitda if ebitda > 0 else 0.0
    target_leverage = min(optimal_leverage, benchmark.typical_leverage.target)
    target_debt = target_leverage * ebitda

    projected_dscr = ebitda / (target_debt * constant) if target_debt > 0 else None
    projected_icr = ebitda / (target_debt * rate) if target_debt > 0 and rate > 0 else None

    reduction = max(0.0, state.current_debt - target_debt)
    current_rate = projection.debt_schedule.blended_rate
    return OptimalStructure(
        target_dscr=target_dscr,
        assumed_rate=rate,
        assumed_tenor_years=ASSUMED_TENOR_YEARS,
        sustainable_debt_service=sustainable_service,
        sustainable_debt=sustainable_debt,
        target_leverage=target_leverage,
        target_debt=target_debt,
        projected_dscr=projected_dscr,
        projected_icr=projected_icr,
        debt_reduction_needed=reduction,
        excess_debt_capacity=max(0.0, target_debt - state.current_debt),
        equity_need=max(0.0, reduction - max(state.avg_cash, 0.0)),
        annual_interest_savings=max(0.0, current_rate - rate) * min(state.current_debt, target_debt),
        covenant_compliance_restored=(
            projected_dscr is not None
            and projected_dscr >= benchmark.min_dscr
            and target_leverage <= benchmark.typical_leverage.max
        ),
        recommended_tranche=(
            DebtTranche(
                name="Senior Secured Term Loan",
                amount=target_debt,
                rate=rate,
                tenor_years=ASSUMED_TENOR_YEARS,
                seniority=Seniority.SENIOR,
            )
            if target_debt > 0
            else None
        ),
    )


def _transition_plan(state: CurrentState, optimal: OptimalStructure) -> TransitionPlan:
    phases: List[TransitionPhase] = []
    if state.has_breaches:
        phases.append(
            TransitionPhase(
                phase="Phase 1: Stabilization",
                timeline="0-3 months",
                objective="Prevent default and secure liquidity",
                actions=[
                    TransitionAction(
                        action="Engage lenders for covenant waivers",
                        timeline="Weeks 1-4",
                        description=f"Request waivers for {len(state.breach_years)} projected breach year(s)",
                        criticality=Severity.CRITICAL,
                        cost=state.current_debt * WAIVER_FEE_PCT,
                    )
                ],
            )
        )
    if optimal.debt_reduction_needed > 0:
        phases.append(
            TransitionPhase(
                phase="Phase 2: Restructuring",
                timeline="3-12 months",
                objective="Bring debt down to the sustainable level",
                actions=[
                    TransitionAction(
                        action="Accelerated debt paydown",
                        timeline="Months 3-12",
                        description="Direct free cash flow and any new equity to debt reduction",
                        criticality=Severity.HIGH,
                        amount=optimal.debt_reduction_needed,
                    )
                ],
            )
        )
    phases.append(
        TransitionPhase(
            phase="Phase 3: Optimization",
            timeline="12-24 months",
            objective="Enhance operating performance",
            actions=[
                TransitionAction(
                    action="EBITDA enhancement",
                    timeline="Months 12-24",
                    description="Operational improvements to expand margins",
                    criticality=Severity.MEDIUM,
                )
            ],
        )
    )
    return TransitionPlan(phases=phases)


def _impact(state: CurrentState, optimal: OptimalStructure) -> ImpactAnalysis:
    savings = optimal.annual_interest_savings
    return ImpactAnalysis(
        dscr=MetricChange(current=state.avg_dscr, target=optimal.projected_dscr),
        icr=MetricChange(current=state.avg_icr, target=optimal.projected_icr),
        leverage=MetricChange(
            current=state.current_leverage.value_or_none, target=optimal.target_leverage
        ),
        annual_interest_savings=savings,
        cumulative_interest_savings=savings * ASSUMED_TENOR_YEARS,
        enterprise_value_increase=savings * EV_INTEREST_MULTIPLE,
        equity_value_increase=savings * EV_INTEREST_MULTIPLE + optimal.debt_reduction_needed,
        covenant_breach_elimination=optimal.covenant_compliance_restored,
    )


def assess_capital_structure(
    projection: ProjectionResult,
    params: ProjectionParams,
    logger: Optional[logging.Logger] = None,
) -> AdvisoryReport:
    """
    Assess a projection's capital structure against its industry benchmark.

    Args:
        projection: Output of ``build_projection``
        params: Parameters the projection was built from
        logger: Logger override for this call

    Returns:
        AdvisoryReport with issues ordered critical first
    """
    log = logger or logging.getLogger(__name__)
    benchmark = get_industry_benchmark(params.industry)
    state = _analyze_current_state(projection)
    issues = _identify_issues(state, benchmark)
    optimal = _optimal_structure(state, benchmark, projection, params)

    log.debug(
        f"Capital structure ({benchmark.industry}): {len(issues)} issue(s), "
        f"target debt {optimal.target_debt:,.0f} at DSCR {optimal.target_dscr:.2f}x"
    )
    return AdvisoryReport(
        benchmark=benchmark,
        current_state=state,
        issues=issues,
        optimal_structure=optimal,
        transition_plan=_transition_plan(state, optimal),
        impact=_impact(state, optimal),
    )
