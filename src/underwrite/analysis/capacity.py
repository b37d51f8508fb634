# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Debt capacity - how much amortizing debt year-1 EBITDA can carry

Capacity is the principal whose level annual payment, at the facility rate
over the facility tenor, leaves EBITDA covering debt service at the target
DSCR:

    max_debt = EBITDA x annuity_factor(rate, tenor) / target_DSCR

The safe level adds a 20% cushion on the target DSCR; the aggressive level
only requires 1.15x.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Literal, Optional, Sequence, Tuple

from ..core.calculations import FinancialCalculations
from ..core.errors import InputValidationError
from ..core.primitives import Model
from ..projection.params import ProjectionParams
from ..projection.results import ProjectionResult

SAFETY_BUFFER = 1.20
AGGRESSIVE_DSCR = 1.15
FALLBACK_EBITDA_MARGIN = 0.20
DEFAULT_RATE = 0.10
DEFAULT_TENOR_YEARS = 5
STANDARD_LEVERAGE = 3.0


class CapacityRecommendation(str, Enum):
    APPROVE = "APPROVE"
    APPROVE_WITH_CONDITIONS = "APPROVE WITH CONDITIONS"
    REDUCE_DEBT = "REDUCE DEBT"

    @property
    def risk_level(self) -> str:
        return {
            CapacityRecommendation.APPROVE: "LOW",
            CapacityRecommendation.APPROVE_WITH_CONDITIONS: "MEDIUM",
            CapacityRecommendation.REDUCE_DEBT: "HIGH",
        }[self]


class DebtCapacity(Model):
    """
    Attributes:
        ebitda: EBITDA the capacity is sized on
        rate: Annual rate used for the payment factor
        tenor_years: Amortization period used for the payment factor
        annual_payment_factor: Level annual payment per unit of principal
        target_dscr: Covenant minimum DSCR
        max_sustainable_debt: Debt at exactly the target DSCR
        safe_debt: Debt at the target DSCR plus the safety buffer
        aggressive_debt: Debt at a 1.15x DSCR
        current_debt_request: Total debt in the parameters
        utilization_pct: Requested debt as a percentage of capacity
    """

    ebitda: float
    rate: float
    tenor_years: int
    annual_payment_factor: float
    target_dscr: float
    target_dscr_with_buffer: float
    max_sustainable_debt: float
    safe_debt: float
    aggressive_debt: float
    current_debt_request: float
    excess_debt: float
    utilization_pct: float
    recommendation: CapacityRecommendation

    @property
    def risk_level(self) -> str:
        return self.recommendation.risk_level


class StructureAlternative(Model):
    name: str
    description: str
    debt: float
    equity: float
    tenor_years: int
    annual_debt_service: float
    dscr: Optional[float] = None
    leverage: float
    covenant_compliant: bool


def _requested_debt(params: ProjectionParams) -> float:
    if params.debt_tranches:
        return sum(t.amount for t in params.debt_tranches)
    return params.opening_debt + params.requested_loan_amount


def _sizing_inputs(
    params: ProjectionParams, projection: Optional[ProjectionResult]
) -> Tuple[float, float, int]:
    if projection is not None:
        ebitda = projection.rows[0].ebitda
    else:
        ebitda = params.base_revenue * FALLBACK_EBITDA_MARGIN
    rate = params.interest_rate or DEFAULT_RATE
    tenor = params.debt_tenor_years or DEFAULT_TENOR_YEARS
    return ebitda, rate, tenor


def _capacity_at(ebitda: float, rate: float, tenor: int, dscr: float) -> float:
    return max(0.0, ebitda) * FinancialCalculations.annuity_factor(rate, tenor) / dscr


def calculate_debt_capacity(
    params: ProjectionParams,
    projection: Optional[ProjectionResult] = None,
    logger: Optional[logging.Logger] = None,
) -> DebtCapacity:
    """
    Size the maximum sustainable debt and compare the request against it.

    Args:
        params: Projection parameters carrying the debt request and covenants
        projection: Built projection; without one, EBITDA is estimated at a
            20% margin on base revenue
        logger: Logger override for this call

    Returns:
        DebtCapacity with an APPROVE / APPROVE WITH CONDITIONS / REDUCE DEBT
        recommendation
    """
    log = logger or logging.getLogger(__name__)
    ebitda, rate, tenor = _sizing_inputs(params, projection)
    target = params.min_dscr
    buffered = target * SAFETY_BUFFER

    max_debt = _capacity_at(ebitda, rate, tenor, target)
    safe_debt = _capacity_at(ebitda, rate, tenor, buffered)
    aggressive_debt = _capacity_at(ebitda, rate, tenor, AGGRESSIVE_DSCR)

    requested = _requested_debt(params)
    if requested > max_debt:
        recommendation = CapacityRecommendation.REDUCE_DEBT
    elif requested > safe_debt:
        recommendation = CapacityRecommendation.APPROVE_WITH_CONDITIONS
    else:
        recommendation = CapacityRecommendation.APPROVE

    log.debug(
        f"Debt capacity: max {max_debt:,.0f}, safe {safe_debt:,.0f}, "
        f"requested {requested:,.0f} -> {recommendation.value}"
    )
    return DebtCapacity(
        ebitda=ebitda,
        rate=rate,
        tenor_years=tenor,
        annual_payment_factor=FinancialCalculations.level_payment(rate, tenor, 1.0),
        target_dscr=target,
        target_dscr_with_buffer=buffered,
        max_sustainable_debt=max_debt,
        safe_debt=safe_debt,
        aggressive_debt=aggressive_debt,
        current_debt_request=requested,
        excess_debt=max(0.0, requested - max_debt),
        utilization_pct=requested / max_debt * 100 if max_debt > 0 else 0.0,
        recommendation=recommendation,
    )


def generate_alternative_structures(
    params: ProjectionParams,
    capacity: DebtCapacity,
) -> List[StructureAlternative]:
    """
    The current structure and three alternatives holding total capital fixed:
    debt cut to the safe level, debt at 3.0x EBITDA, and the tenor extended
    by two years.
    """
    current_debt = capacity.current_debt_request
    current_equity = params.equity_contribution
    total_capital = current_debt + current_equity
    ebitda = capacity.ebitda

    def alternative(name, description, debt, equity, tenor):
        payment = FinancialCalculations.level_payment(capacity.rate, tenor, debt)
        dscr = ebitda / payment if payment > 0 else None
        leverage = debt / ebitda if ebitda > 0 else 0.0
        return StructureAlternative(
            name=name,
            description=description,
            debt=debt,
            equity=equity,
            tenor_years=tenor,
            annual_debt_service=payment,
            dscr=dscr,
            leverage=leverage,
            covenant_compliant=(
                (dscr is None or dscr >= params.min_dscr)
                and leverage <= params.max_nd_to_ebitda
            ),
        )

    tenor = capacity.tenor_years
    standard_debt = ebitda * STANDARD_LEVERAGE if ebitda > 0 else current_debt * 0.85
    return [
        alternative("Current Structure", "As proposed", current_debt, current_equity, tenor),
        alternative(
            "Reduce Debt to Safe Level",
            f"Debt sized at {capacity.target_dscr_with_buffer:.2f}x DSCR",
            capacity.safe_debt,
            total_capital - capacity.safe_debt,
            tenor,
        ),
        alternative(
            "Optimize Debt/Equity Mix",
            f"Target {STANDARD_LEVERAGE:.1f}x leverage",
            standard_debt,
            total_capital - standard_debt,
            tenor,
        ),
        alternative(
            "Extend Loan Tenor",
            f"Extend from {tenor} to {tenor + 2} years",
            current_debt,
            current_equity,
            tenor + 2,
        ),
    ]


CapacityDriver = Literal["ebitda", "rate", "tenor"]


def debt_capacity_sensitivity(
    params: ProjectionParams,
    projection: Optional[ProjectionResult],
    driver: CapacityDriver,
    shifts: Sequence[float],
) -> List[float]:
    """
    Safe debt capacity as one driver moves.

    ``ebitda`` shifts are relative (-0.1 is 10% lower), ``rate`` shifts are
    absolute and ``tenor`` shifts are whole years.
    """
    if driver not in ("ebitda", "rate", "tenor"):
        raise InputValidationError(f"Unknown capacity driver {driver!r}")
    ebitda, rate, tenor = _sizing_inputs(params, projection)
    buffered = params.min_dscr * SAFETY_BUFFER

    capacities = []
    for shift in shifts:
        if driver == "ebitda":
            value = _capacity_at(ebitda * (1 + shift), rate, tenor, buffered)
        elif driver == "rate":
            value = _capacity_at(ebitda, max(0.0, rate + shift), tenor, buffered)
        else:
            value = _capacity_at(ebitda, rate, max(1, tenor + int(shift)), buffered)
        capacities.append(value)
    return capacities
