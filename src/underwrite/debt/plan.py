# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Canonical debt configuration and multi-tranche aggregation.

Debt can be configured two ways: an explicit list of tranches, or the legacy
single-debt fields (``opening_debt`` for debt already outstanding and
``requested_loan_amount`` for the new facility). ``normalize_debt`` is the one
place that turns either form into the canonical tranche list, so every
principal amount is represented exactly once. ``aggregate_tranches`` then
schedules each tranche independently and sums the results per year.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

import pandas as pd
from pydantic import Field

from ..core.primitives import (
    AmortizationStyle,
    CalculationSettings,
    Model,
    PositiveFloat,
    PositiveInt,
)
from .amortization import AmortizationScheduleEntry, TrancheAmortization
from .tranche import DebtTranche

if TYPE_CHECKING:
    from ..projection.params import ProjectionParams

EXISTING_DEBT_NAME = "Existing Debt"
NEW_FACILITY_NAME = "New Facility"


class TrancheYearDetail(Model):
    """One tranche's contribution to an aggregate schedule year."""

    name: str
    opening_balance: PositiveFloat
    principal: PositiveFloat
    interest: PositiveFloat
    total_payment: PositiveFloat
    ending_balance: PositiveFloat


class DebtScheduleYear(Model):
    """Per-year debt service summed across all tranches."""

    year: int
    period: PositiveInt
    opening_balance: PositiveFloat
    principal: PositiveFloat
    interest: PositiveFloat
    total_payment: PositiveFloat
    ending_balance: PositiveFloat
    payments_in_year: PositiveInt
    tranche_details: List[TrancheYearDetail] = Field(default_factory=list)


class DebtSchedule(Model):
    """
    Aggregate debt schedule over a projection horizon.

    Attributes:
        tranches: Canonical tranche list that was scheduled
        entries: One aggregate row per projection year
        tranche_schedules: Each tranche's own schedule, keyed by tranche name
        warnings: Degenerate-input and lenient-fallback notes
    """

    tranches: List[DebtTranche]
    entries: List[DebtScheduleYear]
    tranche_schedules: Dict[str, List[AmortizationScheduleEntry]]
    warnings: List[str] = Field(default_factory=list)

    @property
    def total_debt(self) -> float:
        return sum(t.amount for t in self.tranches)

    @property
    def blended_rate(self) -> float:
        return blended_rate(self.tranches)

    @property
    def total_principal_paid(self) -> float:
        return sum(e.principal for e in self.entries)

    @property
    def ending_balance(self) -> float:
        return self.entries[-1].ending_balance if self.entries else self.total_debt

    def to_dataframe(self) -> pd.DataFrame:
        """Aggregate schedule as a DataFrame indexed by calendar year."""
        df = pd.DataFrame(
            [entry.model_dump(exclude={"tranche_details"}) for entry in self.entries]
        )
        return df.set_index("year")


def blended_rate(tranches: Sequence[DebtTranche]) -> float:
    """
    Amount-weighted nominal rate across tranches.

    Returns 0.0 when there is no debt.

    Example:
        >>> round(blended_rate([
        ...     DebtTranche(name="A", amount=300_000, rate=0.06, tenor_years=5),
        ...     DebtTranche(name="B", amount=200_000, rate=0.10, tenor_years=5),
        ... ]), 6)
        0.076
    """
    total = sum(t.amount for t in tranches)
    if total <= 0:
        return 0.0
    return sum(t.amount * t.rate for t in tranches) / total


def _configured_style(params: "ProjectionParams") -> AmortizationStyle:
    style = params.amortization_style
    if style == AmortizationStyle.LEVEL:
        if params.balloon_pct > 0:
            return AmortizationStyle.BALLOON
        if params.custom_amortization or params.custom_amortization_intervals:
            return AmortizationStyle.CUSTOM
    return style


def _configured_tranche(
    params: "ProjectionParams", name: str, amount: float, is_existing: bool
) -> DebtTranche:
    """Tranche carrying the projection's configured debt terms."""
    style = _configured_style(params)
    return DebtTranche(
        name=name,
        amount=amount,
        rate=params.interest_rate,
        tenor_years=params.debt_tenor_years or params.years,
        amortization_type=style,
        payment_frequency=params.payment_frequency,
        interest_only_years=params.interest_only_years,
        day_count_convention=params.day_count_convention,
        balloon_pct=params.balloon_pct if style == AmortizationStyle.BALLOON else 0.0,
        custom_percentages=(
            params.custom_amortization if style == AmortizationStyle.CUSTOM else None
        ),
        custom_intervals=(
            params.custom_amortization_intervals
            if style == AmortizationStyle.CUSTOM
            else None
        ),
        is_existing=is_existing,
    )


def normalize_debt(
    params: "ProjectionParams", logger: Optional[logging.Logger] = None
) -> List[DebtTranche]:
    """
    Build the canonical tranche list for a projection.

    Rules:
        - Explicit ``debt_tranches`` win. The legacy ``opening_debt`` and
          ``requested_loan_amount`` fields are then ignored (and a warning is
          logged if they are set) because the tranche list already represents
          all debt.
        - Otherwise an "Existing Debt" tranche is synthesized from
          ``opening_debt`` and a "New Facility" tranche from
          ``requested_loan_amount``. A lone synthesized tranche carries the
          configured rate, tenor, interest-only period and style. With both
          present the new facility carries the configured terms and existing
          debt uses the ``existing_debt_*`` overrides (falling back to the
          configured rate and tenor, level amortization, no interest-only).

    Raises:
        ValueError: Duplicate tranche names
    """
    log = logger or logging.getLogger(__name__)

    if params.debt_tranches:
        names = [t.name for t in params.debt_tranches]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate debt tranche names: {duplicates}")
        if params.opening_debt > 0 or params.requested_loan_amount > 0:
            log.warning(
                "debt_tranches provided; ignoring opening_debt "
                f"({params.opening_debt:,.0f}) and requested_loan_amount "
                f"({params.requested_loan_amount:,.0f}) to avoid double counting"
            )
        return list(params.debt_tranches)

    existing = params.opening_debt
    new = params.requested_loan_amount
    if existing > 0 and new > 0:
        new_tranche = _configured_tranche(params, NEW_FACILITY_NAME, new, False)
        existing_tranche = DebtTranche(
            name=EXISTING_DEBT_NAME,
            amount=existing,
            rate=(
                params.existing_debt_rate
                if params.existing_debt_rate is not None
                else params.interest_rate
            ),
            tenor_years=(
                params.existing_debt_tenor_years
                or params.debt_tenor_years
                or params.years
            ),
            amortization_type=params.existing_debt_amortization,
            payment_frequency=params.payment_frequency,
            day_count_convention=params.day_count_convention,
            is_existing=True,
        )
        tranches = [existing_tranche, new_tranche]
    elif existing > 0:
        tranches = [_configured_tranche(params, EXISTING_DEBT_NAME, existing, True)]
    elif new > 0:
        tranches = [_configured_tranche(params, NEW_FACILITY_NAME, new, False)]
    else:
        tranches = []

    log.debug(f"Synthesized {len(tranches)} tranche(s) from single-debt fields")
    return tranches


def aggregate_tranches(
    tranches: Sequence[DebtTranche],
    horizon: int,
    start_year: int = 2025,
    *,
    settings: Optional[CalculationSettings] = None,
    logger: Optional[logging.Logger] = None,
) -> DebtSchedule:
    """
    Schedule each tranche independently and sum per projection year.

    Args:
        tranches: Canonical tranche list (see ``normalize_debt``)
        horizon: Number of projection years
        start_year: Calendar year of projection year 1
        settings: Strictness and tolerances
        logger: Logger override for this call

    Returns:
        DebtSchedule with aggregate rows and per-tranche details

    Raises:
        ValueError: Duplicate tranche names
        InvalidAmortizationError, InvalidRateError, UnknownConventionError:
            Propagated from the per-tranche schedule
    """
    settings = settings or CalculationSettings()
    log = logger or logging.getLogger(__name__)

    names = [t.name for t in tranches]
    if len(set(names)) != len(names):
        raise ValueError(f"Duplicate debt tranche names: {names}")

    warnings: List[str] = []
    schedules: Dict[str, List[AmortizationScheduleEntry]] = {}
    for tranche in tranches:
        amortization = TrancheAmortization(
            tranche=tranche, horizon=horizon, start_year=start_year, settings=settings
        )
        schedules[tranche.name] = amortization.schedule(notes=warnings, logger=log)

    entries = []
    for index in range(horizon):
        rows = [(name, schedule[index]) for name, schedule in schedules.items()]
        details = [
            TrancheYearDetail(
                name=name,
                opening_balance=row.opening_balance,
                principal=row.principal,
                interest=row.interest,
                total_payment=row.total_payment,
                ending_balance=row.ending_balance,
            )
            for name, row in rows
        ]
        entries.append(
            DebtScheduleYear(
                year=start_year + index,
                period=index + 1,
                opening_balance=sum(d.opening_balance for d in details),
                principal=sum(d.principal for d in details),
                interest=sum(d.interest for d in details),
                total_payment=sum(d.total_payment for d in details),
                ending_balance=sum(d.ending_balance for d in details),
                payments_in_year=max((r.payments_in_year for _, r in rows), default=0),
                tranche_details=details,
            )
        )

    log.debug(
        f"Aggregated {len(tranches)} tranche(s) over {horizon} years, "
        f"blended rate {blended_rate(tranches):.4%}"
    )
    return DebtSchedule(
        tranches=list(tranches),
        entries=entries,
        tranche_schedules=schedules,
        warnings=warnings,
    )
