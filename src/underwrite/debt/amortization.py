# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Principal schedules and per-tranche amortization tables"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence

import pandas as pd
from pydantic import Field

from ..core.errors import InvalidAmortizationError
from ..core.primitives import (
    AmortizationStyle,
    CalculationSettings,
    Model,
    PositiveFloat,
    PositiveInt,
    is_number,
)
from .rates import effective_annual_rate, payments_per_year
from .tranche import DebtTranche

# Balances below this are treated as fully repaid
_BALANCE_EPSILON = 1e-9


class PrincipalSchedule(Model):
    """
    Annual principal repayments for one loan.

    Attributes:
        style: Amortization style actually applied (after any lenient fallback)
        payments: Principal repaid in each year of the term
        warnings: Degenerate-input and fallback notes
    """

    style: AmortizationStyle
    payments: List[float]
    warnings: List[str] = Field(default_factory=list)

    @property
    def total(self) -> float:
        return sum(self.payments)

    @property
    def years(self) -> int:
        return len(self.payments)


def expand_interval_percentages(
    years: int, interest_only_years: int, intervals: Sequence[float]
) -> List[float]:
    """
    Spread four interval percentages evenly across the amortizing period.

    The amortizing period (``years`` minus interest-only years, at least one
    year) is split into four buckets of ``n // 4`` years, with the first
    ``n % 4`` buckets one year longer. Each bucket's percentage is divided
    evenly over its years. Interest-only years get 0%. On terms shorter than
    four amortizing years the trailing buckets are empty; their share and any
    floating point residue go on the last non-zero year, so the expanded list
    sums to the same total as ``intervals``.

    Example:
        >>> expand_interval_percentages(6, 0, [40, 30, 20, 10])
        [20.0, 20.0, 15.0, 15.0, 20.0, 10.0]

    Raises:
        InvalidAmortizationError: Not exactly four buckets, or a bucket that is
            not a finite, non-negative number
    """
    if len(intervals) != 4:
        raise InvalidAmortizationError(
            f"Interval amortization needs exactly 4 buckets, got {len(intervals)}"
        )
    if any(not is_number(p) or not math.isfinite(p) or p < 0 for p in intervals):
        raise InvalidAmortizationError(
            f"Interval percentages must be finite and non-negative, got {list(intervals)}"
        )
    io_years = max(0, min(years, interest_only_years))
    amort_years = max(years - io_years, 1)
    base, rem = divmod(amort_years, 4)

    per_year = [0.0] * io_years
    for k, pct in enumerate(intervals):
        bucket_years = base + (1 if k < rem else 0)
        for _ in range(bucket_years):
            per_year.append(float(pct) / bucket_years)

    per_year.extend([0.0] * (years - len(per_year)))
    per_year = per_year[:years]

    residue = sum(float(p) for p in intervals) - sum(per_year)
    if residue != 0:
        for i in range(len(per_year) - 1, io_years - 1, -1):
            if per_year[i] > 0:
                per_year[i] += residue
                break
        else:
            per_year[-1] += residue
    return per_year


def _level_payments(
    amount: float, years: int, interest_only_years: int
) -> List[float]:
    """Remaining balance / remaining amortizing years, recomputed every year."""
    payments = [0.0] * years
    remaining = amount
    for index in range(interest_only_years, years):
        remaining_years = years - index
        payment = remaining / remaining_years
        if remaining_years == 1:
            payment = remaining
        payments[index] = payment
        remaining -= payment
    return payments


def _custom_percentages(
    years: int,
    interest_only_years: int,
    custom_percentages: Optional[Sequence[float]],
    custom_intervals: Optional[Sequence[float]],
    tolerance: float,
) -> List[float]:
    if custom_percentages:
        if len(custom_percentages) > years:
            raise InvalidAmortizationError(
                f"Custom amortization has {len(custom_percentages)} entries "
                f"for a {years}-year term"
            )
        if any(not is_number(p) or not math.isfinite(p) or p < 0 for p in custom_percentages):
            raise InvalidAmortizationError(
                "Custom amortization percentages must be finite and non-negative"
            )
        if any(p > 0 for p in custom_percentages[:interest_only_years]):
            raise InvalidAmortizationError(
                f"Custom amortization repays principal during the "
                f"{interest_only_years}-year interest-only period"
            )
        percentages = [float(p) for p in custom_percentages]
        percentages.extend([0.0] * (years - len(percentages)))
    elif custom_intervals:
        percentages = expand_interval_percentages(
            years, interest_only_years, custom_intervals
        )
    else:
        raise InvalidAmortizationError(
            "Custom amortization requires per-year percentages or four interval buckets"
        )

    total = sum(percentages)
    if abs(total - 100.0) >= tolerance:
        raise InvalidAmortizationError(
            f"Custom amortization percentages sum to {total:.2f}%, expected 100%"
        )
    # Scale out the tolerated drift so the schedule repays exactly the principal
    return [p * 100.0 / total for p in percentages]


def build_principal_schedule(
    principal: float,
    years: int,
    interest_only_years: int = 0,
    style: AmortizationStyle = AmortizationStyle.LEVEL,
    balloon_pct: float = 0.0,
    custom_percentages: Optional[Sequence[float]] = None,
    custom_intervals: Optional[Sequence[float]] = None,
    *,
    settings: Optional[CalculationSettings] = None,
    logger: Optional[logging.Logger] = None,
) -> PrincipalSchedule:
    """
    Produce the annual principal repayment schedule for one loan.

    Styles:
        level: remaining balance divided by remaining amortizing years,
            recomputed each year so the final year clears the balance exactly
        interest-only, bullet: whole principal repaid in the final year
        balloon: level amortization of ``(1 - balloon_pct/100)`` of principal
            plus the balloon lump added to the final year
        custom: explicit per-year percentages (zero-padded to ``years``) or
            four interval buckets expanded over the amortizing period

    When the interest-only period covers the whole term of an amortizing
    style, nothing is repaid within the term: the schedule is all zeros and a
    warning is recorded.

    Args:
        principal: Amount to repay
        years: Loan term in years
        interest_only_years: Leading years without principal repayment
        style: Amortization style
        balloon_pct: Balloon share of principal in percent (0-100)
        custom_percentages: Per-year percentages for the custom style
        custom_intervals: Four bucket percentages for the custom style
        settings: Strictness and tolerances
        logger: Logger override for this call

    Returns:
        PrincipalSchedule with ``years`` annual payments

    Raises:
        InvalidAmortizationError: Negative principal, term under one year,
            negative interest-only period, balloon outside 0-100, or (strict
            mode) custom percentages that do not sum to 100 within tolerance
    """
    settings = settings or CalculationSettings()
    log = logger or logging.getLogger(__name__)

    if not is_number(principal) or not math.isfinite(principal) or principal < 0:
        raise InvalidAmortizationError(f"Invalid principal amount: {principal!r}")
    if not isinstance(years, int) or years < 1:
        raise InvalidAmortizationError(f"Invalid loan term: {years!r} years")
    if not isinstance(interest_only_years, int) or interest_only_years < 0:
        raise InvalidAmortizationError(
            f"Invalid interest-only period: {interest_only_years!r} years"
        )
    if not is_number(balloon_pct) or not 0 <= balloon_pct <= 100:
        raise InvalidAmortizationError(
            f"Balloon percentage must be between 0 and 100, got {balloon_pct!r}"
        )

    style = AmortizationStyle(style)
    warnings: List[str] = []

    if style in (AmortizationStyle.INTEREST_ONLY, AmortizationStyle.BULLET):
        payments = [0.0] * years
        payments[-1] = float(principal)
        return PrincipalSchedule(style=style, payments=payments, warnings=warnings)

    if interest_only_years >= years:
        message = (
            f"Interest-only period ({interest_only_years}) >= term ({years}); "
            "no principal is repaid within the term"
        )
        log.warning(message)
        warnings.append(message)
        return PrincipalSchedule(style=style, payments=[0.0] * years, warnings=warnings)

    if style == AmortizationStyle.CUSTOM:
        try:
            percentages = _custom_percentages(
                years,
                interest_only_years,
                custom_percentages,
                custom_intervals,
                settings.custom_amortization_tolerance,
            )
        except InvalidAmortizationError as e:
            if settings.strict:
                raise
            message = f"{e}; falling back to level amortization"
            log.warning(message)
            warnings.append(message)
            style = AmortizationStyle.LEVEL
        else:
            payments = [principal * pct / 100.0 for pct in percentages]
            return PrincipalSchedule(style=style, payments=payments, warnings=warnings)

    if style == AmortizationStyle.BALLOON:
        balloon = principal * balloon_pct / 100.0
        payments = _level_payments(principal - balloon, years, interest_only_years)
        payments[-1] += balloon
    else:
        payments = _level_payments(float(principal), years, interest_only_years)

    total = sum(payments)
    if abs(total - principal) > settings.schedule_tolerance:
        # Only reachable through float accumulation on very long terms
        log.warning(
            f"Principal schedule total ({total:.2f}) != principal ({principal:.2f})"
        )
    return PrincipalSchedule(style=style, payments=payments, warnings=warnings)


class AmortizationScheduleEntry(Model):
    """One projection year of a tranche's (or the aggregate) debt schedule."""

    year: int
    period: PositiveInt = Field(..., description="1-based projection year index")
    opening_balance: PositiveFloat
    principal: PositiveFloat
    interest: PositiveFloat
    total_payment: PositiveFloat
    ending_balance: PositiveFloat
    payments_in_year: PositiveInt


class PaymentPeriod(Model):
    """A single sub-annual payment within a schedule year."""

    period: int
    principal: float
    interest: float
    total: float
    ending_balance: float


def split_payment_periods(
    opening_balance: float,
    annual_principal: float,
    annual_rate: float,
    periods_per_year: int,
) -> List[PaymentPeriod]:
    """
    Break one schedule year into its individual payments.

    Principal is spread evenly across the periods and interest is charged on
    the declining balance at ``annual_rate / periods_per_year``. This is an
    illustrative breakdown for reporting, not a constant-payment annuity.
    """
    if periods_per_year <= 1:
        interest = opening_balance * annual_rate
        return [
            PaymentPeriod(
                period=1,
                principal=annual_principal,
                interest=interest,
                total=annual_principal + interest,
                ending_balance=max(0.0, opening_balance - annual_principal),
            )
        ]

    periodic_rate = annual_rate / periods_per_year
    principal_per_period = annual_principal / periods_per_year
    remaining = opening_balance
    schedule = []
    for period in range(1, periods_per_year + 1):
        interest = remaining * periodic_rate
        remaining = max(0.0, remaining - principal_per_period)
        schedule.append(
            PaymentPeriod(
                period=period,
                principal=principal_per_period,
                interest=interest,
                total=principal_per_period + interest,
                ending_balance=remaining,
            )
        )
    return schedule


class TrancheAmortization(Model):
    """
    Year-by-year amortization table for a single debt tranche.

    Interest for each year is the opening balance times the tranche's
    effective annual rate (after day count normalization). Principal follows
    the tranche's principal schedule over its term, which is the tenor capped
    at the maturity date. Once the term has ended or the balance is fully
    repaid, every later entry carries zero principal and zero interest.

    Attributes:
        tranche: Debt tranche being amortized
        horizon: Number of projection years to produce
        start_year: Calendar year of projection year 1
        settings: Strictness and tolerances

    Example:
        ```python
        amortization = TrancheAmortization(
            tranche=DebtTranche(name="Term Loan", amount=500_000, rate=0.08, tenor_years=5),
            horizon=7,
            start_year=2025,
        )
        df = amortization.to_dataframe()
        ```
    """

    tranche: DebtTranche
    horizon: int = Field(..., ge=1, le=50)
    start_year: int = 2025
    settings: CalculationSettings = Field(default_factory=CalculationSettings)

    @property
    def term_years(self) -> int:
        """Tenor capped at the maturity date, in projection years."""
        term = self.tranche.tenor_years
        if self.tranche.maturity_date is not None:
            years_to_maturity = self.tranche.maturity_date.year - self.start_year + 1
            if years_to_maturity < 1:
                raise InvalidAmortizationError(
                    f"Tranche '{self.tranche.name}' matures "
                    f"({self.tranche.maturity_date}) before the projection starts "
                    f"({self.start_year})"
                )
            term = min(term, years_to_maturity)
        return term

    def principal_schedule(
        self, logger: Optional[logging.Logger] = None
    ) -> PrincipalSchedule:
        tranche = self.tranche
        return build_principal_schedule(
            tranche.amount,
            self.term_years,
            interest_only_years=tranche.interest_only_years,
            style=tranche.amortization_type,
            balloon_pct=tranche.balloon_pct,
            custom_percentages=tranche.custom_percentages,
            custom_intervals=tranche.custom_intervals,
            settings=self.settings,
            logger=logger,
        )

    def effective_rate(
        self, notes: Optional[List[str]] = None, logger: Optional[logging.Logger] = None
    ) -> float:
        return effective_annual_rate(
            self.tranche.rate,
            self.tranche.day_count_convention,
            strict=self.settings.strict,
            notes=notes,
            logger=logger,
        )

    def schedule(
        self,
        notes: Optional[List[str]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> List[AmortizationScheduleEntry]:
        """
        Generate ``horizon`` schedule entries for the tranche.

        Args:
            notes: Optional list collecting warnings (degenerate interest-only
                periods, lenient fallbacks)
            logger: Logger override for this call

        Returns:
            One AmortizationScheduleEntry per projection year
        """
        log = logger or logging.getLogger(__name__)
        rate = self.effective_rate(notes, log)
        per_year = payments_per_year(
            self.tranche.payment_frequency,
            strict=self.settings.strict,
            notes=notes,
            logger=log,
        )
        principal = self.principal_schedule(log)
        if notes is not None:
            notes.extend(f"{self.tranche.name}: {w}" for w in principal.warnings)

        term = principal.years
        balance = float(self.tranche.amount)
        entries = []
        for index in range(self.horizon):
            opening = balance
            if index >= term or opening <= _BALANCE_EPSILON:
                # Matured or repaid: nothing further accrues or amortizes
                interest = 0.0
                payment = 0.0
            else:
                interest = opening * rate
                payment = min(principal.payments[index], opening)
            balance = opening - payment
            if balance < _BALANCE_EPSILON:
                balance = 0.0
            active = interest > 0 or payment > 0
            entries.append(
                AmortizationScheduleEntry(
                    year=self.start_year + index,
                    period=index + 1,
                    opening_balance=opening,
                    principal=payment,
                    interest=interest,
                    total_payment=payment + interest,
                    ending_balance=balance,
                    payments_in_year=per_year if active else 0,
                )
            )

        log.debug(
            f"Tranche '{self.tranche.name}': {term}-year term, "
            f"rate {rate:.4%}, ending balance {balance:,.2f}"
        )
        return entries

    def payment_periods(self, year_index: int) -> List[PaymentPeriod]:
        """Sub-annual payment breakdown for one projection year (1-based)."""
        if not 1 <= year_index <= self.horizon:
            raise IndexError(f"Year index {year_index} outside 1..{self.horizon}")
        entry = self.schedule()[year_index - 1]
        return split_payment_periods(
            entry.opening_balance,
            entry.principal,
            self.effective_rate(),
            entry.payments_in_year,
        )

    def to_dataframe(self) -> pd.DataFrame:
        """Schedule as a DataFrame indexed by calendar year."""
        df = pd.DataFrame([entry.model_dump() for entry in self.schedule()])
        return df.set_index("year")
