# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Day count normalization and payment frequency lookup for debt tranches"""

from __future__ import annotations

import logging
from typing import List, Optional, Union

from pydantic import Field

from ..core.errors import UnknownConventionError
from ..core.primitives import (
    DayCountConvention,
    Model,
    PaymentFrequency,
    validate_rate,
)

# Annualization factors applied to a nominal rate quoted under each convention
_DAY_COUNT_FACTORS = {
    DayCountConvention.THIRTY_360: 1.0,
    DayCountConvention.ACTUAL_360: 365.0 / 360.0,
    DayCountConvention.ACTUAL_365: 1.0,
    DayCountConvention.ACTUAL_ACTUAL: 1.0,
}

LENIENT_CONVENTION = DayCountConvention.ACTUAL_365
LENIENT_PAYMENTS_PER_YEAR = 4


def resolve_convention(
    convention: Union[DayCountConvention, str, None],
    *,
    strict: bool = True,
    notes: Optional[List[str]] = None,
    logger: Optional[logging.Logger] = None,
) -> DayCountConvention:
    """
    Map a convention label onto ``DayCountConvention``.

    ``None`` means the default 30/360. Unknown labels raise in strict mode;
    lenient mode treats them as Actual/365 and records a note.

    Raises:
        UnknownConventionError: Unknown label in strict mode
    """
    log = logger or logging.getLogger(__name__)
    if convention is None:
        return DayCountConvention.THIRTY_360
    if isinstance(convention, DayCountConvention):
        return convention
    try:
        return DayCountConvention(convention)
    except ValueError:
        pass

    message = f"Unknown day count convention {convention!r}"
    if strict:
        raise UnknownConventionError(message)
    message += f"; treating as {LENIENT_CONVENTION.value}"
    log.warning(message)
    if notes is not None:
        notes.append(message)
    return LENIENT_CONVENTION


def effective_annual_rate(
    nominal_rate: float,
    convention: Union[DayCountConvention, str, None] = DayCountConvention.THIRTY_360,
    *,
    strict: bool = True,
    notes: Optional[List[str]] = None,
    logger: Optional[logging.Logger] = None,
) -> float:
    """
    Convert a nominal annual rate into the effective annual rate actually charged.

    Actual/360 charges a 360-day rate over a 365-day year, so the nominal
    rate is scaled by 365/360. All other supported conventions pass through.

    Args:
        nominal_rate: Quoted annual rate as a decimal (0.08 for 8%)
        convention: Day count convention label
        strict: Raise on unknown conventions instead of falling back
        notes: Optional list collecting lenient-mode warnings
        logger: Logger override for this call

    Returns:
        Effective annual rate as a decimal

    Raises:
        InvalidRateError: Negative, non-numeric or non-finite rate
        UnknownConventionError: Unknown convention in strict mode

    Example:
        >>> round(effective_annual_rate(0.072, "Actual/360"), 6)
        0.073
    """
    rate = validate_rate(nominal_rate, "nominal_rate")
    resolved = resolve_convention(convention, strict=strict, notes=notes, logger=logger)
    return rate * _DAY_COUNT_FACTORS[resolved]


def payments_per_year(
    frequency: Union[PaymentFrequency, str, None],
    *,
    strict: bool = True,
    notes: Optional[List[str]] = None,
    logger: Optional[logging.Logger] = None,
) -> int:
    """
    Number of debt payments made per year for a frequency label.

    Monthly 12, Quarterly 4, Semi-Annually 2, Annually 1. The legacy
    structure labels Bullet (1), Balloon (12) and customAmortization (12) are
    accepted as well. ``None`` means quarterly.

    Raises:
        UnknownConventionError: Unknown label in strict mode
    """
    log = logger or logging.getLogger(__name__)
    if frequency is None:
        return PaymentFrequency.QUARTERLY.periods_per_year
    try:
        return PaymentFrequency(frequency).periods_per_year
    except ValueError:
        pass

    message = f"Unknown payment frequency {frequency!r}"
    if strict:
        raise UnknownConventionError(message)
    message += f"; assuming {LENIENT_PAYMENTS_PER_YEAR} payments per year"
    log.warning(message)
    if notes is not None:
        notes.append(message)
    return LENIENT_PAYMENTS_PER_YEAR


class InterestRate(Model):
    """
    Nominal rate plus the day count convention it is quoted under.

    Attributes:
        nominal_rate: Quoted annual rate as a decimal
        day_count_convention: Convention the rate is quoted under

    Example:
        >>> rate = InterestRate(nominal_rate=0.072, day_count_convention="Actual/360")
        >>> round(rate.effective_rate, 6)
        0.073
    """

    nominal_rate: float = Field(..., ge=0, allow_inf_nan=False)
    day_count_convention: DayCountConvention = DayCountConvention.THIRTY_360

    @property
    def effective_rate(self) -> float:
        return effective_annual_rate(self.nominal_rate, self.day_count_convention)

    def __str__(self) -> str:
        return f"{self.nominal_rate:.3%} ({self.day_count_convention.value})"
