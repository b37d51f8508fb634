# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Debt schedules: day count normalization, per-tranche amortization, covenant
ratios and multi-tranche aggregation.
"""

from .amortization import (
    AmortizationScheduleEntry,
    PaymentPeriod,
    PrincipalSchedule,
    TrancheAmortization,
    build_principal_schedule,
    expand_interval_percentages,
    split_payment_periods,
)
from .covenants import CovenantTest, CovenantThresholds, CreditRatios
from .plan import (
    DebtSchedule,
    DebtScheduleYear,
    TrancheYearDetail,
    aggregate_tranches,
    blended_rate,
    normalize_debt,
)
from .rates import (
    InterestRate,
    effective_annual_rate,
    payments_per_year,
    resolve_convention,
)
from .tranche import DebtTranche

__all__ = [
    "AmortizationScheduleEntry",
    "CovenantTest",
    "CovenantThresholds",
    "CreditRatios",
    "DebtSchedule",
    "DebtScheduleYear",
    "DebtTranche",
    "InterestRate",
    "PaymentPeriod",
    "PrincipalSchedule",
    "TrancheAmortization",
    "TrancheYearDetail",
    "aggregate_tranches",
    "blended_rate",
    "build_principal_schedule",
    "effective_annual_rate",
    "expand_interval_percentages",
    "normalize_debt",
    "payments_per_year",
    "resolve_convention",
    "split_payment_periods",
]
