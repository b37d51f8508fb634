# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from enum import Enum


class AmortizationStyle(str, Enum):
    """How principal is repaid over the life of a tranche."""

    LEVEL = "level"
    INTEREST_ONLY = "interest-only"
    BULLET = "bullet"
    BALLOON = "balloon"
    CUSTOM = "custom"

    @classmethod
    def _missing_(cls, value):
        # Saved parameter blobs use several spellings for the same style
        aliases = {
            "amortizing": cls.LEVEL,
            "amortized": cls.LEVEL,
            "straight-line": cls.LEVEL,
            "interest_only": cls.INTEREST_ONLY,
            "interestonly": cls.INTEREST_ONLY,
            "io": cls.INTEREST_ONLY,
        }
        if not isinstance(value, str):
            return None
        key = value.strip().lower()
        for member in cls:
            if member.value == key:
                return member
        return aliases.get(key)


class PaymentFrequency(str, Enum):
    """Debt payment frequency. Also carries the legacy structure labels."""

    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    SEMI_ANNUALLY = "Semi-Annually"
    ANNUALLY = "Annually"
    BULLET = "Bullet"
    BALLOON = "Balloon"
    CUSTOM = "customAmortization"

    @property
    def periods_per_year(self) -> int:
        return _PERIODS_PER_YEAR[self]


_PERIODS_PER_YEAR = {
    PaymentFrequency.MONTHLY: 12,
    PaymentFrequency.QUARTERLY: 4,
    PaymentFrequency.SEMI_ANNUALLY: 2,
    PaymentFrequency.ANNUALLY: 1,
    PaymentFrequency.BULLET: 1,
    PaymentFrequency.BALLOON: 12,
    PaymentFrequency.CUSTOM: 12,
}


class TerminalValueMethod(str, Enum):
    """Terminal value methodology for the DCF engine."""

    PERPETUITY_GROWTH = "perpetuity_growth"
    EXIT_MULTIPLE = "exit_multiple"


class DiscountingConvention(str, Enum):
    """Timing of explicit-period cash flows within each year."""

    END_OF_YEAR = "end_of_year"
    MID_YEAR = "mid_year"


class Seniority(str, Enum):
    """Tranche ranking in the capital structure."""

    SENIOR = "senior"
    SUBORDINATED = "subordinated"
    MEZZANINE = "mezzanine"


class Severity(str, Enum):
    """Severity levels shared by advisory issues, sanity checks and audits."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"

    @property
    def rank(self) -> int:
        return list(Severity).index(self)
