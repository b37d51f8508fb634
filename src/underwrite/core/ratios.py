# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Tagged coverage and leverage ratios.

A ratio whose denominator is zero is not a number to be clamped or replaced
with a sentinel: it is either not applicable (no debt service to cover) or
uncapped (positive net debt over non-positive EBITDA). ``CoverageRatio``
carries that distinction explicitly so reporting and statistics never mix a
placeholder value into real figures.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional, Tuple

from pydantic import model_validator

from .primitives import FiniteFloat, Model


class RatioKind(str, Enum):
    COVERED = "covered"
    UNCAPPED = "uncapped"
    NOT_APPLICABLE = "not_applicable"


class CoverageRatio(Model):
    """
    Result of a ratio computation.

    Attributes:
        kind: Covered (finite value), Uncapped or NotApplicable
        value: Ratio value, present only when ``kind`` is COVERED

    Example:
        ```python
        CoverageRatio.from_division(300_000, 120_000).value  # 2.5
        CoverageRatio.from_division(300_000, 0).kind         # NOT_APPLICABLE
        ```
    """

    kind: RatioKind
    value: Optional[FiniteFloat] = None

    @model_validator(mode="after")
    def _value_matches_kind(self) -> "CoverageRatio":
        if self.kind == RatioKind.COVERED and self.value is None:
            raise ValueError("Covered ratio requires a value")
        if self.kind != RatioKind.COVERED and self.value is not None:
            raise ValueError(f"{self.kind.value} ratio cannot carry a value")
        return self

    @classmethod
    def covered(cls, value: float) -> "CoverageRatio":
        return cls(kind=RatioKind.COVERED, value=float(value))

    @classmethod
    def uncapped(cls) -> "CoverageRatio":
        return cls(kind=RatioKind.UNCAPPED)

    @classmethod
    def not_applicable(cls) -> "CoverageRatio":
        return cls(kind=RatioKind.NOT_APPLICABLE)

    @classmethod
    def from_division(cls, numerator: float, denominator: float) -> "CoverageRatio":
        """Covered ratio, or NotApplicable when there is nothing to cover."""
        if denominator == 0:
            return cls.not_applicable()
        return cls.covered(numerator / denominator)

    @classmethod
    def leverage(cls, net_debt: float, ebitda: float) -> "CoverageRatio":
        """
        Net debt / EBITDA.

        Zero when the company holds net cash, Uncapped when positive net debt
        sits over non-positive EBITDA.
        """
        if net_debt <= 0:
            return cls.covered(0.0)
        if ebitda <= 0:
            return cls.uncapped()
        return cls.covered(net_debt / ebitda)

    @property
    def is_covered(self) -> bool:
        return self.kind == RatioKind.COVERED

    @property
    def value_or_none(self) -> Optional[float]:
        return self.value if self.is_covered else None

    def below(self, threshold: float) -> bool:
        """Minimum-covenant test: only covered values can breach."""
        return self.is_covered and self.value < threshold

    def above(self, threshold: float) -> bool:
        """Maximum-covenant test: uncapped always breaches."""
        if self.kind == RatioKind.UNCAPPED:
            return True
        return self.is_covered and self.value > threshold

    def __str__(self) -> str:
        if self.kind == RatioKind.COVERED:
            return f"{self.value:.2f}x"
        if self.kind == RatioKind.UNCAPPED:
            return "Uncapped"
        return "N/A"


def covered_stats(
    ratios: Iterable[CoverageRatio],
) -> Tuple[Optional[float], Optional[float], Optional[float]]:
    """(min, max, average) over covered ratios only; Nones when none are covered."""
    values = [r.value for r in ratios if r.is_covered]
    if not values:
        return None, None, None
    return min(values), max(values), sum(values) / len(values)
