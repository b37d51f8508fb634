# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Numeric guards shared by the calculation modules.
"""

from __future__ import annotations

import math
from numbers import Real
from typing import Iterable, List, Mapping, Optional

from ..errors import InvalidCashFlowError, InvalidRateError, NonFiniteResultError


def is_number(value: object) -> bool:
    """True for real numbers, excluding booleans."""
    return isinstance(value, Real) and not isinstance(value, bool)


def ensure_finite(value: float, label: str, year: Optional[int] = None) -> float:
    """Return ``value`` as float or raise NonFiniteResultError."""
    result = float(value)
    if not math.isfinite(result):
        raise NonFiniteResultError(label, result, year)
    return result


def ensure_all_finite(values: Mapping[str, float], year: Optional[int] = None) -> None:
    """Check every numeric entry of a mapping; non-numeric entries are skipped."""
    for label, value in values.items():
        if is_number(value):
            ensure_finite(value, label, year)


def validate_rate(rate: object, label: str = "rate", allow_zero: bool = True) -> float:
    """
    Validate an annual rate expressed as a decimal.

    Raises:
        InvalidRateError: If the rate is non-numeric, non-finite, negative, or
            zero when ``allow_zero`` is False
    """
    if not is_number(rate):
        raise InvalidRateError(f"{label} must be a number, got {rate!r}")
    value = float(rate)
    if not math.isfinite(value):
        raise InvalidRateError(f"{label} must be finite, got {value!r}")
    if value < 0 or (value == 0 and not allow_zero):
        bound = ">= 0" if allow_zero else "> 0"
        raise InvalidRateError(f"{label} must be {bound}, got {value}")
    return value


def validate_cash_flows(values: Iterable[object], label: str = "cash flows") -> List[float]:
    """
    Validate a cash flow series and return it as a list of floats.

    Raises:
        InvalidCashFlowError: If the series is empty or contains non-numeric
            or non-finite entries
    """
    flows = list(values)
    if not flows:
        raise InvalidCashFlowError(f"{label} cannot be empty")
    result = []
    for i, value in enumerate(flows):
        if not is_number(value):
            raise InvalidCashFlowError(f"{label}[{i}] is not numeric: {value!r}")
        number = float(value)
        if not math.isfinite(number):
            raise InvalidCashFlowError(f"{label}[{i}] is not finite: {number!r}")
        result.append(number)
    return result
