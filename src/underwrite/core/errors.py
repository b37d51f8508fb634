# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Exception hierarchy for underwriting calculations.

Three families are distinguished:

- ``InputValidationError``: the caller supplied something malformed (a
  negative rate, an unknown convention, a custom schedule that does not sum to
  100%). Raised before any computation starts.
- ``DomainError``: inputs are well formed but the requested calculation is
  mathematically undefined, e.g. a perpetuity terminal value with WACC at or
  below the terminal growth rate.
- ``NonFiniteResultError``: a computation produced Inf or NaN. This always
  indicates a defect and is never swallowed.

Input and domain errors subclass ``ValueError`` so callers that already catch
pydantic ``ValidationError`` (also a ``ValueError``) keep working.
"""

from __future__ import annotations


class UnderwriteError(Exception):
    """Base class for every error raised by the calculation core."""


class InputValidationError(UnderwriteError, ValueError):
    """Malformed caller input."""


class InvalidRateError(InputValidationError):
    """Interest or discount rate is negative, non-numeric or non-finite."""


class UnknownConventionError(InputValidationError):
    """Day count convention or payment frequency is not recognised."""


class InvalidAmortizationError(InputValidationError):
    """Amortization inputs cannot produce a valid principal schedule."""


class InvalidCashFlowError(InputValidationError):
    """Cash flow series is empty, non-numeric or non-finite."""


class DomainError(UnderwriteError, ValueError):
    """Calculation is undefined for otherwise valid inputs."""


class TerminalValueError(DomainError):
    """Perpetuity terminal value requested with WACC <= terminal growth."""

    def __init__(self, wacc: float, terminal_growth: float):
        self.wacc = wacc
        self.terminal_growth = terminal_growth
        super().__init__(
            f"WACC ({wacc:.4f}) must be greater than terminal growth "
            f"({terminal_growth:.4f}) for a perpetuity terminal value"
        )


class NonFiniteResultError(UnderwriteError, ArithmeticError):
    """A computation produced Inf or NaN."""

    def __init__(self, label: str, value: float, year: int | None = None):
        self.label = label
        self.value = value
        self.year = year
        where = f" in year {year}" if year is not None else ""
        super().__init__(f"Non-finite value for '{label}'{where}: {value!r}")
