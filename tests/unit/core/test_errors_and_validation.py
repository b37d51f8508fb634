# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the error hierarchy and numeric guards.
"""

import math

import pytest

from underwrite.core import (
    DomainError,
    InputValidationError,
    InvalidCashFlowError,
    InvalidRateError,
    NonFiniteResultError,
    TerminalValueError,
    UnderwriteError,
)
from underwrite.core.primitives import (
    ensure_all_finite,
    ensure_finite,
    is_number,
    validate_cash_flows,
    validate_rate,
)


class TestErrorHierarchy:
    """Input and domain errors are ValueErrors; non-finite results are not."""

    def test_terminal_value_error(self):
        error = TerminalValueError(0.02, 0.02)
        assert isinstance(error, DomainError)
        assert isinstance(error, ValueError)
        assert isinstance(error, UnderwriteError)
        assert error.wacc == 0.02
        assert error.terminal_growth == 0.02
        assert "must be greater than terminal growth" in str(error)

    def test_input_errors(self):
        assert issubclass(InvalidRateError, InputValidationError)
        assert issubclass(InvalidCashFlowError, InputValidationError)
        assert issubclass(InputValidationError, ValueError)

    def test_non_finite_result_error(self):
        error = NonFiniteResultError("ebitda", math.inf, 2027)
        assert not isinstance(error, ValueError)
        assert isinstance(error, ArithmeticError)
        assert error.year == 2027
        assert "ebitda" in str(error)
        assert "2027" in str(error)


class TestNumericGuards:
    """Test is_number, ensure_finite and ensure_all_finite."""

    def test_is_number_excludes_booleans(self):
        assert is_number(1)
        assert is_number(1.5)
        assert not is_number(True)
        assert not is_number("1.5")
        assert not is_number(None)

    def test_ensure_finite(self):
        assert ensure_finite(3, "x") == 3.0
        with pytest.raises(NonFiniteResultError):
            ensure_finite(math.nan, "x")

    def test_ensure_all_finite_reports_label_and_year(self):
        values = {"revenue": 1.0, "label": "text", "cash": math.inf}
        with pytest.raises(NonFiniteResultError) as exc_info:
            ensure_all_finite(values, 2026)
        assert exc_info.value.label == "cash"
        assert exc_info.value.year == 2026

    def test_ensure_all_finite_passes_clean_mapping(self):
        ensure_all_finite({"a": 1.0, "b": -2.5, "c": 0})


class TestRateValidation:
    def test_valid_rates(self):
        assert validate_rate(0.08) == 0.08
        assert validate_rate(0) == 0.0

    @pytest.mark.parametrize("rate", [-0.01, math.inf, math.nan, "0.08", None, True])
    def test_invalid_rates(self, rate):
        with pytest.raises(InvalidRateError):
            validate_rate(rate)

    def test_zero_rejected_when_disallowed(self):
        with pytest.raises(InvalidRateError, match="> 0"):
            validate_rate(0.0, "wacc", allow_zero=False)


class TestCashFlowValidation:
    def test_converts_to_floats(self):
        assert validate_cash_flows([1, 2.5, -3]) == [1.0, 2.5, -3.0]

    def test_empty_series(self):
        with pytest.raises(InvalidCashFlowError, match="cannot be empty"):
            validate_cash_flows([])

    def test_non_numeric_entry(self):
        with pytest.raises(InvalidCashFlowError, match=r"\[1\]"):
            validate_cash_flows([100.0, None])

    def test_non_finite_entry(self):
        with pytest.raises(InvalidCashFlowError):
            validate_cash_flows([100.0, math.nan])
