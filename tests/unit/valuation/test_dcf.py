# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the DCF engine.

The reference series is three years of 100 at a 10% WACC and 2% terminal
growth: terminal value 100 x 1.02 / 0.08 = 1,275 discounted over three
full years.
"""

import math

import numpy as np
import pytest
from pydantic import ValidationError

from underwrite.core import (
    InputValidationError,
    InvalidCashFlowError,
    InvalidRateError,
    TerminalValueError,
)
from underwrite.core.primitives import DiscountingConvention, TerminalValueMethod
from underwrite.valuation import (
    DCFOptions,
    FinancialSnapshot,
    calculate_dcf,
    discount_factors,
)

FLOWS = [100.0, 100.0, 100.0]


class TestPerpetuityGrowth:
    def test_reference_values(self):
        result = calculate_dcf(FLOWS, 0.10, 0.02, 50.0)
        pv_fcfs = sum(100.0 / 1.1**t for t in (1, 2, 3))
        pv_tv = 1_275.0 / 1.1**3

        assert result.terminal_value == pytest.approx(1_275.0)
        assert result.pv_of_projected_fcfs == pytest.approx(pv_fcfs)
        assert result.pv_of_terminal_value == pytest.approx(pv_tv)
        assert result.enterprise_value == pytest.approx(pv_fcfs + pv_tv)
        assert result.equity_value == pytest.approx(pv_fcfs + pv_tv - 50.0)
        assert result.terminal_method == TerminalValueMethod.PERPETUITY_GROWTH
        assert result.exit_multiple is None

    def test_equity_bridge(self):
        options = DCFOptions(associates_value=30.0, minority_interest=12.0)
        result = calculate_dcf(FLOWS, 0.10, 0.02, 250.0, options)
        assert result.equity_value == pytest.approx(
            result.enterprise_value - 250.0 + 30.0 - 12.0, abs=1e-9
        )

    @pytest.mark.parametrize("years", [1, 5, 20])
    def test_equity_bridge_any_length(self, years):
        result = calculate_dcf([80.0] * years, 0.09, 0.01, 120.0)
        assert result.equity_value == pytest.approx(result.enterprise_value - 120.0, abs=1e-9)

    def test_wacc_at_growth_raises(self):
        with pytest.raises(TerminalValueError):
            calculate_dcf(FLOWS, 0.02, 0.02, 0.0)

    def test_wacc_below_growth_raises(self):
        with pytest.raises(TerminalValueError):
            calculate_dcf(FLOWS, 0.02, 0.05, 0.0)

    def test_negative_growth(self):
        result = calculate_dcf(FLOWS, 0.10, -0.02, 0.0)
        assert result.terminal_value == pytest.approx(100.0 * 0.98 / 0.12)


class TestMidYear:
    def test_explicit_flows_shift_half_a_year(self):
        options = DCFOptions(discounting=DiscountingConvention.MID_YEAR)
        result = calculate_dcf(FLOWS, 0.10, 0.02, 0.0, options)
        assert result.discount_factors == pytest.approx(
            [1 / 1.1**0.5, 1 / 1.1**1.5, 1 / 1.1**2.5]
        )
        assert [row.period for row in result.breakdown] == [0.5, 1.5, 2.5]

    def test_terminal_value_discounted_full_years(self):
        options = DCFOptions(discounting="mid_year")
        result = calculate_dcf(FLOWS, 0.10, 0.02, 0.0, options)
        assert result.terminal_discount_factor == pytest.approx(1 / 1.1**3)
        assert result.pv_of_terminal_value == pytest.approx(1_275.0 / 1.1**3)


class TestExitMultiple:
    def test_terminal_value(self):
        options = DCFOptions(terminal_method="exit_multiple", exit_multiple=7.5, terminal_ebitda=200.0)
        result = calculate_dcf(FLOWS, 0.10, 0.02, 0.0, options)
        assert result.terminal_value == pytest.approx(1_500.0)
        assert result.exit_multiple == 7.5

    def test_growth_not_constrained(self):
        """Only the perpetuity formula needs WACC above growth."""
        options = DCFOptions(terminal_method="exit_multiple", terminal_ebitda=200.0)
        result = calculate_dcf(FLOWS, 0.02, 0.05, 0.0, options)
        assert result.terminal_value == pytest.approx(1_600.0)

    def test_requires_terminal_ebitda(self):
        with pytest.raises(ValidationError, match="terminal_ebitda"):
            DCFOptions(terminal_method="exit_multiple")


class TestInputValidation:
    def test_empty_series(self):
        with pytest.raises(InvalidCashFlowError):
            calculate_dcf([], 0.10, 0.02, 0.0)

    def test_non_finite_flow(self):
        with pytest.raises(InvalidCashFlowError):
            calculate_dcf([100.0, math.inf], 0.10, 0.02, 0.0)

    @pytest.mark.parametrize("wacc", [0.0, -0.05, math.nan])
    def test_invalid_wacc(self, wacc):
        with pytest.raises(InvalidRateError):
            calculate_dcf(FLOWS, wacc, 0.02, 0.0)

    def test_invalid_growth(self):
        with pytest.raises(InvalidRateError):
            calculate_dcf(FLOWS, 0.10, math.nan, 0.0)

    def test_invalid_net_debt(self):
        with pytest.raises(InputValidationError):
            calculate_dcf(FLOWS, 0.10, 0.02, math.inf)


class TestResultDetail:
    def test_breakdown(self):
        result = calculate_dcf(FLOWS, 0.10, 0.02, 0.0, DCFOptions(start_year=2025))
        df = result.breakdown_dataframe()
        assert list(df.index) == [2025, 2026, 2027]
        assert df["present_value"].sum() == pytest.approx(result.pv_of_projected_fcfs)
        assert result.fcf_series == FLOWS

    def test_terminal_value_share(self):
        result = calculate_dcf(FLOWS, 0.10, 0.02, 0.0)
        assert result.terminal_value_share == pytest.approx(
            result.pv_of_terminal_value / result.enterprise_value
        )

    def test_implied_multiples(self):
        snapshot = FinancialSnapshot(revenue=1_000.0, ebitda=150.0, ebit=120.0, net_income=80.0)
        result = calculate_dcf(FLOWS, 0.10, 0.02, 0.0, DCFOptions(snapshot=snapshot))
        assert result.implied_multiples.ev_to_ebitda == pytest.approx(
            result.enterprise_value / 150.0
        )

    def test_negative_equity_is_reported_not_raised(self):
        result = calculate_dcf(FLOWS, 0.10, 0.02, 10_000.0)
        assert result.equity_value < 0


def test_discount_factors():
    end = discount_factors(0.10, 3, DiscountingConvention.END_OF_YEAR)
    mid = discount_factors(0.10, 3, DiscountingConvention.MID_YEAR)
    assert isinstance(end, np.ndarray)
    assert end.tolist() == pytest.approx([1 / 1.1, 1 / 1.21, 1 / 1.331])
    assert np.all(mid > end)
