# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for day count normalization and payment frequency lookup.

Strict mode raises on unknown labels; lenient mode falls back and records
a note in the caller's list.
"""

import logging

import pytest

from underwrite.core import InvalidRateError, UnknownConventionError
from underwrite.core.primitives import DayCountConvention
from underwrite.debt import (
    InterestRate,
    effective_annual_rate,
    payments_per_year,
    resolve_convention,
)


class TestEffectiveAnnualRate:
    """Test day count adjustments."""

    def test_actual_360_scales_up(self):
        assert effective_annual_rate(0.072, "Actual/360") == pytest.approx(0.073)

    @pytest.mark.parametrize("convention", ["30/360", "Actual/365", "Actual/Actual", None])
    def test_pass_through_conventions(self, convention):
        assert effective_annual_rate(0.08, convention) == pytest.approx(0.08)

    def test_accepts_enum(self):
        assert effective_annual_rate(0.072, DayCountConvention.ACTUAL_360) == pytest.approx(0.073)

    def test_unknown_convention_strict(self):
        with pytest.raises(UnknownConventionError, match="Actual/364"):
            effective_annual_rate(0.08, "Actual/364")

    def test_unknown_convention_lenient(self, caplog):
        notes = []
        with caplog.at_level(logging.WARNING):
            rate = effective_annual_rate(0.08, "Actual/364", strict=False, notes=notes)
        assert rate == pytest.approx(0.08)
        assert len(notes) == 1
        assert "Actual/365" in notes[0]
        assert any("Actual/364" in r.message for r in caplog.records)

    def test_negative_rate(self):
        with pytest.raises(InvalidRateError):
            effective_annual_rate(-0.01, "30/360")


def test_resolve_convention_default():
    assert resolve_convention(None) is DayCountConvention.THIRTY_360


class TestPaymentsPerYear:
    @pytest.mark.parametrize(
        "frequency, expected",
        [
            ("Monthly", 12),
            ("Quarterly", 4),
            ("Semi-Annually", 2),
            ("Annually", 1),
            ("Bullet", 1),
            ("Balloon", 12),
            ("customAmortization", 12),
            (None, 4),
        ],
    )
    def test_known_labels(self, frequency, expected):
        assert payments_per_year(frequency) == expected

    def test_unknown_strict(self):
        with pytest.raises(UnknownConventionError):
            payments_per_year("Fortnightly")

    def test_unknown_lenient(self):
        notes = []
        assert payments_per_year("Fortnightly", strict=False, notes=notes) == 4
        assert notes == ["Unknown payment frequency 'Fortnightly'; assuming 4 payments per year"]


class TestInterestRate:
    def test_effective_rate(self):
        rate = InterestRate(nominal_rate=0.072, day_count_convention="Actual/360")
        assert rate.effective_rate == pytest.approx(0.073)
        assert "Actual/360" in str(rate)

    def test_default_convention(self):
        assert InterestRate(nominal_rate=0.05).effective_rate == pytest.approx(0.05)
