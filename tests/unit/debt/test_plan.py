# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for debt normalization and multi-tranche aggregation.
"""

import logging

import pytest
from pydantic import ValidationError

from underwrite.core.primitives import AmortizationStyle
from underwrite.debt import (
    DebtTranche,
    aggregate_tranches,
    blended_rate,
    normalize_debt,
)
from underwrite.debt.plan import EXISTING_DEBT_NAME, NEW_FACILITY_NAME

from ...conftest import scenario_params, two_tranches


class TestAggregation:
    """Each tranche is scheduled on its own terms, then summed per year."""

    def test_blended_rate(self):
        schedule = aggregate_tranches(two_tranches(), 5)
        assert schedule.blended_rate == pytest.approx(0.076)
        assert schedule.total_debt == 500_000.0

    def test_year_one_interest_is_sum_of_tranches(self):
        schedule = aggregate_tranches(two_tranches(), 5)
        first = schedule.entries[0]
        senior = schedule.tranche_schedules["Senior"][0]
        sub = schedule.tranche_schedules["Subordinated"][0]

        assert senior.interest == pytest.approx(18_000.0)
        assert sub.interest == pytest.approx(20_000.0)
        assert first.interest == pytest.approx(senior.interest + sub.interest)
        assert first.principal == pytest.approx(senior.principal + sub.principal)
        assert [d.name for d in first.tranche_details] == ["Senior", "Subordinated"]

    def test_full_repayment_over_tenor(self):
        schedule = aggregate_tranches(two_tranches(), 5, start_year=2030)
        assert schedule.entries[0].year == 2030
        assert schedule.total_principal_paid == pytest.approx(500_000.0)
        assert schedule.ending_balance == pytest.approx(0.0)

    def test_horizon_shorter_than_tenor(self):
        schedule = aggregate_tranches(two_tranches(), 3)
        assert len(schedule.entries) == 3
        assert schedule.ending_balance == pytest.approx(200_000.0)

    def test_mixed_styles(self):
        tranches = [
            DebtTranche(name="Amortizing", amount=100_000.0, rate=0.05, tenor_years=4),
            DebtTranche(
                name="Bullet Note",
                amount=50_000.0,
                rate=0.09,
                tenor_years=4,
                amortization_type="bullet",
            ),
        ]
        schedule = aggregate_tranches(tranches, 4)
        assert [e.principal for e in schedule.entries] == pytest.approx(
            [25_000.0, 25_000.0, 25_000.0, 75_000.0]
        )
        # Bullet interest stays on the full balance until maturity
        assert schedule.tranche_schedules["Bullet Note"][3].interest == pytest.approx(4_500.0)

    def test_no_tranches(self):
        schedule = aggregate_tranches([], 3)
        assert schedule.total_debt == 0.0
        assert all(e.total_payment == 0.0 for e in schedule.entries)
        assert all(e.payments_in_year == 0 for e in schedule.entries)

    def test_duplicate_names(self):
        tranches = two_tranches() + [
            DebtTranche(name="Senior", amount=1.0, rate=0.05, tenor_years=1)
        ]
        with pytest.raises(ValueError, match="Duplicate"):
            aggregate_tranches(tranches, 5)

    def test_to_dataframe(self):
        df = aggregate_tranches(two_tranches(), 5).to_dataframe()
        assert "tranche_details" not in df.columns
        assert len(df) == 5


def test_blended_rate_without_debt():
    assert blended_rate([]) == 0.0


class TestNormalizeDebt:
    """Every principal amount is represented by exactly one tranche."""

    def test_opening_debt_only(self):
        tranches = normalize_debt(scenario_params())
        assert len(tranches) == 1
        tranche = tranches[0]
        assert tranche.name == EXISTING_DEBT_NAME
        assert tranche.is_existing
        assert tranche.amount == 500_000.0
        assert tranche.rate == 0.08
        assert tranche.tenor_years == 5
        assert tranche.day_count_convention == "Actual/365"

    def test_new_facility_only(self):
        params = scenario_params(opening_debt=0.0, requested_loan_amount=250_000.0, debt_tenor_years=7)
        (tranche,) = normalize_debt(params)
        assert tranche.name == NEW_FACILITY_NAME
        assert not tranche.is_existing
        assert tranche.tenor_years == 7

    def test_existing_and_new(self):
        params = scenario_params(
            requested_loan_amount=300_000.0,
            interest_only_years=1,
            existing_debt_rate=0.06,
            existing_debt_tenor_years=3,
            existing_debt_amortization="bullet",
        )
        existing, new = normalize_debt(params)
        assert existing.name == EXISTING_DEBT_NAME
        assert existing.rate == 0.06
        assert existing.tenor_years == 3
        assert existing.amortization_type == AmortizationStyle.BULLET
        assert existing.interest_only_years == 0
        assert new.rate == 0.08
        assert new.interest_only_years == 1

    def test_explicit_tranches_win(self, caplog):
        params = scenario_params(debt_tranches=two_tranches())
        with caplog.at_level(logging.WARNING):
            tranches = normalize_debt(params)
        assert [t.name for t in tranches] == ["Senior", "Subordinated"]
        assert sum(t.amount for t in tranches) == 500_000.0
        assert any("double counting" in r.message for r in caplog.records)

    def test_no_debt(self):
        assert normalize_debt(scenario_params(opening_debt=0.0)) == []

    def test_balloon_style_inferred(self):
        (tranche,) = normalize_debt(scenario_params(balloon_pct=100.0))
        assert tranche.amortization_type == AmortizationStyle.BALLOON
        assert tranche.balloon_pct == 100.0

    def test_custom_style_inferred(self):
        (tranche,) = normalize_debt(scenario_params(custom_amortization=[10, 20, 30, 40]))
        assert tranche.amortization_type == AmortizationStyle.CUSTOM
        assert tranche.custom_percentages == [10, 20, 30, 40]

    def test_duplicate_explicit_names(self):
        tranches = [
            DebtTranche(name="A", amount=1.0, rate=0.05, tenor_years=1),
            DebtTranche(name="A", amount=2.0, rate=0.05, tenor_years=1),
        ]
        with pytest.raises(ValueError, match="Duplicate"):
            normalize_debt(scenario_params(opening_debt=0.0, debt_tranches=tranches))


class TestDebtTranche:
    def test_balloon_requires_balloon_style(self):
        with pytest.raises(ValidationError):
            DebtTranche(name="X", amount=1.0, rate=0.05, tenor_years=5, balloon_pct=20.0)

    def test_custom_requires_custom_style(self):
        with pytest.raises(ValidationError):
            DebtTranche(
                name="X", amount=1.0, rate=0.05, tenor_years=5, custom_percentages=[100.0]
            )

    def test_interval_bucket_count(self):
        with pytest.raises(ValidationError):
            DebtTranche(
                name="X",
                amount=1.0,
                rate=0.05,
                tenor_years=5,
                amortization_type="custom",
                custom_intervals=[50.0, 50.0],
            )

    def test_interval_buckets_non_negative(self):
        with pytest.raises(ValidationError):
            DebtTranche(
                name="X",
                amount=1.0,
                rate=0.05,
                tenor_years=5,
                amortization_type="custom",
                custom_intervals=[-50.0, 50.0, 50.0, 50.0],
            )

    @pytest.mark.parametrize(
        "field, value", [("amount", -1.0), ("rate", -0.01), ("tenor_years", 0), ("name", "")]
    )
    def test_invalid_fields(self, field, value):
        data = dict(name="X", amount=1.0, rate=0.05, tenor_years=5)
        data[field] = value
        with pytest.raises(ValidationError):
            DebtTranche(**data)

    def test_str(self):
        senior, _ = two_tranches()
        assert str(senior) == "Senior: 300,000 @ 6.00% 5y level"
