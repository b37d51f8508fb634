# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the projection builder.

Hand-computed figures use the reference projection from ``scenario_params``:
1,000,000 revenue growing 5%, 30% EBITDA margin, 500,000 of opening debt at
8% amortizing level over five years, 25% tax, no capex or working capital.
"""

import logging
from datetime import date

import pytest
from pydantic import ValidationError

from underwrite.core import (
    InvalidAmortizationError,
    NonFiniteResultError,
    RatioKind,
    TerminalValueError,
    UnknownConventionError,
)
from underwrite.core.primitives import CalculationSettings
from underwrite.debt import DebtTranche
from underwrite.projection import ProjectionResult, build_projection
from underwrite.valuation import calculate_dcf

from ...conftest import scenario_params, two_tranches


class TestReferenceProjection:
    """Year-one figures of the reference projection."""

    def test_income_statement(self, base_projection):
        first = base_projection.rows[0]
        assert first.year == 2025
        assert first.period == 1
        assert first.revenue == pytest.approx(1_000_000.0)
        assert first.ebitda == pytest.approx(300_000.0)
        assert first.depreciation == 0.0
        assert first.interest_expense == pytest.approx(40_000.0)
        assert first.pre_tax_income == pytest.approx(260_000.0)
        assert first.tax == pytest.approx(65_000.0)
        assert first.net_income == pytest.approx(195_000.0)
        assert first.nopat == pytest.approx(225_000.0)

    def test_debt_service_and_ratios(self, base_projection):
        first = base_projection.rows[0]
        assert first.principal_payment == pytest.approx(100_000.0)
        assert first.debt_service == pytest.approx(140_000.0)
        assert first.dscr == pytest.approx(300_000 / 140_000)
        assert first.icr == pytest.approx(7.5)
        assert first.payments_per_year == 4
        assert not first.any_breach

    def test_cash_flows(self, base_projection):
        first = base_projection.rows[0]
        assert first.fcf == pytest.approx(95_000.0)
        assert first.unlevered_fcf == pytest.approx(225_000.0)
        assert first.cash == pytest.approx(95_000.0)
        assert first.gross_debt == pytest.approx(400_000.0)
        assert first.net_debt == pytest.approx(305_000.0)
        assert first.nd_to_ebitda == pytest.approx(305_000 / 300_000)

    def test_valuation(self, base_projection):
        valuation = base_projection.valuation
        assert valuation.enterprise_value > 0
        assert base_projection.opening_debt == 500_000.0
        assert base_projection.net_debt_at_valuation == 500_000.0
        assert valuation.net_debt == 500_000.0
        assert base_projection.enterprise_value == valuation.enterprise_value

    def test_summary(self, base_projection):
        assert base_projection.ending_debt_balance == pytest.approx(0.0)
        assert base_projection.total_debt_paid == pytest.approx(500_000.0)
        assert base_projection.cash_at_maturity == base_projection.rows[4].cash
        assert base_projection.breaches.total == 0
        assert base_projection.warnings == []
        structure = base_projection.payment_structure
        assert structure.payments_per_year == 4
        assert structure.blended_rate == pytest.approx(0.08)


class TestProjectionInvariants:
    """Statement roll-forwards and debt schedule properties."""

    def test_revenue_growth(self, base_projection):
        for i, row in enumerate(base_projection.rows):
            assert row.revenue == pytest.approx(1_000_000.0 * 1.05**i)
            assert row.ebitda == pytest.approx(row.revenue * 0.3)

    def test_interest_on_opening_balance(self, base_projection):
        for row in base_projection.rows:
            assert row.interest_expense == pytest.approx(row.opening_debt * 0.08)

    def test_cash_roll_forward(self):
        result = build_projection(
            scenario_params(opening_cash=40_000.0, cash_retention_rate=0.6, wc_pct_of_rev=0.1)
        )
        cash = 40_000.0
        retained = 0.0
        for row in result.rows:
            assert row.distributions == pytest.approx(max(0.0, row.net_income) * 0.4)
            cash += row.fcf - row.distributions
            retained += row.net_income - row.distributions
            assert row.cash == pytest.approx(cash)
            assert row.retained_earnings == pytest.approx(retained)
            assert row.cash_from_operations + row.cash_from_investing + row.cash_from_financing == (
                pytest.approx(row.fcf - row.distributions)
            )

    def test_working_capital_change(self):
        result = build_projection(scenario_params(wc_pct_of_rev=0.1))
        first, second = result.rows[:2]
        # Opening working capital is set on base revenue, so year one has no change
        assert first.delta_wc == pytest.approx(0.0)
        assert second.delta_wc == pytest.approx(second.working_capital - first.working_capital)

    def test_ppe_roll_forward(self):
        result = build_projection(scenario_params(capex_pct=0.05, da_pct_of_ppe=0.10))
        first, second = result.rows[:2]
        assert first.depreciation == pytest.approx(5_000.0)
        assert first.gross_ppe == pytest.approx(100_000.0)
        assert first.net_ppe == pytest.approx(95_000.0)
        assert second.depreciation == pytest.approx(9_500.0)
        assert first.ebit == pytest.approx(first.ebitda - first.depreciation)
        assert first.unlevered_fcf == pytest.approx(
            first.nopat + first.depreciation - first.capex - first.delta_wc
        )

    def test_opening_ppe_override(self):
        result = build_projection(scenario_params(opening_ppe=200_000.0, da_pct_of_ppe=0.1))
        assert result.rows[0].depreciation == pytest.approx(20_000.0)

    def test_losses_are_not_taxed(self):
        result = build_projection(scenario_params(opex_pct=0.58))
        first = result.rows[0]
        assert first.pre_tax_income < 0
        assert first.tax == 0.0
        assert first.net_income == first.pre_tax_income

    def test_matured_debt_has_no_service(self):
        result = build_projection(scenario_params(debt_tenor_years=3))
        for row in result.rows[3:]:
            assert row.principal_payment == 0.0
            assert row.interest_expense == 0.0
            assert row.dscr_ratio.kind == RatioKind.NOT_APPLICABLE
        assert result.cash_at_maturity == result.rows[2].cash
        assert result.total_debt_paid == pytest.approx(500_000.0)


class TestTerminalValueGuard:
    """WACC at or below terminal growth is rejected before any row is built."""

    def test_raises(self):
        with pytest.raises(TerminalValueError):
            build_projection(scenario_params(wacc=0.02))

    def test_same_error_every_time(self):
        params = scenario_params(wacc=0.015)
        messages = []
        for _ in range(2):
            with pytest.raises(TerminalValueError) as exc_info:
                build_projection(params)
            messages.append(str(exc_info.value))
        assert messages[0] == messages[1]

    def test_raises_under_exit_multiple(self):
        with pytest.raises(TerminalValueError):
            build_projection(scenario_params(wacc=0.02, terminal_method="exit_multiple"))


class TestEquityReturns:
    def test_no_equity_means_no_returns(self, base_projection):
        assert base_projection.moic is None
        assert base_projection.irr is None

    def test_with_equity(self):
        result = build_projection(scenario_params(equity_contribution=400_000.0))
        fcfs = [row.fcf for row in result.rows]
        expected = (result.valuation.equity_value + sum(max(0.0, f) for f in fcfs)) / 400_000.0
        assert result.moic == pytest.approx(expected)
        assert result.irr is not None
        assert result.irr > 0


class TestValuation:
    def test_equity_bridge(self):
        result = build_projection(
            scenario_params(
                opening_cash=50_000.0, associates_value=10_000.0, minority_interest=5_000.0
            )
        )
        valuation = result.valuation
        assert result.net_debt_at_valuation == pytest.approx(450_000.0)
        assert valuation.equity_value == pytest.approx(
            valuation.enterprise_value - 450_000.0 + 10_000.0 - 5_000.0, abs=1e-6
        )

    def test_matches_standalone_engine(self, base_projection):
        """The embedded valuation is the DCF engine run on unlevered FCF."""
        standalone = calculate_dcf(
            base_projection.unlevered_fcf_series, 0.12, 0.02, 500_000.0
        )
        assert base_projection.valuation.enterprise_value == pytest.approx(
            standalone.enterprise_value
        )
        assert base_projection.valuation.equity_value == pytest.approx(standalone.equity_value)

    def test_exit_multiple(self):
        result = build_projection(
            scenario_params(terminal_method="exit_multiple", exit_multiple=6.0)
        )
        assert result.valuation.terminal_value == pytest.approx(result.rows[-1].ebitda * 6.0)
        assert result.valuation.exit_multiple == 6.0

    def test_mid_year_discounting_raises_value(self, base_projection):
        result = build_projection(scenario_params(discounting="mid_year"))
        assert result.valuation.enterprise_value > base_projection.valuation.enterprise_value

    def test_implied_multiples_from_first_year(self, base_projection):
        multiples = base_projection.valuation.implied_multiples
        assert multiples.ev_to_ebitda == pytest.approx(
            base_projection.valuation.enterprise_value / 300_000.0
        )


class TestDebtFree:
    def test_ratios(self):
        result = build_projection(scenario_params(opening_debt=0.0))
        for row in result.rows:
            assert row.dscr is None
            assert row.dscr_ratio.kind == RatioKind.NOT_APPLICABLE
            assert row.icr is None
            assert row.nd_to_ebitda == 0.0
            assert not row.any_breach
        assert result.credit_stats.min_dscr is None
        assert result.credit_stats.min_leverage == 0.0
        assert result.tranches == []
        assert result.payment_structure.blended_rate == 0.0


class TestMultiTranche:
    def test_blended_projection(self):
        result = build_projection(scenario_params(opening_debt=0.0, debt_tranches=two_tranches()))
        first = result.rows[0]
        assert first.interest_expense == pytest.approx(38_000.0)
        assert len(first.tranche_details) == 2
        assert result.payment_structure.blended_rate == pytest.approx(0.076)
        assert result.opening_debt == 500_000.0

    def test_legacy_fields_not_double_counted(self):
        result = build_projection(scenario_params(debt_tranches=two_tranches()))
        assert result.opening_debt == 500_000.0


class TestCovenantBreaches:
    def test_dscr_breach_years(self):
        result = build_projection(
            scenario_params(opening_debt=1_000_000.0, opex_pct=0.45, debt_tenor_years=3)
        )
        assert result.breaches.dscr_breaches > 0
        assert result.breaches.dscr_breach_years[0] == 2025
        assert result.credit_stats.min_dscr < 1.2
        assert result.rows[0].dscr_breach

    def test_stats_fold_over_covered_years_only(self):
        result = build_projection(scenario_params(debt_tenor_years=2))
        covered = [row.dscr for row in result.rows if row.dscr is not None]
        assert len(covered) == 2
        assert result.credit_stats.min_dscr == pytest.approx(min(covered))
        assert result.credit_stats.avg_dscr == pytest.approx(sum(covered) / 2)


class TestDegenerateInputs:
    def test_interest_only_covering_term(self):
        result = build_projection(scenario_params(interest_only_years=5))
        assert result.total_debt_paid == 0.0
        assert result.ending_debt_balance == pytest.approx(500_000.0)
        assert any("no principal is repaid" in w for w in result.warnings)

    def test_full_balloon(self):
        result = build_projection(scenario_params(balloon_pct=100.0))
        assert [row.principal_payment for row in result.rows] == pytest.approx(
            [0.0, 0.0, 0.0, 0.0, 500_000.0]
        )
        assert result.payment_structure.balloon_pct == 100.0

    def test_unknown_convention_strict(self):
        with pytest.raises(UnknownConventionError):
            build_projection(scenario_params(day_count_convention="Actual/364"))

    def test_unknown_frequency_lenient(self, lenient_settings):
        result = build_projection(
            scenario_params(payment_frequency="Fortnightly"), settings=lenient_settings
        )
        notes = [w for w in result.warnings if "Fortnightly" in w]
        assert len(notes) == 1
        assert result.payment_structure.payments_per_year == 4

    def test_bad_custom_schedule(self, lenient_settings):
        params = scenario_params(custom_amortization=[50, 20, 10])
        with pytest.raises(InvalidAmortizationError):
            build_projection(params)
        result = build_projection(params, settings=lenient_settings)
        assert result.total_debt_paid == pytest.approx(500_000.0)
        assert any("falling back to level" in w for w in result.warnings)

    def test_interval_schedule(self):
        result = build_projection(scenario_params(custom_amortization_intervals=[40, 30, 20, 10]))
        assert [row.principal_payment for row in result.rows] == pytest.approx(
            [100_000.0, 100_000.0, 150_000.0, 100_000.0, 50_000.0]
        )

    def test_interval_shortfall(self, lenient_settings):
        params = scenario_params(custom_amortization_intervals=[10, 10, 10, 10])
        with pytest.raises(InvalidAmortizationError, match="sum to 40.00%"):
            build_projection(params)
        result = build_projection(params, settings=lenient_settings)
        assert [row.principal_payment for row in result.rows] == pytest.approx(
            [100_000.0] * 5
        )
        assert any("falling back to level" in w for w in result.warnings)

    def test_negative_interval_bucket(self):
        with pytest.raises(ValidationError):
            scenario_params(custom_amortization_intervals=[-50, 50, 50, 50])

    def test_revenue_overflow(self):
        with pytest.raises(NonFiniteResultError, match="'revenue' in year 2029"):
            build_projection(scenario_params(growth=1e80, years=10))

    def test_maturity_date_sets_cash_at_maturity(self):
        tranche = DebtTranche(
            name="Term Loan",
            amount=300_000.0,
            rate=0.06,
            tenor_years=5,
            maturity_date=date(2027, 6, 30),
        )
        result = build_projection(scenario_params(opening_debt=0.0, debt_tranches=[tranche]))
        assert result.rows[3].principal_payment == 0.0
        assert result.cash_at_maturity == result.rows[2].cash


def test_debug_logging(caplog, base_params):
    logger = logging.getLogger("underwrite.tests.builder")
    with caplog.at_level(logging.DEBUG, logger="underwrite.tests.builder"):
        build_projection(base_params, settings=CalculationSettings(log_precision=2), logger=logger)
    messages = [r.message for r in caplog.records if r.name == "underwrite.tests.builder"]
    assert any(m.startswith("2025: revenue 1000000.00") for m in messages)


def test_to_dataframe(base_projection: ProjectionResult):
    df = base_projection.to_dataframe()
    assert list(df.index) == [2025, 2026, 2027, 2028, 2029]
    assert "dscr" in df.columns
    assert "dscr_ratio" not in df.columns
    assert "tranche_details" not in df.columns
    assert df.loc[2025, "ebitda"] == pytest.approx(300_000.0)
