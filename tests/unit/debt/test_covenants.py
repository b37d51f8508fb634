# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for per-year credit ratios and covenant breach flags.
"""

import pytest

from underwrite.core import RatioKind
from underwrite.debt import CovenantTest, CovenantThresholds, CreditRatios


def _ratios(**overrides):
    data = dict(
        ebitda=300_000.0,
        ebit=300_000.0,
        interest=40_000.0,
        debt_service=140_000.0,
        net_debt=305_000.0,
        capex=20_000.0,
        tax=65_000.0,
    )
    data.update(overrides)
    return CreditRatios.compute(**data)


class TestCreditRatios:
    def test_covered_ratios(self):
        ratios = _ratios()
        assert ratios.dscr.value == pytest.approx(300_000 / 140_000)
        assert ratios.icr.value == pytest.approx(7.5)
        assert ratios.leverage.value == pytest.approx(305_000 / 300_000)
        assert ratios.fixed_charge.value == pytest.approx(215_000 / 140_000)

    def test_debt_free_year(self):
        ratios = _ratios(interest=0.0, debt_service=0.0, net_debt=-80_000.0)
        assert ratios.dscr.kind == RatioKind.NOT_APPLICABLE
        assert ratios.icr.kind == RatioKind.NOT_APPLICABLE
        assert ratios.fixed_charge.kind == RatioKind.NOT_APPLICABLE
        assert ratios.leverage.value == 0.0

    def test_negative_ebitda_with_debt(self):
        ratios = _ratios(ebitda=-10_000.0, ebit=-20_000.0)
        assert ratios.leverage.kind == RatioKind.UNCAPPED
        assert ratios.dscr.value < 0


class TestCovenantTest:
    def test_compliant(self):
        test = CovenantTest.evaluate(_ratios(), CovenantThresholds())
        assert not test.any_breach

    def test_dscr_breach(self):
        test = CovenantTest.evaluate(
            _ratios(debt_service=280_000.0), CovenantThresholds(min_dscr=1.25)
        )
        assert test.dscr_breach
        assert not test.leverage_breach
        assert test.any_breach

    def test_uncapped_leverage_breaches(self):
        test = CovenantTest.evaluate(_ratios(ebitda=-1.0, ebit=-1.0), CovenantThresholds())
        assert test.leverage_breach

    def test_not_applicable_never_breaches(self):
        ratios = _ratios(interest=0.0, debt_service=0.0, net_debt=0.0)
        test = CovenantTest.evaluate(ratios, CovenantThresholds(min_dscr=5.0, target_icr=5.0))
        assert not test.any_breach

    def test_threshold_defaults(self):
        thresholds = CovenantThresholds()
        assert thresholds.min_dscr == 1.25
        assert thresholds.target_icr == 2.0
        assert thresholds.max_nd_to_ebitda == 3.5
