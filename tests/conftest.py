# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Test utilities and fixtures for underwrite testing.

Helpers build the reference parameter sets used across the suite so
individual tests only spell out the fields they care about.
"""

from __future__ import annotations

import pytest

from underwrite.core.primitives import CalculationSettings
from underwrite.debt import DebtTranche
from underwrite.projection import ProjectionParams, build_projection


def scenario_params(**overrides) -> ProjectionParams:
    """
    Reference single-debt projection: 1,000,000 revenue at a 30% EBITDA
    margin carrying 500,000 of opening debt at 8% over five years.

    Example:
        >>> scenario_params(wacc=0.15).wacc
        0.15
    """
    data = dict(
        base_revenue=1_000_000.0,
        growth=0.05,
        cogs_pct=0.40,
        opex_pct=0.30,
        years=5,
        opening_debt=500_000.0,
        interest_rate=0.08,
        tax_rate=0.25,
        wacc=0.12,
        terminal_growth=0.02,
        interest_only_years=0,
    )
    data.update(overrides)
    return ProjectionParams(**data)


def two_tranches() -> list:
    """Senior 300,000 at 6% and subordinated 200,000 at 10%, both five years."""
    return [
        DebtTranche(name="Senior", amount=300_000.0, rate=0.06, tenor_years=5),
        DebtTranche(
            name="Subordinated",
            amount=200_000.0,
            rate=0.10,
            tenor_years=5,
            seniority="subordinated",
        ),
    ]


@pytest.fixture
def base_params() -> ProjectionParams:
    return scenario_params()


@pytest.fixture
def base_projection(base_params: ProjectionParams):
    return build_projection(base_params)


@pytest.fixture
def lenient_settings() -> CalculationSettings:
    return CalculationSettings.lenient()
