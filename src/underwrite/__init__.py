# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Underwrite - Credit Projection & Valuation Engine

Building blocks for loan underwriting analysis: multi-year three-statement
projections, multi-tranche debt schedules, covenant ratios, discounted cash
flow valuation, sensitivity grids and capital structure advice.

Key Entry Points:
- underwrite.projection.build_projection() - Full projection with embedded valuation
- underwrite.valuation.calculate_dcf() - Standalone DCF engine
- underwrite.valuation.generate_sensitivity_matrix() - WACC x growth grids
- underwrite.analysis.assess_capital_structure() - Rules-based advisory report
- underwrite.analysis.run_stress_test() - Scenario shocks over a projection

Example Usage:
    ```python
    from underwrite.projection import ProjectionParams, build_projection

    params = ProjectionParams(
        base_revenue=1_000_000,
        growth=0.05,
        cogs_pct=0.50,
        opex_pct=0.20,
        wacc=0.10,
        terminal_growth=0.02,
        requested_loan_amount=500_000,
        interest_rate=0.08,
        debt_tenor_years=5,
    )
    result = build_projection(params)
    print(f"Enterprise value: {result.valuation.enterprise_value:,.0f}")
    ```
"""

import importlib
import logging

# Library code never configures handlers; applications decide where logs go.
logging.getLogger(__name__).addHandler(logging.NullHandler())


# Public API surface (lazy-loaded on first attribute access)
__all__ = [  # noqa: F822 - lazy loading
    "analysis",
    "core",
    "debt",
    "projection",
    "reporting",
    "valuation",
]


_LAZY_MODULES = {
    "analysis": "underwrite.analysis",
    "core": "underwrite.core",
    "debt": "underwrite.debt",
    "projection": "underwrite.projection",
    "reporting": "underwrite.reporting",
    "valuation": "underwrite.valuation",
}


def __getattr__(name):
    if name in _LAZY_MODULES:
        module = importlib.import_module(_LAZY_MODULES[name])
        globals()[name] = module
        return module
    raise AttributeError(f"module 'underwrite' has no attribute {name!r}")
