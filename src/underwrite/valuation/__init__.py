# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Valuation: the DCF engine, sensitivity grids, implied multiples, cost of
capital and sanity checks.
"""

from .dcf import (
    DCFBreakdownRow,
    DCFOptions,
    ValuationResult,
    calculate_dcf,
    discount_factors,
)
from .metrics import FinancialSnapshot, ImpliedMultiples, calculate_implied_multiples
from .sanity import SanityCheck, run_valuation_sanity_checks
from .sensitivity import (
    DCFInputs,
    create_sensitivity_ranges,
    generate_sensitivity_matrix,
    sensitivity_table,
)
from .wacc import (
    COUNTRY_RISK_PREMIUMS,
    INDUSTRY_BETAS,
    SIZE_PREMIUMS,
    CostOfEquityBreakdown,
    adjusted_beta,
    calculate_after_tax_cost_of_debt,
    calculate_cost_of_equity,
    calculate_cost_of_equity_enhanced,
    calculate_wacc,
    get_country_risk_premium,
    get_industry_beta,
    get_size_premium,
    relever_beta,
    unlever_beta,
)

__all__ = [
    "COUNTRY_RISK_PREMIUMS",
    "CostOfEquityBreakdown",
    "DCFBreakdownRow",
    "DCFInputs",
    "DCFOptions",
    "FinancialSnapshot",
    "INDUSTRY_BETAS",
    "ImpliedMultiples",
    "SIZE_PREMIUMS",
    "SanityCheck",
    "ValuationResult",
    "adjusted_beta",
    "calculate_after_tax_cost_of_debt",
    "calculate_cost_of_equity",
    "calculate_cost_of_equity_enhanced",
    "calculate_dcf",
    "calculate_implied_multiples",
    "calculate_wacc",
    "create_sensitivity_ranges",
    "discount_factors",
    "generate_sensitivity_matrix",
    "get_country_risk_premium",
    "get_industry_beta",
    "get_size_premium",
    "relever_beta",
    "run_valuation_sanity_checks",
    "sensitivity_table",
    "unlever_beta",
]
