# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Cost of capital: CAPM, WACC and beta levering.

Reference tables (industry asset betas, country risk premiums, size premiums)
follow the Damodaran and Duff & Phelps conventions and are meant as defaults
when company-specific inputs are unavailable.
"""

from __future__ import annotations

import math
from typing import Dict, NamedTuple, Optional

from ..core.errors import InputValidationError
from ..core.primitives import FiniteFloat, Model, is_number, validate_rate


class IndustryBeta(NamedTuple):
    unlevered: float
    typical_debt_to_equity: float


class CountryRisk(NamedTuple):
    name: str
    premium: float
    rating: str


class SizeBucket(NamedTuple):
    decile: int
    max_cap_usd: float
    premium: float
    label: str


INDUSTRY_BETAS: Dict[str, IndustryBeta] = {
    "financial-services": IndustryBeta(0.65, 2.5),
    "banking": IndustryBeta(0.55, 3.0),
    "insurance": IndustryBeta(0.70, 0.5),
    "real-estate": IndustryBeta(0.75, 1.0),
    "utilities": IndustryBeta(0.35, 1.2),
    "telecommunications": IndustryBeta(0.70, 0.8),
    "retail": IndustryBeta(0.85, 0.5),
    "consumer-goods": IndustryBeta(0.80, 0.3),
    "healthcare": IndustryBeta(0.90, 0.2),
    "technology": IndustryBeta(1.10, 0.1),
    "manufacturing": IndustryBeta(0.85, 0.4),
    "energy": IndustryBeta(1.05, 0.6),
    "agriculture": IndustryBeta(0.75, 0.4),
    "hospitality": IndustryBeta(1.00, 0.6),
    "transportation": IndustryBeta(0.85, 0.7),
    "construction": IndustryBeta(0.95, 0.5),
    "general": IndustryBeta(0.85, 0.5),
}

COUNTRY_RISK_PREMIUMS: Dict[str, CountryRisk] = {
    "JM": CountryRisk("Jamaica", 0.045, "B+"),
    "TT": CountryRisk("Trinidad & Tobago", 0.025, "BBB-"),
    "BB": CountryRisk("Barbados", 0.055, "B-"),
    "BS": CountryRisk("Bahamas", 0.035, "BB-"),
    "GY": CountryRisk("Guyana", 0.040, "B+"),
    "SR": CountryRisk("Suriname", 0.080, "CCC"),
    "BZ": CountryRisk("Belize", 0.065, "CCC+"),
    "US": CountryRisk("United States", 0.000, "AAA"),
    "GB": CountryRisk("United Kingdom", 0.005, "AA"),
    "CA": CountryRisk("Canada", 0.000, "AAA"),
    "MX": CountryRisk("Mexico", 0.020, "BBB"),
    "BR": CountryRisk("Brazil", 0.035, "BB-"),
    "CO": CountryRisk("Colombia", 0.030, "BB+"),
    "CL": CountryRisk("Chile", 0.010, "A"),
    "PA": CountryRisk("Panama", 0.020, "BBB"),
}

SIZE_PREMIUMS = (
    SizeBucket(1, 2e9, 0.0350, "Micro-cap"),
    SizeBucket(2, 5e9, 0.0250, "Small-cap"),
    SizeBucket(3, 10e9, 0.0150, "Mid-cap (small)"),
    SizeBucket(4, 25e9, 0.0100, "Mid-cap"),
    SizeBucket(5, 50e9, 0.0050, "Mid-cap (large)"),
    SizeBucket(6, 100e9, 0.0025, "Large-cap"),
    SizeBucket(7, math.inf, 0.0000, "Mega-cap"),
)


def _require_number(value: object, label: str) -> float:
    if not is_number(value) or not math.isfinite(value):
        raise InputValidationError(f"{label} must be a finite number, got {value!r}")
    return float(value)


def _require_tax_rate(tax_rate: object) -> float:
    rate = _require_number(tax_rate, "tax_rate")
    if not 0 <= rate <= 1:
        raise InputValidationError(f"tax_rate must be between 0 and 1, got {rate}")
    return rate


def calculate_cost_of_equity(
    risk_free_rate: float, beta: float, market_risk_premium: float
) -> float:
    """CAPM: Ke = Rf + beta x MRP."""
    rf = validate_rate(risk_free_rate, "risk_free_rate")
    mrp = validate_rate(market_risk_premium, "market_risk_premium")
    return rf + _require_number(beta, "beta") * mrp


class CostOfEquityBreakdown(Model):
    """Components of an enhanced CAPM cost of equity."""

    risk_free_rate: FiniteFloat
    beta: FiniteFloat
    equity_risk_premium: FiniteFloat
    country_risk_premium: FiniteFloat = 0.0
    size_premium: FiniteFloat = 0.0
    company_specific_premium: FiniteFloat = 0.0

    @property
    def base_capm(self) -> float:
        return self.risk_free_rate + self.beta * self.equity_risk_premium

    @property
    def total(self) -> float:
        return (
            self.base_capm
            + self.country_risk_premium
            + self.size_premium
            + self.company_specific_premium
        )

    def __str__(self) -> str:
        return (
            f"Ke = {self.risk_free_rate:.2%} + {self.beta:.2f} x "
            f"{self.equity_risk_premium:.2%} + {self.country_risk_premium:.2%} + "
            f"{self.size_premium:.2%} + {self.company_specific_premium:.2%} = "
            f"{self.total:.2%}"
        )


def calculate_cost_of_equity_enhanced(
    risk_free_rate: float,
    beta: float,
    equity_risk_premium: float = 0.055,
    country_risk_premium: float = 0.0,
    size_premium: float = 0.0,
    company_specific_premium: float = 0.0,
) -> CostOfEquityBreakdown:
    """Modified CAPM: Ke = Rf + beta x ERP + CRP + size premium + alpha."""
    return CostOfEquityBreakdown(
        risk_free_rate=risk_free_rate,
        beta=beta,
        equity_risk_premium=equity_risk_premium,
        country_risk_premium=country_risk_premium,
        size_premium=size_premium,
        company_specific_premium=company_specific_premium,
    )


def calculate_after_tax_cost_of_debt(interest_rate: float, tax_rate: float) -> float:
    """Kd x (1 - t)."""
    return validate_rate(interest_rate, "interest_rate") * (1 - _require_tax_rate(tax_rate))


def calculate_wacc(
    equity_value: float,
    debt_value: float,
    cost_of_equity: float,
    after_tax_cost_of_debt: float,
) -> float:
    """
    Weighted average cost of capital: E/V x Ke + D/V x Kd(1-t).

    Raises:
        InputValidationError: Negative values or zero total capital
        InvalidRateError: Negative costs of capital
    """
    equity = _require_number(equity_value, "equity_value")
    debt = _require_number(debt_value, "debt_value")
    if equity < 0 or debt < 0:
        raise InputValidationError("Capital values must be non-negative")
    total = equity + debt
    if total == 0:
        raise InputValidationError("Cannot weight cost of capital: total capital is zero")
    ke = validate_rate(cost_of_equity, "cost_of_equity")
    kd = validate_rate(after_tax_cost_of_debt, "after_tax_cost_of_debt")
    return equity / total * ke + debt / total * kd


def unlever_beta(levered_beta: float, tax_rate: float, debt_to_equity: float) -> float:
    """Hamada: beta_u = beta_l / (1 + (1 - t) x D/E)."""
    if _require_number(debt_to_equity, "debt_to_equity") < 0:
        raise InputValidationError(f"debt_to_equity must be >= 0, got {debt_to_equity}")
    return _require_number(levered_beta, "levered_beta") / (
        1 + (1 - _require_tax_rate(tax_rate)) * debt_to_equity
    )


def relever_beta(
    unlevered_beta: float, tax_rate: float, target_debt_to_equity: float
) -> float:
    """Hamada: beta_l = beta_u x (1 + (1 - t) x D/E)."""
    if _require_number(target_debt_to_equity, "target_debt_to_equity") < 0:
        raise InputValidationError(
            f"target_debt_to_equity must be >= 0, got {target_debt_to_equity}"
        )
    return _require_number(unlevered_beta, "unlevered_beta") * (
        1 + (1 - _require_tax_rate(tax_rate)) * target_debt_to_equity
    )


def adjusted_beta(raw_beta: float) -> float:
    """Bloomberg adjustment toward the market: 0.67 x raw + 0.33."""
    return 0.67 * _require_number(raw_beta, "raw_beta") + 0.33


class IndustryBetaEstimate(Model):
    industry: str
    unlevered_beta: float
    typical_debt_to_equity: float
    target_debt_to_equity: float
    relevered_beta: float
    adjusted_beta: float


def get_industry_beta(
    industry: Optional[str], tax_rate: float, target_debt_to_equity: float
) -> IndustryBetaEstimate:
    """
    Industry asset beta relevered to the subject company's target leverage.

    Industry names are matched case-insensitively with spaces as hyphens;
    unknown industries use the "general" row.
    """
    key = (industry or "general").strip().lower().replace(" ", "-")
    if key not in INDUSTRY_BETAS:
        key = "general"
    row = INDUSTRY_BETAS[key]
    relevered = relever_beta(row.unlevered, tax_rate, target_debt_to_equity)
    return IndustryBetaEstimate(
        industry=key,
        unlevered_beta=row.unlevered,
        typical_debt_to_equity=row.typical_debt_to_equity,
        target_debt_to_equity=target_debt_to_equity,
        relevered_beta=relevered,
        adjusted_beta=adjusted_beta(relevered),
    )


def get_country_risk_premium(country_code: str) -> CountryRisk:
    """
    Raises:
        InputValidationError: Unknown ISO country code
    """
    try:
        return COUNTRY_RISK_PREMIUMS[country_code.strip().upper()]
    except (AttributeError, KeyError):
        raise InputValidationError(
            f"No country risk premium for {country_code!r}"
        ) from None


def get_size_premium(market_cap_local: float, fx_rate_to_usd: float = 1.0) -> SizeBucket:
    """Size premium bucket for a market capitalization in local currency."""
    fx = _require_number(fx_rate_to_usd, "fx_rate_to_usd")
    if fx <= 0:
        raise InputValidationError(f"fx_rate_to_usd must be > 0, got {fx}")
    market_cap_usd = _require_number(market_cap_local, "market_cap_local") / fx
    return next(b for b in SIZE_PREMIUMS if market_cap_usd <= b.max_cap_usd)
