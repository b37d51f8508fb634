# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Projection Builder - three-statement credit projection with embedded valuation

Builds a year-by-year income statement, balance sheet and cash flow statement
from operating assumptions and a canonical debt configuration, tests lender
covenants every year and values the business by calling the DCF engine on the
unlevered free cash flows. The year loop is strictly sequential: each year's
PP&E, working capital, cash and retained earnings roll forward from the prior
year.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional

from ..core.calculations import FinancialCalculations
from ..core.errors import TerminalValueError
from ..core.primitives import CalculationSettings, ensure_all_finite
from ..debt.amortization import TrancheAmortization
from ..debt.covenants import CovenantTest, CreditRatios
from ..debt.plan import aggregate_tranches, normalize_debt
from ..debt.rates import payments_per_year
from ..valuation.dcf import DCFOptions, calculate_dcf
from ..valuation.metrics import FinancialSnapshot
from .params import ProjectionParams
from .results import (
    Breaches,
    CreditStats,
    PaymentStructure,
    ProjectionResult,
    ProjectionRow,
)


def build_projection(
    params: ProjectionParams,
    settings: Optional[CalculationSettings] = None,
    logger: Optional[logging.Logger] = None,
) -> ProjectionResult:
    """
    Build a multi-year credit projection and value it.

    Args:
        params: Validated projection parameters
        settings: Strictness and tolerances (strict by default)
        logger: Logger override for this call

    Returns:
        ProjectionResult with one row per year, the embedded valuation, return
        metrics, covenant statistics and the debt schedule

    Raises:
        TerminalValueError: ``wacc <= terminal_growth``, raised before any row
        InvalidAmortizationError, InvalidRateError, UnknownConventionError:
            Invalid debt configuration (strict mode)
        ValueError: Duplicate tranche names
        NonFiniteResultError: Any Inf/NaN in a projected figure

    Example:
        ```python
        result = build_projection(
            ProjectionParams(
                base_revenue=1_000_000,
                growth=0.05,
                cogs_pct=0.40,
                opex_pct=0.30,
                opening_debt=500_000,
                interest_rate=0.08,
                wacc=0.12,
                terminal_growth=0.02,
            )
        )
        result.rows[0].ebitda  # 300000.0
        ```
    """
    settings = settings or CalculationSettings()
    log = logger or logging.getLogger(__name__)
    precision = settings.log_precision

    if params.wacc <= params.terminal_growth:
        raise TerminalValueError(params.wacc, params.terminal_growth)

    warnings: List[str] = []
    tranches = normalize_debt(params, logger=log)
    schedule = aggregate_tranches(
        tranches,
        params.years,
        params.start_year,
        settings=settings,
        logger=log,
    )
    warnings.extend(schedule.warnings)
    thresholds = params.covenants

    # Year-0 balances
    gross_ppe = (
        params.opening_ppe
        if params.opening_ppe is not None
        else params.base_revenue * params.capex_pct
    )
    accumulated_depreciation = 0.0
    prior_wc = params.base_revenue * params.wc_pct_of_rev
    cash = params.opening_cash
    retained_earnings = 0.0

    rows: List[ProjectionRow] = []
    for index, debt in enumerate(schedule.entries):
        year = params.start_year + index

        # Income statement
        try:
            growth_factor = (1 + params.growth) ** index
        except OverflowError:
            growth_factor = math.inf
        revenue = params.base_revenue * growth_factor
        cogs = revenue * params.cogs_pct
        opex = revenue * params.opex_pct
        ebitda = revenue - cogs - opex
        capex = revenue * params.capex_pct
        depreciation = (gross_ppe - accumulated_depreciation) * params.da_pct_of_ppe
        ebit = ebitda - depreciation

        interest = debt.interest
        principal = debt.principal
        debt_service = interest + principal
        pre_tax_income = ebit - interest
        tax = max(0.0, pre_tax_income) * params.tax_rate
        net_income = pre_tax_income - tax
        nopat = ebit * (1 - params.tax_rate)

        # Working capital
        working_capital = revenue * params.wc_pct_of_rev
        delta_wc = working_capital - prior_wc
        prior_wc = working_capital

        # Free cash flow
        fcf = net_income + depreciation - capex - delta_wc - principal
        unlevered_fcf = nopat + depreciation - capex - delta_wc

        # Cash and equity roll-forward
        distributions = max(0.0, net_income) * (1 - params.cash_retention_rate)
        cash = cash + fcf - distributions
        retained_earnings = retained_earnings + net_income - distributions

        gross_ppe += capex
        accumulated_depreciation += depreciation
        net_ppe = gross_ppe - accumulated_depreciation

        gross_debt = debt.ending_balance
        net_debt = gross_debt - cash

        cash_from_operations = net_income + depreciation - delta_wc
        cash_from_investing = -capex
        cash_from_financing = -principal - distributions

        figures = dict(
            revenue=revenue,
            cogs=cogs,
            opex=opex,
            ebitda=ebitda,
            depreciation=depreciation,
            ebit=ebit,
            interest_expense=interest,
            pre_tax_income=pre_tax_income,
            tax=tax,
            net_income=net_income,
            nopat=nopat,
            gross_ppe=gross_ppe,
            accumulated_depreciation=accumulated_depreciation,
            net_ppe=net_ppe,
            working_capital=working_capital,
            cash=cash,
            gross_debt=gross_debt,
            net_debt=net_debt,
            retained_earnings=retained_earnings,
            cash_from_operations=cash_from_operations,
            cash_from_investing=cash_from_investing,
            cash_from_financing=cash_from_financing,
            capex=capex,
            delta_wc=delta_wc,
            fcf=fcf,
            unlevered_fcf=unlevered_fcf,
            distributions=distributions,
            opening_debt=debt.opening_balance,
            principal_payment=principal,
            debt_service=debt_service,
        )
        ensure_all_finite(figures, year)

        ratios = CreditRatios.compute(
            ebitda=ebitda,
            ebit=ebit,
            interest=interest,
            debt_service=debt_service,
            net_debt=net_debt,
            capex=capex,
            tax=tax,
        )
        covenant_test = CovenantTest.evaluate(ratios, thresholds)

        rows.append(
            ProjectionRow(
                year=year,
                period=index + 1,
                payments_per_year=debt.payments_in_year,
                tranche_details=debt.tranche_details,
                dscr_ratio=ratios.dscr,
                icr_ratio=ratios.icr,
                leverage_ratio=ratios.leverage,
                fixed_charge_ratio=ratios.fixed_charge,
                dscr_breach=covenant_test.dscr_breach,
                icr_breach=covenant_test.icr_breach,
                leverage_breach=covenant_test.leverage_breach,
                **figures,
            )
        )
        log.debug(
            f"{year}: revenue {revenue:.{precision}f}, EBITDA {ebitda:.{precision}f}, "
            f"interest {interest:.{precision}f}, principal {principal:.{precision}f}, "
            f"UFCF {unlevered_fcf:.{precision}f}, cash {cash:.{precision}f}, "
            f"DSCR {ratios.dscr}, ICR {ratios.icr}, ND/EBITDA {ratios.leverage}"
        )

    # Valuation through the single DCF engine
    opening_debt = schedule.total_debt
    net_debt_at_valuation = opening_debt - params.valuation_cash
    first = rows[0]
    options = DCFOptions(
        discounting=params.discounting,
        terminal_method=params.terminal_method,
        exit_multiple=params.exit_multiple,
        terminal_ebitda=rows[-1].ebitda,
        associates_value=params.associates_value,
        minority_interest=params.minority_interest,
        start_year=params.start_year,
        snapshot=FinancialSnapshot(
            revenue=first.revenue,
            ebitda=first.ebitda,
            ebit=first.ebit,
            net_income=first.net_income,
            shares_outstanding=params.shares_outstanding,
        ),
    )
    valuation = calculate_dcf(
        [row.unlevered_fcf for row in rows],
        params.wacc,
        params.terminal_growth,
        net_debt_at_valuation,
        options,
        logger=log,
    )

    # Equity returns
    moic: Optional[float] = None
    irr: Optional[float] = None
    equity = params.equity_contribution
    if equity > 0:
        equity_fcfs = [row.fcf for row in rows]
        moic = FinancialCalculations.calculate_moic(
            equity, equity_fcfs, valuation.equity_value
        )
        flows = [-equity] + equity_fcfs
        flows[-1] += valuation.equity_value
        irr = FinancialCalculations.calculate_irr(flows)
        if irr is None:
            log.debug("Equity IRR undefined for the projected cash flows")

    # Summary
    longest_term = max(
        (
            TrancheAmortization(
                tranche=t, horizon=params.years, start_year=params.start_year
            ).term_years
            for t in tranches
        ),
        default=params.years,
    )
    maturity_index = min(longest_term, params.years) - 1
    frequency_notes: List[str] = []
    payment_structure = PaymentStructure(
        frequency=params.payment_frequency,
        payments_per_year=payments_per_year(
            params.payment_frequency,
            strict=settings.strict,
            notes=frequency_notes,
            logger=log,
        ),
        balloon_pct=params.balloon_pct,
        day_count_convention=params.day_count_convention,
        blended_rate=schedule.blended_rate,
    )
    warnings.extend(n for n in frequency_notes if n not in warnings)

    result = ProjectionResult(
        rows=rows,
        valuation=valuation,
        moic=moic,
        irr=irr,
        credit_stats=CreditStats.from_rows(rows),
        breaches=Breaches.from_rows(rows),
        tranches=tranches,
        debt_schedule=schedule,
        opening_debt=opening_debt,
        net_debt_at_valuation=net_debt_at_valuation,
        cash_at_maturity=rows[maturity_index].cash,
        ending_debt_balance=schedule.ending_balance,
        total_debt_paid=schedule.total_principal_paid,
        payment_structure=payment_structure,
        warnings=warnings,
    )

    log.debug(
        f"Projection {params.start_year}-{params.start_year + params.years - 1}: "
        f"EV {valuation.enterprise_value:.{precision}f}, "
        f"equity {valuation.equity_value:.{precision}f}, "
        f"{result.breaches.total} covenant breach(es)"
    )
    return result
