# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
WACC x terminal growth sensitivity grids.

Every cell is a fresh ``calculate_dcf`` run over the same base inputs with
one (wacc, growth) pair substituted, so a cell always equals what a direct
call to the engine would return for that pair.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Literal, Optional, Sequence

import pandas as pd
from pydantic import Field

from ..core.errors import InputValidationError
from ..core.primitives import (
    FiniteFloat,
    Model,
    TerminalValueMethod,
    is_number,
)
from .dcf import DCFOptions, ValuationResult, calculate_dcf

if TYPE_CHECKING:
    from ..projection.results import ProjectionResult

SensitivityMetric = Literal["equity_value", "enterprise_value"]


class DCFInputs(Model):
    """
    Base inputs for repeated DCF runs.

    Attributes:
        fcf_series: Unlevered free cash flow per year
        wacc: Base weighted average cost of capital
        terminal_growth: Base terminal growth rate
        net_debt: Debt less cash at the valuation date
        options: Discounting, terminal method and equity bridge adjustments
    """

    fcf_series: List[FiniteFloat] = Field(..., min_length=1)
    wacc: FiniteFloat
    terminal_growth: FiniteFloat
    net_debt: FiniteFloat
    options: DCFOptions = Field(default_factory=DCFOptions)

    @classmethod
    def from_projection(cls, result: "ProjectionResult") -> "DCFInputs":
        """Inputs that reproduce a projection's embedded valuation."""
        valuation = result.valuation
        rows = result.rows
        options = DCFOptions(
            discounting=valuation.discounting,
            terminal_method=valuation.terminal_method,
            exit_multiple=valuation.exit_multiple or DCFOptions().exit_multiple,
            terminal_ebitda=(
                rows[-1].ebitda
                if valuation.terminal_method == TerminalValueMethod.EXIT_MULTIPLE
                else None
            ),
            associates_value=valuation.associates_value,
            minority_interest=valuation.minority_interest,
            start_year=rows[0].year,
        )
        return cls(
            fcf_series=[row.unlevered_fcf for row in rows],
            wacc=valuation.wacc,
            terminal_growth=valuation.terminal_growth,
            net_debt=valuation.net_debt,
            options=options,
        )

    def run(
        self,
        wacc: Optional[float] = None,
        terminal_growth: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
    ) -> ValuationResult:
        """Run the DCF engine with optional overrides of the two grid axes."""
        return calculate_dcf(
            self.fcf_series,
            self.wacc if wacc is None else wacc,
            self.terminal_growth if terminal_growth is None else terminal_growth,
            self.net_debt,
            self.options,
            logger=logger,
        )


def create_sensitivity_ranges(
    base_value: float, steps: int = 5, step_size: float = 0.01
) -> List[float]:
    """
    Symmetric range of ``steps // 2`` steps either side of ``base_value``.

    Example:
        >>> [round(v, 4) for v in create_sensitivity_ranges(0.10, steps=5, step_size=0.01)]
        [0.08, 0.09, 0.1, 0.11, 0.12]

    Raises:
        InputValidationError: Non-numeric base, steps < 1 or step_size <= 0
    """
    if not is_number(base_value):
        raise InputValidationError(f"base_value must be a number, got {base_value!r}")
    if not isinstance(steps, int) or steps < 1:
        raise InputValidationError(f"steps must be a positive integer, got {steps!r}")
    if not is_number(step_size) or step_size <= 0:
        raise InputValidationError(f"step_size must be positive, got {step_size!r}")

    half = steps // 2
    return [base_value + i * step_size for i in range(-half, half + 1)]


def generate_sensitivity_matrix(
    base: DCFInputs,
    wacc_range: Sequence[float],
    growth_range: Sequence[float],
    metric: SensitivityMetric = "equity_value",
    *,
    logger: Optional[logging.Logger] = None,
) -> List[List[Optional[float]]]:
    """
    Valuation grid over WACC (rows) and terminal growth (columns).

    Cells where ``wacc <= growth`` are None: a perpetuity terminal value is
    undefined there. Any other engine error propagates, because it means the
    base inputs themselves are invalid.

    Args:
        base: Base DCF inputs
        wacc_range: WACC values, one per row
        growth_range: Terminal growth values, one per column
        metric: "equity_value" (default) or "enterprise_value"
        logger: Logger override for this call

    Returns:
        Matrix of shape (len(wacc_range), len(growth_range))
    """
    log = logger or logging.getLogger(__name__)
    if metric not in ("equity_value", "enterprise_value"):
        raise InputValidationError(f"Unknown sensitivity metric {metric!r}")

    matrix: List[List[Optional[float]]] = []
    skipped = 0
    for wacc in wacc_range:
        row: List[Optional[float]] = []
        for growth in growth_range:
            if wacc <= growth:
                row.append(None)
                skipped += 1
                continue
            result = base.run(wacc=wacc, terminal_growth=growth, logger=log)
            row.append(getattr(result, metric))
        matrix.append(row)

    log.debug(
        f"Sensitivity grid {len(wacc_range)}x{len(growth_range)} on {metric}, "
        f"{skipped} undefined cell(s)"
    )
    return matrix


def sensitivity_table(
    base: DCFInputs,
    wacc_range: Sequence[float],
    growth_range: Sequence[float],
    metric: SensitivityMetric = "equity_value",
) -> pd.DataFrame:
    """Sensitivity grid as a DataFrame (index: WACC, columns: terminal growth)."""
    matrix = generate_sensitivity_matrix(base, wacc_range, growth_range, metric)
    df = pd.DataFrame(
        matrix,
        index=pd.Index(list(wacc_range), name="wacc"),
        columns=pd.Index(list(growth_range), name="terminal_growth"),
        dtype=float,
    )
    return df
