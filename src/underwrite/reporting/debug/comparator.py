# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Valuation Path Comparison Debug Utilities

Audits a projection's embedded valuation (Path B) against a standalone run of
the DCF engine over the same unlevered cash flows (Path A). Comparison walks
the valuation in calculation order (FCF, discount factors, present values,
terminal value, PV of terminal value, enterprise value, equity value) and
reports every divergence beyond tolerance, flagging the first one as the
likely root cause.

Since the builder values through the same engine, a healthy build never
diverges; any divergence means a change broke the single-engine contract.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, List, Optional, Sequence

from pydantic import Field

from ...core.primitives import CalculationSettings, Model, Severity
from ...projection.builder import build_projection
from ...projection.params import ProjectionParams
from ...projection.results import ProjectionResult
from ...valuation.dcf import ValuationResult
from ...valuation.sensitivity import DCFInputs


class DivergenceType(str, Enum):
    INPUT_MISMATCH = "INPUT_MISMATCH"
    FCF_MISMATCH = "FCF_MISMATCH"
    DISCOUNT_FACTOR_MISMATCH = "DISCOUNT_FACTOR_MISMATCH"
    PV_MISMATCH = "PV_MISMATCH"
    TERMINAL_VALUE_MISMATCH = "TERMINAL_VALUE_MISMATCH"
    PV_TERMINAL_MISMATCH = "PV_TERMINAL_MISMATCH"
    ENTERPRISE_VALUE_MISMATCH = "ENTERPRISE_VALUE_MISMATCH"
    EQUITY_VALUE_MISMATCH = "EQUITY_VALUE_MISMATCH"

    @property
    def severity(self) -> Severity:
        return _SEVERITIES[self]


_SEVERITIES: Dict[DivergenceType, Severity] = {
    DivergenceType.INPUT_MISMATCH: Severity.CRITICAL,
    DivergenceType.FCF_MISMATCH: Severity.HIGH,
    DivergenceType.DISCOUNT_FACTOR_MISMATCH: Severity.MEDIUM,
    DivergenceType.PV_MISMATCH: Severity.HIGH,
    DivergenceType.TERMINAL_VALUE_MISMATCH: Severity.HIGH,
    DivergenceType.PV_TERMINAL_MISMATCH: Severity.HIGH,
    DivergenceType.ENTERPRISE_VALUE_MISMATCH: Severity.CRITICAL,
    DivergenceType.EQUITY_VALUE_MISMATCH: Severity.CRITICAL,
}

_ROOT_CAUSES: Dict[DivergenceType, List[str]] = {
    DivergenceType.INPUT_MISMATCH: [
        "The two paths cover a different number of projection years",
    ],
    DivergenceType.FCF_MISMATCH: [
        "One path received levered FCF (to equity) instead of unlevered FCF",
        "Different treatment of working capital changes or taxes",
    ],
    DivergenceType.DISCOUNT_FACTOR_MISMATCH: [
        "Different WACC values",
        "Different discounting convention (mid-year vs end-of-year)",
    ],
    DivergenceType.PV_MISMATCH: [
        "Propagated from an FCF or discount factor difference",
    ],
    DivergenceType.TERMINAL_VALUE_MISMATCH: [
        "Different terminal growth rates or final-year FCF",
        "One path using the exit multiple method and the other perpetuity growth",
    ],
    DivergenceType.PV_TERMINAL_MISMATCH: [
        "Terminal value discounted over a different number of periods",
    ],
    DivergenceType.ENTERPRISE_VALUE_MISMATCH: [
        "Propagated from an explicit-period or terminal value difference",
    ],
    DivergenceType.EQUITY_VALUE_MISMATCH: [
        "Net debt taken at a different date (ending instead of opening debt)",
        "Cash counted twice in the equity bridge",
        "Different associates or minority interest adjustments",
    ],
}


class ValueComparison(Model):
    """One figure as computed by both paths."""

    label: str
    year: Optional[int] = None
    path_a: float
    path_b: float

    @property
    def difference(self) -> float:
        return abs(self.path_a - self.path_b)

    @property
    def relative_difference(self) -> float:
        return self.difference / abs(self.path_a) if self.path_a != 0 else 0.0

    def matches(self, tolerance: float) -> bool:
        return self.difference <= tolerance


class Divergence(Model):
    type: DivergenceType
    severity: Severity
    message: str
    year: Optional[int] = None
    path_a: Optional[float] = None
    path_b: Optional[float] = None
    difference: Optional[float] = None
    relative_difference: Optional[float] = None

    @property
    def root_causes(self) -> List[str]:
        return _ROOT_CAUSES[self.type]


class ValuationComparison(Model):
    """
    Outcome of a valuation path audit.

    Attributes:
        tolerance: Absolute tolerance used for every figure
        valid: False when the paths could not be compared at all
        divergences: Divergences in calculation order
        fcf, discount_factors, present_values: Year-by-year comparisons
        terminal_value, pv_terminal_value, enterprise_value, equity_value:
            Scalar comparisons (None when the comparison was not valid)
    """

    tolerance: float
    valid: bool = True
    divergences: List[Divergence] = Field(default_factory=list)
    fcf: List[ValueComparison] = Field(default_factory=list)
    discount_factors: List[ValueComparison] = Field(default_factory=list)
    present_values: List[ValueComparison] = Field(default_factory=list)
    terminal_value: Optional[ValueComparison] = None
    pv_terminal_value: Optional[ValueComparison] = None
    enterprise_value: Optional[ValueComparison] = None
    equity_value: Optional[ValueComparison] = None

    @property
    def all_match(self) -> bool:
        return self.valid and not self.divergences

    @property
    def first_divergence(self) -> Optional[Divergence]:
        return self.divergences[0] if self.divergences else None


def _divergence(
    kind: DivergenceType, comparison: ValueComparison, message: str
) -> Divergence:
    return Divergence(
        type=kind,
        severity=kind.severity,
        message=message,
        year=comparison.year,
        path_a=comparison.path_a,
        path_b=comparison.path_b,
        difference=comparison.difference,
        relative_difference=comparison.relative_difference,
    )


def _compare_series(
    label: str,
    kind: DivergenceType,
    years: Sequence[int],
    path_a: Sequence[float],
    path_b: Sequence[float],
    tolerance: float,
    divergences: List[Divergence],
) -> List[ValueComparison]:
    """Year-by-year comparison; only the first diverging year is reported."""
    comparisons = [
        ValueComparison(label=label, year=year, path_a=a, path_b=b)
        for year, a, b in zip(years, path_a, path_b)
    ]
    for comparison in comparisons:
        if not comparison.matches(tolerance):
            divergences.append(
                _divergence(kind, comparison, f"{label} diverges at {comparison.year}")
            )
            break
    return comparisons


def compare_valuation_paths(
    projection: ProjectionResult,
    standalone: ValuationResult,
    tolerance: float = 1e-6,
    logger: Optional[logging.Logger] = None,
) -> ValuationComparison:
    """
    Compare a projection's embedded valuation with a standalone DCF run.

    Args:
        projection: Output of ``build_projection`` (Path B)
        standalone: Output of ``calculate_dcf`` over the projection's
            unlevered FCF series (Path A)
        tolerance: Absolute tolerance for every compared figure
        logger: Logger override for this call

    Returns:
        ValuationComparison; ``all_match`` is True for a healthy build

    Example:
        ```python
        result = build_projection(params)
        standalone = DCFInputs.from_projection(result).run()
        comparison = compare_valuation_paths(result, standalone)
        if not comparison.all_match:
            print(format_comparison(comparison))
        ```
    """
    log = logger or logging.getLogger(__name__)
    embedded = projection.valuation
    rows = projection.rows

    if len(standalone.breakdown) != len(rows):
        divergence = Divergence(
            type=DivergenceType.INPUT_MISMATCH,
            severity=DivergenceType.INPUT_MISMATCH.severity,
            message=(
                f"Path A covers {len(standalone.breakdown)} years, "
                f"Path B covers {len(rows)}"
            ),
        )
        log.warning(divergence.message)
        return ValuationComparison(tolerance=tolerance, valid=False, divergences=[divergence])

    divergences: List[Divergence] = []
    years = [row.year for row in rows]

    fcf = _compare_series(
        "Unlevered FCF",
        DivergenceType.FCF_MISMATCH,
        years,
        standalone.fcf_series,
        [row.unlevered_fcf for row in rows],
        tolerance,
        divergences,
    )
    factors = _compare_series(
        "Discount factor",
        DivergenceType.DISCOUNT_FACTOR_MISMATCH,
        years,
        standalone.discount_factors,
        embedded.discount_factors,
        tolerance,
        divergences,
    )
    present_values = _compare_series(
        "PV of FCF",
        DivergenceType.PV_MISMATCH,
        years,
        [r.present_value for r in standalone.breakdown],
        [r.present_value for r in embedded.breakdown],
        tolerance,
        divergences,
    )

    scalars = {}
    for name, kind, label in (
        ("terminal_value", DivergenceType.TERMINAL_VALUE_MISMATCH, "Terminal value"),
        ("pv_of_terminal_value", DivergenceType.PV_TERMINAL_MISMATCH, "PV of terminal value"),
        ("enterprise_value", DivergenceType.ENTERPRISE_VALUE_MISMATCH, "Enterprise value"),
        ("equity_value", DivergenceType.EQUITY_VALUE_MISMATCH, "Equity value"),
    ):
        comparison = ValueComparison(
            label=label, path_a=getattr(standalone, name), path_b=getattr(embedded, name)
        )
        if not comparison.matches(tolerance):
            divergences.append(_divergence(kind, comparison, f"{label} differs"))
        scalars[name] = comparison

    result = ValuationComparison(
        tolerance=tolerance,
        divergences=divergences,
        fcf=fcf,
        discount_factors=factors,
        present_values=present_values,
        terminal_value=scalars["terminal_value"],
        pv_terminal_value=scalars["pv_of_terminal_value"],
        enterprise_value=scalars["enterprise_value"],
        equity_value=scalars["equity_value"],
    )

    if result.all_match:
        log.debug(f"Valuation paths agree within {tolerance}")
    else:
        first = result.first_divergence
        log.warning(
            f"{len(divergences)} valuation divergence(s); first: {first.type.value} "
            f"({first.message})"
        )
        for cause in first.root_causes:
            log.debug(f"  possible cause: {cause}")
    return result


def audit_projection(
    params: ProjectionParams,
    tolerance: Optional[float] = None,
    settings: Optional[CalculationSettings] = None,
    logger: Optional[logging.Logger] = None,
) -> ValuationComparison:
    """
    Build a projection and audit its valuation against a standalone DCF run.

    Args:
        params: Projection parameters
        tolerance: Absolute tolerance; defaults to ``settings.comparator_tolerance``
        settings: Settings passed to the projection build
        logger: Logger override for this call
    """
    settings = settings or CalculationSettings()
    log = logger or logging.getLogger(__name__)
    projection = build_projection(params, settings=settings, logger=log)
    standalone = DCFInputs.from_projection(projection).run(logger=log)
    return compare_valuation_paths(
        projection,
        standalone,
        tolerance=settings.comparator_tolerance if tolerance is None else tolerance,
        logger=log,
    )


def format_comparison(comparison: ValuationComparison, precision: int = 6) -> str:
    """Format an audit result for display."""
    lines = ["Valuation Path Comparison", "=" * 60]

    if not comparison.valid:
        lines.append("INVALID: " + comparison.divergences[0].message)
        return "\n".join(lines)

    if comparison.all_match:
        lines.append("RESULT: both paths produce identical valuations")
        lines.append(f"  Tolerance:        {comparison.tolerance:g}")
        lines.append(f"  Enterprise value: {comparison.enterprise_value.path_a:,.{precision}f}")
        lines.append(f"  Equity value:     {comparison.equity_value.path_a:,.{precision}f}")
        return "\n".join(lines)

    lines.append(f"RESULT: {len(comparison.divergences)} divergence(s)")
    lines.append(f"  First divergence: {comparison.first_divergence.type.value}")
    for index, d in enumerate(comparison.divergences, start=1):
        year = f" ({d.year})" if d.year is not None else ""
        lines.append(f"{index}. {d.type.value}{year} [{d.severity.value}]")
        if d.path_a is not None:
            lines.append(f"   Path A: {d.path_a:,.{precision}f}")
            lines.append(f"   Path B: {d.path_b:,.{precision}f}")
            lines.append(f"   Diff:   {d.difference:,.{precision}f}")
    lines.append("")
    lines.append("Possible causes of the first divergence:")
    for cause in comparison.first_divergence.root_causes:
        lines.append(f"  - {cause}")
    return "\n".join(lines)
