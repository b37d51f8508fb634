# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Post-projection analysis: capital structure advice, debt capacity sizing,
industry benchmarks and stress testing.
"""

from .benchmarks import (
    COVENANT_BENCHMARKS,
    INDUSTRY_BENCHMARKS,
    IndustryBenchmark,
    LeverageBand,
    get_covenant_benchmark,
    get_industry_benchmark,
)
from .capacity import (
    CapacityRecommendation,
    DebtCapacity,
    StructureAlternative,
    calculate_debt_capacity,
    debt_capacity_sensitivity,
    generate_alternative_structures,
)
from .capital_structure import (
    AdvisoryReport,
    CurrentState,
    ImpactAnalysis,
    OptimalStructure,
    StructuralIssue,
    TransitionPlan,
    assess_capital_structure,
)
from .stress import (
    STRESS_PRESETS,
    StressOutcome,
    StressScenario,
    StressShocks,
    StressTestReport,
    apply_shocks,
    run_stress_test,
)

__all__ = [
    "AdvisoryReport",
    "COVENANT_BENCHMARKS",
    "CapacityRecommendation",
    "CurrentState",
    "DebtCapacity",
    "INDUSTRY_BENCHMARKS",
    "ImpactAnalysis",
    "IndustryBenchmark",
    "LeverageBand",
    "OptimalStructure",
    "STRESS_PRESETS",
    "StressOutcome",
    "StressScenario",
    "StressShocks",
    "StressTestReport",
    "StructuralIssue",
    "StructureAlternative",
    "TransitionPlan",
    "apply_shocks",
    "assess_capital_structure",
    "calculate_debt_capacity",
    "debt_capacity_sensitivity",
    "generate_alternative_structures",
    "get_covenant_benchmark",
    "get_industry_benchmark",
    "run_stress_test",
]
