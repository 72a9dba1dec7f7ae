"""
Core Business Logic
====================
Pricing engine, rate sheet loading and display formatting.
"""

from p3_estimator.core.assumptions import AssumptionsStore, get_assumptions_store
from p3_estimator.core.calculations import (
    calculate_four_way_comparison,
    calculate_outputs,
    calculate_residual_outputs,
    calculate_volatility_score,
    get_variability_multipliers,
    select_tier,
)

__all__ = [
    "AssumptionsStore",
    "get_assumptions_store",
    "calculate_outputs",
    "calculate_residual_outputs",
    "calculate_four_way_comparison",
    "get_variability_multipliers",
    "calculate_volatility_score",
    "select_tier",
]
