"""
Pydantic Schemas
================
Value objects consumed and produced by the pricing engine.
"""

from p3_estimator.schemas.estimator import (
    AgentP3Tier,
    Assumptions,
    CustomerContext,
    EstimatorInputs,
    EstimatorOutputs,
    Guardrails,
    UsageVariability,
)
from p3_estimator.schemas.residual import (
    ComparisonOption,
    FourWayComparison,
    ResidualInputs,
    ResidualOutputs,
    ResidualReport,
)

__all__ = [
    "AgentP3Tier",
    "Assumptions",
    "CustomerContext",
    "UsageVariability",
    "Guardrails",
    "EstimatorInputs",
    "EstimatorOutputs",
    "ResidualInputs",
    "ResidualOutputs",
    "ComparisonOption",
    "FourWayComparison",
    "ResidualReport",
]
