"""
Residual Workload Schemas
=========================
Inputs and outputs of the benefit-precedence waterfall and the
comparison of purchase alternatives.
"""

from decimal import Decimal
from typing import Any, Literal

from pydantic import field_validator

from p3_estimator.schemas.estimator import (
    AgentP3Tier,
    FrozenModel,
    clamp_non_negative,
    clamp_percent,
)

ResidualGuidance = Literal["fully_covered", "small_residual", "p3_recommended"]
ComparisonKey = Literal["pure_payg", "specialized_silos", "unified_p3"]


class ResidualInputs(FrozenModel):
    """Simplified usage inputs for the residual workload flow."""

    active_users: Decimal = Decimal("1000")
    queries_per_user_per_month: Decimal = Decimal("20")
    ptu_hours_per_month: Decimal = Decimal("100")

    # Other services drawing down the unified ACU pool
    fabric_monthly_spend: Decimal = Decimal("0")
    github_copilot_seats: Decimal = Decimal("0")
    github_copilot_price_per_seat: Decimal = Decimal("19")

    # Existing commitments
    existing_copilot_credits: Decimal = Decimal("0")
    existing_ptu_reservations: Decimal = Decimal("0")

    # ACO discount and standalone quotes (USD per month)
    aco_discount_pct: Decimal = Decimal("0")
    ptu_reservation_quote: Decimal = Decimal("0")
    copilot_credit_plan_quote: Decimal = Decimal("0")

    # MACC
    has_macc: bool = False
    macc_burn_pct: Decimal = Decimal("100")

    @field_validator(
        "active_users",
        "queries_per_user_per_month",
        "ptu_hours_per_month",
        "fabric_monthly_spend",
        "github_copilot_seats",
        "github_copilot_price_per_seat",
        "existing_copilot_credits",
        "existing_ptu_reservations",
        "ptu_reservation_quote",
        "copilot_credit_plan_quote",
        mode="before",
    )
    @classmethod
    def clamp_amounts(cls, v: Any) -> Any:
        return clamp_non_negative(v)

    @field_validator("aco_discount_pct", "macc_burn_pct", mode="before")
    @classmethod
    def clamp_percentages(cls, v: Any) -> Any:
        return clamp_percent(v)


class ResidualOutputs(FrozenModel):
    """Result of applying existing commitments before the P3 plan."""

    # Gross retail consumption (annual)
    total_copilot_queries: Decimal
    estimated_copilot_retail_cost: Decimal
    estimated_foundry_retail_cost: Decimal
    fabric_annual_cost: Decimal
    github_annual_cost: Decimal
    total_estimated_retail_cost: Decimal

    # Waterfall
    foundry_covered_by_reservation: Decimal
    remaining_foundry_retail_cost: Decimal
    copilot_covered_by_credits: Decimal
    remaining_copilot_retail_cost: Decimal
    total_covered_by_existing: Decimal
    total_residual_retail_cost: Decimal

    # P3 recommendation
    required_p3_acus: Decimal
    recommended_tier: AgentP3Tier | None
    p3_cost: Decimal
    p3_savings: Decimal
    p3_discount_pct: Decimal
    macc_burn_amount: Decimal
    guidance: ResidualGuidance


class ComparisonOption(FrozenModel):
    """One priced purchase alternative."""

    key: ComparisonKey
    label: str
    description: str
    annual_cost: Decimal


class FourWayComparison(FrozenModel):
    """PAYG+ACO vs. specialized silos vs. unified P3."""

    pure_payg: ComparisonOption
    specialized_silos: ComparisonOption
    unified_p3: ComparisonOption
    winner_key: ComparisonKey
    win_guidance: str
    aco_higher_than_p3: bool


class ResidualReport(FrozenModel):
    """Residual outputs together with the comparison they feed."""

    outputs: ResidualOutputs
    comparison: FourWayComparison
