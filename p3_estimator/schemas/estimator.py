"""
Estimator Schemas
=================
Pydantic models for the rate sheet, usage inputs and estimator outputs.
"""

import math
from decimal import Decimal, InvalidOperation
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

ViewMode = Literal["seller", "customer"]
CustomerStartingPoint = Literal["greenfield", "macc_only", "copilot_only", "copilot_macc"]
WorkloadType = Literal["qa", "summarization", "extraction", "multi_step_agent", "rag"]
WorkloadIntensity = Literal["light", "medium", "heavy"]
VolatilityScore = Literal["low", "medium", "high"]
PromptModelType = Literal["basic", "standard", "premium"]


def clamp_non_negative(value: Any) -> Any:
    """Coerce negative, NaN or unparseable numbers to zero."""
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, float):
        if math.isnan(value):
            return Decimal("0")
        value = Decimal(str(value))
    elif isinstance(value, (int, str)):
        try:
            value = Decimal(str(value).strip() or "0")
        except InvalidOperation:
            return Decimal("0")
    if isinstance(value, Decimal) and (value.is_nan() or value < 0):
        return Decimal("0")
    return value


def clamp_percent(value: Any) -> Any:
    value = clamp_non_negative(value)
    if isinstance(value, Decimal) and value > 100:
        return Decimal("100")
    return value


class FrozenModel(BaseModel):
    """Immutable value object."""

    model_config = ConfigDict(frozen=True)


class AgentP3Tier(FrozenModel):
    """A discrete Agent pre-purchase plan tier."""

    tier: int
    acus: Decimal
    estimated_cost: Decimal
    discount_pct: Decimal

    @field_validator("acus", "estimated_cost", "discount_pct", mode="before")
    @classmethod
    def to_decimal(cls, v: Any) -> Any:
        return clamp_non_negative(v)


DEFAULT_P3_TIERS: tuple[AgentP3Tier, ...] = (
    AgentP3Tier(tier=1, acus=20000, estimated_cost=19000, discount_pct=5),
    AgentP3Tier(tier=2, acus=100000, estimated_cost=90000, discount_pct=10),
    AgentP3Tier(tier=3, acus=500000, estimated_cost=425000, discount_pct=20),
)


class Assumptions(FrozenModel):
    """
    Rate sheet consumed by the pricing engine.

    Field defaults are the canonical fallback values used when no
    override has been configured.
    """

    copilot_credit_usd: Decimal = Decimal("0.01")
    ptu_usd_per_hour: Decimal = Decimal("1.00")
    tenant_graph_grounding_credits: Decimal = Decimal("10")
    generative_answer_credits: Decimal = Decimal("2")
    non_tenant_grounding_credits: Decimal = Decimal("2")
    prompt_basic_per_10: Decimal = Decimal("1")
    prompt_standard_per_10: Decimal = Decimal("15")
    prompt_premium_per_10: Decimal = Decimal("100")
    avg_actions_per_query: Decimal = Decimal("5")
    credits_per_action: Decimal = Decimal("1")
    credits_per_flow_run: Decimal = Decimal("25")
    credits_per_trigger_run: Decimal = Decimal("25")
    agent_p3_tiers: tuple[AgentP3Tier, ...] = DEFAULT_P3_TIERS
    use_api_pricing: bool = False

    @field_validator(
        "copilot_credit_usd",
        "ptu_usd_per_hour",
        "tenant_graph_grounding_credits",
        "generative_answer_credits",
        "non_tenant_grounding_credits",
        "prompt_basic_per_10",
        "prompt_standard_per_10",
        "prompt_premium_per_10",
        "avg_actions_per_query",
        "credits_per_action",
        "credits_per_flow_run",
        "credits_per_trigger_run",
        mode="before",
    )
    @classmethod
    def to_decimal(cls, v: Any) -> Any:
        return clamp_non_negative(v)


class CustomerContext(FrozenModel):
    """Commercial context of the customer."""

    starting_point: CustomerStartingPoint = "greenfield"
    has_macc: bool = False
    macc_remaining: Decimal | None = None
    macc_end_date: str | None = None
    discount_percent: Decimal | None = None
    has_copilot: bool = False
    current_monthly_burn: Decimal | None = None

    @field_validator("macc_remaining", "current_monthly_burn", mode="before")
    @classmethod
    def clamp_amounts(cls, v: Any) -> Any:
        return clamp_non_negative(v)

    @field_validator("discount_percent", mode="before")
    @classmethod
    def clamp_discount(cls, v: Any) -> Any:
        return clamp_percent(v)


class UsageVariability(FrozenModel):
    """Workload shape driving the P50/P90 spread."""

    workload_type: WorkloadType = "qa"
    workload_intensity: WorkloadIntensity = "medium"
    avg_turns_per_task: Decimal = Decimal("3")
    tasks_per_user_per_week: Decimal = Decimal("10")
    active_user_percent: Decimal = Decimal("60")
    tool_calling_percent: Decimal = Decimal("20")
    long_context_percent: Decimal = Decimal("15")

    @field_validator("avg_turns_per_task", "tasks_per_user_per_week", mode="before")
    @classmethod
    def clamp_counts(cls, v: Any) -> Any:
        return clamp_non_negative(v)

    @field_validator(
        "active_user_percent", "tool_calling_percent", "long_context_percent", mode="before"
    )
    @classmethod
    def clamp_percentages(cls, v: Any) -> Any:
        return clamp_percent(v)


class Guardrails(FrozenModel):
    """Spend controls. Informational except for the monthly cap."""

    monthly_cap_enabled: bool = False
    monthly_cap_amount: Decimal | None = None
    daily_cap_enabled: bool = False
    daily_cap_amount: Decimal | None = None
    environment_separation: bool = False
    rbac_enabled: bool = False
    throttling_enabled: bool = False

    @field_validator("monthly_cap_amount", "daily_cap_amount", mode="before")
    @classmethod
    def clamp_amounts(cls, v: Any) -> Any:
        return clamp_non_negative(v)


class EstimatorInputs(FrozenModel):
    """Usage intensities for the Copilot Studio and Foundry estimate."""

    view_mode: ViewMode = "seller"
    customer_context: CustomerContext = Field(default_factory=CustomerContext)
    usage_variability: UsageVariability = Field(default_factory=UsageVariability)
    guardrails: Guardrails = Field(default_factory=Guardrails)

    # Traffic
    monthly_users: Decimal = Decimal("1000")
    queries_per_user_per_month: Decimal = Decimal("20")

    # Knowledge
    knowledge_pct: Decimal = Decimal("50")
    tenant_graph_pct: Decimal = Decimal("30")

    # Actions & topics
    actions_pct: Decimal = Decimal("40")
    flows_configured: int = 5
    flow_runs_per_month: Decimal = Decimal("500")

    # Autonomous triggers
    triggers_count: int = 3
    trigger_runs_per_month: Decimal = Decimal("100")

    # Prompt tools
    use_prompt_tools: bool = False
    prompt_model_type: PromptModelType = "standard"
    prompt_responses_per_month: Decimal = Decimal("0")

    # Foundry PTU
    ptu_hours_per_month: Decimal = Decimal("100")

    @field_validator(
        "monthly_users",
        "queries_per_user_per_month",
        "flow_runs_per_month",
        "trigger_runs_per_month",
        "prompt_responses_per_month",
        "ptu_hours_per_month",
        mode="before",
    )
    @classmethod
    def clamp_volumes(cls, v: Any) -> Any:
        return clamp_non_negative(v)

    @field_validator("knowledge_pct", "tenant_graph_pct", "actions_pct", mode="before")
    @classmethod
    def clamp_percentages(cls, v: Any) -> Any:
        return clamp_percent(v)

    @field_validator("flows_configured", "triggers_count", mode="before")
    @classmethod
    def clamp_counts(cls, v: Any) -> Any:
        v = clamp_non_negative(v)
        return int(v) if isinstance(v, Decimal) else v


class EstimatorOutputs(FrozenModel):
    """Derived estimate, recomputed fresh for every input change."""

    # Traffic
    monthly_queries: Decimal
    annual_queries: Decimal

    # Knowledge
    annual_knowledge_queries: Decimal
    annual_tenant_graph_queries: Decimal
    annual_non_tenant_queries: Decimal
    credits_knowledge: Decimal

    # Actions
    annual_action_queries: Decimal
    annual_actions: Decimal
    credits_actions: Decimal
    credits_flows: Decimal

    credits_triggers: Decimal
    credits_prompts: Decimal

    # Totals
    annual_copilot_credits: Decimal
    annual_ptu_hours: Decimal
    copilot_payg_cost: Decimal
    foundry_payg_cost: Decimal
    total_payg_cost_usd: Decimal

    # P50/P90 ranges
    p50_acu: Decimal
    p90_acu: Decimal
    p50_monthly_cost: Decimal
    p90_monthly_cost: Decimal
    volatility_score: VolatilityScore

    # MACC coverage
    macc_funded_amount_p50: Decimal
    macc_funded_amount_p90: Decimal
    net_new_cash_p50: Decimal
    net_new_cash_p90: Decimal
    months_of_runway_from_macc: int | None

    # Guardrail capping
    capped_p90_monthly_cost: Decimal | None
    worst_case_uncapped: Decimal

    # Tier recommendation
    acus_required: Decimal
    recommended_tier: AgentP3Tier | None
    estimated_plan_cost: Decimal
    estimated_savings: Decimal
    estimated_discount_pct: Decimal
