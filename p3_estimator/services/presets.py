"""
Presets & Input Mapping
=======================
Scenario presets and mappings from discovery/survey answers to
estimator inputs.
"""

from typing import Any, Literal, Optional, TypeVar

from pydantic import BaseModel, Field

from p3_estimator.schemas.estimator import (
    CustomerContext,
    EstimatorInputs,
    FrozenModel,
    Guardrails,
    UsageVariability,
)
from p3_estimator.schemas.residual import ResidualInputs

Segment = Literal["smb", "smc", "enterprise"]

ModelT = TypeVar("ModelT", bound=BaseModel)


def _merge(model: ModelT, updates: dict[str, Any]) -> ModelT:
    """Validated copy of a frozen model with ``updates`` applied."""
    return type(model).model_validate({**model.model_dump(), **updates})


class ScenarioPreset(FrozenModel):
    """Named starting point for the variability-aware estimator."""

    id: str
    name: str
    description: str
    customer_context: dict[str, Any] = Field(default_factory=dict)
    usage_variability: dict[str, Any] = Field(default_factory=dict)
    guardrails: dict[str, Any] = Field(default_factory=dict)
    traffic_overrides: dict[str, Any] = Field(default_factory=dict)


SCENARIO_PRESETS: tuple[ScenarioPreset, ...] = (
    ScenarioPreset(
        id="pilot",
        name="Pilot",
        description="Small MACC, No Copilot",
        customer_context={
            "starting_point": "macc_only",
            "has_macc": True,
            "macc_remaining": 50000,
            "has_copilot": False,
        },
        usage_variability={
            "workload_type": "qa",
            "workload_intensity": "light",
            "avg_turns_per_task": 2,
            "active_user_percent": 30,
            "tool_calling_percent": 10,
        },
        guardrails={
            "monthly_cap_enabled": True,
            "monthly_cap_amount": 5000,
            "rbac_enabled": True,
        },
        traffic_overrides={"monthly_users": 500, "queries_per_user_per_month": 10},
    ),
    ScenarioPreset(
        id="finance_safe",
        name="Finance-safe",
        description="Capped + RBAC + throttling",
        customer_context={
            "starting_point": "copilot_macc",
            "has_macc": True,
            "macc_remaining": 200000,
            "has_copilot": True,
        },
        usage_variability={
            "workload_type": "summarization",
            "workload_intensity": "medium",
            "avg_turns_per_task": 3,
            "active_user_percent": 50,
            "tool_calling_percent": 15,
        },
        guardrails={
            "monthly_cap_enabled": True,
            "monthly_cap_amount": 15000,
            "daily_cap_enabled": True,
            "daily_cap_amount": 750,
            "rbac_enabled": True,
            "throttling_enabled": True,
            "environment_separation": True,
        },
    ),
    ScenarioPreset(
        id="power_users",
        name="Power Users",
        description="Heavy + tool calling",
        customer_context={
            "starting_point": "copilot_macc",
            "has_macc": True,
            "macc_remaining": 500000,
            "has_copilot": True,
        },
        usage_variability={
            "workload_type": "multi_step_agent",
            "workload_intensity": "heavy",
            "avg_turns_per_task": 6,
            "active_user_percent": 80,
            "tool_calling_percent": 60,
            "long_context_percent": 40,
        },
        guardrails={
            "monthly_cap_enabled": False,
            "rbac_enabled": True,
            "environment_separation": True,
        },
        traffic_overrides={"monthly_users": 2000, "queries_per_user_per_month": 40},
    ),
)


def get_preset(preset_id: str) -> Optional[ScenarioPreset]:
    """Look up a preset by id."""
    return next((p for p in SCENARIO_PRESETS if p.id == preset_id), None)


def apply_preset(preset: ScenarioPreset, inputs: Optional[EstimatorInputs] = None) -> EstimatorInputs:
    """
    Apply a preset to ``inputs`` (defaults when omitted).

    Context, variability and guardrails are rebuilt from their defaults
    with the preset on top; only traffic volumes carry over from ``inputs``.
    """
    base = inputs or EstimatorInputs()
    return _merge(
        base,
        {
            "customer_context": _merge(CustomerContext(), preset.customer_context),
            "usage_variability": _merge(UsageVariability(), preset.usage_variability),
            "guardrails": _merge(Guardrails(), preset.guardrails),
            **preset.traffic_overrides,
        },
    )


# Survey answers -> EstimatorInputs

class SurveyAnswers(BaseModel):
    """Answers from the qualification survey. Unknown values fall back to defaults."""

    org_size: str = ""
    industry: str = ""
    ai_maturity: str = ""
    use_case: str = ""
    volume: str = ""
    complexity: str = ""


ORG_SIZE_USERS = {
    "500-749": 200,
    "750-999": 350,
    "1000-2499": 600,
    "2500-4999": 1200,
    "5000-9999": 2500,
    "10000-19999": 5000,
    "20000-49999": 10000,
    "50000+": 20000,
}

VOLUME_QUERIES_PER_USER = {
    "0-1000": 5,
    "1000-10000": 15,
    "10000-50000": 30,
    "50000-200000": 50,
    "200000+": 80,
}

VOLUME_FLOW_RUNS = {
    "0-1000": 100,
    "1000-10000": 500,
    "10000-50000": 2000,
    "50000-200000": 5000,
    "200000+": 10000,
}

COMPLEXITY_VARIABILITY = {
    "low": {
        "workload_type": "qa",
        "workload_intensity": "light",
        "avg_turns_per_task": 2,
        "tool_calling_percent": 5,
        "long_context_percent": 5,
    },
    "medium": {
        "workload_type": "summarization",
        "workload_intensity": "medium",
        "avg_turns_per_task": 3,
        "tool_calling_percent": 20,
        "long_context_percent": 15,
    },
    "high": {
        "workload_type": "multi_step_agent",
        "workload_intensity": "heavy",
        "avg_turns_per_task": 6,
        "tool_calling_percent": 50,
        "long_context_percent": 35,
    },
}

# (prompt model type, share of monthly queries producing a prompt response)
COMPLEXITY_PROMPT_TOOLS = {
    "medium": ("standard", 0.05),
    "high": ("premium", 0.1),
}

USE_CASE_MIX = {
    "it_ops": {"knowledge_pct": 40, "actions_pct": 60, "flows_configured": 8,
               "triggers_count": 5, "trigger_runs_per_month": 500},
    "customer_support": {"knowledge_pct": 70, "actions_pct": 30, "flows_configured": 5,
                         "triggers_count": 3, "trigger_runs_per_month": 200},
    "employee_support": {"knowledge_pct": 60, "actions_pct": 40, "flows_configured": 4,
                         "triggers_count": 2, "trigger_runs_per_month": 100},
    "security_compliance": {"knowledge_pct": 50, "actions_pct": 50, "flows_configured": 6,
                            "triggers_count": 4, "trigger_runs_per_month": 300},
    "finance_proc": {"knowledge_pct": 45, "actions_pct": 55, "flows_configured": 7,
                     "triggers_count": 3, "trigger_runs_per_month": 250},
    "custom_workflows": {"knowledge_pct": 30, "actions_pct": 70, "flows_configured": 10,
                         "triggers_count": 6, "trigger_runs_per_month": 400},
}

REGULATED_INDUSTRIES = {"financial_services", "healthcare"}


def map_survey_to_inputs(answers: SurveyAnswers) -> EstimatorInputs:
    """Pre-configure the estimator from survey answers."""
    base = EstimatorInputs()

    monthly_users = ORG_SIZE_USERS.get(answers.org_size, int(base.monthly_users))
    queries = VOLUME_QUERIES_PER_USER.get(answers.volume, int(base.queries_per_user_per_month))

    updates: dict[str, Any] = {
        "view_mode": "seller",
        "monthly_users": monthly_users,
        "queries_per_user_per_month": queries,
        "flow_runs_per_month": VOLUME_FLOW_RUNS.get(answers.volume, base.flow_runs_per_month),
    }
    updates.update(USE_CASE_MIX.get(answers.use_case, {}))

    variability = dict(COMPLEXITY_VARIABILITY.get(answers.complexity, COMPLEXITY_VARIABILITY["medium"]))
    guardrails: dict[str, Any] = {}

    if answers.ai_maturity == "early":
        variability["active_user_percent"] = 30
        guardrails.update(monthly_cap_enabled=True, monthly_cap_amount=5000, rbac_enabled=True)
    elif answers.ai_maturity == "mature":
        variability["active_user_percent"] = 75

    if answers.industry in REGULATED_INDUSTRIES:
        guardrails.update(rbac_enabled=True, environment_separation=True, throttling_enabled=True)

    prompt_tools = COMPLEXITY_PROMPT_TOOLS.get(answers.complexity)
    if prompt_tools:
        model_type, share = prompt_tools
        updates.update(
            use_prompt_tools=True,
            prompt_model_type=model_type,
            prompt_responses_per_month=round(monthly_users * queries * share),
        )

    updates["usage_variability"] = _merge(base.usage_variability, variability)
    updates["guardrails"] = _merge(base.guardrails, guardrails)
    return _merge(base, updates)


# Discovery (segment + use cases) -> ResidualInputs

class SegmentDefaults(FrozenModel):
    label: str
    users: int
    ptu_hours: int
    github_seats: int
    fabric_spend: int
    queries_per_user: int
    has_macc: bool
    aco_discount_pct: int


SEGMENT_DEFAULTS: dict[str, SegmentDefaults] = {
    "smb": SegmentDefaults(label="SMB", users=100, ptu_hours=0, github_seats=10, fabric_spend=0,
                           queries_per_user=15, has_macc=False, aco_discount_pct=5),
    "smc": SegmentDefaults(label="SMC", users=500, ptu_hours=20, github_seats=50, fabric_spend=1000,
                           queries_per_user=25, has_macc=False, aco_discount_pct=10),
    "enterprise": SegmentDefaults(label="Enterprise", users=3000, ptu_hours=100, github_seats=200,
                                  fabric_spend=5000, queries_per_user=30, has_macc=True,
                                  aco_discount_pct=15),
}

# (active users, queries/user/month, PTU hours/month, Fabric $/month, GitHub seats)
USE_CASE_RESIDUAL_DEFAULTS: dict[str, tuple[int, int, int, int, int]] = {
    "contact_center": (800, 100, 40, 500, 20),
    "claims_processing": (300, 50, 30, 2000, 15),
    "fraud_aml": (80, 60, 80, 4000, 10),
    "predictive_maintenance": (300, 30, 80, 5000, 15),
    "contract_lifecycle": (150, 20, 10, 1500, 10),
    "knowledge_mgmt": (600, 20, 10, 1000, 25),
    "order_to_cash": (200, 35, 20, 1000, 10),
    "loan_application": (200, 40, 25, 1500, 10),
    "supply_chain": (300, 40, 60, 3000, 20),
    "rev_cycle": (250, 30, 20, 2000, 15),
    "regulatory_intelligence": (100, 20, 15, 2000, 10),
    "market_research": (100, 30, 20, 2000, 10),
    "content_gen_ops": (200, 40, 15, 500, 30),
    "frontline_productivity": (1000, 15, 10, 500, 10),
    "rd_product_design": (150, 25, 50, 3000, 40),
    "inventory_planning": (100, 20, 30, 4000, 10),
    "agentic_commerce": (2000, 25, 30, 1000, 15),
    "interactive_brand_agent": (1000, 30, 20, 500, 10),
    "procurement_sourcing": (150, 25, 10, 1000, 10),
    "field_operations": (500, 20, 30, 1000, 10),
    "personalized_patient": (2000, 10, 15, 1500, 10),
    "agentic_capital": (50, 30, 40, 5000, 20),
}


class DiscoveryState(BaseModel):
    """Segment and use cases picked during discovery."""

    segment: Optional[Segment] = None
    selected_use_case_ids: list[str] = Field(default_factory=list)


def map_discovery_to_residual_inputs(discovery: DiscoveryState) -> ResidualInputs:
    """
    Residual estimator inputs for a discovery outcome.

    Segment defaults apply first; the first selected use case with known
    defaults then overrides the volume fields.
    """
    updates: dict[str, Any] = {}

    segment = SEGMENT_DEFAULTS.get(discovery.segment) if discovery.segment else None
    if segment:
        updates.update(
            active_users=segment.users,
            queries_per_user_per_month=segment.queries_per_user,
            ptu_hours_per_month=segment.ptu_hours,
            github_copilot_seats=segment.github_seats,
            fabric_monthly_spend=segment.fabric_spend,
            has_macc=segment.has_macc,
            aco_discount_pct=segment.aco_discount_pct,
        )

    if discovery.selected_use_case_ids:
        defaults = USE_CASE_RESIDUAL_DEFAULTS.get(discovery.selected_use_case_ids[0])
        if defaults:
            users, queries, ptu_hours, fabric, seats = defaults
            updates.update(
                active_users=users,
                queries_per_user_per_month=queries,
                ptu_hours_per_month=ptu_hours,
                fabric_monthly_spend=fabric,
                github_copilot_seats=seats,
            )

    return _merge(ResidualInputs(), updates)
