"""
Pricing Engine
==============
Pure functions turning usage assumptions into projected Copilot Studio and
Azure AI Foundry costs, Agent P3 tier recommendations and savings.

Every function is deterministic and side-effect free: the same inputs and
rate sheet always yield an equal outputs record. 1 ACU is pegged to
$1 USD of retail consumption.
"""

from decimal import ROUND_CEILING, ROUND_FLOOR, Decimal
from typing import Iterable, Optional

import structlog

from p3_estimator.core.formatting import format_currency, format_percent
from p3_estimator.schemas.estimator import (
    AgentP3Tier,
    Assumptions,
    EstimatorInputs,
    EstimatorOutputs,
    VolatilityScore,
)
from p3_estimator.schemas.residual import (
    ComparisonOption,
    FourWayComparison,
    ResidualGuidance,
    ResidualInputs,
    ResidualOutputs,
)

logger = structlog.get_logger()

MONTHS_PER_YEAR = Decimal("12")

_ZERO = Decimal("0")
_ONE = Decimal("1")
_HUNDRED = Decimal("100")
_TEN = Decimal("10")

# (P50, P90) base multipliers by workload intensity
INTENSITY_MULTIPLIERS: dict[str, tuple[Decimal, Decimal]] = {
    "light": (Decimal("0.85"), Decimal("1.15")),
    "medium": (Decimal("1.0"), Decimal("1.4")),
    "heavy": (Decimal("1.15"), Decimal("1.8")),
}

# (P50, P90) adjustments by workload type
WORKLOAD_TYPE_ADJUSTMENTS: dict[str, tuple[Decimal, Decimal]] = {
    "qa": (_ONE, _ONE),
    "summarization": (_ONE, Decimal("1.1")),
    "extraction": (_ONE, Decimal("1.15")),
    "multi_step_agent": (Decimal("1.2"), Decimal("1.5")),
    "rag": (_ONE, Decimal("1.25")),
}

TOOL_CALLING_P90_WEIGHT = Decimal("0.3")
LONG_CONTEXT_P90_WEIGHT = Decimal("0.2")

INTENSITY_SCORES = {"light": 1, "medium": 2, "heavy": 3}
WORKLOAD_TYPE_SCORES = {
    "qa": 0,
    "summarization": 1,
    "extraction": 1,
    "multi_step_agent": 3,
    "rag": 2,
}

# Residual below this share of the reference tier is not worth a plan
SMALL_RESIDUAL_SHARE = Decimal("0.25")
SMALL_RESIDUAL_REFERENCE_ACUS = Decimal("20000")

# Silos win "strategically" when P3 is at most this many percent dearer
STRATEGIC_MARGIN_PCT = Decimal("10")


def _ceil(value: Decimal) -> Decimal:
    return value.to_integral_value(rounding=ROUND_CEILING)


def _floor(value: Decimal) -> Decimal:
    return value.to_integral_value(rounding=ROUND_FLOOR)


def _pct(value: Decimal) -> Decimal:
    return value / _HUNDRED


def _discount_pct(savings: Decimal, baseline: Decimal) -> Decimal:
    return savings / baseline * _HUNDRED if baseline > 0 else _ZERO


def select_tier(
    tiers: Iterable[AgentP3Tier],
    required_acus: Decimal,
) -> Optional[AgentP3Tier]:
    """
    Pick the smallest tier covering ``required_acus``.

    Tiers are sorted ascending by ACUs first. When no tier is large enough
    the largest tier is returned; an empty tier list yields ``None``.
    """
    ordered = sorted(tiers, key=lambda t: t.acus)

    for tier in ordered:
        if tier.acus >= required_acus:
            return tier

    if ordered:
        logger.debug(
            "No tier covers required ACUs, using largest tier",
            required_acus=str(required_acus),
            tier=ordered[-1].tier,
        )
        return ordered[-1]

    return None


def get_variability_multipliers(inputs: EstimatorInputs) -> tuple[Decimal, Decimal]:
    """
    P50/P90 multipliers for the workload.

    Applied in order: intensity base, workload type, tool calling,
    long context. The last two only widen P90.
    """
    variability = inputs.usage_variability

    p50, p90 = INTENSITY_MULTIPLIERS.get(variability.workload_intensity, (_ONE, _ONE))

    p50_adjust, p90_adjust = WORKLOAD_TYPE_ADJUSTMENTS.get(variability.workload_type, (_ONE, _ONE))
    p50 *= p50_adjust
    p90 *= p90_adjust

    p90 *= _ONE + _pct(variability.tool_calling_percent) * TOOL_CALLING_P90_WEIGHT
    p90 *= _ONE + _pct(variability.long_context_percent) * LONG_CONTEXT_P90_WEIGHT

    return p50, p90


def calculate_volatility_score(inputs: EstimatorInputs) -> VolatilityScore:
    """Classify how spiky monthly spend is likely to be."""
    variability = inputs.usage_variability

    score = INTENSITY_SCORES.get(variability.workload_intensity, 0)
    score += WORKLOAD_TYPE_SCORES.get(variability.workload_type, 0)

    if variability.tool_calling_percent > 40:
        score += 2
    elif variability.tool_calling_percent > 20:
        score += 1

    if variability.long_context_percent > 30:
        score += 1

    # Guardrails reduce the effective concern; score may go negative
    if inputs.guardrails.monthly_cap_enabled:
        score -= 1
    if inputs.guardrails.throttling_enabled:
        score -= 1

    if score <= 3:
        return "low"
    if score <= 6:
        return "medium"
    return "high"


def _prompt_rate_per_10(inputs: EstimatorInputs, assumptions: Assumptions) -> Decimal:
    rates = {
        "basic": assumptions.prompt_basic_per_10,
        "standard": assumptions.prompt_standard_per_10,
        "premium": assumptions.prompt_premium_per_10,
    }
    return rates.get(inputs.prompt_model_type, assumptions.prompt_standard_per_10)


def calculate_outputs(inputs: EstimatorInputs, assumptions: Assumptions) -> EstimatorOutputs:
    """
    Project annual credits and costs, P50/P90 ranges, MACC coverage and
    the recommended Agent P3 tier for a usage profile.
    """
    # Traffic
    monthly_queries = inputs.monthly_users * inputs.queries_per_user_per_month
    annual_queries = monthly_queries * MONTHS_PER_YEAR

    # Knowledge
    annual_knowledge_queries = annual_queries * _pct(inputs.knowledge_pct)
    annual_tenant_graph_queries = annual_knowledge_queries * _pct(inputs.tenant_graph_pct)
    annual_non_tenant_queries = annual_knowledge_queries - annual_tenant_graph_queries

    tenant_graph_credits_per_query = (
        assumptions.tenant_graph_grounding_credits + assumptions.generative_answer_credits
    )
    credits_knowledge = (
        annual_tenant_graph_queries * tenant_graph_credits_per_query
        + annual_non_tenant_queries * assumptions.non_tenant_grounding_credits
    )

    # Actions & topics
    annual_action_queries = annual_queries * _pct(inputs.actions_pct)
    annual_actions = annual_action_queries * assumptions.avg_actions_per_query
    credits_actions = annual_actions * assumptions.credits_per_action
    credits_flows = inputs.flow_runs_per_month * MONTHS_PER_YEAR * assumptions.credits_per_flow_run

    # Autonomous triggers
    credits_triggers = (
        inputs.trigger_runs_per_month * MONTHS_PER_YEAR * assumptions.credits_per_trigger_run
    )

    # Prompt tools
    credits_prompts = _ZERO
    if inputs.use_prompt_tools and inputs.prompt_responses_per_month > 0:
        annual_prompt_responses = inputs.prompt_responses_per_month * MONTHS_PER_YEAR
        credits_prompts = annual_prompt_responses * (_prompt_rate_per_10(inputs, assumptions) / _TEN)

    annual_copilot_credits = (
        credits_knowledge + credits_actions + credits_flows + credits_triggers + credits_prompts
    )

    # Foundry PTU
    annual_ptu_hours = inputs.ptu_hours_per_month * MONTHS_PER_YEAR

    copilot_payg_cost = annual_copilot_credits * assumptions.copilot_credit_usd
    foundry_payg_cost = annual_ptu_hours * assumptions.ptu_usd_per_hour
    total_payg_cost_usd = copilot_payg_cost + foundry_payg_cost

    # P50/P90 ranges
    p50, p90 = get_variability_multipliers(inputs)
    base_monthly = total_payg_cost_usd / MONTHS_PER_YEAR
    p50_monthly_cost = base_monthly * p50
    p90_monthly_cost = base_monthly * p90

    acus_required = _ceil(total_payg_cost_usd)
    p50_acu = _ceil(total_payg_cost_usd * p50)
    p90_acu = _ceil(total_payg_cost_usd * p90)

    volatility_score = calculate_volatility_score(inputs)

    # MACC coverage
    annual_p50 = p50_monthly_cost * MONTHS_PER_YEAR
    annual_p90 = p90_monthly_cost * MONTHS_PER_YEAR
    macc_funded_amount_p50 = _ZERO
    macc_funded_amount_p90 = _ZERO
    net_new_cash_p50 = annual_p50
    net_new_cash_p90 = annual_p90
    months_of_runway_from_macc: Optional[int] = None

    context = inputs.customer_context
    if context.has_macc and context.macc_remaining:
        macc_remaining = context.macc_remaining

        macc_funded_amount_p50 = min(macc_remaining, annual_p50)
        macc_funded_amount_p90 = min(macc_remaining, annual_p90)
        net_new_cash_p50 = max(_ZERO, annual_p50 - macc_remaining)
        net_new_cash_p90 = max(_ZERO, annual_p90 - macc_remaining)

        burn = context.current_monthly_burn
        monthly_burn = burn + p50_monthly_cost if burn and burn > 0 else p50_monthly_cost
        if monthly_burn > 0:
            months_of_runway_from_macc = int(_floor(macc_remaining / monthly_burn))

    # Guardrail capping
    capped_p90_monthly_cost: Optional[Decimal] = None
    guardrails = inputs.guardrails
    if guardrails.monthly_cap_enabled and guardrails.monthly_cap_amount:
        capped_p90_monthly_cost = min(p90_monthly_cost, guardrails.monthly_cap_amount)

    # Tier recommendation
    recommended_tier = select_tier(assumptions.agent_p3_tiers, acus_required)
    estimated_plan_cost = (
        recommended_tier.estimated_cost if recommended_tier else total_payg_cost_usd
    )
    estimated_savings = total_payg_cost_usd - estimated_plan_cost

    return EstimatorOutputs(
        monthly_queries=monthly_queries,
        annual_queries=annual_queries,
        annual_knowledge_queries=annual_knowledge_queries,
        annual_tenant_graph_queries=annual_tenant_graph_queries,
        annual_non_tenant_queries=annual_non_tenant_queries,
        credits_knowledge=credits_knowledge,
        annual_action_queries=annual_action_queries,
        annual_actions=annual_actions,
        credits_actions=credits_actions,
        credits_flows=credits_flows,
        credits_triggers=credits_triggers,
        credits_prompts=credits_prompts,
        annual_copilot_credits=annual_copilot_credits,
        annual_ptu_hours=annual_ptu_hours,
        copilot_payg_cost=copilot_payg_cost,
        foundry_payg_cost=foundry_payg_cost,
        total_payg_cost_usd=total_payg_cost_usd,
        p50_acu=p50_acu,
        p90_acu=p90_acu,
        p50_monthly_cost=p50_monthly_cost,
        p90_monthly_cost=p90_monthly_cost,
        volatility_score=volatility_score,
        macc_funded_amount_p50=macc_funded_amount_p50,
        macc_funded_amount_p90=macc_funded_amount_p90,
        net_new_cash_p50=net_new_cash_p50,
        net_new_cash_p90=net_new_cash_p90,
        months_of_runway_from_macc=months_of_runway_from_macc,
        capped_p90_monthly_cost=capped_p90_monthly_cost,
        worst_case_uncapped=p90_monthly_cost,
        acus_required=acus_required,
        recommended_tier=recommended_tier,
        estimated_plan_cost=estimated_plan_cost,
        estimated_savings=estimated_savings,
        estimated_discount_pct=_discount_pct(estimated_savings, total_payg_cost_usd),
    )


def residual_guidance(
    total_residual_retail_cost: Decimal,
    recommended_tier: Optional[AgentP3Tier],
) -> ResidualGuidance:
    """Qualitative recommendation for the residual workload."""
    if total_residual_retail_cost <= 0:
        return "fully_covered"

    reference_acus = recommended_tier.acus if recommended_tier else SMALL_RESIDUAL_REFERENCE_ACUS
    if total_residual_retail_cost < reference_acus * SMALL_RESIDUAL_SHARE:
        return "small_residual"

    return "p3_recommended"


def calculate_residual_outputs(inputs: ResidualInputs, assumptions: Assumptions) -> ResidualOutputs:
    """
    Apply existing commitments to gross retail consumption and size the
    P3 plan on what remains.

    Benefits apply in a fixed order: Foundry PTU reservations, then the
    Copilot credit pre-purchase, then the P3 plan.
    """
    # Gross retail consumption (annual)
    total_copilot_queries = (
        inputs.active_users * inputs.queries_per_user_per_month * MONTHS_PER_YEAR
    )
    estimated_copilot_retail_cost = total_copilot_queries * assumptions.copilot_credit_usd
    estimated_foundry_retail_cost = (
        inputs.ptu_hours_per_month * MONTHS_PER_YEAR * assumptions.ptu_usd_per_hour
    )
    fabric_annual_cost = inputs.fabric_monthly_spend * MONTHS_PER_YEAR
    github_annual_cost = (
        inputs.github_copilot_seats * inputs.github_copilot_price_per_seat * MONTHS_PER_YEAR
    )
    total_estimated_retail_cost = (
        estimated_copilot_retail_cost
        + estimated_foundry_retail_cost
        + fabric_annual_cost
        + github_annual_cost
    )

    # 1. Foundry PTU reservations
    existing_ptu_coverage = (
        inputs.existing_ptu_reservations * MONTHS_PER_YEAR * assumptions.ptu_usd_per_hour
    )
    foundry_covered_by_reservation = min(estimated_foundry_retail_cost, existing_ptu_coverage)
    remaining_foundry_retail_cost = estimated_foundry_retail_cost - foundry_covered_by_reservation

    # 2. Copilot credit pre-purchase, 1 credit unit = $1 retail
    copilot_covered_by_credits = min(estimated_copilot_retail_cost, inputs.existing_copilot_credits)
    remaining_copilot_retail_cost = estimated_copilot_retail_cost - copilot_covered_by_credits

    total_covered_by_existing = foundry_covered_by_reservation + copilot_covered_by_credits

    # 3. Residual for P3; Fabric and GitHub draw on the pool directly
    total_residual_retail_cost = (
        remaining_foundry_retail_cost
        + remaining_copilot_retail_cost
        + fabric_annual_cost
        + github_annual_cost
    )
    required_p3_acus = _ceil(total_residual_retail_cost)

    recommended_tier: Optional[AgentP3Tier] = None
    if required_p3_acus > 0:
        recommended_tier = select_tier(assumptions.agent_p3_tiers, required_p3_acus)

    p3_cost = recommended_tier.estimated_cost if recommended_tier else total_residual_retail_cost
    p3_savings = total_residual_retail_cost - p3_cost

    macc_burn_amount = p3_cost * _pct(inputs.macc_burn_pct) if inputs.has_macc else _ZERO

    return ResidualOutputs(
        total_copilot_queries=total_copilot_queries,
        estimated_copilot_retail_cost=estimated_copilot_retail_cost,
        estimated_foundry_retail_cost=estimated_foundry_retail_cost,
        fabric_annual_cost=fabric_annual_cost,
        github_annual_cost=github_annual_cost,
        total_estimated_retail_cost=total_estimated_retail_cost,
        foundry_covered_by_reservation=foundry_covered_by_reservation,
        remaining_foundry_retail_cost=remaining_foundry_retail_cost,
        copilot_covered_by_credits=copilot_covered_by_credits,
        remaining_copilot_retail_cost=remaining_copilot_retail_cost,
        total_covered_by_existing=total_covered_by_existing,
        total_residual_retail_cost=total_residual_retail_cost,
        required_p3_acus=required_p3_acus,
        recommended_tier=recommended_tier,
        p3_cost=p3_cost,
        p3_savings=p3_savings,
        p3_discount_pct=_discount_pct(p3_savings, total_residual_retail_cost),
        macc_burn_amount=macc_burn_amount,
        guidance=residual_guidance(total_residual_retail_cost, recommended_tier),
    )


def _win_guidance(
    winner: ComparisonOption,
    runner_up: ComparisonOption,
    unified_p3: ComparisonOption,
    residual: Decimal,
) -> str:
    if residual <= 0:
        return (
            "COVERED: Existing commitments cover the full estimated workload. "
            "No additional purchase is needed; maximize the current PTU reservations "
            "and Copilot credits first."
        )

    if winner.key == "unified_p3":
        savings = runner_up.annual_cost - winner.annual_cost
        return (
            f"WIN: Unified P3 is the lowest-cost option at {format_currency(winner.annual_cost)}/yr, "
            f"{format_currency(savings)} ({format_percent(_discount_pct(savings, runner_up.annual_cost))}) "
            f"below {runner_up.label}."
        )

    if winner.key == "specialized_silos":
        gap = unified_p3.annual_cost - winner.annual_cost
        gap_pct = _discount_pct(gap, winner.annual_cost)
        if winner.annual_cost > 0 and gap_pct <= STRATEGIC_MARGIN_PCT:
            return (
                f"STRATEGIC: Specialized Silos are {format_currency(gap)}/yr cheaper, but Unified P3 "
                f"is within {format_percent(gap_pct)}. Position P3 on flexibility across "
                "Copilot Studio and Foundry and on upfront MACC burn."
            )
        return (
            f"SILOS: Specialized Silos are the lowest-cost option at "
            f"{format_currency(winner.annual_cost)}/yr. Unified P3 costs "
            f"{format_currency(gap)} more; revisit P3 as usage grows."
        )

    return (
        f"PAYG: Pay-as-you-go with the ACO discount is the lowest-cost option at "
        f"{format_currency(winner.annual_cost)}/yr. A commitment is not justified at this volume."
    )


def calculate_four_way_comparison(
    inputs: ResidualInputs,
    outputs: ResidualOutputs,
) -> FourWayComparison:
    """
    Compare annual cost of PAYG with the ACO discount, separate PTU and
    Copilot credit quotes, and the unified P3 plan for the residual workload.

    Ties resolve in favour of the option without a commitment.
    """
    aco_factor = _ONE - _pct(inputs.aco_discount_pct)
    residual = outputs.total_residual_retail_cost
    other_services = outputs.fabric_annual_cost + outputs.github_annual_cost

    pure_payg = ComparisonOption(
        key="pure_payg",
        label="Pure PAYG + ACO",
        description="Retail consumption less the customer's ACO discount",
        annual_cost=residual * aco_factor,
    )

    if inputs.ptu_reservation_quote > 0:
        foundry_silo = inputs.ptu_reservation_quote * MONTHS_PER_YEAR
    else:
        foundry_silo = outputs.remaining_foundry_retail_cost * aco_factor
    if inputs.copilot_credit_plan_quote > 0:
        copilot_silo = inputs.copilot_credit_plan_quote * MONTHS_PER_YEAR
    else:
        copilot_silo = outputs.remaining_copilot_retail_cost * aco_factor

    specialized_silos = ComparisonOption(
        key="specialized_silos",
        label="Specialized Silos",
        description="Separate PTU reservation and Copilot credit plan quotes",
        annual_cost=foundry_silo + copilot_silo + other_services * aco_factor,
    )

    tier = outputs.recommended_tier
    if tier is not None:
        overflow = max(_ZERO, residual - tier.acus)
        p3_annual_cost = outputs.p3_cost + overflow * aco_factor
    else:
        p3_annual_cost = residual * aco_factor

    unified_p3 = ComparisonOption(
        key="unified_p3",
        label="Unified P3",
        description="One ACU pool across Copilot Studio, Foundry, Fabric and GitHub",
        annual_cost=p3_annual_cost,
    )

    options = [pure_payg, specialized_silos, unified_p3]
    winner = min(options, key=lambda o: o.annual_cost)
    runner_up = min((o for o in options if o is not winner), key=lambda o: o.annual_cost)

    return FourWayComparison(
        pure_payg=pure_payg,
        specialized_silos=specialized_silos,
        unified_p3=unified_p3,
        winner_key=winner.key,
        win_guidance=_win_guidance(winner, runner_up, unified_p3, residual),
        aco_higher_than_p3=tier is not None and inputs.aco_discount_pct > tier.discount_pct,
    )
