"""
CSV Export
==========
Serialize estimator inputs and outputs to CSV.
"""

import csv
import io
from decimal import Decimal
from typing import Any

import structlog

from p3_estimator.schemas.estimator import EstimatorInputs, EstimatorOutputs
from p3_estimator.schemas.residual import FourWayComparison, ResidualInputs, ResidualOutputs

logger = structlog.get_logger()

Row = list[Any]


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, Decimal):
        return format(value.normalize(), "f")
    return str(value)


def rows_to_csv(rows: list[Row]) -> str:
    """Render rows with every cell quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for row in rows:
        writer.writerow([_cell(c) for c in row])
    return buffer.getvalue()


def residual_export_rows(
    inputs: ResidualInputs,
    outputs: ResidualOutputs,
    comparison: FourWayComparison,
) -> list[Row]:
    tier = outputs.recommended_tier
    return [
        ["Microsoft Agent P3 Estimator - Export"],
        [],
        ["Inputs"],
        ["Active Users", inputs.active_users],
        ["Queries/User/Month", inputs.queries_per_user_per_month],
        ["PTUs/Month", inputs.ptu_hours_per_month],
        ["Fabric Monthly Spend (USD)", inputs.fabric_monthly_spend],
        ["GitHub Copilot Seats", inputs.github_copilot_seats],
        ["GitHub Price/Seat", inputs.github_copilot_price_per_seat],
        ["Existing Copilot Credits", inputs.existing_copilot_credits],
        ["Existing PTU Reservations", inputs.existing_ptu_reservations],
        ["ACO Discount %", inputs.aco_discount_pct],
        ["PTU Reservation Quote ($/mo)", inputs.ptu_reservation_quote],
        ["Copilot Credit Plan Quote ($/mo)", inputs.copilot_credit_plan_quote],
        ["Has MACC", inputs.has_macc],
        ["MACC Burn %", inputs.macc_burn_pct],
        [],
        ["Outputs"],
        ["Total Estimated Retail Cost (Annual)", outputs.total_estimated_retail_cost],
        ["Residual After Commitments (Annual)", outputs.total_residual_retail_cost],
        ["Recommended P3 Tier", f"Tier {tier.tier}" if tier else "None"],
        ["P3 Tier Price (Annual)", outputs.p3_cost],
        ["Estimated Savings (Annual)", outputs.p3_savings],
        [],
        ["Four-Way Comparison"],
        [comparison.pure_payg.label, comparison.pure_payg.annual_cost],
        [comparison.specialized_silos.label, comparison.specialized_silos.annual_cost],
        [comparison.unified_p3.label, comparison.unified_p3.annual_cost],
        [],
        ["Winner", comparison.winner_key],
        ["Guidance", comparison.win_guidance],
    ]


def estimate_export_rows(inputs: EstimatorInputs, outputs: EstimatorOutputs) -> list[Row]:
    tier = outputs.recommended_tier
    return [
        ["Copilot Studio & Foundry Estimate - Export"],
        [],
        ["Inputs"],
        ["Monthly Users", inputs.monthly_users],
        ["Queries/User/Month", inputs.queries_per_user_per_month],
        ["Knowledge %", inputs.knowledge_pct],
        ["Tenant Graph %", inputs.tenant_graph_pct],
        ["Actions %", inputs.actions_pct],
        ["Flow Runs/Month", inputs.flow_runs_per_month],
        ["Trigger Runs/Month", inputs.trigger_runs_per_month],
        ["Prompt Tools", inputs.use_prompt_tools],
        ["Prompt Model", inputs.prompt_model_type],
        ["Prompt Responses/Month", inputs.prompt_responses_per_month],
        ["PTU Hours/Month", inputs.ptu_hours_per_month],
        ["Workload", inputs.usage_variability.workload_type],
        ["Intensity", inputs.usage_variability.workload_intensity],
        [],
        ["Credits Breakdown (Annual)"],
        ["Knowledge", outputs.credits_knowledge],
        ["Actions", outputs.credits_actions],
        ["Flows", outputs.credits_flows],
        ["Triggers", outputs.credits_triggers],
        ["Prompts", outputs.credits_prompts],
        ["Total Copilot Credits", outputs.annual_copilot_credits],
        [],
        ["Outputs"],
        ["Annual PTU Hours", outputs.annual_ptu_hours],
        ["Total PAYG Cost (USD)", outputs.total_payg_cost_usd],
        ["ACUs Required", outputs.acus_required],
        ["P50 Monthly Cost", outputs.p50_monthly_cost],
        ["P90 Monthly Cost", outputs.p90_monthly_cost],
        ["Volatility", outputs.volatility_score],
        ["Recommended P3 Tier", f"Tier {tier.tier}" if tier else "None"],
        ["Estimated Plan Cost", outputs.estimated_plan_cost],
        ["Estimated Savings", outputs.estimated_savings],
        ["Estimated Discount %", outputs.estimated_discount_pct],
    ]


def export_residual_csv(
    inputs: ResidualInputs,
    outputs: ResidualOutputs,
    comparison: FourWayComparison,
) -> str:
    """CSV of the residual estimator inputs, outputs and comparison."""
    content = rows_to_csv(residual_export_rows(inputs, outputs, comparison))
    logger.info("Exported residual estimate", winner=comparison.winner_key)
    return content


def export_estimate_csv(inputs: EstimatorInputs, outputs: EstimatorOutputs) -> str:
    """CSV of the variability-aware estimate."""
    content = rows_to_csv(estimate_export_rows(inputs, outputs))
    logger.info("Exported estimate", volatility=outputs.volatility_score)
    return content
