"""
Presets Tests
=============
Tests for scenario presets and survey/discovery mappings.
"""

from decimal import Decimal

from p3_estimator.core.calculations import calculate_outputs
from p3_estimator.schemas.estimator import (
    Assumptions,
    CustomerContext,
    EstimatorInputs,
    Guardrails,
    UsageVariability,
)
from p3_estimator.services.presets import (
    SCENARIO_PRESETS,
    DiscoveryState,
    SurveyAnswers,
    apply_preset,
    get_preset,
    map_discovery_to_residual_inputs,
    map_survey_to_inputs,
)


class TestScenarioPresets:
    """Tests for scenario presets."""

    def test_preset_ids(self):
        """Test the available presets."""
        assert [p.id for p in SCENARIO_PRESETS] == ["pilot", "finance_safe", "power_users"]

    def test_get_unknown_preset(self):
        """Test lookup of an unknown preset."""
        assert get_preset("enterprise_max") is None

    def test_apply_pilot(self, assumptions: Assumptions):
        """Test that the pilot preset layers over the defaults."""
        inputs = apply_preset(get_preset("pilot"))

        assert inputs.monthly_users == 500
        assert inputs.queries_per_user_per_month == 10
        assert inputs.customer_context.has_macc is True
        assert inputs.customer_context.macc_remaining == 50000
        assert inputs.usage_variability.workload_intensity == "light"
        # Untouched variability fields keep their defaults
        assert inputs.usage_variability.long_context_percent == 15
        assert inputs.guardrails.monthly_cap_amount == 5000

        outputs = calculate_outputs(inputs, assumptions)
        assert outputs.capped_p90_monthly_cost <= 5000
        assert outputs.months_of_runway_from_macc is not None

    def test_apply_preset_keeps_traffic(self):
        """Test that presets without traffic overrides keep the given volumes."""
        base = EstimatorInputs(monthly_users=4242)

        inputs = apply_preset(get_preset("finance_safe"), base)

        assert inputs.monthly_users == 4242
        assert inputs.guardrails.throttling_enabled is True
        assert inputs.usage_variability.workload_type == "summarization"

    def test_apply_preset_resets_nested_records(self, assumptions: Assumptions):
        """Test that earlier context, variability and guardrail settings do not survive a preset."""
        base = EstimatorInputs(
            monthly_users=4242,
            customer_context=CustomerContext(current_monthly_burn=900),
            usage_variability=UsageVariability(long_context_percent=80),
            guardrails=Guardrails(throttling_enabled=True, environment_separation=True),
        )

        inputs = apply_preset(get_preset("pilot"), base)

        assert inputs.guardrails.throttling_enabled is False
        assert inputs.guardrails.environment_separation is False
        assert inputs.guardrails.monthly_cap_enabled is True
        assert inputs.usage_variability.long_context_percent == 15
        assert inputs.customer_context.current_monthly_burn is None
        # Pilot sets traffic explicitly
        assert inputs.monthly_users == 500
        assert calculate_outputs(inputs, assumptions).volatility_score == calculate_outputs(
            apply_preset(get_preset("pilot")), assumptions
        ).volatility_score

    def test_power_users_is_high_volatility(self, assumptions: Assumptions):
        """Test the power users preset lands in the high band."""
        outputs = calculate_outputs(apply_preset(get_preset("power_users")), assumptions)

        assert outputs.volatility_score == "high"


class TestSurveyMapping:
    """Tests for mapping survey answers to estimator inputs."""

    def test_full_survey(self):
        """Test a complete set of answers."""
        answers = SurveyAnswers(
            org_size="1000-2499",
            industry="healthcare",
            ai_maturity="early",
            use_case="it_ops",
            volume="1000-10000",
            complexity="high",
        )

        inputs = map_survey_to_inputs(answers)

        assert inputs.monthly_users == 600
        assert inputs.queries_per_user_per_month == 15
        assert inputs.flow_runs_per_month == 500
        assert inputs.knowledge_pct == 40
        assert inputs.actions_pct == 60
        assert inputs.flows_configured == 8
        assert inputs.trigger_runs_per_month == 500
        assert inputs.usage_variability.workload_type == "multi_step_agent"
        assert inputs.usage_variability.active_user_percent == 30
        assert inputs.guardrails.monthly_cap_enabled is True
        assert inputs.guardrails.throttling_enabled is True
        assert inputs.guardrails.environment_separation is True
        assert inputs.use_prompt_tools is True
        assert inputs.prompt_model_type == "premium"
        assert inputs.prompt_responses_per_month == 900

    def test_low_complexity_has_no_prompt_tools(self):
        """Test that simple workloads skip prompt tools."""
        inputs = map_survey_to_inputs(SurveyAnswers(complexity="low", ai_maturity="mature"))

        assert inputs.use_prompt_tools is False
        assert inputs.usage_variability.workload_intensity == "light"
        assert inputs.usage_variability.active_user_percent == 75

    def test_empty_survey_uses_defaults(self):
        """Test that unknown answers fall back to defaults."""
        inputs = map_survey_to_inputs(SurveyAnswers())

        assert inputs.monthly_users == 1000
        assert inputs.queries_per_user_per_month == 20
        assert inputs.usage_variability.workload_type == "summarization"
        assert inputs.guardrails.monthly_cap_enabled is False


class TestDiscoveryMapping:
    """Tests for mapping discovery outcomes to residual inputs."""

    def test_segment_only(self):
        """Test segment defaults."""
        inputs = map_discovery_to_residual_inputs(DiscoveryState(segment="smb"))

        assert inputs.active_users == 100
        assert inputs.ptu_hours_per_month == 0
        assert inputs.github_copilot_seats == 10
        assert inputs.has_macc is False
        assert inputs.aco_discount_pct == 5

    def test_use_case_overrides_volumes(self):
        """Test that the first known use case overrides segment volumes."""
        discovery = DiscoveryState(
            segment="enterprise", selected_use_case_ids=["fraud_aml", "contact_center"]
        )

        inputs = map_discovery_to_residual_inputs(discovery)

        assert inputs.active_users == 80
        assert inputs.queries_per_user_per_month == 60
        assert inputs.ptu_hours_per_month == 80
        assert inputs.fabric_monthly_spend == 4000
        assert inputs.github_copilot_seats == 10
        # Commercial terms still come from the segment
        assert inputs.has_macc is True
        assert inputs.aco_discount_pct == 15

    def test_unknown_use_case(self):
        """Test that unknown use cases keep the segment defaults."""
        discovery = DiscoveryState(segment="smc", selected_use_case_ids=["unknown"])

        inputs = map_discovery_to_residual_inputs(discovery)

        assert inputs.active_users == 500
        assert inputs.fabric_monthly_spend == Decimal("1000")

    def test_empty_discovery(self):
        """Test that no answers yield the residual defaults."""
        inputs = map_discovery_to_residual_inputs(DiscoveryState())

        assert inputs.active_users == 1000
        assert inputs.github_copilot_price_per_seat == 19
