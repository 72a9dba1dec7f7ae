"""
Schema Tests
============
Tests for input sanitization and immutability.
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from p3_estimator.schemas.estimator import (
    Assumptions,
    CustomerContext,
    EstimatorInputs,
    Guardrails,
    UsageVariability,
)
from p3_estimator.schemas.residual import ResidualInputs


class TestInputSanitization:
    """Tests for clamping of user supplied numbers."""

    @pytest.mark.parametrize("raw", [-5, -0.5, "-12", float("nan"), "abc", ""])
    def test_bad_volumes_become_zero(self, raw):
        """Test that negative, NaN and unparseable volumes become 0."""
        inputs = EstimatorInputs(monthly_users=raw)

        assert inputs.monthly_users == 0

    def test_numeric_strings_are_parsed(self):
        """Test that numeric strings keep their value."""
        assert EstimatorInputs(monthly_users=" 250 ").monthly_users == 250

    def test_percentages_are_clamped(self):
        """Test that percentages stay within 0-100."""
        inputs = EstimatorInputs(knowledge_pct=150, tenant_graph_pct=-10, actions_pct="55.5")

        assert inputs.knowledge_pct == 100
        assert inputs.tenant_graph_pct == 0
        assert inputs.actions_pct == Decimal("55.5")

    def test_counts_are_integers(self):
        """Test that configured counts are whole numbers."""
        inputs = EstimatorInputs(flows_configured=-3, triggers_count="4")

        assert inputs.flows_configured == 0
        assert inputs.triggers_count == 4

    def test_nested_models_are_clamped(self):
        """Test clamping inside context, variability and guardrails."""
        context = CustomerContext(macc_remaining=-100, discount_percent=140)
        variability = UsageVariability(tool_calling_percent=120, avg_turns_per_task=-1)
        guardrails = Guardrails(monthly_cap_amount=-50)

        assert context.macc_remaining == 0
        assert context.discount_percent == 100
        assert variability.tool_calling_percent == 100
        assert variability.avg_turns_per_task == 0
        assert guardrails.monthly_cap_amount == 0

    def test_optional_amounts_stay_none(self):
        """Test that unset optional amounts are not coerced."""
        assert CustomerContext().macc_remaining is None
        assert Guardrails().monthly_cap_amount is None

    def test_residual_inputs_are_clamped(self):
        """Test clamping on the residual flow inputs."""
        inputs = ResidualInputs(active_users=-1, aco_discount_pct=-3, macc_burn_pct=250)

        assert inputs.active_users == 0
        assert inputs.aco_discount_pct == 0
        assert inputs.macc_burn_pct == 100

    def test_unknown_enum_is_rejected(self):
        """Test that unknown workload types fail validation."""
        with pytest.raises(ValidationError):
            UsageVariability(workload_type="unknown")


class TestImmutability:
    """Tests for frozen value objects."""

    def test_inputs_are_frozen(self):
        """Test that inputs cannot be mutated."""
        inputs = EstimatorInputs()

        with pytest.raises(ValidationError):
            inputs.monthly_users = Decimal("5")

    def test_assumptions_are_frozen(self):
        """Test that the rate sheet cannot be mutated."""
        assumptions = Assumptions()

        with pytest.raises(ValidationError):
            assumptions.copilot_credit_usd = Decimal("1")

    def test_default_rate_sheet(self):
        """Test the canonical default rates and tiers."""
        assumptions = Assumptions()

        assert assumptions.copilot_credit_usd == Decimal("0.01")
        assert assumptions.ptu_usd_per_hour == 1
        assert [t.acus for t in assumptions.agent_p3_tiers] == [20000, 100000, 500000]
        assert [t.estimated_cost for t in assumptions.agent_p3_tiers] == [19000, 90000, 425000]
        assert assumptions.use_api_pricing is False
