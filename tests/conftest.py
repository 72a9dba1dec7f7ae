"""
Test Configuration
==================
Pytest fixtures for P3 Estimator tests.
"""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from p3_estimator.api.endpoints.estimates import get_estimator_service
from p3_estimator.core.assumptions import AssumptionsStore
from p3_estimator.main import app
from p3_estimator.schemas.estimator import AgentP3Tier, Assumptions, EstimatorInputs
from p3_estimator.schemas.residual import ResidualInputs
from p3_estimator.services.estimator import EstimatorService


@pytest.fixture
def assumptions() -> Assumptions:
    """Canonical default rate sheet."""
    return Assumptions()


@pytest.fixture
def no_tier_assumptions() -> Assumptions:
    """Rate sheet without any P3 tiers."""
    return Assumptions(agent_p3_tiers=())


@pytest.fixture
def shuffled_tiers() -> tuple[AgentP3Tier, ...]:
    """Default tiers out of ACU order."""
    return (
        AgentP3Tier(tier=3, acus=500000, estimated_cost=425000, discount_pct=20),
        AgentP3Tier(tier=1, acus=20000, estimated_cost=19000, discount_pct=5),
        AgentP3Tier(tier=2, acus=100000, estimated_cost=90000, discount_pct=10),
    )


@pytest.fixture
def scenario_inputs() -> EstimatorInputs:
    """Reference usage profile: 1000 users x 20 queries, 100 PTU hours."""
    return EstimatorInputs(
        monthly_users=1000,
        queries_per_user_per_month=20,
        knowledge_pct=50,
        tenant_graph_pct=30,
        actions_pct=40,
        flow_runs_per_month=500,
        trigger_runs_per_month=100,
        ptu_hours_per_month=100,
    )


@pytest.fixture
def residual_inputs() -> ResidualInputs:
    """1000 users x 20 queries and 100 PTU hours, no commitments."""
    return ResidualInputs(
        active_users=1000,
        queries_per_user_per_month=20,
        ptu_hours_per_month=100,
    )


@pytest.fixture
def default_store(tmp_path) -> AssumptionsStore:
    """Store backed by a missing file, i.e. canonical defaults."""
    return AssumptionsStore(config_path=str(tmp_path / "missing.yaml"))


@pytest.fixture
def client(default_store: AssumptionsStore) -> Generator[TestClient, None, None]:
    """Create test client with the estimator service on default assumptions."""

    def override_get_estimator_service() -> EstimatorService:
        return EstimatorService(default_store)

    app.dependency_overrides[get_estimator_service] = override_get_estimator_service

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
