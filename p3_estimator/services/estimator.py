"""
Estimator Service
=================
Runs the pricing engine against the current rate sheet.
"""

from typing import Optional

import structlog
from prometheus_client import Counter, Histogram

from p3_estimator.core.assumptions import AssumptionsStore, get_assumptions_store
from p3_estimator.core.calculations import (
    calculate_four_way_comparison,
    calculate_outputs,
    calculate_residual_outputs,
)
from p3_estimator.core.live_pricing import RetailPriceFetcher
from p3_estimator.schemas.estimator import Assumptions, EstimatorInputs, EstimatorOutputs
from p3_estimator.schemas.residual import ResidualInputs, ResidualReport

logger = structlog.get_logger()

ESTIMATES_TOTAL = Counter(
    "p3_estimates_total",
    "Estimates computed",
    ["kind"],
)
ESTIMATED_ANNUAL_COST = Histogram(
    "p3_estimated_annual_cost_usd",
    "Estimated annual retail cost before plan discounts",
    ["kind"],
    buckets=(1_000, 5_000, 20_000, 50_000, 100_000, 250_000, 500_000, 1_000_000, 5_000_000),
)


class EstimatorService:
    """Service for computing estimates with the configured assumptions."""

    def __init__(self, store: Optional[AssumptionsStore] = None):
        self.store = store or get_assumptions_store()

    @property
    def assumptions(self) -> Assumptions:
        return self.store.get()

    def estimate(self, inputs: EstimatorInputs) -> EstimatorOutputs:
        """Variability-aware estimate for Copilot Studio and Foundry usage."""
        outputs = calculate_outputs(inputs, self.assumptions)

        ESTIMATES_TOTAL.labels(kind="standard").inc()
        ESTIMATED_ANNUAL_COST.labels(kind="standard").observe(float(outputs.total_payg_cost_usd))

        logger.info(
            "Computed estimate",
            total_payg_cost_usd=float(outputs.total_payg_cost_usd),
            acus_required=int(outputs.acus_required),
            tier=outputs.recommended_tier.tier if outputs.recommended_tier else None,
            volatility=outputs.volatility_score,
        )
        return outputs

    def estimate_residual(self, inputs: ResidualInputs) -> ResidualReport:
        """Residual workload after existing commitments, plus the option comparison."""
        outputs = calculate_residual_outputs(inputs, self.assumptions)
        comparison = calculate_four_way_comparison(inputs, outputs)

        ESTIMATES_TOTAL.labels(kind="residual").inc()
        ESTIMATED_ANNUAL_COST.labels(kind="residual").observe(
            float(outputs.total_estimated_retail_cost)
        )

        logger.info(
            "Computed residual estimate",
            total_estimated_retail_cost=float(outputs.total_estimated_retail_cost),
            residual=float(outputs.total_residual_retail_cost),
            tier=outputs.recommended_tier.tier if outputs.recommended_tier else None,
            winner=comparison.winner_key,
        )
        return ResidualReport(outputs=outputs, comparison=comparison)

    def refresh_live_pricing(self, fetcher: Optional[RetailPriceFetcher] = None) -> Assumptions:
        """Overwrite unit prices with the current retail price list."""
        if fetcher is not None:
            prices = fetcher.fetch()
        else:
            with RetailPriceFetcher() as owned:
                prices = owned.fetch()

        return self.store.apply_overrides(
            ptu_usd_per_hour=prices.ptu_usd_per_hour,
            copilot_credit_usd=prices.copilot_credit_usd,
        )
