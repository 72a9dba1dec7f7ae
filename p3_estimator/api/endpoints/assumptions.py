"""
Assumptions Endpoints
=====================
API endpoints for the pricing rate sheet.
"""

import httpx
import structlog
from fastapi import APIRouter, HTTPException, status

from p3_estimator.core.assumptions import get_assumptions_store
from p3_estimator.schemas.estimator import Assumptions
from p3_estimator.services.estimator import EstimatorService

router = APIRouter()
logger = structlog.get_logger()


@router.get(
    "",
    response_model=Assumptions,
    summary="Get assumptions",
    description="Current unit prices, credit weights and P3 tiers",
)
async def get_assumptions() -> Assumptions:
    return get_assumptions_store().get()


@router.post(
    "/reload",
    response_model=Assumptions,
    summary="Reload assumptions",
    description="Reload the rate sheet from the YAML file",
)
async def reload_assumptions() -> Assumptions:
    """
    Reload the rate sheet from the YAML file.

    Drops any live pricing overrides applied since the last load.
    """
    store = get_assumptions_store()
    store.reload()
    return store.get()


@router.post(
    "/live-pricing",
    response_model=Assumptions,
    summary="Refresh unit prices",
    description="Overwrite PTU and Copilot credit prices from the Azure Retail Prices API",
)
async def refresh_live_pricing() -> Assumptions:
    try:
        return EstimatorService().refresh_live_pricing()
    except httpx.HTTPError as e:
        logger.error("Failed to fetch live pricing", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to fetch retail prices",
        ) from e
