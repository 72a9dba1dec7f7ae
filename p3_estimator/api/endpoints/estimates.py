"""
Estimate Endpoints
==================
API endpoints running the pricing engine.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response

from p3_estimator.schemas.estimator import EstimatorInputs, EstimatorOutputs
from p3_estimator.schemas.residual import ResidualInputs, ResidualReport
from p3_estimator.services.estimator import EstimatorService
from p3_estimator.services.export import export_estimate_csv, export_residual_csv

router = APIRouter()
logger = structlog.get_logger()


def get_estimator_service() -> EstimatorService:
    return EstimatorService()


EstimatorServiceDep = Annotated[EstimatorService, Depends(get_estimator_service)]


def _csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post(
    "",
    response_model=EstimatorOutputs,
    summary="Estimate Copilot Studio and Foundry cost",
    description="Project annual credits, PAYG cost, P50/P90 ranges and the recommended P3 tier",
)
async def estimate(inputs: EstimatorInputs, service: EstimatorServiceDep) -> EstimatorOutputs:
    """
    Run the variability-aware estimate.

    Returns the credit breakdown, PAYG cost, P50/P90 monthly range,
    volatility, MACC coverage and the recommended tier.
    """
    try:
        return service.estimate(inputs)
    except Exception as e:
        logger.error("Failed to compute estimate", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute estimate",
        ) from e


@router.post(
    "/export",
    summary="Export estimate",
    description="Estimate and return the result as CSV",
)
async def export_estimate(inputs: EstimatorInputs, service: EstimatorServiceDep) -> Response:
    outputs = service.estimate(inputs)
    return _csv_response(export_estimate_csv(inputs, outputs), "estimate-export.csv")


@router.post(
    "/residual",
    response_model=ResidualReport,
    summary="Estimate residual workload",
    description="Apply existing commitments, size the P3 plan and compare purchase options",
)
async def estimate_residual(inputs: ResidualInputs, service: EstimatorServiceDep) -> ResidualReport:
    """
    Run the benefit-precedence waterfall.

    Existing PTU reservations apply first, then Copilot credits; the P3
    tier is sized on the remainder.
    """
    try:
        return service.estimate_residual(inputs)
    except Exception as e:
        logger.error("Failed to compute residual estimate", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute residual estimate",
        ) from e


@router.post(
    "/residual/export",
    summary="Export residual estimate",
    description="Residual estimate and comparison as CSV",
)
async def export_residual(inputs: ResidualInputs, service: EstimatorServiceDep) -> Response:
    report = service.estimate_residual(inputs)
    content = export_residual_csv(inputs, report.outputs, report.comparison)
    return _csv_response(content, "p3-estimator-export.csv")
