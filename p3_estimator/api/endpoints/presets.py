"""
Preset Endpoints
================
Scenario presets and pre-configured inputs from discovery answers.
"""

import structlog
from fastapi import APIRouter, HTTPException, status

from p3_estimator.schemas.estimator import EstimatorInputs
from p3_estimator.schemas.residual import ResidualInputs
from p3_estimator.services.presets import (
    SCENARIO_PRESETS,
    DiscoveryState,
    ScenarioPreset,
    SurveyAnswers,
    apply_preset,
    get_preset,
    map_discovery_to_residual_inputs,
    map_survey_to_inputs,
)

router = APIRouter()
logger = structlog.get_logger()


@router.get(
    "/presets",
    response_model=list[ScenarioPreset],
    summary="List scenario presets",
)
async def list_presets() -> list[ScenarioPreset]:
    return list(SCENARIO_PRESETS)


@router.post(
    "/presets/{preset_id}",
    response_model=EstimatorInputs,
    summary="Apply scenario preset",
    description="Layer a preset over the given inputs, or over defaults when no body is sent",
)
async def apply_scenario_preset(
    preset_id: str,
    inputs: EstimatorInputs | None = None,
) -> EstimatorInputs:
    preset = get_preset(preset_id)
    if preset is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown preset. Must be one of: {', '.join(p.id for p in SCENARIO_PRESETS)}",
        )
    return apply_preset(preset, inputs)


@router.post(
    "/survey/inputs",
    response_model=EstimatorInputs,
    summary="Map survey answers to estimator inputs",
)
async def survey_inputs(answers: SurveyAnswers) -> EstimatorInputs:
    return map_survey_to_inputs(answers)


@router.post(
    "/discovery/inputs",
    response_model=ResidualInputs,
    summary="Map discovery answers to residual inputs",
)
async def discovery_inputs(discovery: DiscoveryState) -> ResidualInputs:
    inputs = map_discovery_to_residual_inputs(discovery)
    logger.info(
        "Mapped discovery to residual inputs",
        segment=discovery.segment,
        use_cases=len(discovery.selected_use_case_ids),
    )
    return inputs
