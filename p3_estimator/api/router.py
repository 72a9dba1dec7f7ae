"""
API Router
==========
Main API router combining all endpoint modules.
"""

from fastapi import APIRouter

from p3_estimator.api.endpoints import assumptions, estimates, health, presets

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(estimates.router, prefix="/estimate", tags=["Estimates"])
api_router.include_router(assumptions.router, prefix="/assumptions", tags=["Assumptions"])
api_router.include_router(presets.router, tags=["Presets"])
