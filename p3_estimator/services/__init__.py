"""
Business Services
=================
Service layer around the pricing engine: estimates, exports and presets.
"""

from p3_estimator.services.estimator import EstimatorService

__all__ = ["EstimatorService"]
