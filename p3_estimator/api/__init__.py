"""
API Package
===========
HTTP surface of the estimator.
"""

from p3_estimator.api.router import api_router

__all__ = ["api_router"]
