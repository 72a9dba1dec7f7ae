"""
P3 Estimator
============
Cost estimator for Copilot Studio and Azure AI Foundry consumption and
Agent pre-purchase plan (P3) sizing.
"""

__version__ = "1.0.0"
