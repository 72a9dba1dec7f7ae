"""
Assumptions Store
=================
Loads the pricing rate sheet from YAML with fallback to canonical defaults.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import structlog
import yaml
from pydantic import ValidationError

from p3_estimator.config import settings
from p3_estimator.schemas.estimator import Assumptions

logger = structlog.get_logger()


class AssumptionsStore:
    """
    Holds the current rate sheet.

    Loads assumptions from a YAML file; a missing or invalid file leaves
    the canonical defaults in place. Every accessor returns an immutable
    ``Assumptions`` value.
    """

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or settings.assumptions_config_path
        self._assumptions = Assumptions()
        self._load_assumptions()

    def _load_assumptions(self) -> None:
        """Load the rate sheet from the YAML file."""
        config_file = Path(self.config_path)

        if not config_file.exists():
            logger.warning("Assumptions config not found, using defaults", path=self.config_path)
            self._assumptions = Assumptions()
            return

        try:
            with open(config_file) as f:
                data: dict[str, Any] = yaml.safe_load(f) or {}
            self._assumptions = Assumptions.model_validate(data)
            logger.info(
                "Loaded assumptions configuration",
                path=self.config_path,
                tiers=len(self._assumptions.agent_p3_tiers),
            )
        except (OSError, yaml.YAMLError, ValidationError) as e:
            logger.error("Failed to load assumptions config", path=self.config_path, error=str(e))
            self._assumptions = Assumptions()

    def reload(self) -> None:
        """Reload the rate sheet from file, dropping any overrides."""
        self._load_assumptions()

    def get(self) -> Assumptions:
        """Current rate sheet."""
        return self._assumptions

    def apply_overrides(
        self,
        ptu_usd_per_hour: Optional[Decimal] = None,
        copilot_credit_usd: Optional[Decimal] = None,
    ) -> Assumptions:
        """
        Overwrite unit prices, e.g. from a live price list.

        ``None`` leaves the current value untouched.
        """
        updates: dict[str, Decimal] = {}
        if ptu_usd_per_hour is not None:
            updates["ptu_usd_per_hour"] = ptu_usd_per_hour
        if copilot_credit_usd is not None:
            updates["copilot_credit_usd"] = copilot_credit_usd

        if updates:
            self._assumptions = self._assumptions.model_copy(update=updates)
            logger.info(
                "Applied unit price overrides",
                **{key: str(value) for key, value in updates.items()},
            )

        return self._assumptions


@lru_cache
def get_assumptions_store() -> AssumptionsStore:
    """Get cached assumptions store instance."""
    return AssumptionsStore()
