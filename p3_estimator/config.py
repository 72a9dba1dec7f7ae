"""
Application Configuration
=========================
Centralized configuration management using Pydantic Settings.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_env: Literal["development", "staging", "production"] = "development"
    app_debug: bool = False
    app_host: str = "0.0.0.0"
    app_port: int = 8000

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    # Metrics
    metrics_enabled: bool = True

    # Assumptions (rate sheet) config path
    assumptions_config_path: str = "config/assumptions.yaml"

    # Azure Retail Prices API
    live_pricing_url: str = "https://prices.azure.com/api/retail/prices"
    live_pricing_region: str = "eastus"
    # OData filters tried in order until one yields a price; {region} is substituted
    live_pricing_ptu_filters: list[str] = [
        "serviceName eq 'Azure OpenAI Service' and contains(meterName, 'PTU') "
        "and currencyCode eq 'USD'",
        "serviceName eq 'Azure OpenAI Service' and contains(skuName, 'Provisioned') "
        "and currencyCode eq 'USD' and armRegionName eq '{region}'",
    ]
    live_pricing_copilot_filters: list[str] = [
        "serviceName eq 'Microsoft Copilot Studio' and currencyCode eq 'USD'",
    ]
    live_pricing_max_pages: int = Field(default=3, ge=1)
    live_pricing_timeout: float = Field(default=15.0, gt=0)
    live_pricing_retry_attempts: int = Field(default=3, ge=1)

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
