"""Application settings using Pydantic Settings.

Centralized configuration for the inheritance tax service. Every field can
be overridden through an ``APP_``-prefixed environment variable or a
``.env`` file, e.g. ``APP_LOG_LEVEL=DEBUG``.

Calculation policy switches:
- APP_SPOUSAL_REDUCTION_METHOD: statutory_share_cap (default) or statutory_formula
- APP_FLOOR_HEIR_TAXABLE_AMOUNT: floor each heir's notional share before the table lookup
"""

import logging
from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from calculator.inheritance_tax_config import InheritanceTaxConfig, SpousalReductionMethod

logger = logging.getLogger(__name__)

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application info
    name: str = Field(default="Inheritance Tax Calculator", description="Application name")
    version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    environment: str = Field(default="development", description="Environment name")

    # API settings
    api_host: str = Field(default="127.0.0.1", description="API host")
    api_port: int = Field(default=8000, description="API port")

    # CORS
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        description="Allowed CORS origins"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_json: bool = Field(default=False, description="Emit JSON log lines")

    # Calculation policy
    spousal_reduction_method: SpousalReductionMethod = Field(
        default=SpousalReductionMethod.STATUTORY_SHARE_CAP,
        description="Cap applied to the spousal reduction below the asset limit"
    )
    floor_heir_taxable_amount: bool = Field(
        default=False,
        description="Floor each heir's share of the taxable estate before the table lookup"
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}")
        return level

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment in ("production", "prod", "staging")

    def tax_config(self) -> InheritanceTaxConfig:
        """Statutory constants with this deployment's policy switches applied."""
        return InheritanceTaxConfig.for_2015().with_overrides(
            spousal_reduction_method=self.spousal_reduction_method,
            floor_heir_taxable_amount=self.floor_heir_taxable_amount,
        )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings instance.

    Returns:
        Settings: Cached settings loaded from environment.
    """
    return Settings()
