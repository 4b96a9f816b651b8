"""
Engine configuration using Pydantic Settings.
Loads environment variables and provides type-safe defaults for invoices.
"""

import logging
from decimal import Decimal
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="INVOICE_ENGINE_",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    environment: str = Field(default="development", description="Current environment")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Log level when debug is off")

    # Invoice defaults
    default_currency: str = Field(default="INR", min_length=3, max_length=3)
    default_tax_rate: Decimal = Field(default=Decimal("18"), ge=0, description="Tax rate in percent")
    default_payment_terms_days: int = Field(default=30, ge=0)

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept log level names in any case."""
        level = v.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("default_currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.strip().upper()

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment.lower() == "testing"

    @property
    def effective_log_level(self) -> int:
        return logging.DEBUG if self.debug else logging.getLevelNamesMapping()[self.log_level]


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Use this function to get settings throughout the engine.
    """
    return Settings()


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure root logging for applications embedding the engine."""
    settings = settings or get_settings()
    logging.basicConfig(level=settings.effective_log_level, format=LOG_FORMAT)
