"""
Configuration management for the trucking billing engine.
"""

from decimal import Decimal
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TruckingBillingConfig(BaseSettings):
    """Configuration settings for the trucking billing engine."""

    # Application Configuration
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Pricing Configuration
    tax_rate: Decimal = Field(default=Decimal("0.13"), ge=0, le=1, alias="TAX_RATE")
    default_hourly_rate: Decimal = Field(
        default=Decimal("100"), ge=0, alias="DEFAULT_HOURLY_RATE"
    )

    # Reconciliation Configuration
    amount_tolerance: Decimal = Field(
        default=Decimal("0.01"), ge=0, alias="AMOUNT_TOLERANCE"
    )
    reconcile_max_workers: int = Field(default=4, ge=1, alias="RECONCILE_MAX_WORKERS")
    reconcile_batch_limit: int = Field(
        default=100, ge=1, alias="RECONCILE_BATCH_LIMIT"
    )

    # Record Store Configuration
    data_file: str = Field(default="data/records.json", alias="DATA_FILE")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        populate_by_name=True,
    )

    @field_validator("tax_rate", "default_hourly_rate", "amount_tolerance", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        """Parse numeric settings through str so floats keep their written value."""
        if isinstance(v, Decimal):
            return v
        if isinstance(v, float):
            return Decimal(str(v))
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Ensure environment is valid."""
        valid_envs = ["development", "testing", "production"]
        if v.lower() not in valid_envs:
            raise ValueError(f"Environment must be one of: {valid_envs}")
        return v.lower()

    @property
    def tax_percent(self) -> Decimal:
        """Tax rate on the 0-100 scale, for display."""
        return self.tax_rate * Decimal("100")


def load_config(env_file: Optional[str] = None) -> TruckingBillingConfig:
    """Load configuration from environment variables and .env file."""
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    return TruckingBillingConfig()


# Global configuration instance
_config: Optional[TruckingBillingConfig] = None


def get_config() -> TruckingBillingConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(env_file: Optional[str] = None) -> TruckingBillingConfig:
    """Reload configuration (useful for testing)."""
    global _config
    _config = load_config(env_file)
    return _config
