"""Configuration system for the Statement of Affairs service.

This module provides Pydantic Settings-based configuration with environment
variable support and sensible defaults for the calculation engine and the
persistence boundary.

Usage:
    from soa_service.config import SoAConfig

    # Load from environment variables and .env file
    config = SoAConfig()

    # Access persistence settings
    print(config.persistence.debounce_seconds)
    print(config.persistence.max_retries)
"""

from decimal import Decimal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineConfig(BaseSettings):
    """Calculation engine settings.

    Environment Variables:
        SOA_ENGINE_SURPLUS_TOLERANCE: Allowed difference between an entered
            fixed charge surplus and a section's assets less claims before
            a warning is raised
    """

    model_config = SettingsConfigDict(
        env_prefix="SOA_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    surplus_tolerance: Decimal = Field(
        default=Decimal("1.00"),
        ge=0,
        description="Rounding tolerance for fixed charge surplus checks",
    )


class PersistenceConfig(BaseSettings):
    """Persistence settings.

    Controls how edits are written to the document store: how long to wait
    for further edits before saving, and how transient store failures
    (rate limits, network errors) are retried.

    Environment Variables:
        SOA_PERSISTENCE_DEBOUNCE_SECONDS: Quiet period before a pending save is written
        SOA_PERSISTENCE_MAX_RETRIES: Maximum retry attempts after the first failure
        SOA_PERSISTENCE_RETRY_BASE_DELAY: Delay before the first retry in seconds
        SOA_PERSISTENCE_RETRY_BACKOFF_FACTOR: Multiplier applied to the delay per retry
    """

    model_config = SettingsConfigDict(
        env_prefix="SOA_PERSISTENCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debounce_seconds: float = Field(
        default=0.5,
        ge=0,
        description="Quiet period before a pending save is written",
    )
    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Maximum retry attempts for transient store failures",
    )
    retry_base_delay: float = Field(
        default=1.0,
        ge=0,
        description="Delay before the first retry in seconds",
    )
    retry_backoff_factor: float = Field(
        default=2.0,
        ge=1.0,
        description="Multiplier applied to the retry delay after each attempt",
    )

    def retry_delay(self, attempt: int) -> float:
        """Delay before retry number ``attempt`` (0-based)."""
        return self.retry_base_delay * (self.retry_backoff_factor ** attempt)


class SoAConfig(BaseSettings):
    """Root configuration for the Statement of Affairs service.

    Environment Variables:
        SOA_ENV: Environment name (development, staging, production, test)
        SOA_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)

    Example:
        # Override specific settings
        config = SoAConfig(
            persistence=PersistenceConfig(debounce_seconds=0),
        )
    """

    model_config = SettingsConfigDict(
        env_prefix="SOA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    env: str = Field(
        default="development",
        description="Environment name (development, staging, production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    # Nested configuration
    engine: EngineConfig = Field(default_factory=EngineConfig)
    persistence: PersistenceConfig = Field(default_factory=PersistenceConfig)

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment name."""
        valid_envs = {"development", "staging", "production", "test"}
        v_lower = v.lower().strip()
        if v_lower not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of: {valid_envs}")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper().strip()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {valid_levels}")
        return v_upper

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    @property
    def is_debug(self) -> bool:
        return self.log_level == "DEBUG"
