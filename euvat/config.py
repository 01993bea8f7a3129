"""Application configuration via pydantic-settings.

All values are loaded from environment variables (.env file).
Settings are organized into logical groups and composed into a single Settings object.
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# EU member states plus Northern Ireland, which VIES also serves.
EU_VAT_COUNTRIES: tuple[str, ...] = (
    "AT", "BE", "BG", "CY", "CZ", "DE", "DK", "EE", "ES", "FI", "FR", "GR",
    "HR", "HU", "IE", "IT", "LT", "LU", "LV", "MT", "NL", "PL", "PT", "RO",
    "SE", "SI", "SK", "XI",
)


class RedisSettings(BaseSettings):
    """Redis connection used for the result and WSDL caches."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection string",
    )


class ViesSettings(BaseSettings):
    """VIES checkVat service and caching configuration."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="VIES_", extra="ignore")

    wsdl_url: str = Field(
        default="https://ec.europa.eu/taxation_customs/vies/checkVatService.wsdl",
        description="Published WSDL of the checkVat service",
    )
    connect_timeout: float = Field(default=5.0, description="Connect timeout in seconds")
    read_timeout: float = Field(default=30.0, description="Read timeout in seconds")
    result_cache_ttl: int = Field(default=3600, description="TTL of cached valid results in seconds")
    wsdl_cache_ttl: int = Field(default=60, description="TTL of the cached WSDL document in seconds")
    debug_mode: bool = Field(
        default=False,
        description="Bypass the result cache and re-fetch the WSDL on every call",
    )
    vat_countries: list[str] = Field(
        default_factory=lambda: list(EU_VAT_COUNTRIES),
        description="Country codes eligible for VAT number validation",
    )
    prefix_overrides: dict[str, str] = Field(
        default_factory=dict,
        description='Extra country -> VAT prefix entries, e.g. {"GR": "EL"}',
    )

    @field_validator("vat_countries")
    @classmethod
    def normalize_countries(cls, v: list[str]) -> list[str]:
        """Uppercase and strip country codes."""
        return [code.strip().upper() for code in v if code.strip()]

    @field_validator("prefix_overrides")
    @classmethod
    def normalize_overrides(cls, v: dict[str, str]) -> dict[str, str]:
        """Uppercase both country codes and prefixes."""
        return {k.strip().upper(): p.strip().upper() for k, p in v.items()}


class Settings(BaseSettings):
    """Root settings composing all sub-settings.

    Usage:
        settings = Settings()
        settings.redis.redis_url
        settings.vies.debug_mode
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")

    # Composed settings (loaded from same .env)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    vies: ViesSettings = Field(default_factory=ViesSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid:
            msg = f"Invalid log level: {v}. Must be one of {valid}"
            raise ValueError(msg)
        return upper


# Module-level singleton: import this wherever settings are needed.
settings = Settings()
