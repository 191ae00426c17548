"""Typed settings configuration - single source of truth."""

from decimal import Decimal
from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database (bookings fall back to the in-memory repository when unset)
    database_url: str | None = None

    # Vendor integrations (static demo catalog when base URL is unset)
    vendor_api_base_url: str | None = None
    vendor_api_key: SecretStr | None = None

    # Requirement extraction
    openai_api_key: SecretStr | None = None
    openai_model: str = "gpt-4o-mini"
    default_lead_days: int = 14
    default_trip_days: int = 2
    default_currency: str = "USD"

    # Provider calls (milliseconds)
    provider_timeout_ms: int = 4000
    provider_retry_count: int = 1
    retry_jitter_min_ms: int = 200
    retry_jitter_max_ms: int = 500

    # Circuit breaker
    circuit_breaker_failures: int = 5
    circuit_breaker_window_sec: int = 60
    circuit_breaker_half_open_sec: int = 30

    # Ranking
    rank_top_n: int = 3
    rank_max_packages: int = 20

    # Cart pricing
    cart_tax_rate: Decimal = Decimal("0.0875")
    cart_fee_rate: Decimal = Decimal("0.025")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
