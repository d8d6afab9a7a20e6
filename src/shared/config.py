"""Application settings loaded from environment variables (``STOREFRONT_*``)."""

from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorefrontSettings(BaseSettings):
    """Runtime configuration for the settlement engine."""

    # Environment
    env: str = Field(default="development", description="development / test / staging / production")
    log_level: str | None = Field(default=None, description="Overrides the environment's default log level")
    log_dir: str | None = Field(default=None, description="Directory for rotating log files (disabled when unset)")

    # Currency
    currency: str = Field(default="INR", max_length=3)

    # Payment gateway
    gateway_adapter: str = Field(default="fake", description="fake or razorpay")
    gateway_key_id: str = Field(default="rzp_test_key")
    gateway_key_secret: SecretStr = Field(default=SecretStr("test-secret"))
    gateway_base_url: str = Field(default="https://api.razorpay.com/v1")
    gateway_timeout_seconds: float = Field(default=10.0, gt=0)

    # Pricing
    referral_discount_percent: int = Field(default=10, ge=0, le=100)
    wallet_redemption_cap_percent: int = Field(default=10, ge=0, le=100)

    # Wallet ledger
    base_reward_percent: int = Field(default=3, ge=0, le=100)
    mid_reward_percent: int = Field(default=6, ge=0, le=100)
    top_reward_percent: int = Field(default=9, ge=0, le=100)
    mid_tier_threshold: int = Field(default=5000, ge=0)
    top_tier_threshold: int = Field(default=15000, ge=0)
    holding_period_days: int = Field(default=20, ge=0)
    maturation_cron: str = Field(default="0 0 * * *", description="Crontab for the maturation sweep")

    # Affiliate commission
    commission_percent: int = Field(default=1, ge=0, le=100)

    # Payment expiry reconciliation
    pending_payment_expiry_minutes: int = Field(default=30, ge=1)
    payment_expiry_interval_minutes: int = Field(default=15, ge=1)
    scheduler_enabled: bool = Field(default=False, description="Run the background jobs inside the API process")

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> StorefrontSettings:
    """Return the cached settings instance."""
    return StorefrontSettings()
