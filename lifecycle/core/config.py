# lifecycle/core/config.py
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized engine settings loaded from environment.

    Every value has a default, so no .env is required. Override any of
    them with an env var of the same name, e.g.:

      - URGENT_DAYS=2
      - EXPIRING_SOON_DAYS=10
      - DEFAULT_PAGE_SIZE=50

    Threshold conventions:
      - URGENT_DAYS / WARNING_DAYS drive the 4-tier scale used for alert
        styling (expired / urgent / warning / ok).
      - EXPIRING_SOON_DAYS drives the single cutoff used by the
        "expiring-soon" status filter and badge counts.
    """

    BRAND_NAME: str = "LifeCycle"
    DASHBOARD_URL: str = "https://app.lifecycle.cloud/dashboard"

    # Freshness thresholds (days)
    URGENT_DAYS: int = 3
    WARNING_DAYS: int = 7
    EXPIRING_SOON_DAYS: int = 7

    # Product table pagination
    DEFAULT_PAGE_SIZE: int = 25

    # Digests
    DEFAULT_ALERT_THRESHOLD: int = 7
    WEEKLY_HORIZON_DAYS: int = 30
    WEEKLY_LIST_LIMIT: int = 10
    WEEKLY_TOP_CATEGORIES: int = 5

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator(
        "URGENT_DAYS",
        "WARNING_DAYS",
        "EXPIRING_SOON_DAYS",
        "WEEKLY_HORIZON_DAYS",
    )
    @classmethod
    def non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("threshold cannot be negative")
        return v

    @field_validator(
        "DEFAULT_PAGE_SIZE",
        "DEFAULT_ALERT_THRESHOLD",
        "WEEKLY_LIST_LIMIT",
        "WEEKLY_TOP_CATEGORIES",
    )
    @classmethod
    def positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("value must be greater than zero")
        return v

    @field_validator("DEFAULT_ALERT_THRESHOLD")
    @classmethod
    def alert_threshold_range(cls, v: int) -> int:
        if v > 365:
            raise ValueError("alert threshold cannot exceed 365 days")
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every call.
    """
    return Settings()
