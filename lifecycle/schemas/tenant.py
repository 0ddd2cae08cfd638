# lifecycle/schemas/tenant.py
from pydantic import ConfigDict, EmailStr, field_validator
from sqlmodel import SQLModel, Field

from lifecycle.core.config import get_settings


class TenantProfile(SQLModel):
    """
    Business account that owns products.

    Matches store columns (profiles):
      - id, business_name, email, is_active
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    business_name: str
    email: EmailStr
    is_active: bool = True

    @field_validator("business_name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("business_name cannot be empty")
        return v


class NotificationPreferences(SQLModel):
    """
    Per-tenant email preferences.

    Matches store columns (settings):
      - daily_expiry_alerts_enabled, alert_threshold, weekly_report

    A missing alert_threshold falls back to DEFAULT_ALERT_THRESHOLD.
    """

    model_config = ConfigDict(extra="ignore")

    daily_expiry_alerts_enabled: bool = False
    alert_threshold: int = Field(
        default_factory=lambda: get_settings().DEFAULT_ALERT_THRESHOLD,
        ge=1,
        le=365,
        description="Daily alert window in days (1-365)",
    )
    weekly_report: bool = False


class TenantAccount(SQLModel):
    """
    Profile + preferences, the unit the notification jobs iterate over.
    """

    model_config = ConfigDict(extra="forbid")

    profile: TenantProfile
    preferences: NotificationPreferences = Field(
        default_factory=NotificationPreferences
    )
