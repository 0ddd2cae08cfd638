# lifecycle/services/classifier.py
"""
Freshness classification.

Every function takes the reference date explicitly. Nothing in this
module reads the clock, so the same code serves live product tables and
scheduled digests that run at a different instant.
"""

from datetime import date, datetime

from lifecycle.core.config import get_settings
from lifecycle.schemas.expiry import Classification, ThresholdSet, Tier


def thresholds_from_settings() -> ThresholdSet:
    """
    Build the default ThresholdSet from environment settings.
    """
    settings = get_settings()
    return ThresholdSet(
        urgent_days=settings.URGENT_DAYS,
        warning_days=settings.WARNING_DAYS,
        expiring_soon_days=settings.EXPIRING_SOON_DAYS,
    )


def to_day(value: date | datetime) -> date:
    """Strip the time of day, keeping the calendar day."""
    if isinstance(value, datetime):
        return value.date()
    return value


def days_until(reference: date | datetime, target: date | datetime) -> int:
    """
    Signed number of calendar days from reference to target.

    Both sides are reduced to their calendar day first, so a target later
    on the same day as the reference gives 0.
    """
    return (to_day(target) - to_day(reference)).days


def tier_for(days: int, thresholds: ThresholdSet | None = None) -> Tier:
    """
    Map a day count onto the 4-tier scale.
    """
    thresholds = thresholds or thresholds_from_settings()
    if days < 0:
        return "expired"
    if days <= thresholds.urgent_days:
        return "urgent"
    if days <= thresholds.warning_days:
        return "warning"
    return "ok"


def classify(
    reference: date | datetime,
    target: date | datetime,
    thresholds: ThresholdSet | None = None,
) -> Classification:
    """
    Classify target against reference.

    Callers must pass valid dates; parsing and validation of raw input
    happen upstream.
    """
    days = days_until(reference, target)
    return Classification(days_until=days, tier=tier_for(days, thresholds))


def is_expired(days: int) -> bool:
    return days < 0


def is_expiring_soon(days: int, thresholds: ThresholdSet | None = None) -> bool:
    """
    Single-cutoff convention used by the status filter and badge counts.
    """
    thresholds = thresholds or thresholds_from_settings()
    return 0 <= days <= thresholds.expiring_soon_days


def is_good(days: int, thresholds: ThresholdSet | None = None) -> bool:
    thresholds = thresholds or thresholds_from_settings()
    return days > thresholds.expiring_soon_days
