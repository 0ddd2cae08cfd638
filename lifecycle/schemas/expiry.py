# lifecycle/schemas/expiry.py
from typing import Literal

from pydantic import ConfigDict, model_validator
from sqlmodel import SQLModel, Field

from lifecycle.schemas.product import Batch

Tier = Literal["expired", "urgent", "warning", "ok"]
StatusFilter = Literal["all", "expired", "expiring-soon", "good"]


class ThresholdSet(SQLModel):
    """
    Day thresholds for freshness classification.

    Two conventions live side by side:
      - 4-tier scale: expired < 0 <= urgent <= urgent_days < warning
        <= warning_days < ok
      - single cutoff: expiring-soon when 0 <= days <= expiring_soon_days
    """

    model_config = ConfigDict(extra="forbid")

    urgent_days: int = Field(default=3, ge=0)
    warning_days: int = Field(default=7, ge=0)
    expiring_soon_days: int = Field(default=7, ge=0)

    @model_validator(mode="after")
    def check_order(self) -> "ThresholdSet":
        if self.warning_days < self.urgent_days:
            raise ValueError("warning_days must be >= urgent_days")
        return self


class Classification(SQLModel):
    """
    Result of classifying a target date against a reference date.
    """

    model_config = ConfigDict(extra="forbid")

    days_until: int
    tier: Tier


class AggregateView(SQLModel):
    """
    Derived, non-persisted rollup of a product's batch list.

    earliest_batch is None when the product has no batches.
    """

    model_config = ConfigDict(extra="forbid")

    earliest_batch: Batch | None = None
    total_quantity: int = 0
    expired_batch_count: int = 0
    expiring_batch_count: int = 0
