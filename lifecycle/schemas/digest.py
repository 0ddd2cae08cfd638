# lifecycle/schemas/digest.py
from datetime import date, datetime

from pydantic import ConfigDict
from sqlmodel import SQLModel, Field

from lifecycle.schemas.expiry import Tier


class DigestRow(SQLModel):
    """
    One batch line in a digest email.
    """

    model_config = ConfigDict(extra="forbid")

    batch_id: str
    product_id: str
    name: str
    category: str
    supplier: str | None = None
    location: str | None = None
    batch_number: str | None = None
    expiry_date: date
    quantity: int
    days_until_expiry: int
    tier: Tier


class DailyAlert(SQLModel):
    """
    Batches expiring within the tenant's alert threshold.
    """

    model_config = ConfigDict(extra="forbid")

    business_name: str
    reference_date: date
    alert_threshold: int
    rows: list[DigestRow]


class CategoryCount(SQLModel):
    model_config = ConfigDict(extra="forbid")

    category: str
    count: int


class WeeklyStats(SQLModel):
    model_config = ConfigDict(extra="forbid")

    total_products: int
    expired_count: int
    expiring_soon_count: int
    top_categories: list[CategoryCount]


class WeeklyReport(SQLModel):
    """
    Weekly inventory overview: stats + the most relevant batches.
    """

    model_config = ConfigDict(extra="forbid")

    business_name: str
    reference_date: date
    horizon_days: int
    stats: WeeklyStats
    expiring: list[DigestRow]
    expired: list[DigestRow]


class EmailContent(SQLModel):
    """
    Rendered email, ready for an external transport.
    """

    model_config = ConfigDict(extra="forbid")

    subject: str
    text_body: str
    html_body: str


class JobSummary(SQLModel):
    """
    Outcome of one notification job run.
    """

    model_config = ConfigDict(extra="forbid")

    message: str
    processed: int = 0
    emails_sent: int = 0
    errors: list[str] = Field(default_factory=list)
    timestamp: datetime
