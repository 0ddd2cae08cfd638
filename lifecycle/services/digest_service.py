# lifecycle/services/digest_service.py
import logging
from datetime import date, datetime

from lifecycle.core.config import get_settings
from lifecycle.schemas.digest import (
    CategoryCount,
    DailyAlert,
    DigestRow,
    WeeklyReport,
    WeeklyStats,
)
from lifecycle.schemas.expiry import ThresholdSet
from lifecycle.schemas.product import Batch, Product
from lifecycle.schemas.tenant import TenantAccount
from lifecycle.services.classifier import classify, thresholds_from_settings, to_day

logger = logging.getLogger(__name__)


class DigestService:
    """
    Builds the content of the scheduled emails from a product snapshot.

    Responsibilities:
      - daily alert: every batch expiring within the tenant's threshold
      - weekly report: inventory stats, soonest-expiring and most recently
        expired batches, top categories

    The reference date is always passed in, so a job that runs late still
    reports against the day it was scheduled for.
    """

    def __init__(self, thresholds: ThresholdSet | None = None):
        self.thresholds = thresholds or thresholds_from_settings()

    # ----- Helpers -----

    def _row(self, product: Product, batch: Batch, reference: date | datetime) -> DigestRow:
        classification = classify(reference, batch.expiry_date, self.thresholds)
        return DigestRow(
            batch_id=batch.id,
            product_id=product.id,
            name=product.name,
            category=product.category,
            supplier=product.supplier,
            location=product.location,
            batch_number=batch.batch_number,
            expiry_date=batch.expiry_date,
            quantity=batch.quantity or 0,
            days_until_expiry=classification.days_until,
            tier=classification.tier,
        )

    def _rows(self, products: list[Product], reference: date | datetime) -> list[DigestRow]:
        return [
            self._row(product, batch, reference)
            for product in products
            for batch in product.batches
        ]

    @staticmethod
    def _top_categories(products: list[Product], limit: int) -> list[CategoryCount]:
        """
        Product count per category, highest first. Ties keep the order in
        which categories were first seen.
        """
        counts: dict[str, int] = {}
        for product in products:
            counts[product.category] = counts.get(product.category, 0) + 1

        ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        return [
            CategoryCount(category=category, count=count)
            for category, count in ranked[:limit]
        ]

    # ----- Daily alert -----

    def build_daily_alert(
        self,
        account: TenantAccount,
        products: list[Product],
        reference: date | datetime,
    ) -> DailyAlert | None:
        """
        Batches with 0 <= days_until <= alert_threshold, soonest first.

        Returns None when nothing is expiring: no alert is sent.
        """
        threshold = account.preferences.alert_threshold
        rows = [
            row
            for row in self._rows(products, reference)
            if 0 <= row.days_until_expiry <= threshold
        ]
        if not rows:
            logger.debug("No expiring batches for tenant %s", account.profile.id)
            return None

        rows.sort(key=lambda row: row.expiry_date)
        return DailyAlert(
            business_name=account.profile.business_name,
            reference_date=to_day(reference),
            alert_threshold=threshold,
            rows=rows,
        )

    # ----- Weekly report -----

    def build_weekly_report(
        self,
        account: TenantAccount,
        products: list[Product],
        reference: date | datetime,
    ) -> WeeklyReport:
        """
        Weekly overview, always produced (even for an empty inventory).

        - expired: days_until < 0, most recently expired first
        - expiring: 0 <= days_until <= WEEKLY_HORIZON_DAYS, soonest first
        - both lists truncated to WEEKLY_LIST_LIMIT; the stats count the
          full lists
        """
        settings = get_settings()
        horizon = settings.WEEKLY_HORIZON_DAYS
        limit = settings.WEEKLY_LIST_LIMIT

        rows = self._rows(products, reference)
        expired = [row for row in rows if row.days_until_expiry < 0]
        expiring = [row for row in rows if 0 <= row.days_until_expiry <= horizon]

        expired.sort(key=lambda row: row.expiry_date, reverse=True)
        expiring.sort(key=lambda row: row.days_until_expiry)

        stats = WeeklyStats(
            total_products=len(products),
            expired_count=len(expired),
            expiring_soon_count=len(expiring),
            top_categories=self._top_categories(products, settings.WEEKLY_TOP_CATEGORIES),
        )

        return WeeklyReport(
            business_name=account.profile.business_name,
            reference_date=to_day(reference),
            horizon_days=horizon,
            stats=stats,
            expiring=expiring[:limit],
            expired=expired[:limit],
        )
