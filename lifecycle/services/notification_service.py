# lifecycle/services/notification_service.py
import logging
from datetime import date, datetime, timezone
from typing import Callable

from lifecycle.core.email_templates import EmailTemplateRenderer
from lifecycle.repositories.snapshot_repo import InventorySnapshot
from lifecycle.schemas.digest import EmailContent, JobSummary
from lifecycle.schemas.tenant import TenantAccount
from lifecycle.services.digest_service import DigestService

logger = logging.getLogger(__name__)

# send(to_email, content); raise to signal a failed delivery
EmailSender = Callable[[str, EmailContent], None]


class NotificationService:
    """
    Runs the scheduled digest jobs over every tenant in a snapshot.

    Responsibilities:
      - pick tenants that opted in (daily alerts / weekly report)
      - skip deactivated tenants
      - build + render each digest for the job's reference date
      - hand content to the injected sender, collecting per-tenant errors

    One tenant's failure is logged and reported in the summary; the run
    continues with the next tenant.
    """

    def __init__(
        self,
        snapshot: InventorySnapshot,
        digests: DigestService | None = None,
        renderer: EmailTemplateRenderer | None = None,
    ):
        self.snapshot = snapshot
        self.digests = digests or DigestService()
        self.renderer = renderer or EmailTemplateRenderer()

    # ----- Helpers -----

    def _eligible(self, opted_in: Callable[[TenantAccount], bool]) -> list[TenantAccount]:
        accounts: list[TenantAccount] = []
        for account in self.snapshot.tenants():
            if not opted_in(account):
                continue
            if not account.profile.is_active:
                logger.info("Skipping inactive tenant: %s", account.profile.email)
                continue
            accounts.append(account)
        return accounts

    @staticmethod
    def _record_failure(account: TenantAccount, exc: Exception, errors: list[str]) -> None:
        email = account.profile.email
        logger.exception("Failed to build digest for %s", email)
        errors.append(f"Failed to process {email}: {exc}")

    def _send(
        self,
        account: TenantAccount,
        content: EmailContent,
        send: EmailSender,
        errors: list[str],
    ) -> bool:
        email = account.profile.email
        try:
            send(email, content)
        except Exception as exc:
            logger.error("Failed to send %r to %s: %s", content.subject, email, exc)
            errors.append(f"Failed to send email to {email}: {exc}")
            return False
        logger.info("Sent %r to %s", content.subject, email)
        return True

    # ----- Jobs -----

    def run_daily_alerts(
        self,
        reference: date | datetime,
        send: EmailSender,
    ) -> JobSummary:
        """
        Daily expiry alert job.

        Tenants with nothing expiring inside their threshold get no email
        but still count as processed.
        """
        accounts = self._eligible(
            lambda a: a.preferences.daily_expiry_alerts_enabled
        )
        logger.info("Daily alerts: %d eligible tenants", len(accounts))

        emails_sent = 0
        errors: list[str] = []

        for account in accounts:
            try:
                products = self.snapshot.products_for(account.profile.id)
                alert = self.digests.build_daily_alert(account, products, reference)
                if alert is None:
                    continue
                content = self.renderer.render_daily_alert(alert)
            except Exception as exc:
                self._record_failure(account, exc, errors)
                continue
            if self._send(account, content, send, errors):
                emails_sent += 1

        return JobSummary(
            message="Daily expiry alert job completed",
            processed=len(accounts),
            emails_sent=emails_sent,
            errors=errors,
            timestamp=datetime.now(timezone.utc),
        )

    def run_weekly_reports(
        self,
        reference: date | datetime,
        send: EmailSender,
    ) -> JobSummary:
        """
        Weekly report job. Every opted-in active tenant gets a report,
        even with an empty inventory.
        """
        accounts = self._eligible(lambda a: a.preferences.weekly_report)
        logger.info("Weekly reports: %d eligible tenants", len(accounts))

        emails_sent = 0
        errors: list[str] = []

        for account in accounts:
            try:
                products = self.snapshot.products_for(account.profile.id)
                report = self.digests.build_weekly_report(account, products, reference)
                content = self.renderer.render_weekly_report(report)
            except Exception as exc:
                self._record_failure(account, exc, errors)
                continue
            if self._send(account, content, send, errors):
                emails_sent += 1

        return JobSummary(
            message="Weekly report job completed",
            processed=len(accounts),
            emails_sent=emails_sent,
            errors=errors,
            timestamp=datetime.now(timezone.utc),
        )
