# lifecycle/preview_digest.py
"""
Render a digest email for one tenant of a JSON snapshot and print it.

Usage:
    python -m lifecycle.preview_digest snapshot.json <tenant_id>
    python -m lifecycle.preview_digest snapshot.json <tenant_id> --kind weekly --date 2025-03-10 --html
"""

import argparse
import logging
import sys
from datetime import date, datetime, timezone

from lifecycle.core.config import get_settings
from lifecycle.core.email_templates import EmailTemplateRenderer
from lifecycle.repositories.snapshot_repo import InventorySnapshot
from lifecycle.services.digest_service import DigestService

logger = logging.getLogger("lifecycle")


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Preview a digest email.")
    parser.add_argument("snapshot", help="JSON export (profiles, settings, products, product_batches)")
    parser.add_argument("tenant_id", help="Tenant (profile) id")
    parser.add_argument("--kind", choices=("daily", "weekly"), default="daily")
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Reference date YYYY-MM-DD (default: today, UTC)",
    )
    parser.add_argument("--html", action="store_true", help="Print the HTML body")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL)

    args = _parse_args(argv)
    reference = args.date or datetime.now(timezone.utc).date()

    try:
        snapshot = InventorySnapshot.from_json_file(args.snapshot)
    except (OSError, ValueError) as e:
        logger.error("Could not load snapshot: %s", e)
        return 1

    account = snapshot.get_tenant(args.tenant_id)
    if account is None:
        logger.error("Tenant %s not found in snapshot", args.tenant_id)
        return 1

    products = snapshot.products_for(account.profile.id)
    digests = DigestService()
    renderer = EmailTemplateRenderer()

    if args.kind == "daily":
        alert = digests.build_daily_alert(account, products, reference)
        if alert is None:
            print(f"No batches expiring within {account.preferences.alert_threshold} days.")
            return 0
        content = renderer.render_daily_alert(alert)
    else:
        report = digests.build_weekly_report(account, products, reference)
        content = renderer.render_weekly_report(report)

    print(f"To: {account.profile.email}")
    print(f"Subject: {content.subject}")
    print()
    print(content.html_body if args.html else content.text_body)
    return 0


if __name__ == "__main__":
    sys.exit(main())
