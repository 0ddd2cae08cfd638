# tests/test_email_templates.py
from datetime import date

import pytest

from lifecycle.core.email_templates import EmailTemplateRenderer, format_date, pluralize
from lifecycle.schemas.digest import (
    CategoryCount,
    DailyAlert,
    DigestRow,
    WeeklyReport,
    WeeklyStats,
)


def digest_row(**overrides) -> DigestRow:
    data = {
        "batch_id": "b1",
        "product_id": "p1",
        "name": "Greek Yogurt",
        "category": "Dairy",
        "batch_number": "Y-7",
        "expiry_date": date(2025, 3, 12),
        "quantity": 6,
        "days_until_expiry": 2,
        "tier": "urgent",
    }
    data.update(overrides)
    return DigestRow(**data)


@pytest.fixture
def renderer() -> EmailTemplateRenderer:
    return EmailTemplateRenderer()


def test_format_date():
    assert format_date(date(2025, 3, 5)) == "Mar 5, 2025"
    assert format_date(date(2025, 12, 25)) == "Dec 25, 2025"


def test_pluralize():
    assert pluralize(1, "day") == "day"
    assert pluralize(0, "day") == "days"
    assert pluralize(2, "batch", "batches") == "batches"


def test_render_daily_alert(renderer):
    alert = DailyAlert(
        business_name="Fish & Chips",
        reference_date=date(2025, 3, 10),
        alert_threshold=7,
        rows=[digest_row()],
    )
    content = renderer.render_daily_alert(alert)

    assert content.subject == "Daily Expiry Alert - 1 products expiring in next 7 days"

    assert "Action required for Fish & Chips." in content.text_body
    assert "You have 1 product expiring within the next 7 days" in content.text_body
    assert "Greek Yogurt (Batch: Y-7)" in content.text_body
    assert "Expires: Mar 12, 2025 | Status: Urgent | Quantity: 6" in content.text_body

    assert "Fish &amp; Chips" in content.html_body
    assert "Fish & Chips" not in content.html_body
    assert "Greek Yogurt" in content.html_body


def test_render_weekly_report(renderer):
    report = WeeklyReport(
        business_name="Corner Store",
        reference_date=date(2025, 3, 10),
        horizon_days=30,
        stats=WeeklyStats(
            total_products=4,
            expired_count=1,
            expiring_soon_count=1,
            top_categories=[CategoryCount(category="Dairy", count=3)],
        ),
        expiring=[digest_row(days_until_expiry=1, tier="urgent")],
        expired=[digest_row(name="Old Bread", batch_number=None, days_until_expiry=-3, tier="expired")],
    )
    content = renderer.render_weekly_report(report)

    assert content.subject == "Weekly Report - 4 products in your inventory"
    text = content.text_body
    assert "Summary for Corner Store (week of Mar 10, 2025)" in text
    assert "Total products: 4" in text
    assert "Expired batches: 1" in text
    assert "- Dairy: 3" in text
    assert "1 day left" in text
    assert "- Old Bread: expired Mar 12, 2025" in text
    assert "Old Bread" in content.html_body


def test_render_weekly_report_empty_sections(renderer):
    report = WeeklyReport(
        business_name="Empty Shop",
        reference_date=date(2025, 3, 10),
        horizon_days=30,
        stats=WeeklyStats(total_products=0, expired_count=0, expiring_soon_count=0, top_categories=[]),
        expiring=[],
        expired=[],
    )
    content = renderer.render_weekly_report(report)
    assert content.subject == "Weekly Report - 0 products in your inventory"
    assert "Top categories:" not in content.text_body
    assert "Expiring soon:" not in content.text_body
    assert "Recently expired:" not in content.text_body
