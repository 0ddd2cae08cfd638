# lifecycle/core/email_templates.py
"""
Email template rendering for digest emails.

Responsibilities:
  - Load Jinja2 templates shipped in lifecycle/templates/email.
  - Render a plain-text body (required fallback) and an HTML body for
    each digest, plus its subject line.

Delivery is not handled here: callers hand the resulting EmailContent
to whatever transport they use.
"""

from datetime import date
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from lifecycle.core.config import get_settings
from lifecycle.schemas.digest import DailyAlert, EmailContent, WeeklyReport

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates" / "email"

# Label + colours per tier, as shown in the status badge column
TIER_STYLES: dict[str, dict[str, str]] = {
    "expired": {"label": "Expired", "color": "#ef4444", "bg": "#fef2f2"},
    "urgent": {"label": "Urgent", "color": "#f59e0b", "bg": "#fffbeb"},
    "warning": {"label": "Warning", "color": "#eab308", "bg": "#fefce8"},
    "ok": {"label": "Notice", "color": "#6366f1", "bg": "#f0f4ff"},
}


def format_date(value: date) -> str:
    """Short US style date, e.g. 'Mar 15, 2025'."""
    return f"{value:%b} {value.day}, {value.year}"


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    if count == 1:
        return singular
    return plural or f"{singular}s"


class EmailTemplateRenderer:
    """
    Turns digest models into ready-to-send EmailContent.
    """

    def __init__(self, templates_dir: str | Path = TEMPLATES_DIR):
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=select_autoescape(["html"]),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["format_date"] = format_date
        self.env.filters["pluralize"] = pluralize
        self.env.globals["tier_styles"] = TIER_STYLES

    def _render(self, name: str, **context) -> str:
        settings = get_settings()
        return self.env.get_template(name).render(
            brand_name=settings.BRAND_NAME,
            dashboard_url=settings.DASHBOARD_URL,
            **context,
        )

    def render_daily_alert(self, alert: DailyAlert) -> EmailContent:
        count = len(alert.rows)
        subject = (
            f"Daily Expiry Alert - {count} products expiring in next "
            f"{alert.alert_threshold} days"
        )
        return EmailContent(
            subject=subject,
            text_body=self._render("daily_alert.txt", alert=alert),
            html_body=self._render("daily_alert.html", alert=alert),
        )

    def render_weekly_report(self, report: WeeklyReport) -> EmailContent:
        subject = (
            f"Weekly Report - {report.stats.total_products} products in your inventory"
        )
        return EmailContent(
            subject=subject,
            text_body=self._render("weekly_report.txt", report=report),
            html_body=self._render("weekly_report.html", report=report),
        )
