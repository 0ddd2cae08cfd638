# lifecycle/services/product_filter.py
"""
Product table filter pipeline.

Canonical application order: search -> status -> date range. Every step
is a pure predicate, so the result is the same in any order and
re-applying the same criteria changes nothing.
"""

import re
from datetime import date, datetime
from typing import Iterable

from lifecycle.schemas.expiry import ThresholdSet
from lifecycle.schemas.listing import FilterCriteria
from lifecycle.schemas.product import Product
from lifecycle.services.batch_aggregator import earliest_expiry_date
from lifecycle.services.classifier import (
    days_until,
    is_expired,
    is_expiring_soon,
    is_good,
    thresholds_from_settings,
)

ISO_DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")
US_DATE_PATTERN = re.compile(r"^([0-9]{1,2})/([0-9]{1,2})/([0-9]{4})$")

# Natural-language formats, tried in order after ISO and US patterns
NATURAL_DATE_FORMATS = (
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%d %B, %Y",
    "%d %b, %Y",
    "%Y/%m/%d",
    "%a %b %d %Y",
    "%A, %B %d, %Y",
)

# Natural parsing only kicks in above this many characters, so short
# numeric product codes are not mistaken for dates.
MIN_NATURAL_DATE_LENGTH = 5


# ----- Date parsing -----


def parse_search_date(term: str | None) -> date | None:
    """
    Try to read a search term as a calendar date.

    Order (first success wins):
      1. ISO YYYY-MM-DD
      2. US M/D/YYYY or MM/DD/YYYY (month 1-12, day 1-31, then a real
         calendar date)
      3. natural-language formats, only if the trimmed term is longer
         than MIN_NATURAL_DATE_LENGTH characters

    Digits must be ASCII 0-9.

    Returns None when the term should be treated as plain text.
    """
    if term is None:
        return None
    trimmed = term.strip()
    if not trimmed:
        return None

    if ISO_DATE_PATTERN.match(trimmed):
        try:
            return date.fromisoformat(trimmed)
        except ValueError:
            pass

    us_match = US_DATE_PATTERN.match(trimmed)
    if us_match:
        month, day, year = (int(part) for part in us_match.groups())
        if 1 <= month <= 12 and 1 <= day <= 31:
            try:
                return date(year, month, day)
            except ValueError:
                pass

    if len(trimmed) > MIN_NATURAL_DATE_LENGTH and trimmed.isascii():
        for fmt in NATURAL_DATE_FORMATS:
            try:
                return datetime.strptime(trimmed, fmt).date()
            except ValueError:
                continue

    return None


def parse_range_bound(value: date | datetime | str | None) -> date | None:
    """
    Normalize a date-range bound. Malformed strings mean "no bound".
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    value = value.strip()
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


# ----- Predicates -----


def matches_search(product: Product, term: str | None) -> bool:
    """
    Date terms match the earliest batch expiry; anything else is a
    case-insensitive substring match on name, category or batch number.
    Text terms are matched as typed, surrounding spaces included.
    """
    if term is None or not term.strip():
        return True

    search_date = parse_search_date(term)
    if search_date is not None:
        return earliest_expiry_date(product) == search_date

    needle = term.lower()
    if needle in product.name.lower() or needle in product.category.lower():
        return True
    return any(
        batch.batch_number and needle in batch.batch_number.lower()
        for batch in product.batches
    )


def matches_status(
    product: Product,
    status_filter: str | None,
    reference: date | datetime,
    thresholds: ThresholdSet | None = None,
) -> bool:
    """
    Status of the earliest batch relative to reference.

    "all" and unrecognized values do not filter. Products without batches
    fail every other status.
    """
    if status_filter not in ("expired", "expiring-soon", "good"):
        return True

    expiry = earliest_expiry_date(product)
    if expiry is None:
        return False

    thresholds = thresholds or thresholds_from_settings()
    days = days_until(reference, expiry)
    if status_filter == "expired":
        return is_expired(days)
    if status_filter == "expiring-soon":
        return is_expiring_soon(days, thresholds)
    return is_good(days, thresholds)


def matches_date_range(
    product: Product,
    start: date | None,
    end: date | None,
) -> bool:
    """
    Inclusive range on the earliest batch expiry. Products without
    batches are excluded while any bound is active.
    """
    if start is None and end is None:
        return True

    expiry = earliest_expiry_date(product)
    if expiry is None:
        return False
    if start is not None and expiry < start:
        return False
    if end is not None and expiry > end:
        return False
    return True


# ----- Pipeline -----


def filter_by_date_range(
    products: Iterable[Product],
    criteria: FilterCriteria,
) -> list[Product]:
    start = parse_range_bound(criteria.start_date)
    end = parse_range_bound(criteria.end_date)
    return [p for p in products if matches_date_range(p, start, end)]


def filter_products(
    products: Iterable[Product],
    criteria: FilterCriteria,
    reference: date | datetime,
    thresholds: ThresholdSet | None = None,
) -> list[Product]:
    """
    Apply search, status and date range filters (logical AND).

    Returns a new list; the input is never modified.
    """
    thresholds = thresholds or thresholds_from_settings()

    result = [p for p in products if matches_search(p, criteria.search_term)]
    result = [
        p
        for p in result
        if matches_status(p, criteria.status_filter, reference, thresholds)
    ]
    return filter_by_date_range(result, criteria)
