# lifecycle/services/product_listing.py
import math
from datetime import date, datetime
from typing import Any, Callable, Iterable

from lifecycle.core.config import get_settings
from lifecycle.schemas.expiry import ThresholdSet
from lifecycle.schemas.listing import (
    FilterCounts,
    FilterCriteria,
    ListingQuery,
    ProductListing,
    ProductPage,
    ProductRow,
    SortDirection,
    SortField,
)
from lifecycle.schemas.product import Product
from lifecycle.services.batch_aggregator import (
    aggregate,
    earliest_expiry_date,
    total_quantity,
)
from lifecycle.services.classifier import (
    classify,
    days_until,
    is_expired,
    is_expiring_soon,
    is_good,
    thresholds_from_settings,
)
from lifecycle.services.product_filter import filter_by_date_range, filter_products


# ----- Sorting -----


def _expiry_sort_key(product: Product) -> tuple[int, date]:
    # Missing expiry sorts as +infinity: after every real date in asc order.
    expiry = earliest_expiry_date(product)
    if expiry is None:
        return (1, date.max)
    return (0, expiry)


SORT_KEYS: dict[SortField, Callable[[Product], Any]] = {
    "name": lambda p: p.name.lower(),
    "category": lambda p: p.category.lower(),
    "expiry_date": _expiry_sort_key,
    "status": _expiry_sort_key,
    "quantity": total_quantity,
}

SORT_DIRECTIONS: tuple[SortDirection, ...] = ("asc", "desc")


def sort_products(
    products: Iterable[Product],
    sort_field: str,
    sort_direction: str = "asc",
) -> list[Product]:
    """
    Stable sort by one field.

    - name / category: case-insensitive
    - expiry_date / status: earliest batch expiry, missing expiry last
      in ascending order
    - quantity: total quantity across batches

    desc is the exact reverse of the asc comparator, so equal keys keep
    their input order in both directions. An unknown field keeps input
    order; an unknown direction means asc.
    """
    items = list(products)
    key = SORT_KEYS.get(sort_field)
    if key is None:
        return items
    if sort_direction not in SORT_DIRECTIONS:
        sort_direction = "asc"
    return sorted(items, key=key, reverse=sort_direction == "desc")


# ----- Pagination -----


def paginate(
    products: list[Product],
    page: int,
    page_size: int | None = None,
) -> ProductPage:
    """
    Slice one 1-indexed page.

    Pages outside 1..total_pages give an empty slice; the caller resets
    to page 1 when filters, sort or page size change. A missing or
    non-positive page size falls back to DEFAULT_PAGE_SIZE.
    """
    if page_size is None or page_size <= 0:
        page_size = get_settings().DEFAULT_PAGE_SIZE

    total_count = len(products)
    total_pages = math.ceil(total_count / page_size)

    if page < 1:
        items: list[Product] = []
    else:
        start = (page - 1) * page_size
        items = products[start : start + page_size]

    return ProductPage(
        items=items,
        total_pages=total_pages,
        total_count=total_count,
        page=page,
        page_size=page_size,
    )


def sort_and_page(
    products: Iterable[Product],
    sort_field: str,
    sort_direction: str,
    page: int,
    page_size: int | None = None,
) -> ProductPage:
    return paginate(sort_products(products, sort_field, sort_direction), page, page_size)


# ----- Badge counts -----


def filter_counts(
    products: Iterable[Product],
    criteria: FilterCriteria,
    reference: date | datetime,
    thresholds: ThresholdSet | None = None,
) -> FilterCounts:
    """
    Counts for the All / Expired / Expiring-soon / Good buttons.

    The date range (if any) is applied first, then products are bucketed
    by the status of their earliest batch. The active status filter and
    the search term are ignored, so switching filters never changes the
    badges. Products without batches count towards "all" only.
    """
    thresholds = thresholds or thresholds_from_settings()
    in_range = filter_by_date_range(products, criteria)

    expired = expiring_soon = good = 0
    for product in in_range:
        expiry = earliest_expiry_date(product)
        if expiry is None:
            continue
        days = days_until(reference, expiry)
        if is_expired(days):
            expired += 1
        elif is_expiring_soon(days, thresholds):
            expiring_soon += 1
        elif is_good(days, thresholds):
            good += 1

    return FilterCounts(
        all=len(in_range),
        expired=expired,
        expiring_soon=expiring_soon,
        good=good,
    )


class ProductListingService:
    """
    Runs the product table pipeline for one tenant's products.

    Responsibilities:
      - filter (search -> status -> date range)
      - sort & paginate
      - badge counts
      - per-row aggregate view + earliest batch classification

    Stateless: every call is parameterized by its arguments.
    """

    def __init__(self, thresholds: ThresholdSet | None = None):
        self.thresholds = thresholds or thresholds_from_settings()

    def list_products(
        self,
        products: list[Product],
        query: ListingQuery,
        reference: date | datetime,
    ) -> ProductListing:
        filtered = filter_products(products, query, reference, self.thresholds)
        page = sort_and_page(
            filtered,
            query.sort_field,
            query.sort_direction,
            query.page,
            query.page_size,
        )

        rows: list[ProductRow] = []
        for product in page.items:
            view = aggregate(product, reference, self.thresholds.expiring_soon_days)
            classification = None
            if view.earliest_batch is not None:
                classification = classify(
                    reference,
                    view.earliest_batch.expiry_date,
                    self.thresholds,
                )
            rows.append(
                ProductRow(
                    product=product,
                    aggregate=view,
                    classification=classification,
                )
            )

        return ProductListing(
            rows=rows,
            counts=filter_counts(products, query, reference, self.thresholds),
            total_pages=page.total_pages,
            total_count=page.total_count,
            page=page.page,
            page_size=page.page_size,
        )
