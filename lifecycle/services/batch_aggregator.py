# lifecycle/services/batch_aggregator.py
from datetime import date, datetime
from typing import Iterable

from lifecycle.schemas.expiry import AggregateView
from lifecycle.schemas.product import Batch, FlatBatch, Product
from lifecycle.services.classifier import days_until, thresholds_from_settings


def earliest_batch(product: Product) -> Batch | None:
    """
    Batch with the soonest expiry date.

    Ties go to the first batch in input order. Returns None when the
    product has no batches (expiry undeterminable).
    """
    earliest: Batch | None = None
    for batch in product.batches:
        if earliest is None or batch.expiry_date < earliest.expiry_date:
            earliest = batch
    return earliest


def earliest_expiry_date(product: Product) -> date | None:
    batch = earliest_batch(product)
    return batch.expiry_date if batch else None


def total_quantity(product: Product) -> int:
    """Sum of batch quantities; unknown quantities count as 0."""
    return sum(batch.quantity or 0 for batch in product.batches)


def expired_batch_count(product: Product, reference: date | datetime) -> int:
    return sum(
        1 for batch in product.batches if days_until(reference, batch.expiry_date) < 0
    )


def expiring_batch_count(
    product: Product,
    reference: date | datetime,
    threshold_days: int | None = None,
) -> int:
    if threshold_days is None:
        threshold_days = thresholds_from_settings().expiring_soon_days
    return sum(
        1
        for batch in product.batches
        if 0 <= days_until(reference, batch.expiry_date) <= threshold_days
    )


def has_expired_batches(product: Product, reference: date | datetime) -> bool:
    return expired_batch_count(product, reference) > 0


def has_expiring_batches(
    product: Product,
    reference: date | datetime,
    threshold_days: int | None = None,
) -> bool:
    return expiring_batch_count(product, reference, threshold_days) > 0


def aggregate(
    product: Product,
    reference: date | datetime,
    threshold_days: int | None = None,
) -> AggregateView:
    """
    Compute every rollup for a product in a single pass over its batches.

    Args:
        product: product with zero or more batches.
        reference: "now" for expired / expiring counts.
        threshold_days: expiring window; defaults to EXPIRING_SOON_DAYS.
    """
    if threshold_days is None:
        threshold_days = thresholds_from_settings().expiring_soon_days

    earliest: Batch | None = None
    quantity = 0
    expired = 0
    expiring = 0

    for batch in product.batches:
        if earliest is None or batch.expiry_date < earliest.expiry_date:
            earliest = batch

        quantity += batch.quantity or 0

        days = days_until(reference, batch.expiry_date)
        if days < 0:
            expired += 1
        elif days <= threshold_days:
            expiring += 1

    return AggregateView(
        earliest_batch=earliest,
        total_quantity=quantity,
        expired_batch_count=expired,
        expiring_batch_count=expiring,
    )


def flatten_batches(products: Iterable[Product]) -> list[FlatBatch]:
    """
    All batches across products, each tagged with product name/category.
    """
    return [
        FlatBatch(
            **batch.model_dump(),
            product_name=product.name,
            product_category=product.category,
        )
        for product in products
        for batch in product.batches
    ]
