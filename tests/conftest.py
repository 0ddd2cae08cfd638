# tests/conftest.py
from datetime import date, timedelta
from itertools import count

import pytest

from lifecycle.schemas.expiry import ThresholdSet
from lifecycle.schemas.product import Batch, Product

REFERENCE = date(2025, 3, 10)

_ids = count(1)


def make_batch(
    expiry_date: date,
    quantity: int | None = 10,
    batch_number: str | None = None,
    batch_id: str | None = None,
) -> Batch:
    return Batch(
        id=batch_id or f"b{next(_ids)}",
        batch_number=batch_number,
        expiry_date=expiry_date,
        quantity=quantity,
    )


def make_product(
    name: str = "Milk",
    category: str = "Dairy",
    batches: list[Batch] | None = None,
    product_id: str | None = None,
    **fields,
) -> Product:
    return Product(
        id=product_id or f"p{next(_ids)}",
        name=name,
        category=category,
        batches=batches or [],
        **fields,
    )


def product_expiring_in(days: int, name: str = "Milk", **kwargs) -> Product:
    """Single-batch product expiring `days` after REFERENCE."""
    return make_product(
        name=name,
        batches=[make_batch(REFERENCE + timedelta(days=days))],
        **kwargs,
    )


@pytest.fixture
def reference() -> date:
    return REFERENCE


@pytest.fixture
def thresholds() -> ThresholdSet:
    return ThresholdSet(urgent_days=3, warning_days=7, expiring_soon_days=7)


@pytest.fixture
def snapshot_rows() -> dict:
    """
    Store rows for two tenants:
      - t1: batch-based products, daily + weekly opted in
      - t2: one legacy flat product row, inactive
    """
    return {
        "profiles": [
            {"id": "t1", "business_name": "Fresh Mart", "email": "owner@freshmart.com", "is_active": True},
            {"id": "t2", "business_name": "Old Shop", "email": "old@oldshop.com", "is_active": False},
        ],
        "settings": [
            {"user_id": "t1", "daily_expiry_alerts_enabled": True, "alert_threshold": 7, "weekly_report": True},
            {"user_id": "t2", "daily_expiry_alerts_enabled": True, "alert_threshold": 7, "weekly_report": True},
        ],
        "products": [
            {"id": "p1", "user_id": "t1", "name": "Milk", "category": "Dairy", "supplier": "Farm Co"},
            {"id": "p2", "user_id": "t1", "name": "Bread", "category": "Bakery"},
            {
                "id": "p3",
                "user_id": "t2",
                "name": "Jam",
                "category": "Pantry",
                "expiry_date": "2025-03-12",
                "quantity": 4,
                "batch_number": "J-1",
                "added_date": "2025-01-01T09:00:00",
            },
        ],
        "product_batches": [
            {"id": "b1", "product_id": "p1", "batch_number": "M-1", "expiry_date": "2025-03-12", "quantity": 5},
            {"id": "b2", "product_id": "p1", "batch_number": "M-2", "expiry_date": "2025-03-25", "quantity": 7},
            {"id": "b3", "product_id": "p2", "batch_number": None, "expiry_date": "2025-03-08", "quantity": None},
        ],
    }
