# lifecycle/repositories/snapshot_repo.py
"""
In-memory inventory snapshot built from hosted-store rows.

Rows arrive as plain dicts with the store's snake_case column names
(profiles, settings, products, product_batches). This module is the
only place that knows about the legacy single-batch product shape
(expiry_date / quantity / batch_number on the product row itself):
such rows are translated into one batch before the engine sees them.
"""

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from lifecycle.schemas.product import Batch, Product
from lifecycle.schemas.tenant import (
    NotificationPreferences,
    TenantAccount,
    TenantProfile,
)

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]

LEGACY_BATCH_FIELDS = ("expiry_date", "quantity", "batch_number")


class SnapshotError(ValueError):
    """Raised when store rows cannot be translated into domain records."""


class InventorySnapshot:
    """
    Tenant-scoped, already-fetched products and accounts.

    - Pure in-memory lookups, no I/O after construction.
    - Products are grouped by owner (user_id).
    """

    def __init__(
        self,
        accounts: Iterable[TenantAccount] = (),
        products_by_owner: Mapping[str, list[Product]] | None = None,
    ):
        self._accounts: dict[str, TenantAccount] = {
            account.profile.id: account for account in accounts
        }
        self._products: dict[str, list[Product]] = {
            owner: list(products)
            for owner, products in (products_by_owner or {}).items()
        }

    # ----- Queries -----

    def tenants(self) -> list[TenantAccount]:
        return list(self._accounts.values())

    def get_tenant(self, tenant_id: str) -> TenantAccount | None:
        return self._accounts.get(tenant_id)

    def products_for(self, tenant_id: str) -> list[Product]:
        """
        Products owned by tenant_id (empty list if none).
        Returns a copy so callers cannot reorder the snapshot.
        """
        return list(self._products.get(tenant_id, []))

    # ----- Builders -----

    @classmethod
    def from_rows(
        cls,
        profiles: Iterable[Row] = (),
        settings: Iterable[Row] = (),
        products: Iterable[Row] = (),
        batches: Iterable[Row] = (),
    ) -> "InventorySnapshot":
        """
        Build a snapshot from raw store rows.

        Raises:
            SnapshotError: a row fails validation, or a batch row points to
            a product that is not in the snapshot.
        """
        prefs_by_user: dict[str, NotificationPreferences] = {}
        for row in settings:
            user_id = str(row.get("user_id"))
            prefs_by_user[user_id] = _build(NotificationPreferences, row, "settings", user_id)

        accounts: list[TenantAccount] = []
        for row in profiles:
            profile = _build(TenantProfile, _stringify_id(row), "profile", row.get("id"))
            accounts.append(
                TenantAccount(
                    profile=profile,
                    preferences=prefs_by_user.get(profile.id, NotificationPreferences()),
                )
            )

        product_rows = [_stringify_id(row) for row in products]
        known_ids = {row.get("id") for row in product_rows}

        batches_by_product: dict[str, list[Batch]] = {}
        for row in batches:
            product_id = str(row.get("product_id"))
            if product_id not in known_ids:
                raise SnapshotError(
                    f"Batch {row.get('id')} references unknown product {product_id}"
                )
            batch_row = {**_stringify_id(row), "product_id": product_id}
            batch_row.setdefault("created_at", row.get("added_date"))
            batch = _build(Batch, batch_row, "batch", row.get("id"))
            batches_by_product.setdefault(product_id, []).append(batch)

        products_by_owner: dict[str, list[Product]] = {}
        legacy_count = 0
        for row in product_rows:
            product_batches = batches_by_product.get(row.get("id"), [])
            if not product_batches and row.get("expiry_date"):
                product_batches = [_legacy_batch(row)]
                legacy_count += 1

            fields = {k: v for k, v in row.items() if k not in LEGACY_BATCH_FIELDS}
            fields.setdefault("created_at", row.get("added_date"))
            fields["batches"] = product_batches
            product = _build(Product, fields, "product", row.get("id"))

            owner = str(row.get("user_id"))
            products_by_owner.setdefault(owner, []).append(product)

        if legacy_count:
            logger.info("Translated %d legacy single-batch product rows", legacy_count)

        return cls(accounts, products_by_owner)

    @classmethod
    def from_json_file(cls, path: str | Path) -> "InventorySnapshot":
        """
        Load a JSON export with the keys:
            profiles, settings, products, product_batches
        Missing keys are treated as empty tables.
        """
        path = Path(path)
        with path.open(encoding="utf-8") as fh:
            data = json.load(fh)

        if not isinstance(data, dict):
            raise SnapshotError(f"{path}: expected a JSON object of tables")

        snapshot = cls.from_rows(
            profiles=data.get("profiles", []),
            settings=data.get("settings", []),
            products=data.get("products", []),
            batches=data.get("product_batches", []),
        )
        logger.info(
            "Loaded snapshot %s: %d tenants",
            path.name,
            len(snapshot.tenants()),
        )
        return snapshot


# ----- Helpers -----


def _stringify_id(row: Row) -> dict[str, Any]:
    """
    Store ids are UUIDs; the engine treats them as opaque strings.
    """
    data = dict(row)
    if data.get("id") is not None:
        data["id"] = str(data["id"])
    return data


def _legacy_batch(row: Row) -> Batch:
    """
    Translate a flat product row into its single batch, the same way the
    batch migration copied product columns into product_batches.
    """
    return _build(
        Batch,
        {
            "id": f"{row.get('id')}:legacy",
            "product_id": row.get("id"),
            "batch_number": row.get("batch_number"),
            "expiry_date": row.get("expiry_date"),
            "quantity": row.get("quantity"),
            "created_at": row.get("added_date") or row.get("created_at"),
        },
        "legacy batch",
        row.get("id"),
    )


def _build(model: type, data: Row, label: str, row_id: Any):
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise SnapshotError(f"Invalid {label} row {row_id}: {exc}") from exc
