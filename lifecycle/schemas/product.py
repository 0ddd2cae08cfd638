# lifecycle/schemas/product.py
from datetime import date, datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class Batch(SQLModel):
    """
    One dated quantity of a product.

    Matches store columns (product_batches):
      - id, product_id, batch_number, expiry_date, quantity, created_at

    quantity is optional: None means "unknown" and counts as 0 in totals.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    product_id: str | None = Field(
        default=None,
        description="Back reference to the owning product",
    )
    batch_number: str | None = None
    expiry_date: date
    quantity: int | None = Field(default=None, ge=0)
    created_at: datetime | None = None

    @field_validator("batch_number")
    @classmethod
    def normalize_batch_number(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class Product(SQLModel):
    """
    Tenant-owned catalog entry with zero or more batches.

    A persisted product always has at least one batch. An empty batch
    list is a transient state (e.g. mid-edit) and means the expiry
    cannot be determined.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str = Field(min_length=1)
    category: str
    supplier: str | None = None
    location: str | None = None
    notes: str | None = None
    barcode: str | None = None
    created_at: datetime | None = None
    batches: list[Batch] = Field(default_factory=list)

    @field_validator("name", "category")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @field_validator("supplier", "location", "notes", "barcode")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class FlatBatch(Batch):
    """
    Batch annotated with its product's name and category.
    """

    product_name: str
    product_category: str
