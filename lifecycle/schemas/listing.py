# lifecycle/schemas/listing.py
from datetime import date, datetime
from typing import Literal, get_args

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from lifecycle.schemas.expiry import AggregateView, Classification, StatusFilter
from lifecycle.schemas.product import Product

SortField = Literal["name", "category", "expiry_date", "status", "quantity"]
SortDirection = Literal["asc", "desc"]


class FilterCriteria(SQLModel):
    """
    Product table filters.

    - search_term: free text or a date (ISO, US or natural language)
    - status_filter: all | expired | expiring-soon | good
    - start_date / end_date: inclusive expiry range; a date, a datetime
      (time of day dropped) or a YYYY-MM-DD string. Malformed strings
      mean "no bound".

    Unknown status values are read as "all".
    """

    model_config = ConfigDict(extra="forbid")

    search_term: str | None = None
    status_filter: StatusFilter = "all"
    start_date: date | str | None = None
    end_date: date | str | None = None

    @field_validator("status_filter", mode="before")
    @classmethod
    def unknown_status_is_all(cls, v):
        if v not in get_args(StatusFilter):
            return "all"
        return v

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def datetime_to_day(cls, v):
        if isinstance(v, datetime):
            return v.date()
        return v


class ListingQuery(FilterCriteria):
    """
    Full product table state: filters + sort + page.
    """

    sort_field: str = "expiry_date"
    sort_direction: str = "asc"
    page: int = 1
    page_size: int | None = None


class ProductPage(SQLModel):
    """
    One page of sorted products plus totals.

    total_pages is 0 when there are no products; use
    display_total_pages when rendering "Page x of y".
    """

    model_config = ConfigDict(extra="forbid")

    items: list[Product]
    total_pages: int
    total_count: int
    page: int
    page_size: int

    @property
    def display_total_pages(self) -> int:
        return max(self.total_pages, 1)


class FilterCounts(SQLModel):
    """
    Badge counts for the status filter buttons.
    """

    model_config = ConfigDict(extra="forbid")

    all: int = 0
    expired: int = 0
    expiring_soon: int = 0
    good: int = 0


class ProductRow(SQLModel):
    """
    Product table row: record + rollup + status of its earliest batch.
    """

    model_config = ConfigDict(extra="forbid")

    product: Product
    aggregate: AggregateView
    classification: Classification | None = None


class ProductListing(SQLModel):
    """
    Everything the product table needs for one render.
    """

    model_config = ConfigDict(extra="forbid")

    rows: list[ProductRow]
    counts: FilterCounts
    total_pages: int
    total_count: int
    page: int
    page_size: int = Field(gt=0)

    @field_validator("total_pages")
    @classmethod
    def non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("total_pages cannot be negative")
        return v

    @property
    def display_total_pages(self) -> int:
        return max(self.total_pages, 1)
