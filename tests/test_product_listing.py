# tests/test_product_listing.py
from datetime import date

import pytest

from conftest import REFERENCE, make_batch, make_product, product_expiring_in

from lifecycle.schemas.listing import FilterCriteria, ListingQuery
from lifecycle.services.product_listing import (
    ProductListingService,
    filter_counts,
    paginate,
    sort_and_page,
    sort_products,
)


def names(products):
    return [p.name for p in products]


# ----- Sorting -----


def test_sort_by_name_is_case_insensitive():
    products = [make_product(name="banana"), make_product(name="Apple"), make_product(name="cherry")]
    assert names(sort_products(products, "name")) == ["Apple", "banana", "cherry"]
    assert names(sort_products(products, "name", "desc")) == ["cherry", "banana", "Apple"]


def test_equal_keys_keep_input_order_in_both_directions():
    products = [
        make_product(name="A", category="Dairy"),
        make_product(name="B", category="dairy"),
        make_product(name="C", category="Bakery"),
        make_product(name="D", category="DAIRY"),
    ]
    assert names(sort_products(products, "category", "asc")) == ["C", "A", "B", "D"]
    assert names(sort_products(products, "category", "desc")) == ["A", "B", "D", "C"]


def test_sort_by_expiry_puts_missing_expiry_last():
    products = [
        make_product(name="None", batches=[]),
        product_expiring_in(5, name="Later"),
        product_expiring_in(-1, name="Past"),
    ]
    assert names(sort_products(products, "expiry_date")) == ["Past", "Later", "None"]
    assert names(sort_products(products, "expiry_date", "desc")) == ["None", "Later", "Past"]
    assert names(sort_products(products, "status")) == ["Past", "Later", "None"]


def test_sort_by_expiry_uses_earliest_batch():
    mixed = make_product(
        name="Mixed",
        batches=[make_batch(date(2025, 6, 1)), make_batch(date(2025, 3, 11))],
    )
    single = make_product(name="Single", batches=[make_batch(date(2025, 3, 20))])
    assert names(sort_products([single, mixed], "expiry_date")) == ["Mixed", "Single"]


def test_sort_by_quantity_uses_total():
    small = make_product(name="Small", batches=[make_batch(date(2025, 4, 1), quantity=3)])
    big = make_product(
        name="Big",
        batches=[
            make_batch(date(2025, 4, 1), quantity=2),
            make_batch(date(2025, 4, 2), quantity=9),
        ],
    )
    unknown = make_product(name="Unknown", batches=[make_batch(date(2025, 4, 1), quantity=None)])
    assert names(sort_products([small, big, unknown], "quantity")) == ["Unknown", "Small", "Big"]


def test_unknown_sort_field_keeps_input_order():
    products = [make_product(name="B"), make_product(name="A")]
    assert names(sort_products(products, "colour")) == ["B", "A"]


def test_unknown_direction_means_asc():
    products = [make_product(name="B"), make_product(name="A")]
    assert names(sort_products(products, "name", "sideways")) == ["A", "B"]


# ----- Pagination -----


@pytest.fixture
def twenty_three():
    return [make_product(name=f"Item {i:02d}") for i in range(23)]


def test_paginate_23_by_10(twenty_three):
    first = paginate(twenty_three, 1, 10)
    assert first.total_pages == 3
    assert first.total_count == 23
    assert len(first.items) == 10

    last = paginate(twenty_three, 3, 10)
    assert names(last.items) == ["Item 20", "Item 21", "Item 22"]

    beyond = paginate(twenty_three, 4, 10)
    assert beyond.items == []
    assert beyond.total_pages == 3


def test_page_below_one_is_empty(twenty_three):
    assert paginate(twenty_three, 0, 10).items == []
    assert paginate(twenty_three, -1, 10).items == []


def test_empty_list_has_zero_pages_but_displays_one():
    page = paginate([], 1, 10)
    assert page.total_pages == 0
    assert page.display_total_pages == 1
    assert page.items == []


def test_non_positive_page_size_uses_default(twenty_three):
    page = paginate(twenty_three, 1, 0)
    assert page.page_size == 25
    assert page.total_pages == 1
    assert len(page.items) == 23


def test_sort_and_page():
    products = [product_expiring_in(d, name=f"D{d}") for d in (9, 3, 7, 1, 5)]
    page = sort_and_page(products, "expiry_date", "asc", 2, 2)
    assert names(page.items) == ["D5", "D7"]
    assert page.total_pages == 3


# ----- Badge counts -----


@pytest.fixture
def counted_products():
    return [
        product_expiring_in(-2, name="Expired"),
        product_expiring_in(0, name="Today"),
        product_expiring_in(5, name="Soon"),
        product_expiring_in(10, name="Good"),
        product_expiring_in(40, name="Far"),
        make_product(name="No Batches", batches=[]),
    ]


def test_filter_counts(counted_products):
    counts = filter_counts(counted_products, FilterCriteria(), REFERENCE)
    assert (counts.all, counts.expired, counts.expiring_soon, counts.good) == (6, 1, 2, 2)


def test_counts_apply_date_range_and_ignore_status(counted_products):
    results = {
        status: filter_counts(
            counted_products,
            FilterCriteria(status_filter=status, end_date="2025-03-20", search_term="zzz"),
            REFERENCE,
        )
        for status in ("all", "expired", "expiring-soon", "good")
    }
    for counts in results.values():
        assert (counts.all, counts.expired, counts.expiring_soon, counts.good) == (4, 1, 2, 1)


# ----- Listing service -----


def test_list_products_pipeline(counted_products):
    service = ProductListingService()
    query = ListingQuery(
        status_filter="expiring-soon",
        sort_field="expiry_date",
        sort_direction="desc",
        page=1,
        page_size=10,
    )
    listing = service.list_products(counted_products, query, REFERENCE)

    assert [row.product.name for row in listing.rows] == ["Soon", "Today"]
    assert listing.total_count == 2
    assert listing.total_pages == 1
    assert listing.counts.all == 6

    soon = listing.rows[0]
    assert soon.classification.days_until == 5
    assert soon.classification.tier == "warning"
    assert soon.aggregate.expiring_batch_count == 1
    assert listing.rows[1].classification.tier == "urgent"


def test_list_products_row_without_batches_has_no_classification():
    listing = ProductListingService().list_products(
        [make_product(name="Empty", batches=[])],
        ListingQuery(page_size=10),
        REFERENCE,
    )
    row = listing.rows[0]
    assert row.classification is None
    assert row.aggregate.earliest_batch is None


def test_list_products_empty_inventory():
    listing = ProductListingService().list_products([], ListingQuery(), REFERENCE)
    assert listing.rows == []
    assert listing.total_pages == 0
    assert listing.display_total_pages == 1
    assert listing.page_size == 25
