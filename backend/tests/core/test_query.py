"""Query Engine — tests for search, filter, sort and their fixed composition.

Invariants:
    - search is case-insensitive over scalar fields only
    - filter is AND across fields, OR within a field; missing values fail
    - sort is stable and puts missing values last in both directions
    - run_query == sort(filter(search(...)))
"""

from datetime import date

from relstore.core.domain_types import SortDirection
from relstore.core.query import (
    Query, SortSpec, filter_records, run_query, search, sort_records, to_text,
)
from relstore.schemas.coworking import Amenity, Desk
from relstore.schemas.real_estate import RentPayment


def _payment(pid, status, type_, amount=1000, notes=""):
    return RentPayment.from_record({
        "id": pid, "tenantId": "1", "propertyId": "1", "unitId": "1-1",
        "amount": amount, "date": "2024-05-01", "type": type_, "status": status,
        "notes": notes,
    })


def _desk(did, name, price_per_hour, status="available", amenities=()):
    return Desk.from_record({
        "id": did, "name": name, "pricePerHour": price_per_hour,
        "status": status, "amenities": list(amenities),
    })


PAYMENTS = [
    _payment("p1", "paid", "rent", 1500),
    _payment("p2", "pending", "rent", 1500),
    _payment("p3", "paid", "deposit", 3000),
    _payment("p4", "paid", "fee", 50),
    _payment("p5", "late", "deposit", 700),
]


def ids(records):
    return [r.id for r in records]


# ─── to_text ─────────────────────────────────────────────────────

def test_to_text_renders_booleans_lowercase():
    assert to_text(True) == "true"
    assert to_text(False) == "false"


def test_to_text_drops_fraction_of_whole_floats():
    assert to_text(40.0) == "40"
    assert to_text(37.5) == "37.5"


def test_to_text_uses_iso_dates():
    assert to_text(date(2024, 3, 1)) == "2024-03-01"


# ─── Search ──────────────────────────────────────────────────────

def test_empty_term_matches_everything():
    assert ids(search(PAYMENTS, "")) == ["p1", "p2", "p3", "p4", "p5"]


def test_search_is_case_insensitive():
    desks = [_desk("1", "Window Desk", 5), _desk("2", "Office", 20)]
    assert ids(search(desks, "wINDOW")) == ["1"]


def test_search_skips_list_fields():
    desks = [_desk("1", "Desk A1", 5, amenities=["monitor"])]
    assert search(desks, "monitor") == []


def test_search_matches_boolean_text():
    amenities = [
        Amenity.from_record({"id": "1", "name": "Chair", "available": True}),
        Amenity.from_record({"id": "2", "name": "Lamp", "available": False}),
    ]
    assert ids(search(amenities, "true")) == ["1"]


def test_search_matches_whole_float_without_fraction():
    desks = [_desk("1", "A", 40.0), _desk("2", "B", 12)]
    assert ids(search(desks, "40")) == ["1"]


# ─── Filter ──────────────────────────────────────────────────────

def test_filter_and_across_fields_or_within_field():
    """Payments with status paid AND type rent-or-deposit, original order."""
    result = filter_records(PAYMENTS, {"status": ["paid"], "type": ["rent", "deposit"]})
    assert ids(result) == ["p1", "p3"]


def test_filter_accepts_scalar_value():
    assert ids(filter_records(PAYMENTS, {"status": "late"})) == ["p5"]


def test_filter_empty_mapping_keeps_everything():
    assert ids(filter_records(PAYMENTS, {})) == ids(PAYMENTS)
    assert ids(filter_records(PAYMENTS, None)) == ids(PAYMENTS)


def test_filter_matches_by_text_form():
    amenities = [
        Amenity.from_record({"id": "1", "name": "Chair", "available": True}),
        Amenity.from_record({"id": "2", "name": "Lamp", "available": False}),
    ]
    assert ids(filter_records(amenities, {"available": ["true"]})) == ["1"]
    assert ids(filter_records(PAYMENTS, {"amount": ["1500"]})) == ["p1", "p2"]


def test_missing_value_fails_its_constraint():
    payments = [_payment("a", "paid", "rent", notes=""), _payment("b", "paid", "rent", notes="x")]
    assert ids(filter_records(payments, {"notes": ["", "x"]})) == ["b"]


def test_unknown_filter_field_is_ignored():
    assert ids(filter_records(PAYMENTS, {"colour": ["red"]})) == ids(PAYMENTS)


def test_filter_accepts_attribute_names():
    assert ids(filter_records(PAYMENTS, {"unit_id": ["1-1"], "status": ["fee", "late"]})) == ["p5"]


# ─── Sort ────────────────────────────────────────────────────────

def test_sort_numbers_ascending_and_descending():
    asc = sort_records(PAYMENTS, SortSpec("amount"))
    desc = sort_records(PAYMENTS, SortSpec("amount", SortDirection.DESC))
    assert ids(asc) == ["p4", "p5", "p1", "p2", "p3"]
    assert ids(desc) == ["p3", "p1", "p2", "p5", "p4"]


def test_sort_is_stable_for_ties():
    desc = sort_records(PAYMENTS, SortSpec("amount", "desc"))
    assert ids(desc)[1:3] == ["p1", "p2"]


def test_sort_strings_lexicographically():
    desks = [_desk("1", "Charlie", 1), _desk("2", "Alpha", 1), _desk("3", "Bravo", 1)]
    assert ids(sort_records(desks, SortSpec("name"))) == ["2", "3", "1"]


def test_missing_values_sort_last_in_both_directions():
    payments = [
        _payment("a", "paid", "rent", notes=""),
        _payment("b", "paid", "rent", notes="beta"),
        _payment("c", "paid", "rent", notes="alpha"),
    ]
    assert ids(sort_records(payments, SortSpec("notes"))) == ["c", "b", "a"]
    assert ids(sort_records(payments, SortSpec("notes", SortDirection.DESC))) == ["b", "c", "a"]


def test_unknown_sort_field_keeps_order():
    assert ids(sort_records(PAYMENTS, SortSpec("colour"))) == ids(PAYMENTS)


def test_no_sort_keeps_order():
    assert ids(sort_records(PAYMENTS, None)) == ids(PAYMENTS)


# ─── Composition ─────────────────────────────────────────────────

def test_run_query_equals_sort_of_filter_of_search():
    query = Query(
        term="rent",
        filters={"status": ["paid", "pending"]},
        sort=SortSpec("amount", SortDirection.DESC),
    )
    expected = sort_records(filter_records(search(PAYMENTS, query.term), query.filters), query.sort)
    assert ids(run_query(PAYMENTS, query)) == ids(expected)


def test_run_query_does_not_mutate_input():
    before = list(PAYMENTS)
    run_query(PAYMENTS, Query(sort=SortSpec("amount")))
    assert PAYMENTS == before
