"""Aggregator — totals, time buckets, category breakdowns and top-N over record lists.

Invariants:
    - All functions are PURE and stateless: records in, plain JSON-safe values out
    - Non-numeric or missing amounts count as 0 in sums
    - Bucket keys are ISO text ("2024-03" for months, "2024-03-15" for days),
      so lexical order is chronological order
    - Distribution percentages sum to 100, or are all 0 when the total is 0

Design Decisions:
    - where() reuses the query engine's filter semantics: one definition of "matches"
    - Cross-entity rollups live in integrity.refresh_rollups, not here
      (ADR: aggregates are read-side views, rollups are stored state)
"""

from datetime import date, datetime
from typing import Callable, Iterable

from relstore.core.domain_types import Period, SortDirection
from relstore.core.query import SortSpec, matches_filters, sort_records
from relstore.core.record_protocols import FieldAccessor

Predicate = Callable[[FieldAccessor], bool]


def where(**criteria: object) -> Predicate:
    """Predicate with filter semantics: where(status="paid", type=["rent", "deposit"])."""
    return lambda record: matches_filters(record, criteria)


def _selected(records: Iterable[FieldAccessor], predicate: Predicate | None) -> list[FieldAccessor]:
    return [r for r in records if predicate is None or predicate(r)]


def _amount(value: object) -> int | float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


def _normalise(total: int | float) -> int | float:
    if isinstance(total, float) and total.is_integer():
        return int(total)
    return total


def running_total(
    records: Iterable[FieldAccessor], field: str, where: Predicate | None = None,
) -> int | float:
    """Sum of field over the records selected by where."""
    return _normalise(sum(_amount(r.field_value(field)) for r in _selected(records, where)))


# --- Time series --------------------------------------------------------------

def period_key(value: object, period: Period | str) -> str | None:
    """Bucket key for a date, datetime or ISO date string. None if unparseable."""
    if isinstance(value, datetime):
        day = value.date()
    elif isinstance(value, date):
        day = value
    elif isinstance(value, str) and len(value) >= 10:
        try:
            day = date.fromisoformat(value[:10])
        except ValueError:
            return None
    else:
        return None
    if Period(period) == Period.MONTH:
        return f"{day.year:04d}-{day.month:02d}"
    return day.isoformat()


def month_range(year: int) -> list[str]:
    """The twelve month keys of a calendar year."""
    return [f"{year:04d}-{month:02d}" for month in range(1, 13)]


def bucket_series(
    records: Iterable[FieldAccessor],
    date_field: str,
    value_field: str | None,
    period: Period | str,
    where: Predicate | None = None,
    periods: list[str] | None = None,
) -> list[dict]:
    """Chronological [{"period", "value"}] sums (or counts when value_field is None).

    With periods supplied the series covers exactly those keys, zero filled;
    records falling outside them are ignored.
    """
    buckets: dict[str, int | float] = {key: 0 for key in periods or []}
    for record in _selected(records, where):
        key = period_key(record.field_value(date_field), period)
        if key is None or (periods is not None and key not in buckets):
            continue
        amount = 1 if value_field is None else _amount(record.field_value(value_field))
        buckets[key] = buckets.get(key, 0) + amount
    keys = periods if periods is not None else sorted(buckets)
    return [{"period": key, "value": _normalise(buckets[key])} for key in keys]


# --- Breakdowns ---------------------------------------------------------------

def category_distribution(
    records: Iterable[FieldAccessor],
    field: str,
    value_field: str | None = None,
    categories: list[str] | None = None,
) -> list[dict]:
    """[{"category", "value", "percent"}] grouped by field.

    Counts records per group, or sums value_field. Group order follows
    categories when supplied (zero filled, other groups dropped), else
    first appearance.
    """
    groups: dict[str, int | float] = {c: 0 for c in categories or []}
    for record in records:
        raw = record.field_value(field)
        if raw in (None, ""):
            continue
        key = str(raw)
        if categories is not None and key not in groups:
            continue
        amount = 1 if value_field is None else _amount(record.field_value(value_field))
        groups[key] = groups.get(key, 0) + amount

    total = sum(groups.values())
    return [
        {
            "category": key,
            "value": _normalise(value),
            "percent": (value * 100 / total) if total else 0,
        }
        for key, value in groups.items()
    ]


def top_n(records: Iterable[FieldAccessor], field: str, n: int) -> list[FieldAccessor]:
    """The n records with the largest field value; ties keep collection order."""
    ranked = sort_records(records, SortSpec(field, SortDirection.DESC))
    return [r for r in ranked if r.field_value(field) not in (None, "")][:max(n, 0)]
