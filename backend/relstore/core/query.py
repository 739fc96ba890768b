"""Query Engine — search, filter and sort over any collection.

Invariants:
    - All functions are PURE: input records are never mutated, output is a new list
    - Fixed composition order: search -> filter -> sort
    - Search skips lists, nested records and None; matching is case-insensitive
    - Filter is AND across fields, OR within a field; a missing value fails its clause
    - Sort is stable and puts missing values last in both directions
    - Unknown field names are permissive no-ops in both filter and sort

Design Decisions:
    - Written once against FieldAccessor: every collection of every domain shares it
      (ADR: no per-page copies of the same filter loop)
    - Values compared by equality first, then by text form, so "true" selects True
      and "40" selects 40.0
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Mapping

from relstore.core.domain_types import SortDirection
from relstore.core.record_protocols import FieldAccessor

_MISSING: tuple[object, ...] = (None, "")


@dataclass(frozen=True)
class SortSpec:
    """Single-key sort."""
    field: str
    direction: SortDirection = SortDirection.ASC


@dataclass(frozen=True)
class Query:
    """Search term, filter mapping and optional sort for one collection read."""
    term: str = ""
    filters: Mapping[str, Iterable[object]] = field(default_factory=dict)
    sort: SortSpec | None = None


def to_text(value: object) -> str:
    """Natural text form used by search and filter comparison."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


# --- Search -------------------------------------------------------------------

def matches_term(record: FieldAccessor, term: str) -> bool:
    if not term:
        return True
    needle = term.lower()
    return any(needle in to_text(value).lower() for _, value in record.scalar_items())


def search(records: Iterable[FieldAccessor], term: str) -> list[FieldAccessor]:
    """Records with any scalar field containing term (case-insensitive)."""
    return [r for r in records if matches_term(r, term)]


# --- Filter -------------------------------------------------------------------

def _accepted_values(accepted: object) -> list[object]:
    if isinstance(accepted, (str, bytes)) or not isinstance(accepted, Iterable):
        return [accepted]
    return list(accepted)


def value_matches(value: object, accepted: Iterable[object]) -> bool:
    """True if value equals, or reads the same as, one of the accepted values."""
    if value in _MISSING:
        return False
    text = to_text(value)
    return any(value == a or text == to_text(a) for a in accepted)


def matches_filters(record: FieldAccessor, filters: Mapping[str, object]) -> bool:
    for name, accepted in filters.items():
        if not record.has_field(name):
            continue
        if not value_matches(record.field_value(name), _accepted_values(accepted)):
            return False
    return True


def filter_records(
    records: Iterable[FieldAccessor], filters: Mapping[str, object] | None,
) -> list[FieldAccessor]:
    """Keep records satisfying every field constraint. Original order preserved."""
    if not filters:
        return list(records)
    return [r for r in records if matches_filters(r, filters)]


# --- Sort ---------------------------------------------------------------------

def _sort_key(value: object) -> tuple[int, object]:
    # rank keeps mixed-type columns comparable
    if isinstance(value, (bool, int, float)):
        return (0, value)
    if isinstance(value, date):
        return (1, value.isoformat())
    if isinstance(value, str):
        return (2, value)
    return (3, to_text(value))


def sort_records(
    records: Iterable[FieldAccessor], sort: SortSpec | None,
) -> list[FieldAccessor]:
    """Stable single-key sort; records lacking a value keep their order at the end."""
    records = list(records)
    if sort is None:
        return records
    present = [r for r in records if r.field_value(sort.field) not in _MISSING]
    missing = [r for r in records if r.field_value(sort.field) in _MISSING]
    present.sort(
        key=lambda r: _sort_key(r.field_value(sort.field)),
        reverse=SortDirection(sort.direction) == SortDirection.DESC,
    )
    return present + missing


# --- Composition --------------------------------------------------------------

def run_query(records: Iterable[FieldAccessor], query: Query) -> list[FieldAccessor]:
    """search -> filter -> sort."""
    return sort_records(
        filter_records(search(records, query.term), query.filters), query.sort,
    )
