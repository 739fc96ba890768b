"""Domain Types — rich types that replace bare primitives across the engine.

Invariants:
    - EntityId and CollectionName wrap str: never pass raw ints as ids
    - All valid policy/direction/period states encoded as Enums, no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: callers may pass "asc" / "month" / "cascade" and compare equal
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

EntityId = NewType("EntityId", str)
CollectionName = NewType("CollectionName", str)


# ─── Enums ───────────────────────────────────────────────────────

class CascadePolicy(str, Enum):
    """What happens to dependents when the referenced entity is deleted."""
    CASCADE = "cascade"
    NULLIFY = "nullify"


class SortDirection(str, Enum):
    """Single-key sort direction."""
    ASC = "asc"
    DESC = "desc"


class Period(str, Enum):
    """Bucket width for time-series aggregation."""
    DAY = "day"
    MONTH = "month"


class StorageBackend(str, Enum):
    """Snapshot gateway implementations selectable from settings."""
    MEMORY = "memory"
    JSON = "json"
    SQL = "sql"


# ─── Constants ───────────────────────────────────────────────────

# Values treated as "no reference" on a reference field
EMPTY_REFERENCE_VALUES: tuple[object, ...] = (None, "")

# Upper bound for rollup fixpoint passes (derived fields feeding derived fields)
MAX_ROLLUP_PASSES = 8
