"""Boundary Protocols — contracts between the core and everything around it.

Invariants:
    - Core NEVER imports from schemas/, services/ or infrastructure/: arrows point inward
    - Query, aggregation and integrity code touch records only through FieldAccessor
    - Persistence is reached only through SnapshotGateway

Design Decisions:
    - Protocol over ABC: structural subtyping, entity models and gateways need no core base class
    - load() returns None for "not present" instead of raising: absence is a normal first-run state
"""

from typing import Iterator, Protocol


class FieldAccessor(Protocol):
    """Capability every entity exposes to the query engine and aggregator.

    Field names may be given as record keys (camelCase) or attribute names.
    """
    id: str

    def has_field(self, name: str) -> bool: ...
    def field_value(self, name: str) -> object: ...
    def scalar_items(self) -> Iterator[tuple[str, object]]: ...
    def with_fields(self, **values: object) -> "FieldAccessor": ...
    def to_record(self) -> dict: ...


class SnapshotGateway(Protocol):
    """Contract for whole-collection persistence, implemented by infrastructure."""
    def load(self, name: str) -> list[dict] | None: ...
    def save(self, name: str, rows: list[dict]) -> None: ...
