"""Store State — ordered, id-keyed collections held entirely in memory.

Invariants:
    - A Collection preserves insertion order; replace() keeps a record's position
    - Ids are unique within a collection
    - copy() is shallow per collection: entities are frozen, so sharing them is safe

Design Decisions:
    - dict-backed, not a list: O(1) lookup by id and insertion order for free
    - Explicit StoreState object passed to every core function (no module-level globals)
"""

from dataclasses import dataclass, field
from typing import Iterator

from relstore.core.record_protocols import FieldAccessor


class Collection:
    """Ordered mapping from id to entity for a single entity type."""

    def __init__(self, name: str, records: list[FieldAccessor] | None = None):
        self.name = name
        self._records: dict[str, FieldAccessor] = {}
        for record in records or []:
            self.append(record)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._records

    def __iter__(self) -> Iterator[FieldAccessor]:
        return iter(self._records.values())

    def get(self, entity_id: str) -> FieldAccessor | None:
        return self._records.get(entity_id)

    def ids(self) -> list[str]:
        return list(self._records)

    def values(self) -> list[FieldAccessor]:
        return list(self._records.values())

    def append(self, record: FieldAccessor) -> None:
        """Add a new record at the end. Raises KeyError on duplicate id."""
        if record.id in self._records:
            raise KeyError(f"duplicate id '{record.id}' in {self.name}")
        self._records[record.id] = record

    def replace(self, record: FieldAccessor) -> None:
        """Swap the record with the same id, keeping its position."""
        if record.id not in self._records:
            raise KeyError(f"'{record.id}' not in {self.name}")
        self._records[record.id] = record

    def remove(self, entity_id: str) -> FieldAccessor:
        return self._records.pop(entity_id)

    def copy(self) -> "Collection":
        clone = Collection(self.name)
        clone._records = dict(self._records)
        return clone


@dataclass
class StoreState:
    """All collections of one domain: pure dataclass, no IO."""

    collections: dict[str, Collection] = field(default_factory=dict)

    @classmethod
    def empty(cls, names: list[str]) -> "StoreState":
        return cls({name: Collection(name) for name in names})

    def collection(self, name: str) -> Collection:
        return self.collections[name]

    def find(self, name: str, entity_id: str) -> FieldAccessor | None:
        return self.collections[name].get(entity_id)

    def copy(self) -> "StoreState":
        """Staging copy for an atomic mutation."""
        return StoreState({name: c.copy() for name, c in self.collections.items()})

    # --- Computed properties ---------------------------------------------------

    @property
    def names(self) -> list[str]:
        return list(self.collections)

    @property
    def total_records(self) -> int:
        """Number of records across every collection."""
        return sum(len(c) for c in self.collections.values())
