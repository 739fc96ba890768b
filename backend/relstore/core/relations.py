"""Relations — the declarative schema of a domain: references, cascade policies, derived fields.

Invariants:
    - Every reference field is declared exactly once as a Relation
    - A Relation names its on-delete policy; NULLIFY may also reset dependent status fields
    - A DerivedField with triggers is a rollup; without triggers it is write-time only
    - DomainSchema is immutable after construction
    - An id format only decorates the generated stamp; it never replaces it

Design Decisions:
    - Cascade rules as data consulted by one integrity routine, not per-call-site code
    - Derived fields declare their source collections so the enforcer can recompute
      them inside the same mutation (no caller-side refresh)
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable

from relstore.core.domain_types import CascadePolicy
from relstore.core.errors import UnknownEntityTypeError
from relstore.core.record_protocols import FieldAccessor
from relstore.core.store_state import StoreState


@dataclass(frozen=True)
class DeriveContext:
    """Clock readings shared by every derivation inside one mutation."""
    now: datetime

    @property
    def today(self) -> date:
        return self.now.date()


DeriveFn = Callable[[FieldAccessor, StoreState, DeriveContext], object]
HookFn = Callable[[FieldAccessor, StoreState, DeriveContext], list[tuple[str, dict]]]
IdFormatFn = Callable[[dict, str], str]


@dataclass(frozen=True)
class Relation:
    """source.field holds the id of a target entity."""
    source: str
    field: str
    target: str
    on_delete: CascadePolicy = CascadePolicy.CASCADE
    reset: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class DerivedField:
    """A field computed from its own record or from related collections."""
    entity_type: str
    field: str
    compute: DeriveFn
    triggers: frozenset[str] = frozenset()

    @property
    def is_rollup(self) -> bool:
        return bool(self.triggers)


@dataclass(frozen=True)
class CreateHook:
    """Produces companion records (entity_type, fields) after an entity is created."""
    entity_type: str
    build: HookFn


@dataclass(frozen=True)
class DomainSchema:
    """Everything the engine needs to know about one application shape."""
    name: str
    models: dict[str, type]
    relations: tuple[Relation, ...] = ()
    derived: tuple[DerivedField, ...] = ()
    hooks: tuple[CreateHook, ...] = ()
    seed: dict[str, list[dict]] = field(default_factory=dict)
    id_formats: dict[str, IdFormatFn] = field(default_factory=dict)

    @property
    def collection_names(self) -> list[str]:
        return list(self.models)

    def model_for(self, entity_type: str) -> type:
        model = self.models.get(entity_type)
        if model is None:
            raise UnknownEntityTypeError(entity_type, self.collection_names)
        return model

    def relations_from(self, entity_type: str) -> list[Relation]:
        """Outgoing references declared on entity_type."""
        return [r for r in self.relations if r.source == entity_type]

    def relations_to(self, entity_type: str) -> list[Relation]:
        """Incoming references whose target is entity_type."""
        return [r for r in self.relations if r.target == entity_type]

    def write_time_fields(self, entity_type: str) -> list[DerivedField]:
        return [d for d in self.derived if d.entity_type == entity_type and not d.is_rollup]

    def rollups(self) -> list[DerivedField]:
        return [d for d in self.derived if d.is_rollup]

    def rollup_fields(self, entity_type: str) -> list[str]:
        return [d.field for d in self.rollups() if d.entity_type == entity_type]

    def hooks_for(self, entity_type: str) -> list[CreateHook]:
        return [h for h in self.hooks if h.entity_type == entity_type]

    def format_id(self, entity_type: str, fields: dict, stamp: str) -> str:
        """Id for a new record: the generated stamp, or the collection's own format of it."""
        id_format = self.id_formats.get(entity_type)
        return id_format(fields, stamp) if id_format else stamp
