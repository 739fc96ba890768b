"""Entity Store — the mutation protocol: stage, validate, cascade, derive, commit, write through.

Invariants:
    - Every mutation runs on a staged copy; the live state changes by one reference swap
    - A mutation that raises leaves the live state exactly as it was
    - After every commit, every non-empty reference resolves (integrity holds)
    - Derived fields are fresh when a mutation returns; callers never refresh them
    - Every changed collection is written through after the swap; a failed write is
      a PersistenceWarning, never a rollback
    - Ids supplied by callers are ignored: create() generates, update() keeps the path id
    - last_write_errors lists the failures of the most recent write-through, empty on success

Design Decisions:
    - Imperative shell around the pure core (integrity, query, snapshot): IO and the
      clock live here only (ADR: functional core / imperative shell)
    - One RLock per store covers all collections of the domain: cascades cross
      collections, so a finer lock scope would expose half-cascaded state
    - update() replaces the stored record: keys the caller omits are gone, except
      engine-owned derived fields, which carry over and are recomputed
    - Any exception from a gateway save is a PersistenceError by the time it is reported
"""

import logging
import threading
import warnings
from datetime import datetime

from relstore.core.errors import NotFoundError, PersistenceError, PersistenceWarning
from relstore.core.identity import Clock, IdGenerator, utc_now
from relstore.core.integrity import (
    apply_plan, apply_write_derivations, check_references, plan_delete, refresh_rollups,
)
from relstore.core.query import Query, SortSpec, run_query
from relstore.core.record_protocols import FieldAccessor, SnapshotGateway
from relstore.core.relations import DeriveContext, DomainSchema
from relstore.core.snapshot import export_json, to_snapshot
from relstore.core.store_state import Collection, StoreState

logger = logging.getLogger(__name__)


class EntityStore:
    """All collections of one domain, with integrity enforced on every write."""

    def __init__(
        self,
        schema: DomainSchema,
        gateway: SnapshotGateway,
        state: StoreState | None = None,
        clock: Clock = utc_now,
        ids: IdGenerator | None = None,
    ):
        self.schema = schema
        self._gateway = gateway
        self._state = state or StoreState.empty(schema.collection_names)
        self._clock = clock
        self._ids = ids or IdGenerator(clock)
        self._lock = threading.RLock()
        self.last_write_errors: list[PersistenceError] = []
        for collection in self._state.collections.values():
            for entity_id in collection.ids():
                self._ids.observe(entity_id)

    # --- Reads ----------------------------------------------------------------

    @property
    def collections(self) -> list[str]:
        """Collection names in schema order."""
        return self.schema.collection_names

    @property
    def state(self) -> StoreState:
        """The committed state. Treat as read-only."""
        return self._state

    def now(self) -> datetime:
        """Current time from the store's clock."""
        return self._clock()

    def _collection(self, entity_type: str) -> Collection:
        self.schema.model_for(entity_type)
        return self._state.collection(entity_type)

    def get(self, entity_type: str, entity_id: str) -> FieldAccessor:
        record = self._collection(entity_type).get(entity_id)
        if record is None:
            raise NotFoundError(entity_type, entity_id)
        return record

    def query(
        self,
        entity_type: str,
        term: str = "",
        filters: dict | None = None,
        sort: SortSpec | None = None,
    ) -> list[FieldAccessor]:
        """search -> filter -> sort over one collection."""
        return run_query(
            self._collection(entity_type), Query(term, filters or {}, sort),
        )

    def snapshot(self, entity_type: str) -> list[dict]:
        return to_snapshot(self._collection(entity_type))

    def export(self, entity_type: str) -> list[dict]:
        """JSON-safe records of one collection, in collection order."""
        return self.snapshot(entity_type)

    def export_json(self, entity_type: str) -> str:
        return export_json(self.export(entity_type))

    def template(self, entity_type: str) -> dict:
        """Example record for callers: no id, no derived fields."""
        model = self.schema.model_for(entity_type)
        derived = [d.field for d in self.schema.derived if d.entity_type == entity_type]
        return model.template_record(exclude=derived)

    # must stay below every method annotated with list[...]: it shadows the builtin in class scope
    def list(self, entity_type: str) -> "list[FieldAccessor]":
        return self._collection(entity_type).values()

    # --- Mutations ------------------------------------------------------------

    def create(self, entity_type: str, fields: dict) -> FieldAccessor:
        """Insert a new entity (plus any hook-generated companions)."""
        with self._lock:
            staged = self._state.copy()
            ctx = self._context()
            record, changed = self._insert(staged, entity_type, fields, ctx)
            changed |= refresh_rollups(self.schema, staged, changed, ctx)
            self._commit(staged, changed)
            logger.info(
                f"Created {entity_type} '{record.id}'",
                extra={"collection": entity_type, "entity_id": record.id, "operation": "create"},
            )
            return staged.find(entity_type, record.id)

    def update(self, entity_type: str, entity_id: str, fields: dict) -> FieldAccessor:
        """Replace an existing entity with `fields`, keeping its position and id."""
        with self._lock:
            model = self.schema.model_for(entity_type)
            staged = self._state.copy()
            current = staged.find(entity_type, entity_id)
            if current is None:
                raise NotFoundError(entity_type, entity_id)
            ctx = self._context()

            stored = current.to_record()
            data = {
                d.field: stored[d.field]
                for d in self.schema.derived
                if d.entity_type == entity_type and d.field in stored
            }
            data.update({model.record_key(k): v for k, v in fields.items()})
            data["id"] = entity_id
            record = model.from_record(data)
            check_references(self.schema, staged, entity_type, record)
            record = apply_write_derivations(self.schema, staged, entity_type, record, ctx)
            staged.collection(entity_type).replace(record)

            changed = {entity_type}
            changed |= refresh_rollups(self.schema, staged, changed, ctx)
            self._commit(staged, changed)
            logger.info(
                f"Updated {entity_type} '{entity_id}'",
                extra={"collection": entity_type, "entity_id": entity_id, "operation": "update"},
            )
            return staged.find(entity_type, entity_id)

    def delete(self, entity_type: str, entity_id: str) -> None:
        """Remove an entity after applying every declared cascade policy."""
        with self._lock:
            self.schema.model_for(entity_type)
            staged = self._state.copy()
            ctx = self._context()
            plan = plan_delete(self.schema, staged, entity_type, entity_id)
            changed = apply_plan(staged, plan)
            changed |= refresh_rollups(self.schema, staged, changed, ctx)
            self._commit(staged, changed)
            logger.info(
                f"Deleted {entity_type} '{entity_id}' "
                f"({len(plan.removals) - 1} cascaded, {len(plan.updates)} nullified)",
                extra={"collection": entity_type, "entity_id": entity_id, "operation": "delete"},
            )

    def save_all(self) -> None:
        """Write through every collection (used after seeding)."""
        with self._lock:
            self._write_through(set(self.collections))

    # --- Internals ------------------------------------------------------------

    def _context(self) -> DeriveContext:
        return DeriveContext(now=self._clock())

    def _insert(
        self, staged: StoreState, entity_type: str, fields: dict, ctx: DeriveContext,
    ) -> tuple[FieldAccessor, set[str]]:
        model = self.schema.model_for(entity_type)
        data = {model.record_key(k): v for k, v in fields.items() if k != "id"}
        data["id"] = self.schema.format_id(entity_type, data, self._ids.next_id())
        record = model.from_record(data)
        check_references(self.schema, staged, entity_type, record)
        record = apply_write_derivations(self.schema, staged, entity_type, record, ctx)
        staged.collection(entity_type).append(record)

        changed = {entity_type}
        for hook in self.schema.hooks_for(entity_type):
            for child_type, child_fields in hook.build(record, staged, ctx):
                child, child_changed = self._insert(staged, child_type, child_fields, ctx)
                changed |= child_changed
                logger.debug(
                    f"Hook created {child_type} '{child.id}' for {entity_type} '{record.id}'",
                    extra={"collection": child_type, "entity_id": child.id, "operation": "create"},
                )
        return record, changed

    def _commit(self, staged: StoreState, changed: set[str]) -> None:
        self._state = staged
        self._write_through(changed)

    def _write_through(self, names: set[str]) -> None:
        self.last_write_errors = []
        for name in self.collections:
            if name not in names:
                continue
            try:
                self._gateway.save(name, to_snapshot(self._state.collection(name)))
            except PersistenceError as e:
                self._report_write_failure(name, e)
            except Exception as e:
                error = PersistenceError(f"{type(e).__name__}: {e}", "save", name)
                error.__cause__ = e
                self._report_write_failure(name, error, exc_info=e)

    def _report_write_failure(
        self, name: str, error: PersistenceError, exc_info: BaseException | None = None,
    ) -> None:
        self.last_write_errors.append(error)
        logger.warning(
            f"Write-through failed for {name}: {error.message}",
            extra={"collection": name, "error_code": error.code, "operation": "save"},
            exc_info=exc_info,
        )
        warnings.warn(PersistenceWarning(name, error), stacklevel=5)
