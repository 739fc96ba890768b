"""Integrity Enforcer — reference checks, cascade planning, derived-field refresh.

Invariants:
    - All functions are PURE over the StoreState they are handed: no IO, no clock, no locks
    - Every non-empty reference resolves before a mutation may commit
    - A delete plan removes every transitive cascade dependent exactly once
    - Nullify updates on records that are themselves removed are dropped from the plan
    - Rollups reach a fixpoint within MAX_ROLLUP_PASSES passes

Design Decisions:
    - Cascade walk is breadth-first over the declared relation table (ADR: one routine
      for every domain, policies stay data)
    - Functions operate on a staged copy; the service swaps it in only on success,
      so a raised error leaves the live state untouched
"""

import logging
from collections import deque
from dataclasses import dataclass, field

from relstore.core.domain_types import CascadePolicy, EMPTY_REFERENCE_VALUES, MAX_ROLLUP_PASSES
from relstore.core.errors import DanglingReferenceError, NotFoundError
from relstore.core.record_protocols import FieldAccessor
from relstore.core.relations import DeriveContext, DomainSchema
from relstore.core.store_state import StoreState

logger = logging.getLogger(__name__)


# --- Reference checks ---------------------------------------------------------

def check_references(
    schema: DomainSchema, state: StoreState, entity_type: str, record: FieldAccessor,
) -> None:
    """Raise DanglingReferenceError on the first reference that does not resolve."""
    for relation in schema.relations_from(entity_type):
        target_id = record.field_value(relation.field)
        if target_id in EMPTY_REFERENCE_VALUES:
            continue
        if state.find(relation.target, str(target_id)) is None:
            raise DanglingReferenceError(
                entity_type, relation.field, relation.target, str(target_id),
            )


def find_dangling_references(schema: DomainSchema, state: StoreState) -> list[dict]:
    """Every unresolved reference in the state. Empty list means consistent."""
    problems = []
    for relation in schema.relations:
        for record in state.collection(relation.source):
            target_id = record.field_value(relation.field)
            if target_id in EMPTY_REFERENCE_VALUES:
                continue
            if state.find(relation.target, str(target_id)) is None:
                problems.append({
                    "collection": relation.source,
                    "entity_id": record.id,
                    "field": relation.field,
                    "target": relation.target,
                    "target_id": str(target_id),
                })
    return problems


# --- Cascade planning ---------------------------------------------------------

@dataclass
class DeletePlan:
    """Ordered removals plus per-record nullify updates for one delete."""
    removals: list[tuple[str, str]] = field(default_factory=list)
    updates: dict[tuple[str, str], dict[str, object]] = field(default_factory=dict)

    @property
    def touched(self) -> set[str]:
        """Collections the plan modifies."""
        return {name for name, _ in self.removals} | {name for name, _ in self.updates}


def plan_delete(
    schema: DomainSchema, state: StoreState, entity_type: str, entity_id: str,
) -> DeletePlan:
    """Walk incoming relations transitively from the deleted record.

    Raises NotFoundError if the root record is absent.
    """
    if state.find(entity_type, entity_id) is None:
        raise NotFoundError(entity_type, entity_id)

    plan = DeletePlan(removals=[(entity_type, entity_id)])
    doomed = {(entity_type, entity_id)}
    queue = deque([(entity_type, entity_id)])

    while queue:
        target, target_id = queue.popleft()
        for relation in schema.relations_to(target):
            for record in state.collection(relation.source):
                if record.field_value(relation.field) != target_id:
                    continue
                key = (relation.source, record.id)
                if key in doomed:
                    continue
                if relation.on_delete == CascadePolicy.CASCADE:
                    doomed.add(key)
                    plan.removals.append(key)
                    queue.append(key)
                else:
                    fields = plan.updates.setdefault(key, {})
                    fields[relation.field] = None
                    fields.update(relation.reset)

    plan.updates = {k: v for k, v in plan.updates.items() if k not in doomed}
    logger.debug(
        f"Delete plan for {entity_type} '{entity_id}': "
        f"{len(plan.removals)} removal(s), {len(plan.updates)} update(s)",
        extra={"collection": entity_type, "entity_id": entity_id, "operation": "delete"},
    )
    return plan


def apply_plan(state: StoreState, plan: DeletePlan) -> set[str]:
    """Execute a delete plan against a staged state. Returns touched collections."""
    for name, entity_id in plan.removals:
        state.collection(name).remove(entity_id)
    for (name, entity_id), fields in plan.updates.items():
        collection = state.collection(name)
        collection.replace(collection.get(entity_id).with_fields(**fields))
    return plan.touched


# --- Derived fields -----------------------------------------------------------

def apply_write_derivations(
    schema: DomainSchema, state: StoreState, entity_type: str,
    record: FieldAccessor, ctx: DeriveContext,
) -> FieldAccessor:
    """Compute write-time fields of one record about to be stored."""
    for derived in schema.write_time_fields(entity_type):
        value = derived.compute(record, state, ctx)
        if record.field_value(derived.field) != value:
            record = record.with_fields(**{derived.field: value})
    return record


def refresh_rollups(
    schema: DomainSchema, state: StoreState, changed: set[str], ctx: DeriveContext,
) -> set[str]:
    """Recompute rollups affected by the changed collections, until stable.

    Returns the collections whose records were rewritten.
    """
    rewritten: set[str] = set()
    pending = set(changed)
    for _ in range(MAX_ROLLUP_PASSES):
        if not pending:
            break
        next_pending: set[str] = set()
        for derived in schema.rollups():
            if derived.entity_type not in pending and not (derived.triggers & pending):
                continue
            collection = state.collection(derived.entity_type)
            for record in collection.values():
                value = derived.compute(record, state, ctx)
                if record.field_value(derived.field) == value:
                    continue
                collection.replace(record.with_fields(**{derived.field: value}))
                next_pending.add(derived.entity_type)
        rewritten |= next_pending
        pending = next_pending
    else:
        if pending:
            logger.warning(
                f"Rollups did not settle after {MAX_ROLLUP_PASSES} passes",
                extra={"operation": "refresh_rollups"},
            )
    return rewritten
