"""Bootstrap — load collections, seed demo data, and compose a ready EntityStore.

Invariants:
    - Demo data is seeded only when no collection of the domain is stored: present
      and unreadable collections both count as stored, so seeding never overwrites them
    - Absent collections start empty; an undecodable collection is reported as a
      PersistenceWarning and treated as absent
    - Rollups are recomputed on load; dangling references in loaded data are logged,
      not rejected (stored data is accepted as-is)
    - Seeded data is written through before open_store returns

Design Decisions:
    - create_store(settings) is the single composition root: domain + gateway + clock
      (ADR: no ambient singletons besides cached settings)
"""

import logging
import warnings

from relstore.config import Settings, get_settings
from relstore.core.domain_types import StorageBackend
from relstore.core.errors import PersistenceError, PersistenceWarning
from relstore.core.identity import Clock, utc_now
from relstore.core.integrity import find_dangling_references, refresh_rollups
from relstore.core.record_protocols import SnapshotGateway
from relstore.core.relations import DeriveContext, DomainSchema
from relstore.core.snapshot import from_snapshot
from relstore.core.store_state import Collection, StoreState
from relstore.domains import coworking, real_estate
from relstore.infrastructure.json_file_gateway import JsonFileGateway
from relstore.infrastructure.memory_gateway import InMemoryGateway
from relstore.infrastructure.sql_gateway import SqlSnapshotGateway
from relstore.services.entity_store import EntityStore

logger = logging.getLogger(__name__)

DOMAINS: dict[str, DomainSchema] = {
    coworking.SCHEMA.name: coworking.SCHEMA,
    real_estate.SCHEMA.name: real_estate.SCHEMA,
}


def get_domain(name: str) -> DomainSchema:
    schema = DOMAINS.get(name)
    if schema is None:
        raise ValueError(f"Unknown domain '{name}'. Known: {', '.join(DOMAINS)}")
    return schema


def build_gateway(settings: Settings) -> SnapshotGateway:
    """Gateway selected by settings.storage_backend."""
    backend = StorageBackend(settings.storage_backend)
    if backend == StorageBackend.JSON:
        return JsonFileGateway(settings.storage_dir)
    if backend == StorageBackend.SQL:
        return SqlSnapshotGateway.from_url(settings.database_url)
    return InMemoryGateway()


def _report_unreadable(name: str, error: PersistenceError) -> None:
    logger.warning(
        f"Ignoring unreadable collection {name}: {error.message}",
        extra={"collection": name, "error_code": error.code, "operation": "load"},
    )
    warnings.warn(PersistenceWarning(name, error), stacklevel=3)


def load_state(
    schema: DomainSchema, gateway: SnapshotGateway,
) -> tuple[StoreState, list[str], list[str]]:
    """Read every collection.

    Returns the state, the names that loaded, and the names that were stored but unreadable.
    """
    collections: dict[str, Collection] = {}
    present: list[str] = []
    unreadable: list[str] = []
    for name in schema.collection_names:
        collections[name] = Collection(name)
        try:
            rows = gateway.load(name)
            if rows is None:
                continue
            collections[name] = from_snapshot(name, schema.model_for(name), rows)
        except PersistenceError as e:
            _report_unreadable(name, e)
            unreadable.append(name)
            continue
        present.append(name)
    return StoreState(collections), present, unreadable


def seed_state(schema: DomainSchema) -> StoreState:
    """The domain's demo dataset as a fresh state."""
    return StoreState({
        name: from_snapshot(name, schema.model_for(name), schema.seed.get(name, []))
        for name in schema.collection_names
    })


def open_store(
    schema: DomainSchema,
    gateway: SnapshotGateway,
    clock: Clock = utc_now,
    seed_on_empty: bool = True,
) -> EntityStore:
    """Load (or seed) the domain's collections and wrap them in an EntityStore."""
    state, present, unreadable = load_state(schema, gateway)
    seeded = not present and not unreadable and seed_on_empty and bool(schema.seed)
    if seeded:
        state = seed_state(schema)
        logger.info(f"Seeded {schema.name} demo data ({state.total_records} records)",
                    extra={"operation": "seed"})

    refresh_rollups(schema, state, set(schema.collection_names), DeriveContext(now=clock()))
    for problem in find_dangling_references(schema, state):
        logger.warning(
            f"{problem['collection']} '{problem['entity_id']}'.{problem['field']} references "
            f"missing {problem['target']} '{problem['target_id']}'",
            extra={"collection": problem["collection"], "entity_id": problem["entity_id"],
                   "error_code": "DANGLING_REFERENCE", "operation": "load"},
        )

    store = EntityStore(schema, gateway, state, clock)
    if seeded:
        store.save_all()
    return store


def create_store(settings: Settings | None = None, clock: Clock = utc_now) -> EntityStore:
    """Composition root: settings -> domain schema + gateway -> EntityStore."""
    settings = settings or get_settings()
    return open_store(
        get_domain(settings.domain), build_gateway(settings), clock, settings.seed_on_empty,
    )
