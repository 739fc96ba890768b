"""Root conftest — shared test configuration and store fixtures.

Invariants:
    - Tests never touch a real .env or on-disk database unless they ask for tmp_path
    - Every store fixture runs on a fixed clock (2024-06-15 12:00 UTC)
"""

import os
from datetime import datetime, timezone

import pytest

# Keep settings deterministic regardless of the developer's environment
os.environ.setdefault("RELSTORE_STORAGE_BACKEND", "memory")
os.environ.setdefault("RELSTORE_DATABASE_URL", "sqlite:///:memory:")

from relstore.domains import coworking, real_estate  # noqa: E402
from relstore.infrastructure.memory_gateway import InMemoryGateway  # noqa: E402
from relstore.services.bootstrap import open_store  # noqa: E402

FIXED_NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def gateway():
    return InMemoryGateway()


@pytest.fixture
def edit():
    """Update a record with its stored fields plus `changes`, as an edit form submits it."""
    def _edit(store, entity_type, entity_id, **changes):
        record = {**store.get(entity_type, entity_id).to_record(), **changes}
        return store.update(entity_type, entity_id, record)
    return _edit


@pytest.fixture
def coworking_store(gateway, clock):
    """Coworking store seeded with the demo dataset."""
    return open_store(coworking.SCHEMA, gateway, clock)


@pytest.fixture
def real_estate_store(gateway, clock):
    """Real-estate store seeded with the demo dataset."""
    return open_store(real_estate.SCHEMA, gateway, clock)


@pytest.fixture
def empty_coworking_store(gateway, clock):
    return open_store(coworking.SCHEMA, gateway, clock, seed_on_empty=False)


@pytest.fixture
def empty_real_estate_store(gateway, clock):
    return open_store(real_estate.SCHEMA, gateway, clock, seed_on_empty=False)
