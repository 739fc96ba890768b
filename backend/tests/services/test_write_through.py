"""Write-through tests — every committed mutation reaches the gateway.

Invariants:
    - Only collections changed by a mutation are saved
    - A failed save is reported as PersistenceWarning; the in-memory mutation stands
    - Any exception from a gateway save is reported the same way, never raised
    - last_write_errors holds the failures of the latest write-through only
    - A reopened store sees exactly what was persisted
    - Stored rows are saved back unchanged: explicit nulls, unknown keys, short ISO times
"""

import warnings

import pytest

from relstore.core.errors import PersistenceWarning
from relstore.core.snapshot import encode_snapshot
from relstore.domains import coworking
from relstore.infrastructure.memory_gateway import InMemoryGateway
from relstore.services.bootstrap import open_store


class DiskFullGateway(InMemoryGateway):
    """Raises a plain OSError whenever one collection is saved."""

    def __init__(self, failing: str):
        super().__init__()
        self.failing = failing

    def save(self, name: str, rows: list[dict]) -> None:
        if name == self.failing:
            raise OSError(28, "No space left on device")
        super().save(name, rows)


def test_seeding_persists_every_collection(coworking_store, gateway):
    assert set(gateway.blobs) == set(coworking.SCHEMA.collection_names)
    assert gateway.save_count == len(coworking.SCHEMA.collection_names)


def test_mutation_saves_only_changed_collections(coworking_store, gateway):
    saves = gateway.save_count
    coworking_store.create("amenities", {"name": "Lamp"})
    assert gateway.save_count == saves + 1


def test_booking_saves_bookings_payments_and_members(coworking_store, gateway):
    saves = gateway.save_count
    coworking_store.create("bookings", {
        "memberId": "1", "deskId": "1",
        "startTime": "2024-06-20T09:00:00", "endTime": "2024-06-20T17:00:00",
    })
    assert gateway.save_count == saves + 3


def test_persisted_rows_match_export(coworking_store, gateway, edit):
    edit(coworking_store, "desks", "1", status="maintenance")
    assert gateway.load("desks") == coworking_store.export("desks")


def test_failed_save_warns_but_keeps_mutation(coworking_store, gateway):
    before = gateway.blobs["amenities"]
    gateway.fail_saves = True

    with pytest.warns(PersistenceWarning) as record:
        amenity = coworking_store.create("amenities", {"name": "Lamp"})

    assert record[0].message.collection == "amenities"
    assert coworking_store.get("amenities", amenity.id).name == "Lamp"
    assert gateway.blobs["amenities"] == before


def test_failed_save_is_logged(coworking_store, gateway, caplog):
    gateway.fail_saves = True
    with pytest.warns(PersistenceWarning):
        coworking_store.delete("amenities", "1")
    assert "Write-through failed for amenities" in caplog.text


def test_next_successful_save_catches_up(coworking_store, gateway):
    gateway.fail_saves = True
    with pytest.warns(PersistenceWarning):
        first = coworking_store.create("amenities", {"name": "Lamp"})
    gateway.fail_saves = False
    second = coworking_store.create("amenities", {"name": "Fan"})

    stored_ids = [row["id"] for row in gateway.load("amenities")]
    assert stored_ids[-2:] == [first.id, second.id]


def test_resaving_unchanged_store_keeps_bytes(coworking_store, gateway, clock):
    coworking_store.create("bookings", {
        "memberId": "1", "deskId": "1",
        "startTime": "2024-06-20T09:00:00", "endTime": "2024-06-20T17:00:00",
    })
    before = dict(gateway.blobs)

    open_store(coworking.SCHEMA, gateway, clock).save_all()

    assert gateway.blobs == before


STORED_BOOKINGS = [
    {"id": "1", "memberId": "1", "deskId": "1", "startTime": "2023-04-15T09:00",
     "endTime": "2023-04-15T17:00", "status": "confirmed", "totalPrice": 30,
     "notes": None, "createdBy": None},
]
STORED_MEMBERS = [
    dict(coworking.SEED["members"][0], paymentStatus="paid", paymentHistory=[], notes=None),
]


def test_stored_rows_are_saved_back_unchanged(clock):
    gateway = InMemoryGateway({
        "bookings": encode_snapshot(STORED_BOOKINGS),
        "members": encode_snapshot(STORED_MEMBERS),
    })
    store = open_store(coworking.SCHEMA, gateway, clock)
    store.save_all()

    assert gateway.load("bookings") == STORED_BOOKINGS
    assert gateway.load("members") == STORED_MEMBERS


def test_editing_stored_row_keeps_untouched_text(clock, edit):
    gateway = InMemoryGateway({
        "bookings": encode_snapshot(STORED_BOOKINGS),
        "members": encode_snapshot(STORED_MEMBERS),
        "desks": encode_snapshot(coworking.SEED["desks"]),
    })
    store = open_store(coworking.SCHEMA, gateway, clock)
    edit(store, "bookings", "1", status="completed")

    row = gateway.load("bookings")[0]
    assert row["startTime"] == "2023-04-15T09:00"
    assert row["notes"] is None
    assert row["createdBy"] is None
    assert row["status"] == "completed"


def test_reopened_store_sees_persisted_state(coworking_store, gateway, clock):
    booking = coworking_store.create("bookings", {
        "memberId": "2", "deskId": "3",
        "startTime": "2024-06-20T09:00:00", "endTime": "2024-06-20T11:00:00",
    })
    coworking_store.delete("members", "3")

    reopened = open_store(coworking.SCHEMA, gateway, clock)

    assert reopened.get("bookings", booking.id).total_price == 16
    assert [m.id for m in reopened.list("members")] == ["1", "2"]
    assert reopened.get("members", "2").payment_status == "unpaid"
    fresh = reopened.create("amenities", {"name": "Lamp"})
    assert int(fresh.id) > int(booking.id)


# --- Unexpected gateway errors ------------------------------------------------

def test_gateway_os_error_is_reported_as_warning(clock):
    gateway = DiskFullGateway("payments")
    with pytest.warns(PersistenceWarning):
        store = open_store(coworking.SCHEMA, gateway, clock)

    with pytest.warns(PersistenceWarning) as record:
        booking = store.create("bookings", {
            "memberId": "1", "deskId": "1",
            "startTime": "2024-06-20T09:00:00", "endTime": "2024-06-20T17:00:00",
        })

    assert [w.message.collection for w in record] == ["payments"]
    assert isinstance(record[0].message.cause.__cause__, OSError)
    assert "No space left on device" in str(record[0].message)
    assert store.get("bookings", booking.id).total_price == 40
    assert gateway.load("bookings") == store.export("bookings")
    assert gateway.load("members") == store.export("members")
    assert gateway.load("payments") is None


def test_gateway_os_error_is_logged(clock, caplog):
    gateway = DiskFullGateway("amenities")
    with pytest.warns(PersistenceWarning):
        store = open_store(coworking.SCHEMA, gateway, clock)
    with pytest.warns(PersistenceWarning):
        store.delete("amenities", "1")
    assert "Write-through failed for amenities: Persistence save failed: OSError" in caplog.text


# --- Failure record -----------------------------------------------------------

def test_last_write_errors_cover_latest_mutation_only(coworking_store, gateway):
    assert coworking_store.last_write_errors == []
    gateway.fail_saves = True
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", PersistenceWarning)
        coworking_store.create("amenities", {"name": "Lamp"})
        first = coworking_store.last_write_errors
        coworking_store.create("amenities", {"name": "Fan"})
        second = coworking_store.last_write_errors

    assert [e.collection for e in first] == ["amenities"]
    assert [e.collection for e in second] == ["amenities"]
    assert second[0] is not first[0]
    assert second[0].operation == "save"

    gateway.fail_saves = False
    coworking_store.create("amenities", {"name": "Heater"})
    assert coworking_store.last_write_errors == []


def test_repeated_failures_are_recorded_when_warnings_repeat(coworking_store, gateway):
    gateway.fail_saves = True
    recorded = []
    with warnings.catch_warnings(record=True) as shown:
        warnings.simplefilter("default", PersistenceWarning)
        for name in ("Lamp", "Fan", "Heater"):
            coworking_store.create("amenities", {"name": name})
            recorded.extend(coworking_store.last_write_errors)

    assert len(shown) == 1
    assert len(recorded) == 3
