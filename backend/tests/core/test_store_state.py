"""Store State tests — ordered collections and staging copies.

Tests cover:
    - Insertion order and id lookup
    - replace() keeps position, remove() drops the record
    - Duplicate and unknown ids raise KeyError
    - copy() isolates structural changes
"""

import pytest

from relstore.core.store_state import Collection, StoreState
from relstore.schemas.coworking import Amenity


def _amenity(aid, name="Chair"):
    return Amenity.from_record({"id": aid, "name": name})


# --- Collection ---------------------------------------------------------------

def test_collection_preserves_insertion_order():
    c = Collection("amenities", [_amenity("3"), _amenity("1"), _amenity("2")])
    assert c.ids() == ["3", "1", "2"]
    assert len(c) == 3
    assert "1" in c
    assert "9" not in c


def test_get_returns_none_for_unknown_id():
    c = Collection("amenities", [_amenity("1")])
    assert c.get("1").name == "Chair"
    assert c.get("2") is None


def test_append_rejects_duplicate_id():
    c = Collection("amenities", [_amenity("1")])
    with pytest.raises(KeyError):
        c.append(_amenity("1", "Lamp"))


def test_replace_keeps_position():
    c = Collection("amenities", [_amenity("1"), _amenity("2"), _amenity("3")])
    c.replace(_amenity("2", "Lamp"))
    assert c.ids() == ["1", "2", "3"]
    assert c.get("2").name == "Lamp"


def test_replace_unknown_id_raises():
    c = Collection("amenities")
    with pytest.raises(KeyError):
        c.replace(_amenity("1"))


def test_remove_returns_record():
    c = Collection("amenities", [_amenity("1"), _amenity("2")])
    removed = c.remove("1")
    assert removed.id == "1"
    assert c.ids() == ["2"]


def test_collection_copy_is_independent():
    c = Collection("amenities", [_amenity("1")])
    clone = c.copy()
    clone.append(_amenity("2"))
    clone.remove("1")
    assert c.ids() == ["1"]
    assert clone.ids() == ["2"]


# --- StoreState ---------------------------------------------------------------

def test_empty_state_has_named_collections():
    state = StoreState.empty(["members", "desks"])
    assert state.names == ["members", "desks"]
    assert state.total_records == 0


def test_find_looks_up_by_collection_and_id():
    state = StoreState({"amenities": Collection("amenities", [_amenity("1")])})
    assert state.find("amenities", "1").id == "1"
    assert state.find("amenities", "2") is None


def test_state_copy_isolates_every_collection():
    state = StoreState({"amenities": Collection("amenities", [_amenity("1")])})
    staged = state.copy()
    staged.collection("amenities").append(_amenity("2"))
    assert state.total_records == 1
    assert staged.total_records == 2
