"""JSON file gateway tests — one file per collection under a directory."""

import json

import pytest

from relstore.core.errors import PersistenceError
from relstore.infrastructure.json_file_gateway import JsonFileGateway

ROWS = [{"id": "1", "name": "Chair"}, {"id": "2", "name": "Lamp"}]


def test_missing_file_loads_as_none(tmp_path):
    assert JsonFileGateway(tmp_path).load("amenities") is None


def test_save_then_load(tmp_path):
    gateway = JsonFileGateway(tmp_path)
    gateway.save("amenities", ROWS)
    assert gateway.load("amenities") == ROWS
    assert json.loads((tmp_path / "amenities.json").read_text("utf-8")) == ROWS


def test_save_creates_directory(tmp_path):
    gateway = JsonFileGateway(tmp_path / "nested" / "data")
    gateway.save("amenities", ROWS)
    assert gateway.path_for("amenities").exists()


def test_save_replaces_previous_content(tmp_path):
    gateway = JsonFileGateway(tmp_path)
    gateway.save("amenities", ROWS)
    gateway.save("amenities", ROWS[:1])
    assert gateway.load("amenities") == ROWS[:1]
    assert not (tmp_path / "amenities.json.tmp").exists()


def test_corrupt_file_raises_persistence_error(tmp_path):
    (tmp_path / "amenities.json").write_text("{oops", "utf-8")
    with pytest.raises(PersistenceError) as exc:
        JsonFileGateway(tmp_path).load("amenities")
    assert exc.value.operation == "decode"


def test_unwritable_target_raises_persistence_error(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", "utf-8")
    with pytest.raises(PersistenceError) as exc:
        JsonFileGateway(blocker).save("amenities", ROWS)
    assert exc.value.operation == "save"
