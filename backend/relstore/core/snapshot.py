"""Collection Snapshot — serialization / deserialization of whole collections.

Invariants:
    - to_snapshot produces a JSON-safe list of flat records (None values omitted)
    - encode_snapshot is deterministic: the same rows always give the same bytes
    - decode_snapshot / from_snapshot raise PersistenceError, never a raw
      json or validation error
    - from_snapshot keeps stored order and stored ids

Design Decisions:
    - One JSON array per collection: the load-all / save-all contract of every gateway
    - Parsing goes through the entity model's from_record so stored data meets
      the same constraints as caller input (ADR: no second validation path)
"""

import json

from relstore.core.errors import PersistenceError, ValidationError
from relstore.core.store_state import Collection


def to_snapshot(collection: Collection) -> list[dict]:
    """Serialize a collection to JSON-safe rows. Pure, no IO."""
    return [record.to_record() for record in collection]


def from_snapshot(name: str, model: type, rows: list[dict]) -> Collection:
    """Rebuild a collection from stored rows. Pure, no IO."""
    records = []
    for index, row in enumerate(rows):
        try:
            records.append(model.from_record(row))
        except ValidationError as e:
            raise PersistenceError(
                f"row {index} of {name} is invalid ({', '.join(e.fields)})",
                "decode", name,
            ) from e
    try:
        return Collection(name, records)
    except KeyError as e:
        raise PersistenceError(f"{name} holds duplicate ids", "decode", name) from e


def encode_snapshot(rows: list[dict]) -> bytes:
    return json.dumps(rows, ensure_ascii=False).encode("utf-8")


def decode_snapshot(name: str, payload: bytes | str) -> list[dict]:
    """Parse stored bytes into rows. Raises PersistenceError if not a JSON array of objects."""
    try:
        rows = json.loads(payload)
    except (ValueError, UnicodeDecodeError) as e:
        raise PersistenceError(f"{name} is not valid JSON: {e}", "decode", name) from e
    if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
        raise PersistenceError(f"{name} is not a JSON array of records", "decode", name)
    return rows


def export_json(rows: list[dict]) -> str:
    """Indented JSON text for download-style export."""
    return json.dumps(rows, indent=2, ensure_ascii=False)
