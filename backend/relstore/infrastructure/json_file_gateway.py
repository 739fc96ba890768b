"""JSON File Gateway — one <collection>.json file per collection in a directory.

Invariants:
    - load() returns None when the file does not exist
    - save() replaces the file atomically (write temp file, then rename)
    - OSError never escapes: it is mapped to PersistenceError

Design Decisions:
    - File per collection mirrors the key-per-collection layout of browser storage,
      so exported data drops straight in
"""

import logging
import os
from pathlib import Path

from relstore.core.errors import PersistenceError
from relstore.core.snapshot import decode_snapshot, encode_snapshot

logger = logging.getLogger(__name__)


class JsonFileGateway:
    """SnapshotGateway over a directory of JSON files."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def path_for(self, name: str) -> Path:
        return self.directory / f"{name}.json"

    def load(self, name: str) -> list[dict] | None:
        path = self.path_for(name)
        if not path.exists():
            return None
        try:
            payload = path.read_bytes()
        except OSError as e:
            raise PersistenceError(f"cannot read {path}: {e}", "load", name) from e
        return decode_snapshot(name, payload)

    def save(self, name: str, rows: list[dict]) -> None:
        path = self.path_for(name)
        tmp = path.with_suffix(".json.tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp.write_bytes(encode_snapshot(rows))
            os.replace(tmp, path)
        except OSError as e:
            raise PersistenceError(f"cannot write {path}: {e}", "save", name) from e
        logger.debug(f"Saved {len(rows)} {name} record(s) to {path}",
                     extra={"collection": name, "operation": "save"})
