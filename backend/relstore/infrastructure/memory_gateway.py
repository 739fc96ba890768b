"""In-Memory Gateway — encoded collections kept in a dict, for tests and ephemeral stores.

Invariants:
    - Stores the exact bytes encode_snapshot produced; load() decodes them again
    - With fail_saves set, save() raises PersistenceError and keeps the previous bytes
"""

from relstore.core.errors import PersistenceError
from relstore.core.snapshot import decode_snapshot, encode_snapshot


class InMemoryGateway:
    """SnapshotGateway backed by a dict of bytes."""

    def __init__(self, blobs: dict[str, bytes] | None = None):
        self.blobs: dict[str, bytes] = dict(blobs or {})
        self.fail_saves = False
        self.save_count = 0

    def load(self, name: str) -> list[dict] | None:
        payload = self.blobs.get(name)
        if payload is None:
            return None
        return decode_snapshot(name, payload)

    def save(self, name: str, rows: list[dict]) -> None:
        if self.fail_saves:
            raise PersistenceError("storage unavailable", "save", name)
        self.blobs[name] = encode_snapshot(rows)
        self.save_count += 1
