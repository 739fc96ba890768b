"""SQL Snapshot Gateway — collections stored as rows of the collection_snapshots table.

Invariants:
    - load() returns None when no row exists for the collection
    - save() upserts the row in one transaction and stamps updated_at
    - Every failure surfaces as PersistenceError (driver errors via DatabaseSessionManager)

Design Decisions:
    - get-then-add upsert instead of dialect-specific ON CONFLICT: works on SQLite
      and PostgreSQL alike
"""

from datetime import datetime, timezone

from relstore.core.snapshot import decode_snapshot, encode_snapshot
from relstore.infrastructure.database import DatabaseSessionManager
from relstore.models.collection_snapshot import CollectionSnapshot


class SqlSnapshotGateway:
    """SnapshotGateway over a SQLAlchemy database."""

    def __init__(self, db: DatabaseSessionManager):
        self._db = db

    @classmethod
    def from_url(cls, database_url: str) -> "SqlSnapshotGateway":
        db = DatabaseSessionManager(database_url)
        db.create_all()
        return cls(db)

    def load(self, name: str) -> list[dict] | None:
        with self._db.session() as session:
            row = session.get(CollectionSnapshot, name)
            payload = None if row is None else row.payload
        if payload is None:
            return None
        return decode_snapshot(name, payload)

    def save(self, name: str, rows: list[dict]) -> None:
        payload = encode_snapshot(rows).decode("utf-8")
        now = datetime.now(timezone.utc)
        with self._db.session() as session:
            row = session.get(CollectionSnapshot, name)
            if row is None:
                session.add(CollectionSnapshot(name=name, payload=payload, updated_at=now))
            else:
                row.payload = payload
                row.updated_at = now
            session.commit()
