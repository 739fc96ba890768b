"""CollectionSnapshot ORM — one row per collection holding its encoded JSON array.

Invariants:
    - name is the collection name and the primary key (one snapshot per collection)
    - payload is exactly the bytes encode_snapshot produced, stored as UTF-8 text

Design Decisions:
    - Whole-collection rows, not one table per entity type: the gateway contract is
      load-all / save-all, and the schema stays independent of the domain
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from relstore.db.base import Base


class CollectionSnapshot(Base):
    """Stored snapshot of a single collection."""
    __tablename__ = "collection_snapshots"

    name: Mapped[str] = mapped_column(String(100), primary_key=True)
    payload: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
